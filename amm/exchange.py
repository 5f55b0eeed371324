"""Wiring for a complete AMM deployment.

An Exchange owns one StateStore and builds the ledger, factory and router
on top of it. Components still receive their collaborators explicitly;
this module only saves callers (the API, tests, scripts) from repeating the
wiring.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from amm.config import DEFAULT_CONFIG, AMMConfig
from amm.constants import DEFAULT_FACTORY_ADDRESS, DEFAULT_ROUTER_ADDRESS
from amm.factory import Factory
from amm.ledger import InMemoryLedger
from amm.router import Router
from amm.state import Clock, StateStore, system_clock

logger = structlog.get_logger()

# Factory owner used when AMM_OWNER is not set
DEFAULT_OWNER = "0x7f5a36d85f4e2159b894815166db830dd357bbcb"


@dataclass
class Exchange:
    """Store, ledger, factory and router sharing one state."""

    store: StateStore
    ledger: InMemoryLedger
    factory: Factory
    router: Router
    config: AMMConfig = field(default=DEFAULT_CONFIG)

    @classmethod
    def create(
        cls,
        owner: str,
        config: AMMConfig = DEFAULT_CONFIG,
        clock: Clock = system_clock,
        factory_address: str = DEFAULT_FACTORY_ADDRESS,
        router_address: str = DEFAULT_ROUTER_ADDRESS,
    ) -> Exchange:
        """Build a fresh, empty deployment.

        Args:
            owner: Factory owner (controls the protocol fee recipient)
            config: Pool math configuration
            clock: Time source for reserve timestamps and deadlines
            factory_address: Address used for pair address derivation
            router_address: Address callers approve as spender
        """
        store = StateStore()
        ledger = InMemoryLedger(store)
        factory = Factory(
            owner,
            ledger,
            store=store,
            config=config,
            address=factory_address,
            clock=clock,
        )
        router = Router(factory, ledger, address=router_address, clock=clock)
        return cls(store=store, ledger=ledger, factory=factory, router=router, config=config)


_default_exchange: Exchange | None = None


def _create_default_exchange() -> Exchange:
    """Create the process-wide exchange from environment settings.

    AMM_OWNER sets the factory owner; AMM_FEE_BPS and AMM_MINIMUM_LIQUIDITY
    are read by AMMConfig.from_env.
    """
    import os

    owner = os.environ.get("AMM_OWNER", DEFAULT_OWNER)
    config = AMMConfig.from_env()
    logger.info("exchange_created", owner=owner, fee_bps=config.fee_bps)
    return Exchange.create(owner, config=config)


def get_default_exchange() -> Exchange:
    """Return the process-wide exchange, creating it on first use."""
    global _default_exchange
    if _default_exchange is None:
        _default_exchange = _create_default_exchange()
    return _default_exchange


__all__ = ["Exchange", "get_default_exchange"]
