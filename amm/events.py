"""Events published when AMM state changes are committed."""

from dataclasses import asdict, dataclass
from typing import Any, ClassVar


@dataclass(frozen=True)
class Event:
    """Base class for committed state-change events."""

    name: ClassVar[str] = "event"

    def log_fields(self) -> dict[str, Any]:
        """Fields for structured logging."""
        return asdict(self)


@dataclass(frozen=True)
class PairCreated(Event):
    """A new pair was registered by the factory."""

    name: ClassVar[str] = "pair_created"

    token0: str
    token1: str
    pair: str
    registry_size: int


@dataclass(frozen=True)
class Mint(Event):
    """Liquidity was deposited and shares issued."""

    name: ClassVar[str] = "mint"

    pair: str
    sender: str
    to: str
    amount0: int
    amount1: int
    shares: int


@dataclass(frozen=True)
class Burn(Event):
    """Shares were redeemed for the underlying tokens."""

    name: ClassVar[str] = "burn"

    pair: str
    sender: str
    to: str
    amount0: int
    amount1: int
    shares: int


@dataclass(frozen=True)
class Swap(Event):
    """Tokens were exchanged through a pair."""

    name: ClassVar[str] = "swap"

    pair: str
    sender: str
    to: str
    amount0_in: int
    amount1_in: int
    amount0_out: int
    amount1_out: int


@dataclass(frozen=True)
class Sync(Event):
    """A pair's reserves were updated."""

    name: ClassVar[str] = "sync"

    pair: str
    reserve0: int
    reserve1: int


__all__ = ["Event", "PairCreated", "Mint", "Burn", "Swap", "Sync"]
