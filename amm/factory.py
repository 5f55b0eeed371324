"""Pair factory and registry.

The Factory is the single owner of the canonical-key -> pair mapping. It is
passed explicitly to anything that needs lookups (the router, the API);
there is no module-level registry.

Pair addresses are derived from the two assets and a fixed init code hash
(see amm.library.pair_address_for), never from a counter, so
``get_pair(a, b) == get_pair(b, a) == pair_address_for(factory, a, b)``.
"""

from __future__ import annotations

import structlog

from amm.config import DEFAULT_CONFIG, AMMConfig
from amm.constants import DEFAULT_FACTORY_ADDRESS
from amm.errors import PairExists, Unauthorized
from amm.events import PairCreated
from amm.ledger import TokenLedger
from amm.library import pair_address_for, sort_tokens
from amm.models.types import normalize_address, require_address
from amm.pair import Pair
from amm.state import Clock, StateStore, system_clock

logger = structlog.get_logger()


class Factory:
    """Registry creating exactly one Pair per unordered asset pair.

    Registry entries, the pair list and the fee settings live in the shared
    StateStore, so a pair created inside a transaction that later fails
    (e.g. an add_liquidity that misses its minimums) is not registered.

    Args:
        owner: Address allowed to change the fee recipient and owner
        ledger: Token ledger the pairs hold balances in
        store: Shared state store (defaults to the ledger's store)
        config: Pool math configuration shared with every pair
        address: Factory address used in pair address derivation
        clock: Time source for reserve timestamps
    """

    def __init__(
        self,
        owner: str,
        ledger: TokenLedger,
        store: StateStore | None = None,
        config: AMMConfig = DEFAULT_CONFIG,
        address: str = DEFAULT_FACTORY_ADDRESS,
        clock: Clock = system_clock,
    ) -> None:
        if store is None:
            store = getattr(ledger, "store", None)
            if store is None:
                raise TypeError("Factory needs a StateStore when the ledger does not expose one")
        self.store = store
        self.ledger = ledger
        self.config = config
        self.address = require_address(address)
        self.clock = clock
        # Pair handles are stateless views over the store
        self._pairs: dict[str, Pair] = {}
        self.store.set(("factory", self.address, "owner"), require_address(owner))

    def __repr__(self) -> str:
        return f"Factory(address={self.address}, pairs={self.all_pairs_length()})"

    # --- Registry ---

    def create_pair(self, token_a: str, token_b: str) -> str:
        """Create and register the pair for two assets.

        Args:
            token_a: One asset (either order)
            token_b: The other asset

        Returns:
            The new pair's address

        Raises:
            InvalidAddress / ZeroAddress: If either asset is malformed or zero
            DuplicateAsset: If both arguments name the same asset
            PairExists: If the pair is already registered
        """
        token0, token1 = sort_tokens(token_a, token_b)
        existing = self.get_pair(token0, token1)
        if existing is not None:
            raise PairExists(f"Pair {token0}/{token1} already exists at {existing}")

        pair_address = pair_address_for(
            self.address, token0, token1, init_code_hash=self.config.init_code_hash
        )
        with self.store.transaction():
            self.store.set(("factory", self.address, "pair", token0, token1), pair_address)
            all_pairs = self.all_pairs() + (pair_address,)
            self.store.set(("factory", self.address, "all_pairs"), all_pairs)
            self._pairs.setdefault(pair_address, Pair(self, pair_address, token0, token1))
            self.store.emit(
                PairCreated(
                    token0=token0,
                    token1=token1,
                    pair=pair_address,
                    registry_size=len(all_pairs),
                )
            )
        logger.debug("pair_registered", token0=token0, token1=token1, pair=pair_address)
        return pair_address

    def get_pair(self, token_a: str, token_b: str) -> str | None:
        """Look up the pair address for two assets (order independent).

        Returns:
            Pair address if registered, None otherwise
        """
        token0, token1 = sort_tokens(token_a, token_b)
        return self.store.get(("factory", self.address, "pair", token0, token1), None)

    def pair_for(self, token_a: str, token_b: str) -> Pair | None:
        """Get the Pair object for two assets (order independent)."""
        address = self.get_pair(token_a, token_b)
        if address is None:
            return None
        return self._pairs[address]

    def pair_at(self, address: str) -> Pair | None:
        """Get a registered Pair by its address."""
        address = normalize_address(address)
        if address not in self.all_pairs():
            return None
        return self._pairs[address]

    def all_pairs(self) -> tuple[str, ...]:
        """Addresses of all registered pairs in creation order."""
        return self.store.get(("factory", self.address, "all_pairs"), ())

    def all_pairs_length(self) -> int:
        return len(self.all_pairs())

    # --- Protocol settings ---

    @property
    def owner(self) -> str:
        return self.store.get(("factory", self.address, "owner"))

    @property
    def fee_recipient(self) -> str | None:
        """Recipient of the protocol fee, or None when the fee is off."""
        return self.store.get(("factory", self.address, "fee_recipient"), None)

    def set_fee_recipient(self, recipient: str | None, *, sender: str) -> None:
        """Switch the protocol fee on (recipient) or off (None).

        Raises:
            Unauthorized: If sender is not the owner
        """
        self._require_owner(sender)
        if recipient is not None:
            recipient = require_address(recipient)
        self.store.set(("factory", self.address, "fee_recipient"), recipient)
        logger.info("fee_recipient_set", factory=self.address, fee_recipient=recipient)

    def set_owner(self, new_owner: str, *, sender: str) -> None:
        """Hand the owner role to another address.

        Raises:
            Unauthorized: If sender is not the owner
        """
        self._require_owner(sender)
        self.store.set(("factory", self.address, "owner"), require_address(new_owner))
        logger.info("factory_owner_set", factory=self.address, owner=new_owner)

    def _require_owner(self, sender: str) -> None:
        if normalize_address(sender) != self.owner:
            raise Unauthorized(f"{sender} is not the factory owner")


__all__ = ["Factory"]
