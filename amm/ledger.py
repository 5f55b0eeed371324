"""Token balance ledger consumed by pairs and the router.

Pairs and the router only ever talk to a ledger through the TokenLedger
protocol. InMemoryLedger is the reference implementation backed by the
shared StateStore, so token movements are staged and rolled back together
with reserve updates.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from amm.errors import InsufficientAllowance, InsufficientBalance, ZeroAmount
from amm.models.types import normalize_address, require_address
from amm.safe_int import S
from amm.state import StateStore


@runtime_checkable
class TokenLedger(Protocol):
    """Per-asset balance ledger with transfer/allowance semantics."""

    def balance_of(self, asset: str, holder: str) -> int:
        """Balance of ``holder`` in ``asset``."""
        ...

    def transfer(self, asset: str, sender: str, to: str, amount: int) -> bool:
        """Move ``amount`` of ``asset`` from ``sender`` to ``to``.

        Raises:
            InsufficientBalance: If sender holds less than amount
        """
        ...

    def transfer_from(self, asset: str, spender: str, owner: str, to: str, amount: int) -> bool:
        """Move ``amount`` from ``owner`` to ``to`` using spender's allowance.

        Raises:
            InsufficientAllowance: If spender is approved for less than amount
            InsufficientBalance: If owner holds less than amount
        """
        ...

    def approve(self, asset: str, owner: str, spender: str, amount: int) -> bool:
        """Set spender's allowance over owner's ``asset``."""
        ...

    def allowance(self, asset: str, owner: str, spender: str) -> int:
        """Remaining amount spender may move on owner's behalf."""
        ...


# Allowance value treated as unlimited (never decremented)
UNLIMITED_ALLOWANCE = 2**256 - 1


class InMemoryLedger:
    """TokenLedger backed by a StateStore.

    Any asset address can be used; balances start at zero and are created
    with ``mint``. Addresses are normalized to lowercase before use as keys.
    """

    def __init__(self, store: StateStore) -> None:
        self.store = store

    def balance_of(self, asset: str, holder: str) -> int:
        return self.store.get(_key("balance", asset, holder))

    def total_supply(self, asset: str) -> int:
        return self.store.get(_key("supply", asset))

    def allowance(self, asset: str, owner: str, spender: str) -> int:
        return self.store.get(_key("allowance", asset, owner, spender))

    def mint(self, asset: str, to: str, amount: int) -> None:
        """Create ``amount`` of ``asset`` in ``to``'s balance."""
        asset = require_address(asset)
        to = require_address(to)
        if amount <= 0:
            raise ZeroAmount(f"Mint amount must be positive: {amount}")
        self.store.set(_key("supply", asset), (S(self.total_supply(asset)) + amount).value)
        self.store.set(_key("balance", asset, to), (S(self.balance_of(asset, to)) + amount).value)

    def approve(self, asset: str, owner: str, spender: str, amount: int) -> bool:
        self.store.set(_key("allowance", asset, owner, spender), S(amount).value)
        return True

    def transfer(self, asset: str, sender: str, to: str, amount: int) -> bool:
        self._move(asset, sender, to, amount)
        return True

    def transfer_from(self, asset: str, spender: str, owner: str, to: str, amount: int) -> bool:
        allowed = self.allowance(asset, owner, spender)
        if allowed < amount:
            raise InsufficientAllowance(
                f"{spender} may move {allowed} of {asset} from {owner}, requested {amount}"
            )
        self._move(asset, owner, to, amount)
        if allowed != UNLIMITED_ALLOWANCE:
            self.store.set(_key("allowance", asset, owner, spender), allowed - amount)
        return True

    def _move(self, asset: str, sender: str, to: str, amount: int) -> None:
        if amount < 0:
            raise ZeroAmount(f"Transfer amount cannot be negative: {amount}")
        balance = self.balance_of(asset, sender)
        if balance < amount:
            raise InsufficientBalance(
                f"{sender} holds {balance} of {asset}, cannot send {amount}"
            )
        if normalize_address(sender) == normalize_address(to):
            return
        self.store.set(_key("balance", asset, sender), balance - amount)
        self.store.set(_key("balance", asset, to), (S(self.balance_of(asset, to)) + amount).value)


def _key(kind: str, *addresses: str) -> tuple[str, ...]:
    return (kind, *(normalize_address(address) for address in addresses))
