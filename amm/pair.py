"""Constant-product liquidity pair.

A Pair holds two canonically ordered assets, tracks their reserves and
issues liquidity shares. Tokens are pushed into the pair's ledger balance
first; ``mint``, ``burn`` and ``swap`` then reconcile the difference between
balances and recorded reserves:

- mint: new balance over reserves is a deposit, shares are issued for it
- burn: shares sent to the pair are redeemed pro rata
- swap: outputs are paid optimistically, then the fee-adjusted product of
  the new balances must not be below the old reserve product

Every entry point holds the pair's reentrancy lock and runs inside a
StateStore transaction, so a failed check commits nothing and always
releases the lock.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Protocol

import structlog

from amm.constants import BPS_DENOMINATOR, BURN_ADDRESS
from amm.errors import (
    InsufficientAllowance,
    InsufficientBalance,
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientLiquidityBurned,
    InsufficientLiquidityMinted,
    InsufficientOutputAmount,
    InvalidTo,
    InvariantViolation,
    Locked,
    ZeroAmount,
)
from amm.events import Burn, Mint, Swap, Sync
from amm.models.types import normalize_address, require_address
from amm.safe_int import S

if TYPE_CHECKING:
    from amm.config import AMMConfig
    from amm.factory import Factory
    from amm.ledger import TokenLedger
    from amm.state import StateStore

logger = structlog.get_logger()

# Timestamps are stored modulo 2**32, as a uint32
TIMESTAMP_MODULUS = 2**32


class SwapCallback(Protocol):
    """Flash-swap hook invoked after outputs are paid, before the invariant check."""

    def __call__(self, sender: str, amount0_out: int, amount1_out: int, data: bytes) -> None: ...


class Pair:
    """A constant-product pool for one canonical asset pair.

    Pairs are created by Factory.create_pair and never destroyed. The pair
    is also the ledger for its own liquidity shares (``balance_of``,
    ``transfer``, ``approve``, ``transfer_from``).

    Attributes:
        factory: Factory that created the pair (config, fee recipient, store)
        address: Deterministic pair address
        token0: Lower-ordered asset
        token1: Higher-ordered asset
    """

    def __init__(self, factory: Factory, address: str, token0: str, token1: str) -> None:
        self.factory = factory
        self.address = address
        self.token0 = token0
        self.token1 = token1
        self._locked = False

    def __repr__(self) -> str:
        reserve0, reserve1, _ = self.get_reserves()
        return (
            f"Pair(address={self.address}, token0={self.token0}, token1={self.token1}, "
            f"reserve0={reserve0}, reserve1={reserve1})"
        )

    @property
    def store(self) -> StateStore:
        return self.factory.store

    @property
    def ledger(self) -> TokenLedger:
        return self.factory.ledger

    @property
    def config(self) -> AMMConfig:
        return self.factory.config

    # --- Views ---

    def _key(self, name: str) -> tuple[str, str, str]:
        return ("pair", self.address, name)

    def get_reserves(self) -> tuple[int, int, int]:
        """Return (reserve0, reserve1, last_update_time)."""
        return (
            self.store.get(self._key("reserve0")),
            self.store.get(self._key("reserve1")),
            self.store.get(self._key("timestamp")),
        )

    def get_reserves_for(self, token_in: str) -> tuple[int, int]:
        """Get reserves ordered as (reserve_in, reserve_out)."""
        reserve0, reserve1, _ = self.get_reserves()
        token_in_norm = require_address(token_in)
        if token_in_norm == self.token0:
            return reserve0, reserve1
        elif token_in_norm == self.token1:
            return reserve1, reserve0
        else:
            raise ValueError(f"Token {token_in} not in pair {self.address}")

    @property
    def total_supply(self) -> int:
        """Total liquidity shares outstanding, including the locked minimum."""
        return self.store.get(self._key("total_supply"))

    @property
    def k_last(self) -> int:
        """reserve0 * reserve1 after the last liquidity event (protocol fee on only)."""
        return self.store.get(self._key("k_last"))

    @property
    def is_empty(self) -> bool:
        return self.total_supply == 0

    def balance_of(self, holder: str) -> int:
        """Liquidity shares owned by holder."""
        return self.store.get(("shares", self.address, normalize_address(holder)))

    def allowance(self, owner: str, spender: str) -> int:
        return self.store.get(self._allowance_key(owner, spender))

    # --- Share ledger ---

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        """Allow spender to move up to amount of owner's shares."""
        self.store.set(self._allowance_key(owner, spender), S(amount).value)
        return True

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        """Move shares between holders.

        Raises:
            InsufficientBalance: If sender owns fewer than amount shares
        """
        to = require_address(to, allow_zero=True)
        self._move_shares(sender, to, amount)
        return True

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        """Move owner's shares using spender's allowance.

        Raises:
            InsufficientAllowance: If spender is approved for fewer than amount
            InsufficientBalance: If owner owns fewer than amount shares
        """
        to = require_address(to, allow_zero=True)
        allowed = self.allowance(owner, spender)
        if allowed < amount:
            raise InsufficientAllowance(
                f"{spender} may move {allowed} shares of {self.address}, requested {amount}"
            )
        self._move_shares(owner, to, amount)
        self.store.set(self._allowance_key(owner, spender), allowed - amount)
        return True

    def _allowance_key(self, owner: str, spender: str) -> tuple[str, ...]:
        return ("share_allowance", self.address, normalize_address(owner), normalize_address(spender))

    def _move_shares(self, sender: str, to: str, amount: int) -> None:
        sender = normalize_address(sender)
        if amount < 0:
            raise ZeroAmount(f"Share amount cannot be negative: {amount}")
        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientBalance(
                f"{sender} owns {balance} shares of {self.address}, cannot send {amount}"
            )
        if sender == to:
            return
        self.store.set(("shares", self.address, sender), balance - amount)
        self.store.set(("shares", self.address, to), (S(self.balance_of(to)) + amount).value)

    def _mint_shares(self, to: str, amount: int) -> None:
        to = normalize_address(to)
        self.store.set(self._key("total_supply"), (S(self.total_supply) + amount).value)
        self.store.set(("shares", self.address, to), (S(self.balance_of(to)) + amount).value)

    def _burn_shares(self, holder: str, amount: int) -> None:
        self.store.set(("shares", self.address, holder), (S(self.balance_of(holder)) - amount).value)
        self.store.set(self._key("total_supply"), (S(self.total_supply) - amount).value)

    # --- Internals ---

    @contextmanager
    def _guarded(self) -> Iterator[None]:
        """Hold the reentrancy lock and stage all writes until success."""
        if self._locked:
            raise Locked(f"Pair {self.address} is locked")
        self._locked = True
        try:
            with self.store.transaction():
                yield
        finally:
            self._locked = False

    def _balances(self) -> tuple[int, int]:
        return (
            self.ledger.balance_of(self.token0, self.address),
            self.ledger.balance_of(self.token1, self.address),
        )

    def _update(self, balance0: int, balance1: int) -> None:
        """Record balances as the new reserves.

        Raises:
            Overflow: If either balance does not fit in a uint112
        """
        reserve0 = S(balance0).to_uint112()
        reserve1 = S(balance1).to_uint112()
        self.store.set(self._key("reserve0"), reserve0)
        self.store.set(self._key("reserve1"), reserve1)
        self.store.set(self._key("timestamp"), self.factory.clock() % TIMESTAMP_MODULUS)
        self.store.emit(Sync(pair=self.address, reserve0=reserve0, reserve1=reserve1))

    def _mint_fee(self, reserve0: int, reserve1: int) -> bool:
        """Mint the protocol's share of fee growth since the last liquidity event.

        Returns:
            True if the protocol fee is switched on
        """
        fee_to = self.factory.fee_recipient
        k_last = self.k_last
        if fee_to is None:
            if k_last != 0:
                self.store.set(self._key("k_last"), 0)
            return False

        if k_last != 0:
            root_k = (S(reserve0) * S(reserve1)).sqrt()
            root_k_last = S(k_last).sqrt()
            if root_k > root_k_last:
                numerator = S(self.total_supply) * (root_k - root_k_last)
                denominator = root_k * S(self.config.protocol_fee_divisor) + root_k_last
                liquidity = numerator // denominator
                if liquidity > 0:
                    self._mint_shares(fee_to, liquidity.value)
        return True

    # --- Entry points ---

    def mint(self, to: str, *, sender: str | None = None) -> int:
        """Issue shares for tokens already transferred into the pair.

        The deposit is the pair's ledger balance in excess of its reserves.
        The first deposit mints sqrt(amount0 * amount1) shares and locks
        ``minimum_liquidity`` of them at the zero address; later deposits
        mint in proportion to the smaller side, and any excess of the richer
        side stays in the pool.

        Args:
            to: Recipient of the new shares
            sender: Acting address recorded in the Mint event (defaults to ``to``)

        Returns:
            Number of shares credited to ``to``

        Raises:
            InsufficientLiquidityMinted: If the deposit would mint zero shares
        """
        to = require_address(to)
        with self._guarded():
            reserve0, reserve1, _ = self.get_reserves()
            balance0, balance1 = self._balances()
            amount0 = (S(balance0) - reserve0).value
            amount1 = (S(balance1) - reserve1).value

            fee_on = self._mint_fee(reserve0, reserve1)
            total_supply = self.total_supply
            minimum = self.config.minimum_liquidity
            if total_supply == 0:
                root = (S(amount0) * S(amount1)).sqrt()
                if root <= minimum:
                    raise InsufficientLiquidityMinted(
                        f"Initial deposit ({amount0}, {amount1}) does not exceed "
                        f"minimum liquidity {minimum}"
                    )
                liquidity = (root - minimum).value
                if minimum > 0:
                    self._mint_shares(BURN_ADDRESS, minimum)
            else:
                liquidity = min(
                    (S(amount0) * S(total_supply) // S(reserve0)).value,
                    (S(amount1) * S(total_supply) // S(reserve1)).value,
                )
            if liquidity <= 0:
                raise InsufficientLiquidityMinted(
                    f"Deposit ({amount0}, {amount1}) mints zero shares"
                )

            self._mint_shares(to, liquidity)
            self._update(balance0, balance1)
            if fee_on:
                self.store.set(self._key("k_last"), (S(balance0) * S(balance1)).value)
            self.store.emit(
                Mint(
                    pair=self.address,
                    sender=sender or to,
                    to=to,
                    amount0=amount0,
                    amount1=amount1,
                    shares=liquidity,
                )
            )
        return liquidity

    def burn(self, to: str, *, sender: str | None = None) -> tuple[int, int]:
        """Redeem the shares held by the pair itself.

        Callers transfer shares to the pair address first; every share the
        pair holds is burned and paid out pro rata to the recorded reserves.
        Rounding remainders and any unsynced excess stay in the pool.

        Args:
            to: Recipient of the underlying tokens
            sender: Acting address recorded in the Burn event (defaults to ``to``)

        Returns:
            (amount0, amount1) paid to ``to``

        Raises:
            InsufficientLiquidityBurned: If either payout would be zero
        """
        to = require_address(to)
        with self._guarded():
            reserve0, reserve1, _ = self.get_reserves()
            liquidity = self.balance_of(self.address)

            fee_on = self._mint_fee(reserve0, reserve1)
            total_supply = self.total_supply
            if total_supply == 0 or liquidity == 0:
                raise InsufficientLiquidityBurned(f"No shares to burn in {self.address}")
            amount0 = (S(liquidity) * S(reserve0) // S(total_supply)).value
            amount1 = (S(liquidity) * S(reserve1) // S(total_supply)).value
            if amount0 == 0 or amount1 == 0:
                raise InsufficientLiquidityBurned(
                    f"Burning {liquidity} shares pays ({amount0}, {amount1})"
                )

            self._burn_shares(self.address, liquidity)
            self.ledger.transfer(self.token0, self.address, to, amount0)
            self.ledger.transfer(self.token1, self.address, to, amount1)
            remaining0 = (S(reserve0) - amount0).value
            remaining1 = (S(reserve1) - amount1).value
            self._update(remaining0, remaining1)
            if fee_on:
                self.store.set(self._key("k_last"), (S(remaining0) * S(remaining1)).value)
            self.store.emit(
                Burn(
                    pair=self.address,
                    sender=sender or to,
                    to=to,
                    amount0=amount0,
                    amount1=amount1,
                    shares=liquidity,
                )
            )
        return amount0, amount1

    def swap(
        self,
        amount0_out: int,
        amount1_out: int,
        to: str,
        data: bytes = b"",
        *,
        sender: str | None = None,
        callback: SwapCallback | None = None,
    ) -> None:
        """Pay out the requested amounts, then enforce the constant product.

        Protocol:
        1. Transfer requested outputs to ``to``.
        2. Invoke ``callback`` if given (flash swap: the callback may repay
           with either token before the check).
        3. Require (b0 * 10000 - in0 * fee) * (b1 * 10000 - in1 * fee)
           >= r0 * r1 * 10000**2, where in_i is the net inflow of token i.

        Args:
            amount0_out: Amount of token0 to send
            amount1_out: Amount of token1 to send
            to: Output recipient
            data: Opaque payload forwarded to the callback
            sender: Acting address recorded in the Swap event (defaults to ``to``)
            callback: Optional flash-swap hook

        Raises:
            InsufficientOutputAmount: If both outputs are zero
            InsufficientLiquidity: If an output is not below its reserve
            InvalidTo: If ``to`` is one of the pair's tokens
            InsufficientInputAmount: If nothing was paid in
            InvariantViolation: If the fee-adjusted product would decrease
        """
        if amount0_out < 0 or amount1_out < 0:
            raise ZeroAmount(f"Swap outputs cannot be negative: ({amount0_out}, {amount1_out})")
        if amount0_out == 0 and amount1_out == 0:
            raise InsufficientOutputAmount("Swap must request a non-zero output")
        to = require_address(to)

        with self._guarded():
            reserve0, reserve1, _ = self.get_reserves()
            if amount0_out >= reserve0 or amount1_out >= reserve1:
                raise InsufficientLiquidity(
                    f"Requested ({amount0_out}, {amount1_out}) from reserves "
                    f"({reserve0}, {reserve1})"
                )
            if to in (self.token0, self.token1):
                raise InvalidTo(f"Swap recipient {to} is a pair token")

            if amount0_out > 0:
                self.ledger.transfer(self.token0, self.address, to, amount0_out)
            if amount1_out > 0:
                self.ledger.transfer(self.token1, self.address, to, amount1_out)
            if callback is not None:
                callback(sender or to, amount0_out, amount1_out, data)

            balance0, balance1 = self._balances()
            remaining0 = reserve0 - amount0_out
            remaining1 = reserve1 - amount1_out
            amount0_in = balance0 - remaining0 if balance0 > remaining0 else 0
            amount1_in = balance1 - remaining1 if balance1 > remaining1 else 0
            if amount0_in == 0 and amount1_in == 0:
                raise InsufficientInputAmount("Swap received no input")

            fee_bps = self.config.fee_bps
            balance0_adjusted = S(balance0) * BPS_DENOMINATOR - S(amount0_in) * fee_bps
            balance1_adjusted = S(balance1) * BPS_DENOMINATOR - S(amount1_in) * fee_bps
            if balance0_adjusted * balance1_adjusted < (
                S(reserve0) * S(reserve1) * BPS_DENOMINATOR**2
            ):
                raise InvariantViolation(
                    f"Fee-adjusted product below k for pair {self.address}: "
                    f"balances ({balance0}, {balance1}), reserves ({reserve0}, {reserve1})"
                )

            self._update(balance0, balance1)
            self.store.emit(
                Swap(
                    pair=self.address,
                    sender=sender or to,
                    to=to,
                    amount0_in=amount0_in,
                    amount1_in=amount1_in,
                    amount0_out=amount0_out,
                    amount1_out=amount1_out,
                )
            )

    def skim(self, to: str) -> tuple[int, int]:
        """Send balances in excess of reserves to ``to``.

        Returns:
            (excess0, excess1) transferred
        """
        to = require_address(to)
        with self._guarded():
            reserve0, reserve1, _ = self.get_reserves()
            balance0, balance1 = self._balances()
            excess0 = (S(balance0) - reserve0).value
            excess1 = (S(balance1) - reserve1).value
            if excess0 > 0:
                self.ledger.transfer(self.token0, self.address, to, excess0)
            if excess1 > 0:
                self.ledger.transfer(self.token1, self.address, to, excess1)
        return excess0, excess1

    def sync(self) -> None:
        """Reconcile reserves to the pair's actual ledger balances.

        An empty pair keeps zero reserves until its first mint; tokens sent to
        it beforehand are counted as part of that deposit.
        """
        with self._guarded():
            if self.is_empty:
                logger.debug("pair_sync_skipped", pair=self.address, reason="empty")
                return
            balance0, balance1 = self._balances()
            self._update(balance0, balance1)
        logger.debug("pair_synced", pair=self.address)


__all__ = ["Pair", "SwapCallback"]
