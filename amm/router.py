"""Swap and liquidity router.

The Router is a stateless composition layer: it quotes through
amm.library, moves the caller's tokens with ledger allowances and drives
Pair.mint / burn / swap. Every public operation runs inside one StateStore
transaction, so a failure at any hop discards every transfer and reserve
change made by earlier hops.

Supports:
- Exact-input and exact-output swaps along multi-hop paths
- Adding liquidity (creating the pair on first deposit) and removing it
- Deadline and slippage bounds supplied by the caller
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager

import structlog

from amm import library
from amm.constants import DEFAULT_ROUTER_ADDRESS
from amm.errors import (
    AMMError,
    ExcessiveInputAmount,
    Expired,
    InsufficientAAmount,
    InsufficientBAmount,
    InsufficientOutputAmount,
    PairNotFound,
)
from amm.factory import Factory
from amm.ledger import TokenLedger
from amm.models.types import require_address
from amm.pair import Pair
from amm.state import Clock

logger = structlog.get_logger()


class Router:
    """Routes swaps and liquidity changes through factory pairs.

    Callers approve the router on the ledger (and on the pair for share
    withdrawals); the router then pulls exactly the quoted input.

    Args:
        factory: Factory used for pair lookup and creation
        ledger: Token ledger (defaults to the factory's)
        address: Router address, the spender callers approve
        clock: Time source for deadline checks (defaults to the factory's)
    """

    def __init__(
        self,
        factory: Factory,
        ledger: TokenLedger | None = None,
        address: str = DEFAULT_ROUTER_ADDRESS,
        clock: Clock | None = None,
    ) -> None:
        self.factory = factory
        self.ledger = ledger if ledger is not None else factory.ledger
        self.address = require_address(address)
        self.clock = clock if clock is not None else factory.clock

    @property
    def fee_multiplier(self) -> int:
        return self.factory.config.fee_multiplier

    # --- Quotes ---

    def quote(self, amount_a: int, reserve_a: int, reserve_b: int) -> int:
        """Amount of B equivalent to amount_a of A at the reserve ratio."""
        return library.quote(amount_a, reserve_a, reserve_b)

    def get_amount_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        """Output for an exact input; mirrors the pair's fee exactly."""
        return library.get_amount_out(amount_in, reserve_in, reserve_out, self.fee_multiplier)

    def get_amount_in(self, amount_out: int, reserve_in: int, reserve_out: int) -> int:
        """Input for an exact output, rounded up."""
        return library.get_amount_in(amount_out, reserve_in, reserve_out, self.fee_multiplier)

    def get_amounts_out(self, amount_in: int, path: Sequence[str]) -> list[int]:
        return library.get_amounts_out(self.factory, amount_in, path, self.fee_multiplier)

    def get_amounts_in(self, amount_out: int, path: Sequence[str]) -> list[int]:
        return library.get_amounts_in(self.factory, amount_out, path, self.fee_multiplier)

    # --- Internals ---

    def _ensure(self, deadline: int) -> None:
        now = self.clock()
        if now > deadline:
            raise Expired(f"Deadline {deadline} passed (now {now})")

    @contextmanager
    def _atomic(self, operation: str) -> Iterator[None]:
        """Run an operation as one transaction, logging rejections."""
        try:
            with self.factory.store.transaction():
                yield
        except AMMError as err:
            logger.warning(
                "router_call_rejected", operation=operation, error=err.code, detail=str(err)
            )
            raise

    def _pair(self, token_a: str, token_b: str) -> Pair:
        pair = self.factory.pair_for(token_a, token_b)
        if pair is None:
            raise PairNotFound(f"No pair for {token_a}/{token_b}")
        return pair

    def _swap(self, amounts: list[int], path: list[str], to: str) -> None:
        """Execute hops; each hop pays straight into the next hop's pair."""
        for i in range(len(path) - 1):
            token_in, token_out = path[i], path[i + 1]
            pair = self._pair(token_in, token_out)
            amount_out = amounts[i + 1]
            if token_in == pair.token0:
                amount0_out, amount1_out = 0, amount_out
            else:
                amount0_out, amount1_out = amount_out, 0
            recipient = self._pair(token_out, path[i + 2]).address if i < len(path) - 2 else to
            pair.swap(amount0_out, amount1_out, recipient, sender=self.address)

    def _add_liquidity_amounts(
        self,
        token_a: str,
        token_b: str,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int,
        amount_b_min: int,
    ) -> tuple[int, int]:
        if self.factory.get_pair(token_a, token_b) is None:
            self.factory.create_pair(token_a, token_b)
        reserve_a, reserve_b = library.get_reserves(self.factory, token_a, token_b)
        if reserve_a == 0 and reserve_b == 0:
            return amount_a_desired, amount_b_desired

        amount_b_optimal = library.quote(amount_a_desired, reserve_a, reserve_b)
        if amount_b_optimal <= amount_b_desired:
            if amount_b_optimal < amount_b_min:
                raise InsufficientBAmount(
                    f"Optimal B amount {amount_b_optimal} below minimum {amount_b_min}"
                )
            return amount_a_desired, amount_b_optimal

        amount_a_optimal = library.quote(amount_b_desired, reserve_b, reserve_a)
        if amount_a_optimal > amount_a_desired or amount_a_optimal < amount_a_min:
            raise InsufficientAAmount(
                f"Optimal A amount {amount_a_optimal} outside [{amount_a_min}, {amount_a_desired}]"
            )
        return amount_a_optimal, amount_b_desired

    # --- Liquidity ---

    def add_liquidity(
        self,
        token_a: str,
        token_b: str,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int,
        amount_b_min: int,
        to: str,
        deadline: int,
        *,
        sender: str,
    ) -> tuple[int, int, int]:
        """Deposit both tokens at the pool ratio and mint shares to ``to``.

        The pair is created if it does not exist; the first deposit sets the
        price, so the desired amounts are used as-is.

        Returns:
            (amount_a, amount_b, shares)

        Raises:
            Expired: If the deadline has passed
            InsufficientAAmount / InsufficientBAmount: If the ratio-adjusted
                deposit falls below the caller's minimum
        """
        self._ensure(deadline)
        token_a = require_address(token_a)
        token_b = require_address(token_b)
        with self._atomic("add_liquidity"):
            amount_a, amount_b = self._add_liquidity_amounts(
                token_a, token_b, amount_a_desired, amount_b_desired, amount_a_min, amount_b_min
            )
            pair = self._pair(token_a, token_b)
            self.ledger.transfer_from(token_a, self.address, sender, pair.address, amount_a)
            self.ledger.transfer_from(token_b, self.address, sender, pair.address, amount_b)
            liquidity = pair.mint(to, sender=self.address)
        return amount_a, amount_b, liquidity

    def remove_liquidity(
        self,
        token_a: str,
        token_b: str,
        liquidity: int,
        amount_a_min: int,
        amount_b_min: int,
        to: str,
        deadline: int,
        *,
        sender: str,
    ) -> tuple[int, int]:
        """Burn ``liquidity`` of sender's shares and pay both tokens to ``to``.

        Sender must have approved the router on the pair's share ledger.

        Returns:
            (amount_a, amount_b)

        Raises:
            Expired: If the deadline has passed
            InsufficientAAmount / InsufficientBAmount: If a payout is below minimum
        """
        self._ensure(deadline)
        token_a = require_address(token_a)
        token_b = require_address(token_b)
        with self._atomic("remove_liquidity"):
            pair = self._pair(token_a, token_b)
            pair.transfer_from(self.address, sender, pair.address, liquidity)
            amount0, amount1 = pair.burn(to, sender=self.address)
            if token_a == pair.token0:
                amount_a, amount_b = amount0, amount1
            else:
                amount_a, amount_b = amount1, amount0
            if amount_a < amount_a_min:
                raise InsufficientAAmount(f"Received {amount_a} A, minimum {amount_a_min}")
            if amount_b < amount_b_min:
                raise InsufficientBAmount(f"Received {amount_b} B, minimum {amount_b_min}")
        return amount_a, amount_b

    # --- Swaps ---

    def swap_exact_tokens_for_tokens(
        self,
        amount_in: int,
        amount_out_min: int,
        path: Sequence[str],
        to: str,
        deadline: int,
        *,
        sender: str,
    ) -> list[int]:
        """Sell exactly ``amount_in`` of path[0] for at least ``amount_out_min`` of path[-1].

        The whole route is quoted before any transfer, so a quote below the
        minimum never executes a partial hop.

        Returns:
            Per-hop amounts, amounts[0] == amount_in

        Raises:
            Expired: If the deadline has passed
            InsufficientOutputAmount: If the final output is below amount_out_min
        """
        self._ensure(deadline)
        tokens = library.normalize_path(path)
        to = require_address(to)
        with self._atomic("swap_exact_tokens_for_tokens"):
            amounts = self.get_amounts_out(amount_in, tokens)
            if amounts[-1] < amount_out_min:
                raise InsufficientOutputAmount(
                    f"Route yields {amounts[-1]}, minimum {amount_out_min}"
                )
            first_pair = self._pair(tokens[0], tokens[1])
            self.ledger.transfer_from(tokens[0], self.address, sender, first_pair.address, amounts[0])
            self._swap(amounts, tokens, to)
        return amounts

    def swap_tokens_for_exact_tokens(
        self,
        amount_out: int,
        amount_in_max: int,
        path: Sequence[str],
        to: str,
        deadline: int,
        *,
        sender: str,
    ) -> list[int]:
        """Buy exactly ``amount_out`` of path[-1] paying at most ``amount_in_max`` of path[0].

        Returns:
            Per-hop amounts, amounts[-1] == amount_out

        Raises:
            Expired: If the deadline has passed
            ExcessiveInputAmount: If the required input exceeds amount_in_max
        """
        self._ensure(deadline)
        tokens = library.normalize_path(path)
        to = require_address(to)
        with self._atomic("swap_tokens_for_exact_tokens"):
            amounts = self.get_amounts_in(amount_out, tokens)
            if amounts[0] > amount_in_max:
                raise ExcessiveInputAmount(
                    f"Route requires {amounts[0]}, maximum {amount_in_max}"
                )
            first_pair = self._pair(tokens[0], tokens[1])
            self.ledger.transfer_from(tokens[0], self.address, sender, first_pair.address, amounts[0])
            self._swap(amounts, tokens, to)
        return amounts


__all__ = ["Router"]
