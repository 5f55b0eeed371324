"""Tests for the swap and liquidity router."""

import pytest

from amm.errors import (
    ExcessiveInputAmount,
    Expired,
    InsufficientAAmount,
    InsufficientAllowance,
    InsufficientBAmount,
    InsufficientLiquidityMinted,
    InsufficientOutputAmount,
    InvalidPath,
    InvalidTo,
    PairNotFound,
)
from amm.events import Swap
from tests.helpers import ALICE, BOB, DAI, DEADLINE, NOW, USDC, WETH, fund


@pytest.fixture
def router(funded_exchange):
    return funded_exchange.router


@pytest.fixture
def pools(funded_exchange):
    """WETH/USDC at 1000/1000 and USDC/DAI at 1000/1000, both provided by ALICE."""
    router = funded_exchange.router
    router.add_liquidity(WETH, USDC, 1000, 1000, 0, 0, ALICE, DEADLINE, sender=ALICE)
    router.add_liquidity(USDC, DAI, 1000, 1000, 0, 0, ALICE, DEADLINE, sender=ALICE)
    return funded_exchange


class TestAddLiquidity:
    """Tests for add_liquidity."""

    def test_creates_pair_on_first_deposit(self, funded_exchange, router):
        result = router.add_liquidity(WETH, USDC, 1000, 1000, 0, 0, ALICE, DEADLINE, sender=ALICE)
        assert result == (1000, 1000, 900)
        pair = funded_exchange.factory.pair_for(WETH, USDC)
        assert pair.balance_of(ALICE) == 900
        assert pair.get_reserves()[:2] == (1000, 1000)

    def test_proportional_second_deposit(self, pools):
        """Desired 500/800 into a 1:1 pool deposits 500/500 for half the supply."""
        result = pools.router.add_liquidity(
            WETH, USDC, 500, 800, 0, 0, BOB, DEADLINE, sender=ALICE
        )
        assert result == (500, 500, 500)
        assert pools.factory.pair_for(WETH, USDC).balance_of(BOB) == 500

    def test_adjusts_a_side(self, pools):
        result = pools.router.add_liquidity(
            WETH, USDC, 800, 500, 0, 0, ALICE, DEADLINE, sender=ALICE
        )
        assert result[:2] == (500, 500)

    def test_b_minimum(self, pools):
        with pytest.raises(InsufficientBAmount):
            pools.router.add_liquidity(WETH, USDC, 500, 800, 0, 600, ALICE, DEADLINE, sender=ALICE)

    def test_a_minimum(self, pools):
        before = pools.ledger.balance_of(WETH, ALICE)
        with pytest.raises(InsufficientAAmount):
            pools.router.add_liquidity(WETH, USDC, 500, 400, 450, 0, ALICE, DEADLINE, sender=ALICE)
        assert pools.ledger.balance_of(WETH, ALICE) == before

    def test_failed_first_deposit_does_not_register_pair(self, funded_exchange, router):
        before = funded_exchange.ledger.balance_of(WETH, ALICE)
        with pytest.raises(InsufficientLiquidityMinted):
            router.add_liquidity(WETH, USDC, 100, 100, 0, 0, ALICE, DEADLINE, sender=ALICE)
        assert funded_exchange.factory.get_pair(WETH, USDC) is None
        assert funded_exchange.ledger.balance_of(WETH, ALICE) == before

    def test_expired(self, router):
        with pytest.raises(Expired):
            router.add_liquidity(WETH, USDC, 1000, 1000, 0, 0, ALICE, NOW - 1, sender=ALICE)

    def test_deadline_inclusive(self, router):
        router.add_liquidity(WETH, USDC, 1000, 1000, 0, 0, ALICE, NOW, sender=ALICE)

    def test_requires_allowance(self, funded_exchange, router):
        funded_exchange.ledger.mint(WETH, BOB, 1000)
        funded_exchange.ledger.mint(USDC, BOB, 1000)
        with pytest.raises(InsufficientAllowance):
            router.add_liquidity(WETH, USDC, 1000, 1000, 0, 0, BOB, DEADLINE, sender=BOB)


class TestRemoveLiquidity:
    """Tests for remove_liquidity."""

    def test_remove(self, pools):
        pair = pools.factory.pair_for(WETH, USDC)
        pair.approve(ALICE, pools.router.address, 900)
        amounts = pools.router.remove_liquidity(WETH, USDC, 900, 0, 0, BOB, DEADLINE, sender=ALICE)
        assert amounts == (900, 900)
        assert pools.ledger.balance_of(WETH, BOB) == 900
        assert pair.balance_of(ALICE) == 0
        assert pair.total_supply == 100

    def test_minimum_not_met(self, pools):
        pair = pools.factory.pair_for(WETH, USDC)
        pair.approve(ALICE, pools.router.address, 900)
        with pytest.raises(InsufficientBAmount):
            pools.router.remove_liquidity(WETH, USDC, 450, 0, 451, BOB, DEADLINE, sender=ALICE)
        assert pair.balance_of(ALICE) == 900
        assert pair.allowance(ALICE, pools.router.address) == 900

    def test_requires_share_allowance(self, pools):
        with pytest.raises(InsufficientAllowance):
            pools.router.remove_liquidity(WETH, USDC, 10, 0, 0, ALICE, DEADLINE, sender=ALICE)

    def test_missing_pair(self, pools):
        with pytest.raises(PairNotFound):
            pools.router.remove_liquidity(WETH, DAI, 10, 0, 0, ALICE, DEADLINE, sender=ALICE)


class TestSwapExactIn:
    """Tests for swap_exact_tokens_for_tokens."""

    def test_single_hop(self, pools):
        amounts = pools.router.swap_exact_tokens_for_tokens(
            100, 90, [WETH, USDC], BOB, DEADLINE, sender=ALICE
        )
        assert amounts == [100, 90]
        assert pools.ledger.balance_of(USDC, BOB) == 90
        assert pools.factory.pair_for(WETH, USDC).get_reserves()[:2] == (910, 1100)

    def test_output_below_minimum(self, pools):
        before = pools.ledger.balance_of(WETH, ALICE)
        with pytest.raises(InsufficientOutputAmount):
            pools.router.swap_exact_tokens_for_tokens(
                100, 91, [WETH, USDC], BOB, DEADLINE, sender=ALICE
            )
        assert pools.ledger.balance_of(WETH, ALICE) == before

    def test_multi_hop(self, pools):
        expected = pools.router.get_amounts_out(100, [WETH, USDC, DAI])
        amounts = pools.router.swap_exact_tokens_for_tokens(
            100, 0, [WETH, USDC, DAI], BOB, DEADLINE, sender=ALICE
        )
        assert amounts == expected
        assert pools.ledger.balance_of(DAI, BOB) == amounts[-1]
        assert pools.ledger.balance_of(USDC, BOB) == 0
        swaps = [event for event in pools.store.events if isinstance(event, Swap)]
        assert len(swaps) == 2

    def test_multi_hop_below_minimum_leaves_balances(self, pools):
        before = pools.ledger.balance_of(WETH, ALICE)
        with pytest.raises(InsufficientOutputAmount):
            pools.router.swap_exact_tokens_for_tokens(
                100, 90, [WETH, USDC, DAI], BOB, DEADLINE, sender=ALICE
            )
        assert pools.ledger.balance_of(WETH, ALICE) == before

    def test_failure_in_last_hop_rolls_back_first(self, pools):
        """A rejection in hop two undoes hop one's transfers and reserves."""
        events_before = pools.store.events
        first = pools.factory.pair_for(WETH, USDC)
        before = pools.ledger.balance_of(WETH, ALICE)
        with pytest.raises(InvalidTo):
            pools.router.swap_exact_tokens_for_tokens(
                100, 0, [WETH, USDC, DAI], DAI, DEADLINE, sender=ALICE
            )
        assert first.get_reserves()[:2] == (1000, 1000)
        assert pools.ledger.balance_of(WETH, ALICE) == before
        assert pools.ledger.balance_of(WETH, first.address) == 1000
        assert pools.store.events == events_before

    def test_missing_hop(self, pools):
        with pytest.raises(PairNotFound):
            pools.router.swap_exact_tokens_for_tokens(
                100, 0, [WETH, DAI], BOB, DEADLINE, sender=ALICE
            )

    def test_short_path(self, pools):
        with pytest.raises(InvalidPath):
            pools.router.swap_exact_tokens_for_tokens(100, 0, [WETH], BOB, DEADLINE, sender=ALICE)

    def test_expired(self, pools):
        with pytest.raises(Expired):
            pools.router.swap_exact_tokens_for_tokens(
                100, 0, [WETH, USDC], BOB, NOW - 1, sender=ALICE
            )

    def test_reserve_product_never_decreases(self, pools):
        fund(pools, BOB, {WETH: 10**6, USDC: 10**6})
        pair = pools.factory.pair_for(WETH, USDC)
        for amount_in, path in [(37, [WETH, USDC]), (250, [USDC, WETH]), (1, [WETH, USDC])]:
            reserve0, reserve1, _ = pair.get_reserves()
            pools.router.swap_exact_tokens_for_tokens(
                amount_in, 0, path, BOB, DEADLINE, sender=BOB
            )
            new0, new1, _ = pair.get_reserves()
            assert new0 * new1 >= reserve0 * reserve1


class TestSwapExactOut:
    """Tests for swap_tokens_for_exact_tokens."""

    def test_single_hop(self, pools):
        amounts = pools.router.swap_tokens_for_exact_tokens(
            90, 100, [WETH, USDC], BOB, DEADLINE, sender=ALICE
        )
        assert amounts == [100, 90]
        assert pools.ledger.balance_of(USDC, BOB) == 90

    def test_input_above_maximum(self, pools):
        before = pools.ledger.balance_of(WETH, ALICE)
        with pytest.raises(ExcessiveInputAmount):
            pools.router.swap_tokens_for_exact_tokens(
                90, 99, [WETH, USDC], BOB, DEADLINE, sender=ALICE
            )
        assert pools.ledger.balance_of(WETH, ALICE) == before

    def test_multi_hop(self, pools):
        amounts = pools.router.swap_tokens_for_exact_tokens(
            50, 10**6, [WETH, USDC, DAI], BOB, DEADLINE, sender=ALICE
        )
        assert amounts[-1] == 50
        assert pools.ledger.balance_of(DAI, BOB) == 50


class TestQuotes:
    """Tests for router quote helpers."""

    def test_get_amount_out(self, router):
        assert router.get_amount_out(100, 1000, 1000) == 90

    def test_get_amount_in(self, router):
        assert router.get_amount_in(90, 1000, 1000) == 100

    def test_quote(self, router):
        assert router.quote(10, 100, 300) == 30

    def test_get_amounts_in(self, pools):
        assert pools.router.get_amounts_in(90, [WETH, USDC]) == [100, 90]
