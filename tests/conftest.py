"""Pytest configuration and fixtures."""

import pytest

from amm import Exchange
from tests.helpers import ALICE, DAI, USDC, WETH, fund, make_exchange


@pytest.fixture
def exchange() -> Exchange:
    """An empty exchange with a fixed clock."""
    return make_exchange()


@pytest.fixture
def funded_exchange(exchange: Exchange) -> Exchange:
    """Exchange where ALICE holds plenty of every test asset, router approved."""
    fund(exchange, ALICE, {WETH: 10**24, USDC: 10**24, DAI: 10**24})
    return exchange
