"""Test helpers module for shared test utilities.

- constants: Asset and account addresses, the fixed clock
- factories: Seeded exchange builders
"""

from tests.helpers.constants import (
    ALICE,
    BOB,
    DAI,
    DEADLINE,
    FEE_TO,
    NOW,
    OWNER,
    USDC,
    WBTC,
    WETH,
)
from tests.helpers.factories import fund, make_exchange, seed_pair

__all__ = [
    "ALICE",
    "BOB",
    "DAI",
    "DEADLINE",
    "FEE_TO",
    "NOW",
    "OWNER",
    "USDC",
    "WBTC",
    "WETH",
    "fund",
    "make_exchange",
    "seed_pair",
]
