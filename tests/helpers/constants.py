"""Shared address constants for tests.

All addresses are lowercase for consistency with normalize_address().

Usage:
    from tests.helpers import WETH, USDC
    # or
    from tests.helpers.constants import WETH, USDC
"""

# =============================================================================
# Assets
# =============================================================================

WETH = "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"
USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
DAI = "0x6b175474e89094c44da98b954eedeac495271d0f"
WBTC = "0x2260fac5e5542a773aa44fbcfedf7c193bc2c599"

# =============================================================================
# Accounts
# =============================================================================

OWNER = "0x7f5a36d85f4e2159b894815166db830dd357bbcb"
ALICE = "0x1111111111111111111111111111111111111111"
BOB = "0x2222222222222222222222222222222222222222"
FEE_TO = "0x3333333333333333333333333333333333333333"

# Fixed block time used by the exchange fixture
NOW = 1_700_000_000
DEADLINE = NOW + 600
