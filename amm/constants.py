"""Protocol constants for the constant-product AMM.

Centralizes well-known addresses and pool parameters.
"""

from amm.models.types import ZERO_ADDRESS, is_valid_address


def _validate_address(name: str, address: str) -> str:
    """Validate and return a well-known address.

    Raises:
        ValueError: If the address is invalid
    """
    if not is_valid_address(address):
        raise ValueError(f"Invalid {name} address: {address} (must be 0x + 40 hex chars)")
    return address


# Swap fee in basis points (30 = 0.3%), charged on every net inflow to a pair
SWAP_FEE_BPS = 30

# Basis-point denominator used by every fee calculation
BPS_DENOMINATOR = 10_000

# Shares locked at the zero address by the first deposit into a pair
MINIMUM_LIQUIDITY = 100

# Protocol fee takes 1 / (PROTOCOL_FEE_DIVISOR + 1) of the growth in sqrt(k)
PROTOCOL_FEE_DIVISOR = 5

# keccak256 of the pair creation code; fixed salt input of pair addressing
PAIR_INIT_CODE_HASH = bytes.fromhex(
    "96e8ac4277198ff8b6f785478aa9a39f403cb768dd02cbee326c3e7da348845f"
)

# Default deployment addresses (lowercase for consistency)
DEFAULT_FACTORY_ADDRESS = _validate_address(
    "factory", "0x5c69bee701ef814a2b6a3edd4b1652cb9cc5aa6f"
)
DEFAULT_ROUTER_ADDRESS = _validate_address(
    "router", "0x7a250d5630b4cf539739df2c5dacb4c659f2488d"
)

# Shares minted to this address are unrecoverable
BURN_ADDRESS = ZERO_ADDRESS
