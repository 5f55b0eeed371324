"""Shared type definitions for AMM request and response models.

Assets, pairs and holders are all identified by Ethereum-style addresses:
``0x`` followed by 40 hex characters, normalized to lowercase.
"""

import re
from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from amm.errors import InvalidAddress, ZeroAddress
from amm.safe_int import UINT256_MAX

ZERO_ADDRESS = "0x" + "00" * 20

# 0x followed by exactly 40 hex digits
ADDRESS_PATTERN = r"^0x[a-fA-F0-9]{40}$"


def validate_uint256(value: Any) -> str:
    """Validate that a value is a valid uint256 decimal string.

    Args:
        value: Value to validate (string or int)

    Returns:
        Valid uint256 as decimal string

    Raises:
        ValueError: If value is not a valid non-negative integer within uint256 range
    """
    if isinstance(value, int) and not isinstance(value, bool):
        int_value = value
    elif isinstance(value, str):
        try:
            int_value = int(value)
        except ValueError as err:
            raise ValueError(f"Uint256 must be a decimal integer string: '{value}'") from err
    else:
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")

    if int_value < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if int_value > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")

    return str(int_value)


# Ethereum address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=ADDRESS_PATTERN)]

# 256-bit unsigned integer as decimal string (validated)
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Normalize an address to lowercase with a 0x prefix.

    Args:
        address: An address (with or without 0x prefix)
        validate: If True, raises InvalidAddress for malformed addresses.

    Returns:
        Lowercase address with 0x prefix

    Raises:
        InvalidAddress: If validate=True and address is malformed
    """
    if not isinstance(address, str):
        raise InvalidAddress(f"Address must be a string, got {type(address).__name__}")
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr

    if validate and not is_valid_address(addr):
        raise InvalidAddress(f"Invalid address: {address}")

    return addr


def is_valid_address(address: str) -> bool:
    """Check if a string is a valid address."""
    if not isinstance(address, str):
        return False
    return re.fullmatch(ADDRESS_PATTERN, address) is not None


def require_address(address: str, *, allow_zero: bool = False) -> str:
    """Validate and normalize an address supplied by a caller.

    Raises:
        InvalidAddress: If the address is malformed
        ZeroAddress: If the address is the zero address and allow_zero is False
    """
    addr = normalize_address(address, validate=True)
    if addr == ZERO_ADDRESS and not allow_zero:
        raise ZeroAddress(f"Zero address not allowed: {address}")
    return addr


def address_bytes(address: str) -> bytes:
    """Decode a normalized address into its 20 raw bytes."""
    return bytes.fromhex(address[2:])
