"""Pydantic models for the AMM quote service."""

from amm.models.api import (
    AmountsInRequest,
    AmountsOutRequest,
    AmountsResponse,
    ErrorResponse,
    PairInfo,
)
from amm.models.types import (
    ZERO_ADDRESS,
    Address,
    Uint256,
    is_valid_address,
    normalize_address,
    require_address,
)

__all__ = [
    "Address",
    "Uint256",
    "ZERO_ADDRESS",
    "is_valid_address",
    "normalize_address",
    "require_address",
    "AmountsInRequest",
    "AmountsOutRequest",
    "AmountsResponse",
    "ErrorResponse",
    "PairInfo",
]
