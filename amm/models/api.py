"""Pydantic models for the quote service request and response bodies.

Amounts travel as decimal strings (uint256 does not fit in a JSON number);
field names use camelCase on the wire, snake_case in Python.
"""

from pydantic import BaseModel, Field

from amm.models.types import Address, Uint256


class AmountsOutRequest(BaseModel):
    """Quote the outputs of selling an exact input along a path."""

    amount_in: Uint256 = Field(alias="amountIn")
    path: list[Address] = Field(min_length=2)

    model_config = {"populate_by_name": True}


class AmountsInRequest(BaseModel):
    """Quote the input needed to buy an exact output along a path."""

    amount_out: Uint256 = Field(alias="amountOut")
    path: list[Address] = Field(min_length=2)

    model_config = {"populate_by_name": True}


class AmountsResponse(BaseModel):
    """Per-hop amounts; amounts[0] is the input, amounts[-1] the final output."""

    amounts: list[Uint256]


class PairInfo(BaseModel):
    """Registered pair with its current reserves."""

    address: Address
    token0: Address
    token1: Address
    reserve0: Uint256
    reserve1: Uint256
    total_supply: Uint256 = Field(alias="totalSupply")
    last_update_time: int = Field(alias="lastUpdateTime", ge=0)

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    """Body returned when an AMM check rejects a request."""

    error: str = Field(description="Error code, e.g. 'InsufficientLiquidity'")
    detail: str
