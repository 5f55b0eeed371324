"""Tests for address and uint256 types and API models."""

import pytest
from pydantic import ValidationError

from amm.errors import InvalidAddress, ZeroAddress
from amm.library import sort_tokens
from amm.models import AmountsOutRequest, PairInfo
from amm.models.types import (
    ZERO_ADDRESS,
    is_valid_address,
    normalize_address,
    require_address,
    validate_uint256,
)
from amm.safe_int import UINT256_MAX
from tests.helpers import USDC, WETH


class TestValidateUint256:
    """Tests for validate_uint256."""

    def test_accepts_int_and_str(self):
        assert validate_uint256(5) == "5"
        assert validate_uint256("5") == "5"
        assert validate_uint256(UINT256_MAX) == str(UINT256_MAX)

    def test_rejects_negative(self):
        with pytest.raises(ValueError, match="negative"):
            validate_uint256("-1")

    def test_rejects_overflow(self):
        with pytest.raises(ValueError, match="overflow"):
            validate_uint256(UINT256_MAX + 1)

    def test_rejects_non_numeric(self):
        with pytest.raises(ValueError):
            validate_uint256("abc")
        with pytest.raises(ValueError):
            validate_uint256(1.5)


class TestAddresses:
    """Tests for address normalization."""

    def test_normalize(self):
        assert normalize_address("0xC02AAA39B223FE8D0A0E5C4F27EAD9083C756CC2") == WETH
        assert normalize_address(WETH[2:]) == WETH

    def test_normalize_validate(self):
        with pytest.raises(InvalidAddress):
            normalize_address("0x12", validate=True)

    def test_is_valid_address(self):
        assert is_valid_address(WETH)
        assert not is_valid_address("0x" + "zz" * 20)
        assert not is_valid_address(WETH[2:])

    def test_require_address_rejects_zero(self):
        with pytest.raises(ZeroAddress):
            require_address(ZERO_ADDRESS)
        assert require_address(ZERO_ADDRESS, allow_zero=True) == ZERO_ADDRESS

    def test_invalid_address_is_value_error(self):
        with pytest.raises(ValueError):
            require_address("nope")


class TestApiModels:
    """Tests for request and response models."""

    def test_request_by_alias(self):
        request = AmountsOutRequest.model_validate({"amountIn": 10, "path": [WETH, USDC]})
        assert request.amount_in == "10"

    def test_request_by_name(self):
        request = AmountsOutRequest(amount_in="10", path=[WETH, USDC])
        assert request.path == [WETH, USDC]

    def test_request_rejects_bad_address(self):
        with pytest.raises(ValidationError):
            AmountsOutRequest.model_validate({"amountIn": "10", "path": [WETH, "0x12"]})

    def test_pair_info_serializes_camel_case(self):
        info = PairInfo(
            address=WETH,
            token0=USDC,
            token1=WETH,
            reserve0=1,
            reserve1=2,
            total_supply=3,
            last_update_time=4,
        )
        data = info.model_dump(by_alias=True)
        assert data["totalSupply"] == "3"
        assert data["lastUpdateTime"] == 4


class TestMalformedAddresses:
    """Strings that int(..., 16) would accept but are not addresses."""

    @pytest.mark.parametrize(
        "address",
        [
            "0x" + "_1" * 20,
            "0x" + "ab" * 19 + "  ",
            " 0x" + "ab" * 20,
            "0x" + "ab" * 20 + "\n",
            "0x+" + "a" * 39,
        ],
    )
    def test_rejected(self, address):
        assert not is_valid_address(address)
        with pytest.raises(InvalidAddress):
            require_address(address)

    def test_sort_tokens_raises_invalid_address(self):
        with pytest.raises(InvalidAddress):
            sort_tokens("0x" + "_1" * 20, WETH)
