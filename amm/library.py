"""Constant-product pool math and pair addressing.

Pools use the constant product formula x * y = k with a fee (0.3% by
default) charged on the input side. Everything here is a pure function of
its arguments (plus, for the path helpers, reserves read from a factory), so
quotes can be reproduced off-line without touching pool state.

All arithmetic goes through SafeInt: no floats, no silent wrap-around.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from Crypto.Hash import keccak
from eth_abi.packed import encode_packed

from amm.constants import BPS_DENOMINATOR, PAIR_INIT_CODE_HASH
from amm.errors import (
    DuplicateAsset,
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientOutputAmount,
    InvalidPath,
    PairNotFound,
    ZeroAmount,
)
from amm.models.types import address_bytes, require_address
from amm.safe_int import S

if TYPE_CHECKING:
    from amm.factory import Factory

# Fee multiplier for the default 30 bps fee
DEFAULT_FEE_MULTIPLIER = BPS_DENOMINATOR - 30


def keccak256(data: bytes) -> bytes:
    """Compute keccak256 hash (same as Ethereum)."""
    return keccak.new(digest_bits=256, data=data).digest()


def sort_tokens(token_a: str, token_b: str) -> tuple[str, str]:
    """Return the canonical (token0, token1) ordering of two assets.

    Assets are ordered by their raw address bytes, so (A, B) and (B, A)
    always produce the same key.

    Raises:
        InvalidAddress: If either address is malformed
        ZeroAddress: If either address is the zero address
        DuplicateAsset: If both addresses name the same asset
    """
    a = require_address(token_a)
    b = require_address(token_b)
    if a == b:
        raise DuplicateAsset(f"Pair assets must differ: {a}")
    if address_bytes(a) < address_bytes(b):
        return a, b
    return b, a


def pair_address_for(
    factory: str,
    token_a: str,
    token_b: str,
    init_code_hash: bytes = PAIR_INIT_CODE_HASH,
) -> str:
    """Derive the address of the pair for two assets.

    Uses the CREATE2 layout: the last 20 bytes of
    keccak256(0xff ++ factory ++ keccak256(token0 ++ token1) ++ init_code_hash).
    The result depends only on the factory, the two assets and the fixed
    init code hash, never on creation order.

    Args:
        factory: Factory address
        token_a: One asset of the pair (either order)
        token_b: The other asset
        init_code_hash: 32-byte hash standing in for the pair creation code

    Returns:
        Lowercase 0x-prefixed pair address
    """
    token0, token1 = sort_tokens(token_a, token_b)
    factory_addr = require_address(factory)
    salt = keccak256(
        encode_packed(["address", "address"], [address_bytes(token0), address_bytes(token1)])
    )
    digest = keccak256(b"\xff" + address_bytes(factory_addr) + salt + init_code_hash)
    return "0x" + digest[12:].hex()


def quote(amount_a: int, reserve_a: int, reserve_b: int) -> int:
    """Amount of B worth ``amount_a`` of A at the current reserve ratio (no fee).

    Raises:
        ZeroAmount: If amount_a is zero
        InsufficientLiquidity: If either reserve is zero
    """
    if amount_a <= 0:
        raise ZeroAmount(f"Quote amount must be positive: {amount_a}")
    if reserve_a <= 0 or reserve_b <= 0:
        raise InsufficientLiquidity(f"Empty reserves: ({reserve_a}, {reserve_b})")
    return (S(amount_a) * S(reserve_b) // S(reserve_a)).value


def get_amount_out(
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    fee_multiplier: int = DEFAULT_FEE_MULTIPLIER,
) -> int:
    """Calculate output amount using constant product formula.

    Formula: amount_out = (in * fee * res_out) / (res_in * 10000 + in * fee)

    With the default 9970 multiplier this is identical to the familiar
    (in * 997 * res_out) / (res_in * 1000 + in * 997).

    Args:
        amount_in: Input token amount
        reserve_in: Reserve of input token in pool
        reserve_out: Reserve of output token in pool
        fee_multiplier: 10000 - fee_bps (default 9970 for 0.3% fee)

    Returns:
        Output token amount (rounded down)

    Raises:
        InsufficientInputAmount: If amount_in is zero
        InsufficientLiquidity: If either reserve is zero
    """
    if amount_in <= 0:
        raise InsufficientInputAmount(f"Swap input must be positive: {amount_in}")
    if reserve_in <= 0 or reserve_out <= 0:
        raise InsufficientLiquidity(f"Empty reserves: ({reserve_in}, {reserve_out})")

    amount_in_with_fee = S(amount_in) * S(fee_multiplier)
    numerator = amount_in_with_fee * S(reserve_out)
    denominator = S(reserve_in) * S(BPS_DENOMINATOR) + amount_in_with_fee

    return (numerator // denominator).value


def get_amount_in(
    amount_out: int,
    reserve_in: int,
    reserve_out: int,
    fee_multiplier: int = DEFAULT_FEE_MULTIPLIER,
) -> int:
    """Calculate required input for desired output.

    Formula: amount_in = (res_in * out * 10000) / ((res_out - out) * fee) + 1

    The trailing +1 rounds up, so the returned input always satisfies the
    pair's fee-adjusted invariant check.

    Args:
        amount_out: Desired output token amount
        reserve_in: Reserve of input token in pool
        reserve_out: Reserve of output token in pool
        fee_multiplier: 10000 - fee_bps (default 9970 for 0.3% fee)

    Returns:
        Required input token amount

    Raises:
        InsufficientOutputAmount: If amount_out is zero
        InsufficientLiquidity: If a reserve is zero or amount_out >= reserve_out
    """
    if amount_out <= 0:
        raise InsufficientOutputAmount(f"Swap output must be positive: {amount_out}")
    if reserve_in <= 0 or reserve_out <= 0:
        raise InsufficientLiquidity(f"Empty reserves: ({reserve_in}, {reserve_out})")
    if amount_out >= reserve_out:
        raise InsufficientLiquidity(
            f"Requested {amount_out} but only {reserve_out} in reserve"
        )

    numerator = S(reserve_in) * S(amount_out) * S(BPS_DENOMINATOR)
    denominator = (S(reserve_out) - S(amount_out)) * S(fee_multiplier)

    return ((numerator // denominator) + S(1)).value


def get_reserves(factory: Factory, token_a: str, token_b: str) -> tuple[int, int]:
    """Fetch a pair's reserves ordered as (reserve_a, reserve_b).

    Raises:
        PairNotFound: If the factory has no pair for these assets
    """
    token0, _ = sort_tokens(token_a, token_b)
    pair = factory.pair_for(token_a, token_b)
    if pair is None:
        raise PairNotFound(f"No pair for {token_a}/{token_b}")
    reserve0, reserve1, _ = pair.get_reserves()
    if require_address(token_a) == token0:
        return reserve0, reserve1
    return reserve1, reserve0


def normalize_path(path: Sequence[str]) -> list[str]:
    """Validate and normalize a swap path.

    Raises:
        InvalidPath: If the path names fewer than two assets
    """
    if len(path) < 2:
        raise InvalidPath(f"Path needs at least two assets, got {len(path)}")
    return [require_address(token) for token in path]


def get_amounts_out(
    factory: Factory,
    amount_in: int,
    path: Sequence[str],
    fee_multiplier: int = DEFAULT_FEE_MULTIPLIER,
) -> list[int]:
    """Chain get_amount_out over every consecutive pair of the path.

    Returns:
        amounts[0] == amount_in, amounts[i + 1] is the output of hop i
    """
    tokens = normalize_path(path)
    amounts = [amount_in]
    for i in range(len(tokens) - 1):
        reserve_in, reserve_out = get_reserves(factory, tokens[i], tokens[i + 1])
        amounts.append(get_amount_out(amounts[i], reserve_in, reserve_out, fee_multiplier))
    return amounts


def get_amounts_in(
    factory: Factory,
    amount_out: int,
    path: Sequence[str],
    fee_multiplier: int = DEFAULT_FEE_MULTIPLIER,
) -> list[int]:
    """Chain get_amount_in backwards from the final output.

    Returns:
        amounts[-1] == amount_out, amounts[0] is the required input
    """
    tokens = normalize_path(path)
    amounts = [0] * len(tokens)
    amounts[-1] = amount_out
    for i in range(len(tokens) - 1, 0, -1):
        reserve_in, reserve_out = get_reserves(factory, tokens[i - 1], tokens[i])
        amounts[i - 1] = get_amount_in(amounts[i], reserve_in, reserve_out, fee_multiplier)
    return amounts


__all__ = [
    "keccak256",
    "sort_tokens",
    "pair_address_for",
    "quote",
    "get_amount_out",
    "get_amount_in",
    "get_reserves",
    "normalize_path",
    "get_amounts_out",
    "get_amounts_in",
]
