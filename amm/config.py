"""Configuration for an AMM deployment."""

import os
from dataclasses import dataclass

from amm.constants import (
    MINIMUM_LIQUIDITY,
    PAIR_INIT_CODE_HASH,
    PROTOCOL_FEE_DIVISOR,
    SWAP_FEE_BPS,
)


@dataclass(frozen=True)
class AMMConfig:
    """Centralized configuration for pool math.

    One instance is shared by a factory, every pair it creates and the
    router built on top of it, so swap checks inside a pair and quotes
    in the router always use the same fee.

    Attributes:
        fee_bps: Swap fee in basis points (default: 30, i.e. 0.3%)
        minimum_liquidity: Shares permanently locked by the first deposit
        protocol_fee_divisor: Protocol fee is 1/(divisor + 1) of fee growth
        init_code_hash: Fixed salt input for deterministic pair addresses
    """

    fee_bps: int = SWAP_FEE_BPS
    minimum_liquidity: int = MINIMUM_LIQUIDITY
    protocol_fee_divisor: int = PROTOCOL_FEE_DIVISOR
    init_code_hash: bytes = PAIR_INIT_CODE_HASH

    def __post_init__(self) -> None:
        if not 0 <= self.fee_bps < 10_000:
            raise ValueError(f"fee_bps must be in [0, 10000), got {self.fee_bps}")
        if self.minimum_liquidity < 0:
            raise ValueError(f"minimum_liquidity cannot be negative: {self.minimum_liquidity}")
        if self.protocol_fee_divisor <= 0:
            raise ValueError(
                f"protocol_fee_divisor must be positive, got {self.protocol_fee_divisor}"
            )
        if len(self.init_code_hash) != 32:
            raise ValueError("init_code_hash must be 32 bytes")

    @property
    def fee_multiplier(self) -> int:
        """Fee multiplier for AMM math (10000 - fee_bps).

        For 30 bps (0.3%), this returns 9970.
        """
        return 10_000 - self.fee_bps

    @classmethod
    def from_env(cls) -> "AMMConfig":
        """Build a config from AMM_FEE_BPS / AMM_MINIMUM_LIQUIDITY environment variables."""
        return cls(
            fee_bps=int(os.environ.get("AMM_FEE_BPS", str(SWAP_FEE_BPS))),
            minimum_liquidity=int(
                os.environ.get("AMM_MINIMUM_LIQUIDITY", str(MINIMUM_LIQUIDITY))
            ),
        )


# Default configuration instance
DEFAULT_CONFIG = AMMConfig()
