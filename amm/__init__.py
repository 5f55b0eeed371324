"""Constant-product AMM: pair factory, liquidity pairs and swap router."""

from amm.config import AMMConfig
from amm.exchange import Exchange
from amm.factory import Factory
from amm.ledger import InMemoryLedger, TokenLedger
from amm.pair import Pair
from amm.router import Router
from amm.state import StateStore

__version__ = "0.1.0"
__all__ = [
    "AMMConfig",
    "Exchange",
    "Factory",
    "InMemoryLedger",
    "Pair",
    "Router",
    "StateStore",
    "TokenLedger",
    "__version__",
]
