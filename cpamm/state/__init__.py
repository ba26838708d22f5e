"""
State management for cpamm pools
"""

from .balances import BURN_ADDRESS, BalanceTable, InMemoryLedger, TokenLedger
from .nonces import NonceTable
from .pools import PoolState, PoolStore, canonical_pair, compute_pool_key

__all__ = [
    "BURN_ADDRESS",
    "BalanceTable",
    "InMemoryLedger",
    "TokenLedger",
    "NonceTable",
    "PoolState",
    "PoolStore",
    "canonical_pair",
    "compute_pool_key",
]
