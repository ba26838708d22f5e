"""
Constant Product Market Maker (CPMM) swap planning.

This module wraps the swap kernel with pool-level concerns: direction,
slippage and the oracle update.

Algorithm Design:
- Type: Fixed-Point Integer Arithmetic / Deterministic Rounding
- Time Complexity: O(1) per swap operation
- Space Complexity: O(1) auxiliary
- Invariant: After each swap, x' * y' >= x * y (strictly when the fee is non-zero)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique

from ..errors import SlippageExceeded
from ..kernels.python.cpmm_swap import SwapExactInResult, swap_exact_in
from ..state.balances import Amount, AssetId
from ..state.pools import PoolState
from . import oracle


@unique
class SwapDirection(Enum):
    LOW_TO_HIGH = "low_to_high"
    HIGH_TO_LOW = "high_to_low"

    @property
    def low_to_high(self) -> bool:
        return self is SwapDirection.LOW_TO_HIGH


@dataclass(frozen=True)
class SwapPlan:
    pool: PoolState
    direction: SwapDirection
    asset_in: AssetId
    asset_out: AssetId
    amount_in: Amount
    amount_out: Amount
    fee_total: Amount
    k_before: int
    k_after: int


def quote_swap(
    pool: PoolState,
    *,
    reserve_low: Amount,
    reserve_high: Amount,
    amount_in: Amount,
    direction: SwapDirection,
) -> SwapExactInResult:
    """
    Price an exact-in swap against the given reserves.

        net_in = amount_in * (fee_den - fee_num) // fee_den
        amount_out = reserve_out * net_in // (reserve_in + net_in)
    """
    if direction.low_to_high:
        reserve_in, reserve_out = reserve_low, reserve_high
    else:
        reserve_in, reserve_out = reserve_high, reserve_low
    return swap_exact_in(
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        amount_in=amount_in,
        fee_numerator=pool.fee_numerator,
        fee_denominator=pool.fee_denominator,
    )


def plan_swap(
    pool: PoolState,
    *,
    reserve_low: Amount,
    reserve_high: Amount,
    amount_in: Amount,
    direction: SwapDirection,
    min_amount_out: Amount,
    now: int,
) -> SwapPlan:
    """
    Plan an exact-in swap.

    `k_last` is left alone. The gap between live k and `k_last`
    is what the next liquidity event settles as protocol fee.

    Raises:
        EmptyReserves: either reserve is zero
        SlippageExceeded: amount_out < min_amount_out
    """
    next_pool = oracle.update(pool, reserve_low, reserve_high, now)
    res = quote_swap(
        pool,
        reserve_low=reserve_low,
        reserve_high=reserve_high,
        amount_in=amount_in,
        direction=direction,
    )
    if res.amount_out < min_amount_out:
        raise SlippageExceeded(f"amount_out ({res.amount_out}) < min_amount_out ({min_amount_out})")
    if res.k_after < res.k_before:
        raise AssertionError(f"Invariant violation: new_k ({res.k_after}) < old_k ({res.k_before})")

    asset_in, asset_out = pool.reserve_assets(direction.low_to_high)
    return SwapPlan(
        pool=next_pool,
        direction=direction,
        asset_in=asset_in,
        asset_out=asset_out,
        amount_in=amount_in,
        amount_out=res.amount_out,
        fee_total=res.fee_total,
        k_before=res.k_before,
        k_after=res.k_after,
    )
