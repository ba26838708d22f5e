"""
Cumulative-price (TWAP) oracle.

The pool keeps two Q64.64 accumulators that grow by `price * elapsed_seconds`
at the start of every reserve-mutating instruction, using the reserves as
they were *before* the instruction. Consumers sample the accumulators at two
times and divide the difference by the elapsed time.

Accumulators wrap modulo 2**128; differences are taken modulo 2**128 too, so
a wrap between two samples is harmless.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from fractions import Fraction
from typing import Tuple

from ..kernels.python.checked_math import Q64, U128_MAX, require_u64, wrapping_add_u128
from ..state.pools import PoolState


@dataclass(frozen=True)
class PriceObservation:
    """Snapshot of both accumulators at a point in time."""

    timestamp: int
    price_low_cumulative: int
    price_high_cumulative: int


def spot_prices_q64(reserve_low: int, reserve_high: int) -> Tuple[int, int]:
    """
    Instantaneous prices as Q64.64.

    price_low is asset_low priced in asset_high; price_high is the inverse.
    """
    if reserve_low == 0 or reserve_high == 0:
        raise ValueError("spot price undefined for an empty reserve")
    price_low = (reserve_high << 64) // reserve_low
    price_high = (reserve_low << 64) // reserve_high
    return price_low, price_high


def _accumulate(
    price_low_cumulative: int,
    price_high_cumulative: int,
    reserve_low: int,
    reserve_high: int,
    elapsed: int,
) -> Tuple[int, int]:
    if elapsed <= 0 or reserve_low == 0 or reserve_high == 0:
        return price_low_cumulative, price_high_cumulative
    price_low, price_high = spot_prices_q64(reserve_low, reserve_high)
    return (
        wrapping_add_u128(price_low_cumulative, price_low * elapsed),
        wrapping_add_u128(price_high_cumulative, price_high * elapsed),
    )


def update(pool: PoolState, reserve_low: int, reserve_high: int, now: int) -> PoolState:
    """
    Advance the accumulators to `now` using pre-mutation reserves.

    The timestamp always moves to `now`, even when nothing accumulates
    (empty reserves or zero elapsed time). A clock reading earlier than the
    last update accumulates nothing.
    """
    require_u64("reserve_low", reserve_low)
    require_u64("reserve_high", reserve_high)
    require_u64("now", now)

    elapsed = max(now - pool.block_timestamp_last, 0)
    low_cum, high_cum = _accumulate(
        pool.price_low_cumulative,
        pool.price_high_cumulative,
        reserve_low,
        reserve_high,
        elapsed,
    )
    return replace(
        pool,
        price_low_cumulative=low_cum,
        price_high_cumulative=high_cum,
        block_timestamp_last=now,
    )


def observe(pool: PoolState, reserve_low: int, reserve_high: int, now: int) -> PriceObservation:
    """
    Accumulator values as of `now` without mutating the pool.

    Extends the stored accumulators by the time since the last update at the
    current spot price, which is what the next instruction would record.
    """
    elapsed = max(now - pool.block_timestamp_last, 0)
    low_cum, high_cum = _accumulate(
        pool.price_low_cumulative,
        pool.price_high_cumulative,
        reserve_low,
        reserve_high,
        elapsed,
    )
    return PriceObservation(
        timestamp=max(now, pool.block_timestamp_last),
        price_low_cumulative=low_cum,
        price_high_cumulative=high_cum,
    )


def twap(start: PriceObservation, end: PriceObservation) -> Tuple[int, int]:
    """
    Time-weighted average prices (Q64.64) between two observations.

    Returns (avg_price_low, avg_price_high).
    """
    interval = end.timestamp - start.timestamp
    if interval <= 0:
        raise ValueError(f"observations must be strictly increasing in time: {start.timestamp} -> {end.timestamp}")
    low_delta = (end.price_low_cumulative - start.price_low_cumulative) & U128_MAX
    high_delta = (end.price_high_cumulative - start.price_high_cumulative) & U128_MAX
    return low_delta // interval, high_delta // interval


def q64_to_fraction(value: int) -> Fraction:
    """Exact rational value of a Q64.64 number."""
    return Fraction(value, Q64)
