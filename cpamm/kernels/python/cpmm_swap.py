"""
CPMM swap kernel with an input-side fractional fee.

Semantics:
- `net_in = floor(amount_in * (fee_denominator - fee_numerator) / fee_denominator)`.
- `amount_out = floor(reserve_out * net_in / (reserve_in + net_in))`.
- The *gross* `amount_in` enters the pool, so the retained fee strictly grows k
  whenever the fee is non-zero and `amount_in > 0`.

All intermediates are u128-checked; amounts and reserves are u64.
"""

from __future__ import annotations

from dataclasses import dataclass

from ...errors import EmptyReserves, InvalidFee
from .checked_math import (
    U64_MAX,
    checked_add,
    checked_div,
    checked_mul,
    checked_sub,
    require_u64,
)


@dataclass(frozen=True)
class SwapExactInResult:
    amount_out: int
    net_in: int
    fee_total: int
    gross_in: int
    new_reserve_in: int
    new_reserve_out: int
    k_before: int
    k_after: int


def validate_fee_rate(fee_numerator: int, fee_denominator: int) -> None:
    for name, value in (("fee_numerator", fee_numerator), ("fee_denominator", fee_denominator)):
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(f"{name} must be an int")
        if not 0 <= value <= U64_MAX:
            raise InvalidFee(f"{name} out of u64 range: {value}")
    if fee_denominator == 0 or fee_numerator >= fee_denominator:
        raise InvalidFee(f"fee must satisfy 0 <= numerator < denominator: {fee_numerator}/{fee_denominator}")


def amount_after_fee(amount_in: int, fee_numerator: int, fee_denominator: int) -> int:
    """Input amount that participates in pricing, rounded down."""
    keep = checked_sub(fee_denominator, fee_numerator)
    return checked_div(checked_mul(amount_in, keep), fee_denominator)


def swap_exact_in(
    *,
    reserve_in: int,
    reserve_out: int,
    amount_in: int,
    fee_numerator: int,
    fee_denominator: int,
) -> SwapExactInResult:
    """
    Exact-in swap quote + post-state.

    Raises `EmptyReserves` if either side is empty and `MathOverflow` if the
    post-swap input reserve leaves u64.
    """
    for name, v in (
        ("reserve_in", reserve_in),
        ("reserve_out", reserve_out),
        ("amount_in", amount_in),
    ):
        require_u64(name, v)
    validate_fee_rate(fee_numerator, fee_denominator)

    if reserve_in == 0 or reserve_out == 0:
        raise EmptyReserves("cannot swap against an empty reserve")

    k_before = checked_mul(reserve_in, reserve_out)

    net_in = amount_after_fee(amount_in, fee_numerator, fee_denominator)
    fee_total = amount_in - net_in

    denominator = checked_add(reserve_in, net_in)
    amount_out = checked_div(checked_mul(reserve_out, net_in), denominator)
    if amount_out >= reserve_out:
        raise AssertionError("amount_out must stay below reserve_out")

    new_reserve_in = checked_add(reserve_in, amount_in, limit=U64_MAX)
    new_reserve_out = reserve_out - amount_out
    k_after = checked_mul(new_reserve_in, new_reserve_out)

    return SwapExactInResult(
        amount_out=amount_out,
        net_in=net_in,
        fee_total=fee_total,
        gross_in=amount_in,
        new_reserve_in=new_reserve_in,
        new_reserve_out=new_reserve_out,
        k_before=k_before,
        k_after=k_after,
    )
