"""
Liquidity math kernel.

Pure functions with explicit floor rounding for:
- the first deposit (geometric mean minus the permanent lock),
- proportional deposits against an existing supply,
- proportional withdrawals,
- the protocol's share of invariant growth ("fee-on-mint").
"""

from __future__ import annotations

from dataclasses import dataclass

from ...errors import InsufficientInitialLiquidity, InsufficientLiquidityMinted
from .checked_math import (
    U64_MAX,
    U256_MAX,
    checked_add,
    checked_div,
    checked_mul,
    isqrt_u128,
    require_u64,
    require_u128,
)


MINIMUM_LIQUIDITY = 1000
PROTOCOL_FEE_SCALE = 1000


@dataclass(frozen=True)
class InitialMintResult:
    liquidity_minted: int
    liquidity_locked: int
    new_total_supply: int


@dataclass(frozen=True)
class BurnLiquidityResult:
    amount_low_out: int
    amount_high_out: int


def mint_liquidity_initial(
    *, amount_low: int, amount_high: int, min_lp_lock: int = MINIMUM_LIQUIDITY
) -> InitialMintResult:
    """
    Initial liquidity mint.

        minted = floor(sqrt(amount_low * amount_high)) - min_lp_lock

    The lock is minted to an unreachable holder so the share price can never
    be inflated from a near-zero supply.
    """
    require_u64("amount_low", amount_low)
    require_u64("amount_high", amount_high)
    require_u64("min_lp_lock", min_lp_lock)

    sqrt_product = isqrt_u128(checked_mul(amount_low, amount_high))
    if sqrt_product <= min_lp_lock:
        raise InsufficientInitialLiquidity(
            f"sqrt(amount_low*amount_high)={sqrt_product} must exceed the {min_lp_lock} lock"
        )
    return InitialMintResult(
        liquidity_minted=sqrt_product - min_lp_lock,
        liquidity_locked=min_lp_lock,
        new_total_supply=sqrt_product,
    )


def mint_liquidity(
    *,
    reserve_low: int,
    reserve_high: int,
    total_supply: int,
    amount_low: int,
    amount_high: int,
) -> int:
    """
    Proportional mint against an existing supply.

        minted = min(amount_low * S // reserve_low, amount_high * S // reserve_high)

    Any excess of one asset over the pool ratio is donated to existing holders.
    """
    for name, v in (
        ("reserve_low", reserve_low),
        ("reserve_high", reserve_high),
        ("total_supply", total_supply),
        ("amount_low", amount_low),
        ("amount_high", amount_high),
    ):
        require_u64(name, v)
    if total_supply == 0:
        raise ValueError("proportional mint requires a non-zero supply")

    liquidity_low = checked_div(checked_mul(amount_low, total_supply), reserve_low)
    liquidity_high = checked_div(checked_mul(amount_high, total_supply), reserve_high)
    minted = min(liquidity_low, liquidity_high)
    if minted == 0:
        raise InsufficientLiquidityMinted("deposit too small to mint any LP shares")
    checked_add(total_supply, minted, limit=U64_MAX)
    return minted


def burn_liquidity(
    *,
    lp_amount: int,
    reserve_low: int,
    reserve_high: int,
    total_supply: int,
) -> BurnLiquidityResult:
    for name, v in (
        ("lp_amount", lp_amount),
        ("reserve_low", reserve_low),
        ("reserve_high", reserve_high),
        ("total_supply", total_supply),
    ):
        require_u64(name, v)
    if lp_amount > total_supply:
        raise ValueError(f"cannot burn more LP than supply: {lp_amount} > {total_supply}")

    return BurnLiquidityResult(
        amount_low_out=checked_div(checked_mul(lp_amount, reserve_low), total_supply),
        amount_high_out=checked_div(checked_mul(lp_amount, reserve_high), total_supply),
    )


def protocol_fee_liquidity(
    *,
    reserve_low: int,
    reserve_high: int,
    k_last: int,
    total_supply: int,
    protocol_fee_share: int,
) -> int:
    """
    LP shares owed to the protocol for invariant growth since `k_last`.

    With phi = protocol_fee_share / 1000, minting

        S * (rk - rk_last) * phi / ((1 - phi) * rk + phi * rk_last)

    gives the protocol exactly phi of the growth in sqrt(k) after dilution.
    In integers:

        S * (rk - rk_last) * share // ((1000 - share) * rk + share * rk_last)

    For share = 1000/6 this is Uniswap v2's S*(rk - rk_last) / (5*rk + rk_last).
    """
    for name, v in (
        ("reserve_low", reserve_low),
        ("reserve_high", reserve_high),
        ("total_supply", total_supply),
        ("protocol_fee_share", protocol_fee_share),
    ):
        require_u64(name, v)
    require_u128("k_last", k_last)
    if protocol_fee_share > PROTOCOL_FEE_SCALE:
        raise ValueError(f"protocol_fee_share must be <= {PROTOCOL_FEE_SCALE}: {protocol_fee_share}")

    if protocol_fee_share == 0 or k_last == 0 or total_supply == 0:
        return 0

    root_k = isqrt_u128(checked_mul(reserve_low, reserve_high))
    root_k_last = isqrt_u128(k_last)
    if root_k <= root_k_last:
        return 0

    numerator = checked_mul(
        checked_mul(total_supply, root_k - root_k_last), protocol_fee_share, limit=U256_MAX
    )
    denominator = checked_add(
        checked_mul(PROTOCOL_FEE_SCALE - protocol_fee_share, root_k),
        checked_mul(protocol_fee_share, root_k_last),
    )
    minted = checked_div(numerator, denominator)
    checked_add(total_supply, minted, limit=U64_MAX)
    return minted
