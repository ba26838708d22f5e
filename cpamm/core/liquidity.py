"""
Liquidity management: deposit and withdraw planning.

Each planner is pure. It takes the committed pool record, the live reserves
and LP supply, and returns the next pool record plus every ledger effect the
engine must apply. Nothing is mutated here, so any error leaves the pool
untouched.

Step order for both operations:
1. settle the protocol fee against pre-instruction reserves,
2. advance the oracle with pre-instruction reserves,
3. size the caller's share against the post-settlement supply,
4. record k_last from post-instruction reserves.
"""

from dataclasses import dataclass, replace

from ..errors import SlippageExceeded
from ..kernels.python.checked_math import U64_MAX, checked_add, checked_mul, checked_sub
from ..kernels.python.lp_math import (
    MINIMUM_LIQUIDITY,
    burn_liquidity,
    mint_liquidity,
    mint_liquidity_initial,
)
from ..state.balances import Amount
from ..state.pools import PoolState
from . import oracle
from .fees import ProtocolFeeSettlement, settle_protocol_fee


@dataclass(frozen=True)
class DepositPlan:
    pool: PoolState
    protocol_fee: ProtocolFeeSettlement
    amount_low: Amount
    amount_high: Amount
    liquidity_minted: Amount
    liquidity_locked: Amount
    reserve_low_after: Amount
    reserve_high_after: Amount
    total_supply_after: Amount


@dataclass(frozen=True)
class WithdrawPlan:
    pool: PoolState
    protocol_fee: ProtocolFeeSettlement
    lp_amount: Amount
    amount_low_out: Amount
    amount_high_out: Amount
    reserve_low_after: Amount
    reserve_high_after: Amount
    total_supply_after: Amount


def plan_deposit(
    pool: PoolState,
    *,
    reserve_low: Amount,
    reserve_high: Amount,
    total_supply: Amount,
    amount_low: Amount,
    amount_high: Amount,
    now: int,
    min_lp_lock: int = MINIMUM_LIQUIDITY,
) -> DepositPlan:
    """
    Plan a deposit of (amount_low, amount_high).

    For the first deposit (post-settlement supply == 0):
        minted = floor(sqrt(amount_low * amount_high)) - min_lp_lock
        and min_lp_lock shares go to the burn address.

    Otherwise:
        minted = min(amount_low * S // reserve_low, amount_high * S // reserve_high)

    Raises:
        InsufficientInitialLiquidity: first deposit does not clear the lock
        InsufficientLiquidityMinted: proportional deposit rounds to zero
        MathOverflow: reserves or supply would leave u64
    """
    fee = settle_protocol_fee(pool, reserve_low, reserve_high, total_supply)
    next_pool = oracle.update(pool, reserve_low, reserve_high, now)

    supply = fee.total_supply_after
    if supply == 0:
        initial = mint_liquidity_initial(
            amount_low=amount_low, amount_high=amount_high, min_lp_lock=min_lp_lock
        )
        minted = initial.liquidity_minted
        locked = initial.liquidity_locked
    else:
        minted = mint_liquidity(
            reserve_low=reserve_low,
            reserve_high=reserve_high,
            total_supply=supply,
            amount_low=amount_low,
            amount_high=amount_high,
        )
        locked = 0

    reserve_low_after = checked_add(reserve_low, amount_low, limit=U64_MAX)
    reserve_high_after = checked_add(reserve_high, amount_high, limit=U64_MAX)
    total_supply_after = checked_add(supply, minted + locked, limit=U64_MAX)

    next_pool = replace(next_pool, k_last=checked_mul(reserve_low_after, reserve_high_after))
    return DepositPlan(
        pool=next_pool,
        protocol_fee=fee,
        amount_low=amount_low,
        amount_high=amount_high,
        liquidity_minted=minted,
        liquidity_locked=locked,
        reserve_low_after=reserve_low_after,
        reserve_high_after=reserve_high_after,
        total_supply_after=total_supply_after,
    )


def plan_withdraw(
    pool: PoolState,
    *,
    reserve_low: Amount,
    reserve_high: Amount,
    total_supply: Amount,
    lp_amount: Amount,
    min_low: Amount,
    min_high: Amount,
    now: int,
) -> WithdrawPlan:
    """
    Plan burning `lp_amount` shares for a pro-rata slice of both reserves.

        amount_x = lp_amount * reserve_x // S   (S = post-settlement supply)

    Raises:
        SlippageExceeded: either output is below its minimum
    """
    fee = settle_protocol_fee(pool, reserve_low, reserve_high, total_supply)
    next_pool = oracle.update(pool, reserve_low, reserve_high, now)

    supply = fee.total_supply_after
    out = burn_liquidity(
        lp_amount=lp_amount,
        reserve_low=reserve_low,
        reserve_high=reserve_high,
        total_supply=supply,
    )
    if out.amount_low_out < min_low or out.amount_high_out < min_high:
        raise SlippageExceeded(
            f"withdraw outputs ({out.amount_low_out}, {out.amount_high_out}) "
            f"below minimums ({min_low}, {min_high})"
        )

    reserve_low_after = checked_sub(reserve_low, out.amount_low_out)
    reserve_high_after = checked_sub(reserve_high, out.amount_high_out)
    next_pool = replace(next_pool, k_last=checked_mul(reserve_low_after, reserve_high_after))
    return WithdrawPlan(
        pool=next_pool,
        protocol_fee=fee,
        lp_amount=lp_amount,
        amount_low_out=out.amount_low_out,
        amount_high_out=out.amount_high_out,
        reserve_low_after=reserve_low_after,
        reserve_high_after=reserve_high_after,
        total_supply_after=supply - lp_amount,
    )
