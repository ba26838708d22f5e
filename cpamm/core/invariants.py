"""Invariant checkers for committed pool state.

Each function returns True when the invariant holds, and `check_all()` returns
the list of violated invariant IDs (empty = all pass). The engine runs
`check_all()` on every post-state before committing it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from ..kernels.python.checked_math import U128_MAX
from ..state.pools import MAX_PROTOCOL_FEE_SHARE, PoolState


@dataclass(frozen=True)
class PoolSnapshot:
    """Pool record together with the ledger-derived values it is checked against."""

    pool: PoolState
    reserve_low: int
    reserve_high: int
    lp_supply: int


def inv_canonical_order(s: PoolSnapshot) -> bool:
    return s.pool.asset_low < s.pool.asset_high


def inv_supply_iff_reserves(s: PoolSnapshot) -> bool:
    if s.lp_supply > 0:
        return s.reserve_low > 0 and s.reserve_high > 0
    return True


def inv_reserves_imply_supply(s: PoolSnapshot) -> bool:
    if s.reserve_low > 0 and s.reserve_high > 0:
        return s.lp_supply > 0
    return True


def inv_protocol_fee_share_bounded(s: PoolSnapshot) -> bool:
    return 0 <= s.pool.protocol_fee_share <= MAX_PROTOCOL_FEE_SHARE


def inv_k_last_not_above_live_k(s: PoolSnapshot) -> bool:
    return s.pool.k_last <= s.reserve_low * s.reserve_high


def inv_cumulative_prices_u128(s: PoolSnapshot) -> bool:
    return (
        0 <= s.pool.price_low_cumulative <= U128_MAX
        and 0 <= s.pool.price_high_cumulative <= U128_MAX
    )


# ---------------------------------------------------------------------------
# Registry + check_all
# ---------------------------------------------------------------------------

INVARIANT_REGISTRY: dict[str, Callable[[PoolSnapshot], bool]] = {
    "inv_canonical_order": inv_canonical_order,
    "inv_supply_iff_reserves": inv_supply_iff_reserves,
    "inv_reserves_imply_supply": inv_reserves_imply_supply,
    "inv_protocol_fee_share_bounded": inv_protocol_fee_share_bounded,
    "inv_k_last_not_above_live_k": inv_k_last_not_above_live_k,
    "inv_cumulative_prices_u128": inv_cumulative_prices_u128,
}


def check_all(snapshot: PoolSnapshot) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(snapshot)
    ]
