"""
Deferred protocol-fee settlement ("fee-on-mint").

Swaps leave their fee inside the pool, so k grows between liquidity events
while `k_last` stays put. At the next deposit or withdrawal the protocol's
share of that growth is minted as new LP shares, diluting existing holders.

The settlement runs before the caller's own share is computed and against the
pre-instruction reserves. A depositor therefore prices their shares against
the already-diluted supply and cannot claim fees earned before they joined.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..kernels.python.lp_math import protocol_fee_liquidity
from ..state.balances import Identity
from ..state.pools import PoolState


@dataclass(frozen=True)
class ProtocolFeeSettlement:
    minted: int
    recipient: Optional[Identity]
    total_supply_after: int


def settle_protocol_fee(
    pool: PoolState,
    reserve_low: int,
    reserve_high: int,
    total_supply: int,
) -> ProtocolFeeSettlement:
    """Compute (but do not apply) the protocol's LP mint for this instruction."""
    if pool.protocol_fee_share == 0 or pool.protocol_fee_recipient is None or pool.k_last == 0:
        return ProtocolFeeSettlement(minted=0, recipient=None, total_supply_after=total_supply)

    minted = protocol_fee_liquidity(
        reserve_low=reserve_low,
        reserve_high=reserve_high,
        k_last=pool.k_last,
        total_supply=total_supply,
        protocol_fee_share=pool.protocol_fee_share,
    )
    return ProtocolFeeSettlement(
        minted=minted,
        recipient=pool.protocol_fee_recipient if minted > 0 else None,
        total_supply_after=total_supply + minted,
    )
