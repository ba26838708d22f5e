"""Admin configuration and two-phase admin transfer.

    {admin=A, pending=None} --update_config(new_admin=B)--> {admin=A, pending=B}
    {admin=A, pending=B}    --claim_admin signed by B-->    {admin=B, pending=None}

Nominating never changes `admin`; only the nominee's own signature completes
the handover. Fee recipient and fee share take effect immediately.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from ..errors import InvalidFeeConfig, NoPendingClaim, Unauthorized
from ..state.balances import Identity
from ..state.pools import MAX_PROTOCOL_FEE_SHARE, PoolState


def update_config(
    pool: PoolState,
    signer: Identity,
    *,
    new_admin: Optional[Identity] = None,
    new_recipient: Optional[Identity] = None,
    new_share: Optional[int] = None,
) -> PoolState:
    """Apply any subset of the three admin-controlled fields.

    All fields are validated before any is applied.

    Raises:
        Unauthorized: signer is not the current admin
        InvalidFeeConfig: new_share outside [0, 500]
    """
    if signer != pool.admin:
        raise Unauthorized(f"{signer} is not the pool admin")
    if new_share is not None:
        if not isinstance(new_share, int) or isinstance(new_share, bool):
            raise InvalidFeeConfig(f"protocol fee share must be an int: {new_share!r}")
        if not (0 <= new_share <= MAX_PROTOCOL_FEE_SHARE):
            raise InvalidFeeConfig(
                f"protocol fee share must be in [0, {MAX_PROTOCOL_FEE_SHARE}]: {new_share}"
            )

    changes: dict[str, object] = {}
    if new_admin is not None:
        changes["pending_admin"] = new_admin
    if new_recipient is not None:
        changes["protocol_fee_recipient"] = new_recipient
    if new_share is not None:
        changes["protocol_fee_share"] = new_share
    return replace(pool, **changes) if changes else pool


def claim_admin(pool: PoolState, signer: Identity) -> PoolState:
    """Complete a pending admin transfer.

    Raises:
        NoPendingClaim: no nomination is pending
        Unauthorized: signer is not the nominee
    """
    if pool.pending_admin is None:
        raise NoPendingClaim("no admin transfer is pending")
    if signer != pool.pending_admin:
        raise Unauthorized(f"{signer} is not the pending admin")
    return replace(pool, admin=pool.pending_admin, pending_admin=None)
