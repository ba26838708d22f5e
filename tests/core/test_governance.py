# [TESTER] v1

from __future__ import annotations

import pytest

from cpamm.core import governance
from cpamm.errors import InvalidFeeConfig, NoPendingClaim, Unauthorized
from cpamm.state.pools import PoolState, compute_pool_key, lp_token_for, vault_authority_for


def _mk_pool() -> PoolState:
    key = compute_pool_key("asset:A", "asset:B")
    return PoolState(
        pool_key=key,
        asset_low="asset:A",
        asset_high="asset:B",
        lp_token=lp_token_for(key),
        vault_authority=vault_authority_for(key),
        admin="admin",
        fee_numerator=3,
        fee_denominator=1000,
        block_timestamp_last=0,
        protocol_fee_recipient="admin",
    )


def test_share_bounds_500_accepted_501_rejected() -> None:
    pool = _mk_pool()
    assert governance.update_config(pool, "admin", new_share=500).protocol_fee_share == 500
    with pytest.raises(InvalidFeeConfig):
        governance.update_config(pool, "admin", new_share=501)
    with pytest.raises(InvalidFeeConfig):
        governance.update_config(pool, "admin", new_share=-1)


def test_non_admin_cannot_update() -> None:
    pool = _mk_pool()
    with pytest.raises(Unauthorized):
        governance.update_config(pool, "mallory", new_share=100, new_recipient="mallory")


def test_update_validates_everything_before_applying() -> None:
    pool = _mk_pool()
    with pytest.raises(InvalidFeeConfig):
        governance.update_config(pool, "admin", new_recipient="treasury", new_share=501)
    assert pool.protocol_fee_recipient == "admin"


def test_no_fields_is_a_no_op() -> None:
    pool = _mk_pool()
    assert governance.update_config(pool, "admin") == pool


def test_two_phase_admin_transfer() -> None:
    pool = _mk_pool()
    nominated = governance.update_config(pool, "admin", new_admin="bob")
    assert nominated.admin == "admin"
    assert nominated.pending_admin == "bob"

    with pytest.raises(Unauthorized):
        governance.claim_admin(nominated, "mallory")
    with pytest.raises(Unauthorized):
        governance.claim_admin(nominated, "admin")

    claimed = governance.claim_admin(nominated, "bob")
    assert claimed.admin == "bob"
    assert claimed.pending_admin is None

    # The old admin lost its rights.
    with pytest.raises(Unauthorized):
        governance.update_config(claimed, "admin", new_share=1)


def test_claim_without_nomination() -> None:
    with pytest.raises(NoPendingClaim):
        governance.claim_admin(_mk_pool(), "bob")
