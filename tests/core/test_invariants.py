# [TESTER] v1

from __future__ import annotations

from dataclasses import replace

from cpamm.core.invariants import INVARIANT_REGISTRY, PoolSnapshot, check_all
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
    )


def test_fresh_and_funded_pools_pass() -> None:
    pool = _mk_pool()
    assert check_all(PoolSnapshot(pool=pool, reserve_low=0, reserve_high=0, lp_supply=0)) == []
    funded = replace(pool, k_last=100)
    assert check_all(PoolSnapshot(pool=funded, reserve_low=10, reserve_high=10, lp_supply=10)) == []


def test_supply_without_reserves_is_flagged() -> None:
    snap = PoolSnapshot(pool=_mk_pool(), reserve_low=0, reserve_high=10, lp_supply=5)
    assert check_all(snap) == ["inv_supply_iff_reserves"]


def test_reserves_without_supply_is_flagged() -> None:
    snap = PoolSnapshot(pool=_mk_pool(), reserve_low=10, reserve_high=10, lp_supply=0)
    assert check_all(snap) == ["inv_reserves_imply_supply"]


def test_k_last_above_live_k_is_flagged() -> None:
    pool = replace(_mk_pool(), k_last=101)
    snap = PoolSnapshot(pool=pool, reserve_low=10, reserve_high=10, lp_supply=10)
    assert check_all(snap) == ["inv_k_last_not_above_live_k"]


def test_registry_covers_every_check() -> None:
    assert set(INVARIANT_REGISTRY) == {
        "inv_canonical_order",
        "inv_supply_iff_reserves",
        "inv_reserves_imply_supply",
        "inv_protocol_fee_share_bounded",
        "inv_k_last_not_above_live_k",
        "inv_cumulative_prices_u128",
    }
