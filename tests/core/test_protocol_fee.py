# [TESTER] v1

from __future__ import annotations

from typing import Tuple

from cpamm.core.clock import ManualClock
from cpamm.core.cpmm import SwapDirection
from cpamm.core.engine import PoolEngine
from cpamm.core.fees import settle_protocol_fee
from cpamm.state.balances import InMemoryLedger

A = "asset:A"
B = "asset:B"


def _run_scenario(share: int) -> Tuple[PoolEngine, InMemoryLedger, str]:
    """Seed a pool, grow k with swaps, then trigger settlement with a withdrawal."""
    ledger = InMemoryLedger()
    engine = PoolEngine(ledger, ManualClock(1_000))
    for who in ("alice", "bob"):
        ledger.mint(A, who, 10**12)
        ledger.mint(B, who, 10**12)
    key = engine.initialize("admin", A, B, 3, 1000).pool_key
    engine.update_config(key, "admin", new_recipient="treasury", new_share=share)

    engine.deposit(key, "alice", 1_000_000, 1_000_000)
    engine.swap(key, "bob", 100_000, SwapDirection.LOW_TO_HIGH)
    engine.swap(key, "bob", 100_000, SwapDirection.HIGH_TO_LOW)
    engine.withdraw(key, "alice", 1_000)
    return engine, ledger, key


def test_protocol_fee_minted_after_k_growth() -> None:
    engine, ledger, key = _run_scenario(share=500)
    pool = engine.get_pool(key)
    minted = ledger.balance("treasury", pool.lp_token)
    assert minted > 0
    assert engine.lp_supply(key) == 1_000_000 + minted - 1_000


def test_no_protocol_fee_at_share_zero() -> None:
    engine, ledger, key = _run_scenario(share=0)
    pool = engine.get_pool(key)
    assert ledger.balance("treasury", pool.lp_token) == 0
    assert engine.lp_supply(key) == 1_000_000 - 1_000


def test_higher_share_mints_more() -> None:
    engine_low, ledger_low, key = _run_scenario(share=100)
    _, ledger_high, _ = _run_scenario(share=500)
    lp_token = engine_low.get_pool(key).lp_token
    assert 0 < ledger_low.balance("treasury", lp_token) < ledger_high.balance("treasury", lp_token)


def test_settlement_resets_k_last_to_post_state() -> None:
    engine, _ledger, key = _run_scenario(share=500)
    pool = engine.get_pool(key)
    reserve_low, reserve_high = engine.reserves(key)
    assert pool.k_last == reserve_low * reserve_high
    # Nothing further is owed until k grows again.
    assert settle_protocol_fee(pool, reserve_low, reserve_high, engine.lp_supply(key)).minted == 0


def test_depositor_prices_against_diluted_supply() -> None:
    ledger = InMemoryLedger()
    engine = PoolEngine(ledger, ManualClock(1_000))
    for who in ("alice", "bob", "carol"):
        ledger.mint(A, who, 10**12)
        ledger.mint(B, who, 10**12)
    key = engine.initialize("admin", A, B, 3, 1000).pool_key
    engine.update_config(key, "admin", new_recipient="treasury", new_share=500)
    engine.deposit(key, "alice", 1_000_000, 1_000_000)
    engine.swap(key, "bob", 200_000, SwapDirection.LOW_TO_HIGH)

    pool = engine.get_pool(key)
    reserve_low, reserve_high = engine.reserves(key)
    supply = engine.lp_supply(key)
    fee = settle_protocol_fee(pool, reserve_low, reserve_high, supply)
    assert fee.minted > 0

    minted = engine.deposit(key, "carol", reserve_low, reserve_high)
    # Doubling the reserves doubles the post-settlement supply.
    assert minted == supply + fee.minted
    assert ledger.balance("treasury", pool.lp_token) == fee.minted
