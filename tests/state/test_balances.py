# [TESTER] v1

from __future__ import annotations

import pytest

from cpamm.errors import InsufficientFunds, InvalidAmount, MathOverflow
from cpamm.kernels.python.checked_math import U64_MAX
from cpamm.state.balances import BalanceTable, InMemoryLedger


def test_balance_table_is_sparse() -> None:
    table = BalanceTable()
    table.set("alice", "A", 5)
    table.add("alice", "A", -5)
    assert table.get("alice", "A") == 0
    assert table.get_all_balances() == {}


def test_balance_table_rejects_negative_and_u64_overflow() -> None:
    table = BalanceTable()
    with pytest.raises(InsufficientFunds):
        table.add("alice", "A", -1)
    table.set("alice", "A", U64_MAX)
    with pytest.raises(MathOverflow):
        table.add("alice", "A", 1)


def test_ledger_mint_transfer_burn_track_supply() -> None:
    ledger = InMemoryLedger()
    ledger.mint("A", "alice", 100)
    ledger.transfer("A", "alice", "bob", 30)
    ledger.burn("A", "bob", 10)
    assert ledger.balance("alice", "A") == 70
    assert ledger.balance("bob", "A") == 20
    assert ledger.supply("A") == 90


def test_ledger_transfer_requires_funds() -> None:
    ledger = InMemoryLedger()
    ledger.mint("A", "alice", 10)
    with pytest.raises(InsufficientFunds):
        ledger.transfer("A", "alice", "bob", 11)
    assert ledger.balance("alice", "A") == 10
    assert ledger.balance("bob", "A") == 0


def test_ledger_rejects_invalid_amounts() -> None:
    ledger = InMemoryLedger()
    with pytest.raises(InvalidAmount):
        ledger.mint("A", "alice", -1)
    with pytest.raises(InvalidAmount):
        ledger.mint("A", "alice", True)
    ledger.mint("A", "alice", U64_MAX)
    with pytest.raises(MathOverflow):
        ledger.mint("A", "bob", 1)


def test_atomic_rolls_back_balances_and_supply() -> None:
    ledger = InMemoryLedger()
    ledger.mint("A", "alice", 100)
    with pytest.raises(RuntimeError):
        with ledger.atomic():
            ledger.transfer("A", "alice", "bob", 40)
            ledger.mint("B", "bob", 7)
            raise RuntimeError("boom")
    assert ledger.balance("alice", "A") == 100
    assert ledger.balance("bob", "A") == 0
    assert ledger.balance("bob", "B") == 0
    assert ledger.supply("B") == 0


def test_atomic_keeps_effects_on_success() -> None:
    ledger = InMemoryLedger()
    ledger.mint("A", "alice", 100)
    with ledger.atomic():
        ledger.transfer("A", "alice", "bob", 40)
    assert ledger.balance("bob", "A") == 40
