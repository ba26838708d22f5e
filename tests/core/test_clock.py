# [TESTER] v1

from __future__ import annotations

import pytest

from cpamm.core.clock import ManualClock, SystemClock


def test_manual_clock_moves_forward_only() -> None:
    clock = ManualClock(100)
    assert clock.now() == 100
    assert clock.advance(5) == 105
    clock.set(200)
    assert clock.now() == 200
    with pytest.raises(ValueError):
        clock.advance(-1)
    with pytest.raises(ValueError):
        clock.set(199)


def test_system_clock_returns_int_seconds() -> None:
    assert isinstance(SystemClock().now(), int)
