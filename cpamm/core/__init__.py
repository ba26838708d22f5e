"""Pool engine: pure planners plus the `PoolEngine` state machine."""

from .clock import Clock, ManualClock, SystemClock
from .cpmm import SwapDirection
from .engine import PoolEngine

__all__ = ["Clock", "ManualClock", "PoolEngine", "SwapDirection", "SystemClock"]
