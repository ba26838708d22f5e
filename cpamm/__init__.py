"""
cpamm: constant-product AMM pool engine.

Integer-only state transitions for a two-asset liquidity pool with a TWAP
oracle, deferred protocol-fee settlement and two-phase admin transfer.
"""

__version__ = "0.1.0"
