"""
Checked integer arithmetic for fixed-width ledger values.

Python ints are unbounded, so width limits are enforced explicitly:
- token amounts and LP supply are u64,
- products, k and Q64.64 prices are u128.

Every checked helper raises `MathOverflow` when a result leaves its width. The
only wrapping operation is `wrapping_add_u128`, used for oracle accumulators.
"""

from __future__ import annotations

import math

from ...errors import MathOverflow


U64_MAX = (1 << 64) - 1
U128_MAX = (1 << 128) - 1
U256_MAX = (1 << 256) - 1
Q64 = 1 << 64


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def require_u64(name: str, value: int) -> int:
    _require_int(name, value)
    if value < 0 or value > U64_MAX:
        raise MathOverflow(f"{name} out of u64 range: {value}")
    return value


def require_u128(name: str, value: int) -> int:
    _require_int(name, value)
    if value < 0 or value > U128_MAX:
        raise MathOverflow(f"{name} out of u128 range: {value}")
    return value


def checked_add(a: int, b: int, *, limit: int = U128_MAX) -> int:
    out = a + b
    if out < 0 or out > limit:
        raise MathOverflow(f"add overflow: {a} + {b}")
    return out


def checked_sub(a: int, b: int) -> int:
    out = a - b
    if out < 0:
        raise MathOverflow(f"sub underflow: {a} - {b}")
    return out


def checked_mul(a: int, b: int, *, limit: int = U128_MAX) -> int:
    out = a * b
    if out < 0 or out > limit:
        raise MathOverflow(f"mul overflow: {a} * {b}")
    return out


def checked_div(a: int, b: int) -> int:
    """Floor division; a zero divisor is reported as overflow."""
    if b == 0:
        raise MathOverflow("division by zero")
    if a < 0 or b < 0:
        raise MathOverflow(f"signed division: {a} / {b}")
    return a // b


def isqrt_u128(n: int) -> int:
    """floor(sqrt(n)) for a u128 input; the result always fits u64."""
    require_u128("n", n)
    return math.isqrt(n)


def wrapping_add_u128(a: int, b: int) -> int:
    return (a + b) & U128_MAX
