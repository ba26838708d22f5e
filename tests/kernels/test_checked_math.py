# [TESTER] v1

from __future__ import annotations

import pytest

from cpamm.errors import MathOverflow
from cpamm.kernels.python.checked_math import (
    U64_MAX,
    U128_MAX,
    checked_add,
    checked_div,
    checked_mul,
    checked_sub,
    isqrt_u128,
    require_u64,
    wrapping_add_u128,
)


def test_checked_add_respects_explicit_u64_limit() -> None:
    assert checked_add(U64_MAX - 1, 1, limit=U64_MAX) == U64_MAX
    with pytest.raises(MathOverflow):
        checked_add(U64_MAX, 1, limit=U64_MAX)


def test_checked_mul_allows_full_u64_square() -> None:
    # (2^64 - 1)^2 still fits u128.
    assert checked_mul(U64_MAX, U64_MAX) == U64_MAX * U64_MAX
    with pytest.raises(MathOverflow):
        checked_mul(1 << 64, 1 << 64)


def test_checked_sub_and_div_reject_underflow_and_zero_divisor() -> None:
    with pytest.raises(MathOverflow):
        checked_sub(1, 2)
    with pytest.raises(MathOverflow):
        checked_div(1, 0)
    assert checked_div(7, 2) == 3


def test_isqrt_u128_is_exact_floor() -> None:
    assert isqrt_u128(U128_MAX) == U64_MAX
    n = (1 << 63) + 12345
    assert isqrt_u128(n * n) == n
    assert isqrt_u128(n * n - 1) == n - 1
    with pytest.raises(MathOverflow):
        isqrt_u128(U128_MAX + 1)


def test_wrapping_add_u128_wraps_modulo_2_128() -> None:
    assert wrapping_add_u128(U128_MAX, 2) == 1
    assert wrapping_add_u128(5, 6) == 11


def test_require_u64_rejects_bool_and_out_of_range() -> None:
    with pytest.raises(TypeError):
        require_u64("x", True)
    with pytest.raises(MathOverflow):
        require_u64("x", -1)
    with pytest.raises(MathOverflow):
        require_u64("x", U64_MAX + 1)
