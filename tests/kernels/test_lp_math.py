# [TESTER] v1

from __future__ import annotations

import pytest

from cpamm.errors import InsufficientInitialLiquidity, InsufficientLiquidityMinted
from cpamm.kernels.python.lp_math import (
    MINIMUM_LIQUIDITY,
    burn_liquidity,
    mint_liquidity,
    mint_liquidity_initial,
    protocol_fee_liquidity,
)


def test_initial_mint_locks_minimum_liquidity() -> None:
    res = mint_liquidity_initial(amount_low=10_000_000, amount_high=10_000_000)
    assert res.liquidity_minted == 9_999_000
    assert res.liquidity_locked == MINIMUM_LIQUIDITY
    assert res.new_total_supply == 10_000_000


def test_initial_mint_must_exceed_lock() -> None:
    with pytest.raises(InsufficientInitialLiquidity):
        mint_liquidity_initial(amount_low=1000, amount_high=1000)
    assert mint_liquidity_initial(amount_low=1001, amount_high=1001).liquidity_minted == 1


def test_initial_mint_uses_integer_isqrt() -> None:
    # Float sqrt would lose precision here.
    n = (1 << 40) + 12345
    res = mint_liquidity_initial(amount_low=n, amount_high=n)
    assert res.new_total_supply == n


def test_proportional_mint_takes_smaller_side() -> None:
    minted = mint_liquidity(
        reserve_low=100,
        reserve_high=400,
        total_supply=200,
        amount_low=10,
        amount_high=50,
    )
    # low side: 10 * 200 // 100 = 20, high side: 50 * 200 // 400 = 25
    assert minted == 20


def test_proportional_mint_rejects_zero_result() -> None:
    with pytest.raises(InsufficientLiquidityMinted):
        mint_liquidity(reserve_low=1000, reserve_high=1000, total_supply=10, amount_low=1, amount_high=1)


def test_proportional_mint_rejects_zero_supply() -> None:
    with pytest.raises(ValueError, match="non-zero supply"):
        mint_liquidity(reserve_low=1, reserve_high=1, total_supply=0, amount_low=10, amount_high=10)


def test_burn_is_pro_rata_and_bounded_by_supply() -> None:
    out = burn_liquidity(lp_amount=50, reserve_low=1000, reserve_high=3000, total_supply=100)
    assert (out.amount_low_out, out.amount_high_out) == (500, 1500)
    with pytest.raises(ValueError):
        burn_liquidity(lp_amount=101, reserve_low=1000, reserve_high=3000, total_supply=100)


def test_protocol_fee_zero_when_disabled_or_no_growth() -> None:
    common = dict(reserve_low=2000, reserve_high=2000, total_supply=1000)
    assert protocol_fee_liquidity(k_last=1_000_000, protocol_fee_share=0, **common) == 0
    assert protocol_fee_liquidity(k_last=0, protocol_fee_share=500, **common) == 0
    assert protocol_fee_liquidity(k_last=4_000_000, protocol_fee_share=500, **common) == 0


def test_protocol_fee_matches_share_of_root_k_growth() -> None:
    # rk = 2000, rk_last = 1000, share = 500:
    # 1000 * 1000 * 500 // (500 * 2000 + 500 * 1000) = 333
    minted = protocol_fee_liquidity(
        reserve_low=2000,
        reserve_high=2000,
        k_last=1_000_000,
        total_supply=1000,
        protocol_fee_share=500,
    )
    assert minted == 333


def test_protocol_fee_monotonic_in_growth() -> None:
    prev = 0
    for reserve in (1100, 1500, 2000, 4000):
        minted = protocol_fee_liquidity(
            reserve_low=reserve,
            reserve_high=reserve,
            k_last=1_000_000,
            total_supply=1000,
            protocol_fee_share=250,
        )
        assert minted >= prev
        prev = minted
    assert prev > 0
