"""Pool state machine.

``PoolEngine`` is the imperative shell around the pure planners. Every
instruction runs the same way:

1. Validate argument domains and load the committed pool record.
2. Read live reserves and LP supply from the ledger.
3. Build a plan with the pure planners (all arithmetic and error checks).
4. Inside the ledger's ``atomic()`` scope, apply transfers/mints/burns,
   check the post-state invariants and commit the new pool record.

Any exception inside step 4 rolls the ledger back and leaves the store
untouched, so a failed instruction has no effect.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Tuple, TypeVar

from ..config import PoolEngineConfig
from ..errors import (
    AmmError,
    InsufficientFunds,
    InvalidAmount,
    InvalidMintOrder,
    PoolAlreadyExists,
    PoolInvariantError,
    PoolNotFound,
)
from ..kernels.python.checked_math import U64_MAX, require_u64
from ..kernels.python.cpmm_swap import SwapExactInResult, validate_fee_rate
from ..state.balances import Amount, AssetId, Identity, TokenLedger
from ..state.pools import (
    PoolState,
    PoolStore,
    compute_pool_key,
    lp_token_for,
    vault_authority_for,
)
from . import governance, oracle
from .clock import Clock
from .cpmm import SwapDirection, plan_swap, quote_swap
from .fees import ProtocolFeeSettlement
from .invariants import PoolSnapshot, check_all
from .liquidity import plan_deposit, plan_withdraw

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


def _require_amount(name: str, value: int, *, positive: bool = False) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidAmount(f"{name} must be an int")
    if value < 0 or value > U64_MAX:
        raise InvalidAmount(f"{name} out of u64 range: {value}")
    if positive and value == 0:
        raise InvalidAmount(f"{name} must be positive")
    return value


class PoolEngine:
    """Executes pool instructions against a token ledger and a pool store."""

    def __init__(
        self,
        ledger: TokenLedger,
        clock: Clock,
        store: Optional[PoolStore] = None,
        config: PoolEngineConfig = PoolEngineConfig(),
    ) -> None:
        self.ledger = ledger
        self.clock = clock
        self.store = store if store is not None else PoolStore()
        self.config = config

    # -- reads ---------------------------------------------------------------

    def get_pool(self, pool_key: str) -> PoolState:
        pool = self.store.get(pool_key)
        if pool is None:
            raise PoolNotFound(f"no pool with key {pool_key}")
        return pool

    def reserves(self, pool_key: str) -> Tuple[Amount, Amount]:
        pool = self.get_pool(pool_key)
        return self._reserves(pool)

    def lp_supply(self, pool_key: str) -> Amount:
        return self.ledger.supply(self.get_pool(pool_key).lp_token)

    def quote_swap(self, pool_key: str, amount_in: Amount, direction: SwapDirection) -> SwapExactInResult:
        pool = self.get_pool(pool_key)
        _require_amount("amount_in", amount_in, positive=True)
        reserve_low, reserve_high = self._reserves(pool)
        return quote_swap(
            pool,
            reserve_low=reserve_low,
            reserve_high=reserve_high,
            amount_in=amount_in,
            direction=direction,
        )

    def observe(self, pool_key: str) -> oracle.PriceObservation:
        """Oracle accumulators as of the current clock reading."""
        pool = self.get_pool(pool_key)
        reserve_low, reserve_high = self._reserves(pool)
        return oracle.observe(pool, reserve_low, reserve_high, self.clock.now())

    # -- instructions ----------------------------------------------------------

    def initialize(
        self,
        signer: Identity,
        asset_low: AssetId,
        asset_high: AssetId,
        fee_numerator: int,
        fee_denominator: int,
    ) -> PoolState:
        """Create the pool for (asset_low, asset_high); `signer` becomes admin."""

        def run() -> PoolState:
            if not asset_low < asset_high:
                raise InvalidMintOrder(f"asset_low must sort before asset_high: {asset_low!r} >= {asset_high!r}")
            validate_fee_rate(fee_numerator, fee_denominator)
            pool_key = compute_pool_key(asset_low, asset_high)
            if self.store.contains(pool_key):
                raise PoolAlreadyExists(f"pool {pool_key} already exists")

            pool = PoolState(
                pool_key=pool_key,
                asset_low=asset_low,
                asset_high=asset_high,
                lp_token=lp_token_for(pool_key),
                vault_authority=vault_authority_for(pool_key),
                admin=signer,
                fee_numerator=fee_numerator,
                fee_denominator=fee_denominator,
                block_timestamp_last=require_u64("now", self.clock.now()),
                protocol_fee_recipient=signer,
            )
            # No ledger effects. Balances sent to the vault beforehand are not
            # checked here; the first deposit's post-state check covers them.
            self.store.put(pool)
            logger.info(
                "initialize pool=%s assets=(%s, %s) fee=%d/%d admin=%s",
                pool_key[:18], asset_low, asset_high, fee_numerator, fee_denominator, signer,
            )
            return pool

        return self._run("initialize", run)

    def deposit(self, pool_key: str, signer: Identity, amount_low: Amount, amount_high: Amount) -> Amount:
        """Add liquidity; returns LP shares minted to `signer`."""

        def run() -> Amount:
            _require_amount("amount_low", amount_low)
            _require_amount("amount_high", amount_high)
            pool = self.get_pool(pool_key)
            reserve_low, reserve_high = self._reserves(pool)
            plan = plan_deposit(
                pool,
                reserve_low=reserve_low,
                reserve_high=reserve_high,
                total_supply=self.ledger.supply(pool.lp_token),
                amount_low=amount_low,
                amount_high=amount_high,
                now=self.clock.now(),
                min_lp_lock=self.config.minimum_liquidity,
            )
            self._require_balance(signer, pool.asset_low, amount_low)
            self._require_balance(signer, pool.asset_high, amount_high)

            with self.ledger.atomic():
                self._mint_protocol_fee(pool, plan.protocol_fee)
                self.ledger.transfer(pool.asset_low, signer, pool.vault_authority, amount_low)
                self.ledger.transfer(pool.asset_high, signer, pool.vault_authority, amount_high)
                if plan.liquidity_locked:
                    self.ledger.mint(pool.lp_token, self.config.burn_address, plan.liquidity_locked)
                self.ledger.mint(pool.lp_token, signer, plan.liquidity_minted)
                self._commit(plan.pool)

            logger.info(
                "deposit pool=%s signer=%s amounts=(%d, %d) minted=%d locked=%d protocol_fee=%d",
                pool_key[:18], signer, amount_low, amount_high,
                plan.liquidity_minted, plan.liquidity_locked, plan.protocol_fee.minted,
            )
            return plan.liquidity_minted

        return self._run("deposit", run)

    def withdraw(
        self,
        pool_key: str,
        signer: Identity,
        lp_amount: Amount,
        min_low: Amount = 0,
        min_high: Amount = 0,
    ) -> Tuple[Amount, Amount]:
        """Burn LP shares; returns (amount_low, amount_high) paid to `signer`."""

        def run() -> Tuple[Amount, Amount]:
            _require_amount("lp_amount", lp_amount, positive=True)
            _require_amount("min_low", min_low)
            _require_amount("min_high", min_high)
            pool = self.get_pool(pool_key)
            self._require_balance(signer, pool.lp_token, lp_amount)
            reserve_low, reserve_high = self._reserves(pool)
            plan = plan_withdraw(
                pool,
                reserve_low=reserve_low,
                reserve_high=reserve_high,
                total_supply=self.ledger.supply(pool.lp_token),
                lp_amount=lp_amount,
                min_low=min_low,
                min_high=min_high,
                now=self.clock.now(),
            )

            with self.ledger.atomic():
                self._mint_protocol_fee(pool, plan.protocol_fee)
                self.ledger.burn(pool.lp_token, signer, lp_amount)
                self.ledger.transfer(pool.asset_low, pool.vault_authority, signer, plan.amount_low_out)
                self.ledger.transfer(pool.asset_high, pool.vault_authority, signer, plan.amount_high_out)
                self._commit(plan.pool)

            logger.info(
                "withdraw pool=%s signer=%s lp=%d out=(%d, %d) protocol_fee=%d",
                pool_key[:18], signer, lp_amount,
                plan.amount_low_out, plan.amount_high_out, plan.protocol_fee.minted,
            )
            return plan.amount_low_out, plan.amount_high_out

        return self._run("withdraw", run)

    def swap(
        self,
        pool_key: str,
        signer: Identity,
        amount_in: Amount,
        direction: SwapDirection,
        min_amount_out: Amount = 0,
    ) -> Amount:
        """Exact-in swap; returns the amount paid out to `signer`."""

        def run() -> Amount:
            _require_amount("amount_in", amount_in, positive=True)
            _require_amount("min_amount_out", min_amount_out)
            if not isinstance(direction, SwapDirection):
                raise InvalidAmount(f"direction must be a SwapDirection: {direction!r}")
            pool = self.get_pool(pool_key)
            reserve_low, reserve_high = self._reserves(pool)
            plan = plan_swap(
                pool,
                reserve_low=reserve_low,
                reserve_high=reserve_high,
                amount_in=amount_in,
                direction=direction,
                min_amount_out=min_amount_out,
                now=self.clock.now(),
            )
            self._require_balance(signer, plan.asset_in, amount_in)

            with self.ledger.atomic():
                self.ledger.transfer(plan.asset_in, signer, pool.vault_authority, amount_in)
                self.ledger.transfer(plan.asset_out, pool.vault_authority, signer, plan.amount_out)
                self._commit(plan.pool)

            logger.info(
                "swap pool=%s signer=%s direction=%s in=%d out=%d fee=%d",
                pool_key[:18], signer, direction.value, amount_in, plan.amount_out, plan.fee_total,
            )
            return plan.amount_out

        return self._run("swap", run)

    def update_config(
        self,
        pool_key: str,
        signer: Identity,
        *,
        new_admin: Optional[Identity] = None,
        new_recipient: Optional[Identity] = None,
        new_share: Optional[int] = None,
    ) -> PoolState:
        def run() -> PoolState:
            pool = governance.update_config(
                self.get_pool(pool_key),
                signer,
                new_admin=new_admin,
                new_recipient=new_recipient,
                new_share=new_share,
            )
            with self.ledger.atomic():
                self._commit(pool)
            logger.info(
                "update_config pool=%s pending_admin=%s recipient=%s share=%d",
                pool_key[:18], pool.pending_admin, pool.protocol_fee_recipient, pool.protocol_fee_share,
            )
            return pool

        return self._run("update_config", run)

    def claim_admin(self, pool_key: str, signer: Identity) -> PoolState:
        def run() -> PoolState:
            pool = governance.claim_admin(self.get_pool(pool_key), signer)
            with self.ledger.atomic():
                self._commit(pool)
            logger.info("claim_admin pool=%s admin=%s", pool_key[:18], pool.admin)
            return pool

        return self._run("claim_admin", run)

    # -- helpers ---------------------------------------------------------------

    def _run(self, op: str, fn: Callable[[], _T]) -> _T:
        try:
            return fn()
        except AmmError as exc:
            logger.warning("%s rejected: %s: %s", op, exc.code, exc)
            raise

    def _reserves(self, pool: PoolState) -> Tuple[Amount, Amount]:
        return (
            self.ledger.balance(pool.vault_authority, pool.asset_low),
            self.ledger.balance(pool.vault_authority, pool.asset_high),
        )

    def _require_balance(self, owner: Identity, token: AssetId, amount: Amount) -> None:
        held = self.ledger.balance(owner, token)
        if held < amount:
            raise InsufficientFunds(f"{owner} holds {held} {token}, needs {amount}")

    def _mint_protocol_fee(self, pool: PoolState, fee: ProtocolFeeSettlement) -> None:
        if fee.minted > 0 and fee.recipient is not None:
            self.ledger.mint(pool.lp_token, fee.recipient, fee.minted)

    def _commit(self, pool: PoolState) -> None:
        """Check invariants against the live ledger and persist the record."""
        reserve_low, reserve_high = self._reserves(pool)
        violations = check_all(
            PoolSnapshot(
                pool=pool,
                reserve_low=reserve_low,
                reserve_high=reserve_high,
                lp_supply=self.ledger.supply(pool.lp_token),
            )
        )
        if violations:
            raise PoolInvariantError(violations)
        self.store.put(pool)
