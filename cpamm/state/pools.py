"""
Pool state management.

A pool exists once per unordered asset pair. Its identity is derived from the
canonically ordered pair, so the same two assets can never back two pools.
Reserves are not stored here: they are always read from the pool's vault
balances in the token ledger.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

import hashlib

from ..kernels.python.checked_math import U64_MAX, U128_MAX
from .balances import AssetId, Identity
from .canonical import domain_sep_bytes


MAX_PROTOCOL_FEE_SHARE = 500


def canonical_pair(asset_x: AssetId, asset_y: AssetId) -> Tuple[AssetId, AssetId]:
    """
    Order two asset identifiers byte-lexicographically.

    Python's `str` ordering compares code points, which matches the byte order
    of their UTF-8 encodings.
    """
    if asset_x == asset_y:
        raise ValueError(f"pool assets must differ: {asset_x}")
    return (asset_x, asset_y) if asset_x < asset_y else (asset_y, asset_x)


def compute_pool_key(asset_low: AssetId, asset_high: AssetId) -> str:
    """
    Deterministically compute the pool key for a canonically ordered pair.

        pool_key = H(domain_sep("pool") || u64be(len(low)) || low || u64be(len(high)) || high)

    where `low`/`high` are the UTF-8 bytes of each asset id.
    """
    if not asset_low < asset_high:
        raise ValueError(f"Assets must be in canonical order: {asset_low} < {asset_high}")
    data = domain_sep_bytes("pool")
    for asset in (asset_low, asset_high):
        raw = asset.encode("utf-8")
        data += len(raw).to_bytes(8, "big") + raw
    return "0x" + hashlib.sha256(data).hexdigest()


def lp_token_for(pool_key: str) -> AssetId:
    return "lp:" + pool_key


def vault_authority_for(pool_key: str) -> Identity:
    return "vault:" + pool_key


@dataclass(frozen=True)
class PoolState:
    """
    Persistent record of one pool.

    Attributes:
        pool_key: Deterministic pool identifier (hex string)
        asset_low: Lower asset identifier (asset_low < asset_high)
        asset_high: Higher asset identifier
        lp_token: Share token identifier, minted and burned only by the engine
        vault_authority: Ledger identity that holds both reserves
        admin: Identity allowed to change configuration
        pending_admin: Nominated successor awaiting `claim_admin`
        fee_numerator, fee_denominator: Swap fee retained from each input
        protocol_fee_share: Thousandths of invariant growth owed to the protocol
        protocol_fee_recipient: Receiver of protocol LP shares (None disables)
        k_last: reserve_low * reserve_high after the last deposit/withdraw
        block_timestamp_last: Unix time of the last oracle update
        price_low_cumulative, price_high_cumulative: Q64.64 accumulators
    """

    pool_key: str
    asset_low: AssetId
    asset_high: AssetId
    lp_token: AssetId
    vault_authority: Identity
    admin: Identity
    fee_numerator: int
    fee_denominator: int
    block_timestamp_last: int
    pending_admin: Optional[Identity] = None
    protocol_fee_share: int = 0
    protocol_fee_recipient: Optional[Identity] = None
    k_last: int = 0
    price_low_cumulative: int = 0
    price_high_cumulative: int = 0

    def __post_init__(self) -> None:
        if not self.asset_low < self.asset_high:
            raise ValueError(
                f"Assets must be in canonical order: {self.asset_low} < {self.asset_high}"
            )
        if self.fee_denominator <= 0 or not (0 <= self.fee_numerator < self.fee_denominator):
            raise ValueError(f"invalid fee rate: {self.fee_numerator}/{self.fee_denominator}")
        if not (0 <= self.protocol_fee_share <= MAX_PROTOCOL_FEE_SHARE):
            raise ValueError(f"protocol_fee_share out of range: {self.protocol_fee_share}")
        if not (0 <= self.block_timestamp_last <= U64_MAX):
            raise ValueError(f"block_timestamp_last out of range: {self.block_timestamp_last}")
        for name in ("k_last", "price_low_cumulative", "price_high_cumulative"):
            v = getattr(self, name)
            if not (0 <= v <= U128_MAX):
                raise ValueError(f"{name} out of u128 range: {v}")

    def reserve_assets(self, low_to_high: bool) -> Tuple[AssetId, AssetId]:
        """(asset_in, asset_out) for a swap direction."""
        if low_to_high:
            return self.asset_low, self.asset_high
        return self.asset_high, self.asset_low

    def __repr__(self) -> str:
        return (
            f"PoolState(pool_key={self.pool_key[:16]}..., "
            f"assets=({self.asset_low}, {self.asset_high}), "
            f"fee={self.fee_numerator}/{self.fee_denominator}, "
            f"protocol_fee_share={self.protocol_fee_share}, k_last={self.k_last})"
        )


class PoolStore:
    """Uniquely keyed map from pool key to the committed `PoolState`."""

    def __init__(self) -> None:
        self._pools: Dict[str, PoolState] = {}

    def get(self, pool_key: str) -> Optional[PoolState]:
        return self._pools.get(pool_key)

    def find(self, asset_x: AssetId, asset_y: AssetId) -> Optional[PoolState]:
        """Look up a pool by its two assets in either order."""
        asset_low, asset_high = canonical_pair(asset_x, asset_y)
        return self._pools.get(compute_pool_key(asset_low, asset_high))

    def contains(self, pool_key: str) -> bool:
        return pool_key in self._pools

    def put(self, pool: PoolState) -> None:
        self._pools[pool.pool_key] = pool

    def keys(self) -> list[str]:
        return sorted(self._pools)

    def __iter__(self) -> Iterator[PoolState]:
        for key in self.keys():
            yield self._pools[key]

    def __len__(self) -> int:
        return len(self._pools)

    def __repr__(self) -> str:
        return f"PoolStore({len(self._pools)} pools)"
