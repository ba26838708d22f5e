"""
Nonce table for signed-instruction replay protection.

Tracks, per signer public key, the last accepted instruction nonce. The
dispatcher enforces strict sequential nonces: the next accepted instruction
from a signer must carry `last + 1`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping

from ..kernels.python.checked_math import U64_MAX
from .balances import Identity
from .canonical import canonical_hex_fixed_allow_0x

PUBKEY_BYTES = 48


@dataclass
class NonceTable:
    """Mutable mapping: canonical signer pubkey -> last used nonce (0 = none yet)."""

    _last: Dict[Identity, int] = field(default_factory=dict)

    def get_last(self, pubkey: Identity) -> int:
        pk = canonical_hex_fixed_allow_0x(pubkey, nbytes=PUBKEY_BYTES, name="pubkey")
        return self._last.get(pk, 0)

    def expected(self, pubkey: Identity) -> int:
        return self.get_last(pubkey) + 1

    def set_last(self, pubkey: Identity, last_nonce: int) -> None:
        if not isinstance(last_nonce, int) or isinstance(last_nonce, bool) or last_nonce < 0:
            raise TypeError("last_nonce must be a non-negative int")
        if last_nonce > U64_MAX:
            raise ValueError("last_nonce must fit in u64")
        pk = canonical_hex_fixed_allow_0x(pubkey, nbytes=PUBKEY_BYTES, name="pubkey")
        self._last[pk] = last_nonce

    def get_all(self) -> Mapping[Identity, int]:
        return dict(self._last)
