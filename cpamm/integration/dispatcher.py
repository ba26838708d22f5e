"""
Signed instruction dispatcher.

Authenticates the signer of each instruction and hands validated arguments to
a `PoolEngine`. Signers are identified by their 48-byte BLS public key (hex,
`0x` prefix) and sign

    sha256(domain_sep("cpamm_ix_sig:<chain_id>") || canonical_json(signing_dict))

with the G2Basic ciphersuite. The signed mapping includes a per-signer nonce
that must be exactly one past the signer's last accepted nonce.

`apply` never raises for bad input; every failure comes back as a
`DispatchResult` with `ok=False`.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, replace
from typing import Any, Optional, Tuple

from py_ecc.bls import G2Basic

from ..config import DispatcherConfig
from ..core.engine import PoolEngine
from ..errors import AmmError
from ..state.canonical import (
    bounded_json_utf8_size,
    canonical_hex_fixed_allow_0x,
    canonical_json_bytes,
    domain_sep_bytes,
)
from ..state.nonces import PUBKEY_BYTES, NonceTable
from .operations import Instruction, InstructionKind, parse_instruction

logger = logging.getLogger(__name__)

INVALID_INSTRUCTION = "InvalidInstruction"
INVALID_SIGNATURE = "InvalidSignature"
INVALID_NONCE = "InvalidNonce"
SIGNATURE_BYTES = 96


@dataclass(frozen=True)
class DispatchResult:
    ok: bool
    value: Any = None
    error: Optional[str] = None
    code: Optional[str] = None


def instruction_message_hash(instruction: Instruction, chain_id: str) -> bytes:
    """The 32-byte digest a signer signs for `instruction` on `chain_id`."""
    msg = domain_sep_bytes(f"cpamm_ix_sig:{chain_id}", version=1) + canonical_json_bytes(
        instruction.signing_dict()
    )
    return hashlib.sha256(msg).digest()


def sign_instruction(obj: dict, secret_key: int, chain_id: str) -> dict:
    """Return a copy of the instruction mapping with its `signature` filled in."""
    unsigned = {k: v for k, v in obj.items() if k != "signature"}
    msg_hash = instruction_message_hash(parse_instruction(unsigned), chain_id)
    signed = dict(unsigned)
    signed["signature"] = "0x" + G2Basic.Sign(secret_key, msg_hash).hex()
    return signed


def verify_instruction_signature(instruction: Instruction, chain_id: str) -> Tuple[bool, Optional[str]]:
    if instruction.signature is None:
        return False, "missing signature"
    try:
        pubkey = canonical_hex_fixed_allow_0x(instruction.signer, nbytes=PUBKEY_BYTES, name="signer")
        signature = canonical_hex_fixed_allow_0x(instruction.signature, nbytes=SIGNATURE_BYTES, name="signature")
    except (TypeError, ValueError) as exc:
        return False, str(exc)
    try:
        ok = bool(
            G2Basic.Verify(
                bytes.fromhex(pubkey[2:]),
                instruction_message_hash(instruction, chain_id),
                bytes.fromhex(signature[2:]),
            )
        )
    except Exception as exc:
        # Malformed curve points surface as assorted py_ecc errors.
        return False, f"signature verification error: {exc}"
    if not ok:
        return False, "invalid instruction signature"
    return True, None


class InstructionDispatcher:
    """
    With `require_signatures`, every instruction must carry a valid signature
    and the signer's next sequential nonce. Signer (and nominated admin)
    pubkeys are normalized to lowercase `0x` hex before reaching the engine, so
    one key maps to exactly one identity.
    """

    def __init__(
        self,
        engine: PoolEngine,
        config: DispatcherConfig = DispatcherConfig(),
        nonces: Optional[NonceTable] = None,
    ) -> None:
        self.engine = engine
        self.config = config
        self.nonces = nonces if nonces is not None else NonceTable()

    def apply(self, obj: Any) -> DispatchResult:
        """Parse, authenticate and execute one instruction mapping."""
        try:
            bounded_json_utf8_size(obj, max_bytes=self.config.max_instruction_bytes)
        except TypeError as exc:
            return self._reject(INVALID_INSTRUCTION, f"instruction is not canonically encodable: {exc}")
        except ValueError as exc:
            return self._reject(INVALID_INSTRUCTION, f"instruction too large: {exc}")

        try:
            instruction = parse_instruction(obj)
        except ValueError as exc:
            return self._reject(INVALID_INSTRUCTION, f"invalid instruction: {exc}")

        nonce: Optional[int] = None
        if self.config.require_signatures:
            ok, err = verify_instruction_signature(instruction, self.config.chain_id)
            if not ok:
                return self._reject(INVALID_SIGNATURE, err or "invalid instruction signature")
            try:
                instruction = self._canonicalize_identities(instruction)
            except (TypeError, ValueError) as exc:
                return self._reject(INVALID_INSTRUCTION, f"invalid instruction: {exc}")
            expected = self.nonces.expected(instruction.signer)
            if instruction.nonce != expected:
                return self._reject(INVALID_NONCE, f"nonce must be {expected}, got {instruction.nonce}")
            nonce = instruction.nonce

        try:
            value = self._execute(instruction)
        except AmmError as exc:
            # An authenticated instruction consumes its nonce even when the engine rejects it.
            self._consume(instruction.signer, nonce)
            return DispatchResult(ok=False, error=str(exc), code=exc.code)
        self._consume(instruction.signer, nonce)
        return DispatchResult(ok=True, value=value)

    def _canonicalize_identities(self, ix: Instruction) -> Instruction:
        signer = canonical_hex_fixed_allow_0x(ix.signer, nbytes=PUBKEY_BYTES, name="signer")
        args = ix.args
        if "new_admin" in args:
            args = dict(args)
            args["new_admin"] = canonical_hex_fixed_allow_0x(
                args["new_admin"], nbytes=PUBKEY_BYTES, name="new_admin"
            )
        return replace(ix, signer=signer, args=args)

    def _consume(self, signer: str, nonce: Optional[int]) -> None:
        if nonce is not None:
            self.nonces.set_last(signer, nonce)

    def _execute(self, ix: Instruction) -> Any:
        engine = self.engine
        args = ix.args
        if ix.kind is InstructionKind.INITIALIZE:
            return engine.initialize(
                ix.signer,
                args["asset_low"],
                args["asset_high"],
                args["fee_numerator"],
                args["fee_denominator"],
            ).pool_key

        assert ix.pool is not None
        if ix.kind is InstructionKind.DEPOSIT:
            return engine.deposit(ix.pool, ix.signer, args["amount_low"], args["amount_high"])
        if ix.kind is InstructionKind.WITHDRAW:
            return engine.withdraw(
                ix.pool, ix.signer, args["lp_amount"], args.get("min_low", 0), args.get("min_high", 0)
            )
        if ix.kind is InstructionKind.SWAP:
            return engine.swap(
                ix.pool, ix.signer, args["amount_in"], args["direction"], args.get("min_amount_out", 0)
            )
        if ix.kind is InstructionKind.UPDATE_CONFIG:
            engine.update_config(
                ix.pool,
                ix.signer,
                new_admin=args.get("new_admin"),
                new_recipient=args.get("new_recipient"),
                new_share=args.get("new_share"),
            )
            return None
        if ix.kind is InstructionKind.CLAIM_ADMIN:
            return engine.claim_admin(ix.pool, ix.signer).admin
        raise AssertionError(f"unhandled instruction kind: {ix.kind}")

    def _reject(self, code: str, error: str) -> DispatchResult:
        logger.warning("instruction rejected: %s: %s", code, error)
        return DispatchResult(ok=False, error=error, code=code)
