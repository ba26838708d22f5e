"""
Instruction parsing.

Instructions arrive as JSON-like mappings:

    {
        "kind": "swap",
        "pool": "0x...",            # omitted for "initialize"
        "signer": "0x<48-byte BLS pubkey>",
        "nonce": 7,                 # required when signatures are enforced
        "args": {"amount_in": 1000, "direction": "low_to_high", "min_amount_out": 900},
        "signature": "0x<96-byte BLS signature>",
    }

`parse_instruction` checks shape and argument types only; domain checks
(amount ranges, fee bounds, authorization) belong to the engine.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from ..core.cpmm import SwapDirection


class InstructionKind(Enum):
    INITIALIZE = "initialize"
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    SWAP = "swap"
    UPDATE_CONFIG = "update_config"
    CLAIM_ADMIN = "claim_admin"


def _require_str(value: Any, *, name: str, non_empty: bool = True, max_len: int = 4096) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string")
    if non_empty and not value:
        raise ValueError(f"{name} must be non-empty")
    if max_len > 0 and len(value) > max_len:
        raise ValueError(f"{name} too large")
    return value


def _optional_str(value: Any, *, name: str) -> Optional[str]:
    if value is None:
        return None
    return _require_str(value, name=name)


def _require_int(value: Any, *, name: str, non_negative: bool = False) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{name} must be an int")
    if non_negative and value < 0:
        raise ValueError(f"{name} must be non-negative")
    return int(value)


def _optional_int(value: Any, *, name: str) -> Optional[int]:
    if value is None:
        return None
    return _require_int(value, name=name)


def _require_dict_str_keys(value: Any, *, name: str) -> Dict[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"{name} must be an object")
    for k in value.keys():
        if not isinstance(k, str):
            raise ValueError(f"{name} keys must be strings")
    return dict(value)


# Required and optional argument names per kind. Optional amounts default to 0.
_ARG_SCHEMA: Dict[InstructionKind, tuple] = {
    InstructionKind.INITIALIZE: (("asset_low", "asset_high", "fee_numerator", "fee_denominator"), ()),
    InstructionKind.DEPOSIT: (("amount_low", "amount_high"), ()),
    InstructionKind.WITHDRAW: (("lp_amount",), ("min_low", "min_high")),
    InstructionKind.SWAP: (("amount_in", "direction"), ("min_amount_out",)),
    InstructionKind.UPDATE_CONFIG: ((), ("new_admin", "new_recipient", "new_share")),
    InstructionKind.CLAIM_ADMIN: ((), ()),
}

_STR_ARGS = frozenset({"asset_low", "asset_high", "new_admin", "new_recipient"})


@dataclass(frozen=True)
class Instruction:
    kind: InstructionKind
    signer: str
    pool: Optional[str]
    args: Dict[str, Any]
    signature: Optional[str] = None
    nonce: Optional[int] = None

    def signing_dict(self) -> Dict[str, Any]:
        """The mapping a signer signs: everything except the signature itself."""
        d: Dict[str, Any] = {
            "kind": self.kind.value,
            "signer": self.signer,
            "args": {k: v.value if isinstance(v, SwapDirection) else v for k, v in self.args.items()},
        }
        if self.pool is not None:
            d["pool"] = self.pool
        if self.nonce is not None:
            d["nonce"] = self.nonce
        return d


def _parse_args(kind: InstructionKind, raw: Dict[str, Any]) -> Dict[str, Any]:
    required, optional = _ARG_SCHEMA[kind]
    unknown = sorted(set(raw) - set(required) - set(optional))
    if unknown:
        raise ValueError(f"unknown args for {kind.value}: {', '.join(unknown)}")
    missing = [name for name in required if name not in raw]
    if missing:
        raise ValueError(f"missing args for {kind.value}: {', '.join(missing)}")

    out: Dict[str, Any] = {}
    for name in required + optional:
        if name not in raw:
            continue
        value = raw[name]
        if name == "direction":
            try:
                out[name] = SwapDirection(_require_str(value, name=name))
            except ValueError as exc:
                raise ValueError(f"direction must be one of low_to_high, high_to_low: {value!r}") from exc
        elif name in _STR_ARGS:
            parsed = _optional_str(value, name=name) if name in optional else _require_str(value, name=name)
            if parsed is not None:
                out[name] = parsed
        elif kind is InstructionKind.UPDATE_CONFIG:
            parsed_int = _optional_int(value, name=name)
            if parsed_int is not None:
                out[name] = parsed_int
        else:
            out[name] = _require_int(value, name=name)
    return out


def parse_instruction(obj: Any) -> Instruction:
    """
    Parse and shape-check one instruction mapping.

    Raises:
        ValueError: if the structure or any argument type is invalid
    """
    data = _require_dict_str_keys(obj, name="instruction")
    unknown = sorted(set(data) - {"kind", "pool", "signer", "nonce", "args", "signature"})
    if unknown:
        raise ValueError(f"unknown instruction fields: {', '.join(unknown)}")

    kind_raw = _require_str(data.get("kind"), name="kind")
    try:
        kind = InstructionKind(kind_raw)
    except ValueError as exc:
        raise ValueError(f"unknown instruction kind: {kind_raw!r}") from exc

    signer = _require_str(data.get("signer"), name="signer")
    pool = _optional_str(data.get("pool"), name="pool")
    if kind is InstructionKind.INITIALIZE:
        if pool is not None:
            raise ValueError("initialize must not name a pool")
    elif pool is None:
        raise ValueError(f"{kind.value} requires a pool")

    args = _parse_args(kind, _require_dict_str_keys(data.get("args", {}), name="args"))
    signature = _optional_str(data.get("signature"), name="signature")
    nonce = None
    if data.get("nonce") is not None:
        nonce = _require_int(data["nonce"], name="nonce", non_negative=True)
    return Instruction(kind=kind, signer=signer, pool=pool, args=args, signature=signature, nonce=nonce)
