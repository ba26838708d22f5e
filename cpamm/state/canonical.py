"""
Deterministic canonical encoding primitives.

Used for pool key derivation and for the bytes a signer commits to when
submitting an instruction.
"""

from __future__ import annotations

import json
import re
from typing import Any


CANONICAL_ENCODING_VERSION = 1

_HEX_CHARS_RE = re.compile(r"^[0-9a-fA-F]+$")


def _reject_surrogates(s: str) -> None:
    # Surrogate code points are not valid Unicode scalar values and lead to
    # implementation-defined behavior across JSON encoders/UTF-8 encoders.
    for ch in s:
        o = ord(ch)
        if 0xD800 <= o <= 0xDFFF:
            raise TypeError("surrogate code points are not allowed in canonical encoding")


def _reject_floats(value: Any) -> None:
    if isinstance(value, float):
        raise TypeError("floats are not allowed in canonical encoding")
    if isinstance(value, str):
        _reject_surrogates(value)
    if isinstance(value, dict):
        for k in value.keys():
            if not isinstance(k, str):
                raise TypeError("dict keys must be str for canonical encoding")
        for k, v in value.items():
            _reject_surrogates(k)
            _reject_floats(v)
        return
    if isinstance(value, (list, tuple)):
        for item in value:
            _reject_floats(item)
        return


def canonical_json_bytes(value: Any) -> bytes:
    """
    Canonical JSON encoding for hashing/signing.

    Rules:
    - UTF-8
    - sort_keys=True
    - separators=(',', ':') (no whitespace)
    - allow_nan=False
    - floats rejected (to avoid representation ambiguity)
    """
    _reject_floats(value)
    text = json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    return text.encode("utf-8")


def bounded_json_utf8_size(value: Any, *, max_bytes: int, max_depth: int = 16) -> int:
    """
    Upper bound on `len(canonical_json_bytes(value))` that stops as soon as the
    running total passes `max_bytes`, without building the JSON text.

    Raises:
        ValueError: bound exceeds max_bytes or nesting exceeds max_depth
        TypeError: value is not canonically encodable
    """
    if not isinstance(max_bytes, int) or isinstance(max_bytes, bool) or max_bytes <= 0:
        raise ValueError("max_bytes must be a positive int")

    def _charge(total: int) -> int:
        if total > max_bytes:
            raise ValueError(f"json size exceeds {max_bytes} bytes")
        return total

    def _size_str(s: str) -> int:
        total = 2  # quotes
        for ch in s:
            o = ord(ch)
            if 0xD800 <= o <= 0xDFFF:
                raise TypeError("surrogate code points are not allowed in canonical encoding")
            if o < 0x20:
                total += 6  # worst case \u00XX
            elif ch in ('"', "\\"):
                total += 2
            else:
                total += len(ch.encode("utf-8"))
            _charge(total)
        return total

    def _size(v: Any, depth: int) -> int:
        if depth <= 0:
            raise ValueError("json nesting exceeds max_depth")
        if isinstance(v, float):
            raise TypeError("floats are not allowed in canonical encoding")
        if v is None or v is True:
            return 4
        if v is False:
            return 5
        if isinstance(v, int):
            # digits(n) <= floor(bit_length * log10(2)) + 1
            n = abs(v)
            return (n.bit_length() * 30103) // 100000 + 1 + (1 if v < 0 else 0)
        if isinstance(v, str):
            return _size_str(v)
        if isinstance(v, (list, tuple)):
            total = 2
            for i, item in enumerate(v):
                total = _charge(total + (1 if i else 0) + _size(item, depth - 1))
            return total
        if isinstance(v, dict):
            total = 2
            for i, (k, item) in enumerate(v.items()):
                if not isinstance(k, str):
                    raise TypeError("dict keys must be str for canonical encoding")
                total = _charge(total + (1 if i else 0) + _size_str(k) + 1 + _size(item, depth - 1))
            return total
        raise TypeError(f"unsupported type for canonical encoding: {type(v)}")

    return _charge(_size(value, max_depth))


def canonical_hex_fixed_allow_0x(hex_str: str, *, nbytes: int, name: str) -> str:
    """Normalize a fixed-size hex string to lowercase with a `0x` prefix."""
    if not isinstance(hex_str, str):
        raise TypeError(f"{name} must be a str")
    s = hex_str[2:] if hex_str[:2].lower() == "0x" else hex_str
    if len(s) != 2 * nbytes:
        raise ValueError(f"{name} must be {nbytes} bytes (hex length {2 * nbytes})")
    if not _HEX_CHARS_RE.fullmatch(s):
        raise ValueError(f"{name} must be valid hex")
    return "0x" + s.lower()


def domain_sep_bytes(label: str, version: int = CANONICAL_ENCODING_VERSION) -> bytes:
    """
    Create a domain separation prefix.

    The output is ASCII-only and NUL-terminated to make concatenation unambiguous.
    """
    if not isinstance(label, str) or not label:
        raise TypeError("label must be a non-empty str")
    if "\x00" in label:
        raise ValueError("label must not contain NUL")
    try:
        label_bytes = label.encode("ascii")
    except UnicodeEncodeError as exc:
        raise ValueError("label must be ASCII") from exc
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("version must be a positive int")
    return b"cpamm:" + label_bytes + b":v" + str(version).encode("ascii") + b"\x00"
