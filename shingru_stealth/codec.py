"""
Byte / scalar / string conversions.

No cryptographic meaning here, only formatting.  Callers at the API
boundary should state their encoding with one of the tagged inputs
(``Base58``, ``Hex``, ``Raw``); ``decode`` still accepts plain strings
and sniffs them (base58 first, then hex) for compatibility with keys
already stored in that form.

Note that a short all-hex string such as ``"abcd"`` is also valid
base58, so sniffing resolves it as base58.  Use ``Hex`` when that
matters.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

import base58

from .errors import DecodeError, InvalidScalarError

SCALAR_BYTES = 32
_HEX_RE = re.compile(r"[0-9a-fA-F]*")


# ── tagged inputs ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class Base58:
    """Base58 (Bitcoin alphabet) text."""

    text: str

    def to_bytes(self) -> bytes:
        try:
            return base58.b58decode(self.text.strip())
        except ValueError as exc:
            raise DecodeError(f"invalid base58 input: {exc}") from exc


@dataclass(frozen=True)
class Hex:
    """
    Hex text, with or without a ``0x`` prefix.

    Surrounding whitespace is ignored; any other non-hex character,
    embedded whitespace included, raises ``DecodeError``.
    """

    text: str

    def to_bytes(self) -> bytes:
        text = self.text.strip()
        if text[:2].lower() == "0x":
            text = text[2:]
        if not _HEX_RE.fullmatch(text):
            raise DecodeError("invalid hex input: non-hex character")
        if len(text) % 2:
            raise DecodeError("odd-length hex input")
        return bytes.fromhex(text)


@dataclass(frozen=True)
class Raw:
    """Bytes passed through unchanged."""

    data: bytes

    def to_bytes(self) -> bytes:
        return bytes(self.data)


Encoded = Union[Base58, Hex, Raw]
BytesLike = Union[Encoded, bytes, bytearray, memoryview, str]


def decode(value: BytesLike) -> bytes:
    """
    Decode *value* to bytes.

    Tagged inputs decode per their tag.  Raw byte-likes pass through.
    A plain ``str`` is tried as base58, then as (``0x``-prefixed) hex.

    Raises
    ------
    DecodeError
        If the input matches none of the accepted encodings.
    """
    if isinstance(value, (Base58, Hex, Raw)):
        return value.to_bytes()
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        if not value.startswith(("0x", "0X")):
            try:
                return Base58(value).to_bytes()
            except DecodeError:
                pass
        return Hex(value).to_bytes()
    raise DecodeError(f"cannot decode {type(value).__name__}")


# ── fixed-width helpers ─────────────────────────────────────────────────

def scalar_to_bytes(scalar: int) -> bytes:
    """Big-endian, exactly 32 bytes."""
    if scalar < 0 or scalar.bit_length() > SCALAR_BYTES * 8:
        raise InvalidScalarError("scalar does not fit in 32 bytes")
    return scalar.to_bytes(SCALAR_BYTES, "big")


def pad_to(data: bytes, n: int = SCALAR_BYTES) -> bytes:
    """Right-pad with zeros to *n* bytes; longer input keeps its first *n*."""
    return bytes(data[:n]).ljust(n, b"\x00")


# ── output encodings ────────────────────────────────────────────────────

def b58encode(data: bytes) -> str:
    return base58.b58encode(bytes(data)).decode("ascii")


def to_hex(data: bytes, prefix: bool = True) -> str:
    h = bytes(data).hex()
    return "0x" + h if prefix else h
