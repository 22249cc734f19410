"""
Elliptic curve arithmetic on secp256k1 via libsecp256k1.

Group operations (scalar multiplication, point addition, ECDH) are
delegated to ``coincurve``, which wraps Bitcoin Core's libsecp256k1.
Scalar arithmetic modulo the group order stays in pure Python; it is
cheap and only ever touches one or two values per payment.

Unlike a general-purpose group layer there is no point at infinity:
every public key in the stealth protocol must be a real curve point, so
any operation that would produce the identity raises
``InvalidPointError`` instead.

Install
-------
    pip install coincurve>=18.0.0

References
----------
- SEC 1 v2 §2.3.3/§2.3.4  point compression
- SEC 2 v2 §2.4.1         secp256k1 domain parameters
"""

from __future__ import annotations

import secrets
from typing import Union

from coincurve import PrivateKey as _SK, PublicKey as _PK

from .errors import InvalidPointError, InvalidScalarError

# ── secp256k1 constants ─────────────────────────────────────────────────
ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
SCALAR_BYTES = 32
COMPRESSED_BYTES = 33
UNCOMPRESSED_BYTES = 65


# ── Scalar  (Z_q arithmetic, pure Python) ───────────────────────────────
class Scalar:
    """
    Element of the scalar field  Z_q  where *q* = ``ORDER``.

    The constructor takes an already reduced value in [0, q-1] and raises
    ``InvalidScalarError`` otherwise.  Reduction is explicit: use
    ``reduce`` or ``from_bytes_reduce`` for hash outputs.
    """

    __slots__ = ("_v",)

    def __init__(self, value: int) -> None:
        if not 0 <= value < ORDER:
            raise InvalidScalarError("scalar is not in [0, q-1]")
        self._v = value

    # constructors -----------------------------------------------------------
    @classmethod
    def random(cls) -> Scalar:
        """Uniform in [1, q-1] via rejection sampling."""
        while True:
            c = int.from_bytes(secrets.token_bytes(SCALAR_BYTES), "big")
            if 0 < c < ORDER:
                return cls(c)

    @classmethod
    def from_private_bytes(cls, data: bytes) -> Scalar:
        """
        Parse a private key.  Exactly 32 bytes, value in [1, q-1].

        Out-of-range keys are rejected, never reduced: a silently reduced
        key would derive a different, valid-looking address.
        """
        if len(data) != SCALAR_BYTES:
            raise InvalidScalarError(
                f"private key must be {SCALAR_BYTES} bytes, got {len(data)}"
            )
        v = int.from_bytes(data, "big")
        if v == 0:
            raise InvalidScalarError("private key is zero")
        if v >= ORDER:
            raise InvalidScalarError("private key is not below the curve order")
        return cls(v)

    @classmethod
    def from_private_int(cls, value: int) -> Scalar:
        """Parse a private key given as an integer in [1, q-1]."""
        if not 0 < value < ORDER:
            raise InvalidScalarError("private key is not in [1, q-1]")
        return cls(value)

    @classmethod
    def from_bytes_reduce(cls, data: bytes) -> Scalar:
        """Hash-output safe: reduce arbitrary length modulo *q*."""
        return cls(int.from_bytes(data, "big") % ORDER)

    # serialisation ----------------------------------------------------------
    def to_bytes(self) -> bytes:
        return self._v.to_bytes(SCALAR_BYTES, "big")

    @property
    def value(self) -> int:
        return self._v

    def is_zero(self) -> bool:
        return self._v == 0

    def require_nonzero(self) -> Scalar:
        if self._v == 0:
            raise InvalidScalarError("scalar reduced to zero")
        return self

    # arithmetic -------------------------------------------------------------
    def __add__(self, o: Scalar) -> Scalar:
        if not isinstance(o, Scalar):
            return NotImplemented
        return Scalar((self._v + o._v) % ORDER)

    def __mul__(self, o):
        if isinstance(o, Scalar):
            return Scalar((self._v * o._v) % ORDER)
        if isinstance(o, Point):
            return o._smul(self)
        return NotImplemented

    # comparison / hashing ---------------------------------------------------
    def __eq__(self, o: object) -> bool:
        if isinstance(o, Scalar):
            return self._v == o._v
        if isinstance(o, int):
            return self._v == o % ORDER
        return False

    def __hash__(self) -> int:
        return hash(self._v)

    def __bool__(self) -> bool:
        return self._v != 0

    def __repr__(self) -> str:
        # never print key material
        return "Scalar(…)"


# ── Point  (secp256k1 group element via libsecp256k1) ───────────────────
class Point:
    """A point on secp256k1, never the identity."""

    __slots__ = ("_pk",)

    def __init__(self, pk: _PK) -> None:
        self._pk = pk

    # constructors -----------------------------------------------------------
    @classmethod
    def generator(cls) -> Point:
        """Standard base point *G*."""
        return cls(_SK(b"\x00" * 31 + b"\x01").public_key)

    @classmethod
    def from_scalar(cls, s: Scalar) -> Point:
        """Compute *s · G*."""
        if s.is_zero():
            raise InvalidScalarError("cannot multiply the base point by zero")
        return cls(_SK(s.to_bytes()).public_key)

    @classmethod
    def from_bytes(cls, data: bytes) -> Point:
        """Deserialise SEC 1 compressed (33 B) or uncompressed (65 B)."""
        data = bytes(data)
        if len(data) not in (COMPRESSED_BYTES, UNCOMPRESSED_BYTES):
            raise InvalidPointError(
                f"public key must be {COMPRESSED_BYTES} or "
                f"{UNCOMPRESSED_BYTES} bytes, got {len(data)}"
            )
        try:
            return cls(_PK(data))
        except ValueError as exc:
            raise InvalidPointError("bytes do not encode a secp256k1 point") from exc

    # serialisation ----------------------------------------------------------
    def to_bytes_compressed(self) -> bytes:
        return self._pk.format(compressed=True)

    def to_bytes(self) -> bytes:
        return self.to_bytes_compressed()

    # group operations -------------------------------------------------------
    def _smul(self, s: Scalar) -> Point:
        """Scalar multiplication  s · self  (C speed)."""
        if s.is_zero():
            raise InvalidScalarError("cannot multiply a point by zero")
        copy = _PK(self._pk.format())
        return Point(copy.multiply(s.to_bytes()))

    def __add__(self, o: Point) -> Point:
        if not isinstance(o, Point):
            return NotImplemented
        try:
            return Point(_PK.combine_keys([self._pk, o._pk]))
        except ValueError as exc:
            # P + (-P)
            raise InvalidPointError("point addition produced infinity") from exc

    def __rmul__(self, s) -> Point:
        if isinstance(s, Scalar):
            return self._smul(s)
        return NotImplemented

    def __eq__(self, o: object) -> bool:
        if not isinstance(o, Point):
            return False
        return self.to_bytes_compressed() == o.to_bytes_compressed()

    def __hash__(self) -> int:
        return hash(self.to_bytes())

    def __repr__(self) -> str:
        return f"Point({self.to_bytes().hex()[:18]}…)"


# ── module-level generator ──────────────────────────────────────────────
G = Point.generator()


# ── functional primitives ───────────────────────────────────────────────
def reduce(value: Union[int, bytes]) -> Scalar:
    """Reduce an integer or big-endian byte string modulo ``ORDER``."""
    if isinstance(value, (bytes, bytearray)):
        return Scalar.from_bytes_reduce(bytes(value))
    return Scalar(value % ORDER)


def base_point_mul(s: Scalar) -> Point:
    return Point.from_scalar(s)


def point_add(a: Point, b: Point) -> Point:
    return a + b


def decompress(data: bytes) -> Point:
    return Point.from_bytes(data)


def compress(p: Point) -> bytes:
    return p.to_bytes_compressed()


def ecdh(private: Scalar, peer: Point) -> bytes:
    """
    Shared point  private · peer,  compressed (33 bytes).

    Callers hash ``result[1:]`` (the x-coordinate); the format byte is
    not part of the shared secret.
    """
    return compress(private * peer)
