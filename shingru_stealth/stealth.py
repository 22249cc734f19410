"""
One-time stealth addresses.

Notation:  receiver meta keys (b, B), (v, V);  payer ephemeral key (r, R).

**Payer** (knows B, V, r):

    S = r·V                      (ECDH)
    t = H(x(S)) mod q            (tweak)
    P = B + t·G                  (stealth public key)
    A = addr(P)

**Receiver** (knows b, v, R):

    S = v·R                      (= r·V by ECDH symmetry)
    t = H(x(S)) mod q
    p = b + t mod q              (stealth private key, p·G = P)
    A = addr(p·G)

Only the holder of *v* can recompute *S*, so only the receiver can link
*A* to *B*; only the holder of *b* can compute *p*.

Inputs are accepted as library objects (``Scalar``/``Point``), private
keys also as plain integers, or as anything ``codec.decode`` understands.
Private keys of 0 or ≥ q are rejected, never reduced.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .codec import BytesLike, b58encode, decode
from .curve import Scalar, Point, G, ecdh
from .chains import ChainProfile, DEFAULT_CHAIN, addresses_equal, get_chain
from .errors import InvalidScalarError
from .hash import hash_to_tweak

PrivateInput = Union[Scalar, int, BytesLike]
PublicInput = Union[Point, BytesLike]
ChainInput = Union[str, ChainProfile]


def as_private(key: PrivateInput) -> Scalar:
    if isinstance(key, Scalar):
        # Scalar values are always in [0, q-1]
        if key.is_zero():
            raise InvalidScalarError("private key is zero")
        return key
    if isinstance(key, int) and not isinstance(key, bool):
        return Scalar.from_private_int(key)
    return Scalar.from_private_bytes(decode(key))


def as_public(key: PublicInput) -> Point:
    if isinstance(key, Point):
        return key
    return Point.from_bytes(decode(key))


# ── data structures ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class StealthPublic:
    """Payer's view of a stealth destination."""

    address: str
    public_key: Point

    @property
    def public_b58(self) -> str:
        return b58encode(self.public_key.to_bytes_compressed())


@dataclass(frozen=True)
class StealthKeypair:
    """Receiver's view: the destination plus its spending key."""

    address: str
    private_key: Scalar
    public_key: Point

    @property
    def private_bytes(self) -> bytes:
        return self.private_key.to_bytes()

    def __repr__(self) -> str:
        return f"StealthKeypair(address={self.address!r})"


# ── derivation ──────────────────────────────────────────────────────────

def derive_stealth_public(
    spend_pub: PublicInput,
    view_pub: PublicInput,
    ephemeral_priv: PrivateInput,
    chain: ChainInput = DEFAULT_CHAIN,
) -> StealthPublic:
    """Payer side: stealth public key and address for one payment."""
    B = as_public(spend_pub)
    V = as_public(view_pub)
    r = as_private(ephemeral_priv)
    profile = get_chain(chain)

    t = hash_to_tweak(ecdh(r, V))
    P = B + t * G
    return StealthPublic(address=profile.address(P), public_key=P)


def derive_stealth_private(
    spend_priv: PrivateInput,
    view_priv: PrivateInput,
    ephemeral_pub: PublicInput,
    chain: ChainInput = DEFAULT_CHAIN,
) -> StealthKeypair:
    """Receiver side: stealth private key (spending authority) and address."""
    b = as_private(spend_priv)
    v = as_private(view_priv)
    R = as_public(ephemeral_pub)
    profile = get_chain(chain)

    t = hash_to_tweak(ecdh(v, R))
    p = (b + t).require_nonzero()
    P = p * G
    return StealthKeypair(address=profile.address(P), private_key=p, public_key=P)


def is_own_address(
    address: str,
    spend_priv: PrivateInput,
    view_priv: PrivateInput,
    ephemeral_pub: PublicInput,
    chain: ChainInput = DEFAULT_CHAIN,
) -> bool:
    """True iff *address* is the stealth address these keys derive for *R*."""
    derived = derive_stealth_private(spend_priv, view_priv, ephemeral_pub, chain)
    return addresses_equal(derived.address, address)
