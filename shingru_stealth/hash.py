"""
Hash and key-derivation functions for the stealth protocol.

Each protocol role gets its own primitive and context string so that
outputs for different roles are independent even when fed identical
data:

    tweak      t   = SHA-256( x(S) )  mod q         (S = ECDH shared point)
    meta key   k   = HKDF-SHA256( seed, salt=domain, info=role )  mod q
    memo key   K   = HKDF-SHA256( x(S), salt=SHA-256(R), info="memo-encryption" )

where *R* is the payer's published ephemeral public key.  The context
strings below are part of the wire protocol: changing a single byte
makes every previously derived key unrecoverable.
"""

from __future__ import annotations

import hashlib

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from .curve import Scalar, Point, COMPRESSED_BYTES

# ── context strings ─────────────────────────────────────────────────────
SPEND_CONTEXT = b"SHINGRU Spend Authority | Deterministic Derivation"
VIEW_CONTEXT = b"SHINGRU View Authority | Deterministic Derivation"
MEMO_CONTEXT = b"memo-encryption"
EPHEMERAL_KEY_CONTEXT = b"ephemeral-key-encryption"

KEY_BYTES = 32


def shared_x(shared: bytes) -> bytes:
    """Strip the SEC 1 format byte from a compressed ECDH result."""
    if len(shared) != COMPRESSED_BYTES:
        raise ValueError(f"need {COMPRESSED_BYTES}-byte shared point, got {len(shared)}")
    return shared[1:]


def hkdf_sha256(ikm: bytes, salt: bytes, info: bytes, length: int = KEY_BYTES) -> bytes:
    """RFC 5869 HKDF with SHA-256."""
    return HKDF(
        algorithm=hashes.SHA256(),
        length=length,
        salt=salt,
        info=info,
    ).derive(ikm)


def hash_to_tweak(shared: bytes) -> Scalar:
    r"""
    Stealth tweak  t = SHA-256(x(S)) mod q.

    Payer and receiver reach the same *S* by ECDH symmetry
    (r·V = v·R), so both compute the same *t*.
    """
    return Scalar.from_bytes_reduce(hashlib.sha256(shared_x(shared)).digest())


def payload_salt(ephemeral_pub: Point) -> bytes:
    """Per-payment HKDF salt: SHA-256 of the compressed ephemeral key."""
    return hashlib.sha256(ephemeral_pub.to_bytes_compressed()).digest()


def derive_symmetric_key(
    shared: bytes,
    ephemeral_pub: Point,
    context: bytes = MEMO_CONTEXT,
) -> bytes:
    """32-byte AEAD key bound to one ECDH secret and one ephemeral key."""
    return hkdf_sha256(shared_x(shared), payload_salt(ephemeral_pub), context)


def derive_meta_scalar(seed: bytes, domain_salt: bytes, context: bytes) -> Scalar:
    """Deterministic meta private key for one role (spend or view)."""
    okm = hkdf_sha256(seed, domain_salt, context)
    return Scalar.from_bytes_reduce(okm).require_nonzero()
