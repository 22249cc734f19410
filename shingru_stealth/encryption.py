"""
Authenticated encryption of payment notes and labels.

    S     = r·V  (payer)  =  v·R  (receiver)
    K     = HKDF-SHA256( x(S), salt=SHA-256(R), info="memo-encryption" )
    blob  = nonce(12) ‖ ChaCha20-Poly1305_K(nonce, m)       (16-byte tag)

The salt is public and payment-specific, so every payment gets its own
key even though the context string is fixed.  Decryption fails closed:
any tampering, wrong key or truncation raises ``DecryptionError`` and
no plaintext is returned.

The same construction, under a separate context string, escrows the
payer's ephemeral private key for the receiver
(``encrypt_ephemeral_private_key``).
"""

from __future__ import annotations

import secrets
from typing import Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305

from .codec import BytesLike, b58encode, decode
from .curve import Scalar, Point, G, ecdh, SCALAR_BYTES, COMPRESSED_BYTES
from .errors import DecryptionError, StealthError
from .hash import EPHEMERAL_KEY_CONTEXT, MEMO_CONTEXT, derive_symmetric_key
from .stealth import PrivateInput, PublicInput, as_private, as_public

NONCE_BYTES = 12
TAG_BYTES = 16


def _seal(key: bytes, plaintext: bytes) -> bytes:
    nonce = secrets.token_bytes(NONCE_BYTES)
    return nonce + ChaCha20Poly1305(key).encrypt(nonce, plaintext, None)


def _open(key: bytes, blob: bytes) -> bytes:
    if len(blob) < NONCE_BYTES + TAG_BYTES:
        raise DecryptionError(
            f"ciphertext too short: {len(blob)} bytes, "
            f"need at least {NONCE_BYTES + TAG_BYTES}"
        )
    nonce, sealed = blob[:NONCE_BYTES], blob[NONCE_BYTES:]
    try:
        return ChaCha20Poly1305(key).decrypt(nonce, sealed, None)
    except InvalidTag as exc:
        raise DecryptionError("authentication failed") from exc


# ── notes and labels ────────────────────────────────────────────────────

def encrypt_payload(
    plaintext: Union[str, bytes],
    ephemeral_priv: PrivateInput,
    view_pub: PublicInput,
) -> bytes:
    """
    Encrypt *plaintext* for the holder of the view key.

    ``str`` input is UTF-8 encoded.  There is no length limit here;
    chain-level limits are enforced by ``StealthProtocol.prepare_payment``.
    """
    if isinstance(plaintext, str):
        plaintext = plaintext.encode("utf-8")
    r = as_private(ephemeral_priv)
    V = as_public(view_pub)
    R = r * G

    key = derive_symmetric_key(ecdh(r, V), R, MEMO_CONTEXT)
    return _seal(key, bytes(plaintext))


def decrypt_payload(
    blob: BytesLike,
    ephemeral_pub: PublicInput,
    view_priv: PrivateInput,
) -> bytes:
    """Inverse of ``encrypt_payload``.  Raises ``DecryptionError``."""
    data = decode(blob)
    R = as_public(ephemeral_pub)
    v = as_private(view_priv)

    key = derive_symmetric_key(ecdh(v, R), R, MEMO_CONTEXT)
    return _open(key, data)


def decrypt_text(
    blob: BytesLike,
    ephemeral_pub: PublicInput,
    view_priv: PrivateInput,
) -> str:
    plaintext = decrypt_payload(blob, ephemeral_pub, view_priv)
    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecryptionError("plaintext is not valid UTF-8") from exc


# ── ephemeral key escrow ────────────────────────────────────────────────

def encrypt_ephemeral_private_key(
    ephemeral_priv: PrivateInput,
    view_pub: PublicInput,
) -> str:
    """
    Encrypt  r ‖ R  for the receiver; returns base58 text.

    Lets a receiver recover the ephemeral private key of a payment made
    to them, e.g. for off-chain proofs of payment.
    """
    r = as_private(ephemeral_priv)
    V = as_public(view_pub)
    R = r * G

    key = derive_symmetric_key(ecdh(r, V), R, EPHEMERAL_KEY_CONTEXT)
    return b58encode(_seal(key, r.to_bytes() + R.to_bytes_compressed()))


def decrypt_ephemeral_private_key(
    blob: BytesLike,
    ephemeral_pub: PublicInput,
    view_priv: PrivateInput,
) -> Scalar:
    """
    Recover *r* from an escrow blob.

    The embedded public key must equal both ``r·G`` and the published
    *ephemeral_pub*; otherwise ``DecryptionError``.
    """
    data = decode(blob)
    R = as_public(ephemeral_pub)
    v = as_private(view_priv)

    key = derive_symmetric_key(ecdh(v, R), R, EPHEMERAL_KEY_CONTEXT)
    plaintext = _open(key, data)
    if len(plaintext) != SCALAR_BYTES + COMPRESSED_BYTES:
        raise DecryptionError("escrowed key has the wrong length")

    try:
        r = Scalar.from_private_bytes(plaintext[:SCALAR_BYTES])
        embedded = Point.from_bytes(plaintext[SCALAR_BYTES:])
    except StealthError as exc:
        raise DecryptionError("escrowed key is malformed") from exc
    if embedded != R or r * G != R:
        raise DecryptionError("escrowed key does not match the ephemeral public key")
    return r
