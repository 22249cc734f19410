"""
shingru_stealth: stealth-address payments on secp256k1.

A payer derives a fresh, unlinkable address for every payment from the
receiver's two published meta public keys; only the receiver can
recognise that address and derive its private key.

- **ECDH + hash tweak** for one-time addresses  (P = B + H(r·V)·G)
- **Spend / view separation**: the view key scans and decrypts,
  only the spend key moves funds
- **HKDF + ChaCha20-Poly1305** for encrypted payment notes
- **Pluggable address encoders** (Aptos SHA3-256, IOTA BLAKE2b-256)

Quick start
-----------
::

    from shingru_stealth import (
        derive_deterministic_meta_keys, generate_ephemeral_key,
        derive_stealth_public, encrypt_payload, scan_event, PaymentEvent,
    )

    meta = derive_deterministic_meta_keys(wallet_signature, chain="aptos")

    eph = generate_ephemeral_key()
    dest = derive_stealth_public(
        meta.spend.public_key, meta.view.public_key, eph.private_key,
    )
    note = encrypt_payload("invoice #42", eph.private_key, meta.view.public_key)

    event = PaymentEvent(dest.address, eph.public_bytes, note=note)
    found = scan_event(event, meta.spend.private_key, meta.view.private_key)
    assert found.note == "invoice #42"
"""

__version__ = "0.1.0"

# ── errors ──────────────────────────────────────────────────────────────
from .errors import (
    StealthError,
    DecodeError,
    InvalidScalarError,
    InvalidPointError,
    DecryptionError,
    UnsupportedChainError,
    InvalidSeedError,
    PayloadTooLargeError,
    ChainAlreadyRegisteredError,
)

# ── codec ───────────────────────────────────────────────────────────────
from .codec import Base58, Hex, Raw, decode, scalar_to_bytes, pad_to, b58encode

# ── curve primitives ────────────────────────────────────────────────────
from .curve import (
    Scalar, Point, G, ORDER,
    reduce, base_point_mul, point_add, compress, decompress, ecdh,
)

# ── chains ──────────────────────────────────────────────────────────────
from .chains import (
    ChainProfile,
    APTOS,
    IOTA,
    aptos_address,
    iota_address,
    get_chain,
    register_chain,
    available_chains,
)

# ── keys ────────────────────────────────────────────────────────────────
from .keys import (
    KeyPair,
    MetaKeys,
    EphemeralKey,
    generate_meta_keys,
    derive_deterministic_meta_keys,
    generate_ephemeral_key,
)

# ── stealth addressing ──────────────────────────────────────────────────
from .stealth import (
    StealthPublic,
    StealthKeypair,
    derive_stealth_public,
    derive_stealth_private,
    is_own_address,
)

# ── memo encryption ─────────────────────────────────────────────────────
from .encryption import (
    encrypt_payload,
    decrypt_payload,
    decrypt_text,
    encrypt_ephemeral_private_key,
    decrypt_ephemeral_private_key,
)

# ── scanning ────────────────────────────────────────────────────────────
from .scanner import (
    PaymentEvent,
    PaymentDetails,
    EventScanner,
    scan_event,
    scan_events,
)

# ── protocol ────────────────────────────────────────────────────────────
from .protocol import StealthProtocol, PreparedPayment, MAX_ENCRYPTED_FIELD_BYTES

__all__ = [
    # version
    "__version__",
    # errors
    "StealthError", "DecodeError", "InvalidScalarError", "InvalidPointError",
    "DecryptionError", "UnsupportedChainError", "InvalidSeedError",
    "PayloadTooLargeError", "ChainAlreadyRegisteredError",
    # codec
    "Base58", "Hex", "Raw", "decode", "scalar_to_bytes", "pad_to", "b58encode",
    # curve
    "Scalar", "Point", "G", "ORDER",
    "reduce", "base_point_mul", "point_add", "compress", "decompress", "ecdh",
    # chains
    "ChainProfile", "APTOS", "IOTA", "aptos_address", "iota_address",
    "get_chain", "register_chain", "available_chains",
    # keys
    "KeyPair", "MetaKeys", "EphemeralKey",
    "generate_meta_keys", "derive_deterministic_meta_keys",
    "generate_ephemeral_key",
    # stealth
    "StealthPublic", "StealthKeypair",
    "derive_stealth_public", "derive_stealth_private", "is_own_address",
    # encryption
    "encrypt_payload", "decrypt_payload", "decrypt_text",
    "encrypt_ephemeral_private_key", "decrypt_ephemeral_private_key",
    # scanning
    "PaymentEvent", "PaymentDetails", "EventScanner",
    "scan_event", "scan_events",
    # protocol
    "StealthProtocol", "PreparedPayment", "MAX_ENCRYPTED_FIELD_BYTES",
]
