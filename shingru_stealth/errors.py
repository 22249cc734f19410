"""
Error taxonomy for the stealth core.

Every public function either returns a fully valid result or raises one
of these.  All derive from ``ValueError`` so callers that already guard
key parsing with ``except ValueError`` keep working.
"""

from __future__ import annotations


class StealthError(ValueError):
    """Base class for all stealth-core errors."""


class DecodeError(StealthError):
    """Input is not valid base58, hex, or raw bytes."""


class InvalidScalarError(StealthError):
    """Scalar is zero or not below the curve order where a key is required."""


class InvalidPointError(StealthError):
    """Bytes do not encode a point on secp256k1, or a result is infinity."""


class DecryptionError(StealthError):
    """AEAD authentication failed: tampered blob, wrong key, or truncation."""


class UnsupportedChainError(StealthError):
    """No address-encoding profile is registered under the requested name."""


class InvalidSeedError(StealthError):
    """Seed for deterministic derivation is empty or of the wrong type."""


class PayloadTooLargeError(StealthError):
    """Encrypted field would exceed the chain-layer size limit."""


class ChainAlreadyRegisteredError(StealthError):
    """A chain profile with the same name is already registered."""
