"""
Receiver meta keys and payer ephemeral keys.

A receiver holds two independent secp256k1 keypairs:

- **spend** (b, B = b·G): final ownership.  Stealth private keys are
  ``b + t``, so funds cannot move without *b*.
- **view**  (v, V = v·G): scanning and memo decryption only.  Handing
  *v* (and *B*) to a scanning service reveals which payments arrived
  and what their notes say, but not how to spend them.

Meta keys are either random or derived from a seed (typically a wallet
signature) so that they can be recovered without storage::

    b = HKDF-SHA256(seed, salt=domain, info=SPEND_CONTEXT) mod q
    v = HKDF-SHA256(seed, salt=domain, info=VIEW_CONTEXT)  mod q
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .codec import BytesLike, b58encode, decode
from .curve import Scalar, Point, G
from .chains import ChainProfile, DEFAULT_CHAIN, get_chain
from .errors import InvalidSeedError
from .hash import SPEND_CONTEXT, VIEW_CONTEXT, derive_meta_scalar


# ── data structures ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class KeyPair:
    """A private scalar and its public point."""

    private_key: Scalar
    public_key: Point

    @classmethod
    def from_scalar(cls, s: Scalar) -> KeyPair:
        return cls(private_key=s, public_key=s * G)

    @classmethod
    def from_private_bytes(cls, data: BytesLike) -> KeyPair:
        return cls.from_scalar(Scalar.from_private_bytes(decode(data)))

    @property
    def private_bytes(self) -> bytes:
        return self.private_key.to_bytes()

    @property
    def public_bytes(self) -> bytes:
        return self.public_key.to_bytes_compressed()

    @property
    def public_b58(self) -> str:
        return b58encode(self.public_bytes)

    def __repr__(self) -> str:
        return f"KeyPair(public_key={self.public_b58})"


@dataclass(frozen=True)
class MetaKeys:
    """A receiver's long-term spend and view keypairs."""

    spend: KeyPair
    view: KeyPair
    seed: Optional[str] = None

    @property
    def spend_public_b58(self) -> str:
        return self.spend.public_b58

    @property
    def view_public_b58(self) -> str:
        return self.view.public_b58

    def public_meta(self) -> Tuple[Point, Point]:
        """(spend_pub, view_pub) — what the receiver publishes."""
        return self.spend.public_key, self.view.public_key

    def __repr__(self) -> str:
        return (
            f"MetaKeys(spend={self.spend_public_b58}, "
            f"view={self.view_public_b58})"
        )


@dataclass(frozen=True)
class EphemeralKey(KeyPair):
    """One-time payer keypair.  Use for exactly one payment."""

    def __repr__(self) -> str:
        return f"EphemeralKey(public_key={self.public_b58})"


# ── generation ──────────────────────────────────────────────────────────

def generate_meta_keys() -> MetaKeys:
    """Two independent uniform keypairs from the OS CSPRNG."""
    return MetaKeys(
        spend=KeyPair.from_scalar(Scalar.random()),
        view=KeyPair.from_scalar(Scalar.random()),
    )


def derive_deterministic_meta_keys(
    seed: Union[str, bytes],
    chain: Union[str, ChainProfile] = DEFAULT_CHAIN,
) -> MetaKeys:
    """
    Derive meta keys from *seed*.  Same seed and chain, same keys.

    Parameters
    ----------
    seed : str | bytes
        Opaque caller secret (e.g. a wallet signature).  ``str`` seeds
        are UTF-8 encoded.
    chain : str | ChainProfile
        Selects the domain-separation salt.

    Raises
    ------
    InvalidSeedError
        If *seed* is empty or not text/bytes.
    """
    if isinstance(seed, str):
        seed_bytes = seed.encode("utf-8")
    elif isinstance(seed, (bytes, bytearray)):
        seed_bytes = bytes(seed)
    else:
        raise InvalidSeedError(f"seed must be str or bytes, got {type(seed).__name__}")
    if not seed_bytes:
        raise InvalidSeedError("seed is empty")

    salt = get_chain(chain).domain_salt
    spend = derive_meta_scalar(seed_bytes, salt, SPEND_CONTEXT)
    view = derive_meta_scalar(seed_bytes, salt, VIEW_CONTEXT)

    return MetaKeys(
        spend=KeyPair.from_scalar(spend),
        view=KeyPair.from_scalar(view),
        seed=seed if isinstance(seed, str) else None,
    )


def generate_ephemeral_key() -> EphemeralKey:
    return EphemeralKey.from_scalar(Scalar.random())
