"""
Per-chain address encoding.

The stealth derivation is chain-agnostic up to the last step, where the
one-time public key is hashed into an on-chain address.  Each supported
chain contributes a ``ChainProfile``: the address encoder plus the
domain salt used for deterministic meta-key derivation.

    aptos   0x ‖ hex( SHA3-256( P ) )
    iota    0x ‖ hex( BLAKE2b-256( 0x01 ‖ P ) )      (0x01 = secp256k1 flag)

where *P* is the 33-byte compressed stealth public key.  The two hashes
must not be unified: each matches addresses already held by deployed
contracts.

The IOTA domain salt reads "APTOS Network"; that is the string the
deployed IOTA client used, so it is kept verbatim.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Callable, Dict, List, Union

from .curve import Point
from .errors import ChainAlreadyRegisteredError, UnsupportedChainError

AddressEncoder = Callable[[Point], str]

FLAG_SECP256K1 = 0x01


def aptos_address(public_key: Point) -> str:
    digest = hashlib.sha3_256(public_key.to_bytes_compressed()).digest()
    return "0x" + digest.hex()


def iota_address(public_key: Point) -> str:
    data = bytes([FLAG_SECP256K1]) + public_key.to_bytes_compressed()
    digest = hashlib.blake2b(data, digest_size=32).digest()
    return "0x" + digest.hex()


def addresses_equal(a: str, b: str) -> bool:
    """Hex addresses compare case-insensitively."""
    if a.startswith(("0x", "0X")) and b.startswith(("0x", "0X")):
        return a.lower() == b.lower()
    return a == b


@dataclass(frozen=True)
class ChainProfile:
    """Everything chain-specific the stealth core needs."""

    name: str
    domain_salt: bytes
    encoder: AddressEncoder

    def address(self, public_key: Point) -> str:
        return self.encoder(public_key)


APTOS = ChainProfile(
    name="aptos",
    domain_salt=b"SHINGRU | Deterministic Meta Keys | Aptos Network",
    encoder=aptos_address,
)

IOTA = ChainProfile(
    name="iota",
    domain_salt=b"SHINGRU | Deterministic Meta Keys | APTOS Network",
    encoder=iota_address,
)

_REGISTRY: Dict[str, ChainProfile] = {p.name: p for p in (APTOS, IOTA)}

DEFAULT_CHAIN = APTOS.name


def register_chain(profile: ChainProfile, replace: bool = False) -> None:
    """
    Make *profile* available to ``get_chain`` under ``profile.name``.

    Raises ``ChainAlreadyRegisteredError`` if the name is taken, unless
    *replace* is set.
    """
    key = profile.name.lower()
    if key in _REGISTRY and not replace:
        raise ChainAlreadyRegisteredError(f"chain {profile.name!r} already registered")
    _REGISTRY[key] = profile


def get_chain(chain: Union[str, ChainProfile]) -> ChainProfile:
    if isinstance(chain, ChainProfile):
        return chain
    try:
        return _REGISTRY[chain.lower()]
    except KeyError:
        raise UnsupportedChainError(
            f"no address encoder registered for chain {chain!r}; "
            f"known: {', '.join(available_chains())}"
        ) from None


def available_chains() -> List[str]:
    return sorted(_REGISTRY)
