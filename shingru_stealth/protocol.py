"""
High-level stealth payment orchestration.

Provides a single ``StealthProtocol`` class that binds the key
derivation, stealth addressing, memo encryption and scanning modules to
one chain profile, giving collaborators (wallet UI, API routes, event
indexers) a small surface to call.

Usage
-----
::

    from shingru_stealth import StealthProtocol

    proto = StealthProtocol("aptos")

    # Receiver, once
    meta = proto.deterministic_meta_keys(wallet_signature)
    spend_b58, view_b58 = meta.spend_public_b58, meta.view_public_b58

    # Payer, per payment
    payment = proto.prepare_payment(spend_b58, view_b58, note="rent")
    # ... send funds to payment.stealth_address with
    #     payment.ephemeral_pub_bytes and payment.encrypted_note

    # Receiver, later
    found = proto.scan(events, meta)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Union

from .chains import ChainProfile, DEFAULT_CHAIN, get_chain
from .encryption import decrypt_text, encrypt_payload
from .errors import PayloadTooLargeError
from .keys import (
    EphemeralKey,
    MetaKeys,
    derive_deterministic_meta_keys,
    generate_ephemeral_key,
    generate_meta_keys,
)
from .scanner import EventScanner, PaymentDetails, PaymentEvent
from .stealth import (
    PrivateInput,
    PublicInput,
    StealthKeypair,
    StealthPublic,
    as_public,
    derive_stealth_private,
    derive_stealth_public,
)

logger = logging.getLogger(__name__)

# Upper bound on an encrypted label or note embedded in a transaction.
MAX_ENCRYPTED_FIELD_BYTES = 256


@dataclass(frozen=True)
class PreparedPayment:
    """Everything a payer needs to build the payment transaction."""

    stealth_address: str
    stealth_public: StealthPublic
    ephemeral: EphemeralKey
    encrypted_note: bytes = b""
    encrypted_label: bytes = b""
    payload: bytes = b""

    @property
    def ephemeral_pub_bytes(self) -> bytes:
        return self.ephemeral.public_bytes

    @property
    def ephemeral_pub_b58(self) -> str:
        return self.ephemeral.public_b58


class StealthProtocol:
    """
    Stealth payments on a single chain.

    Encapsulates the full lifecycle:
    1. Keys — random or seed-derived receiver meta keys.
    2. Pay — ephemeral key, stealth address, encrypted memo fields.
    3. Scan — classify on-chain events and recover spending keys.
    """

    def __init__(self, chain: Union[str, ChainProfile] = DEFAULT_CHAIN) -> None:
        self._chain = get_chain(chain)

    @property
    def chain(self) -> ChainProfile:
        return self._chain

    def __repr__(self) -> str:
        return f"StealthProtocol(chain={self._chain.name!r})"

    # ── keys ───────────────────────────────────────────────────────────

    @staticmethod
    def generate_meta_keys() -> MetaKeys:
        return generate_meta_keys()

    def deterministic_meta_keys(self, seed: Union[str, bytes]) -> MetaKeys:
        return derive_deterministic_meta_keys(seed, self._chain)

    @staticmethod
    def generate_ephemeral_key() -> EphemeralKey:
        return generate_ephemeral_key()

    # ── payer ──────────────────────────────────────────────────────────

    def stealth_public(
        self,
        spend_pub: PublicInput,
        view_pub: PublicInput,
        ephemeral_priv: PrivateInput,
    ) -> StealthPublic:
        return derive_stealth_public(spend_pub, view_pub, ephemeral_priv, self._chain)

    def _encrypt_field(
        self,
        name: str,
        text: str,
        ephemeral: EphemeralKey,
        view_pub: PublicInput,
    ) -> bytes:
        if not text:
            return b""
        blob = encrypt_payload(text, ephemeral.private_key, view_pub)
        if len(blob) > MAX_ENCRYPTED_FIELD_BYTES:
            raise PayloadTooLargeError(
                f"encrypted {name} is {len(blob)} bytes, "
                f"limit is {MAX_ENCRYPTED_FIELD_BYTES}"
            )
        return blob

    def prepare_payment(
        self,
        spend_pub: PublicInput,
        view_pub: PublicInput,
        note: str = "",
        label: str = "",
        payload: str = "",
        ephemeral: Optional[EphemeralKey] = None,
    ) -> PreparedPayment:
        """
        Derive a one-time destination and encrypt the memo fields.

        A fresh ephemeral key is drawn unless one is given; never reuse
        an ephemeral key across payments.

        Raises
        ------
        PayloadTooLargeError
            If the encrypted note or label exceeds
            ``MAX_ENCRYPTED_FIELD_BYTES``.
        """
        V = as_public(view_pub)
        eph = ephemeral or generate_ephemeral_key()
        stealth = self.stealth_public(spend_pub, V, eph.private_key)

        prepared = PreparedPayment(
            stealth_address=stealth.address,
            stealth_public=stealth,
            ephemeral=eph,
            encrypted_note=self._encrypt_field("note", note, eph, V),
            encrypted_label=self._encrypt_field("label", label, eph, V),
            payload=payload.encode("utf-8"),
        )
        logger.debug("Prepared %s stealth payment", self._chain.name)
        return prepared

    # ── receiver ───────────────────────────────────────────────────────

    def stealth_keypair(
        self,
        spend_priv: PrivateInput,
        view_priv: PrivateInput,
        ephemeral_pub: PublicInput,
    ) -> StealthKeypair:
        return derive_stealth_private(spend_priv, view_priv, ephemeral_pub, self._chain)

    @staticmethod
    def decrypt_note(
        blob: bytes,
        ephemeral_pub: PublicInput,
        view_priv: PrivateInput,
    ) -> str:
        return decrypt_text(blob, ephemeral_pub, view_priv)

    def scanner(self, meta: MetaKeys, max_workers: Optional[int] = None) -> EventScanner:
        return EventScanner(
            meta.spend.private_key,
            meta.view.private_key,
            self._chain,
            max_workers,
        )

    def scan(
        self,
        events: Iterable[Union[PaymentEvent, Dict[str, Any]]],
        meta: MetaKeys,
        max_workers: Optional[int] = None,
    ) -> List[PaymentDetails]:
        """Return the payments among *events* that belong to *meta*."""
        return self.scanner(meta, max_workers).scan_batch(events)
