"""
Receiver-side scanning of on-chain payment events.

Each event carries the stealth owner address, the payer's ephemeral
public key and optional encrypted label / note.  For every event the
scanner re-runs the receiver branch of the stealth derivation and
compares addresses:

    not equal  →  None            (someone else's payment; the common case)
    equal      →  PaymentDetails  (stealth private key + decrypted fields)

Classification is stateless and idempotent, so a batch is an
embarrassingly parallel map; ``scan_events`` runs it on a bounded
thread pool and returns matches in input order.

A label or note that fails to decrypt is logged and reported as ``""``:
a corrupt or foreign memo must not hide an otherwise valid payment.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from .codec import b58encode, decode
from .curve import Scalar, Point
from .chains import ChainProfile, DEFAULT_CHAIN, addresses_equal, get_chain
from .encryption import decrypt_text
from .errors import DecodeError, DecryptionError, StealthError
from .stealth import (
    ChainInput,
    PrivateInput,
    as_private,
    as_public,
    derive_stealth_private,
)

logger = logging.getLogger(__name__)


def _as_bytes(value: Any) -> bytes:
    """On-chain byte vectors arrive as int lists, hex/base58 text or bytes."""
    if value is None:
        return b""
    if isinstance(value, (list, tuple)):
        return bytes(value)
    if isinstance(value, str) and not value:
        return b""
    return decode(value)


# ── data structures ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class PaymentEvent:
    """One payment as emitted by the stealth program."""

    stealth_owner: str
    ephemeral_pub: bytes
    payer: str = ""
    amount: int = 0
    label: bytes = b""
    note: bytes = b""
    payload: bytes = b""
    transaction_hash: Optional[str] = None
    event_index: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PaymentEvent:
        """
        Build from the JSON shape returned by chain indexers.

        Raises ``DecodeError`` for missing or mistyped fields.
        """
        try:
            owner = data["stealth_owner"]
            if not isinstance(owner, str):
                raise TypeError(f"stealth_owner must be str, got {type(owner).__name__}")
            index = data.get("event_index")
            return cls(
                stealth_owner=owner,
                ephemeral_pub=_as_bytes(data["eph_pubkey"]),
                payer=data.get("payer", ""),
                amount=int(data.get("amount", 0)),
                label=_as_bytes(data.get("label")),
                note=_as_bytes(data.get("note")),
                payload=_as_bytes(data.get("payload")),
                transaction_hash=data.get("transaction_hash"),
                event_index=int(index) if index is not None else None,
            )
        except StealthError:
            raise
        except (KeyError, TypeError, ValueError) as exc:
            raise DecodeError(f"malformed payment event: {exc}") from exc


@dataclass(frozen=True)
class PaymentDetails:
    """A payment that belongs to the scanning receiver."""

    stealth_address: str
    payer: str
    amount: int
    stealth_private_key: Scalar = field(repr=False)
    ephemeral_pub_b58: str = ""
    label: str = ""
    note: str = ""
    payload: str = ""
    transaction_hash: Optional[str] = None
    event_index: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialise for the caller's storage layer (includes the key)."""
        return {
            "stealth_address": self.stealth_address,
            "payer": self.payer,
            "amount": str(self.amount),
            "label": self.label,
            "note": self.note,
            "payload": self.payload,
            "ephemeral_pubkey": self.ephemeral_pub_b58,
            "stealth_private_key": self.stealth_private_key.to_bytes().hex(),
            "transaction_hash": self.transaction_hash,
            "event_index": self.event_index,
        }


# ── single event ────────────────────────────────────────────────────────

def _decrypt_field(
    name: str,
    blob: bytes,
    ephemeral_pub: Point,
    view_priv: Scalar,
    event: PaymentEvent,
) -> str:
    if not blob:
        return ""
    try:
        return decrypt_text(blob, ephemeral_pub, view_priv)
    except DecryptionError as exc:
        logger.warning(
            "Failed to decrypt %s for tx %s (event %s): %s",
            name, event.transaction_hash, event.event_index, exc,
        )
        return ""


def scan_event(
    event: Union[PaymentEvent, Dict[str, Any]],
    spend_priv: PrivateInput,
    view_priv: PrivateInput,
    chain: ChainInput = DEFAULT_CHAIN,
) -> Optional[PaymentDetails]:
    """
    Classify one event.  Returns ``None`` if it is not ours.

    Raises
    ------
    InvalidPointError, DecodeError
        If the event is malformed or its ephemeral key is not a point.
    InvalidScalarError
        If either private key is out of range.
    """
    if isinstance(event, dict):
        event = PaymentEvent.from_dict(event)
    b = as_private(spend_priv)
    v = as_private(view_priv)
    R = as_public(event.ephemeral_pub)

    stealth = derive_stealth_private(b, v, R, chain)
    if not addresses_equal(stealth.address, event.stealth_owner):
        return None

    return PaymentDetails(
        stealth_address=event.stealth_owner,
        payer=event.payer,
        amount=event.amount,
        stealth_private_key=stealth.private_key,
        ephemeral_pub_b58=b58encode(R.to_bytes_compressed()),
        label=_decrypt_field("label", event.label, R, v, event),
        note=_decrypt_field("note", event.note, R, v, event),
        payload=event.payload.decode("utf-8", errors="replace"),
        transaction_hash=event.transaction_hash,
        event_index=event.event_index,
    )


# ── batches ─────────────────────────────────────────────────────────────

class EventScanner:
    """
    Scanner bound to one receiver and one chain.

    Private keys are parsed once, so malformed keys fail at construction
    rather than inside the worker pool.
    """

    def __init__(
        self,
        spend_priv: PrivateInput,
        view_priv: PrivateInput,
        chain: ChainInput = DEFAULT_CHAIN,
        max_workers: Optional[int] = None,
    ) -> None:
        self._spend = as_private(spend_priv)
        self._view = as_private(view_priv)
        self._chain: ChainProfile = get_chain(chain)
        self._max_workers = max_workers or os.cpu_count() or 1

    @property
    def chain(self) -> ChainProfile:
        return self._chain

    def scan(self, event: Union[PaymentEvent, Dict[str, Any]]) -> Optional[PaymentDetails]:
        return scan_event(event, self._spend, self._view, self._chain)

    def _scan_tolerant(self, item: Any) -> Optional[PaymentDetails]:
        index, event = item
        try:
            return self.scan(event)
        except StealthError as exc:
            # keys were validated up front, so this is the event's fault
            logger.warning("Skipping malformed event #%d: %s", index, exc)
            return None

    def scan_batch(
        self,
        events: Iterable[Union[PaymentEvent, Dict[str, Any]]],
    ) -> List[PaymentDetails]:
        """Scan *events* in parallel; matches are returned in input order."""
        items = list(enumerate(events))
        if not items:
            return []
        workers = min(self._max_workers, len(items))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(self._scan_tolerant, items))
        matches = [r for r in results if r is not None]
        logger.debug(
            "Scanned %d events on %s: %d ours",
            len(items), self._chain.name, len(matches),
        )
        return matches


def scan_events(
    events: Sequence[Union[PaymentEvent, Dict[str, Any]]],
    spend_priv: PrivateInput,
    view_priv: PrivateInput,
    chain: ChainInput = DEFAULT_CHAIN,
    max_workers: Optional[int] = None,
) -> List[PaymentDetails]:
    """Functional form of ``EventScanner.scan_batch``."""
    scanner = EventScanner(spend_priv, view_priv, chain, max_workers)
    return scanner.scan_batch(events)
