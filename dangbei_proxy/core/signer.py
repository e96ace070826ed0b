"""Signed request envelopes for the upstream API."""

from __future__ import annotations

import hashlib
import json
import secrets
import time
from dataclasses import dataclass
from typing import Any, Mapping, Optional

NONCE_ALPHABET = "useandom-26T198340PX75pxJACKVERYMINDBUSHWOLF_GQZbfghjklqvwyzrict"
NONCE_SIZE = 21


@dataclass(frozen=True)
class SignedEnvelope:
    """A payload together with the signature fields the upstream checks."""

    timestamp: str
    nonce: str
    signature: str
    payload: Mapping[str, Any]
    body: bytes


def serialize_payload(payload: Mapping[str, Any]) -> str:
    """Serialize the way the upstream's browser client does (compact, unsorted)."""
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def nanoid(size: int = NONCE_SIZE) -> str:
    raw = secrets.token_bytes(size)
    return "".join(NONCE_ALPHABET[b & 63] for b in reversed(raw))


def sign(timestamp: str, payload: Mapping[str, Any], nonce: str) -> str:
    """Return the uppercase MD5 hex digest of ``timestamp + json + nonce``.

    MD5 is what the upstream verifies against; it carries no security
    weight on this side.
    """
    message = f"{timestamp}{serialize_payload(payload)}{nonce}"
    return hashlib.md5(message.encode("utf-8")).hexdigest().upper()


def build_envelope(
    payload: Mapping[str, Any],
    timestamp: Optional[str] = None,
    nonce: Optional[str] = None,
) -> SignedEnvelope:
    """Sign ``payload`` and keep the exact body bytes the signature covers."""
    if timestamp is None:
        timestamp = str(int(time.time()))
    if nonce is None:
        nonce = nanoid()
    body = serialize_payload(payload).encode("utf-8")
    return SignedEnvelope(
        timestamp=timestamp,
        nonce=nonce,
        signature=sign(timestamp, payload, nonce),
        payload=payload,
        body=body,
    )
