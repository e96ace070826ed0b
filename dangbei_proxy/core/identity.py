"""Device and conversation identity for upstream calls."""

from __future__ import annotations

import logging
import secrets
import uuid
from dataclasses import dataclass, replace
from threading import Lock
from typing import Optional

logger = logging.getLogger("dangbei-proxy")

MAX_CONVERSATION_COUNT = 50
DEVICE_ID_ALPHABET = "useandom26T198340PX75pxJACKVERYMINDBUSHWOLF_GQZbfghjklqvwyzrict"
DEVICE_ID_SUFFIX_BYTES = 20


@dataclass(frozen=True)
class Identity:
    """Ids to attach to one upstream exchange."""

    device_id: str
    conversation_id: Optional[str]


@dataclass
class Session:
    """Mutable identity state owned by an IdentityManager."""

    device_id: Optional[str] = None
    conversation_id: Optional[str] = None
    conversation_count: int = 0


def generate_device_id() -> str:
    """Build a device id: uuid4 hex, an underscore, then a 20 char random tail."""
    tail = "".join(
        DEVICE_ID_ALPHABET[b % len(DEVICE_ID_ALPHABET)]
        for b in secrets.token_bytes(DEVICE_ID_SUFFIX_BYTES)
    )
    return f"{uuid.uuid4().hex}_{tail}"


class IdentityManager:
    """Issues device ids and rotates them after a bounded number of uses.

    One instance is shared by every request served by an application.
    All reads and writes of the session go through ``_lock`` so concurrent
    requests cannot interleave a rotation with an increment.
    """

    def __init__(self, max_conversation_count: int = MAX_CONVERSATION_COUNT) -> None:
        if max_conversation_count < 1:
            raise ValueError("max_conversation_count must be positive")
        self.max_conversation_count = max_conversation_count
        self._session = Session()
        self._lock = Lock()

    def get_or_create_ids(self, force_new: bool = False) -> Identity:
        with self._lock:
            session = self._session
            if (
                force_new
                or not session.device_id
                or session.conversation_count >= self.max_conversation_count
            ):
                session.device_id = generate_device_id()
                session.conversation_id = None
                session.conversation_count = 0
                logger.info("Minted new device id %s...", session.device_id[:8])
            else:
                session.conversation_count += 1
            return Identity(session.device_id, session.conversation_id)

    def bind_conversation(self, device_id: str, conversation_id: str) -> bool:
        """Remember the conversation opened for ``device_id``.

        Returns False when the device has been rotated in the meantime.
        """
        with self._lock:
            if self._session.device_id != device_id:
                return False
            self._session.conversation_id = conversation_id
            return True

    def snapshot(self) -> Session:
        with self._lock:
            return replace(self._session)
