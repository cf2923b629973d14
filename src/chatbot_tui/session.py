"""Stable session identifier shared by every exchange with the chat service."""

from __future__ import annotations

import logging
import secrets
import string
import threading
import time

from .exceptions import ChatbotValidationError
from .storage import KeyValueStore

LOGGER = logging.getLogger(__name__)

SESSION_KEY = "chatbotSessionId"

_BASE36_ALPHABET = string.digits + string.ascii_lowercase
_SUFFIX_LENGTH = 7


def generate_session_id() -> str:
    """Return ``session_<epoch ms><7 base36 chars>``."""
    suffix = "".join(secrets.choice(_BASE36_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"session_{int(time.time() * 1000)}{suffix}"


class SessionStore:
    """Own the active session id and its persisted copy.

    The id is created lazily on the first ``get_or_create()`` call, then
    stays fixed until the chat service hands back a different one, at which
    point ``rotate()`` replaces both the in-memory and the persisted value.
    """

    def __init__(self, backend: KeyValueStore, key: str = SESSION_KEY) -> None:
        self._backend = backend
        self._key = key
        self._lock = threading.Lock()
        self._current: str | None = None

    @property
    def current(self) -> str | None:
        """Active session id, or ``None`` before ``get_or_create()``."""
        with self._lock:
            return self._current

    def get_or_create(self) -> str:
        """Return the persisted session id, creating and saving one if absent."""
        with self._lock:
            if self._current is not None:
                return self._current

            stored = self._backend.get(self._key)
            if stored and stored.strip():
                self._current = stored.strip()
                LOGGER.info(
                    "session.loaded",
                    extra={"event": "session.loaded", "session_id": self._current},
                )
                return self._current

            session_id = generate_session_id()
            self._backend.set(self._key, session_id)
            self._current = session_id
            LOGGER.info(
                "session.created",
                extra={"event": "session.created", "session_id": session_id},
            )
            return session_id

    def rotate(self, new_id: str) -> None:
        """Replace the active id with one issued by the chat service."""
        normalized = new_id.strip() if isinstance(new_id, str) else ""
        if not normalized:
            raise ChatbotValidationError("Session id must be a non-empty string.")

        with self._lock:
            if normalized == self._current:
                return
            previous = self._current
            self._backend.set(self._key, normalized)
            self._current = normalized
        LOGGER.info(
            "session.rotated",
            extra={
                "event": "session.rotated",
                "previous_session_id": previous,
                "session_id": normalized,
            },
        )
