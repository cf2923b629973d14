"""Tests for session id persistence and rotation."""

from __future__ import annotations

import re
import tempfile
from pathlib import Path
import unittest

from chatbot_tui.exceptions import ChatbotValidationError
from chatbot_tui.session import SESSION_KEY, SessionStore, generate_session_id
from chatbot_tui.storage import JsonFileStore, MemoryStore

SESSION_ID_PATTERN = re.compile(r"^session_\d{13}[0-9a-z]{7}$")


class GenerateSessionIdTests(unittest.TestCase):
    """Validate generated identifier shape."""

    def test_format(self) -> None:
        self.assertRegex(generate_session_id(), SESSION_ID_PATTERN)

    def test_ids_differ(self) -> None:
        self.assertNotEqual(generate_session_id(), generate_session_id())


class SessionStoreTests(unittest.TestCase):
    """Validate get_or_create and rotate semantics."""

    def test_key_name(self) -> None:
        self.assertEqual(SESSION_KEY, "chatbotSessionId")

    def test_current_is_none_before_load(self) -> None:
        self.assertIsNone(SessionStore(MemoryStore()).current)

    def test_get_or_create_creates_and_persists(self) -> None:
        backend = MemoryStore()
        store = SessionStore(backend)
        with self.assertLogs("chatbot_tui.session", level="INFO") as logs:
            session_id = store.get_or_create()
        self.assertRegex(session_id, SESSION_ID_PATTERN)
        self.assertEqual(backend.get(SESSION_KEY), session_id)
        self.assertEqual(store.current, session_id)
        self.assertTrue(any("session.created" in line for line in logs.output))

    def test_get_or_create_is_stable(self) -> None:
        store = SessionStore(MemoryStore())
        first = store.get_or_create()
        self.assertEqual(store.get_or_create(), first)
        self.assertEqual(store.get_or_create(), first)

    def test_existing_value_is_loaded(self) -> None:
        backend = MemoryStore({SESSION_KEY: "  session_abc  "})
        store = SessionStore(backend)
        self.assertEqual(store.get_or_create(), "session_abc")

    def test_blank_value_is_replaced(self) -> None:
        backend = MemoryStore({SESSION_KEY: "   "})
        session_id = SessionStore(backend).get_or_create()
        self.assertRegex(session_id, SESSION_ID_PATTERN)
        self.assertEqual(backend.get(SESSION_KEY), session_id)

    def test_id_survives_restart(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "store.json"
            first = SessionStore(JsonFileStore(path)).get_or_create()
            second = SessionStore(JsonFileStore(path)).get_or_create()
            self.assertEqual(first, second)

    def test_corrupt_store_yields_fresh_id(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "store.json"
            path.write_text("garbage", encoding="utf-8")
            with self.assertLogs("chatbot_tui.storage", level="WARNING"):
                session_id = SessionStore(JsonFileStore(path)).get_or_create()
            self.assertRegex(session_id, SESSION_ID_PATTERN)
            self.assertEqual(JsonFileStore(path).get(SESSION_KEY), session_id)

    def test_rotate_replaces_current_and_persisted(self) -> None:
        backend = MemoryStore({SESSION_KEY: "S1"})
        store = SessionStore(backend)
        store.get_or_create()
        store.rotate("S2")
        self.assertEqual(store.current, "S2")
        self.assertEqual(store.get_or_create(), "S2")
        self.assertEqual(backend.get(SESSION_KEY), "S2")

    def test_rotate_same_id_is_noop(self) -> None:
        backend = MemoryStore({SESSION_KEY: "S1"})
        store = SessionStore(backend)
        store.get_or_create()
        with self.assertNoLogs("chatbot_tui.session", level="INFO"):
            store.rotate("S1")
        self.assertEqual(store.current, "S1")

    def test_rotate_blank_raises(self) -> None:
        store = SessionStore(MemoryStore())
        store.get_or_create()
        for bad in ("", "   "):
            with self.subTest(value=bad):
                with self.assertRaises(ChatbotValidationError):
                    store.rotate(bad)


if __name__ == "__main__":
    unittest.main()
