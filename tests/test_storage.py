"""Tests for key-value persistence backends."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
import unittest

from chatbot_tui.storage import JsonFileStore, MemoryStore


class MemoryStoreTests(unittest.TestCase):
    """Validate the in-process store."""

    def test_get_returns_none_for_missing_key(self) -> None:
        self.assertIsNone(MemoryStore().get("missing"))

    def test_set_then_get(self) -> None:
        store = MemoryStore({"a": "1"})
        store.set("b", "2")
        self.assertEqual(store.get("a"), "1")
        self.assertEqual(store.get("b"), "2")


class JsonFileStoreTests(unittest.TestCase):
    """Validate the JSON file store."""

    def test_missing_file_reads_as_empty(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = JsonFileStore(Path(tmp) / "store.json")
            self.assertIsNone(store.get("chatbotSessionId"))

    def test_values_survive_new_instance(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "state" / "store.json"
            JsonFileStore(path).set("chatbotSessionId", "session_1")
            JsonFileStore(path).set("other", "value")

            reopened = JsonFileStore(path)
            self.assertEqual(reopened.get("chatbotSessionId"), "session_1")
            self.assertEqual(reopened.get("other"), "value")
            self.assertEqual(
                json.loads(path.read_text(encoding="utf-8")),
                {"chatbotSessionId": "session_1", "other": "value"},
            )

    def test_no_temp_files_left_behind(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "store.json"
            JsonFileStore(path).set("k", "v")
            self.assertEqual(sorted(p.name for p in Path(tmp).iterdir()), ["store.json"])

    @unittest.skipUnless(os.name == "posix", "permissions are POSIX-only")
    def test_file_is_private(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "store.json"
            JsonFileStore(path).set("k", "v")
            self.assertEqual(path.stat().st_mode & 0o777, 0o600)

    def test_corrupt_file_reads_as_empty(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "store.json"
            path.write_text("{not json", encoding="utf-8")
            store = JsonFileStore(path)
            with self.assertLogs("chatbot_tui.storage", level="WARNING"):
                self.assertIsNone(store.get("k"))
            store.set("k", "v")
            self.assertEqual(store.get("k"), "v")

    def test_non_string_values_are_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "store.json"
            path.write_text(json.dumps({"k": 5, "s": "ok"}), encoding="utf-8")
            store = JsonFileStore(path)
            self.assertIsNone(store.get("k"))
            self.assertEqual(store.get("s"), "ok")


if __name__ == "__main__":
    unittest.main()
