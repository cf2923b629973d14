"""Key-value persistence for values that must survive restarts."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
import tempfile
from typing import Protocol

LOGGER = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Get/set of single string entries scoped to the local client."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """Process-local store used when persistence is disabled."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStore:
    """Persist string entries in a private JSON object on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def _enforce_private_permissions(self, path: Path) -> None:
        if os.name != "posix":
            return
        try:
            path.chmod(0o600)
        except OSError:
            LOGGER.warning("Unable to enforce 0600 permissions for %s", path)

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            LOGGER.warning(
                "storage.read_failed",
                extra={
                    "event": "storage.read_failed",
                    "path": str(self.path),
                    "reason": str(exc),
                },
            )
            return {}
        if not isinstance(payload, dict):
            return {}
        return {k: v for k, v in payload.items() if isinstance(v, str)}

    def _write_all(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write to a sibling temp file and swap it in so readers never see a
        # truncated document.
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False, indent=2, sort_keys=True)
            self._enforce_private_permissions(tmp_path)
            os.replace(tmp_path, self.path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

    def get(self, key: str) -> str | None:
        """Return the stored value for ``key`` or ``None``."""
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, keeping any other entries."""
        data = self._read_all()
        data[key] = value
        self._write_all(data)
