"""Attachment classification and encoding for the chat request body.

Images travel as bare base64 (no ``data:`` prefix) and plain text files
travel as their decoded contents. Classification happens once, when the
file is staged, so the read at send time only ever runs on accepted input.
"""

from __future__ import annotations

import asyncio
import base64
from dataclasses import dataclass
from enum import Enum
import logging
import mimetypes
from pathlib import Path

from .exceptions import ChatbotReadError, ChatbotValidationError

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10 MB

IMAGE_MIME_TYPES: frozenset[str] = frozenset({"image/png", "image/jpeg", "image/jpg"})
TEXT_MIME_TYPES: frozenset[str] = frozenset({"text/plain"})

UNKNOWN_MIME_TYPE = "application/octet-stream"


class MimeCategory(str, Enum):
    """How an attachment is encoded on the wire."""

    IMAGE = "image"
    TEXT = "text"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class Attachment:
    """A file picked by the user and already classified."""

    path: Path
    name: str
    mime_type: str
    category: MimeCategory
    size_bytes: int

    @property
    def size_kb(self) -> int:
        return round(self.size_bytes / 1024)


class AttachmentReader:
    """Classify files by media type and turn them into request payloads."""

    def __init__(self, max_bytes: int = DEFAULT_MAX_BYTES) -> None:
        self.max_bytes = max_bytes

    @staticmethod
    def validate(mime_type: str | None) -> MimeCategory:
        """Map a declared media type onto the category used for encoding."""
        if not mime_type:
            return MimeCategory.UNSUPPORTED
        essence = mime_type.split(";", 1)[0].strip().lower()
        if essence in IMAGE_MIME_TYPES:
            return MimeCategory.IMAGE
        if essence in TEXT_MIME_TYPES:
            return MimeCategory.TEXT
        return MimeCategory.UNSUPPORTED

    @staticmethod
    def guess_mime_type(path: str | Path) -> str:
        """Return the declared media type for a filesystem path."""
        guessed, _encoding = mimetypes.guess_type(str(path))
        return guessed or UNKNOWN_MIME_TYPE

    def inspect(self, path: str | Path) -> Attachment:
        """Validate path, type, and size without reading the file contents.

        Raises:
            ChatbotValidationError: with a user-facing message when the file
                cannot be staged.
        """
        resolved = Path(path).expanduser().resolve()
        if not resolved.exists():
            raise ChatbotValidationError(f"File not found: {path}")
        if not resolved.is_file():
            raise ChatbotValidationError(f"Not a file: {path}")

        mime_type = self.guess_mime_type(resolved)
        category = self.validate(mime_type)
        if category is MimeCategory.UNSUPPORTED:
            raise ChatbotValidationError(f"Unsupported file type: {mime_type}")

        size = resolved.stat().st_size
        if size > self.max_bytes:
            max_mb = self.max_bytes / (1024 * 1024)
            raise ChatbotValidationError(f"File too large (max {max_mb:.1f}MB)")

        return Attachment(
            path=resolved,
            name=resolved.name,
            mime_type=mime_type,
            category=category,
            size_bytes=size,
        )

    async def read(self, attachment: Attachment) -> str:
        """Read the attachment into its wire representation.

        Raises:
            ChatbotValidationError: if the attachment category is unsupported.
            ChatbotReadError: if the underlying read or decode fails.
        """
        if attachment.category is MimeCategory.UNSUPPORTED:
            raise ChatbotValidationError(
                f"Unsupported file type: {attachment.mime_type}"
            )
        try:
            if attachment.category is MimeCategory.IMAGE:
                raw = await asyncio.to_thread(attachment.path.read_bytes)
                return base64.b64encode(raw).decode("ascii")
            return await asyncio.to_thread(
                attachment.path.read_text, encoding="utf-8"
            )
        except (OSError, UnicodeDecodeError) as exc:
            LOGGER.warning(
                "attachment.read_failed",
                extra={
                    "event": "attachment.read_failed",
                    "path": str(attachment.path),
                    "error_type": type(exc).__name__,
                },
            )
            raise ChatbotReadError(f"Unable to read {attachment.name}: {exc}") from exc
