"""Append-only conversation transcript."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum


class Sender(str, Enum):
    """Who authored a transcript entry."""

    USER = "user"
    BOT = "bot"


@dataclass(frozen=True)
class Message:
    """A single transcript entry; never edited once appended."""

    sender: Sender
    text: str


class Transcript:
    """Ordered log of messages shown to the user.

    Entries are only ever appended. A failed exchange is recorded as an
    extra bot message after the user's turn.
    """

    def __init__(self) -> None:
        self._messages: list[Message] = []

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))

    @property
    def messages(self) -> tuple[Message, ...]:
        """Snapshot of all entries in insertion order."""
        return tuple(self._messages)

    @property
    def last(self) -> Message | None:
        return self._messages[-1] if self._messages else None

    def append(self, sender: Sender, text: str) -> Message:
        """Append a new entry and return it."""
        message = Message(sender=Sender(sender), text=text)
        self._messages.append(message)
        return message

    def to_dicts(self) -> list[dict[str, str]]:
        """Plain ``{"sender", "text"}`` rows for rendering or export."""
        return [{"sender": m.sender.value, "text": m.text} for m in self._messages]
