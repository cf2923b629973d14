"""Scrollable transcript view widget."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.widgets import Static

from ..transcript import Message
from .message import MessageBubble

EMPTY_HINT = "Type a message or upload a document to start chatting!"


class ConversationView(VerticalScroll):
    """Host one bubble per transcript entry plus the thinking indicator.

    The view only ever appends bubbles, mirroring the append-only transcript.
    """

    DEFAULT_CSS = """
    ConversationView #empty-hint {
        width: 100%;
        margin-top: 4;
        text-align: center;
        color: $text-muted;
    }
    ConversationView #thinking {
        height: auto;
        width: auto;
        padding: 0 2;
        color: $text-muted;
    }
    """

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._rendered = 0

    def compose(self) -> ComposeResult:
        yield Static(EMPTY_HINT, id="empty-hint")
        thinking = Static("Thinking...", id="thinking")
        thinking.display = False
        yield thinking

    @property
    def rendered_count(self) -> int:
        return self._rendered

    def sync(
        self,
        messages: Sequence[Message],
        timestamp: Callable[[], str] | None = None,
        style: Callable[[MessageBubble], None] | None = None,
    ) -> list[MessageBubble]:
        """Mount bubbles for entries that are not on screen yet."""
        new_messages = list(messages[self._rendered :])
        if not new_messages:
            return []
        self.query_one("#empty-hint", Static).display = False
        bubbles: list[MessageBubble] = []
        for message in new_messages:
            bubble = MessageBubble(
                content=message.text,
                role=message.sender.value,
                timestamp=timestamp() if timestamp is not None else "",
            )
            bubble.add_class(f"message-{message.sender.value}")
            if style is not None:
                style(bubble)
            bubbles.append(bubble)
        self._rendered += len(new_messages)
        self.mount(*bubbles, before=self.query_one("#thinking", Static))
        self.scroll_end(animate=False)
        return bubbles

    def set_thinking(self, active: bool) -> None:
        """Show or hide the pending-reply indicator."""
        self.query_one("#thinking", Static).display = active
        if active:
            self.scroll_end(animate=False)
