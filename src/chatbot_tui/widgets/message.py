"""Message bubble widget for transcript rendering."""

from __future__ import annotations

from typing import Any

from rich.markdown import Markdown
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Static


class MessageBubble(Vertical):
    """Render a single transcript entry as markdown with a role header."""

    DEFAULT_CSS = """
    MessageBubble {
        height: auto;
    }
    MessageBubble > #header-block {
        padding: 0;
        text-style: bold;
    }
    MessageBubble > #content-block {
        height: auto;
    }
    """

    def __init__(
        self,
        content: str,
        role: str,
        timestamp: str = "",
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.message_content = content
        self.role = role
        self.timestamp = timestamp
        self.add_class(f"role-{role}")

    @property
    def role_prefix(self) -> str:
        """Return a human-friendly role label."""
        return "You" if self.role == "user" else "Bot"

    def _compose_header(self) -> str:
        if self.timestamp:
            return f"**{self.role_prefix}**  _{self.timestamp}_"
        return f"**{self.role_prefix}**"

    def compose(self) -> ComposeResult:
        yield Static(Markdown(self._compose_header()), id="header-block")
        text = self.message_content.rstrip()
        yield Static(Markdown(text) if text else "", id="content-block")
