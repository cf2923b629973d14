"""Modal screens for notices and the attachment path prompt."""

from __future__ import annotations

from textual import events
from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Static


class NoticeScreen(ModalScreen[None]):
    """Modal that shows a short notice and closes on Escape/Enter/OK."""

    CSS = """
    NoticeScreen {
        align: center middle;
    }

    #notice-dialog {
        width: 60;
        height: auto;
        padding: 1 2;
        border: round $panel;
        background: $surface;
    }

    #notice-body {
        height: auto;
        text-align: center;
        padding-bottom: 1;
    }

    #notice-actions {
        height: 3;
        align: center middle;
    }
    """

    def __init__(self, text: str) -> None:
        super().__init__()
        self._text = text

    def compose(self) -> ComposeResult:
        with Container(id="notice-dialog"):
            yield Static(self._text, id="notice-body")
            with Container(id="notice-actions"):
                yield Button("OK", id="notice-ok", variant="primary")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "notice-ok":
            event.stop()
            self.dismiss(None)

    def on_key(self, event: events.Key) -> None:
        if event.key in {"escape", "enter"}:
            event.stop()
            self.dismiss(None)


class PathPromptScreen(ModalScreen[str | None]):
    """Prompt for a filesystem path; dismisses with ``None`` on cancel."""

    CSS = """
    PathPromptScreen {
        align: center middle;
    }

    #path-prompt-dialog {
        width: 70;
        height: auto;
        padding: 1 2;
        border: round $panel;
        background: $surface;
    }

    #path-prompt-title {
        padding-bottom: 1;
        text-style: bold;
    }

    #path-prompt-input {
        width: 100%;
        margin-bottom: 1;
    }
    """

    def __init__(self, title: str, placeholder: str = "") -> None:
        super().__init__()
        self._title = title
        self._placeholder = placeholder

    def compose(self) -> ComposeResult:
        with Container(id="path-prompt-dialog"):
            yield Static(self._title, id="path-prompt-title")
            yield Input(placeholder=self._placeholder, id="path-prompt-input")
            yield Static("Enter to confirm | Esc to cancel", id="path-prompt-help")

    def on_mount(self) -> None:
        self.query_one("#path-prompt-input", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "path-prompt-input":
            return
        event.stop()
        value = event.value.strip()
        self.dismiss(value or None)

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            event.stop()
            self.dismiss(None)
