"""Input region with attachment chip, message field, attach and send buttons."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.widgets import Button, Input, Label

from ..attachments import Attachment


class AttachmentChip(Horizontal):
    """Show the staged file with a button to drop it."""

    DEFAULT_CSS = """
    AttachmentChip {
        height: auto;
        padding: 0 1;
        background: $boost;
    }
    AttachmentChip #attachment_label {
        width: 1fr;
        padding-top: 1;
    }
    AttachmentChip #remove_attachment_button {
        min-width: 5;
    }
    """

    class RemoveRequested(Message):
        """Posted when the user clicks the remove button."""

    def compose(self) -> ComposeResult:
        yield Label("", id="attachment_label")
        yield Button("×", id="remove_attachment_button", variant="default")

    @staticmethod
    def describe(attachment: Attachment) -> str:
        return f"Attached: {attachment.name} ({attachment.size_kb} KB)"

    def show_attachment(self, attachment: Attachment | None) -> None:
        """Render the staged attachment, hiding the chip when there is none."""
        self.display = attachment is not None
        label = self.query_one("#attachment_label", Label)
        label.update(self.describe(attachment) if attachment is not None else "")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "remove_attachment_button":
            event.stop()
            self.post_message(self.RemoveRequested())


class InputBox(Vertical):
    """Message field plus attach and send buttons."""

    class AttachRequested(Message):
        """Posted when the user clicks the attach button."""

    class SendRequested(Message):
        """Posted when the user clicks the send button."""

    def compose(self) -> ComposeResult:
        chip = AttachmentChip(id="attachment_chip")
        chip.display = False
        yield chip
        with Horizontal(id="input_row"):
            yield Input(placeholder="Type your message...", id="message_input")
            yield Button("Attach", id="attach_button", variant="default")
            yield Button("Send", id="send_button", variant="primary")

    def set_busy(self, busy: bool, can_send: bool) -> None:
        """Disable editing while a reply is pending."""
        self.query_one("#message_input", Input).disabled = busy
        self.query_one("#attach_button", Button).disabled = busy
        self.query_one("#send_button", Button).disabled = busy or not can_send

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Forward button clicks as typed messages."""
        if event.button.id == "attach_button":
            event.stop()
            self.post_message(self.AttachRequested())
        elif event.button.id == "send_button":
            event.stop()
            self.post_message(self.SendRequested())
