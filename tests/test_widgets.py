"""Unit tests for individual widget classes."""

from __future__ import annotations

from pathlib import Path
import unittest

try:
    from textual.app import App, ComposeResult
    from textual.widgets import Button, Input, Static

    from chatbot_tui.widgets.conversation import ConversationView
    from chatbot_tui.widgets.input_box import AttachmentChip, InputBox
    from chatbot_tui.widgets.message import MessageBubble
except ModuleNotFoundError:
    App = None  # type: ignore[assignment,misc]
    ConversationView = None  # type: ignore[assignment,misc]
    AttachmentChip = None  # type: ignore[assignment,misc]
    InputBox = None  # type: ignore[assignment,misc]
    MessageBubble = None  # type: ignore[assignment,misc]

from chatbot_tui.attachments import Attachment, MimeCategory
from chatbot_tui.transcript import Message, Sender


def _attachment(name: str = "notes.txt", size_bytes: int = 2048) -> Attachment:
    return Attachment(
        path=Path("/tmp") / name,
        name=name,
        mime_type="text/plain",
        category=MimeCategory.TEXT,
        size_bytes=size_bytes,
    )


@unittest.skipIf(MessageBubble is None, "textual is not installed")
class MessageBubbleTests(unittest.TestCase):
    """Validate MessageBubble content and role handling."""

    def test_initial_content_stored(self) -> None:
        bubble = MessageBubble(content="hello", role="user")
        self.assertEqual(bubble.message_content, "hello")

    def test_role_class_applied(self) -> None:
        self.assertIn("role-bot", MessageBubble(content="", role="bot").classes)
        self.assertIn("role-user", MessageBubble(content="", role="user").classes)

    def test_role_prefix(self) -> None:
        self.assertEqual(MessageBubble(content="", role="user").role_prefix, "You")
        self.assertEqual(MessageBubble(content="", role="bot").role_prefix, "Bot")

    def test_header_includes_timestamp(self) -> None:
        bubble = MessageBubble(content="x", role="bot", timestamp="12:00:00")
        self.assertIn("12:00:00", bubble._compose_header())
        self.assertEqual(
            MessageBubble(content="x", role="bot")._compose_header(), "**Bot**"
        )


@unittest.skipIf(AttachmentChip is None, "textual is not installed")
class AttachmentChipTests(unittest.IsolatedAsyncioTestCase):
    """Validate the staged-attachment chip."""

    def test_describe(self) -> None:
        self.assertEqual(
            AttachmentChip.describe(_attachment()), "Attached: notes.txt (2 KB)"
        )

    async def test_show_and_hide(self) -> None:
        class _TestApp(App[None]):
            def compose(self) -> ComposeResult:
                yield AttachmentChip(id="chip")

        app = _TestApp()
        async with app.run_test() as pilot:
            chip = app.query_one(AttachmentChip)
            chip.show_attachment(_attachment())
            await pilot.pause()
            self.assertTrue(chip.display)

            chip.show_attachment(None)
            await pilot.pause()
            self.assertFalse(chip.display)

    async def test_remove_button_posts_message(self) -> None:
        received: list[AttachmentChip.RemoveRequested] = []

        class _TestApp(App[None]):
            def compose(self) -> ComposeResult:
                yield AttachmentChip(id="chip")

            def on_attachment_chip_remove_requested(
                self, message: AttachmentChip.RemoveRequested
            ) -> None:
                received.append(message)

        app = _TestApp()
        async with app.run_test() as pilot:
            await pilot.click("#remove_attachment_button")
            await pilot.pause()
        self.assertEqual(len(received), 1)


@unittest.skipIf(InputBox is None, "textual is not installed")
class InputBoxTests(unittest.IsolatedAsyncioTestCase):
    """Validate InputBox composition and busy state."""

    async def test_compose_and_set_busy(self) -> None:
        class _TestApp(App[None]):
            def compose(self) -> ComposeResult:
                yield InputBox(id="ib")

        app = _TestApp()
        async with app.run_test() as pilot:
            await pilot.pause()
            box = app.query_one(InputBox)
            input_widget = app.query_one("#message_input", Input)
            attach = app.query_one("#attach_button", Button)
            send = app.query_one("#send_button", Button)
            self.assertFalse(app.query_one(AttachmentChip).display)

            box.set_busy(True, can_send=True)
            self.assertTrue(input_widget.disabled)
            self.assertTrue(attach.disabled)
            self.assertTrue(send.disabled)

            box.set_busy(False, can_send=False)
            self.assertFalse(input_widget.disabled)
            self.assertFalse(attach.disabled)
            self.assertTrue(send.disabled)

            box.set_busy(False, can_send=True)
            self.assertFalse(send.disabled)

    async def test_buttons_post_messages(self) -> None:
        received: list[str] = []

        class _TestApp(App[None]):
            def compose(self) -> ComposeResult:
                yield InputBox(id="ib")

            def on_input_box_attach_requested(self, _m: InputBox.AttachRequested) -> None:
                received.append("attach")

            def on_input_box_send_requested(self, _m: InputBox.SendRequested) -> None:
                received.append("send")

        app = _TestApp()
        async with app.run_test() as pilot:
            await pilot.click("#attach_button")
            await pilot.click("#send_button")
            await pilot.pause()
        self.assertEqual(received, ["attach", "send"])


@unittest.skipIf(ConversationView is None, "textual is not installed")
class ConversationViewTests(unittest.IsolatedAsyncioTestCase):
    """Validate incremental transcript rendering."""

    async def test_sync_mounts_only_new_messages(self) -> None:
        class _TestApp(App[None]):
            def compose(self) -> ComposeResult:
                yield ConversationView(id="conversation")

        app = _TestApp()
        async with app.run_test() as pilot:
            view = app.query_one(ConversationView)
            hint = app.query_one("#empty-hint", Static)
            self.assertTrue(hint.display)

            messages = [Message(Sender.USER, "hi"), Message(Sender.BOT, "hello")]
            bubbles = view.sync(messages[:1])
            await pilot.pause()
            self.assertEqual(len(bubbles), 1)
            self.assertFalse(hint.display)

            bubbles = view.sync(messages, timestamp=lambda: "10:00:00")
            await pilot.pause()
            self.assertEqual(len(bubbles), 1)
            self.assertEqual(bubbles[0].role, "bot")
            self.assertEqual(bubbles[0].timestamp, "10:00:00")
            self.assertIn("message-bot", bubbles[0].classes)

            self.assertEqual(view.sync(messages), [])
            self.assertEqual(view.rendered_count, 2)
            self.assertEqual(len(app.query(MessageBubble)), 2)

    async def test_thinking_indicator_toggles(self) -> None:
        class _TestApp(App[None]):
            def compose(self) -> ComposeResult:
                yield ConversationView(id="conversation")

        app = _TestApp()
        async with app.run_test():
            view = app.query_one(ConversationView)
            thinking = app.query_one("#thinking", Static)
            self.assertFalse(thinking.display)
            view.set_thinking(True)
            self.assertTrue(thinking.display)
            view.set_thinking(False)
            self.assertFalse(thinking.display)


if __name__ == "__main__":
    unittest.main()
