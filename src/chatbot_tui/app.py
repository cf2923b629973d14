"""Main Textual application for chatting with the remote service."""

from __future__ import annotations

from datetime import datetime
import logging
import sys
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.widgets import Footer, Header, Input
from textual.worker import Worker, WorkerState

from .attachments import AttachmentReader
from .config import load_config
from .controller import BUSY_NOTICE, UNSUPPORTED_NOTICE, ConversationController
from .logging_utils import configure_logging
from .screens import NoticeScreen, PathPromptScreen
from .session import SessionStore
from .storage import JsonFileStore, KeyValueStore, MemoryStore
from .transport import ChatTransport
from .widgets.conversation import ConversationView
from .widgets.input_box import AttachmentChip, InputBox
from .widgets.message import MessageBubble

LOGGER = logging.getLogger(__name__)


def build_store(session_config: dict[str, Any]) -> KeyValueStore:
    """Pick the session backing store from the ``[session]`` section."""
    if bool(session_config.get("persist", True)):
        return JsonFileStore(str(session_config["store_path"]))
    return MemoryStore()


def build_transport(service_config: dict[str, Any]) -> ChatTransport:
    """Create the HTTP transport from the ``[service]`` section."""
    return ChatTransport(
        base_url=str(service_config["base_url"]),
        chat_path=str(service_config["chat_path"]),
        timeout=float(service_config["timeout"]),
    )


class ChatbotApp(App[None]):
    """Chat window: transcript, thinking indicator, attachment chip, input row."""

    CSS = """
    Screen {
        layout: vertical;
        background: $background;
    }

    #app-root {
        layout: vertical;
        width: 100%;
        height: 1fr;
    }

    #conversation {
        height: 1fr;
        padding: 1;
    }

    InputBox {
        height: auto;
        padding: 0 1 1 1;
        border-top: solid $panel;
        background: $surface;
    }

    #input_row {
        height: auto;
    }

    #message_input {
        width: 1fr;
    }

    #attach_button, #send_button {
        margin-left: 1;
        min-width: 10;
    }

    MessageBubble {
        width: 75%;
        margin: 1 0;
        padding: 1 2;
        border: round $panel;
    }

    .message-user {
        margin-left: 25%;
    }
    """

    DEFAULT_ACTION_DESCRIPTIONS: dict[str, str] = {
        "send_message": "Send",
        "attach_file": "Attach",
        "remove_attachment": "Remove File",
        "quit": "Quit",
    }

    def __init__(
        self,
        config: dict[str, dict[str, Any]] | None = None,
        *,
        controller: ConversationController | None = None,
    ) -> None:
        self.config = config if config is not None else load_config()
        self.window_title = str(self.config["app"]["title"])
        configure_logging(self.config["logging"])
        LOGGER.info(
            "app.python",
            extra={
                "event": "app.python",
                "executable": sys.executable,
                "version": sys.version.split()[0],
            },
        )

        self.chat_transport: ChatTransport | None = None
        if controller is None:
            self.chat_transport = build_transport(self.config["service"])
            controller = ConversationController(
                session_store=SessionStore(build_store(self.config["session"])),
                reader=AttachmentReader(
                    max_bytes=int(self.config["attachments"]["max_bytes"])
                ),
                transport=self.chat_transport,
            )
        self.controller = controller
        self._binding_specs = self._binding_specs_from_config(self.config)

        # Cached widget references, populated in on_mount().
        self._w_conversation: ConversationView | None = None
        self._w_input: Input | None = None
        self._w_input_box: InputBox | None = None
        self._w_chip: AttachmentChip | None = None
        super().__init__()

        self.controller.on_change(self._refresh_view)
        self.controller.on_notice(self._show_notice)

    @classmethod
    def _binding_specs_from_config(
        cls, config: dict[str, dict[str, Any]]
    ) -> list[Binding]:
        keybinds = config.get("keybinds", {})
        bindings: list[Binding] = []
        for action_name, description in cls.DEFAULT_ACTION_DESCRIPTIONS.items():
            binding_key = keybinds.get(action_name)
            if isinstance(binding_key, str) and binding_key.strip():
                bindings.append(
                    Binding(
                        key=binding_key.strip(),
                        action=action_name,
                        description=description,
                        show=True,
                    )
                )
        return bindings

    @property
    def show_timestamps(self) -> bool:
        return bool(self.config["ui"].get("show_timestamps", True))

    @staticmethod
    def _timestamp() -> str:
        return datetime.now().strftime("%H:%M:%S")

    def _style_bubble(self, bubble: MessageBubble) -> None:
        ui_cfg = self.config["ui"]
        if bubble.role == "user":
            bubble.styles.background = str(ui_cfg["user_message_color"])
            bubble.styles.color = "#ffffff"
        else:
            bubble.styles.background = str(ui_cfg["bot_message_color"])
            bubble.styles.color = "#1f2937"

    def compose(self) -> ComposeResult:
        """Compose app widgets."""
        yield Header()
        with Container(id="app-root"):
            yield ConversationView(id="conversation")
            yield InputBox(id="input_box")
        yield Footer()

    async def on_mount(self) -> None:
        """Register keybindings, load the session, and render initial state."""
        self.title = self.window_title
        for binding in self._binding_specs:
            self.bind(
                binding.key,
                binding.action,
                description=binding.description,
                show=binding.show,
            )

        self._w_conversation = self.query_one(ConversationView)
        self._w_input = self.query_one("#message_input", Input)
        self._w_input_box = self.query_one(InputBox)
        self._w_chip = self.query_one(AttachmentChip)

        try:
            self.controller.start()
        except OSError as exc:
            # Submissions stay rejected until a session id exists.
            LOGGER.error(
                "app.session.unavailable",
                extra={"event": "app.session.unavailable", "reason": str(exc)},
            )
            self.notify("Unable to load the chat session.", severity="error")
        self._refresh_view()

    async def on_unmount(self) -> None:
        if self.chat_transport is not None:
            await self.chat_transport.aclose()

    def _idle_sub_title(self) -> str:
        session_id = self.controller.session_id
        return f"Session: {session_id}" if session_id else "Session unavailable"

    def _refresh_view(self) -> None:
        """Re-render everything derived from controller state."""
        if self._w_conversation is None or self._w_input is None:
            return
        controller = self.controller
        self._w_conversation.sync(
            controller.transcript.messages,
            timestamp=self._timestamp if self.show_timestamps else None,
            style=self._style_bubble,
        )
        pending = controller.is_pending
        self._w_conversation.set_thinking(pending)
        if self._w_chip is not None:
            self._w_chip.show_attachment(controller.attachment)
        if self._w_input_box is not None:
            self._w_input_box.set_busy(pending, can_send=controller.can_submit)
        self.sub_title = "Thinking..." if pending else self._idle_sub_title()
        if not pending:
            self._w_input.focus()

    def _show_notice(self, message: str) -> None:
        if message == UNSUPPORTED_NOTICE:
            self.push_screen(NoticeScreen(message))
        else:
            self.notify(message, severity="warning")

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id != "message_input":
            return
        self.controller.draft = event.value
        if self._w_input_box is not None:
            self._w_input_box.set_busy(
                self.controller.is_pending, can_send=self.controller.can_submit
            )

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "message_input":
            return
        event.stop()
        self.action_send_message()

    def on_input_box_send_requested(self, _message: InputBox.SendRequested) -> None:
        self.action_send_message()

    def on_input_box_attach_requested(
        self, _message: InputBox.AttachRequested
    ) -> None:
        self.action_attach_file()

    def on_attachment_chip_remove_requested(
        self, _message: AttachmentChip.RemoveRequested
    ) -> None:
        self.action_remove_attachment()

    def action_send_message(self) -> None:
        """Hand the current input to the controller on a background worker."""
        text = self.controller.draft
        if self._w_input is not None and not self.controller.is_pending:
            text = self._w_input.value
            self.controller.draft = text
            if self.controller.can_submit:
                self._w_input.value = ""
        self.run_worker(
            self.controller.submit(text), group="exchange", exit_on_error=False
        )

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        if event.state != WorkerState.ERROR:
            return
        error = event.worker.error
        LOGGER.error(
            "app.worker.failed",
            extra={
                "event": "app.worker.failed",
                "worker": event.worker.name,
                "error_type": type(error).__name__,
                "reason": str(error),
            },
        )
        self.notify("Something went wrong. Please try again.", severity="error")
        self._refresh_view()

    def action_attach_file(self) -> None:
        """Prompt for a file path and stage it."""
        if self.controller.is_pending:
            self.notify(BUSY_NOTICE)
            return
        self.push_screen(
            PathPromptScreen(
                "Attach file", placeholder="Path to a .png, .jpg or .txt file"
            ),
            callback=self._on_attach_path,
        )

    def _on_attach_path(self, path: str | None) -> None:
        if path:
            self.controller.stage_attachment(path)

    def action_remove_attachment(self) -> None:
        self.controller.remove_attachment()
