"""Conversation controller driving the request/response cycle.

The controller owns the transcript, the pending flag, and the single staged
attachment slot. Front ends never mutate those directly: they call
``stage_attachment``/``remove_attachment``/``submit`` and re-render when the
``on_change`` callbacks fire.
"""

from __future__ import annotations

from collections.abc import Callable
import logging
from pathlib import Path

from .attachments import Attachment, AttachmentReader, MimeCategory
from .exceptions import ChatbotError, ChatbotValidationError
from .session import SessionStore
from .state import ConversationState, StateManager
from .transcript import Sender, Transcript
from .transport import ChatTransport, ExchangePayload

LOGGER = logging.getLogger(__name__)

READ_ERROR_TEXT = "Error reading your file. Please try again."
EXCHANGE_ERROR_TEXT = "Oops! Something went wrong. Please try again."

UNSUPPORTED_NOTICE = (
    "Unsupported file type. Please upload an image (PNG, JPG) or a plain text file."
)
EMPTY_NOTICE = "Type a message or attach a file first."
BUSY_NOTICE = "Busy. Wait for the current reply to finish."
NO_SESSION_NOTICE = "Session is not ready yet."


class ConversationController:
    """Validate input, stage attachments, and run one exchange at a time."""

    def __init__(
        self,
        session_store: SessionStore,
        reader: AttachmentReader,
        transport: ChatTransport,
        *,
        transcript: Transcript | None = None,
        state: StateManager | None = None,
    ) -> None:
        self._session_store = session_store
        self._reader = reader
        self._transport = transport
        self._transcript = transcript or Transcript()
        self._state = state or StateManager()
        self._attachment: Attachment | None = None
        self._last_error: ChatbotError | None = None
        self._change_callbacks: list[Callable[[], None]] = []
        self._notice_callbacks: list[Callable[[str], None]] = []
        self.draft = ""

    # -- observers -----------------------------------------------------------

    def on_change(self, callback: Callable[[], None]) -> None:
        """Register a callback fired after transcript, slot, or state changes."""
        self._change_callbacks.append(callback)

    def on_notice(self, callback: Callable[[str], None]) -> None:
        """Register a callback for transient, user-facing notices."""
        self._notice_callbacks.append(callback)

    def _notify_change(self) -> None:
        for callback in list(self._change_callbacks):
            callback()

    def _publish_notice(self, message: str) -> None:
        LOGGER.info(
            "controller.notice",
            extra={"event": "controller.notice", "notice": message},
        )
        for callback in list(self._notice_callbacks):
            callback(message)

    # -- read-only views -----------------------------------------------------

    @property
    def transcript(self) -> Transcript:
        return self._transcript

    @property
    def attachment(self) -> Attachment | None:
        return self._attachment

    @property
    def state(self) -> ConversationState:
        return self._state.state

    @property
    def is_pending(self) -> bool:
        return self._state.state != ConversationState.IDLE

    @property
    def session_id(self) -> str | None:
        return self._session_store.current

    @property
    def last_error(self) -> ChatbotError | None:
        """Most recent exchange failure, for diagnostics only."""
        return self._last_error

    @property
    def can_submit(self) -> bool:
        """Whether the current draft/slot would be accepted by ``submit``."""
        return (
            not self.is_pending
            and self.session_id is not None
            and (bool(self.draft.strip()) or self._attachment is not None)
        )

    # -- operations ----------------------------------------------------------

    def start(self) -> str:
        """Load or create the session id; submissions are rejected until then."""
        session_id = self._session_store.get_or_create()
        self._notify_change()
        return session_id

    def stage_attachment(self, path: str | Path) -> Attachment | None:
        """Classify and stage a file picked by the user.

        Returns the staged attachment, or ``None`` when the file was rejected
        (a notice is published and the slot is left empty).
        """
        if self.is_pending:
            self._publish_notice(BUSY_NOTICE)
            return None

        category = self._reader.validate(self._reader.guess_mime_type(path))
        if category is MimeCategory.UNSUPPORTED:
            self._reject_attachment(str(path), UNSUPPORTED_NOTICE)
            return None
        try:
            attachment = self._reader.inspect(path)
        except ChatbotValidationError as exc:
            self._reject_attachment(str(path), str(exc))
            return None
        return attachment if self.stage(attachment) else None

    def stage(self, attachment: Attachment) -> bool:
        """Stage an already inspected attachment, replacing any previous one."""
        if self.is_pending:
            self._publish_notice(BUSY_NOTICE)
            return False
        if self._reader.validate(attachment.mime_type) is MimeCategory.UNSUPPORTED:
            self._reject_attachment(attachment.name, UNSUPPORTED_NOTICE)
            return False

        self._attachment = attachment
        LOGGER.info(
            "controller.attachment.staged",
            extra={
                "event": "controller.attachment.staged",
                "attachment": attachment.name,
                "mime_type": attachment.mime_type,
                "size_bytes": attachment.size_bytes,
            },
        )
        self._notify_change()
        return True

    def _reject_attachment(self, name: str, notice: str) -> None:
        self._attachment = None
        LOGGER.warning(
            "controller.attachment.rejected",
            extra={
                "event": "controller.attachment.rejected",
                "attachment": name,
                "reason": notice,
            },
        )
        self._publish_notice(notice)
        self._notify_change()

    def remove_attachment(self) -> None:
        """Drop the staged attachment on explicit user request."""
        if self._attachment is None:
            return
        self._attachment = None
        self._notify_change()

    async def submit(self, text: str | None = None) -> bool:
        """Run one exchange for ``text`` (or the current draft).

        Returns ``True`` when the submission was accepted, whatever the
        outcome of the exchange itself; ``False`` when it was rejected and
        nothing changed.
        """
        raw_text = self.draft if text is None else text
        attachment = self._attachment

        if self.is_pending:
            self._publish_notice(BUSY_NOTICE)
            return False

        if not raw_text.strip() and attachment is None:
            self._publish_notice(EMPTY_NOTICE)
            return False

        session_id = self._session_store.current
        if session_id is None:
            LOGGER.warning(
                "controller.submit.no_session",
                extra={"event": "controller.submit.no_session"},
            )
            self._publish_notice(NO_SESSION_NOTICE)
            return False

        # A second submit while one is pending is rejected here.
        if not await self._state.begin_exchange():
            self._publish_notice(BUSY_NOTICE)
            return False

        display_text = raw_text
        if not raw_text.strip() and attachment is not None:
            display_text = f"[File: {attachment.name}]"
        self._transcript.append(Sender.USER, display_text)
        self.draft = ""
        self._notify_change()

        try:
            await self._run_exchange(raw_text, session_id, attachment)
        finally:
            self._attachment = None
            await self._state.finish_exchange()
            self._notify_change()
        return True

    async def _run_exchange(
        self, text: str, session_id: str, attachment: Attachment | None
    ) -> None:
        file_content: str | None = None
        file_mime_type: str | None = None
        if attachment is not None:
            try:
                file_content = await self._reader.read(attachment)
            except ChatbotError as exc:
                await self._record_failure(exc, READ_ERROR_TEXT)
                return
            file_mime_type = attachment.mime_type

        payload = ExchangePayload(
            message=text,
            session_id=session_id,
            file_content=file_content,
            file_mime_type=file_mime_type,
        )
        try:
            result = await self._transport.send(payload)
        except ChatbotError as exc:
            await self._record_failure(exc, EXCHANGE_ERROR_TEXT)
            return

        self._last_error = None
        self._transcript.append(Sender.BOT, result.response_text)
        if result.session_id != session_id:
            try:
                self._session_store.rotate(result.session_id)
            except OSError as exc:
                # The reply stays; the next exchange reuses the old id.
                LOGGER.warning(
                    "controller.session.rotate_failed",
                    extra={
                        "event": "controller.session.rotate_failed",
                        "session_id": result.session_id,
                        "reason": str(exc),
                    },
                )

    async def _record_failure(self, exc: ChatbotError, bot_text: str) -> None:
        self._last_error = exc
        LOGGER.warning(
            "controller.exchange.failed",
            extra={
                "event": "controller.exchange.failed",
                "error_type": type(exc).__name__,
                "reason": str(exc),
            },
        )
        await self._state.mark_failed()
        self._transcript.append(Sender.BOT, bot_text)
