"""Top-level package for chatbot-tui."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .app import ChatbotApp
    from .attachments import Attachment, AttachmentReader, MimeCategory
    from .config import ensure_config_dir, load_config
    from .controller import ConversationController
    from .exceptions import (
        ChatbotError,
        ChatbotProtocolError,
        ChatbotReadError,
        ChatbotTransportError,
        ChatbotValidationError,
        ConfigValidationError,
    )
    from .session import SessionStore
    from .state import ConversationState, StateManager
    from .transcript import Message, Sender, Transcript
    from .transport import ChatTransport, ExchangePayload, ExchangeResult

__all__ = [
    "Attachment",
    "AttachmentReader",
    "ChatTransport",
    "ChatbotApp",
    "ChatbotError",
    "ChatbotProtocolError",
    "ChatbotReadError",
    "ChatbotTransportError",
    "ChatbotValidationError",
    "ConfigValidationError",
    "ConversationController",
    "ConversationState",
    "ExchangePayload",
    "ExchangeResult",
    "Message",
    "MimeCategory",
    "Sender",
    "SessionStore",
    "StateManager",
    "Transcript",
    "ensure_config_dir",
    "load_config",
]

_LAZY_EXPORTS: dict[str, str] = {
    "ChatbotApp": ".app",
    "Attachment": ".attachments",
    "AttachmentReader": ".attachments",
    "MimeCategory": ".attachments",
    "ensure_config_dir": ".config",
    "load_config": ".config",
    "ConversationController": ".controller",
    "ChatbotError": ".exceptions",
    "ChatbotProtocolError": ".exceptions",
    "ChatbotReadError": ".exceptions",
    "ChatbotTransportError": ".exceptions",
    "ChatbotValidationError": ".exceptions",
    "ConfigValidationError": ".exceptions",
    "SessionStore": ".session",
    "ConversationState": ".state",
    "StateManager": ".state",
    "Message": ".transcript",
    "Sender": ".transcript",
    "Transcript": ".transcript",
    "ChatTransport": ".transport",
    "ExchangePayload": ".transport",
    "ExchangeResult": ".transport",
}


def __getattr__(name: str) -> Any:
    """Lazily import symbols to keep the UI dependency optional at import time."""
    module_name = _LAZY_EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    from importlib import import_module

    return getattr(import_module(module_name, __name__), name)
