"""Domain exception hierarchy for the chatbot client."""

from __future__ import annotations


class ChatbotError(RuntimeError):
    """Base class for all domain-level chat errors."""


class ChatbotValidationError(ChatbotError):
    """Raised when user input or an attachment is rejected before any I/O."""


class ChatbotReadError(ChatbotError):
    """Raised when a staged attachment cannot be read from disk."""


class ChatbotTransportError(ChatbotError):
    """Raised when the chat service cannot be reached or returns a failure status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ChatbotProtocolError(ChatbotError):
    """Raised when the chat service response does not match the expected shape."""


class ConfigValidationError(ChatbotError):
    """Raised when configuration cannot be validated safely."""
