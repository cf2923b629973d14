"""Widget exports for the chatbot UI."""

from .conversation import ConversationView
from .input_box import AttachmentChip, InputBox
from .message import MessageBubble

__all__ = ["AttachmentChip", "ConversationView", "InputBox", "MessageBubble"]
