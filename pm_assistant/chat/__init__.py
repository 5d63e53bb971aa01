"""Assistant chat orchestration."""

from pm_assistant.chat.exceptions import (
    AuthenticationError,
    ChatError,
    CompletionError,
    ContextUnavailableError,
    UserNotFoundError,
)
from pm_assistant.chat.orchestrator import ChatOrchestrator
from pm_assistant.chat.types import (
    EMPTY_COMPLETION_RESPONSE,
    FALLBACK_RESPONSE,
    ChatMessage,
    ChatResponse,
    ConversationStats,
    ConversationStatus,
)

__all__ = [
    "ChatOrchestrator",
    # Types
    "ChatMessage",
    "ChatResponse",
    "ConversationStats",
    "ConversationStatus",
    "EMPTY_COMPLETION_RESPONSE",
    "FALLBACK_RESPONSE",
    # Exceptions
    "AuthenticationError",
    "ChatError",
    "CompletionError",
    "ContextUnavailableError",
    "UserNotFoundError",
]
