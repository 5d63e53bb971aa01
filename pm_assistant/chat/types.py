"""Request/response shapes exposed to the chat route."""
from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from pm_assistant.conversation.models import CamelModel, ConversationIntent, ScopeContext

FALLBACK_RESPONSE = (
    "I apologize, but I encountered an error while processing your request. "
    "Please try again or rephrase your question."
)
EMPTY_COMPLETION_RESPONSE = "I apologize, but I encountered an issue generating a response."


class ChatMessage(CamelModel):
    """One caller-supplied history entry."""

    role: Literal["user", "assistant", "system"]
    content: str


class ChatResponse(CamelModel):
    response: str
    tools_used: list[str] = Field(default_factory=list)
    intent: ConversationIntent = ConversationIntent.GENERAL_HELP
    conversation_id: Optional[str] = None

    @classmethod
    def fallback(cls, conversation_id: Optional[str] = None) -> "ChatResponse":
        """Uniform response for any failed chat request."""
        return cls(
            response=FALLBACK_RESPONSE,
            tools_used=[],
            intent=ConversationIntent.GENERAL_HELP,
            conversation_id=conversation_id,
        )


class ConversationStatus(CamelModel):
    """Read-only view of a session for UI polling."""

    session_id: str
    current_context: ScopeContext
    active_intent: Optional[ConversationIntent] = None
    message_count: int
    last_interaction: datetime


class ConversationStats(CamelModel):
    """Debug view of the store."""

    active_conversations: int
    user_ids: list[str]
