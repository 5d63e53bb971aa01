"""Provider-agnostic LLM layer.

Usage:
    from pm_assistant.llm import get_llm, Message, MessageRole

    llm = get_llm()
    result = await llm.invoke([Message(role=MessageRole.USER, content="Hello!")])
"""

# Enums
from pm_assistant.llm.types import (
    LLMProvider,
    MessageRole,
    FinishReason,
)

# Core types
from pm_assistant.llm.types import (
    Message,
    TokenUsage,
    LLMResult,
    LLMConfig,
)

# Client and Factory
from pm_assistant.llm.client import (
    UnifiedChatClient,
    get_llm,
)
from pm_assistant.llm.factory import (
    detect_provider,
    create_adapter,
    get_default_model,
)

__all__ = [
    # Enums
    "LLMProvider",
    "MessageRole",
    "FinishReason",
    # Core types
    "Message",
    "TokenUsage",
    "LLMResult",
    "LLMConfig",
    # Client
    "UnifiedChatClient",
    "get_llm",
    # Factory
    "detect_provider",
    "create_adapter",
    "get_default_model",
]
