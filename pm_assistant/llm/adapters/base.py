"""Base adapter interface for LLM providers."""

from abc import ABC, abstractmethod
from typing import Any

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from pm_assistant.llm.types import (
    LLMConfig,
    LLMResult,
    Message,
    MessageRole,
    TokenUsage,
)


class BaseAdapter(ABC):
    """Abstract base for LLM provider adapters."""

    def __init__(self, config: LLMConfig):
        self.config = config

    @abstractmethod
    async def invoke(self, messages: list[Message]) -> LLMResult:
        """Send messages to LLM and get unified result."""
        pass

    @abstractmethod
    def parse_response(self, response: Any, latency_ms: float) -> LLMResult:
        """Parse provider response to unified format."""
        pass

    def convert_messages(self, messages: list[Message]) -> list[BaseMessage]:
        """Convert canonical messages to LangChain format."""
        result: list[BaseMessage] = []
        for msg in messages:
            if msg.role == MessageRole.SYSTEM:
                result.append(SystemMessage(content=msg.content))
            elif msg.role == MessageRole.USER:
                result.append(HumanMessage(content=msg.content))
            elif msg.role == MessageRole.ASSISTANT:
                result.append(AIMessage(content=msg.content))
        return result

    @staticmethod
    def extract_usage(response: Any) -> TokenUsage:
        """Read LangChain usage metadata, if the provider returned any."""
        um = getattr(response, "usage_metadata", None)
        if not um:
            return TokenUsage()
        return TokenUsage(
            prompt_tokens=um.get("input_tokens", 0),
            completion_tokens=um.get("output_tokens", 0),
            total_tokens=um.get("total_tokens", 0),
        )
