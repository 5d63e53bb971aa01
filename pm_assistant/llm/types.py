"""Core type definitions for the multi-provider LLM layer."""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field
from datetime import datetime, timezone
import uuid


class LLMProvider(str, Enum):
    """Supported LLM providers."""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


class MessageRole(str, Enum):
    """Canonical message roles."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """Canonical message format."""
    role: MessageRole
    content: str


class FinishReason(str, Enum):
    """Why the LLM stopped generating."""
    STOP = "stop"
    LENGTH = "length"
    CONTENT_FILTER = "content_filter"
    ERROR = "error"


class TokenUsage(BaseModel):
    """Token usage tracking."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class LLMResult(BaseModel):
    """Unified result from any provider."""
    # Content
    text: str = ""
    finish_reason: FinishReason = FinishReason.STOP
    error: Optional[str] = None

    # Metadata
    request_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    provider: LLMProvider
    model: str

    # Observability
    latency_ms: float = 0
    usage: TokenUsage = Field(default_factory=TokenUsage)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Raw response for debugging
    raw: Optional[Any] = None


class LLMConfig(BaseModel):
    """Configuration for LLM client."""
    provider: LLMProvider
    model: str
    temperature: float = 0.7
    max_tokens: int = 2000
    timeout_seconds: float = 30.0
    api_key: Optional[str] = None  # Override from settings
    base_url: Optional[str] = None  # OpenAI-compatible endpoint override
