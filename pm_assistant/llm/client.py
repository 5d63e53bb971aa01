"""UnifiedChatClient - Provider-agnostic LLM interface.

Usage:
    from pm_assistant.llm import get_llm

    # Project default (settings.default_llm_model)
    llm = get_llm()
    result = await llm.invoke(messages)

    # Specify model (provider auto-detected)
    llm = get_llm("claude-3-5-sonnet-latest", temperature=0.2)
    result = await llm.invoke(messages)
"""

from pm_assistant.config import get_settings
from pm_assistant.llm.adapters.base import BaseAdapter
from pm_assistant.llm.factory import create_adapter, detect_provider, get_default_model
from pm_assistant.llm.types import (
    LLMConfig,
    LLMProvider,
    LLMResult,
    Message,
)


class UnifiedChatClient:
    """Provider-agnostic LLM client.

    Handles provider detection and lazy adapter creation. Adapters never raise
    on request failure; they return an LLMResult with FinishReason.ERROR.
    """

    def __init__(
        self,
        model: str | None = None,
        provider: LLMProvider | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        timeout_seconds: float | None = None,
        api_key: str | None = None,
        base_url: str | None = None,
    ):
        """Initialize the unified chat client.

        Args:
            model: Model name (e.g., "gpt-4o"). Defaults to settings.
            provider: LLM provider. If not provided, detected from model name.
            temperature: Sampling temperature. Defaults to settings.
            max_tokens: Maximum tokens in response. Defaults to settings.
            timeout_seconds: Request timeout. Defaults to settings.
            api_key: Override API key (otherwise uses settings).
            base_url: Override OpenAI-compatible endpoint.
        """
        settings = get_settings()

        if provider is None and model is None:
            model = settings.default_llm_model
            provider = detect_provider(model)
        elif provider is None:
            provider = detect_provider(model)
        elif model is None:
            model = get_default_model(provider)

        self.config = LLMConfig(
            provider=provider,
            model=model,
            temperature=settings.chat_temperature if temperature is None else temperature,
            max_tokens=max_tokens or settings.chat_max_tokens,
            timeout_seconds=timeout_seconds or settings.completion_timeout_seconds,
            api_key=api_key,
            base_url=base_url,
        )

        self._adapter: BaseAdapter | None = None

    @property
    def adapter(self) -> BaseAdapter:
        """Lazy-load adapter on first use."""
        if self._adapter is None:
            self._adapter = create_adapter(self.config)
        return self._adapter

    @property
    def provider(self) -> LLMProvider:
        return self.config.provider

    @property
    def model(self) -> str:
        return self.config.model

    async def invoke(self, messages: list[Message]) -> LLMResult:
        """Send messages and get unified result."""
        return await self.adapter.invoke(messages)


def get_llm(
    model: str | None = None,
    provider: LLMProvider | None = None,
    **kwargs,
) -> UnifiedChatClient:
    """Get an LLM client.

    Args:
        model: Model name (provider auto-detected if not specified)
        provider: Explicit provider (model defaulted if not specified)
        **kwargs: Additional arguments passed to UnifiedChatClient
    """
    return UnifiedChatClient(model=model, provider=provider, **kwargs)
