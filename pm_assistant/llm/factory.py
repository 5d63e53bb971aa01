"""Factory functions for creating LLM adapters.

This module provides:
- Provider detection from model names
- Adapter instantiation based on provider/model
- Default model lookup for each provider
"""

from pm_assistant.llm.types import LLMProvider, LLMConfig
from pm_assistant.llm.adapters.base import BaseAdapter


def detect_provider(model: str) -> LLMProvider:
    """Detect provider from model name.

    Examples:
        >>> detect_provider("gpt-4o")
        <LLMProvider.OPENAI: 'openai'>
        >>> detect_provider("claude-3-5-sonnet-latest")
        <LLMProvider.ANTHROPIC: 'anthropic'>
    """
    model_lower = model.lower()
    if model_lower.startswith("claude"):
        return LLMProvider.ANTHROPIC
    # gpt-*, o1/o3, and OpenAI-compatible endpoints (GitHub Models)
    return LLMProvider.OPENAI


def create_adapter(config: LLMConfig) -> BaseAdapter:
    """Create adapter instance for the specified provider.

    Raises:
        ValueError: If provider is unknown or credentials are missing.
    """
    if config.provider == LLMProvider.OPENAI:
        from pm_assistant.llm.adapters.openai import OpenAIAdapter
        return OpenAIAdapter(config)
    elif config.provider == LLMProvider.ANTHROPIC:
        from pm_assistant.llm.adapters.anthropic import AnthropicAdapter
        return AnthropicAdapter(config)
    else:
        raise ValueError(f"Unknown provider: {config.provider}")


def get_default_model(provider: LLMProvider) -> str:
    """Get default model for a provider."""
    defaults = {
        LLMProvider.OPENAI: "gpt-4o",
        LLMProvider.ANTHROPIC: "claude-3-5-sonnet-latest",
    }
    return defaults.get(provider, "gpt-4o")
