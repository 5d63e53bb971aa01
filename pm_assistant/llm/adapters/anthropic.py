"""Anthropic provider adapter using langchain-anthropic."""

import logging
import time
from typing import Any

from langchain_anthropic import ChatAnthropic

from pm_assistant.config import get_settings
from pm_assistant.llm.adapters.base import BaseAdapter
from pm_assistant.llm.types import (
    FinishReason,
    LLMConfig,
    LLMProvider,
    LLMResult,
    Message,
)

logger = logging.getLogger(__name__)


class AnthropicAdapter(BaseAdapter):
    """Anthropic provider adapter using langchain-anthropic."""

    def __init__(self, config: LLMConfig):
        super().__init__(config)
        settings = get_settings()
        api_key = config.api_key or settings.anthropic_api_key
        if not api_key:
            raise ValueError("Anthropic API key required")

        self.client = ChatAnthropic(
            model=config.model,
            api_key=api_key,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout=config.timeout_seconds,
        )

    def parse_response(self, response: Any, latency_ms: float) -> LLMResult:
        """Parse LangChain response to unified format."""
        text = response.content if hasattr(response, "content") else ""

        # Anthropic may return a list of content blocks
        if isinstance(text, list):
            text_parts = []
            for block in text:
                if isinstance(block, dict) and block.get("type") == "text":
                    text_parts.append(block.get("text", ""))
                elif isinstance(block, str):
                    text_parts.append(block)
            text = "".join(text_parts)

        metadata = getattr(response, "response_metadata", None) or {}
        finish_reason = FinishReason.STOP
        if metadata.get("stop_reason") == "max_tokens":
            finish_reason = FinishReason.LENGTH

        return LLMResult(
            text=text if isinstance(text, str) else "",
            finish_reason=finish_reason,
            provider=LLMProvider.ANTHROPIC,
            model=self.config.model,
            latency_ms=latency_ms,
            usage=self.extract_usage(response),
            raw=response,
        )

    async def invoke(self, messages: list[Message]) -> LLMResult:
        """Send messages to Anthropic and get unified result."""
        start_time = time.perf_counter()

        try:
            response = await self.client.ainvoke(self.convert_messages(messages))

            latency_ms = (time.perf_counter() - start_time) * 1000

            result = self.parse_response(response, latency_ms)

            logger.info(
                "Anthropic request completed",
                extra={
                    "request_id": result.request_id,
                    "provider": result.provider.value,
                    "model": result.model,
                    "latency_ms": result.latency_ms,
                },
            )

            return result

        except Exception as e:
            latency_ms = (time.perf_counter() - start_time) * 1000
            logger.error(f"Anthropic request failed: {e}")
            return LLMResult(
                text="",
                finish_reason=FinishReason.ERROR,
                error=str(e),
                provider=LLMProvider.ANTHROPIC,
                model=self.config.model,
                latency_ms=latency_ms,
            )
