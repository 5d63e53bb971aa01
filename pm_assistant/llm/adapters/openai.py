"""OpenAI provider adapter using langchain-openai.

Also serves OpenAI-compatible endpoints such as GitHub Models, selected by
``base_url``.
"""

import logging
import time
from typing import Any

from langchain_openai import ChatOpenAI

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

GITHUB_MODELS_BASE_URL = "https://models.inference.ai.azure.com"


def resolve_openai_credentials(config: LLMConfig) -> tuple[str, str | None]:
    """Pick API key and endpoint.

    Precedence: explicit config, then OPENAI_API_KEY, then GITHUB_TOKEN against
    the GitHub Models endpoint.

    Raises:
        ValueError: If no credential is configured.
    """
    settings = get_settings()
    if config.api_key:
        return config.api_key, config.base_url or settings.openai_base_url or None
    if settings.openai_api_key:
        return settings.openai_api_key, config.base_url or settings.openai_base_url or None
    if settings.github_token:
        return settings.github_token, config.base_url or GITHUB_MODELS_BASE_URL
    raise ValueError("Either GITHUB_TOKEN or OPENAI_API_KEY must be configured")


class OpenAIAdapter(BaseAdapter):
    """OpenAI provider adapter using langchain-openai."""

    def __init__(self, config: LLMConfig):
        super().__init__(config)
        api_key, base_url = resolve_openai_credentials(config)

        self.client = ChatOpenAI(
            model=config.model,
            api_key=api_key,
            base_url=base_url,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout=config.timeout_seconds,
            streaming=False,
        )

    def parse_response(self, response: Any, latency_ms: float) -> LLMResult:
        """Parse LangChain response to unified format."""
        text = response.content if hasattr(response, "content") else ""

        finish_reason = FinishReason.STOP
        metadata = getattr(response, "response_metadata", None) or {}
        if metadata.get("finish_reason") == "length":
            finish_reason = FinishReason.LENGTH
        elif metadata.get("finish_reason") == "content_filter":
            finish_reason = FinishReason.CONTENT_FILTER

        return LLMResult(
            text=text if isinstance(text, str) else "",
            finish_reason=finish_reason,
            provider=LLMProvider.OPENAI,
            model=self.config.model,
            latency_ms=latency_ms,
            usage=self.extract_usage(response),
            raw=response,
        )

    async def invoke(self, messages: list[Message]) -> LLMResult:
        """Send messages to OpenAI and get unified result."""
        start_time = time.perf_counter()

        try:
            response = await self.client.ainvoke(self.convert_messages(messages))

            latency_ms = (time.perf_counter() - start_time) * 1000

            result = self.parse_response(response, latency_ms)

            logger.info(
                "OpenAI request completed",
                extra={
                    "request_id": result.request_id,
                    "provider": result.provider.value,
                    "model": result.model,
                    "latency_ms": result.latency_ms,
                    "total_tokens": result.usage.total_tokens,
                },
            )

            return result

        except Exception as e:
            latency_ms = (time.perf_counter() - start_time) * 1000
            logger.error(f"OpenAI request failed: {e}")
            return LLMResult(
                text="",
                finish_reason=FinishReason.ERROR,
                error=str(e),
                provider=LLMProvider.OPENAI,
                model=self.config.model,
                latency_ms=latency_ms,
            )
