"""Completion provider backed by UnifiedChatClient."""

import logging
from typing import Optional, Sequence

from pm_assistant.chat.exceptions import CompletionError
from pm_assistant.llm.client import UnifiedChatClient, get_llm
from pm_assistant.llm.types import FinishReason, Message

logger = logging.getLogger(__name__)


class LLMCompletionProvider:
    """Non-streaming completion with the configured model settings.

    Adapters report failures as an error result; this turns those into
    CompletionError so callers can tell "no content" from "request failed".
    """

    def __init__(self, client: Optional[UnifiedChatClient] = None) -> None:
        self._client = client

    @property
    def client(self) -> UnifiedChatClient:
        # Created on first call so the app can start without LLM credentials
        if self._client is None:
            self._client = get_llm()
        return self._client

    async def complete(self, messages: Sequence[Message]) -> Optional[str]:
        result = await self.client.invoke(list(messages))
        if result.finish_reason == FinishReason.ERROR:
            raise CompletionError(
                f"{result.provider.value} completion failed: {result.error or 'unknown error'}"
            )
        if result.finish_reason == FinishReason.LENGTH:
            logger.warning(
                "Completion truncated at max tokens",
                extra={"model": result.model, "request_id": result.request_id},
            )
        return result.text or None
