"""Assistant chat HTTP routes."""

from datetime import datetime, timezone
from typing import Any, Literal, Optional

import structlog
from fastapi import APIRouter, Header, HTTPException, Request
from pydantic import Field

from pm_assistant.chat import ChatMessage, ChatOrchestrator
from pm_assistant.config import get_settings
from pm_assistant.conversation.models import CamelModel, ScopeContext
from pm_assistant.providers import USER_ID_HEADER, IdentityProvider

logger = structlog.get_logger()

router = APIRouter()

API_VERSION = "2.0"
FEATURES = ["role-awareness", "conversation-state", "intent-detection", "context-building"]


class ChatRequest(CamelModel):
    message: Optional[str] = None
    history: list[ChatMessage] = Field(default_factory=list)
    context: Optional[ScopeContext] = None
    action: Literal["chat", "clear", "status"] = "chat"


def _orchestrator(request: Request) -> ChatOrchestrator:
    return request.app.state.orchestrator


async def _require_identity(request: Request, credentials: Optional[str]) -> str:
    identity: IdentityProvider = request.app.state.identity
    external_id = await identity.authenticate(credentials)
    if not external_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return external_id


async def _status_payload(orchestrator: ChatOrchestrator, credentials: Optional[str]) -> Optional[dict]:
    status = await orchestrator.get_conversation_status(credentials)
    return status.model_dump(mode="json", by_alias=True) if status else None


# =============================================================================
# Chat
# =============================================================================


@router.post("/api/ai/chat")
async def chat(
    body: ChatRequest,
    request: Request,
    x_user_id: Optional[str] = Header(default=None, alias=USER_ID_HEADER),
) -> dict[str, Any]:
    """Chat, clear or status, selected by `action`."""
    external_id = await _require_identity(request, x_user_id)
    orchestrator = _orchestrator(request)

    logger.info(
        "ai_chat_called",
        action=body.action,
        user_id=external_id,
        message_length=len(body.message) if body.message else None,
        history_length=len(body.history),
    )

    if body.action == "clear":
        cleared = await orchestrator.clear_conversation(x_user_id)
        return {
            "success": cleared,
            "message": "Conversation cleared" if cleared else "Failed to clear conversation",
        }

    if body.action == "status":
        return {"status": "active", "context": await _status_payload(orchestrator, x_user_id)}

    if not body.message:
        raise HTTPException(status_code=400, detail="Message is required and must be a string")

    max_length = get_settings().max_message_length
    if len(body.message) > max_length:
        raise HTTPException(
            status_code=400,
            detail=f"Message too long. Please keep it under {max_length} characters.",
        )

    result = await orchestrator.handle_chat(
        body.message,
        history=body.history,
        context=body.context,
        credentials=x_user_id,
    )

    return {
        "success": True,
        "response": result.response,
        "toolsUsed": result.tools_used,
        "intent": result.intent.value,
        "conversationId": result.conversation_id,
        "metadata": {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "context": body.context.model_dump(by_alias=True, exclude_none=True) if body.context else None,
            "messageCount": len(body.history) + 1,
        },
    }


@router.get("/api/ai/chat")
async def chat_status(
    request: Request,
    x_user_id: Optional[str] = Header(default=None, alias=USER_ID_HEADER),
) -> dict[str, Any]:
    """Conversation status for the calling user."""
    external_id = await _require_identity(request, x_user_id)
    context = await _status_payload(_orchestrator(request), x_user_id)
    return {
        "userId": external_id,
        "hasActiveConversation": context is not None,
        "context": context,
        "apiVersion": API_VERSION,
        "features": FEATURES,
    }


@router.get("/api/ai/chat/stats")
async def chat_stats(request: Request) -> dict[str, Any]:
    """Debug view of the session store. Only served when debug is on."""
    if not get_settings().debug:
        raise HTTPException(status_code=404, detail="Not Found")
    return _orchestrator(request).get_conversation_stats().model_dump(by_alias=True)


# =============================================================================
# Health
# =============================================================================


@router.get("/health")
async def health_check(request: Request) -> dict[str, Any]:
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "sessions": _orchestrator(request).store.state_count(),
    }
