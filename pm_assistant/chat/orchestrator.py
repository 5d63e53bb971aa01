"""Chat orchestrator - per-request coordinator for the assistant.

Ties together identity resolution, session get-or-create, context building,
intent classification, prompt assembly, the completion call and turn
persistence. The only suspension points are collaborator calls; every store
operation runs synchronously between them.
"""

import asyncio
from typing import Any, Iterable, Mapping, Optional, Union

import structlog

from pm_assistant.chat.exceptions import (
    AuthenticationError,
    CompletionError,
    ContextUnavailableError,
    UserNotFoundError,
)
from pm_assistant.chat.types import (
    EMPTY_COMPLETION_RESPONSE,
    FALLBACK_RESPONSE,
    ChatMessage,
    ChatResponse,
    ConversationStats,
    ConversationStatus,
)
from pm_assistant.config import Settings, get_settings
from pm_assistant.context import RoleAwareContextBuilder
from pm_assistant.conversation import (
    ConversationState,
    ConversationStateStore,
    NewTurn,
    ScopeContext,
    classify_intent,
    get_recent_history,
    infer_tools_used,
)
from pm_assistant.llm.types import Message, MessageRole
from pm_assistant.personas import create_initial_user_preferences
from pm_assistant.providers.base import CompletionProvider, IdentityProvider, UserDirectory
from pm_assistant.providers.types import DirectoryUser

logger = structlog.get_logger()

HistoryInput = Iterable[Union[ChatMessage, Mapping[str, Any]]]
ScopeInput = Union[ScopeContext, Mapping[str, Optional[str]], None]

RECENT_RESPONSE_PREVIEW_CHARS = 100


def _as_scope(context: ScopeInput) -> Optional[ScopeContext]:
    if context is None or isinstance(context, ScopeContext):
        return context
    return ScopeContext.model_validate(dict(context))


def _as_messages(history: HistoryInput) -> list[ChatMessage]:
    return [
        entry if isinstance(entry, ChatMessage) else ChatMessage.model_validate(dict(entry))
        for entry in history
    ]


class ChatOrchestrator:
    """Coordinates one assistant chat request end to end.

    Usage:
        orchestrator = ChatOrchestrator(
            store=store,
            identity=HeaderIdentityProvider(),
            directory=data,
            context_builder=RoleAwareContextBuilder(data),
            completion=LLMCompletionProvider(),
        )
        response = await orchestrator.handle_chat("What's my status?", credentials=user_id)
    """

    def __init__(
        self,
        store: ConversationStateStore,
        identity: IdentityProvider,
        directory: UserDirectory,
        context_builder: RoleAwareContextBuilder,
        completion: CompletionProvider,
        settings: Optional[Settings] = None,
    ) -> None:
        self.store = store
        self._identity = identity
        self._directory = directory
        self._context = context_builder
        self._completion = completion
        self._settings = settings or get_settings()

    # -------------------------------------------------------------------------
    # Chat
    # -------------------------------------------------------------------------

    async def handle_chat(
        self,
        message: str,
        history: Optional[HistoryInput] = (),
        context: ScopeInput = None,
        credentials: Optional[str] = None,
    ) -> ChatResponse:
        """Process one chat message.

        Never raises: any failure yields ChatResponse.fallback().
        """
        log = logger
        try:
            scope = _as_scope(context)
            messages_in = _as_messages(history or ())
            log = log.bind(message_length=len(message or ""), history_length=len(messages_in))

            user = await self._resolve_user(credentials)
            log = log.bind(user_id=user.id)

            state = self._get_or_create_state(user, scope)
            log = log.bind(session_id=state.session_id)

            user_context = await self._context.build_user_context(user.id)
            if user_context is None:
                raise ContextUnavailableError(f"Failed to build user context for {user.id}")

            project_id = (scope.project_id if scope else None) or state.current_context.project_id
            project_context = None
            if project_id:
                project_context = await self._context.build_project_context(project_id)
                if project_context is None:
                    log.info("project_context_unavailable", project_id=project_id)

            intent = classify_intent(message, messages_in)
            self.store.set_active_intent(user.id, intent)
            log = log.bind(intent=intent.value)

            system_prompt = self._context.generate_system_prompt(user_context, project_context)
            current = self.store.get(user.id) or state
            system_prompt += self._recent_context_addendum(current)

            turn_context = {
                "workspace_id": scope.workspace_id if scope else None,
                "project_id": scope.project_id if scope else None,
                "user_role": user_context.user.primary_role,
            }

            try:
                ai_response = await self._complete(
                    self._build_messages(system_prompt, messages_in, message)
                )
            except CompletionError as e:
                log.error("chat_completion_failed", error=str(e))
                self._record_turn(
                    user.id,
                    NewTurn(
                        user_message=message,
                        ai_response=FALLBACK_RESPONSE,
                        intent=intent,
                        actions_executed=[],
                        context=turn_context,
                    ),
                )
                return ChatResponse.fallback(conversation_id=state.session_id)

            tools_used = infer_tools_used(ai_response, intent)
            self._record_turn(
                user.id,
                NewTurn(
                    user_message=message,
                    ai_response=ai_response,
                    intent=intent,
                    actions_executed=tools_used,
                    context=turn_context,
                ),
            )

            log.info("chat_completed", tools_used=tools_used, response_length=len(ai_response))
            return ChatResponse(
                response=ai_response,
                tools_used=tools_used,
                intent=intent,
                conversation_id=state.session_id,
            )

        except Exception as e:
            log.error("chat_failed", error=str(e), error_type=type(e).__name__, exc_info=True)
            return ChatResponse.fallback()

    async def _resolve_user(self, credentials: Optional[str]) -> DirectoryUser:
        external_id = await self._identity.authenticate(credentials)
        if not external_id:
            raise AuthenticationError("User not authenticated")

        user = await self._directory.find_by_external_id(external_id)
        if user is None:
            raise UserNotFoundError(f"User not found in directory: {external_id}")
        return user

    def _get_or_create_state(
        self,
        user: DirectoryUser,
        scope: Optional[ScopeContext],
    ) -> ConversationState:
        state = self.store.get(user.id)
        if state is None:
            logger.info("conversation_state_created", user_id=user.id)
            return self.store.create(
                user.id,
                initial_context=scope,
                preferences=create_initial_user_preferences(user.primary_role),
            )

        if scope is not None:
            self.store.update_context(user.id, scope)
            state = self.store.get(user.id) or state
        return state

    def _recent_context_addendum(self, state: ConversationState) -> str:
        """Condensed summary of the last few stored turns, or ""."""
        turns = get_recent_history(state, self._settings.prompt_recent_turns)
        if not turns:
            return ""
        summary = "\n".join(
            f'Previous: User said "{turn.user_message}" -> '
            f'AI responded "{turn.ai_response[:RECENT_RESPONSE_PREVIEW_CHARS]}..."'
            for turn in turns
        )
        return f"\n\nRecent conversation context:\n{summary}"

    def _build_messages(
        self,
        system_prompt: str,
        history: list[ChatMessage],
        message: str,
    ) -> list[Message]:
        """[system] + most recent caller history + current user message."""
        limit = self._settings.prompt_history_messages
        recent = history[-limit:] if limit > 0 else []
        return [
            Message(role=MessageRole.SYSTEM, content=system_prompt),
            *(Message(role=MessageRole(m.role), content=m.content) for m in recent),
            Message(role=MessageRole.USER, content=message),
        ]

    async def _complete(self, messages: list[Message]) -> str:
        """Call the completion provider with a timeout.

        Raises:
            CompletionError: On provider failure or timeout.
        """
        timeout = self._settings.completion_timeout_seconds
        try:
            content = await asyncio.wait_for(self._completion.complete(messages), timeout=timeout)
        except CompletionError:
            raise
        except asyncio.TimeoutError as e:
            raise CompletionError(f"Completion timed out after {timeout}s") from e
        except Exception as e:
            raise CompletionError(str(e)) from e

        return content or EMPTY_COMPLETION_RESPONSE

    def _record_turn(self, user_id: str, turn: NewTurn) -> None:
        if not self.store.add_turn(user_id, turn):
            logger.warning("conversation_turn_dropped", user_id=user_id, reason="no live session")

    # -------------------------------------------------------------------------
    # Secondary accessors
    # -------------------------------------------------------------------------

    async def _find_user(self, credentials: Optional[str]) -> Optional[DirectoryUser]:
        external_id = await self._identity.authenticate(credentials)
        if not external_id:
            return None
        return await self._directory.find_by_external_id(external_id)

    async def get_conversation_status(self, credentials: Optional[str]) -> Optional[ConversationStatus]:
        """Session summary for UI polling, or None if there is no live session."""
        user = await self._find_user(credentials)
        if user is None:
            return None

        state = self.store.get(user.id)
        if state is None:
            return None

        return ConversationStatus(
            session_id=state.session_id,
            current_context=state.current_context,
            active_intent=state.active_intent,
            message_count=len(state.conversation_history),
            last_interaction=state.last_interaction,
        )

    async def clear_conversation(self, credentials: Optional[str]) -> bool:
        """Drop the caller's session. False if unknown user or no session."""
        user = await self._find_user(credentials)
        if user is None:
            return False
        cleared = self.store.clear(user.id)
        logger.info("conversation_cleared", user_id=user.id, cleared=cleared)
        return cleared

    def get_conversation_stats(self) -> ConversationStats:
        return ConversationStats(
            active_conversations=self.store.state_count(),
            user_ids=self.store.user_ids(),
        )
