"""Conversation state records.

These are in-memory data transfer objects, not ORM models. All mutation goes
through ConversationStateStore in store.py.
"""
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    """Timezone-aware current UTC time (default clock)."""
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model that accepts and emits the UI's camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ConversationIntent(str, Enum):
    """What the user is trying to do with the current message."""
    TASK_CREATION = "task_creation"
    TASK_UPDATE = "task_update"
    PROJECT_PLANNING = "project_planning"
    SPRINT_MANAGEMENT = "sprint_management"
    BUG_REPORTING = "bug_reporting"
    STATUS_INQUIRY = "status_inquiry"
    ANALYTICS_REQUEST = "analytics_request"
    TEAM_COORDINATION = "team_coordination"
    GENERAL_HELP = "general_help"


class ActionType(str, Enum):
    """Operations that can be proposed from a conversation."""
    CREATE_TASK = "create_task"
    UPDATE_TASK = "update_task"
    CREATE_PROJECT = "create_project"
    UPDATE_PROJECT = "update_project"
    CREATE_SPRINT = "create_sprint"
    ASSIGN_TASK = "assign_task"
    MOVE_TASK = "move_task"
    CREATE_BUG = "create_bug"
    GENERATE_REPORT = "generate_report"


class ScopeContext(CamelModel):
    """Where the conversation is anchored ("where am I")."""

    workspace_id: Optional[str] = None
    project_id: Optional[str] = None
    task_id: Optional[str] = None
    sprint_id: Optional[str] = None

    def merged(self, other: "ScopeContext") -> "ScopeContext":
        """Shallow merge: only fields explicitly set on ``other`` override."""
        return self.model_copy(update=other.model_dump(exclude_unset=True))

    def is_empty(self) -> bool:
        return not any(self.model_dump().values())


class UserPreferences(CamelModel):
    """Per-session response and notification preferences."""

    preferred_response_style: Literal["concise", "detailed", "technical"] = "detailed"
    notification_level: Literal["minimal", "normal", "verbose"] = "normal"
    auto_confirm_actions: bool = False
    preferred_time_format: Literal["12h", "24h"] = "12h"
    timezone: str = "UTC"


class NewTurn(CamelModel):
    """Caller-supplied part of a conversation turn."""

    user_message: str
    ai_response: str
    intent: Optional[ConversationIntent] = None
    actions_executed: list[str] = Field(default_factory=list)
    context: dict[str, Any] = Field(default_factory=dict)


class ConversationTurn(NewTurn):
    """One recorded user message / assistant response pair.

    Frozen: turns are only appended and, oldest first, evicted.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: datetime


class NewPendingAction(CamelModel):
    """Caller-supplied part of a pending action."""

    type: ActionType
    extracted_data: dict[str, Any] = Field(default_factory=dict)
    missing_fields: list[str] = Field(default_factory=list)
    # Informational only; nothing in the engine gates on it.
    confidence_score: float = 0.0
    user_confirmation_required: bool = True


class PendingAction(NewPendingAction):
    """A proposed operation awaiting confirmation or more fields."""

    id: str
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) > self.expires_at


class ConversationState(CamelModel):
    """Per-user conversational memory (the session)."""

    session_id: str
    user_id: str
    current_context: ScopeContext = Field(default_factory=ScopeContext)
    active_intent: Optional[ConversationIntent] = None
    pending_actions: list[PendingAction] = Field(default_factory=list)
    user_preferences: UserPreferences = Field(default_factory=UserPreferences)
    conversation_history: list[ConversationTurn] = Field(default_factory=list)
    last_interaction: datetime
    context_updated_at: datetime

    def expires_at(self, expiry: timedelta) -> datetime:
        return self.last_interaction + expiry

    def is_live(self, now: datetime, expiry: timedelta) -> bool:
        return now <= self.expires_at(expiry)


class SessionPatch(BaseModel):
    """Typed partial update for a session.

    Only fields explicitly set are applied. ``current_context`` is merged into
    the existing scope; every other field replaces the stored value wholesale.
    ``active_intent`` may be set to None to clear it.
    """

    current_context: Optional[ScopeContext] = None
    active_intent: Optional[ConversationIntent] = None
    pending_actions: Optional[list[PendingAction]] = None
    user_preferences: Optional[UserPreferences] = None
    conversation_history: Optional[list[ConversationTurn]] = None

    def apply(self, state: ConversationState, now: datetime) -> ConversationState:
        """Return a new state with this patch applied and activity refreshed."""
        fields = self.model_fields_set
        update: dict[str, Any] = {"last_interaction": now}

        if "current_context" in fields and self.current_context is not None:
            update["current_context"] = state.current_context.merged(self.current_context)
            update["context_updated_at"] = now
        if "active_intent" in fields:
            update["active_intent"] = self.active_intent
        if "pending_actions" in fields and self.pending_actions is not None:
            update["pending_actions"] = list(self.pending_actions)
        if "user_preferences" in fields and self.user_preferences is not None:
            update["user_preferences"] = self.user_preferences.model_copy()
        if "conversation_history" in fields and self.conversation_history is not None:
            update["conversation_history"] = list(self.conversation_history)

        return state.model_copy(update=update)


# =============================================================================
# Helpers
# =============================================================================


def is_action_expired(action: PendingAction, now: Optional[datetime] = None) -> bool:
    """Check whether a pending action is past its expiry."""
    return action.is_expired(now)


def get_active_actions(state: ConversationState, now: Optional[datetime] = None) -> list[PendingAction]:
    """Pending actions that have not expired yet.

    Expired actions are filtered here, not removed from the state.
    """
    now = now or utcnow()
    return [action for action in state.pending_actions if not action.is_expired(now)]


def get_recent_history(state: ConversationState, count: int = 10) -> list[ConversationTurn]:
    """Last ``count`` turns, oldest first."""
    if count <= 0:
        return []
    return state.conversation_history[-count:]
