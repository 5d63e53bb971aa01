"""Conversation session engine: state model, store, intent and tool heuristics."""

from pm_assistant.conversation.intent import INTENT_RULES, IntentRule, classify_intent
from pm_assistant.conversation.models import (
    ActionType,
    ConversationIntent,
    ConversationState,
    ConversationTurn,
    NewPendingAction,
    NewTurn,
    PendingAction,
    ScopeContext,
    SessionPatch,
    UserPreferences,
    get_active_actions,
    get_recent_history,
    is_action_expired,
)
from pm_assistant.conversation.store import ConversationStateStore
from pm_assistant.conversation.tools import infer_tools_used

__all__ = [
    # Models
    "ActionType",
    "ConversationIntent",
    "ConversationState",
    "ConversationTurn",
    "NewPendingAction",
    "NewTurn",
    "PendingAction",
    "ScopeContext",
    "SessionPatch",
    "UserPreferences",
    # Helpers
    "get_active_actions",
    "get_recent_history",
    "is_action_expired",
    # Store
    "ConversationStateStore",
    # Heuristics
    "INTENT_RULES",
    "IntentRule",
    "classify_intent",
    "infer_tools_used",
]
