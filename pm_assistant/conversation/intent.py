"""Intent classifier for assistant chat messages.

Classifies a message into one of the nine ConversationIntent values using
ordered keyword rules. First matching rule wins; GENERAL_HELP is the fallback.

This is deliberately a cheap heuristic. Rule order is part of the contract:
"create a task for the login bug" is TASK_CREATION because rule 1 is checked
before the bug rule.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from pm_assistant.conversation.models import ConversationIntent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntentRule:
    """Keyword rule: every ``all_of`` term and at least one ``any_of`` term.

    Empty groups are ignored. Matching is substring-based on the lowercased
    message.
    """
    intent: ConversationIntent
    all_of: tuple[str, ...] = ()
    any_of: tuple[str, ...] = ()

    def matches(self, text: str) -> bool:
        if any(term not in text for term in self.all_of):
            return False
        if self.any_of and not any(term in text for term in self.any_of):
            return False
        return True


INTENT_RULES: tuple[IntentRule, ...] = (
    IntentRule(ConversationIntent.TASK_CREATION, all_of=("create",), any_of=("task", "todo")),
    IntentRule(ConversationIntent.TASK_UPDATE, all_of=("update", "task")),
    IntentRule(ConversationIntent.PROJECT_PLANNING, all_of=("project",), any_of=("plan", "create")),
    IntentRule(ConversationIntent.SPRINT_MANAGEMENT, any_of=("sprint", "iteration")),
    IntentRule(ConversationIntent.BUG_REPORTING, any_of=("bug", "issue", "error")),
    IntentRule(ConversationIntent.STATUS_INQUIRY, any_of=("status", "progress", "report")),
    IntentRule(ConversationIntent.ANALYTICS_REQUEST, any_of=("analytics", "metrics", "performance")),
    IntentRule(ConversationIntent.TEAM_COORDINATION, any_of=("team", "assign", "member")),
)


def classify_intent(
    message: str,
    history: Optional[Sequence[Any]] = None,
) -> ConversationIntent:
    """Classify a chat message.

    Args:
        message: The user's current message.
        history: Recent conversation history. Accepted so callers can pass it
            through; the keyword rules look at the current message only.

    Returns:
        The intent of the first matching rule, else GENERAL_HELP.
    """
    text = (message or "").lower()
    for rule in INTENT_RULES:
        if rule.matches(text):
            logger.debug(f"Intent rule matched: {rule.intent.value}")
            return rule.intent
    return ConversationIntent.GENERAL_HELP
