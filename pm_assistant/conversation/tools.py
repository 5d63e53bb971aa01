"""Tool-usage inference for chat responses.

The assistant does not report real function calls here; this derives a list of
"tools used" for display and audit from the classified intent and keywords in
the response text.
"""
from dataclasses import dataclass

from pm_assistant.conversation.models import ConversationIntent


@dataclass(frozen=True)
class ToolRule:
    """Tools attributed to an intent.

    If ``requires_any`` is non-empty, the response must contain at least one of
    those keywords for the tools to be attributed.
    """
    intent: ConversationIntent
    tools: tuple[str, ...]
    requires_any: tuple[str, ...] = ()


TOOL_RULES: dict[ConversationIntent, ToolRule] = {
    rule.intent: rule
    for rule in (
        ToolRule(ConversationIntent.TASK_CREATION, ("createTask", "getProject"), ("created", "task")),
        ToolRule(ConversationIntent.TASK_UPDATE, ("updateTask", "getTask"), ("updated", "changed")),
        ToolRule(ConversationIntent.PROJECT_PLANNING, ("getProject", "listTasks", "getTeamMembers")),
        ToolRule(ConversationIntent.STATUS_INQUIRY, ("getProjectStatus", "listTasks", "getSprintProgress")),
        ToolRule(ConversationIntent.ANALYTICS_REQUEST, ("getAnalytics", "generateReport", "getMetrics")),
        ToolRule(ConversationIntent.TEAM_COORDINATION, ("getTeamMembers", "getWorkload", "assignTask")),
    )
}

# Fallback for intents without a rule: (keyword in response, tool)
KEYWORD_TOOLS: tuple[tuple[str, str], ...] = (
    ("project", "getProject"),
    ("task", "listTasks"),
    ("team", "getTeamMembers"),
)


def infer_tools_used(response: str, intent: ConversationIntent) -> list[str]:
    """Derive the tools a response most likely relied on."""
    response_lower = (response or "").lower()

    rule = TOOL_RULES.get(intent)
    if rule is not None:
        if rule.requires_any and not any(k in response_lower for k in rule.requires_any):
            return []
        return list(rule.tools)

    return [tool for keyword, tool in KEYWORD_TOOLS if keyword in response_lower]
