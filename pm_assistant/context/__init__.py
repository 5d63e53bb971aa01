"""User/project context and system prompt assembly."""

from pm_assistant.context.builder import CLOSING_INSTRUCTION, RoleAwareContextBuilder
from pm_assistant.context.models import ProjectContext, UserContext

__all__ = [
    "CLOSING_INSTRUCTION",
    "ProjectContext",
    "RoleAwareContextBuilder",
    "UserContext",
]
