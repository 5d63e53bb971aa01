"""Persona configuration - role to assistant voice.

Each persona is a small fixed overlay: a display name, a one-line description
and the system prompt paragraph that opens every assistant prompt.
"""
from dataclasses import dataclass
from typing import Optional, Union

from pm_assistant.conversation.models import UserPreferences
from pm_assistant.personas.types import UserRole


@dataclass(frozen=True)
class PersonaConfig:
    """Configuration for a single persona.

    Immutable config - persona behavior is deterministic.
    """
    role: UserRole
    display_name: str
    description: str
    system_prompt: str


WORKSPACE_CREATOR_PERSONA = PersonaConfig(
    role=UserRole.WORKSPACE_CREATOR,
    display_name="Strategic Advisor",
    description="Provides executive-level insights, portfolio analysis, and strategic decision support",
    system_prompt="""You are a Strategic Advisor AI assistant for workspace creators and executives.
Focus on high-level insights, portfolio management, resource allocation, and strategic planning.
Provide business-oriented responses with ROI considerations and long-term impact analysis.""",
)

PROJECT_MANAGER_PERSONA = PersonaConfig(
    role=UserRole.PROJECT_MANAGER,
    display_name="Project Conductor",
    description="Assists with sprint planning, team coordination, and project timeline management",
    system_prompt="""You are a Project Conductor AI assistant for project managers.
Focus on sprint planning, team coordination, timeline management, and risk assessment.
Provide actionable project management insights and help optimize team workflows.""",
)

DEVELOPER_PERSONA = PersonaConfig(
    role=UserRole.DEVELOPER,
    display_name="Code Companion",
    description="Provides development assistance, best practices, and technical guidance",
    system_prompt="""You are a Code Companion AI assistant for developers.
Focus on task execution, technical implementation, code quality, and development best practices.
Provide practical coding assistance and help with technical problem-solving.""",
)

STAKEHOLDER_PERSONA = PersonaConfig(
    role=UserRole.STAKEHOLDER,
    display_name="Business Translator",
    description="Translates technical progress into business value and ROI insights",
    system_prompt="""You are a Business Translator AI assistant for stakeholders.
Focus on translating technical progress to business value, ROI tracking, and impact assessment.
Provide clear business-oriented insights and project status in accessible language.""",
)

TEAM_LEAD_PERSONA = PersonaConfig(
    role=UserRole.TEAM_LEAD,
    display_name="Technical Architect",
    description="Offers architecture guidance, code quality insights, and technical leadership support",
    system_prompt="""You are a Technical Architect AI assistant for team leads.
Focus on code quality, architecture decisions, technical debt management, and team technical guidance.
Provide technical leadership insights and help with architectural decision-making.""",
)


# Registry for lookup. UNKNOWN is intentionally absent; see get_persona().
PERSONAS: dict[UserRole, PersonaConfig] = {
    UserRole.WORKSPACE_CREATOR: WORKSPACE_CREATOR_PERSONA,
    UserRole.PROJECT_MANAGER: PROJECT_MANAGER_PERSONA,
    UserRole.DEVELOPER: DEVELOPER_PERSONA,
    UserRole.STAKEHOLDER: STAKEHOLDER_PERSONA,
    UserRole.TEAM_LEAD: TEAM_LEAD_PERSONA,
}


def get_default_persona() -> PersonaConfig:
    """Get default persona (always Developer)."""
    return DEVELOPER_PERSONA


def get_persona(role: Union[UserRole, str, None]) -> PersonaConfig:
    """Get persona for a role; unknown or missing roles get the default."""
    if not isinstance(role, UserRole):
        role = UserRole.parse(role)
    if role is UserRole.UNKNOWN:
        return get_default_persona()
    return PERSONAS[role]


# Preference overrides on top of the generic defaults
ROLE_PREFERENCES: dict[UserRole, dict[str, str]] = {
    UserRole.WORKSPACE_CREATOR: {"preferred_response_style": "concise", "notification_level": "minimal"},
    UserRole.DEVELOPER: {"preferred_response_style": "technical", "notification_level": "normal"},
    UserRole.PROJECT_MANAGER: {"preferred_response_style": "detailed", "notification_level": "verbose"},
}


def create_initial_user_preferences(role: Union[UserRole, str, None] = None) -> UserPreferences:
    """Initial session preferences for a role."""
    if not isinstance(role, UserRole):
        role = UserRole.parse(role)
    return UserPreferences(**ROLE_PREFERENCES.get(role, {}))
