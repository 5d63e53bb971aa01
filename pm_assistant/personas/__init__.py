"""Personas module."""

from pm_assistant.personas.config import (
    DEVELOPER_PERSONA,
    PERSONAS,
    PROJECT_MANAGER_PERSONA,
    STAKEHOLDER_PERSONA,
    TEAM_LEAD_PERSONA,
    WORKSPACE_CREATOR_PERSONA,
    PersonaConfig,
    create_initial_user_preferences,
    get_default_persona,
    get_persona,
)
from pm_assistant.personas.types import UserRole

__all__ = [
    "PERSONAS",
    "PersonaConfig",
    "UserRole",
    # Personas
    "DEVELOPER_PERSONA",
    "PROJECT_MANAGER_PERSONA",
    "STAKEHOLDER_PERSONA",
    "TEAM_LEAD_PERSONA",
    "WORKSPACE_CREATOR_PERSONA",
    # Lookup
    "create_initial_user_preferences",
    "get_default_persona",
    "get_persona",
]
