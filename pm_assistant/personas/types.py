"""Persona type definitions.

A persona is the assistant's voice for a user's primary role. Roles come from
user records and may be missing or oddly cased, so parsing is total: anything
unrecognized becomes UserRole.UNKNOWN.
"""
from enum import Enum
from typing import Optional


class UserRole(str, Enum):
    """Primary roles a user can hold."""
    WORKSPACE_CREATOR = "workspace_creator"
    PROJECT_MANAGER = "project_manager"
    DEVELOPER = "developer"
    STAKEHOLDER = "stakeholder"
    TEAM_LEAD = "team_lead"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "UserRole":
        """Normalize a raw role string ("Project-Manager", "TEAM_LEAD", ...)."""
        if not raw:
            return cls.UNKNOWN
        normalized = raw.strip().lower().replace("-", "_").replace(" ", "_")
        try:
            role = cls(normalized)
        except ValueError:
            return cls.UNKNOWN
        return role
