"""Tests for persona lookup and role parsing."""
import pytest

from pm_assistant.personas import (
    DEVELOPER_PERSONA,
    PERSONAS,
    PROJECT_MANAGER_PERSONA,
    TEAM_LEAD_PERSONA,
    UserRole,
    create_initial_user_preferences,
    get_default_persona,
    get_persona,
)


class TestUserRoleParse:
    """Tests for normalizing raw role strings."""

    @pytest.mark.parametrize("raw,expected", [
        ("PROJECT_MANAGER", UserRole.PROJECT_MANAGER),
        ("project_manager", UserRole.PROJECT_MANAGER),
        ("Project-Manager", UserRole.PROJECT_MANAGER),
        ("team lead", UserRole.TEAM_LEAD),
        ("  STAKEHOLDER ", UserRole.STAKEHOLDER),
        ("workspace_creator", UserRole.WORKSPACE_CREATOR),
    ])
    def test_known_roles(self, raw, expected):
        """Case, dashes and spaces are normalized."""
        assert UserRole.parse(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "ADMIN", "intern"])
    def test_unknown_roles(self, raw):
        """Anything unrecognized parses to UNKNOWN."""
        assert UserRole.parse(raw) == UserRole.UNKNOWN


class TestGetPersona:
    """Tests for persona selection."""

    def test_every_known_role_has_persona(self):
        """All roles except UNKNOWN are registered."""
        assert set(PERSONAS) == set(UserRole) - {UserRole.UNKNOWN}

    def test_lookup_by_raw_string(self):
        """Raw strings resolve through parse()."""
        assert get_persona("PROJECT_MANAGER") is PROJECT_MANAGER_PERSONA
        assert get_persona("team_lead") is TEAM_LEAD_PERSONA

    def test_lookup_by_enum(self):
        """Enum members resolve directly."""
        assert get_persona(UserRole.TEAM_LEAD).display_name == "Technical Architect"

    @pytest.mark.parametrize("role", [None, "", "ADMIN", UserRole.UNKNOWN])
    def test_unknown_falls_back_to_developer(self, role):
        """Missing or unrecognized roles get the developer persona."""
        assert get_persona(role) is DEVELOPER_PERSONA

    def test_default_persona(self):
        """The default persona is the Code Companion."""
        assert get_default_persona().display_name == "Code Companion"

    def test_persona_prompts_name_their_voice(self):
        """Each system prompt introduces its display name."""
        for persona in PERSONAS.values():
            assert persona.system_prompt.startswith(f"You are a {persona.display_name} AI assistant")


class TestInitialPreferences:
    """Tests for role-seeded preferences."""

    def test_project_manager(self):
        """Managers get detailed, verbose defaults."""
        prefs = create_initial_user_preferences("PROJECT_MANAGER")
        assert prefs.preferred_response_style == "detailed"
        assert prefs.notification_level == "verbose"

    def test_developer(self):
        """Developers get technical responses."""
        assert create_initial_user_preferences(UserRole.DEVELOPER).preferred_response_style == "technical"

    def test_workspace_creator(self):
        """Creators get concise, minimal defaults."""
        prefs = create_initial_user_preferences("workspace_creator")
        assert prefs.preferred_response_style == "concise"
        assert prefs.notification_level == "minimal"

    def test_unknown_role_uses_generic_defaults(self):
        """Roles without a template keep the base defaults."""
        prefs = create_initial_user_preferences(None)
        assert prefs.preferred_response_style == "detailed"
        assert prefs.notification_level == "normal"
        assert prefs.auto_confirm_actions is False
        assert prefs.preferred_time_format == "12h"
        assert prefs.timezone == "UTC"
