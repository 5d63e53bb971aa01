"""Tests for RoleAwareContextBuilder."""
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import START
from pm_assistant.context import CLOSING_INSTRUCTION, RoleAwareContextBuilder
from pm_assistant.context.models import UserContext, UserSummary
from pm_assistant.personas import DEVELOPER_PERSONA, PROJECT_MANAGER_PERSONA
from pm_assistant.providers import TaskRecord


@pytest.fixture
def builder(workspace_data):
    return RoleAwareContextBuilder(workspace_data)


class TestBuildUserContext:
    """Tests for user context snapshots."""

    @pytest.mark.asyncio
    async def test_user_context(self, builder):
        """Identity, workspaces, owned projects and active tasks are collected."""
        ctx = await builder.build_user_context("u_pm")

        assert ctx.user.name == "Ada Lovelace"
        assert ctx.user.email == "ada@example.com"
        assert ctx.user.primary_role == "PROJECT_MANAGER"
        assert [(w.name, w.role) for w in ctx.workspaces] == [("Core Platform", "ADMIN")]
        assert [(p.name, p.workspace, p.role) for p in ctx.projects] == [("Apollo", "Core Platform", "OWNER")]

    @pytest.mark.asyncio
    async def test_active_tasks_exclude_terminal_newest_first(self, builder):
        """Done tasks are dropped and the rest ordered by creation, newest first."""
        ctx = await builder.build_user_context("u_pm")
        assert [t.title for t in ctx.active_tasks] == ["Write docs", "Design API"]
        assert ctx.active_tasks[0].project_name == "Apollo"

    @pytest.mark.asyncio
    async def test_active_tasks_limited(self, workspace_data, builder):
        """At most ten assigned tasks are included."""
        for i in range(15):
            workspace_data.add_task(TaskRecord(
                id=f"bulk{i}", title=f"Bulk {i}", status="todo",
                project_id="p1", assignee_id="u_pm", created_at=START + timedelta(hours=i),
            ))

        ctx = await builder.build_user_context("u_pm")

        assert len(ctx.active_tasks) == 10
        assert ctx.active_tasks[0].title == "Bulk 14"

    @pytest.mark.asyncio
    async def test_missing_role_defaults_to_developer(self, builder):
        """Users without a role are treated as developers."""
        ctx = await builder.build_user_context("u_dev")
        assert ctx.user.primary_role == "DEVELOPER"
        assert ctx.active_tasks == []

    @pytest.mark.asyncio
    async def test_unknown_user(self, builder):
        """Unknown users yield None."""
        assert await builder.build_user_context("missing") is None

    @pytest.mark.asyncio
    async def test_lookup_failure_returns_none(self):
        """Data access errors are absorbed."""
        data = MagicMock()
        data.get_user_snapshot = AsyncMock(side_effect=RuntimeError("db down"))
        assert await RoleAwareContextBuilder(data).build_user_context("u_pm") is None


class TestBuildProjectContext:
    """Tests for project context snapshots."""

    @pytest.mark.asyncio
    async def test_project_context(self, builder):
        """Project, workspace, owner, active tasks and open sprints are collected."""
        ctx = await builder.build_project_context("p1")

        assert ctx.project.name == "Apollo"
        assert ctx.project.status == "active"
        assert ctx.workspace.name == "Core Platform"
        assert ctx.owner.name == "Ada Lovelace"
        assert [t.title for t in ctx.active_tasks] == ["Write docs", "Design API"]
        assert [s.name for s in ctx.active_sprints] == ["Sprint 1"]

    @pytest.mark.asyncio
    async def test_unknown_project(self, builder):
        """Unknown projects yield None."""
        assert await builder.build_project_context("missing") is None

    @pytest.mark.asyncio
    async def test_lookup_failure_returns_none(self):
        """Data access errors are absorbed."""
        data = MagicMock()
        data.get_project_snapshot = AsyncMock(side_effect=RuntimeError("db down"))
        assert await RoleAwareContextBuilder(data).build_project_context("p1") is None


class TestGenerateSystemPrompt:
    """Tests for prompt assembly."""

    @pytest.mark.asyncio
    async def test_full_prompt(self, builder):
        """Sections appear in a fixed order with the exact line format."""
        user_ctx = await builder.build_user_context("u_pm")
        project_ctx = await builder.build_project_context("p1")

        prompt = builder.generate_system_prompt(user_ctx, project_ctx)

        expected = "\n".join([
            PROJECT_MANAGER_PERSONA.system_prompt,
            "",
            "Current User Context:",
            "- Name: Ada Lovelace",
            "- Role: PROJECT_MANAGER",
            "- Active Workspaces: Core Platform",
            "- Current Tasks: Write docs (todo) in Apollo, Design API (in_progress) in Apollo",
            "",
            "Current Project Context:",
            "- Project: Apollo",
            "- Workspace: Core Platform",
            "- Status: active",
            "- Owner: Ada Lovelace",
            "- Active Sprints: Sprint 1",
            "- Recent Tasks: Write docs (todo), Design API (in_progress)",
            "",
            CLOSING_INSTRUCTION,
        ])
        assert prompt == expected

    def test_without_project_or_tasks(self, builder):
        """Optional sections are omitted when empty."""
        user_ctx = UserContext(user=UserSummary(id="u1", name="Lin", primary_role="intern"))

        prompt = builder.generate_system_prompt(user_ctx)

        assert prompt.startswith(DEVELOPER_PERSONA.system_prompt)
        assert "- Role: intern" in prompt
        assert "- Current Tasks" not in prompt
        assert "Current Project Context:" not in prompt
        assert prompt.endswith(CLOSING_INSTRUCTION)

    @pytest.mark.asyncio
    async def test_recent_tasks_capped_at_five(self, workspace_data, builder):
        """Only five project tasks are listed in the prompt."""
        for i in range(8):
            workspace_data.add_task(TaskRecord(
                id=f"extra{i}", title=f"Extra {i}", status="todo",
                project_id="p1", created_at=START + timedelta(hours=i),
            ))
        user_ctx = await builder.build_user_context("u_pm")
        project_ctx = await builder.build_project_context("p1")

        prompt = builder.generate_system_prompt(user_ctx, project_ctx)

        recent_line = next(line for line in prompt.split("\n") if line.startswith("- Recent Tasks:"))
        assert recent_line.count("(todo)") == 5
        assert "Extra 7 (todo)" in recent_line

    def test_role_personality(self, builder):
        """Unknown roles fall back to the developer persona."""
        assert builder.get_role_personality("ADMIN") is DEVELOPER_PERSONA
        assert builder.get_role_personality("project_manager") is PROJECT_MANAGER_PERSONA
