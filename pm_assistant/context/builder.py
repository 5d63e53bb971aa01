"""Role-aware context builder.

Turns workspace data into user/project context snapshots and renders them,
together with the user's persona, into the assistant's system prompt.
"""

import hashlib
import logging
from typing import Optional

from pm_assistant.context.models import (
    OwnerRef,
    ProjectContext,
    ProjectInfo,
    ProjectSummary,
    SprintSummary,
    TaskSummary,
    UserContext,
    UserSummary,
    WorkspaceRef,
    WorkspaceSummary,
)
from pm_assistant.personas import PersonaConfig, get_persona
from pm_assistant.providers.base import ProjectDataProvider
from pm_assistant.providers.types import TaskRecord

logger = logging.getLogger(__name__)

DEFAULT_PRIMARY_ROLE = "DEVELOPER"
PROMPT_RECENT_TASKS = 5
CLOSING_INSTRUCTION = "Provide helpful, role-appropriate responses based on this context."


def _prompt_hash(text: str) -> str:
    """Generate short hash for prompt identification."""
    return hashlib.sha256(text.encode()).hexdigest()[:8]


def _task_summary(task: TaskRecord) -> TaskSummary:
    return TaskSummary(
        id=task.id,
        title=task.title,
        status=task.status,
        priority=task.priority,
        project_name=task.project_name,
        assignee_id=task.assignee_id,
        assignee_name=task.assignee_name,
    )


class RoleAwareContextBuilder:
    """Build context snapshots and role-specific system prompts.

    Usage:
        builder = RoleAwareContextBuilder(data_provider)
        user_ctx = await builder.build_user_context(user_id)
        if user_ctx:
            prompt = builder.generate_system_prompt(user_ctx)
    """

    def __init__(self, data: ProjectDataProvider) -> None:
        self._data = data

    async def build_user_context(self, user_id: str) -> Optional[UserContext]:
        """Snapshot of a user's workspaces, owned projects and active tasks.

        Returns:
            UserContext, or None if the user cannot be found or the lookup
            fails.
        """
        try:
            snapshot = await self._data.get_user_snapshot(user_id)
        except Exception as e:
            logger.error(f"Error building user context: {e}", extra={"user_id": user_id})
            return None

        if snapshot is None:
            logger.warning("User not found for context", extra={"user_id": user_id})
            return None

        user = snapshot.user
        return UserContext(
            user=UserSummary(
                id=user.id,
                name=user.full_name,
                email=user.email,
                primary_role=user.primary_role or DEFAULT_PRIMARY_ROLE,
            ),
            workspaces=[
                WorkspaceSummary(id=w.id, name=w.name, role=w.role)
                for w in snapshot.workspaces
            ],
            projects=[
                ProjectSummary(id=p.id, name=p.name, workspace=p.workspace_name)
                for p in snapshot.owned_projects
            ],
            active_tasks=[_task_summary(t) for t in snapshot.assigned_tasks],
        )

    async def build_project_context(self, project_id: str) -> Optional[ProjectContext]:
        """Snapshot of a project's active tasks, open sprints and owner.

        Returns:
            ProjectContext, or None if the project cannot be found or the
            lookup fails.
        """
        try:
            snapshot = await self._data.get_project_snapshot(project_id)
        except Exception as e:
            logger.error(f"Error building project context: {e}", extra={"project_id": project_id})
            return None

        if snapshot is None:
            logger.info("Project not found for context", extra={"project_id": project_id})
            return None

        project = snapshot.project
        owner = snapshot.owner
        return ProjectContext(
            project=ProjectInfo(
                id=project.id,
                name=project.name,
                description=project.description,
                status=project.status,
                archived=project.archived,
            ),
            workspace=WorkspaceRef(id=project.workspace_id, name=project.workspace_name),
            active_tasks=[_task_summary(t) for t in snapshot.tasks],
            active_sprints=[
                SprintSummary(
                    id=s.id,
                    name=s.name,
                    status=s.status,
                    start_date=s.start_date,
                    end_date=s.end_date,
                )
                for s in snapshot.sprints
            ],
            owner=OwnerRef(id=owner.id, name=owner.full_name) if owner else OwnerRef(),
        )

    def get_role_personality(self, role: Optional[str]) -> PersonaConfig:
        """Persona for a raw role string; unknown roles get the developer persona."""
        return get_persona(role)

    def generate_system_prompt(
        self,
        user_context: UserContext,
        project_context: Optional[ProjectContext] = None,
    ) -> str:
        """Render persona, user context and optional project context.

        Section order is fixed: persona, user context, project context,
        closing instruction.
        """
        user = user_context.user
        persona = self.get_role_personality(user.primary_role)

        lines = [persona.system_prompt, "", "Current User Context:"]
        lines.append(f"- Name: {user.name}")
        lines.append(f"- Role: {user.primary_role}")
        lines.append(f"- Active Workspaces: {', '.join(w.name for w in user_context.workspaces)}")

        if user_context.active_tasks:
            tasks = ", ".join(
                f"{t.title} ({t.status}) in {t.project_name}" for t in user_context.active_tasks
            )
            lines.append(f"- Current Tasks: {tasks}")

        if project_context:
            lines.extend(["", "Current Project Context:"])
            lines.append(f"- Project: {project_context.project.name}")
            lines.append(f"- Workspace: {project_context.workspace.name}")
            lines.append(f"- Status: {project_context.project.status}")
            lines.append(f"- Owner: {project_context.owner.name}")

            if project_context.active_sprints:
                sprints = ", ".join(s.name for s in project_context.active_sprints)
                lines.append(f"- Active Sprints: {sprints}")

            if project_context.active_tasks:
                recent = ", ".join(
                    f"{t.title} ({t.status})"
                    for t in project_context.active_tasks[:PROMPT_RECENT_TASKS]
                )
                lines.append(f"- Recent Tasks: {recent}")

        lines.extend(["", CLOSING_INSTRUCTION])
        prompt = "\n".join(lines)

        logger.debug(
            "Assembled system prompt",
            extra={
                "persona": persona.role.value,
                "prompt_hash": _prompt_hash(prompt),
                "has_project": project_context is not None,
            },
        )
        return prompt
