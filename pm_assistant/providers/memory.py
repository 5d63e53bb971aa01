"""In-memory workspace data.

Implements both UserDirectory and ProjectDataProvider over plain dicts. Used
for development (``data_backend=memory``) and tests; applies the same filters
and limits as the PostgreSQL provider.
"""
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional, Union

from pydantic import BaseModel, Field

from pm_assistant.providers.types import (
    OPEN_SPRINT_STATUSES,
    PROJECT_SPRINT_LIMIT,
    PROJECT_TASK_LIMIT,
    TERMINAL_TASK_STATUSES,
    USER_TASK_LIMIT,
    DirectoryUser,
    ProjectRecord,
    ProjectSnapshot,
    SprintRecord,
    TaskRecord,
    UserSnapshot,
    WorkspaceRecord,
)

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _created_key(item) -> datetime:
    """Sort key for created_at; naive values are read as UTC, missing ones sort last."""
    created = item.created_at
    if created is None:
        return _EPOCH
    if created.tzinfo is None:
        return created.replace(tzinfo=timezone.utc)
    return created


def _newest_first(items: Iterable, limit: int) -> list:
    ordered = sorted(items, key=_created_key, reverse=True)
    return ordered[:limit]


class SeedWorkspace(WorkspaceRecord):
    members: dict[str, Optional[str]] = Field(
        default_factory=dict,
        description="user_id -> membership role",
    )


class SeedSprint(SprintRecord):
    project_id: str


class WorkspaceSeed(BaseModel):
    """JSON document loaded by InMemoryWorkspaceData.from_seed_file()."""

    users: list[DirectoryUser] = Field(default_factory=list)
    workspaces: list[SeedWorkspace] = Field(default_factory=list)
    projects: list[ProjectRecord] = Field(default_factory=list)
    tasks: list[TaskRecord] = Field(default_factory=list)
    sprints: list[SeedSprint] = Field(default_factory=list)


class InMemoryWorkspaceData:
    """Dict-backed users, workspaces, projects, tasks and sprints.

    Usage:
        data = InMemoryWorkspaceData()
        data.add_user(DirectoryUser(id="u1", external_id="ext_1", first_name="Ada"))
        data.add_workspace(WorkspaceRecord(id="w1", name="Core"), member_ids={"u1": "admin"})
        snapshot = await data.get_user_snapshot("u1")
    """

    def __init__(self) -> None:
        self._users: dict[str, DirectoryUser] = {}
        self._workspaces: dict[str, WorkspaceRecord] = {}
        self._memberships: dict[str, dict[str, Optional[str]]] = {}  # user_id -> {workspace_id: role}
        self._projects: dict[str, ProjectRecord] = {}
        self._tasks: dict[str, TaskRecord] = {}
        self._sprints: dict[str, list[SprintRecord]] = {}  # project_id -> sprints

    # -------------------------------------------------------------------------
    # Seeding
    # -------------------------------------------------------------------------

    @classmethod
    def from_seed(cls, seed: WorkspaceSeed) -> "InMemoryWorkspaceData":
        """Build a store from a parsed seed document.

        Records are added users first, then workspaces, projects, tasks and
        sprints, so derived names (workspace, project, assignee) resolve.
        """
        data = cls()
        for user in seed.users:
            data.add_user(user)
        for workspace in seed.workspaces:
            data.add_workspace(
                WorkspaceRecord.model_validate(workspace.model_dump(exclude={"members"})),
                member_ids=workspace.members,
            )
        for project in seed.projects:
            data.add_project(project)
        for task in seed.tasks:
            data.add_task(task)
        for sprint in seed.sprints:
            data.add_sprint(
                sprint.project_id,
                SprintRecord.model_validate(sprint.model_dump(exclude={"project_id"})),
            )
        return data

    @classmethod
    def from_seed_file(cls, path: Union[str, Path]) -> "InMemoryWorkspaceData":
        """Load users, workspaces, projects, tasks and sprints from a JSON file.

        Raises:
            OSError: If the file cannot be read.
            pydantic.ValidationError: If the document does not match WorkspaceSeed.
        """
        seed = WorkspaceSeed.model_validate_json(Path(path).read_text(encoding="utf-8"))
        logger.info(
            "Loaded workspace seed",
            extra={
                "path": str(path),
                "users": len(seed.users),
                "projects": len(seed.projects),
                "tasks": len(seed.tasks),
            },
        )
        return cls.from_seed(seed)

    def add_user(self, user: DirectoryUser) -> None:
        self._users[user.id] = user

    def add_workspace(
        self,
        workspace: WorkspaceRecord,
        member_ids: Optional[dict[str, Optional[str]]] = None,
    ) -> None:
        """Add a workspace and its members ({user_id: membership role})."""
        self._workspaces[workspace.id] = workspace
        for user_id, role in (member_ids or {}).items():
            self._memberships.setdefault(user_id, {})[workspace.id] = role

    def add_project(self, project: ProjectRecord) -> None:
        if not project.workspace_name and project.workspace_id in self._workspaces:
            project = project.model_copy(
                update={"workspace_name": self._workspaces[project.workspace_id].name}
            )
        self._projects[project.id] = project

    def add_task(self, task: TaskRecord) -> None:
        project = self._projects.get(task.project_id or "")
        if project and not task.project_name:
            task = task.model_copy(update={"project_name": project.name})
        assignee = self._users.get(task.assignee_id or "")
        if assignee and not task.assignee_name:
            task = task.model_copy(update={"assignee_name": assignee.full_name})
        self._tasks[task.id] = task

    def add_sprint(self, project_id: str, sprint: SprintRecord) -> None:
        self._sprints.setdefault(project_id, []).append(sprint)

    # -------------------------------------------------------------------------
    # UserDirectory
    # -------------------------------------------------------------------------

    async def find_by_external_id(self, external_id: str) -> Optional[DirectoryUser]:
        for user in self._users.values():
            if user.external_id == external_id:
                return user
        return None

    # -------------------------------------------------------------------------
    # ProjectDataProvider
    # -------------------------------------------------------------------------

    async def get_user_snapshot(self, user_id: str) -> Optional[UserSnapshot]:
        user = self._users.get(user_id)
        if user is None:
            return None

        workspaces = [
            self._workspaces[workspace_id].model_copy(update={"role": role})
            for workspace_id, role in self._memberships.get(user_id, {}).items()
            if workspace_id in self._workspaces
        ]
        owned = [p for p in self._projects.values() if p.owner_id == user_id]
        assigned = _newest_first(
            (
                t for t in self._tasks.values()
                if t.assignee_id == user_id and t.status not in TERMINAL_TASK_STATUSES
            ),
            USER_TASK_LIMIT,
        )

        return UserSnapshot(
            user=user,
            workspaces=workspaces,
            owned_projects=owned,
            assigned_tasks=assigned,
        )

    async def get_project_snapshot(self, project_id: str) -> Optional[ProjectSnapshot]:
        project = self._projects.get(project_id)
        if project is None:
            return None

        tasks = _newest_first(
            (
                t for t in self._tasks.values()
                if t.project_id == project_id and t.status not in TERMINAL_TASK_STATUSES
            ),
            PROJECT_TASK_LIMIT,
        )
        sprints = _newest_first(
            (s for s in self._sprints.get(project_id, []) if s.status in OPEN_SPRINT_STATUSES),
            PROJECT_SPRINT_LIMIT,
        )

        return ProjectSnapshot(
            project=project,
            tasks=tasks,
            sprints=sprints,
            owner=self._users.get(project.owner_id or ""),
        )
