"""Records returned by workspace data collaborators.

These mirror the application's user/workspace/project/task/sprint rows. They
are read-only inputs to the context builder.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

# Task statuses that no longer count as active work
TERMINAL_TASK_STATUSES: frozenset[str] = frozenset({"done", "cancelled"})

# Sprint statuses shown in project context
OPEN_SPRINT_STATUSES: frozenset[str] = frozenset({"planned", "active"})

USER_TASK_LIMIT = 10
PROJECT_TASK_LIMIT = 20
PROJECT_SPRINT_LIMIT = 3


class DirectoryUser(BaseModel):
    """Internal user record resolved from an external identity."""

    id: str = Field(description="Internal user id")
    external_id: Optional[str] = Field(default=None, description="Identity provider user id")
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    primary_role: Optional[str] = Field(
        default=None,
        description="Raw primary role; may be missing or use unexpected casing",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class WorkspaceRecord(BaseModel):
    """A workspace the user belongs to, with their membership role."""

    id: str
    name: str
    role: Optional[str] = None


class ProjectRecord(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    status: Optional[str] = None
    archived: bool = False
    workspace_id: Optional[str] = None
    workspace_name: str = ""
    owner_id: Optional[str] = None


class TaskRecord(BaseModel):
    id: str
    title: str
    status: str
    priority: Optional[str] = None
    project_id: Optional[str] = None
    project_name: str = ""
    assignee_id: Optional[str] = None
    assignee_name: Optional[str] = None
    created_at: Optional[datetime] = None


class SprintRecord(BaseModel):
    id: str
    name: str
    status: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    created_at: Optional[datetime] = None


class UserSnapshot(BaseModel):
    """Everything the assistant needs to know about a user.

    ``assigned_tasks`` holds at most USER_TASK_LIMIT non-terminal tasks,
    most recently created first.
    """

    user: DirectoryUser
    workspaces: list[WorkspaceRecord] = Field(default_factory=list)
    owned_projects: list[ProjectRecord] = Field(default_factory=list)
    assigned_tasks: list[TaskRecord] = Field(default_factory=list)


class ProjectSnapshot(BaseModel):
    """Everything the assistant needs to know about a project.

    ``tasks`` holds at most PROJECT_TASK_LIMIT non-terminal tasks and
    ``sprints`` at most PROJECT_SPRINT_LIMIT planned/active sprints, both most
    recently created first.
    """

    project: ProjectRecord
    tasks: list[TaskRecord] = Field(default_factory=list)
    sprints: list[SprintRecord] = Field(default_factory=list)
    owner: Optional[DirectoryUser] = None
