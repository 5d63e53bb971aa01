"""User and project context snapshots rendered into the assistant prompt."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class UserSummary(BaseModel):
    id: str
    name: str
    email: str = ""
    primary_role: str = Field(description="Raw role string as stored; persona lookup normalizes it")


class WorkspaceSummary(BaseModel):
    id: str
    name: str
    role: Optional[str] = None


class ProjectSummary(BaseModel):
    id: str
    name: str
    workspace: str
    role: str = "OWNER"


class TaskSummary(BaseModel):
    id: str
    title: str
    status: str
    priority: Optional[str] = None
    project_name: str = ""
    assignee_id: Optional[str] = None
    assignee_name: Optional[str] = None


class UserContext(BaseModel):
    """Who the user is and what they are working on."""

    user: UserSummary
    workspaces: list[WorkspaceSummary] = Field(default_factory=list)
    projects: list[ProjectSummary] = Field(default_factory=list)
    active_tasks: list[TaskSummary] = Field(default_factory=list)


class ProjectInfo(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    status: Optional[str] = None
    archived: bool = False


class WorkspaceRef(BaseModel):
    id: Optional[str] = None
    name: str = ""


class SprintSummary(BaseModel):
    id: str
    name: str
    status: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class OwnerRef(BaseModel):
    id: Optional[str] = None
    name: str = ""


class ProjectContext(BaseModel):
    """The project the conversation is scoped to."""

    project: ProjectInfo
    workspace: WorkspaceRef
    active_tasks: list[TaskSummary] = Field(default_factory=list)
    active_sprints: list[SprintSummary] = Field(default_factory=list)
    owner: OwnerRef = Field(default_factory=OwnerRef)
