"""Collaborator interfaces consumed by the chat engine.

The engine does not implement identity, user lookup, workspace data access or
model completion itself; it depends on these protocols.
"""
from typing import Optional, Protocol, Sequence, runtime_checkable

from pm_assistant.llm.types import Message
from pm_assistant.providers.types import DirectoryUser, ProjectSnapshot, UserSnapshot


@runtime_checkable
class IdentityProvider(Protocol):
    """Resolves request credentials to an external user id."""

    async def authenticate(self, credentials: Optional[str]) -> Optional[str]:
        """Return the external user id, or None if unauthenticated."""
        ...


@runtime_checkable
class UserDirectory(Protocol):
    """Maps external identities to internal user records."""

    async def find_by_external_id(self, external_id: str) -> Optional[DirectoryUser]:
        ...


@runtime_checkable
class ProjectDataProvider(Protocol):
    """Read access to workspace, project, task and sprint data."""

    async def get_user_snapshot(self, user_id: str) -> Optional[UserSnapshot]:
        """Workspaces, owned projects and active assigned tasks for a user."""
        ...

    async def get_project_snapshot(self, project_id: str) -> Optional[ProjectSnapshot]:
        """Project, active tasks, open sprints and owner."""
        ...


@runtime_checkable
class CompletionProvider(Protocol):
    """Produces a single non-streaming completion for a message list."""

    async def complete(self, messages: Sequence[Message]) -> Optional[str]:
        ...
