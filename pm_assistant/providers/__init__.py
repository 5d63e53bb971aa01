"""Collaborator interfaces and their implementations."""

from pm_assistant.providers.base import (
    CompletionProvider,
    IdentityProvider,
    ProjectDataProvider,
    UserDirectory,
)
from pm_assistant.providers.identity import USER_ID_HEADER, HeaderIdentityProvider
from pm_assistant.providers.memory import InMemoryWorkspaceData, WorkspaceSeed
from pm_assistant.providers.types import (
    DirectoryUser,
    ProjectRecord,
    ProjectSnapshot,
    SprintRecord,
    TaskRecord,
    UserSnapshot,
    WorkspaceRecord,
)

__all__ = [
    # Protocols
    "CompletionProvider",
    "IdentityProvider",
    "ProjectDataProvider",
    "UserDirectory",
    # Implementations
    "HeaderIdentityProvider",
    "InMemoryWorkspaceData",
    "USER_ID_HEADER",
    "WorkspaceSeed",
    # Records
    "DirectoryUser",
    "ProjectRecord",
    "ProjectSnapshot",
    "SprintRecord",
    "TaskRecord",
    "UserSnapshot",
    "WorkspaceRecord",
]
