"""
Pytest configuration and fixtures.

Everything runs in memory: a controllable clock, a seeded workspace and a stub
completion provider stand in for the real collaborators.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

import pytest

from pm_assistant.chat import ChatOrchestrator
from pm_assistant.config import Settings
from pm_assistant.context import RoleAwareContextBuilder
from pm_assistant.conversation import ConversationStateStore
from pm_assistant.llm.types import Message
from pm_assistant.providers import (
    DirectoryUser,
    HeaderIdentityProvider,
    InMemoryWorkspaceData,
    ProjectRecord,
    SprintRecord,
    TaskRecord,
    WorkspaceRecord,
)

START = datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc)

PM_EXTERNAL_ID = "user_ext_pm"
DEV_EXTERNAL_ID = "user_ext_dev"


# =============================================================================
# Helpers
# =============================================================================


class FakeClock:
    """Manually advanced clock for expiry tests."""

    def __init__(self, start: datetime = START):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class StubCompletion:
    """Completion provider that records calls and returns a canned reply."""

    def __init__(
        self,
        response: Optional[str] = "Here is the current status of your project tasks.",
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ):
        self.response = response
        self.error = error
        self.delay = delay
        self.calls: list[list[Message]] = []

    async def complete(self, messages: Sequence[Message]) -> Optional[str]:
        self.calls.append(list(messages))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.response

    @property
    def last_system_prompt(self) -> str:
        return self.calls[-1][0].content


def build_orchestrator(
    store: ConversationStateStore,
    data: InMemoryWorkspaceData,
    completion: StubCompletion,
    settings: Optional[Settings] = None,
) -> ChatOrchestrator:
    return ChatOrchestrator(
        store=store,
        identity=HeaderIdentityProvider(),
        directory=data,
        context_builder=RoleAwareContextBuilder(data),
        completion=completion,
        settings=settings or Settings(),
    )


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def clock():
    """Clock pinned to a fixed start time."""
    return FakeClock()


@pytest.fixture
def store(clock):
    """Session store on the fake clock with default limits."""
    return ConversationStateStore(
        clock=clock,
        expiry=timedelta(hours=24),
        max_history=50,
        action_ttl=timedelta(minutes=60),
        sweep_interval=timedelta(minutes=60),
    )


@pytest.fixture
def workspace_data():
    """Workspace with a project manager, a role-less developer and one project."""
    data = InMemoryWorkspaceData()
    data.add_user(DirectoryUser(
        id="u_pm",
        external_id=PM_EXTERNAL_ID,
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        primary_role="PROJECT_MANAGER",
    ))
    data.add_user(DirectoryUser(
        id="u_dev",
        external_id=DEV_EXTERNAL_ID,
        first_name="Grace",
        last_name="Hopper",
        email="grace@example.com",
    ))
    data.add_workspace(
        WorkspaceRecord(id="w1", name="Core Platform"),
        member_ids={"u_pm": "ADMIN", "u_dev": "MEMBER"},
    )
    data.add_project(ProjectRecord(
        id="p1",
        name="Apollo",
        description="Launch platform",
        status="active",
        workspace_id="w1",
        owner_id="u_pm",
    ))
    data.add_task(TaskRecord(
        id="t1", title="Design API", status="in_progress", priority="high",
        project_id="p1", assignee_id="u_pm", created_at=START - timedelta(days=3),
    ))
    data.add_task(TaskRecord(
        id="t2", title="Write docs", status="todo",
        project_id="p1", assignee_id="u_pm", created_at=START - timedelta(days=1),
    ))
    data.add_task(TaskRecord(
        id="t3", title="Kickoff", status="done",
        project_id="p1", assignee_id="u_pm", created_at=START - timedelta(days=10),
    ))
    data.add_sprint("p1", SprintRecord(
        id="s1", name="Sprint 1", status="active", created_at=START - timedelta(days=7),
    ))
    data.add_sprint("p1", SprintRecord(
        id="s0", name="Sprint 0", status="completed", created_at=START - timedelta(days=21),
    ))
    return data


@pytest.fixture
def completion():
    """Stub completion provider with a status-style reply."""
    return StubCompletion()


@pytest.fixture
def orchestrator(store, workspace_data, completion):
    """Orchestrator wired to in-memory collaborators."""
    return build_orchestrator(store, workspace_data, completion)
