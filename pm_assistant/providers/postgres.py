"""PostgreSQL workspace data using psycopg v3.

Reads the project-management application's tables (Prisma naming: quoted
PascalCase tables, camelCase columns). Read-only; the CRUD application owns
the schema.
"""
import logging
from contextlib import AbstractAsyncContextManager
from typing import Any, Callable, Optional

from psycopg import AsyncConnection
from psycopg.rows import dict_row

from pm_assistant.db.connection import get_connection
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

ConnectionFactory = Callable[[], AbstractAsyncContextManager[AsyncConnection]]

_USER_COLUMNS = """
    u.id, u."clerkId" AS external_id, u."firstName" AS first_name,
    u."lastName" AS last_name, u.email, u."primaryRole"::text AS primary_role
"""

_PROJECT_COLUMNS = """
    p.id, p.name, p.description, p.status::text AS status, p.archived,
    p."workspaceId" AS workspace_id, w.name AS workspace_name, p."ownerId" AS owner_id
"""

USER_BY_EXTERNAL_ID_SQL = f'SELECT {_USER_COLUMNS} FROM "User" u WHERE u."clerkId" = %s'

USER_BY_ID_SQL = f'SELECT {_USER_COLUMNS} FROM "User" u WHERE u.id = %s'

USER_WORKSPACES_SQL = """
    SELECT w.id, w.name, wm.role::text AS role
    FROM "WorkspaceMember" wm
    JOIN "Workspace" w ON w.id = wm."workspaceId"
    WHERE wm."userId" = %s
"""

OWNED_PROJECTS_SQL = f"""
    SELECT {_PROJECT_COLUMNS}
    FROM "Project" p
    JOIN "Workspace" w ON w.id = p."workspaceId"
    WHERE p."ownerId" = %s
"""

ASSIGNED_TASKS_SQL = """
    SELECT t.id, t.title, t.status::text AS status, t.priority::text AS priority,
           t."projectId" AS project_id, p.name AS project_name,
           t."assigneeId" AS assignee_id, t."createdAt" AS created_at
    FROM "Task" t
    JOIN "Project" p ON p.id = t."projectId"
    WHERE t."assigneeId" = %s AND NOT (t.status::text = ANY(%s))
    ORDER BY t."createdAt" DESC
    LIMIT %s
"""

PROJECT_SQL = f"""
    SELECT {_PROJECT_COLUMNS}
    FROM "Project" p
    JOIN "Workspace" w ON w.id = p."workspaceId"
    WHERE p.id = %s
"""

PROJECT_TASKS_SQL = """
    SELECT t.id, t.title, t.status::text AS status, t.priority::text AS priority,
           t."projectId" AS project_id, p.name AS project_name,
           t."assigneeId" AS assignee_id,
           CASE WHEN a.id IS NULL THEN NULL
                ELSE TRIM(CONCAT(a."firstName", ' ', a."lastName"))
           END AS assignee_name,
           t."createdAt" AS created_at
    FROM "Task" t
    JOIN "Project" p ON p.id = t."projectId"
    LEFT JOIN "User" a ON a.id = t."assigneeId"
    WHERE t."projectId" = %s AND NOT (t.status::text = ANY(%s))
    ORDER BY t."createdAt" DESC
    LIMIT %s
"""

PROJECT_SPRINTS_SQL = """
    SELECT s.id, s.name, s.status::text AS status, s."startDate" AS start_date,
           s."endDate" AS end_date, s."createdAt" AS created_at
    FROM "Sprint" s
    WHERE s."projectId" = %s AND s.status::text = ANY(%s)
    ORDER BY s."createdAt" DESC
    LIMIT %s
"""


def _clean(row: dict[str, Any]) -> dict[str, Any]:
    """Drop NULL columns so model defaults apply."""
    return {key: value for key, value in row.items() if value is not None}


def row_to_user(row: dict[str, Any]) -> DirectoryUser:
    return DirectoryUser(**_clean(row))


def row_to_project(row: dict[str, Any]) -> ProjectRecord:
    return ProjectRecord(**_clean(row))


def row_to_task(row: dict[str, Any]) -> TaskRecord:
    return TaskRecord(**_clean(row))


def row_to_sprint(row: dict[str, Any]) -> SprintRecord:
    return SprintRecord(**_clean(row))


class PostgresWorkspaceData:
    """UserDirectory and ProjectDataProvider over PostgreSQL.

    Usage:
        await init_db()
        data = PostgresWorkspaceData()
        user = await data.find_by_external_id("user_2abc")
    """

    def __init__(self, connection_factory: ConnectionFactory = get_connection) -> None:
        """Initialize with a connection factory.

        Args:
            connection_factory: Returns an async context manager yielding a
                psycopg AsyncConnection. Defaults to the shared pool.
        """
        self._connection_factory = connection_factory

    async def _fetch_all(self, conn: AsyncConnection, sql: str, params: tuple) -> list[dict[str, Any]]:
        async with conn.cursor(row_factory=dict_row) as cur:
            await cur.execute(sql, params)
            return await cur.fetchall()

    async def _fetch_one(self, conn: AsyncConnection, sql: str, params: tuple) -> Optional[dict[str, Any]]:
        async with conn.cursor(row_factory=dict_row) as cur:
            await cur.execute(sql, params)
            return await cur.fetchone()

    async def find_by_external_id(self, external_id: str) -> Optional[DirectoryUser]:
        async with self._connection_factory() as conn:
            row = await self._fetch_one(conn, USER_BY_EXTERNAL_ID_SQL, (external_id,))
        return row_to_user(row) if row else None

    async def get_user_snapshot(self, user_id: str) -> Optional[UserSnapshot]:
        async with self._connection_factory() as conn:
            user_row = await self._fetch_one(conn, USER_BY_ID_SQL, (user_id,))
            if not user_row:
                return None

            workspace_rows = await self._fetch_all(conn, USER_WORKSPACES_SQL, (user_id,))
            project_rows = await self._fetch_all(conn, OWNED_PROJECTS_SQL, (user_id,))
            task_rows = await self._fetch_all(
                conn,
                ASSIGNED_TASKS_SQL,
                (user_id, sorted(TERMINAL_TASK_STATUSES), USER_TASK_LIMIT),
            )

        logger.debug(
            "Loaded user snapshot",
            extra={
                "user_id": user_id,
                "workspaces": len(workspace_rows),
                "projects": len(project_rows),
                "tasks": len(task_rows),
            },
        )

        return UserSnapshot(
            user=row_to_user(user_row),
            workspaces=[WorkspaceRecord(**_clean(row)) for row in workspace_rows],
            owned_projects=[row_to_project(row) for row in project_rows],
            assigned_tasks=[row_to_task(row) for row in task_rows],
        )

    async def get_project_snapshot(self, project_id: str) -> Optional[ProjectSnapshot]:
        async with self._connection_factory() as conn:
            project_row = await self._fetch_one(conn, PROJECT_SQL, (project_id,))
            if not project_row:
                return None

            project = row_to_project(project_row)
            task_rows = await self._fetch_all(
                conn,
                PROJECT_TASKS_SQL,
                (project_id, sorted(TERMINAL_TASK_STATUSES), PROJECT_TASK_LIMIT),
            )
            sprint_rows = await self._fetch_all(
                conn,
                PROJECT_SPRINTS_SQL,
                (project_id, sorted(OPEN_SPRINT_STATUSES), PROJECT_SPRINT_LIMIT),
            )
            owner_row = None
            if project.owner_id:
                owner_row = await self._fetch_one(conn, USER_BY_ID_SQL, (project.owner_id,))

        return ProjectSnapshot(
            project=project,
            tasks=[row_to_task(row) for row in task_rows],
            sprints=[row_to_sprint(row) for row in sprint_rows],
            owner=row_to_user(owner_row) if owner_row else None,
        )
