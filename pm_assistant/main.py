"""
PM Assistant - role-aware project management chat service.

Main entry point for the FastAPI application.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI

from pm_assistant.api import router
from pm_assistant.chat import ChatOrchestrator
from pm_assistant.config.settings import get_settings
from pm_assistant.context import RoleAwareContextBuilder
from pm_assistant.conversation import ConversationStateStore
from pm_assistant.providers import HeaderIdentityProvider, IdentityProvider, InMemoryWorkspaceData

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

VERSION = "2.0.0"


async def _build_orchestrator(identity: IdentityProvider) -> ChatOrchestrator:
    """Wire the default collaborators for the configured data backend."""
    settings = get_settings()

    if settings.data_backend == "postgres":
        from pm_assistant.db import init_db
        from pm_assistant.providers.postgres import PostgresWorkspaceData

        await init_db(settings)
        logger.info(
            "database_pool_initialized",
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            read_only=settings.db_read_only,
        )
        data = PostgresWorkspaceData()
    elif settings.seed_data_path:
        data = InMemoryWorkspaceData.from_seed_file(settings.seed_data_path)
        logger.info("workspace_seed_loaded", path=settings.seed_data_path)
    else:
        logger.warning("workspace_data_empty", data_backend=settings.data_backend)
        data = InMemoryWorkspaceData()

    from pm_assistant.llm.completion import LLMCompletionProvider

    return ChatOrchestrator(
        store=ConversationStateStore(),
        identity=identity,
        directory=data,
        context_builder=RoleAwareContextBuilder(data),
        completion=LLMCompletionProvider(),
        settings=settings,
    )


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    """
    FastAPI lifespan context manager.

    Wires the orchestrator (unless one was injected) and runs the session
    sweep for the lifetime of the app.
    """
    settings = get_settings()
    logger.info(
        "pm_assistant_starting",
        version=VERSION,
        environment=settings.environment,
        data_backend=settings.data_backend,
    )

    if getattr(fastapi_app.state, "orchestrator", None) is None:
        fastapi_app.state.orchestrator = await _build_orchestrator(fastapi_app.state.identity)

    store = fastapi_app.state.orchestrator.store
    store.start()
    logger.info("pm_assistant_started")

    try:
        yield
    finally:
        logger.info("application_shutting_down")
        await store.stop()

        if settings.data_backend == "postgres":
            from pm_assistant.db import close_db, is_initialized

            if is_initialized():
                await close_db()


def create_app(
    orchestrator: Optional[ChatOrchestrator] = None,
    identity: Optional[IdentityProvider] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        orchestrator: Pre-wired orchestrator; built from settings at startup if omitted.
        identity: Identity provider used by the routes. Defaults to the header provider.

    Returns:
        Configured FastAPI app instance.
    """
    fastapi_app = FastAPI(
        title="PM Assistant",
        description="Role-aware conversational assistant for project management",
        version=VERSION,
        lifespan=lifespan,
    )
    fastapi_app.state.identity = identity or HeaderIdentityProvider()
    fastapi_app.state.orchestrator = orchestrator
    fastapi_app.include_router(router)
    return fastapi_app


app = create_app()
