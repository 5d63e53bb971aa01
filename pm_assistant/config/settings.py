"""
Application Settings - Pydantic-based configuration management.

Loads settings from environment variables with validation and type coercion.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # LLM Providers
    # -------------------------------------------------------------------------
    openai_api_key: str = Field(default="", description="OpenAI API key")
    openai_base_url: str = Field(default="", description="Override OpenAI-compatible endpoint")
    github_token: str = Field(
        default="",
        description="GitHub token for GitHub Models (used when no OpenAI key is set)",
    )
    anthropic_api_key: str = Field(default="", description="Anthropic API key")
    default_llm_model: str = Field(default="gpt-4o", description="Default LLM model")

    chat_temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Assistant sampling temperature")
    chat_max_tokens: int = Field(default=2000, ge=1, description="Max tokens per assistant reply")
    context_window_size: int = Field(default=8000, ge=1, description="Nominal model context window")
    completion_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        description="Upper bound on a single completion call",
    )

    # -------------------------------------------------------------------------
    # Conversation Sessions
    # -------------------------------------------------------------------------
    session_expiry_hours: float = Field(default=24, gt=0, description="Idle time before a session expires")
    session_sweep_interval_minutes: float = Field(
        default=60,
        gt=0,
        description="How often expired sessions are swept",
    )
    max_history_turns: int = Field(default=50, ge=1, description="Turns kept per session")
    pending_action_ttl_minutes: float = Field(default=60, gt=0, description="Lifetime of a pending action")
    prompt_history_messages: int = Field(
        default=10,
        ge=0,
        description="Caller-supplied history messages forwarded to the model",
    )
    prompt_recent_turns: int = Field(
        default=3,
        ge=0,
        description="Stored turns summarized into the system prompt",
    )
    max_message_length: int = Field(default=2000, ge=1, description="Max characters per chat message")

    # -------------------------------------------------------------------------
    # Workspace Data
    # -------------------------------------------------------------------------
    data_backend: Literal["memory", "postgres"] = Field(
        default="memory",
        description="Where user/project context is read from",
    )
    database_url: str = Field(
        default="postgresql://pm:pm@localhost:5432/pm",
        description="PostgreSQL connection URL",
    )
    db_pool_min_size: int = Field(default=1, ge=0, description="Connections kept open in the pool")
    db_pool_max_size: int = Field(default=5, ge=1, description="Upper bound on pooled connections")
    db_pool_timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        description="Wait for a free pooled connection before failing",
    )
    db_read_only: bool = Field(
        default=True,
        description="Open pooled connections as read-only autocommit sessions",
    )
    seed_data_path: str = Field(
        default="",
        description="JSON file of users/workspaces/projects/tasks/sprints for the memory backend",
    )

    # -------------------------------------------------------------------------
    # Server
    # -------------------------------------------------------------------------
    environment: str = Field(default="development", description="Environment (development/production)")
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, ge=1, le=65535, description="Server port")
    debug: bool = Field(default=False, description="Debug mode")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Singleton Settings instance.
    """
    return Settings()
