"""Database package for read access to the application's PostgreSQL tables."""

from pm_assistant.db.connection import close_db, get_connection, init_db, is_initialized

__all__ = ["init_db", "close_db", "get_connection", "is_initialized"]
