"""HTTP surface for the assistant."""

from pm_assistant.api.routes import router

__all__ = ["router"]
