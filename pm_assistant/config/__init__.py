"""Configuration module for the PM assistant."""
from pm_assistant.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
