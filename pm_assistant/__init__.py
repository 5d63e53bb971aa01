"""PM Assistant - role-aware conversation session engine for project management."""

__version__ = "2.0.0"
