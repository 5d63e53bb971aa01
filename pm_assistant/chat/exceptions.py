"""Chat engine exceptions.

All of these are raised inside ChatOrchestrator.handle_chat and converted to
the fallback response at its boundary; none reach the HTTP layer from there.
"""


class ChatError(Exception):
    """Base class for chat request failures."""


class AuthenticationError(ChatError):
    """No identity could be resolved for the request."""


class UserNotFoundError(ChatError):
    """The identity resolved but has no internal user record."""


class ContextUnavailableError(ChatError):
    """User context could not be built; no response can be produced."""


class CompletionError(ChatError):
    """The completion provider failed or timed out."""
