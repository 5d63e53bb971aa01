"""In-memory conversation state store.

One session per user id, held in process memory only. Sessions expire after a
period of inactivity: lazily on access, and proactively by a background sweep.

Every public operation is synchronous, so under asyncio each one completes
within a single turn of the event loop. Mutations are copy-on-write for list
fields; a caller holding an earlier history list never sees it change.
"""
import asyncio
import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable, Mapping, Optional, Union

from pm_assistant.config import get_settings
from pm_assistant.conversation.models import (
    ConversationIntent,
    ConversationState,
    ConversationTurn,
    NewPendingAction,
    NewTurn,
    PendingAction,
    ScopeContext,
    SessionPatch,
    UserPreferences,
    utcnow,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
ContextInput = Union[ScopeContext, Mapping[str, Optional[str]]]


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:16]}"


def _as_scope(context: Optional[ContextInput]) -> ScopeContext:
    if context is None:
        return ScopeContext()
    if isinstance(context, ScopeContext):
        return context
    return ScopeContext.model_validate(dict(context))


class ConversationStateStore:
    """Keyed store of live conversation sessions.

    Usage:
        store = ConversationStateStore()
        store.start()  # inside a running event loop
        state = store.get(user_id) or store.create(user_id)
        store.add_turn(user_id, NewTurn(user_message="hi", ai_response="hello"))
        await store.stop()
    """

    def __init__(
        self,
        clock: Clock = utcnow,
        expiry: Optional[timedelta] = None,
        max_history: Optional[int] = None,
        action_ttl: Optional[timedelta] = None,
        sweep_interval: Optional[timedelta] = None,
    ) -> None:
        """Initialize an empty store.

        Args:
            clock: Returns the current timezone-aware time. Injected for tests.
            expiry: Idle time after which a session is dropped.
            max_history: Number of most recent turns kept per session.
            action_ttl: Lifetime of a pending action from creation.
            sweep_interval: Period of the background expiry sweep.

        Unset values fall back to application settings.
        """
        settings = get_settings()
        self._clock = clock
        self.expiry = expiry if expiry is not None else timedelta(hours=settings.session_expiry_hours)
        self.max_history = max_history if max_history is not None else settings.max_history_turns
        self.action_ttl = (
            action_ttl if action_ttl is not None
            else timedelta(minutes=settings.pending_action_ttl_minutes)
        )
        self.sweep_interval = (
            sweep_interval if sweep_interval is not None
            else timedelta(minutes=settings.session_sweep_interval_minutes)
        )
        if self.max_history < 0:
            raise ValueError(f"max_history must be >= 0, got {self.max_history}")

        self._states: dict[str, ConversationState] = {}
        self._sweep_task: Optional[asyncio.Task] = None

    # -------------------------------------------------------------------------
    # Core accessors
    # -------------------------------------------------------------------------

    def get(self, user_id: str) -> Optional[ConversationState]:
        """Get the live session for a user.

        Returns:
            The session, or None if absent or expired. An expired session is
            deleted before returning.
        """
        state = self._states.get(user_id)
        if state is None:
            return None

        if not state.is_live(self._clock(), self.expiry):
            del self._states[user_id]
            logger.info(f"Expired conversation state on access for user: {user_id}")
            return None

        return state

    def create(
        self,
        user_id: str,
        initial_context: Optional[ContextInput] = None,
        preferences: Optional[UserPreferences] = None,
    ) -> ConversationState:
        """Create a fresh session, replacing any existing one for the user."""
        now = self._clock()
        state = ConversationState(
            session_id=_new_id("session"),
            user_id=user_id,
            current_context=_as_scope(initial_context),
            user_preferences=preferences or UserPreferences(),
            last_interaction=now,
            context_updated_at=now,
        )
        replaced = user_id in self._states
        self._states[user_id] = state

        logger.info(
            "Created conversation state",
            extra={"user_id": user_id, "session_id": state.session_id, "replaced": replaced},
        )
        return state

    def update(self, user_id: str, patch: SessionPatch) -> Optional[ConversationState]:
        """Apply a patch to a live session.

        Returns:
            Updated session, or None if no live session exists. Never creates.
        """
        state = self.get(user_id)
        if state is None:
            return None

        updated = patch.apply(state, self._clock())
        self._states[user_id] = updated
        return updated

    def clear(self, user_id: str) -> bool:
        """Delete a user's session.

        Returns:
            True if a session was removed.
        """
        removed = self._states.pop(user_id, None) is not None
        if removed:
            logger.info(f"Cleared conversation state for user: {user_id}")
        return removed

    # -------------------------------------------------------------------------
    # Mutators
    # -------------------------------------------------------------------------

    def add_turn(self, user_id: str, turn: NewTurn) -> bool:
        """Append a turn, keeping only the most recent ``max_history`` turns."""
        state = self.get(user_id)
        if state is None:
            return False

        now = self._clock()
        full_turn = ConversationTurn(
            id=_new_id("turn"),
            timestamp=now,
            **turn.model_dump(),
        )
        history = [*state.conversation_history, full_turn][-self.max_history:] if self.max_history else []
        self._states[user_id] = state.model_copy(
            update={"conversation_history": history, "last_interaction": now}
        )
        return True

    def add_pending_action(self, user_id: str, action: NewPendingAction) -> bool:
        """Append a pending action that expires ``action_ttl`` after now."""
        state = self.get(user_id)
        if state is None:
            return False

        now = self._clock()
        full_action = PendingAction(
            id=_new_id("action"),
            created_at=now,
            expires_at=now + self.action_ttl,
            **action.model_dump(),
        )
        self._states[user_id] = state.model_copy(
            update={
                "pending_actions": [*state.pending_actions, full_action],
                "last_interaction": now,
            }
        )
        return True

    def remove_pending_action(self, user_id: str, action_id: str) -> bool:
        """Remove a pending action by id.

        Returns:
            False if there is no live session or no action with that id.
        """
        state = self.get(user_id)
        if state is None:
            return False

        remaining = [a for a in state.pending_actions if a.id != action_id]
        if len(remaining) == len(state.pending_actions):
            return False

        self._states[user_id] = state.model_copy(
            update={"pending_actions": remaining, "last_interaction": self._clock()}
        )
        return True

    def update_context(self, user_id: str, context: ContextInput) -> bool:
        """Merge scope fields into the session's current context."""
        state = self.get(user_id)
        if state is None:
            return False

        now = self._clock()
        self._states[user_id] = state.model_copy(
            update={
                "current_context": state.current_context.merged(_as_scope(context)),
                "context_updated_at": now,
                "last_interaction": now,
            }
        )
        return True

    def set_active_intent(self, user_id: str, intent: Optional[ConversationIntent]) -> bool:
        """Record the most recently classified intent (or clear it)."""
        state = self.get(user_id)
        if state is None:
            return False

        self._states[user_id] = state.model_copy(
            update={"active_intent": intent, "last_interaction": self._clock()}
        )
        return True

    # -------------------------------------------------------------------------
    # Expiry sweep
    # -------------------------------------------------------------------------

    def cleanup_expired(self) -> int:
        """Remove every session past the idle threshold.

        Returns:
            Number of sessions removed.
        """
        now = self._clock()
        expired = [
            user_id
            for user_id, state in list(self._states.items())
            if not state.is_live(now, self.expiry)
        ]
        for user_id in expired:
            del self._states[user_id]
            logger.debug(f"Cleaned up expired conversation state for user: {user_id}")

        if expired:
            logger.info(f"Cleaned up {len(expired)} expired conversation states")
        return len(expired)

    async def _sweep_loop(self) -> None:
        interval = self.sweep_interval.total_seconds()
        while True:
            await asyncio.sleep(interval)
            try:
                self.cleanup_expired()
            except Exception as e:
                logger.error(f"Conversation state sweep failed: {e}")

    def start(self) -> None:
        """Start the background sweep. Must be called with a running loop."""
        if self._sweep_task is not None and not self._sweep_task.done():
            return
        self._sweep_task = asyncio.get_running_loop().create_task(self._sweep_loop())
        logger.info(
            "Conversation state sweep started",
            extra={"interval_seconds": self.sweep_interval.total_seconds()},
        )

    async def stop(self) -> None:
        """Cancel the background sweep. Safe to call when not started."""
        task, self._sweep_task = self._sweep_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Conversation state sweep stopped")

    @property
    def is_sweeping(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    def state_count(self) -> int:
        """Number of stored sessions (expired ones not yet swept included)."""
        return len(self._states)

    def user_ids(self) -> list[str]:
        return list(self._states.keys())
