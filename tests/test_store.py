"""Tests for ConversationStateStore."""
import asyncio
from datetime import timedelta

import pytest

from pm_assistant.conversation import (
    ActionType,
    ConversationIntent,
    ConversationStateStore,
    NewPendingAction,
    NewTurn,
    ScopeContext,
    SessionPatch,
    UserPreferences,
)


def _turn(n: int) -> NewTurn:
    return NewTurn(user_message=f"message {n}", ai_response=f"response {n}")


class TestCreateAndGet:
    """Tests for session creation and lookup."""

    def test_get_missing_returns_none(self, store):
        """Unknown users have no session."""
        assert store.get("nobody") is None

    def test_create_initializes_fields(self, store, clock):
        """A new session starts empty and stamped with the current time."""
        state = store.create("u1")

        assert state.session_id.startswith("session_")
        assert state.user_id == "u1"
        assert state.current_context == ScopeContext()
        assert state.active_intent is None
        assert state.pending_actions == []
        assert state.conversation_history == []
        assert state.user_preferences == UserPreferences()
        assert state.last_interaction == clock.now
        assert state.context_updated_at == clock.now

    def test_create_with_initial_context_and_preferences(self, store):
        """Initial scope and preferences are stored as given."""
        prefs = UserPreferences(preferred_response_style="concise")
        state = store.create("u1", initial_context={"workspace_id": "w1"}, preferences=prefs)

        assert state.current_context.workspace_id == "w1"
        assert state.user_preferences.preferred_response_style == "concise"

    def test_get_returns_created_state(self, store):
        """get() returns the stored session."""
        created = store.create("u1")
        assert store.get("u1") == created

    def test_create_replaces_existing(self, store):
        """Creating again discards the previous session."""
        first = store.create("u1")
        store.add_turn("u1", _turn(1))
        second = store.create("u1")

        assert second.session_id != first.session_id
        assert store.get("u1").conversation_history == []
        assert store.state_count() == 1

    def test_session_ids_unique(self, store):
        """Each session gets its own id."""
        ids = {store.create(f"u{i}").session_id for i in range(20)}
        assert len(ids) == 20


class TestExpiry:
    """Tests for inactivity expiry."""

    def test_live_at_exact_threshold(self, store, clock):
        """A session is still live exactly at the expiry boundary."""
        store.create("u1")
        clock.advance(hours=24)
        assert store.get("u1") is not None

    def test_expired_on_access_is_deleted(self, store, clock):
        """Access after expiry returns None and removes the entry."""
        store.create("u1")
        clock.advance(hours=24, seconds=1)

        assert store.get("u1") is None
        assert store.state_count() == 0

    def test_activity_extends_lifetime(self, store, clock):
        """Mutations refresh last_interaction."""
        store.create("u1")
        clock.advance(hours=20)
        store.add_turn("u1", _turn(1))
        clock.advance(hours=20)

        assert store.get("u1") is not None

    def test_mutators_fail_on_expired(self, store, clock):
        """Mutating an expired session fails like a missing one."""
        store.create("u1")
        clock.advance(hours=25)

        assert store.add_turn("u1", _turn(1)) is False
        assert store.update_context("u1", {"project_id": "p1"}) is False
        assert store.set_active_intent("u1", ConversationIntent.BUG_REPORTING) is False

    def test_cleanup_expired_counts(self, store, clock):
        """cleanup_expired removes only idle sessions and returns the count."""
        store.create("old1")
        store.create("old2")
        clock.advance(hours=23)
        store.create("fresh")
        clock.advance(hours=2)

        assert store.cleanup_expired() == 2
        assert store.user_ids() == ["fresh"]

    def test_cleanup_with_nothing_expired(self, store):
        """Nothing to sweep returns zero."""
        store.create("u1")
        assert store.cleanup_expired() == 0


class TestUpdate:
    """Tests for patch-based updates."""

    def test_update_missing_returns_none(self, store):
        """update never creates a session."""
        assert store.update("u1", SessionPatch(active_intent=ConversationIntent.TASK_UPDATE)) is None
        assert store.get("u1") is None

    def test_update_merges_context(self, store, clock):
        """current_context is merged and context_updated_at refreshed."""
        store.create("u1", initial_context={"workspace_id": "w1"})
        clock.advance(minutes=5)

        updated = store.update("u1", SessionPatch(current_context=ScopeContext(project_id="p1")))

        assert updated.current_context.workspace_id == "w1"
        assert updated.current_context.project_id == "p1"
        assert updated.context_updated_at == clock.now
        assert updated.last_interaction == clock.now

    def test_update_replaces_preferences(self, store):
        """Non-context fields replace wholesale."""
        store.create("u1")
        updated = store.update("u1", SessionPatch(user_preferences=UserPreferences(timezone="CET")))

        assert updated.user_preferences.timezone == "CET"
        assert updated.user_preferences.preferred_response_style == "detailed"

    def test_update_can_clear_intent(self, store):
        """Explicit None clears the active intent."""
        store.create("u1")
        store.set_active_intent("u1", ConversationIntent.STATUS_INQUIRY)

        updated = store.update("u1", SessionPatch(active_intent=None))

        assert updated.active_intent is None

    def test_empty_patch_only_touches_activity(self, store, clock):
        """An empty patch changes nothing but last_interaction."""
        original = store.create("u1", initial_context={"project_id": "p1"})
        store.set_active_intent("u1", ConversationIntent.TASK_CREATION)
        clock.advance(minutes=1)

        updated = store.update("u1", SessionPatch())

        assert updated.active_intent == ConversationIntent.TASK_CREATION
        assert updated.current_context == original.current_context
        assert updated.context_updated_at == original.context_updated_at
        assert updated.last_interaction == clock.now


class TestClear:
    """Tests for clearing sessions."""

    def test_clear_existing(self, store):
        """clear removes the session."""
        store.create("u1")
        assert store.clear("u1") is True
        assert store.get("u1") is None

    def test_clear_missing(self, store):
        """clear on an unknown user reports False."""
        assert store.clear("u1") is False


class TestTurns:
    """Tests for conversation history."""

    def test_add_turn_assigns_id_and_timestamp(self, store, clock):
        """Stored turns get an id and the current time."""
        store.create("u1")
        clock.advance(seconds=30)

        assert store.add_turn("u1", _turn(1)) is True

        turn = store.get("u1").conversation_history[0]
        assert turn.id.startswith("turn_")
        assert turn.timestamp == clock.now
        assert turn.user_message == "message 1"

    def test_add_turn_missing_session(self, store):
        """Turns are not recorded without a session."""
        assert store.add_turn("u1", _turn(1)) is False

    def test_history_capped(self, clock):
        """Only the most recent max_history turns are kept, oldest first."""
        store = ConversationStateStore(clock=clock, max_history=50)
        store.create("u1")
        for i in range(51):
            store.add_turn("u1", _turn(i))

        history = store.get("u1").conversation_history
        assert len(history) == 50
        assert history[0].user_message == "message 1"
        assert history[-1].user_message == "message 50"

    def test_zero_history_keeps_no_turns(self, clock):
        """An explicit max_history of 0 is honored, not replaced by the default."""
        store = ConversationStateStore(clock=clock, max_history=0)
        store.create("u1")

        assert store.add_turn("u1", _turn(1)) is True

        state = store.get("u1")
        assert store.max_history == 0
        assert state.conversation_history == []
        assert state.last_interaction == clock.now

    def test_negative_history_rejected(self, clock):
        with pytest.raises(ValueError):
            ConversationStateStore(clock=clock, max_history=-1)

    def test_zero_expiry_honored(self, clock):
        """A zero expiry drops a session as soon as time moves on."""
        store = ConversationStateStore(clock=clock, expiry=timedelta(0))
        store.create("u1")

        assert store.expiry == timedelta(0)
        assert store.get("u1") is not None
        clock.advance(seconds=1)
        assert store.get("u1") is None

    def test_earlier_history_snapshot_unchanged(self, store):
        """A history list obtained earlier is not mutated by later appends."""
        store.create("u1")
        store.add_turn("u1", _turn(1))
        snapshot = store.get("u1").conversation_history

        store.add_turn("u1", _turn(2))

        assert len(snapshot) == 1
        assert len(store.get("u1").conversation_history) == 2


class TestPendingActions:
    """Tests for pending action bookkeeping."""

    def test_add_pending_action_sets_expiry(self, store, clock):
        """Actions expire one TTL after creation."""
        store.create("u1")
        store.add_pending_action("u1", NewPendingAction(
            type=ActionType.CREATE_TASK,
            extracted_data={"title": "Fix login"},
            missing_fields=["assignee"],
            confidence_score=0.8,
        ))

        action = store.get("u1").pending_actions[0]
        assert action.id.startswith("action_")
        assert action.created_at == clock.now
        assert action.expires_at == clock.now + timedelta(minutes=60)
        assert action.user_confirmation_required is True

    def test_remove_pending_action(self, store):
        """Actions are removed by id."""
        store.create("u1")
        store.add_pending_action("u1", NewPendingAction(type=ActionType.CREATE_BUG))
        action_id = store.get("u1").pending_actions[0].id

        assert store.remove_pending_action("u1", action_id) is True
        assert store.get("u1").pending_actions == []

    def test_remove_unknown_action(self, store):
        """Removing an unknown id reports False."""
        store.create("u1")
        assert store.remove_pending_action("u1", "action_missing") is False

    def test_add_pending_action_missing_session(self, store):
        """No session, no action."""
        assert store.add_pending_action("u1", NewPendingAction(type=ActionType.MOVE_TASK)) is False


class TestContextAndIntent:
    """Tests for scope merges and intent tracking."""

    def test_update_context_merges(self, store):
        """Only supplied scope fields change."""
        store.create("u1", initial_context={"workspace_id": "w1", "project_id": "p1"})

        store.update_context("u1", {"project_id": "p2", "task_id": "t9"})

        ctx = store.get("u1").current_context
        assert ctx == ScopeContext(workspace_id="w1", project_id="p2", task_id="t9")

    def test_update_context_accepts_camel_case(self, store):
        """UI-style keys are accepted."""
        store.create("u1")
        store.update_context("u1", {"sprintId": "s1"})
        assert store.get("u1").current_context.sprint_id == "s1"

    def test_set_active_intent(self, store):
        """The latest classified intent is stored."""
        store.create("u1")
        store.set_active_intent("u1", ConversationIntent.SPRINT_MANAGEMENT)
        assert store.get("u1").active_intent == ConversationIntent.SPRINT_MANAGEMENT


class TestSweep:
    """Tests for the background expiry sweep."""

    @pytest.mark.asyncio
    async def test_sweep_removes_expired(self, clock):
        """The periodic sweep drops idle sessions without any access."""
        store = ConversationStateStore(
            clock=clock,
            expiry=timedelta(hours=24),
            sweep_interval=timedelta(milliseconds=10),
        )
        store.create("u1")
        clock.advance(hours=25)

        store.start()
        try:
            await asyncio.sleep(0.1)
            assert store.state_count() == 0
        finally:
            await store.stop()

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, store):
        """Starting twice keeps a single sweep running."""
        store.start()
        store.start()
        assert store.is_sweeping
        await store.stop()
        assert not store.is_sweeping

    @pytest.mark.asyncio
    async def test_stop_without_start(self, store):
        """stop is safe when the sweep never started."""
        await store.stop()
        assert not store.is_sweeping


class TestIntrospection:
    """Tests for store stats."""

    def test_state_count_and_user_ids(self, store):
        """Counts and ids reflect stored sessions."""
        store.create("u1")
        store.create("u2")

        assert store.state_count() == 2
        assert sorted(store.user_ids()) == ["u1", "u2"]
