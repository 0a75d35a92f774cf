"""
Unit tests for InMemorySessionRegistry.

Tests for:
- Implicit creation on record_event / mark_active
- Activity toggles and list_active ordering
- Log copies and ring-buffer retention
- Inactive-session TTL eviction
"""

from datetime import datetime, timedelta, timezone

import pytest

pytestmark = pytest.mark.unit

from infrastructure.registry import InMemorySessionRegistry, RetentionPolicy


class ManualClock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def registry(clock) -> InMemorySessionRegistry:
    """Registry that keeps everything."""
    return InMemorySessionRegistry(clock=clock)


# =============================================================================
# Tests
# =============================================================================


class TestRecordEvent:
    """Tests for record_event()."""

    def test_unknown_session_is_created_active(self, registry):
        registry.record_event("session_a", {"type": 2})

        assert "session_a" in registry
        assert registry.list_active() == ["session_a"]
        assert registry.get_log("session_a") == [{"type": 2}]

    def test_events_kept_in_arrival_order(self, registry):
        for i in range(5):
            registry.record_event("session_a", {"n": i})

        assert [e["n"] for e in registry.get_log("session_a")] == [0, 1, 2, 3, 4]

    def test_does_not_reactivate_inactive_session(self, registry):
        registry.mark_active("session_a")
        registry.mark_inactive("session_a")

        registry.record_event("session_a", {"late": True})

        assert registry.list_active() == []
        assert registry.get_log("session_a") == [{"late": True}]

    def test_updates_last_activity(self, registry, clock):
        registry.record_event("session_a", 1)
        clock.advance(10)
        registry.record_event("session_a", 2)

        summary = registry.get_session("session_a")
        assert summary.last_activity_at - summary.created_at == timedelta(seconds=10)


class TestActivity:
    """Tests for mark_active() / mark_inactive() / list_active()."""

    def test_mark_active_creates_session(self, registry):
        registry.mark_active("session_a")

        assert registry.get_log("session_a") == []
        assert registry.list_active() == ["session_a"]

    def test_mark_active_is_idempotent(self, registry):
        registry.mark_active("session_a")
        registry.mark_active("session_a")

        assert registry.list_active() == ["session_a"]
        assert len(registry) == 1

    def test_mark_inactive_unknown_is_noop(self, registry):
        registry.mark_inactive("session_missing")

        assert "session_missing" not in registry
        assert registry.list_active() == []

    def test_mark_inactive_keeps_log(self, registry):
        registry.record_event("session_a", "e1")
        registry.mark_inactive("session_a")

        assert registry.list_active() == []
        assert registry.get_log("session_a") == ["e1"]
        assert registry.get_session("session_a").ended_at is not None

    def test_reactivation_clears_end(self, registry):
        registry.mark_active("session_a")
        registry.mark_inactive("session_a")
        registry.mark_active("session_a")

        summary = registry.get_session("session_a")
        assert summary.active is True
        assert summary.ended_at is None

    def test_list_active_in_creation_order(self, registry):
        for sid in ("session_c", "session_a", "session_b"):
            registry.mark_active(sid)
        registry.mark_inactive("session_a")

        assert registry.list_active() == ["session_c", "session_b"]

    def test_list_active_is_a_snapshot(self, registry):
        registry.mark_active("session_a")
        snapshot = registry.list_active()
        registry.mark_active("session_b")

        assert snapshot == ["session_a"]


class TestGetLog:
    """Tests for get_log()."""

    def test_unknown_session_returns_empty(self, registry):
        assert registry.get_log("session_missing") == []
        assert "session_missing" not in registry

    def test_returns_copy(self, registry):
        registry.record_event("session_a", "e1")
        log = registry.get_log("session_a")
        log.append("mutated")

        assert registry.get_log("session_a") == ["e1"]


class TestSessionSummaries:
    """Tests for get_session() / list_sessions()."""

    def test_get_session_unknown_is_none(self, registry):
        assert registry.get_session("session_missing") is None

    def test_list_sessions_includes_inactive(self, registry):
        registry.mark_active("session_a")
        registry.mark_active("session_b")
        registry.mark_inactive("session_b")

        summaries = {s.session_id: s for s in registry.list_sessions()}
        assert summaries["session_a"].active is True
        assert summaries["session_b"].active is False


class TestRetention:
    """Tests for RetentionPolicy handling."""

    def test_ring_buffer_evicts_oldest(self, clock):
        registry = InMemorySessionRegistry(RetentionPolicy(max_events_per_session=3), clock=clock)
        for i in range(5):
            registry.record_event("session_a", i)

        assert registry.get_log("session_a") == [2, 3, 4]
        summary = registry.get_session("session_a")
        assert summary.total_events == 5
        assert summary.retained_events == 3
        assert summary.evicted_events == 2

    def test_inactive_sessions_evicted_after_ttl(self, clock):
        registry = InMemorySessionRegistry(RetentionPolicy(inactive_ttl_seconds=60), clock=clock)
        registry.record_event("session_old", "e")
        registry.mark_inactive("session_old")

        clock.advance(30)
        assert "session_old" in [s.session_id for s in registry.list_sessions()]

        clock.advance(31)
        assert registry.list_sessions() == []
        assert registry.get_log("session_old") == []

    def test_active_sessions_never_evicted(self, clock):
        registry = InMemorySessionRegistry(RetentionPolicy(inactive_ttl_seconds=1), clock=clock)
        registry.mark_active("session_live")

        clock.advance(3600)

        assert registry.list_active() == ["session_live"]

    @pytest.mark.parametrize(
        "kwargs",
        [{"max_events_per_session": 0}, {"inactive_ttl_seconds": -1}],
    )
    def test_invalid_policy_rejected(self, kwargs):
        with pytest.raises(ValueError):
            RetentionPolicy(**kwargs)
