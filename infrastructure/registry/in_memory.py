"""
In-memory Session Registry.

Process-wide session state with an explicit retention policy. All access
happens on the event loop thread, so there is no locking.
"""
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Deque, Dict, List, Optional

from domain.models import SessionSummary, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetentionPolicy:
    """
    Bounds on what the registry keeps for history.

    Attributes:
        max_events_per_session: Ring buffer size per session log; None keeps
            every event
        inactive_ttl_seconds: Drop sessions that have been inactive longer
            than this; None keeps them for the process lifetime
    """

    max_events_per_session: Optional[int] = None
    inactive_ttl_seconds: Optional[float] = None

    def __post_init__(self) -> None:
        if self.max_events_per_session is not None and self.max_events_per_session < 1:
            raise ValueError(
                f"max_events_per_session must be >= 1, got {self.max_events_per_session}"
            )
        if self.inactive_ttl_seconds is not None and self.inactive_ttl_seconds < 0:
            raise ValueError(
                f"inactive_ttl_seconds must be >= 0, got {self.inactive_ttl_seconds}"
            )


@dataclass
class _SessionRecord:
    session_id: str
    events: Deque[Any]
    created_at: datetime
    last_activity_at: datetime
    active: bool = True
    ended_at: Optional[datetime] = None
    total_events: int = 0

    def summary(self) -> SessionSummary:
        return SessionSummary(
            session_id=self.session_id,
            active=self.active,
            created_at=self.created_at,
            last_activity_at=self.last_activity_at,
            ended_at=self.ended_at,
            retained_events=len(self.events),
            total_events=self.total_events,
        )


class InMemorySessionRegistry:
    """
    In-memory implementation of SessionRegistry.

    Usage:
        registry = InMemorySessionRegistry(RetentionPolicy(max_events_per_session=5000))
        registry.mark_active("session_abc12345")
        registry.record_event("session_abc12345", {"type": 2, "data": {...}})
        registry.get_log("session_abc12345")
    """

    def __init__(
        self,
        policy: Optional[RetentionPolicy] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Args:
            policy: Retention policy, defaults to keeping everything
            clock: Source of "now", injectable for tests
        """
        self.policy = policy or RetentionPolicy()
        self._clock = clock
        # Insertion order of the dict is session creation order.
        self._sessions: Dict[str, _SessionRecord] = {}

    # =========================================================================
    # SessionRegistry Protocol Methods
    # =========================================================================

    def record_event(self, session_id: str, event: Any) -> None:
        record = self._get_or_create(session_id)
        record.events.append(event)
        record.total_events += 1
        record.last_activity_at = self._clock()

    def mark_active(self, session_id: str) -> None:
        record = self._get_or_create(session_id)
        if not record.active:
            logger.info("Session %s active again", session_id)
        record.active = True
        record.ended_at = None
        record.last_activity_at = self._clock()

    def mark_inactive(self, session_id: str) -> None:
        record = self._sessions.get(session_id)
        if record is None or not record.active:
            return
        record.active = False
        record.ended_at = self._clock()
        logger.info(
            "Session %s inactive after %d events", session_id, record.total_events
        )
        self._sweep()

    def list_active(self) -> List[str]:
        self._sweep()
        return [sid for sid, record in self._sessions.items() if record.active]

    def get_log(self, session_id: str) -> List[Any]:
        record = self._sessions.get(session_id)
        if record is None:
            return []
        return list(record.events)

    def get_session(self, session_id: str) -> Optional[SessionSummary]:
        record = self._sessions.get(session_id)
        return record.summary() if record else None

    def list_sessions(self) -> List[SessionSummary]:
        self._sweep()
        return [record.summary() for record in self._sessions.values()]

    # =========================================================================
    # Internals
    # =========================================================================

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def _get_or_create(self, session_id: str) -> _SessionRecord:
        record = self._sessions.get(session_id)
        if record is None:
            now = self._clock()
            record = _SessionRecord(
                session_id=session_id,
                events=deque(maxlen=self.policy.max_events_per_session),
                created_at=now,
                last_activity_at=now,
            )
            self._sessions[session_id] = record
            logger.info("Session %s created", session_id)
            self._sweep()
        return record

    def _sweep(self) -> None:
        """Evict sessions that have been inactive longer than the TTL."""
        ttl = self.policy.inactive_ttl_seconds
        if ttl is None:
            return
        cutoff = self._clock() - timedelta(seconds=ttl)
        expired = [
            sid
            for sid, record in self._sessions.items()
            if not record.active and record.ended_at is not None and record.ended_at <= cutoff
        ]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info("Evicted %d expired sessions", len(expired))
