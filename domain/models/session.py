"""
Session summary model.

A session is one browsing context's tracked lifetime. The registry owns the
authoritative event log; this model is the read-only snapshot handed out to
callers that need metadata without touching the log itself.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

# Producer-generated identifiers look like ``session_k3j9x0a2b``.
SESSION_ID_PREFIX = "session_"
MAX_SESSION_ID_LENGTH = 256


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionSummary(BaseModel):
    """
    Point-in-time view of one session in the registry.

    Examples:
        >>> summary = SessionSummary(session_id="session_abc12345")
        >>> summary.active
        True
        >>> summary.retained_events
        0
    """

    session_id: str = Field(
        ...,
        min_length=1,
        max_length=MAX_SESSION_ID_LENGTH,
        description="Opaque producer-generated identifier",
    )
    active: bool = Field(
        default=True,
        description="True while at least one producer connection is in the session group",
    )
    created_at: datetime = Field(default_factory=utc_now)
    last_activity_at: datetime = Field(default_factory=utc_now)
    ended_at: Optional[datetime] = Field(
        default=None,
        description="When the session last went inactive",
    )
    retained_events: int = Field(
        default=0,
        ge=0,
        description="Events currently held in the log",
    )
    total_events: int = Field(
        default=0,
        ge=0,
        description="Events ever appended, including ones evicted by retention",
    )

    @property
    def evicted_events(self) -> int:
        return self.total_events - self.retained_events
