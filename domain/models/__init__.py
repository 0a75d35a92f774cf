"""
Domain models for the session relay.

These models are independent of the channel transport and of the registry
storage:
- SessionSummary: metadata snapshot of a relayed session
- ConnectionState / ConnectionRole: what a channel connection is on the relay
"""

from domain.models.connection import ConnectionRole, ConnectionState
from domain.models.session import (
    MAX_SESSION_ID_LENGTH,
    SESSION_ID_PREFIX,
    SessionSummary,
    utc_now,
)

__all__ = [
    "ConnectionRole",
    "ConnectionState",
    "MAX_SESSION_ID_LENGTH",
    "SESSION_ID_PREFIX",
    "SessionSummary",
    "utc_now",
]
