"""
Domain layer for the session relay.

Pure models, independent of the WebSocket channel, the registry storage and
the reconstruction renderer.
"""

from domain.models import (
    ConnectionRole,
    ConnectionState,
    SessionSummary,
)

__all__ = [
    "ConnectionRole",
    "ConnectionState",
    "SessionSummary",
]
