"""
Application Use Cases for the session relay.

This package contains the application-level use cases that orchestrate the
session registry and the channel hub. Use cases are the entry points for
relay operations.

Architecture follows Clean Architecture / Hexagonal pattern:
- Use cases orchestrate domain objects and ports
- Dependencies are injected via constructors for testability

Usage:
    from application.use_cases import RelayBroadcaster

    broadcaster = RelayBroadcaster(registry=registry, hub=hub)
    broadcaster.dispatch(connection_id, '{"event": "watch-sessions"}')
"""

from application.use_cases.relay_broadcaster import (
    ProtocolError,
    RelayBroadcaster,
    RelayError,
    RoleConflictError,
    SessionOwnershipError,
)

__all__ = [
    "RelayBroadcaster",
    "RelayError",
    "ProtocolError",
    "RoleConflictError",
    "SessionOwnershipError",
]
