"""
FastAPI Dependency Providers for the session relay.

This module provides FastAPI dependency injection functions that return
interface types (Protocols) rather than concrete implementations. The
registry, hub and broadcaster are created once per app by
``backend.main.create_app`` and read back from ``app.state``.

Usage in routers:
    from api.deps import get_session_registry
    from application.ports import SessionRegistry

    @router.get("/health")
    def health(registry: SessionRegistry = Depends(get_session_registry)):
        return {"active_sessions": len(registry.list_active())}

Testing:
    # Override dependencies in tests
    app.dependency_overrides[get_session_registry] = lambda: FakeRegistry()
"""

from fastapi.requests import HTTPConnection

from application.ports import ChannelHub, SessionRegistry
from application.use_cases import RelayBroadcaster
from backend.settings import Settings


# =============================================================================
# Settings Provider
# =============================================================================


def get_settings(conn: HTTPConnection) -> Settings:
    """
    Get the settings the running app was created with.

    Returns:
        Settings: Application settings instance
    """
    return conn.app.state.settings


# =============================================================================
# Relay Providers
# =============================================================================


def get_session_registry(conn: HTTPConnection) -> SessionRegistry:
    """
    Get the app's SessionRegistry.

    Typed as the Protocol to enable easy faking.
    """
    return conn.app.state.session_registry


def get_channel_hub(conn: HTTPConnection) -> ChannelHub:
    """Get the app's ChannelHub."""
    return conn.app.state.channel_hub


def get_broadcaster(conn: HTTPConnection) -> RelayBroadcaster:
    """Get the app's RelayBroadcaster."""
    return conn.app.state.broadcaster
