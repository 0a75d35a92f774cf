"""
API package for the session relay.

This package contains:
- deps.py: FastAPI dependency providers for DI
- routers/: HTTP and WebSocket route handlers
"""

# Re-export dependency providers for convenient access
from api.deps import (
    get_broadcaster,
    get_channel_hub,
    get_session_registry,
    get_settings,
)

__all__ = [
    # Settings
    "get_settings",
    # Relay
    "get_session_registry",
    "get_channel_hub",
    "get_broadcaster",
]
