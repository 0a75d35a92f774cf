"""
Router package for the session relay.

This package contains all API routers:
- health: Liveness endpoint with relay counters
- relay: WebSocket channel for capture agents and dashboard viewers
"""

from api.routers.health import router as health_router
from api.routers.relay import router as relay_router

__all__ = [
    "health_router",
    "relay_router",
]
