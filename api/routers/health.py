"""
Health check router.

This router provides the liveness endpoint for monitoring and load
balancers, with a small snapshot of relay state.
"""

import logging

from fastapi import APIRouter, Depends

from api.deps import get_broadcaster, get_session_registry
from application.ports import SessionRegistry
from application.use_cases import RelayBroadcaster

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Health"],
)


@router.get("/health")
def health(
    registry: SessionRegistry = Depends(get_session_registry),
    broadcaster: RelayBroadcaster = Depends(get_broadcaster),
):
    """
    Simple liveness endpoint for the relay.

    Returns:
        dict: Status indicator plus active session and connection counts
    """
    return {
        "status": "ok",
        "active_sessions": len(registry.list_active()),
        "connections": broadcaster.connection_count,
    }
