"""
Interfaces (Ports) for the session relay.

This package defines the abstract interfaces that decouple the relay and the
dashboard from their collaborators. Implementations are provided in the
infrastructure layer (server side) and in backend.dashboard (viewer side).

Architecture follows the Ports & Adapters (Hexagonal) pattern:
- Ports: Abstract interfaces defined here (what the core needs)
- Adapters: Concrete implementations elsewhere (how it's provided)

Usage:
    from application.ports import SessionRegistry, ChannelHub

    class RelayBroadcaster:
        def __init__(self, registry: SessionRegistry, hub: ChannelHub):
            ...
"""

# Session state
from application.ports.session_registry import SessionRegistry

# Channel delivery
from application.ports.channel_hub import (
    SESSION_GROUP_PREFIX,
    VIEWER_GROUP,
    ChannelHub,
    envelope,
    session_group,
)

# Reconstruction renderer (viewer side)
from application.ports.reconstruction import (
    MountPoint,
    MountProvider,
    ReconstructionHandle,
    RendererFactory,
    ReplayerOptions,
)

__all__ = [
    # Session state
    "SessionRegistry",
    # Channel
    "ChannelHub",
    "SESSION_GROUP_PREFIX",
    "VIEWER_GROUP",
    "envelope",
    "session_group",
    # Reconstruction
    "MountPoint",
    "MountProvider",
    "ReconstructionHandle",
    "RendererFactory",
    "ReplayerOptions",
]
