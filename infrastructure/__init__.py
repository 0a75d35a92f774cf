"""
Infrastructure Layer for the session relay.

This package contains concrete implementations of the server-side ports:
- registry/: in-memory session registry with a retention policy
- channel/: WebSocket channel hub with per-connection outbound queues
"""

from infrastructure.registry import InMemorySessionRegistry, RetentionPolicy
from infrastructure.channel import WebSocketChannelHub

__all__ = [
    "InMemorySessionRegistry",
    "RetentionPolicy",
    "WebSocketChannelHub",
]
