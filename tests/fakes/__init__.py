"""
Fake implementations for testing.

In-memory stand-ins for the channel hub, the reconstruction renderer and
WebSocket connections. They satisfy the same Protocol interfaces as the real
adapters and record what they were asked to do.

Usage:
    from tests.fakes import FakeChannelHub, FakeRendererFactory

    hub = FakeChannelHub()
    broadcaster = RelayBroadcaster(registry=InMemorySessionRegistry(), hub=hub)
    broadcaster.watch_sessions("viewer-1")
    assert hub.events_for("viewer-1") == ["active-sessions"]
"""
from tests.fakes.channel_hub import FakeChannelHub
from tests.fakes.renderer import (
    FakeHandle,
    FakeMount,
    FakeMountProvider,
    FakeRendererFactory,
)
from tests.fakes.websocket import FakeClientConnection, FakeConnect, FakeWebSocket

__all__ = [
    "FakeChannelHub",
    "FakeClientConnection",
    "FakeConnect",
    "FakeHandle",
    "FakeMount",
    "FakeMountProvider",
    "FakeRendererFactory",
    "FakeWebSocket",
]
