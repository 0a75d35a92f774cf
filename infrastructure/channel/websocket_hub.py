"""
WebSocket Channel Hub.

Group membership and fire-and-forget delivery over FastAPI WebSockets.
Each registered connection gets a bounded outbound queue drained by its own
writer task, so ``send``/``multicast`` never await and a slow viewer cannot
stall the relay or other viewers.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Set

from fastapi import WebSocket

from application.ports.channel_hub import envelope

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 1000


@dataclass
class _Outbound:
    websocket: WebSocket
    queue: "asyncio.Queue[Dict[str, Any]]"
    writer: Optional["asyncio.Task[None]"] = None
    dropped: int = 0


class WebSocketChannelHub:
    """
    ChannelHub implementation backed by live WebSocket connections.

    Must be used from the event loop the WebSockets belong to.

    Usage:
        hub = WebSocketChannelHub(queue_size=1000)
        hub.register(connection_id, websocket)
        hub.join(connection_id, "dashboard")
        hub.multicast("dashboard", "session-joined", {"sessionId": "session_abc"})
        await hub.unregister(connection_id)
    """

    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE):
        if queue_size < 1:
            raise ValueError(f"queue_size must be >= 1, got {queue_size}")
        self.queue_size = queue_size
        self._outbound: Dict[str, _Outbound] = {}
        self._groups: Dict[str, Set[str]] = {}

    # =========================================================================
    # Connection lifecycle
    # =========================================================================

    def register(self, connection_id: str, websocket: WebSocket) -> None:
        """Start delivering to an accepted WebSocket."""
        if connection_id in self._outbound:
            raise ValueError(f"Connection {connection_id} already registered")
        outbound = _Outbound(websocket=websocket, queue=asyncio.Queue(maxsize=self.queue_size))
        outbound.writer = asyncio.create_task(self._drain(connection_id, outbound))
        self._outbound[connection_id] = outbound

    async def unregister(self, connection_id: str) -> None:
        """Forget a connection: drop its memberships and stop its writer."""
        self.leave_all(connection_id)
        outbound = self._outbound.pop(connection_id, None)
        if outbound is None or outbound.writer is None:
            return
        outbound.writer.cancel()
        try:
            await outbound.writer
        except asyncio.CancelledError:
            pass
        if outbound.dropped:
            logger.warning(
                "Connection %s dropped %d outbound messages", connection_id, outbound.dropped
            )

    @property
    def connection_count(self) -> int:
        return len(self._outbound)

    # =========================================================================
    # ChannelHub Protocol Methods
    # =========================================================================

    def join(self, connection_id: str, group: str) -> None:
        self._groups.setdefault(group, set()).add(connection_id)

    def leave(self, connection_id: str, group: str) -> None:
        members = self._groups.get(group)
        if not members:
            return
        members.discard(connection_id)
        if not members:
            del self._groups[group]

    def leave_all(self, connection_id: str) -> Set[str]:
        left = {group for group, members in self._groups.items() if connection_id in members}
        for group in left:
            self.leave(connection_id, group)
        return left

    def members(self, group: str) -> Set[str]:
        return set(self._groups.get(group, ()))

    def send(self, connection_id: str, event: str, data: Any = None) -> None:
        outbound = self._outbound.get(connection_id)
        if outbound is None:
            logger.debug("Send of %s to unknown connection %s skipped", event, connection_id)
            return
        self._enqueue(connection_id, outbound, dict(envelope(event, data)))

    def multicast(self, group: str, event: str, data: Any = None) -> None:
        message = dict(envelope(event, data))
        # Sorted for a deterministic fan-out order across receivers.
        for connection_id in sorted(self._groups.get(group, ())):
            outbound = self._outbound.get(connection_id)
            if outbound is not None:
                self._enqueue(connection_id, outbound, message)

    # =========================================================================
    # Delivery
    # =========================================================================

    def _enqueue(self, connection_id: str, outbound: _Outbound, message: Dict[str, Any]) -> None:
        try:
            outbound.queue.put_nowait(message)
        except asyncio.QueueFull:
            outbound.dropped += 1
            logger.warning(
                "Outbound queue full for %s, dropping %s", connection_id, message["event"]
            )

    async def _drain(self, connection_id: str, outbound: _Outbound) -> None:
        while True:
            message = await outbound.queue.get()
            try:
                await outbound.websocket.send_json(message)
            except Exception as e:
                # Receiver is gone; the endpoint's receive loop will unregister it.
                logger.debug("Delivery to %s stopped: %s", connection_id, e)
                return
