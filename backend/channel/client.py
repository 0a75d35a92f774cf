"""
Reconnecting channel client.

Base class for everything that talks to the relay from the outside: the
capture agent (producer) and the dashboard client (viewer). Subclasses
announce themselves in ``on_connect`` and react to relay messages in
``on_message``; the base class owns the socket and reconnects with unbounded
retry and capped exponential backoff.
"""

import asyncio
import logging
from typing import Any, Callable, Optional, Union

import websockets
from websockets.exceptions import ConnectionClosed

from backend.channel.reconnect import (
    DEFAULT_MAX_WAIT_SECONDS,
    DEFAULT_MIN_WAIT_SECONDS,
    create_reconnect_policy,
)
from shared.schemas.channel import ChannelEvent, decode_envelope, encode_envelope

logger = logging.getLogger(__name__)


class ChannelClient:
    """
    One logical connection to the relay that survives socket drops.

    Sends made while disconnected are dropped (best-effort delivery); the
    ``dropped`` counter records how many.

    Usage:
        class Printer(ChannelClient):
            async def on_connect(self) -> None:
                await self.send(ChannelEvent.WATCH_SESSIONS)

            async def on_message(self, event: str, data: Any) -> None:
                print(event, data)

        client = Printer("ws://localhost:3001/ws")
        await client.run()
    """

    def __init__(
        self,
        url: str,
        *,
        min_wait_seconds: float = DEFAULT_MIN_WAIT_SECONDS,
        max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS,
        max_attempts: Optional[int] = None,
        connect: Callable[..., Any] = websockets.connect,
    ):
        """
        Args:
            url: Relay channel URL, e.g. ``ws://localhost:3001/ws``
            min_wait_seconds: First reconnect backoff
            max_wait_seconds: Reconnect backoff cap
            max_attempts: Consecutive failed connects before giving up;
                None retries forever
            connect: websockets.connect or a stand-in with the same shape
        """
        self.url = url
        self.min_wait_seconds = min_wait_seconds
        self.max_wait_seconds = max_wait_seconds
        self.max_attempts = max_attempts
        self._connect = connect
        self._websocket: Any = None
        self._stopping = False
        self.connections = 0
        self.dropped = 0

    # =========================================================================
    # Hooks
    # =========================================================================

    async def on_connect(self) -> None:
        """Called after every (re)connect, before any message is read."""

    async def on_message(self, event: str, data: Any) -> None:
        """Called for every relay message, in arrival order."""

    def on_disconnect(self) -> None:
        """Called when an established connection goes away."""

    # =========================================================================
    # Sending
    # =========================================================================

    @property
    def connected(self) -> bool:
        return self._websocket is not None

    async def send(self, event: Union[ChannelEvent, str], data: Any = None) -> bool:
        """
        Send one message if connected.

        Returns:
            True if the frame was handed to the socket, False if dropped
        """
        websocket = self._websocket
        if websocket is None:
            self.dropped += 1
            return False
        try:
            await websocket.send(encode_envelope(event, data))
        except ConnectionClosed:
            self.dropped += 1
            return False
        return True

    # =========================================================================
    # Connection loop
    # =========================================================================

    async def run(self) -> None:
        """
        Stay connected until ``stop()`` is called.

        Backoff restarts from the minimum after every connection that was
        actually established.

        Raises:
            Exception: The last connect error, once ``max_attempts`` is
                exhausted or the error is not retryable
        """
        self._stopping = False
        while not self._stopping:
            policy = create_reconnect_policy(
                self.min_wait_seconds, self.max_wait_seconds, self.max_attempts
            )
            await policy(self._connect_once)

    async def stop(self) -> None:
        """Close the socket and end ``run()``."""
        self._stopping = True
        websocket = self._websocket
        if websocket is not None:
            await websocket.close()

    async def _connect_once(self) -> None:
        if self._stopping:
            return
        async with self._connect(self.url) as websocket:
            self._websocket = websocket
            self.connections += 1
            logger.info("Connected to relay %s", self.url)
            try:
                await self.on_connect()
                async for frame in websocket:
                    await self.handle_frame(frame)
            except ConnectionClosed as e:
                logger.warning("Relay connection lost: %s", e)
            finally:
                self._websocket = None
                self.on_disconnect()
        if not self._stopping:
            logger.info("Disconnected from relay %s, reconnecting", self.url)
            await asyncio.sleep(self.min_wait_seconds)

    async def handle_frame(self, frame: Union[str, bytes]) -> None:
        """
        Decode one frame and hand it to ``on_message``.

        Malformed frames and handler failures are logged and skipped so one
        bad message never tears down the connection.
        """
        try:
            envelope = decode_envelope(frame)
        except ValueError as e:
            logger.warning("Ignoring malformed frame from relay: %s", e)
            return
        try:
            await self.on_message(envelope.event, envelope.data)
        except Exception:
            logger.exception("Handler for relay message %s failed", envelope.event)
