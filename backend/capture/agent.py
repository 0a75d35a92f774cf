"""Capture agent.

Producer side of the channel: joins its session on every (re)connect and
forwards each recorded event as a user-action. Events recorded while the
socket is down are dropped, never queued.
"""

import asyncio
import json
import logging
import time
from pathlib import Path
from typing import Any, AsyncIterable, AsyncIterator, Callable, Optional, Union

from backend.capture.session import SessionIdStore
from backend.channel.client import ChannelClient
from shared.schemas.channel import ChannelEvent, UserActionPayload

logger = logging.getLogger(__name__)


def _epoch_ms() -> float:
    return time.time() * 1000


class CaptureAgent(ChannelClient):
    """Streams a recorder's events to the relay under one session id.

    Usage::

        agent = CaptureAgent("ws://localhost:3001/ws", read_event_file(path))
        await agent.run()
    """

    def __init__(
        self,
        url: str,
        events: AsyncIterable[Any],
        *,
        session_id: Optional[str] = None,
        store: Optional[SessionIdStore] = None,
        clock_ms: Callable[[], float] = _epoch_ms,
        **kwargs: Any,
    ):
        super().__init__(url, **kwargs)
        self.session_id = session_id or (store or SessionIdStore()).get_or_create()
        self._events = events
        self._clock_ms = clock_ms
        self._pump: Optional["asyncio.Task[None]"] = None
        self.sent = 0

    async def on_connect(self) -> None:
        await self.send(ChannelEvent.JOIN_SESSION, self.session_id)
        if self._pump is None:
            self._pump = asyncio.create_task(self._forward_events())

    async def on_message(self, event: str, data: Any) -> None:
        if event == ChannelEvent.RELAY_ERROR.value:
            logger.warning("Relay refused a message from %s: %s", self.session_id, data)

    async def record(self, event: Any) -> bool:
        """Forward one recorded event; returns False if it was dropped."""
        payload = UserActionPayload(
            session_id=self.session_id,
            event=event,
            timestamp=self._clock_ms(),
        )
        ok = await self.send(ChannelEvent.USER_ACTION, payload.dump())
        if ok:
            self.sent += 1
        return ok

    async def _forward_events(self) -> None:
        try:
            async for event in self._events:
                await self.record(event)
        finally:
            logger.info(
                "Recorder for %s exhausted (%d sent, %d dropped)",
                self.session_id,
                self.sent,
                self.dropped,
            )
            await self.stop()


async def read_event_file(path: Union[str, Path]) -> AsyncIterator[Any]:
    """Yield recorded events from a JSON-lines file, one event per line."""
    with open(path, encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError as e:
                logger.warning("Skipping %s:%d: %s", path, lineno, e)
