"""
Dashboard channel client.

Connects to the relay as a viewer and feeds what arrives into a
ReconstructionManager. On every (re)connect it re-announces itself with
watch-sessions, so the relay's snapshot resyncs the known session set.
"""

import logging
from typing import Any, Optional

from pydantic import ValidationError

from backend.channel.client import ChannelClient
from backend.dashboard.manager import ReconstructionManager
from shared.schemas.channel import (
    ActiveSessionsPayload,
    ChannelEvent,
    LiveEventPayload,
    RelayErrorPayload,
    SessionHistoryPayload,
    SessionRefPayload,
)

logger = logging.getLogger(__name__)


class DashboardClient(ChannelClient):
    """
    Viewer side of the channel.

    Usage:
        manager = ReconstructionManager(renderer=factory, mounts=mounts)
        client = DashboardClient("ws://localhost:3001/ws", manager, backfill_history=True)
        await client.run()
    """

    def __init__(
        self,
        url: str,
        manager: ReconstructionManager,
        *,
        backfill_history: bool = False,
        **kwargs: Any,
    ):
        """
        Args:
            url: Relay channel URL
            manager: Receives every session and event the relay announces
            backfill_history: Request the retained log of every newly
                discovered session
            **kwargs: Passed through to ChannelClient
        """
        super().__init__(url, **kwargs)
        self.manager = manager
        self.backfill_history = backfill_history
        self.last_error: Optional[RelayErrorPayload] = None

    async def on_connect(self) -> None:
        await self.send(ChannelEvent.WATCH_SESSIONS)

    async def on_message(self, event: str, data: Any) -> None:
        try:
            if event == ChannelEvent.ACTIVE_SESSIONS.value:
                payload = ActiveSessionsPayload.model_validate(data)
                discovered = self.manager.on_active_sessions(payload.sessions)
                for session_id in discovered:
                    await self._backfill(session_id)
            elif event == ChannelEvent.SESSION_JOINED.value:
                ref = SessionRefPayload.model_validate(data)
                known = ref.session_id in self.manager
                self.manager.on_session_discovered(ref.session_id)
                if not known:
                    await self._backfill(ref.session_id)
            elif event == ChannelEvent.LIVE_EVENT.value:
                live = LiveEventPayload.model_validate(data)
                known = live.session_id in self.manager
                self.manager.on_event(live.session_id, live.event)
                if not known:
                    await self._backfill(live.session_id)
            elif event == ChannelEvent.SESSION_HISTORY.value:
                history = SessionHistoryPayload.model_validate(data)
                self.manager.on_session_history(history.session_id, history.events)
            elif event == ChannelEvent.SESSION_ENDED.value:
                ref = SessionRefPayload.model_validate(data)
                self.manager.on_session_ended(ref.session_id)
            elif event == ChannelEvent.RELAY_ERROR.value:
                self.last_error = RelayErrorPayload.model_validate(data)
                logger.warning(
                    "Relay refused a message: %s (%s)",
                    self.last_error.message,
                    self.last_error.code,
                )
            else:
                logger.debug("Ignoring unexpected message %r", event)
        except ValidationError as e:
            logger.warning("Ignoring invalid %s payload: %s", event, e)

    async def _backfill(self, session_id: str) -> None:
        if self.backfill_history:
            await self.send(ChannelEvent.REQUEST_HISTORY, session_id)
