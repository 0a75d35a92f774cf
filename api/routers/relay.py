"""
Relay channel router.

Endpoint:
- WS /ws - bidirectional channel for capture agents and dashboard viewers

Every frame is a JSON envelope ``{"event": ..., "data": ...}``. A connection
becomes a producer with ``join-session`` or a viewer with ``watch-sessions``;
see RelayBroadcaster for the state machine. Refused messages never close the
connection: they are logged and, when enabled, answered with ``relay-error``.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, WebSocket

from api.deps import get_broadcaster, get_channel_hub, get_settings
from application.use_cases import RelayBroadcaster, RelayError
from backend.settings import Settings
from infrastructure.channel import WebSocketChannelHub
from shared.schemas.channel import ChannelEvent, RelayErrorPayload

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Relay"],
)


@router.websocket("/ws")
async def relay_channel(
    websocket: WebSocket,
    broadcaster: RelayBroadcaster = Depends(get_broadcaster),
    hub: WebSocketChannelHub = Depends(get_channel_hub),
    settings: Settings = Depends(get_settings),
) -> None:
    """
    Serve one channel connection until it disconnects.

    Inbound frames are handled strictly one at a time; everything the relay
    sends goes through the hub's per-connection outbound queue.
    """
    await websocket.accept()
    connection_id = uuid.uuid4().hex
    hub.register(connection_id, websocket)
    broadcaster.connect(connection_id)
    logger.info("Client connected: %s", connection_id)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break

            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes")
            if raw is None:
                continue

            size = len(raw.encode("utf-8")) if isinstance(raw, str) else len(raw)
            if size > settings.max_message_bytes:
                logger.warning(
                    "Frame from %s too large (%d bytes), dropping", connection_id, size
                )
                continue

            try:
                broadcaster.dispatch(connection_id, raw)
            except RelayError as e:
                logger.warning("Refused message from %s (%s): %s", connection_id, e.code, e.message)
                if settings.report_errors:
                    hub.send(
                        connection_id,
                        ChannelEvent.RELAY_ERROR.value,
                        RelayErrorPayload(code=e.code, message=e.message).dump(),
                    )
    except Exception:
        logger.exception("Relay channel error on %s", connection_id)
    finally:
        ended = broadcaster.disconnect(connection_id)
        await hub.unregister(connection_id)
        if ended:
            logger.info("Client disconnected: %s (session %s ended)", connection_id, ended)
        else:
            logger.info("Client disconnected: %s", connection_id)
