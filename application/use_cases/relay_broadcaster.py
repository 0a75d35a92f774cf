"""
RelayBroadcaster Use Case.

Receives what tracked pages submit, appends it to the session registry and
multicasts it to every dashboard viewer. Keeps one small state machine per
channel connection:

    unjoined --join-session--> producer (of exactly one session)
    unjoined --watch-sessions--> viewer

All registry writes and fan-out for one inbound message happen synchronously
inside a single call, so callers on one event loop need no locking and the
per-viewer order of a session's events is the order the relay received them.
"""

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from application.ports import VIEWER_GROUP, ChannelHub, SessionRegistry, session_group
from domain.models import ConnectionRole, ConnectionState
from shared.schemas.channel import (
    ActiveSessionsPayload,
    ChannelEvent,
    LiveEventPayload,
    SessionHistoryPayload,
    SessionRefPayload,
    UserActionPayload,
    decode_envelope,
    session_id_adapter,
)

logger = logging.getLogger(__name__)


class RelayError(Exception):
    """Base class for messages the relay refuses."""

    code = "relay_error"

    def __init__(self, message: str, connection_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.connection_id = connection_id


class ProtocolError(RelayError):
    """Frame is not a well-formed message the relay accepts."""

    code = "protocol_error"


class RoleConflictError(RelayError):
    """Connection tried to take a second role, or act outside its role."""

    code = "role_conflict"


class SessionOwnershipError(RelayError):
    """Connection submitted events for a session it did not join."""

    code = "session_ownership"


class RelayBroadcaster:
    """
    Use case relaying producer events to dashboard viewers.

    Dependencies are injected via constructor for testability.

    Usage:
        >>> broadcaster = RelayBroadcaster(registry=registry, hub=hub)
        >>> broadcaster.connect("conn-1")
        >>> broadcaster.join_session("conn-1", "session_abc12345")
        >>> broadcaster.user_action("conn-1", "session_abc12345", {"type": 3})
    """

    def __init__(
        self,
        registry: SessionRegistry,
        hub: ChannelHub,
        *,
        enforce_session_ownership: bool = True,
        notify_session_end: bool = False,
    ):
        """
        Args:
            registry: Session state, written only by this broadcaster
            hub: Channel used for group membership and delivery
            enforce_session_ownership: Reject user-action from connections
                that did not join the session
            notify_session_end: Multicast session-ended when the last
                producer of a session leaves
        """
        self._registry = registry
        self._hub = hub
        self.enforce_session_ownership = enforce_session_ownership
        self.notify_session_end = notify_session_end
        self._connections: Dict[str, ConnectionState] = {}

    # =========================================================================
    # Connection lifecycle
    # =========================================================================

    def connect(self, connection_id: str) -> ConnectionState:
        """Start tracking a new connection. Idempotent."""
        state = self._connections.get(connection_id)
        if state is None:
            state = ConnectionState(connection_id=connection_id)
            self._connections[connection_id] = state
        return state

    def connection(self, connection_id: str) -> Optional[ConnectionState]:
        return self._connections.get(connection_id)

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def disconnect(self, connection_id: str) -> Optional[str]:
        """
        Forget a connection and update session liveness.

        A producer's session is marked inactive only when no other
        connection remains in its group, so a page that reconnects before
        the old socket is reaped never flaps the active indicator.

        Returns:
            The session id that went inactive, or None
        """
        state = self._connections.pop(connection_id, None)
        self._hub.leave_all(connection_id)
        if state is None or not state.is_producer or state.session_id is None:
            return None

        session_id = state.session_id
        if self._hub.members(session_group(session_id)):
            logger.debug(
                "Producer %s left %s, other members remain", connection_id, session_id
            )
            return None

        self._registry.mark_inactive(session_id)
        if self.notify_session_end:
            self._hub.multicast(
                VIEWER_GROUP,
                ChannelEvent.SESSION_ENDED.value,
                SessionRefPayload(session_id=session_id).dump(),
            )
        return session_id

    # =========================================================================
    # Transitions
    # =========================================================================

    def join_session(self, connection_id: str, session_id: str) -> None:
        """Register a connection as the producer of a session."""
        state = self.connect(connection_id)
        if state.is_viewer:
            raise RoleConflictError(
                "Viewer connections cannot join a session", connection_id
            )
        if state.is_producer and state.session_id != session_id:
            raise RoleConflictError(
                f"Connection already produces for {state.session_id}", connection_id
            )

        self._hub.join(connection_id, session_group(session_id))
        state.role = ConnectionRole.PRODUCER
        state.session_id = session_id
        self._registry.mark_active(session_id)
        logger.info("Session %s joined by %s", session_id, connection_id)

        self._hub.multicast(
            VIEWER_GROUP,
            ChannelEvent.SESSION_JOINED.value,
            SessionRefPayload(session_id=session_id).dump(),
        )

    def user_action(self, connection_id: str, session_id: str, event: Any) -> None:
        """Append an event to a session and relay it to viewers only."""
        state = self.connect(connection_id)
        if self.enforce_session_ownership and not (
            state.is_producer and state.session_id == session_id
        ):
            raise SessionOwnershipError(
                f"Connection has not joined {session_id}", connection_id
            )

        self._registry.record_event(session_id, event)
        logger.debug("User action received for %s", session_id)
        self._hub.multicast(
            VIEWER_GROUP,
            ChannelEvent.LIVE_EVENT.value,
            LiveEventPayload(session_id=session_id, event=event).dump(),
        )

    def watch_sessions(self, connection_id: str) -> None:
        """Register a dashboard viewer and unicast the active-session snapshot."""
        state = self.connect(connection_id)
        if state.is_producer:
            raise RoleConflictError(
                "Producer connections cannot watch sessions", connection_id
            )

        self._hub.join(connection_id, VIEWER_GROUP)
        state.role = ConnectionRole.VIEWER
        active = self._registry.list_active()
        logger.info("Dashboard viewer %s connected, %d active sessions", connection_id, len(active))

        self._hub.send(
            connection_id,
            ChannelEvent.ACTIVE_SESSIONS.value,
            ActiveSessionsPayload(sessions=active).dump(),
        )

    def request_history(self, connection_id: str, session_id: str) -> None:
        """Unicast a session's retained log to a viewer."""
        state = self.connect(connection_id)
        if not state.is_viewer:
            raise RoleConflictError(
                "Only viewers can request session history", connection_id
            )
        self._hub.send(
            connection_id,
            ChannelEvent.SESSION_HISTORY.value,
            SessionHistoryPayload(
                session_id=session_id,
                events=self._registry.get_log(session_id),
            ).dump(),
        )

    # =========================================================================
    # Inbound routing
    # =========================================================================

    def dispatch(self, connection_id: str, raw: Any) -> None:
        """
        Decode one inbound frame and apply it.

        Args:
            connection_id: Sender
            raw: JSON text, bytes, or an already-decoded mapping

        Raises:
            ProtocolError: Frame is malformed or names an unknown message
            RoleConflictError: Message is not allowed for the sender's role
            SessionOwnershipError: user-action for a session the sender
                did not join
        """
        try:
            envelope = decode_envelope(raw)
        except ValueError as e:
            raise ProtocolError(f"Malformed frame: {e}", connection_id) from e

        try:
            event = ChannelEvent(envelope.event)
        except ValueError:
            raise ProtocolError(f"Unknown message {envelope.event!r}", connection_id)

        if event is ChannelEvent.JOIN_SESSION:
            self.join_session(connection_id, self._session_id(connection_id, envelope.data))
        elif event is ChannelEvent.USER_ACTION:
            try:
                payload = UserActionPayload.model_validate(envelope.data)
            except ValidationError as e:
                raise ProtocolError(f"Invalid user-action: {e}", connection_id) from e
            self.user_action(connection_id, payload.session_id, payload.event)
        elif event is ChannelEvent.WATCH_SESSIONS:
            self.watch_sessions(connection_id)
        elif event is ChannelEvent.REQUEST_HISTORY:
            self.request_history(connection_id, self._session_id(connection_id, envelope.data))
        else:
            raise ProtocolError(
                f"Message {event.value!r} is not accepted by the relay", connection_id
            )

    @staticmethod
    def _session_id(connection_id: str, data: Any) -> str:
        """Session id payloads are a bare string; ``{"sessionId": ...}`` is also accepted."""
        if isinstance(data, dict):
            data = data.get("sessionId")
        try:
            return session_id_adapter.validate_python(data)
        except ValidationError as e:
            raise ProtocolError(f"Invalid session id: {e}", connection_id) from e
