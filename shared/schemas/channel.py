"""
Channel message schemas shared by the relay, the capture agent and the
dashboard client.

Every frame on the channel is a JSON text message::

    {"event": "<name>", "data": <payload>}

Recorded events travel inside ``data`` untouched; nothing here looks inside
them.
"""

import json
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, TypeAdapter

from domain.models.session import MAX_SESSION_ID_LENGTH


class ChannelEvent(str, Enum):
    """Message names used on the channel."""

    # producer -> relay
    JOIN_SESSION = "join-session"
    USER_ACTION = "user-action"
    # viewer -> relay
    WATCH_SESSIONS = "watch-sessions"
    REQUEST_HISTORY = "request-history"
    # relay -> viewer
    ACTIVE_SESSIONS = "active-sessions"
    SESSION_JOINED = "session-joined"
    LIVE_EVENT = "live-event"
    SESSION_ENDED = "session-ended"
    SESSION_HISTORY = "session-history"
    # relay -> any sender
    RELAY_ERROR = "relay-error"


SessionId = Annotated[
    str, StringConstraints(min_length=1, max_length=MAX_SESSION_ID_LENGTH)
]
session_id_adapter: TypeAdapter[str] = TypeAdapter(SessionId)


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def dump(self) -> Dict[str, Any]:
        """Wire form: camelCase keys."""
        return self.model_dump(by_alias=True)


class ChannelEnvelope(BaseModel):
    """Outer frame of every channel message."""
    event: str = Field(..., min_length=1, max_length=64)
    data: Any = None


class UserActionPayload(_Payload):
    """user-action: one recorded event from a producer."""
    session_id: SessionId = Field(..., alias="sessionId")
    event: Any = Field(..., description="Opaque recorder payload")
    timestamp: Optional[float] = Field(
        default=None,
        description="Producer wall clock in epoch milliseconds",
    )


class ActiveSessionsPayload(_Payload):
    """active-sessions: snapshot unicast to a viewer on watch-sessions."""
    sessions: List[str]


class SessionRefPayload(_Payload):
    """session-joined / session-ended."""
    session_id: str = Field(..., alias="sessionId")


class LiveEventPayload(_Payload):
    """live-event: one relayed event."""
    session_id: str = Field(..., alias="sessionId")
    event: Any


class SessionHistoryPayload(_Payload):
    """session-history: retained log unicast on request-history."""
    session_id: str = Field(..., alias="sessionId")
    events: List[Any] = Field(default_factory=list)


class RelayErrorPayload(_Payload):
    """relay-error: why the relay refused a message."""
    code: str
    message: str


def decode_envelope(raw: Union[str, bytes, Dict[str, Any]]) -> ChannelEnvelope:
    """Parse a frame into an envelope.

    Args:
        raw: JSON text/bytes, or an already-decoded mapping

    Returns:
        The validated envelope

    Raises:
        ValueError: Frame is not JSON or not an envelope (pydantic's
            ValidationError is a ValueError)
    """
    if isinstance(raw, (str, bytes)):
        raw = json.loads(raw)
    return ChannelEnvelope.model_validate(raw)


def encode_envelope(event: Union[ChannelEvent, str], data: Any = None) -> str:
    """Serialize a message into a JSON text frame."""
    name = event.value if isinstance(event, ChannelEvent) else event
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True)
    return json.dumps({"event": name, "data": data})
