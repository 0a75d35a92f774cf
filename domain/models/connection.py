"""
Per-connection relay state.

A channel connection starts unjoined and takes exactly one role for its
lifetime: producer of a single session, or dashboard viewer.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ConnectionRole(str, Enum):
    """Role a connection occupies on the relay."""

    UNJOINED = "unjoined"
    PRODUCER = "producer"
    VIEWER = "viewer"


@dataclass
class ConnectionState:
    """
    Bookkeeping the relay keeps for one connection.

    Attributes:
        connection_id: Channel-assigned identifier
        role: Current role (unjoined until the first join/watch)
        session_id: Session the connection produces for, producers only
    """

    connection_id: str
    role: ConnectionRole = ConnectionRole.UNJOINED
    session_id: Optional[str] = None

    @property
    def is_producer(self) -> bool:
        return self.role is ConnectionRole.PRODUCER

    @property
    def is_viewer(self) -> bool:
        return self.role is ConnectionRole.VIEWER
