"""
Channel Hub Interface (Port).

The relay talks to connected parties through a hub that knows about
connections and named multicast groups. Every send is fire-and-forget:
calls return immediately and never raise for a gone or slow receiver.
"""
from typing import Any, Mapping, Protocol, Set

# Group every dashboard viewer joins.
VIEWER_GROUP = "dashboard"

# Producer groups live under their own prefix so no session id can name the
# viewer group.
SESSION_GROUP_PREFIX = "session:"


def session_group(session_id: str) -> str:
    """Group the producers of one session join."""
    return SESSION_GROUP_PREFIX + session_id


class ChannelHub(Protocol):
    """
    Abstract interface for group membership and message delivery.

    Messages sent to one receiver are delivered in the order the calls were
    made.
    """

    def join(self, connection_id: str, group: str) -> None:
        """Add a connection to a group. Idempotent."""
        ...

    def leave(self, connection_id: str, group: str) -> None:
        """Remove a connection from a group. Idempotent."""
        ...

    def leave_all(self, connection_id: str) -> Set[str]:
        """
        Remove a connection from every group it belongs to.

        Returns:
            The groups the connection was removed from
        """
        ...

    def members(self, group: str) -> Set[str]:
        """Snapshot of the connection ids currently in a group."""
        ...

    def send(self, connection_id: str, event: str, data: Any = None) -> None:
        """
        Unicast a message to one connection.

        Args:
            connection_id: Receiver
            event: Message name, e.g. ``active-sessions``
            data: JSON-serialisable payload
        """
        ...

    def multicast(self, group: str, event: str, data: Any = None) -> None:
        """
        Send a message to every member of a group.

        Args:
            group: Group name
            event: Message name
            data: JSON-serialisable payload
        """
        ...


def envelope(event: str, data: Any = None) -> Mapping[str, Any]:
    """Wire envelope shared by every hub implementation."""
    return {"event": event, "data": data}
