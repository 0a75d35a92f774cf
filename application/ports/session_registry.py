"""
Session Registry Interface (Port).

This module defines the abstract interface for the process-wide session
registry: session identifier -> ordered event log + liveness flag.
The relay broadcaster is its only writer.
"""
from typing import Any, List, Optional, Protocol

from domain.models import SessionSummary


class SessionRegistry(Protocol):
    """
    Abstract interface for relayed session state.

    Events are opaque; implementations append and hand them back, never
    inspect them.
    """

    def record_event(self, session_id: str, event: Any) -> None:
        """
        Append an event to a session's log.

        An unseen session is created on the spot (empty log, active).
        Unknown sessions are never an error.

        Args:
            session_id: Producer-generated session identifier
            event: Opaque recorder payload
        """
        ...

    def mark_active(self, session_id: str) -> None:
        """
        Flag a session as active, creating it if unseen. Idempotent.

        Args:
            session_id: Session identifier
        """
        ...

    def mark_inactive(self, session_id: str) -> None:
        """
        Flag a session as ended. Idempotent; unknown ids are ignored.

        Args:
            session_id: Session identifier
        """
        ...

    def list_active(self) -> List[str]:
        """
        Snapshot of active session identifiers, in creation order.

        Returns:
            List of session identifiers
        """
        ...

    def get_log(self, session_id: str) -> List[Any]:
        """
        Retained events of a session, oldest first.

        Args:
            session_id: Session identifier

        Returns:
            Copy of the event log, empty for unknown sessions
        """
        ...

    def get_session(self, session_id: str) -> Optional[SessionSummary]:
        """
        Metadata snapshot of a session.

        Args:
            session_id: Session identifier

        Returns:
            SessionSummary, or None if the session is unknown or evicted
        """
        ...

    def list_sessions(self) -> List[SessionSummary]:
        """
        Metadata snapshots of every retained session.

        Returns:
            List of SessionSummary, in creation order
        """
        ...
