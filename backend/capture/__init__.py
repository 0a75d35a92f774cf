"""Capture agent: the producer side of the relay.

Usage::

    from backend.capture import CaptureAgent, read_event_file

    agent = CaptureAgent("ws://localhost:3001/ws", read_event_file("events.jsonl"))
    await agent.run()
"""

from .agent import CaptureAgent, read_event_file
from .session import SessionIdStore, new_session_id

__all__ = [
    "CaptureAgent",
    "SessionIdStore",
    "new_session_id",
    "read_event_file",
]
