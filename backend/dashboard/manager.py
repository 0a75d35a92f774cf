"""
Dashboard reconstruction manager.

Holds one view per relayed session: the events received so far, the
reconstruction handle painting them, and whether the card is collapsed
(preview) or expanded. The authoritative log stays on the relay; this is a
read-once-then-incremental copy.

Two ways a handle gets events:
- live append: ``on_event`` feeds each new event to the existing handle;
- buffered replay: on a display-mode change or a history backfill the handle
  is discarded and a new one is built from the whole buffer.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

from application.ports import (
    MountPoint,
    MountProvider,
    ReconstructionHandle,
    RendererFactory,
    ReplayerOptions,
)
from backend.dashboard.liveness import liveness_label
from domain.models import SESSION_ID_PREFIX

logger = logging.getLogger(__name__)

# Backdate live start so the first live event is not dropped by the
# renderer's start-time gate.
DEFAULT_LIVE_OFFSET_MS = 300


def short_id(session_id: str) -> str:
    """Card label: id without its ``session_`` prefix, first 8 chars, upper-cased."""
    return session_id.replace(SESSION_ID_PREFIX, "", 1)[:8].upper()


@dataclass
class SessionView:
    """Dashboard-side state of one session card."""

    session_id: str
    started_at: float
    last_activity: float
    events: List[Any] = field(default_factory=list)
    expanded: bool = False
    ended: bool = False
    status: str = "NOW"
    handle: Optional[ReconstructionHandle] = None
    mount: Optional[MountPoint] = None
    handles_created: int = 0

    @property
    def short_id(self) -> str:
        return short_id(self.session_id)


class ReconstructionManager:
    """
    Drives the external renderer for every session the dashboard knows.

    At most one card is expanded at a time. Creation of a view is
    idempotent, so duplicate discovery signals never create a second handle.

    Usage:
        manager = ReconstructionManager(renderer=factory, mounts=mounts)
        manager.on_session_discovered("session_abc12345")
        manager.on_event("session_abc12345", event)
        manager.on_display_mode_toggle("session_abc12345")
    """

    def __init__(
        self,
        renderer: RendererFactory,
        mounts: MountProvider,
        *,
        clock: Callable[[], float] = time.time,
        live_offset_ms: float = DEFAULT_LIVE_OFFSET_MS,
        options: Optional[ReplayerOptions] = None,
    ):
        """
        Args:
            renderer: Factory for reconstruction handles
            mounts: Resolves preview/expanded mount points
            clock: Seconds since the epoch, injectable for tests
            live_offset_ms: How far live playback is backdated
            options: Renderer options shared by every handle
        """
        self._renderer = renderer
        self._mounts = mounts
        self._clock = clock
        self.live_offset_ms = live_offset_ms
        self.options = options or ReplayerOptions()
        self.sessions: Dict[str, SessionView] = {}

    # =========================================================================
    # Relay-driven operations
    # =========================================================================

    def on_session_discovered(self, session_id: str) -> SessionView:
        """Create the view and a live-append handle on the preview mount. Idempotent."""
        view = self.sessions.get(session_id)
        if view is not None:
            view.ended = False
            return view

        now = self._clock()
        view = SessionView(session_id=session_id, started_at=now, last_activity=now)
        self.sessions[session_id] = view
        self._attach_handle(view, seed=[])
        logger.info("Session %s discovered (%d on dashboard)", view.short_id, len(self.sessions))
        return view

    def on_event(self, session_id: str, event: Any) -> SessionView:
        """Buffer one live event and feed it to the handle."""
        view = self.sessions.get(session_id)
        if view is None:
            # Missed session-joined: create it exactly as if discovered.
            view = self.on_session_discovered(session_id)
        view.events.append(event)
        view.last_activity = self._clock()
        view.ended = False
        if view.handle is not None:
            view.handle.add_event(event)
        return view

    def on_active_sessions(self, session_ids: Iterable[str]) -> List[str]:
        """
        Resync the known set from a relay snapshot.

        Known sessions are left untouched; events missed while disconnected
        are not backfilled here.

        Returns:
            Ids that were not known before
        """
        discovered = []
        for session_id in session_ids:
            if session_id not in self.sessions:
                self.on_session_discovered(session_id)
                discovered.append(session_id)
        return discovered

    def on_session_history(self, session_id: str, events: Iterable[Any]) -> SessionView:
        """
        Merge the relay's retained log into the buffer and replay it.

        The relay answers a history request on the same ordered channel as
        live events, so the history always ends with the last buffered
        event. Retention may have cut its head, in which case the buffered
        events older than the history are kept in front of it. The handle is
        only rebuilt when the merge changed the buffer.
        """
        view = self.on_session_discovered(session_id)
        history = list(events)
        if not history:
            return view
        older = len(view.events) - len(history)
        merged = view.events[:older] + history if older > 0 else history
        if merged == view.events:
            return view
        view.events = merged
        self._rebuild(view)
        logger.info("Session %s backfilled to %d events", view.short_id, len(merged))
        return view

    def on_session_ended(self, session_id: str) -> None:
        view = self.sessions.get(session_id)
        if view is not None:
            view.ended = True

    # =========================================================================
    # Viewer-driven operations
    # =========================================================================

    def on_display_mode_toggle(self, session_id: str) -> SessionView:
        """
        Expand a collapsed card or collapse an expanded one.

        Expanding collapses whichever other card was expanded. Every card
        whose mode changes gets a fresh handle replayed from its full buffer.
        """
        view = self.sessions.get(session_id)
        if view is None:
            view = self.on_session_discovered(session_id)

        expanding = not view.expanded
        if expanding:
            for other in self.sessions.values():
                if other is not view and other.expanded:
                    other.expanded = False
                    self._rebuild(other)

        view.expanded = expanding
        self._rebuild(view)
        return view

    # =========================================================================
    # Liveness
    # =========================================================================

    def tick(self, now: Optional[float] = None) -> Dict[str, str]:
        """Recompute every card's liveness label."""
        if now is None:
            now = self._clock()
        labels = {}
        for session_id, view in self.sessions.items():
            view.status = liveness_label(now - view.last_activity)
            labels[session_id] = view.status
        return labels

    def active_count_label(self) -> str:
        return f"{len(self.sessions)} ACTIVE"

    def get(self, session_id: str) -> Optional[SessionView]:
        return self.sessions.get(session_id)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self.sessions

    def __len__(self) -> int:
        return len(self.sessions)

    # =========================================================================
    # Handles
    # =========================================================================

    def _attach_handle(self, view: SessionView, seed: List[Any]) -> None:
        mount = self._mounts.mount_for(view.session_id, view.expanded)
        if view.mount is not None and view.mount is not mount:
            mount.clear()
        handle = self._renderer.create(seed, root=mount, options=self.options)
        handle.start_live(self._clock() * 1000 - self.live_offset_ms)
        view.handle = handle
        view.mount = mount
        view.handles_created += 1

    def _rebuild(self, view: SessionView) -> None:
        """Discard the current handle and replay the whole buffer into a new one."""
        if view.handle is not None:
            view.handle.pause()
            view.handle = None
        if view.mount is not None:
            view.mount.clear()
        self._attach_handle(view, seed=list(view.events))
        logger.debug(
            "Session %s rebuilt (%s, %d events)",
            view.short_id,
            "expanded" if view.expanded else "preview",
            len(view.events),
        )
