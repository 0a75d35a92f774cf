"""
Headless reconstruction adapters.

The visual renderer lives in the browser. These adapters satisfy the same
ports without painting anything: they keep the events a handle was fed and
report them through logging, which is what ``cli watch`` shows in a
terminal.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from application.ports import ReplayerOptions

logger = logging.getLogger(__name__)


@dataclass
class HeadlessMount:
    """A named slot a headless handle 'paints' into."""

    name: str
    clears: int = 0

    def clear(self) -> None:
        self.clears += 1


class HeadlessMountProvider:
    """One preview and one expanded mount per session."""

    def __init__(self) -> None:
        self._mounts: Dict[Tuple[str, bool], HeadlessMount] = {}

    def mount_for(self, session_id: str, expanded: bool) -> HeadlessMount:
        key = (session_id, expanded)
        mount = self._mounts.get(key)
        if mount is None:
            suffix = "expanded" if expanded else "preview"
            mount = HeadlessMount(name=f"{session_id}:{suffix}")
            self._mounts[key] = mount
        return mount


@dataclass
class HeadlessReplayer:
    """Records what a browser replayer would have been asked to paint."""

    root: HeadlessMount
    options: ReplayerOptions
    events: List[Any] = field(default_factory=list)
    base_time_ms: Optional[float] = None
    paused: bool = False

    def add_event(self, event: Any) -> None:
        if self.paused:
            return
        self.events.append(event)
        logger.debug("[%s] event #%d", self.root.name, len(self.events))

    def start_live(self, base_time_ms: float) -> None:
        self.base_time_ms = base_time_ms
        self.paused = False
        logger.debug(
            "[%s] live from %.0f with %d seeded events",
            self.root.name,
            base_time_ms,
            len(self.events),
        )

    def pause(self) -> None:
        self.paused = True


class HeadlessRendererFactory:
    def create(
        self,
        events: Sequence[Any],
        *,
        root: HeadlessMount,
        options: ReplayerOptions,
    ) -> HeadlessReplayer:
        return HeadlessReplayer(root=root, options=options, events=list(events))
