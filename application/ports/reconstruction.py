"""
Reconstruction Renderer Interface (Port).

The visual reconstruction renderer is an external capability: it consumes an
ordered sequence of recorded DOM events and paints them into a mount point.
The dashboard reconstruction manager drives it only through these protocols.
"""
from dataclasses import dataclass, field
from typing import Any, List, Protocol, Sequence


@dataclass(frozen=True)
class ReplayerOptions:
    """
    Options every reconstruction handle is created with.

    Mirrors what the dashboard passes to the browser renderer: live mode,
    real-time speed, inactive stretches skipped, no cursor trail.
    """

    live_mode: bool = True
    speed: float = 1.0
    show_debug: bool = False
    skip_inactive: bool = True
    replay_canvas: bool = True
    mouse_tail: bool = False
    insert_style_rules: List[str] = field(
        default_factory=lambda: [
            ".replayer-mouse { display: none !important; }",
            ".replayer-mouse-tail { display: none !important; }",
        ]
    )


class MountPoint(Protocol):
    """A place in the viewer's display a handle paints into."""

    def clear(self) -> None:
        """Remove everything a previous handle painted."""
        ...


class MountProvider(Protocol):
    """Resolves where a session's card is painted for a display mode."""

    def mount_for(self, session_id: str, expanded: bool) -> MountPoint:
        """
        Args:
            session_id: Session the card belongs to
            expanded: True for the expanded view, False for the preview

        Returns:
            Mount point for that card and mode
        """
        ...


class ReconstructionHandle(Protocol):
    """One renderer instance bound to a mount point."""

    def add_event(self, event: Any) -> None:
        """Feed one event in live-append mode."""
        ...

    def start_live(self, base_time_ms: float) -> None:
        """
        Start live playback.

        Args:
            base_time_ms: Epoch milliseconds the renderer treats as "now";
                events older than this are not painted.
        """
        ...

    def pause(self) -> None:
        """Stop painting. The handle is not reused afterwards."""
        ...


class RendererFactory(Protocol):
    """Creates reconstruction handles."""

    def create(
        self,
        events: Sequence[Any],
        *,
        root: MountPoint,
        options: ReplayerOptions,
    ) -> ReconstructionHandle:
        """
        Create a handle seeded with ``events``.

        Args:
            events: Initial events to replay, possibly empty
            root: Mount point to paint into
            options: Renderer options

        Returns:
            A handle that has not been started yet
        """
        ...
