"""Dashboard side of the relay: reconstruction manager, liveness and viewer client."""

from backend.dashboard.client import DashboardClient
from backend.dashboard.liveness import LivenessTicker, liveness_label
from backend.dashboard.manager import (
    DEFAULT_LIVE_OFFSET_MS,
    ReconstructionManager,
    SessionView,
    short_id,
)
from backend.dashboard.renderers import (
    HeadlessMount,
    HeadlessMountProvider,
    HeadlessRendererFactory,
    HeadlessReplayer,
)

__all__ = [
    "DEFAULT_LIVE_OFFSET_MS",
    "DashboardClient",
    "HeadlessMount",
    "HeadlessMountProvider",
    "HeadlessRendererFactory",
    "HeadlessReplayer",
    "LivenessTicker",
    "ReconstructionManager",
    "SessionView",
    "liveness_label",
    "short_id",
]
