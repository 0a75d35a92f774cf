"""
Liveness indicator for dashboard cards.

Purely presentational: how long ago a session last produced an event,
bucketed into NOW / seconds / minutes and recomputed on a fixed tick so the
label keeps ageing while no events arrive.
"""

import asyncio
import logging
import math
from typing import TYPE_CHECKING, Callable, Dict, Optional

if TYPE_CHECKING:
    from backend.dashboard.manager import ReconstructionManager

logger = logging.getLogger(__name__)

JUST_NOW_SECONDS = 5
MINUTE_SECONDS = 60
DEFAULT_TICK_SECONDS = 1.0


def liveness_label(elapsed_seconds: float) -> str:
    """
    Bucket the time since last activity.

    Examples:
        >>> liveness_label(0.4)
        'NOW'
        >>> liveness_label(42.9)
        '42S'
        >>> liveness_label(185)
        '3M'
    """
    elapsed = max(0, math.floor(elapsed_seconds))
    if elapsed < JUST_NOW_SECONDS:
        return "NOW"
    if elapsed < MINUTE_SECONDS:
        return f"{elapsed}S"
    return f"{elapsed // MINUTE_SECONDS}M"


TickCallback = Callable[[Dict[str, str], str], None]


class LivenessTicker:
    """
    Recomputes every card's liveness label at a fixed interval.

    Usage:
        ticker = LivenessTicker(manager, on_tick=render_labels)
        ticker.start()
        ...
        await ticker.stop()
    """

    def __init__(
        self,
        manager: "ReconstructionManager",
        on_tick: Optional[TickCallback] = None,
        interval_seconds: float = DEFAULT_TICK_SECONDS,
    ):
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self.manager = manager
        self.on_tick = on_tick
        self.interval_seconds = interval_seconds
        self._task: Optional["asyncio.Task[None]"] = None

    def tick_once(self) -> Dict[str, str]:
        labels = self.manager.tick()
        if self.on_tick is not None:
            self.on_tick(labels, self.manager.active_count_label())
        return labels

    async def run(self) -> None:
        while True:
            self.tick_once()
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
