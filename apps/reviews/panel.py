"""Reviews section state for one mounted movie page."""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass
from typing import Optional

from .services import ReviewAggregator, ReviewsLoadError, ReviewsSummary


class PanelStatus(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(slots=True)
class PanelState:
    status: PanelStatus = PanelStatus.IDLE
    summary: Optional[ReviewsSummary] = None
    error: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.status is PanelStatus.ERROR


class ReviewsPanel:
    """
    Runs review loads for a mounted page and applies their results.

    ``unmount()`` cancels the in-flight load; a result that arrives after
    the panel was unmounted (or after a newer refresh started) is dropped.
    """

    error_message = "Failed to load reviews"

    def __init__(self, aggregator: ReviewAggregator):
        self.aggregator = aggregator
        self.state = PanelState()
        self._mounted = False
        self._task: Optional[asyncio.Future] = None
        self._generation = 0

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    def mount(self) -> None:
        self._mounted = True

    def unmount(self) -> None:
        self._mounted = False
        self._generation += 1
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

    async def refresh(self, movie_id) -> PanelState:
        if not self._mounted:
            return self.state

        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._generation += 1
        generation = self._generation

        self.state = PanelState(status=PanelStatus.LOADING)
        task = asyncio.ensure_future(self.aggregator.load(movie_id))
        self._task = task
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            raise

        if task.cancelled() or not self._mounted or generation != self._generation:
            return self.state

        self._task = None
        exc = task.exception()
        if isinstance(exc, ReviewsLoadError):
            self.state = PanelState(status=PanelStatus.ERROR, error=self.error_message)
        elif exc is not None:
            raise exc
        else:
            self.state = PanelState(status=PanelStatus.READY, summary=task.result())
        return self.state
