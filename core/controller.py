"""
Dashboard Controller

The controller owns the DashboardState for one view and drives it from
two independent periodic jobs:
- the poll job: fetch -> aggregate -> classify -> persist -> render
- the blink job: toggle alerting markers on the render target

Two ways to run it:
- Rerun-driven (Streamlit): call tick(now) on every script rerun; it
  polls when the poll interval has elapsed.
- Event-loop driven (asyncio): start() creates the poll and blink tasks
  on the running loop; stop() cancels both, including any request in
  flight, and late completions are dropped via a generation counter.
"""

import asyncio
import logging
import time
from typing import Callable, Dict, List, Optional, Protocol

from .classifier import ClassificationResult, StatusClassifier
from .errors import DashboardError
from .layout import equipment_ids
from .records import PredictionRecord
from .scheduler import BlinkEffect, PeriodicSchedule
from .state import DashboardState
from .store import KeyValueStore

logger = logging.getLogger(__name__)


DataSource = Callable[[], List[PredictionRecord]]


class RenderTarget(Protocol):
    """Anything that can draw the factory scene and the charts."""

    def render_status(self, result: ClassificationResult, visibility: Dict[str, bool]) -> None:
        ...

    def render_charts(self, state: DashboardState) -> None:
        ...


class DashboardController:
    """
    Top-level controller for one dashboard view.

    Example:
        poller = DataPoller(settings.data_url)
        controller = DashboardController(poller.fetch, KeyValueStore(".state"))
        controller.mount()
        controller.tick()
    """

    def __init__(
        self,
        source: DataSource,
        store: KeyValueStore,
        render_target: Optional[RenderTarget] = None,
        poll_interval_seconds: float = 10.0,
        blink_interval_seconds: float = 0.5,
        known_ids: Optional[List[str]] = None,
        clock: Callable[[], float] = time.time,
        on_close: Optional[Callable[[], None]] = None
    ):
        """
        Args:
            source: Callable returning validated records (raises DashboardError)
            store: Local key-value store
            render_target: Optional scene/chart sink
            poll_interval_seconds: Poll period
            blink_interval_seconds: Blink period
            known_ids: Identifiers always shown (defaults to the factory layout)
            clock: Time source, injectable for tests
            on_close: Called on unmount to release the source (e.g. close a session)
        """
        self.source = source
        self.store = store
        self.render_target = render_target
        self.clock = clock
        self.on_close = on_close

        self.poll_schedule = PeriodicSchedule(poll_interval_seconds)
        self.blink = BlinkEffect(blink_interval_seconds)
        self.state = DashboardState(
            classifier=StatusClassifier(known_ids if known_ids is not None else equipment_ids())
        )

        self.mounted = False
        self._generation = 0
        self._tasks: List[asyncio.Task] = []

    @property
    def poll_interval_seconds(self) -> float:
        return self.poll_schedule.interval_seconds

    # =========================================
    # Lifecycle
    # =========================================

    def mount(self) -> ClassificationResult:
        """Restore persisted state and render it before any network call."""
        self.state.load(self.store)
        self.mounted = True
        self._generation += 1
        self._render()
        return self.state.result

    def unmount(self) -> None:
        """Persist state and drop the render target; late results become no-ops."""
        if not self.mounted:
            return
        self.mounted = False
        self._generation += 1
        self.state.save(self.store)
        self.render_target = None
        if self.on_close is not None:
            self.on_close()

    # =========================================
    # Polling
    # =========================================

    def poll_once(self) -> bool:
        """
        Fetch and apply one batch of records synchronously.

        Returns:
            True if the poll succeeded, False if it failed (state kept)
        """
        now = self.clock()
        self.poll_schedule.mark(now)
        try:
            records = self.source()
        except DashboardError as e:
            self.state.record_failure(e, now)
            return False
        return self._apply(records, self._generation, now)

    def tick(self, now: Optional[float] = None) -> bool:
        """Rerun hook: poll if due. Returns True if a poll ran and succeeded."""
        now = self.clock() if now is None else now
        if not self.mounted or not self.poll_schedule.due(now):
            return False
        return self.poll_once()

    def _apply(self, records: List[PredictionRecord], generation: int, now: float) -> bool:
        if generation != self._generation or not self.mounted:
            logger.info("Dropping poll result for a torn-down view")
            return False
        self.state.apply_records(records, now, store=self.store)
        self._render()
        return True

    # =========================================
    # Rendering
    # =========================================

    def visibility(self, now: Optional[float] = None) -> Dict[str, bool]:
        now = self.clock() if now is None else now
        return self.blink.visibility(self.state.result.tiers, now)

    def is_stale(self, now: Optional[float] = None) -> bool:
        now = self.clock() if now is None else now
        return self.state.is_stale(now, self.poll_interval_seconds)

    def _render(self) -> None:
        if self.render_target is None:
            return
        self.render_target.render_status(self.state.result, self.visibility())
        self.render_target.render_charts(self.state)

    def _render_blink(self) -> None:
        if self.render_target is None:
            return
        self.render_target.render_status(self.state.result, self.visibility())

    # =========================================
    # Event-loop mode
    # =========================================

    async def _poll_loop(self, generation: int) -> None:
        loop = asyncio.get_running_loop()
        while self.mounted and generation == self._generation:
            now = self.clock()
            self.poll_schedule.mark(now)
            try:
                records = await loop.run_in_executor(None, self.source)
            except DashboardError as e:
                self.state.record_failure(e, now)
            except Exception:
                # The poll task must outlive any single bad poll
                logger.exception("Unexpected error while polling")
            else:
                self._apply(records, generation, self.clock())
            await asyncio.sleep(self.poll_interval_seconds)

    async def _blink_loop(self, generation: int) -> None:
        while self.mounted and generation == self._generation:
            self._render_blink()
            await asyncio.sleep(self.blink.period_seconds)

    def start(self) -> None:
        """Mount if needed and start the poll and blink tasks on the running loop."""
        if not self.mounted:
            self.mount()
        if self._tasks:
            return
        generation = self._generation
        self._tasks = [
            asyncio.create_task(self._poll_loop(generation), name="dashboard-poll"),
            asyncio.create_task(self._blink_loop(generation), name="dashboard-blink"),
        ]

    async def stop(self) -> None:
        """Cancel both timers and any in-flight poll, then unmount."""
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self.unmount()

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)
