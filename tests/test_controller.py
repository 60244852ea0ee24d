"""
Tests for the Dashboard Controller

These tests drive the controller with a fake data source and an
injected clock, in both rerun-driven and asyncio modes.

Run with: pytest tests/test_controller.py -v
"""

import asyncio
import threading
from datetime import datetime, timezone

from core.classifier import SeverityTier, TierSource
from core.controller import DashboardController
from core.errors import NetworkFailure, ParseFailure
from core.records import PredictionRecord
from core.store import MemoryStore, StoreKeys


A = "Machine_1_Equipment_1"
B = "Machine_1_Equipment_2"


def record(equipment, prediction):
    return PredictionRecord(
        equipment=equipment,
        prediction=prediction,
        timestamp=datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc),
        vibration=2.0,
        temperature=45.0,
        noise_frequency=120.0,
    )


class FakeSource:
    """Returns queued batches (or raises queued errors) in order."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        outcome = self.outcomes.pop(0) if self.outcomes else []
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class RecordingTarget:
    def __init__(self):
        self.status_calls = []
        self.chart_calls = 0

    def render_status(self, result, visibility):
        self.status_calls.append((dict(result.tiers), dict(visibility)))

    def render_charts(self, state):
        self.chart_calls += 1


def make_controller(source, store=None, **kwargs):
    kwargs.setdefault("known_ids", [A, B])
    kwargs.setdefault("clock", FakeClock())
    return DashboardController(source, store if store is not None else MemoryStore(), **kwargs)


class TestMount:
    """Test mounting."""

    def test_mount_renders_snapshot_without_fetch(self):
        """Test the first render uses the stored snapshot only."""
        source = FakeSource()
        store = MemoryStore({StoreKeys.STATUS_LIGHTS: {A: [1, 0], B: [0]}})
        target = RecordingTarget()
        controller = make_controller(source, store, render_target=target)

        result = controller.mount()

        assert source.calls == 0
        assert result.tiers == {A: SeverityTier.CRITICAL, B: SeverityTier.NORMAL}
        assert result.sources[A] == TierSource.SNAPSHOT
        assert len(target.status_calls) == 1
        assert target.chart_calls == 1

    def test_tick_requires_mount(self):
        """Test nothing is polled before mount."""
        source = FakeSource([record(A, 0)])
        controller = make_controller(source)

        assert controller.tick() is False
        assert source.calls == 0


class TestTick:
    """Test rerun-driven polling."""

    def setup_method(self):
        """Set up test fixtures."""
        self.clock = FakeClock(1000.0)
        self.source = FakeSource([record(A, 1)], [record(B, 1), record(B, 1)])
        self.store = MemoryStore()
        self.controller = make_controller(
            self.source, self.store, clock=self.clock, poll_interval_seconds=10.0
        )
        self.controller.mount()

    def test_first_tick_polls(self):
        """Test the first tick after mount polls immediately."""
        assert self.controller.tick() is True
        assert self.source.calls == 1
        assert self.controller.state.result.tiers[A] == SeverityTier.CRITICAL

    def test_polls_once_per_interval(self):
        """Test ticks inside the interval do not poll."""
        self.controller.tick()
        self.clock.now += 5.0
        assert self.controller.tick() is False
        assert self.source.calls == 1

        self.clock.now += 5.0
        assert self.controller.tick() is True
        assert self.source.calls == 2

    def test_snapshot_accumulates(self):
        """Test ids missing from a later poll keep their last known labels."""
        self.controller.tick()
        self.clock.now += 10.0
        self.controller.tick()

        assert self.store.get(StoreKeys.STATUS_LIGHTS) == {A: [1], B: [1, 1]}
        assert self.controller.state.result.sources[A] == TierSource.SNAPSHOT

    def test_failure_keeps_state(self):
        """Test a failed poll keeps the displayed statuses."""
        self.source.outcomes.insert(1, NetworkFailure("refused"))
        self.controller.tick()
        before = self.controller.state.result

        self.clock.now += 10.0
        assert self.controller.tick() is False
        assert self.controller.state.result is before
        assert self.controller.is_stale()

    def test_parse_failure_keeps_state(self):
        """Test a bad envelope is treated like any other failed poll."""
        self.source.outcomes.insert(0, ParseFailure("bad body"))

        assert self.controller.tick() is False
        assert self.controller.state.last_error.kind == "parse"

    def test_visibility_follows_clock(self):
        """Test alerting markers blink with the injected clock."""
        self.controller.tick()

        self.clock.now = 1000.0
        assert self.controller.visibility() == {A: True, B: True}
        self.clock.now = 1000.5
        assert self.controller.visibility() == {A: False, B: True}


class TestUnmount:
    """Test teardown."""

    def test_unmount_persists_and_closes(self):
        """Test unmount saves state and releases the source."""
        closed = []
        store = MemoryStore()
        target = RecordingTarget()
        controller = make_controller(
            FakeSource([record(A, 2)]), store,
            render_target=target, on_close=lambda: closed.append(True)
        )
        controller.mount()
        controller.poll_once()
        controller.state.set_display_option("Machine_1", "daily")

        controller.unmount()

        assert closed == [True]
        assert controller.render_target is None
        assert store.get(StoreKeys.STATUS_LIGHTS) == {A: [2]}
        assert store.get(StoreKeys.DISPLAY_OPTIONS)["Machine_1"] == "daily"

    def test_no_polling_after_unmount(self):
        """Test ticks after unmount do nothing."""
        source = FakeSource()
        controller = make_controller(source)
        controller.mount()
        controller.unmount()

        assert controller.tick() is False
        assert source.calls == 0

    def test_late_result_dropped(self):
        """Test a result for an old generation is not applied."""
        controller = make_controller(FakeSource())
        controller.mount()
        old_generation = controller._generation
        controller.unmount()
        controller.mount()

        applied = controller._apply([record(A, 1)], old_generation, 2000.0)

        assert applied is False
        assert controller.state.last_success_at is None


class TestEventLoop:
    """Test asyncio mode."""

    def test_start_polls_and_stop_cancels(self):
        """Test start runs the poll task and stop tears both tasks down."""
        source = FakeSource([record(A, 1)])
        controller = DashboardController(
            source, MemoryStore(), known_ids=[A, B], poll_interval_seconds=60.0
        )

        async def scenario():
            controller.start()
            assert controller.running
            for _ in range(200):
                if controller.state.last_success_at is not None:
                    break
                await asyncio.sleep(0.01)
            await controller.stop()

        asyncio.run(scenario())

        assert source.calls == 1
        assert controller.state.result.tiers[A] == SeverityTier.CRITICAL
        assert not controller.running
        assert not controller.mounted

    def test_in_flight_poll_discarded_after_stop(self):
        """Test a request still running at stop never updates state."""
        release = threading.Event()
        started = threading.Event()

        def slow_source():
            started.set()
            release.wait(timeout=5)
            return [record(A, 1)]

        controller = DashboardController(
            slow_source, MemoryStore(), known_ids=[A, B], poll_interval_seconds=60.0
        )

        async def scenario():
            controller.start()
            for _ in range(200):
                if started.is_set():
                    break
                await asyncio.sleep(0.01)
            await controller.stop()
            release.set()
            await asyncio.sleep(0.05)

        asyncio.run(scenario())

        assert controller.state.last_success_at is None
        assert controller.state.result.tiers[A] == SeverityTier.NORMAL


class FailingStore(MemoryStore):
    """Store whose writes always fail, as on a full or read-only disk."""

    def set(self, key, value):
        raise OSError("Read-only file system")


class TestStoreFailure:
    """Test polling when the local store cannot be written."""

    def test_tick_succeeds_without_persistence(self):
        """Test a poll still classifies and renders when saving fails."""
        target = RecordingTarget()
        controller = make_controller(FakeSource([record(A, 1)]), FailingStore(), render_target=target)
        controller.mount()

        assert controller.tick() is True
        assert controller.state.last_error is None
        assert controller.state.result.tiers[A] == SeverityTier.CRITICAL
        assert target.status_calls[-1][0][A] == SeverityTier.CRITICAL

    def test_poll_task_survives_failed_writes(self):
        """Test the asyncio poll task keeps polling while every write fails."""
        source = FakeSource([record(A, 1)], [record(A, 0)])
        controller = DashboardController(
            source, FailingStore(), known_ids=[A, B], poll_interval_seconds=0.05
        )
        alive = []

        async def scenario():
            controller.start()
            await asyncio.sleep(0.3)
            alive.append(all(not task.done() for task in controller._tasks))
            await controller.stop()

        asyncio.run(scenario())

        assert alive == [True]
        assert source.calls >= 2
        assert controller.state.last_success_at is not None
