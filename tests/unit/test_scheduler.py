import threading
import pytest
from docfetch.fetch.base import FetchSuccess
from docfetch.services.refresh import RefreshInProgressError, RefreshOrchestrator, RefreshReport
from docfetch.services.scheduler import RefreshScheduler

URL = "https://docs.google.com/document/d/a/pub"

class FakeTimer:
    """Stands in for threading.Timer; fires only when the test says so"""

    created = []

    def __init__(self, interval, function, args=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.started = False
        self.cancelled = False
        self.daemon = False
        FakeTimer.created.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args)

class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

class CountingOrchestrator:
    def __init__(self, clock=None, pass_duration=0):
        self.passes = 0
        self.clock = clock
        self.pass_duration = pass_duration

    def refresh_all(self, entries=None):
        self.passes += 1
        if self.clock is not None:
            self.clock.now += self.pass_duration
        return RefreshReport()

def make_scheduler(orchestrator, clock, period=1800):
    FakeTimer.created = []
    return RefreshScheduler(orchestrator, period_seconds=period, clock=clock, timer_factory=FakeTimer)

class TestSchedulerLifecycle:
    """start/stop behaviour of the recurring trigger"""

    def test_start_arms_timer_for_one_period(self):
        clock = FakeClock()
        scheduler = make_scheduler(CountingOrchestrator(), clock)
        scheduler.start()

        assert scheduler.running
        assert len(FakeTimer.created) == 1
        timer = FakeTimer.created[0]
        assert timer.started and timer.daemon
        assert timer.interval == 1800
        assert scheduler.next_run_at == 1000.0 + 1800

    def test_start_twice_is_noop(self):
        scheduler = make_scheduler(CountingOrchestrator(), FakeClock())
        scheduler.start()
        scheduler.start()
        assert len(FakeTimer.created) == 1

    def test_start_with_custom_period(self):
        scheduler = make_scheduler(CountingOrchestrator(), FakeClock())
        scheduler.start(60)
        assert FakeTimer.created[0].interval == 60
        assert scheduler.period_seconds == 60

    def test_fire_runs_pass_and_rearms(self):
        clock = FakeClock()
        orchestrator = CountingOrchestrator()
        scheduler = make_scheduler(orchestrator, clock)
        scheduler.start()

        clock.now += 1800
        FakeTimer.created[0].fire()

        assert orchestrator.passes == 1
        assert len(FakeTimer.created) == 2
        assert scheduler.next_run_at == 1000.0 + 3600

    def test_stop_cancels_timer(self):
        orchestrator = CountingOrchestrator()
        scheduler = make_scheduler(orchestrator, FakeClock())
        scheduler.start()
        timer = FakeTimer.created[0]

        scheduler.stop()

        assert timer.cancelled
        assert not scheduler.running
        assert scheduler.next_run_at is None
        timer.fire()
        assert orchestrator.passes == 0
        assert len(FakeTimer.created) == 1

class TestTriggerNowAndRebase:
    """Manual passes restart the schedule"""

    def test_manual_trigger_runs_one_pass_and_rebases(self):
        clock = FakeClock()
        orchestrator = CountingOrchestrator(clock=clock, pass_duration=5)
        scheduler = make_scheduler(orchestrator, clock)
        scheduler.start()
        original = FakeTimer.created[0]

        clock.now += 600
        trigger_time = clock.now
        scheduler.trigger_now_and_rebase()

        assert orchestrator.passes == 1
        assert original.cancelled
        assert len(FakeTimer.created) == 2
        assert scheduler.next_run_at > trigger_time + 1800

    def test_stale_timer_does_not_fire_after_rebase(self):
        clock = FakeClock()
        orchestrator = CountingOrchestrator(clock=clock, pass_duration=1)
        scheduler = make_scheduler(orchestrator, clock)
        scheduler.start()
        original = FakeTimer.created[0]

        scheduler.trigger_now_and_rebase()
        original.fire()

        assert orchestrator.passes == 1
        assert len(FakeTimer.created) == 2

    def test_manual_trigger_when_stopped_does_not_arm(self):
        orchestrator = CountingOrchestrator()
        scheduler = make_scheduler(orchestrator, FakeClock())

        scheduler.trigger_now_and_rebase()

        assert orchestrator.passes == 1
        assert FakeTimer.created == []
        assert scheduler.next_run_at is None

    def test_manual_trigger_during_scheduled_pass_is_rejected(self, store):
        """A manual trigger while the automatic pass runs never overlaps it"""
        started = threading.Event()
        release = threading.Event()
        calls = []

        class BlockingFetcher:
            def fetch(self, url):
                calls.append(url)
                started.set()
                release.wait(5)
                return FetchSuccess("<p>x</p>")

        store.set_urls({1: URL})
        clock = FakeClock()
        orchestrator = RefreshOrchestrator(store, BlockingFetcher(), clock=lambda: "2025-10-27 12:00:00")
        scheduler = make_scheduler(orchestrator, clock)
        scheduler.start()

        worker = threading.Thread(target=FakeTimer.created[0].fire)
        worker.start()
        try:
            assert started.wait(5)
            with pytest.raises(RefreshInProgressError):
                scheduler.trigger_now_and_rebase()
        finally:
            release.set()
            worker.join(5)

        assert calls == [URL]
        assert scheduler.running
        assert scheduler.next_run_at == clock.now + 1800

class TestRealTimer:
    def test_threading_timer_fires(self):
        fired = threading.Event()

        class Orchestrator:
            def refresh_all(self, entries=None):
                fired.set()

        scheduler = RefreshScheduler(Orchestrator(), period_seconds=0.05)
        scheduler.start()
        try:
            assert fired.wait(2)
        finally:
            scheduler.stop()
