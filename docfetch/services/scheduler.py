import threading
import time
from datetime import datetime, timezone
from typing import Callable, Optional
from loguru import logger
from docfetch.core.config import settings
from docfetch.services.refresh import RefreshInProgressError, RefreshOrchestrator, RefreshReport


class RefreshScheduler:
    """
    Fires RefreshOrchestrator.refresh_all on a fixed period.

    Each arming gets a generation number; a timer whose generation is no
    longer current does nothing when it fires, so cancelling or rebasing
    never lets a stale timer start an extra pass.
    """

    def __init__(
        self,
        orchestrator: RefreshOrchestrator,
        period_seconds: float = None,
        clock: Callable[[], float] = time.time,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ):
        self.orchestrator = orchestrator
        self.period_seconds = settings.REFRESH_INTERVAL_SECONDS if period_seconds is None else period_seconds
        self._clock = clock
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._generation = 0
        self._started = False
        self.next_run_at: Optional[float] = None

    @property
    def running(self) -> bool:
        return self._started

    def next_run_at_iso(self) -> Optional[str]:
        if self.next_run_at is None:
            return None
        return datetime.fromtimestamp(self.next_run_at, tz=timezone.utc).isoformat(timespec="seconds")

    def start(self, period_seconds: float = None):
        """Begin firing every period, starting from now; no-op if already started"""
        with self._lock:
            if period_seconds is not None:
                self.period_seconds = period_seconds
            if self._started:
                return
            self._started = True
            self._arm_locked()
        logger.info("Refresh scheduler started, period {}s", self.period_seconds)

    def stop(self):
        """Cancel the recurring trigger entirely"""
        with self._lock:
            self._started = False
            self._cancel_locked()
        logger.info("Refresh scheduler stopped")

    def trigger_now_and_rebase(self) -> RefreshReport:
        """
        Run one pass synchronously, then schedule the next automatic pass
        one full period after it finishes.

        Raises RefreshInProgressError if a pass is already running; the
        timer is rebased either way.
        """
        with self._lock:
            self._cancel_locked()
        try:
            return self.orchestrator.refresh_all()
        finally:
            with self._lock:
                if self._started and self._timer is None:
                    self._arm_locked()
            if self._started:
                logger.info("Refresh schedule rebased, next run at {}", self.next_run_at_iso())

    def _arm_locked(self):
        self._generation += 1
        self.next_run_at = self._clock() + self.period_seconds
        timer = self._timer_factory(self.period_seconds, self._on_timer, args=(self._generation,))
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _cancel_locked(self):
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None
        self.next_run_at = None

    def _on_timer(self, generation: int):
        with self._lock:
            if generation != self._generation:
                return
        try:
            self.orchestrator.refresh_all()
        except RefreshInProgressError:
            logger.warning("Scheduled refresh skipped: another pass is still running")
        except Exception:
            logger.exception("Scheduled refresh pass failed")
        finally:
            with self._lock:
                if self._started and generation == self._generation:
                    self._arm_locked()
