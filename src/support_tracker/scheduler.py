"""Refresh scheduler built on APScheduler."""

import threading
from datetime import timedelta
from typing import Callable, Optional

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED
from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.background import BackgroundScheduler

from .config.logging import get_logger, log_error
from .core.models import utcnow
from .core.refresher import PriceRefresher, RefreshResult

logger = get_logger(__name__)


def create_scheduler(max_workers: int = 2) -> BackgroundScheduler:
    """
    Create and configure a BackgroundScheduler.

    Jobs live in memory: the refresh job is a bound method and is rebuilt on
    every start, so there is nothing worth persisting.

    Args:
        max_workers: Size of the executor thread pool

    Returns:
        Configured BackgroundScheduler instance
    """
    scheduler = BackgroundScheduler(
        jobstores={"default": MemoryJobStore()},
        executors={"default": ThreadPoolExecutor(max_workers=max_workers)},
        job_defaults={
            "coalesce": True,
            "max_instances": 1,
            "misfire_grace_time": None,  # Late ticks still run
        },
        timezone="UTC",
    )

    scheduler.add_listener(job_executed_listener, EVENT_JOB_EXECUTED)
    scheduler.add_listener(job_error_listener, EVENT_JOB_ERROR)

    return scheduler


def job_executed_listener(event):
    """Log successful job executions."""
    logger.debug(
        "Job executed", job_id=event.job_id, scheduled_run_time=str(event.scheduled_run_time)
    )


def job_error_listener(event):
    """Log job execution errors."""
    log_error(event.exception, job_id=event.job_id, traceback=event.traceback)


class RefreshScheduler:
    """
    Drive PriceRefresher cycles on a fixed cadence without overlap.

    Each tick is a single-shot job. When a tick finishes it schedules the next
    one ``interval_seconds`` after its own start, or immediately if the cycle
    took longer than that, so two cycles never run at the same time.
    """

    def __init__(
        self,
        refresher: PriceRefresher,
        interval_seconds: float = 10.0,
        initial_delay_seconds: float = 5.0,
        scheduler: Optional[BackgroundScheduler] = None,
        scheduler_factory: Callable[[], BackgroundScheduler] = create_scheduler,
    ):
        self.refresher = refresher
        self.interval = timedelta(seconds=interval_seconds)
        self.initial_delay = timedelta(seconds=initial_delay_seconds)
        self.scheduler_factory = scheduler_factory
        self.scheduler = scheduler or scheduler_factory()
        self._shut_down = False
        self.last_result: Optional[RefreshResult] = None
        self.cycles_run = 0
        self._lock = threading.Lock()
        self._tick_lock = threading.Lock()
        self._job = None
        self._running = False
        self.logger = logger.bind(component="refresh_scheduler")

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Start the scheduler and queue the first tick after the initial delay."""
        with self._lock:
            if self._running:
                return
            if self._shut_down:
                # A shut-down executor never accepts jobs again
                self.scheduler = self.scheduler_factory()
                self._shut_down = False
            if not self.scheduler.running:
                self.scheduler.start()
            self._running = True
            self._schedule(self.initial_delay)

        self.logger.info(
            "Refresh scheduler started",
            interval_seconds=self.interval.total_seconds(),
            initial_delay_seconds=self.initial_delay.total_seconds(),
        )

    def stop(self, wait: bool = True) -> None:
        """Cancel the pending tick and shut the scheduler down."""
        with self._lock:
            if not self._running:
                return
            self._running = False
            self._shut_down = True
            self._cancel_pending()
            scheduler = self.scheduler

        if scheduler.running:
            scheduler.shutdown(wait=wait)
        self.logger.info("Refresh scheduler stopped")

    def trigger_now(self) -> bool:
        """
        Run a tick as soon as possible in place of the pending one.

        Returns False when the scheduler is stopped or a cycle is in progress.
        """
        with self._lock:
            if not self._running or self._tick_lock.locked():
                return False
            self._cancel_pending()
            self._schedule(timedelta(0))
        return True

    def tick(self) -> Optional[RefreshResult]:
        """Run one refresh cycle, then queue the next tick. Never raises."""
        if not self._tick_lock.acquire(blocking=False):
            self.logger.warning("Refresh cycle still running, skipping tick")
            return None

        started = utcnow()
        result = None
        try:
            result = self.refresher.run_cycle()
            self.last_result = result
            self.cycles_run += 1
        except Exception as e:
            self.logger.error("Refresh tick failed", error=str(e), exc_info=True)
        finally:
            self._tick_lock.release()

        with self._lock:
            if self._running:
                elapsed = utcnow() - started
                # Keep a single pending tick even after trigger_now races
                self._cancel_pending()
                self._schedule(max(self.interval - elapsed, timedelta(0)))

        return result

    def _schedule(self, delay: timedelta) -> None:
        self._job = self.scheduler.add_job(
            func=self.tick,
            trigger="date",
            run_date=utcnow() + delay,
            name="Support Price Refresh",
        )

    def _cancel_pending(self) -> None:
        if self._job is None:
            return
        try:
            self._job.remove()
        except JobLookupError:
            pass  # Already fired
        self._job = None

    def status(self) -> dict:
        """Snapshot of scheduler state for health reporting."""
        return {
            "running": self._running,
            "interval_seconds": self.interval.total_seconds(),
            "cycles_run": self.cycles_run,
            "last_result": self.last_result.as_dict() if self.last_result else None,
        }
