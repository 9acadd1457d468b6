"""
Delayed task scheduling for the playback-launch loop.

``Scheduler`` is the small interface the playback service depends on.
``BackgroundTaskScheduler`` implements it on an APScheduler
BackgroundScheduler with a single worker thread, so scheduled steps never
run concurrently with each other.
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Any, Callable, Optional, Protocol

from apscheduler.events import (
    EVENT_JOB_ERROR,
    EVENT_JOB_EXECUTED,
    EVENT_JOB_MISSED,
)
from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.schedulers.background import BackgroundScheduler

logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    """Runs ``func(*args)`` once, ``delay_seconds`` from now."""

    def call_later(
        self, delay_seconds: float, func: Callable[..., Any], *args: Any
    ) -> Any:
        ...


def _on_job_executed(event):
    """Listener for successful job execution."""
    logger.debug(f"Job {event.job_id} executed successfully")


def _on_job_error(event):
    """Listener for failed job execution."""
    logger.error(
        f"Job {event.job_id} failed with exception: "
        f"{event.exception}",
        exc_info=event.traceback,
    )


def _on_job_missed(event):
    """Listener for missed job execution."""
    logger.warning(
        f"Job {event.job_id} missed its scheduled run time"
    )


class BackgroundTaskScheduler:
    """
    APScheduler-backed ``Scheduler``.

    The underlying BackgroundScheduler is started on first use and stopped
    with ``shutdown``. Jobs live in memory only; pending playback retries
    are dropped when the process exits.
    """

    def __init__(self, scheduler: Optional[BackgroundScheduler] = None):
        self._scheduler = scheduler or BackgroundScheduler(
            executors={"default": ThreadPoolExecutor(max_workers=1)},
            job_defaults={
                "coalesce": False,
                "max_instances": 1,
                "misfire_grace_time": 30,
            },
        )
        self._scheduler.add_listener(_on_job_executed, EVENT_JOB_EXECUTED)
        self._scheduler.add_listener(_on_job_error, EVENT_JOB_ERROR)
        self._scheduler.add_listener(_on_job_missed, EVENT_JOB_MISSED)

    @property
    def running(self) -> bool:
        return bool(self._scheduler.running)

    def start(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()
            logger.info("Playback scheduler started")

    def call_later(
        self, delay_seconds: float, func: Callable[..., Any], *args: Any
    ):
        """Register a one-shot job; returns the APScheduler job."""
        self.start()
        job_id = f"{getattr(func, '__name__', 'task')}_{uuid.uuid4().hex[:8]}"
        run_date = datetime.now() + timedelta(seconds=max(0.0, delay_seconds))
        job = self._scheduler.add_job(
            func=func,
            trigger="date",
            run_date=run_date,
            args=list(args),
            id=job_id,
        )
        logger.debug(f"Scheduled {job_id} in {delay_seconds}s")
        return job

    def shutdown(self, wait: bool = False) -> None:
        """Gracefully shut down the scheduler."""
        if self._scheduler.running:
            self._scheduler.shutdown(wait=wait)
            logger.info("Playback scheduler shut down")
