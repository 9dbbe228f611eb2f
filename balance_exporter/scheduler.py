"""Cron-driven execution engine with strict non-overlap.

A ``CycleScheduler`` fires on a six-field cron expression and invokes one work
unit per fire. While a previous invocation is still running, further fires
are skipped rather than queued. Errors raised by the work unit are logged and
the schedule keeps going.

Lifecycle::

    IDLE --start()--> RUNNING --stop()--> STOPPING --wait_for_stop()--> STOPPED
"""

from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from enum import StrEnum

from typing import Any, Protocol, runtime_checkable

import asyncio

from balance_exporter.helpers.cron import CronSchedule
from balance_exporter.helpers.errors import SchedulerStateError
from balance_exporter.helpers.logging import get_logger


logger = get_logger(__name__)


@runtime_checkable
class Job(Protocol):
    """A unit of work the scheduler can execute."""

    async def execute(self) -> Any:
        """Run one cycle of work."""
        ...


class Schedule(Protocol):
    """Computes fire times."""

    def next_fire_time(self, after: datetime | None = None) -> datetime:
        """Return the first fire time strictly after ``after``."""
        ...


type WorkUnit = Job | Callable[[], Awaitable[Any]]


class SchedulerState(StrEnum):
    """Lifecycle states of a CycleScheduler."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


class CycleScheduler:
    """Invoke a work unit on a cron cadence, never two invocations at once."""

    def __init__(
        self,
        schedule: str | Schedule,
        work: WorkUnit,
        *,
        name: str = "scheduler",
        on_start: Callable[[], None] | None = None,
    ) -> None:
        """Initialize the scheduler.

        The expression is only validated by ``start()``.

        Args:
            schedule: Six-field cron expression or a ready Schedule
            work: Job instance or parameterless coroutine function
            name: Name used in log lines
            on_start: Hook called synchronously by ``start()`` before arming
        """
        self.name = name
        self._schedule_source = schedule
        self._schedule: Schedule | None = None
        self._work = work
        self._on_start = on_start

        self._state = SchedulerState.IDLE
        self._timer_task: asyncio.Task[None] | None = None
        self._job_task: asyncio.Task[None] | None = None
        self._next_fire_time: datetime | None = None

        self.runs = 0
        self.skipped = 0

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_running_job(self) -> bool:
        """Whether a work unit invocation is in flight."""
        return self._job_task is not None and not self._job_task.done()

    @property
    def next_fire_time(self) -> datetime | None:
        return self._next_fire_time

    def start(self) -> None:
        """Validate the schedule, call ``on_start`` and arm the timer.

        Must be called from a running event loop.

        Raises:
            SchedulerStateError: If the scheduler is not idle
            ConfigInvalidError: If the cron expression is invalid
        """
        if self._state is not SchedulerState.IDLE:
            msg = f"{self.name}: start() called in state {self._state}"
            raise SchedulerStateError(msg)

        if isinstance(self._schedule_source, str):
            self._schedule = CronSchedule(self._schedule_source)
        else:
            self._schedule = self._schedule_source

        if self._on_start is not None:
            self._on_start()

        self._timer_task = asyncio.create_task(
            self._timer_loop(), name=f"{self.name}-timer"
        )
        self._state = SchedulerState.RUNNING
        logger.info("%s started (%s)", self.name, self._schedule)

    def stop(self) -> None:
        """Disarm the timer. An in-flight invocation is left to finish.

        Raises:
            SchedulerStateError: If the scheduler is not running
        """
        if self._state is not SchedulerState.RUNNING:
            msg = f"{self.name}: stop() called in state {self._state}"
            raise SchedulerStateError(msg)

        self._state = SchedulerState.STOPPING
        if self._timer_task is not None:
            self._timer_task.cancel()
        self._next_fire_time = None
        logger.info("%s stopping", self.name)

    async def wait_for_stop(self) -> None:
        """Wait for the in-flight invocation (if any) and reach STOPPED.

        Raises:
            SchedulerStateError: If ``stop()`` has not been called
        """
        if self._state is SchedulerState.STOPPED:
            return
        if self._state is not SchedulerState.STOPPING:
            msg = f"{self.name}: wait_for_stop() called in state {self._state}"
            raise SchedulerStateError(msg)

        pending = [
            task for task in (self._timer_task, self._job_task) if task is not None
        ]
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        self._timer_task = None
        self._job_task = None
        self._state = SchedulerState.STOPPED
        logger.info("%s stopped after %s runs", self.name, self.runs)

    async def _timer_loop(self) -> None:
        assert self._schedule is not None  # noqa: S101
        while self._state is SchedulerState.RUNNING:
            now = datetime.now(UTC)
            self._next_fire_time = self._schedule.next_fire_time(now)
            delay = (self._next_fire_time - now).total_seconds()
            await asyncio.sleep(max(delay, 0.0))

            if self._state is not SchedulerState.RUNNING:
                break
            self._fire()

    def _fire(self) -> None:
        if self.is_running_job:
            self.skipped += 1
            logger.warning(
                "%s: previous run still in progress, skipping this tick", self.name
            )
            return

        self._job_task = asyncio.create_task(self._invoke(), name=f"{self.name}-job")

    async def _invoke(self) -> None:
        try:
            if isinstance(self._work, Job):
                await self._work.execute()
            else:
                await self._work()
        except Exception:
            logger.exception("%s: work unit failed", self.name)
        finally:
            self.runs += 1


__all__ = [
    "CycleScheduler",
    "Job",
    "Schedule",
    "SchedulerState",
    "WorkUnit",
]
