"""Bounded-concurrency execution of per-file work with order-preserving results."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, List, Optional, Sequence, TypeVar

from .config import DEFAULT_MAX_CONCURRENCY
from .logging import get_logger

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class TaskOutcome(Generic[R]):
    """Settled result of one unit of work."""

    index: int
    value: Optional[R] = None
    error: Optional[BaseException] = None
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ScheduleReport(Generic[R]):
    """All outcomes in input order plus timing for the whole batch."""

    outcomes: List[TaskOutcome[R]] = field(default_factory=list)
    elapsed: float = 0.0
    peak_in_flight: int = 0

    @property
    def results(self) -> List[Optional[R]]:
        return [outcome.value for outcome in self.outcomes]

    @property
    def failures(self) -> List[TaskOutcome[R]]:
        return [outcome for outcome in self.outcomes if not outcome.ok]


class BoundedScheduler:
    """Runs async workers with at most ``max_concurrency`` in flight.

    Outcomes are written into a pre-sized list by input index, so
    ``report.outcomes[i]`` always belongs to ``items[i]`` regardless of the
    order in which workers finish.
    """

    def __init__(self, max_concurrency: int = DEFAULT_MAX_CONCURRENCY) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.max_concurrency = max_concurrency
        self.logger = get_logger("scheduler")

    async def run(
        self,
        items: Sequence[T],
        worker: Callable[[T], Awaitable[R]],
    ) -> ScheduleReport[R]:
        started = time.perf_counter()
        semaphore = asyncio.Semaphore(self.max_concurrency)
        outcomes: List[Optional[TaskOutcome[R]]] = [None] * len(items)
        in_flight = 0
        peak = 0

        async def _run_one(index: int, item: T) -> None:
            nonlocal in_flight, peak
            async with semaphore:
                in_flight += 1
                peak = max(peak, in_flight)
                unit_started = time.perf_counter()
                try:
                    value = await worker(item)
                except Exception as exc:
                    self.logger.error("Scheduled task %d failed: %s", index, exc)
                    outcomes[index] = TaskOutcome(
                        index=index, error=exc, elapsed=time.perf_counter() - unit_started
                    )
                else:
                    outcomes[index] = TaskOutcome(
                        index=index, value=value, elapsed=time.perf_counter() - unit_started
                    )
                finally:
                    in_flight -= 1

        await asyncio.gather(*(_run_one(index, item) for index, item in enumerate(items)))

        report: ScheduleReport[R] = ScheduleReport(
            outcomes=[outcome for outcome in outcomes if outcome is not None],
            elapsed=time.perf_counter() - started,
            peak_in_flight=peak,
        )
        self.logger.debug(
            "Scheduled %d tasks (limit %d, peak %d) in %.2fs",
            len(items),
            self.max_concurrency,
            peak,
            report.elapsed,
        )
        return report


__all__ = ["BoundedScheduler", "ScheduleReport", "TaskOutcome"]
