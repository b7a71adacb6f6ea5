"""Accumulation of per-target outcomes and batch timing.

The aggregator is the only owner of outcomes while a batch runs. It
hands out the final ``BatchResult`` only after the session has been
closed, so callers never observe a half-finished batch.
"""

import time
from contextlib import contextmanager
from typing import Any, Iterator

from artistpulse.logger import get_logger
from artistpulse.models import BatchResult, TargetOutcome

log = get_logger(__name__)


class TargetTimer:
    """Measures one target from navigation start to extraction end."""

    def __init__(self) -> None:
        self._started = time.perf_counter()
        self._stopped: float | None = None

    def stop(self) -> float:
        if self._stopped is None:
            self._stopped = time.perf_counter()
        return self.elapsed_ms

    @property
    def elapsed_ms(self) -> float:
        end = self._stopped if self._stopped is not None else time.perf_counter()
        return (end - self._started) * 1000


class ResultAggregator:
    """Collects outcomes in input order and stamps batch duration.

    Example:
        aggregator = ResultAggregator()
        aggregator.start()
        with aggregator.target_timer() as timer:
            ...
        aggregator.record(TargetFailure(target_id="abc", error="...", duration_ms=timer.elapsed_ms))
        aggregator.mark_session_closed()
        result = aggregator.finish()
    """

    def __init__(self) -> None:
        self._outcomes: list[TargetOutcome] = []
        self._started: float | None = None
        self._finished: float | None = None
        self._session_closed = False
        self._cancelled = False

    def start(self) -> None:
        """Mark the batch start; later calls keep the first timestamp."""
        if self._started is None:
            self._started = time.perf_counter()

    @contextmanager
    def target_timer(self) -> Iterator[TargetTimer]:
        """Time one target, starting the batch clock on first use."""
        self.start()
        timer = TargetTimer()
        try:
            yield timer
        finally:
            timer.stop()

    def record(self, outcome: TargetOutcome) -> None:
        """Append one outcome; outcomes are never modified afterwards."""
        if self._session_closed:
            raise RuntimeError("Cannot record outcomes after the session is closed")
        self._outcomes.append(outcome)
        log.debug(
            "Outcome recorded",
            target_id=outcome.target_id,
            status=outcome.status,
            position=len(self._outcomes),
        )

    def mark_cancelled(self) -> None:
        self._cancelled = True

    def mark_session_closed(self) -> None:
        """Stop the batch clock at session close."""
        if not self._session_closed:
            self._session_closed = True
            self._finished = time.perf_counter()

    @property
    def completed(self) -> int:
        return len(self._outcomes)

    @property
    def total_duration_ms(self) -> float:
        if self._started is None:
            return 0.0
        end = self._finished if self._finished is not None else time.perf_counter()
        return (end - self._started) * 1000

    def finish(self) -> BatchResult:
        """Build the immutable batch result.

        Raises:
            RuntimeError: If the session has not been closed yet.
        """
        if not self._session_closed:
            raise RuntimeError("Batch result is only available after the session is closed")

        return BatchResult(
            results=tuple(self._outcomes),
            total_duration_ms=self.total_duration_ms,
            cancelled=self._cancelled,
        )

    def get_summary(self) -> dict[str, Any]:
        """Counts and rates for the run summary log line."""
        succeeded = sum(1 for outcome in self._outcomes if outcome.status == "success")
        total = len(self._outcomes)
        rate = succeeded / total if total else 0.0
        return {
            "total_targets": total,
            "succeeded": succeeded,
            "failed": total - succeeded,
            "success_rate": f"{rate:.1%}",
            "cancelled": self._cancelled,
            "total_duration_ms": round(self.total_duration_ms, 2),
        }
