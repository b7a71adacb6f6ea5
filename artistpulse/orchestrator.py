"""Serial batch orchestration over one shared browser session.

A batch moves through ``IDLE -> SESSION_OPEN -> SESSION_CLOSED``. While the
session is open, targets are processed one at a time in input order:

    navigate -> activate -> settle -> extract -> record -> pace

Target-level errors become failed outcomes and the loop moves on. Anything
else (including a browser that died under a target) aborts the batch with
a single ``BatchError`` after the session has been closed.

Cancellation is cooperative: the optional event is checked only at the
top of the loop, so a target in progress always completes.
"""

import asyncio
from contextlib import AbstractAsyncContextManager
from enum import Enum
from typing import Callable, Sequence

from config.settings import GlobalConfig, get_config
from artistpulse.aggregator import ResultAggregator
from artistpulse.browser import SessionDriver
from artistpulse.exceptions import BatchError, LocatorNotFoundError, NavigationError
from artistpulse.logger import get_logger
from artistpulse.models import BatchResult, TargetFailure, TargetOutcome, TargetSuccess
from artistpulse.scraper import ArtistScraper, BaseTargetScraper

log = get_logger(__name__)

SessionFactory = Callable[[GlobalConfig], AbstractAsyncContextManager[SessionDriver]]


class BatchState(str, Enum):
    IDLE = "idle"
    SESSION_OPEN = "session_open"
    SESSION_CLOSED = "session_closed"


class BatchOrchestrator:
    """Runs a batch of target identifiers against one session.

    Attributes:
        config: GlobalConfig for pacing and the scraper's timings.
        scraper: Strategy performing the per-target pipeline.
        session_factory: Callable returning an async context manager that
            yields an open ``SessionDriver``; ``SessionDriver.create`` by
            default.
        state: Current batch state.

    Example:
        orchestrator = BatchOrchestrator(config)
        result = await orchestrator.run(["0htlZDCG9I8LSENteF1TyQ"])
        print(result.total_duration_sec)
    """

    def __init__(
        self,
        config: GlobalConfig | None = None,
        scraper: BaseTargetScraper | None = None,
        session_factory: SessionFactory | None = None,
    ) -> None:
        self.config = config or get_config()
        self.scraper = scraper or ArtistScraper(self.config)
        self.session_factory = session_factory or SessionDriver.create
        self.state = BatchState.IDLE

    async def run(
        self,
        target_ids: Sequence[str],
        enable_pause: bool = False,
        cancel_event: asyncio.Event | None = None,
    ) -> BatchResult:
        """Process every target in order and return the batch result.

        Args:
            target_ids: Identifiers to scrape; duplicates are scraped again.
            enable_pause: Add the diagnostic pause after each navigation.
            cancel_event: When set, stop before the next target and return
                the outcomes gathered so far.

        Raises:
            SessionError: If the browser cannot be started.
            BatchError: If the batch cannot continue.
        """
        aggregator = ResultAggregator()

        log.info(
            "Batch started",
            scraper=self.scraper.name,
            targets=len(target_ids),
            enable_pause=enable_pause,
        )

        try:
            async with self.session_factory(self.config) as session:
                self.state = BatchState.SESSION_OPEN
                await self._process_all(session, target_ids, aggregator, enable_pause, cancel_event)
        except BatchError:
            raise
        except Exception as exc:
            log.exception("Batch aborted by unexpected error", error=str(exc))
            raise BatchError(reason=str(exc), completed=aggregator.completed) from exc
        finally:
            self.state = BatchState.SESSION_CLOSED
            aggregator.mark_session_closed()

        result = aggregator.finish()
        log.info("Batch complete", **aggregator.get_summary())
        return result

    async def _process_all(
        self,
        session: SessionDriver,
        target_ids: Sequence[str],
        aggregator: ResultAggregator,
        enable_pause: bool,
        cancel_event: asyncio.Event | None,
    ) -> None:
        for position, target_id in enumerate(target_ids, start=1):
            if cancel_event is not None and cancel_event.is_set():
                log.warning(
                    "Batch cancelled",
                    completed=aggregator.completed,
                    remaining=len(target_ids) - aggregator.completed,
                )
                aggregator.mark_cancelled()
                return

            log.info("Processing target", target_id=target_id, position=position, total=len(target_ids))
            outcome = await self._process_target(session, target_id, aggregator, enable_pause)
            aggregator.record(outcome)

            if not session.is_connected:
                raise BatchError(
                    reason=f"browser disconnected while processing '{target_id}'",
                    completed=aggregator.completed,
                )

            await session.pause(self.config.pacing_delay_ms)

    async def _process_target(
        self,
        session: SessionDriver,
        target_id: str,
        aggregator: ResultAggregator,
        enable_pause: bool,
    ) -> TargetOutcome:
        with aggregator.target_timer() as timer:
            try:
                record = await self.scraper.scrape(session, target_id, enable_pause)
            except (NavigationError, LocatorNotFoundError) as exc:
                timer.stop()
                log.warning(
                    "Target failed",
                    target_id=target_id,
                    error_type=type(exc).__name__,
                    reason=exc.reason,
                )
                return TargetFailure(
                    target_id=target_id,
                    error=exc.reason,
                    duration_ms=timer.elapsed_ms,
                )

        log.info("Target scraped", target_id=target_id, duration_ms=round(timer.elapsed_ms, 2))
        return TargetSuccess(target_id=target_id, record=record, duration_ms=timer.elapsed_ms)
