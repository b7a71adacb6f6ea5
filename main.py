"""ArtistPulse entry point.

Bootstrap and glue only; the engine lives in ``artistpulse``.

Responsibilities:
    1. Parse target identifiers from the command line
    2. Load configuration and initialize logging (fail-fast on error)
    3. Run the batch and export its result
    4. Map fatal errors to exit codes

Usage:
    python main.py 0htlZDCG9I8LSENteF1TyQ 1Xyo4u8uXC1ZmMpatF05PJ
    python main.py --pause 0htlZDCG9I8LSENteF1TyQ
"""

import argparse
import asyncio
import signal
import sys
from typing import NoReturn

from loguru import logger

from config.settings import GlobalConfig, get_config
from artistpulse.exceptions import (
    ArtistPulseError,
    BatchError,
    LoggingInitializationError,
    SessionError,
)
from artistpulse.logger import configure_logging
from artistpulse.orchestrator import BatchOrchestrator
from artistpulse.reporter import ReportGenerator


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Scrape audience insights for a batch of artist identifiers",
    )
    parser.add_argument("artist_ids", nargs="*", help="Artist identifiers, processed in order")
    parser.add_argument(
        "--pause",
        action="store_true",
        help="Pause after each navigation for manual inspection",
    )
    parser.add_argument(
        "--no-export",
        action="store_true",
        help="Skip writing JSON/Excel exports",
    )
    return parser.parse_args(argv)


def _validate_startup_requirements(config: GlobalConfig) -> None:
    """Make sure the export directory is usable before launching a browser.

    Raises:
        SystemExit: If the output directory cannot be created.
    """
    try:
        config.output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.critical(
            "Failed to create output directory",
            output_dir=str(config.output_dir),
            error=str(exc),
        )
        sys.exit(1)

    logger.debug(
        "Startup validation complete",
        output_dir=str(config.output_dir),
        target_base_url=config.target_base_url,
    )


def _install_cancel_handlers(cancel_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, cancel_event.set)
        except (NotImplementedError, RuntimeError):
            # Platform without loop signal support: Ctrl+C raises KeyboardInterrupt instead.
            return


async def _run_pipeline(
    config: GlobalConfig,
    artist_ids: list[str],
    enable_pause: bool = False,
    export: bool = True,
) -> int:
    """Run one batch and export it.

    Returns:
        Exit code (0 for success).
    """
    cancel_event = asyncio.Event()
    _install_cancel_handlers(cancel_event)

    logger.info(
        "Pipeline execution started",
        app_name=config.app_name,
        environment=config.environment,
        targets=len(artist_ids),
    )

    orchestrator = BatchOrchestrator(config)
    result = await orchestrator.run(artist_ids, enable_pause=enable_pause, cancel_event=cancel_event)

    for outcome in result.results:
        if outcome.status == "success":
            logger.info(
                "Artist result",
                artist_id=outcome.target_id,
                artist_name=outcome.record.artist_name,
                monthly_listeners=outcome.record.monthly_listeners,
                followers=outcome.record.followers,
            )
        else:
            logger.warning("Artist failed", artist_id=outcome.target_id, error=outcome.error)

    if export and result.results:
        reports = ReportGenerator(config).generate_all(result)
        logger.info(
            "Exports written",
            json_path=str(reports["json"]),
            excel_path=str(reports["excel"]),
        )
    elif not result.results:
        logger.warning("No targets processed - skipping export")

    logger.info(
        "Pipeline execution completed",
        succeeded=result.succeeded,
        failed=result.failed,
        total_duration_sec=result.total_duration_sec,
        cancelled=result.cancelled,
    )
    return 0


def _handle_fatal_error(exc: Exception) -> NoReturn:
    """Log a fatal error and exit with the matching code."""
    if isinstance(exc, SessionError):
        logger.critical("Browser session could not be started", reason=exc.reason)
        sys.exit(2)

    if isinstance(exc, BatchError):
        logger.critical(
            "Batch aborted",
            reason=exc.reason,
            completed_targets=exc.completed,
        )
        sys.exit(2)

    if isinstance(exc, ArtistPulseError):
        logger.critical(
            "Fatal application error",
            error_type=type(exc).__name__,
            message=exc.message,
            context=exc.context,
        )
        sys.exit(1)

    logger.exception("Unexpected fatal error", error=str(exc))
    sys.exit(1)


def main(argv: list[str] | None = None) -> int:
    """Application entry point.

    Returns:
        Exit code (0 success, 1 configuration or unexpected error,
        2 batch aborted, 130 interrupted).
    """
    args = _parse_args(argv)

    if not args.artist_ids:
        print("ERROR: at least one artist identifier is required", file=sys.stderr)
        return 1

    try:
        config = get_config()
    except Exception as exc:
        print(f"FATAL: Configuration loading failed: {exc}", file=sys.stderr)
        return 1

    try:
        configure_logging(config)
    except LoggingInitializationError as exc:
        print(f"FATAL: {exc}", file=sys.stderr)
        return 1

    _validate_startup_requirements(config)

    try:
        return asyncio.run(
            _run_pipeline(
                config,
                args.artist_ids,
                enable_pause=args.pause,
                export=not args.no_export,
            )
        )
    except KeyboardInterrupt:
        logger.warning("Pipeline interrupted by user (Ctrl+C)")
        return 130
    except Exception as exc:
        _handle_fatal_error(exc)


if __name__ == "__main__":
    sys.exit(main())
