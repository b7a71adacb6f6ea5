"""Structured logging configuration using loguru.

Two sinks are installed:
- a colorized console sink for people watching a run;
- a rotating JSON-lines file sink, one object per record, carrying the
  keyword context each call site binds (target_id, locator, field, ...).

The log directory is checked for writability before any sink is added so
that a misconfigured deployment fails at startup rather than mid-batch.
"""

import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from loguru import logger

from config.settings import GlobalConfig, get_config
from artistpulse.exceptions import LoggingInitializationError


def _json_serializer(record: dict[str, Any]) -> str:
    """Render a loguru record as a single JSON line."""
    payload = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "module": record["name"],
        "function": record["function"],
        "line": record["line"],
    }

    exception = record["exception"]
    if exception is not None:
        payload["exception"] = {
            "type": exception.type.__name__ if exception.type else None,
            "value": str(exception.value) if exception.value else None,
        }

    context = {k: v for k, v in record["extra"].items() if k != "serialized"}
    if context:
        payload["context"] = context

    return json.dumps(payload, default=str) + "\n"


def _attach_serialized(record: dict[str, Any]) -> bool:
    record["extra"]["serialized"] = _json_serializer(record)
    return True


def _validate_log_directory(log_dir: Path) -> None:
    """Create the log directory and prove it is writable.

    Raises:
        LoggingInitializationError: If the directory cannot be used.
    """
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        probe = log_dir / ".write_test"
        probe.write_text("write_test")
        probe.unlink()
    except PermissionError as exc:
        raise LoggingInitializationError(
            log_dir=str(log_dir),
            reason=f"Permission denied: {exc}",
        ) from exc
    except OSError as exc:
        raise LoggingInitializationError(
            log_dir=str(log_dir),
            reason=f"OS error during directory validation: {exc}",
        ) from exc


def configure_logging(config: GlobalConfig | None = None) -> None:
    """Install console and JSON file sinks.

    Call once during bootstrap, before the batch starts.

    Args:
        config: Optional GlobalConfig instance. If None, uses singleton.

    Raises:
        LoggingInitializationError: If log directory validation fails.
    """
    if config is None:
        config = get_config()

    logger.remove()

    _validate_log_directory(config.log_dir)

    console_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level> | {extra}"
    )

    logger.add(
        sys.stderr,
        format=console_format,
        level=config.log_level,
        colorize=True,
        backtrace=config.debug,
        diagnose=config.debug,
    )

    logger.add(
        str(config.log_dir / "artistpulse_{time:YYYY-MM-DD}.json"),
        format="{extra[serialized]}",
        level=config.log_level,
        rotation=config.log_rotation,
        retention=config.log_retention,
        compression="gz",
        filter=_attach_serialized,
    )

    logger.info(
        "Logging infrastructure initialized",
        app_name=config.app_name,
        environment=config.environment,
        log_level=config.log_level,
        log_dir=str(config.log_dir),
    )


def get_logger(name: str) -> "logger":
    """Return the shared loguru logger bound with a component name.

    Example:
        >>> log = get_logger(__name__)
        >>> log.info("Target processed", target_id="0htlZDCG9I8LSENteF1TyQ")
    """
    return logger.bind(component=name)
