"""Custom exception hierarchy for ArtistPulse.

Errors are split by the scope they affect:

- batch scope (``BatchError``, ``SessionError``): nothing further can be
  serviced, the batch is aborted and the error reaches the caller;
- target scope (``NavigationError``, ``LocatorNotFoundError``): recorded as a
  failed outcome for that target, the batch continues;
- field scope (``FieldParseDefault``): never leaves the field extractor, the
  field's default value is used instead.

Target-scope errors expose ``reason``, the short text placed in the failed
outcome handed back to the caller.
"""

from datetime import UTC, datetime
from typing import Any


class ArtistPulseError(Exception):
    """Base exception for all ArtistPulse errors.

    Attributes:
        message: Human-readable error description.
        context: Optional dictionary with additional debugging information.
        timestamp: UTC timestamp when the exception was raised.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        self.message = message
        self.context = context or {}
        self.timestamp = datetime.now(UTC)
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format exception message with context for logging."""
        base = f"[{self.timestamp.isoformat()}] {self.message}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{base} | Context: {context_str}"
        return base


class BatchError(ArtistPulseError):
    """Raised when a batch cannot continue.

    The orchestrator closes the session before this error propagates,
    and no per-target outcomes are returned alongside it.
    """

    def __init__(self, reason: str, completed: int = 0) -> None:
        super().__init__(
            message=f"Batch aborted: {reason}",
            context={"reason": reason, "completed_targets": completed},
        )
        self.reason = reason
        self.completed = completed


class SessionError(BatchError):
    """Raised when the browser process or page cannot be started."""

    def __init__(self, reason: str, browser_type: str = "chromium") -> None:
        super().__init__(reason=f"failed to start {browser_type} browser: {reason}")
        self.browser_type = browser_type


class NavigationError(ArtistPulseError):
    """Raised when page navigation fails or times out.

    Recorded as a failed outcome for the target being processed.
    """

    def __init__(self, url: str, reason: str, status_code: int | None = None) -> None:
        super().__init__(
            message=f"Navigation to '{url}' failed: {reason}",
            context={"url": url, "reason": reason, "status_code": status_code},
        )
        self.url = url
        self.reason = reason
        self.status_code = status_code


class LocatorNotFoundError(ArtistPulseError):
    """Raised when no entry of a locator chain could be activated."""

    def __init__(self, chain_name: str, tried: int, reason: str = "activation target not found") -> None:
        super().__init__(
            message=f"Locator chain '{chain_name}' exhausted after {tried} locator(s)",
            context={"chain": chain_name, "tried": tried, "reason": reason},
        )
        self.chain_name = chain_name
        self.reason = reason


class FieldParseDefault(ArtistPulseError):
    """Signals that a field falls back to its default value.

    Raised by reads and parsers inside the field extractor and always
    caught there; it only ever surfaces as a logged diagnostic.
    """

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(
            message=f"Field '{field}' using default: {reason}",
            context={"field": field, "reason": reason},
        )
        self.field = field
        self.reason = reason


class ReportGenerationError(ArtistPulseError):
    """Raised when exporting a batch result fails."""

    def __init__(self, report_type: str, reason: str, output_path: str | None = None) -> None:
        super().__init__(
            message=f"Failed to generate {report_type} report: {reason}",
            context={"report_type": report_type, "reason": reason, "output_path": output_path},
        )


class LoggingInitializationError(ArtistPulseError):
    """Raised when the logging system fails to initialize.

    This is a startup-blocking error - the application cannot proceed
    without a functioning logging infrastructure.
    """

    def __init__(self, log_dir: str, reason: str) -> None:
        super().__init__(
            message=f"Failed to initialize logging at '{log_dir}': {reason}",
            context={"log_dir": log_dir, "reason": reason},
        )
