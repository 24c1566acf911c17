"""error reporting and logging setup."""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional
from rich.console import Console
from rich.logging import RichHandler

from .domain.errors import ReportedError

logger = logging.getLogger(__name__)


class ErrorSink(ABC):
    """receives failures that are handled without reaching the caller."""

    @abstractmethod
    def report(self, error: ReportedError) -> None:
        pass


class LoggingErrorSink(ErrorSink):
    """routes error reports to the standard logging tree."""

    def __init__(self, target: Optional[logging.Logger] = None):
        self.logger = target or logger

    def report(self, error: ReportedError) -> None:
        cause = error.cause
        exc_info = (type(cause), cause, cause.__traceback__) if cause is not None else None
        self.logger.error(
            f"[{error.kind}] {error.message}",
            exc_info=exc_info,
            extra={"error_kind": error.kind},
        )


class RecordingErrorSink(ErrorSink):
    """keeps reports in memory, for embedding hosts that poll for errors."""

    def __init__(self):
        self.reports: List[ReportedError] = []

    def report(self, error: ReportedError) -> None:
        self.reports.append(error)

    @property
    def kinds(self) -> List[str]:
        return [error.kind for error in self.reports]


def setup_logging(verbose: bool = False, console: Optional[Console] = None) -> None:
    """configure logging for the CLI. called once on startup."""
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=verbose,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    root = logging.getLogger()
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        root.addHandler(handler)
    root.setLevel(level)

    # keep transport chatter out of debug output
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
