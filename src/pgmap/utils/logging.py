"""Logging configuration for pgmap.

Every module logs through ``logging.getLogger(__name__)``; this module
configures the shared ``pgmap`` logger once, from the CLI.

Features:
    - Rich console output
    - Optional file log with full debug detail
    - Verbosity levels mapped from -v/-q flags
    - Periodic progress messages over references
    - Stage timing

Example:
    >>> from pgmap.utils.logging import setup_logging, Timer
    >>> setup_logging(verbosity=2)
    >>> with Timer("Scanning", logger):
    ...     pipeline.run()
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

# =============================================================================
# Constants
# =============================================================================

LOGGER_NAME = "pgmap"

# File log format
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Rich handler renders level and time itself
RICH_FORMAT = "%(message)s"

# Log levels by verbosity
VERBOSITY_LEVELS = {
    0: logging.WARNING,
    1: logging.INFO,
    2: logging.DEBUG,
}


# =============================================================================
# Setup Functions
# =============================================================================


def setup_logging(
    verbosity: int = 1,
    log_file: Path | str | None = None,
    use_rich: bool = True,
) -> logging.Logger:
    """Configure the ``pgmap`` logger.

    Args:
        verbosity: Verbosity level (0=warning, 1=info, 2=debug). Values
            above 2 are treated as debug, below 0 as warning.
        log_file: Optional file that receives every message at debug level.
        use_rich: Use rich for console output; plain stderr otherwise.

    Returns:
        The configured logger.
    """
    level = VERBOSITY_LEVELS[min(max(verbosity, 0), 2)]

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file is not None else level)
    logger.handlers.clear()

    if use_rich:
        console_handler: logging.Handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_time=False,
            show_path=False,
        )
        console_handler.setFormatter(logging.Formatter(RICH_FORMAT))
    else:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))

    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a module.

    Args:
        name: Module name (typically __name__).

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)


# =============================================================================
# Progress Logging
# =============================================================================


class ProgressLogger:
    """Periodic progress messages for long loops.

    Attributes:
        logger: The underlying logger.
        total: Total number of items.
        interval: Items between messages.

    Example:
        >>> progress = ProgressLogger(logger, total=len(references), description="Scanned")
        >>> for reference in references:
        ...     scan(reference)
        ...     progress.update()
        >>> progress.finish()
    """

    def __init__(
        self,
        logger: logging.Logger,
        total: int,
        interval: int = 100,
        description: str = "Processing",
    ) -> None:
        self.logger = logger
        self.total = total
        self.interval = max(1, interval)
        self.description = description
        self.count = 0

    def update(self, n: int = 1) -> None:
        """Advance the counter and log on every interval boundary.

        Args:
            n: Number of items completed.
        """
        before = self.count
        self.count += n
        crossed = self.count // self.interval > before // self.interval
        if crossed or self.count == self.total:
            pct = 100 * self.count / self.total if self.total > 0 else 100
            self.logger.info(f"{self.description}: {self.count}/{self.total} ({pct:.1f}%)")

    def finish(self) -> None:
        """Mark progress as complete."""
        self.logger.info(f"{self.description}: complete ({self.count}/{self.total})")


# =============================================================================
# Timing Utilities
# =============================================================================


class Timer:
    """Context manager for timing a stage.

    Example:
        >>> with Timer("Building automaton", logger):
        ...     automaton = PatternAutomaton(patterns)
        # Logs: "Building automaton completed in 0.12s"
    """

    def __init__(self, description: str, logger: logging.Logger | None = None) -> None:
        """Initialize timer.

        Args:
            description: Description of the stage.
            logger: Logger for the message (the ``pgmap`` logger if None).
        """
        self.description = description
        self.logger = logger or logging.getLogger(LOGGER_NAME)
        self.start_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> Timer:
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        self.elapsed = time.perf_counter() - self.start_time
        self.logger.info(f"{self.description} completed in {self.elapsed:.2f}s")
