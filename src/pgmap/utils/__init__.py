"""Utility functions for pgmap.

- Logging configuration, progress reporting and stage timing

Example:
    >>> from pgmap.utils import setup_logging
    >>> setup_logging(verbosity=1)
"""

from pgmap.utils.logging import ProgressLogger, Timer, get_logger, setup_logging

__all__ = [
    "ProgressLogger",
    "Timer",
    "get_logger",
    "setup_logging",
]
