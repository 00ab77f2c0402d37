"""
Logging setup and timing helpers for the flowwatch pipeline.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from flowwatch.config import LOG_LEVEL

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging once for a command-line run."""
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


class Timer:
    """
    Context manager that logs how long a pipeline phase took.

    >>> with Timer("Fraud analysis"):
    ...     analysis.print_collector_accounts()
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.elapsed: float = 0.0
        self._start: float = 0.0

    def __enter__(self) -> "Timer":
        logger.info(f"Starting {self.name}")
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.elapsed = time.perf_counter() - self._start
        if exc_type is None:
            logger.info(f"{self.name} completed in {self.elapsed:.2f}s")
        else:
            logger.warning(f"{self.name} failed after {self.elapsed:.2f}s")
