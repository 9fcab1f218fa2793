"""Backoff for idempotent API reads.

This module provides:
- backoff_delays: the wait before each retry
- retry_with_backoff: run a read, retrying on transport failures

Writes never go through here: retrying a create whose response was lost
would duplicate the resource.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 3
DEFAULT_INITIAL_BACKOFF = 0.5  # seconds
DEFAULT_MAX_BACKOFF = 8.0  # seconds
DEFAULT_BACKOFF_MULTIPLIER = 2.0


def backoff_delays(
    retries: int,
    initial: float = DEFAULT_INITIAL_BACKOFF,
    maximum: float = DEFAULT_MAX_BACKOFF,
    multiplier: float = DEFAULT_BACKOFF_MULTIPLIER,
) -> Iterator[float]:
    """Yield one wait per retry, growing geometrically up to a cap.

    Example:
        >>> list(backoff_delays(4, initial=1.0, maximum=3.0))
        [1.0, 2.0, 3.0, 3.0]
    """
    delay = initial
    for _ in range(retries):
        yield min(delay, maximum)
        delay *= multiplier


def retry_with_backoff(
    func: Callable[[], T],
    retry_on: tuple[type[Exception], ...],
    max_retries: int = DEFAULT_MAX_RETRIES,
    description: str = "request",
) -> T:
    """Call func, retrying when it raises one of retry_on.

    Args:
        func: Zero-argument callable performing the read.
        retry_on: Exception types worth retrying (transport failures).
        max_retries: Retries after the first attempt.
        description: What is attempted, for log lines (e.g. "GET /api/v1/cms/pages").

    Returns:
        Result of func.

    Raises:
        The last attempt's exception once retries are exhausted; any other
        exception immediately.
    """
    waits = backoff_delays(max_retries)
    attempt = 1
    while True:
        try:
            return func()
        except retry_on as e:
            wait = next(waits, None)
            if wait is None:
                logger.error(f"{description} failed after {attempt} attempts: {e}")
                raise
            logger.warning(
                f"{description} failed (attempt {attempt}): {e}. Retrying in {wait:.1f}s"
            )
            time.sleep(wait)
            attempt += 1
