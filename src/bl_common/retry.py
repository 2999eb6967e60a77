"""Bounded retry for optimistic-concurrency conflicts.

Only StorageConflictError is retried; every other AppError is terminal for
the call and propagates on the first attempt.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from src.bl_common.errors import StorageConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_on_conflict(
    operation: Callable[[], Awaitable[T]],
    attempts: int,
    label: str,
) -> T:
    """Run operation up to `attempts` times while it raises StorageConflictError."""
    if attempts < 1:
        raise ValueError(f"attempts must be >= 1, got {attempts}")
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except StorageConflictError:
            if attempt == attempts:
                logger.error("%s: storage conflict persisted after %d attempts", label, attempts)
                raise
            logger.warning("%s: storage conflict, retrying (%d/%d)", label, attempt, attempts)
    raise AssertionError("unreachable")
