"""Bounded awaiting for outbound calls."""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from core.exceptions import TransientNetworkError

T = TypeVar("T")


async def bounded(awaitable: Awaitable[T], timeout: float, operation: str) -> T:
    """Await ``awaitable`` for at most ``timeout`` seconds.

    Raises:
        TransientNetworkError: If the deadline passes first. The call is
            not retried.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as e:
        raise TransientNetworkError(
            f"{operation} timed out after {timeout:g}s",
            operation=operation,
        ) from e
