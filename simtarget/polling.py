"""Bounded polling for asynchronous environment state (daemon startup, device attach)."""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Awaitable, Callable

logger = logging.getLogger("simtarget.poll")

Condition = Callable[[], "bool | Awaitable[bool]"]


async def wait_for_condition(
    timeout: float,
    condition: Condition,
    interval: float = 0.5,
) -> bool:
    """Evaluate ``condition`` until it is truthy or ``timeout`` seconds pass.

    Both ``timeout`` and ``interval`` are in seconds (float), not milliseconds.

    ``condition`` may be a plain callable or a coroutine function. Sleeps
    ``interval`` seconds between evaluations without blocking the event loop.

    Never raises on timeout. Returns True if the condition was met and False
    if polling gave up; callers that need a hard failure raise their own error.
    Cancelling the awaiting task stops polling immediately.
    """
    begun_at = time.monotonic()
    end_at = begun_at + timeout

    while True:
        result = condition()
        if inspect.isawaitable(result):
            result = await result
        if result:
            return True

        now = time.monotonic()
        waited_ms = int((now - begun_at) * 1000)
        if now >= end_at:
            logger.debug("Condition unmet after %dms. Timing out.", waited_ms)
            return False

        logger.debug("Waited for %dms so far", waited_ms)
        await asyncio.sleep(interval)
