"""
handlers/event_loop.py
----------------------
Shared plumbing for the cointip consumer loops: wait for the next queued
event or for the stop signal, whichever comes first.
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


async def next_event(queue: "asyncio.Queue[T]", stop: asyncio.Event) -> Optional[T]:
    """
    Wait for the next event on `queue`.

    Returns:
        The event, or None once `stop` is set. Pending events are abandoned.
    """
    if stop.is_set():
        return None

    get_task = asyncio.ensure_future(queue.get())
    stop_task = asyncio.ensure_future(stop.wait())
    try:
        await asyncio.wait({get_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        stop_task.cancel()
        if not get_task.done():
            get_task.cancel()

    if get_task.done() and not get_task.cancelled():
        return get_task.result()
    return None


async def consume(
    name: str,
    queue: "asyncio.Queue[T]",
    stop: asyncio.Event,
    handle: Callable[[T], Awaitable[None]],
) -> None:
    """Handle events one at a time until the stop signal is set."""
    logger.info(f"{name} loop started")
    while True:
        event = await next_event(queue, stop)
        if event is None:
            break
        try:
            await handle(event)
        except Exception as e:
            logger.exception(f"{name} loop failed handling {event!r}: {e}")
        finally:
            queue.task_done()
    logger.info(f"{name} loop stopped")
