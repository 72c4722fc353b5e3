"""
Fire-and-forget asyncio tasks that log their failures.

Decision notifications run in the background; a failing notifier must
never surface in the decision that triggered it.
"""

import asyncio
import logging

logger = logging.getLogger(__name__)

# Strong references; the event loop only keeps weak ones
_background_tasks: set[asyncio.Task] = set()


def safe_create_task(coro, *, name: str = None) -> asyncio.Task:
    """Schedule ``coro`` in the background, logging any exception it raises.

    Args:
        coro: The coroutine to schedule.
        name: Optional task name for log messages.

    Returns:
        The created ``asyncio.Task``.
    """
    task = asyncio.create_task(coro, name=name)
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    task.add_done_callback(_log_task_exception)
    return task


async def drain_background_tasks() -> None:
    """Wait for every background task scheduled so far to finish."""
    while _background_tasks:
        await asyncio.gather(*list(_background_tasks), return_exceptions=True)


def _log_task_exception(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc:
        logger.error(
            "Background task '%s' failed: %s",
            task.get_name(),
            exc,
            exc_info=exc,
        )
