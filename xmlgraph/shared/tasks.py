"""
asyncio task helpers shared by the ingestion and relationship pipelines.

Both pipelines have the same shape: many producer tasks feeding one consumer
through a Channel. ``run_phase`` enforces the completion barrier: wait for
every producer, close the channel, then wait for the consumer. A failing
consumer or producer cancels the rest of the phase and re-raises.
"""

import asyncio
import traceback
from typing import Coroutine, Sequence

from .channel import Channel
from .observability import get_logger

log = get_logger(__name__)


def log_task_exception_callback(task: asyncio.Task) -> None:
    """
    Done callback that logs exceptions immediately when a task completes.
    """
    try:
        exception = task.exception()
        if exception is not None:
            log.error(
                "asyncio_task_failed",
                task_name=task.get_name(),
                exception_type=type(exception).__name__,
                exception_str=str(exception),
                traceback="".join(
                    traceback.format_exception(
                        type(exception), exception, exception.__traceback__
                    )
                ),
            )
    except asyncio.CancelledError:
        log.debug("asyncio_task_cancelled", task_name=task.get_name())


def create_monitored_task(coro: Coroutine, name: str | None = None) -> asyncio.Task:
    """
    Create an asyncio task with automatic exception logging.

    Args:
        coro: Coroutine to wrap in a task
        name: Optional task name for logging

    Returns:
        Task with done callback attached
    """
    task = asyncio.create_task(coro, name=name)
    task.add_done_callback(log_task_exception_callback)
    return task


async def _cancel_and_drain(tasks: Sequence[asyncio.Task]) -> None:
    pending = [t for t in tasks if not t.done()]
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)


async def run_phase(
    producers: Sequence[asyncio.Task],
    consumer: asyncio.Task,
    channel: Channel,
) -> None:
    """
    Await all producers, close the channel, then await the consumer.

    Raises:
        Whatever the first failing producer or the consumer raised.
    """
    all_tasks = [*producers, consumer]
    producers_done = asyncio.gather(*producers)
    try:
        done, _ = await asyncio.wait(
            {producers_done, consumer}, return_when=asyncio.FIRST_COMPLETED
        )
        if consumer in done:
            # The consumer only returns on end-of-stream, which has not been sent.
            await consumer
            raise RuntimeError(
                f"consumer of channel {channel.name!r} exited before end-of-stream"
            )
        await producers_done
    except BaseException:
        await _cancel_and_drain(all_tasks)
        # Retrieve the gather result so asyncio does not warn about it.
        if producers_done.done() and not producers_done.cancelled():
            producers_done.exception()
        raise

    await channel.close()
    await consumer
