"""Fail-fast concurrent joins.

Example:
    extracts, payload = await gather_fail_fast(
        enrichment.enrich(links),
        generation.generate(system, user, DatePlanPayload),
    )
"""

import asyncio
import logging
from typing import Any, Awaitable, List

logger = logging.getLogger(__name__)


async def gather_fail_fast(*aws: Awaitable[Any]) -> List[Any]:
    """Run awaitables concurrently and return their results in order.

    All-or-nothing: the first exception cancels every sibling still running
    and is re-raised unchanged. Results of siblings that already finished
    are discarded.

    Args:
        *aws: Coroutines or futures to run.

    Returns:
        Results in the order the awaitables were given.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    if not tasks:
        return []

    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        raise

    if pending:
        for task in pending:
            task.cancel()
        # Let cancellations settle so no task outlives the join.
        await asyncio.wait(pending)
        for task in pending:
            if not task.cancelled():
                task.exception()

    # First failure in argument order.
    failures = [
        task.exception()
        for task in tasks
        if task in done and not task.cancelled() and task.exception() is not None
    ]
    if failures:
        logger.debug("Concurrent join failed, cancelled %d sibling(s)", len(pending))
        raise failures[0]

    return [task.result() for task in tasks]
