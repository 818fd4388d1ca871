"""Timed HTTP transport and the flow-level global deadline.

Example:
    from valentine_flows.core.network import fetch_with_timeout, with_global_timeout

    response = await fetch_with_timeout("POST", url, 4.0, json=payload)

    result = await with_global_timeout(
        lambda: run_steps(request),
        8.0,
        FlowError.from_code(FlowErrorCode.PROVIDER_TIMEOUT, "Flow timed out"),
    )
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Set, TypeVar

import httpx

from valentine_flows.core.errors.transport import RequestTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Tasks that lost a global-timeout race but were left running.
_abandoned_tasks: Set["asyncio.Task[Any]"] = set()


async def fetch_with_timeout(
    method: str,
    url: str,
    timeout: float,
    **request_kwargs: Any,
) -> httpx.Response:
    """Issue one HTTP request bounded by *timeout* seconds.

    The httpx timeout bounds each connect/read/write phase; the whole
    exchange, body included, is additionally bounded by ``asyncio.wait_for``
    so a server trickling bytes cannot outlive the deadline.

    The response is returned whatever its status code; callers decide what
    counts as failure.

    Raises:
        RequestTimeoutError: If the request did not complete within *timeout*.
        httpx.HTTPError: For other transport failures.
    """
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            return await asyncio.wait_for(
                client.request(method, url, **request_kwargs),
                timeout=timeout,
            )
    except (asyncio.TimeoutError, httpx.TimeoutException) as e:
        raise RequestTimeoutError(
            f"Request timed out after {timeout:.2f}s",
            timeout_seconds=timeout,
            url=url,
        ) from e


def _log_abandoned_outcome(task: "asyncio.Task[Any]") -> None:
    _abandoned_tasks.discard(task)
    if task.cancelled():
        logger.debug("Abandoned flow task was cancelled")
        return
    error = task.exception()
    if error is not None:
        logger.debug("Abandoned flow task failed after deadline: %s", error)
    else:
        logger.debug("Abandoned flow task completed after deadline")


def abandoned_task_count() -> int:
    """Return how many timed-out operations are still running."""
    return len(_abandoned_tasks)


async def with_global_timeout(
    operation: Callable[[], Awaitable[T]],
    timeout: float,
    timeout_error: BaseException,
    *,
    cancel_on_timeout: bool = False,
) -> T:
    """Race *operation* against a deadline of *timeout* seconds.

    If the operation settles first, its result is returned or its exception
    re-raised unchanged. If the deadline fires first, *timeout_error* is
    raised. The losing operation keeps running unless *cancel_on_timeout* is
    set; side effects it already triggered are never rolled back.

    Args:
        operation: Zero-argument async callable producing the flow result.
        timeout: Deadline in seconds.
        timeout_error: Exception raised when the deadline fires first.
        cancel_on_timeout: Cancel the operation when the deadline fires.

    Returns:
        The operation's result.
    """
    task: "asyncio.Task[T]" = asyncio.ensure_future(operation())
    try:
        done, _ = await asyncio.wait({task}, timeout=timeout)
    except asyncio.CancelledError:
        task.cancel()
        raise

    if task in done:
        return task.result()

    if cancel_on_timeout:
        task.cancel()
    else:
        _abandoned_tasks.add(task)
        task.add_done_callback(_log_abandoned_outcome)
    logger.debug("Global deadline of %.2fs reached", timeout)
    raise timeout_error
