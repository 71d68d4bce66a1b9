"""Caller-driven polling for asynchronous server-side deletions.

GitLab deletes groups and projects in the background, and on instances with
delayed deletion it only marks them (``marked_for_deletion_on``) until a purge
date. A successful DELETE therefore says nothing about what the next search
returns. ``wait_until_deleted`` polls a search until it reaches one of the
terminal states:

- no results, or
- exactly one result, and it carries the deletion marker.

Anything else (including several results with mixed markers) keeps polling
until the deadline, after which ``DeadlineExceededError`` is raised.

"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from typing import TypeVar

from gitlab_client.exceptions import DeadlineExceededError, NotFoundError

T = TypeVar("T")

logger = logging.getLogger(__name__)

# Lower bound for the per-search time budget handed to ``search``
MIN_SEARCH_TIMEOUT = 1.0


def is_deletion_confirmed(results: list[T], is_marked: Callable[[T], bool]) -> bool:
    """Check whether a search result is a terminal "deleted" state."""
    if not results:
        return True
    return len(results) == 1 and is_marked(results[0])


def wait_until_deleted(
    search: Callable[[float], Iterable[T]],
    *,
    is_marked: Callable[[T], bool],
    timeout: float = 45.0,
    poll_interval: float = 1.0,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> list[T]:
    """Poll ``search`` until the resource is gone or marked for deletion.

    ``search`` receives the seconds left before the deadline (never less than
    ``MIN_SEARCH_TIMEOUT``) and should use it as its request timeout, so a
    slow search cannot run far past the deadline.

    Args:
        search: Called once per poll with its time budget; returns the
            current matching resources.
        is_marked: Tells whether a resource carries the soft-delete marker.
        timeout: Seconds to keep polling.
        poll_interval: Seconds to sleep between polls.
        clock: Monotonic time source.
        sleep: Sleep function.

    Returns:
        The terminal result: an empty list, or a single marked resource.

    Raises:
        DeadlineExceededError: If no terminal state is seen within ``timeout``.
            ``last_result`` holds the last observed results.

    Example:
        >>> client.groups.delete(group.id)
        >>> wait_until_deleted(
        ...     lambda remaining: client.groups.search(group.name),
        ...     is_marked=lambda g: g.is_marked_for_deletion,
        ... )

    """
    deadline = clock() + timeout
    attempt = 0
    results: list[T] = []

    while True:
        attempt += 1
        try:
            results = list(search(max(deadline - clock(), MIN_SEARCH_TIMEOUT)))
        except NotFoundError:
            results = []
        except DeadlineExceededError as e:
            if clock() < deadline:
                raise
            raise _not_deleted_in_time(timeout, results) from e

        if is_deletion_confirmed(results, is_marked):
            logger.info("Deletion confirmed after %d poll(s)", attempt)
            return results

        logger.info(
            "Deletion not confirmed yet (%d matching result(s), poll %d)",
            len(results),
            attempt,
        )

        remaining = deadline - clock()
        if remaining <= 0:
            raise _not_deleted_in_time(timeout, results)

        sleep(min(poll_interval, remaining))


def _not_deleted_in_time(timeout: float, last_result: list[T]) -> DeadlineExceededError:
    logger.warning("Resource was not deleted in the allotted time of %.0f seconds", timeout)
    return DeadlineExceededError(
        f"Resource was not deleted in the allotted time of {timeout:.0f} seconds",
        timeout=timeout,
        last_result=last_result,
    )
