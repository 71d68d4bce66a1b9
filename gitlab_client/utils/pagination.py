"""Pagination utilities for GitLab API responses.

GitLab paginates list endpoints with ``page`` and ``per_page`` query
parameters and reports position in response headers::

    X-Page: 2
    X-Per-Page: 20
    X-Next-Page: 3          (empty on the last page)
    X-Prev-Page: 1
    X-Total: 57             (omitted for very large collections)
    X-Total-Pages: 3
    Link: <...page=3...>; rel="next", <...page=1...>; rel="first", ...

Pagination Patterns:
    1. paginate(): lazy iteration that fetches one page at a time
    2. PaginatedResponse: manual page-by-page control
    3. collect_all(): convenience method for small datasets

"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)

# Matches: <url>; rel="relation"
LINK_PATTERN = re.compile(r'<([^>]+)>;\s*rel="([^"]+)"')


@dataclass
class LinkInfo:
    """Parsed pagination links from the Link header."""

    next_url: str | None = None
    prev_url: str | None = None
    first_url: str | None = None
    last_url: str | None = None

    @property
    def has_next(self) -> bool:
        """Check if there's a next page."""
        return self.next_url is not None

    @property
    def has_prev(self) -> bool:
        """Check if there's a previous page."""
        return self.prev_url is not None


def parse_link_header(link_header: str | None) -> LinkInfo:
    """Parse the Link header into structured data.

    Example:
        >>> header = '<https://gitlab.com/api/v4/groups?page=2>; rel="next"'
        >>> parse_link_header(header).next_url
        'https://gitlab.com/api/v4/groups?page=2'

    """
    if not link_header:
        return LinkInfo()

    links = LinkInfo()

    for match in LINK_PATTERN.finditer(link_header):
        url, rel = match.groups()
        if rel == "next":
            links.next_url = url
        elif rel == "prev":
            links.prev_url = url
        elif rel == "first":
            links.first_url = url
        elif rel == "last":
            links.last_url = url

    return links


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is None:
        value = headers.get(name.lower())
    return value


def _int_header(headers: Mapping[str, str], name: str) -> int | None:
    value = _header(headers, name)
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError:
        return None


def has_next_page(headers: Mapping[str, str]) -> bool | None:
    """Read the server's explicit "more pages" signal.

    Returns:
        True or False when ``X-Next-Page`` or ``Link`` say so, None when the
        response carries no pagination headers at all.

    """
    next_page = _header(headers, "X-Next-Page")
    if next_page is not None:
        return bool(next_page.strip())

    link = _header(headers, "Link")
    if link is not None:
        return parse_link_header(link).has_next

    return None


@dataclass
class PaginatedResponse(Generic[T]):
    """A single page of results with navigation capabilities.

    Attributes:
        items: The items on the current page.
        page: Current page number.
        per_page: Items per page.
        total_count: Total items, when GitLab reports ``X-Total``.
        total_pages: Total pages, when GitLab reports ``X-Total-Pages``.
        next_page: Next page number, None on the last page.
        prev_page: Previous page number, None on the first page.

    Example:
        >>> page = client.groups.get_page(GroupQuery(owned=True))
        >>> for group in page.items:
        ...     print(group.full_path)
        >>> if page.has_next:
        ...     page = page.fetch_next()

    """

    items: list[T]
    page: int = 1
    per_page: int = 20
    total_count: int | None = None
    total_pages: int | None = None
    next_page: int | None = None
    prev_page: int | None = None
    _fetch_page: Callable[[int], PaginatedResponse[T]] | None = field(default=None, repr=False)

    @property
    def has_next(self) -> bool:
        """Check if there's a next page."""
        return self.next_page is not None

    @property
    def has_prev(self) -> bool:
        """Check if there's a previous page."""
        return self.prev_page is not None

    def fetch_next(self) -> PaginatedResponse[T] | None:
        """Fetch the next page of results.

        Returns:
            Next page, or None if no next page.

        Raises:
            RuntimeError: If no fetch function is configured.

        """
        if self.next_page is None:
            return None

        if self._fetch_page is None:
            raise RuntimeError("Pagination fetch function not configured")

        return self._fetch_page(self.next_page)

    def fetch_prev(self) -> PaginatedResponse[T] | None:
        """Fetch the previous page of results, or None on the first page."""
        if self.prev_page is None or self._fetch_page is None:
            return None
        return self._fetch_page(self.prev_page)

    def __len__(self) -> int:
        """Return the number of items on this page."""
        return len(self.items)

    def __iter__(self) -> Iterator[T]:
        """Iterate over items on this page."""
        return iter(self.items)


def paginate(
    fetch_func: Callable[[int, int], tuple[list[T], Mapping[str, str]]],
    per_page: int = 20,
) -> Iterator[T]:
    """Lazily iterate over every item of a paginated endpoint.

    Nothing is fetched until the first item is requested, and page ``k + 1``
    is fetched only once every item of page ``k`` has been yielded. Items keep
    the server's order within a page, and pages are walked in ascending order.

    Iteration stops on an empty page, on a page shorter than ``per_page``, or
    when the server's headers say there is no next page. A failed page fetch
    raises from the ``next()`` call that needed it.

    Args:
        fetch_func: Function taking ``(page, per_page)`` and returning an
            ``(items, headers)`` tuple.
        per_page: Items requested per page.

    Yields:
        Individual items from all pages.

    Example:
        >>> for group in paginate(lambda p, pp: fetch_groups(p, pp), per_page=50):
        ...     print(group.name)
        ...     if group.name == "target":
        ...         break  # No further pages are requested

    """
    page = 1

    while True:
        logger.debug("Fetching page %d (per_page=%d)", page, per_page)
        items, headers = fetch_func(page, per_page)

        if not items:
            return

        yield from items

        if len(items) < per_page:
            return

        more = has_next_page(headers)
        if more is False:
            return

        page = _int_header(headers, "X-Next-Page") or page + 1


def collect_all(
    fetch_func: Callable[[int, int], tuple[list[T], Mapping[str, str]]],
    per_page: int = 100,
    max_items: int | None = None,
) -> list[T]:
    """Collect all items from a paginated endpoint.

    Warning: This loads everything into memory. Use paginate()
    for large datasets.

    """
    all_items: list[T] = []

    for item in paginate(fetch_func, per_page=per_page):
        all_items.append(item)
        if max_items and len(all_items) >= max_items:
            break

    return all_items


def create_paginated_response(
    items: list[T],
    headers: Mapping[str, str],
    page: int,
    per_page: int,
    fetch_page: Callable[[int], PaginatedResponse[T]] | None = None,
) -> PaginatedResponse[T]:
    """Create a PaginatedResponse from raw API data.

    When the server omits ``X-Next-Page``, a full page is assumed to have a
    successor and a short page is treated as the last one.

    """
    more = has_next_page(headers)
    next_page = _int_header(headers, "X-Next-Page")
    if next_page is None and more is not False and len(items) >= per_page > 0:
        next_page = page + 1

    prev_page = _int_header(headers, "X-Prev-Page")
    if prev_page is None and _header(headers, "X-Prev-Page") is None and page > 1:
        prev_page = page - 1

    return PaginatedResponse(
        items=items,
        page=_int_header(headers, "X-Page") or page,
        per_page=_int_header(headers, "X-Per-Page") or per_page,
        total_count=_int_header(headers, "X-Total"),
        total_pages=_int_header(headers, "X-Total-Pages"),
        next_page=next_page,
        prev_page=prev_page,
        _fetch_page=fetch_page,
    )
