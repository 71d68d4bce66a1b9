"""Base class for API endpoints.

This module provides the base class that every resource client inherits
from. It holds the transport and configuration (and nothing mutable), so a
single endpoint instance can be shared freely between threads: each call
builds its own request parameters.

"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any, TypeVar
from urllib.parse import quote

from pydantic import BaseModel

from gitlab_client.exceptions import NetworkError
from gitlab_client.utils.pagination import (
    PaginatedResponse,
    create_paginated_response,
    paginate,
)

if TYPE_CHECKING:
    from gitlab_client.config import ClientConfig
    from gitlab_client.queries import PaginatedQuery
    from gitlab_client.utils.http import HTTPClient

T = TypeVar("T", bound=BaseModel)


def encode_id(id_or_path: int | str) -> str:
    """Encode a numeric id or a full path for use in a URL segment.

    GitLab accepts ``group/subgroup`` paths wherever an id is expected, as
    long as the slashes are URL-encoded.

    Example:
        >>> encode_id("my-org/platform")
        'my-org%2Fplatform'

    """
    return quote(str(id_or_path), safe="")


def _snapshot(query: PaginatedQuery | None) -> PaginatedQuery | None:
    """Copy a query so later edits by the caller don't reach pending page fetches."""
    return None if query is None else query.model_copy(deep=True)


class BaseEndpoint:
    """Base class for API endpoint groups.

    Attributes:
        _http: The HTTP client for making requests.
        _config: Client configuration.

    """

    __slots__ = ("_config", "_http")

    def __init__(self, http: HTTPClient, config: ClientConfig) -> None:
        """Initialize the endpoint with HTTP client and config."""
        self._http = http
        self._config = config

    def _parse_response(self, data: Any, model: type[T]) -> T:
        """Parse a dictionary response into a Pydantic model."""
        if not isinstance(data, dict):
            raise NetworkError(f"Expected a JSON object, got {type(data).__name__}")
        return model.model_validate(data)

    def _parse_list_response(self, data: Any, model: type[T]) -> list[T]:
        """Parse a list of dictionaries into Pydantic models."""
        if not isinstance(data, list):
            raise NetworkError(f"Expected a JSON array, got {type(data).__name__}")
        return [model.model_validate(item) for item in data]

    def _page_size(self, query: PaginatedQuery | None) -> int:
        """Resolve the page size: the query's ``per_page`` or the configured default."""
        if query is not None and query.per_page is not None:
            return query.per_page
        return self._config.per_page

    def _build_list_params(
        self,
        query: PaginatedQuery | None,
        page: int,
        per_page: int,
    ) -> list[tuple[str, str]]:
        """Combine the query's filters with page parameters."""
        params = [] if query is None else [p for p in query.serialize() if p[0] != "per_page"]
        params.append(("page", str(page)))
        params.append(("per_page", str(per_page)))
        return params

    def _fetch_page(
        self,
        endpoint: str,
        model: type[T],
        query: PaginatedQuery | None,
        page: int,
        per_page: int,
        timeout: float | None = None,
    ) -> tuple[list[T], Mapping[str, str]]:
        """Fetch and parse one page of a list endpoint."""
        response = self._http.get(
            endpoint,
            params=self._build_list_params(query, page, per_page),
            timeout=timeout,
        )
        return self._parse_list_response(response.data, model), response.headers

    def _iter_pages(
        self,
        endpoint: str,
        model: type[T],
        query: PaginatedQuery | None = None,
        *,
        timeout: float | None = None,
    ) -> Iterator[T]:
        """Lazily iterate through all pages of a paginated endpoint.

        No request is made until the caller asks for the first item. Each call
        returns an independent iterator starting at page 1, using the query
        as it was when the call was made.

        Args:
            endpoint: API endpoint path.
            model: Pydantic model class for parsing items.
            query: Filters to apply; None means server defaults.
            timeout: Per-request timeout in seconds; None uses the config.

        Returns:
            An iterator of parsed model instances.

        """
        query = _snapshot(query)
        per_page = self._page_size(query)

        def fetch(page: int, size: int) -> tuple[list[T], Mapping[str, str]]:
            return self._fetch_page(endpoint, model, query, page, size, timeout)

        return paginate(fetch, per_page=per_page)

    def _get_paginated(
        self,
        endpoint: str,
        model: type[T],
        query: PaginatedQuery | None = None,
        page: int = 1,
    ) -> PaginatedResponse[T]:
        """Get a single page with pagination metadata.

        Args:
            endpoint: API endpoint path.
            model: Pydantic model class for parsing items.
            query: Filters to apply.
            page: Page number to fetch.

        Returns:
            PaginatedResponse with items and navigation.

        """
        query = _snapshot(query)
        per_page = self._page_size(query)
        items, headers = self._fetch_page(endpoint, model, query, page, per_page)

        def fetch_page(p: int) -> PaginatedResponse[T]:
            return self._get_paginated(endpoint, model, query, p)

        return create_paginated_response(
            items=items,
            headers=headers,
            page=page,
            per_page=per_page,
            fetch_page=fetch_page,
        )
