"""HTTP client wrapper for the GitLab API.

This module provides a thin wrapper around httpx that handles:
- Base URL and headers configuration
- Authentication injection
- Response parsing and error mapping
- Automatic JSON content type handling

It deliberately performs a single attempt per call: status codes are mapped
to the exception taxonomy in ``gitlab_client.exceptions`` and raised
immediately. Retrying is left to the caller.

The HTTPClient is an internal implementation detail and should not be
used directly by library consumers. Use GitLabClient instead.

"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Union

import httpx

from gitlab_client.exceptions import (
    DeadlineExceededError,
    NetworkError,
    exception_from_response,
)

if TYPE_CHECKING:
    from gitlab_client.auth import AuthStrategy
    from gitlab_client.config import ClientConfig

logger = logging.getLogger(__name__)

QueryParams = Union[dict[str, Any], Sequence[tuple[str, str]]]


class HTTPClient:
    """Low-level HTTP client for GitLab API requests.

    Note:
        This is an internal class. Use GitLabClient for the public API.

    """

    __slots__ = ("_auth", "_client", "_config")

    ACCEPT_HEADER = "application/json"

    def __init__(
        self,
        config: ClientConfig,
        auth: AuthStrategy,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            config: Client configuration.
            auth: Authentication strategy.
            transport: Optional httpx transport (e.g. ``httpx.MockTransport``).

        """
        self._config = config
        self._auth = auth
        self._client = self._create_client(transport)

    def _create_client(self, transport: httpx.BaseTransport | None) -> httpx.Client:
        """Create and configure the httpx client."""
        return httpx.Client(
            base_url=self._config.base_url,
            timeout=httpx.Timeout(self._config.timeout),
            headers={
                "Accept": self.ACCEPT_HEADER,
                "User-Agent": self._config.user_agent,
            },
            follow_redirects=True,
            transport=transport,
        )

    def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: QueryParams | None = None,
        json_data: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> HTTPResponse:
        """Make an HTTP request to the GitLab API.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE).
            endpoint: API endpoint path relative to the base URL (e.g. "/groups").
            params: Query parameters, as a dict or an ordered list of pairs.
            json_data: JSON body for POST/PUT requests.
            timeout: Per-call deadline in seconds, overriding the config.

        Returns:
            HTTPResponse containing the parsed data and metadata.

        Raises:
            GitLabError: For API errors (4xx, 5xx).
            NetworkError: For connection or protocol failures.
            DeadlineExceededError: If the request times out.

        """
        request = self._client.build_request(
            method=method,
            url=endpoint.lstrip("/"),
            params=params,
            json=json_data,
            timeout=httpx.Timeout(timeout) if timeout is not None else httpx.USE_CLIENT_DEFAULT,
        )
        request = self._auth.apply(request)

        logger.debug("Request: %s %s", method, request.url)

        try:
            response = self._client.send(request)
        except httpx.TimeoutException as e:
            raise DeadlineExceededError(
                f"Request timed out: {method} {endpoint}",
                timeout=timeout if timeout is not None else self._config.timeout,
                original_error=e,
            ) from e
        except httpx.ConnectError as e:
            raise NetworkError(f"Connection failed: {e}", original_error=e) from e
        except httpx.HTTPError as e:
            raise NetworkError(f"HTTP error: {e}", original_error=e) from e

        return self._process_response(response)

    def _process_response(self, response: httpx.Response) -> HTTPResponse:
        """Decode the body and raise on error statuses.

        Raises:
            GitLabError: If the response indicates an error.
            NetworkError: If a successful response carries malformed JSON.

        """
        headers = dict(response.headers)

        data: dict[str, Any] | list[Any]
        if response.status_code == 204 or not response.content:
            data = {}
        elif response.headers.get("content-type", "").startswith("application/json"):
            try:
                data = response.json()
            except ValueError as e:
                if response.status_code >= 400:
                    data = {"message": response.text}
                else:
                    raise NetworkError(f"Malformed JSON response: {e}", original_error=e) from e
        elif response.status_code >= 400:
            data = {"message": response.text}
        else:
            data = {}

        logger.debug("Response: %d %s", response.status_code, response.reason_phrase)

        if response.status_code >= 400:
            error_data = data if isinstance(data, dict) else {"message": str(data)}
            raise exception_from_response(
                status_code=response.status_code,
                response_data=error_data,
                headers=headers,
            )

        return HTTPResponse(
            data=data,
            status_code=response.status_code,
            headers=headers,
        )

    def get(
        self,
        endpoint: str,
        params: QueryParams | None = None,
        timeout: float | None = None,
    ) -> HTTPResponse:
        """Make a GET request."""
        return self.request("GET", endpoint, params=params, timeout=timeout)

    def post(
        self,
        endpoint: str,
        json_data: dict[str, Any] | None = None,
    ) -> HTTPResponse:
        """Make a POST request."""
        return self.request("POST", endpoint, json_data=json_data)

    def put(
        self,
        endpoint: str,
        json_data: dict[str, Any] | None = None,
    ) -> HTTPResponse:
        """Make a PUT request."""
        return self.request("PUT", endpoint, json_data=json_data)

    def delete(
        self,
        endpoint: str,
        params: QueryParams | None = None,
    ) -> HTTPResponse:
        """Make a DELETE request."""
        return self.request("DELETE", endpoint, params=params)

    def close(self) -> None:
        """Close the HTTP client and release resources."""
        self._client.close()

    def __enter__(self) -> HTTPClient:
        """Enter context manager."""
        return self

    def __exit__(self, *args: object) -> None:
        """Exit context manager and close client."""
        self.close()


class HTTPResponse:
    """Container for HTTP response data and metadata.

    Attributes:
        data: Parsed JSON response body.
        status_code: HTTP status code.
        headers: Response headers (lower-cased names, as httpx returns them).

    """

    __slots__ = ("data", "headers", "status_code")

    def __init__(
        self,
        data: dict[str, Any] | list[Any],
        status_code: int,
        headers: dict[str, str],
    ) -> None:
        """Initialize the response container."""
        self.data = data
        self.status_code = status_code
        self.headers = headers

    def __repr__(self) -> str:
        """Return a representation of the response."""
        return f"HTTPResponse(status={self.status_code}, data_type={type(self.data).__name__})"
