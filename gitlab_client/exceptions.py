"""Custom exception hierarchy for the GitLab Client.

Every error raised by this library maps an HTTP status code or a transport
condition to a typed exception. The original status code and decoded response
payload are always attached so nothing the server said is lost.

Exception Hierarchy:
    GitLabError (base)
    ├── ConfigurationError     - Invalid config, missing required params
    ├── AuthenticationError    - 401, invalid/expired token
    ├── AccessDeniedError      - 403, caller lacks visibility or permission
    ├── NotFoundError          - 404, resource doesn't exist
    ├── ValidationError        - 400/422, invalid request payload
    ├── ConflictError          - 409, state conflict (e.g. restoring a purged group)
    ├── RateLimitError         - 429 rate limit exceeded
    ├── ServerError            - 5xx server errors
    ├── NetworkError           - Connection failures, protocol errors
    └── DeadlineExceededError  - Request or polling deadline exceeded

The library never retries. Callers decide what to do with ``ServerError``
(``is_retryable`` is set) and ``RateLimitError`` (``retry_after`` is set).

Example:
    >>> try:
    ...     group = client.groups.get("does/not/exist")
    ... except NotFoundError as e:
    ...     print(f"Group not found: {e} (HTTP {e.status_code})")

"""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any


class GitLabError(Exception):
    """Base exception for all GitLab API errors.

    Attributes:
        message: Human-readable error description.
        response_data: Raw decoded response payload, if any.
        status_code: HTTP status code, if the error came from a response.

    """

    status_code: int | None = None

    def __init__(
        self,
        message: str,
        response_data: dict[str, Any] | None = None,
        status_code: int | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            response_data: Raw response data from the API.
            status_code: HTTP status code of the failed response.

        """
        self.message = message
        self.response_data = response_data or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def __repr__(self) -> str:
        """Return a detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}(message={self.message!r}, "
            f"status_code={self.status_code!r})"
        )


class ConfigurationError(GitLabError):
    """Raised when client configuration is invalid.

    Example:
        >>> GitLabClient(base_url="not-a-url")
        ConfigurationError: Invalid base_url: not-a-url

    """


class AuthenticationError(GitLabError):
    """Raised when authentication fails (HTTP 401)."""

    status_code: int | None = 401

    def __init__(
        self,
        message: str = "Authentication failed",
        response_data: dict[str, Any] | None = None,
        status_code: int | None = None,
    ) -> None:
        """Initialize authentication error."""
        super().__init__(message, response_data, status_code)


class AccessDeniedError(GitLabError):
    """Raised when the caller lacks visibility or permission (HTTP 403).

    Example:
        >>> client.groups.delete(42)
        AccessDeniedError: 403 Forbidden

    """

    status_code: int | None = 403

    def __init__(
        self,
        message: str = "Access denied",
        response_data: dict[str, Any] | None = None,
        status_code: int | None = None,
    ) -> None:
        """Initialize access denied error."""
        super().__init__(message, response_data, status_code)


class NotFoundError(GitLabError):
    """Raised when a resource doesn't exist (HTTP 404).

    GitLab answers 404 both for missing resources and for private resources
    the caller cannot see.

    Attributes:
        resource_type: Type of resource (group, project, ...), if known.
        resource_id: Identifier of the missing resource, if known.

    """

    status_code: int | None = 404

    def __init__(
        self,
        message: str = "Resource not found",
        response_data: dict[str, Any] | None = None,
        status_code: int | None = None,
        resource_type: str | None = None,
        resource_id: str | None = None,
    ) -> None:
        """Initialize not found error.

        Args:
            message: Human-readable error description.
            response_data: Raw response data from the API.
            status_code: HTTP status code.
            resource_type: Type of resource that wasn't found.
            resource_id: Identifier of the resource.

        """
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(message, response_data, status_code)


class ValidationError(GitLabError):
    """Raised when the request payload is invalid (HTTP 400 or 422).

    GitLab reports validation failures in two shapes::

        {"message": {"path": ["has already been taken"]}}
        {"error": "name is missing"}

    Both are preserved verbatim in ``errors`` and flattened by ``field_errors``.

    Example:
        >>> client.groups.create(GroupCreate(name="dup", path="dup"))
        ValidationError: Failed to save group {:path=>["has already been taken"]}

    """

    status_code: int | None = 400

    def __init__(
        self,
        message: str = "Validation failed",
        response_data: dict[str, Any] | None = None,
        status_code: int | None = None,
        errors: dict[str, Any] | None = None,
    ) -> None:
        """Initialize validation error.

        Args:
            message: Human-readable error description.
            response_data: Raw response data from the API.
            status_code: HTTP status code (400 or 422).
            errors: Field-level errors as reported by GitLab.

        """
        self.errors = errors or {}
        super().__init__(message, response_data, status_code)

    @property
    def field_errors(self) -> dict[str, str]:
        """Return a mapping of field names to joined error messages."""
        result: dict[str, str] = {}
        for field_name, messages in self.errors.items():
            if isinstance(messages, list):
                result[field_name] = "; ".join(str(m) for m in messages)
            else:
                result[field_name] = str(messages)
        return result


class ConflictError(GitLabError):
    """Raised when the request conflicts with the resource state (HTTP 409).

    Also raised when restoring a resource that has already been purged, and
    when a merge request cannot be merged (HTTP 405/406).

    """

    status_code: int | None = 409

    def __init__(
        self,
        message: str = "Conflict",
        response_data: dict[str, Any] | None = None,
        status_code: int | None = None,
    ) -> None:
        """Initialize conflict error."""
        super().__init__(message, response_data, status_code)


class RateLimitError(GitLabError):
    """Raised when the API rate limit is exceeded (HTTP 429).

    Attributes:
        limit: Maximum requests allowed in the window.
        remaining: Requests remaining (usually 0 when this is raised).
        reset_at: When the rate limit resets.
        retry_after: Seconds until the limit resets.

    """

    status_code: int | None = 429

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        response_data: dict[str, Any] | None = None,
        limit: int | None = None,
        remaining: int = 0,
        reset_at: datetime | None = None,
        retry_after: int | None = None,
    ) -> None:
        """Initialize rate limit error.

        Args:
            message: Human-readable error description.
            response_data: Raw response data from the API.
            limit: Maximum requests allowed.
            remaining: Requests remaining.
            reset_at: Datetime when limit resets.
            retry_after: Seconds until reset.

        """
        self.limit = limit
        self.remaining = remaining
        self.reset_at = reset_at
        self.retry_after = retry_after
        super().__init__(message, response_data)

    def __str__(self) -> str:
        """Return a detailed error message with reset time."""
        base = self.message
        if self.reset_at:
            base += f" (resets at {self.reset_at.isoformat()})"
        if self.retry_after:
            base += f" (retry after {self.retry_after}s)"
        return base


class ServerError(GitLabError):
    """Raised when GitLab returns a server error (HTTP 5xx).

    These errors are typically transient. The library does not retry them;
    ``is_retryable`` tells the caller it may.

    """

    is_retryable: bool = True

    def __init__(
        self,
        message: str = "GitLab server error",
        response_data: dict[str, Any] | None = None,
        status_code: int = 500,
    ) -> None:
        """Initialize server error.

        Args:
            message: Human-readable error description.
            response_data: Raw response data from the API.
            status_code: The HTTP status code (5xx).

        """
        super().__init__(message, response_data, status_code)


class NetworkError(GitLabError):
    """Raised when a connectivity or protocol-level error occurs.

    This covers connection failures, DNS resolution errors and malformed
    responses: anything that cannot be interpreted as an API error.

    Attributes:
        original_error: The underlying exception that caused this error.
        is_retryable: Whether this error is likely transient.

    """

    def __init__(
        self,
        message: str = "Network error",
        original_error: Exception | None = None,
    ) -> None:
        """Initialize network error.

        Args:
            message: Human-readable error description.
            original_error: The underlying exception.

        """
        self.original_error = original_error
        self.is_retryable = self._classify_retryable(original_error)
        super().__init__(message, response_data=None)

    @staticmethod
    def _classify_retryable(error: Exception | None) -> bool:
        """Determine if the network error is likely transient.

        Args:
            error: The original exception.

        Returns:
            True if the error is likely transient and retryable.

        """
        if error is None:
            return True

        error_msg = str(error).lower()

        # DNS errors are a configuration issue
        dns_indicators = [
            "failed to resolve",
            "nodename nor servname",
            "name or service not known",
            "getaddrinfo failed",
        ]
        if any(indicator in error_msg for indicator in dns_indicators):
            return False

        transient_indicators = [
            "connection refused",
            "connection reset",
            "broken pipe",
        ]
        return any(indicator in error_msg for indicator in transient_indicators)


class DeadlineExceededError(GitLabError):
    """Raised when a caller-supplied deadline is exceeded.

    Covers both a single request timing out and a polling loop (such as
    deletion confirmation) running out of time.

    Attributes:
        timeout: The deadline in seconds, if known.
        last_result: The last observed polling result, if any.
        original_error: The underlying transport exception, if any.

    """

    def __init__(
        self,
        message: str = "Deadline exceeded",
        timeout: float | None = None,
        last_result: Any = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize deadline error."""
        self.timeout = timeout
        self.last_result = last_result
        self.original_error = original_error
        super().__init__(message, response_data=None)


# =============================================================================
# Exception Factory
# =============================================================================


def exception_from_response(
    status_code: int,
    response_data: dict[str, Any],
    headers: dict[str, str] | None = None,
) -> GitLabError:
    """Create the appropriate exception from an HTTP error response.

    Args:
        status_code: HTTP status code.
        response_data: Parsed JSON response body.
        headers: Response headers (for rate limit info).

    Returns:
        The appropriate GitLabError subclass.

    """
    headers = headers or {}
    message = _extract_message(status_code, response_data)

    if status_code == 429:
        return _create_rate_limit_error(message, response_data, headers)

    if 500 <= status_code < 600:
        return ServerError(
            message=message,
            response_data=response_data,
            status_code=status_code,
        )

    if status_code in (400, 422):
        return ValidationError(
            message=message,
            response_data=response_data,
            status_code=status_code,
            errors=_extract_field_errors(response_data),
        )

    exception_map: dict[int, type[GitLabError]] = {
        401: AuthenticationError,
        403: AccessDeniedError,
        404: NotFoundError,
        409: ConflictError,
    }

    if status_code in exception_map:
        return exception_map[status_code](
            message=message,
            response_data=response_data,
            status_code=status_code,
        )

    return GitLabError(
        message=f"HTTP {status_code}: {message}",
        response_data=response_data,
        status_code=status_code,
    )


def _extract_message(status_code: int, response_data: dict[str, Any]) -> str:
    """Build a readable message from GitLab's error payload.

    GitLab uses ``message`` (a string or a dict of field errors) and
    ``error`` (a string, sometimes with ``error_description``).

    """
    message = response_data.get("message")
    if isinstance(message, str) and message:
        return message
    if isinstance(message, dict) and message:
        parts = []
        for field_name, messages in message.items():
            if isinstance(messages, list):
                parts.append(f"{field_name}: {', '.join(str(m) for m in messages)}")
            else:
                parts.append(f"{field_name}: {messages}")
        return "; ".join(parts)

    error = response_data.get("error")
    if isinstance(error, str) and error:
        description = response_data.get("error_description")
        return f"{error}: {description}" if description else error

    return f"HTTP {status_code}"


def _extract_field_errors(response_data: dict[str, Any]) -> dict[str, Any]:
    """Pull field-level errors out of a validation payload."""
    message = response_data.get("message")
    if isinstance(message, dict):
        return dict(message)

    error = response_data.get("error")
    if isinstance(error, str) and error:
        # "name is missing, path is missing"
        errors: dict[str, Any] = {}
        for part in error.split(","):
            part = part.strip()
            field_name, _, detail = part.partition(" ")
            if field_name and detail:
                errors.setdefault(field_name, []).append(detail)
        return errors

    return {}


def _create_rate_limit_error(
    message: str,
    response_data: dict[str, Any],
    headers: dict[str, str],
) -> RateLimitError:
    """Create a RateLimitError with details from GitLab's RateLimit headers.

    Args:
        message: Error message from response.
        response_data: Parsed JSON response body.
        headers: Response headers containing rate limit info.

    Returns:
        A RateLimitError with extracted rate limit information.

    """
    lowered = {key.lower(): value for key, value in headers.items()}

    limit = _parse_int_header(lowered.get("ratelimit-limit")) or None
    remaining = _parse_int_header(lowered.get("ratelimit-remaining")) or 0

    reset_timestamp = _parse_int_header(lowered.get("ratelimit-reset"))
    reset_at = datetime.fromtimestamp(reset_timestamp) if reset_timestamp is not None else None

    retry_after = _parse_retry_after(lowered.get("retry-after"))

    return RateLimitError(
        message=message,
        response_data=response_data,
        limit=limit,
        remaining=remaining,
        reset_at=reset_at,
        retry_after=retry_after,
    )


def _parse_int_header(value: str | None) -> int | None:
    """Parse an integer header value, returning None when absent or malformed."""
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def _parse_retry_after(value: str | None) -> int | None:
    """Parse ``Retry-After`` as delay-seconds or as an HTTP-date.

    The date form becomes whole seconds from now, clamped at zero.
    """
    seconds = _parse_int_header(value)
    if seconds is not None or value is None:
        return seconds

    try:
        retry_at = parsedate_to_datetime(value.strip())
    except (TypeError, ValueError):
        return None
    if retry_at.tzinfo is None:
        retry_at = retry_at.replace(tzinfo=timezone.utc)
    return max(0, int((retry_at - datetime.now(timezone.utc)).total_seconds()))
