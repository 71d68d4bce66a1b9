"""Authentication strategies for the GitLab API.

Supported Authentication Methods:
    - TokenAuth: Personal/project/group access token (``PRIVATE-TOKEN`` header)
    - OAuthTokenAuth: OAuth2 or CI job token sent as a Bearer token
    - NoAuth: Unauthenticated requests (public resources only)

Example:
    >>> from gitlab_client.auth import TokenAuth, NoAuth
    >>> auth = TokenAuth("glpat-xxxxxxxxxxxx")
    >>> auth = NoAuth()

"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx


class AuthStrategy(ABC):
    """Abstract base class for authentication strategies."""

    @abstractmethod
    def apply(self, request: httpx.Request) -> httpx.Request:
        """Apply authentication to an outgoing request.

        Args:
            request: The httpx request to authenticate.

        Returns:
            The request with authentication applied.

        """

    @property
    @abstractmethod
    def is_authenticated(self) -> bool:
        """Check if this strategy provides authentication."""


class TokenAuth(AuthStrategy):
    """Access token authentication via the ``PRIVATE-TOKEN`` header.

    Tokens can be created under User Settings > Access Tokens.

    """

    __slots__ = ("_token",)

    header_name = "PRIVATE-TOKEN"

    def __init__(self, token: str) -> None:
        """Initialize with an access token.

        Raises:
            ValueError: If token is empty or None.

        """
        if not token or not token.strip():
            raise ValueError("Token cannot be empty")
        self._token = token.strip()

    def apply(self, request: httpx.Request) -> httpx.Request:
        """Set the token header on the request."""
        request.headers[self.header_name] = self._token
        return request

    @property
    def is_authenticated(self) -> bool:
        """Return True as this strategy provides authentication."""
        return True

    def __repr__(self) -> str:
        """Return a safe representation without exposing the token."""
        masked = f"{self._token[:4]}..." if len(self._token) > 4 else "***"
        return f"{self.__class__.__name__}(token={masked!r})"


class OAuthTokenAuth(TokenAuth):
    """OAuth2 token authentication via ``Authorization: Bearer``."""

    __slots__ = ()

    def apply(self, request: httpx.Request) -> httpx.Request:
        """Set the Bearer authorization header on the request."""
        request.headers["Authorization"] = f"Bearer {self._token}"
        return request


class NoAuth(AuthStrategy):
    """No authentication (anonymous requests)."""

    __slots__ = ()

    def apply(self, request: httpx.Request) -> httpx.Request:
        """Return the request unchanged."""
        return request

    @property
    def is_authenticated(self) -> bool:
        """Return False as this strategy provides no authentication."""
        return False

    def __repr__(self) -> str:
        """Return a simple representation."""
        return "NoAuth()"


def create_auth(token: str | None, *, oauth: bool = False) -> AuthStrategy:
    """Create the appropriate auth strategy.

    Args:
        token: Access token, or None for unauthenticated.
        oauth: Send the token as an OAuth2 Bearer token.

    Returns:
        OAuthTokenAuth or TokenAuth if a token is provided, NoAuth otherwise.

    Example:
        >>> auth = create_auth("glpat-xxx")  # Returns TokenAuth
        >>> auth = create_auth(None)  # Returns NoAuth

    """
    if token:
        return OAuthTokenAuth(token) if oauth else TokenAuth(token)
    return NoAuth()
