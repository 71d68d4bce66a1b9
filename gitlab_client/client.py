"""Main GitLab Client class.

This module provides the main entry point for the GitLab API client.
The GitLabClient class wires the resource endpoints to a shared HTTP
client and manages its lifecycle.

Example:
    >>> from gitlab_client import GitLabClient
    >>>
    >>> # Token from GITLAB_TOKEN (or .env)
    >>> client = GitLabClient()
    >>> group = client.groups.get("my-org")
    >>>
    >>> # Self-managed instance
    >>> client = GitLabClient(token="glpat-xxx", base_url="https://gitlab.example.com/api/v4")

"""

from __future__ import annotations

from typing import TYPE_CHECKING

from gitlab_client.auth import create_auth
from gitlab_client.config import ClientConfig
from gitlab_client.endpoints.groups import GroupsEndpoint
from gitlab_client.endpoints.merge_requests import MergeRequestsEndpoint
from gitlab_client.endpoints.projects import ProjectsEndpoint
from gitlab_client.utils.http import HTTPClient

if TYPE_CHECKING:
    import httpx


class GitLabClient:
    """GitLab API client with typed endpoints.

    A client holds no per-request state, so one instance may be shared
    between threads.

    Attributes:
        groups: Group-related API endpoints.
        projects: Project-related API endpoints.
        merge_requests: Merge request-related API endpoints.

    Example:
        >>> client = GitLabClient(token="glpat-xxx")
        >>>
        >>> for group in client.groups.search("platform"):
        ...     print(group.full_path)
        >>>
        >>> client.close()

    Context Manager:
        >>> with GitLabClient(token="glpat-xxx") as client:
        ...     project = client.projects.get("my-org/api")

    """

    __slots__ = (
        "_config",
        "_groups",
        "_http",
        "_merge_requests",
        "_projects",
    )

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        per_page: int | None = None,
        delete_timeout: float | None = None,
        poll_interval: float | None = None,
        oauth: bool = False,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the GitLab client.

        Args:
            token: Personal, project or group access token. If not provided,
                   uses the GITLAB_TOKEN environment variable or anonymous access.
            base_url: API base URL. Defaults to https://gitlab.com/api/v4.
            timeout: Request timeout in seconds. Default 30.
            per_page: Default page size for list operations. Default 20.
            delete_timeout: Seconds ``wait_for_deletion`` polls before giving up. Default 45.
            poll_interval: Seconds between deletion polls. Default 1.
            oauth: Send the token as an OAuth2 bearer token instead of PRIVATE-TOKEN.
            transport: Custom httpx transport, e.g. ``httpx.MockTransport`` in tests.

        Raises:
            ConfigurationError: If any setting is invalid.

        """
        config_kwargs: dict[str, object] = {}
        if token is not None:
            config_kwargs["token"] = token
        if base_url is not None:
            config_kwargs["base_url"] = base_url
        if timeout is not None:
            config_kwargs["timeout"] = timeout
        if per_page is not None:
            config_kwargs["per_page"] = per_page
        if delete_timeout is not None:
            config_kwargs["delete_timeout"] = delete_timeout
        if poll_interval is not None:
            config_kwargs["poll_interval"] = poll_interval

        self._config = ClientConfig(**config_kwargs)  # type: ignore[arg-type]

        auth = create_auth(self._config.token, oauth=oauth)
        self._http = HTTPClient(self._config, auth, transport=transport)

        self._groups = GroupsEndpoint(self._http, self._config)
        self._projects = ProjectsEndpoint(self._http, self._config)
        self._merge_requests = MergeRequestsEndpoint(self._http, self._config)

    # =========================================================================
    # Endpoint Properties
    # =========================================================================

    @property
    def groups(self) -> GroupsEndpoint:
        """Access group-related API endpoints.

        Example:
            >>> group = client.groups.get("my-org/platform")
            >>> projects = list(client.groups.list_projects(group.id))

        """
        return self._groups

    @property
    def projects(self) -> ProjectsEndpoint:
        """Access project-related API endpoints.

        Example:
            >>> project = client.projects.get("my-org/api")

        """
        return self._projects

    @property
    def merge_requests(self) -> MergeRequestsEndpoint:
        """Access merge request-related API endpoints.

        Example:
            >>> mr = client.merge_requests.get("my-org/api", 42)

        """
        return self._merge_requests

    # =========================================================================
    # Client Properties
    # =========================================================================

    @property
    def config(self) -> ClientConfig:
        """Get the immutable client configuration."""
        return self._config

    @property
    def is_authenticated(self) -> bool:
        """Check if a token is configured."""
        return self._config.is_authenticated

    # =========================================================================
    # Lifecycle Methods
    # =========================================================================

    def close(self) -> None:
        """Close the client and release its connection pool."""
        self._http.close()

    def __enter__(self) -> GitLabClient:
        """Enter context manager."""
        return self

    def __exit__(self, *args: object) -> None:
        """Exit context manager and close the client."""
        self.close()

    def __repr__(self) -> str:
        """Return a string representation of the client."""
        auth_status = "authenticated" if self.is_authenticated else "anonymous"
        return f"GitLabClient(base_url={self._config.base_url!r}, {auth_status})"
