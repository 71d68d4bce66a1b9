"""GitLab Client Library - A Python client for the GitLab REST API.

This library provides a typed interface to GitLab's groups, projects and
merge requests. It includes query objects that only send what you set,
lazy pagination, and helpers for waiting on asynchronous deletions.

Example:
    >>> from gitlab_client import GitLabClient, GroupQuery
    >>> client = GitLabClient(token="glpat-xxx")
    >>> for group in client.groups.list(GroupQuery(owned=True)):
    ...     print(group.full_path)

"""

from gitlab_client.client import GitLabClient
from gitlab_client.config import ClientConfig
from gitlab_client.exceptions import (
    AccessDeniedError,
    AuthenticationError,
    ConfigurationError,
    ConflictError,
    DeadlineExceededError,
    GitLabError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    ServerError,
    ValidationError,
)
from gitlab_client.models import (
    AccessLevel,
    Group,
    GroupCreate,
    MergeRequest,
    MergeRequestAccept,
    Project,
    ProjectCreate,
    VisibilityLevel,
)
from gitlab_client.queries import (
    GroupProjectsQuery,
    GroupQuery,
    MergeRequestQuery,
    ProjectQuery,
)
from gitlab_client.utils import logger as _logger  # noqa: F401

__version__ = "1.0.0"

__all__ = [
    "AccessDeniedError",
    "AccessLevel",
    "AuthenticationError",
    "ClientConfig",
    "ConfigurationError",
    "ConflictError",
    "DeadlineExceededError",
    "GitLabClient",
    "GitLabError",
    "Group",
    "GroupCreate",
    "GroupProjectsQuery",
    "GroupQuery",
    "MergeRequest",
    "MergeRequestAccept",
    "MergeRequestQuery",
    "NetworkError",
    "NotFoundError",
    "Project",
    "ProjectCreate",
    "ProjectQuery",
    "RateLimitError",
    "ServerError",
    "ValidationError",
    "VisibilityLevel",
]
