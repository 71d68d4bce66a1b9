"""Utility modules for the GitLab Client.

This package contains cross-cutting concerns and helper utilities:
- http: HTTP client wrapper
- logger: Logging configuration
- pagination: Pagination utilities
- polling: Waiting for asynchronous deletions

"""

from gitlab_client.utils.http import HTTPClient, HTTPResponse
from gitlab_client.utils.logger import configure_logging
from gitlab_client.utils.pagination import (
    PaginatedResponse,
    collect_all,
    paginate,
    parse_link_header,
)
from gitlab_client.utils.polling import is_deletion_confirmed, wait_until_deleted

__all__ = [
    "HTTPClient",
    "HTTPResponse",
    "PaginatedResponse",
    "collect_all",
    "configure_logging",
    "is_deletion_confirmed",
    "paginate",
    "parse_link_header",
    "wait_until_deleted",
]
