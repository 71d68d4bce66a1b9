"""Library logger for the GitLab Client.

Every module logs under ``gitlab_client`` (``gitlab_client.endpoints.groups``,
``gitlab_client.utils.http`` and so on). Requests and page fetches are logged
at DEBUG, and state changes (create, delete, restore, merge) at INFO. Nothing
is printed until the application attaches a handler.

Example:
    >>> import logging
    >>> logging.basicConfig()
    >>> logging.getLogger("gitlab_client").setLevel(logging.DEBUG)

"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# httpx logs one INFO line per request under this name
TRANSPORT_LOGGER_NAME = "httpx"

logger = logging.getLogger("gitlab_client")

logger.setLevel(logging.WARNING)

logger.addHandler(logging.NullHandler())


class _ConsoleHandler(logging.StreamHandler):
    """Handler installed by ``configure_logging``; replaced on reconfiguration."""


def configure_logging(
    level: int = logging.INFO,
    format_string: str | None = None,
    stream: TextIO | None = None,
    *,
    include_transport: bool = False,
) -> logging.Handler:
    """Send the client's log records to a stream.

    Meant for scripts and debugging sessions. Calling it again replaces the
    handler from the previous call instead of adding a second one, so records
    are never printed twice.

    Args:
        level: Logging level (e.g., logging.DEBUG, logging.INFO).
        format_string: Custom format string for log messages.
        stream: Output stream (defaults to sys.stderr).
        include_transport: Also show httpx's per-request log lines.

    Returns:
        The handler that was attached, so callers can remove it again.

    Example:
        >>> from gitlab_client.utils import configure_logging
        >>> configure_logging(level=logging.DEBUG, include_transport=True)

    """
    handler = _ConsoleHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))

    transport_logger = logging.getLogger(TRANSPORT_LOGGER_NAME)
    for target in (logger, transport_logger):
        for existing in [h for h in target.handlers if isinstance(h, _ConsoleHandler)]:
            target.removeHandler(existing)

    logger.addHandler(handler)
    logger.setLevel(level)

    if include_transport:
        transport_logger.addHandler(handler)
        transport_logger.setLevel(level)

    return handler
