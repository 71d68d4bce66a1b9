"""Configuration management for the GitLab Client.

This module provides a flexible configuration system that supports:
- Programmatic configuration via constructor arguments
- Environment variable overrides
- Sensible defaults for all options

Configuration Precedence (highest to lowest):
    1. Constructor arguments
    2. Environment variables
    3. Default values

Environment Variables:
    GITLAB_TOKEN: Personal access token for authentication
    GITLAB_BASE_URL: API base URL (default: https://gitlab.com/api/v4)
    GITLAB_TIMEOUT: Request timeout in seconds (default: 30)
    GITLAB_PER_PAGE: Items per page for list operations (default: 20)
    GITLAB_DELETE_TIMEOUT: Deletion confirmation deadline in seconds (default: 45)
    GITLAB_POLL_INTERVAL: Seconds between deletion polls (default: 1)

Example:
    >>> config = ClientConfig()
    >>> config = ClientConfig(timeout=60.0, per_page=100)
    >>> config = ClientConfig(
    ...     token="glpat-xxx",
    ...     base_url="https://gitlab.example.com/api/v4",
    ... )

"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar

from dotenv import load_dotenv

from gitlab_client.exceptions import ConfigurationError

# Auto-load .env file if it exists (searches current dir and parents)
_env_file = Path.cwd() / ".env"
if _env_file.exists():
    load_dotenv(_env_file)
else:
    load_dotenv()


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """Immutable configuration for the GitLab API client.

    Attributes:
        base_url: GitLab API base URL, including the ``/api/v4`` prefix.
        token: Personal, project or group access token.
        timeout: Per-request deadline in seconds.
        per_page: Default page size for list operations.
        delete_timeout: Default deadline for deletion confirmation polling.
        poll_interval: Default delay between deletion polls.
        user_agent: User-Agent header for requests.

    """

    DEFAULT_BASE_URL: ClassVar[str] = "https://gitlab.com/api/v4"
    DEFAULT_TIMEOUT: ClassVar[float] = 30.0
    DEFAULT_PER_PAGE: ClassVar[int] = 20
    MAX_PER_PAGE: ClassVar[int] = 100
    DEFAULT_DELETE_TIMEOUT: ClassVar[float] = 45.0
    DEFAULT_POLL_INTERVAL: ClassVar[float] = 1.0

    base_url: str = field(
        default_factory=lambda: _get_env("GITLAB_BASE_URL", ClientConfig.DEFAULT_BASE_URL)
    )
    token: str | None = field(default_factory=lambda: _get_env_optional("GITLAB_TOKEN"))
    timeout: float = field(
        default_factory=lambda: float(_get_env("GITLAB_TIMEOUT", str(ClientConfig.DEFAULT_TIMEOUT)))
    )
    per_page: int = field(
        default_factory=lambda: int(
            _get_env("GITLAB_PER_PAGE", str(ClientConfig.DEFAULT_PER_PAGE))
        )
    )
    delete_timeout: float = field(
        default_factory=lambda: float(
            _get_env("GITLAB_DELETE_TIMEOUT", str(ClientConfig.DEFAULT_DELETE_TIMEOUT))
        )
    )
    poll_interval: float = field(
        default_factory=lambda: float(
            _get_env("GITLAB_POLL_INTERVAL", str(ClientConfig.DEFAULT_POLL_INTERVAL))
        )
    )
    user_agent: str = "python-gitlab-client/1.0"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Validate all configuration values.

        Raises:
            ConfigurationError: If any configuration value is invalid.

        """
        if not self.base_url:
            raise ConfigurationError("base_url cannot be empty")
        if not self.base_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"Invalid base_url: {self.base_url} (must start with http:// or https://)"
            )

        # Remove trailing slash for consistency
        if self.base_url.endswith("/"):
            object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")

        if not 1 <= self.per_page <= self.MAX_PER_PAGE:
            raise ConfigurationError(
                f"per_page must be between 1 and {self.MAX_PER_PAGE}, got {self.per_page}"
            )

        if self.delete_timeout <= 0:
            raise ConfigurationError(
                f"delete_timeout must be positive, got {self.delete_timeout}"
            )

        if self.poll_interval < 0:
            raise ConfigurationError(
                f"poll_interval cannot be negative, got {self.poll_interval}"
            )

    @property
    def is_authenticated(self) -> bool:
        """Check if the configuration includes authentication."""
        return self.token is not None and len(self.token) > 0

    def with_overrides(self, **kwargs: object) -> ClientConfig:
        """Create a new configuration with specified overrides.

        Args:
            **kwargs: Configuration values to override.

        Returns:
            A new ClientConfig with the specified overrides.

        Example:
            >>> base_config = ClientConfig(token="glpat-xxx")
            >>> test_config = base_config.with_overrides(timeout=5.0)

        """
        current_values: dict[str, str | float | int | None] = {
            "base_url": self.base_url,
            "token": self.token,
            "timeout": self.timeout,
            "per_page": self.per_page,
            "delete_timeout": self.delete_timeout,
            "poll_interval": self.poll_interval,
            "user_agent": self.user_agent,
        }
        current_values.update(kwargs)  # type: ignore[arg-type]
        return ClientConfig(**current_values)  # type: ignore[arg-type]


def _get_env(key: str, default: str) -> str:
    """Get environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set.

    Returns:
        The environment variable value or default.

    """
    value = os.environ.get(key)
    if value is None or value == "":
        return default
    return value


def _get_env_optional(key: str) -> str | None:
    """Get optional environment variable."""
    value = os.environ.get(key)
    if value is None or value == "":
        return None
    return value
