"""Pydantic models for GitLab API objects.

Read models (``Group``, ``Project``, ``MergeRequest``) are immutable snapshots
of what the server returned at fetch time. Write payloads (``GroupCreate``,
``ProjectCreate``, ``MergeRequestAccept``) are separate types because the
server accepts a different field set on write than it returns on read:
ids, timestamps and derived state never appear in a payload.

Wire names that differ from attribute names are declared as field aliases.

Example:
    >>> from gitlab_client.models import Group
    >>> group = Group.model_validate(api_response)
    >>> print(group.full_path, group.visibility)

"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum, IntEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# =============================================================================
# Enumerations
# =============================================================================


class VisibilityLevel(str, Enum):
    """Visibility of a group or project."""

    PRIVATE = "private"
    INTERNAL = "internal"
    PUBLIC = "public"


class AccessLevel(IntEnum):
    """Membership access levels, as GitLab encodes them."""

    NO_ACCESS = 0
    MINIMAL_ACCESS = 5
    GUEST = 10
    REPORTER = 20
    DEVELOPER = 30
    MAINTAINER = 40
    OWNER = 50


# =============================================================================
# Base Models
# =============================================================================


class GitLabModel(BaseModel):
    """Base model for all GitLab API responses.

    - Ignores unknown fields (GitLab adds fields between releases)
    - Frozen: instances are snapshots and cannot be mutated
    - Accepts both wire names and attribute names

    """

    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )


class PayloadModel(BaseModel):
    """Base model for request bodies sent to GitLab.

    Only fields the caller explicitly set are sent, so server-side defaults
    apply to everything else. Setting a field to ``False`` sends ``false``.

    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        populate_by_name=True,
    )

    def serialize(self) -> dict[str, Any]:
        """Return the JSON body, keyed by wire name, without unset fields."""
        return self.model_dump(
            mode="json",
            by_alias=True,
            exclude_unset=True,
            exclude_none=True,
        )


# =============================================================================
# Shared References
# =============================================================================


class UserRef(GitLabModel):
    """Minimal user representation embedded in other objects."""

    id: int
    username: str
    name: str | None = None
    state: str | None = None
    web_url: str | None = None


class Namespace(GitLabModel):
    """The namespace (user or group) a project lives in."""

    id: int
    name: str
    path: str
    kind: str | None = None
    full_path: str | None = None
    parent_id: int | None = None
    web_url: str | None = None


# =============================================================================
# Project Models
# =============================================================================


class Project(GitLabModel):
    """GitLab project.

    Attributes:
        id: Unique identifier.
        name: Display name.
        path: URL slug.
        path_with_namespace: Full path, e.g. ``group/subgroup/project``.
        marked_for_deletion_on: Scheduled purge date when soft-deleted.

    """

    id: int
    name: str
    path: str
    path_with_namespace: str | None = None
    name_with_namespace: str | None = None
    description: str | None = None
    visibility: VisibilityLevel | None = None
    default_branch: str | None = None
    web_url: str | None = None
    archived: bool = False
    created_at: datetime | None = None
    last_activity_at: datetime | None = None
    namespace: Namespace | None = None
    marked_for_deletion_on: date | None = Field(
        default=None,
        validation_alias=AliasChoices("marked_for_deletion_on", "marked_for_deletion_at"),
    )

    @property
    def is_marked_for_deletion(self) -> bool:
        """Check whether the project is pending deletion."""
        return self.marked_for_deletion_on is not None

    def __str__(self) -> str:
        """Return a human-readable string representation."""
        return f"Project({self.path_with_namespace or self.path})"


class ProjectCreate(PayloadModel):
    """Payload for ``POST /projects``."""

    name: str
    path: str | None = None
    namespace_id: int | None = None
    description: str | None = None
    visibility: VisibilityLevel | None = None
    default_branch: str | None = None
    initialize_with_readme: bool | None = None


# =============================================================================
# Group Models
# =============================================================================


class Group(GitLabModel):
    """GitLab group.

    ``projects`` is only populated by the single-group endpoint
    (``GET /groups/:id``); list endpoints leave it empty.

    Attributes:
        id: Unique identifier.
        name: Display name.
        path: URL slug.
        full_path: Path including parent groups.
        visibility: Visibility level.
        marked_for_deletion_on: Scheduled purge date when soft-deleted.
        request_access_enabled: Whether users may request membership.
        lfs_enabled: Whether Git LFS is enabled for the group's projects.

    Example:
        >>> group = client.groups.get("my-org/platform")
        >>> print(f"{group.full_name}: {len(group.projects)} projects")

    """

    id: int
    name: str
    path: str
    full_name: str | None = None
    full_path: str | None = None
    description: str | None = None
    visibility: VisibilityLevel | None = None
    parent_id: int | None = None
    web_url: str | None = None
    avatar_url: str | None = None
    created_at: datetime | None = None
    marked_for_deletion_on: date | None = None
    statistics: dict[str, int] | None = None
    request_access_enabled: bool | None = None
    lfs_enabled: bool | None = None
    custom_attributes: tuple[dict[str, str], ...] | None = None
    projects: tuple[Project, ...] = ()

    @property
    def is_marked_for_deletion(self) -> bool:
        """Check whether the group is pending deletion."""
        return self.marked_for_deletion_on is not None

    def __str__(self) -> str:
        """Return a human-readable string representation."""
        return f"Group({self.full_path or self.path})"


class GroupCreate(PayloadModel):
    """Payload for ``POST /groups``.

    Example:
        >>> payload = GroupCreate(name="Platform", path="platform",
        ...                       visibility=VisibilityLevel.INTERNAL)

    """

    name: str
    path: str
    description: str | None = None
    visibility: VisibilityLevel | None = None
    parent_id: int | None = None
    request_access_enabled: bool | None = None
    lfs_enabled: bool | None = None


# =============================================================================
# Merge Request Models
# =============================================================================


class MergeRequest(GitLabModel):
    """GitLab merge request."""

    id: int
    iid: int
    project_id: int
    title: str
    description: str | None = None
    state: str
    source_branch: str
    target_branch: str
    author: UserRef | None = None
    merge_status: str | None = None
    detailed_merge_status: str | None = None
    sha: str | None = None
    merge_commit_sha: str | None = None
    web_url: str | None = None
    draft: bool = False
    labels: tuple[str, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None
    merged_at: datetime | None = None

    @property
    def is_merged(self) -> bool:
        """Check whether the merge request has been merged."""
        return self.state == "merged"

    def __str__(self) -> str:
        """Return a human-readable string representation."""
        return f"MergeRequest(!{self.iid}: {self.title})"


class MergeRequestAccept(PayloadModel):
    """Payload for ``PUT /projects/:id/merge_requests/:iid/merge``.

    Every field is optional; unset fields fall back to the project's settings.

    Attributes:
        merge_commit_message: Custom merge commit message.
        should_remove_source_branch: Remove the source branch after merging.
        merge_when_pipeline_succeeds: Merge once the pipeline succeeds
            (sent as ``merge_when_pipeline_succeeds``; older GitLab called it
            ``merge_when_build_succeeds``).
        sha: Must match the source branch HEAD, otherwise the merge fails.
        squash: Squash commits into a single commit.
        squash_commit_message: Custom squash commit message.

    """

    merge_commit_message: str | None = None
    should_remove_source_branch: bool | None = None
    merge_when_pipeline_succeeds: bool | None = None
    sha: str | None = None
    squash: bool | None = None
    squash_commit_message: str | None = None
