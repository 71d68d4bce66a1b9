"""Query objects for GitLab list operations.

A query object is a mutable bag of optional filter, sort and page-size
parameters. Every field defaults to "not set", and only fields the caller
set (in the constructor or by assignment) are sent to the server. This keeps
"leave it to the server" distinct from an explicit ``False``, ``0`` or ``""``.

Wire names come from the field's alias; fields without one are sent under
their attribute name. List values use GitLab's array convention and are sent
as one repeated ``name[]`` pair per element.

Example:
    >>> query = GroupQuery(search="platform", owned=True)
    >>> query.order_by = "id"
    >>> query.serialize()
    [('search', 'platform'), ('owned', 'true'), ('order_by', 'id')]
    >>> GroupQuery().serialize()
    []

"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from gitlab_client.models import AccessLevel, VisibilityLevel


def encode_query_value(value: Any) -> str:
    """Encode a single scalar value the way GitLab's API expects it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


class QueryModel(BaseModel):
    """Base class for all query objects.

    Subclasses declare optional fields only. ``serialize()`` walks the field
    table in declaration order and emits the fields the caller has set.

    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        populate_by_name=True,
    )

    def serialize(self) -> list[tuple[str, str]]:
        """Return the set fields as ordered ``(wire_name, value)`` pairs.

        Fields that were never set, or were set to ``None``, are omitted.

        """
        pairs: list[tuple[str, str]] = []
        fields_set = self.model_fields_set

        for name, field_info in type(self).model_fields.items():
            if name not in fields_set:
                continue
            value = getattr(self, name)
            if value is None:
                continue

            wire_name = field_info.alias or name
            if isinstance(value, (list, tuple, set, frozenset)):
                pairs.extend((wire_name, encode_query_value(item)) for item in value)
            else:
                pairs.append((wire_name, encode_query_value(value)))

        return pairs

    @property
    def is_empty(self) -> bool:
        """Check whether the query would send no parameters at all."""
        return not self.serialize()


class PaginatedQuery(QueryModel):
    """Query for an endpoint that supports ``page``/``per_page`` pagination.

    The page index is owned by the pagination iterator and is never part of
    the query itself.

    """

    per_page: int | None = Field(default=None, ge=1, le=100)


class GroupQuery(PaginatedQuery):
    """Filters for ``GET /groups``.

    Attributes:
        skip_groups: Group ids to exclude from the result.
        all_available: Show all groups the caller can access, not only memberships.
        search: Only groups whose name or path matches this string.
        order_by: ``name``, ``path``, ``id`` or ``similarity``.
        sort: ``asc`` or ``desc``.
        statistics: Include group statistics (administrators only).
        with_custom_attributes: Include custom attributes (administrators only).
        owned: Only groups explicitly owned by the caller.
        min_access_level: Only groups where the caller has at least this level.
        top_level_only: Only top-level groups, no subgroups.

    """

    skip_groups: list[int] | None = Field(default=None, alias="skip_groups[]")
    all_available: bool | None = None
    search: str | None = None
    order_by: str | None = None
    sort: str | None = None
    statistics: bool | None = None
    with_custom_attributes: bool | None = None
    owned: bool | None = None
    min_access_level: AccessLevel | None = None
    top_level_only: bool | None = None


class GroupProjectsQuery(PaginatedQuery):
    """Filters for ``GET /groups/:id/projects``."""

    archived: bool | None = None
    visibility: VisibilityLevel | None = None
    order_by: str | None = None
    sort: str | None = None
    search: str | None = None
    simple: bool | None = None
    owned: bool | None = None
    include_subgroups: bool | None = None
    with_shared: bool | None = None


class ProjectQuery(PaginatedQuery):
    """Filters for ``GET /projects``."""

    archived: bool | None = None
    visibility: VisibilityLevel | None = None
    order_by: str | None = None
    sort: str | None = None
    search: str | None = None
    simple: bool | None = None
    owned: bool | None = None
    membership: bool | None = None
    starred: bool | None = None
    statistics: bool | None = None
    min_access_level: AccessLevel | None = None
    with_custom_attributes: bool | None = None


class MergeRequestQuery(PaginatedQuery):
    """Filters for ``GET /projects/:id/merge_requests``.

    Attributes:
        state: ``opened``, ``closed``, ``locked``, ``merged`` or ``all``.
        labels: Only merge requests carrying all of these labels.
        wip: ``yes`` for draft merge requests only, ``no`` to exclude them.
        created_after: Only merge requests created after this instant.

    """

    state: str | None = None
    order_by: str | None = None
    sort: str | None = None
    milestone: str | None = None
    labels: list[str] | None = Field(default=None, alias="labels[]")
    author_id: int | None = None
    assignee_id: int | None = None
    source_branch: str | None = None
    target_branch: str | None = None
    search: str | None = None
    wip: str | None = None
    created_after: datetime | None = None
    created_before: datetime | None = None
