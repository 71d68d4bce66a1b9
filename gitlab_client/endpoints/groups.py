"""Groups endpoint implementation.

This module provides methods for interacting with GitLab's Groups API:
- Get a group by id or full path
- List and search groups with a GroupQuery
- List a group's projects
- Create, delete and restore groups

API Reference: https://docs.gitlab.com/ee/api/groups.html

Note:
    Group deletion is asynchronous. On instances with delayed deletion the
    group stays visible, with ``marked_for_deletion_on`` set, until it is
    purged. Use ``wait_for_deletion`` when you need confirmation.

"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from gitlab_client.endpoints.base import BaseEndpoint, encode_id
from gitlab_client.exceptions import ConflictError, NotFoundError
from gitlab_client.models import Group, GroupCreate, Project
from gitlab_client.queries import GroupProjectsQuery, GroupQuery
from gitlab_client.utils.pagination import PaginatedResponse
from gitlab_client.utils.polling import wait_until_deleted

logger = logging.getLogger(__name__)


class GroupsEndpoint(BaseEndpoint):
    """Endpoint for group-related API calls.

    Example:
        >>> group = client.groups.get("my-org")
        >>> for group in client.groups.search("platform"):
        ...     print(group.full_path)

    """

    def get(self, group_id: int | str) -> Group:
        """Get a single group, including its projects.

        Args:
            group_id: Numeric id or full path (e.g. ``"my-org/platform"``).

        Returns:
            Group with ``projects`` populated.

        Raises:
            NotFoundError: If the group doesn't exist or is invisible to the caller.
            AccessDeniedError: If the caller lacks permission.

        Note:
            Right after ``create`` or ``restore`` some fields (such as the
            deletion marker) may still show the previous state. GitLab
            updates them asynchronously.

        """
        response = self._http.get(f"/groups/{encode_id(group_id)}")
        return self._parse_response(response.data, Group)

    def list(self, query: GroupQuery | None = None) -> Iterator[Group]:
        """Iterate over groups matching a query.

        Pages are fetched lazily as the iterator is consumed. Passing None or
        an empty ``GroupQuery()`` uses the server's default listing.

        Args:
            query: Filters, ordering and page size.

        Yields:
            Group objects, in server order.

        Example:
            >>> query = GroupQuery(owned=True, order_by="id", sort="desc")
            >>> for group in client.groups.list(query):
            ...     print(group.id, group.name)

        """
        return self._iter_pages("/groups", Group, query)

    def accessible(self, *, per_page: int | None = None) -> Iterator[Group]:
        """Iterate over every group visible to the caller."""
        return self.list(GroupQuery(all_available=True, per_page=per_page))

    def search(self, term: str, *, per_page: int | None = None) -> Iterator[Group]:
        """Iterate over groups whose name or path matches ``term``.

        Example:
            >>> groups = list(client.groups.search("platform"))

        """
        return self.list(GroupQuery(search=term, per_page=per_page))

    def get_page(
        self,
        query: GroupQuery | None = None,
        page: int = 1,
    ) -> PaginatedResponse[Group]:
        """Get a single page of groups with pagination controls.

        Example:
            >>> page = client.groups.get_page(GroupQuery(per_page=50))
            >>> print(f"{page.total_count} groups in {page.total_pages} pages")

        """
        return self._get_paginated("/groups", Group, query, page)

    def list_projects(
        self,
        group_id: int | str,
        query: GroupProjectsQuery | None = None,
    ) -> Iterator[Project]:
        """Iterate over the projects of a group.

        Args:
            group_id: Numeric id or full path of the group.
            query: Project filters.

        Yields:
            Project objects.

        """
        return self._iter_pages(f"/groups/{encode_id(group_id)}/projects", Project, query)

    def create(self, payload: GroupCreate) -> Group:
        """Create a new group.

        Args:
            payload: Group attributes.

        Returns:
            The created group, including server-assigned fields.

        Raises:
            ValidationError: If GitLab rejects the payload. ``field_errors``
                holds the per-field messages.

        Example:
            >>> group = client.groups.create(
            ...     GroupCreate(name="Platform", path="platform",
            ...                 visibility=VisibilityLevel.INTERNAL)
            ... )

        """
        response = self._http.post("/groups", json_data=payload.serialize())
        group = self._parse_response(response.data, Group)
        logger.info("Created group %s (id=%d)", group.full_path or group.path, group.id)
        return group

    def delete(
        self,
        group_id: int | str,
        *,
        permanently_remove: bool = False,
        full_path: str | None = None,
    ) -> None:
        """Schedule a group for deletion.

        The call returns once GitLab has accepted the request. The group may
        still be returned by ``get``/``search`` afterwards, either until the
        background job runs or, with delayed deletion, until its purge date.

        Args:
            group_id: Numeric id or full path of the group.
            permanently_remove: Skip delayed deletion for an already-marked subgroup.
            full_path: Full path of the group, required with ``permanently_remove``.

        """
        params: list[tuple[str, str]] = []
        if permanently_remove:
            params.append(("permanently_remove", "true"))
        if full_path is not None:
            params.append(("full_path", full_path))

        self._http.delete(f"/groups/{encode_id(group_id)}", params=params or None)
        logger.info("Requested deletion of group %s", group_id)

    def restore(self, group_id: int | str) -> Group:
        """Restore a group that is marked for deletion.

        Returns:
            The restored group. Its deletion marker may take a moment to clear.

        Raises:
            ConflictError: If the group has already been purged.

        """
        try:
            response = self._http.post(f"/groups/{encode_id(group_id)}/restore")
        except NotFoundError as e:
            raise ConflictError(
                f"Group {group_id} cannot be restored: it has already been removed",
                response_data=e.response_data,
                status_code=e.status_code,
            ) from e
        logger.info("Restored group %s", group_id)
        return self._parse_response(response.data, Group)

    def wait_for_deletion(
        self,
        name: str,
        *,
        timeout: float | None = None,
        poll_interval: float | None = None,
    ) -> list[Group]:
        """Poll until no group named ``name`` remains, or it is marked for deletion.

        Search results are narrowed to exact name matches before checking, and
        each search request is bounded by the time left before the deadline.

        Args:
            name: Name of the deleted group.
            timeout: Seconds to wait (defaults to ``config.delete_timeout``).
            poll_interval: Seconds between polls (defaults to ``config.poll_interval``).

        Returns:
            An empty list, or the single remaining group marked for deletion.

        Raises:
            DeadlineExceededError: If neither state is reached in time.

        """

        def named(remaining: float) -> list[Group]:
            groups = self._iter_pages(
                "/groups",
                Group,
                GroupQuery(search=name),
                timeout=min(remaining, self._config.timeout),
            )
            return [group for group in groups if group.name == name]

        return wait_until_deleted(
            named,
            is_marked=lambda group: group.is_marked_for_deletion,
            timeout=self._config.delete_timeout if timeout is None else timeout,
            poll_interval=self._config.poll_interval if poll_interval is None else poll_interval,
        )

    def delete_stale(self, prefix: str, *, keep: int = 10) -> list[int]:
        """Delete old owned groups whose names start with ``prefix``.

        Groups are considered newest first (by id). The ``keep`` most recent
        matches are skipped, as are groups already marked for deletion.

        Args:
            prefix: Name prefix identifying disposable groups.
            keep: Number of most recent matching groups to leave alone.

        Returns:
            Ids of the groups that were scheduled for deletion.

        """
        query = GroupQuery(owned=True, search=prefix, order_by="id", sort="desc")
        deleted: list[int] = []

        matching = (group for group in self.list(query) if group.name.startswith(prefix))
        for index, group in enumerate(matching):
            if index < keep or group.is_marked_for_deletion:
                continue
            self.delete(group.id)
            deleted.append(group.id)

        logger.info("Deleted %d stale group(s) with prefix %r", len(deleted), prefix)
        return deleted
