"""Merge Requests endpoint implementation.

This module provides methods for interacting with GitLab's Merge Requests API:
- Get a merge request by project and iid
- List merge requests for a project
- Accept (merge) a merge request

API Reference: https://docs.gitlab.com/ee/api/merge_requests.html

"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from gitlab_client.endpoints.base import BaseEndpoint, encode_id
from gitlab_client.exceptions import ConflictError, GitLabError
from gitlab_client.models import MergeRequest, MergeRequestAccept
from gitlab_client.queries import MergeRequestQuery

logger = logging.getLogger(__name__)

# 405: not mergeable (draft, closed, pipeline pending); 406: merge conflicts
_NOT_MERGEABLE_STATUSES = frozenset({405, 406})


class MergeRequestsEndpoint(BaseEndpoint):
    """Endpoint for merge request-related API calls.

    Example:
        >>> query = MergeRequestQuery(state="opened", target_branch="main")
        >>> for mr in client.merge_requests.list("my-org/api", query):
        ...     print(f"!{mr.iid}: {mr.title}")

    """

    def get(self, project_id: int | str, mr_iid: int) -> MergeRequest:
        """Get a merge request.

        Args:
            project_id: Numeric id or full path of the project.
            mr_iid: Project-scoped merge request number.

        Raises:
            NotFoundError: If the merge request doesn't exist.

        """
        response = self._http.get(
            f"/projects/{encode_id(project_id)}/merge_requests/{mr_iid}"
        )
        return self._parse_response(response.data, MergeRequest)

    def list(
        self,
        project_id: int | str,
        query: MergeRequestQuery | None = None,
    ) -> Iterator[MergeRequest]:
        """Iterate over a project's merge requests, fetching pages lazily."""
        return self._iter_pages(
            f"/projects/{encode_id(project_id)}/merge_requests", MergeRequest, query
        )

    def accept(
        self,
        project_id: int | str,
        mr_iid: int,
        options: MergeRequestAccept | None = None,
    ) -> MergeRequest:
        """Merge a merge request.

        Args:
            project_id: Numeric id or full path of the project.
            mr_iid: Project-scoped merge request number.
            options: Merge options; unset options follow the project settings.

        Returns:
            The merge request after the merge (or after scheduling it).

        Raises:
            ConflictError: If the merge request cannot be merged, or ``sha``
                does not match the source branch HEAD.
            AuthenticationError: If the caller is not authenticated.

        Example:
            >>> client.merge_requests.accept(
            ...     "my-org/api", 42,
            ...     MergeRequestAccept(should_remove_source_branch=True, squash=True),
            ... )

        """
        body = options.serialize() if options is not None else {}
        try:
            response = self._http.put(
                f"/projects/{encode_id(project_id)}/merge_requests/{mr_iid}/merge",
                json_data=body,
            )
        except GitLabError as e:
            if e.status_code in _NOT_MERGEABLE_STATUSES and not isinstance(e, ConflictError):
                raise ConflictError(
                    e.message,
                    response_data=e.response_data,
                    status_code=e.status_code,
                ) from e
            raise

        merge_request = self._parse_response(response.data, MergeRequest)
        logger.info("Accepted merge request !%d in project %s", mr_iid, project_id)
        return merge_request
