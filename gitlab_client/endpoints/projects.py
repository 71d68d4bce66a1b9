"""Projects endpoint implementation.

This module provides methods for interacting with GitLab's Projects API:
- Get a project by id or full path
- List and search projects with a ProjectQuery
- Create, delete and restore projects

API Reference: https://docs.gitlab.com/ee/api/projects.html

"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from gitlab_client.endpoints.base import BaseEndpoint, encode_id
from gitlab_client.exceptions import ConflictError, NotFoundError
from gitlab_client.models import Project, ProjectCreate
from gitlab_client.queries import ProjectQuery
from gitlab_client.utils.pagination import PaginatedResponse
from gitlab_client.utils.polling import wait_until_deleted

logger = logging.getLogger(__name__)


class ProjectsEndpoint(BaseEndpoint):
    """Endpoint for project-related API calls.

    Example:
        >>> project = client.projects.get("my-org/platform/api")
        >>> for project in client.projects.list(ProjectQuery(owned=True)):
        ...     print(project.path_with_namespace)

    """

    def get(self, project_id: int | str) -> Project:
        """Get a single project.

        Args:
            project_id: Numeric id or full path (e.g. ``"my-org/api"``).

        Raises:
            NotFoundError: If the project doesn't exist or is invisible to the caller.
            AccessDeniedError: If the caller lacks permission.

        """
        response = self._http.get(f"/projects/{encode_id(project_id)}")
        return self._parse_response(response.data, Project)

    def list(self, query: ProjectQuery | None = None) -> Iterator[Project]:
        """Iterate over projects matching a query, fetching pages lazily."""
        return self._iter_pages("/projects", Project, query)

    def search(self, term: str, *, per_page: int | None = None) -> Iterator[Project]:
        """Iterate over projects whose name or path matches ``term``."""
        return self.list(ProjectQuery(search=term, per_page=per_page))

    def get_page(
        self,
        query: ProjectQuery | None = None,
        page: int = 1,
    ) -> PaginatedResponse[Project]:
        """Get a single page of projects with pagination controls."""
        return self._get_paginated("/projects", Project, query, page)

    def create(self, payload: ProjectCreate) -> Project:
        """Create a new project.

        Raises:
            ValidationError: If GitLab rejects the payload.

        """
        response = self._http.post("/projects", json_data=payload.serialize())
        project = self._parse_response(response.data, Project)
        logger.info("Created project %s (id=%d)", project.path_with_namespace, project.id)
        return project

    def delete(self, project_id: int | str) -> None:
        """Schedule a project for deletion.

        Like groups, projects are removed asynchronously and may first be
        marked for deletion.

        """
        self._http.delete(f"/projects/{encode_id(project_id)}")
        logger.info("Requested deletion of project %s", project_id)

    def restore(self, project_id: int | str) -> Project:
        """Restore a project that is marked for deletion.

        Raises:
            ConflictError: If the project has already been purged.

        """
        try:
            response = self._http.post(f"/projects/{encode_id(project_id)}/restore")
        except NotFoundError as e:
            raise ConflictError(
                f"Project {project_id} cannot be restored: it has already been removed",
                response_data=e.response_data,
                status_code=e.status_code,
            ) from e
        logger.info("Restored project %s", project_id)
        return self._parse_response(response.data, Project)

    def wait_for_deletion(
        self,
        name: str,
        *,
        timeout: float | None = None,
        poll_interval: float | None = None,
    ) -> list[Project]:
        """Poll until no project named ``name`` remains, or it is marked for deletion.

        Each search request is bounded by the time left before the deadline.
        """

        def named(remaining: float) -> list[Project]:
            projects = self._iter_pages(
                "/projects",
                Project,
                ProjectQuery(search=name),
                timeout=min(remaining, self._config.timeout),
            )
            return [project for project in projects if project.name == name]

        return wait_until_deleted(
            named,
            is_marked=lambda project: project.is_marked_for_deletion,
            timeout=self._config.delete_timeout if timeout is None else timeout,
            poll_interval=self._config.poll_interval if poll_interval is None else poll_interval,
        )
