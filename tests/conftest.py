"""Test configuration and shared fixtures."""

from __future__ import annotations

import json
from collections.abc import Iterator
from typing import Any
from urllib.parse import unquote

import httpx
import pytest
from gitlab_client import ClientConfig, GitLabClient

BASE_URL = "https://gitlab.example.com/api/v4"
API_PREFIX = "/api/v4"
PURGE_DATE = "2026-10-26"

ENV_VARS = (
    "GITLAB_TOKEN",
    "GITLAB_BASE_URL",
    "GITLAB_TIMEOUT",
    "GITLAB_PER_PAGE",
    "GITLAB_DELETE_TIMEOUT",
    "GITLAB_POLL_INTERVAL",
)


def _error(status: int, message: Any = None, error: str | None = None) -> httpx.Response:
    body: dict[str, Any] = {}
    if message is not None:
        body["message"] = message
    if error is not None:
        body["error"] = error
    return httpx.Response(status, json=body)


# =============================================================================
# Fake GitLab Server
# =============================================================================


class FakeGitLab:
    """In-memory GitLab that speaks just enough of the REST API for the tests.

    Groups and projects are soft-deleted (marked) when ``delayed_deletion`` is
    on, and removed outright otherwise. Every request is recorded in
    ``requests``.

    """

    def __init__(self, *, delayed_deletion: bool = True, token: str | None = None) -> None:
        self.groups: dict[int, dict[str, Any]] = {}
        self.projects: dict[int, dict[str, Any]] = {}
        self.merge_requests: dict[tuple[int, int], dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.delayed_deletion = delayed_deletion
        self.token = token
        self.last_merge_body: dict[str, Any] | None = None
        self._failures: dict[tuple[str, str], tuple[int, dict[str, Any], dict[str, str]]] = {}
        self._next_id = 1

    # -------------------------------------------------------------------------
    # Fixture builders
    # -------------------------------------------------------------------------

    def _allocate_id(self) -> int:
        next_id = self._next_id
        self._next_id += 1
        return next_id

    def add_group(
        self,
        name: str,
        path: str | None = None,
        *,
        parent_id: int | None = None,
        visibility: str = "private",
        description: str = "",
        marked_for_deletion_on: str | None = None,
        request_access_enabled: bool = True,
        lfs_enabled: bool = True,
    ) -> dict[str, Any]:
        group_id = self._allocate_id()
        path = path or name.lower().replace(" ", "-")
        if parent_id is None:
            full_path, full_name = path, name
        else:
            parent = self.groups[parent_id]
            full_path = f"{parent['full_path']}/{path}"
            full_name = f"{parent['full_name']} / {name}"
        group = {
            "id": group_id,
            "name": name,
            "path": path,
            "full_name": full_name,
            "full_path": full_path,
            "description": description,
            "visibility": visibility,
            "parent_id": parent_id,
            "web_url": f"https://gitlab.example.com/groups/{full_path}",
            "avatar_url": None,
            "created_at": "2024-01-15T10:00:00.000Z",
            "marked_for_deletion_on": marked_for_deletion_on,
            "request_access_enabled": request_access_enabled,
            "lfs_enabled": lfs_enabled,
        }
        self.groups[group_id] = group
        return group

    def add_project(
        self,
        name: str,
        path: str | None = None,
        *,
        namespace: dict[str, Any] | None = None,
        visibility: str = "private",
        archived: bool = False,
        marked_for_deletion_at: str | None = None,
    ) -> dict[str, Any]:
        project_id = self._allocate_id()
        path = path or name.lower().replace(" ", "-")
        namespace = namespace or {"id": 0, "name": "root", "path": "root", "full_path": "root"}
        project = {
            "id": project_id,
            "name": name,
            "path": path,
            "path_with_namespace": f"{namespace['full_path']}/{path}",
            "name_with_namespace": f"{namespace['name']} / {name}",
            "description": None,
            "visibility": visibility,
            "default_branch": "main",
            "web_url": f"https://gitlab.example.com/{namespace['full_path']}/{path}",
            "archived": archived,
            "created_at": "2024-02-01T09:30:00.000Z",
            "last_activity_at": "2024-03-01T12:00:00.000Z",
            "namespace": {
                "id": namespace["id"],
                "name": namespace["name"],
                "path": namespace["path"],
                "kind": "group",
                "full_path": namespace["full_path"],
            },
            "marked_for_deletion_at": marked_for_deletion_at,
        }
        self.projects[project_id] = project
        return project

    def add_merge_request(
        self,
        project_id: int,
        title: str,
        *,
        source_branch: str = "feature",
        target_branch: str = "main",
        state: str = "opened",
        labels: list[str] | None = None,
        sha: str = "a1b2c3d4",
        draft: bool = False,
        has_conflicts: bool = False,
    ) -> dict[str, Any]:
        iid = 1 + sum(1 for key in self.merge_requests if key[0] == project_id)
        merge_request = {
            "id": self._allocate_id(),
            "iid": iid,
            "project_id": project_id,
            "title": title,
            "description": "",
            "state": state,
            "source_branch": source_branch,
            "target_branch": target_branch,
            "author": {"id": 7, "username": "jdoe", "name": "Jane Doe", "state": "active"},
            "merge_status": "can_be_merged",
            "detailed_merge_status": "mergeable",
            "sha": sha,
            "merge_commit_sha": None,
            "web_url": f"https://gitlab.example.com/p/{project_id}/-/merge_requests/{iid}",
            "draft": draft,
            "labels": list(labels or []),
            "created_at": "2024-03-10T08:00:00.000Z",
            "updated_at": "2024-03-10T08:00:00.000Z",
            "merged_at": None,
            "has_conflicts": has_conflicts,
        }
        self.merge_requests[(project_id, iid)] = merge_request
        return merge_request

    def fail(
        self,
        method: str,
        path: str,
        status: int,
        body: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Make every ``method path`` request answer with ``status``."""
        self._failures[(method, path)] = (status, body or {}, headers or {})

    def purge(self, group_id: int) -> None:
        """Simulate the background job that removes a marked group."""
        self.groups.pop(group_id, None)

    def count(self, method: str, path: str) -> int:
        """Count recorded requests for ``method path``."""
        return sum(
            1
            for request in self.requests
            if request.method == method and self._api_path(request) == path
        )

    # -------------------------------------------------------------------------
    # Transport handler
    # -------------------------------------------------------------------------

    @staticmethod
    def _api_path(request: httpx.Request) -> str:
        raw_path = request.url.raw_path.decode("ascii").split("?", 1)[0]
        if raw_path.startswith(API_PREFIX):
            raw_path = raw_path[len(API_PREFIX) :]
        return raw_path

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = self._api_path(request)

        failure = self._failures.get((request.method, path))
        if failure is not None:
            status, body, headers = failure
            return httpx.Response(status, json=body, headers=headers)

        if self.token is not None and request.headers.get("PRIVATE-TOKEN") != self.token:
            return _error(401, "401 Unauthorized")

        segments = [unquote(segment) for segment in path.strip("/").split("/")]
        resource, rest = segments[0], segments[1:]

        if resource == "groups":
            return self._handle_groups(request, path, rest)
        if resource == "projects":
            return self._handle_projects(request, path, rest)
        return _error(404, error="404 Not Found")

    def _body(self, request: httpx.Request) -> dict[str, Any]:
        return json.loads(request.content) if request.content else {}

    def _paginated(
        self,
        request: httpx.Request,
        path: str,
        items: list[dict[str, Any]],
    ) -> httpx.Response:
        params = request.url.params
        page = int(params.get("page", "1"))
        per_page = int(params.get("per_page", "20"))
        total = len(items)
        total_pages = max(1, -(-total // per_page))
        start = (page - 1) * per_page
        chunk = items[start : start + per_page]

        next_page = page + 1 if page < total_pages else None
        prev_page = page - 1 if page > 1 else None

        def link(target: int, rel: str) -> str:
            return f'<{BASE_URL}{path}?page={target}&per_page={per_page}>; rel="{rel}"'

        links = []
        if next_page:
            links.append(link(next_page, "next"))
        if prev_page:
            links.append(link(prev_page, "prev"))
        links.append(link(1, "first"))
        links.append(link(total_pages, "last"))

        headers = {
            "X-Page": str(page),
            "X-Per-Page": str(per_page),
            "X-Total": str(total),
            "X-Total-Pages": str(total_pages),
            "X-Next-Page": str(next_page) if next_page else "",
            "X-Prev-Page": str(prev_page) if prev_page else "",
            "Link": ", ".join(links),
        }
        return httpx.Response(200, json=chunk, headers=headers)

    @staticmethod
    def _sorted(
        items: list[dict[str, Any]],
        params: httpx.QueryParams,
        default_order: str,
        default_sort: str,
    ) -> list[dict[str, Any]]:
        order_by = params.get("order_by", default_order)
        reverse = params.get("sort", default_sort) == "desc"
        return sorted(items, key=lambda item: item[order_by], reverse=reverse)

    @staticmethod
    def _matches(item: dict[str, Any], term: str | None) -> bool:
        if not term:
            return True
        term = term.lower()
        return term in item["name"].lower() or term in item["path"].lower()

    # -------------------------------------------------------------------------
    # Groups
    # -------------------------------------------------------------------------

    def _find_group(self, key: str) -> dict[str, Any] | None:
        if key.isdigit():
            return self.groups.get(int(key))
        return next((g for g in self.groups.values() if g["full_path"] == key), None)

    def _handle_groups(
        self,
        request: httpx.Request,
        path: str,
        rest: list[str],
    ) -> httpx.Response:
        params = request.url.params

        if not rest:
            if request.method == "POST":
                return self._create_group(self._body(request))
            skip = {int(value) for value in params.get_list("skip_groups[]")}
            groups = [
                group
                for group in self.groups.values()
                if group["id"] not in skip and self._matches(group, params.get("search"))
            ]
            if params.get("top_level_only") == "true":
                groups = [group for group in groups if group["parent_id"] is None]
            return self._paginated(request, path, self._sorted(groups, params, "name", "asc"))

        group = self._find_group(rest[0])
        if group is None:
            return _error(404, "404 Group Not Found")

        if len(rest) == 1 and request.method == "GET":
            projects = [p for p in self.projects.values() if p["namespace"]["id"] == group["id"]]
            return httpx.Response(200, json={**group, "projects": projects})

        if len(rest) == 1 and request.method == "DELETE":
            return self._delete_group(group, params)

        if rest[1:] == ["projects"] and request.method == "GET":
            projects = [
                project
                for project in self.projects.values()
                if project["namespace"]["id"] == group["id"]
                and self._matches(project, params.get("search"))
            ]
            return self._paginated(request, path, self._sorted(projects, params, "id", "desc"))

        if rest[1:] == ["restore"] and request.method == "POST":
            if group["marked_for_deletion_on"] is None:
                return _error(400, "Group has not been marked for deletion")
            group["marked_for_deletion_on"] = None
            return httpx.Response(201, json=group)

        return _error(405, "405 Method Not Allowed")

    def _create_group(self, body: dict[str, Any]) -> httpx.Response:
        missing = [name for name in ("name", "path") if not body.get(name)]
        if missing:
            return _error(400, error=", ".join(f"{name} is missing" for name in missing))
        parent_id = body.get("parent_id")
        if any(g["path"] == body["path"] and g["parent_id"] == parent_id for g in self.groups.values()):
            return _error(400, {"path": ["has already been taken"]})
        group = self.add_group(
            body["name"],
            body["path"],
            parent_id=parent_id,
            visibility=body.get("visibility", "private"),
            description=body.get("description", ""),
            request_access_enabled=body.get("request_access_enabled", True),
            lfs_enabled=body.get("lfs_enabled", True),
        )
        return httpx.Response(201, json=group)

    def _delete_group(
        self,
        group: dict[str, Any],
        params: httpx.QueryParams,
    ) -> httpx.Response:
        if params.get("permanently_remove") == "true":
            if params.get("full_path") != group["full_path"]:
                return _error(400, "`full_path` is incorrect. You must enter the complete path.")
            self.groups.pop(group["id"])
        elif group["marked_for_deletion_on"] is not None:
            return _error(400, "Group has been already marked for deletion")
        elif self.delayed_deletion:
            group["marked_for_deletion_on"] = PURGE_DATE
        else:
            self.groups.pop(group["id"])
        return httpx.Response(202, json={"message": "202 Accepted"})

    # -------------------------------------------------------------------------
    # Projects and merge requests
    # -------------------------------------------------------------------------

    def _find_project(self, key: str) -> dict[str, Any] | None:
        if key.isdigit():
            return self.projects.get(int(key))
        return next(
            (p for p in self.projects.values() if p["path_with_namespace"] == key), None
        )

    def _handle_projects(
        self,
        request: httpx.Request,
        path: str,
        rest: list[str],
    ) -> httpx.Response:
        params = request.url.params

        if not rest:
            if request.method == "POST":
                return self._create_project(self._body(request))
            projects = [p for p in self.projects.values() if self._matches(p, params.get("search"))]
            if "archived" in params:
                archived = params["archived"] == "true"
                projects = [p for p in projects if p["archived"] is archived]
            if "visibility" in params:
                projects = [p for p in projects if p["visibility"] == params["visibility"]]
            return self._paginated(request, path, self._sorted(projects, params, "id", "desc"))

        project = self._find_project(rest[0])
        if project is None:
            return _error(404, "404 Project Not Found")

        if len(rest) == 1 and request.method == "GET":
            return httpx.Response(200, json=project)

        if len(rest) == 1 and request.method == "DELETE":
            if self.delayed_deletion and project["marked_for_deletion_at"] is None:
                project["marked_for_deletion_at"] = PURGE_DATE
            else:
                self.projects.pop(project["id"])
            return httpx.Response(202, json={"message": "202 Accepted"})

        if rest[1:] == ["restore"] and request.method == "POST":
            if project["marked_for_deletion_at"] is None:
                return _error(400, "Project has not been marked for deletion")
            project["marked_for_deletion_at"] = None
            return httpx.Response(201, json=project)

        if len(rest) >= 2 and rest[1] == "merge_requests":
            return self._handle_merge_requests(request, path, project, rest[2:])

        return _error(405, "405 Method Not Allowed")

    def _create_project(self, body: dict[str, Any]) -> httpx.Response:
        if not body.get("name"):
            return _error(400, error="name is missing")
        namespace = None
        if body.get("namespace_id") is not None:
            namespace = self.groups.get(body["namespace_id"])
            if namespace is None:
                return _error(404, "404 Namespace Not Found")
        path = body.get("path") or body["name"].lower().replace(" ", "-")
        full_path = f"{namespace['full_path'] if namespace else 'root'}/{path}"
        if any(p["path_with_namespace"] == full_path for p in self.projects.values()):
            return _error(
                400,
                {"name": ["has already been taken"], "path": ["has already been taken"]},
            )
        project = self.add_project(
            body["name"],
            path,
            namespace=namespace,
            visibility=body.get("visibility", "private"),
        )
        return httpx.Response(201, json=project)

    def _handle_merge_requests(
        self,
        request: httpx.Request,
        path: str,
        project: dict[str, Any],
        rest: list[str],
    ) -> httpx.Response:
        params = request.url.params

        if not rest and request.method == "GET":
            state = params.get("state", "all")
            labels = set(params.get_list("labels[]"))
            merge_requests = [
                mr
                for (project_id, _), mr in self.merge_requests.items()
                if project_id == project["id"]
                and (state == "all" or mr["state"] == state)
                and labels <= set(mr["labels"])
                and params.get("target_branch", mr["target_branch"]) == mr["target_branch"]
                and params.get("source_branch", mr["source_branch"]) == mr["source_branch"]
            ]
            return self._paginated(
                request, path, self._sorted(merge_requests, params, "id", "desc")
            )

        if not rest:
            return _error(405, "405 Method Not Allowed")

        merge_request = self.merge_requests.get((project["id"], int(rest[0])))
        if merge_request is None:
            return _error(404, "404 Not found")

        if len(rest) == 1 and request.method == "GET":
            return httpx.Response(200, json=merge_request)

        if rest[1:] == ["merge"] and request.method == "PUT":
            body = self._body(request)
            self.last_merge_body = body
            if merge_request["state"] != "opened" or merge_request["draft"]:
                return _error(405, "405 Method Not Allowed")
            if merge_request["has_conflicts"]:
                return _error(406, "Branch cannot be merged")
            if "sha" in body and body["sha"] != merge_request["sha"]:
                return _error(409, "SHA does not match HEAD of source branch")
            merge_request["state"] = "merged"
            merge_request["merged_at"] = "2024-03-11T09:00:00.000Z"
            merge_request["merge_commit_sha"] = "f0e1d2c3"
            return httpx.Response(200, json=merge_request)

        return _error(405, "405 Method Not Allowed")


# =============================================================================
# Environment
# =============================================================================


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep GITLAB_* variables from the developer's shell or .env out of tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


# =============================================================================
# Sample API Responses
# =============================================================================


@pytest.fixture
def sample_group_response() -> dict[str, Any]:
    """Sample GitLab group API response."""
    return {
        "id": 4,
        "name": "Twitter",
        "path": "twitter",
        "description": "Aliquid qui quis dignissimos distinctio ut commodi voluptas est.",
        "visibility": "public",
        "share_with_group_lock": False,
        "require_two_factor_authentication": False,
        "two_factor_grace_period": 48,
        "project_creation_level": "developer",
        "auto_devops_enabled": None,
        "subgroup_creation_level": "owner",
        "emails_disabled": None,
        "mentions_disabled": None,
        "lfs_enabled": True,
        "default_branch_protection": 2,
        "avatar_url": None,
        "web_url": "https://gitlab.example.com/groups/twitter",
        "request_access_enabled": False,
        "full_name": "Twitter",
        "full_path": "twitter",
        "file_template_project_id": 1,
        "parent_id": None,
        "created_at": "2020-01-15T12:36:29.590Z",
        "marked_for_deletion_on": None,
        "projects": [
            {
                "id": 7,
                "description": "Voluptas veniam qui et beatae voluptas doloremque explicabo facilis.",
                "default_branch": "main",
                "visibility": "public",
                "web_url": "https://gitlab.example.com/twitter/typeahead-js",
                "name": "Typeahead.Js",
                "name_with_namespace": "Twitter / Typeahead.Js",
                "path": "typeahead-js",
                "path_with_namespace": "twitter/typeahead-js",
                "archived": False,
                "created_at": "2016-06-17T07:47:25.578Z",
                "last_activity_at": "2016-06-17T07:47:25.881Z",
                "namespace": {
                    "id": 4,
                    "name": "Twitter",
                    "path": "twitter",
                    "kind": "group",
                    "full_path": "twitter",
                    "parent_id": None,
                },
                "marked_for_deletion_at": None,
            }
        ],
    }


@pytest.fixture
def sample_project_response() -> dict[str, Any]:
    """Sample GitLab project API response."""
    return {
        "id": 3,
        "description": "Lorem ipsum dolor sit amet, consectetur adipiscing elit.",
        "default_branch": "main",
        "visibility": "private",
        "ssh_url_to_repo": "git@gitlab.example.com:diaspora/diaspora-project-site.git",
        "http_url_to_repo": "https://gitlab.example.com/diaspora/diaspora-project-site.git",
        "web_url": "https://gitlab.example.com/diaspora/diaspora-project-site",
        "topics": ["example", "disapora project"],
        "name": "Diaspora Project Site",
        "name_with_namespace": "Diaspora / Diaspora Project Site",
        "path": "diaspora-project-site",
        "path_with_namespace": "diaspora/diaspora-project-site",
        "issues_enabled": True,
        "open_issues_count": 1,
        "merge_requests_enabled": True,
        "created_at": "2013-09-30T13:46:02Z",
        "last_activity_at": "2013-09-30T13:46:02Z",
        "creator_id": 3,
        "namespace": {
            "id": 3,
            "name": "Diaspora",
            "path": "diaspora",
            "kind": "group",
            "full_path": "diaspora",
            "parent_id": None,
            "web_url": "https://gitlab.example.com/diaspora",
        },
        "archived": False,
        "marked_for_deletion_at": "2026-10-26",
        "star_count": 0,
        "forks_count": 0,
    }


@pytest.fixture
def sample_merge_request_response() -> dict[str, Any]:
    """Sample GitLab merge request API response."""
    return {
        "id": 155016530,
        "iid": 133,
        "project_id": 15513260,
        "title": "Manual job rules",
        "description": "",
        "state": "opened",
        "created_at": "2022-05-13T07:26:38.402Z",
        "updated_at": "2022-05-14T03:38:31.354Z",
        "merged_by": None,
        "merged_at": None,
        "target_branch": "main",
        "source_branch": "manual-job-rules",
        "author": {
            "id": 4155490,
            "username": "marcel.amirault",
            "name": "Marcel Amirault",
            "state": "active",
            "web_url": "https://gitlab.com/marcel.amirault",
        },
        "labels": ["bug", "backend"],
        "draft": False,
        "work_in_progress": False,
        "merge_when_pipeline_succeeds": False,
        "merge_status": "can_be_merged",
        "detailed_merge_status": "mergeable",
        "sha": "e82eb4a098e32c796079ca3915e07487fc4db24c",
        "merge_commit_sha": None,
        "web_url": "https://gitlab.com/marcel.amirault/test-project/-/merge_requests/133",
    }


# =============================================================================
# Client Fixtures
# =============================================================================


@pytest.fixture
def config() -> ClientConfig:
    """Create a test configuration."""
    return ClientConfig(
        base_url=BASE_URL,
        token="glpat-test-token",
        timeout=5.0,
    )


@pytest.fixture
def fake_gitlab() -> FakeGitLab:
    """An empty fake GitLab with delayed deletion enabled."""
    return FakeGitLab()


@pytest.fixture
def client(fake_gitlab: FakeGitLab) -> Iterator[GitLabClient]:
    """A client wired to ``fake_gitlab`` through httpx.MockTransport."""
    gitlab = GitLabClient(
        token="glpat-test-token",
        base_url=BASE_URL,
        timeout=5.0,
        delete_timeout=1.0,
        poll_interval=0.0,
        transport=httpx.MockTransport(fake_gitlab.handle),
    )
    yield gitlab
    gitlab.close()


@pytest.fixture
def make_client(fake_gitlab: FakeGitLab) -> Iterator[Any]:
    """Build extra clients against ``fake_gitlab``; all are closed afterwards."""
    clients: list[GitLabClient] = []

    def factory(**kwargs: Any) -> GitLabClient:
        kwargs.setdefault("base_url", BASE_URL)
        kwargs.setdefault("transport", httpx.MockTransport(fake_gitlab.handle))
        gitlab = GitLabClient(**kwargs)
        clients.append(gitlab)
        return gitlab

    yield factory
    for gitlab in clients:
        gitlab.close()
