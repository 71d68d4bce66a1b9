"""Endpoint modules for the GitLab API.

Each module in this package implements a group of related API endpoints.

Available endpoint groups:
    - groups: Groups and their projects
    - projects: Projects
    - merge_requests: Merge requests

"""

from gitlab_client.endpoints.base import BaseEndpoint, encode_id
from gitlab_client.endpoints.groups import GroupsEndpoint
from gitlab_client.endpoints.merge_requests import MergeRequestsEndpoint
from gitlab_client.endpoints.projects import ProjectsEndpoint

__all__ = [
    "BaseEndpoint",
    "GroupsEndpoint",
    "MergeRequestsEndpoint",
    "ProjectsEndpoint",
    "encode_id",
]
