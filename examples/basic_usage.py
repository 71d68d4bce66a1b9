#!/usr/bin/env python
"""Basic usage examples for the GitLab Client library.

Reads GITLAB_TOKEN (and optionally GITLAB_BASE_URL) from the environment
or a .env file. Public groups can be read without a token.

Run: python examples/basic_usage.py
"""

from gitlab_client import GitLabClient, GroupQuery, MergeRequestQuery


def main() -> None:
    """Demonstrate basic GitLab API operations."""
    client = GitLabClient()

    print("=" * 50)
    print("GitLab Client - Basic Usage Examples")
    print("=" * 50)

    # --- Groups ---
    print("\n🏢 Fetching a group...")
    group = client.groups.get("gitlab-org")
    print(f"  Full path: {group.full_path}")
    print(f"  Visibility: {group.visibility.value if group.visibility else 'n/a'}")
    print(f"  Projects in response: {len(group.projects)}")

    # --- Search ---
    print("\n🔍 Searching groups...")
    for index, found in enumerate(client.groups.search("gitlab", per_page=5)):
        print(f"  - {found.full_path}")
        if index == 4:
            break  # Only the first page is requested

    # --- Projects ---
    print("\n📁 Fetching a project...")
    project = client.projects.get("gitlab-org/gitlab")
    print(f"  Name: {project.name_with_namespace}")
    print(f"  Default branch: {project.default_branch}")

    # --- Merge requests ---
    print("\n🔀 Open merge requests with the 'documentation' label...")
    query = MergeRequestQuery(state="opened", labels=["documentation"], per_page=5)
    for index, mr in enumerate(client.merge_requests.list(project.id, query)):
        print(f"  - !{mr.iid}: {mr.title}")
        if index == 4:
            break

    # --- Owned groups (needs a token) ---
    if client.is_authenticated:
        print("\n👤 Groups you own...")
        for owned in client.groups.list(GroupQuery(owned=True)):
            marker = " (pending deletion)" if owned.is_marked_for_deletion else ""
            print(f"  - {owned.full_path}{marker}")

    client.close()

    print("\n✅ Done!")


if __name__ == "__main__":
    main()
