#!/usr/bin/env python
"""Create, delete, confirm and restore a group.

Group deletion is asynchronous: the DELETE call returns before the group is
gone, and instances with delayed deletion only mark it. This script shows how
to wait for a definite answer.

Requires a token allowed to create top-level groups (self-managed instances).

Run: python examples/group_lifecycle.py
"""

import logging
import uuid

from gitlab_client import (
    ConflictError,
    DeadlineExceededError,
    GitLabClient,
    GroupCreate,
    VisibilityLevel,
)
from gitlab_client.utils import configure_logging


def main() -> None:
    """Walk a disposable group through its lifecycle."""
    configure_logging(level=logging.INFO)

    suffix = uuid.uuid4().hex[:8]
    name = f"example-{suffix}"

    with GitLabClient() as client:
        print("\n1️⃣  Creating a group...")
        group = client.groups.create(
            GroupCreate(name=name, path=name, visibility=VisibilityLevel.PRIVATE)
        )
        print(f"  Created {group.full_path} (id={group.id})")

        print("\n2️⃣  Deleting it and waiting for confirmation...")
        client.groups.delete(group.id)
        try:
            remaining = client.groups.wait_for_deletion(name, timeout=60)
        except DeadlineExceededError as e:
            print(f"  Gave up: {e} (last saw {len(e.last_result)} match(es))")
            return

        if not remaining:
            print("  The group is gone")
            return
        print(f"  Marked for deletion on {remaining[0].marked_for_deletion_on}")

        print("\n3️⃣  Restoring it...")
        try:
            restored = client.groups.restore(group.id)
            print(f"  Restored {restored.full_path}")
        except ConflictError:
            print("  Too late, the group was already purged")
            return

        print("\n4️⃣  Cleaning up old example groups...")
        deleted = client.groups.delete_stale("example-", keep=0)
        print(f"  Scheduled {len(deleted)} group(s) for deletion")

    print("\n✅ Done!")


if __name__ == "__main__":
    main()
