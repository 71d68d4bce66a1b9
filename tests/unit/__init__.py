"""Unit tests for the GitLab client."""
