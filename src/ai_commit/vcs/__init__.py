"""
Version control system (VCS) integration.

The :class:`GitClient` reads the staged change set, branch and history
information from a Git working copy and creates commits.
"""

from .git_client import GitClient, GitError, NotARepositoryError  # noqa: F401
