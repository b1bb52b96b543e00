"""
Git client implementation for ai_commit.

This module wraps the Git operations the assistant needs: reading the
staged change set, the current branch and recent commit subjects, and
creating a commit. All subprocess calls go through :meth:`GitClient._run`
so that unit tests can mock them easily.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Tuple

from ai_commit.analysis.models import ChangeSet, FileChange, FileStatus


logger = logging.getLogger(__name__)
# Attach a null handler to avoid logging errors when the root logger is not
# configured. Logs will propagate to the root when configured by the CLI.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


UNMERGED_CODES = {"DD", "AU", "UD", "UA", "DU", "AA", "UU"}


class GitError(Exception):
    """Raised when a Git command fails."""

    pass


class NotARepositoryError(GitError):
    """Raised when the working directory is not inside a Git repository."""

    pass


def parse_status_line(line: str) -> Optional[Tuple[str, FileStatus]]:
    """Parse one ``git status --porcelain -z`` record into ``(path, status)``.

    Only staged entries are returned; untracked, ignored and
    worktree-only entries yield ``None``. Paths in ``-z`` output are
    neither quoted nor escaped.
    """
    if len(line) < 4:
        return None
    code = line[:2]
    path = line[3:]
    if code in ("??", "!!"):
        return None
    if code in UNMERGED_CODES:
        return path, FileStatus.UNMERGED
    index_code = code[0]
    if index_code == " ":
        return None
    return path, FileStatus.from_code(index_code)


def parse_status_output(output: str) -> List[Tuple[str, FileStatus]]:
    """Parse NUL-separated ``git status --porcelain -z`` output.

    Renames and copies carry their original path as an extra record,
    which is skipped so the new path is reported.
    """
    records = output.split("\0")
    staged = []
    index = 0
    while index < len(records):
        record = records[index]
        index += 1
        if not record:
            continue
        if "R" in record[:2] or "C" in record[:2]:
            index += 1
        parsed = parse_status_line(record)
        if parsed is not None:
            staged.append(parsed)
    return staged


class GitClient:
    """Client for interacting with a Git repository."""

    def __init__(self, repo_root: Path) -> None:
        self.repo_root = repo_root

    # ------------------------------------------------------------------
    # Static helpers
    # ------------------------------------------------------------------
    @staticmethod
    def is_repo(path: Path) -> bool:
        """Return True if the given path is inside a Git repository."""
        return GitClient.find_repo_root(path) is not None

    @staticmethod
    def find_repo_root(start: Path) -> Optional[Path]:
        """Find the root of the Git repository starting from ``start``.

        Walk upwards until a ``.git`` directory (or file, for worktrees)
        is found or the filesystem root is reached.
        """
        current = start.resolve()
        while True:
            if (current / ".git").exists():
                return current
            if current.parent == current:
                return None
            current = current.parent

    @classmethod
    def discover(cls, start: Path) -> "GitClient":
        """Return a client for the repository containing ``start``.

        Raises
        ------
        NotARepositoryError
            If ``start`` is not inside a Git repository.
        """
        root = cls.find_repo_root(start)
        if root is None:
            raise NotARepositoryError(f"Not a Git repository: {start}")
        return cls(root)

    # ------------------------------------------------------------------
    # Basic Git commands
    # ------------------------------------------------------------------
    def _run(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """Run a Git command in the repository root.

        Raises
        ------
        GitError
            If the command exits with a non-zero status when ``check`` is True.
        """
        full_cmd = ["git"] + args
        logger.debug("Executing Git command: %s", " ".join(full_cmd))
        try:
            result = subprocess.run(
                full_cmd,
                cwd=self.repo_root,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            logger.error("Failed to execute git: %s", exc)
            raise GitError(f"Failed to execute git: {exc}") from exc

        if check and result.returncode != 0:
            logger.error(
                "Git command failed: %s\nSTDOUT: %s\nSTDERR: %s",
                " ".join(full_cmd),
                result.stdout,
                result.stderr,
            )
            message = result.stderr.strip() or result.stdout.strip()
            if "not a git repository" in message.lower():
                raise NotARepositoryError(message)
            raise GitError(message)
        return result

    # ------------------------------------------------------------------
    # Staged changes
    # ------------------------------------------------------------------
    def get_staged_files(self) -> List[Tuple[str, FileStatus]]:
        """List staged paths with their index status, in status order."""
        result = self._run(["status", "--porcelain", "-z"], check=True)
        return parse_status_output(result.stdout)

    def get_diff(self, path: str) -> str:
        """Return the staged unified diff of ``path`` against HEAD."""
        return self._run(["diff", "--cached", "--", path], check=True).stdout

    def get_staged_changes(self) -> ChangeSet:
        """Build the :class:`ChangeSet` for everything currently staged.

        A file whose diff cannot be read is kept as a zero-stat entry and
        listed in ``ChangeSet.degraded_files`` instead of failing the
        whole query.

        Raises
        ------
        GitError
            If the status query itself fails.
        """
        files: List[FileChange] = []
        degraded: List[str] = []
        for path, status in self.get_staged_files():
            try:
                diff = self.get_diff(path)
            except GitError as exc:
                logger.warning("Failed to get diff for %s: %s", path, exc)
                files.append(FileChange(path=path, status=status))
                degraded.append(path)
                continue
            files.append(FileChange.from_diff(path, status, diff))
        return ChangeSet(files=tuple(files), degraded_files=tuple(degraded))

    # ------------------------------------------------------------------
    # History and branch information
    # ------------------------------------------------------------------
    def get_current_branch(self) -> str:
        """Get the name of the current branch (``HEAD`` when detached)."""
        result = self._run(["branch", "--show-current"], check=True)
        return result.stdout.strip() or "HEAD"

    def get_recent_commits(self, limit: int = 5) -> List[str]:
        """Return the subject lines of the last ``limit`` commits.

        A repository without commits yields an empty list.
        """
        result = self._run(["log", f"--max-count={limit}", "--pretty=format:%s"], check=False)
        if result.returncode != 0:
            logger.debug("git log failed: %s", result.stderr.strip())
            return []
        return [line for line in result.stdout.splitlines() if line.strip()]

    def get_repository_name(self) -> str:
        """Name of the ``origin`` remote's repository, else the directory name."""
        result = self._run(["remote", "get-url", "origin"], check=False)
        url = result.stdout.strip()
        if result.returncode == 0 and url:
            name = url.rstrip("/").rsplit("/", 1)[-1].rsplit(":", 1)[-1]
            if name.endswith(".git"):
                name = name[: -len(".git")]
            if name:
                return name
        return self.repo_root.name

    # ------------------------------------------------------------------
    # Committing
    # ------------------------------------------------------------------
    def commit(self, message: str) -> None:
        """Create a commit of the staged changes with the given message.

        Multi-line commit messages are supported. If the commit fails,
        a GitError is raised.
        """
        self._run(["commit", "-m", message], check=True)
