"""
Data models for change analysis.

A :class:`ChangeSet` is the immutable snapshot of the staged files that
every other component consumes. :class:`DiffSignals` and
:class:`CommitCategory` are intermediate results of the heuristic path
and are never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple


class FileStatus(str, Enum):
    """Single-letter index status codes reported by ``git status``."""

    ADDED = "A"
    MODIFIED = "M"
    DELETED = "D"
    RENAMED = "R"
    COPIED = "C"
    UNMERGED = "U"

    @classmethod
    def from_code(cls, code: str) -> "FileStatus":
        """Map a status letter to a :class:`FileStatus`.

        Unknown or empty codes are treated as modifications.
        """
        try:
            return cls(code.strip()[:1].upper())
        except ValueError:
            return cls.MODIFIED

    def __str__(self) -> str:
        return self.value


def count_diff_lines(diff: str) -> Tuple[int, int]:
    """Return ``(additions, deletions)`` counted from unified diff prefixes.

    The ``+++``/``---`` file header lines are not counted.
    """
    additions = 0
    deletions = 0
    for line in diff.splitlines():
        if line.startswith("+++ ") or line.startswith("--- "):
            continue
        if line.startswith("+"):
            additions += 1
        elif line.startswith("-"):
            deletions += 1
    return additions, deletions


@dataclass(frozen=True)
class FileChange:
    """One staged file.

    Attributes
    ----------
    path : str
        Repository-relative path (the new path for renames).
    status : FileStatus
        Index status of the file.
    additions, deletions : int
        Line counts taken from the diff prefixes.
    diff : str
        Raw unified diff body; empty when it could not be read.
    """

    path: str
    status: FileStatus = FileStatus.MODIFIED
    additions: int = 0
    deletions: int = 0
    diff: str = ""

    @classmethod
    def from_diff(cls, path: str, status: object, diff: str) -> "FileChange":
        if not isinstance(status, FileStatus):
            status = FileStatus.from_code(str(status))
        additions, deletions = count_diff_lines(diff)
        return cls(path=path, status=status, additions=additions, deletions=deletions, diff=diff)

    @property
    def churn(self) -> int:
        return self.additions + self.deletions

    @property
    def name(self) -> str:
        """Basename of the file."""
        return self.path.rsplit("/", 1)[-1]


@dataclass(frozen=True)
class ChangeSet:
    """The full staged snapshot.

    ``summary`` and ``has_changes`` are computed from ``files`` so they
    always agree with it. ``degraded_files`` lists the paths whose diff
    could not be retrieved and which are present as zero-stat entries.
    """

    files: Tuple[FileChange, ...] = ()
    degraded_files: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Accept any iterable but store tuples so the snapshot stays immutable
        object.__setattr__(self, "files", tuple(self.files))
        object.__setattr__(self, "degraded_files", tuple(self.degraded_files))

    @property
    def has_changes(self) -> bool:
        return len(self.files) > 0

    @property
    def total_additions(self) -> int:
        return sum(f.additions for f in self.files)

    @property
    def total_deletions(self) -> int:
        return sum(f.deletions for f in self.files)

    @property
    def summary(self) -> str:
        if not self.files:
            return "No staged changes found"
        return (
            f"{len(self.files)} file(s) changed, "
            f"{self.total_additions} insertions(+), {self.total_deletions} deletions(-)"
        )

    def with_status(self, status: FileStatus) -> Tuple[FileChange, ...]:
        """Return the files that have the given status."""
        return tuple(f for f in self.files if f.status == status)

    def __len__(self) -> int:
        return len(self.files)


@dataclass(frozen=True)
class DiffSignals:
    """Shallow structural signals extracted from the added diff lines.

    Every tuple is de-duplicated (first occurrence wins) and capped; see
    :mod:`ai_commit.analysis.diff_signals` for the caps.
    """

    functions: Tuple[str, ...] = ()
    classes: Tuple[str, ...] = ()
    components: Tuple[str, ...] = ()
    dependencies: Tuple[str, ...] = ()
    config_keys: Tuple[str, ...] = ()
    ui_tags: Tuple[str, ...] = ()
    http_verbs: Tuple[str, ...] = ()
    dominant_purpose: str = ""


@dataclass(frozen=True)
class CommitCategory:
    """Classifier output.

    Attributes
    ----------
    type : str
        Conventional commit type.
    category : str
        Label driving the summarizer's phrasing and default scope, e.g.
        ``"testing"``, ``"documentation"``, ``"API"``.
    notable_files : tuple of str
        Individually significant paths, sorted.
    """

    type: str
    category: str
    notable_files: Tuple[str, ...] = field(default_factory=tuple)
