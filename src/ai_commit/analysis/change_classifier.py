"""
Heuristics for classifying a staged change set into a Conventional Commit type.

The classifier looks at file paths and aggregate add/delete statistics
only. It is intentionally simple and deterministic so that it can be unit
tested without requiring a language model. Every file is put into at most
one bucket, then a fixed precedence of rules is applied to the buckets of
the whole set, so the result does not depend on file order.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

from ai_commit.analysis.models import ChangeSet, CommitCategory, FileChange


def is_test_file(path: str) -> bool:
    name = path.rsplit("/", 1)[-1]
    return (
        ".test." in path
        or ".spec." in path
        or (name.startswith("test_") and name.endswith(".py"))
        or name.endswith("_test.py")
    )


def is_doc_file(path: str) -> bool:
    return path.endswith(".md")


def is_config_file(path: str) -> bool:
    return any(
        marker in path
        for marker in ("package.json", "tsconfig.json", ".config.", "pyproject.toml", "setup.cfg")
    )


def is_build_file(path: str) -> bool:
    return any(marker in path for marker in ("webpack", "vite", "build", "/dist/"))


def is_cli_file(path: str) -> bool:
    return "/cli/" in path or "cli-" in path


def is_component_file(path: str) -> bool:
    return "component" in path or path.endswith((".tsx", ".jsx"))


def is_api_file(path: str) -> bool:
    return "/api/" in path or "route." in path or "controller" in path


def is_style_file(path: str) -> bool:
    return path.endswith((".css", ".scss")) or "style" in path


# Buckets in the order a file is tested against them; a file lands in the
# first bucket that matches.
BUCKETS: Tuple[Tuple[str, Callable[[str], bool]], ...] = (
    ("test", is_test_file),
    ("docs", is_doc_file),
    ("config", is_config_file),
    ("build", is_build_file),
    ("cli", is_cli_file),
    ("component", is_component_file),
    ("api", is_api_file),
    ("style", is_style_file),
)


def bucket_for(path: str) -> Optional[str]:
    """Return the name of the first bucket matching ``path``, if any."""
    for name, matches in BUCKETS:
        if matches(path):
            return name
    return None


def _is_notable(change: FileChange, bucket: Optional[str]) -> bool:
    if bucket == "docs":
        return change.additions > 10
    if bucket == "component":
        return change.churn > 20
    if bucket == "api":
        return True
    if bucket is None:
        return change.churn > 30
    return False


def _magnitude_type(additions: int, deletions: int) -> Tuple[str, str]:
    if additions > deletions * 2:
        return "feat", "features"
    if deletions > additions * 2:
        return "refactor", "refactoring"
    return "fix", "fixes"


def classify_changes(change_set: ChangeSet) -> CommitCategory:
    """Classify a change set into a Conventional Commit type and category.

    Parameters
    ----------
    change_set : ChangeSet
        Staged snapshot; must contain at least one file.

    Returns
    -------
    CommitCategory
        The commit type, a descriptive category label and the files
        judged individually significant.

    Raises
    ------
    ValueError
        If ``change_set`` has no files.

    Notes
    -----
    Rules, first match wins: any test file; docs without UI/API files;
    config files in a set of at most three files; build or CLI files;
    styles without UI/API files; API files; UI files; otherwise the ratio
    of added to deleted lines decides between ``feat``, ``refactor`` and
    ``fix``.
    """
    if not change_set.has_changes:
        raise ValueError("Cannot classify an empty change set")

    present: Dict[str, bool] = {name: False for name, _ in BUCKETS}
    notable: List[str] = []
    for change in change_set.files:
        bucket = bucket_for(change.path)
        if bucket is not None:
            present[bucket] = True
        if _is_notable(change, bucket):
            notable.append(change.path)

    additions = change_set.total_additions
    deletions = change_set.total_deletions
    has_ui_or_api = present["component"] or present["api"]

    if present["test"]:
        commit_type, category = "test", "testing"
    elif present["docs"] and not has_ui_or_api:
        commit_type, category = "docs", "documentation"
    elif present["config"] and len(change_set.files) <= 3:
        commit_type, category = "chore", "configuration"
    elif present["build"] or present["cli"]:
        commit_type, category = "build", "cli" if present["cli"] else "build"
    elif present["style"] and not has_ui_or_api:
        commit_type, category = "style", "styling"
    elif present["api"]:
        commit_type, category = ("feat" if additions > 50 else "fix"), "API"
    elif present["component"]:
        commit_type, category = ("feat" if additions > 50 else "fix"), "components"
    else:
        commit_type, category = _magnitude_type(additions, deletions)

    return CommitCategory(type=commit_type, category=category, notable_files=tuple(sorted(notable)))
