"""
Deterministic commit message synthesis.

:func:`summarize` turns a change set, its :class:`CommitCategory` and its
:class:`DiffSignals` into exactly one :class:`Suggestion`. It never calls
a language model and has no hidden state, so calling it twice on the same
input yields the same suggestion. This is the terminal fallback of the
suggestion pipeline and therefore has a default for every branch.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import List, Optional

from ai_commit.analysis.change_classifier import classify_changes
from ai_commit.analysis.deletions import deleted_files_bullets, describe_deleted_files
from ai_commit.analysis.diff_signals import extract_signals
from ai_commit.analysis.models import ChangeSet, CommitCategory, DiffSignals, FileStatus
from ai_commit.suggestion import Suggestion


HEURISTIC_CONFIDENCE = 0.85

_STEM_RE = re.compile(r"\.(ts|tsx|js|jsx|md|py)$")

CATEGORY_SUBJECTS = {
    "documentation": "update documentation ({count} files)",
    "testing": "update tests ({count} files)",
    "configuration": "update configuration files",
    "API": "update API endpoints and handlers",
    "components": "update UI components ({count} files)",
    "styling": "update styles and formatting",
}

CATEGORY_SCOPES = {
    "API": "api",
    "components": "ui",
    "testing": "tests",
    "cli": "cli",
    "build": "build",
}

GENERIC_CONTAINERS = ("src", "lib")
SCOPE_NOISE_RE = re.compile(r"[^\w.-]")


def _names(paths: List[str]) -> str:
    return ", ".join(p.rsplit("/", 1)[-1] for p in paths)


def _plural(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


def _more(items: tuple, suffix: str) -> str:
    extra = len(items) - 3
    return f" and {extra} {suffix}" if extra > 0 else ""


def generate_subject(change_set: ChangeSet, category: CommitCategory, signals: DiffSignals) -> str:
    """Pick the subject line for ``change_set``."""
    files = change_set.files
    if len(files) == 1:
        if signals.dominant_purpose:
            return signals.dominant_purpose
        change = files[0]
        stem = _STEM_RE.sub("", change.name) or change.path
        if change.status == FileStatus.ADDED:
            return f"add {stem}"
        if change.status == FileStatus.DELETED:
            return f"remove {stem}"
        return f"update {stem}"

    count = len(files)
    deleted = change_set.with_status(FileStatus.DELETED)
    if len(deleted) > count * 0.7:
        return describe_deleted_files([f.path for f in deleted])

    if signals.dominant_purpose:
        return signals.dominant_purpose

    template = CATEGORY_SUBJECTS.get(category.category)
    if template:
        return template.format(count=count)

    additions = change_set.total_additions
    deletions = change_set.total_deletions
    if additions > deletions * 2:
        return f"add new functionality ({count} files)"
    if deletions > additions * 2:
        return f"refactor and cleanup ({count} files)"
    return f"update multiple files ({count} changes)"


def _signal_bullets(signals: DiffSignals) -> List[str]:
    bullets: List[str] = []
    if signals.components:
        names = ", ".join(signals.components[:3])
        bullets.append(f"- Implemented new components: {names}{_more(signals.components, 'more')}")
    if signals.classes:
        noun = _plural(len(signals.classes), "class", "classes")
        bullets.append(f"- Added {', '.join(signals.classes)} {noun} for improved architecture")
    if signals.functions and not signals.components:
        names = ", ".join(signals.functions[:3])
        bullets.append(
            f"- Implemented helper functions: {names}{_more(signals.functions, 'more utilities')}"
        )
    if signals.dependencies:
        names = ", ".join(signals.dependencies[:3])
        bullets.append(
            f"- Integrated new dependencies: {names}{_more(signals.dependencies, 'others')}"
        )
    if signals.config_keys:
        bullets.append(
            f"- Updated configuration settings for {', '.join(signals.config_keys[:3])}"
        )
    if signals.http_verbs:
        noun = _plural(len(signals.http_verbs), "endpoint", "endpoints")
        bullets.append(f"- Added {', '.join(signals.http_verbs)} API {noun}")
    if len(signals.ui_tags) > 5 and not signals.components:
        bullets.append(f"- Enhanced UI with {len(signals.ui_tags)} component updates")
    return bullets


def _status_bullets(change_set: ChangeSet) -> List[str]:
    bullets: List[str] = []
    deleted = [f.path for f in change_set.with_status(FileStatus.DELETED)]
    added = [f.path for f in change_set.with_status(FileStatus.ADDED)]
    modified = [f.path for f in change_set.with_status(FileStatus.MODIFIED)]

    if deleted:
        described = deleted_files_bullets(deleted)
        if described:
            bullets.extend(described)
        elif len(deleted) <= 3:
            bullets.append(f"- Removed: {_names(deleted)}")
        else:
            bullets.append(f"- Removed {len(deleted)} files")
    if added:
        if len(added) <= 3:
            bullets.append(f"- Added: {_names(added)}")
        else:
            bullets.append(f"- Added {len(added)} new files")
    if modified:
        if len(modified) <= 3:
            bullets.append(f"- Modified: {_names(modified)}")
        else:
            bullets.append(f"- Modified {len(modified)} existing files")
    return bullets


def _file_counts_bullet(change_set: ChangeSet) -> Optional[str]:
    parts = []
    for status, label in (
        (FileStatus.ADDED, "added"),
        (FileStatus.MODIFIED, "modified"),
        (FileStatus.DELETED, "deleted"),
    ):
        count = len(change_set.with_status(status))
        if count:
            parts.append(f"{count} {label}")
    return f"- Files: {', '.join(parts)}" if parts else None


def why_it_matters(category: CommitCategory, signals: DiffSignals) -> str:
    """Return the category-keyed annotation line, or an empty string."""
    label = category.category
    if label == "components" or signals.components:
        return "Type: feat | Confidence: 85%"
    if label == "API" or signals.http_verbs:
        return "Type: feat | Confidence: 90%"
    if label == "testing":
        return "Type: test | Confidence: 95%"
    if label == "documentation":
        return "Type: docs | Confidence: 95%"
    if label == "configuration":
        return "Type: chore | Confidence: 90%"
    if signals.classes or signals.functions:
        return "Type: feat | Confidence: 85%"
    return ""


def generate_body(
    change_set: ChangeSet, category: CommitCategory, signals: DiffSignals
) -> Optional[str]:
    """Build the bullet-list body; single-file changes get no body."""
    if len(change_set.files) <= 1:
        return None

    bullets = _signal_bullets(signals)
    if bullets:
        counts = _file_counts_bullet(change_set)
        if counts:
            bullets.append(counts)
    else:
        bullets = _status_bullets(change_set)

    bullets.append(
        f"- Total: +{change_set.total_additions} -{change_set.total_deletions} lines"
    )
    annotation = why_it_matters(category, signals)
    if annotation:
        bullets.append(f"\n   {annotation}")
    return "\n".join(bullets)


def generate_scope(change_set: ChangeSet, category: CommitCategory) -> Optional[str]:
    """Pick a scope: category first, then the busiest parent directory."""
    scope = CATEGORY_SCOPES.get(category.category)
    if scope:
        return scope

    # Route groups like "(auth)" or "[id]" reduce to a bare token.
    parents = [
        SCOPE_NOISE_RE.sub("", f.path.split("/")[-2]) for f in change_set.files if "/" in f.path
    ]
    if parents:
        common, _ = Counter(parents).most_common(1)[0]
        if len(common) > 1 and common not in GENERIC_CONTAINERS:
            return common

    lib_files = sum(1 for f in change_set.files if "/lib/" in f.path or f.path.startswith("lib/"))
    if lib_files > len(change_set.files) * 0.6:
        return "lib"
    return None


def summarize(
    change_set: ChangeSet,
    category: Optional[CommitCategory] = None,
    signals: Optional[DiffSignals] = None,
) -> Suggestion:
    """Produce the heuristic suggestion for a non-empty change set.

    ``category`` and ``signals`` are computed when not supplied.
    """
    if category is None:
        category = classify_changes(change_set)
    if signals is None:
        signals = extract_signals(change_set)

    return Suggestion(
        type=category.type,
        scope=generate_scope(change_set, category),
        subject=generate_subject(change_set, category, signals),
        body=generate_body(change_set, category, signals),
        breaking=False,
        confidence=HEURISTIC_CONFIDENCE,
    )
