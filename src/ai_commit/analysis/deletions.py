"""
Describe what a batch of deleted files had in common.

Used by the heuristic summarizer both for the subject line of
deletion-heavy change sets and for the fallback body bullets.
"""

from __future__ import annotations

import math
import re
from typing import Dict, List, Optional, Sequence, Tuple


_PASCAL_RE = re.compile(r"^[A-Z][a-zA-Z0-9]*$")
_STRICT_PASCAL_RE = re.compile(r"^[A-Z][a-zA-Z0-9]+$")
_WORD_SPLIT_RE = re.compile(r"[^a-zA-Z0-9]+")
_EXTENSION_RES = (
    re.compile(r"\.d\.ts$"),
    re.compile(r"\.js\.map$"),
    re.compile(r"\.(ts|tsx|js|jsx|md|css|scss|map|json|py)$"),
)
_SOURCE_RE = re.compile(r"\.(js|ts|tsx|jsx|py)$")
_TEST_RE = re.compile(r"\.(test|spec)\.")

# (pattern, description) pairs tried in order against the non-generated files
CONTENT_PATTERNS: Tuple[Tuple["re.Pattern[str]", str], ...] = (
    (re.compile(r"\.test\.|\.spec\.", re.IGNORECASE), "remove test files"),
    (re.compile(r"\.md$", re.IGNORECASE), "remove documentation files"),
    (re.compile(r"component", re.IGNORECASE), "remove deprecated components"),
    (re.compile(r"backup|old|deprecated|unused", re.IGNORECASE), "remove deprecated files"),
    (re.compile(r"\.css$|\.scss$", re.IGNORECASE), "remove style files"),
    (re.compile(r"config", re.IGNORECASE), "remove configuration files"),
)


def _basename(path: str) -> str:
    return path.rsplit("/", 1)[-1]


def _strip_extensions(name: str) -> str:
    for pattern in _EXTENSION_RES:
        name = pattern.sub("", name)
    return name


def _is_generated(path: str) -> bool:
    return path.endswith(".d.ts") or path.endswith(".map")


def _plural(count: int, word: str) -> str:
    return word if count == 1 else f"{word}s"


def find_common_words(paths: Sequence[str]) -> List[str]:
    """Return basename words shared across the given files, best first.

    A word scores one point per basename it appears in, plus two extra
    points when it is capitalized and longer than three characters.
    Only words reaching ``max(2, ceil(0.3 * len(paths)))`` are kept.
    PascalCase words sort before the rest, then by score.
    """
    scores: Dict[str, int] = {}
    bonus: Dict[str, int] = {}
    for path in paths:
        clean = _strip_extensions(_basename(path))
        for word in _WORD_SPLIT_RE.split(clean):
            if len(word) <= 2:
                continue
            scores[word] = scores.get(word, 0) + 1
            if word[0].isupper() and len(word) > 3:
                bonus[word] = bonus.get(word, 0) + 2
    for word, extra in bonus.items():
        scores[word] += extra

    threshold = max(2, math.ceil(len(paths) * 0.3))
    ranked = [(word, score) for word, score in scores.items() if score >= threshold]
    ranked.sort(key=lambda item: (not _STRICT_PASCAL_RE.match(item[0]), -item[1]))
    return [word for word, _ in ranked]


def find_common_path(paths: Sequence[str]) -> List[str]:
    """Return the leading directory segments shared by every path."""
    if not paths:
        return []
    parts = [path.split("/") for path in paths]
    shortest = min(parts, key=len)
    common: List[str] = []
    for index, segment in enumerate(shortest[:-1]):
        if all(p[index] == segment for p in parts):
            common.append(segment)
        else:
            break
    return common


def _main_entity(paths: Sequence[str]) -> Optional[str]:
    words = find_common_words(paths)
    if words and len(words[0]) > 3:
        return words[0]
    return None


def describe_deleted_files(paths: Sequence[str]) -> str:
    """Build a subject line for a change set dominated by deletions."""
    entity = _main_entity(paths)
    if entity:
        is_pascal = bool(_PASCAL_RE.match(entity))
        is_class = any(".d.ts" in p or "class" in p for p in paths)
        if is_pascal and is_class:
            return f"remove deprecated {entity} class and related assets"
        if is_pascal:
            return f"remove {entity} component and related files"
        return f"remove {entity}-related files and assets"

    common = find_common_path(paths)
    if len(common) > 1:
        return f"remove {common[-1]} module and related files"

    candidates = [p for p in paths if not _is_generated(p)]
    if candidates:
        for pattern, description in CONTENT_PATTERNS:
            matching = sum(1 for p in candidates if pattern.search(p))
            if matching > len(candidates) * 0.5:
                return f"{description} and generated assets"

    return f"remove unused files ({len(paths)} files)"


def deleted_files_bullets(paths: Sequence[str]) -> List[str]:
    """Body bullets describing deleted files, grouped by kind.

    Returns an empty list when nothing useful can be said.
    """
    bullets: List[str] = []
    type_definitions = [p for p in paths if p.endswith(".d.ts")]
    source_maps = [p for p in paths if p.endswith(".map")]
    sources = [p for p in paths if _SOURCE_RE.search(p) and not p.endswith(".d.ts")]
    docs = [p for p in paths if p.endswith(".md")]
    tests = [p for p in paths if _TEST_RE.search(p)]

    entity = _main_entity(paths)
    if entity:
        kinds: List[str] = []
        if sources:
            kinds.append(".js/.ts")
        if type_definitions:
            kinds.append(".d.ts")
        if source_maps:
            kinds.append("source maps")
        file_kinds = ", ".join(kinds)

        if _PASCAL_RE.match(entity) and type_definitions:
            bullets.append(
                f"- Removed the unused `{entity}` class and its corresponding {file_kinds} files"
            )
        elif _PASCAL_RE.match(entity):
            bullets.append(f"- Removed the `{entity}` component and its associated {file_kinds} files")
        else:
            bullets.append(f"- Removed {entity}-related implementation files ({file_kinds})")

        if type_definitions or source_maps:
            bullets.append(
                "- Cleaned up associated imports and dependencies related to the removed functionality"
            )
        if docs:
            bullets.append(f"- Removed documentation files for the deprecated {entity} functionality")
        return bullets

    descriptions: List[str] = []
    if sources:
        descriptions.append(f"{len(sources)} source {_plural(len(sources), 'file')}")
    if type_definitions:
        descriptions.append(
            f"{len(type_definitions)} type {_plural(len(type_definitions), 'definition')}"
        )
    if source_maps:
        descriptions.append(f"{len(source_maps)} source {_plural(len(source_maps), 'map')}")
    if descriptions:
        bullets.append(f"- Removed unused files: {', '.join(descriptions)}")
    if docs:
        bullets.append(f"- Cleaned up {len(docs)} documentation {_plural(len(docs), 'file')}")
    if tests:
        bullets.append(f"- Removed {len(tests)} test {_plural(len(tests), 'file')}")
    return bullets
