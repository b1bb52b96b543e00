"""
Shallow signal extraction from unified diffs.

The extractor does not parse any programming language. It runs a small
registry of independent line predicates over every added line and
collects the names they report. Predicates do not know about each
other, so a new kind of signal only needs a new entry in
:data:`LINE_PREDICATES`.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Dict, Iterable, List, Sequence, Tuple

from ai_commit.analysis.models import ChangeSet, DiffSignals


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# A predicate receives the file path and the stripped content of an added
# line and yields ``(kind, name)`` pairs.
LinePredicate = Callable[[str, str], Iterable[Tuple[str, str]]]

UI_FILE_RE = re.compile(r"\.(tsx|jsx)$")
CONFIG_FILE_RE = re.compile(r"config|\.json$|\.ya?ml$|\.toml$|\.env")
API_FILE_RE = re.compile(r"route\.|api/")

_FUNCTION_RE = re.compile(r"^(?:export\s+)?(?:async\s+)?function\s+(\w+)")
_PY_DEF_RE = re.compile(r"^(?:async\s+)?def\s+(\w+)")
_ARROW_RE = re.compile(r"^(?:export\s+)?const\s+(\w+)\s*=\s*(?:\(.*\)|async)")
_CLASS_RE = re.compile(r"^(?:export\s+)?class\s+(\w+)")
_COMPONENT_RE = re.compile(r"^(?:export\s+)?(?:default\s+)?(?:const|function)\s+([A-Z]\w+)")
_UI_TAG_RE = re.compile(r"<([A-Z]\w+)")
_IMPORT_RE = re.compile(r"^import\s+.*from\s+['\"]([^'\"]+)['\"]")
_CONFIG_KEY_RE = re.compile(r"['\"](\w+)['\"]\s*:")
_HTTP_VERB_RE = re.compile(r"\.(get|post|put|patch|delete)\(", re.IGNORECASE)

# Per-kind caps applied after de-duplication. UI tags get more room
# because the summarizer reacts to "more than 5 tags".
CAPS: Dict[str, int] = {
    "functions": 5,
    "classes": 3,
    "components": 5,
    "dependencies": 5,
    "config_keys": 5,
    "ui_tags": 10,
    "http_verbs": 5,
}


def _declared_functions(path: str, content: str) -> Iterable[Tuple[str, str]]:
    for pattern in (_FUNCTION_RE, _PY_DEF_RE, _ARROW_RE):
        match = pattern.match(content)
        if match:
            yield "functions", match.group(1)


def _declared_classes(path: str, content: str) -> Iterable[Tuple[str, str]]:
    match = _CLASS_RE.match(content)
    if match:
        yield "classes", match.group(1)


def _ui_components(path: str, content: str) -> Iterable[Tuple[str, str]]:
    if not UI_FILE_RE.search(path):
        return
    match = _COMPONENT_RE.match(content)
    if match:
        yield "components", match.group(1)
    tag = _UI_TAG_RE.search(content)
    if tag:
        yield "ui_tags", tag.group(1)


def _imported_packages(path: str, content: str) -> Iterable[Tuple[str, str]]:
    match = _IMPORT_RE.match(content)
    if match:
        package = match.group(1).split("/")[0]
        if package and not package.startswith("."):
            yield "dependencies", package


def _config_keys(path: str, content: str) -> Iterable[Tuple[str, str]]:
    if not CONFIG_FILE_RE.search(path):
        return
    match = _CONFIG_KEY_RE.search(content)
    if match:
        yield "config_keys", match.group(1)


def _http_verbs(path: str, content: str) -> Iterable[Tuple[str, str]]:
    if not API_FILE_RE.search(path):
        return
    match = _HTTP_VERB_RE.search(content)
    if match:
        yield "http_verbs", match.group(1).upper()


LINE_PREDICATES: Tuple[LinePredicate, ...] = (
    _declared_functions,
    _declared_classes,
    _ui_components,
    _imported_packages,
    _config_keys,
    _http_verbs,
)


def added_lines(diff: str) -> Iterable[str]:
    """Yield the stripped content of every added line in ``diff``."""
    for line in diff.splitlines():
        if line.startswith("+") and not line.startswith("+++"):
            yield line[1:].strip()


def _unique(names: Sequence[str]) -> List[str]:
    return list(dict.fromkeys(names))


def _plural(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


def dominant_purpose(found: Dict[str, List[str]]) -> str:
    """Pick the best-guess phrase for the change by fixed priority.

    ``found`` maps each signal kind to its de-duplicated, uncapped names.
    """
    components = found.get("components", [])
    functions = found.get("functions", [])
    classes = found.get("classes", [])
    verbs = found.get("http_verbs", [])
    tags = found.get("ui_tags", [])
    config_keys = found.get("config_keys", [])
    dependencies = found.get("dependencies", [])

    if len(components) > 3:
        return f"implementing {len(components)} new UI components"
    if components:
        names = ", ".join(components[:3])
        return f"adding {names} {_plural(len(components), 'component', 'components')}"
    if len(functions) > 5:
        return "implementing multiple utility functions and helpers"
    if functions:
        names = ", ".join(functions[:3])
        return f"adding {names} {_plural(len(functions), 'function', 'functions')}"
    if classes:
        return f"implementing {', '.join(classes)} {_plural(len(classes), 'class', 'classes')}"
    if verbs:
        return f"adding {', '.join(verbs)} API {_plural(len(verbs), 'endpoint', 'endpoints')}"
    if len(tags) > 5:
        return "enhancing UI with multiple component updates"
    if config_keys:
        return "updating configuration settings"
    if dependencies:
        others = "and other " if len(dependencies) > 2 else ""
        return f"integrating {' and '.join(dependencies[:2])} {others}dependencies"
    return ""


def extract_signals(change_set: ChangeSet) -> DiffSignals:
    """Extract :class:`DiffSignals` from every added line of ``change_set``.

    Files with an empty or malformed diff simply contribute nothing.
    """
    raw: Dict[str, List[str]] = {kind: [] for kind in CAPS}
    for change in change_set.files:
        for content in added_lines(change.diff or ""):
            if not content:
                continue
            for predicate in LINE_PREDICATES:
                for kind, name in predicate(change.path, content):
                    raw[kind].append(name)

    found = {kind: _unique(names) for kind, names in raw.items()}
    purpose = dominant_purpose(found)
    logger.debug("Extracted diff signals: %s; purpose=%r", found, purpose)
    return DiffSignals(
        functions=tuple(found["functions"][: CAPS["functions"]]),
        classes=tuple(found["classes"][: CAPS["classes"]]),
        components=tuple(found["components"][: CAPS["components"]]),
        dependencies=tuple(found["dependencies"][: CAPS["dependencies"]]),
        config_keys=tuple(found["config_keys"][: CAPS["config_keys"]]),
        ui_tags=tuple(found["ui_tags"][: CAPS["ui_tags"]]),
        http_verbs=tuple(found["http_verbs"][: CAPS["http_verbs"]]),
        dominant_purpose=purpose,
    )
