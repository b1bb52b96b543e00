"""
Short-lived cache of the last suggestions.

``ai-commit review`` stores its suggestions so that a following
``ai-commit commit`` can reuse them instead of asking the model again.
An entry is only valid for the exact change set it was computed for
(compared through :attr:`ChangeSet.summary`) and for five minutes.

The cache is a convenience: read and write failures are logged and
otherwise ignored.
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Callable, List, Optional

from ai_commit.suggestion import Suggestion


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


CACHE_FILE_NAME = ".ai-commit-cache.json"
CACHE_TTL_SECONDS = 5 * 60


class SuggestionCache:
    """JSON file holding ``{suggestions, changesSummary, timestamp}``."""

    def __init__(
        self,
        path: Path,
        ttl: float = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.path = path
        self.ttl = ttl
        self.clock = clock

    @classmethod
    def for_repo(cls, repo_root: Path) -> "SuggestionCache":
        return cls(repo_root / CACHE_FILE_NAME)

    def lookup(self, changes_summary: str) -> Optional[List[Suggestion]]:
        """Return cached suggestions for ``changes_summary`` or ``None``.

        Missing, unreadable, expired or mismatched entries are misses.
        """
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            timestamp = float(data["timestamp"])
            summary = data["changesSummary"]
            suggestions = [Suggestion.from_dict(item) for item in data["suggestions"]]
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.debug("Ignoring unreadable cache %s: %s", self.path, exc)
            return None

        if summary != changes_summary:
            logger.debug("Cache entry is for different changes")
            return None
        if self.clock() - timestamp >= self.ttl:
            logger.debug("Cache entry expired")
            return None
        if not suggestions:
            return None
        return suggestions

    def store(self, suggestions: List[Suggestion], changes_summary: str) -> None:
        payload = {
            "suggestions": [s.to_dict() for s in suggestions],
            "changesSummary": changes_summary,
            "timestamp": self.clock(),
        }
        try:
            self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:
            logger.warning("Failed to write suggestion cache: %s", exc)

    def clear(self) -> None:
        try:
            if self.path.exists():
                self.path.unlink()
        except OSError as exc:
            logger.warning("Failed to clear suggestion cache: %s", exc)
