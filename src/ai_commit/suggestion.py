"""
Commit message suggestions and generation options.

A :class:`Suggestion` is the externally visible result of the engine.
Its ``full_message`` is always rendered from the other fields so it can
never disagree with them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


COMMIT_TYPES: Tuple[str, ...] = (
    "feat",
    "fix",
    "refactor",
    "docs",
    "style",
    "test",
    "chore",
    "perf",
    "ci",
    "build",
)

VERBOSITY_LEVELS: Tuple[str, ...] = ("concise", "detailed", "balanced")


def render_message(
    type: str,
    subject: str,
    scope: Optional[str] = None,
    body: Optional[str] = None,
    breaking: bool = False,
) -> str:
    """Render ``type(scope)!: subject`` followed by a blank line and the body."""
    header = type
    if scope:
        header += f"({scope})"
    if breaking:
        header += "!"
    header += f": {subject}"
    if body:
        return f"{header}\n\n{body}"
    return header


@dataclass(frozen=True)
class Suggestion:
    """A single commit message suggestion.

    Attributes
    ----------
    type : str
        One of :data:`COMMIT_TYPES`.
    subject : str
        Single-line summary, ideally no longer than 72 characters.
    scope : str, optional
        Short token naming the affected area.
    body : str, optional
        Multi-line body, usually a bullet list.
    breaking : bool
        Whether the change is marked as breaking.
    confidence : float
        Ranking score in ``[0, 1]``.
    """

    type: str
    subject: str
    scope: Optional[str] = None
    body: Optional[str] = None
    breaking: bool = False
    confidence: float = 0.0

    def __post_init__(self) -> None:
        if self.type not in COMMIT_TYPES:
            raise ValueError(f"Unknown commit type: {self.type!r}")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence must be within [0, 1], got {self.confidence}")

    @property
    def full_message(self) -> str:
        return render_message(self.type, self.subject, self.scope, self.body, self.breaking)

    @property
    def header(self) -> str:
        return self.full_message.split("\n", 1)[0]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON shape stored in the result cache."""
        return {
            "type": self.type,
            "scope": self.scope,
            "subject": self.subject,
            "body": self.body,
            "breaking": self.breaking,
            "fullMessage": self.full_message,
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Suggestion":
        """Rebuild a suggestion from :meth:`to_dict` output.

        ``fullMessage`` is ignored because it is derived.
        """
        return cls(
            type=data["type"],
            subject=data["subject"],
            scope=data.get("scope") or None,
            body=data.get("body") or None,
            breaking=bool(data.get("breaking", False)),
            confidence=float(data.get("confidence", 0.0)),
        )


@dataclass(frozen=True)
class GenerationOptions:
    """Knobs for the generative path.

    ``max_tokens`` and ``temperature`` are passed to the model;
    ``verbosity`` and ``custom_prompt`` shape the prompt;
    ``include_body`` controls whether bodies are kept in the results.
    """

    max_tokens: int = 150
    temperature: float = 0.7
    verbosity: str = "balanced"
    include_body: bool = True
    custom_prompt: Optional[str] = None

    def __post_init__(self) -> None:
        if self.verbosity not in VERBOSITY_LEVELS:
            raise ValueError(
                f"verbosity must be one of {', '.join(VERBOSITY_LEVELS)}, got {self.verbosity!r}"
            )
        if self.max_tokens <= 0:
            raise ValueError("max_tokens must be positive")
        if not 0.0 < self.temperature <= 1.0:
            raise ValueError("temperature must be within (0, 1]")
