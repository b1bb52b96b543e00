"""
Extraction of commit suggestions from raw model output.

Small models often wrap the answer in commentary or echo parts of the
prompt back. :func:`parse_response` keeps only the text before the first
echoed instruction, picks out ``type(scope)!: subject`` headers and
collects the lines following each header as its body. Anything it cannot
make sense of is dropped, so it never raises.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from ai_commit.llm.prompt_builder import BODY_INSTRUCTION_PHRASES, INSTRUCTION_MARKERS
from ai_commit.suggestion import COMMIT_TYPES, Suggestion


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


GENERATIVE_CONFIDENCE = 0.9
MAX_SUGGESTIONS = 2

HEADER_RE = re.compile(
    r"^({})(\(([^)]+)\))?(!)?:\s*(.+)$".format("|".join(COMMIT_TYPES)),
    re.IGNORECASE,
)

PLACEHOLDER_PHRASES = ("type(scope)", "brief description", "what was accomplished")
GENERIC_SUBJECTS = ("improvements", "updates")
LEAKAGE_PHRASES = ("commit message", "example", "format", "generate") + BODY_INSTRUCTION_PHRASES
LEAKAGE_LABELS = ("Type:", "Scope:", "Description:")


def truncate_at_instructions(lines: List[str]) -> List[str]:
    """Drop everything from the first line that echoes an instruction."""
    for index, line in enumerate(lines):
        stripped = line.strip()
        if any(marker in stripped for marker in INSTRUCTION_MARKERS):
            return lines[:index]
    return lines


def is_meta_header(line: str, subject: str) -> bool:
    """True for headers that are placeholders copied from the instructions."""
    return (
        any(phrase in subject for phrase in PLACEHOLDER_PHRASES)
        or "description:" in line.lower()
        or subject in GENERIC_SUBJECTS
    )


def is_instruction_leak(line: str) -> bool:
    lowered = line.lower()
    return any(phrase in lowered for phrase in LEAKAGE_PHRASES) or any(
        label in line for label in LEAKAGE_LABELS
    )


class _OpenSuggestion:
    """Header fields plus the body lines gathered so far."""

    def __init__(self, type: str, scope: Optional[str], subject: str, breaking: bool) -> None:
        self.type = type
        self.scope = scope
        self.subject = subject
        self.breaking = breaking
        self.body_lines: List[str] = []

    def close(self) -> Suggestion:
        body = "\n".join(self.body_lines).strip() or None
        return Suggestion(
            type=self.type,
            scope=self.scope,
            subject=self.subject,
            body=body,
            breaking=self.breaking,
            confidence=GENERATIVE_CONFIDENCE,
        )


def parse_response(text: str) -> List[Suggestion]:
    """Parse generated text into at most :data:`MAX_SUGGESTIONS` suggestions.

    Parameters
    ----------
    text : str
        Raw model output.

    Returns
    -------
    list of Suggestion
        Suggestions in discovery order; empty when nothing usable was
        found.
    """
    if not text:
        return []

    suggestions: List[Suggestion] = []
    current: Optional[_OpenSuggestion] = None

    for raw_line in truncate_at_instructions(text.splitlines()):
        line = raw_line.strip()
        if not line:
            continue

        match = HEADER_RE.match(line)
        if match:
            type_, _, scope, bang, subject = match.groups()
            subject = subject.strip()
            if is_meta_header(line, subject):
                logger.debug("Skipping placeholder header: %s", line)
                continue
            if current is not None:
                suggestions.append(current.close())
            current = _OpenSuggestion(
                type=type_.lower(),
                scope=scope.strip() if scope and scope.strip() else None,
                subject=subject,
                breaking=bool(bang) or "BREAKING CHANGE" in line,
            )
        elif current is not None and not is_instruction_leak(line):
            current.body_lines.append(line)

    if current is not None:
        suggestions.append(current.close())

    logger.debug("Parsed %d suggestion(s) from model output", len(suggestions))
    return suggestions[:MAX_SUGGESTIONS]
