"""
Prompt construction for the generative commit message path.

:func:`build_prompt` is a pure function of the change set and the
generation options. The instruction phrases it emits are exported as
:data:`INSTRUCTION_MARKERS` and :data:`BODY_INSTRUCTION_PHRASES` so that
the response parser recognises them when a model echoes them back.
"""

from __future__ import annotations

from typing import List, Optional

from ai_commit.analysis.models import ChangeSet, FileChange, FileStatus
from ai_commit.suggestion import GenerationOptions


LARGE_CHANGESET_THRESHOLD = 20
DIFF_EXCERPT_LINES = 30
PROMPT_CUE = "Commit message:"

# Phrases that only ever appear in the instruction block. A generated line
# containing any of them means the model started echoing the prompt.
INSTRUCTION_MARKERS = (
    "Generate a conventional commit",
    "IMPORTANT:",
    "Good example format:",
    "Bad example (DO NOT DO THIS):",
    "First line: type(scope):",
    "Format: type(scope):",
    PROMPT_CUE,
    "Body (required for multi-file changes):",
    "Focus on the MEANING and PURPOSE",
)

BODY_INSTRUCTION_PHRASES = (
    "what specific improvements",
    "why these changes",
    "key files or components",
    "focus on",
)

GOOD_EXAMPLE = """fix: cleanup ClickUp integration formatting and improve tool handler readability

- Fixed inconsistent formatting in clickup-story-client.ts and tool-handler.ts
- Improved code readability by reformatting multi-line statements
- Enhanced error handling comments for better debugging clarity
- Added detailed documentation files explaining ClickUp-related fixes"""

BAD_EXAMPLE = "docs(docs): update file1.ts, file2.ts, file3.ts, file4.ts"

FORMAT_RULES = """Generate a conventional commit message with:
1. First line: type(scope): brief description of the change (max 72 chars)
   - Type: feat, fix, refactor, docs, style, test, chore, perf, ci, or build
   - Scope: affected module/component (optional)
   - Description: what was accomplished, not what files changed

2. Body (required for multi-file changes): bullet points explaining:
   - What specific improvements were made
   - Why these changes matter
   - Key files or components affected (only if relevant)

Focus on the MEANING and PURPOSE of the changes, not just file names."""

VERBOSITY_DIRECTIVES = {
    "concise": "Keep the message brief but still informative about what changed.",
    "detailed": "Provide comprehensive details about the changes and their impact.",
}


def identify_file_patterns(files: List[FileChange]) -> List[str]:
    """Count documentation, test, config, component and API files."""
    checks = (
        ("documentation", lambda p: p.endswith(".md")),
        ("test", lambda p: ".test." in p or ".spec." in p),
        ("config", lambda p: "config" in p or ".json" in p or ".yaml" in p),
        ("component", lambda p: "component" in p or "/ui/" in p or p.endswith(".tsx")),
        ("API", lambda p: "/api/" in p or "route" in p),
    )
    patterns = []
    for label, matches in checks:
        count = sum(1 for f in files if matches(f.path))
        if count:
            patterns.append(f"{count} {label} file(s)")
    return patterns


def analyze_changes(change_set: ChangeSet) -> str:
    """Render the one-line aggregate statistics sentence."""
    analysis = []
    for status, verb in (
        (FileStatus.ADDED, "added"),
        (FileStatus.MODIFIED, "modified"),
        (FileStatus.DELETED, "deleted"),
    ):
        count = len(change_set.with_status(status))
        if count:
            analysis.append(f"{count} file(s) {verb}")

    patterns = identify_file_patterns(list(change_set.files))
    if patterns:
        analysis.append(f"Patterns detected: {', '.join(patterns)}")

    analysis.append(f"Total: +{change_set.total_additions} -{change_set.total_deletions} lines")
    return "; ".join(analysis)


def diff_excerpt(change: FileChange, max_lines: int = DIFF_EXCERPT_LINES) -> str:
    """First ``max_lines`` added, removed or hunk-header lines of a file."""
    relevant = [
        line
        for line in change.diff.splitlines()
        if line.startswith(("+", "-", "@@"))
    ][:max_lines]
    return "File: {}\n{}".format(change.path, "\n".join(relevant))


def build_prompt(change_set: ChangeSet, options: Optional[GenerationOptions] = None) -> str:
    """Construct the instruction block sent to the model.

    Parameters
    ----------
    change_set : ChangeSet
        The staged changes to describe.
    options : GenerationOptions, optional
        Verbosity and custom instructions; defaults are used when omitted.

    Returns
    -------
    str
        The prompt, ending with :data:`PROMPT_CUE`.
    """
    options = options or GenerationOptions()
    files = list(change_set.files)
    is_large = len(files) > LARGE_CHANGESET_THRESHOLD
    file_limit = 5 if is_large else 10
    diff_limit = 2 if is_large else 5

    files_context = "\n".join(
        f"- {f.path} ({f.status.value}): +{f.additions} -{f.deletions}" for f in files[:file_limit]
    )
    if is_large:
        files_context += f"\n... and {len(files) - file_limit} more files"

    diff_context = "\n---\n".join(diff_excerpt(f) for f in files[:diff_limit])

    sections = [
        "You are an expert at analyzing code changes and writing informative Git commit "
        "messages following Conventional Commits specification.",
        "ANALYZE these code changes and write a commit message that explains WHAT was done and WHY:",
        f"Files changed:\n{files_context}",
        f"Change analysis:\n{analyze_changes(change_set)}",
    ]
    if diff_context:
        sections.append(f"Code diff (what actually changed):\n{diff_context}")
    if is_large:
        sections.append(
            f"⚠️ LARGE CHANGESET ({len(files)} files): Focus on the OVERALL THEME and PRIMARY "
            "PURPOSE, not individual files. Describe the main feature, refactoring, or change "
            "being implemented."
        )
    sections.extend(
        [
            "IMPORTANT: Write a commit message that describes the PURPOSE and IMPACT of changes, "
            "NOT just listing files.",
            f"Good example format:\n{GOOD_EXAMPLE}",
            f"Bad example (DO NOT DO THIS):\n{BAD_EXAMPLE}",
            FORMAT_RULES,
        ]
    )
    if options.custom_prompt:
        sections.append(f"Additional instructions: {options.custom_prompt}")
    directive = VERBOSITY_DIRECTIVES.get(options.verbosity)
    if directive:
        sections.append(directive)
    sections.append(PROMPT_CUE)
    return "\n\n".join(sections)
