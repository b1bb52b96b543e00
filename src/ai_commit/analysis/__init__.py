"""
Heuristic change analysis.

This package turns a staged :class:`ChangeSet` into diff signals, a
commit category and a heuristic suggestion. See
:mod:`ai_commit.analysis.diff_signals`,
:mod:`ai_commit.analysis.change_classifier` and
:mod:`ai_commit.analysis.heuristic_summarizer` for details.
"""

from .models import ChangeSet, CommitCategory, DiffSignals, FileChange, FileStatus  # noqa: F401
from .diff_signals import extract_signals  # noqa: F401
from .change_classifier import classify_changes  # noqa: F401
from .heuristic_summarizer import summarize  # noqa: F401
