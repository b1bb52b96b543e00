"""
Top-level package for ai_commit.

This package exposes the main CLI entry point via the
``ai_commit.cli`` module. The suggestion engine itself lives in
:mod:`ai_commit.analysis` (heuristic path) and :mod:`ai_commit.llm`
(generative path).
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
