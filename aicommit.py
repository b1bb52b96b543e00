#!/usr/bin/env python
"""
Thin wrapper script to invoke the ai_commit CLI.

Running ``python aicommit.py`` is equivalent to running the
``ai-commit`` console script installed via ``pyproject.toml``.
"""

from ai_commit.cli import main


if __name__ == "__main__":
    main(prog_name="ai-commit")
