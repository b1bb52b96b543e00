import os

import pytest


ENV_VARS = ("AI_COMMIT_MODEL", "AI_COMMIT_SKIP_AI", "AI_COMMIT_TIMEOUT", "AI_COMMIT_DEBUG")


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Remove ai-commit environment overrides for every test.

    Tests that need one of these variables set it explicitly with
    ``patch.dict(os.environ, ...)``.
    """
    for name in ENV_VARS:
        if name in os.environ:
            monkeypatch.delenv(name)
    yield
