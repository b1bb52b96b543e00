"""
Configuration loading for ai_commit.

Provides a loader for the ``.ai-commit.json`` file located in the
repository root. See :mod:`ai_commit.config.loader` for implementation
details.
"""

from .loader import AssistantConfig, ConfigError, load_config, save_config  # noqa: F401
