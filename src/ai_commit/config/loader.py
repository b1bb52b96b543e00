"""
Configuration loader for ai_commit.

The tool reads an optional JSON document named ``.ai-commit.json`` from
the repository root. Recognized keys are mapped onto the
:class:`AssistantConfig` record; any other key is left untouched in
:attr:`AssistantConfig.extra` and written back as-is by
:func:`save_config`.

If the file exists but is malformed or a recognized key has the wrong
type, a :class:`ConfigError` is raised. A missing file yields the
defaults.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

from ai_commit.llm.ollama_client import DEFAULT_BASE_URL, DEFAULT_PORT
from ai_commit.suggestion import VERBOSITY_LEVELS, GenerationOptions


logger = logging.getLogger(__name__)
# Attach a null handler to avoid "No handler" warnings in environments
# where logging has not been configured.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


CONFIG_FILE_NAME = ".ai-commit.json"


class ConfigError(Exception):
    """Raised when the configuration file is unreadable or invalid."""

    pass


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# JSON key -> (attribute name, validator, description used in errors)
RECOGNIZED_KEYS: Dict[str, Tuple[str, Callable[[Any], bool], str]] = {
    "model": ("model", lambda v: isinstance(v, str), "a string"),
    "maxTokens": ("max_tokens", lambda v: _is_int(v) and v > 0, "a positive integer"),
    "temperature": (
        "temperature",
        lambda v: _is_number(v) and 0 < v <= 1,
        "a number in (0, 1]",
    ),
    "verbosity": (
        "verbosity",
        lambda v: v in VERBOSITY_LEVELS,
        "one of " + ", ".join(VERBOSITY_LEVELS),
    ),
    "includeBody": ("include_body", lambda v: isinstance(v, bool), "a boolean"),
    "customPrompt": ("custom_prompt", lambda v: isinstance(v, str), "a string"),
    "baseUrl": ("base_url", lambda v: isinstance(v, str) and bool(v), "a non-empty string"),
    "port": ("port", lambda v: _is_int(v) and 0 < v < 65536, "a port number"),
    "timeout": ("timeout", lambda v: _is_number(v) and v > 0, "a positive number"),
}


@dataclass(frozen=True)
class AssistantConfig:
    """Persisted settings.

    Every field is optional; ``None`` means "use the built-in default".
    """

    model: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    verbosity: Optional[str] = None
    include_body: Optional[bool] = None
    custom_prompt: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    port: int = DEFAULT_PORT
    timeout: Optional[float] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str) -> Any:
        """Look up a value by its JSON key."""
        if key in RECOGNIZED_KEYS:
            return getattr(self, RECOGNIZED_KEYS[key][0])
        return self.extra.get(key)

    def with_value(self, key: str, value: Any) -> "AssistantConfig":
        """Return a copy with ``key`` set to ``value``.

        Raises
        ------
        ConfigError
            If ``key`` is not recognized or ``value`` is invalid for it.
        """
        if key not in RECOGNIZED_KEYS:
            raise ConfigError(
                f"Unknown configuration key '{key}'. "
                f"Known keys: {', '.join(RECOGNIZED_KEYS)}"
            )
        _validate(key, value)
        return replace(self, **{RECOGNIZED_KEYS[key][0]: value})

    def to_dict(self) -> Dict[str, Any]:
        """JSON document for this configuration, unknown keys included."""
        data: Dict[str, Any] = dict(self.extra)
        defaults = AssistantConfig()
        for key, (attr, _, _) in RECOGNIZED_KEYS.items():
            value = getattr(self, attr)
            if value is not None and value != getattr(defaults, attr):
                data[key] = value
        return data

    def generation_options(self, **overrides: Any) -> GenerationOptions:
        """Merge non-``None`` overrides over the configured values."""
        values = {
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "verbosity": self.verbosity,
            "include_body": self.include_body,
            "custom_prompt": self.custom_prompt,
        }
        for name, value in overrides.items():
            if value is not None:
                values[name] = value
        return GenerationOptions(**{k: v for k, v in values.items() if v is not None})


def _validate(key: str, value: Any) -> None:
    _, is_valid, expected = RECOGNIZED_KEYS[key]
    if not is_valid(value):
        raise ConfigError(f"'{key}' must be {expected}, got {value!r}")


def config_path(repo_root: Path) -> Path:
    return repo_root / CONFIG_FILE_NAME


def load_config(repo_root: Path) -> AssistantConfig:
    """Load ``.ai-commit.json`` from ``repo_root``.

    Args:
        repo_root: Directory containing the configuration file.

    Returns:
        The parsed :class:`AssistantConfig`; defaults when the file does
        not exist.

    Raises:
        ConfigError: If the file cannot be read, is not a JSON object, or
            a recognized key has an invalid value.
    """
    path = config_path(repo_root)
    if not path.exists():
        logger.debug("No configuration file at %s; using defaults", path)
        return AssistantConfig()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to read or parse configuration file: %s", exc)
        raise ConfigError(f"Invalid JSON in {path.name}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path.name} must contain a JSON object")

    values: Dict[str, Any] = {}
    extra: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in RECOGNIZED_KEYS:
            logger.debug("Ignoring unrecognized configuration key: %s", key)
            extra[key] = value
            continue
        _validate(key, value)
        values[RECOGNIZED_KEYS[key][0]] = value

    logger.debug("Loaded configuration from: %s", path)
    return AssistantConfig(extra=extra, **values)


def save_config(config: AssistantConfig, repo_root: Path) -> Path:
    """Write ``config`` to ``.ai-commit.json`` in ``repo_root``.

    Raises
    ------
    ConfigError
        If the file cannot be written.
    """
    path = config_path(repo_root)
    try:
        path.write_text(json.dumps(config.to_dict(), indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.error("Failed to write configuration file: %s", exc)
        raise ConfigError(f"Failed to save configuration: {exc}") from exc
    return path


STRING_KEYS = ("model", "verbosity", "customPrompt", "baseUrl")


def parse_config_value(text: str, key: Optional[str] = None) -> Any:
    """Coerce a command-line value: ``true``/``false``, numbers, else the string.

    Values for string-typed keys are returned unchanged.
    """
    if key in STRING_KEYS:
        return text
    if text == "true":
        return True
    if text == "false":
        return False
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text

