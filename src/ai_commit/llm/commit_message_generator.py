"""
Commit message generation with an LLM and a heuristic fallback.

:class:`CommitMessageGenerator` first asks the language model (via
:class:`OllamaClient`) for suggestions and falls back to the heuristic
summarizer when the model is disabled, cannot be loaded, fails, times
out, or produces nothing the parser accepts. The control flow is an
explicit state machine::

    START -> DISABLED -> FALLBACK -> DONE
    START -> LOADING -> GENERATING -> PARSING -> DONE
                 \\            \\            \\
                  +------------+------------+--> FALLBACK -> DONE

Each call builds its own :class:`GenerationOutcome`; the generator keeps
no state between calls, so an abandoned model call can never leak into a
later one.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple

from ai_commit.analysis.heuristic_summarizer import summarize
from ai_commit.analysis.models import ChangeSet
from ai_commit.llm.ollama_client import DEFAULT_TOP_P, LLMError, OllamaClient
from ai_commit.llm.prompt_builder import build_prompt
from ai_commit.llm.response_parser import parse_response
from ai_commit.suggestion import GenerationOptions, Suggestion


logger = logging.getLogger(__name__)
# Attach a null handler to prevent logging errors when no handlers are
# configured on the root logger.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


DISABLED_MODEL = "none"
SKIP_ENV_VAR = "AI_COMMIT_SKIP_AI"
TIMEOUT_ENV_VAR = "AI_COMMIT_TIMEOUT"
DEBUG_ENV_VAR = "AI_COMMIT_DEBUG"
DEFAULT_TIMEOUT = 30.0


class GenerationTimeout(LLMError):
    """Raised when the model call does not finish within the timeout."""

    pass


class GenerationState(str, Enum):
    START = "start"
    DISABLED = "disabled"
    LOADING = "loading"
    GENERATING = "generating"
    PARSING = "parsing"
    FALLBACK = "fallback"
    DONE = "done"


@dataclass
class GenerationOutcome:
    """Result of one :meth:`CommitMessageGenerator.run` call.

    Attributes
    ----------
    suggestions : list of Suggestion
        Never empty.
    states : list of GenerationState
        The states visited, in order.
    fallback_reason : str, optional
        Why the heuristic path was used; ``None`` when the model's
        suggestions were returned.
    """

    suggestions: List[Suggestion]
    states: List[GenerationState] = field(default_factory=list)
    fallback_reason: Optional[str] = None

    @property
    def used_fallback(self) -> bool:
        return GenerationState.FALLBACK in self.states


def resolve_timeout(timeout: Optional[float] = None) -> float:
    """Explicit value, then ``AI_COMMIT_TIMEOUT`` (seconds), then 30 seconds."""
    if timeout is not None:
        return float(timeout)
    raw = os.environ.get(TIMEOUT_ENV_VAR)
    if raw:
        try:
            return float(raw)
        except ValueError:
            logger.warning("Ignoring invalid %s value: %r", TIMEOUT_ENV_VAR, raw)
    return DEFAULT_TIMEOUT


def call_with_timeout(func: Callable[..., Any], timeout: float, *args: Any, **kwargs: Any) -> Any:
    """Run ``func`` in a daemon thread and wait at most ``timeout`` seconds.

    The call cannot be cancelled. On timeout it is abandoned: the thread
    keeps running, and its result goes into a queue private to this call
    that nobody reads any more.

    Raises
    ------
    GenerationTimeout
        If ``func`` did not finish in time.
    """
    results: "queue.Queue[Tuple[bool, Any]]" = queue.Queue(maxsize=1)

    def worker() -> None:
        try:
            results.put((True, func(*args, **kwargs)))
        except Exception as exc:  # handed over to the waiting thread
            results.put((False, exc))

    thread = threading.Thread(target=worker, name="ai-commit-generate", daemon=True)
    thread.start()
    try:
        succeeded, value = results.get(timeout=timeout)
    except queue.Empty:
        raise GenerationTimeout(f"AI generation timed out after {timeout:g}s") from None
    if succeeded:
        return value
    raise value


class CommitMessageGenerator:
    """Generate commit message suggestions using an LLM with heuristic fallback."""

    def __init__(
        self,
        ollama_client: Optional[OllamaClient] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.ollama_client = ollama_client
        self.timeout = resolve_timeout(timeout)

    def is_disabled(self) -> bool:
        """True when the generative path must be skipped entirely."""
        if self.ollama_client is None:
            return True
        if (self.ollama_client.model or "").strip().lower() == DISABLED_MODEL:
            return True
        return os.environ.get(SKIP_ENV_VAR, "").strip().lower() == "true"

    def generate(
        self, change_set: ChangeSet, options: Optional[GenerationOptions] = None
    ) -> List[Suggestion]:
        """Return at least one suggestion for a non-empty change set."""
        return self.run(change_set, options).suggestions

    def run(
        self, change_set: ChangeSet, options: Optional[GenerationOptions] = None
    ) -> GenerationOutcome:
        """Walk the state machine and report every state visited.

        Raises
        ------
        ValueError
            If ``change_set`` is empty; callers check ``has_changes`` first.
        """
        if not change_set.has_changes:
            raise ValueError("Cannot generate suggestions for an empty change set")
        options = options or GenerationOptions()
        states = [GenerationState.START]

        if self.is_disabled():
            states.append(GenerationState.DISABLED)
            reason: Optional[str] = "generative model disabled"
            logger.info("Using heuristic commit message generation")
        else:
            reason, suggestions = self._attempt(change_set, options, states)
            if reason is None:
                states.append(GenerationState.DONE)
                return GenerationOutcome(self._finish(suggestions, options), states)

        states.append(GenerationState.FALLBACK)
        suggestions = [summarize(change_set)]
        states.append(GenerationState.DONE)
        return GenerationOutcome(self._finish(suggestions, options), states, reason)

    def _attempt(
        self,
        change_set: ChangeSet,
        options: GenerationOptions,
        states: List[GenerationState],
    ) -> Tuple[Optional[str], List[Suggestion]]:
        """Try the generative path; return ``(fallback_reason, suggestions)``."""
        assert self.ollama_client is not None

        states.append(GenerationState.LOADING)
        try:
            self.ollama_client.load_model()
        except Exception as exc:
            logger.warning("Failed to load AI model %s, using fallback: %s", self.ollama_client.model, exc)
            return f"model load failed: {exc}", []

        states.append(GenerationState.GENERATING)
        try:
            prompt = build_prompt(change_set, options)
            text = call_with_timeout(
                self.ollama_client.generate,
                self.timeout,
                prompt,
                max_new_tokens=options.max_tokens,
                temperature=options.temperature,
                top_p=DEFAULT_TOP_P,
                do_sample=True,
            )
        except GenerationTimeout as exc:
            logger.warning("AI generation is taking too long, using fallback: %s", exc)
            return "timeout", []
        except Exception as exc:
            logger.warning("AI generation failed, using fallback: %s", exc)
            return f"generation failed: {exc}", []

        if os.environ.get(DEBUG_ENV_VAR):
            logger.debug("AI generated text: %s", str(text)[:500])

        states.append(GenerationState.PARSING)
        try:
            suggestions = parse_response(text)
        except Exception as exc:
            logger.warning("Failed to parse AI output, using fallback: %s", exc)
            return f"parse failed: {exc}", []
        if not suggestions:
            logger.warning("AI generated output but no valid commit messages were found, using fallback")
            return "no suggestions parsed", []
        return None, suggestions

    @staticmethod
    def _finish(suggestions: List[Suggestion], options: GenerationOptions) -> List[Suggestion]:
        if options.include_body:
            return suggestions
        return [replace(s, body=None) for s in suggestions]
