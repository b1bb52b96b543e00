"""
HTTP client for a local Ollama server.

This client wraps HTTP requests to the Ollama REST API and is the
generative text capability used by the suggestion pipeline: given a
prompt and generation parameters it returns generated text or raises
:class:`LLMError`. Transport failures, non-200 statuses and malformed
JSON are all reported as :class:`LLMError`.
"""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests


logger = logging.getLogger(__name__)
# Attach a null handler to avoid errors when the root logger is missing a
# stream. The CLI turns propagation back on when it configures logging.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


DEFAULT_MODEL = "llama3.2:1b"
DEFAULT_BASE_URL = "http://localhost"
DEFAULT_PORT = 11434
MODEL_ENV_VAR = "AI_COMMIT_MODEL"
DEFAULT_TOP_P = 0.9


class LLMError(Exception):
    """Raised when communication with the LLM server fails."""

    pass


def resolve_model(override: Optional[str] = None) -> str:
    """Resolve the model identifier.

    Precedence: explicit ``override``, then the ``AI_COMMIT_MODEL``
    environment variable, then :data:`DEFAULT_MODEL`.
    """
    return override or os.environ.get(MODEL_ENV_VAR) or DEFAULT_MODEL


def strip_thinking_tags(text: str) -> str:
    """Remove reasoning blocks such as ``<think>...</think>`` from a response.

    Examples
    --------
    >>> strip_thinking_tags("<think>reasoning...</think>feat: add x")
    'feat: add x'
    """
    thinking_patterns = [
        r'<think>.*?</think>',
        r'<thinking>.*?</thinking>',
        r'<thought>.*?</thought>',
        r'<reasoning>.*?</reasoning>',
    ]
    result = text
    for pattern in thinking_patterns:
        result = re.sub(pattern, '', result, flags=re.DOTALL | re.IGNORECASE)
    return result.strip()


@dataclass
class OllamaClient:
    """Thin wrapper around the Ollama /api/generate endpoint.

    Parameters
    ----------
    base_url : str
        Scheme and host of the server, without the port.
    port : int
        Port the server listens on.
    model : str
        Name of the model to use for generation, e.g. ``"llama3.2:1b"``.
    request_timeout : float, optional
        Per-request socket timeout in seconds.
    max_tokens : int, optional
        Default number of tokens to generate when a call does not pass
        ``max_new_tokens``.
    """

    base_url: str = DEFAULT_BASE_URL
    port: int = DEFAULT_PORT
    model: str = DEFAULT_MODEL
    request_timeout: float = 60.0
    max_tokens: Optional[int] = None

    def _endpoint(self, path: str = "generate") -> str:
        return f"{self.base_url}:{self.port}/api/{path}"

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = self._endpoint()
        logger.debug("POST %s model=%s", url, payload.get("model"))
        try:
            response = requests.post(url, json=payload, timeout=self.request_timeout)
        except requests.RequestException as exc:
            logger.error("Ollama request failed: %s", exc)
            raise LLMError(str(exc)) from exc
        if response.status_code != 200:
            logger.error(
                "LLM returned non-200 status %s: %s", response.status_code, response.text
            )
            raise LLMError(f"LLM returned status {response.status_code}: {response.text}")
        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            logger.error("Ollama returned invalid JSON: %s", exc)
            raise LLMError("Failed to parse LLM response") from exc
        if not isinstance(data, dict):
            raise LLMError("Unexpected response structure from LLM")
        if data.get("error"):
            raise LLMError(str(data["error"]))
        return data

    def load_model(self) -> None:
        """Ask the server to load :attr:`model` into memory.

        A generate request without a prompt makes Ollama load the model
        and return immediately.

        Raises
        ------
        LLMError
            If the server is unreachable or does not know the model.
        """
        logger.debug("Loading model %s", self.model)
        self._post({"model": self.model, "stream": False})

    def generate(
        self,
        prompt: str,
        max_new_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        top_p: Optional[float] = DEFAULT_TOP_P,
        do_sample: bool = True,
    ) -> str:
        """Return the model's completion for ``prompt``.

        Parameters
        ----------
        prompt : str
            Full instruction text.
        max_new_tokens : int, optional
            Upper bound on generated tokens (``num_predict``).
        temperature : float, optional
            Sampling temperature. Forced to 0 when ``do_sample`` is False.
        top_p : float, optional
            Nucleus-sampling threshold.
        do_sample : bool
            Whether to sample; greedy decoding otherwise.

        Returns
        -------
        str
            The generated response text with reasoning tags removed.

        Raises
        ------
        LLMError
            On transport failure, a non-200 status or an error reply.
        """
        payload: Dict[str, Any] = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
        }
        options: Dict[str, Any] = {}
        num_predict = max_new_tokens if max_new_tokens is not None else self.max_tokens
        if num_predict is not None:
            options["num_predict"] = num_predict
        if not do_sample:
            options["temperature"] = 0
        elif temperature is not None:
            options["temperature"] = temperature
        if do_sample and top_p is not None:
            options["top_p"] = top_p
        if options:
            payload["options"] = options

        data = self._post(payload)
        # /api/generate answers with 'response'; /api/chat style replies
        # carry the text under message.content.
        if "response" in data:
            return strip_thinking_tags(str(data.get("response") or ""))
        if "message" in data and isinstance(data["message"], dict):
            return strip_thinking_tags(str(data["message"].get("content") or ""))
        raise LLMError("Unexpected response structure from LLM")
