"""
Language model integration for ai_commit.

This package contains the :class:`OllamaClient` for communicating with
an Ollama LLM server, the prompt builder and response parser used around
it, and the :class:`CommitMessageGenerator` which tries the language
model first and falls back to the heuristic summarizer.
"""

from .ollama_client import OllamaClient, LLMError  # noqa: F401
from .commit_message_generator import CommitMessageGenerator, GenerationState  # noqa: F401
