"""Ollama client wrapper and integration layer.

This package provides the async client used as the AI model service for
agent dialogue handlers. All Ollama interactions are async and streaming.
"""

from agent_runtime.ollama.client import OllamaClient

__all__ = ["OllamaClient"]
