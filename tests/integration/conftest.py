"""Pytest configuration for integration tests.

This module provides integration-test-specific fixtures that ensure
proper test isolation and mocking for API endpoint tests.
"""

import json
from unittest.mock import AsyncMock, patch

import pytest


@pytest.fixture(autouse=True)
def mock_ollama_client():
    """Mock OllamaClient for all integration tests.

    This fixture patches the OllamaClient class before the app is created,
    ensuring the lifespan uses our mock instead of creating a real client.
    The mock is also the AI model service bound to dialogue handlers, so
    tests replace chat_stream with an async generator function.
    """
    with patch("agent_runtime.app.OllamaClient") as mock_client_class:
        mock_instance = AsyncMock()
        mock_instance.host = "http://localhost:11434"
        mock_instance.check_connection.return_value = True

        async def chat_stream(model, messages, system_prompt=None, **kwargs):
            yield {
                "model": model,
                "message": {"role": "assistant", "content": "ok"},
                "done": True,
            }

        mock_instance.chat_stream = chat_stream

        # Return the mock instance when OllamaClient is instantiated
        mock_client_class.return_value = mock_instance

        yield mock_instance


def _parse_sse_events(text: str) -> list[dict]:
    """Parse an SSE response body into [{"event": ..., "data": ...}, ...]."""
    events = []
    # Normalize line endings and split by double newline
    normalized_text = text.replace("\r\n", "\n")
    for block in normalized_text.strip().split("\n\n"):
        if not block.strip():
            continue
        event_type = None
        event_data = None
        for part in block.split("\n"):
            if part.startswith("event:"):
                event_type = part.split(":", 1)[1].strip()
            elif part.startswith("data:"):
                event_data = part.split(":", 1)[1].strip()
        if event_type and event_data:
            events.append({"event": event_type, "data": json.loads(event_data)})
    return events


@pytest.fixture
def parse_sse_events():
    """Return the SSE body parser."""
    return _parse_sse_events
