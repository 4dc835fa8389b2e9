"""Async Ollama client wrapper.

This module provides an async wrapper around the ollama.AsyncClient. It is
the AI model service injected into agent dialogue handlers: it is created
once at startup, reused for every dialogue, and streams by default.
"""

import logging
from typing import Any, AsyncIterator

import ollama

logger = logging.getLogger(__name__)


class OllamaClient:
    """Async client for interacting with Ollama API.

    Attributes:
        host: The Ollama server URL (e.g., "http://localhost:11434")
        _client: The underlying ollama.AsyncClient instance
    """

    def __init__(self, host: str) -> None:
        """Initialize the Ollama client.

        Args:
            host: The Ollama server URL
        """
        self.host = host
        self._client = ollama.AsyncClient(host=host)
        logger.info(f"OllamaClient initialized with host: {host}")

    async def check_connection(self) -> bool:
        """Check if the Ollama server is reachable.

        Returns:
            bool: True if connection is successful, False otherwise
        """
        try:
            # Try to list models as a connectivity check
            await self._client.list()
            logger.debug("Ollama connection check: successful")
            return True
        except Exception as e:
            logger.warning(f"Ollama connection check failed: {e}")
            return False

    async def chat_stream(
        self,
        model: str,
        messages: list[dict[str, Any]],
        system_prompt: str | None = None,
        options: dict[str, Any] | None = None,
        tools: list[dict[str, Any]] | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        """Stream chat responses from Ollama.

        Args:
            model: The model name to use for the chat
            messages: List of message dicts in Ollama format:
                      [{"role": "user", "content": "..."}, ...]
            system_prompt: Optional system prompt, sent as a leading system message
            options: Optional model parameters (temperature, etc.)
            tools: Optional tools in Ollama function-tool format

        Yields:
            dict: Response chunks from Ollama. Each chunk contains:
                  - model: str - The model name
                  - message: dict - Contains role and content
                  - done: bool - True on the final chunk

        Raises:
            Exception: If the Ollama API request fails

        Example:
            >>> async for chunk in client.chat_stream(
            ...     model="llama3.2:latest",
            ...     messages=[{"role": "user", "content": "Hello"}],
            ...     system_prompt="You are a code agent.",
            ... ):
            ...     if not chunk.get("done"):
            ...         print(chunk["message"]["content"], end="")
        """
        if system_prompt:
            messages = [{"role": "system", "content": system_prompt}, *messages]

        try:
            logger.debug(f"Starting chat stream with model: {model}")
            logger.debug(f"Message count: {len(messages)}")

            async for chunk in await self._client.chat(
                model=model,
                messages=messages,
                tools=tools,
                stream=True,
                options=options,
            ):
                # Convert the chunk to a dict if it's not already
                if hasattr(chunk, "model_dump"):
                    chunk_dict = chunk.model_dump()
                elif isinstance(chunk, dict):
                    chunk_dict = chunk
                else:
                    chunk_dict = vars(chunk)

                logger.debug(
                    f"Received chunk: done={chunk_dict.get('done')}, "
                    f"content_length={len((chunk_dict.get('message') or {}).get('content') or '')}"
                )

                yield chunk_dict

            logger.debug("Chat stream completed")

        except Exception as e:
            logger.error(f"Chat stream failed: {e}")
            raise

    async def close(self) -> None:
        """Close the client and clean up resources.

        ollama.AsyncClient uses httpx internally, which handles cleanup.
        """
        logger.debug("OllamaClient closed")
