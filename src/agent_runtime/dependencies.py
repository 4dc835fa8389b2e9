"""Dependency injection providers for FastAPI endpoints.

This module provides FastAPI dependency functions that are used across
multiple routers to inject common dependencies like settings and services.
"""

from functools import lru_cache

from fastapi import HTTPException, Request

from agent_runtime.config import AgentRuntimeSettings
from agent_runtime.ollama import OllamaClient
from agent_runtime.runtime import AgentRuntime


@lru_cache
def get_settings() -> AgentRuntimeSettings:
    """Get the application settings instance.

    This function is cached so that the same settings instance is reused
    across all requests. Settings are loaded from environment variables
    with the AGENT_RUNTIME_ prefix.

    Returns:
        AgentRuntimeSettings: The application configuration settings.
    """
    return AgentRuntimeSettings()


def get_ollama_client(request: Request) -> OllamaClient:
    """Get the Ollama client from app state.

    Args:
        request: The FastAPI request object.

    Returns:
        OllamaClient: The Ollama client instance.

    Raises:
        HTTPException: If the Ollama client is not initialized (503 Service Unavailable).
    """
    if not hasattr(request.app.state, "ollama_client"):
        raise HTTPException(
            status_code=503,
            detail="Ollama client not initialized",
        )
    return request.app.state.ollama_client


def get_agent_runtime(request: Request) -> AgentRuntime:
    """Get the AgentRuntime created at startup.

    The runtime holds the bundle cache, so it must be shared by every request.

    Args:
        request: The FastAPI request object.

    Returns:
        AgentRuntime: The shared agent runtime.

    Raises:
        HTTPException: If the runtime is not initialized (503 Service Unavailable).
    """
    if not hasattr(request.app.state, "agent_runtime"):
        raise HTTPException(
            status_code=503,
            detail="Agent runtime not initialized",
        )
    return request.app.state.agent_runtime
