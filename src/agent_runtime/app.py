"""FastAPI application factory and lifespan management.

This module contains the create_app() factory function that creates and configures
the FastAPI application instance, including lifespan management for startup/shutdown
and router registration.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agent_runtime.config import AgentRuntimeSettings
from agent_runtime.ollama import OllamaClient
from agent_runtime.routers import agents, health
from agent_runtime.runtime import AgentRuntime

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager for FastAPI application.

    The Ollama client and the agent runtime are created once at startup and
    stored in app.state for reuse across all requests. When preloading is
    enabled every bundle in the agents directory is loaded before the first
    request is served.

    Args:
        app: The FastAPI application instance.

    Yields:
        None: Control is yielded while the app is running.
    """
    settings: AgentRuntimeSettings = app.state.settings
    app.state.ollama_client = OllamaClient(host=settings.ollama_host)
    logger.info(f"Initialized Ollama client with host: {settings.ollama_host}")

    connected = await app.state.ollama_client.check_connection()
    if connected:
        logger.info("Successfully connected to Ollama")
    else:
        logger.warning("Could not connect to Ollama - check if server is running")

    runtime = AgentRuntime(agents_dir=settings.resolved_agents_dir)
    app.state.agent_runtime = runtime
    names = runtime.discover()
    if settings.preload_agents and names:
        bundles = await runtime.load_all(names)
        logger.info(f"Preloaded {len(bundles)} of {len(names)} agent bundles")

    yield

    # Shutdown: Clean up resources
    if hasattr(app.state, "agent_runtime"):
        app.state.agent_runtime.clear()
    if hasattr(app.state, "ollama_client"):
        await app.state.ollama_client.close()
        logger.info("Ollama client closed")


def create_app(settings: AgentRuntimeSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional AgentRuntimeSettings instance. If not provided,
                  settings will be loaded from environment variables.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        from agent_runtime.dependencies import get_settings

        settings = get_settings()

    app = FastAPI(
        title="agent-runtime-server",
        description="Agent bundle runtime exposing agent tools and dialogues over Ollama",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store settings in app.state for lifespan access
    app.state.settings = settings

    # Note: FastAPI's type hints for add_middleware are overly strict
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(agents.router)

    return app
