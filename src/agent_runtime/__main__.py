"""CLI entry point for agent-runtime-server.

This module provides the command-line interface for starting the server.
It can be invoked as `agent-runtime-server` (via the script entry point) or
`python -m agent_runtime`.
"""

import argparse
import logging
import sys

import uvicorn

from agent_runtime import __version__, create_app
from agent_runtime.config import AgentRuntimeSettings


def main() -> None:
    """Main entry point for the agent-runtime-server CLI.

    Parses command-line arguments and starts the uvicorn server with the
    FastAPI application.
    """
    parser = argparse.ArgumentParser(
        prog="agent-runtime-server",
        description="Agent bundle runtime exposing agent tools and dialogues over Ollama",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"agent-runtime-server {__version__}",
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host to bind the server to (default: 127.0.0.1, can be set via AGENT_RUNTIME_HOST)",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind the server to (default: 8000, can be set via AGENT_RUNTIME_PORT)",
    )

    parser.add_argument(
        "--ollama-host",
        type=str,
        default=None,
        help="Ollama server URL (default: http://localhost:11434, can be set via AGENT_RUNTIME_OLLAMA_HOST)",
    )

    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Base directory for all data (default: ., can be set via AGENT_RUNTIME_DATA_DIR)",
    )

    parser.add_argument(
        "--agents-dir",
        type=str,
        default=None,
        help="Agent bundle directory relative to the data dir (default: agents, can be set via AGENT_RUNTIME_AGENTS_DIR)",
    )

    parser.add_argument(
        "--no-preload",
        action="store_true",
        help="Load agent bundles on first use instead of at startup",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO, can be set via AGENT_RUNTIME_LOG_LEVEL)",
    )

    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development (uvicorn --reload)",
    )

    args = parser.parse_args()

    # Build settings, CLI args override environment variables
    settings_kwargs = {}
    if args.host is not None:
        settings_kwargs["host"] = args.host
    if args.port is not None:
        settings_kwargs["port"] = args.port
    if args.ollama_host is not None:
        settings_kwargs["ollama_host"] = args.ollama_host
    if args.data_dir is not None:
        settings_kwargs["data_dir"] = args.data_dir
    if args.agents_dir is not None:
        settings_kwargs["agents_dir"] = args.agents_dir
    if args.no_preload:
        settings_kwargs["preload_agents"] = False
    if args.log_level is not None:
        settings_kwargs["log_level"] = args.log_level

    settings = AgentRuntimeSettings(**settings_kwargs)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=args.reload,
    )


if __name__ == "__main__":
    sys.exit(main())
