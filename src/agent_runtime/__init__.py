"""agent-runtime-server: runtime for self-describing agent bundles.

This package discovers agent bundles on disk, loads their descriptors, tools
and dialogue handlers, and exposes the aggregated tools and dialogue
attachment to a host conversation system, with Ollama as the AI model service.
"""

from agent_runtime.app import create_app

__version__ = "0.1.0"

__all__ = ["create_app", "__version__"]
