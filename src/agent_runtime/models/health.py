"""Health check response model."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response model for the health check endpoint.

    Attributes:
        status: Health status indicator ("ok" or "error").
        version: The version of agent-runtime-server.
        ollama_connected: Optional boolean indicating Ollama connectivity.
        ollama_host: Optional string with the Ollama host URL.
        agents_loaded: Number of agent bundles in the runtime cache.
    """

    status: str = Field(..., description="Health status of the service")
    version: str = Field(..., description="Version of agent-runtime-server")
    ollama_connected: bool | None = Field(
        default=None,
        description="Whether Ollama is connected",
    )
    ollama_host: str | None = Field(
        default=None,
        description="Ollama host URL",
    )
    agents_loaded: int | None = Field(
        default=None,
        description="Number of agent bundles currently cached",
    )
