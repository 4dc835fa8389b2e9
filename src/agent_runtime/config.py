"""Configuration module for agent-runtime-server using pydantic-settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AgentRuntimeSettings(BaseSettings):
    """Main configuration settings for agent-runtime-server.

    All settings can be overridden via environment variables with the
    AGENT_RUNTIME_ prefix. For example, AGENT_RUNTIME_OLLAMA_HOST will
    override the ollama_host setting.
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Ollama
    ollama_host: str = "http://localhost:11434"

    # Data directories (relative to data_dir)
    data_dir: str = "."
    agents_dir: str = "agents"

    # Load every bundle in agents_dir during startup
    preload_agents: bool = True

    # CORS
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="AGENT_RUNTIME_")

    @property
    def resolved_agents_dir(self) -> Path:
        """Get the full path to the agents directory."""
        return Path(self.data_dir) / self.agents_dir
