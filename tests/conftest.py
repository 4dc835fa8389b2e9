"""Pytest configuration and shared fixtures for agent-runtime-server tests.

This module provides common fixtures used across all test modules,
including test app creation, async client setup, and helpers that write
agent bundles into a temporary agents directory.
"""

import textwrap
from pathlib import Path
from typing import Any, AsyncIterator, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from agent_runtime import create_app
from agent_runtime.config import AgentRuntimeSettings


def _import_log_lines(log_path: Path | None, kind: str) -> str:
    if log_path is None:
        return ""
    return (
        f"with open({str(log_path)!r}, 'a') as _log:\n"
        f"    _log.write('{kind}\\n')\n\n"
    )


def make_descriptor_source(
    name: str | None = "alpha",
    description: str = "Test agent",
    support_dialogue: bool | None = False,
    log_path: Path | None = None,
) -> str:
    """Source of an agent_desc.py exporting an AgentDesc class."""
    lines = ["class AgentDesc:"]
    if name is not None:
        lines.append(f"    name = {name!r}")
    lines.append(f"    description = {description!r}")
    if support_dialogue is not None:
        lines.append(f"    support_dialogue = {support_dialogue!r}")
    return (
        _import_log_lines(log_path, "descriptor")
        + "\n".join(lines)
        + "\n\n\ndefault = AgentDesc\n"
    )


def make_tools_source(*tool_names: str, log_path: Path | None = None) -> str:
    """Source of an agent_handle.py whose get_tools() returns one tool per name."""
    return _import_log_lines(log_path, "tool") + textwrap.dedent(
        f"""\
        from agent_runtime.runtime import tool


        class AgentHandle:
            def get_tools(self):
                tools = []
                for tool_name in {list(tool_names)!r}:

                    @tool(name=tool_name, description=f"{{tool_name}} tool")
                    def run(args, tool_name=tool_name):
                        return {{"tool": tool_name, "args": args}}

                    tools.append(run)
                return tools


        default = AgentHandle
        """
    )


def make_dialogue_source(
    system_prompt: str = "You are a test agent.",
    model: str = "test-model",
    log_path: Path | None = None,
) -> str:
    """Source of a dialogues/*.py exporting a DialogueHandler subclass."""
    return _import_log_lines(log_path, "dialogue") + textwrap.dedent(
        f"""\
        from agent_runtime.runtime import DialogueHandler


        class DialoguesClass(DialogueHandler):
            model = {model!r}
            system_prompt = {system_prompt!r}


        default = DialoguesClass
        """
    )


class FakeAIService:
    """AI model service double that streams fixed fragments."""

    def __init__(self, fragments: list[str] | None = None):
        self.fragments = fragments if fragments is not None else ["Hello", " world"]
        self.calls: list[dict[str, Any]] = []

    async def chat_stream(
        self,
        model: str,
        messages: list[dict[str, Any]],
        system_prompt: str | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        self.calls.append(
            {"model": model, "messages": messages, "system_prompt": system_prompt}
        )
        for index, fragment in enumerate(self.fragments):
            yield {
                "model": model,
                "message": {"role": "assistant", "content": fragment},
                "done": index == len(self.fragments) - 1,
            }


@pytest.fixture
def agents_dir(tmp_path: Path) -> Path:
    """Create an empty agents directory."""
    directory = tmp_path / "agents"
    directory.mkdir()
    return directory


@pytest.fixture
def write_bundle(agents_dir: Path) -> Callable[..., Path]:
    """Return a function that writes a bundle into the agents directory.

    Usage:
        write_bundle("alpha", descriptor=..., handler=..., dialogues={"dialogues_a.py": ...})
    """

    def _write(
        name: str,
        descriptor: str | None = None,
        handler: str | None = None,
        dialogues: dict[str, str] | None = None,
    ) -> Path:
        bundle = agents_dir / name
        bundle.mkdir(parents=True, exist_ok=True)
        if descriptor is not None:
            (bundle / "agent_desc.py").write_text(descriptor, encoding="utf-8")
        if handler is not None:
            (bundle / "agent_handle.py").write_text(handler, encoding="utf-8")
        if dialogues:
            dialogues_dir = bundle / "dialogues"
            dialogues_dir.mkdir(exist_ok=True)
            for filename, source in dialogues.items():
                (dialogues_dir / filename).write_text(source, encoding="utf-8")
        return bundle

    return _write


@pytest.fixture
def descriptor_source() -> Callable[..., str]:
    return make_descriptor_source


@pytest.fixture
def tools_source() -> Callable[..., str]:
    return make_tools_source


@pytest.fixture
def dialogue_source() -> Callable[..., str]:
    return make_dialogue_source


@pytest.fixture
def ai_service_factory() -> type[FakeAIService]:
    return FakeAIService


@pytest.fixture
def fake_ai_service() -> FakeAIService:
    return FakeAIService()


@pytest.fixture
def test_settings(tmp_path, agents_dir):
    """Create test settings with isolated temporary directories.

    Args:
        tmp_path: Pytest fixture providing a temporary directory.
        agents_dir: The (empty) agents directory under tmp_path.

    Returns:
        AgentRuntimeSettings: Settings instance configured for testing.
    """
    return AgentRuntimeSettings(
        host="127.0.0.1",
        port=8000,
        ollama_host="http://localhost:11434",
        data_dir=str(tmp_path),
        agents_dir=agents_dir.name,
        preload_agents=True,
        log_level="DEBUG",
        cors_origins=["*"],
    )


@pytest.fixture
def test_app(test_settings):
    """Create a FastAPI test application instance.

    Args:
        test_settings: Test settings fixture.

    Returns:
        FastAPI: Configured test application.
    """
    return create_app(settings=test_settings)


@pytest_asyncio.fixture
async def async_client(test_app):
    """Create an async HTTP client for testing FastAPI endpoints.

    Args:
        test_app: Test application fixture.

    Yields:
        AsyncClient: Async HTTP client for making test requests.
    """
    # Trigger the lifespan startup manually for tests
    async with test_app.router.lifespan_context(test_app):
        transport = ASGITransport(app=test_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
