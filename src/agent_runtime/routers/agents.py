"""Agent runtime API endpoints.

This module exposes read-only views of the loaded agent bundles, the
aggregated tool set, cache reloads, and streaming agent dialogues via SSE.

Agent identifiers sent by clients only resolve to bundles inside the
configured agents directory; paths elsewhere on the host answer 404.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sse_starlette.sse import EventSourceResponse

from agent_runtime.dependencies import get_agent_runtime, get_ollama_client
from agent_runtime.models.agents import (
    AgentListResponse,
    AgentSnapshotResponse,
    ContentDeltaEvent,
    DialogueDoneEvent,
    DialogueRequest,
    ErrorEvent,
    ToolInfo,
    ToolSetResponse,
    ToolsCountResponse,
)
from agent_runtime.ollama import OllamaClient
from agent_runtime.runtime import (
    AgentRuntime,
    AlreadyBoundError,
    DialogueUnsupportedError,
    DuplicateToolNameError,
    NotFoundError,
    RuntimeSnapshot,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/agents", tags=["agents"])


def _error(status_code: int, code: str, message: str, **details: Any) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={
            "error": {
                "code": code,
                "message": message,
                "details": details,
            }
        },
    )


def _not_found(identifier: str, e: NotFoundError) -> HTTPException:
    return _error(404, "agent_not_found", str(e), identifier=identifier)


def _to_response(snapshot: RuntimeSnapshot) -> AgentSnapshotResponse:
    return AgentSnapshotResponse(
        directory=snapshot.directory,
        name=snapshot.name,
        support_dialogue=snapshot.support_dialogue,
        tools_count=snapshot.tools_count,
        state=snapshot.state.value,
        degraded=snapshot.degraded,
        failures=dict(snapshot.failures),
        dialogue_variants=list(snapshot.dialogue_variants),
    )


def _fragment_content(fragment: Any) -> str:
    """Extract the text of a response fragment.

    Fragments are Ollama chat chunks ({"message": {"content": ...}}) or
    plain strings from custom dialogue handlers.
    """
    if isinstance(fragment, str):
        return fragment
    if isinstance(fragment, dict):
        message = fragment.get("message") or {}
        return message.get("content") or ""
    return ""


@router.get("", response_model=AgentListResponse)
async def list_agents(
    runtime: AgentRuntime = Depends(get_agent_runtime),
) -> AgentListResponse:
    """Scan the agents directory and return a snapshot per bundle.

    Bundles that are not cached yet are loaded.
    """
    names = runtime.discover()
    bundles = await runtime.load_all(names)
    return AgentListResponse(
        agents=[_to_response(bundle.snapshot()) for bundle in bundles]
    )


@router.get("/tools-count", response_model=ToolsCountResponse)
async def tools_count(
    dir: str = Query(..., description="Bundle name or directory"),
    runtime: AgentRuntime = Depends(get_agent_runtime),
) -> ToolsCountResponse:
    """Get the number of tools a bundle exposes.

    Raises:
        HTTPException: 404 if the bundle cannot be resolved
    """
    try:
        directory = str(runtime.resolve_local(dir))
        tools = await runtime.get_tools(directory)
    except NotFoundError as e:
        raise _not_found(dir, e)
    return ToolsCountResponse(count=len(tools))


@router.get("/tools", response_model=ToolSetResponse)
async def list_tools(
    runtime: AgentRuntime = Depends(get_agent_runtime),
) -> ToolSetResponse:
    """Get the aggregated tool set of every bundle in the agents directory.

    Raises:
        HTTPException: 409 if two bundles expose the same tool name
    """
    try:
        tool_set = await runtime.collect_tools()
    except DuplicateToolNameError as e:
        logger.error(f"Tool aggregation failed: {e}")
        raise _error(
            409,
            "duplicate_tool_name",
            str(e),
            tool_name=e.tool_name,
            owners=list(e.owners),
        )

    tools = [
        ToolInfo(
            name=definition.name,
            description=definition.description,
            owner=tool_set.owner(definition.name) or "",
            parameters=definition.parameters_schema(),
        )
        for definition in tool_set
    ]
    return ToolSetResponse(tools=tools, count=len(tools))


@router.get("/{identifier}", response_model=AgentSnapshotResponse)
async def get_agent(
    identifier: str,
    runtime: AgentRuntime = Depends(get_agent_runtime),
) -> AgentSnapshotResponse:
    """Get the snapshot of one bundle, loading it if needed.

    Raises:
        HTTPException: 404 if the bundle cannot be resolved
    """
    try:
        directory = str(runtime.resolve_local(identifier))
        snapshot = await runtime.snapshot(directory)
    except NotFoundError as e:
        raise _not_found(identifier, e)
    return _to_response(snapshot)


@router.post("/{identifier}/reload", response_model=AgentSnapshotResponse)
async def reload_agent(
    identifier: str,
    runtime: AgentRuntime = Depends(get_agent_runtime),
) -> AgentSnapshotResponse:
    """Drop a bundle from the cache and load it again from disk.

    Raises:
        HTTPException: 404 if the bundle cannot be resolved
    """
    try:
        directory = str(runtime.resolve_local(identifier))
        runtime.invalidate(directory)
        snapshot = await runtime.snapshot(directory)
    except NotFoundError as e:
        raise _not_found(identifier, e)

    logger.info(f"Reloaded agent '{identifier}'")
    return _to_response(snapshot)


@router.post("/{identifier}/dialogue")
async def agent_dialogue(
    identifier: str,
    request_body: DialogueRequest,
    request: Request,
    runtime: AgentRuntime = Depends(get_agent_runtime),
    ollama_client: OllamaClient = Depends(get_ollama_client),
) -> EventSourceResponse:
    """Hand the conversation to an agent's dialogue handler and stream its reply.

    The dialogue is attached before the stream starts, so precondition
    failures are reported as regular HTTP errors.

    SSE Events:
        - content_delta: Each text fragment produced by the dialogue handler
        - error: If the stream fails
        - done: Stream is complete

    Raises:
        HTTPException: 404 if the bundle or variant is not found,
                       400 if the bundle does not support dialogue,
                       409 if the handler is bound to another AI service
    """
    try:
        directory = str(runtime.resolve_local(identifier))
        session = await runtime.attach(
            directory, ollama_client, variant=request_body.variant
        )
    except NotFoundError as e:
        raise _not_found(identifier, e)
    except DialogueUnsupportedError as e:
        raise _error(400, "dialogue_unsupported", str(e), identifier=identifier)
    except AlreadyBoundError as e:
        raise _error(409, "dialogue_already_bound", str(e), identifier=identifier)

    messages = [message.model_dump() for message in request_body.messages]
    logger.info(
        f"Starting dialogue '{session.variant}' of {session.directory} "
        f"with {len(messages)} messages"
    )

    async def event_generator():
        """Generate SSE events from the dialogue handler's fragments."""
        fragments = 0
        stream = session.stream(messages)

        try:
            async for fragment in stream:
                if await request.is_disconnected():
                    logger.warning(
                        f"Client disconnected during dialogue with {session.directory}"
                    )
                    return

                fragments += 1
                content = _fragment_content(fragment)
                if content:
                    yield {
                        "event": "content_delta",
                        "data": ContentDeltaEvent(content=content).model_dump_json(),
                    }

            done_event = DialogueDoneEvent(
                directory=session.directory,
                variant=session.variant,
                fragments=fragments,
            )
            yield {
                "event": "done",
                "data": done_event.model_dump_json(),
            }

        except Exception as e:
            logger.error(f"Error during dialogue with {session.directory}: {e}")
            error_event = ErrorEvent(
                code="dialogue_error",
                message=f"Dialogue failed: {str(e)}",
                details={"identifier": identifier},
            )
            yield {
                "event": "error",
                "data": error_event.model_dump_json(),
            }
        finally:
            await stream.aclose()

    return EventSourceResponse(event_generator())
