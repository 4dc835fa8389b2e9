"""Tools exposed by the code agent to the primary conversation."""

from typing import Any, Literal

from pydantic import BaseModel, Field

from agent_runtime.runtime import tool


class OrchestrateInput(BaseModel):
    """Arguments of the code generation orchestration tool."""

    op: Literal["callHook"]
    pointer: str = Field(min_length=1, description="Hook pointer to call")
    args: dict[str, Any] | None = None


class AgentHandle:
    def handle_tool(self):
        @tool(
            name="code_generation_orchestrate",
            description=(
                "Generate a plugin from the user's description: write the docs "
                "first, then the entities, then the plugin code"
            ),
            schema=OrchestrateInput,
        )
        async def orchestrate(params: OrchestrateInput) -> dict[str, Any]:
            return {"op": params.op, "pointer": params.pointer, "accepted": True}

        return orchestrate


default = AgentHandle
