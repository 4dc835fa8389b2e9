"""Tool definitions exposed by agent bundles.

A bundle's handler produces ToolDefinition objects, usually with the
``tool`` decorator. The runtime gathers them into a ToolSet that can be
handed to the primary model in Ollama's tool format and invoked by name.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterator

from pydantic import BaseModel, ValidationError

from agent_runtime.runtime.errors import (
    DuplicateToolNameError,
    ToolInputError,
    ToolNotFoundError,
)

logger = logging.getLogger(__name__)

ToolSchema = type[BaseModel] | dict[str, Any] | None

EMPTY_PARAMETERS: dict[str, Any] = {"type": "object", "properties": {}}


def _is_model_class(schema: Any) -> bool:
    return inspect.isclass(schema) and issubclass(schema, BaseModel)


@dataclass(frozen=True)
class ToolDefinition:
    """An invocable tool.

    Attributes:
        name: Tool name, unique within an aggregated tool set
        description: What the tool does, shown to the model
        input_schema: Pydantic model class or JSON-schema dict for the arguments
        func: Callable receiving the validated arguments (sync or async)
    """

    name: str
    description: str
    input_schema: ToolSchema
    func: Callable[[Any], Any]

    def parameters_schema(self) -> dict[str, Any]:
        """Get the JSON schema describing the tool's arguments."""
        if self.input_schema is None:
            return dict(EMPTY_PARAMETERS)
        if _is_model_class(self.input_schema):
            return self.input_schema.model_json_schema()
        return dict(self.input_schema)

    def to_ollama_tool(self) -> dict[str, Any]:
        """Convert to the function-tool format accepted by Ollama's chat API."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters_schema(),
            },
        }

    def validate_arguments(self, arguments: dict[str, Any] | None) -> Any:
        """Check arguments against the input schema.

        Returns:
            The pydantic model instance for model schemas, otherwise the
            arguments dict.

        Raises:
            ToolInputError: If the arguments do not satisfy the schema
        """
        arguments = arguments or {}
        if not isinstance(arguments, dict):
            raise ToolInputError(self.name, "arguments must be an object")

        if _is_model_class(self.input_schema):
            try:
                return self.input_schema.model_validate(arguments)
            except ValidationError as e:
                raise ToolInputError(self.name, str(e)) from e

        if isinstance(self.input_schema, dict):
            required = self.input_schema.get("required", [])
            missing = [key for key in required if key not in arguments]
            if missing:
                raise ToolInputError(
                    self.name, f"missing required fields: {', '.join(missing)}"
                )

        return arguments

    async def invoke(self, arguments: dict[str, Any] | None = None) -> Any:
        """Validate the arguments and call the tool."""
        validated = self.validate_arguments(arguments)
        logger.debug(f"Invoking tool {self.name}")
        result = self.func(validated)
        if inspect.isawaitable(result):
            result = await result
        return result


def tool(
    name: str | None = None,
    description: str | None = None,
    schema: ToolSchema = None,
) -> Callable[[Callable[[Any], Any]], ToolDefinition]:
    """Decorator turning a function into a ToolDefinition.

    The name defaults to the function name and the description to its
    docstring.

    Example:
        >>> @tool(name="search", schema=SearchInput)
        ... async def search(args: SearchInput) -> list[str]:
        ...     "Search the code base."
        ...     return []
    """

    def decorator(func: Callable[[Any], Any]) -> ToolDefinition:
        return ToolDefinition(
            name=name or func.__name__,
            description=description or inspect.getdoc(func) or "",
            input_schema=schema,
            func=func,
        )

    return decorator


class ToolSet:
    """Tools from several bundles under a single namespace.

    Iteration order is insertion order, so a fixed input ordering always
    produces the same tool order.
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        self._owners: dict[str, str] = {}

    def add(self, definition: ToolDefinition, owner: str) -> None:
        """Add a tool owned by the given bundle directory.

        Raises:
            DuplicateToolNameError: If another tool already uses the name
        """
        if definition.name in self._tools:
            raise DuplicateToolNameError(
                definition.name, self._owners[definition.name], owner
            )
        self._tools[definition.name] = definition
        self._owners[definition.name] = owner

    def get(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    def owner(self, name: str) -> str | None:
        return self._owners.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def to_ollama_tools(self) -> list[dict[str, Any]]:
        return [definition.to_ollama_tool() for definition in self._tools.values()]

    async def invoke(self, name: str, arguments: dict[str, Any] | None = None) -> Any:
        """Invoke a tool by name.

        Raises:
            ToolNotFoundError: If no tool has this name
            ToolInputError: If the arguments do not satisfy the schema
        """
        definition = self._tools.get(name)
        if definition is None:
            raise ToolNotFoundError(name)
        return await definition.invoke(arguments)

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(list(self._tools.values()))

    def __contains__(self, name: object) -> bool:
        return name in self._tools
