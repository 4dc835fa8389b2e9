"""Dialogue handlers and the dialogue attachment session.

A dialogue handler takes over a conversation on behalf of an agent. It is
bound exactly once to an AI model service and then turns an ordered list
of chat messages into a stream of response fragments.

Bundle authors subclass DialogueHandler and usually only set ``model`` and
``system_prompt``; overriding ``stream`` gives full control over the
fragments that are produced.
"""

import inspect
import logging
from dataclasses import asdict, dataclass
from typing import Any, AsyncIterator, Iterable, Protocol, runtime_checkable

from agent_runtime.runtime.errors import AlreadyBoundError, NotInitializedError

logger = logging.getLogger(__name__)


@runtime_checkable
class AIModelService(Protocol):
    """Streaming chat capability injected into dialogue handlers."""

    def chat_stream(
        self,
        model: str,
        messages: list[dict[str, Any]],
        system_prompt: str | None = None,
    ) -> AsyncIterator[dict[str, Any]]: ...


@dataclass
class ChatMessage:
    """A single chat message passed to a dialogue handler."""

    role: str
    content: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def normalize_messages(
    messages: Iterable[ChatMessage | dict[str, Any]],
) -> list[dict[str, Any]]:
    """Convert messages to the dict format expected by AI model services.

    Args:
        messages: ChatMessage objects or dicts with "role" and "content" keys

    Returns:
        list[dict]: Messages as [{"role": "...", "content": "..."}, ...]

    Raises:
        ValueError: If a dict message is missing "role" or "content"
    """
    normalized = []
    for message in messages:
        if isinstance(message, ChatMessage):
            normalized.append(message.to_dict())
            continue
        if "role" not in message or "content" not in message:
            raise ValueError("Chat messages need 'role' and 'content' keys")
        normalized.append(dict(message))
    return normalized


@dataclass(frozen=True)
class Unbound:
    """Bind state of a handler that has no AI model service yet."""


@dataclass(frozen=True)
class Bound:
    """Bind state of a handler attached to an AI model service."""

    service: AIModelService


BindState = Unbound | Bound

UNBOUND = Unbound()


class DialogueHandler:
    """Base class for agent dialogue handlers.

    Attributes:
        model: Model identifier passed to the AI model service
        system_prompt: Optional system prompt prepended by the service
    """

    model: str = "llama3.2:latest"
    system_prompt: str | None = None

    def __init__(self) -> None:
        self._state: BindState = UNBOUND

    @property
    def state(self) -> BindState:
        return self._state

    @property
    def is_bound(self) -> bool:
        return isinstance(self._state, Bound)

    @property
    def service(self) -> AIModelService | None:
        """The bound AI model service, or None while unbound."""
        if isinstance(self._state, Bound):
            return self._state.service
        return None

    def bind(self, service: AIModelService) -> None:
        """Bind the AI model service. Allowed exactly once per instance.

        Raises:
            AlreadyBoundError: If the handler is already bound
        """
        if isinstance(self._state, Bound):
            raise AlreadyBoundError(
                f"{type(self).__name__} is already bound to an AI model service"
            )
        self._state = Bound(service)
        logger.debug(f"{type(self).__name__} bound to {type(service).__name__}")

    def handle(
        self, messages: Iterable[ChatMessage | dict[str, Any]]
    ) -> AsyncIterator[dict[str, Any]]:
        """Start producing response fragments for the given messages.

        Raises:
            NotInitializedError: If called before bind()
        """
        state = self._state
        if not isinstance(state, Bound):
            raise NotInitializedError(
                f"{type(self).__name__} has no AI model service; call bind() first"
            )
        return self.stream(state.service, normalize_messages(messages))

    def stream(
        self, service: AIModelService, messages: list[dict[str, Any]]
    ) -> AsyncIterator[dict[str, Any]]:
        """Produce the response stream. Override for custom behaviour."""
        return service.chat_stream(
            model=self.model,
            messages=messages,
            system_prompt=self.system_prompt,
        )


class DialogueVariants:
    """The dialogue handlers loaded from one bundle, in lexical file order.

    Attributes:
        failures: Reason per variant name for dialogue files that failed to load
    """

    def __init__(
        self,
        handlers: dict[str, Any],
        failures: dict[str, str] | None = None,
    ) -> None:
        self._handlers = dict(sorted(handlers.items()))
        self.failures = dict(failures or {})

    def names(self) -> tuple[str, ...]:
        return tuple(self._handlers)

    @property
    def default_name(self) -> str | None:
        return next(iter(self._handlers), None)

    def select(self, variant: str | None = None) -> tuple[str, Any]:
        """Pick a handler by variant name, or the first one in lexical order.

        Raises:
            KeyError: If the variant does not exist or no handler is loaded
        """
        name = variant if variant is not None else self.default_name
        if name is None or name not in self._handlers:
            raise KeyError(variant)
        return name, self._handlers[name]

    def __len__(self) -> int:
        return len(self._handlers)

    def __bool__(self) -> bool:
        return bool(self._handlers)


@dataclass
class DialogueSession:
    """A dialogue handler attached to a live conversation."""

    directory: str
    variant: str
    handler: Any

    def handle(
        self, messages: Iterable[ChatMessage | dict[str, Any]]
    ) -> AsyncIterator[dict[str, Any]]:
        return self.handler.handle(messages)

    async def stream(
        self, messages: Iterable[ChatMessage | dict[str, Any]]
    ) -> AsyncIterator[dict[str, Any]]:
        """Yield the handler's fragments in emission order.

        Closing this generator early closes the handler's stream as well,
        so the handler stops producing fragments.
        """
        result = self.handler.handle(messages)
        if inspect.isawaitable(result):
            result = await result

        if not hasattr(result, "__aiter__"):
            yield result
            return

        count = 0
        try:
            async for fragment in result:
                count += 1
                yield fragment
        finally:
            aclose = getattr(result, "aclose", None)
            if aclose is not None:
                await aclose()
            logger.debug(
                f"Dialogue stream for {self.directory} ({self.variant}) "
                f"ended after {count} fragments"
            )
