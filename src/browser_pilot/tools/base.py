"""
Base Tool Infrastructure

Provides the foundation for browser tools:
- ToolKind enum of the fixed tool catalogue
- Tool decorator for registration
- ToolRegistry for lookup and schema export

Tools receive validated arguments, the live BrowserHandle and the event
sink, and always return text for the model. Browser failures are turned
into descriptive strings inside the tools, never raised.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Iterator, Optional

from pydantic import BaseModel

from ..browser.controller import BrowserHandle
from ..events import EventSink

logger = logging.getLogger(__name__)


class ToolKind(str, Enum):
    """Every tool the model may invoke."""

    NAVIGATE = "navigate"
    CLICK = "click"
    TYPE = "type"
    SCROLL = "scroll"
    WAIT = "wait"
    EXTRACT_TEXT = "extract_text"


ToolExecutor = Callable[[Any, BrowserHandle, EventSink], Awaitable[str]]


def _strip_titles(schema: Any) -> Any:
    """Drop pydantic's auto-generated titles, which only add noise for the model."""
    if isinstance(schema, dict):
        return {key: _strip_titles(value) for key, value in schema.items() if key != "title"}
    if isinstance(schema, list):
        return [_strip_titles(item) for item in schema]
    return schema


def format_number(value: float) -> str:
    """Render a numeric argument the way the model wrote it: 500 not 500.0."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class Tool:
    """
    A named, schema-typed capability backed by a BrowserHandle operation.

    Attributes:
        kind: Tool identity
        description: What the tool does, shown to the model
        args_model: Pydantic model validating the arguments
        executor: Coroutine performing the action
    """

    kind: ToolKind
    description: str
    args_model: type[BaseModel]
    executor: ToolExecutor

    @property
    def name(self) -> str:
        return self.kind.value

    @property
    def parameters(self) -> dict[str, Any]:
        """JSON Schema of the tool arguments."""
        return _strip_titles(self.args_model.model_json_schema())

    def schema(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }

    async def invoke(
        self,
        arguments: dict[str, Any],
        handle: BrowserHandle,
        sink: EventSink,
    ) -> str:
        """
        Validate arguments and run the tool.

        Raises:
            pydantic.ValidationError: If the arguments do not match the schema
        """
        args = self.args_model.model_validate(arguments or {})
        return await self.executor(args, handle, sink)


# Tool catalogue filled by the @tool decorator
_TOOL_CATALOGUE: dict[ToolKind, Tool] = {}


def tool(kind: ToolKind, description: str, args_model: type[BaseModel]):
    """
    Decorator to register a coroutine as a browser tool.

    Example:
        >>> class NavigateArgs(BaseModel):
        ...     url: str
        >>> @tool(ToolKind.NAVIGATE, "Navigate to a URL", NavigateArgs)
        ... async def navigate(args, handle, sink) -> str:
        ...     await handle.navigate(args.url)
        ...     return f"Navigated to {args.url}"
    """

    def decorator(func: ToolExecutor) -> ToolExecutor:
        _TOOL_CATALOGUE[kind] = Tool(
            kind=kind,
            description=description,
            args_model=args_model,
            executor=func,
        )
        return func

    return decorator


class ToolRegistry:
    """
    Fixed set of tools available to the agent loop.

    Construction fails if any ToolKind has no implementation, so the
    dispatch table is always exhaustive.
    """

    def __init__(self, tools: Optional[list[Tool]] = None):
        tools = tools if tools is not None else list(_TOOL_CATALOGUE.values())
        self._tools: dict[str, Tool] = {t.name: t for t in tools}

        missing = [kind.value for kind in ToolKind if kind.value not in self._tools]
        if missing:
            raise ValueError(f"Tool registry is missing implementations for: {missing}")

    def get(self, name: str) -> Optional[Tool]:
        """Get a tool by name, or None for unknown names."""
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def schemas(self) -> list[dict[str, Any]]:
        """Provider-neutral tool definitions: name, description, parameters."""
        return [t.schema() for t in self._tools.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)
