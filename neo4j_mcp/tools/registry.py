"""
Tool registry shared by the MCP and HTTP transports.

A tool is an async handler returning a ToolResponse. Handlers are wrapped so
that an unexpected exception is logged and turned into an error response
instead of escaping into the transport.
"""

import functools
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from pydantic import BaseModel

from ..models import ToolResponse

logger = logging.getLogger(__name__)

ToolHandler = Callable[..., Awaitable[ToolResponse]]


@dataclass(frozen=True)
class ToolDefinition:
    """A named, described tool and the model validating its arguments."""
    name: str
    description: str
    handler: ToolHandler
    input_model: Optional[Type[BaseModel]] = None

    async def invoke(self, arguments: Optional[Dict[str, Any]] = None) -> ToolResponse:
        """
        Validate arguments and run the handler.

        Raises:
            pydantic.ValidationError: If the arguments do not match input_model
        """
        arguments = arguments or {}
        if self.input_model is not None:
            arguments = self.input_model.model_validate(arguments).model_dump()
        return await self.handler(**arguments)

    def describe(self) -> Dict[str, Any]:
        """Name, description and JSON schema of the arguments."""
        schema = (
            self.input_model.model_json_schema()
            if self.input_model is not None
            else {"type": "object", "properties": {}}
        )
        return {"name": self.name, "description": self.description, "inputSchema": schema}


def tool_boundary(error_prefix: str) -> Callable[[ToolHandler], ToolHandler]:
    """
    Keep one tool failure from reaching the transport.

    Args:
        error_prefix: Text placed before the exception message
    """
    def decorator(func: ToolHandler) -> ToolHandler:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> ToolResponse:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                logger.exception(f"Unexpected error in tool {func.__name__}")
                return ToolResponse.text(f"{error_prefix}: {e}", is_error=True)
        return wrapper
    return decorator


class ToolRegistry:
    """Name to tool lookup."""

    def __init__(self):
        self._tools: Dict[str, ToolDefinition] = {}

    def register(self, tool: ToolDefinition) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Tool already registered: {tool.name}")
        self._tools[tool.name] = tool

    def get(self, name: str) -> Optional[ToolDefinition]:
        return self._tools.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __iter__(self):
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def names(self) -> List[str]:
        return list(self._tools)
