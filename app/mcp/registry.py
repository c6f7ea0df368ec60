"""
Tool registry: the set of tools a dispatcher can list and call.

Each tool pairs a pydantic input model with an async handler. The model's JSON
schema is what tools/list advertises; the same model validates tools/call
arguments before the handler runs.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, ValidationError

from app.core.errors import InvalidParamsError, ToolNotFoundError

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Any], Awaitable[str]]


def _strip_titles(schema: Any) -> Any:
    if isinstance(schema, dict):
        return {k: _strip_titles(v) for k, v in schema.items() if not (k == "title" and isinstance(v, str))}
    if isinstance(schema, list):
        return [_strip_titles(v) for v in schema]
    return schema


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str
    input_model: type[BaseModel]
    handler: ToolHandler

    def input_schema(self) -> dict[str, Any]:
        schema = _strip_titles(self.input_model.model_json_schema())
        schema.setdefault("required", [])
        return schema

    def describe(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, "inputSchema": self.input_schema()}


class ToolRegistry:
    def __init__(self) -> None:
        self._tools: dict[str, ToolDescriptor] = {}

    def register(self, tool: ToolDescriptor) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Tool already registered: {tool.name}")
        self._tools[tool.name] = tool

    def get(self, name: str) -> ToolDescriptor | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def list_tools(self) -> list[dict[str, Any]]:
        """Descriptions for tools/list, in registration order."""
        return [tool.describe() for tool in self._tools.values()]

    async def call(self, name: str, arguments: dict[str, Any] | None) -> str:
        """
        Validate arguments against the tool's input model and run its handler.
        Raises ToolNotFoundError or InvalidParamsError; handler exceptions propagate.
        """
        tool = self.get(name)
        if tool is None:
            raise ToolNotFoundError(name)
        try:
            params = tool.input_model.model_validate(arguments or {})
        except ValidationError as e:
            raise InvalidParamsError(f"Invalid params: {e.errors(include_url=False)}") from e
        logger.info("[registry:call] tool=%s", name)
        return await tool.handler(params)
