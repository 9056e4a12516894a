"""Tool definitions and the name-keyed tool registry used by agents."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Type

from pydantic import BaseModel, ValidationError

from aiclient.agents.errors import ToolExecutionError, ToolNotFoundError
from aiclient.core.logging_utils import log_event


@dataclass(frozen=True)
class ToolInfo:
    """Description of a tool as shown to the decision-maker."""

    name: str
    description: str
    input_schema: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "description": self.description, "input_schema": self.input_schema}


class Tool:
    """A named capability with a pydantic input model.

    ``execute`` validates the raw arguments against ``input_model`` and calls
    ``func`` with the validated fields as keyword arguments.
    """

    def __init__(
        self,
        func: Callable[..., Any],
        *,
        name: str,
        description: str,
        input_model: Type[BaseModel],
    ) -> None:
        if not str(name or "").strip():
            raise ValueError("Tool name must be non-empty")
        self.func = func
        self.name = name
        self.description = description
        self.input_model = input_model

    def __repr__(self) -> str:
        return f"Tool(name={self.name!r})"

    def info(self) -> ToolInfo:
        return ToolInfo(
            name=self.name,
            description=self.description,
            input_schema=self.input_model.model_json_schema(),
        )

    def validate_input(self, args: Any) -> BaseModel:
        """Validate ``args`` against the input model."""
        try:
            return self.input_model.model_validate(args)
        except ValidationError as exc:
            raise ToolExecutionError(self.name, f"Invalid argument: {exc}") from exc

    def execute(self, args: Any) -> Any:
        validated = self.validate_input(args)
        try:
            return self.func(**validated.model_dump())
        except ToolExecutionError:
            raise
        except Exception as exc:
            raise ToolExecutionError(self.name, str(exc) or exc.__class__.__name__) from exc


def tool(
    *,
    input_model: Type[BaseModel],
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> Callable[[Callable[..., Any]], Tool]:
    """Decorator turning a plain function into a ``Tool``.

    The name defaults to the function name and the description to its docstring.
    """

    def decorator(func: Callable[..., Any]) -> Tool:
        return Tool(
            func,
            name=name or func.__name__,
            description=description or (func.__doc__ or "").strip(),
            input_model=input_model,
        )

    return decorator


class ToolRegistry:
    """Name-keyed table of tools; re-registering a name replaces the old tool.

    Reads are safe from several tasks at once once registration is complete.
    Registering while tasks run is not supported; running agents work on a
    ``snapshot()`` taken when the task starts.
    """

    def __init__(self, tools: Optional[Iterable[Tool]] = None) -> None:
        self._tools: Dict[str, Tool] = {}
        if tools:
            self.register_tools(tools)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def register_tools(self, tools: Iterable[Tool]) -> None:
        for item in tools:
            replaced = item.name in self._tools
            self._tools[item.name] = item
            log_event("tool_registered", {"tool": item.name, "replaced": replaced})

    def _get(self, name: str) -> Tool:
        item = self._tools.get(name)
        if item is None:
            raise ToolNotFoundError(name)
        return item

    def get_tool_info(self, name: str) -> ToolInfo:
        return self._get(name).info()

    def get_all_tools(self) -> Dict[str, ToolInfo]:
        """Snapshot of every registered tool's info keyed by name."""
        return {name: item.info() for name, item in self._tools.items()}

    def validate_input(self, name: str, args: Any) -> BaseModel:
        return self._get(name).validate_input(args)

    def call_tool(self, name: str, args: Any) -> Any:
        """Run the named tool; input validation happens inside ``Tool.execute``."""
        item = self._get(name)
        log_event("tool_called", {"tool": name})
        return item.execute(args)

    def snapshot(self) -> "ToolRegistry":
        copy = ToolRegistry()
        copy._tools = dict(self._tools)
        return copy

