"""Errors raised by the tool registry and the agent loop."""

from __future__ import annotations


class AgentError(RuntimeError):
    """Base error for agent-layer failures."""


class ToolNotFoundError(AgentError):
    """Raised when a tool name is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Tool '{name}' not found.")
        self.name = name


class ToolExecutionError(AgentError):
    """Raised when a tool rejects its input or fails while running."""

    def __init__(self, name: str, message: str) -> None:
        super().__init__(f"Tool '{name}' failed: {message}")
        self.name = name


class DecisionParseError(AgentError):
    """Describes model output that is not a valid ReAct decision."""
