"""ReAct agent loop, tool registry, and decision decoding."""

from aiclient.agents.agent import AgentOutcome, AgentResponse, CancellationToken, ReActAgent, build_agent
from aiclient.agents.decision import DecisionResult, ReActAction, ReActDecision, decode_decision
from aiclient.agents.errors import AgentError, DecisionParseError, ToolExecutionError, ToolNotFoundError
from aiclient.agents.tools import Tool, ToolInfo, ToolRegistry, tool
from aiclient.agents.transcript import ReActTranscript

__all__ = [
    "AgentOutcome",
    "AgentResponse",
    "CancellationToken",
    "ReActAgent",
    "build_agent",
    "DecisionResult",
    "ReActAction",
    "ReActDecision",
    "decode_decision",
    "AgentError",
    "DecisionParseError",
    "ToolExecutionError",
    "ToolNotFoundError",
    "Tool",
    "ToolInfo",
    "ToolRegistry",
    "tool",
    "ReActTranscript",
]
