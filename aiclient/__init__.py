"""aiclient package exports: invocation facade and ReAct agent."""

from .agents import AgentOutcome, AgentResponse, ReActAgent, Tool, ToolRegistry, build_agent, tool
from .llm import AIClient, InvocationRequest, InvocationResponse, Message, Usage, build_ai_client

__all__ = [
    "AIClient",
    "AgentOutcome",
    "AgentResponse",
    "InvocationRequest",
    "InvocationResponse",
    "Message",
    "ReActAgent",
    "Tool",
    "ToolRegistry",
    "Usage",
    "build_agent",
    "build_ai_client",
    "tool",
]
