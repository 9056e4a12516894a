"""Bounded ReAct loop: decide, act through tools, observe, repeat."""

from __future__ import annotations

import json
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

from pydantic import BaseModel

from aiclient.agents.decision import ReActAction, ReActDecision, decode_decision
from aiclient.agents.errors import ToolExecutionError, ToolNotFoundError
from aiclient.agents.tools import Tool, ToolRegistry
from aiclient.agents.transcript import ReActTranscript
from aiclient.core.config import DEFAULT_MAX_ITERATIONS, DEFAULT_MODEL
from aiclient.core.logging_utils import log_event
from aiclient.core.prompts import AGENT_FALLBACK_ANSWER, REACT_RESPONSE_FORMAT_INSTRUCTIONS
from aiclient.llm.runtime import AIClient, build_ai_client
from aiclient.llm.types import InvocationRequest, InvocationResponse, Message, Usage
from aiclient.llm.usage import UsageCounter

# How often a waiting task re-checks its cancellation token.
CANCEL_POLL_SECONDS = 0.05


class AgentOutcome(str, Enum):
    """Terminal state of one task."""

    ANSWERED = "answered"
    EXHAUSTED = "exhausted"
    ABORTED = "aborted"


@dataclass(frozen=True)
class AgentResponse:
    """Final answer (or fallback) plus usage accumulated over every turn."""

    content: str
    usage: Usage
    outcome: AgentOutcome
    iterations: int


class CancellationToken:
    """Thread-safe flag a caller sets to stop a running task."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class AgentRunState:
    iteration_count: int = 0
    usage: UsageCounter = field(default_factory=UsageCounter)
    final_answer: Optional[str] = None


def stringify_result(result: Any) -> str:
    """Render a tool result for the observation text."""
    if isinstance(result, str):
        return result
    if isinstance(result, BaseModel):
        return result.model_dump_json()
    try:
        return json.dumps(result, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return str(result)


class ReActAgent:
    """Runs tasks through a bounded thought/action/observation loop.

    The model is invoked at temperature 0 with ``ReActDecision`` attached as
    the structured-output contract. A non-empty answer always ends the task,
    even when the same turn also names an action. Tool failures become
    ``Observation: Error: ...`` text for the next turn. Malformed output,
    a turn with neither answer nor action, cancellation, and running out of
    iterations all end with ``AGENT_FALLBACK_ANSWER``.
    """

    def __init__(
        self,
        client: AIClient,
        *,
        model: str = DEFAULT_MODEL,
        registry: Optional[ToolRegistry] = None,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        instructions: Optional[str] = None,
    ) -> None:
        if max_iterations < 1:
            raise ValueError("max_iterations must be >= 1")
        self.client = client
        self.model = model
        self.registry = registry if registry is not None else ToolRegistry()
        self.max_iterations = max_iterations
        self.instructions = instructions

    def register_tools(self, tools: Iterable[Tool]) -> None:
        self.registry.register_tools(tools)

    def _build_transcript(self, task: str, tools: ToolRegistry) -> ReActTranscript:
        transcript = ReActTranscript()
        transcript.add_original_request(task)
        if self.instructions:
            transcript.add_instruction(self.instructions)
        else:
            transcript.use_default_instructions()
            transcript.add_instruction(REACT_RESPONSE_FORMAT_INSTRUCTIONS)
        transcript.add_tools(tools.get_all_tools())
        return transcript

    def _act(self, tools: ToolRegistry, action: ReActAction) -> str:
        try:
            tools.validate_input(action.tool, action.input)
            result = tools.call_tool(action.tool, action.input)
        except (ToolNotFoundError, ToolExecutionError) as exc:
            return f"Observation: Error: {exc}"
        except Exception as exc:
            log_event("tool_error", {"tool": action.tool, "error": repr(exc)})
            return f"Observation: Error: {str(exc) or exc.__class__.__name__}"
        return f"Observation: {stringify_result(result)}"

    @staticmethod
    def _iteration_block(decision: ReActDecision, observation: str) -> str:
        action = decision.action
        action_text = json.dumps(
            {"tool": action.tool, "input": action.input} if action is not None else None,
            ensure_ascii=False,
            default=str,
        )
        return f"Thought: {decision.thought}\nAction: {action_text}\n{observation}"

    def _finish(self, state: AgentRunState, outcome: AgentOutcome, reason: str = "") -> AgentResponse:
        content = state.final_answer if outcome is AgentOutcome.ANSWERED else AGENT_FALLBACK_ANSWER
        usage = state.usage.get_usage()
        log_event(
            "agent_task_end",
            {
                "outcome": outcome.value,
                "reason": reason,
                "iterations": state.iteration_count,
                **usage.to_dict(),
            },
        )
        return AgentResponse(
            content=content or "",
            usage=usage,
            outcome=outcome,
            iterations=state.iteration_count,
        )

    @staticmethod
    def _decide(
        decider: AIClient,
        request: InvocationRequest,
        pool: Optional[ThreadPoolExecutor],
        cancel_token: Optional[CancellationToken],
    ) -> Optional[InvocationResponse]:
        """Invoke the model; ``None`` means the token fired before the reply arrived."""
        if pool is None or cancel_token is None:
            return decider.invoke(request)
        future: Future = pool.submit(decider.invoke, request)
        while True:
            try:
                return future.result(timeout=CANCEL_POLL_SECONDS)
            except FutureTimeoutError:
                if cancel_token.cancelled and not future.done():
                    future.cancel()
                    return None

    def execute_task(self, task: str, *, cancel_token: Optional[CancellationToken] = None) -> AgentResponse:
        """Run ``task`` to a terminal state.

        Only configuration, routing, and upstream transport errors propagate;
        every model misbehaviour ends in a returned ``AgentResponse``. With a
        ``cancel_token`` each model call runs on a worker thread so that
        cancelling abandons a call still in flight; its late reply and usage
        are discarded.
        """
        tools = self.registry.snapshot()
        transcript = self._build_transcript(task, tools)
        decider = self.client.with_structured_output(ReActDecision)
        state = AgentRunState()
        user_turn = task
        log_event("agent_task_start", {"model": self.model, "tools": len(tools), "max_iterations": self.max_iterations})

        def cancelled() -> bool:
            return cancel_token is not None and cancel_token.cancelled

        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="aiclient-agent") if cancel_token is not None else None
        try:
            while state.iteration_count < self.max_iterations:
                if cancelled():
                    return self._finish(state, AgentOutcome.ABORTED, "cancelled")
                state.iteration_count += 1
                iteration = state.iteration_count
                request = InvocationRequest(
                    model=self.model,
                    messages=[Message(role="user", content=user_turn)],
                    system_prompt=transcript.render(),
                    temperature=0,
                )
                response = self._decide(decider, request, pool, cancel_token)
                if response is None:
                    return self._finish(state, AgentOutcome.ABORTED, "cancelled")
                state.usage.add(response.usage)
                if cancelled():
                    return self._finish(state, AgentOutcome.ABORTED, "cancelled")

                result = decode_decision(response.content)
                if not result.ok:
                    log_event("agent_iteration", {"iteration": iteration, "error": str(result.error)})
                    return self._finish(state, AgentOutcome.ABORTED, "invalid_decision")
                decision = result.decision
                if decision.final_answer:
                    state.final_answer = decision.final_answer
                    log_event("agent_iteration", {"iteration": iteration, "decision": "answer"})
                    return self._finish(state, AgentOutcome.ANSWERED)
                if decision.action is None:
                    log_event("agent_iteration", {"iteration": iteration, "decision": "empty"})
                    return self._finish(state, AgentOutcome.ABORTED, "no_action")

                log_event("agent_iteration", {"iteration": iteration, "decision": "action", "tool": decision.action.tool})
                observation = self._act(tools, decision.action)
                transcript.add_iteration(iteration, self._iteration_block(decision, observation))
                user_turn = observation

            return self._finish(state, AgentOutcome.EXHAUSTED, "max_iterations")
        finally:
            if pool is not None:
                pool.shutdown(wait=False, cancel_futures=True)


def _setting(settings: Any, key: str, default: Any) -> Any:
    if isinstance(settings, Mapping):
        value = settings.get(key)
    else:
        value = getattr(settings, key, None)
    return default if value in (None, "") else value


def build_agent(
    settings: Any,
    client: Optional[AIClient] = None,
    *,
    registry: Optional[ToolRegistry] = None,
    instructions: Optional[str] = None,
) -> ReActAgent:
    """Build a ``ReActAgent`` using ``default_model`` and ``agent_max_iterations`` from settings.

    Args:
        settings: Effective config mapping (see ``load_settings``) or settings object.
        client (Optional[AIClient]): Facade to reuse; built from ``settings`` when omitted.
        registry (Optional[ToolRegistry]): Tools available to the agent.
        instructions (Optional[str]): Replaces the default ReAct instructions.

    Returns:
        ReActAgent: Configured agent.
    """
    if client is None:
        client = build_ai_client(settings)
    return ReActAgent(
        client,
        model=str(_setting(settings, "default_model", DEFAULT_MODEL)),
        registry=registry,
        max_iterations=int(_setting(settings, "agent_max_iterations", DEFAULT_MAX_ITERATIONS)),
        instructions=instructions,
    )
