"""ReAct decision schema and strict decode-then-validate of model output."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from aiclient.agents.errors import DecisionParseError


class ReActAction(BaseModel):
    """Tool selected by the model together with its raw input."""

    tool: str
    input: Any = None


class ReActDecision(BaseModel):
    """One turn's structured output."""

    model_config = ConfigDict(extra="ignore")

    thought: str
    action: Optional[ReActAction] = None
    answer: Optional[str] = ""

    @property
    def final_answer(self) -> str:
        return (self.answer or "").strip()


@dataclass(frozen=True)
class DecisionResult:
    """Either a validated decision or the reason decoding failed."""

    raw: str
    decision: Optional[ReActDecision] = None
    error: Optional[DecisionParseError] = None

    @property
    def ok(self) -> bool:
        return self.decision is not None


def _json_candidate(text: str) -> str:
    """Strip one surrounding markdown code fence, if present."""
    candidate = text.strip()
    fenced = re.fullmatch(r"```(?:json)?\s*(.*?)\s*```", candidate, flags=re.DOTALL)
    if fenced:
        candidate = fenced.group(1)
    return candidate


def decode_decision(text: str) -> DecisionResult:
    """Decode ``text`` as exactly one JSON document and validate it as a ``ReActDecision``.

    Prose before or after the document is a decode failure.
    """
    raw = text or ""
    candidate = _json_candidate(raw)
    try:
        payload, end = json.JSONDecoder().raw_decode(candidate)
    except json.JSONDecodeError as exc:
        return DecisionResult(raw=raw, error=DecisionParseError(f"Model output is not valid JSON: {exc}"))
    if candidate[end:].strip():
        return DecisionResult(
            raw=raw,
            error=DecisionParseError(f"Model output has trailing content after JSON at char {end}"),
        )
    if not isinstance(payload, dict):
        return DecisionResult(
            raw=raw,
            error=DecisionParseError(f"Model output must be a JSON object, got {type(payload).__name__}"),
        )
    try:
        decision = ReActDecision.model_validate(payload)
    except ValidationError as exc:
        return DecisionResult(raw=raw, error=DecisionParseError(f"Model output failed decision schema: {exc}"))
    return DecisionResult(raw=raw, decision=decision)
