"""Tests for the ReAct transcript layout."""

from __future__ import annotations

from pydantic import BaseModel

from aiclient.agents.tools import Tool, ToolRegistry
from aiclient.agents.transcript import ReActTranscript
from aiclient.core.prompts import REACT_DEFAULT_INSTRUCTIONS


class _Input(BaseModel):
    city: str


def test_sections_render_in_fixed_order() -> None:
    transcript = ReActTranscript()
    # Added out of order on purpose; rendering order must not follow insertion.
    transcript.add_tool('{"name": "weather"}')
    transcript.add_iteration(1, "Observation: 21C")
    transcript.add_instruction("Be careful.")
    transcript.add_original_request("Weather in Paris?")

    text = transcript.render()

    assert text.startswith("# ReAct Agent\n\n## Original Request\n\nWeather in Paris?\n\n")
    positions = [text.index(h) for h in ("## Original Request", "## Instructions", "## Tools", "## Iterations")]
    assert positions == sorted(positions)
    assert text.endswith("## Iterations\n\n### Iteration 1\n\nObservation: 21C\n\n")


def test_iterations_grow_and_are_excluded_from_instructions() -> None:
    transcript = ReActTranscript()
    transcript.use_default_instructions()
    transcript.add_iteration(1, "Observation: a")
    transcript.add_iteration(2, "Observation: b")

    assert transcript.iteration_count == 2
    assert "### Iteration 2" in transcript.render()
    assert "### Iteration" not in transcript.render_instructions()
    assert REACT_DEFAULT_INSTRUCTIONS in transcript.render_instructions()


def test_add_tools_renders_registry_snapshot() -> None:
    registry = ToolRegistry([Tool(lambda city: city, name="weather", description="Current weather.", input_model=_Input)])
    transcript = ReActTranscript()

    transcript.add_tools(registry.get_all_tools())

    text = transcript.render()
    assert '"name": "weather"' in text
    assert '"description": "Current weather."' in text
    assert '"city"' in text
