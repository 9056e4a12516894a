"""Growing prompt document for the ReAct agent."""

from __future__ import annotations

import json
from typing import List, Mapping

from aiclient.agents.tools import ToolInfo
from aiclient.core.prompts import REACT_AGENT_TITLE, REACT_DEFAULT_INSTRUCTIONS


class ReActTranscript:
    """Four ordered sections: Original Request, Instructions, Tools, Iterations.

    ``render()`` concatenates them in that order under a ``# ReAct Agent``
    title. Only the Iterations section grows while a task runs.
    """

    def __init__(self, title: str = REACT_AGENT_TITLE) -> None:
        self.title = title
        self._original_request: List[str] = []
        self._instructions: List[str] = []
        self._tools: List[str] = []
        self._iterations: List[str] = []

    def add_original_request(self, request: str) -> None:
        self._original_request.append(request)

    def add_instruction(self, instruction: str) -> None:
        self._instructions.append(instruction)

    def use_default_instructions(self) -> None:
        self.add_instruction(REACT_DEFAULT_INSTRUCTIONS)

    def add_tool(self, tool: str) -> None:
        self._tools.append(tool)

    def add_tools(self, infos: Mapping[str, ToolInfo]) -> None:
        """Add one JSON line per tool from a registry snapshot."""
        for info in infos.values():
            self.add_tool(json.dumps(info.to_dict(), ensure_ascii=False))

    def add_iteration(self, iteration: int, content: str) -> None:
        self._iterations.append(f"### Iteration {iteration}\n\n{content}")

    @property
    def iteration_count(self) -> int:
        return len(self._iterations)

    @staticmethod
    def _section(name: str, entries: List[str]) -> str:
        body = "".join(f"{entry}\n\n" for entry in entries)
        return f"## {name}\n\n{body}"

    def render_instructions(self) -> str:
        """Title plus the static sections, without iterations."""
        return (
            f"# {self.title}\n\n"
            + self._section("Original Request", self._original_request)
            + self._section("Instructions", self._instructions)
            + self._section("Tools", self._tools)
        )

    def render(self) -> str:
        return self.render_instructions() + self._section("Iterations", self._iterations)
