"""Centralized prompt strings used by the agent loop."""

REACT_AGENT_TITLE = "ReAct Agent"

REACT_DEFAULT_INSTRUCTIONS = (
    "You run in a loop of Thought, Action, PAUSE, Observation.\n"
    "At the end of the loop you output an Answer\n"
    "Strictly follow the provided response format.\n"
    "Use Thought to describe your thoughts about the question you have been asked.\n"
    "Use Action to run one of the actions available to you\n"
    "Observation will be the result of running those actions.\n"
)

REACT_RESPONSE_FORMAT_INSTRUCTIONS = (
    "Respond with exactly one JSON object with keys `thought` (string), "
    "`action` (an object with `tool` and `input`, or null) and `answer` (string). "
    "Leave `answer` empty while you still need to call a tool. "
    "Set `answer` only once you can answer the original request; a non-empty answer ends the task."
)

AGENT_FALLBACK_ANSWER = "No valid answer could be provided."
