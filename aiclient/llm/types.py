"""Provider-agnostic request and response datatypes for LLM calls."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence


class ProviderKey(str, Enum):
    """Closed set of backend families the router can dispatch to."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    FIREWORKS = "fireworks"


class AiModel(str, Enum):
    """Built-in model identifiers known to the default router table."""

    GPT_4O = "gpt-4o"
    GPT_4O_MINI = "gpt-4o-mini"
    O1_PREVIEW = "o1-preview"
    O1_MINI = "o1-mini"
    GPT_TEXT_TO_SPEECH = "tts-1"
    DALL_E_3 = "dall-e-3"
    CLAUDE_35_SONNET_LATEST = "claude-3-5-sonnet-latest"
    CLAUDE_35_HAIKU_LATEST = "claude-3-5-haiku-latest"
    GEMINI_20_FLASH = "gemini-2.0-flash"
    GEMINI_15_FLASH_LATEST = "gemini-1.5-flash-latest"
    GEMINI_15_PRO_LATEST = "gemini-1.5-pro-latest"
    LLAMA_33 = "llama-v3p3-70b-instruct"
    DEEPSEEK_V3 = "deepseek-v3"
    DEEPSEEK_R1 = "deepseek-r1"


class AiVoice(str, Enum):
    """Voices accepted by text-to-speech backends."""

    ALLOY = "alloy"
    ECHO = "echo"
    FABLE = "fable"
    ONYX = "onyx"
    NOVA = "nova"
    SHIMMER = "shimmer"


class AiImageSize(str, Enum):
    """Image sizes accepted by image-generation backends."""

    SMALL = "256x256"
    MEDIUM = "512x512"
    SQUARE = "1024x1024"
    LANDSCAPE = "1792x1024"
    PORTRAIT = "1024x1792"


MESSAGE_ROLES = ("user", "system", "assistant")


@dataclass(frozen=True)
class Message:
    """One conversation turn."""

    role: str
    content: str

    def __post_init__(self) -> None:
        if self.role not in MESSAGE_ROLES:
            raise ValueError(f"Unsupported message role '{self.role}'. Expected one of: {', '.join(MESSAGE_ROLES)}")

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class Usage:
    """Normalized token counts for one or more calls."""

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0

    def __add__(self, other: "Usage") -> "Usage":
        if not isinstance(other, Usage):
            return NotImplemented
        return Usage(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass(frozen=True)
class InvocationRequest:
    """Structured chat request routed by model identifier."""

    model: str
    messages: Sequence[Message]
    system_prompt: str = ""
    temperature: Optional[float] = None
    max_output_tokens: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def message_dicts(self) -> List[Dict[str, str]]:
        """Return messages as plain ``{role, content}`` dicts."""
        return [message.to_dict() for message in self.messages]


@dataclass(frozen=True)
class InvocationResponse:
    """Normalized invocation response (or one streamed chunk)."""

    content: str
    usage: Usage = field(default_factory=Usage)
    provider: Optional[str] = None
    model: Optional[str] = None
    provider_request_id: Optional[str] = None
    raw: Any = None


@dataclass(frozen=True)
class ImageResponse:
    """Normalized image-generation response."""

    url: str
    revised_prompt: str = ""
    provider: Optional[str] = None
    raw: Any = None
