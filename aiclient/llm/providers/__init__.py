"""Concrete provider adapters."""

from .anthropic_provider import AnthropicProvider
from .gemini_provider import GeminiProvider
from .openai_provider import FireworksProvider, OpenAICompatibleProvider, OpenAIProvider

__all__ = [
    "AnthropicProvider",
    "FireworksProvider",
    "GeminiProvider",
    "OpenAIProvider",
    "OpenAICompatibleProvider",
]
