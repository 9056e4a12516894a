"""Protocols and capability descriptors for provider composition."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Protocol

from .types import ImageResponse, InvocationRequest, InvocationResponse


@dataclass(frozen=True)
class ProviderCapabilities:
    """Capability flags for an LLM provider implementation."""

    supports_invoke: bool = True
    supports_streaming: bool = False
    supports_images: bool = False
    supports_speech: bool = False

    def supports(self, capability: str) -> bool:
        """Return whether ``capability`` (invoke/stream/image/speech) is offered."""
        flags = {
            "invoke": self.supports_invoke,
            "stream": self.supports_streaming,
            "image": self.supports_images,
            "speech": self.supports_speech,
        }
        return bool(flags.get(capability, False))


class ChatProvider(Protocol):
    """Protocol for chat/text-generation providers."""

    name: str
    capabilities: ProviderCapabilities

    def invoke(self, request: InvocationRequest) -> InvocationResponse:
        """Run one non-streaming text-generation request."""

    def stream(self, request: InvocationRequest) -> Iterator[InvocationResponse]:
        """Yield partial responses until the backend signals completion."""


class ImageProvider(Protocol):
    """Protocol for image-generation providers."""

    name: str
    capabilities: ProviderCapabilities

    def generate_image(self, model: str, prompt: str, size: str, n: int) -> ImageResponse:
        """Generate ``n`` images and return the first one."""


class SpeechProvider(Protocol):
    """Protocol for text-to-speech providers."""

    name: str
    capabilities: ProviderCapabilities

    def generate_speech(self, model: str, text: str, voice: str) -> str:
        """Return base64-encoded audio."""
