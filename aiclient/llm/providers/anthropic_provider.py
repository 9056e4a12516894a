"""Anthropic-backed chat provider implementation."""

from __future__ import annotations

import os
from typing import Any, Dict, Iterator, List, Optional, Tuple

from aiclient.llm.errors import LLMCapabilityError, LLMConfigurationError
from aiclient.llm.interfaces import ProviderCapabilities
from aiclient.llm.types import ImageResponse, InvocationRequest, InvocationResponse, Usage
from aiclient.llm.usage import usage_counts

DEFAULT_MAX_TOKENS = 4096


def _split_system(request: InvocationRequest) -> Tuple[str, List[Dict[str, str]]]:
    """Move system-role messages into the native ``system`` parameter."""
    system_parts = [request.system_prompt] if request.system_prompt else []
    messages: List[Dict[str, str]] = []
    for message in request.messages:
        if message.role == "system":
            if message.content:
                system_parts.append(message.content)
            continue
        messages.append(message.to_dict())
    return "\n\n".join(system_parts), messages


def _text_blocks(response: Any) -> str:
    parts: List[str] = []
    for block in getattr(response, "content", []) or []:
        if getattr(block, "type", None) == "text":
            val = getattr(block, "text", None)
            if val:
                parts.append(str(val))
    return "".join(parts)


class AnthropicProvider:
    """Provider adapter for Anthropic Messages API (chat only)."""

    name = "anthropic"
    env_key = "ANTHROPIC_API_KEY"
    capabilities = ProviderCapabilities(
        supports_invoke=True,
        supports_streaming=True,
        supports_images=False,
        supports_speech=False,
    )

    def __init__(self, *, api_key: Optional[str] = None, timeout: Optional[float] = None, client: Any = None) -> None:
        """Initialize Anthropic client with API key."""
        if client is not None:
            self._client = client
            return
        key = str(api_key or os.environ.get(self.env_key) or "").strip()
        if not key:
            raise LLMConfigurationError(
                f"Anthropic API key is required. Set it in config or via {self.env_key} environment variable."
            )
        try:
            from anthropic import Anthropic
        except ImportError as exc:
            raise LLMConfigurationError("anthropic package is required for provider=anthropic") from exc
        kwargs: Dict[str, Any] = {"api_key": key}
        if timeout is not None:
            kwargs["timeout"] = timeout
        self._client = Anthropic(**kwargs)

    def _payload(self, request: InvocationRequest) -> Dict[str, Any]:
        system, messages = _split_system(request)
        payload: Dict[str, Any] = {
            "model": request.model,
            "max_tokens": int(request.max_output_tokens or DEFAULT_MAX_TOKENS),
            "messages": messages,
        }
        if system:
            payload["system"] = system
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        return payload

    def invoke(self, request: InvocationRequest) -> InvocationResponse:
        """Generate text via Anthropic Messages API."""
        response = self._client.messages.create(**self._payload(request))
        return InvocationResponse(
            content=_text_blocks(response),
            usage=usage_counts(getattr(response, "usage", None)),
            provider=self.name,
            model=request.model,
            provider_request_id=str(getattr(response, "id", "") or "") or None,
            raw=response,
        )

    def stream(self, request: InvocationRequest) -> Iterator[InvocationResponse]:
        """Stream text deltas using the Anthropic streaming API.

        Text deltas carry zero usage. Input tokens arrive with ``message_start``
        and cumulative output tokens with ``message_delta``; the latter is
        emitted as an empty-content chunk holding the whole call's usage.
        """
        input_tokens = 0
        message_id: Optional[str] = None
        with self._client.messages.stream(**self._payload(request)) as stream:
            for event in stream:
                event_type = getattr(event, "type", None)
                if event_type == "message_start":
                    message = getattr(event, "message", None)
                    message_id = str(getattr(message, "id", "") or "") or None
                    input_tokens = usage_counts(getattr(message, "usage", None)).input_tokens
                elif event_type == "content_block_delta":
                    text = getattr(getattr(event, "delta", None), "text", None)
                    if not text:
                        continue
                    yield InvocationResponse(
                        content=str(text),
                        provider=self.name,
                        model=request.model,
                        provider_request_id=message_id,
                        raw=event,
                    )
                elif event_type == "message_delta":
                    output_tokens = usage_counts(getattr(event, "usage", None)).output_tokens
                    yield InvocationResponse(
                        content="",
                        usage=Usage(
                            input_tokens=input_tokens,
                            output_tokens=output_tokens,
                            total_tokens=input_tokens + output_tokens,
                        ),
                        provider=self.name,
                        model=request.model,
                        provider_request_id=message_id,
                        raw=event,
                    )

    def generate_image(self, model: str, prompt: str, size: str, n: int = 1) -> ImageResponse:
        """Raise capability error because Anthropic does not generate images."""
        _ = (model, prompt, size, n)
        raise LLMCapabilityError("anthropic provider does not support image generation")

    def generate_speech(self, model: str, text: str, voice: str) -> str:
        """Raise capability error because Anthropic does not synthesize speech."""
        _ = (model, text, voice)
        raise LLMCapabilityError("anthropic provider does not support speech generation")
