"""Google Gemini chat provider built on the google-genai SDK."""

from __future__ import annotations

import os
from typing import Any, Dict, Iterator, List, Optional, Tuple

from aiclient.llm.errors import LLMCapabilityError, LLMConfigurationError
from aiclient.llm.interfaces import ProviderCapabilities
from aiclient.llm.types import ImageResponse, InvocationRequest, InvocationResponse
from aiclient.llm.usage import usage_counts

GEMINI_USAGE_KEYS = {
    "input_keys": ("prompt_token_count",),
    "output_keys": ("candidates_token_count",),
    "total_keys": ("total_token_count",),
}


def _contents(request: InvocationRequest) -> Tuple[str, List[Dict[str, Any]]]:
    """Map chat messages to Gemini contents; system turns join the instruction."""
    system_parts = [request.system_prompt] if request.system_prompt else []
    contents: List[Dict[str, Any]] = []
    for message in request.messages:
        if message.role == "system":
            if message.content:
                system_parts.append(message.content)
            continue
        role = "user" if message.role == "user" else "model"
        contents.append({"role": role, "parts": [{"text": message.content}]})
    return "\n\n".join(system_parts), contents


class GeminiProvider:
    """Google Gemini API provider."""

    name = "gemini"
    env_keys = ("GEMINI_API_KEY", "GOOGLE_API_KEY")
    capabilities = ProviderCapabilities(
        supports_invoke=True,
        supports_streaming=True,
        supports_images=False,
        supports_speech=False,
    )

    def __init__(self, *, api_key: Optional[str] = None, timeout: Optional[float] = None, client: Any = None) -> None:
        """Create provider; the API key falls back to GEMINI_API_KEY then GOOGLE_API_KEY."""
        if client is not None:
            self._client = client
            return
        key = str(api_key or "").strip()
        for env_key in self.env_keys:
            if key:
                break
            key = str(os.environ.get(env_key) or "").strip()
        if not key:
            raise LLMConfigurationError(
                "Gemini API key is required. Set it in config or via GEMINI_API_KEY environment variable."
            )
        try:
            from google import genai
        except ImportError as exc:
            raise LLMConfigurationError("google-genai package is required for provider=gemini") from exc
        kwargs: Dict[str, Any] = {"api_key": key}
        if timeout is not None:
            # google-genai expresses HTTP timeouts in milliseconds.
            kwargs["http_options"] = {"timeout": int(timeout * 1000)}
        self._client = genai.Client(**kwargs)

    def _payload(self, request: InvocationRequest) -> Dict[str, Any]:
        system, contents = _contents(request)
        config: Dict[str, Any] = {}
        if system:
            config["system_instruction"] = system
        if request.temperature is not None:
            config["temperature"] = request.temperature
        if request.max_output_tokens is not None:
            config["max_output_tokens"] = request.max_output_tokens
        payload: Dict[str, Any] = {"model": request.model, "contents": contents}
        if config:
            payload["config"] = config
        return payload

    def invoke(self, request: InvocationRequest) -> InvocationResponse:
        """Generate content from the Gemini model."""
        response = self._client.models.generate_content(**self._payload(request))
        return InvocationResponse(
            content=str(getattr(response, "text", None) or ""),
            usage=usage_counts(getattr(response, "usage_metadata", None), **GEMINI_USAGE_KEYS),
            provider=self.name,
            model=request.model,
            provider_request_id=str(getattr(response, "response_id", "") or "") or None,
            raw=response,
        )

    def stream(self, request: InvocationRequest) -> Iterator[InvocationResponse]:
        """Yield streamed chunks; Gemini reports running usage totals per chunk."""
        for chunk in self._client.models.generate_content_stream(**self._payload(request)):
            yield InvocationResponse(
                content=str(getattr(chunk, "text", None) or ""),
                usage=usage_counts(getattr(chunk, "usage_metadata", None), **GEMINI_USAGE_KEYS),
                provider=self.name,
                model=request.model,
                provider_request_id=str(getattr(chunk, "response_id", "") or "") or None,
                raw=chunk,
            )

    def generate_image(self, model: str, prompt: str, size: str, n: int = 1) -> ImageResponse:
        _ = (model, prompt, size, n)
        raise LLMCapabilityError("gemini provider does not support image generation")

    def generate_speech(self, model: str, text: str, voice: str) -> str:
        _ = (model, text, voice)
        raise LLMCapabilityError("gemini provider does not support speech generation")
