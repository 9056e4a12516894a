"""OpenAI-backed provider implementations for chat, images, and speech."""

from __future__ import annotations

import base64
import os
from typing import Any, Dict, Iterator, List, Optional

from openai import OpenAI

from aiclient.llm.errors import LLMConfigurationError
from aiclient.llm.interfaces import ProviderCapabilities
from aiclient.llm.types import ImageResponse, InvocationRequest, InvocationResponse
from aiclient.llm.usage import usage_counts

FIREWORKS_BASE_URL = "https://api.fireworks.ai/inference/v1"
FIREWORKS_MODEL_PATHS = {
    "llama-v3p3-70b-instruct": "accounts/fireworks/models/llama-v3p3-70b-instruct",
    "deepseek-v3": "accounts/fireworks/models/deepseek-v3",
    "deepseek-r1": "accounts/fireworks/models/deepseek-r1",
}


def _chat_messages(request: InvocationRequest) -> List[Dict[str, str]]:
    """Prepend the system prompt as a synthetic system-role message."""
    messages = request.message_dicts()
    if request.system_prompt:
        messages.insert(0, {"role": "system", "content": request.system_prompt})
    return messages


def _choice_text(response: Any) -> str:
    """Extract message content from a chat completion."""
    choices = getattr(response, "choices", None) or []
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    return str(getattr(message, "content", "") or "")


def _delta_text(chunk: Any) -> str:
    """Extract delta content from one streamed chat completion chunk."""
    choices = getattr(chunk, "choices", None) or []
    if not choices:
        return ""
    delta = getattr(choices[0], "delta", None)
    return str(getattr(delta, "content", "") or "")


def _resolve_api_key(api_key: Optional[str], env_key: str, provider: str) -> str:
    key = str(api_key or os.environ.get(env_key) or "").strip()
    if not key:
        raise LLMConfigurationError(
            f"{provider} API key is required. Set it in config or via {env_key} environment variable."
        )
    return key


class OpenAIProvider:
    """Provider adapter for OpenAI Chat Completions, Images, and Speech APIs."""

    name = "openai"
    env_key = "OPENAI_API_KEY"
    max_tokens_param = "max_completion_tokens"
    capabilities = ProviderCapabilities(
        supports_invoke=True,
        supports_streaming=True,
        supports_images=True,
        supports_speech=True,
    )

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[OpenAI] = None,
        provider_name: Optional[str] = None,
    ) -> None:
        """Initialize provider; the API key falls back to the environment."""
        self.name = str(provider_name or self.name)
        if client is not None:
            self._client = client
            return
        key = _resolve_api_key(api_key, self.env_key, self.name)
        kwargs: Dict[str, Any] = {"api_key": key}
        if base_url:
            kwargs["base_url"] = base_url
        if timeout is not None:
            kwargs["timeout"] = timeout
        self._client = OpenAI(**kwargs)

    def _model_name(self, model: str) -> str:
        return model

    def _payload(self, request: InvocationRequest) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self._model_name(request.model),
            "messages": _chat_messages(request),
        }
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        if request.max_output_tokens is not None:
            payload[self.max_tokens_param] = request.max_output_tokens
        return payload

    def invoke(self, request: InvocationRequest) -> InvocationResponse:
        """Generate text using a non-streaming chat completion."""
        response = self._client.chat.completions.create(**self._payload(request))
        return InvocationResponse(
            content=_choice_text(response),
            usage=usage_counts(getattr(response, "usage", None)),
            provider=self.name,
            model=request.model,
            provider_request_id=str(getattr(response, "id", "") or "") or None,
            raw=response,
        )

    def stream(self, request: InvocationRequest) -> Iterator[InvocationResponse]:
        """Yield content deltas; the final usage-only chunk carries token counts."""
        payload = self._payload(request)
        payload["stream"] = True
        payload["stream_options"] = {"include_usage": True}
        with self._client.chat.completions.create(**payload) as stream:
            for chunk in stream:
                yield InvocationResponse(
                    content=_delta_text(chunk),
                    usage=usage_counts(getattr(chunk, "usage", None)),
                    provider=self.name,
                    model=request.model,
                    provider_request_id=str(getattr(chunk, "id", "") or "") or None,
                    raw=chunk,
                )

    def generate_image(self, model: str, prompt: str, size: str, n: int = 1) -> ImageResponse:
        """Generate images and return the first URL with its revised prompt."""
        response = self._client.images.generate(model=model, prompt=prompt, n=n, size=size)
        data = getattr(response, "data", None) or []
        first = data[0] if data else None
        return ImageResponse(
            url=str(getattr(first, "url", "") or ""),
            revised_prompt=str(getattr(first, "revised_prompt", "") or ""),
            provider=self.name,
            raw=response,
        )

    def generate_speech(self, model: str, text: str, voice: str) -> str:
        """Synthesize speech and return base64-encoded audio bytes."""
        response = self._client.audio.speech.create(model=model, input=text, voice=voice)
        audio = getattr(response, "content", None)
        if audio is None:
            audio = response.read()
        return base64.b64encode(bytes(audio)).decode("ascii")


class OpenAICompatibleProvider(OpenAIProvider):
    """OpenAI-compatible adapter (local/self-hosted endpoint)."""

    name = "openai_compatible"
    env_key = "LLM_API_KEY"
    max_tokens_param = "max_tokens"
    capabilities = ProviderCapabilities(
        supports_invoke=True,
        supports_streaming=True,
        supports_images=False,
        supports_speech=False,
    )

    def __init__(
        self,
        *,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[OpenAI] = None,
        provider_name: Optional[str] = None,
    ) -> None:
        """Initialize an OpenAI-compatible provider.

        Args:
            base_url (str): OpenAI-compatible endpoint base URL.
            api_key (Optional[str]): API key/token; falls back to ``env_key``.
            timeout (Optional[float]): Transport timeout in seconds.
            client (Optional[OpenAI]): Pre-built client, mainly for tests.
            provider_name (Optional[str]): Name reported on responses.
        """
        if not str(base_url or "").strip():
            raise LLMConfigurationError(f"{provider_name or self.name} provider requires a non-empty base_url")
        self.base_url = base_url
        super().__init__(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            client=client,
            provider_name=provider_name or self.name,
        )


class FireworksProvider(OpenAICompatibleProvider):
    """Fireworks AI adapter speaking the OpenAI chat protocol."""

    name = "fireworks"
    env_key = "FIREWORKS_API_KEY"

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[OpenAI] = None,
    ) -> None:
        super().__init__(
            base_url=base_url or FIREWORKS_BASE_URL,
            api_key=api_key,
            timeout=timeout,
            client=client,
            provider_name=self.name,
        )

    def _model_name(self, model: str) -> str:
        """Map friendly model ids to Fireworks account model paths; other ids pass through."""
        return FIREWORKS_MODEL_PATHS.get(model, model)
