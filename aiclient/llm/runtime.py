"""Invocation facade routing chat, image, and speech calls across providers."""

from __future__ import annotations

import json
import time
from dataclasses import replace
from typing import Any, Dict, Iterator, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel

from aiclient.core.config import hash_config_dict
from aiclient.core.logging_utils import log_event
from aiclient.llm.errors import LLMCapabilityError, LLMProviderError, UpstreamInvocationError
from aiclient.llm.router import ProviderRouter, build_router
from aiclient.llm.types import (
    AiImageSize,
    AiVoice,
    ImageResponse,
    InvocationRequest,
    InvocationResponse,
    Message,
    ProviderKey,
)

SchemaLike = Union[type, Mapping[str, Any]]

_CAPABILITY_METHODS = {
    "invoke": "invoke",
    "stream": "stream",
    "image": "generate_image",
    "speech": "generate_speech",
}
_OPTION_FIELDS = ("temperature", "max_output_tokens", "system_prompt")


def render_schema(schema: SchemaLike) -> Dict[str, Any]:
    """Return a JSON schema dict for a pydantic model class or a schema mapping."""
    if isinstance(schema, type) and issubclass(schema, BaseModel):
        return schema.model_json_schema()
    if isinstance(schema, Mapping):
        return dict(schema)
    raise TypeError(f"Unsupported structured output schema: {schema!r}")


def _coerce_messages(messages: Sequence[Any]) -> Tuple[Message, ...]:
    coerced = []
    for message in messages:
        if isinstance(message, Message):
            coerced.append(message)
        elif isinstance(message, Mapping):
            coerced.append(Message(role=str(message.get("role", "")), content=str(message.get("content", ""))))
        else:
            raise TypeError(f"Unsupported message: {message!r}")
    return tuple(coerced)


class AIClient:
    """Provider-agnostic facade over the configured adapters.

    ``with_structured_output`` and ``with_options`` return new clients, so one
    facade can be shared across concurrent tasks without mutation.
    """

    def __init__(
        self,
        router: ProviderRouter,
        *,
        structured_output: Optional[SchemaLike] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.router = router
        self._structured_output = structured_output
        self._options: Dict[str, Any] = dict(options or {})

    def with_structured_output(self, schema: Optional[SchemaLike]) -> "AIClient":
        """Return a client that appends ``schema`` to every system prompt."""
        if schema is not None:
            render_schema(schema)
        return AIClient(self.router, structured_output=schema, options=self._options)

    def with_options(self, **options: Any) -> "AIClient":
        """Return a client with default request options merged in."""
        unknown = sorted(set(options) - set(_OPTION_FIELDS))
        if unknown:
            raise TypeError(f"Unsupported client options: {', '.join(unknown)}")
        merged = {**self._options, **options}
        return AIClient(self.router, structured_output=self._structured_output, options=merged)

    @property
    def structured_output(self) -> Optional[SchemaLike]:
        return self._structured_output

    def prepare_request(self, request: InvocationRequest) -> InvocationRequest:
        """Apply default options and the structured-output contract to ``request``."""
        updates: Dict[str, Any] = {"messages": _coerce_messages(request.messages)}
        for name, value in self._options.items():
            if getattr(request, name) in (None, ""):
                updates[name] = value
        system_prompt = updates.get("system_prompt", request.system_prompt) or ""
        if self._structured_output is not None:
            schema = render_schema(self._structured_output)
            system_prompt += f"\n\nSchema for output: {json.dumps(schema)}"
        updates["system_prompt"] = system_prompt
        return replace(request, **updates)

    def _provider_for(self, model: str, capability: str) -> Tuple[ProviderKey, Any]:
        key, provider = self.router.resolve(model)
        caps = getattr(provider, "capabilities", None)
        if caps is not None:
            supported = caps.supports(capability)
        else:
            supported = callable(getattr(provider, _CAPABILITY_METHODS[capability], None))
        if not supported:
            raise LLMCapabilityError(
                f"Provider '{getattr(provider, 'name', key.value)}' does not support capability '{capability}'"
            )
        return key, provider

    def _upstream_error(self, exc: Exception, key: ProviderKey, model: str, operation: str) -> UpstreamInvocationError:
        log_event(
            "llm_upstream_error",
            {"provider": key.value, "model": model, "operation": operation, "error": str(exc)},
        )
        return UpstreamInvocationError(exc, provider=key.value, model=model, operation=operation)

    def invoke(self, request: InvocationRequest) -> InvocationResponse:
        """Route one non-streaming request to the provider mapped to its model."""
        key, provider = self._provider_for(request.model, "invoke")
        prepared = self.prepare_request(request)
        started = time.perf_counter()
        try:
            response = provider.invoke(prepared)
        except LLMProviderError:
            raise
        except Exception as exc:
            raise self._upstream_error(exc, key, request.model, "invoke") from exc
        log_event(
            "llm_invoke",
            {
                "provider": key.value,
                "model": request.model,
                "latency_ms": int((time.perf_counter() - started) * 1000),
                **response.usage.to_dict(),
            },
        )
        return response

    def stream(self, request: InvocationRequest) -> Iterator[InvocationResponse]:
        """Return a fresh lazy iterator of partial responses.

        Routing and capability errors are raised here, before iteration starts.
        Closing the iterator early releases the underlying transport stream.
        """
        key, provider = self._provider_for(request.model, "stream")
        prepared = self.prepare_request(request)
        log_event("llm_stream_start", {"provider": key.value, "model": request.model})
        return self._guarded_stream(key, request.model, provider.stream(prepared))

    def _guarded_stream(
        self, key: ProviderKey, model: str, chunks: Iterator[InvocationResponse]
    ) -> Iterator[InvocationResponse]:
        try:
            yield from chunks
        except LLMProviderError:
            raise
        except Exception as exc:
            raise self._upstream_error(exc, key, model, "stream") from exc

    def generate_image(
        self,
        model: str,
        prompt: str,
        size: Union[str, AiImageSize] = AiImageSize.SQUARE,
        n: int = 1,
    ) -> ImageResponse:
        """Generate an image with the provider mapped to ``model``."""
        key, provider = self._provider_for(model, "image")
        try:
            return provider.generate_image(model, prompt, AiImageSize(size).value, n)
        except LLMProviderError:
            raise
        except Exception as exc:
            raise self._upstream_error(exc, key, model, "generate_image") from exc

    def generate_speech(self, model: str, text: str, voice: Union[str, AiVoice] = AiVoice.ALLOY) -> str:
        """Synthesize speech; returns base64-encoded audio."""
        key, provider = self._provider_for(model, "speech")
        try:
            return provider.generate_speech(model, text, AiVoice(voice).value)
        except LLMProviderError:
            raise
        except Exception as exc:
            raise self._upstream_error(exc, key, model, "generate_speech") from exc


def build_ai_client(settings: Any) -> AIClient:
    """Build the facade from settings/env provider configuration."""
    router = build_router(settings)
    options: Dict[str, Any] = {}
    if isinstance(settings, Mapping):
        if settings.get("max_output_tokens") is not None:
            options["max_output_tokens"] = int(settings["max_output_tokens"])
        log_event(
            "llm_client_built",
            {
                "providers": [key.value for key in router.providers],
                "config_hash": hash_config_dict(settings),
            },
        )
    return AIClient(router, options=options)
