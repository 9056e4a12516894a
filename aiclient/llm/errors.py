"""Errors raised by the LLM provider abstraction layer."""

from __future__ import annotations

from typing import Optional


class LLMProviderError(RuntimeError):
    """Base error for provider-layer failures."""


class LLMConfigurationError(LLMProviderError):
    """Raised when provider configuration is invalid or incomplete."""


class ModelNotMappedError(LLMProviderError):
    """Raised when a model identifier has no entry in the router table."""

    def __init__(self, model: str) -> None:
        super().__init__(f"No provider found for model: {model}")
        self.model = model


class ProviderUnavailableError(LLMProviderError):
    """Raised when a model resolves to a provider that was not configured."""

    def __init__(self, provider: str, model: str) -> None:
        super().__init__(f"Provider {provider} is not configured (requested by model {model}).")
        self.provider = provider
        self.model = model


class LLMCapabilityError(LLMProviderError):
    """Raised when a selected provider cannot serve a requested capability."""


UnsupportedCapabilityError = LLMCapabilityError


class UpstreamInvocationError(LLMProviderError):
    """Raised when the backend transport fails; wraps the original exception.

    The upstream exception is kept as ``upstream`` and as ``__cause__``.
    """

    def __init__(self, upstream: BaseException, *, provider: str, model: str, operation: Optional[str] = None) -> None:
        super().__init__(str(upstream) or upstream.__class__.__name__)
        self.upstream = upstream
        self.provider = provider
        self.model = model
        self.operation = operation
