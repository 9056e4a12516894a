"""Provider-agnostic invocation facade and adapter interfaces."""

from aiclient.llm.errors import (
    LLMCapabilityError,
    LLMConfigurationError,
    LLMProviderError,
    ModelNotMappedError,
    ProviderUnavailableError,
    UnsupportedCapabilityError,
    UpstreamInvocationError,
)
from aiclient.llm.interfaces import ChatProvider, ImageProvider, ProviderCapabilities, SpeechProvider
from aiclient.llm.router import DEFAULT_MODEL_PROVIDER_MAP, ProviderRouter, build_router
from aiclient.llm.runtime import AIClient, build_ai_client
from aiclient.llm.types import (
    AiImageSize,
    AiModel,
    AiVoice,
    ImageResponse,
    InvocationRequest,
    InvocationResponse,
    Message,
    ProviderKey,
    Usage,
)
from aiclient.llm.usage import UsageCounter, usage_counts

__all__ = [
    "LLMProviderError",
    "LLMConfigurationError",
    "LLMCapabilityError",
    "ModelNotMappedError",
    "ProviderUnavailableError",
    "UnsupportedCapabilityError",
    "UpstreamInvocationError",
    "ProviderCapabilities",
    "ChatProvider",
    "ImageProvider",
    "SpeechProvider",
    "DEFAULT_MODEL_PROVIDER_MAP",
    "ProviderRouter",
    "build_router",
    "AIClient",
    "build_ai_client",
    "AiImageSize",
    "AiModel",
    "AiVoice",
    "ImageResponse",
    "InvocationRequest",
    "InvocationResponse",
    "Message",
    "ProviderKey",
    "Usage",
    "UsageCounter",
    "usage_counts",
]
