"""Provider routing logic mapping model identifiers to provider adapters."""

from __future__ import annotations

import os
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from aiclient.llm.errors import LLMConfigurationError, ModelNotMappedError, ProviderUnavailableError
from aiclient.llm.providers import AnthropicProvider, FireworksProvider, GeminiProvider, OpenAIProvider
from aiclient.llm.types import AiModel, ProviderKey

DEFAULT_MODEL_PROVIDER_MAP: Dict[str, ProviderKey] = {
    AiModel.GPT_4O.value: ProviderKey.OPENAI,
    AiModel.GPT_4O_MINI.value: ProviderKey.OPENAI,
    AiModel.GPT_TEXT_TO_SPEECH.value: ProviderKey.OPENAI,
    AiModel.DALL_E_3.value: ProviderKey.OPENAI,
    AiModel.O1_PREVIEW.value: ProviderKey.OPENAI,
    AiModel.O1_MINI.value: ProviderKey.OPENAI,
    AiModel.CLAUDE_35_SONNET_LATEST.value: ProviderKey.ANTHROPIC,
    AiModel.CLAUDE_35_HAIKU_LATEST.value: ProviderKey.ANTHROPIC,
    AiModel.GEMINI_20_FLASH.value: ProviderKey.GEMINI,
    AiModel.GEMINI_15_FLASH_LATEST.value: ProviderKey.GEMINI,
    AiModel.GEMINI_15_PRO_LATEST.value: ProviderKey.GEMINI,
    AiModel.LLAMA_33.value: ProviderKey.FIREWORKS,
    AiModel.DEEPSEEK_V3.value: ProviderKey.FIREWORKS,
    AiModel.DEEPSEEK_R1.value: ProviderKey.FIREWORKS,
}


def _cfg_value(settings: Any, key: str, default: Any = None) -> Any:
    """Read one setting from object/dict sources, falling back to env then default."""
    if settings is None:
        value = None
    elif isinstance(settings, Mapping):
        value = settings.get(key)
    else:
        value = getattr(settings, key, None)
    if isinstance(value, str):
        value = value.strip() or None
    if value is not None:
        return value
    env_val = os.environ.get(key.upper())
    if env_val and env_val.strip():
        return env_val.strip()
    return default


def parse_provider_key(value: Any) -> ProviderKey:
    """Coerce a string/enum into a ``ProviderKey`` or raise a configuration error."""
    if isinstance(value, ProviderKey):
        return value
    text = str(value or "").strip().lower()
    try:
        return ProviderKey(text)
    except ValueError:
        supported = ", ".join(key.value for key in ProviderKey)
        raise LLMConfigurationError(f"Unsupported llm provider '{value}'. Supported: {supported}") from None


def build_model_map(overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, ProviderKey]:
    """Merge overrides over the built-in table, validating every provider key."""
    table = dict(DEFAULT_MODEL_PROVIDER_MAP)
    if overrides is not None and not isinstance(overrides, Mapping):
        raise LLMConfigurationError("model_map must be a table of model identifier -> provider")
    for model, provider in (overrides or {}).items():
        model_id = str(model or "").strip()
        if not model_id:
            raise LLMConfigurationError("model_map entries require a non-empty model identifier")
        table[model_id] = parse_provider_key(provider)
    return table


def enabled_providers(settings: Any) -> List[ProviderKey]:
    """Resolve the list of providers that should be constructed."""
    raw = _cfg_value(settings, "providers", default="openai")
    if isinstance(raw, str):
        items: Iterable[Any] = [part for part in raw.split(",") if part.strip()]
    else:
        items = raw or []
    keys: List[ProviderKey] = []
    for item in items:
        key = parse_provider_key(item)
        if key not in keys:
            keys.append(key)
    return keys


ProviderFactory = Callable[[Any], Any]


def _timeout(settings: Any) -> Optional[float]:
    value = _cfg_value(settings, "request_timeout", default=None)
    return float(value) if value is not None else None


PROVIDER_FACTORIES: Dict[ProviderKey, ProviderFactory] = {
    ProviderKey.OPENAI: lambda settings: OpenAIProvider(
        api_key=_cfg_value(settings, "openai_api_key"),
        base_url=_cfg_value(settings, "openai_base_url"),
        timeout=_timeout(settings),
    ),
    ProviderKey.ANTHROPIC: lambda settings: AnthropicProvider(
        api_key=_cfg_value(settings, "anthropic_api_key"),
        timeout=_timeout(settings),
    ),
    ProviderKey.GEMINI: lambda settings: GeminiProvider(
        api_key=_cfg_value(settings, "gemini_api_key"),
        timeout=_timeout(settings),
    ),
    ProviderKey.FIREWORKS: lambda settings: FireworksProvider(
        api_key=_cfg_value(settings, "fireworks_api_key"),
        base_url=_cfg_value(settings, "fireworks_base_url"),
        timeout=_timeout(settings),
    ),
}


def build_provider_registry(settings: Any) -> Dict[ProviderKey, Any]:
    """Instantiate only the configured providers, keyed by provider key.

    Each adapter resolves its credential at construction, so a missing key for
    an enabled provider fails here rather than on first use.
    """
    return {key: PROVIDER_FACTORIES[key](settings) for key in enabled_providers(settings)}


class ProviderRouter:
    """Router table plus configured adapters; resolves model ids to providers."""

    def __init__(
        self,
        providers: Mapping[Any, Any],
        model_map: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._model_map: Dict[str, ProviderKey] = (
            build_model_map() if model_map is None else {str(m): parse_provider_key(p) for m, p in model_map.items()}
        )
        self._providers: Dict[ProviderKey, Any] = {parse_provider_key(k): v for k, v in providers.items()}

    @property
    def model_map(self) -> Dict[str, ProviderKey]:
        return dict(self._model_map)

    @property
    def providers(self) -> Dict[ProviderKey, Any]:
        return dict(self._providers)

    def provider_key_for(self, model: str) -> ProviderKey:
        """Return the provider key mapped to ``model``."""
        key = self._model_map.get(str(model))
        if key is None:
            raise ModelNotMappedError(str(model))
        return key

    def resolve(self, model: str) -> Tuple[ProviderKey, Any]:
        """Return ``(provider_key, adapter)`` for ``model``."""
        key = self.provider_key_for(model)
        provider = self._providers.get(key)
        if provider is None:
            raise ProviderUnavailableError(key.value, str(model))
        return key, provider


def build_router(settings: Any) -> ProviderRouter:
    """Build a router from settings: validated model map and configured providers."""
    model_map = build_model_map(_cfg_value(settings, "model_map", default=None) or {})
    return ProviderRouter(build_provider_registry(settings), model_map)
