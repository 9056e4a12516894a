"""Configuration loader and merger for aiclient. Used by load_settings to build client config from TOML and environment variables."""

from __future__ import annotations

import hashlib
import json
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_PROVIDERS = ["openai"]
DEFAULT_MAX_ITERATIONS = 10
DEFAULT_REQUEST_TIMEOUT = 60.0
DEFAULT_MAX_OUTPUT_TOKENS = 4096

# Credentials are read straight from the environment by each provider adapter
# and are never copied into the effective config.
SECRET_KEYS = {"openai_api_key", "anthropic_api_key", "gemini_api_key", "fireworks_api_key"}


def load_config(path: Path | None) -> Dict[str, Any]:
    """Load a TOML config file and return the aiclient section or top-level dict."""
    if not path or not path.exists():
        return {}
    data = tomllib.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict) and "aiclient" in data and isinstance(data["aiclient"], dict):
        return data["aiclient"]
    return data or {}


def hash_config_dict(config: Mapping[str, Any]) -> str:
    """Return a stable SHA-256 hash of a config mapping, ignoring secrets."""
    public = {k: v for k, v in config.items() if k not in SECRET_KEYS}
    payload = json.dumps(public, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _env_or_config(env: Mapping[str, str], config: Mapping[str, Any], env_key: str, config_key: str, default: Any) -> Any:
    if env_key in env and env[env_key] != "":
        return env[env_key]
    if config_key in config:
        return config[config_key]
    return default


def _coerce_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _coerce_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _coerce_list(value: Any, default: List[str]) -> List[str]:
    if value is None:
        return list(default)
    if isinstance(value, str):
        items = [part.strip().lower() for part in value.split(",")]
    else:
        items = [str(part).strip().lower() for part in value]
    items = [item for item in items if item]
    return items or list(default)


def build_effective_config(config: Mapping[str, Any], env: Mapping[str, str]) -> Dict[str, Any]:
    """Build the effective config with env overrides applied."""
    model_map = config.get("model_map") or {}
    if not isinstance(model_map, Mapping):
        model_map = {}
    effective: Dict[str, Any] = {
        "providers": _coerce_list(
            _env_or_config(env, config, "AICLIENT_PROVIDERS", "providers", None), DEFAULT_PROVIDERS
        ),
        "default_model": _env_or_config(env, config, "AICLIENT_MODEL", "default_model", DEFAULT_MODEL),
        "agent_max_iterations": max(
            1,
            _coerce_int(
                _env_or_config(env, config, "AICLIENT_MAX_ITERATIONS", "agent_max_iterations", DEFAULT_MAX_ITERATIONS),
                DEFAULT_MAX_ITERATIONS,
            ),
        ),
        "request_timeout": _coerce_float(
            _env_or_config(env, config, "AICLIENT_REQUEST_TIMEOUT", "request_timeout", DEFAULT_REQUEST_TIMEOUT),
            DEFAULT_REQUEST_TIMEOUT,
        ),
        "max_output_tokens": _coerce_int(
            _env_or_config(env, config, "AICLIENT_MAX_OUTPUT_TOKENS", "max_output_tokens", DEFAULT_MAX_OUTPUT_TOKENS),
            DEFAULT_MAX_OUTPUT_TOKENS,
        ),
        "model_map": {str(k): str(v) for k, v in model_map.items()},
        "openai_base_url": _env_or_config(env, config, "OPENAI_BASE_URL", "openai_base_url", None),
        "fireworks_base_url": _env_or_config(env, config, "FIREWORKS_BASE_URL", "fireworks_base_url", None),
    }
    return effective


def load_settings(path: Optional[Path] = None, env: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Load the TOML file (``AICLIENT_CONFIG`` or ``path``) and apply env overrides."""
    env = os.environ if env is None else env
    if path is None and env.get("AICLIENT_CONFIG"):
        path = Path(env["AICLIENT_CONFIG"])
    return build_effective_config(load_config(path), env)
