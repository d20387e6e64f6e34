from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from .openai_compat import OpenAICompatProvider
from ..config.models import LLMSettings

logger = logging.getLogger(__name__)

DEFAULT_KEY = "default"

# Environment variable prefixes per tool identity.
ENV_PREFIXES: Dict[str, str] = {
    DEFAULT_KEY: "LLM_OPENAI",
    "architect": "LLM_ARCHITECT",
    "think": "LLM_THINK",
    "llm_gateway": "LLM_GATEWAY",
}

DEFAULT_TEMPERATURES: Dict[str, float] = {
    "architect": 0.2,
    "think": 0.4,
    "llm_gateway": 0.7,
}

MAX_TOKENS: Dict[str, int] = {
    "architect": 16384,
    "think": 4096,
    "llm_gateway": 32768,
}


@dataclass(frozen=True)
class ProviderConfig:
    tool_name: str
    base_url: str | None
    model: str | None
    api_key: str | None


def _env_value(env: Mapping[str, str], prefix: str | None, suffix: str) -> str | None:
    if not prefix:
        return None
    val = (env.get(f"{prefix}_{suffix}") or "").strip()
    return val or None


def _cfg_value(settings: LLMSettings | None, attr: str) -> str | None:
    if settings is None:
        return None
    val = (getattr(settings, attr) or "").strip()
    return val or None


def resolve_provider_config(
    tool_name: str,
    llm: Mapping[str, LLMSettings] | None = None,
    env: Mapping[str, str] | None = None,
) -> ProviderConfig:
    """Resolve credential, model and endpoint for one tool.

    Each setting falls back independently:
      tool env var > tool config entry > default env var > default config entry
    """
    env = os.environ if env is None else env
    llm = llm or {}
    tool_prefix = ENV_PREFIXES.get(tool_name)
    default_prefix = ENV_PREFIXES[DEFAULT_KEY]

    def pick(env_suffix: str, attr: str) -> str | None:
        return (
            _env_value(env, tool_prefix, env_suffix)
            or _cfg_value(llm.get(tool_name), attr)
            or _env_value(env, default_prefix, env_suffix)
            or _cfg_value(llm.get(DEFAULT_KEY), attr)
        )

    return ProviderConfig(
        tool_name=tool_name,
        api_key=pick("API_KEY", "api_key"),
        model=pick("API_MODEL", "model"),
        base_url=pick("API_ENDPOINT", "base_url"),
    )


class ProviderFactory:
    """One provider per tool identity, created on first use and shared after."""

    def __init__(self, llm: Mapping[str, LLMSettings] | None = None, env: Mapping[str, str] | None = None) -> None:
        self._llm = dict(llm or {})
        self._env = env
        self._items: Dict[str, OpenAICompatProvider] = {}

    def get(self, tool_name: Optional[str] = None) -> OpenAICompatProvider:
        key = (tool_name or DEFAULT_KEY).strip().lower()
        if key not in self._items:
            self._items[key] = self._create(key)
        return self._items[key]

    def _create(self, key: str) -> OpenAICompatProvider:
        cfg = resolve_provider_config(key, self._llm, self._env)
        provider = OpenAICompatProvider(
            model=cfg.model,
            base_url=cfg.base_url,
            api_key=cfg.api_key,
            tool_name=None if key == DEFAULT_KEY else key,
            default_temperature=DEFAULT_TEMPERATURES.get(key, 0.5),
            default_max_tokens=MAX_TOKENS.get(key),
        )
        if provider.is_initialized():
            logger.info("OpenAI client initialized for %s", key)
            logger.debug("Using model: %s, endpoint: %s", cfg.model, cfg.base_url or "default")
        else:
            logger.warning("No API key provided for OpenAI (%s), client disabled", key)
        return provider

    def names(self) -> list[str]:
        return sorted(self._items.keys())
