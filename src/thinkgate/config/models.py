from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass
class LLMSettings:
    api_key: str | None = None
    model: str | None = None
    base_url: str | None = None

    @staticmethod
    def from_obj(obj: Any) -> "LLMSettings | None":
        if not isinstance(obj, dict):
            return None
        out = LLMSettings()
        for attr in ("api_key", "model", "base_url"):
            val = obj.get(attr)
            if isinstance(val, str) and val.strip():
                setattr(out, attr, val.strip())
        return out


@dataclass
class ServerConfig:
    """Server config merged from YAML files and the environment."""

    disabled_tools: list[str] = field(default_factory=list)
    log_level: str = "info"
    log_disabled: bool = False
    # Tool definitions supplied by a host integration, listed ahead of ours.
    external_tools: list[dict[str, Any]] = field(default_factory=list)
    # keyed by tool identity or "default"
    llm: dict[str, LLMSettings] = field(default_factory=dict)

    loaded_from: list[Path] = field(default_factory=list)
