from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any, Mapping

import yaml
from platformdirs import user_config_dir

from .models import LLMSettings, ServerConfig

logger = logging.getLogger(__name__)

APP_NAME = "thinkgate"
DISABLED_TOOLS_ENV = "THINKGATE_DISABLED_TOOLS"

LOG_LEVELS = {"debug", "info", "log", "warn", "warning", "error"}

_ENV_PATTERN = re.compile(r"\$\{(\w+)\}")


def _candidate_paths(cwd: Path) -> list[Path]:
    # project-level (higher priority)
    return [
        cwd / ".thinkgate.yaml",
        cwd / "thinkgate.yaml",
    ]


def _global_candidate_paths() -> list[Path]:
    cfg_dir = Path(user_config_dir(APP_NAME))
    return [cfg_dir / "thinkgate.yaml"]


def _load_yaml(p: Path) -> dict[str, Any] | None:
    try:
        obj = yaml.safe_load(p.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Ignoring unreadable config %s: %s", p, e)
        return None
    if obj is None:
        return {}
    if isinstance(obj, dict):
        return obj
    logger.warning("Ignoring config %s: top level must be a mapping", p)
    return None


def _merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge_dicts(out[k], v)  # type: ignore
        else:
            out[k] = v
    return out


def _expand_env_placeholders(s: str, env: Mapping[str, str]) -> str:
    def repl(m: re.Match) -> str:
        var = m.group(1)
        val = env.get(var)
        if not val:
            logger.warning("Placeholder '${%s}' not found in environment or is empty.", var)
            return ""
        return val

    return _ENV_PATTERN.sub(repl, s)


def parse_disabled_tools(value: Any) -> list[str]:
    """Split a comma list (or a YAML list) into names; blank entries are dropped."""
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple, set)):
        items = [str(x) for x in value]
    else:
        return []
    return [x.strip() for x in items if x.strip()]


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def load_server_config(
    *,
    cwd: Path,
    explicit_path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> ServerConfig:
    """Load server config.

    Merge order: global < project < explicit_path < environment.
    """
    env = os.environ if env is None else env
    merged: dict[str, Any] = {}
    cfg = ServerConfig()

    for p in _global_candidate_paths():
        if p.exists() and p.is_file():
            obj = _load_yaml(p)
            if obj is not None:
                merged = _merge_dicts(merged, obj)
                cfg.loaded_from.append(p)

    for p in _candidate_paths(cwd):
        if p.exists() and p.is_file():
            obj = _load_yaml(p)
            if obj is not None:
                merged = _merge_dicts(merged, obj)
                cfg.loaded_from.append(p)
                break  # first match wins for project-level

    if explicit_path is not None:
        p = explicit_path.expanduser().resolve()
        if not p.exists():
            raise FileNotFoundError(f"Config YAML not found: {p}")
        obj = _load_yaml(p)
        if obj is not None:
            merged = _merge_dicts(merged, obj)
            cfg.loaded_from.append(p)

    # disabled tools
    cfg.disabled_tools = parse_disabled_tools(merged.get("disabled_tools"))

    # logging
    lvl = merged.get("log_level")
    if isinstance(lvl, str) and lvl.strip().lower() in LOG_LEVELS:
        cfg.log_level = lvl.strip().lower()
    if "log_disabled" in merged:
        cfg.log_disabled = _parse_bool(merged.get("log_disabled"))

    # external tool definitions (passed through unvalidated apart from shape)
    ext = merged.get("external_tools", [])
    if isinstance(ext, list):
        cfg.external_tools = [t for t in ext if isinstance(t, dict)]

    # llm settings
    llm = merged.get("llm", {})
    if isinstance(llm, dict):
        for name, obj in llm.items():
            if not isinstance(name, str):
                continue
            st = LLMSettings.from_obj(obj)
            if st is None:
                continue
            if st.api_key:
                st.api_key = _expand_env_placeholders(st.api_key, env) or None
            cfg.llm[name.strip().lower()] = st

    # environment overrides
    env_disabled = env.get(DISABLED_TOOLS_ENV)
    if env_disabled:
        cfg.disabled_tools = parse_disabled_tools(env_disabled)
    env_level = (env.get("LOG_LEVEL") or "").strip().lower()
    if env_level in LOG_LEVELS:
        cfg.log_level = env_level
    if "LOG_DISABLED" in env:
        cfg.log_disabled = _parse_bool(env.get("LOG_DISABLED"))

    return cfg
