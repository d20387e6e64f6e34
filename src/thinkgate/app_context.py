from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from .config.loader import load_server_config
from .config.models import ServerConfig
from .llm.factory import ProviderFactory
from .server.dispatcher import Dispatcher
from .server.mcp_server import SessionNotifier
from .tools.builtin import builtin_tools
from .tools.builtin_tools.sequential_thinking import ThoughtLog
from .tools.registry import ToolRegistry

@dataclass
class AppContext:
    """Everything the server needs, built once at startup and passed down."""
    config: ServerConfig
    providers: ProviderFactory
    thoughts: ThoughtLog
    registry: ToolRegistry
    notifier: SessionNotifier
    dispatcher: Dispatcher

    @staticmethod
    def from_config(config: ServerConfig, env: Mapping[str, str] | None = None) -> "AppContext":
        providers = ProviderFactory(config.llm, env=env)
        thoughts = ThoughtLog()
        registry = ToolRegistry(builtin_tools(providers, thoughts), config.disabled_tools)
        notifier = SessionNotifier()
        dispatcher = Dispatcher(registry, notifier, external_tools=config.external_tools)
        return AppContext(
            config=config,
            providers=providers,
            thoughts=thoughts,
            registry=registry,
            notifier=notifier,
            dispatcher=dispatcher,
        )


def resolve_config(
    cwd: Path | None = None,
    config_path: Path | None = None,
    disabled_tools: list[str] | None = None,
    log_level: str | None = None,
    env: Mapping[str, str] | None = None,
) -> ServerConfig:
    """Load YAML + env config, then apply CLI overrides."""
    env = os.environ if env is None else env
    config = load_server_config(cwd=cwd or Path.cwd(), explicit_path=config_path, env=env)
    if disabled_tools is not None:
        config.disabled_tools = disabled_tools
    if log_level:
        config.log_level = log_level
    return config
