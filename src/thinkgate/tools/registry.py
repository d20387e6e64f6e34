from __future__ import annotations
import logging
from typing import Any, Dict, Iterable, Optional

from .base import Tool

logger = logging.getLogger(__name__)

# Disables every tool when present in the disable list.
DISABLE_ALL = "all"

ToolDefinition = Dict[str, Any]


class ToolRegistry:
    """Authoritative set of tools plus the startup disable policy.

    Both the available mapping and the enabled subset are fixed once the
    registry is constructed.
    """

    def __init__(self, tools: Iterable[Tool] = (), disabled: Iterable[str] = ()):
        self._available: Dict[str, Tool] = {}
        self._enabled: list[Tool] = []
        self._disabled: list[str] = []
        self.register_available(tools)
        self.apply_disable_policy(disabled)

    def register_available(self, tools: Iterable[Tool]) -> None:
        for tool in tools:
            name = tool.spec.name
            if name in self._available:
                raise ValueError(f"Tool already registered: {name}")
            self._available[name] = tool

    def apply_disable_policy(self, disabled: Iterable[str]) -> None:
        names: list[str] = []
        for raw in disabled:
            name = str(raw).strip()
            if name and name not in names:
                names.append(name)
        self._disabled = names
        if names:
            logger.info("Disabled tools: %s", ", ".join(names))

        self._enabled = []
        for name, tool in self._available.items():
            if self._is_disabled(name):
                logger.info("Skipped disabled tool: %s", name)
                continue
            self._enabled.append(tool)
            logger.info("Registered tool: %s", name)
        logger.info("Registered %d tools out of %d available", len(self._enabled), len(self._available))

    def _is_disabled(self, name: str) -> bool:
        return DISABLE_ALL in self._disabled or name in self._disabled

    @property
    def available(self) -> Dict[str, Tool]:
        return dict(self._available)

    @property
    def enabled(self) -> list[Tool]:
        return list(self._enabled)

    def list_enabled(self) -> list[ToolDefinition]:
        return [to_definition(t) for t in self._enabled]

    def find_by_name(self, name: str) -> Optional[Tool]:
        """Return an enabled tool, otherwise None.

        A disabled tool stays in ``available`` but is never returned here.
        """
        for tool in self._enabled:
            if tool.spec.name == name:
                return tool
        return None

    def list_available_names(self) -> list[str]:
        return [n for n in self._available if not self._is_disabled(n)]

    def disabled_names(self) -> list[str]:
        return list(self._disabled)


def to_definition(tool: Tool) -> ToolDefinition:
    schema = tool.spec.parameters or {}
    d: ToolDefinition = {
        "name": tool.spec.name,
        "description": tool.spec.description,
        "inputSchema": {
            "type": "object",
            "properties": dict(schema.get("properties") or {}),
            "required": list(schema.get("required") or []),
        },
    }
    if tool.spec.annotations is not None:
        d["annotations"] = tool.spec.annotations.to_dict()
    return d
