from __future__ import annotations

from .base import Tool
from ..llm.base import ProviderSource

from .builtin_tools.think_tool import ThinkTool
from .builtin_tools.architect_tool import ArchitectTool
from .builtin_tools.gateway_tool import LLMGatewayTool
from .builtin_tools.sequential_thinking import SequentialThinkingTool, ThoughtLog

def builtin_tools(providers: ProviderSource, thoughts: ThoughtLog) -> list[Tool]:
    """The fixed tool set, in listing order."""
    return [
        ThinkTool(providers),
        ArchitectTool(providers),
        LLMGatewayTool(providers),
        SequentialThinkingTool(thoughts),
    ]
