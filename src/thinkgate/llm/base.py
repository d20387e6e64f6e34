from __future__ import annotations
from typing import Protocol

from .openai_compat import ProcessOptions

class CapabilityProvider(Protocol):
    def is_initialized(self) -> bool: ...
    def model_name(self) -> str | None: ...
    def provider_name(self) -> str: ...
    async def process(self, system_prompt: str, content: str, options: ProcessOptions | None = None) -> str: ...

class ProviderSource(Protocol):
    """Hands out the provider bound to a tool identity."""
    def get(self, tool_name: str | None = None) -> CapabilityProvider: ...
