from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from thinkgate.llm.openai_compat import PROVIDER_NAME
from thinkgate.tools.base import ToolSpec, text_result


def make_provider(initialized: bool = True, response: str = "model says hi", model: str | None = "test-model"):
    llm = MagicMock()
    llm.is_initialized.return_value = initialized
    llm.model_name.return_value = model
    llm.provider_name.return_value = PROVIDER_NAME
    llm.process = AsyncMock(return_value=response)
    return llm


def make_providers(llm) -> MagicMock:
    providers = MagicMock()
    providers.get.return_value = llm
    return providers


class EchoTool:
    def __init__(self, name: str):
        self.spec = ToolSpec(
            name=name,
            description=f"echo from {name}",
            parameters={"type": "object", "properties": {"x": {"type": "string"}}, "required": ["x"]},
        )
        self.calls: list[dict] = []

    async def execute(self, args):
        self.calls.append(args)
        return text_result(f"{self.spec.name}:{args.get('x', '')}")


class BoomTool:
    def __init__(self, name: str = "boom", message: str = "kaboom"):
        self.spec = ToolSpec(name=name, description="always fails", parameters={})
        self.message = message

    async def execute(self, args):
        raise RuntimeError(self.message)


@pytest.fixture
def notifier() -> MagicMock:
    n = MagicMock()
    n.send_progress = AsyncMock()
    n.send_tools_changed = AsyncMock()
    return n
