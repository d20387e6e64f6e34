from __future__ import annotations

import pytest

from thinkgate.llm.openai_compat import PROVIDER_NAME
from thinkgate.tools.builtin_tools.architect_tool import ArchitectTool
from thinkgate.tools.builtin_tools.gateway_tool import LLMGatewayTool, select_system_prompt
from thinkgate.tools.builtin_tools.prompts import (
    ARCHITECT_SYSTEM_PROMPT,
    GATEWAY_SYSTEM_PROMPTS,
    THINK_SYSTEM_PROMPT,
)
from thinkgate.tools.builtin_tools.think_tool import ThinkTool

from conftest import make_provider, make_providers


# ---------- think ----------

@pytest.mark.asyncio
async def test_think_without_backend_echoes_thought():
    llm = make_provider(initialized=False)
    result = await ThinkTool(make_providers(llm)).execute({"thought": "cache the parser"})
    assert not result.is_error
    assert "cache the parser" in result.text
    assert "LLM_THINK_API_KEY" in result.text
    llm.process.assert_not_awaited()


@pytest.mark.asyncio
async def test_think_with_backend_forwards_thought_and_context():
    llm = make_provider(response="1. do X")
    providers = make_providers(llm)
    result = await ThinkTool(providers).execute({"thought": "idea", "context": "earlier chat"})
    assert result.text == "Thought processed and enhanced:\n\n1. do X"
    providers.get.assert_called_with("think")
    system, content, options = llm.process.await_args.args
    assert system == THINK_SYSTEM_PROMPT
    assert "idea" in content and "<context>\nearlier chat\n</context>" in content
    assert options.temperature == 0.4


@pytest.mark.asyncio
async def test_think_backend_failure_still_succeeds():
    llm = make_provider()
    llm.process.side_effect = RuntimeError("rate limited")
    result = await ThinkTool(make_providers(llm)).execute({"thought": "idea"})
    assert not result.is_error
    assert "idea" in result.text
    assert "rate limited" in result.text


@pytest.mark.asyncio
async def test_think_requires_thought():
    result = await ThinkTool(make_providers(make_provider())).execute({})
    assert result.is_error


# ---------- architect ----------

@pytest.mark.asyncio
async def test_architect_without_backend_is_error_and_makes_no_call():
    llm = make_provider(initialized=False)
    result = await ArchitectTool(make_providers(llm)).execute({"prompt": "design a cache"})
    assert result.is_error
    assert len(result.content) == 2
    assert result.content[0].annotations["audience"] == ["user"]
    assert result.content[1].annotations["priority"] == 0.8
    assert "API key" in result.text
    llm.process.assert_not_awaited()


@pytest.mark.asyncio
async def test_architect_wraps_context_and_requirements():
    llm = make_provider(response="plan")
    result = await ArchitectTool(make_providers(llm)).execute({"prompt": "add auth", "context": "flask app"})
    assert not result.is_error
    assert result.text == "plan"
    system, content, options = llm.process.await_args.args
    assert system == ARCHITECT_SYSTEM_PROMPT
    assert "<context>\nflask app\n</context>" in content
    assert "<requirements>\nadd auth\n</requirements>" in content
    assert options.temperature == 0.2


@pytest.mark.asyncio
async def test_architect_without_context_sends_prompt_as_is():
    llm = make_provider()
    await ArchitectTool(make_providers(llm)).execute({"prompt": "add auth"})
    assert llm.process.await_args.args[1] == "add auth"


@pytest.mark.asyncio
async def test_architect_backend_failure_is_error():
    llm = make_provider()
    llm.process.side_effect = RuntimeError("503")
    result = await ArchitectTool(make_providers(llm)).execute({"prompt": "p"})
    assert result.is_error
    assert "503" in result.content[1].text


# ---------- llm_gateway ----------

@pytest.mark.asyncio
async def test_gateway_without_backend_is_error_and_makes_no_call():
    llm = make_provider(initialized=False)
    result = await LLMGatewayTool(make_providers(llm)).execute({"message": "hi"})
    assert result.is_error
    assert "LLM Gateway" in result.content[0].text
    llm.process.assert_not_awaited()


@pytest.mark.asyncio
async def test_gateway_returns_response_and_model_info():
    llm = make_provider(response="answer", model="gpt-x")
    result = await LLMGatewayTool(make_providers(llm)).execute({
        "message": "explain",
        "context": "beginner",
        "systemPromptType": "educational",
        "temperature": 0.1,
        "maxTokens": 200,
    })
    assert not result.is_error
    assert [c.text for c in result.content] == ["answer", f"Model used: gpt-x ({PROVIDER_NAME})"]
    assert result.content[0].annotations["priority"] == 1.0
    assert result.content[1].annotations["priority"] == 0.3
    assert result.content[1].annotations["metadata"] == {"model": "gpt-x", "provider": PROVIDER_NAME}

    system, content, options = llm.process.await_args.args
    assert system == GATEWAY_SYSTEM_PROMPTS["educational"]
    assert content == "explain\n\nAdditional context:\nbeginner"
    assert options.temperature == 0.1
    assert options.max_tokens == 200


@pytest.mark.asyncio
async def test_gateway_ignores_non_numeric_tuning():
    llm = make_provider(model=None)
    result = await LLMGatewayTool(make_providers(llm)).execute({"message": "m", "temperature": "hot", "maxTokens": True})
    options = llm.process.await_args.args[2]
    assert options.temperature is None and options.max_tokens is None
    assert "not specified" in result.content[1].text


def test_select_system_prompt():
    assert select_system_prompt("custom", "code") == "custom"
    assert select_system_prompt("  ", "code") == GATEWAY_SYSTEM_PROMPTS["code"]
    assert select_system_prompt(None, "poetry") == GATEWAY_SYSTEM_PROMPTS["default"]
    assert select_system_prompt(None, None) == GATEWAY_SYSTEM_PROMPTS["default"]


@pytest.mark.asyncio
async def test_whitespace_prompt_is_forwarded():
    llm = make_provider()
    result = await ArchitectTool(make_providers(llm)).execute({"prompt": "  "})
    assert not result.is_error
    assert llm.process.await_args.args[1] == "  "


@pytest.mark.asyncio
async def test_empty_message_is_rejected():
    llm = make_provider()
    result = await LLMGatewayTool(make_providers(llm)).execute({"message": ""})
    assert result.is_error
    llm.process.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize("max_tokens", [float("inf"), float("nan"), 0.5, 0, -3])
async def test_gateway_drops_unusable_max_tokens(max_tokens):
    llm = make_provider()
    result = await LLMGatewayTool(make_providers(llm)).execute({"message": "m", "maxTokens": max_tokens})
    assert not result.is_error
    assert llm.process.await_args.args[2].max_tokens is None


@pytest.mark.asyncio
async def test_gateway_drops_non_finite_temperature():
    llm = make_provider()
    await LLMGatewayTool(make_providers(llm)).execute({"message": "m", "temperature": float("nan")})
    assert llm.process.await_args.args[2].temperature is None
