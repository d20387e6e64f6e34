from __future__ import annotations

import logging
import math
from typing import Any

from ..annotations import LLM_GATEWAY
from ..base import ContentItem, ToolResult, ToolSpec, error_result, multi_result, require_text
from ...llm.base import ProviderSource
from ...llm.openai_compat import ProcessOptions
from .prompts import GATEWAY_DESCRIPTION, GATEWAY_SYSTEM_PROMPTS

logger = logging.getLogger(__name__)

NAME = "llm_gateway"


def select_system_prompt(system_prompt: Any, prompt_type: Any) -> str:
    """A caller-supplied prompt wins; otherwise pick a named variant."""
    if isinstance(system_prompt, str) and system_prompt.strip():
        return system_prompt
    key = prompt_type if isinstance(prompt_type, str) else "default"
    return GATEWAY_SYSTEM_PROMPTS.get(key, GATEWAY_SYSTEM_PROMPTS["default"])


def _number(value: Any, minimum: float | None = None) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    if minimum is not None and value < minimum:
        return None
    return value


class LLMGatewayTool:
    spec = ToolSpec(
        name=NAME,
        description=GATEWAY_DESCRIPTION,
        parameters={
            "type": "object",
            "properties": {
                "message": {"type": "string", "description": "Message or query to the LLM, in English"},
                "context": {"type": "string", "description": "Additional context to improve the response, in English"},
                "systemPrompt": {
                    "type": "string",
                    "description": "System prompt for the LLM (will replace the default), in English",
                },
                "systemPromptType": {
                    "type": "string",
                    "enum": sorted(GATEWAY_SYSTEM_PROMPTS),
                    "description": "Type of system prompt: default, code, or educational",
                },
                "temperature": {
                    "type": "number",
                    "minimum": 0,
                    "maximum": 1,
                    "description": "Creativity level of the response (0.0 - deterministic, 1.0 - creative)",
                },
                "maxTokens": {
                    "type": "number",
                    "minimum": 1,
                    "description": "Maximum number of tokens in the response",
                },
            },
            "required": ["message"],
        },
        annotations=LLM_GATEWAY,
    )

    def __init__(self, providers: ProviderSource):
        self.providers = providers

    async def execute(self, args: dict[str, Any]) -> ToolResult:
        message = require_text(args, "message")
        if message is None:
            return error_result(NAME, "Missing required field: message", "The llm_gateway tool requires a non-empty 'message'.")
        logger.info("Handling llm_gateway request: %s...", message[:100])

        llm = self.providers.get(NAME)
        if not llm.is_initialized():
            logger.info("No LLM API key configured for llm_gateway tool")
            return error_result(
                NAME,
                "API key not configured",
                "LLM Gateway tool requires LLM API key to be configured. Please check server configuration.",
            )

        system_prompt = select_system_prompt(args.get("systemPrompt"), args.get("systemPromptType", "default"))
        context = args.get("context")
        content = message
        if isinstance(context, str) and context.strip():
            content = f"{message}\n\nAdditional context:\n{context}"

        max_tokens = _number(args.get("maxTokens"), minimum=1)
        options = ProcessOptions(
            temperature=_number(args.get("temperature")),
            max_tokens=int(max_tokens) if max_tokens is not None else None,
        )
        try:
            response = await llm.process(system_prompt, content, options)
        except Exception as e:
            logger.error("Error in llm_gateway tool: %s", e)
            return error_result(
                NAME,
                str(e) or "Unknown error",
                "An error occurred while interacting with the LLM model. Please try again later.",
            )

        model = llm.model_name()
        provider = llm.provider_name()
        return multi_result([
            ContentItem(text=response, annotations={"priority": 1.0, "audience": ["user", "assistant"]}),
            ContentItem(
                text=f"Model used: {model or 'not specified'} ({provider})",
                annotations={
                    "priority": 0.3,
                    "audience": ["user", "assistant"],
                    "metadata": {"model": model, "provider": provider},
                },
            ),
        ])
