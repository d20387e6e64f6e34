from __future__ import annotations

import logging
from typing import Any

from ..annotations import ARCHITECT
from ..base import ToolResult, ToolSpec, error_result, require_text, text_result
from ...llm.base import ProviderSource
from ...llm.openai_compat import ProcessOptions
from .prompts import ARCHITECT_DESCRIPTION, ARCHITECT_SYSTEM_PROMPT

logger = logging.getLogger(__name__)

NAME = "architect"


def _compose(prompt: str, context: str | None) -> str:
    if not context:
        return prompt
    return (
        "Here is the context for the project:\n"
        f"<context>\n{context}\n</context>\n\n"
        "And here are the specific technical requirements you need to analyze:\n"
        f"<requirements>\n{prompt}\n</requirements>"
    )


class ArchitectTool:
    spec = ToolSpec(
        name=NAME,
        description=ARCHITECT_DESCRIPTION,
        parameters={
            "type": "object",
            "properties": {
                "prompt": {
                    "type": "string",
                    "description": "The technical request or coding task to analyze, in English",
                },
                "context": {
                    "type": "string",
                    "description": "Optional context from previous conversation or system state, in English",
                },
            },
            "required": ["prompt"],
        },
        annotations=ARCHITECT,
    )

    def __init__(self, providers: ProviderSource):
        self.providers = providers

    async def execute(self, args: dict[str, Any]) -> ToolResult:
        prompt = require_text(args, "prompt")
        if prompt is None:
            return error_result(NAME, "Missing required field: prompt", "The architect tool requires a non-empty 'prompt'.")
        logger.info("Handling architect tool with prompt: %s...", prompt[:100])

        llm = self.providers.get(NAME)
        if not llm.is_initialized():
            logger.info("No LLM API key configured for architect tool")
            return error_result(
                NAME,
                "API key not configured",
                "Architect tool requires LLM API key to be configured. Please check server configuration.",
            )

        context = args.get("context")
        content = _compose(prompt, context if isinstance(context, str) and context.strip() else None)
        try:
            response = await llm.process(ARCHITECT_SYSTEM_PROMPT, content, ProcessOptions(temperature=0.2))
        except Exception as e:
            logger.error("Error in architect tool: %s", e)
            return error_result(NAME, str(e) or "Unknown error", "Error generating architecture plan. Please try again later.")

        logger.info("Architect response generated")
        return text_result(response)
