from __future__ import annotations

import logging
from typing import Any

from ..annotations import THINK
from ..base import ToolResult, ToolSpec, error_result, require_text, text_result
from ...llm.base import ProviderSource
from ...llm.openai_compat import ProcessOptions
from .prompts import THINK_DESCRIPTION, THINK_SYSTEM_PROMPT

logger = logging.getLogger(__name__)

NAME = "think"


class ThinkTool:
    """Structures a thought with the model when one is configured.

    Without a backend the thought is echoed back as a successful result.
    """

    spec = ToolSpec(
        name=NAME,
        description=THINK_DESCRIPTION,
        parameters={
            "type": "object",
            "properties": {
                "thought": {
                    "type": "string",
                    "description": "Your detailed thoughts about the problem or idea, in English",
                },
                "context": {
                    "type": "string",
                    "description": "Optional context from previous conversation or system state, in English",
                },
            },
            "required": ["thought"],
        },
        annotations=THINK,
    )

    def __init__(self, providers: ProviderSource):
        self.providers = providers

    async def execute(self, args: dict[str, Any]) -> ToolResult:
        thought = require_text(args, "thought")
        if thought is None:
            return error_result(NAME, "Missing required field: thought", "The think tool requires a non-empty 'thought'.")
        context = args.get("context")
        logger.info("Handling think tool with thought: %s...", thought[:100])

        llm = self.providers.get(NAME)
        if not llm.is_initialized():
            logger.info("No LLM API key configured, returning basic response")
            return text_result(
                f"Your thought has been logged: {thought}\n\n"
                "(Set LLM_THINK_API_KEY or LLM_OPENAI_API_KEY env var for enhanced thinking)"
            )

        content = (
            "Analyze this thought and provide structured insights:\n"
            f"{thought}\n\n"
            "Your working language is ONLY English."
        )
        if isinstance(context, str) and context.strip():
            content += f"\n\nContext: <context>\n{context}\n</context>"

        try:
            response = await llm.process(THINK_SYSTEM_PROMPT, content, ProcessOptions(temperature=0.4))
        except Exception as e:
            logger.error("Error using LLM: %s", e)
            return text_result(
                f"Your thought has been logged: {thought}\n\n(Note: AI enhancement failed: {e})"
            )
        logger.info("Received response from LLM")
        return text_result(f"Thought processed and enhanced:\n\n{response}")
