from __future__ import annotations

import asyncio
import json
import logging
import urllib.request
import urllib.error
from dataclasses import dataclass, field
from typing import Any

from ..errors import BackendCallError, BackendUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o-mini"
PROVIDER_NAME = "OpenAI-compatible"


@dataclass
class ProcessOptions:
    temperature: float | None = None
    max_tokens: int | None = None
    stop: list[str] | None = None


@dataclass
class OpenAICompatProvider:
    """
    Minimal OpenAI-compatible Chat Completions client.
    Works with OpenAI and many compatible gateways (OpenRouter, vLLM, LM Studio, etc.)

    A provider without an api key is valid but uninitialized: tools check
    ``is_initialized()`` and degrade instead of calling ``process``.
    """
    model: str | None = None
    base_url: str | None = None
    api_key: str | None = None
    tool_name: str | None = None
    default_temperature: float = 0.5
    default_max_tokens: int | None = None
    timeout: float = 120.0
    extra_headers: dict[str, str] = field(default_factory=dict)

    def is_initialized(self) -> bool:
        return bool(self.api_key)

    def model_name(self) -> str | None:
        return self.model

    def provider_name(self) -> str:
        return PROVIDER_NAME

    async def process(self, system_prompt: str, content: str, options: ProcessOptions | None = None) -> str:
        if not self.is_initialized():
            raise BackendUnavailableError("OpenAI client not initialized. Please provide API key.")
        label = f" ({self.tool_name})" if self.tool_name else ""
        logger.debug("Request to LLM%s: %s...", label, content[:100])
        payload = self._build_payload(system_prompt, content, options or ProcessOptions())
        # urllib blocks; keep the event loop free for other requests.
        return await asyncio.to_thread(self._post, payload)

    def _build_payload(self, system_prompt: str, content: str, options: ProcessOptions) -> dict[str, Any]:
        temperature = options.temperature if options.temperature is not None else self.default_temperature
        max_tokens = options.max_tokens if options.max_tokens is not None else self.default_max_tokens
        payload: dict[str, Any] = {
            "model": self.model or DEFAULT_MODEL,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": content},
            ],
            "temperature": temperature,
        }
        if max_tokens is not None:
            payload["max_tokens"] = int(max_tokens)
        if options.stop:
            payload["stop"] = list(options.stop)
        return payload

    def _post(self, payload: dict[str, Any]) -> str:
        url = (self.base_url or DEFAULT_BASE_URL).rstrip("/") + "/chat/completions"
        data = json.dumps(payload).encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            **self.extra_headers,
        }
        req = urllib.request.Request(url, data=data, headers=headers, method="POST")
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read().decode("utf-8", errors="replace")
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace") if hasattr(e, "read") else ""
            raise BackendCallError(f"Provider HTTPError {e.code}: {e.reason}\n{body}".rstrip()) from e
        except urllib.error.URLError as e:
            raise BackendCallError(f"Provider URLError: {e}") from e
        except TimeoutError as e:
            raise BackendCallError(f"Provider timed out after {self.timeout:g}s") from e
        return _extract_text(raw)


def _extract_text(raw: str) -> str:
    try:
        obj = json.loads(raw)
        msg = obj["choices"][0]["message"]
    except (json.JSONDecodeError, KeyError, IndexError, TypeError) as e:
        raise BackendCallError(f"Malformed provider response: {raw[:200]}") from e
    text = msg.get("content")
    if isinstance(text, str):
        return text
    # some gateways return a list of content parts
    return json.dumps(text, ensure_ascii=False)
