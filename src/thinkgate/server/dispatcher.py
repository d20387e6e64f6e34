from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Optional, Protocol, Union

from ..tools.base import ContentItem, ToolResult
from ..tools.registry import ToolDefinition, ToolRegistry

logger = logging.getLogger(__name__)

ProgressToken = Union[str, int]

TOOLS_CHANGED_DEBOUNCE = 0.5  # seconds

# Upper bound on holding a response back for its own progress notifications.
PROGRESS_FLUSH_TIMEOUT = 1.0  # seconds


class Notifier(Protocol):
    async def send_progress(self, token: ProgressToken, progress: float, total: float, message: str | None) -> None: ...
    async def send_tools_changed(self) -> None: ...


def not_found_result(name: str) -> ToolResult:
    return ToolResult(
        content=[ContentItem(
            text=f"Tool '{name}' not found",
            annotations={"priority": 1.0, "audience": ["user", "assistant"]},
        )],
        is_error=True,
    )


def execution_error_result(name: str, message: str) -> ToolResult:
    return ToolResult(
        content=[ContentItem(
            text=f"Error executing tool {name}: {message or 'Unknown error'}",
            annotations={"priority": 1.0, "audience": ["user", "assistant"]},
        )],
        is_error=True,
    )


class ProgressReporter:
    """Sends the progress notifications of one call without blocking it.

    Every notification runs in its own background task, chained after the
    previous one so delivery order matches report order.
    """

    def __init__(self, dispatcher: "Dispatcher", token: ProgressToken):
        self._dispatcher = dispatcher
        self.token = token
        self._last: Optional[asyncio.Task] = None

    def report(self, progress: float, total: float, message: str) -> asyncio.Task:
        prev = self._last
        task = self._dispatcher._spawn(self._send_after(prev, progress, total, message))
        self._last = task
        return task

    async def _send_after(self, prev: Optional[asyncio.Task], progress: float, total: float, message: str) -> None:
        if prev is not None:
            await asyncio.wait([prev])
        try:
            await self._dispatcher.notifier.send_progress(self.token, progress, total, message)
        except Exception as e:
            logger.warning("Failed to send progress notification: %s", e)

    async def flush(self, timeout: float) -> None:
        """Wait, at most ``timeout`` seconds, for the notifications reported so far."""
        if self._last is not None:
            await asyncio.wait([self._last], timeout=timeout)


class Dispatcher:
    """Binds list-tools / call-tool requests to the registry.

    No exception raised by a tool, by lookup, or by notification delivery
    leaves ``on_call_tool``; every path returns one ``ToolResult``.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        notifier: Notifier,
        *,
        external_tools: Iterable[ToolDefinition] = (),
        debounce: float = TOOLS_CHANGED_DEBOUNCE,
        progress_flush: float = PROGRESS_FLUSH_TIMEOUT,
    ):
        self.registry = registry
        self.notifier = notifier
        self.debounce = debounce
        self.progress_flush = progress_flush
        self._external: list[ToolDefinition] = list(external_tools)
        self._background: set[asyncio.Task] = set()
        self._notify_handle: Optional[asyncio.TimerHandle] = None

    # -- listing ---------------------------------------------------------

    def on_list_tools(self) -> list[ToolDefinition]:
        logger.debug("Handling tools/list request")
        return [*self._external, *self.registry.list_enabled()]

    def set_external_tools(self, definitions: Iterable[ToolDefinition]) -> None:
        self._external = list(definitions)
        logger.info("Set %d external tools from host", len(self._external))
        self.notify_tools_changed()

    # -- calls -----------------------------------------------------------

    async def on_call_tool(
        self,
        name: str,
        arguments: dict[str, Any] | None = None,
        progress_token: ProgressToken | None = None,
    ) -> ToolResult:
        logger.info("Handling tools/call request for %s", name)
        try:
            tool = self.registry.find_by_name(name)
        except Exception as e:
            logger.error("Tool lookup failed for %s: %s", name, e)
            tool = None
        if tool is None:
            return not_found_result(name)

        progress = ProgressReporter(self, progress_token) if progress_token is not None else None
        if progress:
            progress.report(0, 100, f"Starting {name}...")

        try:
            result = await tool.execute(dict(arguments or {}))
        except Exception as e:
            message = str(e) or "Unknown error"
            logger.error("Error executing tool %s: %s", name, message)
            if progress:
                progress.report(100, 100, f"Error in {name}: {message}")
                await progress.flush(self.progress_flush)
            return execution_error_result(name, message)

        if progress:
            progress.report(100, 100, f"Completed {name}")
            # progress goes out ahead of the response, bounded by progress_flush
            await progress.flush(self.progress_flush)
        return result

    # -- tools changed ---------------------------------------------------

    def notify_tools_changed(self) -> None:
        """Schedule one tools-changed notification, restarting the debounce window."""
        loop = asyncio.get_running_loop()
        if self._notify_handle is not None:
            self._notify_handle.cancel()
        self._notify_handle = loop.call_later(self.debounce, self._fire_tools_changed)

    def _fire_tools_changed(self) -> None:
        self._notify_handle = None
        self._spawn(self._send_tools_changed())

    async def _send_tools_changed(self) -> None:
        try:
            await self.notifier.send_tools_changed()
            logger.debug("Sent tools changed notification")
        except Exception as e:
            logger.warning("Failed to send tools changed notification: %s", e)

    # -- background tasks ------------------------------------------------

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def drain(self) -> None:
        """Wait for every pending notification task (pending debounce timers excluded)."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    def close(self) -> None:
        if self._notify_handle is not None:
            self._notify_handle.cancel()
            self._notify_handle = None
