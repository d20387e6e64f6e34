from __future__ import annotations

import asyncio
import logging
import sys
from importlib.metadata import PackageNotFoundError, version
from typing import Any, TYPE_CHECKING

import mcp.types as types
from mcp.server.lowlevel import NotificationOptions, Server
from mcp.server.session import ServerSession
from mcp.server.stdio import stdio_server
from pydantic import ValidationError

from .dispatcher import ProgressToken
from ..tools.base import ToolResult
from ..tools.registry import ToolDefinition

if TYPE_CHECKING:
    from ..app_context import AppContext

logger = logging.getLogger(__name__)

SERVER_NAME = "thinkgate-mcp"


def server_version() -> str:
    try:
        return version("thinkgate")
    except PackageNotFoundError:
        return "0.0.0"


class SessionNotifier:
    """Delivers dispatcher notifications over the most recent client session."""

    def __init__(self) -> None:
        self.session: ServerSession | None = None

    def bind(self, session: ServerSession) -> None:
        self.session = session

    def _require(self) -> ServerSession:
        if self.session is None:
            raise RuntimeError("no client session connected")
        return self.session

    async def send_progress(self, token: ProgressToken, progress: float, total: float, message: str | None) -> None:
        await self._require().send_progress_notification(
            progress_token=token,
            progress=progress,
            total=total,
            message=message,
        )

    async def send_tools_changed(self) -> None:
        await self._require().send_tool_list_changed()


def to_mcp_tool(d: ToolDefinition) -> types.Tool:
    return types.Tool.model_validate(d)


def list_mcp_tools(definitions: list[ToolDefinition]) -> list[types.Tool]:
    """Convert definitions one by one; a malformed entry is skipped, not fatal."""
    tools: list[types.Tool] = []
    for d in definitions:
        try:
            tools.append(to_mcp_tool(d))
        except ValidationError as e:
            logger.warning("Skipping malformed tool definition %r: %s", d.get("name"), e)
    return tools


def to_mcp_result(result: ToolResult) -> types.CallToolResult:
    content: list[Any] = []
    for item in result.content:
        annotations = types.Annotations.model_validate(item.annotations) if item.annotations else None
        content.append(types.TextContent(type="text", text=item.text, annotations=annotations))
    return types.CallToolResult(content=content, isError=result.is_error)


def build_server(ctx: "AppContext") -> Server:
    server: Server = Server(SERVER_NAME, version=server_version())
    dispatcher = ctx.dispatcher
    notifier = ctx.notifier

    def _bind_session() -> None:
        try:
            notifier.bind(server.request_context.session)
        except LookupError:
            pass

    async def list_tools(_req: types.ListToolsRequest) -> types.ServerResult:
        _bind_session()
        tools = list_mcp_tools(dispatcher.on_list_tools())
        return types.ServerResult(types.ListToolsResult(tools=tools))

    async def call_tool(req: types.CallToolRequest) -> types.ServerResult:
        _bind_session()
        meta = req.params.meta
        token = meta.progressToken if meta is not None else None
        result = await dispatcher.on_call_tool(req.params.name, req.params.arguments or {}, token)
        return types.ServerResult(to_mcp_result(result))

    # Registered directly so tool results keep their own isError flag.
    server.request_handlers[types.ListToolsRequest] = list_tools
    server.request_handlers[types.CallToolRequest] = call_tool
    return server


def _log_loop_exception(loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
    exc = context.get("exception")
    logger.error("Unhandled rejection: %s", exc or context.get("message"), exc_info=exc)


def _log_uncaught(exc_type, exc, tb) -> None:
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc, tb)
        return
    logger.error("Uncaught exception: %s", exc, exc_info=(exc_type, exc, tb))


async def run_stdio(ctx: "AppContext") -> None:
    asyncio.get_running_loop().set_exception_handler(_log_loop_exception)
    sys.excepthook = _log_uncaught

    server = build_server(ctx)
    init_options = server.create_initialization_options(
        notification_options=NotificationOptions(tools_changed=True),
    )
    logger.info("ThinkGate-MCP server started")
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, init_options)
    finally:
        ctx.dispatcher.close()
        await ctx.dispatcher.drain()
        logger.info("MCP server stopped")
