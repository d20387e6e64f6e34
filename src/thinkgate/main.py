from __future__ import annotations

from pathlib import Path
import asyncio
import json
import logging
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .app_context import AppContext, resolve_config
from .config.loader import parse_disabled_tools
from .logging_setup import configure_logging, err_console
from .server.mcp_server import run_stdio

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False, help="thinkgate: MCP server with thinking-aid tools.")
console = Console()

# tools that cannot work at all without a backend
BACKEND_REQUIRED = ("architect", "llm_gateway")

ENV_HELP = """\
To enable all tools, configure the following environment variables:
  LLM_OPENAI_API_KEY=your_api_key            # Common API key for all tools
  LLM_OPENAI_API_MODEL=gpt-4o                # Common model for all tools
  LLM_OPENAI_API_ENDPOINT=https://api...     # Common endpoint for all tools
Or configure specific tools separately:
  LLM_ARCHITECT_API_KEY / LLM_THINK_API_KEY / LLM_GATEWAY_API_KEY
  LLM_ARCHITECT_API_MODEL / LLM_THINK_API_MODEL / LLM_GATEWAY_API_MODEL
  LLM_ARCHITECT_API_ENDPOINT / LLM_THINK_API_ENDPOINT / LLM_GATEWAY_API_ENDPOINT"""


def _build_context(config: Path | None, disable: str | None = None, log_level: str | None = None) -> AppContext:
    if config is not None and not config.expanduser().exists():
        raise typer.BadParameter(f"--config file not found: {config}")
    cfg = resolve_config(
        config_path=config,
        disabled_tools=parse_disabled_tools(disable) if disable is not None else None,
        log_level=log_level,
    )
    configure_logging(cfg.log_level, cfg.log_disabled)
    return AppContext.from_config(cfg)


def backend_status(ctx: AppContext) -> list[tuple[str, str]]:
    """Human-readable backend status per known tool."""
    rows: list[tuple[str, str]] = []
    for name in ctx.registry.available:
        if name == "sequential_thinking":
            rows.append((name, "enabled (stateful tool, no backend)"))
            continue
        llm = ctx.providers.get(name)
        if llm.is_initialized():
            rows.append((name, f"enabled with {llm.model_name() or 'default model'}"))
        elif name == "think":
            rows.append((name, "enabled with basic functionality (no LLM)"))
        else:
            rows.append((name, "unavailable (API key not configured)"))
    return rows


def _missing_backend(ctx: AppContext) -> bool:
    return any(not ctx.providers.get(n).is_initialized() for n in BACKEND_REQUIRED)


@app.command()
def serve(
    config: Path = typer.Option(None, "--config", help="YAML config path (default: ./thinkgate.yaml if present)."),
    disable: str = typer.Option(None, "--disable", help="Comma-separated tool names to disable, or 'all'."),
    log_level: str = typer.Option(None, "--log-level", help="debug/info/warn/error (logs go to stderr)."),
):
    """Run the MCP server over stdio."""
    ctx = _build_context(config, disable, log_level)
    logger.info("Starting ThinkGate-MCP server...")
    for name, st in backend_status(ctx):
        logger.info("%s: %s", name, st)
    if _missing_backend(ctx):
        logger.info("\n%s", ENV_HELP)
    try:
        asyncio.run(run_stdio(ctx))
    except KeyboardInterrupt:
        logger.info("Received SIGINT, shutting down...")


@app.command()
def tools(
    config: Path = typer.Option(None, "--config", help="YAML config path."),
    disable: str = typer.Option(None, "--disable", help="Comma-separated tool names to disable, or 'all'."),
):
    """List the tools a client would see."""
    ctx = _build_context(config, disable, log_level="error")
    table = Table(title="thinkgate tools")
    table.add_column("name", style="bold", no_wrap=True)
    table.add_column("title")
    table.add_column("required")
    for d in ctx.dispatcher.on_list_tools():
        title = (d.get("annotations") or {}).get("title", "")
        required = ", ".join((d.get("inputSchema") or {}).get("required") or [])
        table.add_row(str(d.get("name")), str(title), required)
    console.print(table)
    disabled = ctx.registry.disabled_names()
    console.print(f"disabled: {', '.join(disabled) if disabled else '(none)'}")


@app.command()
def status(
    config: Path = typer.Option(None, "--config", help="YAML config path."),
):
    """Show which tools have a configured model backend."""
    ctx = _build_context(config, log_level="error")
    table = Table.grid(padding=(0, 2))
    for name, st in backend_status(ctx):
        table.add_row(f"[bold green]{name}[/bold green]", f"[bright_cyan]{st}[/bright_cyan]")
    console.print(Panel(table, title="[bold magenta]thinkgate[/bold magenta]", border_style="bright_blue"))
    if _missing_backend(ctx):
        console.print(ENV_HELP, markup=False)


@app.command()
def call(
    name: str = typer.Argument(..., help="Tool name."),
    args: str = typer.Option("{}", "--args", "-a", help="Tool arguments as a JSON object."),
    config: Path = typer.Option(None, "--config", help="YAML config path."),
):
    """Dispatch one tool call locally and print the result envelope."""
    try:
        parsed = json.loads(args)
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"--args is not valid JSON: {e}")
    if not isinstance(parsed, dict):
        raise typer.BadParameter("--args must be a JSON object")

    ctx = _build_context(config, log_level="warn")
    result = asyncio.run(ctx.dispatcher.on_call_tool(name, parsed))
    border = "red" if result.is_error else "green"
    for item in result.content:
        console.print(Panel(Text(item.text), border_style=border))
    if result.is_error:
        raise typer.Exit(code=1)


def main() -> None:
    try:
        app()
    except FileNotFoundError as e:
        err_console.print(f"[red]{e}[/red]")
        raise SystemExit(2)
