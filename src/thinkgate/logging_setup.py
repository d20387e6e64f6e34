from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

# stdout carries the protocol stream; logs go to stderr only.
err_console = Console(stderr=True)

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "log": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def level_from_name(name: str | None) -> int:
    return _LEVELS.get((name or "").strip().lower(), logging.INFO)


def configure_logging(level: str | None = "info", disabled: bool = False) -> None:
    root = logging.getLogger()
    for h in list(root.handlers):
        if getattr(h, "_thinkgate", False):
            root.removeHandler(h)

    if disabled:
        root.setLevel(logging.CRITICAL + 1)
        return

    handler = RichHandler(
        console=err_console,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler._thinkgate = True  # type: ignore[attr-defined]
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(level_from_name(level))
