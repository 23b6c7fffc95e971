"""CLI console helpers with optional Rich support.

This module intentionally avoids module-level imports of optional UI
dependencies so bootstrap paths (``--help``, ``--version``) remain
functional even when Rich is not installed.

Two proxies are exported: :data:`console` writes to stdout (usage,
version, diagnostics), :data:`err_console` writes to stderr (error
boundary messages).  Protocol streams of the REPL modes never go
through either.
"""

from __future__ import annotations

import re
import sys
from typing import Any

from dtc.exceptions import EnvironmentError

_OWN_MARKUP = re.compile(r"\[/?(?:bold|dim|red|green|yellow|cyan|magenta)(?: [a-z]+)*\]")


def _load_rich_console_class() -> type[Any]:
    """Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
    try:
        from rich.console import Console
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
            hint="Plain-text output is used instead.",
        ) from exc
    return Console


def get_rich_console(*, stderr: bool = False) -> Any:
    """Create a Rich console instance targeting stdout or stderr."""
    console_class = _load_rich_console_class()
    return console_class(stderr=stderr, highlight=False)


def escape(text: str) -> str:
    """Escape *text* so Rich prints it verbatim."""
    try:
        from rich.markup import escape as rich_escape
    except ModuleNotFoundError:
        return text
    return rich_escape(text)


def strip_markup(text: str) -> str:
    """Remove the markup tags this package emits, for plain output."""
    return _OWN_MARKUP.sub("", text)


class _ConsoleProxy:
    """Minimal ``print``-compatible proxy with Rich fallback."""

    def __init__(self, *, stderr: bool) -> None:
        self._stderr = stderr

    def print(self, *objects: object, end: str = "\n") -> None:
        """Render with Rich when available, else plain print."""
        try:
            rich_console = get_rich_console(stderr=self._stderr)
        except EnvironmentError:
            stream = sys.stderr if self._stderr else sys.stdout
            plain = [strip_markup(o) if isinstance(o, str) else o for o in objects]
            print(*plain, end=end, file=stream)
            return
        rich_console.print(*objects, end=end, soft_wrap=True)


console = _ConsoleProxy(stderr=False)
err_console = _ConsoleProxy(stderr=True)
