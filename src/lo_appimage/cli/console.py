"""CLI console helpers with optional Rich support.

This module avoids module-level imports of optional UI dependencies so
bootstrap paths (``--help``, ``--version``, ``doctor``) remain functional
even when Rich is not installed.
"""

from __future__ import annotations

import re
import sys
from typing import Any

from lo_appimage.exceptions import EnvironmentError

_MARKUP_RE = re.compile(r"\[/?[a-z ]+\]")


def _load_rich_console_class() -> type[Any]:
    """Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
    try:
        from rich.console import Console
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Console


def get_rich_console() -> Any:
    """Create a Rich console instance targeting stderr."""
    console_class = _load_rich_console_class()
    return console_class(stderr=True)


def strip_markup(text: str) -> str:
    """Remove simple Rich markup tags such as ``[bold red]``."""
    return _MARKUP_RE.sub("", text)


class _ConsoleProxy:
    """Minimal ``print``-compatible proxy with Rich fallback.

    ``quiet`` silences :meth:`step` messages only; errors and results
    printed with :meth:`print` are always shown.
    """

    def __init__(self) -> None:
        self.quiet: bool = False

    def print(self, *objects: object) -> None:
        """Render with Rich when available, else plain stderr print."""
        try:
            rich_console = get_rich_console()
        except EnvironmentError:
            print(
                *(strip_markup(o) if isinstance(o, str) else o for o in objects),
                file=sys.stderr,
            )
            return
        rich_console.print(*objects)

    def step(self, message: str) -> None:
        """Print a progress message unless running quietly."""
        if not self.quiet:
            self.print(message)


console = _ConsoleProxy()
