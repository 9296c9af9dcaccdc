"""Release plan display and interactive selection for the CLI layer.

This module is responsible for:

* Rendering a Rich table of the archives a plan will download.
* Prompting for a release channel via questionary arrow keys.
* Prompting for a language set via a questionary checkbox.

All display-related logic lives here — no resolution, no downloading.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from lo_appimage.cli.console import console
from lo_appimage.config import BASE_LANGUAGE, CHANNELS, STANDARD_LANGUAGES
from lo_appimage.core.models import Artifact, ReleasePlan
from lo_appimage.exceptions import EnvironmentError, InvalidRequestError

_CHANNEL_DESCRIPTIONS: dict[str, str] = {
    "fresh": "latest stable release",
    "still": "previous stable release",
    "daily": "nightly development build",
}


def _import_questionary() -> Any:
    """Import questionary lazily for interactive selection."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


def _import_rich_table() -> type[Any]:
    """Import rich table lazily for plan rendering."""
    try:
        from rich.table import Table
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Table


# ---------------------------------------------------------------------------
# Presentation helpers (pure transforms, no I/O)
# ---------------------------------------------------------------------------

def _format_kind(artifact: Artifact) -> str:
    """Render an artifact kind as a short human label."""
    return {
        "main": "Main",
        "langpack": "Language pack",
        "helppack": "Help pack",
    }.get(artifact.kind, artifact.kind)


def _format_language(artifact: Artifact) -> str:
    """Render the artifact language or ``"—"`` for the main archive."""
    return artifact.language or "—"


def _build_channel_label(channel: str) -> str:
    """Label shown in the channel selector, e.g. ``"fresh   latest stable release"``."""
    return f"{channel:<7} {_CHANNEL_DESCRIPTIONS.get(channel, '')}".rstrip()


# ---------------------------------------------------------------------------
# Rich table display
# ---------------------------------------------------------------------------

def display_plan(plan: ReleasePlan) -> None:
    """Print a Rich table summarising *plan*."""
    table_class = _import_rich_table()
    release = plan.release

    console.print()
    console.print(f"[bold cyan]Release:[/bold cyan]  {release.product} {release.version}")
    if release.channel:
        console.print(f"[bold cyan]Channel:[/bold cyan]  {release.channel}")
    if release.build_id:
        console.print(f"[bold cyan]Build:[/bold cyan]    {release.build_id}")
    console.print(f"[bold cyan]Bundle:[/bold cyan]   {plan.appimage_name}")
    console.print()

    table = table_class(
        title="Archives",
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
    )
    table.add_column("#", justify="right", style="dim", width=4)
    table.add_column("Kind", justify="left", min_width=13)
    table.add_column("Language", justify="left", min_width=8)
    table.add_column("File", justify="left")

    for i, artifact in enumerate(plan.artifacts, start=1):
        table.add_row(
            str(i),
            _format_kind(artifact),
            _format_language(artifact),
            artifact.filename,
        )

    console.print(table)
    if plan.skipped_help_languages:
        console.print(
            "[yellow]No help pack published for:[/yellow] "
            + ", ".join(plan.skipped_help_languages)
        )
    console.print()


# ---------------------------------------------------------------------------
# Public prompt functions
# ---------------------------------------------------------------------------

def prompt_channel() -> str:
    """Prompt the user to pick a release channel.

    Raises
    ------
    InvalidRequestError
        If the user cancels the prompt (Esc / None return).
    """
    questionary = _import_questionary()
    choices = [
        questionary.Choice(title=_build_channel_label(channel), value=channel)
        for channel in CHANNELS
    ]
    selected: str | None = questionary.select(
        "Select release channel:",
        choices=choices,
        use_arrow_keys=True,
        use_shortcuts=False,
    ).ask()

    if selected is None:
        raise InvalidRequestError(
            "No channel selected.",
            hint="Use arrow keys to pick a channel, then press Enter.",
        )
    return selected


def prompt_languages(available: Sequence[str]) -> tuple[str, ...]:
    """Prompt the user to tick the language packs to include.

    The standard language set is pre-selected.  Returns an empty tuple
    when nothing is ticked (English only).

    Raises
    ------
    InvalidRequestError
        If the user cancels the prompt.
    """
    questionary = _import_questionary()
    choices = [
        questionary.Choice(
            title=lang,
            value=lang,
            checked=lang in STANDARD_LANGUAGES,
        )
        for lang in available
        if lang != BASE_LANGUAGE
    ]
    selected: list[str] | None = questionary.checkbox(
        f"Select languages ({BASE_LANGUAGE} is always included):",
        choices=choices,
    ).ask()

    if selected is None:
        raise InvalidRequestError(
            "No languages selected.",
            hint="Use space to tick languages, then press Enter.",
        )
    return tuple(selected)
