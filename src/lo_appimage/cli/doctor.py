"""``lo-appimage doctor`` — environment diagnostics command.

Gathers system information and renders a Rich table summarising
whether the runtime environment can build a bundle.

This module lives in the CLI layer — it may import from ``infra`` and
renders via Rich.  It only collects and displays diagnostic data.
"""

from __future__ import annotations

import platform
import sys

from lo_appimage.cli import exit_codes
from lo_appimage.cli.console import console
from lo_appimage.infra.tool_detector import APPIMAGETOOL, DPKG_DEB, GPG, ToolStatus, detect_tool
from lo_appimage.version import __version__


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _python_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the Python version row."""
    version = platform.python_version()
    ok = sys.version_info[:2] >= (3, 10)
    status = "[green]OK[/green]" if ok else "[red]FAIL (>=3.10 required)[/red]"
    return "Python", version, status


def _requests_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the requests row."""
    try:
        import requests
    except ImportError:
        return "requests", "NOT INSTALLED", "[red]FAIL[/red]"
    return "requests", getattr(requests, "__version__", "unknown"), "[green]OK[/green]"


def _tool_check(status: ToolStatus, *, required: bool) -> tuple[str, str, str]:
    """Return (label, value, status) for an external tool row."""
    if status.found:
        return status.name, str(status.path) if status.path else "found", "[green]OK[/green]"
    if required:
        return status.name, "not found", "[red]FAIL[/red]"
    return status.name, "not found", "[yellow]WARN[/yellow]"


def _os_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the OS row.

    Bundles can only be assembled on Linux; other systems get a warning.
    """
    system = platform.system()
    value = f"{system} {platform.release()} ({platform.machine()})"
    if system == "Linux":
        return "OS", value, "[green]OK[/green]"
    return "OS", value, "[yellow]WARN (Linux required to build)[/yellow]"


def _lo_appimage_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the lo-appimage version row."""
    return "lo-appimage", __version__, "[green]OK[/green]"


def _status_plain(status: str) -> str:
    """Convert rich-markup status to plain text."""
    if "FAIL" in status:
        return "FAIL"
    if "WARN" in status:
        return "WARN"
    if "OK" in status:
        return "OK"
    return status


def _print_plain_doctor_table(checks: list[tuple[str, str, str]]) -> None:
    """Render doctor output without Rich."""
    print("\nlo-appimage doctor", file=sys.stderr)
    print("=" * 64, file=sys.stderr)
    print(f"{'Component':<14} {'Value':<38} {'Status':<8}", file=sys.stderr)
    print("-" * 64, file=sys.stderr)
    for label, value, status in checks:
        print(f"{label:<14} {value:<38} {_status_plain(status):<8}", file=sys.stderr)
    print(file=sys.stderr)


def _print_install_guidance(missing: list[ToolStatus], rich_available: bool) -> None:
    for tool in missing:
        if rich_available:
            console.print(f"[yellow]{tool.name} is not installed.[/yellow]")
            for cmd in tool.install_commands:
                console.print(f"  [bold]{cmd}[/bold]")
            console.print()
        else:
            print(f"{tool.name} is not installed.", file=sys.stderr)
            for cmd in tool.install_commands:
                print(f"  {cmd}", file=sys.stderr)
            print(file=sys.stderr)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor() -> int:
    """Execute all diagnostic checks and render a summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when all critical checks pass,
        :data:`exit_codes.GENERAL_ERROR` if a critical check fails.
    """
    dpkg = detect_tool(DPKG_DEB)
    appimagetool = detect_tool(APPIMAGETOOL)
    gpg = detect_tool(GPG)

    checks = [
        _lo_appimage_version_check(),
        _python_version_check(),
        _requests_version_check(),
        _tool_check(dpkg, required=True),
        _tool_check(appimagetool, required=True),
        _tool_check(gpg, required=False),
        _os_check(),
    ]
    has_failure = any("FAIL" in status for _, _, status in checks)

    rich_available = True
    try:
        from rich.table import Table
    except ModuleNotFoundError:
        rich_available = False

    if rich_available:
        table = Table(
            title="lo-appimage doctor",
            show_header=True,
            header_style="bold cyan",
            border_style="dim",
        )
        table.add_column("Component", style="bold", min_width=14)
        table.add_column("Value", min_width=20)
        table.add_column("Status", justify="center", min_width=8)
        for label, value, status in checks:
            table.add_row(label, value, status)

        console.print()
        console.print(table)
        console.print()
    else:
        _print_plain_doctor_table(checks)

    _print_install_guidance(
        [tool for tool in (dpkg, appimagetool, gpg) if not tool.found],
        rich_available,
    )

    if has_failure:
        if rich_available:
            console.print("[bold red]Some checks failed.[/bold red]")
        else:
            print("Some checks failed.", file=sys.stderr)
        return exit_codes.GENERAL_ERROR

    if rich_available:
        console.print("[bold green]All checks passed.[/bold green]")
    else:
        print("All checks passed.", file=sys.stderr)
    return exit_codes.SUCCESS
