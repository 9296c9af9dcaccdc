"""Infrastructure: external tool detection and platform guidance.

Locates the command-line tools the build pipeline shells out to
(``dpkg-deb``, ``appimagetool``, ``gpg``) and provides install guidance
when one is missing.

Rules
-----
* Detection via :func:`shutil.which` only — no subprocess.
* No automatic installation.
* No ``print()`` — callers handle user-facing output.
"""

from __future__ import annotations

import os
import platform
import shutil
from dataclasses import dataclass
from pathlib import Path

from lo_appimage.exceptions import ToolNotFoundError

DPKG_DEB = "dpkg-deb"
APPIMAGETOOL = "appimagetool"
GPG = "gpg"

_APPIMAGETOOL_RELEASES = "https://github.com/AppImage/appimagetool/releases"

_INSTALL_COMMANDS: dict[str, tuple[str, ...]] = {
    DPKG_DEB: (
        "sudo apt install dpkg",
        "sudo dnf install dpkg",
        "sudo pacman -S dpkg",
    ),
    APPIMAGETOOL: (
        f"Download appimagetool-{{machine}}.AppImage from {_APPIMAGETOOL_RELEASES}",
        "chmod +x appimagetool-{machine}.AppImage and put it on PATH, "
        "or set APPIMAGETOOL=/path/to/it",
    ),
    GPG: (
        "sudo apt install gnupg",
        "sudo dnf install gnupg2",
        "sudo pacman -S gnupg",
    ),
}


# ---------------------------------------------------------------------------
# Detection result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ToolStatus:
    """Result of a tool detection probe.

    Attributes
    ----------
    name : str
        Canonical tool name.
    found : bool
        Whether the tool was located.
    path : Path | None
        Absolute path to the tool, or ``None``.
    install_commands : tuple[str, ...]
        Suggested steps for installing the tool.  Empty when found.
    """

    name: str
    found: bool
    path: Path | None
    install_commands: tuple[str, ...]


# ---------------------------------------------------------------------------
# Detection logic
# ---------------------------------------------------------------------------

def _candidates(name: str) -> tuple[str, ...]:
    if name == APPIMAGETOOL:
        return (name, f"appimagetool-{platform.machine()}.AppImage")
    return (name,)


def detect_tool(name: str, *, override: str | os.PathLike[str] | None = None) -> ToolStatus:
    """Probe the system for *name*.

    *override* (or ``$APPIMAGETOOL`` for appimagetool) names an explicit
    executable path that takes precedence over ``PATH`` lookup.  Returns
    a :class:`ToolStatus` regardless of the outcome — the caller decides
    whether to abort or merely warn.
    """
    explicit = override
    if explicit is None and name == APPIMAGETOOL:
        explicit = os.environ.get("APPIMAGETOOL") or None

    if explicit is not None:
        candidate = Path(explicit)
        if candidate.is_file() and os.access(candidate, os.X_OK):
            return ToolStatus(name, True, candidate.resolve(), ())
        resolved = shutil.which(str(explicit))
        if resolved is not None:
            return ToolStatus(name, True, Path(resolved).resolve(), ())
        return ToolStatus(name, False, None, install_commands(name))

    for candidate_name in _candidates(name):
        resolved = shutil.which(candidate_name)
        if resolved is not None:
            return ToolStatus(name, True, Path(resolved).resolve(), ())

    return ToolStatus(name, False, None, install_commands(name))


def require_tool(name: str, *, override: str | os.PathLike[str] | None = None) -> Path:
    """Locate *name* or raise :class:`ToolNotFoundError`."""
    status = detect_tool(name, override=override)
    if not status.found or status.path is None:
        hint_lines: list[str] = []
        if status.install_commands:
            hint_lines.append(f"Install {name} using one of:")
            hint_lines.extend(f"  {cmd}" for cmd in status.install_commands)
        where = f" at {override}" if override is not None else " on PATH"
        raise ToolNotFoundError(
            f"{name} is not installed or not found{where}.",
            hint="\n".join(hint_lines) if hint_lines else None,
        )
    return status.path


# ---------------------------------------------------------------------------
# Platform-specific install guidance
# ---------------------------------------------------------------------------

def install_commands(name: str) -> tuple[str, ...]:
    """Return install guidance for *name* on the current machine."""
    machine = platform.machine() or "x86_64"
    commands = _INSTALL_COMMANDS.get(name)
    if commands is None:
        return (f"Install {name} with your distribution's package manager",)
    return tuple(cmd.format(machine=machine) for cmd in commands)
