"""Pure text templates for the AppDir launcher and desktop entry."""

from __future__ import annotations

_APPRUN_TEMPLATE = """#!/bin/sh
HERE="$(dirname "$(readlink -f "${{0}}")")"
export LD_LIBRARY_PATH="$HERE/opt/{install_dir}/program${{LD_LIBRARY_PATH:+:$LD_LIBRARY_PATH}}"
exec "$HERE/opt/{install_dir}/program/soffice" "$@"
"""

_MAIN_GROUP = "[Desktop Entry]"


def render_apprun(install_dir_name: str) -> str:
    """Return the ``AppRun`` shell launcher for ``opt/<install_dir_name>``."""
    return _APPRUN_TEMPLATE.format(install_dir=install_dir_name)


def _rewrite_exec(value: str) -> str:
    """Replace the command of an ``Exec`` value, keeping its arguments."""
    parts = value.split(None, 1)
    if len(parts) == 2:
        return f"AppRun {parts[1]}"
    return "AppRun"


def rewrite_desktop_entry(
    text: str,
    *,
    name: str,
    icon: str,
    version: str,
) -> str:
    """Adapt an installed desktop entry for use inside an AppImage.

    * Every ``Exec=`` (main group and actions) launches ``AppRun``.
    * ``TryExec=`` lines are dropped.
    * In ``[Desktop Entry]``, ``Name=`` and ``Icon=`` are replaced and
      ``X-AppImage-Version=`` is set.

    Localized keys (``Name[de]=``) and unrelated lines are preserved.
    """
    out: list[str] = []
    group: str | None = None
    version_written = False

    def close_main_group() -> None:
        nonlocal version_written
        if group == _MAIN_GROUP and not version_written:
            insert_at = len(out)
            while insert_at > 0 and not out[insert_at - 1].strip():
                insert_at -= 1
            out.insert(insert_at, f"X-AppImage-Version={version}")
            version_written = True

    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith("[") and stripped.endswith("]"):
            close_main_group()
            group = stripped
            out.append(line)
            continue

        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep:
            out.append(line)
            continue

        if key == "TryExec":
            continue
        if key == "Exec":
            out.append(f"Exec={_rewrite_exec(value.strip())}")
            continue
        if group == _MAIN_GROUP:
            if key == "Name":
                out.append(f"Name={name}")
                continue
            if key == "Icon":
                out.append(f"Icon={icon}")
                continue
            if key == "X-AppImage-Version":
                continue
        out.append(line)

    close_main_group()
    return "\n".join(out).rstrip("\n") + "\n"
