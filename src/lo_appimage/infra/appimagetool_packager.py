"""appimagetool-backed implementation of :class:`~lo_appimage.core.protocols.Packager`.

This module is the **only** place in the codebase that invokes
appimagetool.  Failures are re-raised as
:class:`~lo_appimage.exceptions.PackagingError`.
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

from lo_appimage.core.models import Architecture
from lo_appimage.exceptions import PackagingError
from lo_appimage.infra.tool_detector import APPIMAGETOOL, GPG, require_tool


class AppImageToolPackager:
    """Wrap an AppDir into an AppImage with appimagetool.

    Parameters
    ----------
    tool:
        Explicit appimagetool path.  Located on first use when omitted
        (``$APPIMAGETOOL``, ``appimagetool`` or
        ``appimagetool-<machine>.AppImage`` on ``PATH``).
    """

    def __init__(self, tool: Path | str | None = None) -> None:
        self._override = tool
        self._tool: Path | None = None

    def _resolve_tool(self) -> Path:
        if self._tool is None:
            self._tool = require_tool(APPIMAGETOOL, override=self._override)
        return self._tool

    @staticmethod
    def build_command(
        tool: Path,
        appdir: Path,
        output: Path,
        *,
        sign: bool = False,
        sign_key: str | None = None,
        update_info: str | None = None,
    ) -> list[str]:
        """Return the appimagetool argument vector (pure)."""
        command = [str(tool), "--no-appstream"]
        if sign:
            command.append("--sign")
            if sign_key:
                command.extend(["--sign-key", sign_key])
        if update_info:
            command.extend(["-u", update_info])
        command.extend([str(appdir), str(output)])
        return command

    def package(
        self,
        appdir: Path,
        output: Path,
        *,
        arch: Architecture,
        sign: bool = False,
        sign_key: str | None = None,
        update_info: str | None = None,
    ) -> Path:
        """Run appimagetool and return *output*.

        Raises
        ------
        ToolNotFoundError
            When appimagetool, or gpg for signing, is missing.
        PackagingError
            When appimagetool exits with an error or produces no file.
        """
        tool = self._resolve_tool()
        if sign:
            require_tool(GPG)

        output.parent.mkdir(parents=True, exist_ok=True)
        command = self.build_command(
            tool,
            appdir,
            output,
            sign=sign,
            sign_key=sign_key,
            update_info=update_info,
        )
        env = {**os.environ, "ARCH": arch.appimage_arch}

        try:
            subprocess.run(command, check=True, capture_output=True, text=True, env=env)
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or exc.stdout or "").strip().splitlines()
            raise PackagingError(
                f"appimagetool exited with status {exc.returncode}.",
                hint="\n".join(detail[-10:]) or None,
            ) from exc
        except OSError as exc:
            raise PackagingError(
                f"Cannot run {tool}: {exc}",
                hint="appimagetool needs FUSE; try APPIMAGE_EXTRACT_AND_RUN=1.",
            ) from exc

        if not output.is_file():
            raise PackagingError(f"appimagetool did not create {output.name}.")
        return output
