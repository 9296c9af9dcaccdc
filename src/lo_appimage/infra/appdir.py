"""Filesystem layout of the AppDir after extraction.

The vendor packages install under ``opt/libreoffice<series>/`` (or
``opt/libreofficedev<series>/`` for nightly builds), with the start
center desktop entry in ``share/xdg/`` and hicolor icons under
``usr/share/icons``.  This module turns that tree into an AppDir that
appimagetool accepts: ``AppRun``, one ``.desktop`` file and an icon at
the root, plus ``.DirIcon``.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from lo_appimage.core.appdir_templates import render_apprun, rewrite_desktop_entry
from lo_appimage.core.models import ReleasePlan
from lo_appimage.exceptions import AppDirLayoutError

_DESKTOP_RELATIVE = Path("share") / "xdg" / "startcenter.desktop"
_ICON_GLOB = "usr/share/icons/hicolor/*/apps/*startcenter.png"


def _icon_size(path: Path) -> int:
    """Pixel size from a ``hicolor/<N>x<N>/apps`` path, 0 when unknown."""
    size_dir = path.parent.parent.name
    width, _, _ = size_dir.partition("x")
    return int(width) if width.isdigit() else 0


class AppDirAssembler:
    """Concrete :class:`AppDirFinalizer` for LibreOffice trees."""

    @staticmethod
    def find_install_dir(appdir: Path) -> Path:
        """Return ``opt/libreoffice*`` containing ``program/soffice``."""
        opt = appdir / "opt"
        candidates: list[Path] = []
        if opt.is_dir():
            candidates = sorted(
                path
                for path in opt.glob("libreoffice*")
                if (path / "program" / "soffice").exists()
            )
        if not candidates:
            raise AppDirLayoutError(
                f"No LibreOffice installation found under {opt}.",
                hint="The main archive may not have been extracted.",
            )
        return candidates[-1]

    @staticmethod
    def find_icon(appdir: Path) -> Path:
        """Return the largest start-center PNG icon."""
        icons = sorted(appdir.glob(_ICON_GLOB), key=_icon_size)
        if not icons:
            raise AppDirLayoutError(
                "No start center icon found in the extracted tree.",
                hint="The desktop-integration package may be missing from the archive.",
            )
        return icons[-1]

    def finalize(self, appdir: Path, plan: ReleasePlan) -> None:
        """Write ``AppRun``, the desktop entry and the icon into *appdir*."""
        install_dir = self.find_install_dir(appdir)

        desktop_source = install_dir / _DESKTOP_RELATIVE
        if not desktop_source.is_file():
            raise AppDirLayoutError(
                f"Desktop entry {desktop_source.relative_to(appdir)} is missing.",
            )
        icon_source = self.find_icon(appdir)
        icon_name = icon_source.stem

        apprun = appdir / "AppRun"
        apprun.write_text(render_apprun(install_dir.name), encoding="utf-8")
        apprun.chmod(0o755)

        release = plan.release
        desktop_text = rewrite_desktop_entry(
            desktop_source.read_text(encoding="utf-8"),
            name=f"{release.product} {release.label}",
            icon=icon_name,
            version=release.version,
        )
        for stale in appdir.glob("*.desktop"):
            stale.unlink()
        (appdir / f"{icon_name}.desktop").write_text(desktop_text, encoding="utf-8")

        shutil.copyfile(icon_source, appdir / icon_source.name)
        dir_icon = appdir / ".DirIcon"
        dir_icon.unlink(missing_ok=True)
        shutil.copyfile(icon_source, dir_icon)
