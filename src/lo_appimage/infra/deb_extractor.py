"""Unpack vendor deb tarballs into an AppDir.

Each vendor archive is a ``.tar.gz`` holding a ``DEBS/`` directory of
``.deb`` packages.  The tarball is unpacked into a scratch directory and
every package is merged into the destination with ``dpkg-deb -x``.
"""

from __future__ import annotations

import subprocess
import tarfile
import tempfile
from collections.abc import Sequence
from pathlib import Path

from lo_appimage.config import EXCLUDED_DEB_PATTERNS
from lo_appimage.exceptions import ExtractionError
from lo_appimage.infra.tool_detector import DPKG_DEB, require_tool


class DebPackageExtractor:
    """Concrete :class:`PackageExtractor` backed by ``tarfile`` and ``dpkg-deb``.

    Parameters
    ----------
    dpkg_deb:
        Explicit ``dpkg-deb`` path.  Located on ``PATH`` on first use
        when omitted.
    excluded:
        Substrings; packages whose file name contains one are skipped.
    """

    def __init__(
        self,
        dpkg_deb: Path | None = None,
        excluded: Sequence[str] = EXCLUDED_DEB_PATTERNS,
    ) -> None:
        self._dpkg_deb = dpkg_deb
        self._excluded = tuple(excluded)

    def _tool(self) -> Path:
        if self._dpkg_deb is None:
            self._dpkg_deb = require_tool(DPKG_DEB)
        return self._dpkg_deb

    def select_packages(self, root: Path) -> list[Path]:
        """All ``.deb`` files under *root* not matching an excluded pattern."""
        return [
            deb
            for deb in sorted(root.rglob("*.deb"))
            if not any(pattern in deb.name for pattern in self._excluded)
        ]

    def extract(self, archive: Path, destination: Path) -> None:
        """Merge every package of *archive* into *destination*.

        Raises
        ------
        ExtractionError
            When the tarball is unreadable, holds no packages, or
            ``dpkg-deb`` fails on one of them.
        """
        tool = self._tool()
        destination.mkdir(parents=True, exist_ok=True)

        with tempfile.TemporaryDirectory(prefix="lo-appimage-") as scratch:
            scratch_dir = Path(scratch)
            try:
                with tarfile.open(archive, "r:*") as tar:
                    tar.extractall(scratch_dir, filter="data")
            except (tarfile.TarError, OSError) as exc:
                raise ExtractionError(
                    f"Cannot unpack {archive.name}: {exc}",
                    hint="The download may be corrupt; rerun with --no-cache.",
                ) from exc

            packages = self.select_packages(scratch_dir)
            if not packages:
                raise ExtractionError(
                    f"No .deb packages found in {archive.name}.",
                    hint="Only the deb flavour of the vendor archives is supported.",
                )

            for package in packages:
                self._unpack(tool, package, destination)

    @staticmethod
    def _unpack(tool: Path, package: Path, destination: Path) -> None:
        try:
            subprocess.run(
                [str(tool), "-x", str(package), str(destination)],
                check=True,
                capture_output=True,
                text=True,
            )
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip() or f"exit status {exc.returncode}"
            raise ExtractionError(
                f"dpkg-deb failed on {package.name}: {detail}",
            ) from exc
        except OSError as exc:
            raise ExtractionError(f"Cannot run {tool}: {exc}") from exc
