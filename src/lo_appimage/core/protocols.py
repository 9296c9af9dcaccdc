"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols — never on concrete
implementations — preserving the dependency inversion principle.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol

from lo_appimage.core.models import Architecture, ReleasePlan


class ListingProvider(Protocol):
    """Contract for fetching upstream directory indexes."""

    def fetch_text(self, url: str) -> str:
        """Return the body of *url* as text.

        Raises
        ------
        ReleaseNotFoundError
            When the server reports the URL as missing.
        ListingFetchError
            For every other retrieval failure.
        """
        ...  # pragma: no cover


class DownloadProvider(Protocol):
    """Contract for archive download backends."""

    def download(
        self,
        url: str,
        destination: Path,
        *,
        progress_callback: Callable[[dict[str, Any]], None] | None = None,
    ) -> None:
        """Download *url* to *destination*.

        Parameters
        ----------
        url:
            Absolute archive URL.
        destination:
            Final file path; parent directories may not exist yet.
        progress_callback:
            Optional callable invoked with progress dicts carrying
            ``status``, ``downloaded_bytes``, ``total_bytes`` and
            ``filename``.  May be ``None``.

        Raises
        ------
        DownloadFailedError
            When the download fails for any reason.
        """
        ...  # pragma: no cover


class PackageExtractor(Protocol):
    """Contract for unpacking a vendor tarball into an installation tree."""

    def extract(self, archive: Path, destination: Path) -> None:
        """Merge the contents of *archive* into *destination*.

        Raises
        ------
        ExtractionError
            When the archive or one of its packages cannot be unpacked.
        """
        ...  # pragma: no cover


class AppDirFinalizer(Protocol):
    """Contract for turning an extracted tree into a valid AppDir."""

    def finalize(self, appdir: Path, plan: ReleasePlan) -> None:
        """Write the launcher, desktop entry and icon into *appdir*.

        Raises
        ------
        AppDirLayoutError
            When the extracted tree lacks an expected file.
        """
        ...  # pragma: no cover


class Packager(Protocol):
    """Contract for wrapping an AppDir into a single-file bundle."""

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
        """Build the bundle at *output* and return its path.

        Raises
        ------
        PackagingError
            When the packaging tool fails.
        ToolNotFoundError
            When the packaging (or signing) tool is missing.
        """
        ...  # pragma: no cover
