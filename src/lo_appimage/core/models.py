"""Domain models for lo-appimage.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access and pure name construction.  They carry
zero I/O and zero dependencies on external packages.
"""

from __future__ import annotations

from dataclasses import dataclass

ARTIFACT_MAIN = "main"
ARTIFACT_LANGPACK = "langpack"
ARTIFACT_HELPPACK = "helppack"


# ---------------------------------------------------------------------------
# Architecture
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Architecture:
    """A CPU architecture as spelled by the vendor and by appimagetool."""

    name: str
    """User-facing name (e.g. ``x86_64``)."""

    directory: str
    """Directory component in download URLs (e.g. ``x86_64``)."""

    file_token: str
    """Token embedded in archive file names (e.g. ``x86-64``)."""

    appimage_arch: str
    """Value exported as ``ARCH`` for appimagetool (e.g. ``x86_64``)."""


ARCHITECTURES: dict[str, Architecture] = {
    "x86_64": Architecture("x86_64", "x86_64", "x86-64", "x86_64"),
    "x86": Architecture("x86", "x86", "x86", "i686"),
    "aarch64": Architecture("aarch64", "aarch64", "aarch64", "aarch64"),
}


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class BuildRequest:
    """What the user asked for, before any network lookup."""

    target: str
    """Channel name (``fresh``/``still``/``daily``) or explicit version."""

    arch: str = "x86_64"
    flavor: str = "standard"

    languages: tuple[str, ...] = ()
    """Explicit language codes.  When non-empty, overrides *flavor*."""

    with_help: bool = False
    tinderbox: str | None = None


# ---------------------------------------------------------------------------
# Resolved release
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Release:
    """A concrete upstream release directory for one architecture."""

    version: str
    channel: str | None
    """``None`` when the user asked for an explicit version."""

    product: str
    """Archive name prefix (``LibreOffice`` or ``LibreOfficeDev``)."""

    directory_url: str
    """URL of the directory holding the deb tarballs (trailing slash)."""

    arch: Architecture

    build_id: str | None = None
    """Nightly build directory name, ``None`` for published releases."""

    @property
    def label(self) -> str:
        """Channel name when one was requested, else the version."""
        return self.channel or self.version

    @property
    def cache_key(self) -> str:
        """Directory name under which this release's downloads are cached."""
        if self.build_id:
            return f"{self.version}-{self.build_id}"
        return self.version

    def filename(self, kind: str, language: str | None = None) -> str:
        """Return the vendor file name for an artifact of *kind*."""
        stem = f"{self.product}_{self.version}_Linux_{self.arch.file_token}_deb"
        if kind == ARTIFACT_MAIN:
            return f"{stem}.tar.gz"
        return f"{stem}_{kind}_{language}.tar.gz"


@dataclass(frozen=True, slots=True)
class Artifact:
    """One downloadable archive."""

    kind: str
    language: str | None
    url: str
    filename: str


@dataclass(frozen=True, slots=True)
class PackIndex:
    """Languages published next to a release's main archive."""

    langpacks: tuple[str, ...]
    helppacks: tuple[str, ...]
    has_main: bool


@dataclass(frozen=True, slots=True)
class ReleasePlan:
    """Everything needed to download and assemble one bundle."""

    release: Release
    flavor_label: str
    languages: tuple[str, ...]
    with_help: bool
    artifacts: tuple[Artifact, ...]
    skipped_help_languages: tuple[str, ...] = ()

    @property
    def main_artifact(self) -> Artifact:
        return next(a for a in self.artifacts if a.kind == ARTIFACT_MAIN)

    @property
    def appimage_name(self) -> str:
        """File name of the bundle, e.g. ``LibreOffice-fresh.standard.help-x86_64.AppImage``."""
        help_part = ".help" if self.with_help else ""
        return (
            f"{self.release.product}-{self.release.label}."
            f"{self.flavor_label}{help_part}-{self.release.arch.name}.AppImage"
        )
