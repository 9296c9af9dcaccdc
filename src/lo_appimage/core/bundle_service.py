"""Core bundle service — assembles downloaded archives into an AppImage.

Pipeline order (enforced by :meth:`BundleService.build`):

1. **Extract** — main archive first, then language packs, then help
   packs, all merged into one AppDir.
2. **Finalize** — launcher, desktop entry and icon.
3. **Package** — wrap the AppDir into ``output_dir / plan.appimage_name``.

The service only orchestrates; extraction, layout and packaging are
injected adapters.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from lo_appimage.core.models import (
    ARTIFACT_HELPPACK,
    ARTIFACT_LANGPACK,
    ARTIFACT_MAIN,
    Artifact,
    ReleasePlan,
)
from lo_appimage.core.protocols import AppDirFinalizer, PackageExtractor, Packager
from lo_appimage.exceptions import ExtractionError, LoAppImageError, PackagingError

_EXTRACT_ORDER: dict[str, int] = {
    ARTIFACT_MAIN: 0,
    ARTIFACT_LANGPACK: 1,
    ARTIFACT_HELPPACK: 2,
}


class BundleService:
    """Stateless service that drives AppDir assembly and packaging."""

    def __init__(
        self,
        extractor: PackageExtractor,
        finalizer: AppDirFinalizer,
        packager: Packager,
    ) -> None:
        self._extractor = extractor
        self._finalizer = finalizer
        self._packager = packager

    @staticmethod
    def extraction_order(plan: ReleasePlan) -> list[Artifact]:
        """Artifacts of *plan* in the order they must be merged."""
        return sorted(plan.artifacts, key=lambda a: _EXTRACT_ORDER.get(a.kind, len(_EXTRACT_ORDER)))

    def build(
        self,
        plan: ReleasePlan,
        archives: Mapping[Artifact, Path],
        appdir: Path,
        output_dir: Path,
        *,
        sign: bool = False,
        sign_key: str | None = None,
        update_info: str | None = None,
    ) -> Path:
        """Assemble *appdir* from *archives* and package it.

        Returns
        -------
        Path
            Location of the produced AppImage.

        Raises
        ------
        ExtractionError
            When an archive is missing from *archives* or fails to unpack.
        AppDirLayoutError
            When the extracted tree is incomplete.
        PackagingError
            When the packaging tool fails.
        """
        for artifact in self.extraction_order(plan):
            archive = archives.get(artifact)
            if archive is None:
                raise ExtractionError(f"Archive {artifact.filename} was not downloaded.")
            try:
                self._extractor.extract(archive, appdir)
            except LoAppImageError:
                raise
            except Exception as exc:
                raise ExtractionError(
                    f"Unexpected error extracting {artifact.filename}: {exc}",
                ) from exc

        self._finalizer.finalize(appdir, plan)

        output = output_dir / plan.appimage_name
        try:
            return self._packager.package(
                appdir,
                output,
                arch=plan.release.arch,
                sign=sign,
                sign_key=sign_key,
                update_info=update_info,
            )
        except LoAppImageError:
            raise
        except Exception as exc:
            raise PackagingError(f"Unexpected packaging error: {exc}") from exc
