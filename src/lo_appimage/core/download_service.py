"""Core download service — fetches every archive of a release plan.

This service delegates the actual transfer to a
:class:`~lo_appimage.core.protocols.DownloadProvider` injected at
construction time.  It is responsible for:

* Computing the cache location of each artifact.
* Delegating to the provider in plan order.
* Ensuring only :class:`~lo_appimage.exceptions.LoAppImageError`
  subclasses escape.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

from lo_appimage.core.models import Artifact, ReleasePlan
from lo_appimage.core.protocols import DownloadProvider
from lo_appimage.exceptions import DownloadFailedError, LoAppImageError


class DownloadService:
    """Stateless service that drives the download pipeline.

    Parameters
    ----------
    provider:
        Any object satisfying the :class:`DownloadProvider` protocol.
    """

    def __init__(self, provider: DownloadProvider) -> None:
        self._provider: DownloadProvider = provider

    @staticmethod
    def cache_path(plan: ReleasePlan, artifact: Artifact, cache_dir: Path) -> Path:
        """Return where *artifact* is stored under *cache_dir*."""
        release = plan.release
        return cache_dir / release.product / release.cache_key / artifact.filename

    def fetch(
        self,
        plan: ReleasePlan,
        cache_dir: Path,
        *,
        progress_callback: Callable[[dict[str, Any]], None] | None = None,
    ) -> dict[Artifact, Path]:
        """Download every artifact of *plan* and return their local paths.

        Raises
        ------
        DownloadFailedError
            When any download fails.
        """
        archives: dict[Artifact, Path] = {}
        for artifact in plan.artifacts:
            destination = self.cache_path(plan, artifact, cache_dir)
            try:
                self._provider.download(
                    artifact.url,
                    destination,
                    progress_callback=progress_callback,
                )
            except LoAppImageError:
                raise
            except Exception as exc:
                raise DownloadFailedError(
                    f"Unexpected download error for {artifact.filename}: {exc}",
                ) from exc
            archives[artifact] = destination
        return archives
