"""Core / service layer — release resolution and pipeline orchestration.

Rules
-----
* No ``print()`` calls.
* No network or subprocess I/O.
* No imports from ``cli`` or ``infra``.
* All functions must be fully typed and deterministic.
"""

from lo_appimage.core.bundle_service import BundleService
from lo_appimage.core.download_service import DownloadService
from lo_appimage.core.models import (
    ARCHITECTURES,
    Architecture,
    Artifact,
    BuildRequest,
    PackIndex,
    Release,
    ReleasePlan,
)
from lo_appimage.core.protocols import (
    AppDirFinalizer,
    DownloadProvider,
    ListingProvider,
    PackageExtractor,
    Packager,
)
from lo_appimage.core.resolver_service import ReleaseResolver

__all__: list[str] = [
    "ARCHITECTURES",
    "AppDirFinalizer",
    "Architecture",
    "Artifact",
    "BuildRequest",
    "BundleService",
    "DownloadProvider",
    "DownloadService",
    "ListingProvider",
    "PackIndex",
    "PackageExtractor",
    "Packager",
    "Release",
    "ReleasePlan",
    "ReleaseResolver",
]
