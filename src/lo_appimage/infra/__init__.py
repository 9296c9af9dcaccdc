"""Infrastructure layer — external system integration.

This layer wraps all interaction with HTTP, the filesystem, ``dpkg-deb``
and ``appimagetool``.  Every raw third-party or subprocess exception must
be caught here and re-raised as a
:class:`~lo_appimage.exceptions.LoAppImageError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from lo_appimage.infra.appdir import AppDirAssembler
from lo_appimage.infra.appimagetool_packager import AppImageToolPackager
from lo_appimage.infra.deb_extractor import DebPackageExtractor
from lo_appimage.infra.http_provider import RequestsDownloadProvider, RequestsListingProvider
from lo_appimage.infra.tool_detector import ToolStatus, detect_tool, require_tool

__all__: list[str] = [
    "AppDirAssembler",
    "AppImageToolPackager",
    "DebPackageExtractor",
    "RequestsDownloadProvider",
    "RequestsListingProvider",
    "ToolStatus",
    "detect_tool",
    "require_tool",
]
