"""lo-appimage — portable LibreOffice bundle builder.

Resolves a release channel or version to vendor-published archives,
merges language and help packs, and wraps the result into an AppImage.
"""

from lo_appimage.version import __version__

__all__: list[str] = ["__version__"]
