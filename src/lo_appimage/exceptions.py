"""Custom exception hierarchy for lo-appimage.

All exceptions that cross layer boundaries must inherit from
:class:`LoAppImageError`.  Raw third-party exceptions (``requests``,
``tarfile``, ``subprocess``) must NEVER propagate beyond the
infrastructure layer — they are caught there and re-raised as a typed
subclass defined here.

Hierarchy
---------
LoAppImageError
├── InvalidRequestError
├── VersionResolutionError
├── ReleaseNotFoundError
├── ListingFetchError
├── DownloadFailedError
├── ExtractionError
├── AppDirLayoutError
├── PackagingError
├── ToolNotFoundError
└── EnvironmentError
"""

from __future__ import annotations


class LoAppImageError(Exception):
    """Base exception for all lo-appimage errors.

    Every user-visible error condition maps to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Request validation ----------------------------------------------------

class InvalidRequestError(LoAppImageError):
    """Raised when the channel, version, architecture or languages are invalid."""


# --- Resolution ------------------------------------------------------------

class VersionResolutionError(LoAppImageError):
    """Raised when a concrete version cannot be derived from a listing."""


class ReleaseNotFoundError(LoAppImageError):
    """Raised when the requested release is not published upstream."""


class ListingFetchError(LoAppImageError):
    """Raised when a directory listing cannot be retrieved."""


# --- Download --------------------------------------------------------------

class DownloadFailedError(LoAppImageError):
    """Raised when an archive download terminates with an error."""


# --- Bundle assembly -------------------------------------------------------

class ExtractionError(LoAppImageError):
    """Raised when an archive or package cannot be unpacked."""


class AppDirLayoutError(LoAppImageError):
    """Raised when the extracted tree lacks an expected file."""


class PackagingError(LoAppImageError):
    """Raised when the packaging tool fails to produce the bundle."""


# --- Environment / tooling -------------------------------------------------

class ToolNotFoundError(LoAppImageError):
    """Raised when a required external tool cannot be located."""


class EnvironmentError(LoAppImageError):
    """Raised when a required runtime dependency is not available."""


def append_mirror_suggestion(hint: str) -> str:
    """Append mirror-override guidance to an existing hint text.

    The suggestion is appended only once and preserves the original
    hint content verbatim.
    """
    marker = "Also try another mirror:"
    if marker in hint:
        return hint
    return "\n".join(
        (
            hint,
            marker,
            "    export LO_APPIMAGE_STABLE_URL=https://<mirror>/libreoffice/stable/",
        )
    )
