"""requests-backed listing and download providers.

This module is the **only** place in the codebase that imports
``requests``.  All ``requests`` exceptions are caught here and re-raised
as typed :class:`~lo_appimage.exceptions.LoAppImageError` subclasses —
nothing raw escapes the infrastructure boundary.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

from lo_appimage.config import DEFAULT_TIMEOUT
from lo_appimage.exceptions import (
    DownloadFailedError,
    EnvironmentError,
    ListingFetchError,
    ReleaseNotFoundError,
    append_mirror_suggestion,
)
from lo_appimage.version import __version__

USER_AGENT = f"lo-appimage/{__version__}"
CHUNK_SIZE = 1024 * 1024


def _import_requests() -> Any:
    """Import requests lazily so bootstrap paths work without it."""
    try:
        import requests
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "requests is not installed. Install with: pip install requests",
        ) from exc
    return requests


class _SessionMixin:
    """Shared lazy ``requests.Session`` handling."""

    def __init__(self, session: Any | None = None, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._session: Any | None = session
        self._timeout: float = timeout

    def _get_session(self) -> Any:
        if self._session is None:
            requests = _import_requests()
            session = requests.Session()
            session.headers["User-Agent"] = USER_AGENT
            self._session = session
        return self._session


class RequestsListingProvider(_SessionMixin):
    """Concrete :class:`ListingProvider` for upstream directory indexes."""

    def fetch_text(self, url: str) -> str:
        """Return the body of *url*.

        Raises
        ------
        ReleaseNotFoundError
            On HTTP 404.
        ListingFetchError
            For every other HTTP or connection failure.
        """
        requests = _import_requests()
        session = self._get_session()
        try:
            response = session.get(url, timeout=self._timeout)
            response.raise_for_status()
        except requests.HTTPError as exc:
            status = getattr(exc.response, "status_code", None)
            if status == 404:
                raise ReleaseNotFoundError(
                    f"Not found: {url}",
                    hint="The release may have been moved to the archive tree.",
                ) from exc
            raise ListingFetchError(
                f"HTTP {status} while fetching {url}",
                hint=append_mirror_suggestion("The download server may be busy; retry later."),
            ) from exc
        except requests.RequestException as exc:
            raise ListingFetchError(
                f"Could not fetch {url}: {exc}",
                hint=append_mirror_suggestion("Check your network connection."),
            ) from exc
        return response.text


class RequestsDownloadProvider(_SessionMixin):
    """Concrete :class:`DownloadProvider` streaming archives to disk.

    Parameters
    ----------
    session:
        Optional pre-configured ``requests.Session``.
    timeout:
        Connect/read timeout in seconds.
    reuse_existing:
        When ``True``, a non-empty file already at the destination is
        treated as a completed download.
    """

    def __init__(
        self,
        session: Any | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        *,
        reuse_existing: bool = True,
        chunk_size: int = CHUNK_SIZE,
    ) -> None:
        super().__init__(session, timeout)
        self._reuse_existing = reuse_existing
        self._chunk_size = chunk_size

    def download(
        self,
        url: str,
        destination: Path,
        *,
        progress_callback: Callable[[dict[str, Any]], None] | None = None,
    ) -> None:
        """Stream *url* into *destination* via a ``.part`` file.

        Raises
        ------
        DownloadFailedError
            For any HTTP, connection or filesystem failure.
        """
        notify = progress_callback or (lambda _d: None)

        if self._reuse_existing and destination.is_file() and destination.stat().st_size > 0:
            size = destination.stat().st_size
            notify({
                "status": "finished",
                "filename": destination.name,
                "downloaded_bytes": size,
                "total_bytes": size,
                "cached": True,
            })
            return

        requests = _import_requests()
        session = self._get_session()
        partial = destination.with_name(destination.name + ".part")

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            with session.get(url, stream=True, timeout=self._timeout) as response:
                response.raise_for_status()
                total = _safe_int(response.headers.get("content-length"))
                downloaded = 0
                with partial.open("wb") as handle:
                    for chunk in response.iter_content(chunk_size=self._chunk_size):
                        if not chunk:
                            continue
                        handle.write(chunk)
                        downloaded += len(chunk)
                        notify({
                            "status": "downloading",
                            "filename": destination.name,
                            "downloaded_bytes": downloaded,
                            "total_bytes": total,
                        })
            if total is not None and downloaded != total:
                raise DownloadFailedError(
                    f"Incomplete download of {destination.name}: "
                    f"{downloaded} of {total} bytes.",
                    hint="Retry; the connection was interrupted.",
                )
            partial.replace(destination)
        except requests.HTTPError as exc:
            partial.unlink(missing_ok=True)
            status = getattr(exc.response, "status_code", None)
            raise DownloadFailedError(
                f"HTTP {status} while downloading {url}",
                hint=append_mirror_suggestion("The archive may not be published for this release."),
            ) from exc
        except requests.RequestException as exc:
            partial.unlink(missing_ok=True)
            raise DownloadFailedError(
                f"Could not download {url}: {exc}",
                hint="Check your network connection.",
            ) from exc
        except OSError as exc:
            partial.unlink(missing_ok=True)
            raise DownloadFailedError(
                f"Could not write {destination}: {exc}",
                hint="Check free disk space and permissions of the cache directory.",
            ) from exc
        except DownloadFailedError:
            partial.unlink(missing_ok=True)
            raise

        notify({
            "status": "finished",
            "filename": destination.name,
            "downloaded_bytes": downloaded,
            "total_bytes": total,
        })


def _safe_int(value: object) -> int | None:
    """Convert a header value to ``int`` or return ``None``."""
    if value is None:
        return None
    try:
        return int(str(value))
    except (TypeError, ValueError):
        return None
