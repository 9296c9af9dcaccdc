"""Configuration for the lo-appimage builder.

Module-level constants describe the upstream download trees and the
built-in language presets.  :func:`load_settings` layers environment
overrides on top of them; CLI flags override the resulting
:class:`Settings` in turn.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from lo_appimage.exceptions import InvalidRequestError

# Upstream download trees (directory indexes are scraped for versions)
STABLE_BASE_URL = "https://download.documentfoundation.org/libreoffice/stable/"
ARCHIVE_BASE_URL = "https://downloadarchive.documentfoundation.org/libreoffice/old/"
DAILY_BASE_URL = "https://dev-builds.libreoffice.org/daily/master/"

# Nightly builders publishing deb tarballs, keyed by architecture name
DAILY_TINDERBOXES: dict[str, str] = {
    "x86_64": "Linux-rpm_deb-x86_64@tb87-TDF",
}

PRODUCT_STABLE = "LibreOffice"
PRODUCT_DAILY = "LibreOfficeDev"

CHANNEL_FRESH = "fresh"
CHANNEL_STILL = "still"
CHANNEL_DAILY = "daily"
CHANNELS: tuple[str, ...] = (CHANNEL_FRESH, CHANNEL_STILL, CHANNEL_DAILY)

FLAVOR_BASIC = "basic"
FLAVOR_STANDARD = "standard"
FLAVOR_FULL = "full"
FLAVORS: tuple[str, ...] = (FLAVOR_BASIC, FLAVOR_STANDARD, FLAVOR_FULL)

# Built into the main archive; never has a separate language pack
BASE_LANGUAGE = "en-US"

STANDARD_LANGUAGES: tuple[str, ...] = (
    "ar",
    "de",
    "en-GB",
    "es",
    "fr",
    "it",
    "ja",
    "ko",
    "pt",
    "pt-BR",
    "ru",
    "zh-CN",
    "zh-TW",
)

# Packages inside the vendor tarballs that are not copied into the AppDir
EXCLUDED_DEB_PATTERNS: tuple[str, ...] = ("-onlineupdate",)

DEFAULT_TIMEOUT = 30.0


def _default_cache_dir(environ: Mapping[str, str]) -> Path:
    xdg = environ.get("XDG_CACHE_HOME")
    base = Path(xdg) if xdg else Path.home() / ".cache"
    return base / "lo-appimage"


def _ensure_slash(url: str) -> str:
    return url if url.endswith("/") else url + "/"


@dataclass(frozen=True, slots=True)
class Settings:
    """Resolved runtime configuration."""

    stable_base_url: str = STABLE_BASE_URL
    archive_base_url: str = ARCHIVE_BASE_URL
    daily_base_url: str = DAILY_BASE_URL
    daily_tinderboxes: Mapping[str, str] = field(
        default_factory=lambda: dict(DAILY_TINDERBOXES),
    )
    cache_dir: Path = field(default_factory=lambda: Path.home() / ".cache" / "lo-appimage")
    output_dir: Path = field(default_factory=Path.cwd)
    work_dir: Path = field(default_factory=lambda: Path.cwd() / "build")
    request_timeout: float = DEFAULT_TIMEOUT

    def with_overrides(self, **changes: object) -> Settings:
        """Return a copy with every non-``None`` keyword applied."""
        applied = {key: value for key, value in changes.items() if value is not None}
        return replace(self, **applied)  # type: ignore[arg-type]


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from defaults and ``LO_APPIMAGE_*`` variables.

    Raises
    ------
    InvalidRequestError
        If ``LO_APPIMAGE_TIMEOUT`` is not a positive number.
    """
    env = os.environ if environ is None else environ

    timeout = DEFAULT_TIMEOUT
    raw_timeout = env.get("LO_APPIMAGE_TIMEOUT")
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError as exc:
            raise InvalidRequestError(
                f"Invalid LO_APPIMAGE_TIMEOUT: {raw_timeout}",
                hint="Set it to a number of seconds, e.g. 60.",
            ) from exc
        if timeout <= 0:
            raise InvalidRequestError(
                f"Invalid LO_APPIMAGE_TIMEOUT: {raw_timeout}",
                hint="The timeout must be greater than zero.",
            )

    cwd = Path.cwd()
    return Settings(
        stable_base_url=_ensure_slash(env.get("LO_APPIMAGE_STABLE_URL") or STABLE_BASE_URL),
        archive_base_url=_ensure_slash(env.get("LO_APPIMAGE_ARCHIVE_URL") or ARCHIVE_BASE_URL),
        daily_base_url=_ensure_slash(env.get("LO_APPIMAGE_DAILY_URL") or DAILY_BASE_URL),
        daily_tinderboxes=dict(DAILY_TINDERBOXES),
        cache_dir=Path(env["LO_APPIMAGE_CACHE_DIR"]) if env.get("LO_APPIMAGE_CACHE_DIR") else _default_cache_dir(env),
        output_dir=Path(env["LO_APPIMAGE_OUTPUT_DIR"]) if env.get("LO_APPIMAGE_OUTPUT_DIR") else cwd,
        work_dir=Path(env["LO_APPIMAGE_WORK_DIR"]) if env.get("LO_APPIMAGE_WORK_DIR") else cwd / "build",
        request_timeout=timeout,
    )
