"""Shared pytest fixtures and configuration for the lo-appimage test suite.

Guidelines
----------
* No internet access in any test.
* HTTP is mocked at the provider boundary (fake listing providers or
  mocked ``requests`` sessions).
* ``dpkg-deb`` and ``appimagetool`` are never executed.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from lo_appimage.config import Settings

STABLE_URL = "https://mirror.test/libreoffice/stable/"
ARCHIVE_URL = "https://mirror.test/libreoffice/old/"
DAILY_URL = "https://dev.test/daily/master/"
TINDERBOX = "Linux-rpm_deb-x86_64@tb87-TDF"


def index_html(*entries: str) -> str:
    """Render a minimal Apache-style directory index."""
    rows = "\n".join(f'<tr><td><a href="{entry}">{entry}</a></td></tr>' for entry in entries)
    return (
        "<html><body><table>\n"
        '<tr><td><a href="../">Parent Directory</a></td></tr>\n'
        f"{rows}\n"
        "</table></body></html>"
    )


def release_listing(product: str, version: str, token: str, langs: tuple[str, ...], helps: tuple[str, ...]) -> str:
    stem = f"{product}_{version}_Linux_{token}_deb"
    entries = [f"{stem}.tar.gz", f"{stem}.tar.gz.asc"]
    entries.extend(f"{stem}_langpack_{lang}.tar.gz" for lang in langs)
    entries.extend(f"{stem}_langpack_{lang}.tar.gz.asc" for lang in langs)
    entries.extend(f"{stem}_helppack_{lang}.tar.gz" for lang in helps)
    return index_html(*entries)


class FakeListingProvider:
    """Dict-backed :class:`ListingProvider` recording every fetched URL."""

    def __init__(self, pages: dict[str, str]) -> None:
        self.pages = pages
        self.fetched: list[str] = []

    def fetch_text(self, url: str) -> str:
        from lo_appimage.exceptions import ReleaseNotFoundError

        self.fetched.append(url)
        if url not in self.pages:
            raise ReleaseNotFoundError(f"Not found: {url}")
        return self.pages[url]


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        stable_base_url=STABLE_URL,
        archive_base_url=ARCHIVE_URL,
        daily_base_url=DAILY_URL,
        daily_tinderboxes={"x86_64": TINDERBOX},
        cache_dir=tmp_path / "cache",
        output_dir=tmp_path / "out",
        work_dir=tmp_path / "work",
    )


@pytest.fixture()
def upstream_pages() -> dict[str, str]:
    """A small but complete fake upstream tree."""
    return {
        STABLE_URL: index_html("24.2.7/", "24.8.3/", "24.8.4/", "24.2.6/", "keys/"),
        f"{STABLE_URL}24.8.4/deb/x86_64/": release_listing(
            "LibreOffice", "24.8.4", "x86-64",
            ("de", "en-GB", "fr", "it", "zu"),
            ("de", "en-US", "fr"),
        ),
        f"{STABLE_URL}24.2.7/deb/x86_64/": release_listing(
            "LibreOffice", "24.2.7", "x86-64", ("de",), ("en-US",),
        ),
        ARCHIVE_URL: index_html("7.5.3.1/", "7.5.3.2/", "7.6.0.3/", "latest/"),
        f"{DAILY_URL}{TINDERBOX}/": index_html(
            "2024-05-19_04.50.31/",
            "2024-05-20_04.50.31/",
            "2024-05-20_01.10.00/",
            "current/",
        ),
        f"{DAILY_URL}{TINDERBOX}/2024-05-20_04.50.31/": release_listing(
            "LibreOfficeDev", "25.2.0.0.alpha0", "x86-64", ("de",), (),
        ),
    }


@pytest.fixture()
def fake_provider(upstream_pages: dict[str, str]) -> FakeListingProvider:
    return FakeListingProvider(upstream_pages)
