"""Pure version parsing, listing scraping and build selection logic.

Every function in this module is a **pure** transformation — no I/O,
no side effects, fully deterministic, and trivially unit-testable.
The HTML inputs are the plain Apache/mirrorbrain directory indexes the
vendor publishes; only ``href`` targets are inspected.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from datetime import datetime

from lo_appimage.core.models import ARTIFACT_HELPPACK, ARTIFACT_LANGPACK, PackIndex
from lo_appimage.exceptions import VersionResolutionError

_HREF_RE = re.compile(r"""href\s*=\s*["']([^"'#?]+)""", re.IGNORECASE)
_VERSION_RE = re.compile(r"^\d+\.\d+\.\d+(?:\.\d+)?$")
_BUILD_TIMESTAMP_FORMAT = "%Y-%m-%d_%H.%M.%S"


# ---------------------------------------------------------------------------
# Listing primitives
# ---------------------------------------------------------------------------

def extract_links(html: str) -> list[str]:
    """Return every ``href`` target in *html*, in document order."""
    return _HREF_RE.findall(html)


def _entry_name(link: str) -> str:
    """Reduce a link to its last path component, without trailing slash."""
    return link.rstrip("/").rsplit("/", 1)[-1]


# ---------------------------------------------------------------------------
# Versions
# ---------------------------------------------------------------------------

def is_version_string(text: str) -> bool:
    """``True`` for ``N.N.N`` or ``N.N.N.N``."""
    return bool(_VERSION_RE.match(text))


def version_key(version: str) -> tuple[int, ...]:
    """Numeric sort key for a dotted version string."""
    return tuple(int(part) for part in version.split("."))


def series(version: str) -> tuple[int, int]:
    """``(major, minor)`` of *version*."""
    major, minor = version_key(version)[:2]
    return major, minor


def parse_version_listing(html: str) -> list[str]:
    """Return version-named entries of a directory index, ascending."""
    versions = {
        name
        for name in (_entry_name(link) for link in extract_links(html))
        if is_version_string(name)
    }
    return sorted(versions, key=version_key)


def select_fresh(versions: Sequence[str]) -> str:
    """Return the newest version (the *fresh* channel)."""
    if not versions:
        raise VersionResolutionError("No versions found in the stable listing.")
    return max(versions, key=version_key)


def select_still(versions: Sequence[str]) -> str:
    """Return the newest version of the previous ``major.minor`` series.

    Raises
    ------
    VersionResolutionError
        If the listing holds fewer than two release series.
    """
    all_series = sorted({series(v) for v in versions})
    if len(all_series) < 2:
        raise VersionResolutionError(
            "Cannot determine the 'still' release: fewer than two release "
            "series are published.",
            hint="Request an explicit version instead, e.g. 24.2.7.",
        )
    previous = all_series[-2]
    return max((v for v in versions if series(v) == previous), key=version_key)


def newest_with_prefix(versions: Iterable[str], prefix: str) -> str | None:
    """Newest entry of *versions* that extends the dotted *prefix*."""
    candidates = [v for v in versions if v.startswith(prefix + ".")]
    if not candidates:
        return None
    return max(candidates, key=version_key)


# ---------------------------------------------------------------------------
# Nightly builds
# ---------------------------------------------------------------------------

def parse_build_timestamp(name: str) -> datetime | None:
    """Parse a nightly build directory name like ``2024-05-20_04.50.31``."""
    try:
        return datetime.strptime(_entry_name(name), _BUILD_TIMESTAMP_FORMAT)
    except ValueError:
        return None


def select_newest_build(names: Iterable[str]) -> str:
    """Return the entry of *names* with the latest build timestamp.

    Entries that are not timestamps (``current``, parent links, files)
    are ignored.

    Raises
    ------
    VersionResolutionError
        If no entry parses as a build timestamp.
    """
    newest: tuple[datetime, str] | None = None
    for name in names:
        stamp = parse_build_timestamp(name)
        if stamp is None:
            continue
        if newest is None or stamp > newest[0]:
            newest = (stamp, _entry_name(name))
    if newest is None:
        raise VersionResolutionError(
            "No nightly builds found in the listing.",
            hint="The nightly builder may be offline; try again later or pass --tinderbox.",
        )
    return newest[1]


def find_daily_version(html: str, product: str, file_token: str) -> str:
    """Return the version embedded in a nightly build's main archive name.

    Nightly versions look like ``25.2.0.0.alpha0`` and therefore do not
    satisfy :func:`is_version_string`.
    """
    pattern = re.compile(
        rf"^{re.escape(product)}_(.+)_Linux_{re.escape(file_token)}_deb\.tar\.gz$"
    )
    for link in extract_links(html):
        match = pattern.match(_entry_name(link))
        if match:
            return match.group(1)
    raise VersionResolutionError(
        f"No {product} {file_token} deb archive found in the nightly build.",
        hint="This architecture may not be built nightly; pass --tinderbox.",
    )


# ---------------------------------------------------------------------------
# Language / help packs
# ---------------------------------------------------------------------------

def parse_pack_listing(
    html: str,
    product: str,
    version: str,
    file_token: str,
) -> PackIndex:
    """Index the language and help packs published in a release directory."""
    stem = f"{product}_{version}_Linux_{file_token}_deb"
    pack_re = re.compile(
        rf"^{re.escape(stem)}_({ARTIFACT_LANGPACK}|{ARTIFACT_HELPPACK})_(.+)\.tar\.gz$"
    )
    main_name = f"{stem}.tar.gz"

    langpacks: list[str] = []
    helppacks: list[str] = []
    has_main = False
    for link in extract_links(html):
        name = _entry_name(link)
        if name == main_name:
            has_main = True
            continue
        match = pack_re.match(name)
        if match is None:
            continue
        kind, language = match.groups()
        bucket = langpacks if kind == ARTIFACT_LANGPACK else helppacks
        if language not in bucket:
            bucket.append(language)

    return PackIndex(
        langpacks=tuple(sorted(langpacks)),
        helppacks=tuple(sorted(helppacks)),
        has_main=has_main,
    )


def normalize_languages(languages: Iterable[str]) -> tuple[str, ...]:
    """Strip, drop empties and de-duplicate while keeping order.

    ``en_US`` style codes are accepted and rewritten to ``en-US``.
    """
    seen: list[str] = []
    for raw in languages:
        code = raw.strip().replace("_", "-")
        if code and code not in seen:
            seen.append(code)
    return tuple(seen)
