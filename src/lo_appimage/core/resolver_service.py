"""Core resolver service — maps a channel or version to concrete archives.

This is the central service consumed by the CLI layer.  It depends on a
:class:`~lo_appimage.core.protocols.ListingProvider` injected at
construction time, keeping the core free of any HTTP imports.

Resolution rules
----------------
* ``fresh`` — newest version in the stable tree.
* ``still`` — newest version of the previous ``major.minor`` series.
* ``daily`` — newest timestamped build of the architecture's tinderbox.
* ``N.N.N.N`` — that exact build in the archive tree.
* ``N.N.N`` — the stable tree when listed there, else the newest
  matching ``N.N.N.x`` build in the archive tree.

Guarantees
----------
* No filesystem access, no ``print()``.
* Only :class:`~lo_appimage.exceptions.LoAppImageError` subclasses escape.
"""

from __future__ import annotations

from lo_appimage.config import (
    BASE_LANGUAGE,
    CHANNEL_DAILY,
    CHANNEL_FRESH,
    CHANNEL_STILL,
    CHANNELS,
    FLAVOR_BASIC,
    FLAVOR_FULL,
    FLAVOR_STANDARD,
    FLAVORS,
    PRODUCT_DAILY,
    PRODUCT_STABLE,
    STANDARD_LANGUAGES,
    Settings,
)
from lo_appimage.core.models import (
    ARCHITECTURES,
    ARTIFACT_HELPPACK,
    ARTIFACT_LANGPACK,
    ARTIFACT_MAIN,
    Architecture,
    Artifact,
    BuildRequest,
    PackIndex,
    Release,
    ReleasePlan,
)
from lo_appimage.core.protocols import ListingProvider
from lo_appimage.core.versions import (
    extract_links,
    find_daily_version,
    is_version_string,
    newest_with_prefix,
    normalize_languages,
    parse_pack_listing,
    parse_version_listing,
    select_fresh,
    select_newest_build,
    select_still,
)
from lo_appimage.exceptions import (
    InvalidRequestError,
    ListingFetchError,
    LoAppImageError,
    ReleaseNotFoundError,
    append_mirror_suggestion,
)


class ReleaseResolver:
    """Stateless service that resolves requests into release plans.

    Parameters
    ----------
    provider:
        Any object satisfying the :class:`ListingProvider` protocol.
    settings:
        Base URLs and nightly tinderbox names.
    """

    def __init__(self, provider: ListingProvider, settings: Settings) -> None:
        self._provider: ListingProvider = provider
        self._settings: Settings = settings

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve(
        self,
        target: str,
        arch_name: str,
        *,
        tinderbox: str | None = None,
    ) -> Release:
        """Resolve *target* to a concrete :class:`Release`.

        Raises
        ------
        InvalidRequestError
            For an unknown architecture, channel or malformed version.
        VersionResolutionError
            When a listing does not yield a usable version.
        ReleaseNotFoundError
            When an explicit version is not published.
        """
        arch = self._lookup_arch(arch_name)
        normalized = target.strip().lower()

        if normalized in (CHANNEL_FRESH, CHANNEL_STILL):
            return self._resolve_stable_channel(normalized, arch)
        if normalized == CHANNEL_DAILY:
            return self._resolve_daily(arch, tinderbox)
        if is_version_string(normalized):
            return self._resolve_explicit(normalized, arch)

        raise InvalidRequestError(
            f"Unknown channel or version: {target.strip() or '(empty)'}",
            hint=f"Use one of {', '.join(CHANNELS)} or a version such as 24.2.0.",
        )

    def available_packs(self, release: Release) -> PackIndex:
        """List the language and help packs published for *release*."""
        html = self._fetch(release.directory_url)
        return parse_pack_listing(
            html,
            release.product,
            release.version,
            release.arch.file_token,
        )

    def plan(
        self,
        request: BuildRequest,
        *,
        release: Release | None = None,
        index: PackIndex | None = None,
    ) -> ReleasePlan:
        """Resolve *request* and select every archive to download.

        *release* and *index* skip the listing fetches when the caller
        already resolved them, so an interactive language choice is
        planned against the same build it was offered from.

        Raises
        ------
        InvalidRequestError
            For an unknown flavor or unpublished explicit languages.
        ReleaseNotFoundError
            When the main archive is missing for the architecture.
        """
        requested = normalize_languages(request.languages)
        if not requested and request.flavor not in FLAVORS:
            raise InvalidRequestError(
                f"Unknown flavor: {request.flavor}",
                hint=f"Use one of {', '.join(FLAVORS)}.",
            )

        if release is None:
            release = self.resolve(request.target, request.arch, tinderbox=request.tinderbox)
            index = None
        if index is None:
            index = self.available_packs(release)
        if not index.has_main:
            raise ReleaseNotFoundError(
                f"{release.filename(ARTIFACT_MAIN)} is not published.",
                hint=f"Architecture {release.arch.name} may not be built for "
                f"{release.product} {release.version}.",
            )

        languages, flavor_label = self._select_languages(requested, request.flavor, index)
        artifacts: list[Artifact] = [self._artifact(release, ARTIFACT_MAIN)]
        artifacts.extend(
            self._artifact(release, ARTIFACT_LANGPACK, lang)
            for lang in languages
            if lang != BASE_LANGUAGE
        )

        skipped: list[str] = []
        if request.with_help:
            for lang in languages:
                if lang in index.helppacks:
                    artifacts.append(self._artifact(release, ARTIFACT_HELPPACK, lang))
                else:
                    skipped.append(lang)

        return ReleasePlan(
            release=release,
            flavor_label=flavor_label,
            languages=languages,
            with_help=request.with_help,
            artifacts=tuple(artifacts),
            skipped_help_languages=tuple(skipped),
        )

    # ------------------------------------------------------------------
    # Channel resolution
    # ------------------------------------------------------------------

    @staticmethod
    def _lookup_arch(arch_name: str) -> Architecture:
        arch = ARCHITECTURES.get(arch_name.strip().lower())
        if arch is None:
            raise InvalidRequestError(
                f"Unsupported architecture: {arch_name}",
                hint=f"Use one of {', '.join(ARCHITECTURES)}.",
            )
        return arch

    def _stable_release(self, version: str, channel: str | None, arch: Architecture) -> Release:
        return Release(
            version=version,
            channel=channel,
            product=PRODUCT_STABLE,
            directory_url=f"{self._settings.stable_base_url}{version}/deb/{arch.directory}/",
            arch=arch,
        )

    def _archive_release(self, version: str, arch: Architecture) -> Release:
        return Release(
            version=version,
            channel=None,
            product=PRODUCT_STABLE,
            directory_url=f"{self._settings.archive_base_url}{version}/deb/{arch.directory}/",
            arch=arch,
        )

    def _resolve_stable_channel(self, channel: str, arch: Architecture) -> Release:
        versions = parse_version_listing(self._fetch(self._settings.stable_base_url))
        version = select_fresh(versions) if channel == CHANNEL_FRESH else select_still(versions)
        return self._stable_release(version, channel, arch)

    def _resolve_daily(self, arch: Architecture, tinderbox: str | None) -> Release:
        box = tinderbox or self._settings.daily_tinderboxes.get(arch.name)
        if not box:
            raise InvalidRequestError(
                f"No nightly builder is known for {arch.name}.",
                hint="Pass --tinderbox with the builder directory name.",
            )
        root = f"{self._settings.daily_base_url}{box}/"
        build_id = select_newest_build(self._links_of(root))
        directory_url = f"{root}{build_id}/"
        version = find_daily_version(
            self._fetch(directory_url),
            PRODUCT_DAILY,
            arch.file_token,
        )
        return Release(
            version=version,
            channel=CHANNEL_DAILY,
            product=PRODUCT_DAILY,
            directory_url=directory_url,
            arch=arch,
            build_id=build_id,
        )

    def _resolve_explicit(self, version: str, arch: Architecture) -> Release:
        if len(version.split(".")) == 4:
            return self._archive_release(version, arch)

        if version in parse_version_listing(self._fetch(self._settings.stable_base_url)):
            return self._stable_release(version, None, arch)

        archived = newest_with_prefix(
            parse_version_listing(self._fetch(self._settings.archive_base_url)),
            version,
        )
        if archived is None:
            raise ReleaseNotFoundError(
                f"Version {version} is not published.",
                hint="Check the version number; old releases use four parts, e.g. 7.5.3.2.",
            )
        return self._archive_release(archived, arch)

    # ------------------------------------------------------------------
    # Language selection
    # ------------------------------------------------------------------

    @staticmethod
    def _select_languages(
        requested: tuple[str, ...],
        flavor: str,
        index: PackIndex,
    ) -> tuple[tuple[str, ...], str]:
        """Return ``(languages, flavor_label)`` with the base language first."""
        if requested:
            unknown = [
                lang for lang in requested
                if lang != BASE_LANGUAGE and lang not in index.langpacks
            ]
            if unknown:
                raise InvalidRequestError(
                    f"No language pack published for: {', '.join(unknown)}",
                    hint=f"Available: {', '.join(index.langpacks) or 'none'}",
                )
            extra = tuple(lang for lang in requested if lang != BASE_LANGUAGE)
            label = "_".join(requested)
            return (BASE_LANGUAGE, *extra), label

        if flavor == FLAVOR_BASIC:
            return (BASE_LANGUAGE,), FLAVOR_BASIC
        if flavor == FLAVOR_STANDARD:
            extra = tuple(lang for lang in STANDARD_LANGUAGES if lang in index.langpacks)
            return (BASE_LANGUAGE, *extra), FLAVOR_STANDARD
        extra = tuple(lang for lang in index.langpacks if lang != BASE_LANGUAGE)
        return (BASE_LANGUAGE, *extra), FLAVOR_FULL

    # ------------------------------------------------------------------
    # Provider delegation (safe boundary)
    # ------------------------------------------------------------------

    @staticmethod
    def _artifact(release: Release, kind: str, language: str | None = None) -> Artifact:
        filename = release.filename(kind, language)
        return Artifact(
            kind=kind,
            language=language,
            url=f"{release.directory_url}{filename}",
            filename=filename,
        )

    def _links_of(self, url: str) -> list[str]:
        return extract_links(self._fetch(url))

    def _fetch(self, url: str) -> str:
        """Call the provider and ensure only our exceptions escape."""
        try:
            return self._provider.fetch_text(url)
        except LoAppImageError:
            raise
        except Exception as exc:
            raise ListingFetchError(
                f"Unexpected error fetching {url}: {exc}",
                hint=append_mirror_suggestion("Check your network connection."),
            ) from exc
