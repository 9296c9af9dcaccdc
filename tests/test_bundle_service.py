"""Tests for the bundle service (core/bundle_service.py).

Extractor, finalizer and packager are mocks; the tests check pipeline
order, argument forwarding and exception wrapping.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, call

import pytest

from lo_appimage.core.bundle_service import BundleService
from lo_appimage.core.models import ARCHITECTURES, Artifact, Release, ReleasePlan
from lo_appimage.exceptions import AppDirLayoutError, ExtractionError, PackagingError


def _plan(with_help: bool = True) -> ReleasePlan:
    release = Release(
        version="24.8.4",
        channel="fresh",
        product="LibreOffice",
        directory_url="https://mirror.test/",
        arch=ARCHITECTURES["aarch64"],
    )
    artifacts = [
        Artifact("helppack", "de", "https://mirror.test/h-de", "h-de"),
        Artifact("langpack", "de", "https://mirror.test/l-de", "l-de"),
        Artifact("main", None, "https://mirror.test/main", "main"),
    ]
    if not with_help:
        artifacts = artifacts[1:]
    return ReleasePlan(release, "de", ("en-US", "de"), with_help, tuple(artifacts))


def _archives(plan: ReleasePlan, root: Path) -> dict[Artifact, Path]:
    return {artifact: root / artifact.filename for artifact in plan.artifacts}


def _service() -> tuple[BundleService, MagicMock, MagicMock, MagicMock]:
    extractor, finalizer, packager = MagicMock(), MagicMock(), MagicMock()
    return BundleService(extractor, finalizer, packager), extractor, finalizer, packager


class TestExtractionOrder:
    def test_main_then_langpacks_then_helppacks(self) -> None:
        kinds = [a.kind for a in BundleService.extraction_order(_plan())]
        assert kinds == ["main", "langpack", "helppack"]


class TestBuild:
    def test_pipeline(self, tmp_path: Path) -> None:
        service, extractor, finalizer, packager = _service()
        plan = _plan()
        archives = _archives(plan, tmp_path)
        appdir = tmp_path / "AppDir"
        packager.package.return_value = tmp_path / "out" / plan.appimage_name

        result = service.build(
            plan, archives, appdir, tmp_path / "out", sign=True, sign_key="KEY", update_info="zsync|x",
        )

        assert extractor.extract.call_args_list == [
            call(tmp_path / "main", appdir),
            call(tmp_path / "l-de", appdir),
            call(tmp_path / "h-de", appdir),
        ]
        finalizer.finalize.assert_called_once_with(appdir, plan)
        packager.package.assert_called_once_with(
            appdir,
            tmp_path / "out" / "LibreOffice-fresh.de.help-aarch64.AppImage",
            arch=ARCHITECTURES["aarch64"],
            sign=True,
            sign_key="KEY",
            update_info="zsync|x",
        )
        assert result == tmp_path / "out" / plan.appimage_name

    def test_missing_archive(self, tmp_path: Path) -> None:
        service, extractor, _finalizer, _packager = _service()
        plan = _plan(with_help=False)
        archives = _archives(plan, tmp_path)
        del archives[plan.artifacts[0]]

        with pytest.raises(ExtractionError, match="l-de"):
            service.build(plan, archives, tmp_path / "AppDir", tmp_path)
        assert extractor.extract.call_count == 1

    def test_domain_error_propagates(self, tmp_path: Path) -> None:
        service, _extractor, finalizer, packager = _service()
        finalizer.finalize.side_effect = AppDirLayoutError("no soffice")
        plan = _plan()

        with pytest.raises(AppDirLayoutError, match="no soffice"):
            service.build(plan, _archives(plan, tmp_path), tmp_path / "AppDir", tmp_path)
        packager.package.assert_not_called()

    def test_unexpected_extraction_error_wrapped(self, tmp_path: Path) -> None:
        service, extractor, finalizer, _packager = _service()
        original = RuntimeError("disk full")
        extractor.extract.side_effect = original
        plan = _plan()

        with pytest.raises(ExtractionError, match="main") as exc_info:
            service.build(plan, _archives(plan, tmp_path), tmp_path / "AppDir", tmp_path)
        assert exc_info.value.__cause__ is original
        finalizer.finalize.assert_not_called()

    def test_unexpected_packaging_error_wrapped(self, tmp_path: Path) -> None:
        service, _extractor, _finalizer, packager = _service()
        original = ValueError("weird")
        packager.package.side_effect = original
        plan = _plan()

        with pytest.raises(PackagingError, match="weird") as exc_info:
            service.build(plan, _archives(plan, tmp_path), tmp_path / "AppDir", tmp_path)
        assert exc_info.value.__cause__ is original
