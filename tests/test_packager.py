"""Tests for the appimagetool packager (infra/appimagetool_packager.py).

:func:`subprocess.run` and tool lookup are mocked — appimagetool is
never executed.

Coverage:
* Command construction (signing, update information).
* ``ARCH`` environment handling.
* Error mapping for tool failures and missing output.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from lo_appimage.core.models import ARCHITECTURES
from lo_appimage.exceptions import PackagingError, ToolNotFoundError
from lo_appimage.infra.appimagetool_packager import AppImageToolPackager

TOOL = Path("/opt/bin/appimagetool")


@pytest.fixture()
def tool(tmp_path: Path) -> Path:
    path = tmp_path / "bin" / "appimagetool"
    path.parent.mkdir()
    path.write_text("#!/bin/sh\n")
    path.chmod(0o755)
    return path.resolve()


def _fake_run(output: Path) -> Any:
    def run(command: list[str], **_kwargs: Any) -> MagicMock:
        output.write_bytes(b"\x7fELF")
        return MagicMock(returncode=0)

    return run


class TestBuildCommand:
    def test_plain(self, tmp_path: Path) -> None:
        cmd = AppImageToolPackager.build_command(TOOL, tmp_path / "AppDir", tmp_path / "x.AppImage")
        assert cmd == [str(TOOL), "--no-appstream", str(tmp_path / "AppDir"), str(tmp_path / "x.AppImage")]

    def test_sign_with_key(self, tmp_path: Path) -> None:
        cmd = AppImageToolPackager.build_command(
            TOOL, tmp_path / "a", tmp_path / "b", sign=True, sign_key="ABCD1234",
        )
        assert cmd[2:5] == ["--sign", "--sign-key", "ABCD1234"]

    def test_sign_key_ignored_without_sign(self, tmp_path: Path) -> None:
        cmd = AppImageToolPackager.build_command(TOOL, tmp_path / "a", tmp_path / "b", sign_key="ABCD")
        assert "--sign-key" not in cmd

    def test_update_info(self, tmp_path: Path) -> None:
        info = "zsync|https://example.org/LibreOffice-fresh.AppImage.zsync"
        cmd = AppImageToolPackager.build_command(TOOL, tmp_path / "a", tmp_path / "b", update_info=info)
        assert cmd[cmd.index("-u") + 1] == info


class TestPackage:
    @patch("lo_appimage.infra.appimagetool_packager.subprocess.run")
    def test_runs_with_arch_env(self, mock_run: MagicMock, tool: Path, tmp_path: Path) -> None:
        output = tmp_path / "out" / "x.AppImage"
        mock_run.side_effect = _fake_run(output)

        result = AppImageToolPackager(tool).package(tmp_path / "AppDir", output, arch=ARCHITECTURES["x86"])

        assert result == output
        assert mock_run.call_args.kwargs["env"]["ARCH"] == "i686"
        assert mock_run.call_args.args[0][0] == str(tool)

    @patch("lo_appimage.infra.appimagetool_packager.subprocess.run")
    def test_failure_mapped_with_tail_hint(self, mock_run: MagicMock, tool: Path, tmp_path: Path) -> None:
        mock_run.side_effect = subprocess.CalledProcessError(
            1, ["appimagetool"], stderr="line1\nDesktop file not found\n",
        )
        packager = AppImageToolPackager(tool)

        with pytest.raises(PackagingError, match="status 1") as exc_info:
            packager.package(tmp_path / "AppDir", tmp_path / "x.AppImage", arch=ARCHITECTURES["x86_64"])
        assert exc_info.value.hint is not None
        assert "Desktop file not found" in exc_info.value.hint

    @patch("lo_appimage.infra.appimagetool_packager.subprocess.run")
    def test_missing_output_is_error(self, mock_run: MagicMock, tool: Path, tmp_path: Path) -> None:
        packager = AppImageToolPackager(tool)
        with pytest.raises(PackagingError, match="did not create"):
            packager.package(tmp_path / "AppDir", tmp_path / "x.AppImage", arch=ARCHITECTURES["x86_64"])

    @patch("lo_appimage.infra.tool_detector.shutil.which", return_value=None)
    def test_signing_requires_gpg(self, _mock_which: MagicMock, tool: Path, tmp_path: Path) -> None:
        packager = AppImageToolPackager(tool)
        with pytest.raises(ToolNotFoundError, match="gpg"):
            packager.package(
                tmp_path / "AppDir", tmp_path / "x.AppImage", arch=ARCHITECTURES["x86_64"], sign=True,
            )

    @patch("lo_appimage.infra.tool_detector.shutil.which", return_value=None)
    def test_missing_appimagetool(
        self, _mock_which: MagicMock, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.delenv("APPIMAGETOOL", raising=False)
        with pytest.raises(ToolNotFoundError, match="appimagetool"):
            AppImageToolPackager().package(
                tmp_path / "AppDir", tmp_path / "x.AppImage", arch=ARCHITECTURES["x86_64"],
            )
