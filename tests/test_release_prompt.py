"""Tests for plan display and interactive prompts (cli/release_prompt.py).

``questionary`` and ``rich.table`` are replaced through the module's lazy
import helpers — no terminal is required.

Coverage:
* Presentation helpers.
* Channel and language selection, including cancellation.
* Plan rendering (rows, skipped help languages).
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from lo_appimage.cli.release_prompt import (
    _build_channel_label,
    _format_kind,
    _format_language,
    display_plan,
    prompt_channel,
    prompt_languages,
)
from lo_appimage.core.models import ARCHITECTURES, Artifact, Release, ReleasePlan
from lo_appimage.exceptions import InvalidRequestError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class FakeChoice:
    def __init__(self, title: str, value: str, checked: bool = False) -> None:
        self.title = title
        self.value = value
        self.checked = checked


class FakeTable:
    def __init__(self, *args: object, **kwargs: object) -> None:
        self.kwargs = kwargs
        self.rows: list[tuple[object, ...]] = []

    def add_column(self, *args: object, **kwargs: object) -> None:
        _ = args, kwargs

    def add_row(self, *args: object) -> None:
        self.rows.append(args)


def _questionary(answer: object) -> MagicMock:
    module = MagicMock()
    module.Choice = FakeChoice
    module.select.return_value.ask.return_value = answer
    module.checkbox.return_value.ask.return_value = answer
    return module


def _plan(skipped: tuple[str, ...] = ()) -> ReleasePlan:
    release = Release(
        version="25.2.0.0.alpha0",
        channel="daily",
        product="LibreOfficeDev",
        directory_url="https://dev.test/",
        arch=ARCHITECTURES["x86_64"],
        build_id="2024-05-20_04.50.31",
    )
    return ReleasePlan(
        release,
        "de_it",
        ("en-US", "de", "it"),
        True,
        (
            Artifact("main", None, "u1", "main.tar.gz"),
            Artifact("langpack", "de", "u2", "de.tar.gz"),
            Artifact("helppack", "en-US", "u3", "help-en.tar.gz"),
        ),
        skipped_help_languages=skipped,
    )


# ---------------------------------------------------------------------------
# Presentation helpers
# ---------------------------------------------------------------------------

class TestFormatting:
    def test_kind_labels(self) -> None:
        assert _format_kind(Artifact("main", None, "u", "f")) == "Main"
        assert _format_kind(Artifact("helppack", "de", "u", "f")) == "Help pack"
        assert _format_kind(Artifact("sdk", None, "u", "f")) == "sdk"

    def test_language(self) -> None:
        assert _format_language(Artifact("main", None, "u", "f")) == "—"
        assert _format_language(Artifact("langpack", "pt-BR", "u", "f")) == "pt-BR"

    def test_channel_label(self) -> None:
        assert _build_channel_label("fresh").startswith("fresh   latest stable")
        assert _build_channel_label("other") == "other"


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

class TestPromptChannel:
    @patch("lo_appimage.cli.release_prompt._import_questionary")
    def test_returns_selection(self, mock_q: MagicMock) -> None:
        mock_q.return_value = _questionary("still")
        assert prompt_channel() == "still"

        choices = mock_q.return_value.select.call_args.kwargs["choices"]
        assert [c.value for c in choices] == ["fresh", "still", "daily"]

    @patch("lo_appimage.cli.release_prompt._import_questionary")
    def test_cancel_raises(self, mock_q: MagicMock) -> None:
        mock_q.return_value = _questionary(None)
        with pytest.raises(InvalidRequestError, match="No channel selected"):
            prompt_channel()


class TestPromptLanguages:
    @patch("lo_appimage.cli.release_prompt._import_questionary")
    def test_standard_set_prechecked(self, mock_q: MagicMock) -> None:
        mock_q.return_value = _questionary(["de", "zu"])

        result = prompt_languages(["de", "en-US", "fr", "zu"])

        assert result == ("de", "zu")
        choices = mock_q.return_value.checkbox.call_args.kwargs["choices"]
        assert [(c.value, c.checked) for c in choices] == [
            ("de", True),
            ("fr", True),
            ("zu", False),
        ]

    @patch("lo_appimage.cli.release_prompt._import_questionary")
    def test_nothing_ticked(self, mock_q: MagicMock) -> None:
        mock_q.return_value = _questionary([])
        assert prompt_languages(["de"]) == ()

    @patch("lo_appimage.cli.release_prompt._import_questionary")
    def test_cancel_raises(self, mock_q: MagicMock) -> None:
        mock_q.return_value = _questionary(None)
        with pytest.raises(InvalidRequestError):
            prompt_languages(["de"])


# ---------------------------------------------------------------------------
# display_plan
# ---------------------------------------------------------------------------

class TestDisplayPlan:
    @patch("lo_appimage.cli.release_prompt.console")
    @patch("lo_appimage.cli.release_prompt._import_rich_table", return_value=FakeTable)
    def test_rows_and_header(self, _mock_table: MagicMock, mock_console: MagicMock) -> None:
        display_plan(_plan())

        printed = [c.args[0] for c in mock_console.print.call_args_list if c.args]
        table = next(p for p in printed if isinstance(p, FakeTable))
        assert table.rows == [
            ("1", "Main", "—", "main.tar.gz"),
            ("2", "Language pack", "de", "de.tar.gz"),
            ("3", "Help pack", "en-US", "help-en.tar.gz"),
        ]
        text = "\n".join(p for p in printed if isinstance(p, str))
        assert "LibreOfficeDev 25.2.0.0.alpha0" in text
        assert "2024-05-20_04.50.31" in text
        assert "LibreOfficeDev-daily.de_it.help-x86_64.AppImage" in text
        assert "No help pack" not in text

    @patch("lo_appimage.cli.release_prompt.console")
    @patch("lo_appimage.cli.release_prompt._import_rich_table", return_value=FakeTable)
    def test_skipped_help_languages(self, _mock_table: MagicMock, mock_console: MagicMock) -> None:
        display_plan(_plan(skipped=("it",)))

        printed = [c.args[0] for c in mock_console.print.call_args_list if c.args]
        assert any(isinstance(p, str) and "No help pack" in p and "it" in p for p in printed)
