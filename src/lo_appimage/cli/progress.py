"""Rich-based progress display driven by download progress dicts.

This module bridges the ``progress_callback`` dicts emitted by the
download provider with a Rich :class:`~rich.progress.Progress` display.
One progress task is created per archive file name.

Design
------
* :meth:`RichProgressHook.__call__` is the callback passed to the
  download service.
* Shutdown-safe: if the display is already stopped, calls are ignored.
* Cached archives show up as an immediately completed task.
"""

from __future__ import annotations

from typing import Any

from lo_appimage.cli.console import get_rich_console
from lo_appimage.exceptions import EnvironmentError


class RichProgressHook:
    """Callable progress-hook adapter for Rich.

    Usage::

        with RichProgressHook() as hook:
            download_service.fetch(plan, cache_dir, progress_callback=hook)
    """

    def __init__(self) -> None:
        try:
            from rich.progress import (
                BarColumn,
                DownloadColumn,
                Progress,
                SpinnerColumn,
                TextColumn,
                TimeRemainingColumn,
                TransferSpeedColumn,
            )
        except ModuleNotFoundError as exc:
            raise EnvironmentError(
                "rich is not installed. Install with: pip install rich",
            ) from exc

        self._progress: Any = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=get_rich_console(),
            transient=False,
        )
        self._tasks: dict[str, int] = {}
        self._started: bool = False

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> RichProgressHook:
        self.start()
        return self

    def __exit__(self, *_args: object) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the Rich progress display."""
        if not self._started:
            self._progress.start()
            self._started = True

    def stop(self) -> None:
        """Stop the Rich progress display (idempotent)."""
        if self._started:
            self._progress.stop()
            self._started = False

    # ------------------------------------------------------------------
    # Hook callback
    # ------------------------------------------------------------------

    def __call__(self, d: dict[str, Any]) -> None:
        """Download progress callback.

        Parameters
        ----------
        d:
            A dict with at least a ``"status"`` key: ``"downloading"``
            or ``"finished"``.
        """
        if not self._started:
            return

        status: str = d.get("status", "")
        if status == "downloading":
            self._handle_downloading(d)
        elif status == "finished":
            self._handle_finished(d)

    # ------------------------------------------------------------------
    # Internal handlers
    # ------------------------------------------------------------------

    def _task_for(self, d: dict[str, Any], total: int | None) -> int:
        filename: str = d.get("filename") or "Downloading"
        task_id = self._tasks.get(filename)
        if task_id is None:
            display_name = filename
            if d.get("cached"):
                display_name = f"{filename} (cached)"
            if len(display_name) > 60:
                display_name = display_name[:57] + "..."
            task_id = self._progress.add_task(display_name, total=total)
            self._tasks[filename] = task_id
        return task_id

    def _handle_downloading(self, d: dict[str, Any]) -> None:
        """Update the file's progress bar."""
        total = _safe_int(d.get("total_bytes"))
        downloaded = _safe_int(d.get("downloaded_bytes")) or 0
        task_id = self._task_for(d, total)
        if total is not None:
            self._progress.update(task_id, total=total, completed=downloaded)
        else:
            self._progress.update(task_id, completed=downloaded)

    def _handle_finished(self, d: dict[str, Any]) -> None:
        """Mark the file's task as complete."""
        total = _safe_int(d.get("total_bytes")) or _safe_int(d.get("downloaded_bytes"))
        task_id = self._task_for(d, total)
        if total is not None:
            self._progress.update(task_id, total=total, completed=total)


def _safe_int(value: object) -> int | None:
    """Convert *value* to ``int`` or return ``None``."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        return None
