"""Allow ``python -m lo_appimage`` invocation.

Delegates to the CLI error-boundary entry point so that
``python -m lo_appimage`` behaves identically to the ``lo-appimage``
console script.
"""

from __future__ import annotations

from lo_appimage.cli.app import cli

if __name__ == "__main__":
    cli()
