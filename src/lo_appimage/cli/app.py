"""CLI application entry point and command routing for lo-appimage.

This module is the **sole error boundary** for the entire application.
It catches :class:`~lo_appimage.exceptions.LoAppImageError`,
``KeyboardInterrupt``, and any unexpected ``Exception``, rendering
user-friendly messages and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here — resolution, download and assembly are
  delegated to the core services and infrastructure adapters.
* ``print()`` is avoided outside the plain-text fallbacks; the console
  proxy is used for all output.
* This module is the only place that translates between the domain
  world and the OS process exit code.
"""

from __future__ import annotations

import argparse
import shutil
import sys
import tempfile
from dataclasses import replace
from pathlib import Path

from lo_appimage.cli import exit_codes
from lo_appimage.cli.console import console
from lo_appimage.config import CHANNELS, FLAVOR_BASIC, FLAVORS, Settings, load_settings
from lo_appimage.core.models import ARCHITECTURES, BuildRequest
from lo_appimage.exceptions import LoAppImageError
from lo_appimage.version import __version__


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    The CLI supports:
    * ``lo-appimage <channel|version> [options]`` — build a bundle
    * ``lo-appimage doctor``                      — environment diagnostics
    * ``lo-appimage --version``
    """
    parser = argparse.ArgumentParser(
        prog="lo-appimage",
        description="Build a portable LibreOffice AppImage from vendor archives.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "target",
        nargs="?",
        default=None,
        help=(
            f"Release channel ({', '.join(CHANNELS)}), explicit version "
            "(e.g. 24.2.0 or 7.5.3.2), or 'doctor' to run diagnostics."
        ),
    )

    selection = parser.add_argument_group("release selection")
    selection.add_argument(
        "-a", "--arch",
        choices=sorted(ARCHITECTURES),
        default="x86_64",
        help="Target architecture (default: x86_64).",
    )
    selection.add_argument(
        "-f", "--flavor",
        choices=FLAVORS,
        default="standard",
        help="Language set: basic (en-US), standard, or full (default: standard).",
    )
    selection.add_argument(
        "-l", "--lang",
        default=None,
        metavar="CODES",
        help="Comma-separated language codes; overrides --flavor (e.g. de,fr,pt-BR).",
    )
    selection.add_argument(
        "--with-help",
        action="store_true",
        help="Include offline help packs for the selected languages.",
    )
    selection.add_argument(
        "--tinderbox",
        default=None,
        metavar="NAME",
        help="Nightly builder directory for the daily channel.",
    )

    packaging = parser.add_argument_group("packaging")
    packaging.add_argument("--sign", action="store_true", help="Sign the AppImage with gpg.")
    packaging.add_argument("--sign-key", default=None, metavar="KEY", help="gpg key id used with --sign.")
    packaging.add_argument(
        "--update-info",
        default=None,
        metavar="INFO",
        help="Embedded update information, e.g. 'zsync|https://example.org/x.AppImage.zsync'.",
    )
    packaging.add_argument("--appimagetool", default=None, metavar="PATH", help="Path to appimagetool.")

    paths = parser.add_argument_group("paths")
    paths.add_argument("--cache-dir", type=Path, default=None, help="Download cache directory.")
    paths.add_argument("--output-dir", type=Path, default=None, help="Where the AppImage is written.")
    paths.add_argument("--work-dir", type=Path, default=None, help="Where --keep-appdir keeps the AppDir.")
    paths.add_argument("--keep-appdir", action="store_true", help="Keep the assembled AppDir.")
    paths.add_argument("--no-cache", action="store_true", help="Download archives even if cached.")

    behaviour = parser.add_argument_group("behaviour")
    behaviour.add_argument(
        "--resolve-only",
        action="store_true",
        help="Show the resolved release and archives, then exit.",
    )
    behaviour.add_argument(
        "-i", "--interactive",
        action="store_true",
        help="Prompt for the channel and languages when not given.",
    )
    behaviour.add_argument("-q", "--quiet", action="store_true", help="Only print errors and the result.")
    return parser


def _parse_languages(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(code.strip() for code in raw.split(",") if code.strip())


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _settings_for(args: argparse.Namespace) -> Settings:
    return load_settings().with_overrides(
        cache_dir=args.cache_dir,
        output_dir=args.output_dir,
        work_dir=args.work_dir,
    )


def _handle_build(args: argparse.Namespace) -> int:
    """Resolve, download, assemble and package one bundle.

    Flow:
    1. Build the request (prompting in interactive mode).
    2. Resolve it to a release plan and display it.
    3. Check the external tools before any large download.
    4. Download every archive with Rich progress.
    5. Extract, finalize and package the AppDir.
    """
    from lo_appimage.cli.progress import RichProgressHook
    from lo_appimage.cli.release_prompt import display_plan, prompt_channel, prompt_languages
    from lo_appimage.core.bundle_service import BundleService
    from lo_appimage.core.download_service import DownloadService
    from lo_appimage.core.resolver_service import ReleaseResolver
    from lo_appimage.infra.appdir import AppDirAssembler
    from lo_appimage.infra.appimagetool_packager import AppImageToolPackager
    from lo_appimage.infra.deb_extractor import DebPackageExtractor
    from lo_appimage.infra.http_provider import RequestsDownloadProvider, RequestsListingProvider
    from lo_appimage.infra.tool_detector import APPIMAGETOOL, DPKG_DEB, GPG, require_tool

    settings = _settings_for(args)
    target: str | None = args.target
    if target is None:
        target = prompt_channel()

    request = BuildRequest(
        target=target,
        arch=args.arch,
        flavor=args.flavor,
        languages=_parse_languages(args.lang),
        with_help=args.with_help,
        tinderbox=args.tinderbox,
    )

    resolver = ReleaseResolver(RequestsListingProvider(timeout=settings.request_timeout), settings)
    console.step(f"\n[bold]Resolving…[/bold]  {target} ({args.arch})")

    release = index = None
    if args.interactive and not request.languages:
        release = resolver.resolve(request.target, request.arch, tinderbox=request.tinderbox)
        index = resolver.available_packs(release)
        chosen = prompt_languages(index.langpacks)
        if chosen:
            request = replace(request, languages=chosen)
        else:
            request = replace(request, flavor=FLAVOR_BASIC)

    plan = resolver.plan(request, release=release, index=index)
    if not console.quiet or args.resolve_only:
        display_plan(plan)
    if args.resolve_only:
        return exit_codes.SUCCESS

    dpkg_deb = require_tool(DPKG_DEB)
    appimagetool = require_tool(APPIMAGETOOL, override=args.appimagetool)
    if args.sign:
        require_tool(GPG)

    console.step("[bold green]Downloading…[/bold green]")
    download_service = DownloadService(
        RequestsDownloadProvider(
            timeout=settings.request_timeout,
            reuse_existing=not args.no_cache,
        )
    )
    if console.quiet:
        archives = download_service.fetch(plan, settings.cache_dir)
    else:
        with RichProgressHook() as hook:
            archives = download_service.fetch(plan, settings.cache_dir, progress_callback=hook)

    bundle_service = BundleService(
        DebPackageExtractor(dpkg_deb),
        AppDirAssembler(),
        AppImageToolPackager(appimagetool),
    )

    console.step("[bold green]Assembling AppDir…[/bold green]")
    if args.keep_appdir:
        appdir = settings.work_dir / plan.appimage_name.replace(".AppImage", ".AppDir")
        if appdir.exists():
            shutil.rmtree(appdir)
        output = bundle_service.build(
            plan,
            archives,
            appdir,
            settings.output_dir,
            sign=args.sign,
            sign_key=args.sign_key,
            update_info=args.update_info,
        )
        console.step(f"AppDir kept at {appdir}")
    else:
        with tempfile.TemporaryDirectory(prefix="lo-appimage-") as scratch:
            output = bundle_service.build(
                plan,
                archives,
                Path(scratch) / "AppDir",
                settings.output_dir,
                sign=args.sign,
                sign_key=args.sign_key,
                update_info=args.update_info,
            )

    console.print(f"\n[bold green]Bundle ready:[/bold green] {output}")
    return exit_codes.SUCCESS


def _handle_doctor() -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from lo_appimage.cli.doctor import run_doctor

    return run_doctor()


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the lo-appimage CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    console.quiet = args.quiet

    if args.target is None and not args.interactive:
        parser.print_help()
        return exit_codes.SUCCESS

    if args.target is not None and args.target.lower() == "doctor":
        return _handle_doctor()

    return _handle_build(args)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except LoAppImageError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {exc.hint}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
