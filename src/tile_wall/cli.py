"""Command-line interface for Tile Wall."""

from __future__ import annotations

import argparse
import importlib.util
import logging
import sys
import threading
from types import TracebackType
from typing import Iterable, Optional, Tuple

from tile_wall.logging_setup import init_logging
from tile_wall.normalize import extract_video_id
from tile_wall.player_vlc import VlcSdk

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="tile-wall", description="Six-up video wall with single active audio"
    )
    parser.add_argument(
        "--autoload",
        action="store_true",
        default=None,
        help="Load every tile on start (queued until the player SDK is ready)",
    )
    parser.add_argument(
        "--resolve",
        metavar="REF",
        default=None,
        help="Print the video ID for a URL or ID and exit",
    )
    return parser


def _resolve(raw: str) -> int:
    video_id = extract_video_id(raw)
    if not video_id:
        print(f"Could not parse a valid YouTube video ID from {raw!r}", file=sys.stderr)
        return 2
    print(video_id)
    return 0


def _vlc_installed() -> bool:
    return importlib.util.find_spec("vlc") is not None


def _run_tui(sdk: VlcSdk, autoload: Optional[bool]) -> int:
    try:
        from tile_wall.tui import run_tui
    except (ImportError, RuntimeError) as exc:
        print(str(exc), file=sys.stderr)
        return 1
    return run_tui(sdk, autoload=autoload)


def _install_exception_hooks() -> None:
    def excepthook(exc_type, exc, tb) -> None:
        logger.exception("Uncaught exception", exc_info=(exc_type, exc, tb))

    sys.excepthook = excepthook

    def thread_hook(args: threading.ExceptHookArgs) -> None:
        exc_value = args.exc_value or RuntimeError("unknown")
        exc_info: Tuple[type[BaseException], BaseException, Optional[TracebackType]] = (
            args.exc_type,
            exc_value,
            args.exc_traceback,
        )
        thread_name = args.thread.name if args.thread else "thread"
        logger.exception("Thread exception in %s", thread_name, exc_info=exc_info)

    threading.excepthook = thread_hook


def main(argv: Optional[Iterable[str]] = None) -> int:
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    if args.resolve is not None:
        return _resolve(args.resolve)

    init_logging()
    logger.info("App start")
    _install_exception_hooks()

    if not _vlc_installed():
        print(VlcSdk.UNAVAILABLE_MESSAGE, file=sys.stderr)
        return 1
    sdk = VlcSdk()
    exit_code = _run_tui(sdk, args.autoload)
    logger.info("App exit code=%s", exit_code)
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
