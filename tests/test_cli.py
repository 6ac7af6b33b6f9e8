"""Tests for CLI parsing and dispatch."""

from __future__ import annotations

from pathlib import Path
import builtins

import pytest

from tile_wall import cli


@pytest.fixture
def quiet_main(monkeypatch) -> list[tuple[object, object]]:
    """Stub out logging, hooks and the TUI; record what the TUI was given."""
    calls: list[tuple[object, object]] = []
    monkeypatch.setattr(cli, "init_logging", lambda: Path("app.log"))
    monkeypatch.setattr(cli, "_install_exception_hooks", lambda: None)
    monkeypatch.setattr(cli, "_vlc_installed", lambda: True)

    def fake_run_tui(sdk, autoload) -> int:
        calls.append((sdk, autoload))
        return 0

    monkeypatch.setattr(cli, "_run_tui", fake_run_tui)
    return calls


def test_parse_defaults() -> None:
    args = cli.build_parser().parse_args([])
    assert args.autoload is None
    assert args.resolve is None


def test_parse_autoload() -> None:
    args = cli.build_parser().parse_args(["--autoload"])
    assert args.autoload is True


def test_resolve_prints_id(capsys) -> None:
    assert cli.main(["--resolve", "https://youtu.be/dQw4w9WgXcQ?t=3"]) == 0
    assert capsys.readouterr().out.strip() == "dQw4w9WgXcQ"


def test_resolve_failure_exits_two(capsys) -> None:
    assert cli.main(["--resolve", "nothing"]) == 2
    assert "Could not parse" in capsys.readouterr().err


def test_main_runs_tui_by_default(quiet_main) -> None:
    assert cli.main([]) == 0
    [(sdk, autoload)] = quiet_main
    assert isinstance(sdk, cli.VlcSdk)
    assert not sdk.loaded
    assert autoload is None


def test_main_passes_autoload(quiet_main) -> None:
    cli.main(["--autoload"])
    assert quiet_main[0][1] is True


def test_main_reports_missing_vlc(monkeypatch, capsys, quiet_main) -> None:
    monkeypatch.setattr(cli, "_vlc_installed", lambda: False)
    assert cli.main([]) == 1
    assert "VLC backend is unavailable" in capsys.readouterr().err
    assert quiet_main == []


def test_run_tui_handles_import_error(monkeypatch, capsys) -> None:
    original_import = builtins.__import__

    def fake_import(name, *args, **kwargs):
        if name == "tile_wall.tui":
            raise ImportError("boom")
        return original_import(name, *args, **kwargs)

    monkeypatch.setattr(builtins, "__import__", fake_import)
    result = cli._run_tui(cli.VlcSdk(), None)
    assert result == 1
    assert "boom" in capsys.readouterr().err


def test_thread_exceptions_are_logged(caplog) -> None:
    from types import SimpleNamespace
    import sys
    import threading

    original_thread_hook = threading.excepthook
    original_hook = sys.excepthook
    try:
        cli._install_exception_hooks()
        fake_args = SimpleNamespace(
            exc_type=RuntimeError,
            exc_value=RuntimeError("boom"),
            exc_traceback=None,
            thread=SimpleNamespace(name="vlc-events"),
        )
        threading.excepthook(fake_args)
    finally:
        threading.excepthook = original_thread_hook
        sys.excepthook = original_hook

    assert "Thread exception in vlc-events" in caplog.text
