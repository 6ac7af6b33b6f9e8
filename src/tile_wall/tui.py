"""Textual-based TUI for Tile Wall."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Optional

try:
    from textual.app import App, ComposeResult
    from textual.binding import Binding
    from textual.containers import Grid, Horizontal
    from textual.css.query import NoMatches
    from textual.message import Message
    from textual.widgets import Button, Header, Input, Static
    from rich.text import Text
except Exception as exc:  # pragma: no cover - depends on environment
    raise RuntimeError(
        "Textual is required for the TUI. Install the 'textual' dependency."
    ) from exc

from tile_wall.config import AppConfig, get_sources_path, load_config
from tile_wall.logging_setup import set_console_level
from tile_wall.player_vlc import PlayerConfig, VlcSdk
from tile_wall.sources import JsonFileStore, KeyValueStore
from tile_wall.ui.help_modal import HelpModal
from tile_wall.ui.status_controller import StatusController
from tile_wall.ui.tile_view import TileView
from tile_wall.wall import WallController

logger = logging.getLogger(__name__)


class StatusBar(Static):
    """Status bar widget."""

    def __init__(self, controller: StatusController, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._controller = controller

    def render(self) -> Text:
        width = max(1, self.size.width)
        focused = getattr(self.app, "focused", None)
        return self._controller.render_line(width, focused=focused)


class TileWallApp(App):
    """Six-up video wall with single active audio."""

    CSS_PATH = "app.tcss"
    TITLE = "Tile Wall"

    BINDINGS = [
        Binding("1", "focus_tile(0)", "Audio: tile 1"),
        Binding("2", "focus_tile(1)", "Audio: tile 2"),
        Binding("3", "focus_tile(2)", "Audio: tile 3"),
        Binding("4", "focus_tile(3)", "Audio: tile 4"),
        Binding("5", "focus_tile(4)", "Audio: tile 5"),
        Binding("6", "focus_tile(5)", "Audio: tile 6"),
        Binding("l", "load_all", "Load All"),
        Binding("m", "mute_all", "Mute All"),
        Binding("p", "pause_all", "Pause All"),
        Binding("a", "play_all_muted", "Play All (muted)"),
        Binding("?", "show_help", "Help"),
        Binding("f1", "show_help", "Help"),
        Binding("q", "quit_app", "Quit"),
    ]

    class PlayerEvent(Message):
        """A player callback handed over from a libVLC thread."""

        def __init__(self, callback: Callable[..., Any], args: tuple) -> None:
            super().__init__()
            self.callback = callback
            self.args = args

    # --- Lifecycle ---
    def __init__(
        self,
        *,
        sdk: VlcSdk,
        store: Optional[KeyValueStore] = None,
        config: Optional[AppConfig] = None,
        autoload: Optional[bool] = None,
        now: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__()
        self._config = config or load_config()
        self.sdk = sdk
        self._now = now
        self._autoload = self._config.autoload if autoload is None else autoload
        self._status_controller = StatusController(self._now)
        self._status_bar: Optional[StatusBar] = None
        self._tile_views: list[TileView] = []
        self._shut_down = False
        self.controller = WallController(
            sdk,
            store if store is not None else JsonFileStore(get_sources_path()),
            self._request_sdk_load,
            player_config=PlayerConfig(
                network_caching_ms=self._config.network_caching_ms
            ),
            focus_volume=self._config.focus_volume,
            notify=self._notify_from_controller,
        )
        self.controller.sources.load()
        self.controller.gate.on_ready(self._handle_sdk_ready)
        self.controller.tiles.add_ready_listener(self._handle_tile_ready)
        self.sdk.set_dispatch(self._dispatch_from_player)

    def compose(self) -> ComposeResult:
        yield Header(show_clock=False)
        with Horizontal(id="toolbar"):
            yield Button(self._load_all_label(), id="load_all")
            yield Button("Mute All", id="mute_all")
            yield Button("Pause All", id="pause_all")
            yield Button("Play All (muted)", id="play_all_muted")
        yield Static(
            "Click a tile or press 1-6 to switch audio. Autoplay starts muted.",
            id="hint",
        )
        with Grid(id="tiles"):
            for index, source in enumerate(self.controller.sources.sources):
                yield TileView(index, source)
        yield StatusBar(self._status_controller, id="status_bar")

    # --- Internal helpers ---
    def _install_asyncio_exception_handler(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return

        def handler(_loop: asyncio.AbstractEventLoop, context: dict) -> None:
            exc = context.get("exception")
            if exc:
                logger.exception("Asyncio exception", exc_info=exc)
            else:
                logger.error("Asyncio error: %s", context.get("message"))

        loop.set_exception_handler(handler)

    def _dispatch_from_player(self, func: Callable[..., Any], *args: Any) -> None:
        """Queue a player callback for the UI thread without waiting on it.

        libVLC fires events on its own threads and holds internal locks while
        doing so, so the callback is posted rather than awaited.
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            if not self.is_running:
                logger.debug("Dropping player callback; app is not running")
                return
            self.post_message(self.PlayerEvent(func, args))
            return
        func(*args)

    def _request_sdk_load(self) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            self._load_sdk_blocking()
            return
        self.run_worker(self._sdk_load_worker(), exclusive=True, group="sdk")

    def _load_sdk_blocking(self) -> None:
        try:
            self.sdk.load()
        except Exception as exc:
            self._handle_sdk_error(exc)
            return
        self.controller.gate.mark_ready()

    async def _sdk_load_worker(self) -> None:
        try:
            await asyncio.to_thread(self.sdk.load)
        except Exception as exc:
            self._handle_sdk_error(exc)
        else:
            self.controller.gate.mark_ready()

    def _handle_sdk_ready(self) -> None:
        self._status_controller.set_sdk_ready(True)
        self._set_message("Player SDK ready")
        self._refresh_tiles()

    def _handle_sdk_error(self, exc: Exception) -> None:
        logger.error("Player SDK failed to load: %s", exc)
        self._set_message(str(exc), level="error", timeout=0)

    def _handle_tile_ready(self, index: int) -> None:
        del index
        self._refresh_tiles()

    def _notify_from_controller(self, text: str, level: str) -> None:
        logger.log(logging.WARNING if level != "info" else logging.INFO, text)
        self._set_message(text, level=level)

    def _set_message(
        self,
        text: str,
        *,
        level: str = "info",
        timeout: Optional[float] = None,
    ) -> None:
        self._status_controller.show_message(text, level=level, timeout=timeout)
        if self._status_bar:
            self._status_bar.refresh()

    @property
    def status_message(self) -> Optional[str]:
        message = self._status_controller.current_message()
        return message.text if message else None

    def _load_all_label(self) -> str:
        return "Load All" if self.controller.ready else "Load All (SDK loading...)"

    def _refresh_tiles(self) -> None:
        if not self._tile_views:
            return
        ready = self.controller.ready
        active = self.controller.active_index
        for view in self._tile_views:
            slot = self.controller.slot(view.index)
            view.show_state(
                slot.state,
                slot.video_id,
                active=active == view.index,
                sdk_ready=ready,
            )
        try:
            self.query_one("#load_all", Button).label = self._load_all_label()
        except NoMatches:
            pass
        if self._status_bar:
            self._status_bar.refresh()

    def _log_heartbeat(self) -> None:
        states = ",".join(slot.state.value for slot in self.controller.tiles.slots)
        logger.info(
            "Heartbeat sdk_ready=%s active=%s pending=%d tiles=%s",
            self.controller.ready,
            self.controller.active_index,
            len(self.controller.tiles.queue),
            states,
        )

    def _tile_index(self, widget_id: Optional[str], prefix: str) -> Optional[int]:
        if not widget_id or not widget_id.startswith(prefix):
            return None
        try:
            index = int(widget_id[len(prefix) :])
        except ValueError:
            return None
        return index if 0 <= index < self.controller.tile_count else None

    def _shutdown_players(self) -> None:
        if self._shut_down:
            return
        self._shut_down = True
        self.controller.shutdown()
        self.sdk.release()

    # --- Actions (Textual) ---
    def action_focus_tile(self, index: int) -> None:
        self.controller.select(index)
        self._set_message(f"Audio: tile {index + 1}")
        self._refresh_tiles()

    def action_load_tile(self, index: int) -> None:
        video_id = self.controller.load_tile(index)
        if video_id and not self.controller.ready:
            self._set_message(f"Tile {index + 1} queued until the player SDK is ready")
        self._refresh_tiles()

    def action_reload_tile(self, index: int) -> None:
        video_id = self.controller.reload_tile(index)
        if video_id:
            self._set_message(f"Reloading tile {index + 1}")
        self._refresh_tiles()

    def action_load_all(self) -> None:
        loaded = self.controller.load_all()
        if not self.controller.ready:
            self._set_message(f"{loaded} tiles queued until the player SDK is ready")
        elif loaded == self.controller.tile_count:
            self._set_message("Loading all tiles")
        self._refresh_tiles()

    def action_mute_all(self) -> None:
        self.controller.mute_all()
        self._set_message("Muted all tiles")
        self._refresh_tiles()

    def action_pause_all(self) -> None:
        self.controller.pause_all()
        self._set_message("Paused all tiles")

    def action_play_all_muted(self) -> None:
        self.controller.play_all_muted()
        self._set_message("Playing all tiles (muted)")
        self._refresh_tiles()

    def action_show_help(self) -> None:
        self.push_screen(HelpModal(self.BINDINGS))

    def action_quit_app(self) -> None:
        logger.info("TUI exit requested")
        self._shutdown_players()
        self.exit()

    # --- Event handlers ---
    async def on_mount(self) -> None:
        self._status_bar = self.query_one("#status_bar", StatusBar)
        self._tile_views = list(self.query(TileView))
        for view in self._tile_views:
            self.controller.tiles.bind_mount(view.index, view)
        self._install_asyncio_exception_handler()
        self.controller.start()
        if self._autoload:
            self.action_load_all()
        self._refresh_tiles()
        self.set_interval(0.5, self._refresh_tiles)
        self.set_interval(10.0, self._log_heartbeat)
        logger.info("TUI mounted")

    def on_unmount(self) -> None:
        logger.info("TUI shutdown")
        self._shutdown_players()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        toolbar = {
            "load_all": self.action_load_all,
            "mute_all": self.action_mute_all,
            "pause_all": self.action_pause_all,
            "play_all_muted": self.action_play_all_muted,
        }
        if button_id in toolbar:
            toolbar[button_id]()
            return
        index = self._tile_index(button_id, "load_")
        if index is not None:
            self.action_load_tile(index)
            return
        index = self._tile_index(button_id, "reload_")
        if index is not None:
            self.action_reload_tile(index)

    def on_input_changed(self, event: Input.Changed) -> None:
        index = self._tile_index(event.input.id, "source_")
        if index is None or event.value == self.controller.sources[index]:
            return
        self.controller.set_source(index, event.value)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        index = self._tile_index(event.input.id, "source_")
        if index is None:
            return
        self.controller.set_source(index, event.value)
        self.action_load_tile(index)

    def on_tile_view_selected(self, message: TileView.Selected) -> None:
        self.action_focus_tile(message.index)

    def on_tile_wall_app_player_event(self, message: PlayerEvent) -> None:
        message.callback(*message.args)


# Public entrypoints
def run_tui(sdk: VlcSdk, *, autoload: Optional[bool] = None) -> int:
    """Run the TUI and return an exit code."""
    logger.info("TUI start autoload=%s", autoload)
    try:
        set_console_level(logging.WARNING)
    except Exception:
        logger.exception("Failed to set console log level for TUI")
    app = TileWallApp(sdk=sdk, autoload=autoload)
    app.run()
    logger.info("TUI exit")
    return 0
