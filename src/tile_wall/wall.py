"""Wall controller: the user-level triggers for the tile grid."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from tile_wall.focus import AudioFocusController
from tile_wall.normalize import extract_video_id
from tile_wall.player_vlc import PlayerConfig
from tile_wall.readiness import ReadinessGate
from tile_wall.sources import KeyValueStore, SourceBridge
from tile_wall.tiles import PlayerSdk, TileManager, TileSlot

logger = logging.getLogger(__name__)

Notify = Callable[[str, str], None]


def _log_notify(text: str, level: str) -> None:
    logger.log(logging.WARNING if level in {"warn", "error"} else logging.INFO, text)


class WallController:
    """Routes load, reload, bulk and focus requests to the tile components."""

    def __init__(
        self,
        sdk: PlayerSdk,
        store: KeyValueStore,
        request_load: Callable[[], None],
        *,
        player_config: PlayerConfig = PlayerConfig(),
        focus_volume: int = 100,
        notify: Notify = _log_notify,
    ) -> None:
        self.sources = SourceBridge(store)
        self.gate = ReadinessGate(lambda: sdk.loaded, request_load)
        self.tiles = TileManager(
            sdk,
            self.gate,
            tile_count=len(self.sources),
            player_config=player_config,
        )
        self.focus = AudioFocusController(self.tiles, volume=focus_volume)
        self._notify = notify

    @property
    def tile_count(self) -> int:
        return len(self.tiles)

    @property
    def ready(self) -> bool:
        return self.gate.ready

    @property
    def active_index(self) -> Optional[int]:
        return self.focus.active_index

    def slot(self, index: int) -> TileSlot:
        return self.tiles.slot(index)

    def start(self) -> None:
        """Restore stored sources and kick off the SDK load."""
        self.sources.load()
        self.gate.ensure_loading()

    def set_source(self, index: int, raw: str) -> None:
        self.sources.set(index, raw)

    def load_tile(self, index: int) -> Optional[str]:
        video_id = extract_video_id(self.sources[index])
        if not video_id:
            self._report_unparsable(index)
            return None
        queued = self.tiles.create_or_load(index, video_id)
        if queued:
            logger.info("Tile %s queued until SDK ready", index + 1)
        return video_id

    def load_all(self) -> int:
        loaded = 0
        for index in range(self.tile_count):
            if self.load_tile(index):
                loaded += 1
        return loaded

    def reload_tile(self, index: int) -> Optional[str]:
        """Rebuild one tile; a tile holding audio focus gets it back when ready."""
        restore: Optional[Callable[[], None]] = None
        if self.focus.active_index == index:
            restore = self._focus_restorer(index)
        video_id = self.tiles.reload(index, self.sources[index], on_ready=restore)
        if not video_id:
            self._report_unparsable(index)
        return video_id

    def select(self, index: int) -> None:
        self.focus.set_active(index)

    def mute_all(self) -> int:
        """Mute every ready tile; the active index is left as it was."""
        return self.tiles.mute_all()

    def pause_all(self) -> int:
        return self.tiles.pause_all()

    def play_all_muted(self) -> int:
        return self.tiles.play_all_muted()

    def shutdown(self) -> None:
        self.tiles.teardown_all()

    def _focus_restorer(self, index: int) -> Callable[[], None]:
        def restore() -> None:
            if self.focus.active_index == index:
                self.focus.set_active(index)

        return restore

    def _report_unparsable(self, index: int) -> None:
        self._notify(
            f"Could not parse a valid YouTube video ID for tile {index + 1}",
            "warn",
        )
