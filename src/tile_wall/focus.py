"""Single-active-audio focus across tiles."""

from __future__ import annotations

import logging
from typing import Optional

from tile_wall.tiles import TileManager, safe_call

logger = logging.getLogger(__name__)


class AudioFocusController:
    """Keeps at most one ready tile unmuted."""

    def __init__(self, tiles: TileManager, *, volume: int = 100) -> None:
        self._tiles = tiles
        self._volume = max(0, min(100, volume))
        self._active: Optional[int] = None

    @property
    def active_index(self) -> Optional[int]:
        return self._active

    @property
    def volume(self) -> int:
        return self._volume

    def set_active(self, index: int) -> None:
        """Give audio focus to ``index`` and mute every other ready tile.

        Tiles that are not ready yet are left alone; they start muted.
        """
        self._tiles.slot(index)
        self._active = index
        logger.info("Audio focus -> tile %s", index + 1)
        self._apply()

    def _apply(self) -> None:
        for slot in self._tiles.slots:
            player = slot.player
            if player is None or not slot.ready:
                continue
            if slot.index == self._active:
                safe_call(player.unmute, label=f"unmute tile {slot.index + 1}")
                safe_call(
                    player.set_volume,
                    self._volume,
                    label=f"volume tile {slot.index + 1}",
                )
            else:
                safe_call(player.mute, label=f"mute tile {slot.index + 1}")
