"""Per-tile player lifecycle."""

from __future__ import annotations

from dataclasses import dataclass, field
import enum
from functools import partial
import logging
from typing import Any, Callable, Optional, Protocol

from tile_wall.normalize import extract_video_id
from tile_wall.pending import DeferredActionQueue
from tile_wall.player_vlc import PlayerConfig, TileMount
from tile_wall.readiness import ReadinessGate

logger = logging.getLogger(__name__)

TILE_COUNT = 6


class TilePlayer(Protocol):
    video_id: str

    def mute(self) -> None: ...

    def unmute(self) -> None: ...

    def set_volume(self, volume: int) -> None: ...

    def play_video(self) -> None: ...

    def pause_video(self) -> None: ...

    def destroy(self) -> None: ...


class PlayerSdk(Protocol):
    @property
    def loaded(self) -> bool: ...

    def create_player(
        self,
        mount: TileMount,
        video_id: str,
        config: PlayerConfig,
        on_ready: Callable[[Any], None],
    ) -> TilePlayer: ...


class SlotState(enum.Enum):
    EMPTY = "empty"
    CONSTRUCTING = "constructing"
    READY = "ready"


@dataclass
class TileSlot:
    """One tile: its mount, its player and where that player is in its life."""

    index: int
    mount: Optional[TileMount] = None
    player: Optional[TilePlayer] = None
    state: SlotState = SlotState.EMPTY
    video_id: Optional[str] = None
    generation: int = 0
    on_next_ready: list[Callable[[], None]] = field(default_factory=list)

    @property
    def ready(self) -> bool:
        return self.state is SlotState.READY


def safe_call(func: Callable[..., Any], *args: Any, label: str = "") -> bool:
    """Call into a player, turning any failure into False.

    Player instances may throw on transient internal states; callers treat a
    failed call as a no-op.
    """
    try:
        func(*args)
    except Exception:
        logger.debug("Player call failed: %s", label or func, exc_info=True)
        return False
    return True


class TileManager:
    """Owns a fixed arena of tile slots and their player instances."""

    def __init__(
        self,
        sdk: PlayerSdk,
        gate: ReadinessGate,
        *,
        tile_count: int = TILE_COUNT,
        player_config: PlayerConfig = PlayerConfig(),
    ) -> None:
        self._sdk = sdk
        self._gate = gate
        self._config = player_config
        self._slots = [TileSlot(index) for index in range(tile_count)]
        self._ready_listeners: list[Callable[[int], None]] = []
        self.queue = DeferredActionQueue(gate, self._construct)

    def __len__(self) -> int:
        return len(self._slots)

    @property
    def slots(self) -> tuple[TileSlot, ...]:
        return tuple(self._slots)

    def slot(self, index: int) -> TileSlot:
        if not 0 <= index < len(self._slots):
            raise IndexError(f"Tile index out of range: {index}")
        return self._slots[index]

    def bind_mount(self, index: int, mount: Optional[TileMount]) -> None:
        self.slot(index).mount = mount

    def add_ready_listener(self, callback: Callable[[int], None]) -> None:
        self._ready_listeners.append(callback)

    # --- Lifecycle ---
    def create_or_load(self, index: int, video_id: str) -> bool:
        """Construct a player for the tile, or queue it until the SDK is ready.

        Returns True when the request was queued.
        """
        self.slot(index)
        return self.queue.submit(index, video_id)

    def reload(
        self,
        index: int,
        raw: Optional[str],
        *,
        on_ready: Optional[Callable[[], None]] = None,
    ) -> Optional[str]:
        """Destroy the tile's player and load ``raw`` again.

        Returns the resolved video ID, or None when ``raw`` does not resolve.
        """
        slot = self.slot(index)
        self._destroy(slot)
        video_id = extract_video_id(raw)
        if not video_id:
            return None
        if on_ready is not None:
            slot.on_next_ready.append(on_ready)
        self.create_or_load(index, video_id)
        return video_id

    def teardown_all(self) -> None:
        for slot in self._slots:
            self._destroy(slot)
        logger.info("All tiles torn down")

    def _construct(self, index: int, video_id: str) -> None:
        slot = self.slot(index)
        if not self._gate.ready:
            self.queue.submit(index, video_id)
            return
        self._destroy(slot)
        if slot.mount is None:
            logger.warning("Tile %s has no mount; skipping load", index + 1)
            slot.on_next_ready.clear()
            return
        slot.mount.clear()
        slot.state = SlotState.CONSTRUCTING
        slot.video_id = video_id
        on_ready = partial(self._handle_ready, index, slot.generation)
        try:
            slot.player = self._sdk.create_player(
                slot.mount, video_id, self._config, on_ready
            )
        except Exception:
            logger.exception(
                "Tile %s failed to construct video=%s", index + 1, video_id
            )
            slot.state = SlotState.EMPTY
            slot.video_id = None
            slot.player = None
            slot.on_next_ready.clear()
            return
        logger.info("Tile %s constructing video=%s", index + 1, video_id)

    def _handle_ready(self, index: int, generation: int, player: object) -> None:
        del player
        slot = self._slots[index]
        if slot.generation != generation or slot.player is None:
            logger.debug("Ignoring stale ready for tile %s", index + 1)
            return
        slot.state = SlotState.READY
        safe_call(slot.player.mute, label="mute on ready")
        safe_call(slot.player.play_video, label="play on ready")
        logger.info("Tile %s ready video=%s", index + 1, slot.video_id)
        callbacks, slot.on_next_ready = slot.on_next_ready, []
        for callback in callbacks:
            callback()
        for listener in self._ready_listeners:
            listener(index)

    def _destroy(self, slot: TileSlot) -> None:
        player, slot.player = slot.player, None
        slot.generation += 1
        slot.state = SlotState.EMPTY
        slot.video_id = None
        if player is not None:
            safe_call(player.destroy, label=f"destroy tile {slot.index + 1}")

    # --- Bulk operations ---
    def _for_each_player(self, *ops: str) -> int:
        touched = 0
        for slot in self._slots:
            player = slot.player
            if player is None:
                continue
            touched += 1
            for op in ops:
                method = getattr(player, op, None)
                if callable(method):
                    safe_call(method, label=f"{op} tile {slot.index + 1}")
        return touched

    def mute_all(self) -> int:
        return self._for_each_player("mute")

    def pause_all(self) -> int:
        return self._for_each_player("pause_video")

    def play_all_muted(self) -> int:
        return self._for_each_player("mute", "play_video")
