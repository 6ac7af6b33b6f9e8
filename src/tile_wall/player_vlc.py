"""libVLC-backed tile players."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import sys
from typing import Any, Callable, Optional, Protocol, Sequence, cast

from tile_wall.normalize import watch_url

logger = logging.getLogger(__name__)

vlc: Any | None = None
_VLC_IMPORT_ERROR: Optional[Exception] = None

Dispatch = Callable[..., Any]


def _load_vlc() -> None:
    global vlc
    global _VLC_IMPORT_ERROR
    if vlc is not None or _VLC_IMPORT_ERROR is not None:
        return
    try:
        import vlc as vlc_module  # type: ignore
    except Exception as exc:  # pragma: no cover - platform-dependent import
        vlc = None
        _VLC_IMPORT_ERROR = exc
    else:
        vlc = cast(Any, vlc_module)
        _VLC_IMPORT_ERROR = None


def _direct_dispatch(func: Callable[..., Any], *args: Any) -> None:
    func(*args)


class TileMount(Protocol):
    """Display target a tile player renders into."""

    window_handle: Optional[int]

    def clear(self) -> None: ...


@dataclass(frozen=True)
class PlayerConfig:
    """Fixed per-tile player options."""

    autoplay: bool = True
    controls: bool = True
    start_muted: bool = True
    related: bool = False
    inline: bool = True
    network_caching_ms: int = 1000

    def media_options(self) -> list[str]:
        options = [
            f":network-caching={self.network_caching_ms}",
            ":no-video-title-show",
        ]
        if not self.related:
            options.append(":play-and-stop")
        return options


class VlcTilePlayer:
    """One tile's player: a MediaListPlayer bound to a single watch URL.

    A list player is required so VLC's playlist parser can expand the watch
    page into the actual stream. Calls after ``destroy`` raise RuntimeError.
    """

    def __init__(
        self,
        instance: Any,
        mount: TileMount,
        video_id: str,
        config: PlayerConfig,
        on_ready: Callable[["VlcTilePlayer"], None],
        *,
        dispatch: Dispatch = _direct_dispatch,
    ) -> None:
        self.video_id = video_id
        self._on_ready = on_ready
        self._dispatch = dispatch
        self._ready_sent = False
        self._destroyed = False
        self._list_player = instance.media_list_player_new()
        self._player = self._list_player.get_media_player()
        media = instance.media_new(watch_url(video_id), *config.media_options())
        media_list = instance.media_list_new()
        media_list.add_media(media)
        self._list_player.set_media_list(media_list)
        if config.inline:
            self._bind_window(mount.window_handle)
        self._player.video_set_key_input(config.controls)
        self._player.video_set_mouse_input(config.controls)
        if config.start_muted:
            self._player.audio_set_mute(True)
        self._attach_ready_event()
        if config.autoplay:
            self._list_player.play()

    def _bind_window(self, handle: Optional[int]) -> None:
        if handle is None:
            return
        if sys.platform.startswith("win"):
            self._player.set_hwnd(handle)
        elif sys.platform == "darwin":
            self._player.set_nsobject(handle)
        else:
            self._player.set_xwindow(handle)

    def _attach_ready_event(self) -> None:
        if vlc is None:
            return
        vlc_module = cast(Any, vlc)
        try:
            event_manager = self._player.event_manager()
            event_manager.event_attach(
                vlc_module.EventType.MediaPlayerPlaying, self._handle_playing
            )
        except Exception:
            logger.debug("Ready event unavailable for video=%s", self.video_id)

    def _handle_playing(self, event: object) -> None:
        del event
        if self._ready_sent or self._destroyed:
            return
        self._ready_sent = True
        self._dispatch(self._on_ready, self)

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def _live(self) -> None:
        if self._destroyed:
            raise RuntimeError(f"Player for {self.video_id} was destroyed")

    def mute(self) -> None:
        self._live()
        self._player.audio_set_mute(True)

    def unmute(self) -> None:
        self._live()
        self._player.audio_set_mute(False)

    def set_volume(self, volume: int) -> None:
        """Set volume (0-100)."""
        self._live()
        self._player.audio_set_volume(max(0, min(100, int(volume))))

    def play_video(self) -> None:
        self._live()
        self._list_player.play()

    def pause_video(self) -> None:
        self._live()
        self._list_player.set_pause(1)

    def destroy(self) -> None:
        """Stop playback and release the native players."""
        self._live()
        self._destroyed = True
        try:
            self._list_player.stop()
        finally:
            self._list_player.release()
            self._player.release()


class VlcSdk:
    """Shared libVLC instance that constructs tile players."""

    UNAVAILABLE_MESSAGE = (
        "VLC backend is unavailable. Install VLC and the python-vlc package."
    )

    def __init__(
        self,
        *,
        args: Sequence[str] = ("--quiet",),
        dispatch: Dispatch = _direct_dispatch,
    ) -> None:
        self._args = tuple(args)
        self._dispatch = dispatch
        self._instance: Any | None = None

    @property
    def loaded(self) -> bool:
        return self._instance is not None

    def set_dispatch(self, dispatch: Dispatch) -> None:
        """Route player callbacks (fired on VLC threads) through dispatch."""
        self._dispatch = dispatch

    def load(self) -> None:
        """Import python-vlc and create the shared instance; blocking."""
        if self._instance is not None:
            return
        _load_vlc()
        if vlc is None:
            raise RuntimeError(self.UNAVAILABLE_MESSAGE) from _VLC_IMPORT_ERROR
        instance = cast(Any, vlc).Instance(*self._args)
        if instance is None:
            raise RuntimeError(self.UNAVAILABLE_MESSAGE)
        self._instance = instance
        logger.info("libVLC instance created args=%s", self._args)

    def create_player(
        self,
        mount: TileMount,
        video_id: str,
        config: PlayerConfig,
        on_ready: Callable[[VlcTilePlayer], None],
    ) -> VlcTilePlayer:
        if self._instance is None:
            raise RuntimeError("Player SDK is not loaded")
        return VlcTilePlayer(
            self._instance,
            mount,
            video_id,
            config,
            on_ready,
            dispatch=self._dispatch,
        )

    def release(self) -> None:
        instance, self._instance = self._instance, None
        if instance is None:
            return
        try:
            instance.release()
        except Exception:
            logger.debug("libVLC instance release failed", exc_info=True)
