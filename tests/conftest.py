"""Pytest configuration and player fakes for Tile Wall."""

from __future__ import annotations

import os
from typing import Any, Callable, Optional

import pytest


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    del config
    if os.environ.get("TILE_WALL_CI") != "1":
        return
    skip_vlc = pytest.mark.skip(reason="Skipping VLC-dependent tests in CI.")
    for item in items:
        if "vlc" in item.keywords:
            item.add_marker(skip_vlc)


class FakeMount:
    def __init__(self, index: int) -> None:
        self.index = index
        self.window_handle: Optional[int] = None
        self.clears = 0

    def clear(self) -> None:
        self.clears += 1


class FakePlayer:
    """Records every call into a log shared with its SDK."""

    def __init__(
        self,
        log: list[tuple[str, int, str]],
        mount: FakeMount,
        video_id: str,
        config: Any,
        on_ready: Callable[[Any], None],
    ) -> None:
        self.log = log
        self.tile = mount.index
        self.video_id = video_id
        self.config = config
        self.on_ready = on_ready
        self.muted = config.start_muted
        self.volume: Optional[int] = None
        self.playing = config.autoplay
        self.destroyed = False
        self.fail_on: set[str] = set()

    def _record(self, op: str) -> None:
        self.log.append((op, self.tile, self.video_id))
        if op in self.fail_on:
            raise RuntimeError(f"{op} failed")

    def signal_ready(self) -> None:
        self.on_ready(self)

    def mute(self) -> None:
        self._record("mute")
        self.muted = True

    def unmute(self) -> None:
        self._record("unmute")
        self.muted = False

    def set_volume(self, volume: int) -> None:
        self._record("set_volume")
        self.volume = volume

    def play_video(self) -> None:
        self._record("play")
        self.playing = True

    def pause_video(self) -> None:
        self._record("pause")
        self.playing = False

    def destroy(self) -> None:
        self._record("destroy")
        self.destroyed = True


class FakeSdk:
    def __init__(self, *, loaded: bool = False) -> None:
        self.loaded = loaded
        self.load_calls = 0
        self.load_error: Optional[Exception] = None
        self.construct_error: Optional[Exception] = None
        self.players: list[FakePlayer] = []
        self.log: list[tuple[str, int, str]] = []
        self.dispatch: Any = None
        self.released = False

    def load(self) -> None:
        self.load_calls += 1
        if self.load_error is not None:
            raise self.load_error
        self.loaded = True

    def set_dispatch(self, dispatch: Any) -> None:
        self.dispatch = dispatch

    def create_player(
        self,
        mount: FakeMount,
        video_id: str,
        config: Any,
        on_ready: Callable[[Any], None],
    ) -> FakePlayer:
        assert self.loaded, "player constructed before the SDK was ready"
        if self.construct_error is not None:
            raise self.construct_error
        self.log.append(("construct", mount.index, video_id))
        player = FakePlayer(self.log, mount, video_id, config, on_ready)
        self.players.append(player)
        return player

    def release(self) -> None:
        self.released = True

    def latest(self, tile: int) -> FakePlayer:
        return [player for player in self.players if player.tile == tile][-1]


class MemoryStore(dict):
    def set(self, key: str, value: str) -> None:
        self[key] = value


@pytest.fixture
def sdk() -> FakeSdk:
    return FakeSdk()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def mounts() -> list[FakeMount]:
    return [FakeMount(index) for index in range(6)]
