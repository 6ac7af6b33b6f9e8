"""End-to-end tests for the wall controller using player fakes."""

from __future__ import annotations

import json

import pytest

from conftest import FakeMount, FakeSdk, MemoryStore
from tile_wall.pending import PendingJob
from tile_wall.sources import DEFAULT_SOURCES, SOURCES_KEY
from tile_wall.tiles import SlotState
from tile_wall.wall import WallController

DEFAULT_IDS = [source.rsplit("=", 1)[1] for source in DEFAULT_SOURCES]


class Harness:
    def __init__(self, sdk: FakeSdk, store: MemoryStore, mounts: list[FakeMount]):
        self.sdk = sdk
        self.load_requests = 0
        self.notes: list[tuple[str, str]] = []
        self.wall = WallController(
            sdk,
            store,
            self.request_load,
            notify=lambda text, level: self.notes.append((text, level)),
        )
        for index, mount in enumerate(mounts):
            self.wall.tiles.bind_mount(index, mount)

    def request_load(self) -> None:
        self.load_requests += 1

    def finish_sdk_load(self) -> None:
        self.sdk.load()
        self.wall.gate.mark_ready()

    def ready_all(self) -> None:
        for player in list(self.sdk.players):
            if not player.destroyed:
                player.signal_ready()


@pytest.fixture
def harness(sdk: FakeSdk, store: MemoryStore, mounts: list[FakeMount]) -> Harness:
    return Harness(sdk, store, mounts)


def test_start_requests_sdk_once(harness: Harness) -> None:
    harness.wall.start()
    harness.wall.start()
    assert harness.load_requests == 1
    assert harness.wall.ready is False


def test_start_restores_stored_sources(
    sdk: FakeSdk, store: MemoryStore, mounts: list[FakeMount]
) -> None:
    saved = [f"https://youtu.be/{index:011d}" for index in range(6)]
    store[SOURCES_KEY] = json.dumps(saved)
    harness = Harness(sdk, store, mounts)
    harness.wall.start()
    assert harness.wall.sources.sources == saved


def test_load_all_before_ready_queues_then_drains_in_order(
    harness: Harness,
) -> None:
    wall = harness.wall
    wall.start()
    assert wall.load_all() == 6
    assert harness.sdk.players == []
    assert wall.tiles.queue.pending == tuple(
        PendingJob(index, DEFAULT_IDS[index]) for index in range(6)
    )

    harness.finish_sdk_load()
    constructs = [entry for entry in harness.sdk.log if entry[0] == "construct"]
    assert constructs == [("construct", i, DEFAULT_IDS[i]) for i in range(6)]
    assert len(wall.tiles.queue) == 0

    harness.ready_all()
    assert all(slot.state is SlotState.READY for slot in wall.tiles.slots)
    assert all(player.muted and player.playing for player in harness.sdk.players)


def test_select_moves_audio(harness: Harness) -> None:
    wall = harness.wall
    wall.start()
    harness.finish_sdk_load()
    wall.load_all()
    harness.ready_all()

    wall.select(2)
    wall.select(4)
    assert wall.active_index == 4
    unmuted = [p.tile for p in harness.sdk.players if not p.muted]
    assert unmuted == [4]


def test_unparsable_source_notifies_and_skips(harness: Harness) -> None:
    wall = harness.wall
    wall.start()
    harness.finish_sdk_load()
    wall.set_source(3, "not a video")
    assert wall.load_all() == 5
    assert harness.notes == [
        ("Could not parse a valid YouTube video ID for tile 4", "warn")
    ]
    assert wall.slot(3).state is SlotState.EMPTY


def test_set_source_persists(harness: Harness, store: MemoryStore) -> None:
    harness.wall.set_source(0, "https://youtu.be/dQw4w9WgXcQ")
    assert json.loads(store[SOURCES_KEY])[0] == "https://youtu.be/dQw4w9WgXcQ"


def test_reload_of_active_tile_restores_focus_when_ready(harness: Harness) -> None:
    wall = harness.wall
    wall.start()
    harness.finish_sdk_load()
    wall.load_all()
    harness.ready_all()
    wall.select(1)

    wall.set_source(1, "https://www.youtube.com/shorts/dQw4w9WgXcQ")
    assert wall.reload_tile(1) == "dQw4w9WgXcQ"
    fresh = harness.sdk.latest(1)
    assert fresh.muted

    fresh.signal_ready()
    assert wall.active_index == 1
    assert not fresh.muted
    assert fresh.volume == 100


def test_reload_of_inactive_tile_stays_muted(harness: Harness) -> None:
    wall = harness.wall
    wall.start()
    harness.finish_sdk_load()
    wall.load_all()
    harness.ready_all()
    wall.select(0)

    wall.reload_tile(2)
    harness.sdk.latest(2).signal_ready()
    assert harness.sdk.latest(2).muted
    assert not harness.sdk.latest(0).muted


def test_focus_moved_away_before_reload_ready_is_respected(
    harness: Harness,
) -> None:
    wall = harness.wall
    wall.start()
    harness.finish_sdk_load()
    wall.load_all()
    harness.ready_all()
    wall.select(1)
    wall.reload_tile(1)
    wall.select(3)
    harness.sdk.latest(1).signal_ready()
    assert wall.active_index == 3
    assert harness.sdk.latest(1).muted


def test_reload_unparsable_notifies(harness: Harness) -> None:
    wall = harness.wall
    wall.set_source(0, "???")
    assert wall.reload_tile(0) is None
    assert harness.notes[-1][1] == "warn"


def test_mute_all_keeps_active_index(harness: Harness) -> None:
    wall = harness.wall
    wall.start()
    harness.finish_sdk_load()
    wall.load_all()
    harness.ready_all()
    wall.select(0)
    assert wall.mute_all() == 6
    assert wall.active_index == 0
    assert all(player.muted for player in harness.sdk.players)

    wall.reload_tile(0)
    harness.sdk.latest(0).signal_ready()
    assert not harness.sdk.latest(0).muted
    assert all(p.muted for p in harness.sdk.players if p.tile != 0)


def test_pause_and_play_all(harness: Harness) -> None:
    wall = harness.wall
    wall.start()
    harness.finish_sdk_load()
    wall.load_all()
    assert wall.pause_all() == 6
    assert not any(player.playing for player in harness.sdk.players)
    assert wall.play_all_muted() == 6
    assert all(p.playing and p.muted for p in harness.sdk.players)


def test_shutdown_destroys_players(harness: Harness) -> None:
    wall = harness.wall
    wall.start()
    harness.finish_sdk_load()
    wall.load_all()
    wall.shutdown()
    assert all(player.destroyed for player in harness.sdk.players)
