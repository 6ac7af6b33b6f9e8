"""Persisted tile source references."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Optional, Protocol

from tile_wall.config import write_json_atomic

logger = logging.getLogger(__name__)

SOURCES_KEY = "sixup.urls"

DEFAULT_SOURCES: tuple[str, ...] = (
    "https://www.youtube.com/watch?v=xKERvEPF898",
    "https://www.youtube.com/watch?v=dAfq7g3JQI8",
    "https://www.youtube.com/watch?v=CDrm8RhonZU",
    "https://www.youtube.com/watch?v=4UkssSAYNIA",
    "https://www.youtube.com/watch?v=-dMtaC5QaUk",
    "https://www.youtube.com/watch?v=en2DcyDUYB4",
)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class JsonFileStore:
    """Flat string-to-string store kept in a JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._data: Optional[dict[str, str]] = None

    def _load(self) -> dict[str, str]:
        if self._data is not None:
            return self._data
        data: dict[str, str] = {}
        if self.path.exists():
            try:
                raw = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError):
                logger.exception("Failed to read store %s", self.path)
                raw = {}
            if isinstance(raw, dict):
                data = {
                    key: value
                    for key, value in raw.items()
                    if isinstance(key, str) and isinstance(value, str)
                }
        self._data = data
        return data

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        try:
            write_json_atomic(self.path, data)
        except OSError:
            logger.exception("Failed to write store %s", self.path)


class SourceBridge:
    """Loads and saves the per-tile source references verbatim."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        defaults: Iterable[str] = DEFAULT_SOURCES,
        key: str = SOURCES_KEY,
    ) -> None:
        self._store = store
        self._key = key
        self._sources = list(defaults)

    def __len__(self) -> int:
        return len(self._sources)

    def __getitem__(self, index: int) -> str:
        return self._sources[index]

    @property
    def sources(self) -> list[str]:
        return list(self._sources)

    def load(self) -> list[str]:
        """Replace the defaults with the stored list when it is well formed."""
        saved = self._store.get(self._key)
        if saved is None:
            return self.sources
        try:
            parsed = json.loads(saved)
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable stored sources")
            return self.sources
        if (
            isinstance(parsed, list)
            and len(parsed) == len(self._sources)
            and all(isinstance(item, str) for item in parsed)
        ):
            self._sources = parsed
        else:
            logger.warning("Ignoring malformed stored sources")
        return self.sources

    def set(self, index: int, raw: str) -> None:
        if not 0 <= index < len(self._sources):
            raise IndexError(f"Tile index out of range: {index}")
        if self._sources[index] == raw:
            return
        self._sources[index] = raw
        self.save()

    def save(self) -> None:
        self._store.set(self._key, json.dumps(self._sources))
