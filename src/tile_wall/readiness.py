"""One-way readiness gate for the player SDK."""

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)

ReadyCallback = Callable[[], None]


class ReadinessGate:
    """Tracks whether the player SDK has finished loading.

    The gate only ever moves from not-ready to ready. Subscribers registered
    with ``on_ready`` are chained in registration order and each runs exactly
    once. The loader is requested at most once for the lifetime of the gate.
    """

    def __init__(
        self,
        is_available: Callable[[], bool],
        request_load: Callable[[], None],
    ) -> None:
        self._is_available = is_available
        self._request_load = request_load
        self._ready = False
        self._load_requested = False
        self._subscribers: list[ReadyCallback] = []

    @property
    def ready(self) -> bool:
        return self._ready

    def on_ready(self, callback: ReadyCallback) -> None:
        """Register a callback for the ready transition.

        Callbacks registered after the gate opened run immediately.
        """
        if self._ready:
            callback()
            return
        self._subscribers.append(callback)

    def ensure_loading(self) -> None:
        """Open the gate if the SDK is already loaded, else request it once."""
        if self._ready:
            return
        if self._is_available():
            self.mark_ready()
            return
        if self._load_requested:
            return
        self._load_requested = True
        logger.info("Requesting player SDK load")
        self._request_load()

    def mark_ready(self) -> None:
        """Open the gate and notify subscribers; later calls do nothing."""
        if self._ready:
            return
        self._ready = True
        logger.info("Player SDK ready (%d subscribers)", len(self._subscribers))
        subscribers, self._subscribers = self._subscribers, []
        for callback in subscribers:
            callback()
