"""Deferred tile creation while the player SDK is still loading."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
import logging
from typing import Callable

from tile_wall.readiness import ReadinessGate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingJob:
    """A tile load requested before the SDK was ready."""

    tile_index: int
    video_id: str


class DeferredActionQueue:
    """FIFO of tile loads, drained once when the readiness gate opens."""

    def __init__(
        self,
        gate: ReadinessGate,
        execute: Callable[[int, str], None],
    ) -> None:
        self._gate = gate
        self._execute = execute
        self._jobs: deque[PendingJob] = deque()
        gate.on_ready(self._drain)

    def __len__(self) -> int:
        return len(self._jobs)

    @property
    def pending(self) -> tuple[PendingJob, ...]:
        return tuple(self._jobs)

    def submit(self, tile_index: int, video_id: str) -> bool:
        """Run the load now when the gate is open, else queue it.

        Returns True when the job was queued.
        """
        if self._gate.ready:
            self._execute(tile_index, video_id)
            return False
        self._jobs.append(PendingJob(tile_index, video_id))
        logger.debug(
            "Queued tile=%s video=%s (pending=%d)",
            tile_index,
            video_id,
            len(self._jobs),
        )
        return True

    def _drain(self) -> None:
        if self._jobs:
            logger.info("Draining %d pending tile loads", len(self._jobs))
        while self._jobs:
            job = self._jobs.popleft()
            self._execute(job.tile_index, job.video_id)
