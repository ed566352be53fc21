"""In-memory store for completed analyses with time-based expiry.

Every entry carries an absolute deadline. Reads check the deadline lazily, and
a single background task pops due deadlines off a min-heap so expired audio
does not linger in memory until someone asks for it. There is no capacity
bound: memory grows with the number of analyses completed inside one
retention window.
"""

from __future__ import annotations

import asyncio
import heapq
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

from speechcoach.domain.models import ResultRecord
from speechcoach.telemetry import set_result_store_size

logger = logging.getLogger(__name__)


class ResultNotFoundError(LookupError):
    """Raised when an analysis id is unknown or its entry has expired."""

    def __init__(self, analysis_id: str) -> None:
        super().__init__(f"Analysis '{analysis_id}' not found")
        self.analysis_id = analysis_id


@dataclass(slots=True)
class _Entry:
    record: ResultRecord
    expires_at: float


class ResultStore:
    """Map of analysis ids to result records, each with its own deadline."""

    def __init__(
        self,
        *,
        sweep_interval: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: dict[str, _Entry] = {}
        self._deadlines: list[tuple[float, str]] = []
        self._lock = threading.Lock()
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._sweeper: asyncio.Task[None] | None = None

    def __len__(self) -> int:
        now = self._clock()
        with self._lock:
            return sum(1 for entry in self._entries.values() if entry.expires_at > now)

    def put(self, analysis_id: str, record: ResultRecord, ttl: float) -> None:
        """Insert a record that expires ``ttl`` seconds from now."""

        if ttl <= 0:
            raise ValueError("ttl must be positive")
        now = self._clock()
        expires_at = now + ttl
        with self._lock:
            existing = self._entries.get(analysis_id)
            if existing is not None and existing.expires_at > now:
                raise ValueError(f"Analysis '{analysis_id}' is already stored")
            self._entries[analysis_id] = _Entry(record=record, expires_at=expires_at)
            heapq.heappush(self._deadlines, (expires_at, analysis_id))
            size = len(self._entries)
        set_result_store_size(size)
        logger.debug("Stored analysis %s (ttl=%ss)", analysis_id, ttl)

    def get(self, analysis_id: str) -> ResultRecord:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(analysis_id)
            if entry is None:
                raise ResultNotFoundError(analysis_id)
            if entry.expires_at > now:
                return entry.record
            del self._entries[analysis_id]
            size = len(self._entries)
        set_result_store_size(size)
        logger.info("Cleaned up analysis %s", analysis_id)
        raise ResultNotFoundError(analysis_id)

    def get_audio(self, analysis_id: str) -> bytes:
        record = self.get(analysis_id)
        if not record.audio:
            raise ResultNotFoundError(analysis_id)
        return record.audio

    def remove(self, analysis_id: str) -> None:
        """Drop an entry; unknown ids are ignored."""

        with self._lock:
            removed = self._entries.pop(analysis_id, None)
            size = len(self._entries)
        if removed is not None:
            set_result_store_size(size)
            logger.info("Cleaned up analysis %s", analysis_id)

    def purge_expired(self) -> int:
        """Delete every entry whose deadline has passed; return how many."""

        now = self._clock()
        purged: list[str] = []
        with self._lock:
            while self._deadlines and self._deadlines[0][0] <= now:
                expires_at, analysis_id = heapq.heappop(self._deadlines)
                entry = self._entries.get(analysis_id)
                # Stale heap items belong to entries already removed or replaced.
                if entry is not None and entry.expires_at == expires_at:
                    del self._entries[analysis_id]
                    purged.append(analysis_id)
            size = len(self._entries)
        set_result_store_size(size)
        for analysis_id in purged:
            logger.info("Cleaned up analysis %s", analysis_id)
        return len(purged)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._deadlines.clear()
        set_result_store_size(0)

    async def start(self) -> None:
        """Start the background expiry sweeper on the running loop."""

        if self._sweeper is not None and not self._sweeper.done():
            return
        self._sweeper = asyncio.create_task(self._sweep_forever(), name="result-store-sweeper")

    async def close(self) -> None:
        """Cancel the sweeper and drop all stored results."""

        sweeper, self._sweeper = self._sweeper, None
        if sweeper is not None:
            sweeper.cancel()
            try:
                await sweeper
            except asyncio.CancelledError:
                pass
        self.clear()

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            try:
                self.purge_expired()
            except Exception:  # pragma: no cover - keep the sweeper alive
                logger.exception("Result store sweep failed")


__all__ = ["ResultNotFoundError", "ResultStore"]
