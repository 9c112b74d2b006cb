"""Time-bounded cache of chart repository entries."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

from chart_fetcher.core.metadata_store import MetadataStore
from chart_fetcher.models import RepositoryEntry

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass(frozen=True)
class CacheRecord:
    entry: RepositoryEntry
    expires_at: float

    def expired(self, now: float) -> bool:
        return now >= self.expires_at


class RepositoryMetadataCache:
    """Lazily populated repository lookups with expiry and periodic eviction.

    A record is never returned once its expiry time has passed; expired
    records are physically removed by delete_expired(), which the optional
    janitor thread runs every ``cleanup_interval`` seconds. Failed lookups
    are never cached.
    """

    def __init__(
        self,
        store: MetadataStore,
        expiry: float = 5 * 60,
        cleanup_interval: float = 10 * 60,
        clock: Clock = time.monotonic,
    ):
        self.store = store
        self.expiry = expiry
        self.cleanup_interval = cleanup_interval
        self.clock = clock
        self._records: dict[tuple[str, str], CacheRecord] = {}
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._janitor: threading.Thread | None = None

    def lookup(self, name: str, namespace: str) -> RepositoryEntry:
        """Return the repository entry, consulting the metadata store on a miss."""
        key = (namespace, name)
        with self._lock:
            record = self._records.get(key)
        if record is not None and not record.expired(self.clock()):
            logger.debug("Repository cache hit for %s/%s", namespace, name)
            return record.entry

        logger.debug("Repository cache miss for %s/%s", namespace, name)
        entry = self.store.get_repository_entry(name, namespace)
        with self._lock:
            self._records[key] = CacheRecord(entry=entry, expires_at=self.clock() + self.expiry)
        return entry

    def delete_expired(self) -> int:
        """Remove expired records, returning how many were dropped."""
        now = self.clock()
        with self._lock:
            stale = [key for key, record in self._records.items() if record.expired(now)]
            for key in stale:
                del self._records[key]
        if stale:
            logger.debug("Evicted %d expired repository entries", len(stale))
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def start_janitor(self) -> None:
        """Start the background eviction sweep (no-op if already running)."""
        if self._janitor is not None or self.cleanup_interval <= 0:
            return
        self._stop.clear()
        self._janitor = threading.Thread(
            target=self._run_janitor, name="repo-cache-janitor", daemon=True,
        )
        self._janitor.start()

    def stop_janitor(self) -> None:
        if self._janitor is None:
            return
        self._stop.set()
        self._janitor.join()
        self._janitor = None

    def _run_janitor(self) -> None:
        while not self._stop.wait(self.cleanup_interval):
            self.delete_expired()
