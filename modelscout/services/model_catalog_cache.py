"""
In-Memory Catalog Cache

Holds normalized catalogs keyed by request variant
(free-only vs. all, authenticated vs. public), each entry with its own TTL.

Features:
- TTL-based expiration, evaluated on read with an injectable clock
- Expired entries are removed when read
- Thread-safe operations
- Source tagging ("api" or "fallback") for inspection

Usage:
    cache = CatalogCache()
    key = build_cache_key(free_only=True, has_api_key=False)

    cache.put(key, models)
    models = cache.get(key)  # None on miss or expiry
    entry = cache.get_entry(key)  # frozen CacheEntry with fetched_at, ttl, source
"""

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from threading import Lock

from modelscout.config import Config
from modelscout.schemas.models_catalog import CacheEntrySummary, CatalogModel, CatalogStatistics
from modelscout.services.prometheus_metrics import record_cache_operation

logger = logging.getLogger(__name__)

SOURCE_API = "api"
SOURCE_FALLBACK = "fallback"


def build_cache_key(free_only: bool, has_api_key: bool) -> str:
    """
    Examples:
        >>> build_cache_key(True, False)
        'models_free_public'
        >>> build_cache_key(False, True)
        'models_all_auth'
    """
    return f"models_{'free' if free_only else 'all'}_{'auth' if has_api_key else 'public'}"


@dataclass(frozen=True)
class CacheEntry:
    """One cached catalog. Expired once `ttl` seconds have elapsed since `fetched_at`."""

    key: str
    models: tuple[CatalogModel, ...]
    fetched_at: float
    ttl: float
    source: str = SOURCE_API

    def is_expired(self, now: float) -> bool:
        return now - self.fetched_at >= self.ttl

    def summary(self, now: float) -> CacheEntrySummary:
        return CacheEntrySummary(
            key=self.key,
            count=len(self.models),
            free_count=sum(1 for model in self.models if model.pricing.is_free),
            age_seconds=max(0.0, now - self.fetched_at),
            ttl_seconds=self.ttl,
            expired=self.is_expired(now),
            source=self.source,
        )


class CatalogCache:
    """
    Thread-safe keyed store of normalized catalogs.

    A get never returns an expired entry: entries whose age has reached their
    TTL are removed and reported as a miss.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        default_ttl: float | None = None,
    ):
        self._clock = clock
        self.default_ttl = (
            default_ttl if default_ttl is not None else Config.CATALOG_CACHE_TTL_SECONDS
        )
        self._entries: dict[str, CacheEntry] = {}
        self._lock = Lock()

    def get_entry(self, key: str) -> CacheEntry | None:
        """
        Return the live CacheEntry for `key`, or None on miss or expiry.

        The entry is frozen; callers read fetched_at, ttl and source from it
        and take the catalog from `models`.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                record_cache_operation("get", "miss")
                return None

            if entry.is_expired(self._clock()):
                del self._entries[key]
                record_cache_operation("get", "expired")
                logger.debug(f"Catalog cache EXPIRED: {key}")
                return None

            record_cache_operation("get", "hit")
            logger.debug(f"Catalog cache HIT: {key} ({len(entry.models)} models, {entry.source})")
            return entry

    def get(self, key: str) -> list[CatalogModel] | None:
        """Return a copy of the cached catalog for `key`, or None on miss or expiry."""
        entry = self.get_entry(key)
        return list(entry.models) if entry is not None else None

    def put(
        self,
        key: str,
        models: Iterable[CatalogModel],
        ttl: float | None = None,
        source: str = SOURCE_API,
    ) -> None:
        """Store a catalog, replacing any entry under the same key."""
        ttl = ttl if ttl is not None else self.default_ttl
        entry = CacheEntry(
            key=key,
            models=tuple(models),
            fetched_at=self._clock(),
            ttl=ttl,
            source=source,
        )
        with self._lock:
            self._entries[key] = entry
        record_cache_operation("put", source)
        logger.debug(f"Catalog cache SET: {key} ({len(entry.models)} models, ttl={ttl}s, {source})")

    def invalidate(self, key: str) -> bool:
        with self._lock:
            removed = self._entries.pop(key, None) is not None
        if removed:
            record_cache_operation("invalidate", "removed")
        return removed

    def invalidate_all(self) -> int:
        """Clear every entry. Returns the number of entries removed."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        record_cache_operation("invalidate_all", "cleared")
        logger.info(f"Catalog cache CLEARED: {count} entries removed")
        return count

    def entries(self) -> list[CacheEntrySummary]:
        """Summaries of every stored entry, expired ones included."""
        now = self._clock()
        with self._lock:
            snapshot = list(self._entries.values())
        return [entry.summary(now) for entry in snapshot]

    def stats(self) -> CatalogStatistics:
        """
        Aggregate statistics over the stored entries.

        last_updated is the most recent fetch time across entries, or None
        when the cache is empty.
        """
        now = self._clock()
        with self._lock:
            snapshot = list(self._entries.values())
        summaries = [entry.summary(now) for entry in snapshot]
        fetched = [entry.fetched_at for entry in snapshot]

        return CatalogStatistics(
            entry_count=len(summaries),
            total_models=sum(summary.count for summary in summaries),
            total_free_models=sum(summary.free_count for summary in summaries),
            last_updated=(
                datetime.fromtimestamp(max(fetched), tz=timezone.utc) if fetched else None
            ),
            entries=summaries,
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
