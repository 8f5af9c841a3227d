"""In-memory store for shared reports, keyed by content digest."""

import hashlib
import threading
import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import cast

from cachetools import TTLCache

from techscout_api.config import get_settings
from techscout_api.models import AnalysisRecord

SHARE_ID_LENGTH = 16


def compute_share_id(record: AnalysisRecord) -> str:
    """Digest a record into its share key.

    The key is the first 16 hex characters of the SHA-256 of the record's
    compact camelCase JSON without createdAt, so identical reports always
    share one key.
    """
    serialized = record.model_dump_json(by_alias=True, exclude_none=True, exclude={"created_at"})
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()[:SHARE_ID_LENGTH]


class ShareStore:
    """Thread-safe put-by-digest / get-by-digest store with TTL expiration."""

    def __init__(
        self,
        ttl_seconds: int | None = None,
        max_entries: int | None = None,
        timer: Callable[[], float] = time.monotonic,
    ):
        """Initialize the store.

        Args:
            ttl_seconds: How long a shared report stays retrievable. Defaults to config value.
            max_entries: Maximum number of stored reports. Defaults to config value.
            timer: Clock used for expiry, injectable for tests.
        """
        settings = get_settings()
        self._ttl = ttl_seconds if ttl_seconds is not None else settings.share_ttl_seconds
        self._max_entries = (
            max_entries if max_entries is not None else settings.max_shared_reports
        )
        self._cache: TTLCache[str, AnalysisRecord] = TTLCache(
            maxsize=self._max_entries,
            ttl=self._ttl,
            timer=timer,
        )
        self._lock = threading.Lock()

    def put(self, share_id: str, record: AnalysisRecord) -> None:
        """Store or replace the report under share_id."""
        with self._lock:
            self._cache[share_id] = record

    def share(self, record: AnalysisRecord) -> tuple[str, AnalysisRecord]:
        """Store a copy of record stamped with createdAt under its digest.

        Returns:
            The share id and the stored record.
        """
        share_id = compute_share_id(record)
        stored = record.model_copy(update={"created_at": datetime.now(timezone.utc)})
        self.put(share_id, stored)
        return share_id, stored

    def get(self, share_id: str) -> AnalysisRecord | None:
        """Get a shared report, returning None if unknown or expired."""
        with self._lock:
            result = self._cache.get(share_id)
            return cast(AnalysisRecord, result) if result is not None else None

    def count(self) -> int:
        """Get the number of stored reports."""
        with self._lock:
            return len(self._cache)

    def clear(self) -> None:
        """Remove all stored reports."""
        with self._lock:
            self._cache.clear()

    def get_stats(self) -> dict:
        """Get statistics about the store."""
        with self._lock:
            return {
                "shared_reports": len(self._cache),
                "max_entries": self._max_entries,
                "ttl_seconds": self._ttl,
            }


# Global share store instance
_share_store: ShareStore | None = None


def get_share_store() -> ShareStore:
    """Get the global share store instance."""
    global _share_store
    if _share_store is None:
        _share_store = ShareStore()
    return _share_store


def reset_share_store() -> None:
    """Reset the global share store (useful for testing)."""
    global _share_store
    _share_store = None
