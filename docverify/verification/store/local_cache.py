"""Bounded, TTL-expiring local document cache.

The local cache is the only store guaranteed to hold a document immediately
after it is produced, before any remote write confirms. It keeps:

- One entry per document: STORAGE_PREFIX + hash -> JSON record with expiresAt
- One index entry: INDEX_KEY -> JSON list of hashes in insertion order

Design decisions:
- expiresAt is stamped on every put as now + TTL and never recomputed
- Eviction is FIFO by insertion order; reads never reorder the index
- get() lazily deletes an expired record (the index entry is left for
  sweep_expired() to prune)
- Every backend or serialization fault is converted to a StoreError outcome
  at the method boundary; no exception escapes to callers

All operations are synchronous. The cache has a single logical writer, so no
locking is used; callers must not mutate the backend directly.
"""

import json
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, List, Optional

from ..api_models import ErrorCode
from ..clock import Clock, SystemClock
from ..exceptions import DocumentStoreError, LocalStoreError, RecordDecodeError
from ..models import DocumentRecord, Expired, Found, NotFound, Outcome, StoreError
from .backend import KeyValueBackend

log = logging.getLogger(__name__)


@dataclass
class CacheMetrics:
    """Metrics for local cache operations.

    Attributes:
        hits: Lookups that returned Found.
        misses: Lookups with no physical record.
        expirations: Lookups that found an expired record (and deleted it).
        evictions: Records removed by the capacity bound.
        write_failures: put() calls that ended in StoreError.
    """

    hits: int = 0
    misses: int = 0
    expirations: int = 0
    evictions: int = 0
    write_failures: int = 0

    def hit_rate(self) -> float:
        """Calculate cache hit rate.

        Returns:
            Hit rate as float (0.0 to 1.0), or 0.0 if no requests.
        """
        total = self.hits + self.misses + self.expirations
        return self.hits / total if total > 0 else 0.0

    def to_dict(self) -> Dict[str, any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "expirations": self.expirations,
            "evictions": self.evictions,
            "write_failures": self.write_failures,
            "hit_rate": round(self.hit_rate(), 4),
        }

    def reset(self) -> None:
        """Reset all metrics to zero."""
        self.hits = 0
        self.misses = 0
        self.expirations = 0
        self.evictions = 0
        self.write_failures = 0


class LocalCache:
    """FIFO-bounded document cache over a string key-value backend."""

    def __init__(
        self,
        backend: KeyValueBackend,
        clock: Optional[Clock] = None,
        ttl: Optional[timedelta] = None,
        max_documents: Optional[int] = None,
        storage_prefix: Optional[str] = None,
        index_key: Optional[str] = None,
    ):
        """Initialize cache with configuration.

        Args:
            backend: Physical key-value store.
            clock: Time source for stamping and expiry checks.
            ttl: Record lifetime (default DOCUMENT_TTL_DAYS).
            max_documents: Capacity before FIFO eviction (default MAX_DOCUMENTS).
            storage_prefix: Namespace for record keys.
            index_key: Key of the insertion-order index.
        """
        from docverify.core.config import (
            DOCUMENT_TTL_DAYS,
            INDEX_KEY,
            MAX_DOCUMENTS,
            STORAGE_PREFIX,
        )

        self._backend = backend
        self._clock = clock or SystemClock()
        self._ttl = ttl if ttl is not None else timedelta(days=DOCUMENT_TTL_DAYS)
        self._max_documents = max_documents if max_documents is not None else MAX_DOCUMENTS
        self._prefix = storage_prefix if storage_prefix is not None else STORAGE_PREFIX
        self._index_key = index_key or INDEX_KEY
        self._metrics = CacheMetrics()

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    def put(self, record: DocumentRecord) -> Optional[StoreError]:
        """Store a record, stamping its expiry, then enforce the capacity bound.

        The record is written first; the index is updated only if that write
        succeeded. If the index update fails, the record write is undone so
        the two never diverge. Overwriting an existing hash keeps its
        position in the index.

        Returns:
            None on success, StoreError if the record could not be stored.
        """
        stamped = record.stamped(self._clock.now(), self._ttl)
        key = self._record_key(stamped.hash)

        try:
            encoded = json.dumps(stamped.to_dict(), ensure_ascii=False)
        except (TypeError, ValueError) as e:
            self._metrics.write_failures += 1
            log.error(f"Cannot serialize document {stamped.hash[:16]}...: {e}")
            return StoreError(
                f"Document could not be serialized: {e}",
                code=ErrorCode.RECORD_DECODE_FAILED,
            )

        try:
            previous = self._backend.get(key)
            self._backend.set(key, encoded)
        except DocumentStoreError as e:
            self._metrics.write_failures += 1
            log.error(f"Error storing document {stamped.hash[:16]}...: {e.message}")
            return StoreError(e.message, code=e.code)

        try:
            index = self._load_index()
            if stamped.hash not in index:
                index.append(stamped.hash)
            index = self._evict_overflow(index)
            self._save_index(index)
        except DocumentStoreError as e:
            self._metrics.write_failures += 1
            log.error(f"Error updating document index for {stamped.hash[:16]}...: {e.message}")
            self._undo_write(key, previous)
            return StoreError(e.message, code=e.code)

        log.debug(
            f"Document cached: {stamped.hash[:16]}... "
            f"(expires_at={stamped.expires_at.isoformat()}, size={len(index)})"
        )
        return None

    def get(self, doc_hash: str) -> Outcome:
        """Look up a record by hash.

        Mutation contract: when the stored record has expired, its physical
        entry is deleted before Expired is returned, so a following get()
        returns NotFound. The index entry is left in place.

        Returns:
            Found(record), NotFound, Expired, or StoreError on a read or
            decode fault.
        """
        key = self._record_key(doc_hash)
        try:
            raw = self._backend.get(key)
        except DocumentStoreError as e:
            log.error(f"Error retrieving document {doc_hash[:16]}...: {e.message}")
            return StoreError(e.message, code=e.code)

        if raw is None:
            self._metrics.misses += 1
            log.debug(f"Local cache miss: {doc_hash[:16]}...")
            return NotFound()

        try:
            record = self._decode(raw)
        except DocumentStoreError as e:
            log.error(f"Corrupt local record {doc_hash[:16]}...: {e.message}")
            return StoreError(e.message, code=e.code)

        if record.is_expired(self._clock.now()):
            self._delete_quietly(key)
            self._metrics.expirations += 1
            log.info(f"Local document expired: {doc_hash[:16]}... (expires_at={record.expires_at.isoformat()})")
            return Expired(expires_at=record.expires_at)

        self._metrics.hits += 1
        log.debug(f"Local cache hit: {doc_hash[:16]}...")
        return Found(record)

    def sweep_expired(self) -> None:
        """Prune expired and unresolvable entries from the index.

        Calls get() on every indexed hash (deleting expired records as a
        side effect) and rewrites the index with the hashes that still
        resolve. Safe to call repeatedly.
        """
        try:
            index = self._load_index()
        except DocumentStoreError as e:
            log.error(f"Error cleaning up expired documents: {e.message}")
            return

        valid = [h for h in index if isinstance(self.get(h), Found)]

        try:
            self._save_index(valid)
        except DocumentStoreError as e:
            log.error(f"Error cleaning up expired documents: {e.message}")
            return

        removed = len(index) - len(valid)
        if removed:
            log.info(f"Local cache sweep removed {removed} entries ({len(valid)} remain)")

    def hashes(self) -> List[str]:
        """Indexed hashes in insertion order (oldest first).

        Returns an empty list if the index cannot be read.
        """
        try:
            return self._load_index()
        except DocumentStoreError as e:
            log.warning(f"Cannot read document index: {e.message}")
            return []

    @property
    def size(self) -> int:
        """Current number of indexed documents."""
        return len(self.hashes())

    @property
    def max_documents(self) -> int:
        return self._max_documents

    def metrics(self) -> CacheMetrics:
        """Get cache metrics.

        Returns:
            CacheMetrics instance with current statistics.
        """
        return self._metrics

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _record_key(self, doc_hash: str) -> str:
        return f"{self._prefix}{doc_hash}"

    def _decode(self, raw: str) -> DocumentRecord:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise RecordDecodeError(f"Invalid JSON in stored record: {e}")
        return DocumentRecord.from_dict(data)

    def _load_index(self) -> List[str]:
        raw = self._backend.get(self._index_key)
        if raw is None:
            return []
        try:
            index = json.loads(raw)
        except json.JSONDecodeError as e:
            raise RecordDecodeError(f"Invalid JSON in document index: {e}")
        if not isinstance(index, list) or not all(isinstance(h, str) for h in index):
            raise RecordDecodeError("Document index is not a list of hashes")
        return index

    def _save_index(self, index: List[str]) -> None:
        self._backend.set(self._index_key, json.dumps(index))

    def _evict_overflow(self, index: List[str]) -> List[str]:
        """Drop the oldest entries beyond capacity and delete their records.

        A failed delete is logged and does not stop the remaining evictions.
        """
        overflow = len(index) - self._max_documents
        if overflow <= 0:
            return index

        evicted, kept = index[:overflow], index[overflow:]
        for old_hash in evicted:
            self._delete_quietly(self._record_key(old_hash))
            self._metrics.evictions += 1
            log.debug(f"Local cache FIFO eviction: {old_hash[:16]}...")
        return kept

    def _undo_write(self, key: str, previous: Optional[str]) -> None:
        """Put a record key back to its state before a failed put()."""
        if previous is None:
            self._delete_quietly(key)
            return
        try:
            self._backend.set(key, previous)
        except LocalStoreError as e:
            log.warning(f"Restoring previous record failed for {key}: {e.message}")

    def _delete_quietly(self, key: str) -> None:
        try:
            self._backend.delete(key)
        except LocalStoreError as e:
            log.warning(f"Best-effort delete failed for {key}: {e.message}")
