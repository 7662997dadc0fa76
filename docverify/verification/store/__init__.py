"""Document stores: local FIFO/TTL cache and remote read-only service."""

from .backend import (
    InMemoryBackend,
    KeyValueBackend,
    SqlAlchemyBackend,
    load_backend,
)
from .local_cache import CacheMetrics, LocalCache
from .remote import RemoteStore

__all__ = [
    # Backends
    "KeyValueBackend",
    "InMemoryBackend",
    "SqlAlchemyBackend",
    "load_backend",
    # Stores
    "CacheMetrics",
    "LocalCache",
    "RemoteStore",
]
