"""Physical key-value backends for the local document cache.

The local cache only needs string-keyed get/set/delete. Capacity is never
enforced here (beyond an optional byte quota on the in-memory backend);
eviction policy belongs to LocalCache.

Backends:
- InMemoryBackend: process-local dict, used by tests and "memory://"
- SqlAlchemyBackend: single key/value table in any SQLAlchemy database.
  SQLite uses StaticPool for a single shared connection.

Every backend failure is raised as LocalStoreError.
"""

import logging
from typing import Dict, Optional, Protocol

from sqlalchemy import String, Text, create_engine, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

from ..exceptions import LocalStoreError

log = logging.getLogger(__name__)

MEMORY_URL = "memory://"


class KeyValueBackend(Protocol):
    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...
    def delete(self, key: str) -> None: ...
    def close(self) -> None: ...


class InMemoryBackend:
    """Dict-backed store with an optional total size quota.

    Args:
        quota_bytes: When set, a write that would push the summed length of
            all values past this many bytes fails with LocalStoreError.
    """

    def __init__(self, quota_bytes: Optional[int] = None):
        self._data: Dict[str, str] = {}
        self._quota = quota_bytes

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self._quota is not None:
            used = sum(len(v) for k, v in self._data.items() if k != key)
            if used + len(value) > self._quota:
                raise LocalStoreError(
                    f"Quota exceeded: writing {len(value)} bytes to {key} "
                    f"would exceed {self._quota} bytes"
                )
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def close(self) -> None:
        return


class Base(DeclarativeBase):
    """Base class for local store models."""

    pass


class KeyValueEntry(Base):
    __tablename__ = "docverify_kv"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)


class SqlAlchemyBackend:
    """Key-value table in a relational database.

    Each operation runs in its own short session and commits immediately,
    so a failed write leaves no partial state behind.
    """

    def __init__(self, url: str):
        if url.startswith("sqlite"):
            from sqlalchemy.pool import StaticPool

            engine_kwargs = {
                "echo": False,
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            }
        else:
            engine_kwargs = {"echo": False, "pool_pre_ping": True}

        try:
            self._engine = create_engine(url, **engine_kwargs)
            Base.metadata.create_all(bind=self._engine)
        except SQLAlchemyError as e:
            raise LocalStoreError(f"Cannot open local store {url}: {e}")

        self._session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self._engine,
        )
        log.info(f"Local document store opened: {self._engine.url.render_as_string(hide_password=True)}")

    def get(self, key: str) -> Optional[str]:
        try:
            with self._session_factory() as session:
                return session.scalar(
                    select(KeyValueEntry.value).where(KeyValueEntry.key == key)
                )
        except SQLAlchemyError as e:
            raise LocalStoreError(f"Read failed for {key}: {e}")

    def set(self, key: str, value: str) -> None:
        try:
            with self._session_factory() as session:
                session.merge(KeyValueEntry(key=key, value=value))
                session.commit()
        except SQLAlchemyError as e:
            raise LocalStoreError(f"Write failed for {key}: {e}")

    def delete(self, key: str) -> None:
        try:
            with self._session_factory() as session:
                session.execute(delete(KeyValueEntry).where(KeyValueEntry.key == key))
                session.commit()
        except SQLAlchemyError as e:
            raise LocalStoreError(f"Delete failed for {key}: {e}")

    def close(self) -> None:
        self._engine.dispose()


def load_backend(url: str) -> KeyValueBackend:
    """Select the physical backend for a store URL.

    "memory://" selects InMemoryBackend; anything else is a SQLAlchemy URL.
    """
    if url == MEMORY_URL:
        return InMemoryBackend()
    return SqlAlchemyBackend(url)
