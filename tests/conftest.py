"""Root conftest for all tests - provides shared fixtures."""

import os

# Keep tests off disk and off the network
# (must be set before docverify.core.config is imported)
os.environ.setdefault("DOCVERIFY_LOCAL_STORE_URL", "memory://")
os.environ.setdefault("DOCVERIFY_LOG_FILE", "")
os.environ.setdefault("DOCVERIFY_REMOTE_URL", "")

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from docverify.verification.exceptions import LocalStoreError
from docverify.verification.models import DocumentRecord, Outcome, StoreError
from docverify.verification.store.backend import InMemoryBackend
from docverify.verification.store.local_cache import LocalCache


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime):
        self._now = start

    def now(self) -> datetime:
        return self._now

    def advance(self, **kwargs) -> None:
        self._now = self._now + timedelta(**kwargs)


class FlakyBackend(InMemoryBackend):
    """In-memory backend that fails on selected keys."""

    def __init__(self, fail_get=(), fail_set=(), fail_delete=()):
        super().__init__()
        self.fail_get = set(fail_get)
        self.fail_set = set(fail_set)
        self.fail_delete = set(fail_delete)

    def get(self, key):
        if key in self.fail_get:
            raise LocalStoreError(f"Simulated read failure for {key}")
        return super().get(key)

    def set(self, key, value):
        if key in self.fail_set:
            raise LocalStoreError(f"Simulated write failure for {key}")
        super().set(key, value)

    def delete(self, key):
        if key in self.fail_delete:
            raise LocalStoreError(f"Simulated delete failure for {key}")
        super().delete(key)


class StubRemoteStore:
    """Remote store double returning a fixed outcome and counting calls."""

    def __init__(self, outcome: Optional[Outcome] = None, available: bool = True):
        self.outcome = outcome or StoreError("not configured")
        self.available = available
        self.calls = []

    def is_available(self) -> bool:
        return self.available

    async def get(self, doc_hash: str) -> Outcome:
        self.calls.append(doc_hash)
        return self.outcome


START = datetime(2026, 10, 16, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return FakeClock(START)


@pytest.fixture
def backend():
    return InMemoryBackend()


@pytest.fixture
def local_cache(backend, clock):
    """LocalCache over a fresh in-memory backend, capacity 5."""
    return LocalCache(backend, clock=clock, max_documents=5)


@pytest.fixture
def make_record():
    """Factory for DocumentRecords with realistic defaults."""

    def _make(doc_hash: str = "abc123", **overrides) -> DocumentRecord:
        fields = {
            "hash": doc_hash,
            "timestamp": datetime(2026, 10, 1, 9, 30, tzinfo=timezone.utc),
            "issuer": "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU",
            "payload": "data:application/pdf;base64,JVBERi0xLjQK",
            "transaction_id": None,
            "metadata": {"reportType": "balance_sheet", "currency": "USD"},
        }
        fields.update(overrides)
        return DocumentRecord(**fields)

    return _make
