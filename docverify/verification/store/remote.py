"""Read-only client for the authoritative remote document service.

The service exposes one document per hash:

    GET {base_url}/{collection}/{hash}
      200 -> JSON record (see models.DocumentRecord wire format)
      404 -> no such document
      other -> fault

Expiry is a read-time check only. This service does not own the remote
lifecycle, so expired remote records are never deleted.

Network timeouts are configured on the HTTP client; the resolution layer
imposes none of its own.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from ..api_models import ErrorCode
from ..clock import Clock, SystemClock
from ..exceptions import DocumentStoreError, RecordDecodeError, RemoteFetchError
from ..models import DocumentRecord, Expired, Found, NotFound, Outcome, StoreError

log = logging.getLogger(__name__)


class RemoteStore:
    """Async keyed lookup against the remote document service.

    is_available() is False until connect() has completed successfully,
    and again after close().
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        collection: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        clock: Optional[Clock] = None,
    ):
        from docverify.core.config import (
            REMOTE_COLLECTION,
            REMOTE_STORE_URL,
            REMOTE_TIMEOUT_SECONDS,
        )

        self._base_url = (base_url if base_url is not None else REMOTE_STORE_URL).rstrip("/")
        self._collection = collection or REMOTE_COLLECTION
        self._timeout = timeout_seconds if timeout_seconds is not None else REMOTE_TIMEOUT_SECONDS
        self._clock = clock or SystemClock()
        self._client: Optional[httpx.AsyncClient] = None

    async def connect(self) -> bool:
        """Initialize the HTTP client.

        Returns:
            True if the store is now available.
        """
        if self._client is not None:
            return True
        if not self._base_url:
            log.warning("Remote document store not configured (DOCVERIFY_REMOTE_URL unset)")
            return False

        try:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers={"Accept": "application/json"},
            )
        except (httpx.HTTPError, ValueError, TypeError) as e:
            log.error(f"Remote document store initialization failed: {e}")
            self._client = None
            return False

        log.info(f"Remote document store initialized: {self._base_url}/{self._collection}")
        return True

    def is_available(self) -> bool:
        return self._client is not None

    async def close(self) -> None:
        if self._client is not None:
            client, self._client = self._client, None
            await client.aclose()
            log.info("Remote document store closed")

    async def get(self, doc_hash: str) -> Outcome:
        """Fetch a document by hash.

        Returns:
            Found(record); NotFound when the service has no such key;
            Expired when the record's expiresAt has passed; StoreError for
            any connectivity, permission or deserialization fault.
        """
        if not self.is_available():
            return StoreError(
                "Database connection not available",
                code=ErrorCode.REMOTE_UNAVAILABLE,
            )

        try:
            data = await self._fetch(doc_hash)
            if data is None:
                log.debug(f"Remote document not found: {doc_hash[:16]}...")
                return NotFound()
            record = DocumentRecord.from_dict(data)
            if record.hash != doc_hash:
                raise RecordDecodeError(
                    f"Remote store returned {record.hash[:16]}... for {doc_hash[:16]}..."
                )
            if record.expires_at is None:
                raise RecordDecodeError(f"Record {doc_hash} missing expiresAt")
        except DocumentStoreError as e:
            log.error(f"Error fetching document {doc_hash[:16]}... from remote store: {e.message}")
            return StoreError(f"Error retrieving document: {e.message}", code=e.code)

        if record.is_expired(self._clock.now()):
            log.info(f"Remote document expired: {doc_hash[:16]}... (expires_at={record.expires_at.isoformat()})")
            return Expired(expires_at=record.expires_at)

        return Found(record)

    async def _fetch(self, doc_hash: str) -> Optional[Dict[str, Any]]:
        """GET the raw record.

        Returns:
            Parsed JSON body, or None on 404.

        Raises:
            RemoteFetchError: On network/timeout/HTTP errors.
            RecordDecodeError: If the body is not JSON.
        """
        path = f"/{self._collection}/{quote(doc_hash, safe='')}"
        try:
            response = await self._client.get(path)
            if response.status_code == 404:
                return None
            response.raise_for_status()
            return response.json()

        except httpx.TimeoutException:
            raise RemoteFetchError(f"Timeout after {self._timeout}s fetching {path}")
        except httpx.HTTPStatusError as e:
            raise RemoteFetchError(
                f"HTTP {e.response.status_code}: {e.response.reason_phrase}"
            )
        except httpx.RequestError as e:
            raise RemoteFetchError(f"Request failed: {e}")
        except ValueError as e:
            raise RecordDecodeError(f"Invalid JSON from remote store: {e}")
