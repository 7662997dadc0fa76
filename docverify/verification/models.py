"""Data models for verification documents and lookup results.

DocumentRecord is the single entity held by both stores. Lookups return an
Outcome (Found | NotFound | Expired | StoreError); the orchestrator re-tags
it into a VerificationResult (Idle | Loading | Verified | Tampered |
NotAvailable). Both are closed unions of frozen dataclasses and every
consumer matches them exhaustively.

Wire format (remote service and local persistence) uses the camelCase keys
of the issuing application:

    {
      "documentHash": "...", "transactionId": "...", "timestamp": "...",
      "walletAddress": "...", "pdfDataUrl": "...", "metadata": {...},
      "isVerified": true, "expiresAt": "2026-11-15T10:00:00+00:00"
    }
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any, ClassVar, Dict, Optional, Union

from .api_models import ErrorCode, VerificationState
from .exceptions import RecordDecodeError


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 string or epoch milliseconds into an aware datetime.

    A trailing 'Z' is accepted and naive values are read as UTC.

    Raises:
        RecordDecodeError: If the value is not a recognizable timestamp.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, bool):
        raise RecordDecodeError(f"Invalid timestamp: {value!r}")
    elif isinstance(value, (int, float)):
        # Issuing clients written in JS send Date.now() milliseconds
        try:
            dt = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise RecordDecodeError(f"Invalid timestamp: {value!r}")
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            raise RecordDecodeError(f"Invalid timestamp: {value!r}")
    else:
        raise RecordDecodeError(f"Invalid timestamp: {value!r}")

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_timestamp(dt: datetime) -> str:
    """Format an aware datetime as ISO-8601 in UTC."""
    return dt.astimezone(timezone.utc).isoformat()


# =============================================================================
# DocumentRecord
# =============================================================================


@dataclass(frozen=True)
class DocumentRecord:
    """A previously issued document, as held by either store.

    Attributes:
        hash: Content-derived identifier; primary key in both stores.
        timestamp: Creation time of the original document.
        issuer: Attestation identity (signing wallet/account).
        payload: Opaque reference to the rendered document (data URL or URL).
        transaction_id: External ledger reference, if any.
        metadata: Free-form descriptive fields, passed through unmodified.
        is_verified: Attestation flag carried by issued documents.
        expires_at: Absolute expiry, stamped once when written to a store.
    """

    hash: str
    timestamp: datetime
    issuer: str
    payload: str
    transaction_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    is_verified: bool = True
    expires_at: Optional[datetime] = None

    def stamped(self, now: datetime, ttl: timedelta) -> "DocumentRecord":
        """Return a copy whose expiry is now + ttl."""
        return replace(self, expires_at=now + ttl)

    def is_expired(self, now: datetime) -> bool:
        """True once now has reached expires_at.

        A record that was never stamped has no lifetime bound.
        """
        return self.expires_at is not None and now >= self.expires_at

    def with_transaction_id(self, transaction_id: Optional[str]) -> "DocumentRecord":
        """Fill in a transaction id when the record lacks one."""
        if self.transaction_id or not transaction_id:
            return self
        return replace(self, transaction_id=transaction_id)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase wire/persistence form."""
        return {
            "documentHash": self.hash,
            "transactionId": self.transaction_id,
            "timestamp": format_timestamp(self.timestamp),
            "walletAddress": self.issuer,
            "pdfDataUrl": self.payload,
            "metadata": self.metadata,
            "isVerified": self.is_verified,
            "expiresAt": format_timestamp(self.expires_at) if self.expires_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DocumentRecord":
        """Build a record from its wire/persistence form.

        Raises:
            RecordDecodeError: If required fields are missing or malformed.
        """
        if not isinstance(data, dict):
            raise RecordDecodeError(f"Expected JSON object, got {type(data).__name__}")

        doc_hash = data.get("documentHash")
        if not isinstance(doc_hash, str) or not doc_hash:
            raise RecordDecodeError("Record missing documentHash")
        if "timestamp" not in data:
            raise RecordDecodeError(f"Record {doc_hash} missing timestamp")

        metadata = data.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise RecordDecodeError(f"Record {doc_hash} metadata is not an object")

        expires_raw = data.get("expiresAt")
        return cls(
            hash=doc_hash,
            transaction_id=data.get("transactionId") or None,
            timestamp=parse_timestamp(data["timestamp"]),
            issuer=data.get("walletAddress") or "",
            payload=data.get("pdfDataUrl") or "",
            metadata=metadata,
            is_verified=bool(data.get("isVerified", True)),
            expires_at=parse_timestamp(expires_raw) if expires_raw is not None else None,
        )


# =============================================================================
# Outcome (result of a single store lookup)
# =============================================================================


@dataclass(frozen=True)
class Found:
    record: DocumentRecord


@dataclass(frozen=True)
class NotFound:
    pass


@dataclass(frozen=True)
class Expired:
    expires_at: Optional[datetime] = None


@dataclass(frozen=True)
class StoreError:
    detail: str
    code: str = ErrorCode.INTERNAL_ERROR


Outcome = Union[Found, NotFound, Expired, StoreError]


# =============================================================================
# VerificationResult (user-facing classification)
# =============================================================================


@dataclass(frozen=True)
class Idle:
    state: ClassVar[VerificationState] = VerificationState.IDLE


@dataclass(frozen=True)
class Loading:
    state: ClassVar[VerificationState] = VerificationState.LOADING


@dataclass(frozen=True)
class Verified:
    record: DocumentRecord
    state: ClassVar[VerificationState] = VerificationState.VERIFIED


@dataclass(frozen=True)
class Tampered:
    state: ClassVar[VerificationState] = VerificationState.TAMPERED


@dataclass(frozen=True)
class NotAvailable:
    message: str
    state: ClassVar[VerificationState] = VerificationState.NOT_AVAILABLE


VerificationResult = Union[Idle, Loading, Verified, Tampered, NotAvailable]

TERMINAL_STATES = frozenset({
    VerificationState.VERIFIED,
    VerificationState.TAMPERED,
    VerificationState.NOT_AVAILABLE,
})
