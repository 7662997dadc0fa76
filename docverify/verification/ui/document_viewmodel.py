"""Document view-model adapter.

Normalizes a verified DocumentRecord into the display fields the rendering
layer shows next to the document: a shortened hash, a human-readable issue
date, and a ledger explorer link for the transaction.
"""

from datetime import datetime, timezone
from typing import Optional

from docverify.core.config import EXPLORER_TX_URL
from docverify.verification.api_models import DocumentDisplay, DocumentModel
from docverify.verification.models import DocumentRecord

DATA_URL_PREFIX = "data:"


def truncate_hash(value: str, length: int = 16) -> str:
    """Shorten a hash to head...tail for display.

    Keeps length/2 characters from each end; values no longer than length
    are returned unchanged.
    """
    if len(value) <= length:
        return value
    half = length // 2
    return f"{value[:half]}...{value[-half:]}"


def _format_date(dt: datetime) -> str:
    """Format a timestamp like "November 05, 2026 at 02:30 PM UTC"."""
    return dt.astimezone(timezone.utc).strftime("%B %d, %Y at %I:%M %p UTC")


def explorer_url(transaction_id: Optional[str]) -> Optional[str]:
    """Ledger explorer link for a transaction, or None without one."""
    if not transaction_id:
        return None
    return EXPLORER_TX_URL.format(tx=transaction_id)


def build_document_display(record: DocumentRecord) -> DocumentDisplay:
    """Build display helpers for a verified document."""
    return DocumentDisplay(
        short_hash=truncate_hash(record.hash),
        issued_at=_format_date(record.timestamp),
        explorer_url=explorer_url(record.transaction_id),
        payload_kind="data_url" if record.payload.startswith(DATA_URL_PREFIX) else "url",
    )


def build_document_model(record: DocumentRecord) -> DocumentModel:
    """Convert a record to its API model."""
    return DocumentModel(
        hash=record.hash,
        transaction_id=record.transaction_id,
        timestamp=record.timestamp,
        issuer=record.issuer,
        payload=record.payload,
        metadata=record.metadata,
        is_verified=record.is_verified,
        expires_at=record.expires_at,
    )
