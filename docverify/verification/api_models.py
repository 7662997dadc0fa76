"""
Document verifier API models.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


# =============================================================================
# Verification State
# =============================================================================

class VerificationState(str, Enum):
    """States of a single verification attempt.

    IDLE and LOADING are transient; the other three are terminal.
    """
    IDLE = "IDLE"
    LOADING = "LOADING"
    VERIFIED = "VERIFIED"        # Record found and within its lifetime
    TAMPERED = "TAMPERED"        # Record expired or otherwise invalid
    NOT_AVAILABLE = "NOT_AVAILABLE"  # No record, no hash, or store failure


# =============================================================================
# Error Models
# =============================================================================

class ErrorCode:
    """Error code registry for store faults."""
    # Store layer
    LOCAL_STORE_FAILED = "LOCAL_STORE_FAILED"
    REMOTE_FETCH_FAILED = "REMOTE_FETCH_FAILED"
    REMOTE_UNAVAILABLE = "REMOTE_UNAVAILABLE"
    RECORD_DECODE_FAILED = "RECORD_DECODE_FAILED"

    # Catch-all
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Document Models
# =============================================================================

class DocumentModel(BaseModel):
    """Verified document as returned to the rendering layer."""
    hash: str
    transaction_id: Optional[str] = None
    timestamp: datetime
    issuer: str
    payload: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    is_verified: bool = True
    expires_at: Optional[datetime] = None


class DocumentDisplay(BaseModel):
    """Presentation helpers derived from a verified document."""
    short_hash: str
    issued_at: str
    explorer_url: Optional[str] = None
    payload_kind: str  # "data_url" | "url"


class VerificationResponse(BaseModel):
    """Response body for GET /verify."""
    request_id: str
    state: VerificationState
    message: Optional[str] = None
    document: Optional[DocumentModel] = None
    display: Optional[DocumentDisplay] = None


class StoreDocumentRequest(BaseModel):
    """Request body for POST /documents.

    expires_at is never accepted from the caller; the local cache stamps it.
    """
    hash: str = Field(min_length=1)
    transaction_id: Optional[str] = None
    timestamp: datetime
    issuer: str
    payload: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    is_verified: bool = True


class StoreDocumentResponse(BaseModel):
    hash: str
    expires_at: Optional[datetime] = None


class HealthResponse(BaseModel):
    ok: bool
    remote_available: bool
