"""Document resolution and verification.

Resolves a document hash against the remote document service and the local
cache, then classifies the result for the rendering layer.
"""

from .api_models import ErrorCode, VerificationState
from .clock import Clock, SystemClock
from .context import VerificationContext
from .exceptions import (
    DocumentStoreError,
    LocalStoreError,
    OrchestratorStateError,
    RecordDecodeError,
    RemoteFetchError,
)
from .models import (
    DocumentRecord,
    Expired,
    Found,
    Idle,
    Loading,
    NotAvailable,
    NotFound,
    Outcome,
    StoreError,
    Tampered,
    Verified,
    VerificationResult,
)
from .orchestrator import VerificationOrchestrator, classify_outcome
from .resolver import DocumentResolver
from .store import LocalCache, RemoteStore

__all__ = [
    # API enums
    "ErrorCode",
    "VerificationState",
    # Time
    "Clock",
    "SystemClock",
    # Exceptions
    "DocumentStoreError",
    "LocalStoreError",
    "OrchestratorStateError",
    "RecordDecodeError",
    "RemoteFetchError",
    # Models
    "DocumentRecord",
    "Outcome",
    "Found",
    "NotFound",
    "Expired",
    "StoreError",
    "VerificationResult",
    "Idle",
    "Loading",
    "Verified",
    "Tampered",
    "NotAvailable",
    # Core
    "LocalCache",
    "RemoteStore",
    "DocumentResolver",
    "VerificationContext",
    "VerificationOrchestrator",
    "classify_outcome",
]
