"""
Document verifier configuration constants.

Constants are organized into:
- NORMATIVE: Fixed retention rules shared with the issuing application
- POLICY: Implementation choices that deployments may override
- OPERATIONAL: Deployment-specific settings (env vars)
"""

import os

# =============================================================================
# NORMATIVE CONSTANTS
# =============================================================================

# Documents expire 30 days after they are written into a store.
# The issuing application stamps remote records with the same rule, so
# changing this value only affects records written by this service.
DOCUMENT_TTL_DAYS: int = 30

# Key layout of the local persistent store.
# One entry per document keyed by STORAGE_PREFIX + hash, plus one index entry.
STORAGE_PREFIX: str = "docverify_doc_"
INDEX_KEY: str = "docverify_document_index"

# =============================================================================
# POLICY CONSTANTS
# =============================================================================

# Maximum documents retained in the local cache before FIFO eviction
MAX_DOCUMENTS: int = int(os.getenv("DOCVERIFY_MAX_DOCUMENTS", "50"))

# Remote document service request timeout.
# Enforced by the HTTP client, not by the resolution layer.
REMOTE_TIMEOUT_SECONDS: float = float(os.getenv("DOCVERIFY_REMOTE_TIMEOUT", "10.0"))

# =============================================================================
# OPERATIONAL SETTINGS (deployment-specific, via environment variables)
# =============================================================================

# Base URL of the authoritative document service.
# Empty disables the remote store; resolution then uses the local cache only.
REMOTE_STORE_URL: str = os.getenv("DOCVERIFY_REMOTE_URL", "").rstrip("/")

# Collection (path segment) holding verification documents on the remote service
REMOTE_COLLECTION: str = os.getenv("DOCVERIFY_REMOTE_COLLECTION", "verification_documents")

# Local persistent store.
# Any SQLAlchemy URL; "memory://" selects the process-local backend.
LOCAL_STORE_URL: str = os.getenv("DOCVERIFY_LOCAL_STORE_URL", "sqlite:///docverify_local.db")

# Ledger explorer link shown next to verified documents
EXPLORER_TX_URL: str = os.getenv(
    "DOCVERIFY_EXPLORER_TX_URL",
    "https://explorer.solana.com/tx/{tx}?cluster=devnet",
)

# Admin endpoint visibility
# Default: True for dev, set to False in production deployments
ADMIN_ENDPOINT_ENABLED: bool = os.getenv("ADMIN_ENDPOINT_ENABLED", "true").lower() == "true"
