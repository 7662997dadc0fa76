"""Document verifier FastAPI application."""

import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from docverify.logging_config import configure_logging
from docverify.verification import (
    DocumentRecord,
    Found,
    Idle,
    LocalCache,
    Loading,
    NotAvailable,
    RemoteStore,
    StoreError,
    Tampered,
    VerificationContext,
    VerificationOrchestrator,
    VerificationResult,
    Verified,
)
from docverify.verification.api_models import (
    HealthResponse,
    StoreDocumentRequest,
    StoreDocumentResponse,
    VerificationResponse,
)
from docverify.verification.models import parse_timestamp
from docverify.verification.store import load_backend
from docverify.verification.ui import build_document_display, build_document_model

configure_logging()
log = logging.getLogger("docverify")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open stores on startup and release them on shutdown."""
    from docverify.core.config import LOCAL_STORE_URL

    log.info("Starting document verifier...")
    backend = load_backend(LOCAL_STORE_URL)
    local = LocalCache(backend)
    # Drop anything that expired while the service was down
    local.sweep_expired()

    remote = RemoteStore()
    await remote.connect()

    app.state.local_cache = local
    app.state.remote_store = remote
    app.state.local_backend = backend
    log.info(
        f"Document verifier started (local_documents={local.size}, "
        f"remote_available={remote.is_available()})"
    )

    yield

    log.info("Shutting down document verifier...")
    await remote.close()
    backend.close()
    log.info("Document verifier stopped")


app = FastAPI(title="Document Verifier", version="0.1.0", lifespan=lifespan)


def get_local_cache(request: Request) -> LocalCache:
    return request.app.state.local_cache


def get_remote_store(request: Request) -> RemoteStore:
    return request.app.state.remote_store


@app.middleware("http")
async def req_log(request: Request, call_next):
    start = time.time()
    route = request.url.path
    remote_addr = request.client.host if request.client else "-"
    resp = await call_next(request)
    duration_ms = int((time.time() - start) * 1000)
    log.info(f"request_complete status={resp.status_code} duration_ms={duration_ms}",
             extra={"request_id": "-", "route": route, "remote_addr": remote_addr})
    return resp


@app.get("/healthz", response_model=HealthResponse)
def healthz(remote: RemoteStore = Depends(get_remote_store)) -> HealthResponse:
    return HealthResponse(ok=True, remote_available=remote.is_available())


@app.get("/version")
def version():
    # GIT_SHA is injected at deploy time
    return {"git_sha": os.getenv("GIT_SHA", "unknown")}


# -----------------------------------------------------------------------------
# Verification
# -----------------------------------------------------------------------------


def _to_response(request_id: str, result: VerificationResult) -> VerificationResponse:
    """Render a terminal VerificationResult as the API response."""
    if isinstance(result, Verified):
        return VerificationResponse(
            request_id=request_id,
            state=result.state,
            document=build_document_model(result.record),
            display=build_document_display(result.record),
        )
    if isinstance(result, Tampered):
        return VerificationResponse(
            request_id=request_id,
            state=result.state,
            message="Document is invalid or has been tampered with",
        )
    if isinstance(result, NotAvailable):
        return VerificationResponse(
            request_id=request_id,
            state=result.state,
            message=result.message,
        )
    if isinstance(result, (Idle, Loading)):
        raise RuntimeError(f"Verification did not reach a terminal state: {result.state.value}")
    raise TypeError(f"Unexpected verification result: {result!r}")


@app.get("/verify", response_model=VerificationResponse)
async def verify(
    request: Request,
    doc_hash: Optional[str] = Query(None, alias="hash"),
    tx: Optional[str] = None,
    local: LocalCache = Depends(get_local_cache),
    remote: RemoteStore = Depends(get_remote_store),
) -> VerificationResponse:
    """Verify a document by hash (query parameters of the shared link)."""
    context = VerificationContext(remote=remote, local=local)
    orchestrator = VerificationOrchestrator(context)
    result = await orchestrator.start(doc_hash, tx)

    log.info("verify_called", extra={
        "request_id": context.request_id,
        "route": "/verify",
        "remote_addr": request.client.host if request.client else "-",
    })
    return _to_response(context.request_id, result)


@app.post("/documents", status_code=201, response_model=StoreDocumentResponse)
def store_document(
    req: StoreDocumentRequest,
    local: LocalCache = Depends(get_local_cache),
):
    """Register a newly produced document in the local cache.

    The cache stamps the expiry; any expiry sent by the caller is ignored.
    """
    record = DocumentRecord(
        hash=req.hash,
        transaction_id=req.transaction_id,
        timestamp=parse_timestamp(req.timestamp),
        issuer=req.issuer,
        payload=req.payload,
        metadata=req.metadata,
        is_verified=req.is_verified,
    )

    error = local.put(record)
    if isinstance(error, StoreError):
        return JSONResponse(
            status_code=507,
            content={"detail": error.detail, "code": error.code},
        )

    stored = local.get(record.hash)
    expires_at = stored.record.expires_at if isinstance(stored, Found) else None
    return StoreDocumentResponse(hash=record.hash, expires_at=expires_at)


# -----------------------------------------------------------------------------
# Admin
# -----------------------------------------------------------------------------


@app.get("/admin")
def admin(
    local: LocalCache = Depends(get_local_cache),
    remote: RemoteStore = Depends(get_remote_store),
):
    """Return all configurable items for operator visibility.

    Gated by ADMIN_ENDPOINT_ENABLED (default: True for dev, False for prod).
    """
    from docverify.core.config import (
        ADMIN_ENDPOINT_ENABLED,
        DOCUMENT_TTL_DAYS,
        EXPLORER_TX_URL,
        MAX_DOCUMENTS,
        REMOTE_COLLECTION,
        REMOTE_STORE_URL,
        REMOTE_TIMEOUT_SECONDS,
    )

    if not ADMIN_ENDPOINT_ENABLED:
        return JSONResponse(
            status_code=404,
            content={"detail": "Admin endpoint disabled"}
        )

    return {
        "normative": {
            "document_ttl_days": DOCUMENT_TTL_DAYS,
        },
        "policy": {
            "max_documents": MAX_DOCUMENTS,
            "remote_timeout_seconds": REMOTE_TIMEOUT_SECONDS,
        },
        "remote": {
            "url": REMOTE_STORE_URL,
            "collection": REMOTE_COLLECTION,
            "available": remote.is_available(),
        },
        "display": {
            "explorer_tx_url": EXPLORER_TX_URL,
        },
        "environment": {
            "log_level": logging.getLogger().getEffectiveLevel(),
            "log_level_name": logging.getLevelName(logging.getLogger().getEffectiveLevel()),
        },
        "cache": {
            "size": local.size,
            "max_documents": local.max_documents,
            "metrics": local.metrics().to_dict(),
        },
    }


class LogLevelRequest(BaseModel):
    level: str


@app.post("/admin/log-level")
def set_log_level(req: LogLevelRequest):
    """Change log level at runtime (DEBUG, INFO, WARNING, ERROR, CRITICAL).

    Gated by ADMIN_ENDPOINT_ENABLED.
    """
    from docverify.core.config import ADMIN_ENDPOINT_ENABLED

    if not ADMIN_ENDPOINT_ENABLED:
        return JSONResponse(
            status_code=404,
            content={"detail": "Admin endpoint disabled"}
        )

    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    level_upper = req.level.upper()

    if level_upper not in valid_levels:
        return JSONResponse(
            status_code=400,
            content={"detail": f"Invalid log level. Must be one of: {valid_levels}"}
        )

    logging.getLogger().setLevel(getattr(logging, level_upper))
    logging.getLogger("docverify").setLevel(getattr(logging, level_upper))
    log.info(f"Log level changed to {level_upper}")

    return {
        "success": True,
        "log_level": level_upper,
        "message": f"Log level set to {level_upper}"
    }
