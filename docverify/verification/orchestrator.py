"""Verification state machine for a single (hash, transaction id) pair.

    Idle --(no hash)--------------------------> NotAvailable("no document hash provided")
    Idle --(hash)--> Loading --resolve(hash)--> Verified(record)   on Found
                                            --> Tampered           on Expired
                                            --> NotAvailable(msg)  on NotFound / StoreError

Verified, Tampered and NotAvailable are terminal. An orchestrator handles
exactly one attempt: a new hash needs a new instance, and there is no
internal retry. Consumers that start a new attempt while one is pending
should discard the old result by comparing document_hash.
"""

import logging
from typing import Optional

from .context import VerificationContext
from .exceptions import OrchestratorStateError
from .models import (
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
from .resolver import DocumentResolver

log = logging.getLogger(__name__)

NO_HASH_MESSAGE = "no document hash provided"
NOT_FOUND_MESSAGE = "document not found"


def classify_outcome(outcome: Outcome) -> VerificationResult:
    """Map a resolution Outcome to its user-facing result.

    Expired is presented as Tampered so the user is not told which failure
    mode occurred.
    """
    if isinstance(outcome, Found):
        return Verified(outcome.record)
    if isinstance(outcome, Expired):
        return Tampered()
    if isinstance(outcome, NotFound):
        return NotAvailable(NOT_FOUND_MESSAGE)
    if isinstance(outcome, StoreError):
        return NotAvailable(outcome.detail)
    raise TypeError(f"Unexpected outcome: {outcome!r}")


class VerificationOrchestrator:
    """Drives one verification attempt to a terminal result."""

    def __init__(
        self,
        context: VerificationContext,
        resolver: Optional[DocumentResolver] = None,
    ):
        self._context = context
        self._resolver = resolver or DocumentResolver(context)
        self._result: VerificationResult = Idle()
        self._document_hash: Optional[str] = None

    @property
    def result(self) -> VerificationResult:
        return self._result

    @property
    def document_hash(self) -> Optional[str]:
        return self._document_hash

    async def start(
        self,
        doc_hash: Optional[str],
        transaction_id: Optional[str] = None,
    ) -> VerificationResult:
        """Run the attempt to completion and return the terminal result.

        Args:
            doc_hash: Document hash from the URL; None or blank means missing.
            transaction_id: Ledger reference from the URL, used when the
                resolved record has none.

        Raises:
            OrchestratorStateError: If this instance has already been started.
        """
        if not isinstance(self._result, Idle):
            raise OrchestratorStateError(
                f"Verification already started (state={self._result.state.value})"
            )

        doc_hash = doc_hash.strip() if doc_hash else ""
        if not doc_hash:
            self._result = NotAvailable(NO_HASH_MESSAGE)
            log.info(
                "Verification rejected: no document hash",
                extra={"request_id": self._context.request_id},
            )
            return self._result

        self._document_hash = doc_hash
        self._result = Loading()

        outcome = await self._resolver.resolve(doc_hash)
        result = classify_outcome(outcome)
        if isinstance(result, Verified):
            result = Verified(result.record.with_transaction_id(transaction_id))

        self._result = result
        log.info(
            f"Verification complete: state={result.state.value}",
            extra={"request_id": self._context.request_id, "document_hash": doc_hash},
        )
        return result
