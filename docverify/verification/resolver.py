"""Two-tier document resolution: remote-primary, local-fallback.

Precedence:
1. Remote unavailable -> local result, verbatim (no remote call made)
2. Remote Found / Expired -> returned as-is; a remote Expired is binding and
   is never overridden by a local copy
3. Remote StoreError -> local result, verbatim
4. Remote NotFound -> local Found / Expired if present, else NotFound.
   A document produced offline may exist only locally.
"""

import logging

from .context import VerificationContext
from .models import Expired, Found, NotFound, Outcome, StoreError

log = logging.getLogger(__name__)


class DocumentResolver:
    """Resolves a hash against the stores in a VerificationContext."""

    def __init__(self, context: VerificationContext):
        self._remote = context.remote
        self._local = context.local
        self._request_id = context.request_id

    async def resolve(self, doc_hash: str) -> Outcome:
        """Resolve a document hash to a single Outcome.

        Suspends only on the remote call. Runs to completion once invoked.
        """
        if not self._remote.is_available():
            log.warning(
                "Remote store not available, falling back to local cache",
                extra={"request_id": self._request_id, "document_hash": doc_hash},
            )
            return self._local.get(doc_hash)

        remote_outcome = await self._remote.get(doc_hash)

        if isinstance(remote_outcome, (Found, Expired)):
            return remote_outcome

        if isinstance(remote_outcome, StoreError):
            log.warning(
                f"Remote lookup failed ({remote_outcome.detail}), falling back to local cache",
                extra={"request_id": self._request_id, "document_hash": doc_hash},
            )
            return self._local.get(doc_hash)

        if isinstance(remote_outcome, NotFound):
            local_outcome = self._local.get(doc_hash)
            if isinstance(local_outcome, (Found, Expired)):
                log.info(
                    "Document absent remotely, resolved from local cache",
                    extra={"request_id": self._request_id, "document_hash": doc_hash},
                )
                return local_outcome
            return NotFound()

        raise TypeError(f"Unexpected remote outcome: {remote_outcome!r}")
