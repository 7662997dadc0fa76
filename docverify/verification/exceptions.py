"""Document store exceptions mapped to error codes.

Store faults are raised inside the physical backends and the HTTP client
wrapper, then caught at the LocalCache / RemoteStore boundary and converted
to StoreError outcomes. They never reach the resolver or orchestrator.
"""

from docverify.verification.api_models import ErrorCode


class DocumentStoreError(Exception):
    """Base exception for document store operations.

    Carries an error code that maps to ErrorCode constants.
    """

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


class LocalStoreError(DocumentStoreError):
    """Physical local store failure.

    Used when:
    - The backing database rejects a read, write or delete
    - The store is full (quota exceeded)
    """

    def __init__(self, message: str = "Local document store failed"):
        super().__init__(ErrorCode.LOCAL_STORE_FAILED, message)


class RemoteFetchError(DocumentStoreError):
    """Remote document service failures.

    Used when:
    - Network timeout or connection failure
    - HTTP error status other than 404
    - Permission denied by the service
    """

    def __init__(self, message: str = "Remote document fetch failed"):
        super().__init__(ErrorCode.REMOTE_FETCH_FAILED, message)


class RecordDecodeError(DocumentStoreError):
    """Stored or fetched record could not be (de)serialized.

    Used when:
    - Invalid JSON
    - Missing required record fields
    - Unparseable timestamps
    """

    def __init__(self, message: str = "Document record could not be decoded"):
        super().__init__(ErrorCode.RECORD_DECODE_FAILED, message)


class OrchestratorStateError(Exception):
    """A verification orchestrator was started after leaving Idle."""
