"""Per-attempt verification context.

Store handles are passed explicitly to the resolver and orchestrator
instead of being read from module globals. A fresh context is built for
every verification attempt; the stores it references are long-lived and
owned by the application.
"""

import uuid
from dataclasses import dataclass, field

from .store.local_cache import LocalCache
from .store.remote import RemoteStore


@dataclass(frozen=True)
class VerificationContext:
    remote: RemoteStore
    local: LocalCache
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
