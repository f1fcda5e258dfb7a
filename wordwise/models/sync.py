"""
Sync Data Models

Remote record shape and the tagged result of one sync cycle.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .snapshot import Snapshot
from .wire import as_int, as_optional_int, require_mapping


class SyncStatus(Enum):
    """Per-cycle state. Success and error are transient annotations."""
    IDLE = "idle"
    SYNCING = "syncing"
    SUCCESS = "success"
    ERROR = "error"


class SyncOutcome(Enum):
    SUCCESS = "success"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    INVALID_FORMAT = "invalid_format"
    NETWORK_ERROR = "network_error"
    SKIPPED = "skipped"


@dataclass
class RemoteRecord:
    """A record as served by the remote store."""
    data: Snapshot
    version: int
    last_sync: Optional[int] = None
    created_at: Optional[int] = None

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "RemoteRecord":
        """
        Decode a record as served by the store.

        Raises:
            ValidationError: If the record or its data is malformed
        """
        payload = require_mapping(payload, 'sync record')
        return cls(
            data=Snapshot.from_dict(payload.get('data')),
            version=as_int(payload.get('version'), 'version'),
            last_sync=as_optional_int(payload.get('lastSync'), 'lastSync'),
            created_at=as_optional_int(payload.get('createdAt'), 'createdAt'),
        )


@dataclass
class SyncResult:
    outcome: SyncOutcome
    version: Optional[int] = None
    code: Optional[str] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome in (SyncOutcome.SUCCESS, SyncOutcome.SKIPPED)

    @property
    def status(self) -> SyncStatus:
        return SyncStatus.SUCCESS if self.ok else SyncStatus.ERROR

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'success': self.ok,
            'status': self.status.value,
            'outcome': self.outcome.value,
            'version': self.version,
            'error': None if self.ok else self.message,
        }
        if self.code:
            data['code'] = self.code
        return data
