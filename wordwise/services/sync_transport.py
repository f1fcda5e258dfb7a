"""
Sync Transports

How a SyncClient reaches the remote store. HttpSyncTransport speaks the
/sync HTTP contract; InProcessSyncTransport calls a SyncStoreService
directly when device and store share a process.

Every transport maps failures onto the same exceptions:
ValidationError (400), NotFoundError (404), ConflictError (409),
SyncStoreError (5xx) and NetworkError (no usable response).
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests

from ..exceptions import ConflictError, NetworkError, NotFoundError, SyncStoreError, ValidationError
from ..models.snapshot import Snapshot
from ..models.sync import RemoteRecord
from ..models.wire import as_int
from .sync_store_service import SyncStoreService


class SyncTransport(ABC):

    @abstractmethod
    def generate(self, snapshot: Snapshot) -> str:
        """Mint a record seeded with snapshot and return its code."""

    @abstractmethod
    def fetch(self, code: str) -> RemoteRecord:
        """Read the current record for code."""

    @abstractmethod
    def update(self, code: str, snapshot: Snapshot, version: int) -> int:
        """Write snapshot at version and return the stored version."""


class HttpSyncTransport(SyncTransport):
    """Talks to a remote store over HTTP with a shared requests session."""

    def __init__(self, base_url: str, timeout: float = 10.0,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Could not reach sync server: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if response.ok:
            return body

        message = body.get('error') or f"Sync server returned {response.status_code}"
        if response.status_code == 400:
            raise ValidationError(message)
        if response.status_code == 404:
            raise NotFoundError(message)
        if response.status_code == 409:
            raise ConflictError(
                message,
                current_version=as_int(body.get('currentVersion'), 'currentVersion'),
                current_record=body.get('currentData') or {},
            )
        if response.status_code >= 500:
            raise SyncStoreError(message)
        raise NetworkError(message)

    def generate(self, snapshot: Snapshot) -> str:
        body = self._request('POST', '/sync/generate', {'data': snapshot.to_dict()})
        code = body.get('code')
        if not isinstance(code, str) or not code:
            raise SyncStoreError('Sync server did not return a code')
        return code

    def fetch(self, code: str) -> RemoteRecord:
        return RemoteRecord.from_dict(self._request('GET', f'/sync/{code}'))

    def update(self, code: str, snapshot: Snapshot, version: int) -> int:
        body = self._request('PUT', f'/sync/{code}', {'data': snapshot.to_dict(), 'version': version})
        return as_int(body.get('version'), 'version', version)


class InProcessSyncTransport(SyncTransport):
    """Direct calls into a SyncStoreService, through the same JSON shapes."""

    def __init__(self, store: SyncStoreService):
        self.store = store

    def generate(self, snapshot: Snapshot) -> str:
        return self.store.generate(snapshot.to_dict())

    def fetch(self, code: str) -> RemoteRecord:
        return RemoteRecord.from_dict(self.store.get(code))

    def update(self, code: str, snapshot: Snapshot, version: int) -> int:
        return self.store.update(code, snapshot.to_dict(), version)
