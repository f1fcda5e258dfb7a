"""
Sync Store Service

Server side of the remote versioned store. Records are snapshots
addressed by a human-shareable code and guarded by a version number: a
write only lands when it carries a version greater than the stored one.
Payloads are checked for snapshot shape on write and stored as sent.
"""

import copy
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError
from pymongo.mongo_client import MongoClient
from pymongo.server_api import ServerApi

from ..exceptions import ConflictError, NotFoundError, SyncStoreError, ValidationError
from ..models.snapshot import Snapshot
from ..utils.game_logger import game_logger
from ..utils.helpers import generate_sync_code, is_valid_sync_code
from .history_service import now_ms


class SyncRepository(ABC):
    """Storage for sync records: {code, data, version, lastSync, createdAt}."""

    @abstractmethod
    def insert(self, record: Dict[str, Any]) -> bool:
        """Insert a new record. Returns False when the code is already taken."""

    @abstractmethod
    def find(self, code: str) -> Optional[Dict[str, Any]]:
        """Return the record for code, or None."""

    @abstractmethod
    def update_if_newer(self, code: str, data: Dict[str, Any], version: int,
                        timestamp: int) -> Optional[Dict[str, Any]]:
        """
        Atomically store data at version when the stored version is lower.
        Returns the updated record, or None when the write was stale.
        """


class InMemorySyncRepository(SyncRepository):
    """Process-local records. Flask may serve requests on several threads."""

    def __init__(self):
        self._records: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def insert(self, record: Dict[str, Any]) -> bool:
        with self._lock:
            if record['code'] in self._records:
                return False
            self._records[record['code']] = copy.deepcopy(record)
            return True

    def find(self, code: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            record = self._records.get(code)
            return copy.deepcopy(record) if record else None

    def update_if_newer(self, code: str, data: Dict[str, Any], version: int,
                        timestamp: int) -> Optional[Dict[str, Any]]:
        with self._lock:
            record = self._records.get(code)
            if record is None or record['version'] >= version:
                return None
            record.update({'data': copy.deepcopy(data), 'version': version, 'lastSync': timestamp})
            return copy.deepcopy(record)


class MongoSyncRepository(SyncRepository):
    """MongoDB-backed records with a unique index on the code."""

    def __init__(self, mongo_uri: str, db_name: str = 'wordwise'):
        self.client = MongoClient(mongo_uri, server_api=ServerApi('1'))
        self.collection = self.client[db_name].sync_records

        # Test connection
        try:
            self.client.admin.command('ping')
        except Exception as e:
            game_logger.logger.error(f"MongoDB connection error: {e}")
            raise

        self.collection.create_index("code", unique=True)

    def insert(self, record: Dict[str, Any]) -> bool:
        try:
            self.collection.insert_one(dict(record))
            return True
        except DuplicateKeyError:
            return False

    def find(self, code: str) -> Optional[Dict[str, Any]]:
        return self.collection.find_one({"code": code}, {"_id": 0})

    def update_if_newer(self, code: str, data: Dict[str, Any], version: int,
                        timestamp: int) -> Optional[Dict[str, Any]]:
        return self.collection.find_one_and_update(
            {"code": code, "version": {"$lt": version}},
            {"$set": {"data": data, "version": version, "lastSync": timestamp}},
            projection={"_id": 0},
            return_document=ReturnDocument.AFTER
        )


def public_record(record: Dict[str, Any]) -> Dict[str, Any]:
    """Record as served over HTTP (without the code)."""
    return {
        'data': record.get('data') or {},
        'version': record.get('version', 0),
        'lastSync': record.get('lastSync'),
        'createdAt': record.get('createdAt'),
    }


class SyncStoreService:
    """
    Remote store operations.

    Code minting retries on collision up to max_attempts before giving up.
    Version checks are delegated to the repository's atomic update.
    """

    def __init__(self,
                 repository: SyncRepository,
                 max_attempts: int = 10,
                 code_factory: Callable[[], str] = generate_sync_code,
                 clock: Callable[[], int] = now_ms):
        self.repository = repository
        self.max_attempts = max_attempts
        self._code_factory = code_factory
        self._clock = clock

    @staticmethod
    def _check_data(data: Any) -> None:
        if not isinstance(data, dict):
            raise ValidationError('Missing data')
        # Raises ValidationError when the payload is not shaped like a snapshot
        Snapshot.from_dict(data)

    @staticmethod
    def _check_code(code: str) -> None:
        if not is_valid_sync_code(code):
            raise ValidationError('Invalid sync code format. Use XXXX-YYYY format.')

    def generate(self, data: Optional[Dict[str, Any]]) -> str:
        """
        Create a record seeded with data at version 1.

        Raises:
            ValidationError: If data is missing or not shaped like a snapshot
            SyncStoreError: If no free code was found within max_attempts
        """
        self._check_data(data)

        for attempt in range(1, self.max_attempts + 1):
            code = self._code_factory()
            timestamp = self._clock()
            record = {
                'code': code,
                'data': data,
                'version': 1,
                'lastSync': timestamp,
                'createdAt': timestamp,
            }
            if self.repository.insert(record):
                return code
            game_logger.log_sync_event(code, 'sync_code_collision', success=False, attempt=attempt)

        raise SyncStoreError(f'Failed to generate a unique sync code after {self.max_attempts} attempts')

    def get(self, code: str) -> Dict[str, Any]:
        self._check_code(code)
        record = self.repository.find(code)
        if record is None:
            raise NotFoundError('Sync code not found')
        return public_record(record)

    def update(self, code: str, data: Optional[Dict[str, Any]], version: Optional[int]) -> int:
        """
        Store data at version.

        Returns:
            int: The stored version

        Raises:
            ValidationError: Bad code, missing or malformed data, missing version
            NotFoundError: Unknown code
            ConflictError: version is not greater than the stored version
        """
        self._check_code(code)
        if isinstance(version, bool) or not isinstance(version, int):
            raise ValidationError('Missing data or version')
        self._check_data(data)

        if self.repository.find(code) is None:
            raise NotFoundError('Sync code not found')

        updated = self.repository.update_if_newer(code, data, version, self._clock())
        if updated is None:
            current = self.repository.find(code) or {}
            raise ConflictError(
                'Version conflict',
                current_version=current.get('version', 0),
                current_record=public_record(current),
            )
        return updated['version']


# Global service instance
_sync_store_service = None


def get_sync_store_service() -> Optional[SyncStoreService]:
    """Get the global sync store service instance."""
    return _sync_store_service


def initialize_sync_store_service(mongo_uri: Optional[str] = None,
                                  db_name: str = 'wordwise',
                                  max_attempts: int = 10) -> SyncStoreService:
    """Initialize the global sync store, on MongoDB when a URI is configured."""
    global _sync_store_service
    repository = MongoSyncRepository(mongo_uri, db_name) if mongo_uri else InMemorySyncRepository()
    _sync_store_service = SyncStoreService(repository, max_attempts=max_attempts)
    return _sync_store_service
