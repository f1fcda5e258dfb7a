"""
Sync Client

Runs read/merge/write cycles against the remote store.

A cycle pulls the remote record, merges it with the local snapshot,
applies the merge locally, then writes it at remote version + 1. When
another device wrote in between, the store answers with its newer record;
the client merges once more and retries a single time. A second conflict
in the same cycle is reported, not retried.

Every failure is returned as a SyncResult. Nothing raised here reaches
gameplay, which has already recorded the game locally.
"""

from typing import Callable, Optional

from ..exceptions import (
    ConflictError, NetworkError, NotFoundError, SyncStoreError, ValidationError, WordWiseError
)
from ..models.snapshot import Snapshot
from ..models.sync import RemoteRecord, SyncOutcome, SyncResult, SyncStatus
from ..utils.game_logger import game_logger
from ..utils.helpers import is_valid_sync_code, normalize_sync_code
from .local_data_service import LocalDataService
from .merge_service import merge
from .sync_transport import SyncTransport

MAX_WRITE_ATTEMPTS = 2

_OUTCOMES = (
    (ValidationError, SyncOutcome.INVALID_FORMAT),
    (NotFoundError, SyncOutcome.NOT_FOUND),
    (ConflictError, SyncOutcome.CONFLICT),
    (NetworkError, SyncOutcome.NETWORK_ERROR),
    (SyncStoreError, SyncOutcome.NETWORK_ERROR),
)


def _outcome_for(error: WordWiseError) -> SyncOutcome:
    for error_type, outcome in _OUTCOMES:
        if isinstance(error, error_type):
            return outcome
    return SyncOutcome.NETWORK_ERROR


class SyncClient:
    """Sync orchestration for one device."""

    def __init__(self,
                 transport: SyncTransport,
                 local_data: LocalDataService,
                 merge_fn: Callable[[Snapshot, Snapshot], Snapshot] = merge):
        self.transport = transport
        self.local_data = local_data
        self._merge = merge_fn
        self.status = SyncStatus.IDLE
        self.last_result: Optional[SyncResult] = None

    # ── Cycle bookkeeping ─────────────────────────────────────────────────

    def _run(self, action: str, code: Optional[str], operation: Callable[[], SyncResult]) -> SyncResult:
        self.status = SyncStatus.SYNCING
        try:
            result = operation()
        except WordWiseError as e:
            result = SyncResult(_outcome_for(e), code=code, message=str(e))
        finally:
            self.status = SyncStatus.IDLE

        game_logger.log_sync_event(
            code, action, success=result.ok,
            outcome=result.outcome.value, version=result.version, error=result.message
        )
        self.last_result = result
        return result

    # ── Protocol steps ────────────────────────────────────────────────────

    def pull(self, code: str) -> RemoteRecord:
        """
        Fetch the current remote record.

        Raises:
            ValidationError: Malformed code (checked before any network call)
            NotFoundError: Unknown code
            NetworkError: Store unreachable
        """
        if not is_valid_sync_code(code):
            raise ValidationError('Invalid sync code format. Use XXXX-YYYY format.')
        return self.transport.fetch(code)

    def _push_with_merge(self, code: str, snapshot: Snapshot) -> SyncResult:
        remote = self.pull(code)
        merged = self._merge(snapshot, remote.data)
        self.local_data.apply_snapshot(merged)

        target_version = remote.version + 1
        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            try:
                version = self.transport.update(code, merged, target_version)
            except ConflictError as conflict:
                game_logger.log_sync_event(
                    code, 'sync_conflict', success=False,
                    attempt=attempt, attempted_version=target_version,
                    current_version=conflict.current_version
                )
                if attempt == MAX_WRITE_ATTEMPTS:
                    raise
                newer = RemoteRecord.from_dict(conflict.current_record)
                merged = self._merge(merged, newer.data)
                self.local_data.apply_snapshot(merged)
                target_version = conflict.current_version + 1
                continue

            self.local_data.save_sync_version(version)
            return SyncResult(SyncOutcome.SUCCESS, version=version, code=code)

        # The loop either returns or re-raises on its last attempt
        raise SyncStoreError('Sync write attempts exhausted')

    def push_with_merge(self, code: str, snapshot: Snapshot) -> SyncResult:
        """Pull, merge, apply locally, write; one merge-and-retry on conflict."""
        return self._run('sync_push', code, lambda: self._push_with_merge(code, snapshot))

    # ── Triggers ──────────────────────────────────────────────────────────

    def generate_code(self, snapshot: Optional[Snapshot] = None) -> SyncResult:
        """Mint a new remote record from the local snapshot and enable sync."""
        def operation() -> SyncResult:
            code = self.transport.generate(snapshot or self.local_data.snapshot())
            self.local_data.save_sync_code(code)
            self.local_data.save_sync_version(1)
            self.local_data.save_sync_enabled(True)
            return SyncResult(SyncOutcome.SUCCESS, version=1, code=code)

        return self._run('sync_generate', None, operation)

    def join(self, code: str) -> SyncResult:
        """Adopt an existing code: pull, merge, apply, remember the code."""
        code = normalize_sync_code(code)

        def operation() -> SyncResult:
            remote = self.pull(code)
            merged = self._merge(self.local_data.snapshot(), remote.data)
            self.local_data.apply_snapshot(merged)
            self.local_data.save_sync_code(code)
            self.local_data.save_sync_version(remote.version)
            self.local_data.save_sync_enabled(True)
            return SyncResult(SyncOutcome.SUCCESS, version=remote.version, code=code)

        return self._run('sync_join', code, operation)

    def sync_now(self) -> SyncResult:
        """Push the current local snapshot to the configured code."""
        code = self.local_data.load_sync_code()
        if not code or not self.local_data.load_sync_enabled():
            return SyncResult(SyncOutcome.SKIPPED, message='Sync is not enabled')
        return self.push_with_merge(code, self.local_data.snapshot())

    def sync_on_startup(self) -> SyncResult:
        """Pull and merge once at startup. Nothing new to push yet."""
        code = self.local_data.load_sync_code()
        if not code or not self.local_data.load_sync_enabled():
            return SyncResult(SyncOutcome.SKIPPED, message='Sync is not enabled')

        def operation() -> SyncResult:
            remote = self.pull(code)
            merged = self._merge(self.local_data.snapshot(), remote.data)
            self.local_data.apply_snapshot(merged)
            return SyncResult(SyncOutcome.SUCCESS, version=remote.version, code=code)

        return self._run('sync_startup', code, operation)

    def disable(self) -> None:
        """Forget the code on this device. Remote data is left in place."""
        code = self.local_data.load_sync_code()
        self.local_data.save_sync_code(None)
        self.local_data.save_sync_enabled(False)
        self.local_data.save_sync_version(0)
        game_logger.log_sync_event(code, 'sync_disabled')


# Global service instance
_sync_client = None


def get_sync_client() -> Optional[SyncClient]:
    """Get the global sync client instance."""
    return _sync_client


def initialize_sync_client(transport: SyncTransport, local_data: LocalDataService) -> SyncClient:
    """Initialize the global sync client instance."""
    global _sync_client
    _sync_client = SyncClient(transport, local_data)
    return _sync_client
