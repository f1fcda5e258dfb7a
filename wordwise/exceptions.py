"""
Project-wide exception hierarchy.

Pure game logic raises only ValidationError on caller contract violations.
Sync and storage errors are caught at the service boundary and reported as
values, so none of them ever unwinds a game in progress.
"""

from typing import Any, Dict, Optional

__all__ = [
    "WordWiseError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "NetworkError",
    "StorageError",
    "SyncStoreError",
    "WordsExhaustedError",
]


class WordWiseError(Exception):
    """Root exception for all WordWise errors."""


# ── Input ─────────────────────────────────────────────────────────────────────

class ValidationError(WordWiseError):
    """Raised on malformed input: sync codes, guesses, picker words, guess counts."""


class WordsExhaustedError(WordWiseError):
    """Raised when every answer word has already been played."""


# ── Sync ──────────────────────────────────────────────────────────────────────

class NotFoundError(WordWiseError):
    """Raised when a sync code is unknown to the remote store."""


class ConflictError(WordWiseError):
    """Raised when a write is rejected because the remote version moved on."""

    def __init__(self, message: str, current_version: int,
                 current_record: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.current_version = current_version
        self.current_record = current_record or {}


class NetworkError(WordWiseError):
    """Raised when the remote store or AI proxy cannot be reached."""


class SyncStoreError(WordWiseError):
    """Raised by the remote store on internal failure (e.g. code minting exhausted)."""


# ── Local storage ─────────────────────────────────────────────────────────────

class StorageError(WordWiseError):
    """Raised on local key/value store read or write failure."""
