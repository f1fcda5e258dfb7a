"""
History Store

Bounded log of completed games, oldest first. Each entry gets a version-4
UUID and a millisecond timestamp; the log keeps only the most recent
MAX_HISTORY_SIZE entries by timestamp.
"""

import dataclasses
import time
import uuid
from typing import Callable, Iterable, List, Optional

from ..config.game_settings import MAX_HISTORY_SIZE, MAX_ROUNDS, MAX_UNDERSTANDING, WORD_LENGTH
from ..exceptions import ValidationError
from ..models.game import WordSource
from ..models.history import HistoryEntry, LOSS_RESULT
from ..utils.game_logger import game_logger
from .local_store import LocalStore, read_json, write_json

HISTORY_KEY = 'wordwise-history'


def generate_id() -> str:
    """RFC 4122 version-4 identifier, e.g. '1b4e28ba-2fa1-41d2-883f-0016d3cca427'."""
    return str(uuid.uuid4())


def now_ms() -> int:
    return int(time.time() * 1000)


def trim_history(entries: Iterable[HistoryEntry], max_size: int = MAX_HISTORY_SIZE) -> List[HistoryEntry]:
    """Sort ascending by timestamp (stable) and keep the newest max_size entries."""
    ordered = sorted(entries, key=lambda entry: entry.sort_key)
    return ordered[-max_size:] if max_size > 0 else []


def validate_understanding(rating: Optional[int]) -> None:
    if rating is None:
        return
    if isinstance(rating, bool) or not isinstance(rating, int) or not 0 <= rating <= MAX_UNDERSTANDING:
        raise ValidationError(f"Understanding must be between 0 and {MAX_UNDERSTANDING}, got {rating!r}")


class HistoryStore:
    """
    Game history for one device, persisted in a LocalStore.

    The in-memory list is authoritative for the session; a failed write is
    logged by write_json and the log keeps working from memory.
    """

    def __init__(self,
                 store: LocalStore,
                 id_factory: Callable[[], str] = generate_id,
                 clock: Callable[[], int] = now_ms,
                 max_size: int = MAX_HISTORY_SIZE):
        self._store = store
        self._id_factory = id_factory
        self._clock = clock
        self._max_size = max_size
        self._entries: List[HistoryEntry] = trim_history(self._load(), max_size)

    def _load(self) -> List[HistoryEntry]:
        """Stored entries; an unreadable entry is logged and dropped."""
        raw = read_json(self._store, HISTORY_KEY, [])
        entries = []
        for item in raw if isinstance(raw, list) else []:
            try:
                entries.append(HistoryEntry.from_dict(item))
            except ValidationError as e:
                game_logger.log_error(None, e, f'load:{HISTORY_KEY}')
        return entries

    def __len__(self) -> int:
        return len(self._entries)

    def entries(self) -> List[HistoryEntry]:
        return list(self._entries)

    def last(self) -> Optional[HistoryEntry]:
        return self._entries[-1] if self._entries else None

    def append(self, word: str, result: int, understanding: Optional[int] = None,
               source: WordSource = WordSource.LIST) -> HistoryEntry:
        """
        Record a completed game.

        Args:
            word: The secret word
            result: Guesses used on a win (1..6), or -1 on a loss
            understanding: Optional 0..10 rating, attached only when given
            source: Where the word came from

        Returns:
            HistoryEntry: The stored entry
        """
        word = (word or '').strip().upper()
        if len(word) != WORD_LENGTH or not word.isalpha():
            raise ValidationError(f"History word must be {WORD_LENGTH} letters, got {word!r}")
        if result != LOSS_RESULT and not 1 <= result <= MAX_ROUNDS:
            raise ValidationError(f"Result must be 1..{MAX_ROUNDS} or {LOSS_RESULT}, got {result!r}")
        validate_understanding(understanding)

        entry = HistoryEntry(
            word=word,
            result=result,
            source=source,
            id=self._id_factory(),
            timestamp=self._clock(),
            understanding=understanding,
        )
        self._entries.append(entry)
        self._entries = trim_history(self._entries, self._max_size)
        self._persist()
        return entry

    def attach_understanding(self, rating: int) -> Optional[HistoryEntry]:
        """
        Set the rating on the chronologically last entry, however long ago
        it was created. Returns the updated entry, or None on an empty log.
        """
        validate_understanding(rating)
        if not self._entries:
            return None
        latest = dataclasses.replace(self._entries[-1], understanding=rating)
        self._entries[-1] = latest
        self._persist()
        return latest

    def replace(self, entries: Iterable[HistoryEntry]) -> None:
        """Swap in a merged log, applying the same ordering and bound."""
        self._entries = trim_history(entries, self._max_size)
        self._persist()

    def clear(self) -> None:
        self._entries = []
        write_json(self._store, HISTORY_KEY, None)

    def _persist(self) -> None:
        write_json(self._store, HISTORY_KEY, [entry.to_dict() for entry in self._entries])
