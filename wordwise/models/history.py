"""
History Data Models

One record per completed game. The compact keys (w, r, src, t, u) are the
stored and synced format.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..exceptions import ValidationError
from .game import WordSource
from .wire import as_int, as_optional_int, require_mapping

LOSS_RESULT = -1


@dataclass
class HistoryEntry:
    """
    A completed game.

    result is the number of guesses used on a win (1..6) or -1 on a loss.
    Entries written before ids existed have id and timestamp set to None
    until a merge backfills them.
    """
    word: str
    result: int
    source: WordSource = WordSource.LIST
    id: Optional[str] = None
    timestamp: Optional[int] = None
    understanding: Optional[int] = None

    @property
    def is_legacy(self) -> bool:
        return self.id is None

    @property
    def won(self) -> bool:
        return self.result > 0

    @property
    def sort_key(self) -> int:
        return self.timestamp or 0

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.id is not None:
            data['id'] = self.id
        data['w'] = self.word
        data['r'] = self.result
        data['src'] = self.source.value
        if self.timestamp is not None:
            data['t'] = self.timestamp
        if self.understanding is not None:
            data['u'] = self.understanding
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryEntry":
        """
        Decode a stored entry. A missing result reads as a loss.

        Raises:
            ValidationError: If a field has the wrong type
        """
        data = require_mapping(data, 'history entry')
        word = data.get('w', '')
        if not isinstance(word, str):
            raise ValidationError(f"history word must be a string, got {word!r}")
        entry_id = data.get('id')
        if entry_id is not None and not isinstance(entry_id, str):
            raise ValidationError(f"history id must be a string, got {entry_id!r}")
        return cls(
            word=word.upper(),
            result=as_int(data.get('r'), 'history result', LOSS_RESULT),
            source=WordSource.AI if data.get('src') == WordSource.AI.value else WordSource.LIST,
            id=entry_id or None,
            timestamp=as_optional_int(data.get('t'), 'history timestamp'),
            understanding=as_optional_int(data.get('u'), 'history understanding'),
        )
