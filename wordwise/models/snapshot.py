"""
Snapshot Data Models

The snapshot is the unit of sync: statistics, history, used words and the
syncable settings of one device. The API key is local configuration and has
no field here, so it can never be serialized into a payload.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from ..exceptions import ValidationError
from .history import HistoryEntry
from .stats import Statistics
from .wire import require_list, require_mapping

SETTINGS_KEYS = {
    'ai_enabled': 'aiEnabled',
    'show_reasoning': 'showReasoning',
    'tier2_focus': 'tier2Focus',
    'extended_info': 'extendedInfo',
}

SETTINGS_DEFAULTS = {
    'ai_enabled': True,
    'show_reasoning': False,
    'tier2_focus': False,
    'extended_info': False,
}


@dataclass
class Settings:
    """Syncable preferences. None means the device never set the value."""
    ai_enabled: Optional[bool] = None
    show_reasoning: Optional[bool] = None
    tier2_focus: Optional[bool] = None
    extended_info: Optional[bool] = None

    def to_dict(self) -> Dict[str, bool]:
        return {
            wire_key: getattr(self, attr)
            for attr, wire_key in SETTINGS_KEYS.items()
            if getattr(self, attr) is not None
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Settings":
        data = require_mapping(data, 'settings')
        values = {}
        for attr, wire_key in SETTINGS_KEYS.items():
            value = data.get(wire_key)
            values[attr] = bool(value) if value is not None else None
        return cls(**values)

    @classmethod
    def defaults(cls) -> "Settings":
        return cls(**SETTINGS_DEFAULTS)


@dataclass
class Snapshot:
    """Full exportable local state."""
    stats: Statistics = field(default_factory=Statistics)
    history: List[HistoryEntry] = field(default_factory=list)
    used_words: Set[str] = field(default_factory=set)
    settings: Settings = field(default_factory=Settings)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'stats': self.stats.to_dict(),
            'gameHistory': [entry.to_dict() for entry in self.history],
            'usedWords': sorted(self.used_words),
            'settings': self.settings.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Snapshot":
        """Decode a synced payload. Any shape error raises ValidationError."""
        data = require_mapping(data, 'snapshot')
        used_words = require_list(data.get('usedWords'), 'usedWords')
        if not all(isinstance(word, str) for word in used_words):
            raise ValidationError('usedWords must contain only strings')
        return cls(
            stats=Statistics.from_dict(data.get('stats')),
            history=[HistoryEntry.from_dict(item) for item in require_list(data.get('gameHistory'), 'gameHistory')],
            used_words={word.upper() for word in used_words},
            settings=Settings.from_dict(data.get('settings')),
        )
