"""
Statistics Data Models

Aggregate play statistics. Serialized with the camelCase keys used by
every existing snapshot so that old devices and new ones can share data.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..config.game_settings import MAX_ROUNDS
from .wire import as_int, require_list, require_mapping


def _zero_distribution() -> List[int]:
    return [0] * MAX_ROUNDS


@dataclass
class Statistics:
    """Aggregate statistics for one installation."""
    played: int = 0
    wins: int = 0
    current_streak: int = 0
    max_streak: int = 0
    guess_distribution: List[int] = field(default_factory=_zero_distribution)
    ai_words: int = 0
    list_words: int = 0

    def copy(self) -> "Statistics":
        return Statistics(
            played=self.played,
            wins=self.wins,
            current_streak=self.current_streak,
            max_streak=self.max_streak,
            guess_distribution=list(self.guess_distribution),
            ai_words=self.ai_words,
            list_words=self.list_words,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'played': self.played,
            'wins': self.wins,
            'currentStreak': self.current_streak,
            'maxStreak': self.max_streak,
            'guessDistribution': list(self.guess_distribution),
            'aiWords': self.ai_words,
            'listWords': self.list_words,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Statistics":
        """Build from a stored dict; missing counters read as zero."""
        data = require_mapping(data, 'stats')
        distribution = [
            as_int(value, 'guessDistribution entry')
            for value in require_list(data.get('guessDistribution'), 'guessDistribution')
        ]
        distribution = (distribution + _zero_distribution())[:MAX_ROUNDS]
        return cls(
            played=as_int(data.get('played'), 'played'),
            wins=as_int(data.get('wins'), 'wins'),
            current_streak=as_int(data.get('currentStreak'), 'currentStreak'),
            max_streak=as_int(data.get('maxStreak'), 'maxStreak'),
            guess_distribution=distribution,
            ai_words=as_int(data.get('aiWords'), 'aiWords'),
            list_words=as_int(data.get('listWords'), 'listWords'),
        )
