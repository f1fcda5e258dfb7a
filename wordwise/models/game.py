"""
Game Data Models

Contains all game-related data structures and enums.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple


class LetterStatus(Enum):
    """Letter evaluation status for board tiles and keyboard keys."""
    CORRECT = "correct"
    PRESENT = "present"
    ABSENT = "absent"
    UNUSED = "unused"


class GameOutcome(Enum):
    """Final outcome of a round."""
    WON = "won"
    LOST = "lost"


class WordSource(Enum):
    """Provenance of the secret word."""
    AI = "ai"
    LIST = "list"


@dataclass
class GameState:
    """Client-facing game state representation."""
    game_id: str
    current_round: int
    max_rounds: int
    game_over: bool
    won: bool
    guesses: List[str]
    guess_results: List[List[Tuple[str, str]]]  # Letter status as string for JSON serialization
    letter_status: Dict[str, str]
    word_source: str = WordSource.LIST.value
    answer: Optional[str] = None  # Only included when game is over
    reasoning: Optional[str] = None
