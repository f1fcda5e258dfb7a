"""
Game Service

Plays rounds for one device and records each completed game into
statistics, history and used words before handing off to sync.
"""

import uuid
from typing import Dict, List, Optional, Tuple

from ..config.game_settings import MAX_ROUNDS, WORD_LENGTH
from ..models.game import GameOutcome, GameState, LetterStatus, WordSource
from ..models.history import LOSS_RESULT, HistoryEntry
from ..models.stats import Statistics
from ..models.sync import SyncResult
from ..utils.game_logger import game_logger
from .evaluator import evaluate_guess, filter_candidates, update_letter_status
from .local_data_service import LocalDataService
from .stats_service import reset_statistics, update_statistics
from .sync_service import SyncClient
from .word_picker import WordPicker

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"


class GameService:
    """
    Core game service managing game sessions for one device.

    This class handles:
    - Secret word selection through the WordPicker
    - Guess validation and evaluation
    - Game state management without exposing answers to clients
    - Recording each finished game exactly once, then syncing
    """

    def __init__(self,
                 local_data: LocalDataService,
                 word_picker: Optional[WordPicker] = None,
                 sync_client: Optional[SyncClient] = None,
                 max_rounds: int = MAX_ROUNDS,
                 ai_min_history: int = 5):
        self.local_data = local_data
        self.word_picker = word_picker or WordPicker()
        self.sync_client = sync_client
        self.max_rounds = max_rounds
        self.ai_min_history = ai_min_history
        self.games: Dict[str, Dict] = {}  # Active games by game_id
        self.last_sync_result: Optional[SyncResult] = None
        self._restore_saved_game()

    @property
    def word_list(self) -> List[str]:
        return self.word_picker.word_list

    def _restore_saved_game(self) -> None:
        saved = self.local_data.load_game_state()
        if not saved or saved.get("game_over") or not saved.get("game_id"):
            return
        try:
            saved["word_source"] = WordSource(saved.get("word_source", WordSource.LIST.value))
        except ValueError:
            return
        self.games[saved["game_id"]] = saved

    def _save_game(self, game_id: str) -> None:
        game = dict(self.games[game_id], game_id=game_id, word_source=self.games[game_id]["word_source"].value)
        self.local_data.save_game_state(game)

    def create_new_game(self) -> str:
        """
        Creates a new game session.

        A pending understanding rating is attached to the previous game
        first. The word comes from the AI when it is enabled, an API key is
        stored and the history is long enough; otherwise from the list.

        Returns:
            str: Unique game ID for this session

        Raises:
            WordsExhaustedError: If every answer word has been used
        """
        self.local_data.flush_pending_understanding()

        history = self.local_data.history.entries()
        settings = self.local_data.effective_settings()
        api_key = self.local_data.load_api_key()
        use_ai = bool(settings.ai_enabled) and len(history) >= self.ai_min_history

        word, source = self.word_picker.pick(
            history,
            self.local_data.load_used_words(),
            use_ai=use_ai,
            tier2_focus=bool(settings.tier2_focus),
            api_key=api_key,
        )

        reasoning = None
        if source == WordSource.AI and settings.show_reasoning:
            reasoning = self.word_picker.explain_choice(word, history, api_key)

        game_id = str(uuid.uuid4())
        self.games[game_id] = {
            "target_word": word,
            "word_source": source,
            "reasoning": reasoning,
            "current_round": 0,
            "max_rounds": self.max_rounds,
            "game_over": False,
            "won": False,
            "recorded": False,
            "guesses": [],
            "guess_results": [],
            "letter_status": {letter: LetterStatus.UNUSED.value for letter in ALPHABET},
        }
        self._save_game(game_id)
        game_logger.log_game_event(game_id, "game_created", source=source.value, ai_requested=use_ai)
        return game_id

    def get_game_state(self, game_id: str) -> Optional[GameState]:
        """
        Returns the current game state for a session (without revealing the answer).

        Args:
            game_id: Unique game identifier

        Returns:
            GameState object or None if game not found
        """
        if game_id not in self.games:
            return None

        game = self.games[game_id]
        return GameState(
            game_id=game_id,
            current_round=game["current_round"],
            max_rounds=game["max_rounds"],
            game_over=game["game_over"],
            won=game["won"],
            guesses=game["guesses"].copy(),
            guess_results=[list(row) for row in game["guess_results"]],
            letter_status=game["letter_status"].copy(),
            word_source=game["word_source"].value,
            answer=game["target_word"] if game["game_over"] else None,
            reasoning=game["reasoning"],
        )

    def is_valid_guess(self, game_id: str, guess: str) -> Tuple[bool, str]:
        """
        Validates a guess for a specific game session.

        Args:
            game_id: Unique game identifier
            guess: The word to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        if game_id not in self.games:
            return False, "Game not found"

        game = self.games[game_id]

        if game["game_over"]:
            return False, "Game is already over"

        if not guess or not isinstance(guess, str):
            return False, "Guess must be a valid string"

        normalized_guess = guess.strip().upper()

        if len(normalized_guess) != WORD_LENGTH:
            return False, f"Guess must be exactly {WORD_LENGTH} letters"

        if not normalized_guess.isalpha():
            return False, "Guess must contain only letters"

        # AI words may fall outside both lists; the answer itself is always accepted
        if not self.word_picker.is_accepted_guess(normalized_guess) and normalized_guess != game["target_word"]:
            return False, "Not in word list"

        return True, ""

    def make_guess(self, game_id: str, guess: str) -> Optional[GameState]:
        """
        Processes a guess and updates game state.

        Args:
            game_id: Unique game identifier
            guess: The 5-letter word guess

        Returns:
            Updated GameState or None if invalid
        """
        is_valid, _ = self.is_valid_guess(game_id, guess)
        if not is_valid:
            return None

        game = self.games[game_id]
        normalized_guess = guess.strip().upper()
        evaluations = evaluate_guess(normalized_guess, game["target_word"])

        game["current_round"] += 1
        game["guesses"].append(normalized_guess)
        game["guess_results"].append([(letter, status.value) for letter, status in evaluations])
        update_letter_status(game["letter_status"], evaluations)

        if normalized_guess == game["target_word"]:
            game["won"] = True
            game["game_over"] = True
        elif game["current_round"] >= game["max_rounds"]:
            game["game_over"] = True

        self._save_game(game_id)

        if game["game_over"]:
            self._record_result(game_id)

        return self.get_game_state(game_id)

    def _record_result(self, game_id: str) -> None:
        """Statistics, history, used word, then sync. Runs once per game."""
        game = self.games[game_id]
        if game["recorded"]:
            return
        game["recorded"] = True
        self.last_sync_result = None

        outcome = GameOutcome.WON if game["won"] else GameOutcome.LOST
        result = game["current_round"] if game["won"] else LOSS_RESULT
        word = game["target_word"]

        stats = update_statistics(self.local_data.load_stats(), outcome, game["current_round"], game["word_source"])
        self.local_data.save_stats(stats)
        self.local_data.history.append(word, result, source=game["word_source"])
        self.local_data.add_used_word(word)
        self.local_data.clear_game_state()

        game_logger.log_game_event(
            game_id, "game_completed",
            outcome=outcome.value, rounds=game["current_round"], source=game["word_source"].value
        )

        if self.sync_client is not None:
            try:
                self.last_sync_result = self.sync_client.sync_now()
            except Exception as e:
                # The game is already recorded locally; sync never fails a guess
                game_logger.log_error(None, e, "sync_after_game", game_id)

    def get_remaining_words(self, game_id: str) -> Optional[List[str]]:
        """Answer words still consistent with the guesses made so far."""
        if game_id not in self.games:
            return None
        game = self.games[game_id]
        return filter_candidates(self.word_list, game["guesses"], game["target_word"])

    def rate_understanding(self, rating: Optional[int]) -> None:
        """Queue a 0..10 rating for the last game; attached at the next new game."""
        self.local_data.save_pending_understanding(rating)

    def get_statistics(self) -> Statistics:
        return self.local_data.load_stats()

    def get_history(self) -> List[HistoryEntry]:
        return self.local_data.history.entries()

    def reset_statistics(self) -> Statistics:
        stats = reset_statistics()
        self.local_data.save_stats(stats)
        game_logger.log_game_event(None, "statistics_reset")
        return stats

    def start_fresh(self) -> None:
        """Clear statistics, history and used words so every word is playable again."""
        self.local_data.reset_all()
        game_logger.log_game_event(None, "start_fresh")

    def delete_game(self, game_id: str) -> bool:
        """
        Removes a game session from memory.

        Args:
            game_id: Unique game identifier

        Returns:
            bool: True if game was deleted, False if not found
        """
        if game_id in self.games:
            del self.games[game_id]
            saved = self.local_data.load_game_state()
            if saved and saved.get("game_id") == game_id:
                self.local_data.clear_game_state()
            return True
        return False


# Global service instance
_game_service = None


def get_game_service() -> Optional[GameService]:
    """Get the global game service instance."""
    return _game_service


def initialize_game_service(local_data: LocalDataService,
                            word_picker: Optional[WordPicker] = None,
                            sync_client: Optional[SyncClient] = None,
                            max_rounds: int = MAX_ROUNDS,
                            ai_min_history: int = 5) -> GameService:
    """Initialize the global game service instance."""
    global _game_service
    _game_service = GameService(local_data, word_picker, sync_client, max_rounds, ai_min_history)
    return _game_service
