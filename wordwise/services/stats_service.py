"""
Statistics Engine

Pure functions over Statistics. Each completed game is applied exactly
once; counters are never decremented except by an explicit reset.
"""

from ..config.game_settings import MAX_ROUNDS
from ..exceptions import ValidationError
from ..models.game import GameOutcome, WordSource
from ..models.stats import Statistics


def get_initial_stats() -> Statistics:
    """All-zero statistics for a fresh installation."""
    return Statistics()


def reset_statistics() -> Statistics:
    """Explicit user-initiated reset."""
    return get_initial_stats()


def update_statistics(stats: Statistics, outcome: GameOutcome,
                      guess_count: int, source: WordSource) -> Statistics:
    """
    Apply one completed game and return new statistics.

    Args:
        stats: Current statistics (not modified)
        outcome: GameOutcome.WON or GameOutcome.LOST
        guess_count: Guesses used, 1..MAX_ROUNDS
        source: Where the secret word came from

    Returns:
        Statistics: Updated copy

    Raises:
        ValidationError: If guess_count is outside 1..MAX_ROUNDS
    """
    if isinstance(guess_count, bool) or not isinstance(guess_count, int) \
            or not 1 <= guess_count <= MAX_ROUNDS:
        raise ValidationError(f"Guess count must be between 1 and {MAX_ROUNDS}, got {guess_count!r}")

    new_stats = stats.copy()
    new_stats.played += 1

    if source == WordSource.AI:
        new_stats.ai_words += 1
    else:
        new_stats.list_words += 1

    if outcome == GameOutcome.WON:
        new_stats.wins += 1
        new_stats.current_streak += 1
        new_stats.max_streak = max(new_stats.max_streak, new_stats.current_streak)
        new_stats.guess_distribution[guess_count - 1] += 1
    else:
        new_stats.current_streak = 0

    return new_stats
