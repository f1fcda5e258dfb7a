"""
Letter Evaluator

Classifies each letter of a guess as correct, present or absent.

Duplicate letters are budgeted against the secret: exact matches consume
the budget first, then earlier misplaced occurrences left to right, and any
occurrence beyond the budget is absent.
"""

from typing import Dict, Iterable, List, Sequence, Tuple

from ..exceptions import ValidationError
from ..models.game import LetterStatus

_PRIORITY = {
    LetterStatus.UNUSED: 0,
    LetterStatus.ABSENT: 1,
    LetterStatus.PRESENT: 2,
    LetterStatus.CORRECT: 3,
}


def _normalize(guess: str, secret: str) -> Tuple[str, str]:
    guess = guess.strip().upper()
    secret = secret.strip().upper()
    if len(guess) != len(secret):
        raise ValidationError(
            f"Guess length ({len(guess)}) does not match secret length ({len(secret)})"
        )
    return guess, secret


def evaluate_letter(guess: str, secret: str, position: int) -> LetterStatus:
    """
    Status of guess[position] given the whole guess.

    Args:
        guess: The guessed word
        secret: The secret word
        position: Index of the letter to classify

    Returns:
        LetterStatus.CORRECT, PRESENT or ABSENT
    """
    guess, secret = _normalize(guess, secret)
    if not 0 <= position < len(guess):
        raise ValidationError(f"Position {position} is outside the word")

    letter = guess[position]
    if secret[position] == letter:
        return LetterStatus.CORRECT

    budget = secret.count(letter)

    # Exact matches anywhere in the guess always hold a slot
    used = sum(1 for g, s in zip(guess, secret) if g == letter and s == letter)

    # Earlier misplaced occurrences hold a slot while any remain
    for i in range(position):
        if guess[i] == letter and secret[i] != letter and used < budget:
            used += 1

    if budget and used < budget:
        return LetterStatus.PRESENT
    return LetterStatus.ABSENT


def evaluate_guess(guess: str, secret: str) -> List[Tuple[str, LetterStatus]]:
    """Evaluate every position of a guess, left to right."""
    guess, secret = _normalize(guess, secret)
    return [(guess[i], evaluate_letter(guess, secret, i)) for i in range(len(guess))]


def update_letter_status(letter_status: Dict[str, str],
                         evaluations: Iterable[Tuple[str, LetterStatus]]) -> None:
    """
    Update keyboard colours in place. A key only moves up in priority:
    unused, absent, present, correct.
    """
    for letter, new_status in evaluations:
        current = LetterStatus(letter_status.get(letter, LetterStatus.UNUSED.value))
        if _PRIORITY[new_status] > _PRIORITY[current]:
            letter_status[letter] = new_status.value


def filter_candidates(words: Iterable[str], guesses: Sequence[str], secret: str) -> List[str]:
    """
    Words still consistent with what the evaluated guesses revealed.

    A green letter must sit at its position, a yellow letter must appear
    elsewhere, a gray letter must not appear at all.
    """
    rows = [evaluate_guess(guess, secret) for guess in guesses if guess]
    if not rows:
        return list(words)

    def consistent(word: str) -> bool:
        for row in rows:
            scored = {letter for letter, status in row if status != LetterStatus.ABSENT}
            for i, (letter, status) in enumerate(row):
                if status == LetterStatus.CORRECT and word[i] != letter:
                    return False
                if status == LetterStatus.PRESENT and (letter not in word or word[i] == letter):
                    return False
                if status == LetterStatus.ABSENT:
                    # A gray duplicate of a scored letter only rules out this position
                    if letter in scored:
                        if word[i] == letter:
                            return False
                    elif letter in word:
                        return False
        return True

    return [word for word in words if consistent(word)]
