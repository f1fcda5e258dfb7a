"""
Game Configuration Constants Module

Game rules, the curated answer list and the wider set of accepted guesses.
Everything the evaluator, the statistics engine and the history log treat
as a fixed rule of the game lives here.
"""

import json
import os
import sys
from typing import List, Final

WORD_LENGTH: Final[int] = 5

MAX_ROUNDS: Final[int] = 6
"""
Maximum number of guess attempts allowed per game.
Also the length of the guess distribution in the statistics.
"""

MAX_HISTORY_SIZE: Final[int] = 20
"""Number of most recent games retained in the history log."""

MAX_UNDERSTANDING: Final[int] = 10

ANSWERS_FILE: Final[str] = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'answers.json')
ALLOWED_FILE: Final[str] = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'allowed.json')


def _check_word(word: str, where: str) -> None:
    if len(word) != WORD_LENGTH:
        raise ValueError(f"{where} '{word}' is not {WORD_LENGTH} characters long")
    if not word.isalpha():
        raise ValueError(f"{where} '{word}' contains non-alphabetic characters")


def _load_word_list(path: str = ANSWERS_FILE) -> List[str]:
    """
    Read a word list file, uppercasing every entry.

    Raises:
        FileNotFoundError: If the file is missing
        ValueError: If the file is malformed, empty or holds a bad word
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            words = json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Word list file not found: {path}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {os.path.basename(path)}: {e}")

    if not isinstance(words, list) or not words:
        raise ValueError("Word list must be a non-empty JSON array")

    words = [str(word).strip().upper() for word in words]
    for word in words:
        _check_word(word, "Word")
    return words


# Curated answer list
WORD_LIST: Final[List[str]] = _load_word_list()

# Accepted as guesses but never chosen as answers
ALLOWED_GUESSES: Final[List[str]] = _load_word_list(ALLOWED_FILE)


def validate_word_list_integrity() -> bool:
    """
    Re-check the loaded list: shape of every word, uppercase, no duplicates.

    Raises:
        ValueError: Naming the first offending word
    """
    if not WORD_LIST:
        raise ValueError("Word list cannot be empty")

    for index, word in enumerate(WORD_LIST):
        _check_word(word, f"Word at index {index}")
        if not word.isupper():
            raise ValueError(f"Word at index {index} '{word}' is not in uppercase format")

    seen = set()
    duplicates = sorted({word for word in WORD_LIST if word in seen or seen.add(word)})
    if duplicates:
        raise ValueError(f"Duplicate words found in word list: {duplicates}")

    return True


if __name__ == "__main__":
    try:
        validate_word_list_integrity()
        print(f"✓ Word list validation passed ({len(WORD_LIST)} words)")
    except ValueError as config_error:
        print(f"✗ Configuration validation failed: {config_error}")
        sys.exit(1)
