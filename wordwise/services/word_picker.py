"""
Word Picker

Chooses the secret word for a new game: uniformly at random from the unused
answer words, or through the AI proxy once the player has enough history.
Any AI failure falls back to the list.

Also answers the learn-a-word lookups: dictionary definitions, and etymology
and translations through the same AI proxy.
"""

import json
import random
import re
from typing import Iterable, List, Optional, Set, Tuple

import requests

from ..config.game_settings import ALLOWED_GUESSES, WORD_LENGTH, WORD_LIST
from ..exceptions import NetworkError, ValidationError, WordsExhaustedError
from ..models.game import WordSource
from ..models.history import HistoryEntry
from ..utils.game_logger import game_logger

RECENT_GAMES_IN_PROMPT = 30
WORD_MAX_TOKENS = 50
REASONING_MAX_TOKENS = 100
EXTENDED_INFO_MAX_TOKENS = 800
DICTIONARY_API_URL = 'https://api.dictionaryapi.dev/api/v2/entries/en'

_CODE_FENCE = re.compile(r"```(?:json)?\n?")

TIER2_GUIDANCE = """

TIER II FOCUS: Prioritize Tier II vocabulary:
- High-frequency across contexts (not domain-specific)
- Academically valuable
- Complex but not obscure
Good: INFER, ADAPT, YIELD, IMPLY, SHIFT
Avoid basic: CATCH, SLEEP, HAPPY, WATER
Avoid specialized: STEAM, MOLAR, PRISM"""


def build_prompt(history: List[HistoryEntry], tier2_focus: bool = False) -> str:
    """Word selection prompt summarizing the player's recent games."""
    total = len(history)
    won = [entry for entry in history if entry.won]
    win_rate = round(len(won) / total * 100) if total else 0
    avg_guesses = round(sum(entry.result for entry in won) / len(won), 1) if won else 0

    recent = []
    for entry in history[-RECENT_GAMES_IN_PROMPT:]:
        item = f"{entry.word}({entry.result}"
        if entry.understanding:
            item += f",{entry.understanding}"
        item += ",a)" if entry.source == WordSource.AI else ",l)"
        recent.append(item)

    prompt = (
        "Select next 5-letter English word for user:\n"
        f"Stats: {total} games, {win_rate}% win, {avg_guesses} avg\n"
        f"Recent30: {','.join(recent)}\n"
        "Format: WORD(result,understanding,source) where result=1-6 if won or -1 if lost, "
        "source=a(AI) or l(list)\n"
        "Do not repeat words from Recent30."
    )
    if tier2_focus:
        prompt += TIER2_GUIDANCE
    prompt += "\n\nReturn only the word, nothing else."
    return prompt


def build_extended_info_prompt(word: str) -> str:
    return f"""For "{word}":

1. Etymology (2 sentences max)
2. Word family (4 related 5-letter words with brief definitions)
3. German and Croatian: translation, definition, 2 examples each

JSON format:
{{
  "e": "etymology text",
  "f": ["WORD - def", "WORD - def", ...],
  "de": {{
    "w": "word",
    "d": "definition",
    "ex": ["example 1", "example 2"]
  }},
  "hr": {{
    "w": "word",
    "d": "definition",
    "ex": ["example 1", "example 2"]
  }}
}}

Keep under 250 words. Return ONLY valid JSON."""


class WordPicker:
    """Secret word selection from the answer list or the AI proxy, plus word lookups."""

    def __init__(self,
                 word_list: Optional[Iterable[str]] = None,
                 proxy_url: Optional[str] = None,
                 model: str = 'claude-haiku-4-5',
                 timeout: float = 15.0,
                 session: Optional[requests.Session] = None,
                 rng: Optional[random.Random] = None,
                 allowed_words: Optional[Iterable[str]] = None,
                 dictionary_url: str = DICTIONARY_API_URL):
        self.word_list = list(word_list) if word_list is not None else WORD_LIST.copy()
        allowed = allowed_words if allowed_words is not None else ALLOWED_GUESSES
        self.valid_guesses = set(self.word_list) | set(allowed)
        self.dictionary_url = dictionary_url.rstrip('/')
        self.proxy_url = proxy_url
        self.model = model
        self.timeout = timeout
        self.session = session or requests.Session()
        self._rng = rng or random.Random()

    @property
    def ai_available(self) -> bool:
        return bool(self.proxy_url)

    def is_accepted_guess(self, word: str) -> bool:
        """Answer words and the wider allowed list are both valid guesses."""
        return word in self.valid_guesses

    def available_words(self, used_words: Set[str]) -> List[str]:
        return [word for word in self.word_list if word not in used_words]

    def pick_from_list(self, used_words: Set[str]) -> Optional[str]:
        """Random unused answer word, or None when every word has been used."""
        available = self.available_words(used_words)
        if not available:
            return None
        return self._rng.choice(available)

    def _ask(self, prompt: str, api_key: str, max_tokens: int) -> str:
        payload = {
            'model': self.model,
            'max_tokens': max_tokens,
            'messages': [{'role': 'user', 'content': prompt}],
        }
        headers = {'Content-Type': 'application/json', 'X-API-Key': api_key}
        try:
            response = self.session.post(self.proxy_url, json=payload, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Could not reach AI proxy: {e}") from e

        if response.status_code == 401:
            raise NetworkError('Invalid API key')
        if response.status_code == 429:
            raise NetworkError('API rate limit exceeded')
        if response.status_code >= 500:
            raise NetworkError('AI service is temporarily unavailable')
        if not response.ok:
            raise NetworkError(f"AI request failed with status {response.status_code}")

        try:
            return response.json()['content'][0]['text'].strip()
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            raise ValidationError('Unexpected response from AI proxy') from e

    def pick_with_ai(self, history: List[HistoryEntry], used_words: Set[str],
                     tier2_focus: bool, api_key: str) -> str:
        """
        Ask the AI proxy for a word tailored to the player's history.

        Raises:
            NetworkError: Proxy unreachable or returned an error status
            ValidationError: Reply is not an unused five-letter word
        """
        word = self._ask(build_prompt(history, tier2_focus), api_key, WORD_MAX_TOKENS).upper()

        if len(word) != WORD_LENGTH or not word.isalpha() or not word.isascii():
            raise ValidationError(f"Invalid word format from API: {word!r}")
        if word in used_words:
            raise ValidationError(f"API returned already-used word: {word}")
        return word

    def explain_choice(self, word: str, history: List[HistoryEntry], api_key: str) -> Optional[str]:
        """One-sentence reasoning for an AI pick, or None if the proxy fails."""
        recent = ','.join(
            f"{entry.word}({'won' if entry.won else 'lost'})" for entry in history[-5:]
        )
        prompt = (
            f'You selected "{word}" for a user who recently played: {recent}. '
            "In ONE sentence, explain why this word is appropriate for their skill level."
        )
        try:
            return self._ask(prompt, api_key, REASONING_MAX_TOKENS)
        except (NetworkError, ValidationError) as e:
            game_logger.log_error(None, e, 'explain_choice')
            return None

    def lookup_definition(self, word: str) -> list:
        """
        Dictionary entries for a word, as returned by the dictionary API.

        Raises:
            NetworkError: Dictionary unreachable or has no entry for the word
            ValidationError: Reply is not a list of entries
        """
        url = f"{self.dictionary_url}/{word.lower()}"
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Could not reach dictionary: {e}") from e

        if not response.ok:
            raise NetworkError('Definition not available')

        try:
            entries = response.json()
        except ValueError as e:
            raise ValidationError('Unexpected response from dictionary') from e
        if not isinstance(entries, list):
            raise ValidationError('Unexpected response from dictionary')
        return entries

    def get_extended_info(self, word: str, api_key: str) -> dict:
        """
        Etymology, word family and translations for a word, through the AI proxy.

        Raises:
            NetworkError: Proxy unreachable, not configured or returned an error status
            ValidationError: Reply is not a JSON object
        """
        if not self.ai_available:
            raise NetworkError('AI proxy is not configured')

        text = self._ask(build_extended_info_prompt(word.upper()), api_key, EXTENDED_INFO_MAX_TOKENS)
        text = _CODE_FENCE.sub('', text).strip()
        try:
            info = json.loads(text)
        except ValueError as e:
            raise ValidationError('Extended info is not valid JSON') from e
        if not isinstance(info, dict):
            raise ValidationError('Extended info is not valid JSON')
        return info

    def pick(self, history: List[HistoryEntry], used_words: Set[str],
             use_ai: bool = False, tier2_focus: bool = False,
             api_key: Optional[str] = None) -> Tuple[str, WordSource]:
        """
        Choose the next secret word.

        Returns:
            Tuple of (word, source)

        Raises:
            WordsExhaustedError: AI unavailable or failed and no list words remain
        """
        if use_ai and api_key and self.ai_available:
            try:
                return self.pick_with_ai(history, used_words, tier2_focus, api_key), WordSource.AI
            except (NetworkError, ValidationError) as e:
                game_logger.log_error(None, e, 'pick_with_ai')

        word = self.pick_from_list(used_words)
        if word is None:
            raise WordsExhaustedError('All words have been used')
        return word, WordSource.LIST
