"""
Local Data Service

Typed access to everything a device persists: statistics, history, used
words, settings, the API key, the pending understanding rating, sync
configuration and the in-progress game.

Values are cached in memory once read or written. When the underlying
store fails, the error is logged and the cached value stays authoritative
for the rest of the session.
"""

from typing import Any, Dict, Optional, Set

from ..exceptions import StorageError, ValidationError
from ..models.snapshot import SETTINGS_KEYS, Settings, Snapshot
from ..models.stats import Statistics
from ..utils.game_logger import game_logger
from .history_service import HistoryStore, validate_understanding
from .local_store import LocalStore, read_json, write_json
from .stats_service import get_initial_stats

STATS_KEY = 'wordwise-stats'
USED_WORDS_KEY = 'wordwise-used'
API_KEY_KEY = 'wordwise-api-key'
PENDING_UNDERSTANDING_KEY = 'wordwise-pending-understanding'
SYNC_CODE_KEY = 'wordwise-sync-code'
SYNC_VERSION_KEY = 'wordwise-sync-version'
SYNC_ENABLED_KEY = 'wordwise-sync-enabled'
GAME_STATE_KEY = 'wordwise-game-state'

SETTING_STORAGE_KEYS = {
    'ai_enabled': 'wordwise-ai-enabled',
    'show_reasoning': 'wordwise-show-reasoning',
    'tier2_focus': 'wordwise-tier2-focus',
    'extended_info': 'wordwise-extended-info',
}

_MISSING = object()


class LocalDataService:
    """Persistence facade for one device."""

    def __init__(self, store: LocalStore, history: Optional[HistoryStore] = None):
        self.store = store
        self.history = history or HistoryStore(store)
        self._cache: Dict[str, Any] = {}

    # ── Internal helpers ──────────────────────────────────────────────────

    def _load(self, key: str, default: Any) -> Any:
        cached = self._cache.get(key, _MISSING)
        if cached is not _MISSING:
            return cached
        value = read_json(self.store, key, default)
        self._cache[key] = value
        return value

    def _save(self, key: str, value: Any) -> None:
        self._cache[key] = value
        write_json(self.store, key, value)

    def _load_text(self, key: str) -> Optional[str]:
        """Plain string values (API key, sync code) are stored without JSON quoting."""
        cached = self._cache.get(key, _MISSING)
        if cached is not _MISSING:
            return cached
        try:
            value = self.store.get(key) or None
        except StorageError as e:
            game_logger.log_error(None, e, f'load:{key}')
            value = None
        self._cache[key] = value
        return value

    def _save_text(self, key: str, value: Optional[str]) -> None:
        self._cache[key] = value
        try:
            if value:
                self.store.set(key, value)
            else:
                self.store.remove(key)
        except StorageError as e:
            game_logger.log_error(None, e, f'save:{key}')

    # ── Statistics ────────────────────────────────────────────────────────

    def load_stats(self) -> Statistics:
        data = self._load(STATS_KEY, None)
        if not isinstance(data, dict):
            return get_initial_stats()
        try:
            return Statistics.from_dict(data)
        except ValidationError as e:
            game_logger.log_error(None, e, f'load:{STATS_KEY}')
            return get_initial_stats()

    def save_stats(self, stats: Statistics) -> None:
        self._save(STATS_KEY, stats.to_dict())

    # ── Used words ────────────────────────────────────────────────────────

    def load_used_words(self) -> Set[str]:
        data = self._load(USED_WORDS_KEY, [])
        return {str(word).upper() for word in data} if isinstance(data, list) else set()

    def save_used_words(self, used_words: Set[str]) -> None:
        self._save(USED_WORDS_KEY, sorted(used_words))

    def add_used_word(self, word: str) -> None:
        used_words = self.load_used_words()
        used_words.add(word.upper())
        self.save_used_words(used_words)

    def clear_used_words(self) -> None:
        self._save(USED_WORDS_KEY, None)

    # ── Settings ──────────────────────────────────────────────────────────

    def load_settings(self) -> Settings:
        """Stored settings; keys never written read as unset."""
        values = {}
        for attr, key in SETTING_STORAGE_KEYS.items():
            value = self._load(key, None)
            values[attr] = bool(value) if value is not None else None
        return Settings(**values)

    def effective_settings(self) -> Settings:
        """Stored settings with defaults filled in, for gameplay decisions."""
        stored = self.load_settings()
        defaults = Settings.defaults()
        return Settings(**{
            attr: getattr(stored, attr) if getattr(stored, attr) is not None else getattr(defaults, attr)
            for attr in SETTINGS_KEYS
        })

    def save_settings(self, settings: Settings) -> None:
        """Write every set field; unset fields are left as they are."""
        for attr, key in SETTING_STORAGE_KEYS.items():
            value = getattr(settings, attr)
            if value is not None:
                self._save(key, bool(value))

    def set_setting(self, name: str, enabled: bool) -> None:
        if name not in SETTING_STORAGE_KEYS:
            raise KeyError(f"Unknown setting: {name}")
        self._save(SETTING_STORAGE_KEYS[name], bool(enabled))

    # ── API key (never part of a snapshot) ────────────────────────────────

    def load_api_key(self) -> Optional[str]:
        return self._load_text(API_KEY_KEY)

    def save_api_key(self, api_key: Optional[str]) -> None:
        self._save_text(API_KEY_KEY, (api_key or '').strip() or None)

    # ── Pending understanding ─────────────────────────────────────────────

    def load_pending_understanding(self) -> Optional[int]:
        value = self._load(PENDING_UNDERSTANDING_KEY, None)
        return int(value) if isinstance(value, (int, float)) and not isinstance(value, bool) else None

    def save_pending_understanding(self, rating: Optional[int]) -> None:
        validate_understanding(rating)
        self._save(PENDING_UNDERSTANDING_KEY, rating)

    def flush_pending_understanding(self) -> None:
        """Attach a queued rating to the most recent game, then clear it."""
        rating = self.load_pending_understanding()
        if rating is None:
            return
        entry = self.history.attach_understanding(rating)
        if entry is not None:
            game_logger.log_game_event(None, 'understanding_rated', word=entry.word, understanding=rating)
        self.save_pending_understanding(None)

    # ── Sync configuration ────────────────────────────────────────────────

    def load_sync_code(self) -> Optional[str]:
        return self._load_text(SYNC_CODE_KEY)

    def save_sync_code(self, code: Optional[str]) -> None:
        self._save_text(SYNC_CODE_KEY, code)

    def load_sync_version(self) -> int:
        value = self._load(SYNC_VERSION_KEY, 0)
        return int(value) if isinstance(value, (int, float)) and not isinstance(value, bool) else 0

    def save_sync_version(self, version: int) -> None:
        self._save(SYNC_VERSION_KEY, int(version))

    def load_sync_enabled(self) -> bool:
        return self._load(SYNC_ENABLED_KEY, False) is True

    def save_sync_enabled(self, enabled: bool) -> None:
        self._save(SYNC_ENABLED_KEY, bool(enabled))

    # ── In-progress game ──────────────────────────────────────────────────

    def load_game_state(self) -> Optional[Dict[str, Any]]:
        data = self._load(GAME_STATE_KEY, None)
        return data if isinstance(data, dict) else None

    def save_game_state(self, state: Dict[str, Any]) -> None:
        self._save(GAME_STATE_KEY, state)

    def clear_game_state(self) -> None:
        self._save(GAME_STATE_KEY, None)

    # ── Snapshots ─────────────────────────────────────────────────────────

    def snapshot(self) -> Snapshot:
        """Everything that syncs. Never includes the API key."""
        return Snapshot(
            stats=self.load_stats(),
            history=self.history.entries(),
            used_words=self.load_used_words(),
            settings=self.load_settings(),
        )

    def apply_snapshot(self, snapshot: Snapshot) -> None:
        """Persist a merged snapshot as this device's state."""
        self.save_stats(snapshot.stats)
        self.history.replace(snapshot.history)
        self.save_used_words(set(snapshot.used_words))
        self.save_settings(snapshot.settings)

    def reset_all(self) -> None:
        """Start fresh: statistics, history and used words. Settings are kept."""
        self.save_stats(get_initial_stats())
        self.history.clear()
        self.clear_used_words()
