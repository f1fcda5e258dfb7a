"""
Merge Engine

Reconciles two independently evolved snapshots of the same player.

Cumulative counters take the maximum of both sides. The current streak is
a fact about the latest game, so it comes from whichever side played most
recently. History is a union by id, used words a set union, and settings
prefer the local device.
"""

from dataclasses import replace
from typing import Callable, Dict, List, Optional

from ..config.game_settings import MAX_HISTORY_SIZE
from ..models.history import HistoryEntry
from ..models.snapshot import SETTINGS_DEFAULTS, SETTINGS_KEYS, Settings, Snapshot
from ..models.stats import Statistics
from .history_service import generate_id, now_ms, trim_history


def _last_played(history: List[HistoryEntry]) -> Optional[int]:
    if not history:
        return None
    return max(entry.sort_key for entry in history)


def merge_current_streak(local: Snapshot, remote: Snapshot) -> int:
    """
    Streak from the side whose latest game is strictly newer.
    One-sided history wins outright; no history at all keeps local.
    """
    local_last = _last_played(local.history)
    remote_last = _last_played(remote.history)

    if local_last is not None and remote_last is not None:
        if remote_last > local_last:
            return remote.stats.current_streak
        return local.stats.current_streak
    if remote_last is not None:
        return remote.stats.current_streak
    return local.stats.current_streak


def merge_stats(local: Snapshot, remote: Snapshot) -> Statistics:
    ls, rs = local.stats, remote.stats
    return Statistics(
        played=max(ls.played, rs.played),
        wins=max(ls.wins, rs.wins),
        current_streak=merge_current_streak(local, remote),
        max_streak=max(ls.max_streak, rs.max_streak),
        guess_distribution=[max(a, b) for a, b in zip(ls.guess_distribution, rs.guess_distribution)],
        ai_words=max(ls.ai_words, rs.ai_words),
        list_words=max(ls.list_words, rs.list_words),
    )


def merge_history(local: List[HistoryEntry],
                  remote: List[HistoryEntry],
                  id_factory: Callable[[], str] = generate_id,
                  clock: Callable[[], int] = now_ms,
                  max_size: int = MAX_HISTORY_SIZE) -> List[HistoryEntry]:
    """
    Union keyed by id. A remote copy replaces the local one only when both
    carry timestamps and the remote one is newer. Entries without an id are
    never deduplicated: each gets a fresh id and the merge time as its
    timestamp.
    """
    by_id: Dict[str, HistoryEntry] = {}
    backfilled: List[HistoryEntry] = []

    def backfill(entry: HistoryEntry) -> HistoryEntry:
        return replace(entry, id=id_factory(), timestamp=clock())

    for entry in local:
        if entry.is_legacy:
            backfilled.append(backfill(entry))
        else:
            by_id[entry.id] = replace(entry)

    for entry in remote:
        if entry.is_legacy:
            backfilled.append(backfill(entry))
            continue
        existing = by_id.get(entry.id)
        if existing is None or (
            entry.timestamp is not None
            and existing.timestamp is not None
            and entry.timestamp > existing.timestamp
        ):
            by_id[entry.id] = replace(entry)

    return trim_history(list(by_id.values()) + backfilled, max_size)


def merge_settings(local: Settings, remote: Settings) -> Settings:
    """Local when set, else remote when set, else the default."""
    values = {}
    for attr in SETTINGS_KEYS:
        local_value = getattr(local, attr)
        remote_value = getattr(remote, attr)
        if local_value is not None:
            values[attr] = local_value
        elif remote_value is not None:
            values[attr] = remote_value
        else:
            values[attr] = SETTINGS_DEFAULTS[attr]
    return Settings(**values)


def merge(local: Snapshot,
          remote: Snapshot,
          id_factory: Callable[[], str] = generate_id,
          clock: Callable[[], int] = now_ms) -> Snapshot:
    """
    Merge two snapshots into a new one. Neither input is modified.

    Args:
        local: This device's snapshot
        remote: The snapshot read from the remote store
        id_factory: Id generator for legacy entries
        clock: Millisecond clock for legacy entries

    Returns:
        Snapshot: The merged snapshot
    """
    return Snapshot(
        stats=merge_stats(local, remote),
        history=merge_history(local.history, remote.history, id_factory, clock),
        used_words=set(local.used_words) | set(remote.used_words),
        settings=merge_settings(local.settings, remote.settings),
    )
