"""
Data Models Package

Contains all data models and schemas used throughout the application.
"""

from .game import GameState, LetterStatus, GameOutcome, WordSource
from .history import HistoryEntry, LOSS_RESULT
from .snapshot import Settings, Snapshot
from .stats import Statistics
from .sync import RemoteRecord, SyncOutcome, SyncResult, SyncStatus

__all__ = [
    'GameState', 'LetterStatus', 'GameOutcome', 'WordSource',
    'HistoryEntry', 'LOSS_RESULT',
    'Settings', 'Snapshot',
    'Statistics',
    'RemoteRecord', 'SyncOutcome', 'SyncResult', 'SyncStatus',
]
