"""
Services Package

Contains all business logic and service classes.
"""

from .game_service import GameService, get_game_service, initialize_game_service
from .local_data_service import LocalDataService
from .local_store import LocalStore, InMemoryLocalStore, JsonFileLocalStore, create_local_store
from .history_service import HistoryStore
from .merge_service import merge
from .stats_service import get_initial_stats, reset_statistics, update_statistics
from .evaluator import evaluate_letter, evaluate_guess
from .sync_service import SyncClient, get_sync_client, initialize_sync_client
from .sync_store_service import SyncStoreService, get_sync_store_service, initialize_sync_store_service
from .sync_transport import SyncTransport, HttpSyncTransport, InProcessSyncTransport
from .word_picker import WordPicker

__all__ = [
    'GameService', 'get_game_service', 'initialize_game_service',
    'LocalDataService', 'LocalStore', 'InMemoryLocalStore', 'JsonFileLocalStore', 'create_local_store',
    'HistoryStore', 'merge',
    'get_initial_stats', 'reset_statistics', 'update_statistics',
    'evaluate_letter', 'evaluate_guess',
    'SyncClient', 'get_sync_client', 'initialize_sync_client',
    'SyncStoreService', 'get_sync_store_service', 'initialize_sync_store_service',
    'SyncTransport', 'HttpSyncTransport', 'InProcessSyncTransport',
    'WordPicker'
]
