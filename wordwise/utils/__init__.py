"""
Utilities Package

Contains utility functions, decorators, and helper modules.
"""

from .decorators import require_service
from .helpers import get_user_identity, mask_sync_code, normalize_sync_code, is_valid_sync_code
from .game_logger import game_logger

__all__ = [
    'require_service', 'get_user_identity',
    'mask_sync_code', 'normalize_sync_code', 'is_valid_sync_code',
    'game_logger'
]
