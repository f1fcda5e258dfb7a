"""
Game Logger Module for WordWise

Structured logging for user actions, server responses, game events and
sync cycles. One JSON document per line, written to a daily file.
"""

import logging
import json
from collections import Counter
from datetime import datetime
from typing import Dict, Any, Optional
from pathlib import Path

from .helpers import get_user_identity, mask_sync_code
from ..config.app_config import Config

# Keys that must never reach a log file
_SENSITIVE_KEYS = {'apiKey', 'api_key', 'X-API-Key'}

# Payload keys condensed to their shape
_BULKY_KEYS = ('data', 'currentData')

_STATE_SUMMARY = {
    'current_round': lambda state: state.get('current_round'),
    'game_over': lambda state: state.get('game_over'),
    'won': lambda state: state.get('won'),
    'guesses_count': lambda state: len(state.get('guesses') or []),
    'answer_revealed': lambda state: state.get('answer') is not None,
}

_STAT_BUCKETS = {
    'USER_ACTION': 'user_actions',
    'SERVER_RESPONSE_SUCCESS': 'server_responses',
    'SERVER_RESPONSE_ERROR': 'server_responses',
    'GAME_EVENT': 'game_events',
    'SYNC_EVENT': 'sync_events',
    'ERROR': 'errors',
}


class GameLogger:
    """
    Centralized logging system for WordWise.

    Every entry is `{timestamp, event_type, action, user, details}`.
    Sync codes are masked and API keys dropped before anything is written.
    """

    def __init__(self, log_dir: str = "logs", level: str = "INFO"):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.level = getattr(logging, str(level).upper(), logging.INFO)
        self.logger = self._setup_logger()

    def _log_file(self) -> Path:
        return self.log_dir / f"game_log_{datetime.now().strftime('%Y-%m-%d')}.log"

    def _setup_logger(self) -> logging.Logger:
        """File handler at the configured level, console for warnings and up."""
        logger = logging.getLogger('wordwise')
        logger.setLevel(self.level)
        logger.handlers.clear()

        file_handler = logging.FileHandler(self._log_file(), encoding='utf-8')
        file_handler.setLevel(self.level)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s | %(levelname)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))

        logger.addHandler(file_handler)
        logger.addHandler(console_handler)
        return logger

    def _emit(self, event_type: str, action: str, user: Dict[str, Any],
              details: Dict[str, Any], level: int = logging.INFO) -> None:
        entry = {
            'timestamp': datetime.now().isoformat(),
            'event_type': event_type,
            'action': action,
            'user': user,
            'details': details
        }
        self.logger.log(level, json.dumps(entry, ensure_ascii=False, default=str))

    @staticmethod
    def _request_details(request) -> Dict[str, Any]:
        return {
            'endpoint': request.endpoint,
            'method': request.method,
            'url': request.path,
        }

    def log_user_action(self, request, action: str, game_id: Optional[str] = None, **kwargs):
        """
        Log an incoming request.

        Args:
            request: Flask request object
            action: e.g. 'new_game', 'submit_guess', 'sync_pull'
            game_id: Game identifier if applicable
            **kwargs: Additional details to log
        """
        details = {'game_id': game_id, **self._request_details(request), **self._sanitize(kwargs)}
        self._emit('USER_ACTION', action, get_user_identity(request), details)

    def log_server_response(self, request, action: str, success: bool,
                            response_data: Dict[str, Any], game_id: Optional[str] = None, **kwargs):
        """
        Log what was sent back. Failed responses are logged at ERROR.

        Args:
            request: Flask request object
            action: Action that was performed
            success: Whether the action succeeded
            response_data: Data being returned to client, condensed before logging
            game_id: Game identifier if applicable
            **kwargs: Additional details to log
        """
        details = {
            'game_id': game_id,
            'success': success,
            'response_size': len(str(response_data)),
            'response_data': self._condense(response_data),
            **self._sanitize(kwargs)
        }
        event_type = 'SERVER_RESPONSE_SUCCESS' if success else 'SERVER_RESPONSE_ERROR'
        self._emit(event_type, action, get_user_identity(request), details,
                   logging.INFO if success else logging.ERROR)

    def log_game_event(self, game_id: Optional[str], event: str, user_ip: str = 'local', **kwargs):
        """Log a game lifecycle event such as 'game_created' or 'game_completed'."""
        user = {'user_ip': user_ip, 'session_id': None, 'username': None}
        self._emit('GAME_EVENT', event, user, {'game_id': game_id, **self._sanitize(kwargs)})

    def log_sync_event(self, code: Optional[str], event: str, success: bool = True, **kwargs):
        """
        Log one step of a sync cycle.

        Args:
            code: Sync code involved, if any (masked)
            event: e.g. 'sync_pull', 'sync_conflict', 'sync_push'
            success: Logged at ERROR level when False
            **kwargs: Additional details (versions, counts, error text)
        """
        details = {'code': mask_sync_code(code), 'success': success, **self._sanitize(kwargs)}
        self._emit('SYNC_EVENT', event, get_user_identity(), details,
                   logging.INFO if success else logging.ERROR)

    def log_error(self, request, error: Exception, action: str, game_id: Optional[str] = None):
        """Log an exception; request may be None outside a request context."""
        details = {
            'game_id': game_id,
            'error_type': type(error).__name__,
            'error_message': str(error),
            'action': action
        }
        self._emit('ERROR', action, get_user_identity(request), details, logging.ERROR)

    def _sanitize(self, data: Dict[str, Any]) -> Dict[str, Any]:
        sanitized = {key: value for key, value in data.items() if key not in _SENSITIVE_KEYS}
        if sanitized.get('code'):
            sanitized['code'] = mask_sync_code(sanitized['code'])
        return sanitized

    def _condense(self, data: Any) -> Dict[str, Any]:
        """Sanitize a response payload and reduce game states and snapshots to a summary."""
        if not isinstance(data, dict):
            return {'data_type': type(data).__name__}

        condensed = self._sanitize(data)

        state = condensed.get('state')
        if isinstance(state, dict):
            condensed['state'] = {name: read(state) for name, read in _STATE_SUMMARY.items()}

        for key in _BULKY_KEYS:
            if isinstance(condensed.get(key), dict):
                condensed[key] = {'keys': sorted(condensed[key])}

        return condensed

    def get_log_stats(self) -> Dict[str, Any]:
        """Counts of today's entries by kind, for the health endpoint."""
        log_file = self._log_file()
        if not log_file.exists():
            return {'error': 'No log file found for today'}

        counts = Counter()
        try:
            with open(log_file, 'r', encoding='utf-8') as f:
                for line in f:
                    _, _, message = line.rstrip('\n').partition(' | INFO | ')
                    if not message:
                        _, _, message = line.rstrip('\n').partition(' | ERROR | ')
                    if not message:
                        continue
                    counts['total_entries'] += 1
                    try:
                        event_type = json.loads(message).get('event_type')
                    except ValueError:
                        continue
                    if event_type in _STAT_BUCKETS:
                        counts[_STAT_BUCKETS[event_type]] += 1
        except OSError as e:
            return {'error': f'Failed to get stats: {e}'}

        stats = {
            'log_file': str(log_file),
            'file_size_mb': round(log_file.stat().st_size / (1024 * 1024), 2),
            'total_entries': counts['total_entries'],
        }
        stats.update({bucket: counts[bucket] for bucket in sorted(set(_STAT_BUCKETS.values()))})
        return stats


# Global logger instance
game_logger = GameLogger(Config.LOG_DIR, Config.LOG_LEVEL)
