"""
Game Controller

Handles all game-related HTTP endpoints.
"""

from flask import Blueprint, request, jsonify
from dataclasses import asdict
from ..exceptions import WordsExhaustedError
from ..services.game_service import get_game_service
from ..services.sync_service import get_sync_client
from ..services.sync_store_service import get_sync_store_service
from ..utils.decorators import require_service
from ..utils.game_logger import game_logger

game_bp = Blueprint('game', __name__)


def _reject(action, error, status, game_id=None, **extra):
    """Client-side failure: log the response and return it."""
    error_response = {
        'success': False,
        'error': error,
        **extra
    }
    game_logger.log_server_response(request, action, False, error_response, game_id)
    return jsonify(error_response), status


def _crash(action, e, game_id=None):
    """Unexpected failure: log the exception, answer 500."""
    game_logger.log_error(request, e, action, game_id)
    return _reject(action, str(e), 500, game_id)


@game_bp.route('/new_game', methods=['POST'])
@require_service(get_game_service, 'game_service')
def new_game(game_service):
    """Create a new game session."""
    try:
        game_logger.log_user_action(request, 'new_game')

        game_id = game_service.create_new_game()
        state = game_service.get_game_state(game_id)
        response_data = {
            'success': True,
            'game_id': game_id,
            'state': asdict(state)
        }

        game_logger.log_server_response(
            request, 'new_game', True, response_data, game_id,
            max_rounds=state.max_rounds, word_source=state.word_source
        )
        return jsonify(response_data)

    except WordsExhaustedError as e:
        # The client offers a fresh start
        return _reject('new_game', str(e), 409, words_exhausted=True)
    except Exception as e:
        return _crash('new_game', e)


@game_bp.route('/game/<game_id>/state', methods=['GET'])
@require_service(get_game_service, 'game_service')
def get_state(game_id, game_service):
    """Current game state. The answer is only present once the game is over."""
    try:
        game_logger.log_user_action(request, 'get_state', game_id)

        state = game_service.get_game_state(game_id)
        if state is None:
            return _reject('get_state', 'Game not found', 404, game_id)

        response_data = {
            'success': True,
            'state': asdict(state)
        }
        game_logger.log_server_response(
            request, 'get_state', True, response_data, game_id,
            current_round=state.current_round, game_over=state.game_over
        )
        return jsonify(response_data)

    except Exception as e:
        return _crash('get_state', e, game_id)


@game_bp.route('/game/<game_id>/guess', methods=['POST'])
@require_service(get_game_service, 'game_service')
def make_guess(game_id, game_service):
    """
    Submit a guess, body {"guess": "crane"}.

    When the guess ends the game the response also carries the result of
    the sync that followed, under "sync".
    """
    try:
        data = request.get_json(silent=True)
        if not data or 'guess' not in data:
            return _reject('submit_guess', 'Guess is required', 400, game_id)

        guess = data['guess']
        game_logger.log_user_action(request, 'submit_guess', game_id, guess=guess)

        is_valid, error = game_service.is_valid_guess(game_id, guess)
        if not is_valid:
            status = 404 if error == 'Game not found' else 400
            return _reject('submit_guess', error, status, game_id)

        state = game_service.make_guess(game_id, guess)
        if state is None:
            return _reject('submit_guess', 'Failed to process guess', 500, game_id)

        response_data = {
            'success': True,
            'state': asdict(state)
        }
        if state.game_over and game_service.last_sync_result is not None:
            response_data['sync'] = game_service.last_sync_result.to_dict()

        game_logger.log_server_response(
            request, 'submit_guess', True, response_data, game_id,
            round=state.current_round, game_over=state.game_over
        )
        return jsonify(response_data)

    except Exception as e:
        return _crash('submit_guess', e, game_id)


@game_bp.route('/game/<game_id>/remaining', methods=['GET'])
@require_service(get_game_service, 'game_service')
def remaining_words(game_id, game_service):
    """Answer words still consistent with the guesses so far."""
    try:
        game_logger.log_user_action(request, 'remaining_words', game_id)

        words = game_service.get_remaining_words(game_id)
        if words is None:
            return _reject('remaining_words', 'Game not found', 404, game_id)

        game_logger.log_server_response(request, 'remaining_words', True, {'count': len(words)}, game_id)
        return jsonify({
            'success': True,
            'count': len(words),
            'words': words
        })

    except Exception as e:
        return _crash('remaining_words', e, game_id)


@game_bp.route('/game/<game_id>', methods=['DELETE'])
@require_service(get_game_service, 'game_service')
def delete_game(game_id, game_service):
    """Abandon a game session. Nothing is recorded for it."""
    try:
        game_logger.log_user_action(request, 'delete_game', game_id)

        if not game_service.delete_game(game_id):
            return _reject('delete_game', 'Game not found', 404, game_id)

        response_data = {'success': True}
        game_logger.log_server_response(request, 'delete_game', True, response_data, game_id)
        game_logger.log_game_event(game_id, 'game_deleted', request.remote_addr)
        return jsonify(response_data)

    except Exception as e:
        return _crash('delete_game', e, game_id)


@game_bp.route('/health', methods=['GET'])
def health_check():
    """Service availability, sync state and today's log counts."""
    try:
        game_service = get_game_service()
        sync_client = get_sync_client()

        game_logger.log_user_action(request, 'health_check')

        response_data = {
            'status': 'healthy',
            'active_games': len(game_service.games) if game_service else 0,
            'log_stats': game_logger.get_log_stats(),
            'sync_store_available': get_sync_store_service() is not None,
            'sync_enabled': bool(sync_client and sync_client.local_data.load_sync_enabled()),
            'sync_status': sync_client.status.value if sync_client else None
        }

        game_logger.log_server_response(request, 'health_check', True, response_data)
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'health_check')
        return jsonify({'status': 'error', 'error': str(e)}), 500
