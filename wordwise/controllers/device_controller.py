"""
Device Controller

HTTP endpoints for the data this device keeps between games: statistics,
history, the understanding rating, settings, the API key, word lookups
and the sync configuration.
"""

from flask import Blueprint, request, jsonify
from ..config.game_settings import WORD_LENGTH
from ..exceptions import NetworkError, ValidationError
from ..models.snapshot import SETTINGS_KEYS
from ..models.sync import SyncOutcome
from ..services.game_service import get_game_service
from ..services.sync_service import get_sync_client
from ..utils.decorators import require_service
from ..utils.game_logger import game_logger

device_bp = Blueprint('device', __name__)

_SYNC_STATUS_CODES = {
    SyncOutcome.SUCCESS: 200,
    SyncOutcome.SKIPPED: 200,
    SyncOutcome.INVALID_FORMAT: 400,
    SyncOutcome.NOT_FOUND: 404,
    SyncOutcome.CONFLICT: 409,
    SyncOutcome.NETWORK_ERROR: 502,
}

_WIRE_TO_SETTING = {wire_key: attr for attr, wire_key in SETTINGS_KEYS.items()}


def _fail(action, error, status):
    error_response = {
        'success': False,
        'error': error
    }
    game_logger.log_server_response(request, action, False, error_response)
    return jsonify(error_response), status


def _sync_response(action, result):
    response_data = result.to_dict()
    game_logger.log_server_response(request, action, result.ok, response_data)
    return jsonify(response_data), _SYNC_STATUS_CODES.get(result.outcome, 500)


# ── Statistics and history ────────────────────────────────────────────────

@device_bp.route('/stats', methods=['GET'])
@require_service(get_game_service, 'game_service')
def get_stats(game_service):
    """Current statistics."""
    try:
        game_logger.log_user_action(request, 'get_stats')

        response_data = {
            'success': True,
            'stats': game_service.get_statistics().to_dict()
        }

        game_logger.log_server_response(request, 'get_stats', True, response_data)
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'get_stats')
        return _fail('get_stats', str(e), 500)


@device_bp.route('/stats/reset', methods=['POST'])
@require_service(get_game_service, 'game_service')
def reset_stats(game_service):
    """Reset statistics to zero. History and used words are kept."""
    try:
        game_logger.log_user_action(request, 'reset_stats')

        response_data = {
            'success': True,
            'stats': game_service.reset_statistics().to_dict()
        }

        game_logger.log_server_response(request, 'reset_stats', True, response_data)
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'reset_stats')
        return _fail('reset_stats', str(e), 500)


@device_bp.route('/start_fresh', methods=['POST'])
@require_service(get_game_service, 'game_service')
def start_fresh(game_service):
    """Clear statistics, history and used words."""
    try:
        game_logger.log_user_action(request, 'start_fresh')

        game_service.start_fresh()
        response_data = {'success': True}

        game_logger.log_server_response(request, 'start_fresh', True, response_data)
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'start_fresh')
        return _fail('start_fresh', str(e), 500)


@device_bp.route('/history', methods=['GET'])
@require_service(get_game_service, 'game_service')
def get_history(game_service):
    """Recent games, oldest first."""
    try:
        game_logger.log_user_action(request, 'get_history')

        history = [entry.to_dict() for entry in game_service.get_history()]
        response_data = {
            'success': True,
            'count': len(history),
            'history': history
        }

        game_logger.log_server_response(request, 'get_history', True, {'count': len(history)})
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'get_history')
        return _fail('get_history', str(e), 500)


@device_bp.route('/understanding', methods=['POST'])
@require_service(get_game_service, 'game_service')
def rate_understanding(game_service):
    """Queue a 0..10 rating for the last game."""
    try:
        data = request.get_json(silent=True) or {}
        rating = data.get('rating')

        game_logger.log_user_action(request, 'rate_understanding', rating=rating)

        game_service.rate_understanding(rating)
        response_data = {
            'success': True,
            'pending': rating
        }

        game_logger.log_server_response(request, 'rate_understanding', True, response_data)
        return jsonify(response_data)

    except ValidationError as e:
        return _fail('rate_understanding', str(e), 400)
    except Exception as e:
        game_logger.log_error(request, e, 'rate_understanding')
        return _fail('rate_understanding', str(e), 500)


# ── Settings and API key ──────────────────────────────────────────────────

@device_bp.route('/settings', methods=['GET'])
@require_service(get_game_service, 'game_service')
def get_settings(game_service):
    """Effective settings. The API key itself is never returned."""
    try:
        game_logger.log_user_action(request, 'get_settings')

        local_data = game_service.local_data
        response_data = {
            'success': True,
            'settings': local_data.effective_settings().to_dict(),
            'has_api_key': local_data.load_api_key() is not None
        }

        game_logger.log_server_response(request, 'get_settings', True, response_data)
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'get_settings')
        return _fail('get_settings', str(e), 500)


@device_bp.route('/settings', methods=['PUT'])
@require_service(get_game_service, 'game_service')
def update_settings(game_service):
    """Set one or more settings, e.g. {"aiEnabled": false}."""
    try:
        data = request.get_json(silent=True) or {}
        unknown = [key for key in data if key not in _WIRE_TO_SETTING]
        if unknown or not data:
            return _fail('update_settings', f"Unknown or missing settings: {', '.join(unknown) or 'none given'}", 400)

        non_boolean = [key for key, value in data.items() if not isinstance(value, bool)]
        if non_boolean:
            return _fail('update_settings', f"Settings must be true or false: {', '.join(non_boolean)}", 400)

        game_logger.log_user_action(request, 'update_settings', **data)

        local_data = game_service.local_data
        for wire_key, value in data.items():
            local_data.set_setting(_WIRE_TO_SETTING[wire_key], value)

        response_data = {
            'success': True,
            'settings': local_data.effective_settings().to_dict()
        }

        game_logger.log_server_response(request, 'update_settings', True, response_data)
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'update_settings')
        return _fail('update_settings', str(e), 500)


@device_bp.route('/api_key', methods=['PUT', 'DELETE'])
@require_service(get_game_service, 'game_service')
def update_api_key(game_service):
    """Store or forget the AI API key. Removing it turns AI selection off."""
    try:
        game_logger.log_user_action(request, 'update_api_key')

        local_data = game_service.local_data
        if request.method == 'DELETE':
            local_data.save_api_key(None)
            local_data.set_setting('ai_enabled', False)
        else:
            api_key = (request.get_json(silent=True) or {}).get('apiKey')
            if not isinstance(api_key, str) or not api_key.strip():
                return _fail('update_api_key', 'apiKey is required', 400)
            local_data.save_api_key(api_key)

        response_data = {
            'success': True,
            'has_api_key': local_data.load_api_key() is not None
        }

        game_logger.log_server_response(request, 'update_api_key', True, response_data)
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'update_api_key')
        return _fail('update_api_key', str(e), 500)


# ── Learn a word ──────────────────────────────────────────────────────────

@device_bp.route('/learn/<word>', methods=['GET'])
@require_service(get_game_service, 'game_service')
def learn_word(game_service, word):
    """
    Dictionary definition of a word, plus etymology and translations when
    the extendedInfo setting is on and an API key is stored. A failed lookup
    is reported in its *_error field and does not fail the other one.
    """
    try:
        word = word.strip().upper()
        game_logger.log_user_action(request, 'learn_word', word=word)

        if len(word) != WORD_LENGTH or not word.isalpha():
            return _fail('learn_word', f"Word must be exactly {WORD_LENGTH} letters", 400)

        word_picker = game_service.word_picker
        response_data = {
            'success': True,
            'word': word,
            'definition': None,
            'definition_error': None,
            'extended_info': None,
            'extended_info_error': None
        }

        try:
            response_data['definition'] = word_picker.lookup_definition(word)
        except (NetworkError, ValidationError) as e:
            response_data['definition_error'] = str(e)

        local_data = game_service.local_data
        if local_data.effective_settings().extended_info:
            api_key = local_data.load_api_key()
            if not api_key:
                response_data['extended_info_error'] = 'An API key is required for extended info'
            else:
                try:
                    response_data['extended_info'] = word_picker.get_extended_info(word, api_key)
                except (NetworkError, ValidationError) as e:
                    game_logger.log_error(request, e, 'learn_word')
                    response_data['extended_info_error'] = str(e)

        game_logger.log_server_response(request, 'learn_word', True, {
            'word': word,
            'definition': response_data['definition'] is not None,
            'extended_info': response_data['extended_info'] is not None
        })
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'learn_word')
        return _fail('learn_word', str(e), 500)


# ── Sync ──────────────────────────────────────────────────────────────────

@device_bp.route('/sync/status', methods=['GET'])
@require_service(get_sync_client, 'sync_client')
def sync_status(sync_client):
    """Whether this device syncs, with its masked code and last known version."""
    game_logger.log_user_action(request, 'sync_status')

    local_data = sync_client.local_data
    last = sync_client.last_result
    response_data = {
        'success': True,
        'enabled': local_data.load_sync_enabled(),
        'code': local_data.load_sync_code(),
        'version': local_data.load_sync_version(),
        'status': sync_client.status.value,
        'last_result': last.to_dict() if last else None
    }

    game_logger.log_server_response(request, 'sync_status', True, response_data)
    return jsonify(response_data)


@device_bp.route('/sync/generate', methods=['POST'])
@require_service(get_sync_client, 'sync_client')
def sync_generate(sync_client):
    """Create a sync code from this device's data."""
    game_logger.log_user_action(request, 'device_sync_generate')
    return _sync_response('device_sync_generate', sync_client.generate_code())


@device_bp.route('/sync/join', methods=['POST'])
@require_service(get_sync_client, 'sync_client')
def sync_join(sync_client):
    """Adopt a code created on another device."""
    code = (request.get_json(silent=True) or {}).get('code')
    game_logger.log_user_action(request, 'device_sync_join', code=code if isinstance(code, str) else None)

    if not isinstance(code, str):
        return _fail('device_sync_join', 'code is required', 400)
    return _sync_response('device_sync_join', sync_client.join(code))


@device_bp.route('/sync/now', methods=['POST'])
@require_service(get_sync_client, 'sync_client')
def sync_now(sync_client):
    """Run a full pull, merge and write cycle."""
    game_logger.log_user_action(request, 'device_sync_now')
    return _sync_response('device_sync_now', sync_client.sync_now())


@device_bp.route('/sync/disable', methods=['POST'])
@require_service(get_sync_client, 'sync_client')
def sync_disable(sync_client):
    """Stop syncing on this device. Remote data is left in place."""
    game_logger.log_user_action(request, 'device_sync_disable')

    sync_client.disable()
    response_data = {'success': True}

    game_logger.log_server_response(request, 'device_sync_disable', True, response_data)
    return jsonify(response_data)
