"""
Sync Controller

HTTP endpoints of the remote sync store.

    POST /sync/generate   {data}           -> 200 {code}
    GET  /sync/<code>                      -> 200 {data, version, lastSync, createdAt}
    PUT  /sync/<code>     {data, version}  -> 200 {success, version} | 409 {error, currentVersion, currentData}
"""

from flask import Blueprint, request, jsonify
from ..exceptions import ConflictError, NotFoundError, SyncStoreError, ValidationError
from ..services.sync_store_service import get_sync_store_service
from ..utils.decorators import require_service
from ..utils.game_logger import game_logger

sync_bp = Blueprint('sync', __name__)

_STATUS_CODES = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (SyncStoreError, 500),
)


def _error_response(request, action, error, code=None):
    """Map a store exception onto the HTTP contract and log it."""
    status = 500
    for error_type, error_status in _STATUS_CODES:
        if isinstance(error, error_type):
            status = error_status
            break

    error_response = {
        'success': False,
        'error': str(error)
    }
    if isinstance(error, ConflictError):
        error_response['currentVersion'] = error.current_version
        error_response['currentData'] = error.current_record

    if status >= 500:
        game_logger.log_error(request, error, action)
    game_logger.log_server_response(request, action, False, error_response, code=code, status=status)
    return jsonify(error_response), status


@sync_bp.route('/generate', methods=['POST'])
@require_service(get_sync_store_service, 'store', 'Sync store unavailable')
def generate_code(store):
    """Mint a new sync code seeded with the posted data."""
    try:
        data = (request.get_json(silent=True) or {}).get('data')

        game_logger.log_user_action(request, 'sync_generate')

        code = store.generate(data)
        response_data = {'code': code}

        game_logger.log_server_response(request, 'sync_generate', True, response_data)
        return jsonify(response_data)

    except Exception as e:
        return _error_response(request, 'sync_generate', e)


@sync_bp.route('/<code>', methods=['GET'])
@require_service(get_sync_store_service, 'store', 'Sync store unavailable')
def get_record(code, store):
    """Read the current record for a code."""
    try:
        game_logger.log_user_action(request, 'sync_pull', code=code)

        response_data = store.get(code)

        game_logger.log_server_response(
            request, 'sync_pull', True, response_data,
            code=code, version=response_data['version']
        )
        return jsonify(response_data)

    except Exception as e:
        return _error_response(request, 'sync_pull', e, code)


@sync_bp.route('/<code>', methods=['PUT'])
@require_service(get_sync_store_service, 'store', 'Sync store unavailable')
def update_record(code, store):
    """Write data at a version greater than the stored one."""
    try:
        body = request.get_json(silent=True) or {}
        data = body.get('data')
        version = body.get('version')

        game_logger.log_user_action(request, 'sync_push', code=code, version=version)

        stored_version = store.update(code, data, version)
        response_data = {
            'success': True,
            'version': stored_version
        }

        game_logger.log_server_response(request, 'sync_push', True, response_data, code=code)
        return jsonify(response_data)

    except Exception as e:
        return _error_response(request, 'sync_push', e, code)
