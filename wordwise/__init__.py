"""
WordWise Application Package

Wordle-style word game with adaptive word selection and cross-device
sync. The Flask application serves both the game API of a local device
and the versioned sync store that devices share.
"""

from flask import Flask
from flask_cors import CORS
from .config import Config


def create_app(config_class=Config):
    """
    Application factory pattern for creating Flask app instances.

    Args:
        config_class: Configuration class to use

    Returns:
        Flask application instance with all blueprints registered
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions
    CORS(app)

    # Register blueprints
    from .controllers.device_controller import device_bp
    from .controllers.game_controller import game_bp
    from .controllers.sync_controller import sync_bp

    app.register_blueprint(game_bp, url_prefix='/api')
    app.register_blueprint(device_bp, url_prefix='/api')
    app.register_blueprint(sync_bp, url_prefix='/sync')

    return app


def initialize_services(config_class=Config, local_store=None, transport=None, word_picker=None):
    """
    Initialize the global services from configuration.

    The sync store always runs in this process. The device reaches it
    directly unless SYNC_SERVER_URL points at another server.

    Args:
        config_class: Configuration class to use
        local_store: LocalStore override (default from LOCAL_DATA_PATH)
        transport: SyncTransport override
        word_picker: WordPicker override

    Returns:
        The initialized GameService
    """
    from .services.game_service import initialize_game_service
    from .services.local_data_service import LocalDataService
    from .services.local_store import create_local_store
    from .services.sync_service import initialize_sync_client
    from .services.sync_store_service import initialize_sync_store_service
    from .services.sync_transport import HttpSyncTransport, InProcessSyncTransport
    from .services.word_picker import WordPicker

    store = initialize_sync_store_service(
        config_class.MONGO_URI,
        config_class.MONGO_DB_NAME,
        config_class.SYNC_CODE_MAX_ATTEMPTS
    )

    local_data = LocalDataService(local_store or create_local_store(config_class.LOCAL_DATA_PATH))

    if transport is None:
        if config_class.SYNC_SERVER_URL:
            transport = HttpSyncTransport(config_class.SYNC_SERVER_URL, config_class.SYNC_TIMEOUT_SECONDS)
        else:
            transport = InProcessSyncTransport(store)
    sync_client = initialize_sync_client(transport, local_data)

    if word_picker is None:
        word_picker = WordPicker(
            proxy_url=config_class.AI_PROXY_URL,
            model=config_class.AI_MODEL,
            timeout=config_class.AI_TIMEOUT_SECONDS,
            dictionary_url=config_class.DICTIONARY_API_URL
        )

    return initialize_game_service(
        local_data,
        word_picker,
        sync_client,
        max_rounds=config_class.MAX_ROUNDS,
        ai_min_history=config_class.AI_MIN_HISTORY
    )
