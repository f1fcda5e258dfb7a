"""
WordWise Server - Main Entry Point

This is the main entry point for the WordWise server.
It initializes all services, pulls remote data once when sync is enabled,
and starts the Flask application.
"""

import sys

from wordwise import create_app, initialize_services
from wordwise.config import config, validate_word_list_integrity
from wordwise.services.sync_service import get_sync_client
from wordwise.services.sync_store_service import get_sync_store_service
from wordwise.utils.game_logger import game_logger


def main(env_name: str = 'default'):
    """Main function to initialize services and start the server."""
    config_class = config.get(env_name, config['default'])

    try:
        print("Initializing services...")

        try:
            validate_word_list_integrity()
        except ValueError as config_error:
            print(f"✗ Word list failed validation: {config_error}")
            return 1

        game_service = initialize_services(config_class)
        print("✓ Game service initialized successfully")

        store = get_sync_store_service()
        backend = 'MongoDB' if config_class.MONGO_URI else 'in-memory'
        print(f"✓ Sync store initialized ({backend})" if store else "✗ Sync store unavailable")

        # Bring this device up to date before the first game
        sync_client = get_sync_client()
        if sync_client:
            result = sync_client.sync_on_startup()
            print(f"✓ Startup sync: {result.outcome.value}")

        print("Creating Flask application...")
        app = create_app(config_class)
        print("✓ Flask application created successfully")

        game_logger.logger.info("WordWise Server Starting")

        print(f"\nStarting WordWise Server on {config_class.HOST}:{config_class.PORT}")
        print(f"Debug mode: {config_class.DEBUG}")
        print(f"AI word selection: {'configured' if game_service.word_picker.ai_available else 'not configured'}")
        print(f"Remote sync server: {config_class.SYNC_SERVER_URL or 'this process'}")
        print("=" * 50)

        app.run(host=config_class.HOST, port=config_class.PORT, debug=config_class.DEBUG)

    except KeyboardInterrupt:
        print("\nServer shutting down...")
        game_logger.logger.info("WordWise Server shutting down (KeyboardInterrupt)")
    except Exception as e:
        print(f"Error starting server: {e}")
        game_logger.logger.error(f"Error starting server: {e}")
        raise

    return 0


if __name__ == '__main__':
    sys.exit(main(sys.argv[1] if len(sys.argv) > 1 else 'default'))
