"""
Shiritori Game Server - Main Entry Point

This is the main entry point for the shiritori game server.
It creates the Flask-SocketIO application, starts the session cleanup worker
and runs the server.
"""

import threading
import time
from shiritori import create_app
from shiritori.config import config
from shiritori.services.registry_service import get_session_registry
from shiritori.utils.game_logger import game_logger


def session_cleanup_worker(app):
    """
    Background worker that periodically purges finished and abandoned sessions.
    Runs every CLEANUP_INTERVAL_SECONDS.
    """
    interval = app.config['CLEANUP_INTERVAL_SECONDS']
    ttl = app.config['FINISHED_SESSION_TTL_SECONDS']
    game_logger.logger.info(f"Session cleanup worker started (interval={interval}s, ttl={ttl}s)")

    while True:
        time.sleep(interval)
        try:
            registry = get_session_registry()
            if registry:
                removed = registry.cleanup_expired(ttl)
                if removed:
                    game_logger.logger.info(f"Session cleanup: removed {removed} expired session(s)")
        except Exception as e:
            game_logger.logger.error(f"Error in session cleanup worker: {e}")


def main(config_name: str = 'default'):
    """Create the application, start background work and run the server."""
    try:
        print("Creating Flask application...")
        app, socketio = create_app(config[config_name])
        print("✓ Flask application created successfully")

        registry = get_session_registry()
        print(f"Dictionary loaded: {registry.validator.dictionary_available}")

        cleanup_thread = threading.Thread(target=session_cleanup_worker, args=(app,), daemon=True)
        cleanup_thread.start()
        print(f"✓ Session cleanup worker started - checking every {app.config['CLEANUP_INTERVAL_SECONDS']} seconds")

        game_logger.logger.info("Shiritori Server Starting")

        print(f"\nStarting Shiritori Game Server on {app.config['HOST']}:{app.config['PORT']}")
        print(f"Debug mode: {app.config['DEBUG']}")
        print(f"Turn duration: {app.config['TURN_DURATION_SECONDS']}s, minimum word length: {app.config['MIN_WORD_LENGTH']}")
        print("=" * 50)

        socketio.run(app, host=app.config['HOST'], port=app.config['PORT'],
                     debug=app.config['DEBUG'], allow_unsafe_werkzeug=True)

    except KeyboardInterrupt:
        print("\nServer shutting down...")
        game_logger.logger.info("Shiritori Server shutting down (KeyboardInterrupt)")
    except Exception as e:
        print(f"Error starting server: {e}")
        game_logger.logger.error(f"Error starting server: {e}")
        raise


if __name__ == '__main__':
    import os
    main(os.getenv('FLASK_CONFIG', 'default'))
