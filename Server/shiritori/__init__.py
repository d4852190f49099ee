"""
Shiritori Game Server Application Package

Two-player word-chaining game server: HTTP endpoints for the lobby and
session management, a Socket.IO event channel for word submission and
authoritative state broadcasts.
"""

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from .config import Config


def create_app(config_class=Config):
    """
    Application factory pattern for creating Flask app instances.

    Args:
        config_class: Configuration class to use

    Returns:
        Tuple of (Flask application, SocketIO server) with all services initialized
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    from .utils.game_logger import game_logger
    game_logger.configure(app.config.get('LOG_DIR'), app.config.get('LOG_LEVEL'))

    # Initialize extensions
    CORS(app, origins=app.config.get('CORS_ORIGINS', '*'))
    socketio = SocketIO(app, cors_allowed_origins=app.config.get('CORS_ORIGINS', '*'),
                        logger=False, engineio_logger=False)

    # Initialize services
    from .services.broadcast_service import initialize_broadcast_gateway
    from .services.lexicon_service import LexiconValidator
    from .services.registry_service import initialize_session_registry

    gateway = initialize_broadcast_gateway(socketio)
    initialize_session_registry(
        validator=LexiconValidator.from_path(app.config.get('DICTIONARY_PATH')),
        min_word_length=app.config['MIN_WORD_LENGTH'],
        turn_duration=app.config['TURN_DURATION_SECONDS'],
        gateway=gateway
    )

    # Register blueprints
    from .controllers.auth_controller import auth_bp
    from .controllers.session_controller import session_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(session_bp, url_prefix='/api')

    # Register WebSocket handlers
    from .websocket.handlers import register_websocket_handlers
    register_websocket_handlers(socketio)

    # Store socketio instance for use in other modules
    app.socketio = socketio

    return app, socketio
