"""
Utilities Package

Contains utility functions, decorators, and helper modules.
"""

from .decorators import require_json, websocket_payload_required
from .helpers import error_response, unavailable_response, socket_error_payload
from .game_logger import game_logger

__all__ = [
    'require_json', 'websocket_payload_required',
    'error_response', 'unavailable_response', 'socket_error_payload',
    'game_logger'
]
