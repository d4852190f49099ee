"""
Request Decorators

Contains decorators that check HTTP bodies and WebSocket payloads before a
handler runs, so malformed input is answered with a rejection instead of
reaching the game services.
"""

from functools import wraps
from flask import request, jsonify
from flask_socketio import emit


def require_json(*fields):
    """
    Decorator to require a JSON object body with the given non-empty fields.
    The parsed body is passed to the view as the ``data`` keyword.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            data = request.get_json(silent=True)
            if not isinstance(data, dict):
                return jsonify({
                    'success': False,
                    'error': 'Request body is required',
                    'code': 'InvalidRequest'
                }), 400

            missing = [name for name in fields if not data.get(name)]
            if missing:
                return jsonify({
                    'success': False,
                    'error': f"Missing field(s): {', '.join(missing)}",
                    'code': 'InvalidRequest'
                }), 400

            kwargs['data'] = data
            return f(*args, **kwargs)

        return decorated_function
    return decorator


def websocket_payload_required(*fields):
    """Decorator for WebSocket handlers that need a dict payload with the given fields."""
    def decorator(f):
        @wraps(f)
        def decorated_function(data=None, *args, **kwargs):
            if not isinstance(data, dict):
                emit('error', {'error': 'Payload must be an object', 'code': 'InvalidRequest'})
                return

            missing = [name for name in fields if not data.get(name)]
            if missing:
                emit('error', {
                    'error': f"Missing field(s): {', '.join(missing)}",
                    'code': 'InvalidRequest'
                })
                return

            return f(data, *args, **kwargs)

        return decorated_function
    return decorator
