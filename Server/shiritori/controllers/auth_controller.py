"""
Authentication Controller

Bare username login. There are no accounts or passwords: the client picks a
username and uses it when joining sessions.
"""

from datetime import datetime

from flask import Blueprint, request, jsonify
from ..models.user import User
from ..utils.game_logger import game_logger

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    """Echo back a normalized username as the client's identity."""
    data = request.get_json(silent=True)
    raw_username = data.get('username') if isinstance(data, dict) else None

    game_logger.log_user_action(request, 'login', username=raw_username)

    username = User.normalize_username(raw_username)
    if username is None:
        error_response = {
            'success': False,
            'error': 'Username is required',
            'code': 'InvalidRequest'
        }
        game_logger.log_server_response(request, 'login', False, error_response)
        return jsonify(error_response), 400

    user = User(username=username, created_at=datetime.now())
    response_data = {'success': True, 'user': user.to_dict()}
    game_logger.log_server_response(request, 'login', True, response_data)
    return jsonify(response_data)
