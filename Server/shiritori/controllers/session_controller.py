"""
Session Controller

Handles all session-related HTTP endpoints: lobby listing, creation,
joining, leaving and removal.
"""

from flask import Blueprint, request, jsonify
from ..errors import ShiritoriError
from ..services.broadcast_service import get_broadcast_gateway
from ..services.registry_service import get_session_registry
from ..utils.decorators import require_json
from ..utils.game_logger import game_logger
from ..utils.helpers import error_response, unavailable_response

session_bp = Blueprint('sessions', __name__)


@session_bp.route('/sessions', methods=['POST'])
def create_session():
    """Create a new session, optionally seating the creator."""
    registry = get_session_registry()
    if not registry:
        return unavailable_response('Session registry')

    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        data = {}
    username = data.get('username')
    connection = data.get('connectionId')

    game_logger.log_user_action(request, 'create_session', seat_creator=bool(username))

    session = registry.create()
    try:
        response_data = {'success': True}
        if username:
            response_data['state'] = registry.join(session.session_id, username, connection).to_dict()
        response_data['session'] = session.summary().to_dict()

        game_logger.log_server_response(request, 'create_session', True, response_data, session.session_id)
        return jsonify(response_data), 201

    except ShiritoriError as e:
        registry.remove(session.session_id)
        game_logger.log_server_response(request, 'create_session', False, e.to_dict(), session.session_id)
        return error_response(e)
    except Exception as e:
        game_logger.log_error(request, e, 'create_session', session.session_id)
        return jsonify({'success': False, 'error': str(e)}), 500


@session_bp.route('/sessions', methods=['GET'])
def list_sessions():
    """List joinable sessions. ``?all=true`` includes running and finished ones."""
    registry = get_session_registry()
    if not registry:
        return unavailable_response('Session registry')

    include_all = request.args.get('all', 'false').lower() == 'true'
    game_logger.log_user_action(request, 'list_sessions', include_all=include_all)

    response_data = {
        'success': True,
        'sessions': [summary.to_dict() for summary in registry.list(include_all=include_all)]
    }
    game_logger.log_server_response(request, 'list_sessions', True, response_data)
    return jsonify(response_data)


@session_bp.route('/sessions/<session_id>', methods=['GET'])
def get_session(session_id):
    """Full session state, only for a participant named by ``?username=``."""
    registry = get_session_registry()
    if not registry:
        return unavailable_response('Session registry')

    username = request.args.get('username', '')
    game_logger.log_user_action(request, 'get_session', session_id, username=username)

    session = registry.get(session_id)
    if session is None or not username or not session.has_player(username):
        error = {'success': False, 'error': 'Session not found', 'code': 'NotFound'}
        game_logger.log_server_response(request, 'get_session', False, error, session_id)
        return jsonify(error), 404

    response_data = {'success': True, 'session': session.snapshot().to_dict()}
    game_logger.log_server_response(request, 'get_session', True, response_data, session_id)
    return jsonify(response_data)


@session_bp.route('/sessions/<session_id>/join', methods=['POST'])
@require_json('username')
def join_session(session_id, data=None):
    """
    Seat a player. The second player starts the game.

    An optional ``connectionId`` binds the caller's open socket to the seat,
    so a plain ``join-session`` from that socket is recognised.
    """
    registry = get_session_registry()
    if not registry:
        return unavailable_response('Session registry')

    username = data['username']
    connection = data.get('connectionId')
    game_logger.log_user_action(request, 'join_session', session_id, username=username,
                                bind_connection=connection is not None)

    try:
        snapshot = registry.join(session_id, username, connection)
        response_data = {'success': True, 'session': snapshot.to_dict()}
        game_logger.log_server_response(
            request, 'join_session', True, response_data, session_id,
            phase=snapshot.phase.value
        )
        return jsonify(response_data)

    except ShiritoriError as e:
        game_logger.log_server_response(request, 'join_session', False, e.to_dict(), session_id)
        return error_response(e)
    except Exception as e:
        game_logger.log_error(request, e, 'join_session', session_id)
        return jsonify({'success': False, 'error': str(e)}), 500


@session_bp.route('/sessions/<session_id>/leave', methods=['POST'])
@require_json('username')
def leave_session(session_id, data=None):
    """Leave a session. Leaving a running game forfeits it."""
    registry = get_session_registry()
    if not registry:
        return unavailable_response('Session registry')

    username = data['username']
    game_logger.log_user_action(request, 'leave_session', session_id, username=username)

    try:
        changed = registry.leave(session_id, username)
        session = registry.get(session_id)
        response_data = {
            'success': True,
            'changed': changed,
            'session': session.snapshot().to_dict() if session else None
        }
        game_logger.log_server_response(request, 'leave_session', True, response_data, session_id)
        return jsonify(response_data)

    except ShiritoriError as e:
        game_logger.log_server_response(request, 'leave_session', False, e.to_dict(), session_id)
        return error_response(e)
    except Exception as e:
        game_logger.log_error(request, e, 'leave_session', session_id)
        return jsonify({'success': False, 'error': str(e)}), 500


@session_bp.route('/sessions/<session_id>', methods=['DELETE'])
def delete_session(session_id):
    """Terminate and remove a session."""
    registry = get_session_registry()
    if not registry:
        return unavailable_response('Session registry')

    game_logger.log_user_action(request, 'delete_session', session_id)

    success = registry.remove(session_id)
    response_data = {'success': success}
    game_logger.log_server_response(request, 'delete_session', success, response_data, session_id)

    if not success:
        response_data.update({'error': 'Session not found', 'code': 'NotFound'})
        return jsonify(response_data), 404
    return jsonify(response_data)


@session_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    registry = get_session_registry()
    gateway = get_broadcast_gateway()

    game_logger.log_user_action(request, 'health_check')

    response_data = {
        'status': 'healthy' if registry and gateway else 'degraded',
        'active_sessions': registry.count() if registry else 0,
        'dictionary_available': registry.validator.dictionary_available if registry else False,
        'log_stats': game_logger.get_log_stats()
    }

    game_logger.log_server_response(request, 'health_check', True, response_data)
    return jsonify(response_data)
