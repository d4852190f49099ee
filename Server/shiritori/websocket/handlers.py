"""
WebSocket Event Handlers

Handles the event channel: session subscription, word submission and
disconnect forfeits.
"""

from flask import request
from flask_socketio import emit
from ..errors import NotFound, ShiritoriError, TurnViolation, ValidationRejected
from ..services.broadcast_service import get_broadcast_gateway
from ..services.registry_service import get_session_registry
from ..utils.decorators import websocket_payload_required
from ..utils.game_logger import game_logger
from ..utils.helpers import socket_error_payload


def register_websocket_handlers(socketio):
    """Register all WebSocket event handlers."""

    @socketio.on('connect')
    def handle_connect(auth=None):
        """Tell the client its connection id so HTTP joins can bind it."""
        game_logger.log_socket_event(request.sid, 'connect')
        emit('connected', {'connectionId': request.sid})

    @socketio.on('disconnect')
    def handle_disconnect(reason=None):
        """Drop subscriptions and forfeit any game this connection was playing."""
        sid = request.sid
        gateway = get_broadcast_gateway()
        registry = get_session_registry()

        if gateway:
            gateway.disconnect(sid)
        game_logger.log_socket_event(sid, 'disconnect', reason=str(reason) if reason else None)

        if not registry:
            return

        for session, username in registry.sessions_for_connection(sid):
            try:
                registry.leave(session.session_id, username)
                game_logger.log_game_event(session.session_id, 'player_disconnected', username)
            except ShiritoriError as e:
                game_logger.log_error(None, e, 'disconnect_leave', session.session_id)

    @socketio.on('list-sessions')
    def handle_list_sessions(data=None):
        """Send the current lobby listing to the requesting connection."""
        registry = get_session_registry()
        if not registry:
            emit('error', {'error': 'Session registry unavailable'})
            return
        emit('lobby-update', registry.lobby_state())

    @socketio.on('join-lobby')
    def handle_join_lobby(data=None):
        """Watch the lobby; the listing is re-sent whenever it changes."""
        registry = get_session_registry()
        gateway = get_broadcast_gateway()
        if not registry or not gateway:
            emit('error', {'error': 'Session registry unavailable'})
            return

        game_logger.log_socket_event(request.sid, 'join-lobby')
        gateway.join_lobby(request.sid)
        emit('lobby-update', registry.lobby_state())

    @socketio.on('leave-lobby')
    def handle_leave_lobby(data=None):
        gateway = get_broadcast_gateway()
        if gateway:
            game_logger.log_socket_event(request.sid, 'leave-lobby')
            gateway.leave_lobby(request.sid)

    @socketio.on('join-session')
    @websocket_payload_required('sessionId')
    def handle_join_session(data):
        """
        Subscribe this connection to a session's broadcasts.

        The connection must already be bound to a seat (through an HTTP join
        carrying its ``connectionId``), or name a seated ``username`` whose
        seat has no socket yet.
        """
        sid = request.sid
        session_id = data['sessionId']
        username = data.get('username')
        game_logger.log_socket_event(sid, 'join-session', session_id, username)

        registry = get_session_registry()
        gateway = get_broadcast_gateway()
        if not registry or not gateway:
            emit('error', {'error': 'Game service unavailable'})
            return

        try:
            session = registry.require(session_id)
            seated = session.player_for_connection(sid)
            if seated is None and isinstance(username, str) and username:
                seated = session.bind_connection(username, sid)
            if seated is None:
                raise NotFound("Not a participant of this session")

            gateway.subscribe(session_id, sid)
            emit('game-update', {'session': session.snapshot().to_dict()})

        except ShiritoriError as e:
            emit('error', socket_error_payload(e))

    @socketio.on('leave-session')
    @websocket_payload_required('sessionId')
    def handle_leave_session(data):
        """Unsubscribe; a seated player also leaves the game."""
        sid = request.sid
        session_id = data['sessionId']
        game_logger.log_socket_event(sid, 'leave-session', session_id)

        registry = get_session_registry()
        gateway = get_broadcast_gateway()
        if not registry or not gateway:
            emit('error', {'error': 'Game service unavailable'})
            return

        try:
            session = registry.require(session_id)
            username = session.player_for_connection(sid)
            if username is not None:
                registry.leave(session_id, username)
            gateway.unsubscribe(session_id, sid)
            emit('left', {'sessionId': session_id})

        except ShiritoriError as e:
            emit('error', socket_error_payload(e))

    @socketio.on('submit-word')
    @websocket_payload_required('sessionId')
    def handle_submit_word(data):
        """
        Play a word as the player this connection is bound to. Acceptance is
        broadcast as ``game-update`` by the session; rejections go only to the
        sender as ``word-result``.
        """
        sid = request.sid
        session_id = data['sessionId']
        word = data.get('word')

        registry = get_session_registry()
        gateway = get_broadcast_gateway()
        if not registry or not gateway:
            emit('error', {'error': 'Game service unavailable'})
            return

        try:
            session = registry.require(session_id)
            username = session.player_for_connection(sid)
            game_logger.log_socket_event(sid, 'submit-word', session_id, username, word=word)

            if username is None:
                raise TurnViolation("It is not your turn", code='NotYourTurn')
            if not isinstance(word, str):
                raise ValidationRejected("too short")

            result = session.submit_word(username, word)
            gateway.addressed(sid, 'word-result', result.to_dict())

        except ValidationRejected as e:
            gateway.addressed(sid, 'word-result', {'valid': False, 'reason': e.reason, 'code': e.code})
        except TurnViolation as e:
            gateway.addressed(sid, 'word-result', {'valid': False, 'reason': e.message, 'code': e.code})
        except ShiritoriError as e:
            emit('error', socket_error_payload(e))
