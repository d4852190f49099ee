"""
Broadcast Service

Fan-out of session events to the Socket.IO rooms subscribed to each session.
"""

from typing import Any, Dict, Optional, Set

from ..errors import TransportFailure
from ..utils.game_logger import game_logger

LOBBY_ROOM = 'lobby'
SESSION_ROOM_PREFIX = 'game_'


def session_room(session_id: str) -> str:
    return f"{SESSION_ROOM_PREFIX}{session_id}"


class BroadcastGateway:
    """
    Delivers events to Socket.IO connections.

    Subscriptions are Socket.IO rooms (``game_<session id>`` per session and
    ``lobby`` for listings); the gateway never reads or changes game state.
    Session broadcasts walk the room members one by one so a failed or
    disconnected recipient is logged and skipped without affecting the others.
    """

    def __init__(self, socketio=None, namespace: str = '/'):
        self.socketio = socketio
        self.namespace = namespace

    @property
    def _server(self):
        if self.socketio is None or getattr(self.socketio, 'server', None) is None:
            raise TransportFailure("No Socket.IO server bound")
        return self.socketio.server

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    def is_connected(self, handle: str) -> bool:
        try:
            return bool(handle) and self._server.manager.is_connected(handle, self.namespace)
        except TransportFailure:
            return False

    def disconnect(self, handle: str) -> Set[str]:
        """Take a handle out of every session room. Returns those session ids."""
        server = self._server
        sessions = set()
        for room in server.manager.get_rooms(handle, self.namespace):
            if isinstance(room, str) and room.startswith(SESSION_ROOM_PREFIX):
                server.leave_room(handle, room, namespace=self.namespace)
                sessions.add(room[len(SESSION_ROOM_PREFIX):])
        return sessions

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, session_id: str, handle: str):
        self._server.enter_room(handle, session_room(session_id), namespace=self.namespace)

    def unsubscribe(self, session_id: str, handle: str) -> bool:
        if handle not in self.subscribers(session_id):
            return False
        self._server.leave_room(handle, session_room(session_id), namespace=self.namespace)
        return True

    def subscribers(self, session_id: str) -> Set[str]:
        try:
            manager = self._server.manager
        except TransportFailure:
            return set()
        return {sid for sid, _ in manager.get_participants(self.namespace, session_room(session_id))}

    def drop_session(self, session_id: str):
        for handle in self.subscribers(session_id):
            self._server.leave_room(handle, session_room(session_id), namespace=self.namespace)

    def join_lobby(self, handle: str):
        self._server.enter_room(handle, LOBBY_ROOM, namespace=self.namespace)

    def leave_lobby(self, handle: str):
        self._server.leave_room(handle, LOBBY_ROOM, namespace=self.namespace)

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def broadcast(self, session_id: str, event: str, payload: Dict[str, Any]) -> int:
        """
        Send an event to every subscriber of a session.

        Returns:
            int: Number of handles the event was handed to
        """
        delivered = 0
        for handle in self.subscribers(session_id):
            if self._deliver(handle, event, payload):
                delivered += 1
        return delivered

    def addressed(self, handle: str, event: str, payload: Dict[str, Any]) -> bool:
        """Send an event to exactly one handle."""
        return self._deliver(handle, event, payload)

    def broadcast_lobby(self, event: str, payload: Dict[str, Any]):
        """Send lobby listings to the clients watching the lobby."""
        if self.socketio is None:
            return
        try:
            self.socketio.emit(event, payload, to=LOBBY_ROOM, namespace=self.namespace)
        except Exception as e:
            game_logger.log_transport_failure(LOBBY_ROOM, event, str(e))

    def _deliver(self, handle: str, event: str, payload: Dict[str, Any]) -> bool:
        try:
            if not self.is_connected(handle):
                raise TransportFailure("Connection is closed")
            self.socketio.emit(event, payload, to=handle, namespace=self.namespace)
            return True
        except Exception as e:
            game_logger.log_transport_failure(handle, event, str(e))
            return False


# Global service instance
_broadcast_gateway = None


def get_broadcast_gateway() -> Optional[BroadcastGateway]:
    """Get the global broadcast gateway instance."""
    return _broadcast_gateway


def initialize_broadcast_gateway(socketio=None) -> BroadcastGateway:
    """Initialize the global broadcast gateway instance."""
    global _broadcast_gateway
    _broadcast_gateway = BroadcastGateway(socketio)
    return _broadcast_gateway
