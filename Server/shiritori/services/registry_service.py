"""
Session Registry Service

Creates, finds, lists and removes game sessions.
"""

import threading
import time
import uuid
from typing import Dict, List, Optional, Tuple

from ..config.game_settings import DEFAULT_MIN_WORD_LENGTH, DEFAULT_TURN_DURATION_SECONDS
from ..errors import InvalidRequest, NotFound
from ..models.game import Phase, SessionSnapshot, SessionSummary
from ..utils.game_logger import game_logger
from .broadcast_service import BroadcastGateway
from .lexicon_service import LexiconValidator
from .session_service import GameSession


class SessionRegistry:
    """
    Owner of every live session.

    The session map is guarded by its own lock for create/list/remove; game
    transitions go through each session's lock, so no operation ever holds
    more than one session lock.
    """

    def __init__(self,
                 validator: Optional[LexiconValidator] = None,
                 min_word_length: int = DEFAULT_MIN_WORD_LENGTH,
                 turn_duration: float = DEFAULT_TURN_DURATION_SECONDS,
                 gateway: Optional[BroadcastGateway] = None):
        self.validator = validator or LexiconValidator()
        self.min_word_length = min_word_length
        self.turn_duration = turn_duration
        self.gateway = gateway
        self._sessions: Dict[str, GameSession] = {}
        self._lock = threading.Lock()

    def count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def create(self) -> GameSession:
        """Create an empty session waiting for players."""
        session_id = uuid.uuid4().hex
        session = GameSession(
            session_id,
            validator=self.validator,
            min_word_length=self.min_word_length,
            turn_duration=self.turn_duration,
            listener=self._make_listener(session_id)
        )
        with self._lock:
            self._sessions[session_id] = session

        game_logger.log_game_event(session_id, 'session_created', 'system')
        self._notify_lobby()
        return session

    def get(self, session_id: str) -> Optional[GameSession]:
        if not isinstance(session_id, str):
            return None
        with self._lock:
            return self._sessions.get(session_id)

    def require(self, session_id: str) -> GameSession:
        session = self.get(session_id)
        if session is None:
            raise NotFound("Session not found")
        return session

    def list(self, include_all: bool = False) -> List[SessionSummary]:
        """
        Lobby listing. By default only sessions still waiting for players.
        """
        with self._lock:
            sessions = list(self._sessions.values())

        summaries = [session.summary() for session in sessions]
        if not include_all:
            summaries = [s for s in summaries if s.phase == Phase.WAITING_FOR_PLAYERS]
        return summaries

    def remove(self, session_id: str) -> bool:
        """Terminate and forget a session."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False

        session.terminate(reason='removed')
        if self.gateway is not None:
            self.gateway.drop_session(session_id)

        game_logger.log_game_event(session_id, 'session_removed', 'system')
        self._notify_lobby()
        return True

    def join(self, session_id: str, username: str, connection: Optional[str] = None) -> SessionSnapshot:
        """
        Seat a player, optionally binding the live socket they will play through.

        Raises:
            InvalidRequest: If ``connection`` is not an open socket
        """
        session = self.require(session_id)
        if connection is not None:
            if not isinstance(connection, str) or self.gateway is None \
                    or not self.gateway.is_connected(connection):
                raise InvalidRequest("Unknown connection")

        snapshot = session.join(username, connection)
        if connection is not None:
            self.gateway.subscribe(session_id, connection)
        self._notify_lobby()
        return snapshot

    def leave(self, session_id: str, username: str) -> bool:
        """
        Remove a player from a session. An empty waiting session is discarded.
        """
        session = self.require(session_id)
        handles = session.release_connections(username)
        changed = session.leave(username)

        # The leaver still receives the final snapshot above
        if self.gateway is not None:
            for handle in handles:
                self.gateway.unsubscribe(session_id, handle)

        summary = session.summary()
        if summary.phase == Phase.WAITING_FOR_PLAYERS and summary.player_count == 0:
            self.remove(session_id)
        elif changed:
            self._notify_lobby()
        return changed

    def sessions_for_connection(self, connection: str) -> List[Tuple[GameSession, str]]:
        """All (session, username) pairs a socket is bound to as a player."""
        with self._lock:
            sessions = list(self._sessions.values())

        bound = []
        for session in sessions:
            username = session.player_for_connection(connection)
            if username is not None:
                bound.append((session, username))
        return bound

    def cleanup_expired(self, finished_ttl: float, now: Optional[float] = None) -> int:
        """
        Purge finished sessions older than ``finished_ttl`` seconds and empty
        waiting sessions.

        Returns:
            int: Number of sessions removed
        """
        now = now if now is not None else time.time()
        with self._lock:
            sessions = list(self._sessions.values())

        expired = []
        for session in sessions:
            summary = session.summary()
            if summary.phase == Phase.FINISHED and session.finished_at is not None \
                    and now - session.finished_at >= finished_ttl:
                expired.append(session.session_id)
            elif summary.phase == Phase.WAITING_FOR_PLAYERS and summary.player_count == 0 \
                    and now - session.created_at >= finished_ttl:
                expired.append(session.session_id)

        return sum(1 for session_id in expired if self.remove(session_id))

    def lobby_state(self) -> Dict:
        return {
            'success': True,
            'sessions': [summary.to_dict() for summary in self.list()]
        }

    def _make_listener(self, session_id: str):
        def publish(snapshot: SessionSnapshot):
            if self.gateway is not None:
                self.gateway.broadcast(session_id, 'game-update', {'session': snapshot.to_dict()})
        return publish

    def _notify_lobby(self):
        if self.gateway is not None:
            self.gateway.broadcast_lobby('lobby-update', self.lobby_state())


# Global service instance
_session_registry = None


def get_session_registry() -> Optional[SessionRegistry]:
    """Get the global session registry instance."""
    return _session_registry


def initialize_session_registry(validator: Optional[LexiconValidator] = None,
                                min_word_length: int = DEFAULT_MIN_WORD_LENGTH,
                                turn_duration: float = DEFAULT_TURN_DURATION_SECONDS,
                                gateway: Optional[BroadcastGateway] = None) -> SessionRegistry:
    """Initialize the global session registry instance."""
    global _session_registry
    if _session_registry is not None:
        for summary in _session_registry.list(include_all=True):
            session = _session_registry.get(summary.session_id)
            if session is not None:
                session.clock.cancel()
    _session_registry = SessionRegistry(validator, min_word_length, turn_duration, gateway)
    return _session_registry
