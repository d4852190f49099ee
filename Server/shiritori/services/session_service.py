"""
Session Service

Contains the authoritative state machine for a single shiritori game.
"""

import threading
import time
from typing import Callable, List, Optional

from ..config.game_settings import (
    MAX_PLAYERS, DEFAULT_MIN_WORD_LENGTH, DEFAULT_TURN_DURATION_SECONDS, score_word
)
from ..errors import (
    CapacityViolation, IdentityConflict, InvalidRequest, NotFound, TurnViolation, ValidationRejected
)
from ..models.game import Phase, Player, SessionSnapshot, SessionSummary, SubmitResult
from ..models.user import User
from ..utils.game_logger import game_logger
from .lexicon_service import LexiconValidator
from .turn_clock import TurnClock

SessionListener = Callable[[SessionSnapshot], None]


class GameSession:
    """
    One two-player shiritori game.

    This class handles:
    - Seating players and starting the game when the second player joins
    - Turn enforcement and word acceptance through the lexicon validator
    - Server-side turn expiry through its own turn clock
    - Forfeits on leave or timeout

    Every public mutation runs under the session lock, so a client submission
    and a firing timer never interleave. After each mutation the listener
    receives a fresh snapshot while the lock is still held, which keeps
    broadcasts in the same order as the transitions that produced them.

    Timeout policy: a player whose turn expires loses and the other player
    wins. The turn generation increases on every turn change and on game end;
    a timer carrying an older generation is ignored.
    """

    def __init__(self,
                 session_id: str,
                 validator: Optional[LexiconValidator] = None,
                 min_word_length: int = DEFAULT_MIN_WORD_LENGTH,
                 turn_duration: float = DEFAULT_TURN_DURATION_SECONDS,
                 listener: Optional[SessionListener] = None):
        self.session_id = session_id
        self.validator = validator or LexiconValidator()
        self.min_word_length = min_word_length
        self.turn_duration = turn_duration
        self.listener = listener

        self.players: List[Player] = []
        self.current_player_index = 0
        self.words_used: List[str] = []
        self.phase = Phase.WAITING_FOR_PLAYERS
        self.turn_deadline: Optional[float] = None
        self.turn_generation = 0
        self.winner: Optional[str] = None
        self.created_at = time.time()
        self.finished_at: Optional[float] = None

        self._lock = threading.RLock()
        self._clock = TurnClock(session_id, self.force_timeout)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def last_word(self) -> Optional[str]:
        return self.words_used[-1] if self.words_used else None

    @property
    def clock(self) -> TurnClock:
        return self._clock

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return SessionSnapshot(
                session_id=self.session_id,
                phase=self.phase,
                players=[Player(p.username, p.score) for p in self.players],
                current_player_index=self.current_player_index,
                words_used=list(self.words_used),
                turn_deadline=self.turn_deadline,
                turn_generation=self.turn_generation,
                winner=self.winner,
                min_word_length=self.min_word_length,
                turn_duration_seconds=self.turn_duration
            )

    def summary(self) -> SessionSummary:
        with self._lock:
            return SessionSummary(
                session_id=self.session_id,
                player_count=len(self.players),
                phase=self.phase,
                max_players=MAX_PLAYERS
            )

    def find_player(self, username: str) -> Optional[Player]:
        key = username.casefold()
        with self._lock:
            for player in self.players:
                if player.username.casefold() == key:
                    return player
        return None

    def has_player(self, username: str) -> bool:
        return self.find_player(username) is not None

    def player_for_connection(self, connection: str) -> Optional[str]:
        with self._lock:
            for player in self.players:
                if connection and player.connection == connection:
                    return player.username
        return None

    # ------------------------------------------------------------------
    # Connection bookkeeping (no game state involved)
    # ------------------------------------------------------------------

    def bind_connection(self, username: str, connection: str) -> Optional[str]:
        """
        Record the socket a seated player talks through. Returns the seated
        username, or None if nobody by that name is seated.

        Raises:
            IdentityConflict: If the player already talks through another
                socket, or this socket already speaks for the other player
        """
        with self._lock:
            player = self.find_player(username)
            if player is None:
                return None
            self._check_connection_free(connection, player)
            if player.connection is not None and player.connection != connection:
                raise IdentityConflict(f"Player '{player.username}' is already connected")
            player.connection = connection
            return player.username

    def _check_connection_free(self, connection: Optional[str], player: Optional[Player] = None):
        if not connection:
            return
        for other in self.players:
            if other is not player and other.connection == connection:
                raise IdentityConflict(f"Connection already speaks for '{other.username}'")

    def release_connections(self, username: str) -> List[str]:
        """Forget the socket of a player, returning the handles that were bound."""
        with self._lock:
            player = self.find_player(username)
            if player is None or player.connection is None:
                return []
            handle, player.connection = player.connection, None
            return [handle]

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def join(self, username: str, connection: Optional[str] = None) -> SessionSnapshot:
        """
        Seat a player. The second player starts the game.

        Raises:
            InvalidRequest: If the username is blank
            CapacityViolation: If both seats are taken or the game already ran
            IdentityConflict: If the username is already seated, or the
                connection already speaks for the other player
        """
        normalized = User.normalize_username(username)
        if normalized is None:
            raise InvalidRequest("Username is required")

        with self._lock:
            if self.phase != Phase.WAITING_FOR_PLAYERS or len(self.players) >= MAX_PLAYERS:
                raise CapacityViolation("Session is full")
            if self.has_player(normalized):
                raise IdentityConflict(f"Username '{normalized}' is already in this session")
            self._check_connection_free(connection)

            self.players.append(Player(username=normalized, connection=connection))
            game_logger.log_game_event(self.session_id, 'player_joined', normalized,
                                       player_count=len(self.players))

            if len(self.players) == MAX_PLAYERS:
                self.phase = Phase.IN_PROGRESS
                self.current_player_index = 0
                self._start_turn()
                game_logger.log_game_event(self.session_id, 'game_started', 'system',
                                           players=[p.username for p in self.players],
                                           first_player=self.players[0].username)

            return self._publish()

    def submit_word(self, username: str, candidate: str) -> SubmitResult:
        """
        Play a word for the current player.

        Raises:
            TurnViolation: If the game is not running or it is not the user's turn
            ValidationRejected: If the word breaks a rule; state is untouched
        """
        with self._lock:
            if self.phase != Phase.IN_PROGRESS:
                raise TurnViolation("Game is not in progress", code='GameNotInProgress')

            current = self.players[self.current_player_index]
            if not isinstance(username, str) or current.username.casefold() != username.strip().casefold():
                raise TurnViolation("It is not your turn", code='NotYourTurn')

            is_valid, reason = self.validator.validate(candidate, self.words_used, self.min_word_length)
            if not is_valid:
                game_logger.log_game_event(self.session_id, 'word_rejected', current.username,
                                           word=candidate, reason=reason)
                raise ValidationRejected(reason)

            word = candidate.strip()
            points = score_word(word, self.min_word_length)
            self.words_used.append(word)
            current.score += points
            self.current_player_index = (self.current_player_index + 1) % len(self.players)
            self._start_turn()

            game_logger.log_game_event(self.session_id, 'word_accepted', current.username,
                                       word=word, points=points, score=current.score,
                                       next_player=self.players[self.current_player_index].username)

            return SubmitResult(word=word, points=points, snapshot=self._publish())

    def force_timeout(self, generation: Optional[int] = None) -> bool:
        """
        Expire the current turn. Only the turn clock calls this.

        Args:
            generation: Turn generation the timer was armed for; None means
                the current turn

        Returns:
            bool: True if the timeout ended the game, False if it was a no-op
        """
        with self._lock:
            if self.phase != Phase.IN_PROGRESS:
                game_logger.log_timer_event(self.session_id, 'timer_ignored', generation or 0,
                                            phase=self.phase.value)
                return False
            if generation is not None and generation != self.turn_generation:
                game_logger.log_timer_event(self.session_id, 'timer_stale', generation,
                                            current_generation=self.turn_generation)
                return False

            loser = self.players[self.current_player_index]
            winner = self.players[(self.current_player_index + 1) % len(self.players)]
            game_logger.log_game_event(self.session_id, 'turn_timeout', 'system',
                                       loser=loser.username, generation=self.turn_generation)
            self._finish(winner.username, reason='timeout')
            self._publish()
            return True

    def leave(self, username: str) -> bool:
        """
        Remove a player. Leaving a running game forfeits it to the other player.

        Returns:
            bool: True if the session changed

        Raises:
            NotFound: If the user is not seated in this session
        """
        with self._lock:
            player = self.find_player(username) if isinstance(username, str) else None
            if player is None:
                raise NotFound(f"Player '{username}' is not in this session")

            if self.phase == Phase.FINISHED:
                return False

            was_running = self.phase == Phase.IN_PROGRESS
            self.players.remove(player)
            game_logger.log_game_event(self.session_id, 'player_left', player.username,
                                       phase=self.phase.value)

            if was_running:
                self.current_player_index = 0
                remaining = self.players[0].username if self.players else None
                self._finish(remaining, reason='player_left')

            self._publish()
            return True

    def terminate(self, reason: str = 'terminated') -> bool:
        """End the session without a winner unless it already finished."""
        with self._lock:
            if self.phase == Phase.FINISHED:
                self._clock.cancel()
                return False
            self._finish(None, reason=reason)
            self._publish()
            return True

    # ------------------------------------------------------------------
    # Internals (caller holds the lock)
    # ------------------------------------------------------------------

    def _start_turn(self):
        self.turn_generation += 1
        self.turn_deadline = self._clock.start(self.turn_generation, self.turn_duration)

    def _finish(self, winner: Optional[str], reason: str):
        self.phase = Phase.FINISHED
        self.winner = winner
        self.turn_generation += 1
        self.turn_deadline = None
        self.finished_at = time.time()
        self._clock.cancel()
        game_logger.log_game_event(self.session_id, 'game_finished', 'system',
                                   winner=winner, reason=reason,
                                   words_played=len(self.words_used),
                                   scores={p.username: p.score for p in self.players})

    def _publish(self) -> SessionSnapshot:
        snapshot = self.snapshot()
        if self.listener is not None:
            try:
                self.listener(snapshot)
            except Exception as e:
                game_logger.log_error(None, e, 'publish_snapshot', self.session_id)
        return snapshot
