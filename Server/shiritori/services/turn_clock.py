"""
Turn Clock

Server-side countdown for the current turn. One clock belongs to one session;
each armed timer captures the turn generation it was started for, so a timer
that fires after its turn already ended is recognised as stale by the session.
"""

import threading
import time
from typing import Callable, Optional

from ..utils.game_logger import game_logger


class TurnClock:
    """
    Per-session turn timer.

    The clock never mutates the session itself: on expiry it calls
    ``on_expire(generation)``, which must take the session lock and compare
    the generation with the session's current one.
    """

    def __init__(self, session_id: str, on_expire: Callable[[int], None]):
        self.session_id = session_id
        self._on_expire = on_expire
        self._timer: Optional[threading.Timer] = None
        self._generation: Optional[int] = None
        self._guard = threading.Lock()

    @property
    def active(self) -> bool:
        with self._guard:
            return self._timer is not None

    @property
    def generation(self) -> Optional[int]:
        return self._generation

    def start(self, generation: int, duration: float) -> float:
        """
        Arm the clock for a turn, replacing any previous timer.

        Args:
            generation: Turn generation the timer belongs to
            duration: Seconds until the turn expires

        Returns:
            float: Absolute deadline as a UNIX timestamp
        """
        deadline = time.time() + duration
        timer = threading.Timer(duration, self._fire, args=(generation,))
        timer.daemon = True

        with self._guard:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = timer
            self._generation = generation

        timer.start()
        game_logger.log_timer_event(self.session_id, 'timer_set', generation,
                                    duration=duration, deadline=deadline)
        return deadline

    def cancel(self):
        """Disarm the clock. A timer already past its wait is left to the generation check."""
        with self._guard:
            timer, self._timer = self._timer, None
            generation, self._generation = self._generation, None

        if timer is not None:
            timer.cancel()
            game_logger.log_timer_event(self.session_id, 'timer_cancelled', generation)

    def _fire(self, generation: int):
        with self._guard:
            if self._generation == generation:
                self._timer = None
                self._generation = None

        game_logger.log_timer_event(self.session_id, 'timer_fire', generation)
        try:
            self._on_expire(generation)
        except Exception as e:
            game_logger.log_error(None, e, 'turn_timeout', self.session_id)
