"""
Game Data Models

Contains all game-related data structures and enums.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class Phase(Enum):
    """Lifecycle phase of a session."""
    WAITING_FOR_PLAYERS = "WaitingForPlayers"
    IN_PROGRESS = "InProgress"
    FINISHED = "Finished"


@dataclass
class Player:
    """A seated player. ``connection`` is only an address for direct delivery."""
    username: str
    score: int = 0
    connection: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        # Connection handles are never sent to clients
        return {'username': self.username, 'score': self.score}


@dataclass
class SessionSnapshot:
    """Full authoritative state broadcast to participants as ``game-update``."""
    session_id: str
    phase: Phase
    players: List[Player]
    current_player_index: int
    words_used: List[str]
    turn_deadline: Optional[float] = None
    turn_generation: int = 0
    winner: Optional[str] = None
    min_word_length: int = 4
    turn_duration_seconds: float = 60

    @property
    def last_word(self) -> Optional[str]:
        return self.words_used[-1] if self.words_used else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sessionId': self.session_id,
            'phase': self.phase.value,
            'players': [player.to_dict() for player in self.players],
            'currentPlayerIndex': self.current_player_index,
            'wordsUsed': list(self.words_used),
            'lastWord': self.last_word,
            'turnDeadline': self.turn_deadline,
            'turnGeneration': self.turn_generation,
            'winner': self.winner,
            'minWordLength': self.min_word_length,
            'turnDurationSeconds': self.turn_duration_seconds
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SessionSnapshot':
        """Rebuild the client-visible view from a broadcast payload."""
        return cls(
            session_id=data['sessionId'],
            phase=Phase(data['phase']),
            players=[Player(username=p['username'], score=p['score']) for p in data['players']],
            current_player_index=data['currentPlayerIndex'],
            words_used=list(data['wordsUsed']),
            turn_deadline=data.get('turnDeadline'),
            turn_generation=data.get('turnGeneration', 0),
            winner=data.get('winner'),
            min_word_length=data.get('minWordLength', 4),
            turn_duration_seconds=data.get('turnDurationSeconds', 60)
        )


@dataclass
class SessionSummary:
    """Lobby view of a session. Carries no player names or word history."""
    session_id: str
    player_count: int
    phase: Phase
    max_players: int = 2

    @property
    def joinable(self) -> bool:
        return self.phase == Phase.WAITING_FOR_PLAYERS and self.player_count < self.max_players

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sessionId': self.session_id,
            'playerCount': self.player_count,
            'maxPlayers': self.max_players,
            'phase': self.phase.value,
            'joinable': self.joinable
        }


@dataclass
class SubmitResult:
    """Outcome of an accepted word."""
    word: str
    points: int
    snapshot: SessionSnapshot = field(repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {'valid': True, 'word': self.word, 'points': self.points}
