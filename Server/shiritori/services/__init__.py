"""
Services Package

Contains all business logic and service classes.
"""

from .lexicon_service import LexiconValidator
from .turn_clock import TurnClock
from .session_service import GameSession
from .broadcast_service import BroadcastGateway, get_broadcast_gateway
from .registry_service import SessionRegistry, get_session_registry

__all__ = [
    'LexiconValidator',
    'TurnClock',
    'GameSession',
    'BroadcastGateway', 'get_broadcast_gateway',
    'SessionRegistry', 'get_session_registry'
]
