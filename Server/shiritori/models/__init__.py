"""
Data Models Package

Contains all data models and schemas used throughout the application.
"""

from .game import Phase, Player, SessionSnapshot, SessionSummary, SubmitResult
from .user import User

__all__ = ['Phase', 'Player', 'SessionSnapshot', 'SessionSummary', 'SubmitResult', 'User']
