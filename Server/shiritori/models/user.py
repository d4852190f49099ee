"""
User Data Models

Contains user-related data structures.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

MAX_USERNAME_LENGTH = 32


@dataclass
class User:
    """Bare player identity. Usernames are only unique within a session."""
    username: str
    created_at: Optional[datetime] = None

    @staticmethod
    def normalize_username(username: Any) -> Optional[str]:
        """Trim a raw username, returning None when it is unusable."""
        if not isinstance(username, str):
            return None
        username = username.strip()
        if not username or len(username) > MAX_USERNAME_LENGTH:
            return None
        return username

    def to_dict(self) -> Dict[str, Any]:
        return {
            'username': self.username,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }
