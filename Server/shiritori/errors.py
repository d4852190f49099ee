"""
Error Hierarchy

Exceptions raised by the session services. Each carries a machine readable
``code`` and the HTTP ``status`` the controllers answer with, so HTTP and
WebSocket handlers can translate them without inspecting messages.
"""

from typing import Any, Dict


class ShiritoriError(Exception):
    """Base exception for all game errors reported back to a client."""

    code = 'Error'
    status = 400

    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': False,
            'error': self.message,
            'code': self.code
        }


class InvalidRequest(ShiritoriError):
    """Raised when a request or event payload is missing required fields."""
    code = 'InvalidRequest'
    status = 400


class ValidationRejected(ShiritoriError):
    """Raised when a submitted word breaks the length, chaining or uniqueness rule."""
    code = 'ValidationRejected'
    status = 400

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class TurnViolation(ShiritoriError):
    """Raised when a word is submitted out of turn or outside a running game."""
    code = 'TurnViolation'
    status = 409


class CapacityViolation(ShiritoriError):
    """Raised when joining a session that has no free seat."""
    code = 'SessionFull'
    status = 409


class IdentityConflict(ShiritoriError):
    """Raised when a username is already taken within the session."""
    code = 'DuplicateUsername'
    status = 409


class NotFound(ShiritoriError):
    """Raised when a session id is unknown."""
    code = 'NotFound'
    status = 404


class TransportFailure(ShiritoriError):
    """Delivery to a disconnected client. Logged and dropped, never sent anywhere."""
    code = 'TransportFailure'
    status = 500
