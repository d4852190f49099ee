"""
Helper Functions

Contains utility functions used throughout the application.
"""

from typing import Any, Dict, Tuple
from flask import jsonify

from ..errors import ShiritoriError


def error_response(error: ShiritoriError) -> Tuple[Any, int]:
    """Translate a game error into a JSON response and status code."""
    return jsonify(error.to_dict()), error.status


def unavailable_response(service_name: str) -> Tuple[Any, int]:
    return jsonify({
        'success': False,
        'error': f'{service_name} unavailable'
    }), 500


def socket_error_payload(error: Exception) -> Dict[str, Any]:
    """Payload for an ``error`` event addressed to the sending socket."""
    if isinstance(error, ShiritoriError):
        return {'error': error.message, 'code': error.code}
    return {'error': 'Internal server error', 'code': 'InternalError'}
