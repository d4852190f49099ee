"""
Game Logger Module for the Shiritori Server

This module provides structured logging for user actions, server responses,
socket events and game events (turn changes, timeouts, forfeits).
"""

import logging
import json
import os
from datetime import datetime
from typing import Dict, Any, Optional
from pathlib import Path


class GameLogger:
    """
    Centralized logging system for the shiritori server.

    Features:
    - User action tracking with IP/user identification
    - Server response logging
    - Socket event and delivery failure logging
    - Game event logging (state transitions, timer activity)
    - JSON structured logs for easy parsing
    """

    def __init__(self, log_dir: str = "logs", level: str = "INFO"):
        self.log_dir = Path(log_dir)
        self.level = level
        self.logger = self._setup_logger()

    def configure(self, log_dir: Optional[str] = None, level: Optional[str] = None):
        """Re-point the logger at a new directory and level (called by the app factory)."""
        if log_dir:
            self.log_dir = Path(log_dir)
        if level:
            self.level = level
        self.logger = self._setup_logger()

    def _log_file(self) -> Path:
        return self.log_dir / f"game_log_{datetime.now().strftime('%Y-%m-%d')}.log"

    def _setup_logger(self) -> logging.Logger:
        """Setup the main game logger with file handler."""
        self.log_dir.mkdir(parents=True, exist_ok=True)

        logger = logging.getLogger('shiritori_game')
        logger.setLevel(getattr(logging, str(self.level).upper(), logging.INFO))

        # Prevent duplicate handlers
        if logger.handlers:
            for handler in list(logger.handlers):
                handler.close()
            logger.handlers.clear()

        # File handler for detailed logs
        file_handler = logging.FileHandler(self._log_file(), encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)

        # Console handler for only important messages (WARNING and above)
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)

        file_formatter = logging.Formatter(
            '%(asctime)s | %(levelname)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_formatter = logging.Formatter(
            '%(levelname)s: %(message)s'
        )

        file_handler.setFormatter(file_formatter)
        console_handler.setFormatter(console_formatter)

        logger.addHandler(file_handler)
        logger.addHandler(console_handler)

        return logger

    def _get_user_identity(self, request) -> Dict[str, Optional[str]]:
        """Extract user identity information from request."""
        if request is None:
            return {'user_ip': 'system', 'session_id': None, 'username': None}

        body = request.get_json(silent=True) if hasattr(request, 'get_json') else None
        username = body.get('username') if isinstance(body, dict) else None

        return {
            'user_ip': request.remote_addr or 'unknown',
            'session_id': getattr(request, 'sid', None),
            'username': username if isinstance(username, str) else None
        }

    def _create_log_entry(self,
                          event_type: str,
                          action: str,
                          user_info: Dict[str, Any],
                          details: Dict[str, Any]) -> str:
        """Create a structured log entry."""
        log_entry = {
            'timestamp': datetime.now().isoformat(),
            'event_type': event_type,
            'action': action,
            'user': user_info,
            'details': details
        }
        return json.dumps(log_entry, ensure_ascii=False, default=str)

    def log_user_action(self,
                        request,
                        action: str,
                        session_id: Optional[str] = None,
                        **kwargs):
        """
        Log user actions with full context.

        Args:
            request: Flask request object
            action: Type of action (e.g., 'create_session', 'join_session')
            session_id: Session identifier if applicable
            **kwargs: Additional details to log
        """
        user_info = self._get_user_identity(request)

        details = {
            'session_id': session_id,
            'endpoint': request.endpoint,
            'method': request.method,
            'url': request.url,
            **kwargs
        }

        log_message = self._create_log_entry('USER_ACTION', action, user_info, details)
        self.logger.info(log_message)

    def log_server_response(self,
                            request,
                            action: str,
                            success: bool,
                            response_data: Dict[str, Any],
                            session_id: Optional[str] = None,
                            **kwargs):
        """
        Log server responses with full context.

        Args:
            request: Flask request object
            action: Action that was performed
            success: Whether the action succeeded
            response_data: Data being returned to client
            session_id: Session identifier if applicable
            **kwargs: Additional details to log
        """
        user_info = self._get_user_identity(request)

        details = {
            'session_id': session_id,
            'success': success,
            'response_size': len(str(response_data)),
            'response_data': self._sanitize_response_data(response_data),
            **kwargs
        }

        event_type = 'SERVER_RESPONSE_SUCCESS' if success else 'SERVER_RESPONSE_ERROR'
        log_message = self._create_log_entry(event_type, action, user_info, details)

        if success:
            self.logger.info(log_message)
        else:
            self.logger.warning(log_message)

    def log_socket_event(self,
                         sid: Optional[str],
                         event: str,
                         session_id: Optional[str] = None,
                         username: Optional[str] = None,
                         **kwargs):
        """Log an inbound event-channel message."""
        user_info = {'user_ip': None, 'session_id': sid, 'username': username}
        details = {'session_id': session_id, **kwargs}
        log_message = self._create_log_entry('SOCKET_EVENT', event, user_info, details)
        self.logger.info(log_message)

    def log_game_event(self,
                       session_id: Optional[str],
                       event: str,
                       actor: str = 'system',
                       **kwargs):
        """
        Log game-specific events (turn changes, timeouts, wins).

        Args:
            session_id: Session identifier
            event: Type of game event (e.g., 'word_accepted', 'turn_timeout')
            actor: Username that caused the event, or 'system' for timers
            **kwargs: Additional game details
        """
        user_info = {'user_ip': None, 'session_id': None, 'username': actor}

        details = {
            'session_id': session_id,
            **kwargs
        }

        log_message = self._create_log_entry('GAME_EVENT', event, user_info, details)
        self.logger.info(log_message)

    def log_timer_event(self, session_id: str, event: str, generation: int, **kwargs):
        """Timer set/fire/stale notices, kept at debug level."""
        details = {'session_id': session_id, 'generation': generation, **kwargs}
        log_message = self._create_log_entry('TIMER', event, {'username': 'system'}, details)
        self.logger.debug(log_message)

    def log_transport_failure(self, connection: str, event: str, reason: str):
        """Delivery to a handle that is gone. Never fatal."""
        details = {'connection': connection, 'event': event, 'reason': reason}
        log_message = self._create_log_entry('TRANSPORT_FAILURE', event, {'session_id': connection}, details)
        self.logger.warning(log_message)

    def log_error(self,
                  request,
                  error: Exception,
                  action: str,
                  session_id: Optional[str] = None):
        """
        Log errors with full context.

        Args:
            request: Flask request object (None for background work)
            error: Exception that occurred
            action: Action that was being performed
            session_id: Session identifier if applicable
        """
        user_info = self._get_user_identity(request)

        details = {
            'session_id': session_id,
            'error_type': type(error).__name__,
            'error_message': str(error),
            'action': action
        }

        log_message = self._create_log_entry('ERROR', action, user_info, details)
        self.logger.error(log_message)

    def _sanitize_response_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Limit the verbosity of large payloads in response logs."""
        if not isinstance(data, dict):
            return {'data_type': type(data).__name__}

        sanitized = data.copy()

        if 'session' in sanitized and isinstance(sanitized['session'], dict):
            session = sanitized['session']
            sanitized['session'] = {
                'sessionId': session.get('sessionId'),
                'phase': session.get('phase'),
                'player_count': len(session.get('players', [])),
                'words_count': len(session.get('wordsUsed', []))
            }
        if 'sessions' in sanitized and isinstance(sanitized['sessions'], list):
            sanitized['sessions'] = {'count': len(sanitized['sessions'])}

        return sanitized

    def get_log_stats(self) -> Dict[str, Any]:
        """Get statistics about logged events (useful for monitoring)."""
        try:
            log_file = self._log_file()
            if not log_file.exists():
                return {'error': 'No log file found for today'}

            stats = {
                'log_file': str(log_file),
                'file_size_mb': round(log_file.stat().st_size / (1024 * 1024), 2),
                'total_entries': 0,
                'user_actions': 0,
                'server_responses': 0,
                'socket_events': 0,
                'game_events': 0,
                'transport_failures': 0,
                'errors': 0
            }

            with open(log_file, 'r', encoding='utf-8') as f:
                for line in f:
                    if not line.strip():
                        continue
                    stats['total_entries'] += 1
                    if 'USER_ACTION' in line:
                        stats['user_actions'] += 1
                    elif 'SERVER_RESPONSE' in line:
                        stats['server_responses'] += 1
                    elif 'SOCKET_EVENT' in line:
                        stats['socket_events'] += 1
                    elif 'GAME_EVENT' in line:
                        stats['game_events'] += 1
                    elif 'TRANSPORT_FAILURE' in line:
                        stats['transport_failures'] += 1
                    elif '"ERROR"' in line:
                        stats['errors'] += 1

            return stats

        except OSError as e:
            return {'error': f'Failed to get stats: {str(e)}'}


# Global logger instance
game_logger = GameLogger(
    log_dir=os.getenv('LOG_DIR', 'logs'),
    level=os.getenv('LOG_LEVEL', 'INFO')
)
