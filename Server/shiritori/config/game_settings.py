"""
Game Configuration Constants Module

This module defines the shiritori rule constants, the scoring rule and the
optional dictionary word list loader. All game parameters are centralized
here to enable easy modification.
"""

import json
import os
from typing import Final, Optional, Set

MAX_PLAYERS: Final[int] = 2
"""
Number of players in a session. The game starts the moment the last seat fills.
"""

DEFAULT_MIN_WORD_LENGTH: Final[int] = 4
"""
Shortest accepted word, measured after trimming surrounding whitespace.
"""

DEFAULT_TURN_DURATION_SECONDS: Final[int] = 60
"""
Time a player has to submit a valid word before forfeiting the game.
"""


def score_word(word: str, min_length: int = DEFAULT_MIN_WORD_LENGTH) -> int:
    """
    Points awarded for an accepted word.

    One point for the word itself plus one point for every letter beyond the
    minimum length, so longer words are always worth at least as much.

    Args:
        word: The accepted word
        min_length: Minimum word length in effect for the session

    Returns:
        int: Non-negative score for the word
    """
    return 1 + max(0, len(word.strip()) - min_length)


def load_word_list(path: Optional[str]) -> Optional[Set[str]]:
    """
    Load a dictionary word list from a JSON array or a plain text file.

    Args:
        path: Path to a ``.json`` file holding an array of words, or to a text
            file with one word per line. ``None`` means no dictionary.

    Returns:
        Set of lower-cased words, or None if no path was configured

    Raises:
        FileNotFoundError: If the word list file does not exist
        ValueError: If the file is malformed or contains no words
    """
    if not path:
        return None

    if not os.path.exists(path):
        raise FileNotFoundError(f"Word list file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        if path.endswith('.json'):
            try:
                raw_words = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in {path}: {e}")
            if not isinstance(raw_words, list):
                raise ValueError("JSON file must contain an array of words")
        else:
            raw_words = f.read().splitlines()

    words = {str(word).strip().casefold() for word in raw_words if str(word).strip()}
    if not words:
        raise ValueError("Word list cannot be empty")

    return words
