"""
Lexicon Service

Decides whether a candidate word may be played given the words already used.
"""

from typing import Iterable, Optional, Sequence, Set, Tuple

from ..config.game_settings import DEFAULT_MIN_WORD_LENGTH, load_word_list
from ..utils.game_logger import game_logger

REASON_TOO_SHORT = "too short"
REASON_WRONG_START = "wrong starting letter"
REASON_ALREADY_USED = "word already used"
REASON_NOT_A_WORD = "not a valid word"


class LexiconValidator:
    """
    Stateless word validator.

    Rules are checked in order and the first failure wins:
    1. Trimmed length must reach the minimum length
    2. The word must start with the last letter of the previous word
    3. The word must not have been used before in this session
    4. If a dictionary is loaded, the word must be in it

    When no dictionary is configured, or the configured one cannot be read,
    the validator runs in degraded mode and rule 4 accepts everything.
    """

    def __init__(self, words: Optional[Iterable[str]] = None):
        self._words: Optional[Set[str]] = {w.strip().casefold() for w in words} if words is not None else None

    @classmethod
    def from_path(cls, path: Optional[str]) -> 'LexiconValidator':
        """Build a validator from a word list file, degrading instead of failing."""
        try:
            words = load_word_list(path)
        except (OSError, ValueError) as e:
            game_logger.logger.warning(f"Dictionary unavailable, accepting all words: {e}")
            words = None
        return cls(words)

    @property
    def dictionary_available(self) -> bool:
        return self._words is not None

    def validate(self, candidate: str, history: Sequence[str],
                 min_length: int = DEFAULT_MIN_WORD_LENGTH) -> Tuple[bool, str]:
        """
        Validates a candidate word against the session history.

        Args:
            candidate: The submitted word
            history: Words accepted so far, oldest first
            min_length: Minimum trimmed length

        Returns:
            Tuple of (is_valid, reason); reason is empty when valid
        """
        if not isinstance(candidate, str):
            return False, REASON_TOO_SHORT

        trimmed = candidate.strip()
        word = trimmed.casefold()

        if len(trimmed) < min_length:
            return False, REASON_TOO_SHORT

        if history:
            previous = history[-1].strip().casefold()
            if previous and word and word[0] != previous[-1]:
                return False, REASON_WRONG_START

        if any(word == used.strip().casefold() for used in history):
            return False, REASON_ALREADY_USED

        if self._words is not None and word not in self._words:
            return False, REASON_NOT_A_WORD

        return True, ""
