"""
Labels and lookup tables shared by the engine, stores and API.
"""

from enum import Enum
from typing import Dict, List, NamedTuple

from .errors import ValidationError

Digit = int  # 0 -> 7
Code = List[Digit]

MIN_DIGIT = 0
MAX_DIGIT = 7

# Board / feedback model is always 10 rows, whatever the difficulty
TURN_BUDGET = 10
UNFILLED = "#"


class Difficulty(str, Enum):
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


class DifficultyPreset(NamedTuple):
    secret_length: int
    max_guesses: int  # digit slots per guess row


PRESETS: Dict[Difficulty, DifficultyPreset] = {
    Difficulty.EASY: DifficultyPreset(secret_length=4, max_guesses=4),
    Difficulty.MEDIUM: DifficultyPreset(secret_length=6, max_guesses=6),
    Difficulty.HARD: DifficultyPreset(secret_length=8, max_guesses=8),
}

DEFAULT_DIFFICULTY = Difficulty.EASY


def parse_difficulty(value) -> Difficulty:
    """Accepts a Difficulty, or a case-insensitive name; None means the default."""
    if value is None:
        return DEFAULT_DIFFICULTY
    if isinstance(value, Difficulty):
        return value
    try:
        return Difficulty(str(value).strip().upper())
    except ValueError:
        raise ValidationError(
            f"Unknown difficulty {value!r}. Use one of: easy, medium, hard."
        ) from None


def preset_for(difficulty: Difficulty) -> DifficultyPreset:
    return PRESETS[difficulty]
