"""
Pure game logic (no HTTP, no storage).
For each guess we compute two feedback numbers:
- exact: right digit, right position
- partial: digit is in the secret somewhere else, and that secret slot
  was not already used by an exact match or an earlier partial match

Duplicates are allowed in the secret and in guesses.
"""

from typing import List, NamedTuple, Optional

from .errors import ValidationError
from .types import Code, MAX_DIGIT, MIN_DIGIT, TURN_BUDGET, UNFILLED


class Feedback(NamedTuple):
    exact: int
    partial: int

    @property
    def message(self) -> str:
        return f"Exact Matches: {self.exact}, Partial Matches: {self.partial}"


def score_guess(secret: Code, guess: Code) -> Feedback:
    """
    Example:
      secret = [1, 1, 2, 3]
      guess  = [1, 2, 2, 2]
      pass 1: positions 0 and 2 match -> exact = 2
      pass 2: leftover guess 2s vs leftover secret {1, 3} -> partial = 0
    """
    n = len(secret)
    if n == 0 or len(guess) != n:
        raise ValidationError("Secret and guess must be the same non-zero length.")

    guess_used = set()
    secret_used = set()

    # 1. Exact matches
    exact = 0
    i = 0
    while i < n:
        if guess[i] == secret[i]:
            exact += 1
            guess_used.add(i)
            secret_used.add(i)
        i += 1

    # 2. Partial matches: first unused secret slot only, so a repeated
    #    guess digit can't claim the same secret digit twice
    partial = 0
    i = 0
    while i < n:
        if i not in guess_used:
            j = 0
            while j < n:
                if guess[i] == secret[j] and j not in secret_used:
                    partial += 1
                    secret_used.add(j)
                    break
                j += 1
        i += 1

    return Feedback(exact=exact, partial=partial)


def is_win(secret: Code, guess: Code) -> bool:
    """Win = same digits in the same order."""
    return len(secret) > 0 and list(secret) == list(guess)


def validate_guess(guess, expected_length: int) -> Code:
    """
    Reject anything that is not a non-empty list of ints 0..7 with the
    secret's length. Returns the guess as a plain list.
    """
    if guess is None or len(guess) == 0:
        raise ValidationError("Guess must contain at least one digit.")

    for digit in guess:
        # bool is an int subclass; "True" is not a digit
        if isinstance(digit, bool) or not isinstance(digit, int):
            raise ValidationError(f"Guess digits must be integers, got {digit!r}.")
        if digit < MIN_DIGIT or digit > MAX_DIGIT:
            raise ValidationError(
                f"Each digit must be between {MIN_DIGIT} and {MAX_DIGIT} inclusive."
            )

    if len(guess) != expected_length:
        raise ValidationError(f"Guess must have exactly {expected_length} digits for this game.")

    return list(guess)


# --- Text encoding: one ASCII digit per position, no separators ---

def encode_code(code: Code) -> str:
    return "".join(str(d) for d in code)


def decode_code(text: str) -> Code:
    return [int(ch) for ch in text]


# --- Board helpers ---

def new_board(columns: int) -> List[List[str]]:
    return [[UNFILLED] * columns for _ in range(TURN_BUDGET)]


def new_feedback_slots() -> List[Optional[Feedback]]:
    return [None] * TURN_BUDGET


def board_row_for_turn(turn: int) -> int:
    """Rows fill bottom-up: turn 1 -> row 9, turn 10 -> row 0."""
    return TURN_BUDGET - turn
