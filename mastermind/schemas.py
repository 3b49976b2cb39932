"""
Pydantic models for the HTTP layer
- Validate what the client sends
- Shape what the API returns (the secret only shows up once a game is over)
"""

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from .types import Difficulty


# 1. Player's guess
class GuessRequest(BaseModel):
    guess: List[int] = Field(
        ..., description="A list of digits (length depends on difficulty). Each digit must be between 0 and 7."
    )

    @field_validator("guess")
    @classmethod
    def validate_digits(cls, guess_list: List[int]) -> List[int]:
        """
        Range check only. The length depends on the game's difficulty,
        so the game service checks it against the secret.
        """
        for digit in guess_list:
            if digit < 0 or digit > 7:
                raise ValueError("Each digit must be between 0 and 7 inclusive.")
        return guess_list

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"guess": [0, 1, 2, 3]},                  # easy (default)
                {"guess": [0, 1, 2, 3, 4, 5]},            # medium
                {"guess": [0, 1, 2, 3, 4, 5, 6, 7]},      # hard
            ]
        }
    }


# 2. Feedback for one turn
class FeedbackOut(BaseModel):
    exact: int = Field(..., description="Right digit, right position")
    partial: int = Field(..., description="Right digit, wrong position")
    message: str = Field(..., description="Human-readable summary")


# 3. A new game
class NewGameResponse(BaseModel):
    game_id: str = Field(..., description="Unique ID for the game; secret is never returned")
    difficulty: Difficulty = Field(..., description="Chosen difficulty level")
    secret_length: int = Field(..., description="How many digits the secret has")
    max_guesses: int = Field(..., description="Digit slots per guess row")
    turns_left: int = Field(..., description="How many guesses remain")


# 4. Full state of one game
class GameState(BaseModel):
    game_id: str
    player_id: Optional[str] = None
    difficulty: Difficulty
    board: List[List[str]] = Field(..., description="10 rows, filled bottom-up; '#' = empty")
    guesses: List[str] = Field(..., description="Guesses in the order they were made")
    feedbacks: List[Optional[FeedbackOut]] = Field(..., description="One slot per turn (1..10)")
    turn: int = Field(..., description="Current turn, starting at 1")
    turns_left: int
    won: bool
    game_over: bool
    secret: Optional[List[int]] = Field(None, description="Only revealed once the game is over")


# 5. Result of a guess
class GuessResponse(BaseModel):
    game: GameState
    feedback: Optional[FeedbackOut] = Field(None, description="Feedback from the latest guess")
    note: Optional[str] = Field(None, description="Extra note (ex. 'Game over. No more guesses allowed.')")


# 6. Multiplayer
class MultiplayerState(BaseModel):
    multiplayer_id: str
    player_count: int
    game_ids: List[str] = Field(..., description="One game per seat, index = seat number")
    current_player: int = Field(..., description="Seat whose turn it is (0-based)")
    game_over: bool


class MultiplayerGuessResponse(BaseModel):
    multiplayer: MultiplayerState
    seat: int = Field(..., description="Seat that made this guess")
    game: GameState
    feedback: Optional[FeedbackOut] = None
    note: Optional[str] = None
