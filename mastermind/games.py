"""
Single-player game flow on top of a store (GameStore or DBGameStore).

- start_game(difficulty, player_id) -> GameSession
- get_game(game_id) -> GameSession
- submit_guess(game_id, guess) -> GameSession
- list_games_by_player(player_id) -> list[GameSession]
"""

import logging
from typing import Callable, List, Optional

from . import engine
from .errors import NotFoundError
from .random_client import generate_code
from .store import GameSession
from .types import Code, Difficulty, TURN_BUDGET, parse_difficulty, preset_for

logger = logging.getLogger(__name__)


class GameService:
    def __init__(self, store, code_generator: Callable[[Difficulty], Code] = generate_code):
        self.store = store
        self.code_generator = code_generator

    def start_game(self, difficulty=None, player_id: Optional[str] = None) -> GameSession:
        level = parse_difficulty(difficulty)
        preset = preset_for(level)

        game = GameSession(
            secret=list(self.code_generator(level)),
            board=engine.new_board(preset.secret_length),
            feedbacks=engine.new_feedback_slots(),
            difficulty=level,
            player_id=player_id,
        )
        self.store.save(game)
        logger.info("Started %s game %s for player %s", level.value, game.id, player_id)
        return game

    def get_game(self, game_id: str) -> GameSession:
        game = self.store.get(game_id)
        if game is None:
            raise NotFoundError(f"Game with ID {game_id} not found")
        return game

    def list_games_by_player(self, player_id: str) -> List[GameSession]:
        return self.store.find_by_owner(player_id)

    def submit_guess(self, game_id: str, guess) -> GameSession:
        """
        Score one guess and move the game forward a turn.
        A finished game comes back untouched (and is not saved again).
        Bad input raises ValidationError before anything changes.
        """
        game = self.get_game(game_id)
        if game.game_over:
            return game

        self.apply_guess(game, guess)
        self.store.save(game)
        return game

    def apply_guess(self, game: GameSession, guess) -> None:
        """
        Turn steps 1-5 on an in-progress game, in memory only; the caller saves.
        Validation happens before the first change.
        """
        attempt = engine.validate_guess(guess, len(game.secret))
        turn = game.turn

        # 1. Feedback goes in the slot for this turn
        game.feedbacks[turn - 1] = engine.score_guess(game.secret, attempt)
        game.guesses.append(engine.encode_code(attempt))

        # 2. Board fills bottom-up
        if turn <= TURN_BUDGET:
            game.board[engine.board_row_for_turn(turn)] = [str(d) for d in attempt]

        # 3. Win check
        if engine.is_win(game.secret, attempt):
            game.won = True
            game.game_over = True

        # 4/5. Next turn; out of turns means a loss
        game.turn = turn + 1
        if game.turn > TURN_BUDGET and not game.won:
            game.won = False
            game.game_over = True

        if game.game_over:
            logger.info("Game %s finished on turn %s (won=%s)", game.id, turn, game.won)


def reveal_secret(game: GameSession) -> Optional[Code]:
    """The secret ONLY for finished games; else None."""
    if game.game_over:
        return list(game.secret)
    return None
