"""
Multiplayer: one single-player game per seat, players take turns.

Seats rotate 0 -> 1 -> ... -> player_count-1 -> 0 after every guess that
doesn't win. The first seat to crack its own code ends the whole session.
"""

import logging
from typing import NamedTuple, Optional

from .errors import InvariantViolation, NotFoundError, ValidationError
from .games import GameService
from .store import GameSession, MultiplayerSession
from .types import parse_difficulty

logger = logging.getLogger(__name__)


class TurnResult(NamedTuple):
    session: MultiplayerSession
    seat: int
    game: GameSession
    # False when the guess was not scored (session or seat game already over)
    scored: bool = True


class MultiplayerService:
    def __init__(self, store, games: GameService):
        self.store = store
        self.games = games

    def initialize_multiplayer_game(
        self, player_count: int, difficulty=None, player_id: Optional[str] = None
    ) -> MultiplayerSession:
        if isinstance(player_count, bool) or not isinstance(player_count, int) or player_count < 1:
            raise ValidationError("Player count must be at least 1.")
        level = parse_difficulty(difficulty)

        # Each seat gets its own game, and so its own secret
        game_ids = []
        for _ in range(player_count):
            game = self.games.start_game(level, player_id)
            game_ids.append(game.id)

        session = MultiplayerSession(player_count=player_count, game_ids=game_ids)
        self.store.save_multiplayer(session)
        logger.info("Started multiplayer game %s with %s seats", session.id, player_count)
        return session

    def get_multiplayer(self, multiplayer_id: str) -> MultiplayerSession:
        session = self.store.get_multiplayer(multiplayer_id)
        if session is None:
            raise NotFoundError(f"Multiplayer game with ID {multiplayer_id} not found")
        return session

    def current_game_id(self, multiplayer_id: str) -> str:
        return self._seat_game_id(self.get_multiplayer(multiplayer_id))

    def send_guess(self, multiplayer_id: str, guess) -> TurnResult:
        """
        The seat's game and the session are written together by save_turn,
        and only if neither changed since we loaded them.
        """
        session = self.get_multiplayer(multiplayer_id)
        seat = session.current_player
        game = self.games.get_game(self._seat_game_id(session))

        if session.game_over:
            return TurnResult(session=session, seat=seat, game=game, scored=False)

        # A seat whose own game is already over just passes the turn on
        scored = not game.game_over
        if scored:
            self.games.apply_guess(game, guess)

        if game.won:
            session.game_over = True
            logger.info("Multiplayer game %s won by seat %s", session.id, seat)
        else:
            session.current_player = (seat + 1) % session.player_count

        self.store.save_turn(game if scored else None, session)
        return TurnResult(session=session, seat=seat, game=game, scored=scored)

    @staticmethod
    def _seat_game_id(session: MultiplayerSession) -> str:
        seat = session.current_player
        if seat < 0 or seat >= session.player_count or seat >= len(session.game_ids):
            raise InvariantViolation(
                f"Multiplayer game {session.id} points at seat {seat}, "
                f"but only has {len(session.game_ids)} of {session.player_count} seats."
            )
        return session.game_ids[seat]
