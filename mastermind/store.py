"""
Game-state records + the in-memory store.

GameSession / MultiplayerSession are the objects the services work on.
GameStore keeps them in a dict; DBGameStore (repository.py) keeps them in SQL.
Both speak the same API:

- get(game_id) -> GameSession | None
- save(game) -> GameSession
- find_by_owner(player_id) -> list[GameSession]
- get_multiplayer(multiplayer_id) -> MultiplayerSession | None
- save_multiplayer(session) -> MultiplayerSession
- save_turn(game | None, session) -> MultiplayerSession  (both or neither)

save() is a compare-and-swap on `version`: it only goes through if nobody else
saved since the caller loaded the record.
"""

import logging
from copy import deepcopy
from dataclasses import dataclass, field
from threading import RLock
from time import time
from typing import Dict, List, Optional
from uuid import uuid4

from .engine import Feedback
from .errors import ConcurrentUpdateError
from .types import Code, Difficulty, DEFAULT_DIFFICULTY

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid4())


@dataclass
class GameSession:
    secret: Code
    board: List[List[str]]
    feedbacks: List[Optional[Feedback]]
    difficulty: Difficulty = DEFAULT_DIFFICULTY
    player_id: Optional[str] = None
    id: str = field(default_factory=_new_id)
    guesses: List[str] = field(default_factory=list)
    turn: int = 1
    won: bool = False
    game_over: bool = False
    # 0 = never saved
    version: int = 0
    created_at: float = field(default_factory=time)
    updated_at: float = field(default_factory=time)


@dataclass
class MultiplayerSession:
    player_count: int
    game_ids: List[str] = field(default_factory=list)
    id: str = field(default_factory=_new_id)
    current_player: int = 0
    game_over: bool = False
    version: int = 0
    created_at: float = field(default_factory=time)
    updated_at: float = field(default_factory=time)


class GameStore:
    def __init__(self) -> None:
        self._games: Dict[str, GameSession] = {}
        self._multiplayer: Dict[str, MultiplayerSession] = {}
        self._lock = RLock()

    # Callers get copies, so nothing changes here until save()

    def get(self, game_id: str) -> Optional[GameSession]:
        with self._lock:
            game = self._games.get(game_id)
            return deepcopy(game) if game is not None else None

    def save(self, game: GameSession) -> GameSession:
        with self._lock:
            self._check_version(self._games.get(game.id), game, "game")
            game.version += 1
            game.updated_at = time()
            self._games[game.id] = deepcopy(game)
            return game

    def find_by_owner(self, player_id: str) -> List[GameSession]:
        with self._lock:
            owned = [g for g in self._games.values() if g.player_id == player_id]
            owned.sort(key=lambda g: g.created_at)
            return [deepcopy(g) for g in owned]

    def get_multiplayer(self, multiplayer_id: str) -> Optional[MultiplayerSession]:
        with self._lock:
            session = self._multiplayer.get(multiplayer_id)
            return deepcopy(session) if session is not None else None

    def save_multiplayer(self, session: MultiplayerSession) -> MultiplayerSession:
        with self._lock:
            self._check_version(self._multiplayer.get(session.id), session, "multiplayer game")
            session.version += 1
            session.updated_at = time()
            self._multiplayer[session.id] = deepcopy(session)
            return session

    def save_turn(self, game: Optional[GameSession], session: MultiplayerSession) -> MultiplayerSession:
        """One multiplayer turn: both versions are checked before either record is written."""
        with self._lock:
            if game is not None:
                self._check_version(self._games.get(game.id), game, "game")
            self._check_version(self._multiplayer.get(session.id), session, "multiplayer game")
            if game is not None:
                self.save(game)
            return self.save_multiplayer(session)

    @staticmethod
    def _check_version(stored, incoming, label: str) -> None:
        stored_version = stored.version if stored is not None else 0
        if stored_version != incoming.version:
            logger.warning(
                "Rejected stale save of %s %s (have v%s, got v%s)",
                label, incoming.id, stored_version, incoming.version,
            )
            raise ConcurrentUpdateError(f"The {label} {incoming.id} was changed by another request.")
