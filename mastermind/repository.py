"""
DB-backed store with the same API as the in-memory GameStore.

Public methods:
- get(game_id) -> GameSession | None
- save(game) -> GameSession
- find_by_owner(player_id) -> list[GameSession]
- get_multiplayer(multiplayer_id) -> MultiplayerSession | None
- save_multiplayer(session) -> MultiplayerSession
- save_turn(game | None, session) -> MultiplayerSession  (one commit)

Services only ever see GameSession / MultiplayerSession, so they can run on
either store.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from .engine import Feedback, decode_code, encode_code
from .errors import ConcurrentUpdateError
from .models import Game as GameORM, Multiplayer as MultiplayerORM
from .store import GameSession, MultiplayerSession

logger = logging.getLogger(__name__)


# --- Row <-> record mapping ---

def _feedback_to_json(entry: Optional[Feedback]) -> Optional[dict]:
    if entry is None:
        return None
    return {"exact": entry.exact, "partial": entry.partial, "message": entry.message}


def _feedback_from_json(data: Optional[dict]) -> Optional[Feedback]:
    if data is None:
        return None
    return Feedback(exact=data["exact"], partial=data["partial"])


def _to_game_session(row: GameORM) -> GameSession:
    return GameSession(
        id=row.id,
        player_id=row.player_id,
        secret=decode_code(row.secret),
        difficulty=row.difficulty,
        board=[list(r) for r in row.board],
        guesses=list(row.guesses),
        feedbacks=[_feedback_from_json(f) for f in row.feedbacks],
        turn=row.turn,
        won=row.won,
        game_over=row.game_over,
        version=row.version,
        created_at=row.created_at.timestamp(),
        updated_at=row.updated_at.timestamp(),
    )


def _to_multiplayer_session(row: MultiplayerORM) -> MultiplayerSession:
    return MultiplayerSession(
        id=row.id,
        player_count=row.player_count,
        game_ids=list(row.game_ids),
        current_player=row.current_player,
        game_over=row.game_over,
        version=row.version,
        created_at=row.created_at.timestamp(),
        updated_at=row.updated_at.timestamp(),
    )


class DBGameStore:
    """Same contract as store.GameStore, backed by SQLAlchemy."""

    def __init__(self, db: Session):
        self.db = db

    # --- Games ---

    def get(self, game_id: str) -> Optional[GameSession]:
        row = self.db.get(GameORM, game_id)
        if not row:
            return None
        return _to_game_session(row)

    def save(self, game: GameSession) -> GameSession:
        row = self._row_for_save(GameORM, game, "game")
        row = self._stage_game(row, game)
        self._commit(game, "game")
        self._sync(game, row)
        return game

    def find_by_owner(self, player_id: str) -> list[GameSession]:
        rows = (
            self.db.execute(
                select(GameORM).where(GameORM.player_id == player_id).order_by(GameORM.created_at.asc())
            )
            .scalars()
            .all()
        )
        return [_to_game_session(r) for r in rows]

    # --- Multiplayer ---

    def get_multiplayer(self, multiplayer_id: str) -> Optional[MultiplayerSession]:
        row = self.db.get(MultiplayerORM, multiplayer_id)
        if not row:
            return None
        return _to_multiplayer_session(row)

    def save_multiplayer(self, session: MultiplayerSession) -> MultiplayerSession:
        row = self._row_for_save(MultiplayerORM, session, "multiplayer game")
        row = self._stage_multiplayer(row, session)
        self._commit(session, "multiplayer game")
        self._sync(session, row)
        return session

    def save_turn(self, game: Optional[GameSession], session: MultiplayerSession) -> MultiplayerSession:
        """
        One multiplayer turn in one commit: the seat's game (if it changed) and
        the session are written together, or neither is.
        """
        game_row = self._row_for_save(GameORM, game, "game") if game is not None else None
        session_row = self._row_for_save(MultiplayerORM, session, "multiplayer game")

        if game is not None:
            game_row = self._stage_game(game_row, game)
        session_row = self._stage_multiplayer(session_row, session)
        self._commit(session, "multiplayer game")

        if game is not None:
            self._sync(game, game_row)
        self._sync(session, session_row)
        return session

    # --- Staging: copy a record onto its row, no commit ---

    def _stage_game(self, row: Optional[GameORM], game: GameSession) -> GameORM:
        now = datetime.utcnow()
        if row is None:
            row = GameORM(id=game.id, created_at=now)
            self.db.add(row)

        # Fresh lists so the JSON columns register as changed
        row.player_id = game.player_id
        row.secret = encode_code(game.secret)
        row.difficulty = game.difficulty
        row.board = [list(r) for r in game.board]
        row.guesses = list(game.guesses)
        row.feedbacks = [_feedback_to_json(f) for f in game.feedbacks]
        row.turn = game.turn
        row.won = game.won
        row.game_over = game.game_over
        row.updated_at = now
        return row

    def _stage_multiplayer(self, row: Optional[MultiplayerORM], session: MultiplayerSession) -> MultiplayerORM:
        now = datetime.utcnow()
        if row is None:
            row = MultiplayerORM(id=session.id, created_at=now)
            self.db.add(row)

        row.player_count = session.player_count
        row.game_ids = list(session.game_ids)
        row.current_player = session.current_player
        row.game_over = session.game_over
        row.updated_at = now
        return row

    @staticmethod
    def _sync(record, row) -> None:
        record.version = row.version
        record.created_at = row.created_at.timestamp()
        record.updated_at = row.updated_at.timestamp()

    # --- Optimistic locking helpers ---

    def _row_for_save(self, model, record, label: str):
        """
        Existing row for an update, or None for an insert. The row's version
        must match what the caller loaded; the UPDATE itself re-checks it.
        """
        row = self.db.get(model, record.id)
        stored_version = row.version if row is not None else 0
        if stored_version != record.version:
            logger.warning(
                "Rejected stale save of %s %s (have v%s, got v%s)",
                label, record.id, stored_version, record.version,
            )
            raise ConcurrentUpdateError(f"The {label} {record.id} was changed by another request.")
        return row

    def _commit(self, record, label: str) -> None:
        # Whatever goes wrong, leave the session usable for the next request
        try:
            self.db.commit()
        except StaleDataError as e:
            self.db.rollback()
            logger.warning("Lost update race on %s %s", label, record.id)
            raise ConcurrentUpdateError(f"The {label} {record.id} was changed by another request.") from e
        except Exception:
            self.db.rollback()
            raise
