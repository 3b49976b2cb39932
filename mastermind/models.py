"""
SQLAlchemy ORM models.

Tables:
- games: one row per game session (secret as a digit string, board/guesses/feedback as JSON)
- multiplayer_games: one row per multiplayer session (seat -> game id list as JSON)

Both tables carry a `version` column wired to the mapper's version_id_col, so
every UPDATE is "... WHERE id = ? AND version = ?". Two requests racing on the
same game can't both write the same turn.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Integer, DateTime, Enum, Boolean, JSON
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base
from .types import Difficulty


class Game(Base):
    __tablename__ = "games"

    # UUIDs generated in code; stored as strings
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    player_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)

    # "0371": one ASCII digit per position
    secret: Mapped[str] = mapped_column(String(16), nullable=False)
    difficulty: Mapped[Difficulty] = mapped_column(
        Enum(Difficulty, name="difficulty"),
        nullable=False,
        default=Difficulty.EASY,
    )

    # 10 rows of "#" / "0".."7"
    board: Mapped[list[list[str]]] = mapped_column(JSON, nullable=False)
    guesses: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    # 10 slots of {"exact", "partial", "message"} or null
    feedbacks: Mapped[list[Optional[dict]]] = mapped_column(JSON, nullable=False)

    turn: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    won: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    game_over: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    __mapper_args__ = {"version_id_col": version}


class Multiplayer(Base):
    __tablename__ = "multiplayer_games"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    player_count: Mapped[int] = mapped_column(Integer, nullable=False)
    # index = seat number
    game_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    current_player: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    game_over: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    __mapper_args__ = {"version_id_col": version}
