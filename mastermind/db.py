"""
Single place to:
- Take DATABASE_URL from config
- Create a SQLAlchemy Engine (MySQL via PyMySQL in deployment, SQLite in tests)
- Create a Session factory (SessionLocal) for per-request DB sessions
- Provide get_db() dependency for FastAPI routes
"""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from . import config

if not config.DATABASE_URL:
    raise RuntimeError(
        "DATABASE_URL is not set. Add it to your environment or a local .env (not committed)."
    )

# pool_pre_ping=True = auto-detect dead connections (helps with long-lived processes).
engine = create_engine(
    config.DATABASE_URL,
    pool_pre_ping=True,
    echo=False,
    future=True,
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


class Base(DeclarativeBase):
    pass


# FastAPI dependency: one session per request, always closed
def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
