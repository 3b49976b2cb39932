'''
Mastermind API

Single player:
POST /games                      -> start a game (?difficulty=easy|medium|hard&player_id=...)
GET  /games/{id}                 -> read board, guesses & feedback
POST /games/{id}/guess           -> submit a guess
GET  /players/{player_id}/games  -> every game a player owns

Multiplayer:
POST /multiplayer                -> start a session (?players=N&difficulty=...)
GET  /multiplayer/{id}           -> whose turn it is, seat games
POST /multiplayer/{id}/guess     -> guess for the seat whose turn it is

Always backed by the SQL repository (DBGameStore).
'''

import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Depends
from fastapi.middleware.cors import CORSMiddleware

from . import config
from .random_client import generate_code
from .db import get_db                  # SQLAlchemy Session dependency
from .repository import DBGameStore     # DB-backed store
from .bootstrap_db import create_all    # dev-only: create tables
from .errors import (
    ConcurrentUpdateError,
    InvariantViolation,
    MastermindError,
    NotFoundError,
    ValidationError,
)
from .games import GameService, reveal_secret
from .multiplayer import MultiplayerService
from .store import GameSession, MultiplayerSession
from .types import TURN_BUDGET, preset_for

from .schemas import (
    NewGameResponse,
    GuessRequest,
    GuessResponse,
    GameState,
    FeedbackOut,
    MultiplayerState,
    MultiplayerGuessResponse,
)

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Mastermind API", version="3.0.0")

# Allow everything in dev so the docs and front-end work easily
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

# --- Dev convenience: auto-create tables locally ---
if config.APP_ENV == "local":
    @app.on_event("startup")
    def _dev_create_tables():
        create_all()


# Per-request store/services, bound to the current DB session
def get_store(session = Depends(get_db)) -> DBGameStore:
    return DBGameStore(session)

def get_game_service(store: DBGameStore = Depends(get_store)) -> GameService:
    # looked up at call time so tests can pin the secret
    return GameService(store, code_generator=generate_code)

def get_multiplayer_service(
    store: DBGameStore = Depends(get_store),
    games: GameService = Depends(get_game_service),
) -> MultiplayerService:
    return MultiplayerService(store, games)


# ---------------- Helpers ----------------

def _to_http(error: MastermindError) -> HTTPException:
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, ValidationError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, ConcurrentUpdateError):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, InvariantViolation):
        logger.error("Invariant violated: %s", error)
        return HTTPException(status_code=500, detail="Internal error.")
    logger.exception("Unexpected game error")
    return HTTPException(status_code=500, detail="Internal error.")

def _feedback_out(entry) -> Optional[FeedbackOut]:
    if entry is None:
        return None
    return FeedbackOut(exact=entry.exact, partial=entry.partial, message=entry.message)

def _latest_feedback(game: GameSession) -> Optional[FeedbackOut]:
    if not game.guesses:
        return None
    return _feedback_out(game.feedbacks[len(game.guesses) - 1])

def _game_state(game: GameSession) -> GameState:
    return GameState(
        game_id=game.id,
        player_id=game.player_id,
        difficulty=game.difficulty,
        board=game.board,
        guesses=game.guesses,
        feedbacks=[_feedback_out(f) for f in game.feedbacks],
        turn=game.turn,
        turns_left=max(TURN_BUDGET - len(game.guesses), 0),
        won=game.won,
        game_over=game.game_over,
        secret=reveal_secret(game),
    )

def _multiplayer_state(session: MultiplayerSession) -> MultiplayerState:
    return MultiplayerState(
        multiplayer_id=session.id,
        player_count=session.player_count,
        game_ids=session.game_ids,
        current_player=session.current_player,
        game_over=session.game_over,
    )

def _game_over_note(game: GameSession) -> Optional[str]:
    if not game.game_over:
        return None
    return f"Game {'won' if game.won else 'lost'}. No more guesses allowed."


# ---------------- Single player ----------------

@app.post("/games", response_model=NewGameResponse, summary="Start a new game")
def start_game(
    difficulty: str = "easy",
    player_id: Optional[str] = None,
    games: GameService = Depends(get_game_service),
) -> NewGameResponse:
    """
    Difficulty presets:
      easy   -> 4 digits
      medium -> 6 digits
      hard   -> 8 digits
    Every game gets 10 turns.
    """
    try:
        game = games.start_game(difficulty, player_id)
    except MastermindError as e:
        raise _to_http(e)

    preset = preset_for(game.difficulty)
    return NewGameResponse(
        game_id=game.id,
        difficulty=game.difficulty,
        secret_length=preset.secret_length,
        max_guesses=preset.max_guesses,
        turns_left=TURN_BUDGET,
    )

@app.get("/games/{game_id}", response_model=GameState, summary="Get current game state")
def get_game(
    game_id: str,
    games: GameService = Depends(get_game_service),
) -> GameState:
    try:
        return _game_state(games.get_game(game_id))
    except MastermindError as e:
        raise _to_http(e)

@app.post("/games/{game_id}/guess", response_model=GuessResponse, summary="Submit a guess")
def submit_guess(
    game_id: str,
    payload: GuessRequest,
    games: GameService = Depends(get_game_service),
) -> GuessResponse:
    try:
        game = games.submit_guess(game_id, payload.guess)
    except MastermindError as e:
        raise _to_http(e)

    return GuessResponse(
        game=_game_state(game),
        feedback=_latest_feedback(game),
        note=_game_over_note(game),
    )

@app.get("/players/{player_id}/games", response_model=List[GameState], summary="List a player's games")
def list_games_by_player(
    player_id: str,
    games: GameService = Depends(get_game_service),
) -> List[GameState]:
    return [_game_state(g) for g in games.list_games_by_player(player_id)]


# ---------------- Multiplayer ----------------

@app.post("/multiplayer", response_model=MultiplayerState, summary="Start a multiplayer game")
def start_multiplayer(
    players: int,
    difficulty: Optional[str] = None,
    multiplayer: MultiplayerService = Depends(get_multiplayer_service),
) -> MultiplayerState:
    try:
        session = multiplayer.initialize_multiplayer_game(players, difficulty)
    except MastermindError as e:
        raise _to_http(e)
    return _multiplayer_state(session)

@app.get("/multiplayer/{multiplayer_id}", response_model=MultiplayerState, summary="Get multiplayer state")
def get_multiplayer(
    multiplayer_id: str,
    multiplayer: MultiplayerService = Depends(get_multiplayer_service),
) -> MultiplayerState:
    try:
        return _multiplayer_state(multiplayer.get_multiplayer(multiplayer_id))
    except MastermindError as e:
        raise _to_http(e)

@app.post(
    "/multiplayer/{multiplayer_id}/guess",
    response_model=MultiplayerGuessResponse,
    summary="Guess for the seat whose turn it is",
)
def send_multiplayer_guess(
    multiplayer_id: str,
    payload: GuessRequest,
    multiplayer: MultiplayerService = Depends(get_multiplayer_service),
) -> MultiplayerGuessResponse:
    try:
        result = multiplayer.send_guess(multiplayer_id, payload.guess)
    except MastermindError as e:
        raise _to_http(e)

    note = None
    if result.session.game_over:
        note = f"Seat {result.seat} cracked the code. Game over."
    elif not result.scored:
        note = f"Seat {result.seat} is out of turns. Guess not scored, turn passed on."
    return MultiplayerGuessResponse(
        multiplayer=_multiplayer_state(result.session),
        seat=result.seat,
        game=_game_state(result.game),
        # Only feedback for a guess that was actually scored
        feedback=_latest_feedback(result.game) if result.scored else None,
        note=note,
    )
