"""
Testing multiplayer turn rotation on the in-memory store.
Every seat's secret is pinned to [0,1,2,3] (easy).
"""

import pytest

from mastermind.errors import ConcurrentUpdateError, InvariantViolation, NotFoundError, ValidationError
from mastermind.types import Difficulty

MISS = [4, 4, 4, 4]
HIT = [0, 1, 2, 3]


def test_initialize_creates_one_game_per_seat(multiplayer_service, memory_store):
    session = multiplayer_service.initialize_multiplayer_game(3)

    assert session.player_count == 3
    assert len(session.game_ids) == 3
    assert len(set(session.game_ids)) == 3
    assert session.current_player == 0
    assert session.game_over is False

    for game_id in session.game_ids:
        game = memory_store.get(game_id)
        assert game.difficulty == Difficulty.EASY
        assert game.turn == 1

    assert memory_store.get_multiplayer(session.id) is not None


def test_initialize_passes_difficulty_to_every_seat(multiplayer_service, memory_store):
    session = multiplayer_service.initialize_multiplayer_game(2, "hard")
    assert all(memory_store.get(gid).difficulty == Difficulty.HARD for gid in session.game_ids)


@pytest.mark.parametrize("count", [0, -2])
def test_initialize_needs_at_least_one_player(multiplayer_service, count):
    with pytest.raises(ValidationError):
        multiplayer_service.initialize_multiplayer_game(count)


def test_seats_rotate_on_misses(multiplayer_service, memory_store):
    session = multiplayer_service.initialize_multiplayer_game(3)

    seats = []
    for _ in range(5):
        result = multiplayer_service.send_guess(session.id, MISS)
        seats.append(result.seat)

    assert seats == [0, 1, 2, 0, 1]
    assert memory_store.get_multiplayer(session.id).current_player == 2

    # Each seat's own game only moved on its own turns
    turns = [memory_store.get(gid).turn for gid in session.game_ids]
    assert turns == [3, 3, 2]


def test_win_ends_session_and_freezes_rotation(multiplayer_service, memory_store):
    session = multiplayer_service.initialize_multiplayer_game(3)
    multiplayer_service.send_guess(session.id, MISS)   # seat 0

    result = multiplayer_service.send_guess(session.id, HIT)   # seat 1 wins

    assert result.seat == 1
    assert result.game.won is True
    assert result.session.game_over is True
    assert result.session.current_player == 1

    # Later guesses don't rotate or touch any game
    after = multiplayer_service.send_guess(session.id, MISS)
    assert after.session.current_player == 1
    assert after.session.version == result.session.version
    assert memory_store.get(session.game_ids[2]).turn == 1


def test_single_player_session_keeps_seat_zero(multiplayer_service):
    session = multiplayer_service.initialize_multiplayer_game(1)
    for _ in range(3):
        result = multiplayer_service.send_guess(session.id, MISS)
        assert result.seat == 0
    assert result.session.current_player == 0


def test_invalid_guess_does_not_rotate(multiplayer_service, memory_store):
    session = multiplayer_service.initialize_multiplayer_game(2)

    with pytest.raises(ValidationError):
        multiplayer_service.send_guess(session.id, [9])

    stored = memory_store.get_multiplayer(session.id)
    assert stored.current_player == 0
    assert memory_store.get(session.game_ids[0]).turn == 1


def test_seat_that_lost_still_rotates(multiplayer_service, memory_store):
    session = multiplayer_service.initialize_multiplayer_game(2)
    for _ in range(20):
        result = multiplayer_service.send_guess(session.id, MISS)

    # 10 turns each -> both games lost, nobody won
    assert all(memory_store.get(gid).game_over for gid in session.game_ids)
    assert not any(memory_store.get(gid).won for gid in session.game_ids)
    assert result.session.game_over is False

    # A lost seat's game is left alone, turn still passes on
    result = multiplayer_service.send_guess(session.id, HIT)
    assert result.game.won is False
    assert result.session.current_player == 1


def test_unknown_multiplayer_id(multiplayer_service):
    with pytest.raises(NotFoundError):
        multiplayer_service.send_guess("missing", MISS)
    with pytest.raises(NotFoundError):
        multiplayer_service.get_multiplayer("missing")


def test_corrupt_seat_index_is_invariant_violation(multiplayer_service, memory_store):
    session = multiplayer_service.initialize_multiplayer_game(2)
    broken = memory_store.get_multiplayer(session.id)
    broken.current_player = 5
    memory_store.save_multiplayer(broken)

    with pytest.raises(InvariantViolation):
        multiplayer_service.send_guess(session.id, MISS)
    with pytest.raises(InvariantViolation):
        multiplayer_service.current_game_id(session.id)


def test_current_game_id_follows_rotation(multiplayer_service):
    session = multiplayer_service.initialize_multiplayer_game(2)
    assert multiplayer_service.current_game_id(session.id) == session.game_ids[0]
    multiplayer_service.send_guess(session.id, MISS)
    assert multiplayer_service.current_game_id(session.id) == session.game_ids[1]


def test_stale_session_read_does_not_touch_any_game(multiplayer_service, memory_store, monkeypatch):
    session = multiplayer_service.initialize_multiplayer_game(2)
    # Request B reads the session while it is still seat 0's turn...
    stale = memory_store.get_multiplayer(session.id)

    # ...then request A plays seat 0 and the turn moves to seat 1
    multiplayer_service.send_guess(session.id, MISS)

    monkeypatch.setattr(multiplayer_service, "get_multiplayer", lambda _id: stale)
    with pytest.raises(ConcurrentUpdateError):
        multiplayer_service.send_guess(session.id, MISS)

    seat0 = memory_store.get(session.game_ids[0])
    assert seat0.turn == 2
    assert seat0.guesses == ["4444"]
    assert memory_store.get(session.game_ids[1]).turn == 1
    assert memory_store.get_multiplayer(session.id).current_player == 1


def test_guess_on_finished_seat_is_not_scored(multiplayer_service):
    session = multiplayer_service.initialize_multiplayer_game(1)
    for _ in range(10):
        result = multiplayer_service.send_guess(session.id, MISS)
    assert result.scored is True
    assert result.game.game_over is True

    result = multiplayer_service.send_guess(session.id, HIT)
    assert result.scored is False
    assert result.game.turn == 11
    assert result.game.won is False
