from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from letterfall.errors import SnapshotDecodeError
from letterfall.game import GameMode
from letterfall.game.pieces import Piece
from letterfall.session import (
    FRESHNESS_WINDOW,
    RestoreFailure,
    RestoreReason,
    decode_snapshot,
    encode_snapshot,
    restore_run_state,
)
from letterfall.session.codec import snapshot_to_dict

from tests.helpers import BAR, START, make_game


def busy_game(game):
    """Put the run into a non-trivial position."""
    state = game.state
    game.hold_swap()
    state.current_piece = Piece(BAR, list("WORD"), game.config.spawn_x)
    piece = state.current_piece
    for _ in range(5):
        assert piece.move(state.grid, dy=1)
    assert piece.try_rotate(state.grid)
    assert piece.move(state.grid, dx=-1)
    assert piece.move(state.grid, dx=-1)
    for x, letter in enumerate("QZX"):
        state.grid.set(x, 32, letter)
    state.score = 120
    state.level = 3
    state.gravity_interval_ms = 486
    state.words_found_since_level_up = 4
    state.found_words = {"cat", "dog"}
    state.removed_words = ["CAT", "DOG", "CAT"]
    return game


def assert_same_run(a, b):
    sa, sb = a.state, b.state
    assert sa.grid.rows() == sb.grid.rows()
    assert sa.score == sb.score
    assert sa.level == sb.level
    assert sa.gravity_interval_ms == sb.gravity_interval_ms
    assert sa.words_found_since_level_up == sb.words_found_since_level_up
    assert sa.found_words == sb.found_words
    assert sa.removed_words == sb.removed_words
    assert sa.hold_used == sb.hold_used
    for pa, pb in (
        (sa.current_piece, sb.current_piece),
        (sa.next_piece, sb.next_piece),
        (sa.held_piece, sb.held_piece),
    ):
        assert pa.cells == pb.cells
        assert pa.letters == pb.letters


def test_snapshot_stores_pieces_by_min_corner(game):
    busy_game(game)
    snap = game.snapshot("alice")
    assert snap.current.min_x == 3
    assert snap.current.min_y == 5
    assert snap.current.offsets == ((0, 0), (0, 1), (0, 2), (0, 3))
    assert snap.current.letters == ("W", "O", "R", "D")
    assert snap.board_rows[32] == "QZX......."
    assert snap.saved_at == START


def test_round_trip_restores_the_same_run(game, clock):
    busy_game(game)
    snap = game.snapshot("alice")

    other = make_game(seed=99, clock=clock)
    assert other.restore(snap, "alice") is None
    assert_same_run(game, other)
    assert other.mode is GameMode.PAUSED
    assert not other.state.pause_reasons

    other.resume("restore")
    assert other.mode is GameMode.PLAYING


def test_round_trip_through_bytes(game, clock):
    busy_game(game)
    snap = game.snapshot("alice")
    decoded = decode_snapshot(encode_snapshot(snap))
    assert decoded == snap

    other = make_game(seed=5, clock=clock)
    assert other.restore(decoded, "alice") is None
    assert_same_run(game, other)


def test_failed_restore_leaves_run_untouched(game, clock):
    snap = busy_game(make_game(clock=clock)).snapshot("alice")
    state = game.state
    rows = state.grid.rows()

    failure = game.restore(replace(snap, version=2), "alice")

    assert failure.reason is RestoreReason.VERSION_MISMATCH
    assert game.state is state
    assert state.grid.rows() == rows
    assert game.mode is GameMode.PLAYING


@pytest.mark.parametrize("identity", ["bob", "", "   "])
def test_identity_must_match(game, identity):
    snap = game.snapshot("alice")
    failure = game.restore(snap, identity)
    assert failure == RestoreFailure(RestoreReason.IDENTITY_MISMATCH)


def test_identity_compare_ignores_case_and_spaces(game):
    snap = game.snapshot("Alice")
    assert game.restore(snap, "  aLICE ") is None


def test_freshness_window(game):
    snap = game.snapshot("alice")
    assert game.restore(snap, "alice", now=START + FRESHNESS_WINDOW) is None
    failure = game.restore(snap, "alice", now=START + FRESHNESS_WINDOW + timedelta(seconds=1))
    assert failure.reason is RestoreReason.STALE


def test_snapshot_from_the_future_is_rejected(game):
    snap = game.snapshot("alice")
    failure = game.restore(snap, "alice", now=START - timedelta(seconds=1))
    assert failure.reason is RestoreReason.CLOCK_SKEW


def test_board_shape_and_letters_are_checked(game):
    snap = game.snapshot("alice")
    short = replace(snap, board_rows=snap.board_rows[:-1])
    assert game.restore(short, "alice").reason is RestoreReason.DIMENSION_MISMATCH

    rows = list(snap.board_rows)
    rows[32] = "1........."
    bad = replace(snap, board_rows=tuple(rows))
    assert game.restore(bad, "alice").reason is RestoreReason.DIMENSION_MISMATCH


def test_colliding_active_piece_is_rejected(game):
    game.state.current_piece = Piece(BAR, list("WORD"), game.config.spawn_x)
    snap = game.snapshot("alice")
    rows = list(snap.board_rows)
    rows[0] = ".....X...."
    failure = game.restore(replace(snap, board_rows=tuple(rows)), "alice")
    assert failure.reason is RestoreReason.COLLISION


def test_missing_active_piece_is_rejected(game):
    snap = game.snapshot("alice")
    failure = game.restore(replace(snap, current=None), "alice")
    assert failure.reason is RestoreReason.MISSING_PIECE


def test_restored_values_are_clamped(game):
    snap = replace(
        game.snapshot("alice"),
        score=-5,
        level=0,
        gravity_interval_ms=10,
        words_found_count=-3,
    )
    state = restore_run_state(snap, "alice", game.config, game.rules, now=START)
    assert state.score == 0
    assert state.level == 1
    assert state.gravity_interval_ms == 60
    assert state.words_found_since_level_up == 0


def test_blocked_path_stops_piece_short(game):
    game.state.current_piece = Piece(BAR, list("WORD"), game.config.spawn_x)
    piece = game.state.current_piece
    for _ in range(10):
        piece.move(game.state.grid, dy=1)
    snap = game.snapshot("alice")
    rows = list(snap.board_rows)
    rows[4] = ".....X...."
    state = restore_run_state(replace(snap, board_rows=tuple(rows)), "alice", game.config, now=START)
    assert state.current_piece.cells == [(5, 3), (6, 3), (7, 3), (8, 3)]


def test_wire_format_uses_camel_case(game):
    data = snapshot_to_dict(game.snapshot("alice"))
    assert data["version"] == 1
    assert data["savedAt"] == "2024-05-01T12:00:00+00:00"
    assert set(data) >= {
        "gravityIntervalMs",
        "wordsFoundCount",
        "holdUsed",
        "boardRows",
        "foundWords",
        "removedWords",
        "current",
        "next",
        "hold",
    }
    assert data["hold"] is None
    assert set(data["current"]) == {"minX", "minY", "offsets", "letters"}
    assert set(data["current"]["offsets"][0]) == {"x", "y"}


@pytest.mark.parametrize(
    "raw",
    [
        b"{not json",
        b"\xff\xfe",
        b"[]",
        b'{"savedAt": 5}',
        b'{"savedAt": "yesterday"}',
        b'{"savedAt": "2024-05-01T12:00:00+00:00", "score": "12"}',
        b'{"savedAt": "2024-05-01T12:00:00+00:00", "boardRows": "....."}',
        b'{"savedAt": "2024-05-01T12:00:00+00:00", "holdUsed": "false"}',
        b'{"savedAt": "2024-05-01T12:00:00+00:00", "holdUsed": 0}',
        b'{"savedAt": "2024-05-01T12:00:00+00:00", "current": {"offsets": [{"x": 1}]}}',
    ],
)
def test_decode_rejects_malformed_input(raw):
    with pytest.raises(SnapshotDecodeError):
        decode_snapshot(raw)


def test_decode_treats_naive_time_as_utc():
    snap = decode_snapshot(b'{"savedAt": "2024-05-01T12:00:00", "identity": "alice"}')
    assert snap.saved_at == datetime(2024, 5, 1, 12, tzinfo=timezone.utc)
    assert snap.current is None
    assert snap.board_rows == ()
