"""Session snapshots: a decoupled copy of a run that can be restored later.

Pieces are stored by their minimum corner plus offsets from it. On restore a
piece is rebuilt at spawn from those offsets and walked to the saved corner
with ordinary legality-checked moves, one cell at a time, x first. The active
piece must end somewhere legal or the whole restore is rejected.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Sequence, Tuple, Union

from letterfall.game.grid import Coordinate, GameGrid
from letterfall.game.pieces import Piece
from letterfall.game.rules import GameConfig, ScoringRules
from letterfall.game.state import GameMode, RunState

CURRENT_VERSION = 1
FRESHNESS_WINDOW = timedelta(minutes=10)
EMPTY_SENTINEL = "."


@dataclass(frozen=True)
class PieceSnapshot:
    min_x: int
    min_y: int
    offsets: Tuple[Coordinate, ...]
    letters: Tuple[str, ...]


@dataclass(frozen=True)
class SessionSnapshot:
    saved_at: datetime
    identity: str
    score: int
    level: int
    gravity_interval_ms: int
    words_found_count: int
    hold_used: bool
    board_rows: Tuple[str, ...]
    found_words: Tuple[str, ...] = ()
    removed_words: Tuple[str, ...] = ()
    current: Optional[PieceSnapshot] = None
    next_piece: Optional[PieceSnapshot] = None
    hold: Optional[PieceSnapshot] = None
    version: int = CURRENT_VERSION


class RestoreReason(Enum):
    NO_SESSION = "no_session"
    CORRUPT = "corrupt"
    VERSION_MISMATCH = "version_mismatch"
    IDENTITY_MISMATCH = "identity_mismatch"
    STALE = "stale"
    CLOCK_SKEW = "clock_skew"
    DIMENSION_MISMATCH = "dimension_mismatch"
    MISSING_PIECE = "missing_piece"
    COLLISION = "collision"


@dataclass(frozen=True)
class RestoreFailure:
    reason: RestoreReason
    detail: str = field(default="")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def snapshot_piece(piece: Optional[Piece]) -> Optional[PieceSnapshot]:
    if piece is None:
        return None
    min_x, min_y = piece.min_corner()
    offsets = tuple((x - min_x, y - min_y) for x, y in piece.cells)
    return PieceSnapshot(min_x, min_y, offsets, tuple(piece.letters))


def take_snapshot(
    state: RunState, identity: str, saved_at: Optional[datetime] = None
) -> SessionSnapshot:
    return SessionSnapshot(
        version=CURRENT_VERSION,
        saved_at=saved_at or utcnow(),
        identity=identity.strip(),
        score=state.score,
        level=state.level,
        gravity_interval_ms=state.gravity_interval_ms,
        words_found_count=state.words_found_since_level_up,
        hold_used=state.hold_used,
        board_rows=tuple(state.grid.rows(EMPTY_SENTINEL)),
        found_words=tuple(sorted(state.found_words)),
        removed_words=tuple(state.removed_words),
        current=snapshot_piece(state.current_piece),
        next_piece=snapshot_piece(state.next_piece),
        hold=snapshot_piece(state.held_piece),
    )


def _step_move(piece: Piece, grid: GameGrid, dx: int, dy: int) -> bool:
    sx = (dx > 0) - (dx < 0)
    for _ in range(abs(dx)):
        if not piece.move(grid, sx, 0):
            return False
    sy = (dy > 0) - (dy < 0)
    for _ in range(abs(dy)):
        if not piece.move(grid, 0, sy):
            return False
    return True


def _valid_letters(letters: Sequence[str]) -> bool:
    return all(
        isinstance(letter, str) and len(letter) == 1 and letter.isascii() and letter.isalpha()
        for letter in letters
    )


def restore_piece(snap: Optional[PieceSnapshot], grid: GameGrid, spawn_x: int) -> Optional[Piece]:
    if snap is None or not snap.offsets or not snap.letters:
        return None
    if len(snap.offsets) != len(snap.letters) or not _valid_letters(snap.letters):
        return None
    piece = Piece(snap.offsets, list(snap.letters), spawn_x)
    cur_x, cur_y = piece.min_corner()
    if not _step_move(piece, grid, snap.min_x - cur_x, 0):
        return piece
    _step_move(piece, grid, 0, snap.min_y - cur_y)
    return piece


def _board_from_rows(rows: Sequence[str], width: int, height: int) -> Optional[GameGrid]:
    if len(rows) != height:
        return None
    for row in rows:
        if not isinstance(row, str) or len(row) != width:
            return None
        if not all(ch == EMPTY_SENTINEL or (ch.isascii() and ch.isalpha()) for ch in row):
            return None
    return GameGrid.from_rows([row.upper() for row in rows], EMPTY_SENTINEL)


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def restore_run_state(
    snapshot: SessionSnapshot,
    identity: str,
    config: GameConfig,
    rules: Optional[ScoringRules] = None,
    now: Optional[datetime] = None,
) -> Union[RunState, RestoreFailure]:
    """Rebuild a RunState from `snapshot`, or explain why it cannot be resumed.

    Never touches live state: the result is a brand new RunState.
    """
    rules = rules or ScoringRules()
    if snapshot.version != CURRENT_VERSION:
        return RestoreFailure(RestoreReason.VERSION_MISMATCH, f"version {snapshot.version}")

    expected = (identity or "").strip()
    if not expected or (snapshot.identity or "").strip().casefold() != expected.casefold():
        return RestoreFailure(RestoreReason.IDENTITY_MISMATCH)

    age = _as_utc(now or utcnow()) - _as_utc(snapshot.saved_at)
    if age < timedelta(0):
        return RestoreFailure(RestoreReason.CLOCK_SKEW, f"age {age}")
    if age > FRESHNESS_WINDOW:
        return RestoreFailure(RestoreReason.STALE, f"age {age}")

    grid = _board_from_rows(snapshot.board_rows, config.width, config.height)
    if grid is None:
        return RestoreFailure(RestoreReason.DIMENSION_MISMATCH)

    current = restore_piece(snapshot.current, grid, config.spawn_x)
    next_piece = restore_piece(snapshot.next_piece, grid, config.spawn_x)
    held = restore_piece(snapshot.hold, grid, config.spawn_x)
    if current is None or next_piece is None:
        return RestoreFailure(RestoreReason.MISSING_PIECE)
    if not current.can_move(grid, 0, 0):
        return RestoreFailure(RestoreReason.COLLISION, f"active piece at {current.cells}")

    return RunState(
        grid=grid,
        current_piece=current,
        next_piece=next_piece,
        held_piece=held,
        score=max(0, int(snapshot.score)),
        level=max(1, int(snapshot.level)),
        gravity_interval_ms=max(rules.restored_min_gravity_ms, int(snapshot.gravity_interval_ms)),
        words_found_since_level_up=max(0, int(snapshot.words_found_count)),
        found_words={w.lower() for w in snapshot.found_words},
        removed_words=list(snapshot.removed_words),
        hold_used=bool(snapshot.hold_used),
        mode=GameMode.PAUSED,
        combo=config.make_combo(),
    )
