from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional, Sequence

from letterfall.game import GameConfig, LetterfallGame, Piece, RunState
from letterfall.game.grid import GameGrid
from letterfall.services.dictionary import WordList
from letterfall.services.random_source import RandomSource

START = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

BAR = ((0, 0), (1, 0), (2, 0), (3, 0))
TRIPLE = ((0, 0), (1, 0), (2, 0))


class FixedClock:
    """Wall clock that only moves when told to."""

    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeMonotonic:
    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


def make_game(
    words: Iterable[str] = (),
    seed: int = 7,
    clock: Optional[FixedClock] = None,
    config: Optional[GameConfig] = None,
) -> LetterfallGame:
    return LetterfallGame(
        config or GameConfig(),
        dictionary=WordList(words),
        rng=RandomSource(seed),
        clock=clock or FixedClock(),
    )


def place_piece(letters: str, cells: Sequence[tuple], offsets=None, spawn_x: int = 5) -> Piece:
    """Piece with explicit absolute cells; offsets default to a horizontal bar."""
    offsets = offsets or tuple((i, 0) for i in range(len(letters)))
    return Piece(offsets, list(letters), spawn_x, list(cells))


def make_state(grid: Optional[GameGrid] = None, level: int = 1) -> RunState:
    grid = grid or GameGrid(10, 33)
    return RunState(
        grid=grid,
        current_piece=Piece(BAR, list("QQQQ"), 5),
        next_piece=Piece(BAR, list("ZZZZ"), 5),
        level=level,
    )


def write_word(grid: GameGrid, word: str, x: int, y: int, vertical: bool = False) -> None:
    for i, letter in enumerate(word):
        if vertical:
            grid.set(x, y + i, letter)
        else:
            grid.set(x + i, y, letter)
