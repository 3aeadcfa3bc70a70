"""Outward notifications appended by the engine and drained by the caller once per frame."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Tuple

from .grid import Coordinate


class QuizOutcome(Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class GameResult:
    score: int
    level: int
    lines: int  # total removed words
    words_cleared: int  # unique words
    duration: timedelta
    ended_at: datetime
    mode_key: str = "classic"


@dataclass(frozen=True)
class PieceLocked:
    cells: Tuple[Coordinate, ...]


@dataclass(frozen=True)
class WordsCleared:
    words: Tuple[str, ...]
    cells: Tuple[Coordinate, ...]
    score_gained: int
    big: bool


@dataclass(frozen=True)
class LevelUp:
    level: int
    gravity_interval_ms: int


@dataclass(frozen=True)
class ComboChanged:
    step: int
    multiplier: float


@dataclass(frozen=True)
class QuizRequested:
    word: str


@dataclass(frozen=True)
class QuizAnswered:
    outcome: QuizOutcome


@dataclass(frozen=True)
class GameOver:
    result: GameResult


class EventQueue:
    def __init__(self) -> None:
        self._events: List[object] = []

    def append(self, event: object) -> None:
        self._events.append(event)

    def drain(self) -> List[object]:
        events, self._events = self._events, []
        return events

    def __len__(self) -> int:
        return len(self._events)
