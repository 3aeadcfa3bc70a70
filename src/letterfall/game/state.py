from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set

from .combo import ComboTracker
from .grid import GameGrid
from .pieces import Piece


class GameMode(Enum):
    PLAYING = "playing"
    PAUSED = "paused"
    QUIZ = "quiz"
    GAME_OVER = "game_over"


@dataclass
class RunState:
    """Everything one match owns. Mutated only through the engine."""

    grid: GameGrid
    current_piece: Piece
    next_piece: Piece
    held_piece: Optional[Piece] = None
    score: int = 0
    level: int = 1
    gravity_interval_ms: int = 600
    words_found_since_level_up: int = 0
    found_words: Set[str] = field(default_factory=set)
    removed_words: List[str] = field(default_factory=list)
    hold_used: bool = False
    mode: GameMode = GameMode.PLAYING
    pause_reasons: Set[str] = field(default_factory=set)
    combo: ComboTracker = field(default_factory=ComboTracker)
    score_multiplier: float = 1.0

    @property
    def is_game_over(self) -> bool:
        return self.mode is GameMode.GAME_OVER

    def add_pause_reason(self, reason: str) -> None:
        self.pause_reasons.add(reason.lower())

    def remove_pause_reason(self, reason: str) -> None:
        self.pause_reasons.discard(reason.lower())

    def has_pause_reasons(self) -> bool:
        return bool(self.pause_reasons)
