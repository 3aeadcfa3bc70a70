from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .combo import ComboTracker


class DifficultyPreset(Enum):
    CASUAL = "casual"
    STANDARD = "standard"
    HARD = "hard"
    INSANE = "insane"


DIFFICULTY_GRAVITY_MS = {
    DifficultyPreset.CASUAL: 750,
    DifficultyPreset.STANDARD: 600,
    DifficultyPreset.HARD: 480,
    DifficultyPreset.INSANE: 380,
}


@dataclass
class GameConfig:
    width: int = 10
    height: int = 33
    random_seed: Optional[int] = None
    starting_level: int = 1
    difficulty: DifficultyPreset = DifficultyPreset.STANDARD
    soft_drop_factor: float = 5.0
    mode_key: str = "classic"

    # combo tuning
    combo_decay_ms: int = 9000
    combo_growth: float = 0.5
    combo_start: float = 1.0
    combo_max: float = 4.0

    @property
    def spawn_x(self) -> int:
        return self.width // 2

    def initial_level(self) -> int:
        return max(1, min(20, int(self.starting_level)))

    def initial_gravity_ms(self) -> int:
        return DIFFICULTY_GRAVITY_MS[self.difficulty]

    def make_combo(self) -> ComboTracker:
        return ComboTracker(
            decay_ms=self.combo_decay_ms,
            growth=self.combo_growth,
            start_mult=self.combo_start,
            max_mult=self.combo_max,
        )


@dataclass
class ScoringRules:
    points_per_letter: int = 10
    words_per_level: int = 10
    gravity_decay: float = 0.90
    min_gravity_ms: int = 120
    restored_min_gravity_ms: int = 60
    no_repeats_length: int = 5
    quiz_every: int = 5
    quiz_bonus: int = 50
    big_clear_cells: int = 4

    @staticmethod
    def min_word_length(level: int) -> int:
        return 3 + min(2, level // 10)

    def no_repeats_active(self, level: int) -> bool:
        return self.min_word_length(level) >= self.no_repeats_length

    def score_for_word(self, word: str, level: int, multiplier: float) -> int:
        return int(len(word) * self.points_per_letter * level * multiplier)

    def next_gravity_ms(self, gravity_ms: int) -> int:
        return max(self.min_gravity_ms, int(gravity_ms * self.gravity_decay))

    def triggers_quiz(self, removed_total: int) -> bool:
        return removed_total > 0 and removed_total % self.quiz_every == 0
