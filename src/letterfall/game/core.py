from __future__ import annotations

import logging
from datetime import datetime, timedelta
from enum import IntEnum
from typing import Callable, Optional, Tuple

import numpy as np

from letterfall.services.dictionary import WordList
from letterfall.services.random_source import RandomSource
from letterfall.session.snapshot import (
    RestoreFailure,
    SessionSnapshot,
    restore_run_state,
    take_snapshot,
    utcnow,
)

from .events import (
    ComboChanged,
    EventQueue,
    GameOver,
    GameResult,
    LevelUp,
    PieceLocked,
    QuizAnswered,
    QuizOutcome,
    QuizRequested,
    WordsCleared,
)
from .grid import GameGrid
from .pieces import PieceFactory
from .resolver import Dictionary, PassResult, WordResolver
from .rules import GameConfig, ScoringRules
from .state import GameMode, RunState

logger = logging.getLogger(__name__)

QUIZ_REASON = "quiz"


class Action(IntEnum):
    LEFT = 0
    RIGHT = 1
    ROTATE = 2
    SOFT_DROP = 3
    HARD_DROP = 4
    HOLD = 5
    NONE = 6


class LetterfallGame:
    """Single-match engine: owns the RunState and every mutation of it."""

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        dictionary: Optional[Dictionary] = None,
        rng: Optional[RandomSource] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.rng = rng or RandomSource(self.config.random_seed)
        self.dictionary = dictionary if dictionary is not None else WordList()
        self.resolver = WordResolver(self.dictionary, self.rules)
        self.pieces = PieceFactory(self.rng, self.config.spawn_x)
        self.clock = clock or utcnow
        self.events = EventQueue()

        self.revision = 0
        self.resolving = False
        self.soft_drop = False
        self.quiz_word: Optional[str] = None
        self.result: Optional[GameResult] = None
        self._fall_acc_s = 0.0
        self.run_started_at = self.clock()
        self.state = self._fresh_state()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _fresh_state(self) -> RunState:
        grid = GameGrid(self.config.width, self.config.height)
        return RunState(
            grid=grid,
            current_piece=self.pieces.create(),
            next_piece=self.pieces.create(),
            level=self.config.initial_level(),
            gravity_interval_ms=self.config.initial_gravity_ms(),
            combo=self.config.make_combo(),
        )

    def _reset_transient(self) -> None:
        self.resolving = False
        self.soft_drop = False
        self.quiz_word = None
        self.result = None
        self._fall_acc_s = 0.0
        self.run_started_at = self.clock()

    def restart(self) -> None:
        self.state = self._fresh_state()
        self._reset_transient()
        self._mark_dirty()

    def snapshot(self, identity: str, saved_at: Optional[datetime] = None) -> SessionSnapshot:
        return take_snapshot(self.state, identity, saved_at or self.clock())

    def restore(
        self, snapshot: SessionSnapshot, identity: str, now: Optional[datetime] = None
    ) -> Optional[RestoreFailure]:
        """Resume from `snapshot`. Returns None on success, the failure otherwise.

        A restored run starts PAUSED with no pause reasons; one `resume()`
        continues it. On failure the current run is left untouched.
        """
        outcome = restore_run_state(snapshot, identity, self.config, self.rules, now or self.clock())
        if isinstance(outcome, RestoreFailure):
            logger.info("Session not restored: %s %s", outcome.reason.value, outcome.detail)
            return outcome
        self.state = outcome
        self._reset_transient()
        self._mark_dirty()
        return None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def mode(self) -> GameMode:
        return self.state.mode

    @property
    def score(self) -> int:
        return self.state.score

    @property
    def level(self) -> int:
        return self.state.level

    @property
    def game_over(self) -> bool:
        return self.state.is_game_over

    @property
    def min_word_length(self) -> int:
        return self.rules.min_word_length(self.state.level)

    @property
    def no_repeats(self) -> bool:
        return self.rules.no_repeats_active(self.state.level)

    @property
    def quiz_pending(self) -> bool:
        return self.quiz_word is not None

    @property
    def can_play_input(self) -> bool:
        return self.state.mode is GameMode.PLAYING and not self.resolving

    def _mark_dirty(self) -> None:
        self.revision += 1

    # ------------------------------------------------------------------
    # Pause reasons
    # ------------------------------------------------------------------

    def add_pause_reason(self, reason: str = "user") -> None:
        self.state.add_pause_reason(reason)
        if self.state.mode is GameMode.PLAYING:
            self.state.mode = GameMode.PAUSED
            self.soft_drop = False

    def remove_pause_reason(self, reason: str = "user") -> None:
        self.state.remove_pause_reason(reason)
        if self.state.mode is GameMode.PAUSED and not self.state.has_pause_reasons():
            self.state.mode = GameMode.PLAYING
            self._fall_acc_s = 0.0

    pause = add_pause_reason
    resume = remove_pause_reason

    def toggle_pause(self) -> None:
        if self.state.mode is GameMode.PLAYING:
            self.pause("user")
        elif self.state.mode is GameMode.PAUSED:
            self.resume("user")

    # ------------------------------------------------------------------
    # Player commands
    # ------------------------------------------------------------------

    def set_soft_drop(self, enabled: bool) -> None:
        self.soft_drop = self.state.mode is GameMode.PLAYING and enabled

    def move_left(self) -> bool:
        return self.can_play_input and self.state.current_piece.move(self.state.grid, dx=-1)

    def move_right(self) -> bool:
        return self.can_play_input and self.state.current_piece.move(self.state.grid, dx=1)

    def rotate(self) -> bool:
        return self.can_play_input and self.state.current_piece.try_rotate(self.state.grid)

    def soft_drop_step(self) -> bool:
        """Move down one row, locking when blocked. Returns True if it moved."""
        if not self.can_play_input:
            return False
        if self.state.current_piece.move(self.state.grid, dy=1):
            return True
        self.lock_and_resolve()
        return False

    def hard_drop(self) -> int:
        if not self.can_play_input:
            return 0
        dropped = self.state.current_piece.hard_drop(self.state.grid)
        self.lock_and_resolve()
        return dropped

    def hold_swap(self) -> bool:
        state = self.state
        if not self.can_play_input or state.hold_used:
            return False
        if state.held_piece is None:
            state.held_piece = state.current_piece
            state.current_piece = state.next_piece
            state.next_piece = self.pieces.create()
        else:
            state.held_piece, state.current_piece = state.current_piece, state.held_piece
        state.held_piece.reset_to_spawn()
        state.current_piece.reset_to_spawn()
        state.hold_used = True
        if not state.current_piece.can_move(state.grid):
            self._end_run()
        self._mark_dirty()
        return True

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def tick(self, dt_ms: int) -> None:
        """Advance combo decay and gravity by `dt_ms` of play time."""
        state = self.state
        if state.mode is not GameMode.PLAYING or self.resolving:
            return

        if state.combo.update(dt_ms):
            self.events.append(ComboChanged(state.combo.step, state.combo.multiplier))

        if state.gravity_interval_ms <= 0:
            state.gravity_interval_ms = self.config.initial_gravity_ms()
        rate = self.config.soft_drop_factor if self.soft_drop else 1.0
        self._fall_acc_s += (dt_ms / 1000.0) * rate
        interval_s = state.gravity_interval_ms / 1000.0

        while self._fall_acc_s >= interval_s:
            self._fall_acc_s -= interval_s
            if not state.current_piece.move(state.grid, dy=1):
                self.lock_and_resolve()
                break

    def lock_and_resolve(self) -> None:
        """Lock the active piece, cascade word removal, then spawn the next piece."""
        if self.resolving:
            raise RuntimeError("lock_and_resolve is not reentrant")
        state = self.state
        self.resolving = True
        try:
            locked = tuple(state.current_piece.cells)
            state.current_piece.lock(state.grid)
            self.events.append(PieceLocked(locked))

            self.resolver.cascade(state, on_pass=self._after_pass)

            state.current_piece = state.next_piece
            state.current_piece.reset_to_spawn()
            state.next_piece = self.pieces.create()
            state.hold_used = False
            self._fall_acc_s = 0.0

            if not state.current_piece.can_move(state.grid):
                self._end_run()
        finally:
            self.resolving = False
            self._mark_dirty()

    def _after_pass(self, result: PassResult) -> None:
        state = self.state
        self.events.append(
            WordsCleared(
                words=tuple(c.word for c in result.accepted),
                cells=tuple(result.cleared_cells),
                score_gained=result.score_gained,
                big=len(result.cleared_cells) >= self.rules.big_clear_cells,
            )
        )
        self.events.append(ComboChanged(state.combo.step, state.combo.multiplier))
        if result.leveled_up:
            logger.debug("Level up to %d", state.level)
            self.events.append(LevelUp(state.level, state.gravity_interval_ms))
        for word in result.quiz_words:
            self._open_quiz(word)

    # ------------------------------------------------------------------
    # Quiz
    # ------------------------------------------------------------------

    def _open_quiz(self, word: str) -> None:
        if self.quiz_word is not None or self.game_over:
            return
        self.quiz_word = word
        self.state.add_pause_reason(QUIZ_REASON)
        self.state.mode = GameMode.QUIZ
        self.soft_drop = False
        self.events.append(QuizRequested(word))

    def answer_quiz(self, outcome: QuizOutcome) -> bool:
        """Apply the quiz outcome. Returns False if no quiz is outstanding."""
        if self.quiz_word is None:
            return False
        state = self.state
        if outcome is QuizOutcome.CORRECT:
            state.score += self.rules.quiz_bonus
        elif outcome is QuizOutcome.INCORRECT:
            self._raise_floor()

        self.quiz_word = None
        state.remove_pause_reason(QUIZ_REASON)
        if state.mode is GameMode.QUIZ:
            state.mode = GameMode.PAUSED if state.has_pause_reasons() else GameMode.PLAYING
        self.events.append(QuizAnswered(outcome))
        self._mark_dirty()
        return True

    def _raise_floor(self) -> None:
        state = self.state
        state.grid.shift_up()
        y = state.grid.height - 1
        for x, letter in enumerate(self.pieces.random_row(state.grid.width)):
            state.grid.set(x, y, letter)
        piece = state.current_piece
        if piece.can_move(state.grid):
            return
        # Lifting the active piece is local to this engine; a plain row shift
        # would leave it overlapping the new letters. No room above ends the run.
        if not piece.move(state.grid, dy=-1):
            self._end_run()

    # ------------------------------------------------------------------
    # Game over
    # ------------------------------------------------------------------

    def _end_run(self) -> None:
        state = self.state
        if state.mode is GameMode.GAME_OVER:
            return
        state.mode = GameMode.GAME_OVER
        state.pause_reasons.clear()
        self.soft_drop = False
        self.quiz_word = None

        ended_at = self.clock()
        duration = max(ended_at - self.run_started_at, timedelta(0))
        self.result = GameResult(
            score=state.score,
            level=state.level,
            lines=len(state.removed_words),
            words_cleared=len(state.found_words),
            duration=duration,
            ended_at=ended_at,
            mode_key=self.config.mode_key,
        )
        logger.info("Game over: score=%d level=%d words=%d", state.score, state.level, len(state.removed_words))
        self.events.append(GameOver(self.result))

    # ------------------------------------------------------------------
    # Agent interface
    # ------------------------------------------------------------------

    def step(self, action: Action) -> Tuple[np.ndarray, int, bool, dict]:
        if self.game_over:
            return self.get_state(), 0, True, {}

        before = self.state.score
        if action == Action.LEFT:
            self.move_left()
        elif action == Action.RIGHT:
            self.move_right()
        elif action == Action.ROTATE:
            self.rotate()
        elif action == Action.SOFT_DROP:
            self.soft_drop_step()
        elif action == Action.HARD_DROP:
            self.hard_drop()
        elif action == Action.HOLD:
            self.hold_swap()
        elif action == Action.NONE:
            pass

        info = {
            "score": self.state.score,
            "level": self.state.level,
            "words_removed": len(self.state.removed_words),
            "quiz_pending": self.quiz_pending,
        }
        return self.get_state(), self.state.score - before, self.game_over, info

    def get_state(self) -> np.ndarray:
        # Board letter codes with the falling piece overlaid as negative codes
        state = self.state.grid.to_codes()
        if not self.game_over:
            piece = self.state.current_piece
            for (x, y), letter in zip(piece.cells, piece.letters):
                if self.state.grid.is_inside(x, y):
                    state[y, x] = -(ord(letter) - ord("A") + 1)
        return state
