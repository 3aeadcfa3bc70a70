"""Word scanning, selection and cascading removal.

A pass scans every horizontal and vertical gap-free run of at least
`min_word_length(level)` letters, keeps dictionary words, accepts them
longest-first without overlapping cells, clears them, scores them and
collapses the columns. `cascade` repeats passes until one finds nothing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Protocol, Set, Tuple

from .grid import Coordinate, GameGrid
from .rules import ScoringRules
from .state import RunState


class Dictionary(Protocol):
    def contains(self, word: str) -> bool:
        ...


@dataclass(frozen=True)
class WordCandidate:
    word: str
    cells: Tuple[Coordinate, ...]

    @property
    def normalized(self) -> str:
        return self.word.lower()


@dataclass
class PassResult:
    accepted: List[WordCandidate] = field(default_factory=list)
    cleared_cells: List[Coordinate] = field(default_factory=list)
    score_gained: int = 0
    quiz_words: List[str] = field(default_factory=list)
    leveled_up: bool = False

    @property
    def words_found(self) -> bool:
        return bool(self.accepted)


def _runs(line: str, min_len: int) -> Iterable[Tuple[int, int]]:
    """(start, end) pairs of gap-free runs, by start then increasing length."""
    n = len(line)
    for start in range(n):
        for end in range(start + min_len, n + 1):
            if "." in line[start:end]:
                break
            yield start, end


def find_candidates(
    grid: GameGrid,
    dictionary: Dictionary,
    min_len: int,
    excluded: Set[str] | None = None,
) -> List[WordCandidate]:
    excluded = excluded or set()
    found: List[WordCandidate] = []

    def consider(word: str, cells: Tuple[Coordinate, ...]) -> None:
        lowered = word.lower()
        if not dictionary.contains(lowered):
            return
        if lowered in excluded:
            return
        found.append(WordCandidate(word, cells))

    for y in range(grid.height):
        line = grid.row_string(y)
        for start, end in _runs(line, min_len):
            consider(line[start:end], tuple((x, y) for x in range(start, end)))

    for x in range(grid.width):
        line = "".join(grid.get(x, y) or "." for y in range(grid.height))
        for start, end in _runs(line, min_len):
            consider(line[start:end], tuple((x, y) for y in range(start, end)))

    return found


def select_words(candidates: List[WordCandidate]) -> List[WordCandidate]:
    """Longest first (stable), skipping any candidate that reuses a claimed cell."""
    ordered = sorted(candidates, key=lambda c: len(c.word), reverse=True)
    claimed: Set[Coordinate] = set()
    accepted: List[WordCandidate] = []
    for candidate in ordered:
        if any(cell in claimed for cell in candidate.cells):
            continue
        accepted.append(candidate)
        claimed.update(candidate.cells)
    return accepted


class WordResolver:
    def __init__(self, dictionary: Dictionary, rules: ScoringRules | None = None) -> None:
        self.dictionary = dictionary
        self.rules = rules or ScoringRules()

    def resolve_pass(self, state: RunState) -> PassResult:
        rules = self.rules
        min_len = rules.min_word_length(state.level)
        excluded = state.found_words if rules.no_repeats_active(state.level) else None
        candidates = find_candidates(state.grid, self.dictionary, min_len, excluded)
        accepted = select_words(candidates)

        result = PassResult()
        if not accepted:
            return result

        multiplier = state.combo.effective_multiplier(state.score_multiplier)
        for candidate in accepted:
            gained = rules.score_for_word(candidate.word, state.level, multiplier)
            state.score += gained
            result.score_gained += gained
            state.removed_words.append(candidate.word)
            state.found_words.add(candidate.normalized)
            state.words_found_since_level_up += 1
            if rules.triggers_quiz(len(state.removed_words)):
                result.quiz_words.append(candidate.word)
            state.grid.clear_cells(candidate.cells)
            result.cleared_cells.extend(candidate.cells)
        result.accepted = accepted

        state.grid.collapse()

        if state.words_found_since_level_up >= rules.words_per_level:
            state.level += 1
            state.words_found_since_level_up = 0
            state.gravity_interval_ms = rules.next_gravity_ms(state.gravity_interval_ms)
            result.leveled_up = True
        return result

    def cascade(
        self,
        state: RunState,
        on_pass: Callable[[PassResult], None] | None = None,
    ) -> List[PassResult]:
        passes: List[PassResult] = []
        while True:
            result = self.resolve_pass(state)
            if not result.words_found:
                break
            state.combo.on_clear()
            passes.append(result)
            if on_pass is not None:
                on_pass(result)
        return passes
