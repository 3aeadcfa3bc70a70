"""Definition quiz built from the collaborators when the engine requests one.

The engine only announces the word (`QuizRequested`) and later accepts a
`QuizOutcome`; everything here runs on the caller's side.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence

from letterfall.services.definitions import DefinitionSource
from letterfall.services.random_source import RandomSource
from letterfall.services.word_filter import WordFilter

from .events import QuizOutcome

logger = logging.getLogger(__name__)

NO_DEFINITION = "No definition"
DECOY_PLACEHOLDER = "—"
DECOY_COUNT = 3
DECOY_ATTEMPTS = 12


@dataclass(frozen=True)
class DefinitionQuiz:
    word: str
    choices: tuple
    correct: str

    def grade(self, choice: str) -> QuizOutcome:
        return QuizOutcome.CORRECT if choice == self.correct else QuizOutcome.INCORRECT


def _clean(definitions: Sequence[str], word_filter: WordFilter) -> List[str]:
    seen = set()
    cleaned: List[str] = []
    for d in definitions:
        text = (d or "").replace("[", "").replace("]", "").replace("'", "").strip()
        if not text or text.lower() in seen:
            continue
        seen.add(text.lower())
        cleaned.append(text)
    return word_filter.filter_definitions(cleaned)


def _lookup(source: DefinitionSource, word: str, word_filter: WordFilter) -> List[str]:
    try:
        return _clean(source.definitions(word), word_filter)
    except Exception:
        logger.exception("Definition lookup failed for %r", word)
        return []


def build_quiz(
    word: str,
    source: DefinitionSource,
    word_filter: WordFilter,
    rng: RandomSource,
    vocabulary: Sequence[str],
) -> DefinitionQuiz:
    defs = _lookup(source, word.lower(), word_filter)
    correct = defs[0] if defs else NO_DEFINITION

    decoys: List[str] = []
    candidates = list(vocabulary)
    for _ in range(DECOY_ATTEMPTS):
        if len(decoys) >= DECOY_COUNT or not candidates:
            break
        other = rng.choice(candidates)
        if other == word.lower() or word_filter.is_banned(other):
            continue
        found = _lookup(source, other, word_filter)
        if found and found[0] != correct and found[0] not in decoys:
            decoys.append(found[0])
    while len(decoys) < DECOY_COUNT:
        decoys.append(DECOY_PLACEHOLDER)

    choices = [correct] + decoys
    rng.shuffle(choices)
    return DefinitionQuiz(word.upper(), tuple(choices), correct)
