"""Word list collaborator.

Words are stored normalized (lowercase, diacritics stripped). A missing or
unreadable word file yields an empty dictionary so that movement and locking
keep working with word clearing disabled.
"""

from __future__ import annotations

import logging
import os
import unicodedata
from typing import FrozenSet, Iterable, Optional

logger = logging.getLogger(__name__)


def normalize_word(word: str) -> str:
    decomposed = unicodedata.normalize("NFD", word.strip())
    stripped = "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")
    return stripped.lower()


class WordList:
    def __init__(self, words: Iterable[str] = ()) -> None:
        self._words: FrozenSet[str] = frozenset(
            normalize_word(w) for w in words if w and w.strip()
        )

    @classmethod
    def load(cls, path: Optional[str | os.PathLike]) -> "WordList":
        if path is None:
            logger.warning("No word list configured; word clearing disabled")
            return cls()
        try:
            with open(path, "r", encoding="utf-8") as fh:
                words = [line.strip() for line in fh]
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read word list %s: %s", path, exc)
            return cls()
        word_list = cls(words)
        logger.info("Loaded %d words from %s", len(word_list), path)
        return word_list

    def contains(self, word: str) -> bool:
        return normalize_word(word) in self._words

    def __len__(self) -> int:
        return len(self._words)

    def words(self) -> list[str]:
        return sorted(self._words)
