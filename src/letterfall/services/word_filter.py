from __future__ import annotations

import logging
import os
import re
import unicodedata
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)

LEET_MAP = {
    "@": "a",
    "4": "a",
    "0": "o",
    "1": "i",
    "!": "i",
    "$": "s",
    "5": "s",
    "7": "t",
    "3": "e",
}


def normalize_text(text: str) -> str:
    """Lowercase, strip diacritics, undo leetspeak, collapse whitespace."""
    if not text or not text.strip():
        return ""
    out = []
    for ch in unicodedata.normalize("NFD", text):
        if unicodedata.category(ch) == "Mn":
            continue
        lower = ch.lower()
        lower = LEET_MAP.get(lower, lower)
        if lower.isalnum() or lower == "_" or lower.isspace():
            out.append(lower)
        else:
            out.append(" ")
    return re.sub(r"\s+", " ", "".join(out)).strip()


class WordFilter:
    """Banned-word predicate consulted by the quiz builder."""

    def __init__(self, banned: Iterable[str] = ()) -> None:
        self.banned = {normalize_text(w) for w in banned if normalize_text(w)}

    @classmethod
    def load(cls, path: Optional[str | os.PathLike]) -> "WordFilter":
        if path is None:
            return cls()
        try:
            with open(path, "r", encoding="utf-8") as fh:
                return cls(line.strip() for line in fh)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read banned words %s: %s", path, exc)
            return cls()

    def is_banned(self, word: str) -> bool:
        return normalize_text(word) in self.banned

    def contains_banned_substring(self, text: str) -> bool:
        normalized = normalize_text(text)
        for word in self.banned:
            if re.search(rf"\b{re.escape(word)}\b", normalized):
                return True
        return False

    def filter_definitions(self, definitions: Iterable[str]) -> List[str]:
        return [d for d in definitions if not self.contains_banned_substring(d)]
