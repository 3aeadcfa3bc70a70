from __future__ import annotations

from typing import Dict, List, Mapping, Protocol, Sequence

from .dictionary import normalize_word


class DefinitionSource(Protocol):
    def definitions(self, word: str) -> List[str]:
        ...


class MappingDefinitionSource:
    """Definitions served from an in-memory mapping of word -> definitions."""

    def __init__(self, entries: Mapping[str, Sequence[str]] | None = None) -> None:
        self.entries: Dict[str, List[str]] = {}
        for word, defs in (entries or {}).items():
            self.entries[normalize_word(word)] = list(defs)

    def definitions(self, word: str) -> List[str]:
        return list(self.entries.get(normalize_word(word), []))
