"""Collaborators consumed by the engine: words, banned words, randomness, definitions."""

from .definitions import DefinitionSource, MappingDefinitionSource
from .dictionary import WordList, normalize_word
from .random_source import RandomSource
from .word_filter import WordFilter, normalize_text

__all__ = [
    "DefinitionSource",
    "MappingDefinitionSource",
    "WordList",
    "normalize_word",
    "RandomSource",
    "WordFilter",
    "normalize_text",
]
