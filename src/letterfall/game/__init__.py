"""Game module for Letterfall.

Exports the core engine and supporting classes:
- GameGrid: fixed letter grid with collapse and row shifting
- Piece / PieceFactory: lettered shapes with movement, rotation and kicks
- ComboTracker: multiplier growth and decay
- WordResolver: scan, select, clear and cascade
- RunState / GameMode: everything one match owns
- LetterfallGame: the engine and its public commands
- TickDriver: clock-to-delta adapter
"""

from .grid import GameGrid
from .pieces import Piece, PieceFactory, SHAPES
from .combo import ComboTracker
from .rules import DifficultyPreset, GameConfig, ScoringRules
from .state import GameMode, RunState
from .resolver import WordCandidate, WordResolver, find_candidates, select_words
from .events import EventQueue, GameResult, QuizOutcome
from .core import Action, LetterfallGame
from .driver import TickDriver
from .quiz import DefinitionQuiz, build_quiz

__all__ = [
    "GameGrid",
    "Piece",
    "PieceFactory",
    "SHAPES",
    "ComboTracker",
    "DifficultyPreset",
    "GameConfig",
    "ScoringRules",
    "GameMode",
    "RunState",
    "WordCandidate",
    "WordResolver",
    "find_candidates",
    "select_words",
    "EventQueue",
    "GameResult",
    "QuizOutcome",
    "Action",
    "LetterfallGame",
    "TickDriver",
    "DefinitionQuiz",
    "build_quiz",
]
