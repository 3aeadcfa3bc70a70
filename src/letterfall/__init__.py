"""Letterfall: a falling-letter word puzzle engine."""

# game must load before session: the engine imports the snapshot module
from .game import Action, GameConfig, GameMode, LetterfallGame, QuizOutcome, TickDriver
from .session import SessionSaver, SessionSnapshot

__all__ = [
    "Action",
    "GameConfig",
    "GameMode",
    "LetterfallGame",
    "QuizOutcome",
    "TickDriver",
    "SessionSaver",
    "SessionSnapshot",
]

__version__ = "0.1.0"
