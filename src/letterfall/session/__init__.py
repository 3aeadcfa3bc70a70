"""Suspend/resume support: snapshots, their wire codec, stores and save scheduling."""

from .snapshot import (
    CURRENT_VERSION,
    FRESHNESS_WINDOW,
    PieceSnapshot,
    RestoreFailure,
    RestoreReason,
    SessionSnapshot,
    restore_run_state,
    take_snapshot,
)
from .codec import decode_snapshot, encode_snapshot
from .store import FileSessionStore, MemorySessionStore, SessionStore
from .autosave import SaverConfig, SessionSaver

__all__ = [
    "CURRENT_VERSION",
    "FRESHNESS_WINDOW",
    "PieceSnapshot",
    "RestoreFailure",
    "RestoreReason",
    "SessionSnapshot",
    "restore_run_state",
    "take_snapshot",
    "decode_snapshot",
    "encode_snapshot",
    "FileSessionStore",
    "MemorySessionStore",
    "SessionStore",
    "SaverConfig",
    "SessionSaver",
]
