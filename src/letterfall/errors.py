"""Exception types raised by the letterfall engine."""

from __future__ import annotations


class LetterfallError(Exception):
    """Base class for engine errors."""


class IllegalPieceError(LetterfallError):
    """A mutating operation was invoked on a piece in an illegal position."""


class SnapshotDecodeError(LetterfallError):
    """Stored session bytes could not be parsed into a snapshot."""
