from __future__ import annotations

import time
from typing import TYPE_CHECKING, Callable, Iterable

if TYPE_CHECKING:
    from .core import LetterfallGame

MAX_FRAME_MS = 100


class TickDriver:
    """Turns a monotonic clock into clamped millisecond deltas for the engine."""

    def __init__(
        self,
        game: "LetterfallGame",
        clock: Callable[[], float] = time.monotonic,
        max_frame_ms: int = MAX_FRAME_MS,
    ) -> None:
        self.game = game
        self.clock = clock
        self.max_frame_ms = max_frame_ms
        self._last = clock()

    def reset(self) -> None:
        self._last = self.clock()

    def advance(self) -> int:
        now = self.clock()
        dt_ms = int(round((now - self._last) * 1000))
        self._last = now
        dt_ms = max(0, min(self.max_frame_ms, dt_ms))
        self.game.tick(dt_ms)
        return dt_ms

    def run(self, deltas_ms: Iterable[int]) -> None:
        for dt in deltas_ms:
            self.game.tick(max(0, min(self.max_frame_ms, int(dt))))
