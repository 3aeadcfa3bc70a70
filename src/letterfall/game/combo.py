from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ComboTracker:
    """Score multiplier that grows on clears and decays while idle."""

    decay_ms: int = 9000
    growth: float = 0.5
    start_mult: float = 1.0
    max_mult: float = 4.0

    multiplier: float = field(init=False)
    step: int = field(init=False, default=0)
    since_last_clear_ms: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.multiplier = self.start_mult
        self.step = 0
        self.since_last_clear_ms = 0

    def on_clear(self) -> None:
        self.step += 1
        self.multiplier = min(self.start_mult + self.growth * (self.step - 1), self.max_mult)
        self.since_last_clear_ms = 0

    def update(self, dt_ms: int) -> bool:
        """Advance the idle timer; returns True when a decay step happened."""
        self.since_last_clear_ms += max(0, int(dt_ms))
        if self.since_last_clear_ms > self.decay_ms and self.step > 0:
            self.step -= 1
            self.multiplier = max(
                self.start_mult + self.growth * max(0, self.step - 1), self.start_mult
            )
            self.since_last_clear_ms = 0
            return True
        return False

    def effective_multiplier(self, base_mult: float = 1.0) -> float:
        return base_mult * self.multiplier

    @property
    def is_active(self) -> bool:
        return self.step > 0
