"""Save scheduling around a running game.

Saving is best-effort and never changes simulation state. One write may be in
flight at a time, writes wait for a quiet period after the last engine
mutation (debounce) and are spaced out by a minimum interval (throttle).
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

from letterfall.errors import SnapshotDecodeError

from .codec import decode_snapshot, encode_snapshot
from .snapshot import RestoreFailure, RestoreReason
from .store import SessionStore

if TYPE_CHECKING:
    from letterfall.game.core import LetterfallGame

logger = logging.getLogger(__name__)


@dataclass
class SaverConfig:
    debounce_s: float = 1.5
    min_interval_s: float = 30.0
    autosave_every_s: float = 15.0


class SessionSaver:
    def __init__(
        self,
        game: "LetterfallGame",
        store: SessionStore,
        identity: Callable[[], str] | str,
        config: Optional[SaverConfig] = None,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self.game = game
        self.store = store
        self._identity = identity
        self.config = config or SaverConfig()
        self.monotonic = monotonic
        self._gate = threading.Lock()
        self._started = False
        self._seen_revision = game.revision
        self._saved_revision: Optional[int] = None
        self._dirty_at = float("-inf")
        self._last_saved_at = float("-inf")
        self._last_poll_at = float("-inf")
        self.last_failure: Optional[RestoreFailure] = None

    @property
    def identity(self) -> str:
        value = self._identity() if callable(self._identity) else self._identity
        return (value or "").strip()

    @property
    def dirty(self) -> bool:
        return self._saved_revision != self.game.revision

    def start(self) -> bool:
        """Try to resume the stored session once, else restart fresh.

        Returns True when a stored session was resumed.
        """
        if self._started:
            return False
        self._started = True
        failure = self._restore()
        if failure is None:
            self._saved_revision = self.game.revision
            self._seen_revision = self.game.revision
            self.game.resume("restore")
            return True
        self.last_failure = failure
        self.restart()
        return False

    def _restore(self) -> Optional[RestoreFailure]:
        raw = self.store.read()
        if raw is None:
            return RestoreFailure(RestoreReason.NO_SESSION)
        try:
            snapshot = decode_snapshot(raw)
        except SnapshotDecodeError as exc:
            logger.warning("Discarding unreadable session: %s", exc)
            return RestoreFailure(RestoreReason.CORRUPT, str(exc))
        return self.game.restore(snapshot, self.identity)

    def restart(self) -> None:
        self.game.restart()
        self.store.clear()
        self._seen_revision = self.game.revision
        self._dirty_at = self.monotonic()

    def _eligible(self) -> bool:
        game = self.game
        if not self._started or not self.dirty:
            return False
        if game.game_over or game.quiz_pending or game.resolving:
            return False
        return bool(self.identity)

    def poll(self) -> bool:
        """Call once per frame. Returns True when a write happened."""
        now = self.monotonic()
        if self.game.revision != self._seen_revision:
            self._seen_revision = self.game.revision
            self._dirty_at = now

        if self.game.game_over and self._started:
            if self._saved_revision != self.game.revision:
                self.store.clear()
                self._saved_revision = self.game.revision
            return False

        if now - self._last_poll_at < self.config.autosave_every_s:
            return False
        self._last_poll_at = now
        return self.maybe_save(now)

    def maybe_save(self, now: Optional[float] = None) -> bool:
        now = self.monotonic() if now is None else now
        if not self._eligible():
            return False
        if now - self._dirty_at < self.config.debounce_s:
            return False
        if now - self._last_saved_at < self.config.min_interval_s:
            return False
        return self._write(now)

    def save_now(self) -> bool:
        """Unthrottled save, e.g. when the host app is being suspended."""
        if self.game.game_over:
            self.store.clear()
            return False
        if not self._started or self.game.resolving or not self.identity:
            return False
        return self._write(self.monotonic())

    def _write(self, now: float) -> bool:
        if not self._gate.acquire(blocking=False):
            return False
        try:
            # re-check inside the gate
            if self.game.game_over or self.game.resolving:
                return False
            revision = self.game.revision
            data = encode_snapshot(self.game.snapshot(self.identity))
            self.store.write(data)
        except OSError as exc:
            logger.warning("Session save failed: %s", exc)
            return False
        finally:
            self._gate.release()
        self._last_saved_at = now
        self._saved_revision = revision
        logger.debug("Session saved at revision %d", revision)
        return True
