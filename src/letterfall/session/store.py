from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    def read(self) -> Optional[bytes]:
        ...

    def write(self, data: bytes) -> None:
        ...

    def clear(self) -> None:
        ...


class MemorySessionStore:
    def __init__(self, data: Optional[bytes] = None) -> None:
        self.data = data
        self.writes = 0

    def read(self) -> Optional[bytes]:
        return self.data

    def write(self, data: bytes) -> None:
        self.data = bytes(data)
        self.writes += 1

    def clear(self) -> None:
        self.data = None


class FileSessionStore:
    """Session bytes in a single file, replaced atomically on every write."""

    def __init__(self, path: str | os.PathLike) -> None:
        self.path = Path(path)

    @property
    def tmp_path(self) -> Path:
        return self.path.with_name(self.path.name + ".tmp")

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> Optional[bytes]:
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Could not read session file %s: %s", self.path, exc)
            return None

    def write(self, data: bytes) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.tmp_path
        try:
            with open(tmp, "wb") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp, self.path)
        finally:
            if tmp.exists():
                tmp.unlink()

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Could not remove session file %s: %s", self.path, exc)
