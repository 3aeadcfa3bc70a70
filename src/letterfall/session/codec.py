from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from letterfall.errors import SnapshotDecodeError

from .snapshot import CURRENT_VERSION, PieceSnapshot, SessionSnapshot


def _piece_to_dict(piece: Optional[PieceSnapshot]) -> Optional[Dict[str, Any]]:
    if piece is None:
        return None
    return {
        "minX": piece.min_x,
        "minY": piece.min_y,
        "offsets": [{"x": x, "y": y} for x, y in piece.offsets],
        "letters": list(piece.letters),
    }


def snapshot_to_dict(snapshot: SessionSnapshot) -> Dict[str, Any]:
    return {
        "version": snapshot.version,
        "savedAt": snapshot.saved_at.isoformat(),
        "identity": snapshot.identity,
        "score": snapshot.score,
        "level": snapshot.level,
        "gravityIntervalMs": snapshot.gravity_interval_ms,
        "wordsFoundCount": snapshot.words_found_count,
        "holdUsed": snapshot.hold_used,
        "boardRows": list(snapshot.board_rows),
        "foundWords": list(snapshot.found_words),
        "removedWords": list(snapshot.removed_words),
        "current": _piece_to_dict(snapshot.current),
        "next": _piece_to_dict(snapshot.next_piece),
        "hold": _piece_to_dict(snapshot.hold),
    }


def encode_snapshot(snapshot: SessionSnapshot) -> bytes:
    return json.dumps(snapshot_to_dict(snapshot), separators=(",", ":")).encode("utf-8")


def _int(data: Dict[str, Any], key: str, default: int = 0) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise SnapshotDecodeError(f"{key} must be an integer")
    return value


def _bool(data: Dict[str, Any], key: str, default: bool = False) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise SnapshotDecodeError(f"{key} must be a boolean")
    return value


def _str_list(data: Dict[str, Any], key: str) -> tuple:
    value = data.get(key) or []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise SnapshotDecodeError(f"{key} must be a list of strings")
    return tuple(value)


def _piece_from_dict(value: Any) -> Optional[PieceSnapshot]:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise SnapshotDecodeError("piece must be an object")
    offsets = value.get("offsets") or []
    if not isinstance(offsets, list):
        raise SnapshotDecodeError("piece offsets must be a list")
    try:
        cells = tuple((int(o["x"]), int(o["y"])) for o in offsets)
    except (KeyError, TypeError, ValueError) as exc:
        raise SnapshotDecodeError(f"bad piece offset: {exc}") from exc
    return PieceSnapshot(
        min_x=_int(value, "minX"),
        min_y=_int(value, "minY"),
        offsets=cells,
        letters=_str_list(value, "letters"),
    )


def _parse_time(value: Any) -> datetime:
    if not isinstance(value, str):
        raise SnapshotDecodeError("savedAt must be an ISO timestamp")
    try:
        moment = datetime.fromisoformat(value)
    except ValueError as exc:
        raise SnapshotDecodeError(f"bad savedAt: {value!r}") from exc
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def decode_snapshot(raw: bytes) -> SessionSnapshot:
    """Parse stored bytes. Missing fields take their defaults; wrong types raise."""
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise SnapshotDecodeError(f"unreadable session: {exc}") from exc
    if not isinstance(data, dict):
        raise SnapshotDecodeError("session must be a JSON object")

    identity = data.get("identity", "")
    if not isinstance(identity, str):
        raise SnapshotDecodeError("identity must be a string")

    return SessionSnapshot(
        version=_int(data, "version", CURRENT_VERSION),
        saved_at=_parse_time(data.get("savedAt")),
        identity=identity,
        score=_int(data, "score"),
        level=_int(data, "level"),
        gravity_interval_ms=_int(data, "gravityIntervalMs"),
        words_found_count=_int(data, "wordsFoundCount"),
        hold_used=_bool(data, "holdUsed"),
        board_rows=_str_list(data, "boardRows"),
        found_words=_str_list(data, "foundWords"),
        removed_words=_str_list(data, "removedWords"),
        current=_piece_from_dict(data.get("current")),
        next_piece=_piece_from_dict(data.get("next")),
        hold=_piece_from_dict(data.get("hold")),
    )
