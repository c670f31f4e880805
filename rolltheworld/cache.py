"""Advisory on-device cache of the participant's latest draw and history.

Every operation here is best-effort: storage failures are logged and
swallowed, and unreadable payloads read as "nothing cached".
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any, Iterable, Optional

from .kv import KeyValueStore

if TYPE_CHECKING:
    from .roll.history import HistoryEntry

logger = logging.getLogger(__name__)

LAST_ROLL_KEY = "rolltheworld:lastRoll"
HISTORY_KEY = "rolltheworld:history"


@dataclass(frozen=True)
class CachedDraw:
    """Local shadow of the participant's most recent draw."""

    day: int
    value: int
    rank: Optional[int] = None
    total: Optional[int] = None

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> "CachedDraw":
        rank = payload.get("rank")
        total = payload.get("total")
        return cls(
            day=int(payload["day"]),
            value=int(payload["value"]),
            rank=int(rank) if rank is not None else None,
            total=int(total) if total is not None else None,
        )


def _decode(raw: Optional[bytes]) -> Any:
    if not raw:
        return None
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        logger.warning(f"Failed to parse cache payload: {e}")
        return None


class LocalCache:
    """Wraps a :class:`~rolltheworld.kv.KeyValueStore` with JSON payloads."""

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv

    def _write(self, key: str, payload: Any) -> bool:
        try:
            self._kv.set(key, json.dumps(payload).encode("utf-8"))
        except Exception as e:
            logger.warning(f"Failed to write cache entry {key}: {e}")
            return False
        return True

    def _read(self, key: str) -> Any:
        try:
            raw = self._kv.get(key)
        except Exception as e:
            logger.warning(f"Failed to read cache entry {key}: {e}")
            return None
        return _decode(raw)

    def _delete(self, key: str) -> bool:
        try:
            self._kv.delete(key)
        except Exception as e:
            logger.warning(f"Failed to clear cache entry {key}: {e}")
            return False
        return True

    def cache_last_roll(self, draw: CachedDraw) -> bool:
        """Overwrite the cached draw. Returns ``False`` if the write failed."""
        return self._write(LAST_ROLL_KEY, asdict(draw))

    def get_cached_roll(self) -> Optional[CachedDraw]:
        payload = self._read(LAST_ROLL_KEY)
        if not isinstance(payload, dict):
            return None
        try:
            return CachedDraw.from_json(payload)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Discarding malformed cached draw: {e}")
            return None

    def clear_cached_roll(self) -> bool:
        return self._delete(LAST_ROLL_KEY)

    def cache_history(self, identity: str, entries: Iterable["HistoryEntry"]) -> bool:
        payload = {
            "identity": identity,
            "entries": [asdict(entry) for entry in entries],
        }
        return self._write(HISTORY_KEY, payload)

    def get_cached_history(self, identity: str) -> Optional[list["HistoryEntry"]]:
        """Return the cached history of ``identity``, or ``None`` if absent.

        History cached for a different identity is ignored.
        """

        from .roll.history import HistoryEntry

        payload = self._read(HISTORY_KEY)
        if not isinstance(payload, dict) or payload.get("identity") != identity:
            return None
        try:
            return [
                HistoryEntry(
                    day=int(item["day"]),
                    value=int(item["value"]),
                    rank=int(item["rank"]),
                    total=int(item["total"]),
                )
                for item in payload.get("entries", [])
            ]
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Discarding malformed cached history: {e}")
            return None

    def clear(self) -> None:
        """Erase everything this cache owns (user-triggered reset)."""
        self.clear_cached_roll()
        self._delete(HISTORY_KEY)


__all__ = ["CachedDraw", "LocalCache", "LAST_ROLL_KEY", "HISTORY_KEY"]
