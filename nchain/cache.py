"""File-backed TTL cache for adapter responses."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DAY = 60 * 60 * 24


class ResponseCache:
    """One JSON file per key holding ``{"value": ..., "expiry": ...}``."""

    def __init__(self, directory: str | Path | None = None) -> None:
        self.directory = Path(directory) if directory else Path.home() / ".cache" / "nchain"
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Any:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.debug("[Cache] unreadable entry: %s", key)
            return None
        expiry = data.get("expiry")
        if expiry is not None and time.time() > expiry:
            return None
        return data.get("value")

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        data = {"value": value, "expiry": time.time() + ttl if ttl else None}
        self._path(key).write_text(json.dumps(data), encoding="utf-8")

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    async def remember(self, key: str, ttl: float, fn: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value for ``key`` or compute, store and return it."""
        cached = self.get(key)
        if cached is not None:
            logger.debug("[Cache] HIT: %s", key)
            return cached

        logger.debug("[Cache] MISS: %s", key)
        value = await fn()
        # Another caller may have filled the key while we were waiting;
        # keep theirs so chains reading the cache stay consistent.
        stored = self.get(key)
        if stored is not None:
            logger.debug("[Cache] DISCARDING RACE RESULT: %s", key)
            return stored
        self.set(key, value, ttl)
        return value
