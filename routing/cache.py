"""
Purpose: Small key/value cache interface shared by the route queue and the place resolver.
What it does:
- Cache protocol (get / set by signature)
- MemoryCache: process-local dict
- JsonFileCache: dict persisted to a JSON file, loaded lazily, rewritten on every set

Entries are never invalidated. Writes are idempotent (the same key always maps
to the same value), so concurrent writers need no lock.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union

logger = logging.getLogger(__name__)


class Cache(Protocol):
    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any) -> None: ...


class MemoryCache:
    """
    In-memory cache. One instance per process is the usual wiring.
    """

    def __init__(self):
        self._entries: Dict[str, Any] = {}

    def get(self, key: str) -> Optional[Any]:
        return self._entries.get(key)

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class JsonFileCache:
    """
    Persisted cache for JSON-serialisable values.

    A corrupt or unreadable file is treated as an empty cache; it is
    overwritten on the next set.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._entries: Optional[Dict[str, Any]] = None

    def _load(self) -> Dict[str, Any]:
        if self._entries is not None:
            return self._entries

        self._entries = {}
        if not self.path.exists():
            return self._entries

        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable cache file %s: %s", self.path, exc)
            return self._entries

        if isinstance(data, dict):
            self._entries = data
        return self._entries

    def get(self, key: str) -> Optional[Any]:
        return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        entries = self._load()
        entries[key] = value

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(entries, handle, ensure_ascii=False)
        os.replace(tmp_path, self.path)

    def __len__(self) -> int:
        return len(self._load())
