"""
Schema Cache

Keeps the serialized schema collection for the lifetime of the process,
optionally persisted as JSON files so it survives restarts.
Entries never expire; they are replaced only after explicit invalidation.
"""

import json
import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable


DEFAULT_CACHE_KEY = "schema_collections"


@dataclass
class CacheEntry:
    """A cached value with the time it was stored."""

    key: str
    value: str
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "created_at": self.created_at,
            "value": self.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CacheEntry":
        return cls(
            key=data["key"],
            value=data["value"],
            created_at=data.get("created_at", ""),
        )


class SchemaCache:
    """
    Get-or-compute-and-store-forever cache for serialized schemas.

    Storage:
    - In-memory dict for the current process
    - One JSON file per key when a cache directory is given

    Writes are serialized by a lock. A reader arriving while a value is
    being computed waits for it instead of computing it again.

    Example:
        >>> cache = SchemaCache("./.schema_cache")
        >>> cache.remember_forever("schema_collections", lambda: "[]")
        '[]'
        >>> cache.invalidate("schema_collections")
    """

    def __init__(self, cache_dir: str | Path | None = None):
        """
        Initialize cache.

        Args:
            cache_dir: Directory for cache files (None = memory only)
        """
        self.cache_dir = Path(cache_dir) if cache_dir else None
        if self.cache_dir is not None:
            self.cache_dir.mkdir(parents=True, exist_ok=True)

        self._memory_cache: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def _get_cache_file(self, key: str) -> Path | None:
        if self.cache_dir is None:
            return None
        safe_name = key.replace("/", "_").replace("\\", "_")
        return self.cache_dir / f"{safe_name}.json"

    def get(self, key: str) -> str | None:
        """
        Return the cached value for a key.

        Falls back to the JSON file and loads it into memory.
        """
        entry = self._memory_cache.get(key)
        if entry is not None:
            return entry.value

        cache_file = self._get_cache_file(key)
        if cache_file is None or not cache_file.exists():
            return None

        try:
            with open(cache_file, "r", encoding="utf-8") as f:
                entry = CacheEntry.from_dict(json.load(f))
        except (json.JSONDecodeError, KeyError, OSError):
            return None

        self._memory_cache[key] = entry
        return entry.value

    def put(self, key: str, value: str) -> None:
        """Store a value forever."""
        entry = CacheEntry(key=key, value=value)

        cache_file = self._get_cache_file(key)
        if cache_file is not None:
            with open(cache_file, "w", encoding="utf-8") as f:
                json.dump(entry.to_dict(), f, indent=2, ensure_ascii=False)

        self._memory_cache[key] = entry

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def remember_forever(self, key: str, compute: Callable[[], str]) -> str:
        """
        Return the cached value, computing and storing it on a miss.

        Args:
            key: Cache key
            compute: Produces the serialized value

        Returns:
            The cached or freshly computed value
        """
        value = self.get(key)
        if value is not None:
            return value

        with self._lock:
            # Another thread may have stored it while we waited
            value = self.get(key)
            if value is None:
                value = compute()
                self.put(key, value)
        return value

    def invalidate(self, key: str | None = None) -> None:
        """
        Invalidate cache.

        Args:
            key: Specific key to invalidate, or None for all
        """
        with self._lock:
            if key:
                cache_file = self._get_cache_file(key)
                if cache_file is not None and cache_file.exists():
                    cache_file.unlink()
                self._memory_cache.pop(key, None)
            else:
                if self.cache_dir is not None:
                    for cache_file in self.cache_dir.glob("*.json"):
                        cache_file.unlink()
                self._memory_cache.clear()

    def get_cache_info(self, key: str) -> dict[str, Any] | None:
        """Get metadata of a cached entry."""
        if self.get(key) is None:
            return None
        entry = self._memory_cache[key]
        return {"key": entry.key, "created_at": entry.created_at, "size": len(entry.value)}
