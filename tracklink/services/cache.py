"""
In-memory lookup cache keyed by (artist, title).
- Entries expire after a TTL.
- Capacity bound with least-recently-used eviction.
Negative results (None) are cached too, so repeated misses don't hit the network.
"""
import time
from collections import OrderedDict
from typing import Any, Callable, Generic, Optional, TypeVar

T = TypeVar("T")

MISSING: Any = object()


def cache_key(artist: str, title: str) -> tuple[str, str]:
    """Case- and whitespace-insensitive key."""
    return (" ".join(artist.casefold().split()), " ".join(title.casefold().split()))


class LookupCache(Generic[T]):
    def __init__(
        self,
        ttl_seconds: float,
        max_entries: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._ttl = ttl_seconds
        self._max = max_entries
        self._clock = clock
        self._entries: OrderedDict[tuple[str, str], tuple[float, Optional[T]]] = OrderedDict()

    def get(self, artist: str, title: str) -> Any:
        """Cached value (possibly None), or MISSING if absent or expired."""
        key = cache_key(artist, title)
        entry = self._entries.get(key)
        if entry is None:
            return MISSING

        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return MISSING

        self._entries.move_to_end(key)
        return value

    def put(self, artist: str, title: str, value: Optional[T]) -> None:
        key = cache_key(artist, title)
        self._entries[key] = (self._clock() + self._ttl, value)
        self._entries.move_to_end(key)
        while len(self._entries) > self._max:
            self._entries.popitem(last=False)

    def invalidate(self, artist: str, title: str) -> None:
        self._entries.pop(cache_key(artist, title), None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
