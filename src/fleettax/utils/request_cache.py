"""Request-scoped memoization for read-heavy service calls."""

from contextlib import contextmanager
from typing import Any, Callable, Hashable, Iterator, TypeVar

T = TypeVar("T")


class RequestCache:
    """Mapping from call key to result, owned by a single request.

    Keys are strings such as ``ifta:3:2025:Q1`` so a whole tenant can be
    invalidated by prefix after a write.
    """

    def __init__(self) -> None:
        self._store: dict[Hashable, Any] = {}
        self.hits = 0
        self.misses = 0

    def __contains__(self, key: Hashable) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)

    def get_or_compute(self, key: Hashable, factory: Callable[[], T]) -> T:
        """Return the cached value for key, computing and storing it on a miss.

        Exceptions from factory propagate and nothing is stored.
        """
        if key in self._store:
            self.hits += 1
            return self._store[key]
        self.misses += 1
        value = factory()
        self._store[key] = value
        return value

    def invalidate(self, prefix: str) -> int:
        """Drop string keys starting with prefix. Returns the number removed."""
        stale = [k for k in self._store if isinstance(k, str) and k.startswith(prefix)]
        for key in stale:
            del self._store[key]
        return len(stale)

    def clear(self) -> None:
        self._store.clear()


@contextmanager
def request_scope() -> Iterator[RequestCache]:
    """Yield a fresh cache that is cleared when the request ends."""
    cache = RequestCache()
    try:
        yield cache
    finally:
        cache.clear()
