"""Ordered, dual-keyed storage for graph entities."""

import bisect
from typing import Any, Callable, Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

V = TypeVar("V")


class IndexedMap(Generic[V]):
    """
    A map with unique string keys iterated in order of a secondary sort key.

    Values can be looked up by key, and the key of a stored value can be
    looked up from the value itself. Iteration follows ``sort_key(value)``,
    ties broken by key, so it is deterministic.
    """

    def __init__(self, sort_key: Callable[[V], Any]):
        self._sort_key = sort_key
        self._values: Dict[str, V] = {}
        self._keys: Dict[int, str] = {}
        self._order: List[Tuple[Any, str]] = []

    def put(self, key: str, value: V) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        if key in self._values:
            self.remove(key)
        self._values[key] = value
        self._keys[id(value)] = key
        bisect.insort(self._order, (self._sort_key(value), key))

    def get(self, key: str, default: Optional[V] = None) -> Optional[V]:
        return self._values.get(key, default)

    def key_of(self, value: V) -> Optional[str]:
        """Return the key a value is stored under."""
        return self._keys.get(id(value))

    def remove(self, key: str) -> None:
        value = self._values.pop(key)
        del self._keys[id(value)]
        entry = (self._sort_key(value), key)
        index = bisect.bisect_left(self._order, entry)
        del self._order[index]

    def clear(self) -> None:
        self._values.clear()
        self._keys.clear()
        self._order.clear()

    def keys(self) -> List[str]:
        return [key for _, key in self._order]

    def values(self) -> List[V]:
        return [self._values[key] for _, key in self._order]

    def items(self) -> List[Tuple[str, V]]:
        return [(key, self._values[key]) for _, key in self._order]

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[V]:
        return iter(self.values())
