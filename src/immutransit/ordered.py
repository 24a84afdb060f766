# Copyright Max R. P. Grossmann, Holger Gerhardt, et al., 2026.
# SPDX-License-Identifier: LGPL-3.0-or-later

"""
Insertion-ordered persistent map and set.

Both keep a PVector for order next to a PMap/PSet for lookup, so every
update returns a new value that shares structure with the old one.
"""

from collections.abc import Hashable, Iterable, Iterator, Mapping, Set
from typing import Any

from pyrsistent import PMap, PSet, PVector, pmap, pset, pvector


class OrderedMap(Mapping[Any, Any]):
    __slots__ = ("_keys", "_map")

    _keys: PVector
    _map: PMap

    def __init__(self, initial: Mapping[Any, Any] | Iterable[tuple[Any, Any]] = ()) -> None:
        items = initial.items() if isinstance(initial, Mapping) else initial
        # dicts keep insertion order, and a repeated key keeps its first position
        data = dict(items)
        self._keys = pvector(data)
        self._map = pmap(data)

    @classmethod
    def _create(cls, keys: PVector, mapping: PMap) -> "OrderedMap":
        obj = cls.__new__(cls)
        obj._keys = keys
        obj._map = mapping
        return obj

    def __getitem__(self, key: Any) -> Any:
        return self._map[key]

    def __iter__(self) -> Iterator[Any]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._map

    def set(self, key: Any, value: Any) -> "OrderedMap":
        if key in self._map:
            return self._create(self._keys, self._map.set(key, value))
        return self._create(self._keys.append(key), self._map.set(key, value))

    def remove(self, key: Any) -> "OrderedMap":
        if key not in self._map:
            raise KeyError(key)
        return self._create(self._keys.delete(self._keys.index(key)), self._map.remove(key))

    def discard(self, key: Any) -> "OrderedMap":
        return self.remove(key) if key in self._map else self

    def update(self, *others: Mapping[Any, Any] | Iterable[tuple[Any, Any]]) -> "OrderedMap":
        evolver = self.evolver()
        for other in others:
            for k, v in other.items() if isinstance(other, Mapping) else other:
                evolver.set(k, v)
        return evolver.persistent()

    def evolver(self) -> "OrderedMapEvolver":
        return OrderedMapEvolver(self)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, OrderedMap):
            return len(self) == len(other) and list(self.items()) == list(other.items())
        # an ordered mapping never equals an unordered one
        if isinstance(other, Mapping):
            return False
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(self.items()))

    def __repr__(self) -> str:
        return f"OrderedMap({list(self.items())!r})"

    def __reduce__(self) -> tuple[type, tuple[list[tuple[Any, Any]]]]:
        return OrderedMap, (list(self.items()),)


class OrderedMapEvolver:
    """Mutable accumulator for building an OrderedMap in one pass."""

    __slots__ = ("_data",)

    def __init__(self, origin: OrderedMap) -> None:
        self._data = dict(origin.items())

    def set(self, key: Any, value: Any) -> "OrderedMapEvolver":
        self._data[key] = value
        return self

    __setitem__ = set

    def remove(self, key: Any) -> "OrderedMapEvolver":
        del self._data[key]
        return self

    def __getitem__(self, key: Any) -> Any:
        return self._data[key]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def persistent(self) -> OrderedMap:
        return OrderedMap(self._data)


class OrderedSet(Set[Any]):
    __slots__ = ("_items", "_members")

    _items: PVector
    _members: PSet

    def __init__(self, iterable: Iterable[Hashable] = ()) -> None:
        data = dict.fromkeys(iterable)
        self._items = pvector(data)
        self._members = pset(data)

    @classmethod
    def _create(cls, items: PVector, members: PSet) -> "OrderedSet":
        obj = cls.__new__(cls)
        obj._items = items
        obj._members = members
        return obj

    def __contains__(self, member: object) -> bool:
        return member in self._members

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def add(self, member: Hashable) -> "OrderedSet":
        if member in self._members:
            return self
        return self._create(self._items.append(member), self._members.add(member))

    def remove(self, member: Hashable) -> "OrderedSet":
        if member not in self._members:
            raise KeyError(member)
        return self._create(self._items.delete(self._items.index(member)), self._members.remove(member))

    def discard(self, member: Hashable) -> "OrderedSet":
        return self.remove(member) if member in self._members else self

    def __eq__(self, other: object) -> bool:
        if isinstance(other, OrderedSet):
            return list(self._items) == list(other._items)
        if isinstance(other, Set):
            return False
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(self._items))

    def __repr__(self) -> str:
        return f"OrderedSet({list(self._items)!r})"

    def __reduce__(self) -> tuple[type, tuple[list[Any]]]:
        return OrderedSet, (list(self._items),)
