# Copyright Max R. P. Grossmann, Holger Gerhardt, et al., 2026.
# SPDX-License-Identifier: LGPL-3.0-or-later

"""
Encode-time entry filtering.

A predicate is called as predicate(value, key) for every entry of a container
right before that container is written; nested containers are filtered when the
writer reaches them. Decoding never filters.
"""

from collections.abc import Hashable, Iterable
from typing import Any

from immutransit.types import Predicate


def filter_entries(items: Iterable[tuple[Any, Any]], predicate: Predicate | None) -> list[tuple[Any, Any]]:
    if predicate is None:
        return list(items)
    return [(k, v) for k, v in items if predicate(v, k)]


def filter_elements(values: Iterable[Any], predicate: Predicate | None) -> list[Any]:
    """Keep sequence elements, keyed by their position in the unfiltered sequence."""
    if predicate is None:
        return list(values)
    return [v for i, v in enumerate(values) if predicate(v, i)]


def filter_members(members: Iterable[Hashable], predicate: Predicate | None) -> list[Any]:
    """Keep set members; a member is its own key."""
    if predicate is None:
        return list(members)
    return [m for m in members if predicate(m, m)]


def flatten_entries(items: Iterable[tuple[Any, Any]]) -> list[Any]:
    flat: list[Any] = []
    for k, v in items:
        flat.append(k)
        flat.append(v)
    return flat


def exclude_keys(*keys: Hashable) -> Predicate:
    excluded = frozenset(keys)

    def predicate(value: Any, key: Any) -> bool:
        return not (isinstance(key, Hashable) and key in excluded)

    return predicate


def all_of(*predicates: Predicate) -> Predicate:
    def predicate(value: Any, key: Any) -> bool:
        return all(p(value, key) for p in predicates)

    return predicate
