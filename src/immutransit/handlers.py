# Copyright Max R. P. Grossmann, Holger Gerhardt, et al., 2026.
# SPDX-License-Identifier: LGPL-3.0-or-later

"""
Tag handlers for persistent collections and records.

Writers are built per (records, predicate) and readers per (records, resolver);
each rep function closes over its configuration and filters its own entries
before the wire writer recurses into them.
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from pyrsistent import PMap, PSet, PVector, pmap, pset, pvector

from immutransit.errors import UnregisterableType
from immutransit.filtering import filter_elements, filter_entries, filter_members, flatten_entries
from immutransit.ordered import OrderedMap, OrderedSet
from immutransit.records import instantiate, record_fields, record_name
from immutransit.types import MissingRecordResolver, Predicate
from immutransit.utils import ensure
from immutransit.wire import Reader, Writer

logger = logging.getLogger(__name__)

MAP = "iM"
ORDERED_MAP = "iOM"
LIST = "iL"
SET = "iS"
ORDERED_SET = "iOS"
RECORD = "iR"
OPAQUE = "_"


def has_non_str_keys(d: dict[Any, Any]) -> bool:
    return any(not isinstance(k, str) for k in d)


def make_map_rep(predicate: Predicate | None) -> Callable[[Mapping[Any, Any]], list[Any]]:
    def rep(m: Mapping[Any, Any]) -> list[Any]:
        return flatten_entries(filter_entries(m.items(), predicate))

    return rep


def make_list_rep(predicate: Predicate | None) -> Callable[[PVector], list[Any]]:
    def rep(v: PVector) -> list[Any]:
        return filter_elements(v, predicate)

    return rep


def make_set_rep(predicate: Predicate | None) -> Callable[[Any], list[Any]]:
    def rep(s: Any) -> list[Any]:
        return filter_members(s, predicate)

    return rep


def make_record_rep(predicate: Predicate | None) -> Callable[[Any], dict[str, Any]]:
    def rep(record: Any) -> dict[str, Any]:
        return {
            "n": record_name(record),
            "v": dict(filter_entries(record_fields(record).items(), predicate)),
        }

    return rep


def make_fallback_rep(predicate: Predicate | None) -> Callable[[Any], list[Any]]:
    map_rep = make_map_rep(predicate)

    def rep(value: Any) -> list[Any]:
        to_map = getattr(value, "to_map", None)
        if not callable(to_map):
            raise UnregisterableType(f"Error serializing unrecognized object {value!r}")
        return map_rep(to_map())

    return rep


def opaque_rep(_: Any) -> None:
    return None


def pairs(rep: list[Any]) -> zip:
    ensure(len(rep) % 2 == 0, ValueError, "Map representation must have an even length")
    return zip(rep[0::2], rep[1::2], strict=True)


def decode_map(rep: list[Any]) -> PMap:
    evolver = pmap().evolver()
    for k, v in pairs(rep):
        evolver.set(k, v)
    return evolver.persistent()


def decode_ordered_map(rep: list[Any]) -> OrderedMap:
    evolver = OrderedMap().evolver()
    for k, v in pairs(rep):
        evolver.set(k, v)
    return evolver.persistent()


def make_record_decoder(records: Mapping[str, type], missing_record: MissingRecordResolver) -> Callable[[Any], Any]:
    def decode(rep: Any) -> Any:
        ensure(
            isinstance(rep, dict) and "n" in rep and "v" in rep,
            ValueError,
            "Record representation needs 'n' and 'v'",
        )
        name, fields = rep["n"], rep["v"]

        record_type = records.get(name)
        if record_type is None:
            logger.debug("No record type named %r, deferring to %r", name, missing_record)
            return missing_record(name, fields)

        return instantiate(record_type, fields)

    return decode


def build_writer(records: Mapping[str, type], predicate: Predicate | None) -> Writer:
    writer = Writer()

    # records first: they may subclass PMap
    record_rep = make_record_rep(predicate)
    for record_type in records.values():
        writer.register(record_type, RECORD, record_rep)

    map_rep = make_map_rep(predicate)
    writer.register(OrderedMap, ORDERED_MAP, map_rep)
    writer.register(PMap, MAP, map_rep)
    # str-keyed dicts are written as JSON objects
    writer.register(dict, MAP, map_rep, predicate=has_non_str_keys)

    writer.register(PVector, LIST, make_list_rep(predicate))

    set_rep = make_set_rep(predicate)
    writer.register(OrderedSet, ORDERED_SET, set_rep)
    writer.register(PSet, SET, set_rep)
    writer.register(frozenset, SET, set_rep)
    writer.register(set, SET, set_rep)

    # functions and other callables have no wire form
    writer.register(object, OPAQUE, opaque_rep, predicate=callable)

    writer.register_fallback(MAP, make_fallback_rep(predicate))

    return writer


def build_reader(records: Mapping[str, type], missing_record: MissingRecordResolver) -> Reader:
    reader = Reader(array_builder=pvector, map_builder=pmap)

    reader.register(MAP, decode_map)
    reader.register(ORDERED_MAP, decode_ordered_map)
    reader.register(LIST, pvector)
    reader.register(SET, pset)
    reader.register(ORDERED_SET, OrderedSet)
    reader.register(RECORD, make_record_decoder(records, missing_record))
    reader.register(OPAQUE, opaque_rep)

    return reader
