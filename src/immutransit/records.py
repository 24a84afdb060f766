# Copyright Max R. P. Grossmann, Holger Gerhardt, et al., 2026.
# SPDX-License-Identifier: LGPL-3.0-or-later

"""
Record registry: name -> record type, built once per codec configuration.

A record type must be constructible without arguments so its name can be
sampled. The name is the `_name` class attribute if set, otherwise the class
name. Generic base-class names are rejected since they cannot identify a type
across a process boundary.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pyrsistent import PClass, PMap, pmap

from immutransit.errors import DuplicateRecordName, MissingRecordName, UnknownRecordType, UnregisterableType
from immutransit.utils import ensure

logger = logging.getLogger(__name__)

GENERIC_RECORD_NAMES = frozenset({"Record", "PRecord", "PClass"})


def record_name(record: Any) -> str:
    cls = record if isinstance(record, type) else type(record)
    return getattr(record, "_name", None) or cls.__name__


def record_fields(record: Any) -> dict[str, Any]:
    if isinstance(record, Mapping):
        return dict(record.items())
    if isinstance(record, PClass):
        return dict(record.serialize())
    if callable(getattr(record, "to_map", None)):
        return dict(record.to_map())
    raise UnregisterableType(f"Record {record!r} exposes no field mapping")


def build_registry(record_types: Iterable[type]) -> PMap:
    registry: dict[str, type] = {}

    for record_type in record_types:
        try:
            sample = record_type()
        except Exception as exc:
            raise MissingRecordName(f"Cannot instantiate {record_type!r} to read its record name") from exc

        name = record_name(sample)
        ensure(
            isinstance(name, str) and bool(name) and name not in GENERIC_RECORD_NAMES,
            MissingRecordName,
            f"Cannot (de)serialize {record_type!r} without a record name",
        )
        ensure(
            name not in registry,
            DuplicateRecordName,
            f"There's already a record type named {name}",
        )

        registry[name] = record_type
        logger.debug("Registered record type %s as %r", record_type.__qualname__, name)

    return pmap(registry)


def instantiate(record_type: type, fields: Mapping[str, Any]) -> Any:
    return record_type(**dict(fields))


def default_missing_record(name: str, fields: Any) -> Any:
    raise UnknownRecordType(
        f"Tried to deserialize record type named `{name}`, but no type with that name was passed to with_records()"
    )
