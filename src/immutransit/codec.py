# Copyright Max R. P. Grossmann, Holger Gerhardt, et al., 2026.
# SPDX-License-Identifier: LGPL-3.0-or-later

"""
Codec for persistent collections and records over a tagged JSON wire format.

Wire tags: iM (map), iOM (ordered map), iL (list), iS (set), iOS (ordered set),
iR (record, {"n": name, "v": fields}), _ (unserializable, null).
"""

from collections.abc import Iterable
from dataclasses import replace
from typing import Any

from pydantic import ConfigDict, Field
from pydantic.dataclasses import dataclass as validated_dataclass
from pyrsistent import PMap, pmap

from immutransit.handlers import build_reader, build_writer
from immutransit.records import build_registry, default_missing_record
from immutransit.types import MissingRecordResolver, Predicate


@validated_dataclass(frozen=True, config=ConfigDict(arbitrary_types_allowed=True))
class CodecConfig:
    records: PMap = Field(default_factory=pmap)
    predicate: Predicate | None = None
    missing_record: MissingRecordResolver = default_missing_record


class Codec:
    """Encode and decode persistent values; configuration is fixed per instance.

    with_filter() and with_records() return new codecs and never touch this one,
    so a base codec can be shared and specialised freely.
    """

    def __init__(self, config: CodecConfig | None = None) -> None:
        self.config = config or CodecConfig()
        self.writer = build_writer(self.config.records, self.config.predicate)
        self.reader = build_reader(self.config.records, self.config.missing_record)

    @property
    def records(self) -> PMap:
        return self.config.records

    def to_json(self, data: Any) -> str:
        """Encode a value to JSON text, filtering entries if a predicate is set."""
        return self.writer.write(data)

    def from_json(self, text: str | bytes) -> Any:
        """Decode JSON text. Bare arrays become PVectors, bare objects PMaps."""
        return self.reader.read(text)

    def with_filter(self, predicate: Predicate | None) -> "Codec":
        """Return a codec that drops entries for which predicate(value, key) is false.

        Args:
            predicate: Called for each entry of every container and record on encode.
                None disables filtering.
        """
        return Codec(replace(self.config, predicate=predicate))

    def with_records(
        self,
        record_types: Iterable[type],
        missing_record: MissingRecordResolver | None = None,
    ) -> "Codec":
        """Return a codec that knows exactly the given record types.

        The registry is rebuilt from scratch, not merged with the current one.

        Args:
            record_types: Record classes, each constructible without arguments.
            missing_record: Called as missing_record(name, fields) when decoding an
                unknown record name; its return value is used as the decoded value.
                Defaults to raising UnknownRecordType.

        Raises:
            MissingRecordName: A record type has no usable name.
            DuplicateRecordName: Two record types share a name.
        """
        return Codec(
            replace(
                self.config,
                records=build_registry(record_types),
                missing_record=missing_record or default_missing_record,
            )
        )

    def __repr__(self) -> str:
        return f"Codec(records={sorted(self.records)!r}, filtered={self.config.predicate is not None})"
