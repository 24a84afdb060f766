# Copyright Max R. P. Grossmann & Holger Gerhardt, 2026.
# SPDX-License-Identifier: LGPL-3.0-or-later

from immutransit.codec import Codec, CodecConfig
from immutransit.errors import (
    CodecError,
    DuplicateRecordName,
    MissingRecordName,
    UnknownRecordType,
    UnknownTag,
    UnregisterableType,
)
from immutransit.filtering import all_of, exclude_keys
from immutransit.ordered import OrderedMap, OrderedSet
from immutransit.types import Tagged

transit = Codec()

to_json = transit.to_json
from_json = transit.from_json
with_filter = transit.with_filter
with_records = transit.with_records

__all__ = [
    "Codec",
    "CodecConfig",
    "CodecError",
    "DuplicateRecordName",
    "MissingRecordName",
    "OrderedMap",
    "OrderedSet",
    "Tagged",
    "UnknownRecordType",
    "UnknownTag",
    "UnregisterableType",
    "all_of",
    "exclude_keys",
    "from_json",
    "to_json",
    "transit",
    "with_filter",
    "with_records",
]

__version_info__ = 0, 0, 1
__version__ = ".".join(map(str, __version_info__))
__author__ = "Max R. P. Grossmann, Holger Gerhardt"
