# Copyright Max R. P. Grossmann, Holger Gerhardt, et al., 2026.
# SPDX-License-Identifier: LGPL-3.0-or-later

"""
Exceptions raised by the codec.

Each error also derives from the builtin that plain callers would expect
(NotImplementedError for unsupported types, ValueError for bad registrations,
LookupError for unknown record names), so existing handlers keep working.
"""


class CodecError(Exception):
    pass


class UnregisterableType(CodecError, NotImplementedError):
    """Value is neither a known collection/record nor convertible via to_map()."""


class UnknownTag(CodecError, NotImplementedError):
    """Wire data carries a tag that no decoder is registered for."""


class MissingRecordName(CodecError, ValueError):
    """Record type has no usable name (empty, generic, or not constructible)."""


class DuplicateRecordName(CodecError, ValueError):
    """Two record types resolve to the same name."""


class UnknownRecordType(CodecError, LookupError):
    """Decoded record name is absent from the registry and no resolver recovered it."""
