# Copyright Max R. P. Grossmann, Holger Gerhardt, et al., 2026.
# SPDX-License-Identifier: LGPL-3.0-or-later

"""
Self-describing JSON wire substrate.

Wire format: a tagged value is the two-element array ["~#<tag>", rep]; JSON
natives pass through. Strings starting with "~" are escaped with one extra
"~" so no user string can be mistaken for a tag.
This format MUST remain backward compatible across versions.
"""

import base64
import math
from collections.abc import Callable
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any
from uuid import UUID

from orjson import dumps as jd
from orjson import loads as jl

from immutransit.errors import UnknownTag, UnregisterableType
from immutransit.types import Tagged
from immutransit.utils import ensure, is_int64, is_native_number

ESCAPE = "~"
TAG_PREFIX = "~#"

SPECIAL_FLOATS = {"NaN": math.nan, "INF": math.inf, "-INF": -math.inf}


def escape(s: str) -> str:
    return ESCAPE + s if s.startswith(ESCAPE) else s


def unescape(s: str) -> str:
    return s[1:] if s.startswith(ESCAPE + ESCAPE) else s


def is_tagged(node: Any) -> bool:
    return (
        isinstance(node, list) and len(node) == 2 and isinstance(node[0], str) and node[0].startswith(TAG_PREFIX)
    )


def special_float_rep(d: float) -> str:
    if math.isnan(d):
        return "NaN"
    return "INF" if d > 0 else "-INF"


class Writer:
    def __init__(self) -> None:
        # ordered list for isinstance dispatch (order matters: datetime before date, etc.)
        self.ordered_handlers: list[tuple[type, str, Callable[[Any], Any], Callable[[Any], bool] | None]] = []
        # fast path for exact type match
        self.exact_handlers: dict[type, tuple[str, Callable[[Any], Any]]] = {}
        # used when nothing else matches
        self.fallback: tuple[str, Callable[[Any], Any]] | None = None

        self.register_scalars()

    def register(
        self,
        cls: type,
        tag: str,
        rep: Callable[[Any], Any],
        *,
        predicate: Callable[[Any], bool] | None = None,
    ) -> None:
        """Register a handler for writing instances of a type.

        Args:
            cls: The Python type to register.
            tag: Wire tag emitted for matching values.
            rep: Function that takes a value and returns its representation.
                Lists and str-keyed dicts returned here are written recursively.
            predicate: Optional content-based predicate for disambiguation (e.g., dicts with non-str keys).
        """
        ensure(bool(tag), ValueError, "Tag must be non-empty")

        self.ordered_handlers.append((cls, tag, rep, predicate))

        # only add to exact fast-path if no predicate (predicate entries need ordered check)
        if predicate is None and cls not in self.exact_handlers:
            self.exact_handlers[cls] = (tag, rep)

    def register_fallback(self, tag: str, rep: Callable[[Any], Any]) -> None:
        self.fallback = (tag, rep)

    def lookup(self, data: Any) -> tuple[str, Any] | None:
        """Return (tag, rep) for a value, or None if it should be written natively."""
        exact = self.exact_handlers.get(type(data))
        if exact is not None:
            tag, rep = exact
            # a predicate-based entry may override the exact match
            for cls, t, r, pred in self.ordered_handlers:
                if pred is not None and isinstance(data, cls) and pred(data):
                    return t, r(data)
            return tag, rep(data)

        # slow path: ordered isinstance chain
        for cls, tag, rep, predicate in self.ordered_handlers:
            if isinstance(data, cls) and (predicate is None or predicate(data)):
                return tag, rep(data)

        return None

    def tagged(self, data: Any) -> Tagged | None:
        found = self.lookup(data)
        return None if found is None else Tagged(*found)

    def emit(self, data: Any) -> Any:
        """Turn a value into a JSON-ready tree of lists, dicts and scalars."""
        if isinstance(data, str):
            return escape(data)

        if data is None or isinstance(data, bool) or is_native_number(data):
            return data

        found = self.lookup(data)
        if found is not None:
            tag, rep = found
            return [TAG_PREFIX + tag, self.emit_rep(rep)]

        if isinstance(data, (list, tuple)):
            return [self.emit(v) for v in data]

        if isinstance(data, dict) and all(isinstance(k, str) for k in data):
            return {escape(k): self.emit(v) for k, v in data.items()}

        if self.fallback is not None:
            tag, rep = self.fallback
            return [TAG_PREFIX + tag, self.emit_rep(rep(data))]

        raise UnregisterableType(f"{data!r} has invalid type: {type(data)}")

    def emit_rep(self, rep: Any) -> Any:
        if isinstance(rep, list):
            return [self.emit(v) for v in rep]

        if isinstance(rep, dict):
            ensure(all(isinstance(k, str) for k in rep), TypeError, "Keyed representations need str keys")
            return {escape(k): self.emit(v) for k, v in rep.items()}

        return self.emit(rep)

    def write(self, data: Any) -> str:
        return jd(self.emit(data)).decode()

    def register_scalars(self) -> None:
        """Register scalars JSON cannot carry natively. Order matters for isinstance dispatch."""

        # ints beyond what orjson accepts
        self.register(int, "n", str, predicate=lambda d: not isinstance(d, bool) and not is_int64(d))

        # NaN and infinities
        self.register(float, "z", special_float_rep, predicate=lambda d: not math.isfinite(d))

        # datetime MUST come before date (datetime is subclass of date)
        self.register(datetime, "t", lambda d: d.isoformat())
        self.register(date, "date", lambda d: d.isoformat())
        self.register(time, "time", lambda d: d.isoformat())

        self.register(UUID, "u", str)
        self.register(Decimal, "f", str)
        self.register(bytes, "b", lambda d: base64.b64encode(d).decode("ascii"))


class Reader:
    def __init__(
        self,
        *,
        array_builder: Callable[[list[Any]], Any] = list,
        map_builder: Callable[[dict[str, Any]], Any] = dict,
    ) -> None:
        # decoder dispatch by tag
        self.decoders: dict[str, Callable[[Any], Any]] = {}
        # builders for untagged JSON arrays and objects
        self.array_builder = array_builder
        self.map_builder = map_builder

        self.register_scalars()

    def register(self, tag: str, decoder: Callable[[Any], Any]) -> None:
        """Register a decoder for a tag.

        Args:
            tag: Wire tag as emitted by the writer.
            decoder: Function that takes the representation, with its children
                already decoded, and returns a value.
        """
        ensure(tag not in self.decoders, ValueError, f"Tag {tag} already registered")

        self.decoders[tag] = decoder

    def read(self, text: str | bytes) -> Any:
        return self.decode(jl(text))

    def decode(self, node: Any) -> Any:
        if isinstance(node, str):
            return unescape(node)

        if is_tagged(node):
            return self.decode_tagged(node[0][len(TAG_PREFIX) :], node[1])

        if isinstance(node, list):
            return self.array_builder([self.decode(n) for n in node])

        if isinstance(node, dict):
            return self.map_builder({unescape(k): self.decode(v) for k, v in node.items()})

        return node

    def decode_tagged(self, tag: str, rep: Any) -> Any:
        decoder = self.decoders.get(tag)
        if decoder is None:
            raise UnknownTag(f"Invalid tag: {tag}")

        return decoder(self.decode_rep(rep))

    def decode_rep(self, rep: Any) -> Any:
        if isinstance(rep, list):
            return [self.decode(n) for n in rep]

        if isinstance(rep, dict):
            return {unescape(k): self.decode(v) for k, v in rep.items()}

        return self.decode(rep)

    def register_scalars(self) -> None:
        self.register("n", int)
        self.register("z", lambda r: SPECIAL_FLOATS[r])
        self.register("t", datetime.fromisoformat)
        self.register("date", date.fromisoformat)
        self.register("time", time.fromisoformat)
        self.register("u", UUID)
        self.register("f", Decimal)
        self.register("b", lambda r: base64.b64decode(r.encode("ascii")))
