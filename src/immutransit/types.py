# Copyright Max R. P. Grossmann, Holger Gerhardt, et al., 2026.
# SPDX-License-Identifier: LGPL-3.0-or-later

from collections.abc import Callable
from typing import Any

from pydantic.dataclasses import dataclass as validated_dataclass

Predicate = Callable[[Any, Any], bool]
MissingRecordResolver = Callable[[str, Any], Any]


@validated_dataclass(frozen=True)
class Tagged:
    tag: str
    rep: Any = None
