# Copyright Max R. P. Grossmann, Holger Gerhardt, et al., 2026.
# SPDX-License-Identifier: LGPL-3.0-or-later

import math

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def ensure(
    condition: bool,
    exctype: type[Exception] = ValueError,
    msg: str | None = None,
) -> None:
    if not condition:
        msg = "Constraint violation: " + msg if msg else "Constraint violation"

        raise exctype(msg)


def is_int64(x: int) -> bool:
    return INT64_MIN <= x <= INT64_MAX


def is_native_number(x: object) -> bool:
    """True for numbers orjson can emit verbatim: 64-bit ints and finite floats."""
    if isinstance(x, int):
        return is_int64(x)
    if isinstance(x, float):
        return math.isfinite(x)
    return False
