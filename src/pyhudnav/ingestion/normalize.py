"""Normalization helpers.

Centralizes defensive parsing of engine-provided values.
"""

from __future__ import annotations

import enum
import math
from typing import Any


def safe_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None or math.isinf(parsed):
        return None
    return int(parsed)


def identifier_name(value: Any) -> Any:
    """Return the symbolic name of an engine identifier.

    Engine SDKs report lane directions and recommendation states as enum
    members; their name is the identifier. Strings pass through untouched.
    """
    if isinstance(value, enum.Enum):
        return value.name
    if isinstance(value, str):
        return value
    if value is None:
        return value
    return str(value)
