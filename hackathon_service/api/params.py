"""Lenient parsing for numeric query parameters.

Chaos and demo endpoints never reject a knob: a missing or unparseable value
falls back to the endpoint default, and a leading number is read the way
``parseInt``/``parseFloat`` read it (``"150ms"`` -> 150).
"""

from __future__ import annotations

import math
import re

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def int_param(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    match = _LEADING_INT.match(raw)
    if match is None:
        return default
    return int(match.group(1))


def float_param(raw: str | None, default: float) -> float:
    if raw is None:
        return default
    match = _LEADING_FLOAT.match(raw)
    if match is None:
        return default
    value = float(match.group(1))
    return value if math.isfinite(value) else default
