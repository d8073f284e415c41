"""Lenient numeric conversion used for both outgoing and incoming values."""

from __future__ import annotations

import math
import re
from typing import Any

# Plain decimal notation only: no digit separators and no "inf"/"nan" words.
_DECIMAL_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
_INFINITY_RE = re.compile(r"([+-]?)Infinity")


def coerce_number(raw: Any) -> float:
    """Convert ``raw`` to a float without ever raising.

    ``None`` and blank strings map to ``0.0``; anything unparsable maps to NaN.
    Strings must be plain decimals or ``Infinity``; spellings such as
    ``1_000``, ``inf`` or ``nan`` are unparsable.
    """
    if raw is None:
        return 0.0
    if isinstance(raw, bool):
        return 1.0 if raw else 0.0
    if isinstance(raw, (int, float)):
        return float(raw)
    if isinstance(raw, str):
        candidate = raw.strip()
        if not candidate:
            return 0.0
        if _DECIMAL_RE.fullmatch(candidate):
            return float(candidate)
        infinity = _INFINITY_RE.fullmatch(candidate)
        if infinity:
            return -math.inf if infinity.group(1) == "-" else math.inf
        return math.nan
    return math.nan


def finite_or_none(value: Any) -> Any:
    """Replace non-finite floats with ``None`` so the value can be JSON encoded."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def format_fixed(value: float, precision: int) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return f"{value:.{precision}f}"
