"""Safe numeric coercion for Meta insights values.

Meta returns every metric as a decimal string. These helpers never raise:
anything unparseable, negative, or non-finite collapses to zero, because a
campaign with unreadable numbers is treated the same as one with no activity.
"""

from __future__ import annotations

import math
from typing import Any


def _safe_float(value: Any) -> float:
    """Coerce str/int/float to a non-negative finite float. Returns 0.0 on failure.

    - "12.5" -> 12.5
    - 12 -> 12.0
    - "abc", None, "", [], "nan", "-3" -> 0.0
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        parsed = float(value)
    except (ValueError, TypeError):
        return 0.0
    if not math.isfinite(parsed) or parsed < 0:
        return 0.0
    return parsed


def _safe_int(value: Any) -> int:
    """Coerce to a non-negative int, truncating decimals ("12.9" -> 12)."""
    return int(_safe_float(value))
