"""Meta action-type synonym tables and the action extractor.

Meta reports the same conversion under several action_type strings
depending on attribution source (omni-channel, on-Facebook, pixel).
Each logical metric owns exactly one synonym table here; adding a
platform-specific alias is a single edit to ACTION_SYNONYMS.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

from .helpers import _safe_float, _safe_int

logger = logging.getLogger(__name__)


class ActionMetric(str, Enum):
    PURCHASE = "purchase"
    ADD_TO_CART = "add_to_cart"
    INITIATE_CHECKOUT = "initiate_checkout"


# Order matters: the first entry in an actions array matching any synonym wins.
ACTION_SYNONYMS: Dict[ActionMetric, Tuple[str, ...]] = {
    ActionMetric.PURCHASE: (
        "omni_purchase",
        "purchase",
        "offsite_conversion.fb_pixel_purchase",
    ),
    ActionMetric.ADD_TO_CART: (
        "omni_add_to_cart",
        "add_to_cart",
        "offsite_conversion.fb_pixel_add_to_cart",
    ),
    ActionMetric.INITIATE_CHECKOUT: (
        "omni_initiated_checkout",
        "initiate_checkout",
        "offsite_conversion.fb_pixel_initiate_checkout",
    ),
}

_unmapped = [m.value for m in ActionMetric if m not in ACTION_SYNONYMS]
if _unmapped:
    raise RuntimeError(f"ActionMetric without synonym table: {', '.join(_unmapped)}")


def synonyms_for(metric: ActionMetric) -> Tuple[str, ...]:
    """Return the synonym table for a logical metric."""
    return ACTION_SYNONYMS[metric]


def _field(action: Any, name: str) -> Any:
    """Read a field from either a raw dict or a RawAction model."""
    if isinstance(action, dict):
        return action.get(name)
    return getattr(action, name, None)


def _find_value(actions: Optional[Iterable[Any]], synonyms: Iterable[str]) -> Any:
    """Raw value of the first action whose type is in `synonyms`, or None."""
    if not actions or isinstance(actions, (str, bytes, dict)):
        return None
    wanted = frozenset(synonyms)
    for action in actions:
        if _field(action, "action_type") in wanted:
            return _field(action, "value")
    return None


def extract_action(actions: Optional[Iterable[Any]], synonyms: Iterable[str]) -> int:
    """Extract an event count from a Meta `actions` array.

    Scans once and returns the value of the first entry whose action_type is
    one of `synonyms`. Empty/absent arrays, no match, and unparseable values
    all yield 0.

    Args:
        actions: List of {action_type, value} dicts or RawAction models.
        synonyms: Ordered action_type strings for one logical event.

    Returns:
        Non-negative integer count.
    """
    return _safe_int(_find_value(actions, synonyms))


def extract_action_value(actions: Optional[Iterable[Any]], synonyms: Iterable[str]) -> float:
    """Extract a monetary value from a Meta `action_values` array.

    Same matching rules as extract_action, but keeps decimals.
    """
    return _safe_float(_find_value(actions, synonyms))
