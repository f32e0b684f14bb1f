"""Metrics normalizer: raw Meta campaign + insights -> CampaignMetrics.

Never raises on payload content. A campaign with no insights row for the
window is a normal "no activity" state and comes back zeroed.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

from ..models import CampaignDescriptor, CampaignMetrics, CampaignStatus, InsightsPayload
from .action_types import ActionMetric, extract_action, extract_action_value, synonyms_for
from .helpers import _safe_float, _safe_int

logger = logging.getLogger(__name__)

DescriptorLike = Union[CampaignDescriptor, Dict[str, Any]]
InsightsLike = Union[InsightsPayload, Dict[str, Any]]


def _get(source: Any, name: str) -> Any:
    if source is None:
        return None
    if isinstance(source, dict):
        return source.get(name)
    return getattr(source, name, None)


def coerce_status(value: Any) -> CampaignStatus:
    """Map a raw status string to CampaignStatus.

    Statuses outside the enum (e.g. effective_status values such as
    "IN_PROCESS") are treated as PAUSED: not delivering, not removed.
    """
    if isinstance(value, CampaignStatus):
        return value
    try:
        return CampaignStatus(str(value).upper())
    except ValueError:
        logger.warning(f"Unknown campaign status {value!r}, treating as PAUSED")
        return CampaignStatus.PAUSED


def compute_roas(revenue: float, spend: float) -> float:
    """Revenue / spend, or 0 when there is no spend."""
    if spend > 0:
        return revenue / spend
    return 0.0


def normalize(
    descriptor: DescriptorLike,
    insights: Optional[InsightsLike] = None,
) -> CampaignMetrics:
    """
    Build canonical metrics for one campaign.

    Args:
        descriptor: Campaign {id, name, status} from the campaigns edge.
        insights: First insights row for the window, or None when Meta
            returned no rows.

    Returns:
        CampaignMetrics. Every numeric field is zero when insights are absent.
    """
    name = str(_get(descriptor, "name") or "")
    status = coerce_status(_get(descriptor, "status"))

    if not insights:
        return CampaignMetrics(name=name, status=status)

    spend = _safe_float(_get(insights, "spend"))
    actions = _get(insights, "actions")
    action_values = _get(insights, "action_values")

    # Revenue lives in the parallel action_values array under the purchase synonyms
    revenue = extract_action_value(action_values, synonyms_for(ActionMetric.PURCHASE))

    return CampaignMetrics(
        name=str(_get(insights, "campaign_name") or name),
        status=status,
        spend=spend,
        impressions=_safe_int(_get(insights, "impressions")),
        ctr=_safe_float(_get(insights, "ctr")),
        frequency=_safe_float(_get(insights, "frequency")),
        purchases=extract_action(actions, synonyms_for(ActionMetric.PURCHASE)),
        add_to_cart=extract_action(actions, synonyms_for(ActionMetric.ADD_TO_CART)),
        initiate_checkout=extract_action(actions, synonyms_for(ActionMetric.INITIATE_CHECKOUT)),
        revenue=revenue,
        roas=compute_roas(revenue, spend),
    )
