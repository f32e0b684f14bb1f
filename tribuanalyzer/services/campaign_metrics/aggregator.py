"""Aggregator: reduces campaign metrics into account-level totals.

Pure and total over StatusFilter values: ratios guard every division and
come back as 0 instead of NaN/Infinity, and no payload content can make
it raise.

Plain strings are also accepted as a filter, for CLI and config input.
That convenience is the one way to get an error: a string naming no
StatusFilter raises ValueError.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Union

from ..models import AccountTotals, CampaignMetrics, CampaignStatus, StatusFilter
from .health_classifier import HealthClassifier

StatusFilterLike = Union[StatusFilter, str]


def _coerce_filter(status_filter: StatusFilterLike) -> StatusFilter:
    """StatusFilter values pass through; strings are parsed case-insensitively.

    Raises:
        ValueError: If a string names no StatusFilter.
    """
    if isinstance(status_filter, StatusFilter):
        return status_filter
    return StatusFilter(str(status_filter).upper())


def filter_by_status(
    records: Iterable[CampaignMetrics],
    status_filter: StatusFilterLike = StatusFilter.ALL,
) -> List[CampaignMetrics]:
    """Keep records whose status matches the filter exactly (ALL keeps everything)."""
    status_filter = _coerce_filter(status_filter)
    if status_filter is StatusFilter.ALL:
        return list(records)
    return [m for m in records if m.status.value == status_filter.value]


def aggregate(
    records: Iterable[CampaignMetrics],
    status_filter: StatusFilterLike = StatusFilter.ALL,
    classifier: Optional[HealthClassifier] = None,
) -> AccountTotals:
    """
    Sum the base metrics of the filtered records and derive account ratios.

    Args:
        records: Canonical campaign metrics.
        status_filter: ALL or a single campaign status. A string is parsed
            case-insensitively as caller-input convenience.
        classifier: Health policy for the tally (default thresholds if None).

    Returns:
        AccountTotals with roas_general, cpa_general and an unweighted
        ctr_average, all 0 when their denominator is 0.

    Raises:
        ValueError: Only for a string filter naming no StatusFilter.
    """
    status_filter = _coerce_filter(status_filter)
    classifier = classifier or HealthClassifier()
    selected = filter_by_status(records, status_filter)

    spend = sum(m.spend for m in selected)
    revenue = sum(m.revenue for m in selected)
    purchases = sum(m.purchases for m in selected)

    return AccountTotals(
        status_filter=status_filter,
        campaign_count=len(selected),
        active_count=sum(1 for m in selected if m.status is CampaignStatus.ACTIVE),
        spend=spend,
        impressions=sum(m.impressions for m in selected),
        revenue=revenue,
        purchases=purchases,
        add_to_cart=sum(m.add_to_cart for m in selected),
        initiate_checkout=sum(m.initiate_checkout for m in selected),
        roas_general=revenue / spend if spend > 0 else 0.0,
        cpa_general=spend / purchases if purchases > 0 else 0.0,
        ctr_average=sum(m.ctr for m in selected) / len(selected) if selected else 0.0,
        health=classifier.tally(selected),
    )
