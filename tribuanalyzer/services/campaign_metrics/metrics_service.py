"""CampaignMetricsService: payload -> canonical records -> account snapshot.

Thin facade over the normalizer, classifier and aggregator. Nothing is
cached; every call recomputes from the payload it is given.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ...core.config import Config
from ..models import AccountSnapshot, CampaignMetrics, HealthState, StatusFilter
from .aggregator import StatusFilterLike, aggregate, filter_by_status
from .health_classifier import HealthClassifier
from .normalizer import normalize
from .payload_loader import CampaignPayload, iter_pairs

logger = logging.getLogger(__name__)


class CampaignMetricsService:
    """Builds account snapshots from already-fetched Meta payloads."""

    def __init__(self, classifier: Optional[HealthClassifier] = None):
        self.classifier = classifier or HealthClassifier()

    def normalize_payload(self, payload: CampaignPayload) -> List[CampaignMetrics]:
        return [normalize(descriptor, insights) for descriptor, insights in iter_pairs(payload)]

    def health_of(self, m: CampaignMetrics) -> HealthState:
        return self.classifier.classify(m)

    def build_snapshot(
        self,
        payload: CampaignPayload,
        status_filter: StatusFilterLike = StatusFilter.ALL,
        date_preset: Optional[str] = None,
        currency: Optional[str] = None,
    ) -> AccountSnapshot:
        """
        Normalize, filter and aggregate a payload for one window.

        Args:
            payload: Parsed campaign payload.
            status_filter: ALL or a single status; applied to both the
                totals and the per-campaign list.
            date_preset: Meta date preset for the window label.
            currency: Overrides the payload currency.

        Returns:
            AccountSnapshot ready for rendering or the advisory prompt.
        """
        records = self.normalize_payload(payload)
        totals = aggregate(records, status_filter, classifier=self.classifier)

        logger.info(
            f"Built snapshot: {totals.campaign_count}/{len(records)} campaigns "
            f"(filter={totals.status_filter.value}), spend={totals.spend:.2f}"
        )

        return AccountSnapshot(
            totals=totals,
            campaigns=filter_by_status(records, totals.status_filter),
            currency=currency or payload.currency or Config.DEFAULT_CURRENCY,
            date_preset=date_preset or Config.DEFAULT_DATE_PRESET,
        )
