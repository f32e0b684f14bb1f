"""Pydantic models for TribuAnalyzer.

Enums, raw Meta payload shapes, canonical campaign metrics, account totals,
and advisory request/stream types. No I/O in this file -- pure type definitions.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class CampaignStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    ARCHIVED = "ARCHIVED"
    DELETED = "DELETED"


class StatusFilter(str, Enum):
    ALL = "ALL"
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    ARCHIVED = "ARCHIVED"
    DELETED = "DELETED"


class HealthState(str, Enum):
    """Ordinal campaign health: green=scale, yellow=optimize, red=review, gray=no data."""

    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    GRAY = "gray"


class DatePreset(str, Enum):
    LAST_7D = "last_7d"
    LAST_14D = "last_14d"
    LAST_30D = "last_30d"
    LAST_90D = "last_90d"
    LIFETIME = "lifetime"


WINDOW_LABELS: Dict[str, str] = {
    DatePreset.LAST_7D.value: "Últimos 7 días",
    DatePreset.LAST_14D.value: "Últimos 14 días",
    DatePreset.LAST_30D.value: "Últimos 30 días",
    DatePreset.LAST_90D.value: "Últimos 90 días",
    DatePreset.LIFETIME.value: "Desde el inicio",
}


def window_label(date_preset: str) -> str:
    """Human label for a Meta date preset. Unknown presets read as 30 days."""
    return WINDOW_LABELS.get(date_preset, WINDOW_LABELS[DatePreset.LAST_30D.value])


# =============================================================================
# Raw Meta payloads
# =============================================================================

class RawAction(BaseModel):
    """One entry of a Meta `actions` / `action_values` array."""

    action_type: str
    value: Optional[str] = None


class CampaignDescriptor(BaseModel):
    """Campaign row from the /campaigns edge (fields=id,name,status)."""

    id: Optional[str] = None
    name: str = ""
    status: CampaignStatus = CampaignStatus.PAUSED


class InsightsPayload(BaseModel):
    """First row of a campaign's /insights edge.

    Numeric fields arrive as decimal strings and are kept raw here;
    parsing happens in the normalizer so a bad value degrades to zero
    instead of failing validation.
    """

    campaign_name: Optional[str] = None
    spend: Optional[str] = None
    impressions: Optional[str] = None
    ctr: Optional[str] = None
    frequency: Optional[str] = None
    actions: Optional[List[RawAction]] = None
    action_values: Optional[List[RawAction]] = None


# =============================================================================
# Canonical metrics
# =============================================================================

class CampaignMetrics(BaseModel):
    """Canonical per-campaign metrics for one query window."""

    model_config = {"frozen": True}

    name: str
    status: CampaignStatus

    spend: float = Field(0.0, ge=0)
    impressions: int = Field(0, ge=0)
    ctr: float = Field(0.0, ge=0)
    frequency: float = Field(0.0, ge=0)

    add_to_cart: int = Field(0, ge=0)
    initiate_checkout: int = Field(0, ge=0)
    purchases: int = Field(0, ge=0)

    revenue: float = Field(0.0, ge=0)
    roas: float = Field(0.0, ge=0)

    @property
    def cpa(self) -> Optional[float]:
        """Cost per purchase, None when there are no purchases."""
        if self.purchases > 0:
            return self.spend / self.purchases
        return None

    @property
    def cpc(self) -> Optional[float]:
        """Cost per click estimated from impressions and CTR."""
        clicks = self.impressions * (self.ctr / 100)
        if clicks > 0:
            return self.spend / clicks
        return None


class HealthTally(BaseModel):
    """Count of records per health state, for summary badges."""

    green: int = 0
    yellow: int = 0
    red: int = 0
    gray: int = 0

    def count(self, state: HealthState) -> int:
        return getattr(self, state.value)


class AccountTotals(BaseModel):
    """Account-level totals over a status-filtered set of campaigns."""

    model_config = {"frozen": True}

    status_filter: StatusFilter = StatusFilter.ALL
    campaign_count: int = 0
    active_count: int = 0

    spend: float = 0.0
    impressions: int = 0
    revenue: float = 0.0
    purchases: int = 0
    add_to_cart: int = 0
    initiate_checkout: int = 0

    roas_general: float = 0.0
    cpa_general: float = 0.0
    ctr_average: float = 0.0

    health: HealthTally = Field(default_factory=HealthTally)


class AccountSnapshot(BaseModel):
    """Everything the advisor needs about an account for one window."""

    totals: AccountTotals
    campaigns: List[CampaignMetrics] = Field(default_factory=list)
    currency: str = "USD"
    date_preset: str = DatePreset.LAST_7D.value

    @property
    def window_label(self) -> str:
        return window_label(self.date_preset)
