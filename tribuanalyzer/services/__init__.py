"""
Services layer for TribuAnalyzer.

Provides clean separation between campaign metrics (normalize, classify,
aggregate) and the AI advisory pipeline (prompts, backends, streaming).
"""

from .models import (
    CampaignStatus,
    StatusFilter,
    HealthState,
    DatePreset,
    RawAction,
    CampaignDescriptor,
    InsightsPayload,
    CampaignMetrics,
    HealthTally,
    AccountTotals,
    AccountSnapshot,
    window_label,
)

__all__ = [
    'CampaignStatus',
    'StatusFilter',
    'HealthState',
    'DatePreset',
    'RawAction',
    'CampaignDescriptor',
    'InsightsPayload',
    'CampaignMetrics',
    'HealthTally',
    'AccountTotals',
    'AccountSnapshot',
    'window_label',
]
