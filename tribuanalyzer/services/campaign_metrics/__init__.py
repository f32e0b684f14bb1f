"""Campaign Metrics Package

Pure, synchronous pipeline over already-fetched Meta payloads:
- Action extraction (synonym tables per logical event)
- Normalization (raw campaign + insights -> CampaignMetrics)
- Health classification (ordered green/yellow/red/gray rules)
- Aggregation (status-filtered account totals + health tally)
"""

from .action_types import ACTION_SYNONYMS, ActionMetric, extract_action, extract_action_value
from .aggregator import aggregate, filter_by_status
from .health_classifier import HealthClassifier, classify, tally_health
from .normalizer import normalize

__all__ = [
    'ACTION_SYNONYMS',
    'ActionMetric',
    'extract_action',
    'extract_action_value',
    'aggregate',
    'filter_by_status',
    'HealthClassifier',
    'classify',
    'tally_health',
    'normalize',
]
