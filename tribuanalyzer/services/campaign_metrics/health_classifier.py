"""HealthClassifier: maps campaign metrics to a green/yellow/red/gray state.

Rules are an ordered table evaluated top to bottom, first match wins:

1. gray   - no spend and no impressions (dormant; checked before red)
2. green  - roas >= 2.0 AND ctr >= 1.5 AND frequency <= 3.0
3. red    - roas < 1.0 OR ctr < 0.8 OR frequency > 5.0
4. yellow - everything else
"""

from __future__ import annotations

from typing import Callable, Iterable, List, NamedTuple

from ..models import CampaignMetrics, HealthState, HealthTally


class HealthRule(NamedTuple):
    name: str
    predicate: Callable[[CampaignMetrics], bool]
    state: HealthState


class HealthClassifier:
    """Classifies campaign health from a fixed threshold policy.

    Thresholds:
    - GREEN_MIN_ROAS: 2.0, GREEN_MIN_CTR: 1.5, GREEN_MAX_FREQUENCY: 3.0
    - RED_MAX_ROAS: 1.0, RED_MAX_CTR: 0.8, RED_MIN_FREQUENCY: 5.0
    """

    GREEN_MIN_ROAS = 2.0
    GREEN_MIN_CTR = 1.5
    GREEN_MAX_FREQUENCY = 3.0

    RED_MAX_ROAS = 1.0
    RED_MAX_CTR = 0.8
    RED_MIN_FREQUENCY = 5.0

    DEFAULT_STATE = HealthState.YELLOW

    def __init__(self):
        self.rules: List[HealthRule] = [
            HealthRule("dormant", self.is_dormant, HealthState.GRAY),
            HealthRule("scale", self.is_scalable, HealthState.GREEN),
            HealthRule("review", self.has_red_flag, HealthState.RED),
        ]

    @staticmethod
    def is_dormant(m: CampaignMetrics) -> bool:
        return m.spend == 0 and m.impressions == 0

    def is_scalable(self, m: CampaignMetrics) -> bool:
        return (
            m.roas >= self.GREEN_MIN_ROAS
            and m.ctr >= self.GREEN_MIN_CTR
            and m.frequency <= self.GREEN_MAX_FREQUENCY
        )

    def has_red_flag(self, m: CampaignMetrics) -> bool:
        return (
            m.roas < self.RED_MAX_ROAS
            or m.ctr < self.RED_MAX_CTR
            or m.frequency > self.RED_MIN_FREQUENCY
        )

    def classify(self, m: CampaignMetrics) -> HealthState:
        for rule in self.rules:
            if rule.predicate(m):
                return rule.state
        return self.DEFAULT_STATE

    def matching_rule(self, m: CampaignMetrics) -> str:
        """Name of the rule that decided the state ("default" for yellow)."""
        for rule in self.rules:
            if rule.predicate(m):
                return rule.name
        return "default"

    def tally(self, records: Iterable[CampaignMetrics]) -> HealthTally:
        counts = {state.value: 0 for state in HealthState}
        for m in records:
            counts[self.classify(m).value] += 1
        return HealthTally(**counts)


_default_classifier = HealthClassifier()


def classify(m: CampaignMetrics) -> HealthState:
    """Classify one record with the default threshold policy."""
    return _default_classifier.classify(m)


def tally_health(records: Iterable[CampaignMetrics]) -> HealthTally:
    """Count records per health state with the default policy."""
    return _default_classifier.tally(records)
