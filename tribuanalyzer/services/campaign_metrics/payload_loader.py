"""Reads already-fetched Meta campaign payloads from disk.

Accepted shapes (Graph API style):

    {"currency": "USD", "data": [campaign, ...]}
    [campaign, ...]

where each campaign is {"id", "name", "status", "insights"} and insights is
either the /insights edge response ({"data": [row]}), a bare row, or null.
Only the first insights row is used.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class RawCampaign(BaseModel):
    """One campaign as delivered by the payload source."""

    descriptor: Dict[str, Any]
    insights: Optional[Dict[str, Any]] = None


class CampaignPayload(BaseModel):
    campaigns: List[RawCampaign] = Field(default_factory=list)
    currency: Optional[str] = None


def first_insights_row(insights: Any) -> Optional[Dict[str, Any]]:
    """Unwrap an /insights edge response to its first row (None if empty)."""
    if not insights or not isinstance(insights, dict):
        return None
    if "data" in insights:
        rows = insights.get("data")
        if isinstance(rows, list) and rows and isinstance(rows[0], dict):
            return rows[0]
        return None
    return insights


def _split_campaign(entry: Dict[str, Any]) -> RawCampaign:
    descriptor = {k: entry.get(k) for k in ("id", "name", "status")}
    return RawCampaign(descriptor=descriptor, insights=first_insights_row(entry.get("insights")))


def parse_payload(raw: Union[Dict[str, Any], List[Any]]) -> CampaignPayload:
    """
    Parse a decoded JSON payload into descriptors + insights rows.

    Raises:
        ValueError: If the document is neither an object nor a list.
    """
    currency = None
    if isinstance(raw, dict):
        currency = raw.get("currency")
        entries = raw.get("data") or raw.get("campaigns") or []
    elif isinstance(raw, list):
        entries = raw
    else:
        raise ValueError(f"Unsupported payload type: {type(raw).__name__}")

    campaigns: List[RawCampaign] = []
    skipped = 0
    for entry in entries:
        if isinstance(entry, dict):
            campaigns.append(_split_campaign(entry))
        else:
            skipped += 1

    if skipped:
        logger.warning(f"Skipped {skipped} non-object campaign entries")

    logger.info(f"Loaded {len(campaigns)} campaigns from payload")
    return CampaignPayload(campaigns=campaigns, currency=currency)


def load_payload(path: Union[str, Path]) -> CampaignPayload:
    """Load and parse a payload JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    return parse_payload(raw)


def iter_pairs(payload: CampaignPayload) -> List[Tuple[Dict[str, Any], Optional[Dict[str, Any]]]]:
    return [(c.descriptor, c.insights) for c in payload.campaigns]
