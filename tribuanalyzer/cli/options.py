"""
Shared CLI options and snapshot loading.
"""

from typing import Optional

import click

from ..services.campaign_metrics.metrics_service import CampaignMetricsService
from ..services.campaign_metrics.payload_loader import load_payload
from ..services.models import AccountSnapshot, DatePreset, StatusFilter


def snapshot_options(func):
    """Attach PAYLOAD, --status, --preset and --currency to a command."""
    func = click.option(
        '--currency',
        default=None,
        help='Currency code (default: payload currency or DEFAULT_CURRENCY)'
    )(func)
    func = click.option(
        '--preset',
        type=click.Choice([p.value for p in DatePreset]),
        default=None,
        help='Date preset the payload was fetched for (default: DEFAULT_DATE_PRESET)'
    )(func)
    func = click.option(
        '--status',
        type=click.Choice([s.value for s in StatusFilter], case_sensitive=False),
        default=StatusFilter.ALL.value,
        help='Only include campaigns with this status (default: ALL)'
    )(func)
    func = click.argument('payload', type=click.Path(exists=True, dir_okay=False))(func)
    return func


def load_snapshot(payload: str, status: str, preset: Optional[str], currency: Optional[str]) -> AccountSnapshot:
    """Load a payload file and build the snapshot for the requested filter."""
    try:
        raw = load_payload(payload)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='PAYLOAD')

    service = CampaignMetricsService()
    return service.build_snapshot(
        raw,
        status_filter=status.upper(),
        date_preset=preset,
        currency=currency,
    )
