"""
Main CLI entry point for TribuAnalyzer
"""

import logging

import click

from .. import __version__
from ..core.observability import setup_logfire
from .advisor import advisor_group
from .campaigns import campaigns_group


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose: bool):
    """
    TribuAnalyzer - Meta Ads diagnostics with an AI media buyer

    Normalize campaign insights, classify campaign health, and ask the
    advisor what to scale, fix, or pause.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(asctime)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    setup_logfire()


# Register command groups
cli.add_command(campaigns_group)
cli.add_command(advisor_group)


if __name__ == '__main__':
    cli()
