"""
TribuAnalyzer - Meta Ads performance diagnostics with an AI media-buyer advisor

Normalizes Meta Ads insights into canonical campaign metrics, classifies
campaign health, aggregates account totals, and streams recommendations
from a language model with ordered fallback across model variants.
"""

__version__ = "1.0.0"
__author__ = "TribuAnalyzer Team"
