"""
Tests for advisory prompt construction.

Prompts are plain text, so these check the account context block, the
per-campaign JSON rows, and the diagnostic pre-classification.
"""

import json

import pytest

from tribuanalyzer.services.advisory.prompts import (
    CHAT_SYSTEM_PROMPT,
    DIAGNOSTIC_SECTIONS,
    DIAGNOSTIC_SYSTEM_PROMPT,
    INSUFFICIENT_DATA_NOTE,
    build_campaign_context,
    build_chat_system_prompt,
    build_diagnostic_prompt,
    campaign_row,
)
from tribuanalyzer.services.campaign_metrics.aggregator import aggregate
from tribuanalyzer.services.models import (
    AccountSnapshot,
    CampaignMetrics,
    CampaignStatus,
    HealthState,
)


def _snapshot(campaigns, **kwargs):
    return AccountSnapshot(totals=aggregate(campaigns), campaigns=campaigns, **kwargs)


@pytest.fixture
def winner():
    return CampaignMetrics(
        name="Lookalike 1%", status=CampaignStatus.ACTIVE, spend=120.0, impressions=15000,
        ctr=2.2, frequency=1.6, add_to_cart=30, initiate_checkout=15, purchases=6,
        revenue=420.0, roas=3.5,
    )


@pytest.fixture
def loser():
    return CampaignMetrics(
        name="Broad Video", status=CampaignStatus.ACTIVE, spend=90.0, impressions=30000,
        ctr=0.6, frequency=5.5, purchases=0, revenue=0.0, roas=0.0,
    )


class TestCampaignRow:
    def test_spanish_keys_and_rounding(self, winner):
        row = campaign_row(winner, HealthState.GREEN)
        assert row["nombre"] == "Lookalike 1%"
        assert row["estado"] == "ACTIVE"
        assert row["salud"] == "green"
        assert row["roas"] == 3.5
        assert row["cpa"] == 20.0
        assert row["añadidos_carrito"] == 30
        assert row["pagos_iniciados"] == 15

    def test_missing_cpa_is_null(self, loser):
        row = campaign_row(loser, HealthState.RED)
        assert row["cpa"] is None


class TestChatPrompt:
    def test_empty_snapshot_has_no_context(self):
        snapshot = _snapshot([])
        assert build_campaign_context(snapshot) == ""
        assert build_chat_system_prompt(snapshot) == CHAT_SYSTEM_PROMPT

    def test_context_block(self, winner, loser):
        snapshot = _snapshot([winner, loser], currency="MXN", date_preset="last_14d")
        prompt = build_chat_system_prompt(snapshot)
        assert prompt.startswith(CHAT_SYSTEM_PROMPT)
        assert "## Datos de la cuenta de Meta Ads del usuario:" in prompt
        assert "- Moneda: MXN" in prompt
        assert "- Período: Últimos 14 días" in prompt
        assert "- Total de campañas: 2 (2 activas)" in prompt
        assert "- Gasto total: 210.00 MXN" in prompt
        assert "- ROAS general: 2.00x" in prompt

    def test_context_json_is_parseable(self, winner, loser):
        context = build_campaign_context(_snapshot([winner, loser]))
        rows = json.loads(context.split("**Datos por campaña:**\n", 1)[1])
        assert [r["nombre"] for r in rows] == ["Lookalike 1%", "Broad Video"]
        assert [r["salud"] for r in rows] == ["green", "red"]

    def test_persona_and_language_rules(self):
        assert "Media Buyer Senior" in CHAT_SYSTEM_PROMPT
        assert "Responde SIEMPRE en español" in CHAT_SYSTEM_PROMPT


class TestDiagnosticPrompt:
    def test_system_prompt_lists_sections_in_order(self):
        positions = [DIAGNOSTIC_SYSTEM_PROMPT.index(title) for title in DIAGNOSTIC_SECTIONS]
        assert positions == sorted(positions)
        assert len(DIAGNOSTIC_SECTIONS) == 6

    def test_system_prompt_names_insufficient_data_note(self):
        assert INSUFFICIENT_DATA_NOTE in DIAGNOSTIC_SYSTEM_PROMPT

    def test_pre_classification(self, winner, loser):
        prompt = build_diagnostic_prompt(_snapshot([winner, loser]))
        assert prompt.startswith("Analiza estas campañas de Meta Ads.")
        assert "- Candidatas a escalar (🟢): Lookalike 1%" in prompt
        assert "- Candidatas a apagar/revisar (🔴): Broad Video" in prompt
        assert "- Señales de fatiga: Broad Video" in prompt

    def test_empty_buckets_are_marked(self, winner):
        prompt = build_diagnostic_prompt(_snapshot([winner]))
        assert f"- Candidatas a optimizar (🟡): {INSUFFICIENT_DATA_NOTE}" in prompt
        assert f"- Sin actividad (⚪): {INSUFFICIENT_DATA_NOTE}" in prompt
