"""
Tests for the tribuanalyzer CLI (campaigns show, advisor diagnose).

The advisor pipeline is patched with a scripted backend; no model is called.
"""

import io
import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner
from rich.console import Console

from tribuanalyzer import __version__
from tribuanalyzer.cli.advisor import stream_reply
from tribuanalyzer.cli.campaigns import build_campaign_table, ctr_style, currency_symbol, roas_style
from tribuanalyzer.cli.main import cli
from tribuanalyzer.services.advisory.models import AdvisoryRequest, AdvisoryState, ConversationMessage
from tribuanalyzer.services.advisory.pipeline import AdvisoryPipeline
from tribuanalyzer.services.campaign_metrics.aggregator import aggregate
from tribuanalyzer.services.campaign_metrics.health_classifier import HealthClassifier
from tribuanalyzer.services.models import AccountSnapshot, CampaignMetrics, CampaignStatus

# Wide terminal so rich tables are not folded
WIDE = {"COLUMNS": "300"}


@pytest.fixture
def payload_file(tmp_path):
    payload = {
        "currency": "USD",
        "data": [
            {
                "id": "1",
                "name": "Prospecting",
                "status": "ACTIVE",
                "insights": {"data": [{
                    "spend": "100",
                    "impressions": "10000",
                    "ctr": "2.0",
                    "frequency": "1.5",
                    "actions": [{"action_type": "purchase", "value": "5"}],
                    "action_values": [{"action_type": "purchase", "value": "300"}],
                }]},
            },
            {"id": "2", "name": "Summer Sale", "status": "PAUSED", "insights": None},
        ],
    }
    path = tmp_path / "campaigns.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def _scripted_pipeline(chunks):
    async def backend(model_id, system_prompt, messages):
        for chunk in chunks:
            yield chunk

    return AdvisoryPipeline(backend=backend, models=["m"], attempt_timeout=5.0, request_timeout=10.0)


class TestMainGroup:
    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "campaigns" in result.output
        assert "advisor" in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestCampaignsShow:
    def test_table_and_totals(self, payload_file):
        result = CliRunner().invoke(cli, ["campaigns", "show", payload_file], env=WIDE)
        assert result.exit_code == 0, result.output
        assert "Prospecting" in result.output
        assert "Summer Sale" in result.output
        assert "Campañas: 2 (1 activas)" in result.output
        assert "ROAS: 3.00x" in result.output

    def test_status_filter(self, payload_file):
        result = CliRunner().invoke(cli, ["campaigns", "show", payload_file, "--status", "paused"], env=WIDE)
        assert result.exit_code == 0, result.output
        assert "Summer Sale" in result.output
        assert "Prospecting" not in result.output

    def test_empty_filter(self, payload_file):
        result = CliRunner().invoke(cli, ["campaigns", "show", payload_file, "--status", "DELETED"], env=WIDE)
        assert result.exit_code == 0
        assert "No hay campañas para este filtro." in result.output

    def test_invalid_payload(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("42", encoding="utf-8")
        result = CliRunner().invoke(cli, ["campaigns", "show", str(path)], env=WIDE)
        assert result.exit_code != 0


class TestAdvisorDiagnose:
    def test_prints_diagnostic(self, payload_file):
        pipeline = _scripted_pipeline(["Resumen Ejecutivo: ", "escala Prospecting."])
        with patch("tribuanalyzer.cli.advisor.AdvisoryPipeline.from_config", return_value=pipeline):
            result = CliRunner().invoke(cli, ["advisor", "diagnose", payload_file], env=WIDE)

        assert result.exit_code == 0, result.output
        assert "escala Prospecting." in result.output

    def test_no_campaigns(self, payload_file):
        pipeline = _scripted_pipeline(["nunca"])
        with patch("tribuanalyzer.cli.advisor.AdvisoryPipeline.from_config", return_value=pipeline):
            result = CliRunner().invoke(
                cli, ["advisor", "diagnose", payload_file, "--status", "ARCHIVED"], env=WIDE
            )

        assert result.exit_code == 0
        assert "No hay campañas para analizar" in result.output
        assert "nunca" not in result.output


def _recording_console():
    return Console(record=True, file=io.StringIO(), width=120)


def _fail_then_succeed_pipeline(second):
    async def backend(model_id, system_prompt, messages):
        if model_id == "a":
            yield "PARCIAL_DEL_PRIMERO "
            raise RuntimeError("stream cut")
        for step in second:
            if isinstance(step, BaseException):
                raise step
            yield step

    return AdvisoryPipeline(backend=backend, models=["a", "b"], attempt_timeout=5.0, request_timeout=10.0)


def _request(text="¿Qué escalo?"):
    snapshot = AccountSnapshot(totals=aggregate([]))
    return AdvisoryRequest(
        conversation_history=[ConversationMessage(role="user", content=text)],
        snapshot=snapshot,
    )


class TestStreamReply:
    """Chat rendering of restarts and failures."""

    @pytest.mark.asyncio
    async def test_restart_replaces_partial_reply(self):
        console = _recording_console()
        stream = _fail_then_succeed_pipeline(["respuesta ", "del segundo"]).run_advisory(_request())

        await stream_reply(console, stream)

        out = console.export_text()
        assert "PARCIAL_DEL_PRIMERO" not in out
        assert "respuesta del segundo" in out
        assert stream.state == AdvisoryState.COMPLETED

    @pytest.mark.asyncio
    async def test_exhaustion_shows_only_failure_message(self):
        console = _recording_console()
        stream = _fail_then_succeed_pipeline([RuntimeError("down")]).run_advisory(_request())

        await stream_reply(console, stream)

        out = console.export_text()
        assert "PARCIAL_DEL_PRIMERO" not in out
        assert "Error del asistente" in out
        assert stream.state == AdvisoryState.FAILED


class TestCurrencyAndTiers:
    def test_currency_symbols(self):
        assert currency_symbol("MXN") == "MX$"
        assert currency_symbol("crc") == "₡"
        assert currency_symbol("PEN") == "S/"

    def test_unknown_currency_falls_back_to_dollar(self):
        assert currency_symbol("JPY") == "$"
        assert currency_symbol("") == "$"

    @pytest.mark.parametrize("roas,style", [(2.0, "green"), (1.99, "yellow"), (1.0, "yellow"), (0.99, "red")])
    def test_roas_tiers(self, roas, style):
        assert roas_style(roas) == style

    @pytest.mark.parametrize("ctr,style", [(1.5, "green"), (1.49, "yellow"), (0.8, "yellow"), (0.79, "red")])
    def test_ctr_tiers(self, ctr, style):
        assert ctr_style(ctr) == style

    def test_table_cells_use_symbol_and_tiers(self):
        campaign = CampaignMetrics(
            name="Lookalike", status=CampaignStatus.ACTIVE, spend=100.0, impressions=10000,
            ctr=1.0, frequency=1.2, purchases=4, revenue=50.0, roas=0.5,
        )
        snapshot = AccountSnapshot(totals=aggregate([campaign]), campaigns=[campaign], currency="MXN")

        table = build_campaign_table(snapshot, HealthClassifier())
        cells = {column.header: column._cells[0] for column in table.columns}

        assert cells["Gasto"] == "MX$100.00"
        assert cells["CTR %"] == "[yellow]1.00[/yellow]"
        assert cells["ROAS"] == "[red]0.50x[/red]"
        assert cells["CPA"] == "MX$25.00"

    def test_show_uses_currency_symbol(self, payload_file):
        result = CliRunner().invoke(
            cli, ["campaigns", "show", payload_file, "--currency", "MXN"], env=WIDE
        )
        assert result.exit_code == 0, result.output
        assert "MX$100.00" in result.output
        assert "Gasto: MX$100" in result.output
