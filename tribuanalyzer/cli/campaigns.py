"""
Campaign CLI Commands

Show normalized campaign metrics, health badges, and account totals.
"""

import click
from rich.console import Console
from rich.table import Table

from ..services.campaign_metrics.health_classifier import HealthClassifier
from ..services.models import AccountSnapshot, HealthState
from .options import load_snapshot, snapshot_options

HEALTH_BADGES = {
    HealthState.GREEN: "[green]● escalar[/green]",
    HealthState.YELLOW: "[yellow]● optimizar[/yellow]",
    HealthState.RED: "[red]● revisar[/red]",
    HealthState.GRAY: "[dim]● sin datos[/dim]",
}

CURRENCY_SYMBOLS = {
    "USD": "$", "CRC": "₡", "MXN": "MX$", "COP": "COL$", "EUR": "€",
    "GBP": "£", "ARS": "AR$", "BRL": "R$", "CLP": "CL$", "PEN": "S/",
}


@click.group(name='campaigns')
def campaigns_group():
    """Campaign metrics commands"""
    pass


def currency_symbol(currency: str) -> str:
    """Display symbol for an ISO currency code ('$' when unknown)."""
    return CURRENCY_SYMBOLS.get((currency or "").upper(), "$")


def roas_style(roas: float) -> str:
    if roas >= 2:
        return "green"
    if roas >= 1:
        return "yellow"
    return "red"


def ctr_style(ctr: float) -> str:
    if ctr >= 1.5:
        return "green"
    if ctr >= 0.8:
        return "yellow"
    return "red"


def build_campaign_table(snapshot: AccountSnapshot, classifier: HealthClassifier) -> Table:
    symbol = currency_symbol(snapshot.currency)
    table = Table(title=f"Campañas · {snapshot.window_label} · {snapshot.currency}")
    table.add_column("Campaña")
    table.add_column("Estado")
    table.add_column("Salud")
    table.add_column("Gasto", justify="right")
    table.add_column("Impr.", justify="right")
    table.add_column("CTR %", justify="right")
    table.add_column("Frec.", justify="right")
    table.add_column("ATC", justify="right")
    table.add_column("IC", justify="right")
    table.add_column("Compras", justify="right")
    table.add_column("Revenue", justify="right")
    table.add_column("ROAS", justify="right")
    table.add_column("CPA", justify="right")

    for m in snapshot.campaigns:
        table.add_row(
            m.name,
            m.status.value,
            HEALTH_BADGES[classifier.classify(m)],
            f"{symbol}{m.spend:,.2f}",
            f"{m.impressions:,}",
            f"[{ctr_style(m.ctr)}]{m.ctr:.2f}[/{ctr_style(m.ctr)}]",
            f"{m.frequency:.2f}",
            str(m.add_to_cart),
            str(m.initiate_checkout),
            str(m.purchases),
            f"[green]{symbol}{m.revenue:,.2f}[/green]",
            f"[{roas_style(m.roas)}]{m.roas:.2f}x[/{roas_style(m.roas)}]",
            f"{symbol}{m.cpa:,.2f}" if m.cpa is not None else "-",
        )
    return table


def render_totals(console: Console, snapshot: AccountSnapshot) -> None:
    totals = snapshot.totals
    symbol = currency_symbol(snapshot.currency)
    health = totals.health
    roas = roas_style(totals.roas_general)
    ctr = ctr_style(totals.ctr_average)
    console.print(
        f"[bold]Totales ({totals.status_filter.value})[/bold]  "
        f"Campañas: {totals.campaign_count} ({totals.active_count} activas)  "
        f"Gasto: {symbol}{totals.spend:,.0f}  "
        f"Revenue: [green]{symbol}{totals.revenue:,.0f}[/green]  "
        f"ROAS: [{roas}]{totals.roas_general:.2f}x[/{roas}]  "
        f"CPA: {symbol}{totals.cpa_general:,.2f}  "
        f"CTR prom.: [{ctr}]{totals.ctr_average:.2f}%[/{ctr}]"
    )
    console.print(
        f"Embudo: {totals.add_to_cart} ATC → {totals.initiate_checkout} IC → {totals.purchases} compras  |  "
        f"{HEALTH_BADGES[HealthState.GREEN]} {health.green}  "
        f"{HEALTH_BADGES[HealthState.YELLOW]} {health.yellow}  "
        f"{HEALTH_BADGES[HealthState.RED]} {health.red}  "
        f"{HEALTH_BADGES[HealthState.GRAY]} {health.gray}"
    )


@campaigns_group.command(name='show')
@snapshot_options
def show(payload: str, status: str, preset, currency):
    """
    Show campaign metrics and health for a payload file

    Example:
        tribuanalyzer campaigns show campaigns.json --status ACTIVE --preset last_14d
    """
    console = Console()
    snapshot = load_snapshot(payload, status, preset, currency)

    if not snapshot.campaigns:
        console.print("[yellow]No hay campañas para este filtro.[/yellow]")
        return

    console.print(build_campaign_table(snapshot, HealthClassifier()))
    render_totals(console, snapshot)
