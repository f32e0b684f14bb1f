"""
CLI Advisor Commands - one-shot diagnostic and interactive chat.

The chat REPL streams replies as they arrive; Ctrl-C while a reply is
streaming cancels that reply only.
"""

import asyncio
import logging
import signal

import click
from rich.console import Console
from rich.live import Live
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt

from ..services.advisory import (
    AdvisoryPipeline,
    AdvisorySession,
    AdvisoryState,
    AdvisoryStream,
    InsufficientDataError,
)
from ..services.models import AccountSnapshot
from .options import load_snapshot, snapshot_options

logger = logging.getLogger(__name__)


@click.group(name='advisor')
def advisor_group():
    """AI media-buyer advisor commands"""
    pass


@advisor_group.command(name='diagnose')
@snapshot_options
def diagnose(payload: str, status: str, preset, currency):
    """
    Full account diagnostic (six fixed sections)

    Example:
        tribuanalyzer advisor diagnose campaigns.json --preset last_30d
    """
    console = Console()
    snapshot = load_snapshot(payload, status, preset, currency)

    try:
        pipeline = AdvisoryPipeline.from_config()
        with console.status("[cyan]Analizando campañas...[/cyan]"):
            text = asyncio.run(pipeline.run_diagnostic(snapshot))
    except InsufficientDataError as e:
        console.print(f"[yellow]{e}[/yellow]")
        return

    console.print(Panel(Markdown(text), title="Diagnóstico", border_style="cyan"))


@advisor_group.command(name='chat')
@snapshot_options
def chat(payload: str, status: str, preset, currency):
    """
    Interactive chat with the media-buyer advisor

    Examples:
        tribuanalyzer advisor chat campaigns.json
        tribuanalyzer advisor chat campaigns.json --status ACTIVE
    """
    snapshot = load_snapshot(payload, status, preset, currency)
    asyncio.run(run_chat_loop(snapshot))


async def stream_reply(console: Console, stream: AdvisoryStream) -> None:
    """
    Render the reply in place as chunks arrive.

    The live region always shows stream.text, which holds only the current
    attempt, so a fallback replaces the failed model's partial output
    instead of appending to it.
    """
    with Live(Markdown(""), console=console, refresh_per_second=8) as live:
        async for chunk in stream:
            if chunk.restart:
                logger.info("Advisory restarted on another model, clearing partial reply")
            live.update(Markdown(stream.text))


async def run_chat_loop(snapshot: AccountSnapshot):
    """
    Main chat loop - handles user input and streamed advisor replies.

    Args:
        snapshot: Account snapshot the conversation is about
    """
    console = Console()
    pipeline = AdvisoryPipeline.from_config()
    session = AdvisorySession(pipeline, snapshot)
    loop = asyncio.get_running_loop()

    console.print(Panel(
        f"[bold cyan]Consultor IA · TribuAnalyzer Pro[/bold cyan]\n"
        f"Campañas: {snapshot.totals.campaign_count} · {snapshot.window_label} · {snapshot.currency}\n"
        f"Modelos: {', '.join(pipeline.models)}\n\n"
        f"Escribe tu pregunta, 'help' para ayuda o 'quit' para salir.",
        title="Bienvenido",
        border_style="cyan"
    ))

    while True:
        try:
            user_input = await asyncio.to_thread(Prompt.ask, "\n[bold green]Tú[/bold green]")
        except (KeyboardInterrupt, EOFError):
            console.print("\n[yellow]¡Hasta luego![/yellow]")
            break

        command = user_input.strip().lower()
        if command in ['quit', 'exit', 'q']:
            console.print("[yellow]¡Hasta luego![/yellow]")
            break

        if command in ['help', '?']:
            show_help(console)
            continue

        if command in ['clear', 'reset']:
            session.clear()
            console.clear()
            console.print("[cyan]Historial de conversación borrado.[/cyan]")
            continue

        if not command:
            continue

        try:
            stream = session.ask(user_input)
        except InsufficientDataError as e:
            console.print(f"[yellow]{e}[/yellow]")
            continue

        console.print("\n[bold cyan]Consultor[/bold cyan]:")
        try:
            loop.add_signal_handler(signal.SIGINT, stream.cancel)
            handler_installed = True
        except (NotImplementedError, RuntimeError):
            handler_installed = False

        try:
            await stream_reply(console, stream)
        finally:
            if handler_installed:
                loop.remove_signal_handler(signal.SIGINT)

        if stream.state is AdvisoryState.CANCELLED:
            console.print("[yellow]Respuesta cancelada.[/yellow]")
        session.record_reply(stream)


def show_help(console: Console):
    """Display help information."""
    help_text = """
**Comandos disponibles:**

- `help` o `?` - Muestra esta ayuda
- `clear` o `reset` - Borra el historial de la conversación
- `quit`, `exit` o `q` - Salir
- `Ctrl-C` mientras responde - Cancela la respuesta en curso

**Preguntas de ejemplo:**

- "Dame el diagnóstico completo"
- "¿Qué campañas debería escalar?"
- "¿Por qué baja el ROAS de mi campaña de remarketing?"
- "¿Dónde se cae el embudo ATC → IC → Compra?"
    """
    console.print(Panel(
        Markdown(help_text),
        title="Ayuda",
        border_style="yellow"
    ))
