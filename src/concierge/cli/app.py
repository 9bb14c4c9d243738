"""CLI main module for the concierge call console."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import NoReturn, Optional

import typer

from concierge.cli.console import CallConsole
from concierge.cli.render import create_cli_renderer
from concierge.collaborators import LoggingPlayback, OpenDevice, ScriptedInputFactory
from concierge.config import Settings, load_settings
from concierge.dialogue import evaluate
from concierge.errors import ConciergeError
from concierge.logging_utils import configure_logging
from concierge.orders import StaticOrderProvider
from concierge.session import CallSession
from concierge.types import DialogueContext

app = typer.Typer(
    name="concierge",
    help="Live customer-support call console.",
    add_completion=False,
    rich_markup_mode="rich",
)


def _exit_with_error(message: str) -> NoReturn:
    create_cli_renderer("-").error(message)
    raise typer.Exit(1)


def _load(orders: Optional[Path], log_level: Optional[str]) -> tuple[Settings, StaticOrderProvider]:
    try:
        settings = load_settings(orders_path=orders, log_level=log_level)
        provider = (
            StaticOrderProvider.from_file(settings.orders_path) if settings.orders_path else StaticOrderProvider()
        )
    except ConciergeError as exc:
        _exit_with_error(str(exc))
    return settings, provider


@app.command()
def call(
    script: Optional[Path] = typer.Option(None, "--script", help="Replay lines of this file as recognized speech"),
    interval: float = typer.Option(1.0, "--interval", min=0, help="Seconds between scripted utterances"),
    orders: Optional[Path] = typer.Option(None, "--orders", help="YAML or JSON order dataset"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level override"),
) -> None:
    """Run an interactive support call in the terminal."""
    settings, provider = _load(orders, log_level)
    configure_logging(profile="console", level=settings.log_level)

    input_factory = None
    if script is not None:
        try:
            input_factory = ScriptedInputFactory.from_file(script, interval_seconds=interval)
        except OSError as exc:
            _exit_with_error(f"cannot read script {script}: {exc}")

    session = CallSession(
        OpenDevice(),
        settings=settings,
        input_factory=input_factory,
        playback=LoggingPlayback(),
    )
    console = CallConsole(session, create_cli_renderer(settings.agent_name), provider)
    asyncio.run(console.run())


@app.command()
def reply(
    text: str = typer.Argument(..., help="Customer utterance to evaluate"),
    escalated: bool = typer.Option(False, "--escalated", help="Evaluate against an already escalated context"),
) -> None:
    """Show the agent reply for one utterance."""
    utterance = text.strip()
    if not utterance:
        _exit_with_error("utterance must not be blank")

    outcome = evaluate(utterance, DialogueContext(escalation_requested=escalated))
    renderer = create_cli_renderer("-")
    renderer.info(f"[bold]intent:[/bold] {outcome.intent}")
    renderer.info(f"[bold]reply:[/bold] {outcome.message}")
    renderer.info(f"[bold]escalated:[/bold] {outcome.updated_context.escalation_requested}")
    renderer.follow_ups(outcome.follow_up_prompts)


@app.command("orders")
def orders_command(
    orders: Optional[Path] = typer.Option(None, "--orders", help="YAML or JSON order dataset"),
) -> None:
    """Render the order dataset."""
    settings, provider = _load(orders, None)
    create_cli_renderer(settings.agent_name).orders(provider.orders())
