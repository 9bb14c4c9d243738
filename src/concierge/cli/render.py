"""Terminal renderer for call sessions."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from datetime import datetime

from prompt_toolkit import PromptSession
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from concierge.orders import OrderRecord
from concierge.session import CallSession
from concierge.types import Author, CallState, DialogueContext, Turn

_AUTHOR_STYLES = {
    Author.CUSTOMER: "bold cyan",
    Author.AGENT: "bold yellow",
    Author.SYSTEM: "dim",
}
_STATE_STYLES = {
    CallState.IDLE: "white",
    CallState.CONNECTING: "yellow",
    CallState.ACTIVE: "green",
    CallState.ENDED: "red",
}


def author_label(author: Author, agent_name: str) -> str:
    if author is Author.CUSTOMER:
        return "Customer"
    if author is Author.AGENT:
        return agent_name
    return "System"


def format_timestamp(value: datetime) -> str:
    return value.astimezone().strftime("%H:%M")


class Renderer:
    """CLI renderer using Rich for terminal output."""

    def __init__(self, agent_name: str, *, console: Console | None = None) -> None:
        self.console = console or Console()
        self.agent_name = agent_name
        self._prompt_session: PromptSession[str] | None = None
        self._print_lock = threading.Lock()
        self._escalation_shown = False

    def attach(self, session: CallSession) -> list[Callable[[], None]]:
        """Subscribe to the session's signals; returns the unsubscribe callbacks."""
        signals = session.signals
        notice = session.settings.escalation_notice
        return [
            signals.subscribe(signals.turn_appended, self.turn),
            signals.subscribe(signals.state_changed, self.state),
            signals.subscribe(signals.follow_ups_changed, self.follow_ups),
            signals.subscribe(signals.partial_changed, self.partial),
            signals.subscribe(signals.context_changed, lambda context: self.context(context, notice)),
            signals.subscribe(signals.transcript_cleared, self.cleared),
        ]

    def welcome(self, brand_name: str) -> None:
        self._print(f"[bold blue]{escape(brand_name)}[/bold blue] - live support console")
        self._print("[dim]Commands: /start /end /reset /orders /status /quit[/dim]")

    def turn(self, turn: Turn) -> None:
        style = _AUTHOR_STYLES[turn.author]
        label = author_label(turn.author, self.agent_name)
        self._print(
            f"[dim]{format_timestamp(turn.timestamp)}[/dim] [{style}]{escape(label)}:[/{style}] {escape(turn.text)}"
        )

    def state(self, state: CallState) -> None:
        style = _STATE_STYLES[state]
        self._print(f"[{style}]● {state.label}[/{style}]")

    def follow_ups(self, prompts: tuple[str, ...]) -> None:
        if not prompts:
            return
        self._print("[bold]Suggested follow-ups[/bold]")
        for prompt in prompts:
            self._print(f"  - {escape(prompt)}")

    def partial(self, text: str) -> None:
        if text:
            self._print(f"[italic dim]Listening… {escape(text)}[/italic dim]")

    def context(self, context: DialogueContext, notice: str) -> None:
        if context.escalation_requested and not self._escalation_shown:
            self._print(f"[bold magenta]{escape(notice)}[/bold magenta]")
        self._escalation_shown = context.escalation_requested

    def cleared(self) -> None:
        self.console.rule("[dim]new session[/dim]")

    def orders(self, records: Iterable[OrderRecord]) -> None:
        table = Table(title="Recent Orders")
        table.add_column("Order")
        table.add_column("Status")
        table.add_column("Customer")
        table.add_column("Placed")
        table.add_column("Items")
        table.add_column("ETA")
        table.add_column("Notes")
        rows = 0
        for record in records:
            items = ", ".join(f"{item.name} ×{item.quantity}" for item in record.items)
            table.add_row(
                record.order_id,
                record.status,
                record.customer_name,
                record.placed_on.isoformat(),
                items,
                record.eta or "-",
                record.notes or "-",
            )
            rows += 1
        if rows == 0:
            self._print("[dim]No orders loaded.[/dim]")
            return
        with self._print_lock:
            self.console.print(table)

    def info(self, message: str) -> None:
        self._print(message)

    def warning(self, message: str) -> None:
        self._print(f"[yellow]{escape(message)}[/yellow]")

    def error(self, message: str) -> None:
        self._print(f"[bold red]Error:[/bold red] {escape(message)}")

    async def get_user_input(self, state: CallState) -> str:
        if self._prompt_session is None:
            self._prompt_session = PromptSession()
        with patch_stdout(raw=True):
            return await self._prompt_session.prompt_async(f"[{state.label}] > ")

    def _print(self, message: str) -> None:
        with self._print_lock:
            self.console.print(message)


def create_cli_renderer(agent_name: str) -> Renderer:
    """Create and return a Renderer instance."""
    return Renderer(agent_name)
