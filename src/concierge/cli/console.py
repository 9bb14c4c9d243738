"""Interactive call console."""

from __future__ import annotations

from loguru import logger

from concierge.cli.render import Renderer
from concierge.orders import OrderProvider
from concierge.session import CallSession
from concierge.types import CallState

QUIT_COMMANDS = {"/quit", "/exit", "/q"}


class CallConsole:
    """Drive one call session from typed terminal input."""

    def __init__(self, session: CallSession, renderer: Renderer, orders: OrderProvider) -> None:
        self.session = session
        self.renderer = renderer
        self.orders = orders

    async def run(self) -> None:
        self.renderer.welcome(self.session.settings.brand_name)
        for turn in self.session.transcript.all():
            self.renderer.turn(turn)
        if not self.session.speech_available:
            self.renderer.warning(self.session.settings.speech_unavailable_notice)

        unsubscribe = self.renderer.attach(self.session)
        try:
            async with self.session:
                while True:
                    try:
                        line = await self.renderer.get_user_input(self.session.state)
                    except (KeyboardInterrupt, EOFError):
                        break
                    if not await self.handle_line(line):
                        break
        finally:
            for callback in unsubscribe:
                callback()
        logger.info("console.exit")

    async def handle_line(self, line: str) -> bool:
        """Handle one input line; returns False when the console should exit."""
        command = line.strip()
        if not command:
            return True
        if command.lower() in QUIT_COMMANDS:
            self.session.end()
            return False
        if command == "/start":
            await self.session.start()
        elif command == "/end":
            self.session.end()
        elif command == "/reset":
            self.session.reset()
        elif command == "/orders":
            self.renderer.orders(self.orders.orders())
        elif command == "/status":
            self._status()
        elif command.startswith("/"):
            self.renderer.warning(f"Unknown command: {command}")
        elif self.session.state is not CallState.ACTIVE:
            self.renderer.warning("No call in progress. Use /start to begin.")
        else:
            self.session.submit(command)
        return True

    def _status(self) -> None:
        context = self.session.context
        self.renderer.state(self.session.state)
        self.renderer.info(
            f"turns={len(self.session.transcript)} intent={context.last_intent or '-'} "
            f"escalated={context.escalation_requested}"
        )
        notice = self.session.escalation_notice
        if notice:
            self.renderer.warning(notice)
