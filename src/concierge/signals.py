"""Signal hub the rendering layer subscribes to."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeAlias

from blinker import Signal
from loguru import logger

Receiver: TypeAlias = Callable[..., None]


class SessionSignals:
    """Per-session blinker signals.

    Every signal is sent with the session as sender and one keyword payload:
    ``state``, ``turn``, ``prompts``, ``text`` or ``context``.
    ``transcript_cleared`` carries no payload.
    """

    def __init__(self) -> None:
        self.state_changed = Signal("concierge.state_changed")
        self.turn_appended = Signal("concierge.turn_appended")
        self.follow_ups_changed = Signal("concierge.follow_ups_changed")
        self.partial_changed = Signal("concierge.partial_changed")
        self.context_changed = Signal("concierge.context_changed")
        self.transcript_cleared = Signal("concierge.transcript_cleared")

    def subscribe(self, signal: Signal, receiver: Receiver) -> Callable[[], None]:
        def _receiver(sender: Any, **payload: Any) -> None:
            receiver(**payload)

        signal.connect(_receiver, weak=False)
        return lambda: signal.disconnect(_receiver)

    def emit(self, signal: Signal, sender: Any, **payload: Any) -> None:
        try:
            signal.send(sender, **payload)
        except Exception:
            # A broken renderer must not take the call down with it.
            logger.exception("signal.receiver.error signal={}", signal.name)
