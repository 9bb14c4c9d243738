"""Core data model shared by the transcript, evaluator and session."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum


class Author(StrEnum):
    CUSTOMER = "customer"
    AGENT = "agent"
    SYSTEM = "system"


class CallState(StrEnum):
    IDLE = "idle"
    CONNECTING = "connecting"
    ACTIVE = "active"
    ENDED = "ended"

    @property
    def label(self) -> str:
        return _STATE_LABELS[self]


_STATE_LABELS = {
    CallState.IDLE: "Idle",
    CallState.CONNECTING: "Connecting",
    CallState.ACTIVE: "On Call",
    CallState.ENDED: "Call Ended",
}


@dataclass(frozen=True)
class Turn:
    """One authored message in the call transcript."""

    turn_id: str
    author: Author
    text: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True)
class DialogueContext:
    """Accumulated per-call state threaded through every evaluation."""

    escalation_requested: bool = False
    last_intent: str | None = None
    turn_count: int = 0


INITIAL_CONTEXT = DialogueContext()


@dataclass(frozen=True)
class ReplyOutcome:
    """Result of evaluating one customer utterance."""

    message: str
    updated_context: DialogueContext
    follow_up_prompts: tuple[str, ...] = ()
    intent: str = "fallback"
