"""Concierge - live customer-support call core."""

from .dialogue import evaluate
from .session import CallSession
from .transcript import TranscriptLog
from .types import Author, CallState, DialogueContext, ReplyOutcome, Turn

__version__ = "0.1.0"

__all__ = [
    "Author",
    "CallSession",
    "CallState",
    "DialogueContext",
    "ReplyOutcome",
    "TranscriptLog",
    "Turn",
    "evaluate",
]
