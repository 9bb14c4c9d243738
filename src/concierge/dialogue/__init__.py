"""Dialogue evaluation: rule table, evaluator and context store."""

from .context import DialogueContextStore
from .evaluator import evaluate, match_intent
from .rules import RULES, IntentReply, IntentRule

__all__ = [
    "RULES",
    "DialogueContextStore",
    "IntentReply",
    "IntentRule",
    "evaluate",
    "match_intent",
]
