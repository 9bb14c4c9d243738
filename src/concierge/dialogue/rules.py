"""Intent rule table for deterministic reply selection.

Rules are evaluated in declaration order and the first match wins, so the
order of ``RULES`` is the priority order. ``fallback`` must stay last.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeAlias

from concierge.types import DialogueContext


@dataclass(frozen=True)
class IntentReply:
    message: str
    follow_up_prompts: tuple[str, ...] = ()


Responder: TypeAlias = Callable[[str, DialogueContext], IntentReply]


@dataclass(frozen=True)
class IntentRule:
    """One classified intent: a predicate plus the handler that answers it."""

    name: str
    pattern: re.Pattern[str] | None
    respond: Responder
    escalates: bool = False

    def matches(self, utterance: str) -> bool:
        if self.pattern is None:
            return True
        return self.pattern.search(utterance) is not None


_ESCALATION_PAT = re.compile(
    r"\b(manager|supervisor|human|real person|representative|live agent|escalat(?:e|ed|ion)|"
    r"complaint|complain|speak (?:to|with) someone|talk (?:to|with) someone)\b",
    re.I,
)
_CANCEL_PAT = re.compile(r"\b(cancel|cancell?ation|cancell?ed)\b", re.I)
_RETURN_PAT = re.compile(
    r"\b(return|returns|returning|refund|refunds|exchange|damaged|broken|defective|wrong item)\b",
    re.I,
)
_SHIPPING_PAT = re.compile(
    r"\b(where is|where's|track|tracking|shipping|shipped|shipment|delivery|deliver|delivered|"
    r"arrive|arriving|eta|package|parcel|courier)\b",
    re.I,
)
_ORDER_PAT = re.compile(r"\b(order|orders|order number|purchase|purchased|receipt|invoice)\b", re.I)
_RECOMMEND_PAT = re.compile(
    r"\b(recommend|recommendation|recommendations|suggest|suggestion|gift|similar|upgrade|pair with)\b",
    re.I,
)
_GREETING_PAT = re.compile(r"\b(hello|hi|hey|good morning|good afternoon|good evening)\b", re.I)
_CLOSING_PAT = re.compile(r"\b(thanks|thank you|bye|goodbye|that's all|that is all)\b", re.I)
_ORDER_ID_PAT = re.compile(r"\b([A-Z]{2,5}-?\d{3,})\b", re.I)


def _order_reference(utterance: str) -> str | None:
    match = _ORDER_ID_PAT.search(utterance)
    if match is None:
        return None
    return match.group(1).upper()


def _escalation(_utterance: str, context: DialogueContext) -> IntentReply:
    if context.escalation_requested:
        return IntentReply(
            "Your request for a specialist is already in the queue. They will join this call shortly.",
            ("Would you prefer a callback instead of waiting?",),
        )
    return IntentReply(
        "I understand. I'm flagging this call for a specialist who can take it from here. Please stay on the line.",
        (
            "Can you share your order number so the specialist has it ready?",
            "Would you prefer a callback instead of waiting?",
        ),
    )


def _cancellation(utterance: str, _context: DialogueContext) -> IntentReply:
    reference = _order_reference(utterance)
    target = f"order {reference}" if reference else "your order"
    return IntentReply(
        f"I can help cancel {target}. Orders that have not shipped yet can be cancelled right away.",
        ("What is the order number you want to cancel?", "Would you rather change the order instead?"),
    )


def _returns(_utterance: str, _context: DialogueContext) -> IntentReply:
    return IntentReply(
        "Returns are accepted within 30 days of delivery. I can send a prepaid return label to the email on file.",
        ("Which item would you like to return?", "Would you prefer a refund or an exchange?"),
    )


def _shipping_status(utterance: str, _context: DialogueContext) -> IntentReply:
    reference = _order_reference(utterance)
    if reference:
        message = f"Let me check the shipment for order {reference}. I'll share the carrier update and ETA."
    else:
        message = "I can check that shipment for you. Could you confirm the order number so I can pull up tracking?"
    return IntentReply(
        message,
        ("Would you like the tracking link sent by text?", "Do you need to update the delivery address?"),
    )


def _order_status(utterance: str, _context: DialogueContext) -> IntentReply:
    reference = _order_reference(utterance)
    if reference:
        message = f"I have order {reference} open. Is there something specific you'd like to know about it?"
    else:
        message = "I can look up your order. What's the order number or the name it was placed under?"
    return IntentReply(message, ("Where is my order?", "Can I change my order?"))


def _recommendations(_utterance: str, _context: DialogueContext) -> IntentReply:
    return IntentReply(
        "Happy to suggest something. Based on recent purchases, our best sellers pair well with most orders.",
        ("Is this a gift?", "Do you have a budget in mind?"),
    )


def _greeting(_utterance: str, _context: DialogueContext) -> IntentReply:
    return IntentReply("Hello! How can I help with your order today?")


def _closing(_utterance: str, _context: DialogueContext) -> IntentReply:
    return IntentReply("You're welcome! Is there anything else I can help you with?")


def _fallback(_utterance: str, _context: DialogueContext) -> IntentReply:
    return IntentReply(
        "I can help with order status, shipping updates, returns and product recommendations. "
        "Could you tell me a bit more about what you need?",
        ("Where is my order?", "How do I start a return?", "Can you recommend something?"),
    )


RULES: tuple[IntentRule, ...] = (
    IntentRule("escalation", _ESCALATION_PAT, _escalation, escalates=True),
    IntentRule("cancellation", _CANCEL_PAT, _cancellation),
    IntentRule("returns", _RETURN_PAT, _returns),
    IntentRule("shipping_status", _SHIPPING_PAT, _shipping_status),
    IntentRule("order_status", _ORDER_PAT, _order_status),
    IntentRule("recommendations", _RECOMMEND_PAT, _recommendations),
    IntentRule("greeting", _GREETING_PAT, _greeting),
    IntentRule("closing", _CLOSING_PAT, _closing),
    IntentRule("fallback", None, _fallback),
)
