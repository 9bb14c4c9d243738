"""Pure reply evaluation over (utterance, context)."""

from __future__ import annotations

from dataclasses import replace

from concierge.dialogue.rules import RULES, IntentRule
from concierge.types import DialogueContext, ReplyOutcome

HANDOFF_NOTE = "A specialist has been requested and will join shortly."


def match_intent(utterance: str, rules: tuple[IntentRule, ...] = RULES) -> IntentRule:
    """Return the first rule in priority order that matches the utterance."""
    for rule in rules:
        if rule.matches(utterance):
            return rule
    raise LookupError("rule table has no catch-all fallback")


def evaluate(
    utterance: str,
    context: DialogueContext,
    *,
    rules: tuple[IntentRule, ...] = RULES,
) -> ReplyOutcome:
    """Classify one customer utterance and derive the agent reply.

    Callers must filter blank input first. The escalation flag is carried
    forward here rather than inside individual rules, so no rule can clear it.
    """
    rule = match_intent(utterance, rules)
    reply = rule.respond(utterance, context)

    message = reply.message
    if context.escalation_requested and not rule.escalates:
        message = f"{message} {HANDOFF_NOTE}"

    updated = replace(
        context,
        escalation_requested=context.escalation_requested or rule.escalates,
        last_intent=rule.name,
        turn_count=context.turn_count + 1,
    )
    return ReplyOutcome(
        message=message,
        updated_context=updated,
        follow_up_prompts=tuple(reply.follow_up_prompts),
        intent=rule.name,
    )
