import pytest

from concierge.dialogue import DialogueContextStore
from concierge.errors import EmptyTurnError
from concierge.transcript import TranscriptLog
from concierge.types import Author, DialogueContext


def test_append_preserves_insertion_order() -> None:
    log = TranscriptLog()
    log.append(Author.CUSTOMER, "hi")
    log.append(Author.AGENT, "hello")
    log.append(Author.CUSTOMER, "hi")

    assert [(turn.author, turn.text) for turn in log.all()] == [
        (Author.CUSTOMER, "hi"),
        (Author.AGENT, "hello"),
        (Author.CUSTOMER, "hi"),
    ]


def test_append_assigns_unique_ids_and_trims_text() -> None:
    log = TranscriptLog()
    first = log.append(Author.SYSTEM, "  welcome  ")
    second = log.append(Author.SYSTEM, "welcome")

    assert first.text == "welcome"
    assert first.turn_id != second.turn_id
    assert first.timestamp <= second.timestamp


def test_append_accepts_plain_author_strings() -> None:
    turn = TranscriptLog().append("agent", "hello")  # type: ignore[arg-type]

    assert turn.author is Author.AGENT


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_blank_turns_are_rejected(text: str) -> None:
    log = TranscriptLog()
    with pytest.raises(EmptyTurnError):
        log.append(Author.CUSTOMER, text)
    assert len(log) == 0


def test_all_returns_snapshot() -> None:
    log = TranscriptLog()
    log.append(Author.CUSTOMER, "one")
    snapshot = log.all()
    log.append(Author.AGENT, "two")

    assert len(snapshot) == 1
    assert len(log) == 2


def test_iteration_is_unaffected_by_appends() -> None:
    log = TranscriptLog()
    log.append(Author.CUSTOMER, "one")
    seen = []
    for turn in log:
        seen.append(turn.text)
        log.append(Author.AGENT, "echo")

    assert seen == ["one"]
    assert len(log) == 2


def test_clear_and_last() -> None:
    log = TranscriptLog()
    assert log.last() is None
    log.append(Author.CUSTOMER, "one")
    assert log.last() is not None
    log.clear()
    assert log.all() == ()


def test_context_store_replaces_and_resets() -> None:
    store = DialogueContextStore()
    escalated = DialogueContext(escalation_requested=True, last_intent="escalation", turn_count=1)
    store.replace(escalated)
    assert store.current() is escalated

    store.reset()
    assert store.current() == DialogueContext()


def test_context_store_rejects_partial_updates() -> None:
    store = DialogueContextStore()
    with pytest.raises(TypeError):
        store.replace({"escalation_requested": True})  # type: ignore[arg-type]
    assert store.current() == DialogueContext()
