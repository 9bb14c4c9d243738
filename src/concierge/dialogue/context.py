"""Single-slot holder for the authoritative dialogue context."""

from __future__ import annotations

from concierge.types import INITIAL_CONTEXT, DialogueContext


class DialogueContextStore:
    """Holds exactly one context value; `replace` is the only mutation path."""

    def __init__(self, initial: DialogueContext = INITIAL_CONTEXT) -> None:
        self._initial = initial
        self._current = initial

    def current(self) -> DialogueContext:
        return self._current

    def replace(self, next_context: DialogueContext) -> None:
        if not isinstance(next_context, DialogueContext):
            raise TypeError(f"expected DialogueContext, got {type(next_context).__name__}")
        self._current = next_context

    def reset(self) -> None:
        self._current = self._initial
