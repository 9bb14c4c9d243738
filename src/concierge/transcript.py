"""Append-only call transcript."""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from datetime import UTC, datetime

from concierge.errors import EmptyTurnError
from concierge.types import Author, Turn


class TranscriptLog:
    """Ordered turns for one call. Turns are never reordered or removed individually."""

    def __init__(self) -> None:
        self._turns: list[Turn] = []

    def append(self, author: Author, text: str) -> Turn:
        normalized = text.strip()
        if not normalized:
            raise EmptyTurnError(f"refusing to append a blank {author} turn")
        turn = Turn(
            turn_id=uuid.uuid4().hex,
            author=Author(author),
            text=normalized,
            timestamp=datetime.now(UTC),
        )
        self._turns.append(turn)
        return turn

    def all(self) -> tuple[Turn, ...]:
        return tuple(self._turns)

    def last(self) -> Turn | None:
        if not self._turns:
            return None
        return self._turns[-1]

    def clear(self) -> None:
        self._turns = []

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(self.all())
