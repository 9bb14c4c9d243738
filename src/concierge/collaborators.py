"""Contracts for the external collaborators the call session drives.

Audio capture, speech-to-text and text-to-speech live outside this package.
The session only talks to them through the protocols below. The few concrete
classes here are terminal-friendly stand-ins used by the CLI.
"""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import AsyncIterator, Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, TypeAlias

from loguru import logger


@dataclass(frozen=True)
class FinalTranscript:
    """Finalized speech fragment, consumed as a customer turn."""

    text: str


@dataclass(frozen=True)
class PartialTranscript:
    """Interim speech fragment, only surfaced as a live listening indicator."""

    text: str


@dataclass(frozen=True)
class InputError:
    """Recognition failure reported by the source without ending the call."""

    reason: str = ""


InputEvent: TypeAlias = FinalTranscript | PartialTranscript | InputError


class StreamingInputSource(Protocol):
    """One recognition run. The end of ``events()`` is the end-of-stream signal."""

    def start(self) -> None: ...

    def stop(self) -> None: ...

    def events(self) -> AsyncIterator[InputEvent]: ...


InputSourceFactory: TypeAlias = Callable[[], StreamingInputSource]


class CaptureDevice(Protocol):
    """Audio capture resource acquired for the lifetime of one call."""

    async def acquire(self) -> Any: ...

    def release(self, handle: Any) -> None: ...


class PlaybackService(Protocol):
    def speak(self, text: str) -> None: ...


class NullPlayback:
    def speak(self, text: str) -> None:
        return None


class LoggingPlayback:
    """Playback stand-in that records spoken replies in the debug log."""

    def speak(self, text: str) -> None:
        logger.debug("playback.speak chars={} text={}", len(text), text)


class OpenDevice:
    """Capture stand-in for typed-only sessions; acquisition always succeeds."""

    def __init__(self, name: str = "terminal") -> None:
        self.name = name
        self.held = 0

    async def acquire(self) -> str:
        self.held += 1
        logger.debug("device.acquire name={}", self.name)
        return self.name

    def release(self, handle: Any) -> None:
        self.held = max(0, self.held - 1)
        logger.debug("device.release name={} handle={}", self.name, handle)


class ScriptedInput:
    """Streaming source that replays queued lines as recognized speech.

    Lines are shared with the factory that created this source, so a restarted
    source continues where the previous one stopped instead of replaying.
    """

    def __init__(self, pending: deque[str], interval_seconds: float) -> None:
        self._pending = pending
        self._interval = interval_seconds
        self._stopped = asyncio.Event()

    def start(self) -> None:
        self._stopped.clear()

    def stop(self) -> None:
        self._stopped.set()

    async def events(self) -> AsyncIterator[InputEvent]:
        while self._pending and not self._stopped.is_set():
            line = self._pending.popleft()
            words = line.split()
            if len(words) > 1:
                yield PartialTranscript(" ".join(words[: len(words) // 2]))
            if self._interval:
                await asyncio.sleep(self._interval)
            if self._stopped.is_set():
                return
            yield FinalTranscript(line)
        # Nothing left to say: stay open until the call stops listening.
        await self._stopped.wait()


class ScriptedInputFactory:
    def __init__(self, lines: Iterable[str], *, interval_seconds: float = 1.0) -> None:
        self._pending = deque(line.strip() for line in lines if line.strip())
        self._interval = interval_seconds

    @classmethod
    def from_file(cls, path: Path, *, interval_seconds: float = 1.0) -> ScriptedInputFactory:
        with path.open(encoding="utf-8") as handle:
            return cls(handle.readlines(), interval_seconds=interval_seconds)

    @property
    def remaining(self) -> int:
        return len(self._pending)

    def __call__(self) -> ScriptedInput:
        return ScriptedInput(self._pending, self._interval)
