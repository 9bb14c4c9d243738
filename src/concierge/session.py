"""Call session state machine."""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Callable
from typing import Any, TypeAlias

from loguru import logger

from concierge.collaborators import (
    CaptureDevice,
    FinalTranscript,
    InputError,
    InputEvent,
    InputSourceFactory,
    NullPlayback,
    PartialTranscript,
    PlaybackService,
    StreamingInputSource,
)
from concierge.config import Settings
from concierge.dialogue import DialogueContextStore, evaluate
from concierge.errors import StreamingInputError
from concierge.logging_utils import bind_call
from concierge.signals import SessionSignals
from concierge.transcript import TranscriptLog
from concierge.types import Author, CallState, DialogueContext, ReplyOutcome, Turn

Evaluator: TypeAlias = Callable[[str, DialogueContext], ReplyOutcome]


class CallSession:
    """Lifecycle of one support call: idle -> connecting -> active -> ended.

    Every handler except ``start`` runs to completion without awaiting, so on
    a single event loop no two handlers interleave. ``start`` only suspends
    while the capture device is acquired; a generation counter, bumped on each
    release, tells it whether the world moved on while it was waiting.
    """

    def __init__(
        self,
        device: CaptureDevice,
        *,
        settings: Settings | None = None,
        input_factory: InputSourceFactory | None = None,
        playback: PlaybackService | None = None,
        evaluator: Evaluator = evaluate,
        signals: SessionSignals | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.signals = signals or SessionSignals()
        self.transcript = TranscriptLog()
        self.context_store = DialogueContextStore()
        self.call_id = "-"
        self._device = device
        self._input_factory = input_factory
        self._playback = playback or NullPlayback()
        self._evaluate = evaluator
        self._state = CallState.IDLE
        self._generation = 0
        self._device_handle: Any = None
        self._holding_device = False
        self._source: StreamingInputSource | None = None
        self._stream_task: asyncio.Task[None] | None = None
        self._follow_ups: tuple[str, ...] = ()
        self._partial = ""
        self._append(Author.SYSTEM, self.settings.welcome_message)

    @property
    def state(self) -> CallState:
        return self._state

    @property
    def context(self) -> DialogueContext:
        return self.context_store.current()

    @property
    def follow_ups(self) -> tuple[str, ...]:
        return self._follow_ups

    @property
    def partial_text(self) -> str:
        return self._partial

    @property
    def speech_available(self) -> bool:
        return self._input_factory is not None

    @property
    def escalation_notice(self) -> str | None:
        if self.context.escalation_requested:
            return self.settings.escalation_notice
        return None

    async def start(self) -> None:
        if self._state in (CallState.CONNECTING, CallState.ACTIVE):
            logger.debug("call.start ignored state={}", self._state)
            return

        self.call_id = uuid.uuid4().hex[:12]
        bind_call(self.call_id)
        generation = self._generation
        self._set_state(CallState.CONNECTING)
        try:
            handle = await self._device.acquire()
        except asyncio.CancelledError:
            if generation == self._generation:
                self._set_state(CallState.IDLE)
            raise
        except Exception as exc:
            # Capture adapters raise non-uniform exceptions.
            if generation != self._generation:
                return
            logger.opt(exception=exc).warning("call.capture.failed error={}", exc)
            self._append(Author.SYSTEM, self.settings.capture_failure_message)
            self._set_state(CallState.IDLE)
            return

        if generation != self._generation:
            logger.info("call.capture.stale releasing handle acquired after teardown")
            self._release_device(handle)
            return

        self._device_handle = handle
        self._holding_device = True
        self._set_state(CallState.ACTIVE)
        self._append(Author.AGENT, self.settings.greeting_message)
        if self._input_factory is not None:
            self._stream_task = asyncio.create_task(self._listen(generation), name=f"concierge-listen-{self.call_id}")

    def end(self) -> None:
        if self._state is not CallState.ACTIVE:
            logger.debug("call.end ignored state={}", self._state)
            return
        self._set_state(CallState.ENDED)
        self._release_resources()
        self._append(Author.AGENT, self.settings.farewell_message)

    def reset(self) -> None:
        self._release_resources()
        self._set_state(CallState.IDLE)
        self.transcript.clear()
        self.signals.emit(self.signals.transcript_cleared, self)
        self._append(Author.SYSTEM, self.settings.welcome_message)
        self._replace_context(DialogueContext())
        self._set_follow_ups(())
        self._set_partial("")

    def close(self) -> None:
        """Teardown: release every held resource without touching the transcript.

        A pending connection falls back to idle and a live call is marked
        ended, but no farewell turn is recorded.
        """
        self._release_resources()
        if self._state is CallState.CONNECTING:
            self._set_state(CallState.IDLE)
        elif self._state is CallState.ACTIVE:
            self._set_state(CallState.ENDED)

    async def aclose(self) -> None:
        task = self._stream_task
        self.close()
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("call.input.task_failed")

    async def __aenter__(self) -> CallSession:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def submit(self, text: str) -> ReplyOutcome | None:
        """Handle one finalized customer utterance, typed or transcribed."""
        utterance = text.strip()
        if not utterance:
            return None
        if self._state is not CallState.ACTIVE:
            logger.info("call.submit ignored state={}", self._state)
            return None

        self._append(Author.CUSTOMER, utterance)
        previous = self.context_store.current()
        outcome = self._evaluate(utterance, previous)
        self._append(Author.AGENT, outcome.message)
        self._replace_context(outcome.updated_context)
        self._set_follow_ups(outcome.follow_up_prompts)
        self._speak(outcome.message)

        if outcome.updated_context.escalation_requested and not previous.escalation_requested:
            logger.warning("call.escalation.requested turn={}", outcome.updated_context.turn_count)
        logger.info("call.turn intent={} follow_ups={}", outcome.intent, len(outcome.follow_up_prompts))
        return outcome

    def _listening(self, generation: int) -> bool:
        return self._state is CallState.ACTIVE and generation == self._generation

    async def _listen(self, generation: int) -> None:
        assert self._input_factory is not None
        while self._listening(generation):
            source: StreamingInputSource | None = None
            try:
                source = self._input_factory()
                self._source = source
                source.start()
                async for event in source.events():
                    if not self._listening(generation):
                        break
                    self._dispatch(event)
            except StreamingInputError as exc:
                self._handle_input_error(str(exc))
            except Exception as exc:
                logger.opt(exception=exc).error("call.input.crashed")
                self._handle_input_error(str(exc))
            finally:
                if source is not None:
                    self._detach_source(source)
                self._set_partial("")

            if not self._listening(generation):
                break
            logger.info("call.input.restart delay={}", self.settings.restart_delay_seconds)
            await asyncio.sleep(self.settings.restart_delay_seconds)

    def _dispatch(self, event: InputEvent) -> None:
        if isinstance(event, PartialTranscript):
            self._set_partial(event.text)
        elif isinstance(event, FinalTranscript):
            self._set_partial("")
            self.submit(event.text)
        elif isinstance(event, InputError):
            self._handle_input_error(event.reason)
        else:
            logger.warning("call.input.unknown_event type={}", type(event).__name__)

    def _handle_input_error(self, reason: str) -> None:
        logger.warning("call.input.error reason={}", reason or "-")
        self._set_partial("")
        self._append(Author.SYSTEM, self.settings.input_error_message)

    def _release_resources(self) -> None:
        # Shared by end, reset and teardown.
        self._generation += 1
        task, self._stream_task = self._stream_task, None
        if task is not None and not task.done():
            task.cancel()
        if self._source is not None:
            self._detach_source(self._source)
        if self._holding_device:
            handle = self._device_handle
            self._holding_device = False
            self._device_handle = None
            self._release_device(handle)

    def _detach_source(self, source: StreamingInputSource) -> None:
        if self._source is not source:
            return
        self._source = None
        try:
            source.stop()
        except Exception:
            logger.exception("call.input.stop_failed")

    def _release_device(self, handle: Any) -> None:
        try:
            self._device.release(handle)
        except Exception:
            logger.exception("call.capture.release_failed")

    def _speak(self, message: str) -> None:
        try:
            self._playback.speak(message)
        except Exception:
            logger.exception("call.playback.error")

    def _append(self, author: Author, text: str) -> Turn:
        turn = self.transcript.append(author, text)
        self.signals.emit(self.signals.turn_appended, self, turn=turn)
        return turn

    def _set_state(self, state: CallState) -> None:
        if state is self._state:
            return
        logger.info("call.state {} -> {}", self._state, state)
        self._state = state
        self.signals.emit(self.signals.state_changed, self, state=state)

    def _replace_context(self, context: DialogueContext) -> None:
        self.context_store.replace(context)
        self.signals.emit(self.signals.context_changed, self, context=context)

    def _set_follow_ups(self, prompts: tuple[str, ...]) -> None:
        self._follow_ups = tuple(prompts)
        self.signals.emit(self.signals.follow_ups_changed, self, prompts=self._follow_ups)

    def _set_partial(self, text: str) -> None:
        if text == self._partial:
            return
        self._partial = text
        self.signals.emit(self.signals.partial_changed, self, text=text)
