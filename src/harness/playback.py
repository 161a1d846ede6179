"""
Playback Controller

Replays script directives against the matching engine ONE AT A TIME.
Pause, single-step and delay waits are cooperative asyncio waits that any
operator control wakes immediately.
"""
import asyncio
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple
from ..core.clock import Clock
from ..core.errors import HarnessError
from ..core.journal import EventLog
from ..core.logger import get_logger
from ..core.types import (
    AnyDirective,
    BookSnapshot,
    BookView,
    CancelCommand,
    OrderCommand,
    QuoteAssertion,
    VerdictRecord,
)
from ..engine.interface import MatchingEngine, event_from_tagged
from .classifier import classify, classify_malformed, classify_quote
from .context import HarnessConfig
from .depth import render
from .script_parser import parse
from .verdict import ScriptVerdict, VerdictStatus

logger = get_logger("PlaybackController")

class PlaybackStatus(str, Enum):
    IDLE = "IDLE"
    RUNNING = "RUNNING"
    PAUSED = "PAUSED"

@dataclass
class PlaybackState:
    paused: bool = False
    started: bool = False          # True only while a script is being drained
    running_all: bool = False
    step_requested: bool = False
    delay_ms: float = 500
    cursor: int = 0                # character offset into the current script

class PlaybackController:
    """
    Sole caller of the engine during a run.

    Invariant: at most one directive in flight; the event log is only appended,
    the book view is only replaced.
    """
    def __init__(
        self,
        engine: MatchingEngine,
        config: Optional[HarnessConfig] = None,
        event_log: Optional[EventLog] = None,
    ):
        self.engine = engine
        self.config = config or HarnessConfig()
        self.state = PlaybackState(
            paused=self.config.start_paused,
            delay_ms=self.config.delay_ms,
        )
        self.event_log = event_log if event_log is not None else EventLog(self.config.output_path)
        self.book_view: BookView = render(BookSnapshot(), self.config.min_depth_rows)
        self.directives: List[AnyDirective] = []
        self.position = 0  # index of the next directive
        self.last_error: Optional[str] = None

        self._signal = asyncio.Event()
        # Bumped by clear(); a run stops once it no longer matches
        self._generation = 0
        self._skip_delay = False

    @property
    def status(self) -> PlaybackStatus:
        if not self.state.started:
            return PlaybackStatus.IDLE
        if self.state.paused:
            return PlaybackStatus.PAUSED
        return PlaybackStatus.RUNNING

    @property
    def records(self) -> Tuple[VerdictRecord, ...]:
        return self.event_log.records

    # --- Operator controls ---

    def pause(self) -> bool:
        if self._locked("pause"):
            return False
        self.state.paused = True
        self._wake()
        logger.info("playback_paused", cursor=self.state.cursor)
        return True

    def resume(self) -> bool:
        if self._locked("resume"):
            return False
        self.state.paused = False
        self._wake()
        logger.info("playback_resumed", cursor=self.state.cursor)
        return True

    def toggle_pause(self) -> bool:
        return self.resume() if self.state.paused else self.pause()

    def step(self) -> bool:
        """
        Executes exactly one directive, then leaves playback paused.
        """
        if self._locked("step"):
            return False
        self.state.step_requested = True
        self._wake()
        return True

    def set_delay(self, delay_ms: float):
        if not math.isfinite(delay_ms) or delay_ms < 0:
            raise ValueError(f"delay_ms must be a finite value >= 0, got {delay_ms}")
        self.state.delay_ms = delay_ms
        # A pending delay is re-measured against the new value
        self._wake()
        logger.info("delay_changed", delay_ms=delay_ms)

    def faster(self):
        self.set_delay(max(0, self.state.delay_ms - self.config.delay_step_ms))

    def slower(self):
        self.set_delay(self.state.delay_ms + self.config.delay_step_ms)

    def clear(self):
        """
        Stops the active run (and batch) before its next wait point, then empties the book.
        """
        self._generation += 1
        self.engine.reset()
        self.refresh_book()
        self._wake()
        logger.info("book_cleared", was_running=self.state.started)

    def _locked(self, control: str) -> bool:
        if self.state.running_all:
            logger.warning("control_ignored", control=control, reason="running_all")
            return True
        return False

    def _wake(self):
        self._signal.set()

    # --- Running ---

    async def start(self, script_text: str, name: str = "script") -> ScriptVerdict:
        """
        Clears the engine and replays one script to completion.
        """
        if self.state.started:
            raise HarnessError("A script is already running")

        generation = self._generation
        self.directives = parse(script_text)
        self.event_log.reset()
        self.position = 0
        self.last_error = None
        self._skip_delay = False
        # A step pressed while idle does not carry into the new run
        self.state.step_requested = False
        self.state.cursor = 0
        self.state.started = True

        total = len(self.directives)
        line = None
        try:
            self.engine.reset()
            self.refresh_book()
            logger.info("script_started", script=name, directives=total, status=self.status.value)

            while self.position < total:
                if not await self._await_turn(generation):
                    logger.info("script_cancelled", script=name, position=self.position)
                    return self._verdict(name, VerdictStatus.CANCELLED)

                directive = self.directives[self.position]
                line = directive.line
                self._dispatch(directive)

                # Always advance, whatever the outcome
                self.state.cursor += directive.length + 1
                self.position += 1
        except Exception as e:
            where = f"Line {line}" if line is not None else "Engine reset"
            self.last_error = f"{where} failed: {e}"
            logger.error("run_aborted", script=name, line=line, error=str(e))
            return self._verdict(name, VerdictStatus.ERROR, self.last_error)
        finally:
            self.state.started = False
            if not self.state.running_all:
                # Replaying another script requires an explicit resume
                self.state.paused = True

        status = VerdictStatus.PASS if self.event_log.failed() == 0 else VerdictStatus.FAIL
        verdict = self._verdict(name, status)
        logger.info("script_finished", script=name, status=status.value,
                    passed=verdict.passed, failed=verdict.failed)
        return verdict

    async def run_all(self, scripts: Sequence[Tuple[str, str]]) -> List[ScriptVerdict]:
        """
        Runs (name, text) scripts back to back. Pause and step are disabled
        until the batch is exhausted or cleared.
        """
        if self.state.started:
            raise HarnessError("A script is already running")

        generation = self._generation
        self.state.running_all = True
        self.state.paused = False
        self.state.step_requested = False
        logger.info("batch_started", scripts=len(scripts))

        verdicts: List[ScriptVerdict] = []
        try:
            for name, text in scripts:
                if self._generation != generation:
                    break
                verdicts.append(await self.start(text, name))
        finally:
            self.state.running_all = False
            self.state.paused = True

        logger.info("batch_finished", scripts=len(verdicts),
                    passed=sum(1 for v in verdicts if v.is_pass()))
        return verdicts

    def refresh_book(self):
        self.book_view = render(self.engine.snapshot(), self.config.min_depth_rows)

    def _verdict(self, name: str, status: VerdictStatus, error_message: Optional[str] = None) -> ScriptVerdict:
        return ScriptVerdict(
            status=status,
            script_name=name,
            directives_total=len(self.directives),
            directives_processed=self.position,
            passed=self.event_log.passed(),
            failed=self.event_log.failed(),
            error_message=error_message,
        )

    async def _await_turn(self, generation: int) -> bool:
        """
        Suspends until the next directive may run.
        Returns False when the run was cancelled.
        """
        while True:
            if self._generation != generation:
                return False
            if self.state.step_requested:
                self.state.step_requested = False
                self.state.paused = True
                self._skip_delay = True
                return True
            if self.state.paused:
                await self._wait_signal()
                continue
            if self._skip_delay:
                # No double delay right after a step
                self._skip_delay = False
                return True
            if await self._pace(generation):
                return True

    async def _pace(self, generation: int) -> bool:
        """
        Waits out delay_ms. Returns False if pause, step or clear interrupted it.
        """
        started = Clock.now_us()
        await asyncio.sleep(0)
        while True:
            if self._generation != generation or self.state.paused or self.state.step_requested:
                return False
            remaining = Clock.remaining_ms(started, self.state.delay_ms)
            if remaining <= 0:
                return True
            await self._wait_signal(remaining / 1000)

    async def _wait_signal(self, timeout: Optional[float] = None):
        self._signal.clear()
        try:
            await asyncio.wait_for(self._signal.wait(), timeout)
        except asyncio.TimeoutError:
            pass

    def _dispatch(self, directive: AnyDirective):
        record = None
        if isinstance(directive, QuoteAssertion):
            if directive.error:
                record = classify_malformed(directive)
            else:
                record = classify_quote(self.engine.quote(), directive.expected, directive.line)
        elif isinstance(directive, CancelCommand) and directive.raw_text:
            event = self._decode(self.engine.cancel(directive.raw_text))
            record = classify(event, directive.expected_token, directive.line)
            self.refresh_book()
        elif isinstance(directive, OrderCommand) and directive.raw_text:
            command = f"{self.engine.last_sequence() + 1},{directive.raw_text}"
            event = self._decode(self.engine.submit(command))
            record = classify(event, directive.expected_token, directive.line)
            self.refresh_book()

        if record is None:
            # Blank or empty command: position only
            return
        self.event_log.append(record)
        logger.info("directive_dispatched", line=directive.line, type=record.type,
                    success=record.success, actual=record.actual)

    @staticmethod
    def _decode(event):
        # Engines bridged over JSON answer with the externally tagged form
        if isinstance(event, dict):
            return event_from_tagged(event)
        return event
