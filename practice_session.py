"""State-machine based practice session for one character."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence, Tuple

import config
from errors import StrokeDataUnavailable
from models import (
    FreehandStroke,
    Phase,
    Point,
    ReferenceStroke,
    SessionSnapshot,
    ValidationResult,
)
from stroke_engine import ValidationConfig, validate_stroke

logger = logging.getLogger(__name__)

StateCallback = Callable[[Phase, Phase], None]
ResultCallback = Callable[[ValidationResult, SessionSnapshot], None]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class ProgressSink(Protocol):
    def update_progress(self, character: str, success: bool, hints_used: bool) -> None: ...


class StrokeDataProvider(Protocol):
    def get_strokes(self, character: str) -> Optional[Sequence[ReferenceStroke]]: ...


class ThreadingScheduler:
    """Runs callbacks on daemon threading.Timer threads."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


@dataclass(frozen=True)
class CharacterSnapshot:
    """Character and strokes as they were when the character was loaded."""

    character: str
    strokes: Tuple[ReferenceStroke, ...]

    @property
    def total_strokes(self) -> int:
        return len(self.strokes)


class PracticeSession:
    """
    Drives stroke-by-stroke practice of a single character.

    All mutations go through submit_stroke, clear, reset, mark_hint_used
    and load_character, serialized by one lock. Feedback phases return to
    idle through a cancelable timer; any clear, reset or character switch
    cancels it before touching state.
    """

    def __init__(
        self,
        character: str,
        strokes: Sequence[ReferenceStroke],
        progress_sink: Optional[ProgressSink] = None,
        validation_config: Optional[ValidationConfig] = None,
        scheduler: Optional[Scheduler] = None,
        correct_delay_s: float = config.CORRECT_FEEDBACK_DELAY,
        incorrect_delay_s: float = config.INCORRECT_FEEDBACK_DELAY,
        on_state_change: Optional[StateCallback] = None,
        on_result: Optional[ResultCallback] = None,
    ) -> None:
        self._progress_sink = progress_sink
        self._validation_config = validation_config
        self._scheduler = scheduler or ThreadingScheduler()
        self._correct_delay_s = correct_delay_s
        self._incorrect_delay_s = incorrect_delay_s
        self._on_state_change = on_state_change
        self._on_result = on_result

        self._lock = threading.RLock()
        self._generation = 0
        self._pending: Optional[TimerHandle] = None
        self._changes: list[Tuple[Phase, Phase]] = []

        self._phase = Phase.IDLE
        self._stroke_index = 0
        self._validated_strokes: list[Tuple[Point, ...]] = []
        self._hints_used = False
        self._attempts_this_stroke = 0
        self._last_result: Optional[ValidationResult] = None
        self._current = self._capture(character, strokes)

    @classmethod
    def for_character(
        cls, provider: StrokeDataProvider, character: str, **kwargs
    ) -> "PracticeSession":
        """Open a session using strokes from a provider."""
        strokes = provider.get_strokes(character)
        if not strokes:
            raise StrokeDataUnavailable(character)
        return cls(character, strokes, **kwargs)

    # ----------------------------
    # Read-only views
    # ----------------------------

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def character(self) -> str:
        return self._current.character

    @property
    def total_strokes(self) -> int:
        return self._current.total_strokes

    @property
    def is_complete(self) -> bool:
        return self._phase == Phase.COMPLETE

    @property
    def hints_used(self) -> bool:
        return self._hints_used

    @property
    def last_result(self) -> Optional[ValidationResult]:
        return self._last_result

    @property
    def expected_stroke(self) -> Optional[ReferenceStroke]:
        with self._lock:
            if self._stroke_index >= self._current.total_strokes:
                return None
            return self._current.strokes[self._stroke_index]

    @property
    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return self._snapshot()

    # ----------------------------
    # Commands
    # ----------------------------

    def submit_stroke(self, points: FreehandStroke) -> Optional[ValidationResult]:
        """
        Validate a finished freehand stroke against the expected stroke.

        Returns None when the event is ignored: the session is not idle,
        or no stroke is expected any more.
        """
        stroke = tuple(Point(float(x), float(y)) for x, y in points)

        with self._lock:
            current = self._current
            if self._phase != Phase.IDLE:
                logger.debug("Ignoring stroke while %s", self._phase.value)
                return None
            if self._stroke_index >= current.total_strokes:
                logger.debug("Ignoring stroke, no stroke expected for %s", current.character)
                return None

            reference = current.strokes[self._stroke_index]
            self._transition(Phase.VALIDATING)
            try:
                result = validate_stroke(stroke, reference, self._validation_config)
            except Exception:
                self._phase = Phase.IDLE
                self._changes.clear()
                raise
            self._last_result = result

            if result.is_valid:
                self._validated_strokes.append(stroke)
                self._stroke_index += 1
                self._attempts_this_stroke = 0
                if self._stroke_index >= current.total_strokes:
                    self._complete(current)
                else:
                    self._transition(Phase.FEEDBACK_CORRECT)
                    self._schedule_idle(self._correct_delay_s)
            else:
                self._attempts_this_stroke += 1
                self._transition(Phase.FEEDBACK_INCORRECT)
                self._schedule_idle(self._incorrect_delay_s)

            # State, timer and progress are settled before observers run
            self._notify(result)
            return result

    def clear(self) -> None:
        """Erase the drawing and start the character over, keeping hint usage."""
        with self._lock:
            self._cancel_pending()
            self._restart(keep_hints=True)
            self._notify()

    def reset(self) -> None:
        """Start a fresh attempt, forgetting hint usage."""
        with self._lock:
            self._cancel_pending()
            self._restart(keep_hints=False)
            self._notify()

    def mark_hint_used(self) -> None:
        with self._lock:
            self._hints_used = True

    def load_character(self, character: str, strokes: Sequence[ReferenceStroke]) -> None:
        """Switch to another character; any in-flight feedback timer is dropped."""
        with self._lock:
            self._cancel_pending()
            self._current = self._capture(character, strokes)
            self._restart(keep_hints=False)
            self._notify()

    def close(self) -> None:
        with self._lock:
            self._cancel_pending()

    # ----------------------------
    # Internals
    # ----------------------------

    @staticmethod
    def _capture(character: str, strokes: Sequence[ReferenceStroke]) -> CharacterSnapshot:
        if not strokes:
            raise StrokeDataUnavailable(character)
        return CharacterSnapshot(character, tuple(strokes))

    def _complete(self, current: CharacterSnapshot) -> None:
        self._transition(Phase.COMPLETE)
        logger.info(
            "Character %s complete (hints used: %s)", current.character, self._hints_used
        )
        if self._progress_sink is not None:
            self._progress_sink.update_progress(current.character, True, self._hints_used)

    def _restart(self, keep_hints: bool) -> None:
        self._stroke_index = 0
        self._validated_strokes = []
        self._attempts_this_stroke = 0
        self._last_result = None
        if not keep_hints:
            self._hints_used = False
        self._transition(Phase.IDLE)

    def _schedule_idle(self, delay_s: float) -> None:
        self._cancel_pending()
        generation = self._generation
        self._pending = self._scheduler.call_later(
            delay_s, lambda: self._return_to_idle(generation)
        )

    def _return_to_idle(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                logger.debug("Discarding stale feedback timer")
                return
            self._pending = None
            if self._phase in (Phase.FEEDBACK_CORRECT, Phase.FEEDBACK_INCORRECT):
                self._transition(Phase.IDLE)
                self._notify()

    def _cancel_pending(self) -> None:
        self._generation += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            character=self._current.character,
            stroke_index=self._stroke_index,
            total_strokes=self._current.total_strokes,
            validated_strokes=tuple(self._validated_strokes),
            phase=self._phase,
            hints_used=self._hints_used,
            attempts_this_stroke=self._attempts_this_stroke,
        )

    def _notify(self, result: Optional[ValidationResult] = None) -> None:
        changes, self._changes = self._changes, []
        if self._on_state_change:
            for from_phase, to_phase in changes:
                self._on_state_change(from_phase, to_phase)
        if result is not None and self._on_result:
            self._on_result(result, self._snapshot())

    def _transition(self, to_phase: Phase) -> None:
        from_phase = self._phase
        if from_phase == to_phase:
            return
        self._phase = to_phase
        logger.debug("Session %s: %s -> %s", self._current.character, from_phase.value, to_phase.value)
        self._changes.append((from_phase, to_phase))


if __name__ == "__main__":
    import time

    from path_resolver import resolve_reference_endpoint
    from progress import ProgressTracker
    from stroke_data import JsonStrokeCorpus

    logging.basicConfig(level=logging.DEBUG if config.DEBUG_MODE else logging.INFO)

    corpus = JsonStrokeCorpus()
    tracker = ProgressTracker()

    # Traces a straight line from each stroke's start to its end
    for char in corpus.characters():
        session = PracticeSession.for_character(corpus, char, progress_sink=tracker)
        while not session.is_complete:
            if session.phase != Phase.IDLE:
                time.sleep(0.05)
                continue
            ref = session.expected_stroke
            end = resolve_reference_endpoint(ref)
            line = [
                (ref.start_point.x + (end.x - ref.start_point.x) * i / 19,
                 ref.start_point.y + (end.y - ref.start_point.y) * i / 19)
                for i in range(20)
            ]
            result = session.submit_stroke(line)
            print(f"{char}: {result.feedback.value} ({result.confidence:.2f})")
            if not result.is_valid:
                break
        session.close()
        if session.is_complete:
            print(config.FEEDBACK_MESSAGES["character_complete"].format(char=char))

    for char, progress in tracker.all_progress().items():
        print(f"{char}: {progress.successes}/{progress.attempts}")
