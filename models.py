"""Core data models for the stroke engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional, Sequence, Tuple


class Point(NamedTuple):
    """Position in the normalized [0,1] x [0,1] canvas space."""

    x: float
    y: float


FreehandStroke = Sequence[Tuple[float, float]]


@dataclass(frozen=True)
class ReferenceStroke:
    start_point: Point
    path: str

    @classmethod
    def from_dict(cls, data: dict) -> "ReferenceStroke":
        """Build from a corpus entry: {"path", "startX", "startY"}."""
        return cls(
            start_point=Point(float(data["startX"]), float(data["startY"])),
            path=str(data["path"]),
        )

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "startX": self.start_point.x,
            "startY": self.start_point.y,
        }


class FeedbackKind(str, Enum):
    CORRECT = "correct"
    WRONG_DIRECTION = "wrong_direction"
    WRONG_START = "wrong_start"
    WRONG_SHAPE = "wrong_shape"
    TOO_SHORT = "too_short"


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    confidence: float
    feedback: FeedbackKind


@dataclass(frozen=True)
class BatchValidationResult:
    results: Tuple[ValidationResult, ...]
    overall_success: bool
    average_confidence: float


class Phase(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    FEEDBACK_CORRECT = "feedback_correct"
    FEEDBACK_INCORRECT = "feedback_incorrect"
    COMPLETE = "complete"


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable view of a practice session handed to UI observers."""

    character: str
    stroke_index: int
    total_strokes: int
    validated_strokes: Tuple[Tuple[Point, ...], ...]
    phase: Phase
    hints_used: bool
    attempts_this_stroke: int

    @property
    def is_complete(self) -> bool:
        return self.phase == Phase.COMPLETE


@dataclass
class CharacterProgress:
    character: str
    attempts: int = 0
    successes: int = 0
    hints_used: int = 0
    last_practiced: Optional[float] = None
