"""
Stroke Recognition & Validation Engine
- Scores a freehand stroke against its reference stroke
- Classifies failures (start, direction, shape, length)
- Validates a character's full stroke list in one call
"""

import logging
import math
from dataclasses import dataclass, fields, replace
from typing import List, Optional, Sequence

import numpy as np

import config
from models import (
    BatchValidationResult,
    FeedbackKind,
    FreehandStroke,
    Point,
    ReferenceStroke,
    ValidationResult,
)
from path_resolver import resolve_reference_endpoint

logger = logging.getLogger(__name__)

# Below this length a direction vector has no meaningful angle
_DEGENERATE_LENGTH = 1e-12

# ===============================
# Geometry Utils
# ===============================

def dist(a, b):
    """Euclidean distance between two points."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    return float(np.linalg.norm(a - b))


def polyline_length(pts):
    """Total length of a polyline."""
    arr = np.asarray(pts, dtype=np.float64)
    if len(arr) < 2:
        return 0.0
    seg_lens = np.sqrt((np.diff(arr, axis=0) ** 2).sum(axis=1))
    return float(seg_lens.sum())


def direction_angle(start, end):
    """Angle of the vector start->end in degrees, (-180, 180]."""
    dx = float(end[0]) - float(start[0])
    dy = float(end[1]) - float(start[1])
    return math.degrees(math.atan2(dy, dx))


def angle_difference(a1, a2):
    """Minimal rotation between two angles, always within [0, 180]."""
    diff = abs(a1 - a2) % 360.0
    if diff > 180.0:
        diff = 360.0 - diff
    return diff


def _is_degenerate(start, end):
    return dist(start, end) < _DEGENERATE_LENGTH


# ===============================
# Configuration
# ===============================

@dataclass(frozen=True)
class ValidationConfig:
    """
    Tolerances and scoring constants for one validation call.

    All distances are in normalized canvas units. shape_tolerance is
    accepted so corpus-level configs can carry it; the endpoint-based
    pipeline does not consult it.
    """

    start_tolerance: float = config.START_TOLERANCE
    end_tolerance: float = config.END_TOLERANCE
    direction_tolerance_degrees: float = config.DIRECTION_TOLERANCE_DEGREES
    shape_tolerance: float = config.SHAPE_TOLERANCE
    min_point_count: int = config.MIN_POINT_COUNT
    valid_threshold: float = config.VALID_CONFIDENCE_THRESHOLD
    reversed_angle_degrees: float = config.REVERSED_ANGLE_DEGREES
    end_score_out_of_tolerance: float = config.END_SCORE_OUT_OF_TOLERANCE
    length_score_scale: float = config.LENGTH_SCORE_SCALE
    start_weight: float = config.SCORE_WEIGHTS["start"]
    end_weight: float = config.SCORE_WEIGHTS["end"]
    direction_weight: float = config.SCORE_WEIGHTS["direction"]
    length_weight: float = config.SCORE_WEIGHTS["length"]
    reference_dimension: float = config.REFERENCE_DIMENSION

    def with_overrides(self, **overrides) -> "ValidationConfig":
        """Copy with some fields replaced; unknown names raise TypeError."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise TypeError(f"Unknown validation setting(s): {', '.join(sorted(unknown))}")
        return replace(self, **overrides)

    @classmethod
    def for_difficulty(cls, level: str) -> "ValidationConfig":
        """Build the preset for a difficulty level from config.DIFFICULTY_LEVELS."""
        return cls().with_overrides(**config.DIFFICULTY_LEVELS[level])


DEFAULT_CONFIG = ValidationConfig()


# ===============================
# Stroke Validation
# ===============================

def validate_stroke(
    user_pts: FreehandStroke,
    reference: ReferenceStroke,
    cfg: Optional[ValidationConfig] = None,
) -> ValidationResult:
    """
    Classify one freehand stroke against its reference stroke.

    Stages run in order and the first failing stage decides the feedback:
    sample count, start position, direction, then the weighted composite
    of start, end, direction and length scores.
    """
    cfg = cfg or DEFAULT_CONFIG

    if len(user_pts) < cfg.min_point_count:
        return ValidationResult(False, 0.0, FeedbackKind.TOO_SHORT)

    user_start = user_pts[0]
    user_end = user_pts[-1]
    ref_start = reference.start_point
    ref_end = resolve_reference_endpoint(reference, cfg.reference_dimension)

    # Start position
    start_dist = dist(user_start, ref_start)
    if start_dist > cfg.start_tolerance:
        confidence = max(0.0, 1.0 - start_dist / cfg.start_tolerance)
        return ValidationResult(
            False, confidence * config.WRONG_START_CONFIDENCE_CAP, FeedbackKind.WRONG_START
        )

    # Direction
    if _is_degenerate(ref_start, ref_end) or _is_degenerate(user_start, user_end):
        logger.debug("Direction undefined for stroke starting at %s", ref_start)
        return ValidationResult(False, 0.0, FeedbackKind.WRONG_SHAPE)

    angle_diff = angle_difference(
        direction_angle(user_start, user_end),
        direction_angle(ref_start, ref_end),
    )
    if angle_diff > cfg.direction_tolerance_degrees:
        confidence = max(0.0, 1.0 - angle_diff / 180.0)
        feedback = (
            FeedbackKind.WRONG_DIRECTION
            if angle_diff > cfg.reversed_angle_degrees
            else FeedbackKind.WRONG_SHAPE
        )
        return ValidationResult(
            False, confidence * config.WRONG_DIRECTION_CONFIDENCE_CAP, feedback
        )

    # Composite score
    end_dist = dist(user_end, ref_end)
    start_score = 1.0 - min(start_dist / cfg.start_tolerance, 1.0)
    if end_dist <= cfg.end_tolerance:
        end_score = 1.0 - min(end_dist / cfg.end_tolerance, 1.0)
    else:
        end_score = cfg.end_score_out_of_tolerance
    direction_score = 1.0 - min(angle_diff / cfg.direction_tolerance_degrees, 1.0)
    length_score = min(polyline_length(user_pts) * cfg.length_score_scale, 1.0)

    confidence = round(
        start_score * cfg.start_weight
        + end_score * cfg.end_weight
        + direction_score * cfg.direction_weight
        + length_score * cfg.length_weight,
        2,
    )
    is_valid = confidence >= cfg.valid_threshold
    return ValidationResult(
        is_valid,
        confidence,
        FeedbackKind.CORRECT if is_valid else FeedbackKind.WRONG_SHAPE,
    )


def validate_all_strokes(
    user_strokes: Sequence[FreehandStroke],
    reference_strokes: Sequence[ReferenceStroke],
    cfg: Optional[ValidationConfig] = None,
) -> BatchValidationResult:
    """
    Validate a whole character, pairing strokes by drawing order.

    Success requires every paired stroke to pass and the stroke counts
    to match exactly.
    """
    count = min(len(user_strokes), len(reference_strokes))
    results: List[ValidationResult] = [
        validate_stroke(user_strokes[i], reference_strokes[i], cfg) for i in range(count)
    ]

    all_valid = bool(results) and all(r.is_valid for r in results)
    avg_confidence = (
        round(sum(r.confidence for r in results) / len(results), 2) if results else 0.0
    )
    return BatchValidationResult(
        results=tuple(results),
        overall_success=all_valid and len(user_strokes) == len(reference_strokes),
        average_confidence=avg_confidence,
    )


def feedback_message(result: ValidationResult, stroke_number: int) -> str:
    """User-facing text for a validation result (stroke_number is 1-based)."""
    template = config.FEEDBACK_MESSAGES[result.feedback.value]
    return template.format(stroke_num=stroke_number)


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG if config.DEBUG_MODE else logging.INFO)

    ref = ReferenceStroke(Point(0.1, 0.5), "M 10.9,54.5 L 98.1,54.5")
    line = [(0.1 + 0.8 * i / 19, 0.5) for i in range(20)]

    for label, stroke in (("forward", line), ("reversed", line[::-1])):
        res = validate_stroke(stroke, ref)
        print(f"{label}: {res.feedback.value} ({res.confidence:.2f}) - {feedback_message(res, 1)}")
