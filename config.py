"""
Configuration file for the Stroke Tutor engine
Tune recognition tolerances, feedback timing and stroke data sources
"""

# ===============================
# STROKE RECOGNITION
# ===============================

# Reference corpus coordinate space (KanjiVG viewBox is 109x109)
REFERENCE_DIMENSION = 109

# Tolerances in normalized [0,1] canvas units (tuned for finger input,
# looser than stylus defaults)
START_TOLERANCE = 0.25
END_TOLERANCE = 0.35
DIRECTION_TOLERANCE_DEGREES = 45
SHAPE_TOLERANCE = 0.35

# Minimum samples needed to estimate a direction
MIN_POINT_COUNT = 3

# Angle difference above which a stroke counts as drawn backwards
REVERSED_ANGLE_DEGREES = 135

# Composite confidence needed for a stroke to pass
# (earlier revision used 0.5; touch-tuned revision uses 0.4)
VALID_CONFIDENCE_THRESHOLD = 0.4

# End precision is the least reliable touch signal
END_SCORE_OUT_OF_TOLERANCE = 0.5

# Arc length multiplier for the length sub-score (capped at 1)
LENGTH_SCORE_SCALE = 5.0

# Composite confidence weights
SCORE_WEIGHTS = {
    "start": 0.30,
    "end": 0.25,
    "direction": 0.30,
    "length": 0.15,
}

# Confidence caps for early failures
WRONG_START_CONFIDENCE_CAP = 0.3
WRONG_DIRECTION_CONFIDENCE_CAP = 0.5

# ===============================
# DIFFICULTY LEVELS
# ===============================

DIFFICULTY_LEVELS = {
    "easy": {
        "start_tolerance": 0.30,
        "end_tolerance": 0.40,
        "direction_tolerance_degrees": 55,
        "valid_threshold": 0.35,
    },
    "normal": {},
    "hard": {
        "start_tolerance": 0.15,
        "end_tolerance": 0.25,
        "direction_tolerance_degrees": 30,
        "valid_threshold": 0.5,
    },
}

# ===============================
# PRACTICE SESSION
# ===============================

# Seconds before feedback states return to idle
CORRECT_FEEDBACK_DELAY = 0.2
INCORRECT_FEEDBACK_DELAY = 0.5

# ===============================
# STROKE DATA
# ===============================

CHARACTER_DB_PATH = "stroke-data/strokes.json"

# Remote KanjiVG source for characters missing from the bundled corpus
KANJIVG_BASE_URL = "https://raw.githubusercontent.com/KanjiVG/kanjivg/master/kanji/"
KANJIVG_TIMEOUT = 10.0

# Decimal places kept for normalized start points
START_POINT_PRECISION = 3

# Samples per stroke for guide overlays
GUIDE_SAMPLES = 32

# ===============================
# FEEDBACK MESSAGES
# ===============================

FEEDBACK_MESSAGES = {
    "correct": "Stroke {stroke_num} correct!",
    "wrong_direction": "Stroke {stroke_num}: wrong direction! Try again.",
    "wrong_start": "Stroke {stroke_num}: start closer to the guide.",
    "wrong_shape": "Stroke {stroke_num}: not quite right. Try again.",
    "too_short": "Stroke {stroke_num}: too short, draw the whole stroke.",
    "character_complete": "Character {char} complete!",
}

# ===============================
# DEBUG & DEVELOPMENT
# ===============================

# Enable debug logging in the demo entry points
DEBUG_MODE = False


def get_config(key: str, default=None):
    """Get configuration value by key, e.g. "SCORE_WEIGHTS.start"."""
    parts = key.split(".")
    obj = globals()

    for part in parts:
        if isinstance(obj, dict):
            obj = obj.get(part, default)
        else:
            return default

    return obj if obj is not None else default


if __name__ == "__main__":
    print("Stroke Tutor Configuration")
    print("=" * 50)
    print(f"Reference dimension: {REFERENCE_DIMENSION}")
    print(f"Start/End tolerance: {START_TOLERANCE}/{END_TOLERANCE}")
    print(f"Direction tolerance: {DIRECTION_TOLERANCE_DEGREES} deg")
    print(f"Valid threshold: {VALID_CONFIDENCE_THRESHOLD}")
    print(f"Character DB: {CHARACTER_DB_PATH}")
    print(f"Debug Mode: {DEBUG_MODE}")
