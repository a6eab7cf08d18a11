"""
Shared test fixtures for the stroke tutor tests.

Provides reference stroke builders, straight-line freehand strokes,
and fake collaborators for the practice session.
"""

import pytest

from models import Point, ReferenceStroke


class FakeTimer:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Records scheduled callbacks; tests fire them explicitly."""

    def __init__(self):
        self.timers = []

    def call_later(self, delay, callback):
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self):
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def fire_pending(self):
        for timer in self.pending:
            timer.fired = True
            timer.callback()


class FakeProgressSink:
    def __init__(self):
        self.calls = []

    def update_progress(self, character, success, hints_used):
        self.calls.append((character, success, hints_used))


def _make_ref_stroke(start_x, start_y, end_x, end_y):
    # M ... L path in the 109-unit reference space
    return ReferenceStroke(
        start_point=Point(start_x, start_y),
        path=(
            f"M {start_x * 109:.4f},{start_y * 109:.4f} "
            f"L {end_x * 109:.4f},{end_y * 109:.4f}"
        ),
    )


def _straight_line(start, end, num_points=20):
    pts = []
    for i in range(num_points):
        t = i / (num_points - 1)
        pts.append((start[0] + (end[0] - start[0]) * t, start[1] + (end[1] - start[1]) * t))
    return pts


@pytest.fixture
def make_ref_stroke():
    """Factory for straight reference strokes given normalized endpoints."""
    return _make_ref_stroke


@pytest.fixture
def straight_line():
    """Factory for evenly sampled freehand strokes between two points."""
    return _straight_line


@pytest.fixture
def horizontal_ref():
    return ReferenceStroke(Point(0.1, 0.5), "M 10.9,54.5 L 98.1,54.5")


@pytest.fixture
def vertical_ref():
    return ReferenceStroke(Point(0.5, 0.1), "M 54.5,10.9 L 54.5,98.1")


@pytest.fixture
def fake_scheduler():
    return FakeScheduler()


@pytest.fixture
def fake_sink():
    return FakeProgressSink()
