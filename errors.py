"""Exceptions raised by the stroke engine and its stroke data providers."""

from __future__ import annotations


class StrokeTutorError(Exception):
    """Base class for stroke tutor errors."""


class MalformedPath(StrokeTutorError, ValueError):
    """A reference path description could not be interpreted."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{reason} in path {path!r}")
        self.path = path
        self.reason = reason


class StrokeDataUnavailable(StrokeTutorError, LookupError):
    """No reference strokes exist for the requested character."""

    def __init__(self, character: str) -> None:
        super().__init__(f"No stroke data available for {character!r}")
        self.character = character


class StrokeDataError(StrokeTutorError):
    """Stroke corpus or SVG source is unreadable."""
