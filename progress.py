"""In-memory progress sink for completed practice sessions."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict, Optional

from models import CharacterProgress

logger = logging.getLogger(__name__)


class ProgressTracker:
    """Per-character attempt, success and hint counters."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._progress: Dict[str, CharacterProgress] = {}

    def update_progress(self, character: str, success: bool, hints_used: bool) -> None:
        with self._lock:
            current = self._progress.setdefault(character, CharacterProgress(character))
            current.attempts += 1
            if success:
                current.successes += 1
            if hints_used:
                current.hints_used += 1
            current.last_practiced = self._clock()
        logger.debug("Progress for %s: %s", character, current)

    def get_progress(self, character: str) -> Optional[CharacterProgress]:
        with self._lock:
            return self._progress.get(character)

    def all_progress(self) -> Dict[str, CharacterProgress]:
        with self._lock:
            return dict(self._progress)
