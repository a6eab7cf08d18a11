"""
Stroke Data Providers
- Load the pre-processed reference stroke corpus (JSON)
- Extract reference strokes from KanjiVG SVG files
- Fetch missing characters from the KanjiVG repository
"""

import json
import logging
import os
from typing import Dict, List, Optional, Sequence, Union
from xml.dom import minidom
from xml.parsers.expat import ExpatError

import requests

import config
from errors import MalformedPath, StrokeDataError
from models import Point, ReferenceStroke
from path_resolver import path_start_point

logger = logging.getLogger(__name__)


def code_point_hex(character: str) -> str:
    """KanjiVG file key for a character, e.g. "一" -> "04e00"."""
    if len(character) != 1:
        raise ValueError(f"Expected a single character, got {character!r}")
    return format(ord(character), "05x")


# ===============================
# KanjiVG SVG Parsing
# ===============================

def _in_stroke_numbers(element) -> bool:
    node = element.parentNode
    while node is not None and node.nodeType == node.ELEMENT_NODE:
        if node.getAttribute("id").startswith("kvg:StrokeNumbers"):
            return True
        node = node.parentNode
    return False


def parse_kanjivg_svg(
    svg_text: Union[str, bytes], dimension: float = config.REFERENCE_DIMENSION
) -> Optional[List[ReferenceStroke]]:
    """
    Reference strokes of a KanjiVG SVG, in drawing order.

    Start points come from each path's leading moveto, normalized and
    rounded to config.START_POINT_PRECISION. Returns None if the file
    holds no stroke paths.
    """
    if isinstance(svg_text, str):
        svg_text = svg_text.encode("utf-8")
    try:
        doc = minidom.parseString(svg_text)
    except ExpatError as exc:
        raise StrokeDataError(f"Unreadable SVG: {exc}") from exc

    strokes = []
    for element in doc.getElementsByTagName("path"):
        if _in_stroke_numbers(element):
            continue
        path = element.getAttribute("d").strip()
        if not path:
            continue
        try:
            start = path_start_point(path, dimension)
        except MalformedPath as exc:
            raise StrokeDataError(f"Bad stroke path in SVG: {exc}") from exc
        strokes.append(ReferenceStroke(
            start_point=Point(
                round(start.x, config.START_POINT_PRECISION),
                round(start.y, config.START_POINT_PRECISION),
            ),
            path=path,
        ))
    doc.unlink()
    return strokes or None


# ===============================
# Bundled Corpus
# ===============================

class JsonStrokeCorpus:
    """
    Reference strokes loaded from a JSON corpus file.

    Format: {"04e00": {"character": "一", "strokeCount": 1,
             "strokes": [{"path": "...", "startX": 0.1, "startY": 0.5}]}}
    """

    def __init__(self, json_path: str = config.CHARACTER_DB_PATH):
        self.json_path = json_path
        self.entries: Dict[str, dict] = {}
        self.load()

    def load(self):
        if not os.path.exists(self.json_path):
            logger.warning("Stroke corpus %s not found", self.json_path)
            return

        try:
            with open(self.json_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as exc:
            raise StrokeDataError(f"Cannot read stroke corpus {self.json_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise StrokeDataError(f"Stroke corpus {self.json_path} must be a JSON object")

        self.entries = {key.lower().zfill(5): entry for key, entry in data.items()}
        logger.info("Loaded %d characters from %s", len(self.entries), self.json_path)

    def __len__(self):
        return len(self.entries)

    def __contains__(self, character):
        try:
            return code_point_hex(character) in self.entries
        except ValueError:
            return False

    def characters(self) -> List[str]:
        return [entry.get("character", "") for entry in self.entries.values()]

    def get_strokes(self, character: str) -> Optional[List[ReferenceStroke]]:
        try:
            entry = self.entries.get(code_point_hex(character))
        except ValueError:
            return None
        if not entry:
            return None
        try:
            return [ReferenceStroke.from_dict(s) for s in entry["strokes"]] or None
        except (KeyError, TypeError, ValueError) as exc:
            raise StrokeDataError(f"Malformed corpus entry for {character!r}: {exc}") from exc


# ===============================
# Remote KanjiVG
# ===============================

class KanjiVGClient:
    """Fetches a character's SVG from the KanjiVG repository."""

    def __init__(
        self,
        base_url: str = config.KANJIVG_BASE_URL,
        session: Optional[requests.Session] = None,
        timeout: float = config.KANJIVG_TIMEOUT,
    ):
        self.base_url = base_url
        self.session = session or requests.Session()
        self.timeout = timeout

    def get_strokes(self, character: str) -> Optional[List[ReferenceStroke]]:
        try:
            url = f"{self.base_url}{code_point_hex(character)}.svg"
        except ValueError:
            return None

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            logger.warning("Failed to fetch stroke data from %s: %s", url, exc)
            return None

        if response.status_code != 200:
            logger.warning("Remote stroke data not found: %s (%s)", url, response.status_code)
            return None

        try:
            return parse_kanjivg_svg(response.text)
        except StrokeDataError as exc:
            logger.warning("Unusable stroke data from %s: %s", url, exc)
            return None


class ChainedStrokeProvider:
    """Asks each provider in turn; the first non-empty answer wins."""

    def __init__(self, *providers):
        self.providers = providers

    def get_strokes(self, character: str) -> Optional[Sequence[ReferenceStroke]]:
        for provider in self.providers:
            strokes = provider.get_strokes(character)
            if strokes:
                return strokes
        return None
