import json
import logging
from pathlib import Path

import pytest
import requests

from errors import StrokeDataError
from models import Point, ReferenceStroke
from path_resolver import path_start_point, resolve_path_endpoint
from stroke_data import (
    ChainedStrokeProvider,
    JsonStrokeCorpus,
    KanjiVGClient,
    code_point_hex,
    parse_kanjivg_svg,
)

BUNDLED_CORPUS = Path(__file__).resolve().parent.parent / "stroke-data" / "strokes.json"

JUU_SVG = """<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" xmlns:kvg="http://kanjivg.tagaini.net" width="109" height="109" viewBox="0 0 109 109">
<g id="kvg:StrokePaths_05341" style="fill:none;stroke:#000000;stroke-width:3;">
<g id="kvg:05341" kvg:element="十" kvg:radical="general">
  <path id="kvg:05341-s1" kvg:type="㇐" d="M13.75,48.25c3.39,0.86,7.36,0.9,10.7,0.5c15.76-1.88,41.3-4.17,60.3-4.49c3.71-0.06,6.9,0.06,9.75,0.8"/>
  <path id="kvg:05341-s2" kvg:type="㇑" d="M52.75,13.63c1,1,1.62,2.62,1.62,4.62c0,11.25,0.04,63.62,0.04,77.25"/>
</g>
</g>
<g id="kvg:StrokeNumbers_05341" style="font-size:8;fill:#808080">
  <text transform="matrix(1 0 0 1 6.50 45.50)">1</text>
  <path d="M1,1 L2,2"/>
</g>
</svg>
"""


def _write_corpus(tmp_path, data):
    path = tmp_path / "strokes.json"
    path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
    return str(path)


def test_code_point_hex() -> None:
    assert code_point_hex("一") == "04e00"
    assert code_point_hex("十") == "05341"
    assert code_point_hex("あ") == "03042"
    with pytest.raises(ValueError):
        code_point_hex("十一")


# --- KanjiVG SVG -----------------------------------------------------------

def test_parse_kanjivg_svg_skips_stroke_numbers() -> None:
    strokes = parse_kanjivg_svg(JUU_SVG)

    assert len(strokes) == 2
    assert strokes[0].start_point == Point(0.126, 0.443)
    assert strokes[1].start_point == Point(0.484, 0.125)
    assert strokes[1].path.startswith("M52.75,13.63")


def test_parse_kanjivg_svg_without_paths() -> None:
    assert parse_kanjivg_svg("<svg></svg>") is None


def test_parse_kanjivg_svg_bad_path() -> None:
    with pytest.raises(StrokeDataError):
        parse_kanjivg_svg('<svg><path d="L1,2 3,4"/></svg>')


def test_parse_kanjivg_svg_single_quoted_attributes() -> None:
    strokes = parse_kanjivg_svg(
        "<svg xmlns='http://www.w3.org/2000/svg'>"
        "<path id='s1' d='M11,54.25c3.12,0.62,6.62,0.75,9.75,0.5'/>"
        "</svg>"
    )

    assert strokes == [
        ReferenceStroke(Point(0.101, 0.498), "M11,54.25c3.12,0.62,6.62,0.75,9.75,0.5")
    ]


def test_parse_kanjivg_svg_accepts_bytes() -> None:
    assert len(parse_kanjivg_svg(JUU_SVG.encode("utf-8"))) == 2


def test_parse_kanjivg_svg_unreadable_xml() -> None:
    with pytest.raises(StrokeDataError):
        parse_kanjivg_svg("<svg><path d='M1,1'></svg>")


# --- JSON corpus -----------------------------------------------------------

def test_corpus_lookup(tmp_path) -> None:
    corpus = JsonStrokeCorpus(_write_corpus(tmp_path, {
        "04E00": {
            "character": "一",
            "strokeCount": 1,
            "strokes": [{"path": "M11,54.25 L99,50.24", "startX": 0.101, "startY": 0.498}],
        }
    }))

    assert len(corpus) == 1
    assert "一" in corpus
    assert "二" not in corpus
    assert corpus.characters() == ["一"]
    assert corpus.get_strokes("一") == [
        ReferenceStroke(Point(0.101, 0.498), "M11,54.25 L99,50.24")
    ]
    assert corpus.get_strokes("二") is None
    assert corpus.get_strokes("") is None


def test_missing_corpus_is_empty(tmp_path, caplog) -> None:
    with caplog.at_level(logging.WARNING):
        corpus = JsonStrokeCorpus(str(tmp_path / "absent.json"))

    assert len(corpus) == 0
    assert "not found" in caplog.text


def test_unreadable_corpus_raises(tmp_path) -> None:
    path = tmp_path / "strokes.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(StrokeDataError):
        JsonStrokeCorpus(str(path))


def test_corpus_must_be_object(tmp_path) -> None:
    with pytest.raises(StrokeDataError):
        JsonStrokeCorpus(_write_corpus(tmp_path, [1, 2, 3]))


def test_malformed_entry_raises(tmp_path) -> None:
    corpus = JsonStrokeCorpus(_write_corpus(tmp_path, {"04e00": {"character": "一"}}))

    with pytest.raises(StrokeDataError):
        corpus.get_strokes("一")


def test_bundled_corpus_is_consistent() -> None:
    corpus = JsonStrokeCorpus(str(BUNDLED_CORPUS))

    assert set(corpus.characters()) == {"一", "二", "十"}
    for char in corpus.characters():
        for stroke in corpus.get_strokes(char):
            start = path_start_point(stroke.path)
            assert stroke.start_point.x == round(start.x, 3)
            assert stroke.start_point.y == round(start.y, 3)
            resolve_path_endpoint(stroke.path)


# --- Remote KanjiVG --------------------------------------------------------

class FakeResponse:
    def __init__(self, status_code, text=""):
        self.status_code = status_code
        self.text = text


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        if self.error is not None:
            raise self.error
        return self.response


def test_kanjivg_client_fetches_svg() -> None:
    session = FakeSession(FakeResponse(200, JUU_SVG))
    client = KanjiVGClient(base_url="https://example.test/kanji/", session=session, timeout=3.0)

    strokes = client.get_strokes("十")

    assert len(strokes) == 2
    assert session.calls == [("https://example.test/kanji/05341.svg", 3.0)]


def test_kanjivg_client_not_found(caplog) -> None:
    client = KanjiVGClient(session=FakeSession(FakeResponse(404)))

    with caplog.at_level(logging.WARNING):
        assert client.get_strokes("十") is None
    assert "not found" in caplog.text


def test_kanjivg_client_network_error() -> None:
    client = KanjiVGClient(session=FakeSession(error=requests.exceptions.ConnectionError("down")))

    assert client.get_strokes("十") is None


def test_kanjivg_client_unusable_svg() -> None:
    client = KanjiVGClient(session=FakeSession(FakeResponse(200, '<svg><path d="oops"/></svg>')))

    assert client.get_strokes("十") is None


def test_kanjivg_client_skips_multi_character_input() -> None:
    session = FakeSession(FakeResponse(200, JUU_SVG))

    assert KanjiVGClient(session=session).get_strokes("十一") is None
    assert session.calls == []


# --- Chaining --------------------------------------------------------------

class _StaticProvider:
    def __init__(self, strokes):
        self.strokes = strokes
        self.asked = []

    def get_strokes(self, character):
        self.asked.append(character)
        return self.strokes


def test_chained_provider_falls_through(horizontal_ref) -> None:
    empty = _StaticProvider(None)
    full = _StaticProvider([horizontal_ref])
    never = _StaticProvider([horizontal_ref])

    chain = ChainedStrokeProvider(empty, full, never)

    assert chain.get_strokes("一") == [horizontal_ref]
    assert empty.asked == ["一"]
    assert never.asked == []


def test_chained_provider_all_empty() -> None:
    assert ChainedStrokeProvider(_StaticProvider(None), _StaticProvider([])).get_strokes("一") is None
