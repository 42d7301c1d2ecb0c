# tests/conftest.py
# ============================================================
# Shared Test Fixtures
# ============================================================
# Scripted stand-ins for Tesseract. Pages are told apart by
# image size, so every test page gets a distinct (w, h).
# ============================================================

import threading
from dataclasses import dataclass, field

import pytest
from PIL import Image

from orientation.ocr.layout import (
    Block,
    BoundingBox,
    LayoutResult,
    Line,
    Paragraph,
    Word,
)
from orientation.ocr.recognizer import RecognitionHint


def make_paragraph(bbox: BoundingBox, words: int, words_per_line: int = 3) -> Paragraph:
    """Build a paragraph with `words` words spread over lines inside bbox."""
    lines = []
    remaining = words
    while remaining > 0:
        count = min(words_per_line, remaining)
        lines.append(Line(
            bbox=bbox,
            words=tuple(Word(bbox=bbox, text=f"w{i}", confidence=0.9) for i in range(count)),
        ))
        remaining -= count
    return Paragraph(bbox=bbox, lines=tuple(lines))


def make_layout(*paragraphs: Paragraph, confidence: float = 0.0) -> LayoutResult:
    """One block per paragraph, in the given order."""
    return LayoutResult(
        blocks=tuple(Block(bbox=p.bbox, paragraphs=(p,)) for p in paragraphs),
        mean_confidence=confidence,
    )


def full_page_layout(size: tuple[int, int], words: int = 8) -> LayoutResult:
    """Layout whose anchor paragraph covers the whole page."""
    return make_layout(make_paragraph(BoundingBox(0, 0, size[0], size[1]), words))


@dataclass
class PageScript:
    layout: LayoutResult
    confidences: list[float] = field(default_factory=list)


class ScriptedRecognizer:
    """
    Thread-safe fake recognizer.

    LAYOUT passes return the scripted layout for the image size, TEXT
    passes pop the next scripted confidence for that size. Every call
    is recorded as (size, hint).
    """

    def __init__(self, scripts: dict[tuple[int, int], PageScript]):
        self.scripts = scripts
        self.calls: list[tuple[tuple[int, int], RecognitionHint]] = []
        self._lock = threading.Lock()
        self._text_calls: dict[tuple[int, int], int] = {}

    def recognize(self, image: Image.Image, hint: RecognitionHint) -> LayoutResult:
        with self._lock:
            self.calls.append((image.size, hint))
            script = self.scripts[image.size]
            if hint == RecognitionHint.LAYOUT:
                return script.layout
            index = self._text_calls.get(image.size, 0)
            self._text_calls[image.size] = index + 1
        return LayoutResult(mean_confidence=script.confidences[index])

    def text_calls(self, size: tuple[int, int]) -> int:
        return sum(1 for s, hint in self.calls if s == size and hint == RecognitionHint.TEXT)


@pytest.fixture
def page_image():
    """A small 8-bit grayscale page."""
    return Image.new("L", (120, 160), color=255)


@pytest.fixture
def scripted_recognizer():
    """Factory: scripted_recognizer({size: PageScript(...)})."""
    return ScriptedRecognizer
