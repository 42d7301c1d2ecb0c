# orientation/ocr/recognizer.py
# ============================================================
# Recognizer Contract
# ============================================================
# The classifier only needs one thing from a text recognizer:
# given a raster and a hint, return a LayoutResult. Anything
# that implements `recognize` fits, which is how tests swap in
# scripted fakes for Tesseract.
# ============================================================

from enum import Enum
from typing import Protocol

from PIL import Image

from orientation.ocr.layout import LayoutResult


class RecognitionHint(str, Enum):
    """
    What a recognition pass is for.

    - LAYOUT: automatic page segmentation with orientation analysis,
      used once per page to find the anchor region.
    - TEXT: plain text recognition, used for the confidence passes.
    """
    LAYOUT = "layout"
    TEXT = "text"


class Recognizer(Protocol):
    """Anything that turns a raster into a LayoutResult. Must be thread-safe."""

    def recognize(self, image: Image.Image, hint: RecognitionHint) -> LayoutResult:
        ...
