# orientation/ocr/__init__.py
# ============================================================
# Recognizer Package
# ============================================================
# Everything the classifier needs from text recognition:
#
# Key classes:
#   - Recognizer / RecognitionHint: the recognizer contract
#   - LayoutResult (+ Block, Paragraph, Line, Word, BoundingBox)
#   - TesseractRecognizer: pytesseract-backed implementation
# ============================================================

from orientation.ocr.layout import (
    Block,
    BoundingBox,
    LayoutResult,
    Line,
    Paragraph,
    Word,
)
from orientation.ocr.recognizer import RecognitionHint, Recognizer
from orientation.ocr.engine import TesseractRecognizer, build_layout

__all__ = [
    "Block",
    "BoundingBox",
    "LayoutResult",
    "Line",
    "Paragraph",
    "Word",
    "RecognitionHint",
    "Recognizer",
    "TesseractRecognizer",
    "build_layout",
]
