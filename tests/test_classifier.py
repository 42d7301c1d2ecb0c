# tests/test_classifier.py
# ============================================================
# Unit Tests — Orientation Classifier
# ============================================================
# Drives the two-pass heuristic with a mocked recognizer whose
# side_effect scripts the LAYOUT pass and both TEXT passes.
#
# Run:
#   pytest tests/test_classifier.py -v
# ============================================================

from unittest.mock import MagicMock

import pytest
from PIL import Image

from conftest import full_page_layout, make_layout, make_paragraph
from orientation.classifier.classifier import (
    HIGH_CONFIDENCE,
    LOW_CONFIDENCE_FLOOR,
    OrientationClassifier,
    decide,
    find_anchor,
)
from orientation.classifier.verdicts import Verdict, list_verdicts
from orientation.errors import InvalidInput, RecognizerFailure
from orientation.ocr.layout import BoundingBox, LayoutResult
from orientation.ocr.recognizer import RecognitionHint


def _recognizer(layout: LayoutResult, *confidences: float) -> MagicMock:
    """Mock recognizer: first call returns layout, then one result per confidence."""
    recognizer = MagicMock()
    recognizer.recognize.side_effect = [layout] + [
        LayoutResult(mean_confidence=c) for c in confidences
    ]
    return recognizer


# ============================================================
# Verdict Vocabulary
# ============================================================

class TestVerdicts:

    def test_all_five_verdicts_declared(self):
        assert list_verdicts() == [
            "correct", "upside_down", "rotated_left", "rotated_right", "undetectable",
        ]

    def test_verdict_is_string_enum(self):
        assert Verdict("upside_down") is Verdict.UPSIDE_DOWN
        assert Verdict.CORRECT == "correct"


# ============================================================
# Decision Rule
# ============================================================

class TestDecide:

    def test_thresholds(self):
        assert HIGH_CONFIDENCE == 0.75
        assert LOW_CONFIDENCE_FLOOR == 0.40

    def test_both_above_floor_first_higher_is_correct(self):
        assert decide(0.60, 0.50) == Verdict.CORRECT

    def test_both_above_floor_second_higher_is_upside_down(self):
        assert decide(0.50, 0.60) == Verdict.UPSIDE_DOWN

    def test_tie_favors_correct(self):
        assert decide(0.55, 0.55) == Verdict.CORRECT

    def test_both_at_or_below_floor_is_undetectable(self):
        assert decide(0.40, 0.40) == Verdict.UNDETECTABLE
        assert decide(0.10, 0.39) == Verdict.UNDETECTABLE

    def test_only_rotated_pass_clears_floor(self):
        """A weak upright pass against a readable rotated pass means upside down."""
        assert decide(0.30, 0.55) == Verdict.UPSIDE_DOWN

    def test_never_produces_rotated_left_or_right(self):
        grid = [i / 20 for i in range(21)]
        produced = {decide(a, b) for a in grid for b in grid}
        assert Verdict.ROTATED_LEFT not in produced
        assert Verdict.ROTATED_RIGHT not in produced


# ============================================================
# Anchor Region
# ============================================================

class TestFindAnchor:

    def test_first_qualifying_paragraph_wins(self):
        small = make_paragraph(BoundingBox(0, 0, 50, 10), words=4)
        first = make_paragraph(BoundingBox(0, 20, 50, 10), words=5)
        second = make_paragraph(BoundingBox(0, 40, 50, 30), words=20)

        anchor = find_anchor(make_layout(small, first, second))

        assert anchor.found
        assert anchor.bbox == BoundingBox(0, 20, 50, 10)

    def test_no_qualifying_paragraph_falls_back_to_extent(self):
        a = make_paragraph(BoundingBox(10, 10, 20, 10), words=2)
        b = make_paragraph(BoundingBox(40, 50, 20, 10), words=3)

        anchor = find_anchor(make_layout(a, b))

        assert not anchor.found
        assert anchor.bbox == BoundingBox(10, 10, 50, 50)

    def test_empty_layout_gives_empty_box(self):
        anchor = find_anchor(LayoutResult())
        assert not anchor.found
        assert anchor.bbox.height == 0


# ============================================================
# Classifier
# ============================================================

class TestOrientationClassifier:

    def test_high_confidence_returns_correct_without_second_pass(self, page_image):
        recognizer = _recognizer(full_page_layout(page_image.size), 0.80)

        verdict = OrientationClassifier(recognizer).classify(page_image)

        assert verdict == Verdict.CORRECT
        assert recognizer.recognize.call_count == 2

    def test_exactly_high_threshold_runs_second_pass(self, page_image):
        recognizer = _recognizer(full_page_layout(page_image.size), 0.75, 0.50)

        verdict = OrientationClassifier(recognizer).classify(page_image)

        assert recognizer.recognize.call_count == 3
        assert verdict == Verdict.CORRECT

    def test_rotated_pass_higher_is_upside_down(self, page_image):
        recognizer = _recognizer(full_page_layout(page_image.size), 0.45, 0.70)
        assert OrientationClassifier(recognizer).classify(page_image) == Verdict.UPSIDE_DOWN

    def test_both_passes_low_is_undetectable(self, page_image):
        recognizer = _recognizer(full_page_layout(page_image.size), 0.20, 0.35)
        assert OrientationClassifier(recognizer).classify(page_image) == Verdict.UNDETECTABLE

    def test_empty_layout_short_circuits(self, page_image):
        """No regions → UNDETECTABLE before any confidence pass."""
        recognizer = _recognizer(LayoutResult(mean_confidence=0.99))

        verdict = OrientationClassifier(recognizer).classify(page_image)

        assert verdict == Verdict.UNDETECTABLE
        assert recognizer.recognize.call_count == 1

    def test_pass_hints(self, page_image):
        recognizer = _recognizer(full_page_layout(page_image.size), 0.50, 0.45)
        OrientationClassifier(recognizer).classify(page_image)

        hints = [c.args[1] for c in recognizer.recognize.call_args_list]
        assert hints == [RecognitionHint.LAYOUT, RecognitionHint.TEXT, RecognitionHint.TEXT]

    def test_confidence_passes_use_cropped_anchor(self, page_image):
        anchor = make_paragraph(BoundingBox(10, 20, 60, 30), words=6)
        recognizer = _recognizer(make_layout(anchor), 0.50, 0.45)

        OrientationClassifier(recognizer).classify(page_image)

        first_text = recognizer.recognize.call_args_list[1].args[0]
        assert first_text.size == (60, 30)

    def test_second_pass_is_actually_rotated(self):
        """The rotated pass must see the pixels turned by 180 degrees."""
        image = Image.new("L", (40, 20), color=255)
        image.putpixel((0, 0), 0)
        seen = []

        def recognize(img, hint):
            if hint == RecognitionHint.LAYOUT:
                return full_page_layout(img.size)
            seen.append(img.copy())
            return LayoutResult(mean_confidence=0.5)

        recognizer = MagicMock()
        recognizer.recognize.side_effect = recognize
        OrientationClassifier(recognizer).classify(image)

        upright, rotated = seen
        assert upright.getpixel((0, 0)) == 0
        assert rotated.getpixel((0, 0)) == 255
        assert rotated.getpixel((39, 19)) == 0

    def test_small_paragraphs_use_full_page(self, page_image):
        short = make_paragraph(BoundingBox(10, 10, 30, 10), words=3)
        recognizer = _recognizer(make_layout(short), 0.50, 0.45)

        OrientationClassifier(recognizer).classify(page_image)

        first_text = recognizer.recognize.call_args_list[1].args[0]
        assert first_text.size == page_image.size

    def test_bilevel_page_is_widened_before_recognition(self):
        image = Image.new("1", (64, 48), color=1)
        recognizer = _recognizer(LayoutResult())

        OrientationClassifier(recognizer).classify(image)

        layout_input = recognizer.recognize.call_args_list[0].args[0]
        assert layout_input.mode == "L"
        assert layout_input.size == (64, 48)

    def test_idempotent_with_deterministic_recognizer(self, page_image):
        def recognize(img, hint):
            if hint == RecognitionHint.LAYOUT:
                return full_page_layout(img.size)
            return LayoutResult(mean_confidence=0.6 if img.getpixel((0, 0)) == 0 else 0.5)

        page_image.putpixel((0, 0), 0)
        recognizer = MagicMock()
        recognizer.recognize.side_effect = recognize
        classifier = OrientationClassifier(recognizer)

        assert classifier.classify(page_image) == classifier.classify(page_image) == Verdict.CORRECT

    def test_missing_image_raises_invalid_input(self):
        with pytest.raises(InvalidInput):
            OrientationClassifier(MagicMock()).classify(None)

    def test_empty_image_raises_invalid_input(self):
        with pytest.raises(InvalidInput):
            OrientationClassifier(MagicMock()).classify(Image.new("L", (0, 0)))

    def test_recognizer_exception_becomes_recognizer_failure(self, page_image):
        recognizer = MagicMock()
        recognizer.recognize.side_effect = RuntimeError("tesseract crashed")

        with pytest.raises(RecognizerFailure, match="tesseract crashed") as exc_info:
            OrientationClassifier(recognizer).classify(page_image)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_recognizer_failure_passes_through(self, page_image):
        original = RecognizerFailure("no tessdata", stage="recognize")
        recognizer = MagicMock()
        recognizer.recognize.side_effect = original

        with pytest.raises(RecognizerFailure) as exc_info:
            OrientationClassifier(recognizer).classify(page_image)
        assert exc_info.value is original
