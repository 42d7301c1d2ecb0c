# orientation/classifier/classifier.py
# ============================================================
# Orientation Classifier — Two-Pass Confidence Heuristic
# ============================================================
# Decides, for one page, whether its text is right-side-up,
# upside-down, or unreadable.
#
# Flow:
#   1. Widen 1bpp scans to 8bpp grayscale
#   2. LAYOUT pass over the full page → region tree
#   3. Anchor = first paragraph (top-down) with >= 5 words
#   4. No regions at all → UNDETECTABLE, no confidence passes
#   5. Working image = page cropped to the anchor, or the
#      full page when no paragraph reached 5 words
#   6. TEXT pass on the working image → C1
#      C1 > 0.75 → CORRECT (second pass skipped)
#   7. TEXT pass on the working image rotated 180° → C2
#   8. Either pass above 0.40 → CORRECT if C1 >= C2 else
#      UPSIDE_DOWN; both at or below 0.40 → UNDETECTABLE
# ============================================================

import time
from dataclasses import dataclass
from typing import Optional

from PIL import Image

from orientation.classifier.verdicts import Verdict
from orientation.errors import InvalidInput, OrientationError, RecognizerFailure
from orientation.ocr.layout import BoundingBox, LayoutResult, Paragraph
from orientation.ocr.recognizer import RecognitionHint, Recognizer
from orientation.utils.image import crop_to_box, prepare_for_recognition, rotate_180
from orientation.utils.logger import get_logger

logger = get_logger(__name__)

HIGH_CONFIDENCE = 0.75
LOW_CONFIDENCE_FLOOR = 0.40
MIN_ANCHOR_WORDS = 5


@dataclass(frozen=True)
class Anchor:
    """Where the confidence passes look: a region box and whether to crop to it."""
    bbox: BoundingBox
    paragraph: Optional[Paragraph] = None

    @property
    def found(self) -> bool:
        return self.paragraph is not None


def find_anchor(layout: LayoutResult, min_words: int = MIN_ANCHOR_WORDS) -> Anchor:
    """
    Pick the first paragraph, in top-down reading order, with enough words.

    No scoring among candidates: the first qualifying paragraph wins.
    When none qualifies the anchor box is the extent of every region
    the layout pass found, which is empty for a page without text
    structure.
    """
    for _, paragraph in layout.paragraphs():
        if paragraph.word_count >= min_words and not paragraph.bbox.is_empty:
            return Anchor(bbox=paragraph.bbox, paragraph=paragraph)
    return Anchor(bbox=layout.extent())


def decide(first: float, second: float) -> Verdict:
    """
    Turn the confidences of the upright and rotated passes into a verdict.

    One pass clearing LOW_CONFIDENCE_FLOOR is enough to compare them, so
    (0.30, 0.55) is UPSIDE_DOWN; only when both stay at or below the
    floor is the page UNDETECTABLE.
    """
    if first > LOW_CONFIDENCE_FLOOR or second > LOW_CONFIDENCE_FLOOR:
        return Verdict.CORRECT if first >= second else Verdict.UPSIDE_DOWN
    return Verdict.UNDETECTABLE


class OrientationClassifier:
    """
    Classifies the text orientation of single page images.

    Holds no per-page state, so one instance serves every worker of a
    dispatch cycle as long as the recognizer is thread-safe.

    Example:
        >>> classifier = OrientationClassifier(TesseractRecognizer())
        >>> classifier.classify(Image.open("scan.tif"))
        <Verdict.CORRECT: 'correct'>
    """

    def __init__(self, recognizer: Recognizer):
        self.recognizer = recognizer

    def _recognize(self, image: Image.Image, hint: RecognitionHint) -> LayoutResult:
        try:
            return self.recognizer.recognize(image, hint)
        except OrientationError:
            raise
        except Exception as exc:
            raise RecognizerFailure(
                f"Recognizer raised {type(exc).__name__} during {hint.value} pass: {exc}",
                stage="recognize",
            ) from exc

    def classify(self, image: Image.Image) -> Verdict:
        """
        Detect the text orientation of one page.

        Only works reliably on pages that mostly contain text.

        Args:
            image: The page raster.

        Returns:
            CORRECT, UPSIDE_DOWN or UNDETECTABLE.

        Raises:
            InvalidInput: If the image is missing or empty.
            UnsupportedFormat: If the raster cannot be normalized.
            RecognizerFailure: If any recognition pass fails.
        """
        if image is None:
            raise InvalidInput("The page image is not set", stage="normalize")

        start = time.perf_counter()
        page = prepare_for_recognition(image)

        layout = self._recognize(page, RecognitionHint.LAYOUT)
        anchor = find_anchor(layout)

        if anchor.bbox.height == 0:
            logger.debug("Layout pass found no text regions")
            return Verdict.UNDETECTABLE

        if anchor.found:
            working = crop_to_box(page, anchor.bbox)
            logger.debug(
                f"Anchor paragraph with {anchor.paragraph.word_count} words at "
                f"{anchor.bbox.as_box()}, cropped to {working.width}x{working.height}"
            )
        else:
            working = page
            logger.debug("No paragraph with enough words, using the full page")

        first = self._recognize(working, RecognitionHint.TEXT).mean_confidence
        if first > HIGH_CONFIDENCE:
            logger.debug(f"C1={first:.2f} above {HIGH_CONFIDENCE}, page is upright")
            return Verdict.CORRECT

        second = self._recognize(rotate_180(working), RecognitionHint.TEXT).mean_confidence
        verdict = decide(first, second)

        logger.debug(
            f"C1={first:.2f} C2={second:.2f} → {verdict.value} "
            f"in {(time.perf_counter() - start) * 1000:.0f}ms"
        )
        return verdict
