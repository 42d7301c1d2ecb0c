# orientation/ocr/engine.py
# ============================================================
# Tesseract Recognizer — pytesseract Integration
# ============================================================
# Wraps the Tesseract binary (through pytesseract) behind the
# Recognizer contract. Each call runs one Tesseract process, so
# a single instance can be shared by every dispatch worker.
#
# image_to_data returns one row per region at levels
#   1 page, 2 block, 3 paragraph, 4 line, 5 word
# keyed by (block_num, par_num, line_num, word_num). We fold
# those rows back into the block → paragraph → line → word tree.
# ============================================================

import threading
import time
from typing import Any, Optional

import pytesseract
from PIL import Image

from config.settings import settings
from orientation.errors import RecognizerFailure
from orientation.ocr.layout import (
    Block,
    BoundingBox,
    LayoutResult,
    Line,
    Paragraph,
    Word,
)
from orientation.ocr.recognizer import RecognitionHint
from orientation.utils.logger import get_logger

logger = get_logger(__name__)

# Page segmentation modes per hint:
#   1 = automatic page segmentation with orientation and script detection
#   3 = fully automatic page segmentation, no OSD
_PSM_BY_HINT = {
    RecognitionHint.LAYOUT: 1,
    RecognitionHint.TEXT: 3,
}

_LEVEL_BLOCK = 2
_LEVEL_PARAGRAPH = 3
_LEVEL_LINE = 4
_LEVEL_WORD = 5

# pytesseract looks the binary up on PATH under this name by default
_DEFAULT_TESSERACT_CMD = "tesseract"


def _row_bbox(data: dict, i: int) -> BoundingBox:
    return BoundingBox(
        left=int(data["left"][i]),
        top=int(data["top"][i]),
        width=int(data["width"][i]),
        height=int(data["height"][i]),
    )


def build_layout(data: dict[str, list[Any]]) -> LayoutResult:
    """
    Fold a pytesseract `image_to_data` DICT into a LayoutResult.

    Words with a confidence of -1 (no recognition data) or blank text
    are dropped. Region rows without a matching parent row (seen with
    some psm/oem combinations) get a parent built from the child's box.

    Args:
        data: Output of `pytesseract.image_to_data(..., output_type=Output.DICT)`.

    Returns:
        LayoutResult with regions in Tesseract's reading order and the
        mean word confidence scaled to [0.0, 1.0].
    """
    blocks: dict[int, dict] = {}
    confidences: list[float] = []

    def block_node(b: int, bbox: BoundingBox) -> dict:
        return blocks.setdefault(b, {"bbox": bbox, "paragraphs": {}})

    def paragraph_node(b: int, p: int, bbox: BoundingBox) -> dict:
        return block_node(b, bbox)["paragraphs"].setdefault(p, {"bbox": bbox, "lines": {}})

    def line_node(b: int, p: int, l: int, bbox: BoundingBox) -> dict:
        return paragraph_node(b, p, bbox)["lines"].setdefault(l, {"bbox": bbox, "words": []})

    for i, level in enumerate(data["level"]):
        level = int(level)
        b = int(data["block_num"][i])
        p = int(data["par_num"][i])
        l = int(data["line_num"][i])
        bbox = _row_bbox(data, i)

        if level == _LEVEL_BLOCK:
            block_node(b, bbox)["bbox"] = bbox
        elif level == _LEVEL_PARAGRAPH:
            paragraph_node(b, p, bbox)["bbox"] = bbox
        elif level == _LEVEL_LINE:
            line_node(b, p, l, bbox)["bbox"] = bbox
        elif level == _LEVEL_WORD:
            text = str(data["text"][i] or "").strip()
            conf = float(data["conf"][i])
            if not text or conf < 0:
                continue
            confidences.append(conf)
            line_node(b, p, l, bbox)["words"].append(Word(bbox=bbox, text=text, confidence=conf / 100.0))

    layout_blocks = tuple(
        Block(
            bbox=block["bbox"],
            paragraphs=tuple(
                Paragraph(
                    bbox=paragraph["bbox"],
                    lines=tuple(
                        Line(bbox=line["bbox"], words=tuple(line["words"]))
                        for line in paragraph["lines"].values()
                    ),
                )
                for paragraph in block["paragraphs"].values()
            ),
        )
        for block in blocks.values()
    )

    mean = sum(confidences) / len(confidences) / 100.0 if confidences else 0.0
    return LayoutResult(blocks=layout_blocks, mean_confidence=min(max(mean, 0.0), 1.0))


class TesseractRecognizer:
    """
    Recognizer backed by the Tesseract command line through pytesseract.

    pytesseract keeps the binary path in a module global, so a custom
    `tesseract_cmd` applies to the whole process. Instances configured
    with different binaries will replace each other's path; a warning
    is logged when that happens.
    """

    def __init__(
        self,
        language: Optional[str] = None,
        tessdata_dir: Optional[str] = None,
        tesseract_cmd: Optional[str] = None,
        oem: Optional[int] = None,
    ):
        self.language = language or settings.ocr_language
        self.tessdata_dir = tessdata_dir or settings.tessdata_dir
        self.tesseract_cmd = tesseract_cmd or settings.tesseract_cmd
        self.oem = oem if oem is not None else settings.ocr_oem

        self._load_lock = threading.Lock()
        self._is_loaded = False
        self._version: Optional[str] = None

        logger.info(
            f"TesseractRecognizer initialized — language: [bold]{self.language}[/bold], "
            f"oem: {self.oem}, tessdata: {self.tessdata_dir or 'default'}"
        )

    def _load_engine(self) -> None:
        """Point pytesseract at the configured binary and verify it runs."""
        if self._is_loaded:
            return

        with self._load_lock:
            if self._is_loaded:
                return

            if self.tesseract_cmd:
                current = pytesseract.pytesseract.tesseract_cmd
                if current not in (_DEFAULT_TESSERACT_CMD, self.tesseract_cmd):
                    logger.warning(
                        f"Replacing process-wide tesseract_cmd '{current}' "
                        f"with '{self.tesseract_cmd}'"
                    )
                pytesseract.pytesseract.tesseract_cmd = self.tesseract_cmd

            try:
                self._version = str(pytesseract.get_tesseract_version())
            except (pytesseract.TesseractNotFoundError, OSError) as exc:
                logger.error(f"Tesseract is not available: {exc}")
                raise RecognizerFailure(
                    f"Tesseract binary not found or not runnable: {exc}",
                    stage="recognize",
                ) from exc

            self._is_loaded = True
            logger.info(f"Tesseract {self._version} ready")

    def _build_config(self, hint: RecognitionHint) -> str:
        config = f"--oem {self.oem} --psm {_PSM_BY_HINT[hint]}"
        if self.tessdata_dir:
            config += f' --tessdata-dir "{self.tessdata_dir}"'
        return config

    def recognize(self, image: Image.Image, hint: RecognitionHint = RecognitionHint.TEXT) -> LayoutResult:
        """
        Run one Tesseract pass over an image.

        Args:
            image: Raster of at least 8 bits per pixel.
            hint: LAYOUT for the structural pass, TEXT for confidence passes.

        Returns:
            LayoutResult with the region tree and mean confidence.

        Raises:
            RecognizerFailure: If Tesseract is missing or fails on the image.
        """
        self._load_engine()
        start = time.perf_counter()

        try:
            data = pytesseract.image_to_data(
                image,
                lang=self.language,
                config=self._build_config(hint),
                output_type=pytesseract.Output.DICT,
            )
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError, OSError) as exc:
            raise RecognizerFailure(
                f"Tesseract failed on {image.width}x{image.height} {image.mode} image: {exc}",
                stage="recognize",
            ) from exc

        layout = build_layout(data)
        latency_ms = (time.perf_counter() - start) * 1000
        logger.debug(
            f"{hint.value} pass: {len(layout.blocks)} blocks, {layout.word_count} words, "
            f"confidence {layout.mean_confidence:.2f} in {latency_ms:.0f}ms"
        )
        return layout

    def health_check(self) -> dict:
        """Diagnostic health check. Never raises."""
        status = {
            "status": "unhealthy",
            "language": self.language,
            "tesseract_version": None,
            "language_installed": False,
            "installed_languages": [],
            "error": None,
        }

        try:
            self._load_engine()
            status["tesseract_version"] = self._version

            config = f'--tessdata-dir "{self.tessdata_dir}"' if self.tessdata_dir else ""
            installed = sorted(pytesseract.get_languages(config=config))
            status["installed_languages"] = installed
            status["language_installed"] = all(
                lang in installed for lang in self.language.split("+")
            )
            if status["language_installed"]:
                status["status"] = "healthy"
            else:
                status["error"] = f"Language '{self.language}' is not installed"
        except (RecognizerFailure, pytesseract.TesseractError, OSError) as e:
            status["error"] = str(e)

        return status
