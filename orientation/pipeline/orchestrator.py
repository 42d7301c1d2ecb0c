# orientation/pipeline/orchestrator.py
# ============================================================
# Pipeline Orchestrator — End-to-End Orientation Detection
# ============================================================
# Single entry point: document → pages → parallel detection →
# ordered verdicts.
#
# Design Decisions:
#   1. All-or-nothing: any page failure aborts the document, the
#      caller never gets a verdict list with silent gaps.
#   2. Collaborators are injectable (recognizer, processor) so the
#      pipeline runs against scripted recognizers in tests.
#   3. No state crosses calls; one orchestrator can serve many
#      documents, also concurrently.
#
# Usage:
#   from orientation.pipeline.orchestrator import PipelineOrchestrator
#   pipeline = PipelineOrchestrator(language="nld")
#   result = pipeline.detect("batch.tif")
#   result.save_json("output/batch.json")
# ============================================================

import json
import threading
import time
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from PIL import Image

from orientation.classifier.classifier import OrientationClassifier
from orientation.classifier.verdicts import Verdict
from orientation.document.processor import Document, DocumentProcessor, PageImage
from orientation.ocr.engine import TesseractRecognizer
from orientation.ocr.recognizer import Recognizer
from orientation.pipeline.dispatcher import WorkDispatcher
from orientation.utils.logger import get_logger

logger = get_logger(__name__)


# ============================================================
# Data Classes
# ============================================================

@dataclass
class DocumentResult:
    """
    Orientation verdicts for an entire document.

    Attributes:
        verdicts: One verdict per page, in page order.
        source_path: Where the document came from.
        total_pages: Number of pages processed.
        total_latency_ms: End-to-end processing time in milliseconds.
        load_latency_ms: Time spent splitting the document into pages.
    """
    verdicts: list[Verdict] = field(default_factory=list)
    source_path: str = ""
    total_pages: int = 0
    total_latency_ms: float = 0.0
    load_latency_ms: float = 0.0

    @property
    def pages(self) -> list[tuple[int, Verdict]]:
        """(page number, verdict) pairs, page numbers starting at 1."""
        return list(enumerate(self.verdicts, start=1))

    @property
    def upside_down_pages(self) -> list[int]:
        return [num for num, verdict in self.pages if verdict == Verdict.UPSIDE_DOWN]

    def counts(self) -> dict[str, int]:
        """Number of pages per verdict value, zero counts included."""
        tally = Counter(v.value for v in self.verdicts)
        return {verdict.value: tally.get(verdict.value, 0) for verdict in Verdict}

    def to_dict(self) -> dict:
        return {
            "source_path": self.source_path,
            "total_pages": self.total_pages,
            "total_latency_ms": round(self.total_latency_ms, 2),
            "load_latency_ms": round(self.load_latency_ms, 2),
            "counts": self.counts(),
            "pages": [
                {"page_num": num, "verdict": verdict.value}
                for num, verdict in self.pages
            ],
        }

    def save_json(self, output_path: Union[str, Path]) -> str:
        """
        Save the verdicts as a structured JSON file.

        Args:
            output_path: File path for the output .json file.

        Returns:
            The absolute path to the saved file.
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
        logger.info(f"Saved JSON to [bold]{output_path}[/bold]")
        return str(output_path.resolve())


# ============================================================
# Pipeline Orchestrator
# ============================================================

class PipelineOrchestrator:
    """
    End-to-end page orientation pipeline.

    Flow:
        1. DocumentProcessor.load() → list[PageImage]
        2. WorkDispatcher.dispatch() → OrientationClassifier per page
        3. Package into DocumentResult

    Example:
        >>> pipeline = PipelineOrchestrator()
        >>> pipeline.detect_page_orientation("scan.tif")
        [<Verdict.CORRECT: 'correct'>, <Verdict.UPSIDE_DOWN: 'upside_down'>]
    """

    def __init__(
        self,
        recognizer: Optional[Recognizer] = None,
        processor: Optional[DocumentProcessor] = None,
        max_workers: Optional[int] = None,
        language: Optional[str] = None,
    ):
        """
        If not provided, default instances are created using settings.

        Args:
            recognizer: Text recognizer. Default: TesseractRecognizer.
            processor: Page source. Default: DocumentProcessor.
            max_workers: Parallelism cap for the dispatcher.
            language: Tesseract language for the default recognizer.
        """
        self.recognizer = recognizer or TesseractRecognizer(language=language)
        self.processor = processor or DocumentProcessor()
        self.classifier = OrientationClassifier(self.recognizer)
        self.dispatcher = WorkDispatcher(self.classifier, max_workers=max_workers)

        logger.info("PipelineOrchestrator initialized")

    def load(self, document: Document) -> list[PageImage]:
        """Split a document into pages without classifying them."""
        return self.processor.load(document)

    def detect(
        self,
        document: Document,
        cancel_event: Optional[threading.Event] = None,
    ) -> DocumentResult:
        """
        Detect the orientation of every page of a document.

        Args:
            document: File path, directory, raw bytes, binary stream, or a
                pre-split sequence of pages.
            cancel_event: Optional cancellation token for the dispatch cycle.

        Returns:
            DocumentResult with one verdict per page, in page order.

        Raises:
            OrientationError: InvalidInput, UnsupportedFormat,
                RecognizerFailure, InternalInvariantViolation or
                DispatchCancelled. No partial result is returned.
        """
        pipeline_start = time.perf_counter()
        source = str(document) if isinstance(document, (str, Path)) else ""
        logger.info(f"Pipeline starting — document: [bold]{source or type(document).__name__}[/bold]")

        pages = self.processor.load(document)
        load_time = (time.perf_counter() - pipeline_start) * 1000

        return self.detect_pages(
            pages,
            cancel_event=cancel_event,
            source_path=source or None,
            load_latency_ms=load_time,
        )

    def detect_pages(
        self,
        pages: list[PageImage],
        cancel_event: Optional[threading.Event] = None,
        source_path: Optional[str] = None,
        load_latency_ms: float = 0.0,
    ) -> DocumentResult:
        """
        Detect orientations for pages that were already loaded.

        Lets callers that need the pages afterwards (e.g. to write a
        corrected document) load once and still get a full result.

        Args:
            pages: Output of `load()`, in document order.
            cancel_event: Optional cancellation token for the dispatch cycle.
            source_path: Reported source. Default: the pages' own source.
            load_latency_ms: Time already spent loading, added to the total.
        """
        dispatch_start = time.perf_counter()
        verdicts = self.dispatcher.dispatch(pages, cancel_event=cancel_event)
        total_latency = load_latency_ms + (time.perf_counter() - dispatch_start) * 1000

        result = DocumentResult(
            verdicts=verdicts,
            source_path=source_path or pages[0].source_path,
            total_pages=len(pages),
            total_latency_ms=total_latency,
            load_latency_ms=load_latency_ms,
        )

        summary = ", ".join(f"{name}: {count}" for name, count in result.counts().items() if count)
        logger.info(
            f"Pipeline complete — {len(pages)} pages, {total_latency:.0f}ms total, "
            f"avg {total_latency / max(len(pages), 1):.0f}ms/page ({summary})"
        )
        return result

    def detect_page_orientation(self, document: Document) -> list[Verdict]:
        """Detect page orientations and return just the ordered verdicts."""
        return self.detect(document).verdicts

    def detect_image(self, image: Image.Image) -> Verdict:
        """Classify a single page raster on the calling thread."""
        return self.classifier.classify(image)
