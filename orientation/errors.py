# orientation/errors.py
# ============================================================
# Error Taxonomy
# ============================================================
# Every failure that aborts a document raises one of these.
# None of them is recovered below the PipelineOrchestrator:
# callers get either the full ordered verdict list or one of
# these errors naming the stage and page that failed.
#
#   OrientationError
#     ├── InvalidInput               bad page / document / container
#     ├── UnsupportedFormat          raster depth we cannot normalize
#     ├── RecognizerFailure          Tesseract could not process an image
#     ├── InternalInvariantViolation duplicate/missing result key
#     └── DispatchCancelled          caller cancelled the batch
# ============================================================

from typing import Optional


class OrientationError(Exception):
    """Base class for every error raised by the orientation pipeline."""

    def __init__(
        self,
        message: str,
        *,
        stage: Optional[str] = None,
        page_number: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.page_number = page_number

    def with_page(self, page_number: int) -> "OrientationError":
        """Attach the page number if no deeper layer did so already."""
        if self.page_number is None:
            self.page_number = page_number
        return self

    def __str__(self) -> str:
        context = []
        if self.stage:
            context.append(f"stage={self.stage}")
        if self.page_number is not None:
            context.append(f"page={self.page_number}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class InvalidInput(OrientationError, ValueError):
    """Empty page, zero-page document, or unreadable container."""


class UnsupportedFormat(OrientationError, ValueError):
    """Raster depth or mode the raster adapter cannot normalize."""


class RecognizerFailure(OrientationError, RuntimeError):
    """The text recognizer could not process an image."""


class InternalInvariantViolation(OrientationError, RuntimeError):
    """A page number was inserted twice, or never, into the result map."""


class DispatchCancelled(OrientationError):
    """The caller's cancellation token fired before every page was classified."""
