# orientation/document/processor.py
# ============================================================
# Document Processor — Page Source
# ============================================================
# Splits input documents into an ordered list of page rasters
# that the dispatcher can fan out.
#
# Supported inputs:
#   - Multi-page TIFF and other Pillow formats: one page per frame
#   - PDF: rendered to images via pdf2image (poppler backend)
#   - Directories: every supported file, sorted by name
#   - Raw container bytes or a binary stream
#   - A pre-split sequence of PIL Images or PageImages
#
# Usage:
#   from orientation.document.processor import DocumentProcessor
#   processor = DocumentProcessor()
#   pages = processor.load("scan.tif")
#   for page in pages:
#       print(f"Page {page.page_num}: {page.image.size}")
# ============================================================

import io
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Union

from PIL import Image, ImageSequence, UnidentifiedImageError

from config.settings import settings
from orientation.errors import InvalidInput
from orientation.utils.image import get_image_info
from orientation.utils.logger import get_logger

logger = get_logger(__name__)

# Supported image file extensions (case-insensitive matching)
SUPPORTED_IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".tiff", ".tif", ".bmp", ".gif", ".webp"}

PDF_MAGIC = b"%PDF"

Document = Union[str, Path, bytes, bytearray, BinaryIO, Sequence]


# ============================================================
# Data Classes
# ============================================================

@dataclass(frozen=True)
class PageImage:
    """
    A single page from a document as a PIL Image.

    Attributes:
        image: The PIL Image object for this page.
        page_num: 1-indexed page number within the source document.
        source_path: Original document this page was extracted from.
        total_pages: Total number of pages in the source document.
    """
    image: Image.Image
    page_num: int
    source_path: str
    total_pages: int


# ============================================================
# Document Processor
# ============================================================

class DocumentProcessor:
    """
    Loads documents into ordered page images.

    This class handles the first stage of the pipeline: converting raw
    input into the page list the dispatcher consumes. It never changes
    pixel data; depth normalization happens later, per page.

    Example:
        >>> processor = DocumentProcessor(dpi=300)
        >>> pages = processor.load("batch_0042.tif")
        >>> print(f"Loaded {len(pages)} pages")
    """

    def __init__(self, dpi: Optional[int] = None):
        """
        Args:
            dpi: DPI for rendering PDF pages. Default: from settings.
        """
        self.dpi = dpi or settings.pdf_render_dpi
        logger.debug(f"DocumentProcessor initialized — PDF DPI: {self.dpi}")

    def load(self, document: Document) -> list[PageImage]:
        """
        Split a document into page images.

        Args:
            document: A path (file or directory), raw bytes, a binary
                stream, or a sequence of PIL Images / PageImages.

        Returns:
            List of PageImage objects numbered 1..N in document order.

        Raises:
            InvalidInput: If the path does not exist, the data cannot be
                read, the format is unsupported, or there are no pages.
        """
        load_start = time.perf_counter()

        if isinstance(document, (str, Path)):
            path = Path(document)
            pages = self._load_path(path)
            name = path.name
        elif isinstance(document, (bytes, bytearray)):
            pages = self._load_bytes(bytes(document), "<bytes>")
            name = "<bytes>"
        elif hasattr(document, "read"):
            pages = self._load_bytes(document.read(), "<stream>")
            name = "<stream>"
        elif isinstance(document, Sequence):
            pages = self._load_sequence(document)
            name = "<pages>"
        else:
            raise InvalidInput(
                f"Unsupported document type: {type(document).__name__}",
                stage="load",
            )

        if not pages:
            raise InvalidInput(f"Document {name} contains no pages", stage="load")

        load_time = (time.perf_counter() - load_start) * 1000
        logger.info(
            f"Loaded [green]{len(pages)}[/green] pages from "
            f"[bold]{name}[/bold] in {load_time:.0f}ms"
        )
        return pages

    def _load_path(self, path: Path) -> list[PageImage]:
        if not path.exists():
            raise InvalidInput(f"Input path not found: {path}", stage="load")

        if path.is_dir():
            return self._load_directory(path)
        if path.suffix.lower() == ".pdf":
            return self._load_pdf(path)
        if path.suffix.lower() in SUPPORTED_IMAGE_EXTENSIONS:
            return self._number(self._read_frames(path, str(path)), str(path))

        raise InvalidInput(
            f"Unsupported file format: '{path.suffix}'. "
            f"Supported: PDF, {', '.join(sorted(SUPPORTED_IMAGE_EXTENSIONS))}",
            stage="load",
        )

    def _load_bytes(self, data: bytes, source: str) -> list[PageImage]:
        if not data:
            raise InvalidInput("Document data is empty", stage="load")

        if data.startswith(PDF_MAGIC):
            from pdf2image import convert_from_bytes

            logger.info(f"Rendering PDF from {source} (DPI: {self.dpi})")
            images = self._render_pdf(convert_from_bytes, data, source)
            return self._number(images, source)

        return self._number(self._read_frames(io.BytesIO(data), source), source)

    def _load_pdf(self, path: Path) -> list[PageImage]:
        """Render every PDF page at the configured DPI."""
        from pdf2image import convert_from_path

        logger.info(f"Loading PDF: {path.name} (DPI: {self.dpi})")
        images = self._render_pdf(convert_from_path, str(path), path.name)
        return self._number(images, str(path))

    def _render_pdf(self, render, pdf, name: str) -> list[Image.Image]:
        """Run a pdf2image converter, mapping its failures to InvalidInput."""
        from pdf2image.exceptions import (
            PDFInfoNotInstalledError,
            PDFPageCountError,
            PDFPopplerTimeoutError,
            PDFSyntaxError,
        )

        try:
            return render(pdf, dpi=self.dpi)
        except PDFInfoNotInstalledError as exc:
            raise InvalidInput(
                f"Cannot render PDF {name}: poppler is not installed or not on PATH",
                stage="load",
            ) from exc
        except (PDFPageCountError, PDFSyntaxError, PDFPopplerTimeoutError) as exc:
            raise InvalidInput(f"Unreadable PDF {name}: {exc}", stage="load") from exc

    def _load_directory(self, dir_path: Path) -> list[PageImage]:
        """
        Load all supported images from a directory, in file name order.

        Multi-page files contribute all their frames. Subdirectories are
        not traversed.
        """
        image_files = sorted(
            f for f in dir_path.iterdir()
            if f.is_file() and f.suffix.lower() in SUPPORTED_IMAGE_EXTENSIONS
        )

        if not image_files:
            raise InvalidInput(
                f"No supported image files found in {dir_path}. "
                f"Supported: {', '.join(sorted(SUPPORTED_IMAGE_EXTENSIONS))}",
                stage="load",
            )

        logger.info(f"Found {len(image_files)} image files in {dir_path}")

        images: list[Image.Image] = []
        for img_path in image_files:
            images.extend(self._read_frames(img_path, str(img_path)))
        return self._number(images, str(dir_path))

    def _load_sequence(self, items: Sequence) -> list[PageImage]:
        images = []
        for position, item in enumerate(items, start=1):
            image = item.image if isinstance(item, PageImage) else item
            if not isinstance(image, Image.Image):
                raise InvalidInput(
                    f"Expected a PIL Image, got {type(image).__name__}",
                    stage="load",
                    page_number=position,
                )
            images.append(image)
        return self._number(images, "<pages>")

    @staticmethod
    def _read_frames(source: Union[Path, BinaryIO], name: str) -> list[Image.Image]:
        """Decode every frame of an image container into its own raster."""
        try:
            with Image.open(source) as container:
                frames = [frame.copy() for frame in ImageSequence.Iterator(container)]
        except (UnidentifiedImageError, OSError) as exc:
            raise InvalidInput(f"Unreadable image data in {name}: {exc}", stage="load") from exc

        for idx, frame in enumerate(frames, start=1):
            info = get_image_info(frame)
            logger.debug(
                f"  Frame {idx}: {info['width']}x{info['height']} {info['mode']} "
                f"({info['bits_per_pixel']}bpp, dpi={info['dpi']})"
            )
        return frames

    @staticmethod
    def _number(images: list[Image.Image], source: str) -> list[PageImage]:
        return [
            PageImage(image=img, page_num=idx, source_path=source, total_pages=len(images))
            for idx, img in enumerate(images, start=1)
        ]
