# orientation/document/__init__.py
# ============================================================
# Document Processing Package
# ============================================================
# Handles splitting input documents into page rasters and the
# multi-page TIFF container chores around them.
#
# Key classes:
#   - DocumentProcessor: Loads TIFFs, PDFs, images, bytes
#   - PageImage: Dataclass holding a single page image + metadata
# ============================================================

from orientation.document.processor import DocumentProcessor, PageImage

__all__ = ["DocumentProcessor", "PageImage"]
