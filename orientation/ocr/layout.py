# orientation/ocr/layout.py
# ============================================================
# Layout Result — Recognizer Output Model
# ============================================================
# A recognition pass yields a region hierarchy
#     block ⊇ paragraph ⊇ line ⊇ word
# with a pixel bounding box on every level, plus one mean
# confidence in [0.0, 1.0] for the whole pass.
#
# All types are frozen: results are shared read-only between
# the recognizer and the classifier.
# ============================================================

from dataclasses import dataclass, field
from typing import Iterator


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned pixel rectangle (left/top inclusive, size in pixels)."""
    left: int = 0
    top: int = 0
    width: int = 0
    height: int = 0

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def as_box(self) -> tuple[int, int, int, int]:
        """Return (left, top, right, bottom), the form PIL's crop expects."""
        return (self.left, self.top, self.right, self.bottom)

    def union(self, other: "BoundingBox") -> "BoundingBox":
        if self.is_empty:
            return other
        if other.is_empty:
            return self
        left = min(self.left, other.left)
        top = min(self.top, other.top)
        right = max(self.right, other.right)
        bottom = max(self.bottom, other.bottom)
        return BoundingBox(left, top, right - left, bottom - top)


@dataclass(frozen=True)
class Word:
    bbox: BoundingBox
    text: str = ""
    confidence: float = 0.0


@dataclass(frozen=True)
class Line:
    bbox: BoundingBox
    words: tuple[Word, ...] = ()


@dataclass(frozen=True)
class Paragraph:
    bbox: BoundingBox
    lines: tuple[Line, ...] = ()

    @property
    def word_count(self) -> int:
        return sum(len(line.words) for line in self.lines)


@dataclass(frozen=True)
class Block:
    bbox: BoundingBox
    paragraphs: tuple[Paragraph, ...] = ()


@dataclass(frozen=True)
class LayoutResult:
    """
    Structured output of one recognition pass.

    Attributes:
        blocks: Top-level text regions in reading order.
        mean_confidence: Certainty of the pass over the text it read,
            as a fraction in [0.0, 1.0].
    """
    blocks: tuple[Block, ...] = field(default_factory=tuple)
    mean_confidence: float = 0.0

    def paragraphs(self) -> Iterator[tuple[Block, Paragraph]]:
        """Walk paragraphs top-down, first block to last."""
        for block in self.blocks:
            for paragraph in block.paragraphs:
                yield block, paragraph

    def extent(self) -> BoundingBox:
        """Union of every non-empty region box; empty when nothing was found."""
        box = BoundingBox()
        for block in self.blocks:
            box = box.union(block.bbox)
            for paragraph in block.paragraphs:
                box = box.union(paragraph.bbox)
        return box

    @property
    def has_regions(self) -> bool:
        return not self.extent().is_empty

    @property
    def word_count(self) -> int:
        return sum(paragraph.word_count for _, paragraph in self.paragraphs())
