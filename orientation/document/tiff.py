# orientation/document/tiff.py
# ============================================================
# Multi-page TIFF Utilities
# ============================================================
# Container chores around orientation detection: count, split,
# merge, re-tag resolution, and write a document with its
# upside-down pages turned back upright.
#
# Bilevel (mode "1") frames are written with CCITT Group 4
# compression, everything else with LZW.
#
# Usage:
#   from orientation.document.tiff import split_tiff, write_corrected
#   paths = split_tiff("batch.tif", "out/")
#   write_corrected(pages, verdicts, "batch_fixed.tif")
# ============================================================

from collections.abc import Sequence
from pathlib import Path
from typing import Union

from PIL import Image, ImageSequence, UnidentifiedImageError

from orientation.classifier.verdicts import Verdict
from orientation.document.processor import PageImage
from orientation.errors import InvalidInput
from orientation.utils.image import rotate_180
from orientation.utils.logger import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]


def _compression_for(image: Image.Image) -> str:
    return "group4" if image.mode == "1" else "tiff_lzw"


def _open(source: PathLike) -> Image.Image:
    path = Path(source)
    if not path.exists():
        raise InvalidInput(f"Input path not found: {path}", stage="load")
    try:
        return Image.open(path)
    except (UnidentifiedImageError, OSError) as exc:
        raise InvalidInput(f"Unreadable image file {path.name}: {exc}", stage="load") from exc


def _save_multipage(frames: Sequence[Image.Image], output: PathLike, **params) -> Path:
    if not frames:
        raise InvalidInput("Nothing to write: no pages", stage="load")

    output = Path(output)
    output.parent.mkdir(parents=True, exist_ok=True)

    first, rest = frames[0], list(frames[1:])
    # Pillow applies one compression to every frame, so mixed depths fall back to LZW
    compression = "group4" if all(f.mode == "1" for f in frames) else "tiff_lzw"
    first.save(
        output,
        format="TIFF",
        save_all=True,
        append_images=rest,
        compression=compression,
        **params,
    )
    logger.info(f"Wrote [green]{len(frames)}[/green] pages to [bold]{output}[/bold]")
    return output


def get_page_count(source: PathLike) -> int:
    """Return the number of frames in an image file."""
    with _open(source) as image:
        return getattr(image, "n_frames", 1)


def split_tiff(source: PathLike, output_dir: PathLike) -> list[Path]:
    """
    Split a multi-page TIFF into one file per page.

    Files are named `<stem>_page<N>.tif` with N starting at 1.

    Args:
        source: The multi-page image file.
        output_dir: Directory to write the pages into (created if missing).

    Returns:
        Paths of the written files, in page order.
    """
    source = Path(source)
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written = []
    with _open(source) as container:
        for idx, frame in enumerate(ImageSequence.Iterator(container), start=1):
            page_path = output_dir / f"{source.stem}_page{idx}.tif"
            frame.save(page_path, format="TIFF", compression=_compression_for(frame))
            written.append(page_path)

    logger.info(f"Split [bold]{source.name}[/bold] into {len(written)} pages under {output_dir}")
    return written


def concatenate_tiff(inputs: Sequence[PathLike], output: PathLike) -> Path:
    """
    Concatenate image files (single or multi-page) into one multi-page TIFF.

    Args:
        inputs: Image files, in the order their pages should appear.
        output: Destination TIFF path.

    Returns:
        The output path.
    """
    frames: list[Image.Image] = []
    for source in inputs:
        with _open(source) as container:
            frames.extend(frame.copy() for frame in ImageSequence.Iterator(container))
    return _save_multipage(frames, output)


def change_resolution(source: PathLike, output: PathLike, dpi: int) -> Path:
    """Rewrite a (multi-page) TIFF with every page tagged at `dpi` x `dpi`."""
    if dpi <= 0:
        raise InvalidInput(f"Resolution must be positive, got {dpi}", stage="load")

    with _open(source) as container:
        frames = [frame.copy() for frame in ImageSequence.Iterator(container)]
    return _save_multipage(frames, output, dpi=(dpi, dpi))


def write_corrected(
    pages: Sequence[PageImage],
    verdicts: Sequence[Verdict],
    output: PathLike,
) -> Path:
    """
    Write the document as a multi-page TIFF with upside-down pages rotated upright.

    Pages with any other verdict are written unchanged.

    Args:
        pages: Pages in document order.
        verdicts: One verdict per page, same order.
        output: Destination TIFF path.

    Returns:
        The output path.
    """
    if len(pages) != len(verdicts):
        raise InvalidInput(
            f"Got {len(verdicts)} verdicts for {len(pages)} pages",
            stage="load",
        )

    frames = [
        rotate_180(page.image) if verdict == Verdict.UPSIDE_DOWN else page.image
        for page, verdict in zip(pages, verdicts)
    ]
    rotated = sum(1 for v in verdicts if v == Verdict.UPSIDE_DOWN)
    logger.info(f"Rotating {rotated} upside-down page(s)")
    return _save_multipage(frames, output)
