# orientation/utils/image.py
# ============================================================
# Raster Adapter
# ============================================================
# Format conversions applied to page rasters before and during
# orientation detection. None of these are visual filters: they
# change pixel depth, geometry or orientation, never content.
#
# Usage:
#   from orientation.utils.image import prepare_for_recognition, rotate_180
#   gray = prepare_for_recognition(bilevel_scan)
#   flipped = rotate_180(gray)
# ============================================================

import time

from PIL import Image

from orientation.errors import InvalidInput, UnsupportedFormat
from orientation.ocr.layout import BoundingBox
from orientation.utils.logger import get_logger

logger = get_logger(__name__)

# Pillow modes by bits per pixel
_DEPTH_MODES = {1: "1", 8: "L"}

_BITS_BY_MODE = {"1": 1, "L": 8, "P": 8, "LA": 16, "I;16": 16, "RGB": 24, "RGBA": 32, "CMYK": 32, "I": 32, "F": 32}


def normalize_depth(image: Image.Image, bits_per_pixel: int) -> Image.Image:
    """
    Copy a raster into a 1bpp or 8bpp raster of the same dimensions.

    1bpp uses a pure black/white palette (no dithering), 8bpp a linear
    grayscale ramp. Width and height are preserved.

    Args:
        image: Source raster in any mode Pillow can convert.
        bits_per_pixel: Target depth, 1 or 8.

    Returns:
        A new image in mode "1" or "L".

    Raises:
        UnsupportedFormat: If the target depth is not 1 or 8, or the
            source mode cannot be converted.
    """
    if bits_per_pixel not in _DEPTH_MODES:
        raise UnsupportedFormat(
            f"Target depth must be 1 or 8 bits per pixel, got {bits_per_pixel}",
            stage="normalize",
        )

    target_mode = _DEPTH_MODES[bits_per_pixel]
    start = time.perf_counter()

    try:
        if target_mode == "1":
            converted = image.convert("L").convert("1", dither=Image.Dither.NONE)
        else:
            converted = image.convert("L")
    except (ValueError, OSError) as exc:
        raise UnsupportedFormat(
            f"Cannot convert raster of mode '{image.mode}' to {bits_per_pixel}bpp: {exc}",
            stage="normalize",
        ) from exc

    duration = (time.perf_counter() - start) * 1000
    logger.debug(
        f"Depth normalization {image.mode} -> {converted.mode} "
        f"({image.width}x{image.height}) took {duration:.2f}ms"
    )
    return converted


def prepare_for_recognition(image: Image.Image) -> Image.Image:
    """
    Bring a page raster into a depth the recognizer accepts.

    Tesseract needs at least 8 bits per pixel, so 1bpp (bilevel) scans
    are widened to 8bpp grayscale. Anything else is returned as is.
    """
    if image is None:
        raise InvalidInput("Page image is not set", stage="normalize")
    if image.width == 0 or image.height == 0:
        raise InvalidInput(
            f"Page image is empty ({image.width}x{image.height})",
            stage="normalize",
        )
    if image.mode == "1":
        return normalize_depth(image, 8)
    return image


def crop_to_box(image: Image.Image, bbox: BoundingBox) -> Image.Image:
    """
    Crop an image to a bounding box, clamped to the image bounds.

    Args:
        image: The raster to crop.
        bbox: Region in the image's pixel coordinates.

    Returns:
        The cropped raster. The full image when the clamped box is empty.
    """
    left = max(0, bbox.left)
    top = max(0, bbox.top)
    right = min(image.width, bbox.right)
    bottom = min(image.height, bbox.bottom)

    if right <= left or bottom <= top:
        logger.debug(f"Crop box {bbox.as_box()} falls outside the image, keeping full page")
        return image.copy()

    return image.crop((left, top, right, bottom))


def rotate_180(image: Image.Image) -> Image.Image:
    """Rotate a raster by exactly 180 degrees (lossless pixel transpose)."""
    return image.transpose(Image.Transpose.ROTATE_180)


def get_image_info(image: Image.Image) -> dict:
    """Size, mode, bit depth and resolution of a page raster, for debug logs."""
    bands = len(image.getbands())
    return {
        "width": image.width,
        "height": image.height,
        "mode": image.mode,
        "bits_per_pixel": _BITS_BY_MODE.get(image.mode, 8 * bands),
        "dpi": image.info.get("dpi"),
    }
