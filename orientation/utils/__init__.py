# orientation/utils/__init__.py
# ============================================================
# Shared Utilities Package
# ============================================================
# Provides reusable helpers used across the pipeline:
#   - logger: Structured logging with Rich formatting
#   - image: Raster adapter (depth normalization, crop, rotate)
# ============================================================

from orientation.utils.logger import get_logger
from orientation.utils.image import (
    crop_to_box,
    get_image_info,
    normalize_depth,
    prepare_for_recognition,
    rotate_180,
)

__all__ = [
    "get_logger",
    "crop_to_box",
    "get_image_info",
    "normalize_depth",
    "prepare_for_recognition",
    "rotate_180",
]
