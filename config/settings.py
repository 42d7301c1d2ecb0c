# config/settings.py
# ============================================================
# Centralized Configuration for the Page Orientation Pipeline
# ============================================================
# All settings are loaded from environment variables (or .env file).
# Pydantic validates types and provides sensible defaults.
#
# Usage:
#   from config.settings import settings
#   recognizer = TesseractRecognizer(language=settings.ocr_language)
# ============================================================

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """
    Application-wide settings. Values are loaded from environment variables
    or a .env file. Every setting has a typed default so the app can run
    out-of-the-box with zero configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Recognizer (Tesseract) ---
    ocr_language: str = Field(
        default="eng",
        description="Tesseract language/model selector, e.g. 'eng' or 'nld+eng'.",
    )
    tessdata_dir: Optional[str] = Field(
        default=None,
        description="Directory holding the *.traineddata files. None = Tesseract default.",
    )
    tesseract_cmd: Optional[str] = Field(
        default=None,
        description="Path to the tesseract binary. None = look it up on PATH.",
    )
    ocr_oem: int = Field(
        default=1,
        description="OCR engine mode passed to Tesseract (1 = LSTM only).",
    )

    # --- Performance Tuning ---
    max_workers: Optional[int] = Field(
        default=None,
        ge=1,
        description="Upper bound on detection workers. None = number of CPUs.",
    )
    pdf_render_dpi: int = Field(
        default=300,
        description="DPI for rendering PDF pages to images. Higher = better quality, slower.",
    )

    # --- Output ---
    output_format: str = Field(
        default="text",
        description="CLI output format for verdicts: text | json.",
    )

    # --- Logging ---
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG | INFO | WARNING | ERROR.",
    )


# ============================================================
# Singleton instance — import this everywhere:
#   from config.settings import settings
# ============================================================
settings = Settings()
