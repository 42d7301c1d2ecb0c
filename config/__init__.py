# config/__init__.py
# ============================================================
# Configuration package for the page orientation pipeline.
# Provides centralized, validated settings loaded from .env file.
#
# Usage:
#   from config.settings import settings
#   print(settings.ocr_language)
# ============================================================

from config.settings import settings

__all__ = ["settings"]
