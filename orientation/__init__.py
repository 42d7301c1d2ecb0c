# orientation/__init__.py
# ============================================================
# Page Orientation — Source Package
# ============================================================
# Detects whether scanned pages are upright, upside-down, or
# unreadable. Sub-packages:
#   - orientation.ocr         → recognizer contract + Tesseract adapter
#   - orientation.classifier  → per-page two-pass decision
#   - orientation.pipeline    → dispatcher + orchestrator
#   - orientation.document    → page source, TIFF utilities
#   - orientation.utils       → logging, raster adapter
# ============================================================

__version__ = "0.1.0"
