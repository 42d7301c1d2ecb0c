# orientation/classifier/__init__.py
# ============================================================
# Orientation Classifier Package
# ============================================================
# Key classes:
#   - OrientationClassifier: per-page two-pass decision
#   - Verdict: the five orientation outcomes
# ============================================================

from orientation.classifier.classifier import OrientationClassifier, decide, find_anchor
from orientation.classifier.verdicts import Verdict, list_verdicts

__all__ = ["OrientationClassifier", "Verdict", "decide", "find_anchor", "list_verdicts"]
