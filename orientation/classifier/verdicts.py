# orientation/classifier/verdicts.py
# ============================================================
# Page Orientation Verdicts
# ============================================================
# The five outcomes the classifier can report for a page.
# ROTATED_LEFT / ROTATED_RIGHT are part of the vocabulary so
# consumers can handle them, but no detection path produces
# them yet.
# ============================================================

from enum import Enum


class Verdict(str, Enum):
    """
    Orientation of the text on a page.

    - CORRECT: text is right-side-up
    - UPSIDE_DOWN: text is rotated 180 degrees
    - ROTATED_LEFT: text is rotated 90 degrees counter-clockwise (reserved)
    - ROTATED_RIGHT: text is rotated 90 degrees clockwise (reserved)
    - UNDETECTABLE: text quality is too poor to judge
    """
    CORRECT = "correct"
    UPSIDE_DOWN = "upside_down"
    ROTATED_LEFT = "rotated_left"
    ROTATED_RIGHT = "rotated_right"
    UNDETECTABLE = "undetectable"


def list_verdicts() -> list[str]:
    """Return every verdict value, in declaration order."""
    return [verdict.value for verdict in Verdict]
