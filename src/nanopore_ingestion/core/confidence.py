# ============================================================================
# src/nanopore_ingestion/core/confidence.py
# ============================================================================
"""
Confidence Scoring Helpers

Every confidence in the engine is a float in [0.0, 1.0] and maps onto a
four-band level:

    >= 0.9  very_high
    >= 0.7  high
    >= 0.5  medium
    else    low
"""

from typing import Iterable

from .context.enums import ConfidenceLevel

VERY_HIGH_THRESHOLD = 0.9
HIGH_THRESHOLD = 0.7
MEDIUM_THRESHOLD = 0.5


def clamp_confidence(score: float) -> float:
    """Clamp a raw heuristic score into [0.0, 1.0]."""
    return max(0.0, min(float(score), 1.0))


def confidence_level_for(score: float) -> ConfidenceLevel:
    """
    Get confidence level from score.

    Args:
        score: Confidence score (0.0-1.0)

    Returns:
        ConfidenceLevel band
    """
    if score >= VERY_HIGH_THRESHOLD:
        return ConfidenceLevel.VERY_HIGH
    elif score >= HIGH_THRESHOLD:
        return ConfidenceLevel.HIGH
    elif score >= MEDIUM_THRESHOLD:
        return ConfidenceLevel.MEDIUM
    else:
        return ConfidenceLevel.LOW


def mean_confidence(scores: Iterable[float]) -> float:
    """Arithmetic mean of confidence scores; 0.0 for an empty input."""
    values = list(scores)
    if not values:
        return 0.0
    return sum(values) / len(values)
