"""Confidence classification from component agreement and regime stability."""
from __future__ import annotations

from typing import Mapping

from niss.scoring_config import (
    BEARISH_LEVEL,
    BULLISH_LEVEL,
    CONFIDENCE_HIGH,
    CONFIDENCE_LOW,
    CONFIDENCE_MEDIUM,
    REGIME_DOWNGRADE_LEVEL,
    STRONG_LOWER,
    STRONG_UPPER,
)


def classify_confidence(components: Mapping[str, float], regime_adjustment: float = 0.0) -> str:
    """
    Classify how much the six components agree.

    - HIGH: >=4 strong (>70 or <30) and >=5 pointing the same way
    - MEDIUM: >=3 strong and >=4 aligned, or >=2 strong with <=2 neutral
    - LOW otherwise

    A regime adjustment beyond +/-15 downgrades HIGH to MEDIUM.
    """
    values = list(components.values())
    strong = sum(1 for v in values if v > STRONG_UPPER or v < STRONG_LOWER)
    bullish = sum(1 for v in values if v > BULLISH_LEVEL)
    bearish = sum(1 for v in values if v < BEARISH_LEVEL)
    neutral = 6 - bullish - bearish

    if strong >= 4 and (bullish >= 5 or bearish >= 5):
        confidence = CONFIDENCE_HIGH
    elif strong >= 3 and (bullish >= 4 or bearish >= 4):
        confidence = CONFIDENCE_MEDIUM
    elif strong >= 2 and neutral <= 2:
        confidence = CONFIDENCE_MEDIUM
    else:
        confidence = CONFIDENCE_LOW

    if abs(regime_adjustment) > REGIME_DOWNGRADE_LEVEL and confidence == CONFIDENCE_HIGH:
        confidence = CONFIDENCE_MEDIUM

    return confidence
