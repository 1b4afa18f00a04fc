"""
Signal classification from a raw score and the observed price change.

Used where a full NISSResult is not available (e.g. cached scores in the
screener table). Rules are checked top to bottom; the mixed-signal guard
catches a strong score contradicted by a large move the other way.
"""
from __future__ import annotations

from niss.models import Signal


def determine_signal(score: float, change_percent: float) -> Signal:
    """
    Classify (score, change%) into a coarse signal and confidence.

    Examples:
        >>> determine_signal(76, 3)
        Signal(signal='STRONG BUY', confidence='HIGH')
        >>> determine_signal(55, -3)
        Signal(signal='HOLD - MIXED SIGNALS', confidence='LOW')
    """
    score = score or 0.0
    change = change_percent or 0.0

    if score > 75 and change > 2:
        return Signal("STRONG BUY", "HIGH")
    if score > 75 and change > 0:
        return Signal("STRONG BUY", "MEDIUM")
    if score > 60 and change > 1:
        return Signal("BUY", "HIGH")
    if score > 50 and change > 0:
        return Signal("BUY", "MEDIUM")

    if score < -75 and change < -2:
        return Signal("STRONG SELL", "HIGH")
    if score < -75 and change < 0:
        return Signal("STRONG SELL", "MEDIUM")
    if score < -60 and change < -1:
        return Signal("SELL", "HIGH")
    if score < -50 and change < 0:
        return Signal("SELL", "MEDIUM")

    # Conflicting signal guard
    if (score > 50 and change < -2) or (score < -50 and change > 2):
        return Signal("HOLD - MIXED SIGNALS", "LOW")

    return Signal("HOLD", "LOW")
