"""
News weighting helpers: time decay, source credibility and headline relevance.

Timestamps given as numbers are seconds since the Unix epoch.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional
import logging

import numpy as np
import pandas as pd

from niss.scoring_config import (
    DEFAULT_CREDIBILITY,
    HIGH_IMPACT_BONUS,
    HIGH_IMPACT_KEYWORDS,
    MEDIUM_IMPACT_BONUS,
    MEDIUM_IMPACT_KEYWORDS,
    NEUTRAL_SCORE,
    RELEVANCE_BASE,
    RELEVANCE_SYMBOL_BONUS,
    SOURCE_CREDIBILITY,
    STALE_DECAY,
    TIME_DECAY_BANDS,
    UNKNOWN_AGE_DECAY,
)

logger = logging.getLogger(__name__)


def time_decay(age_hours: Optional[float]) -> float:
    """
    Weight of a news item by age.

    <1h 1.0, <6h 0.9, <24h 0.7, <72h 0.5, older 0.3. Unknown age is 0.5 so
    undated news still counts, just as moderately stale.
    """
    if age_hours is None or not np.isfinite(age_hours):
        return UNKNOWN_AGE_DECAY
    for max_age, weight in TIME_DECAY_BANDS:
        if age_hours < max_age:
            return weight
    return STALE_DECAY


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Convert a news timestamp to an aware UTC datetime.

    Accepts epoch seconds (int/float), datetime (naive means UTC) and
    ISO-8601 strings. Returns None when the value cannot be interpreted.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float, np.integer, np.floating)):
            if not np.isfinite(value):
                return None
            return datetime.fromtimestamp(float(value), tz=timezone.utc)
        if isinstance(value, datetime):
            return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        if isinstance(value, str) and value.strip():
            ts = pd.Timestamp(value.strip())
            if pd.isna(ts):
                return None
            ts = ts.tz_localize("UTC") if ts.tzinfo is None else ts.tz_convert("UTC")
            return ts.to_pydatetime()
    except (ValueError, TypeError, OverflowError, OSError) as e:
        logger.debug(f"Unparseable news timestamp {value!r}: {e}")
    return None


def news_time_decay(timestamp: Any, as_of: Optional[datetime] = None) -> float:
    """Time-decay weight of a news timestamp relative to ``as_of`` (default: now, UTC)."""
    published = parse_timestamp(timestamp)
    if published is None:
        return UNKNOWN_AGE_DECAY
    now = as_of or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    age_hours = (now - published).total_seconds() / 3600.0
    return time_decay(age_hours)


def source_credibility(
    name: Optional[str],
    table: Optional[Mapping[str, float]] = None,
    default: float = DEFAULT_CREDIBILITY,
) -> float:
    """
    Credibility multiplier of a news outlet.

    Case-insensitive substring match against ``table`` in order; unmatched or
    missing sources get ``default`` (0.7, below the neutral 1.0).

    Examples:
        >>> source_credibility("Reuters via Yahoo")
        1.2
        >>> source_credibility("some blog")
        0.7
    """
    if not name or not isinstance(name, str):
        return default
    table = SOURCE_CREDIBILITY if table is None else table
    lowered = name.lower()
    for key, multiplier in table.items():
        if key.lower() in lowered:
            return multiplier
    return default


def headline_relevance(headline: Optional[str], symbol: Optional[str]) -> float:
    """
    Relevance of a headline to a symbol on a 0-100 scale.

    40 base, +30 when the symbol appears, +12 per high-impact keyword and
    +7 per medium-impact keyword. Missing headline or symbol is neutral (50).
    """
    if not headline or not symbol:
        return NEUTRAL_SCORE

    text = headline.lower()
    score = RELEVANCE_BASE

    if symbol.lower() in text:
        score += RELEVANCE_SYMBOL_BONUS

    score += HIGH_IMPACT_BONUS * sum(1 for kw in HIGH_IMPACT_KEYWORDS if kw in text)
    score += MEDIUM_IMPACT_BONUS * sum(1 for kw in MEDIUM_IMPACT_KEYWORDS if kw in text)

    return float(np.clip(score, 0.0, 100.0))
