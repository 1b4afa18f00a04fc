"""
The six NISS component scorers.

Every scorer starts from the neutral 50, adds or subtracts points per rule,
and is clamped to [0, 100]. Missing inputs leave a component neutral, and a
fault inside one scorer degrades only that component to 50.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Mapping, Optional
import functools
import logging

import numpy as np

from niss.exceptions import ComponentError
from niss.models import MarketContext, NewsItem, OptionsMetrics, StockSnapshot, TechnicalIndicators
from niss.news import headline_relevance, news_time_decay, source_credibility
from niss.scoring_config import (
    DEFAULT_CREDIBILITY,
    LARGE_CAP_THRESHOLD,
    NEUTRAL_SCORE,
    SENTIMENT_SCALE,
    TECHNICAL_DEFAULTS,
)

logger = logging.getLogger(__name__)


def _clamp(score: float) -> float:
    if not np.isfinite(score):
        return NEUTRAL_SCORE
    return float(np.clip(score, 0.0, 100.0))


def _neutral_on_fault(component: str):
    """Return the neutral score when the wrapped scorer hits bad data."""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except (TypeError, ValueError, ZeroDivisionError, AttributeError, KeyError) as e:
                stock = args[0] if args and isinstance(args[0], StockSnapshot) else None
                err = ComponentError(getattr(stock, "symbol", None), component, str(e))
                logger.debug(f"{err}; using neutral score")
                return NEUTRAL_SCORE
        return wrapper
    return decorator


# ============================================================================
# COMPONENT 1: PRICE ACTION (weight 0.20)
# ============================================================================

@_neutral_on_fault("priceAction")
def price_action_score(stock: StockSnapshot) -> float:
    """
    SMA alignment, 52-week range position and the day's move.

    - Above sma20/50/200: +20; above 20 and 50: +10; above 20: +5; else below 200: -15
    - 52w position >90%: +15, >75%: +10, <10%: -15, <25%: -5, else (pos-0.5)*10
    - Move: min(|chg|/5, 1) * 15, signed by direction
    """
    price = stock.price
    if not price or price <= 0:
        return NEUTRAL_SCORE

    score = NEUTRAL_SCORE

    sma20, sma50, sma200 = stock.sma20, stock.sma50, stock.sma200
    if sma20 and sma50 and sma200:
        if price > sma20 and price > sma50 and price > sma200:
            score += 20
        elif price > sma20 and price > sma50:
            score += 10
        elif price > sma20:
            score += 5
        elif price < sma200:
            score -= 15

    high, low = stock.high_52_week, stock.low_52_week
    if high and low and high > low:
        position = (price - low) / (high - low)
        if position > 0.9:
            score += 15
        elif position > 0.75:
            score += 10
        elif position < 0.1:
            score -= 15
        elif position < 0.25:
            score -= 5
        else:
            score += (position - 0.5) * 10

    change = stock.change_percent or 0.0
    move = min(abs(change) / 5.0, 1.0) * 15.0
    score += move if change > 0 else -move

    return _clamp(score)


# ============================================================================
# COMPONENT 2: NEWS IMPACT (weight 0.25)
# ============================================================================

@_neutral_on_fault("newsImpact")
def news_impact_score(
    news: Optional[Iterable[Any]],
    symbol: str,
    as_of: Optional[datetime] = None,
    credibility_table: Optional[Mapping[str, float]] = None,
    default_credibility: float = DEFAULT_CREDIBILITY,
) -> float:
    """
    Credibility- and recency-weighted average of per-article scores.

    Per article: (relevance + sentiment * 25) * credibility * decay, divided
    in aggregate by sum(credibility * decay). No news is neutral.
    """
    items = list(news or [])
    if not items:
        return NEUTRAL_SCORE

    total_score = 0.0
    weight_total = 0.0

    for item in items:
        if isinstance(item, Mapping):
            item = NewsItem.from_dict(item)

        relevance = headline_relevance(item.headline, symbol)
        credibility = source_credibility(item.source, credibility_table, default_credibility)
        sentiment_impact = float(np.clip(item.sentiment or 0.0, -1.0, 1.0)) * SENTIMENT_SCALE
        decay = news_time_decay(item.datetime, as_of)

        total_score += (relevance + sentiment_impact) * credibility * decay
        weight_total += credibility * decay

    final = total_score / weight_total if weight_total > 0 else NEUTRAL_SCORE
    return _clamp(final)


# ============================================================================
# COMPONENT 3: TECHNICAL MOMENTUM (weight 0.20)
# ============================================================================

@_neutral_on_fault("technicalMomentum")
def technical_momentum_score(stock: StockSnapshot, technicals: Optional[TechnicalIndicators] = None) -> float:
    """RSI band, MACD vs signal gap, ADX trend strength and Bollinger position."""
    tech = technicals or TechnicalIndicators()

    rsi = TECHNICAL_DEFAULTS["rsi"] if tech.rsi is None else tech.rsi
    macd = TECHNICAL_DEFAULTS["macd"] if tech.macd is None else tech.macd
    signal = TECHNICAL_DEFAULTS["macd_signal"] if tech.macd_signal is None else tech.macd_signal
    adx = TECHNICAL_DEFAULTS["adx"] if tech.adx is None else tech.adx

    score = NEUTRAL_SCORE

    if 30 <= rsi <= 70:
        score += 15
    elif rsi > 70:
        score += 5
    else:
        score -= 10

    # Relative gap; a zero signal line is measured against 1
    scale = abs(signal) or 1.0
    if macd > signal:
        score += 15 * min((macd - signal) / scale, 1.0)
    else:
        score -= 15 * min((signal - macd) / scale, 1.0)

    if adx > 25:
        score += 12.5
    elif adx < 15:
        score -= 5

    bands = tech.bollinger
    price = stock.price
    if bands is not None and bands.upper and bands.lower and price:
        band_range = bands.upper - bands.lower
        if band_range > 0:
            position = (price - bands.lower) / band_range
            score += (position - 0.5) * 15

    return _clamp(score)


# ============================================================================
# COMPONENT 4: OPTIONS FLOW (weight 0.15)
# ============================================================================

@_neutral_on_fault("optionsFlow")
def options_flow_score(options: Optional[OptionsMetrics]) -> float:
    """Put/call ratio, call/put volume and open-interest skew, unusual activity."""
    if options is None:
        return NEUTRAL_SCORE

    pcr = 1.0 if options.put_call_ratio is None else options.put_call_ratio
    score = NEUTRAL_SCORE

    if pcr < 0.7:
        score += 20
    elif pcr < 1.0:
        score += 10
    elif pcr > 1.3:
        score -= 20
    elif pcr > 1.0:
        score -= 10

    if options.call_volume > 0 and options.put_volume > 0:
        volume_ratio = options.call_volume / options.put_volume
        if volume_ratio > 3:
            score += 17.5
        elif volume_ratio > 1.5:
            score += 8.75
        elif volume_ratio < 0.33:
            score -= 17.5
        elif volume_ratio < 0.67:
            score -= 8.75

    if options.call_oi > 0 and options.put_oi > 0:
        oi_ratio = options.call_oi / options.put_oi
        if oi_ratio > 1.5:
            score += 12.5
        elif oi_ratio < 0.67:
            score -= 12.5

    if options.unusual_activity:
        score += 5

    return _clamp(score)


# ============================================================================
# COMPONENT 5: RELATIVE STRENGTH (weight 0.10)
# ============================================================================

@_neutral_on_fault("relativeStrength")
def relative_strength_score(stock: StockSnapshot, market: Optional[MarketContext] = None) -> float:
    """Outperformance vs sector and SPY, plus a bonus for moving with the trend."""
    if market is None:
        return NEUTRAL_SCORE

    change = stock.change_percent or 0.0
    score = NEUTRAL_SCORE

    vs_sector = change - market.sector_change(stock.sector)
    if vs_sector > 3:
        score += 30
    elif vs_sector > 1:
        score += 15
    elif vs_sector > 0:
        score += 5
    elif vs_sector < -3:
        score -= 30
    elif vs_sector < -1:
        score -= 15
    else:
        score -= 5

    vs_market = change - (market.spy_change or 0.0)
    if vs_market > 2:
        score += 20
    elif vs_market > 0:
        score += 10
    elif vs_market < -2:
        score -= 20
    else:
        score -= 10

    if (market.trend == "BULLISH" and change > 0) or (market.trend == "BEARISH" and change < 0):
        score += 5

    return _clamp(score)


# ============================================================================
# COMPONENT 6: VOLUME ANALYSIS (weight 0.10)
# ============================================================================

@_neutral_on_fault("volumeAnalysis")
def volume_analysis_score(stock: StockSnapshot) -> float:
    """Volume surge vs average, confirmed by price direction; large caps need more."""
    volume, avg_volume = stock.volume, stock.avg_volume
    if not volume or not avg_volume or avg_volume <= 0:
        return NEUTRAL_SCORE

    change = stock.change_percent or 0.0
    ratio = volume / avg_volume
    score = NEUTRAL_SCORE

    if ratio > 5:
        score += 35
    elif ratio > 3:
        score += 25
    elif ratio > 2:
        score += 15
    elif ratio > 1.5:
        score += 10
    elif ratio < 0.5:
        score -= 20
    elif ratio < 0.8:
        score -= 10

    if ratio > 1.5:
        if change > 0:
            score += 15
        elif change < 0:
            score -= 15

    if (stock.market_cap or 0) > LARGE_CAP_THRESHOLD and 1 < ratio < 1.5:
        score -= 5

    return _clamp(score)
