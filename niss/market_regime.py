"""
Market Regime for the NISS engine
=================================

- Regime adjustment: a bounded corrective term added after component weighting
- Regime assessment: trend/volatility/breadth labels from raw index readings
- Regime summary: the labels, a position-size multiplier and a recommendation
"""

from datetime import datetime, timezone
from typing import Dict, Mapping, Optional, Tuple, Union
import logging

import numpy as np

from niss.models import MarketContext, RegimeAssessment, _as_float
from niss.scoring_config import (
    DEFAULT_VIX,
    REGIME_BOUNDS,
    REGIME_SIZE_BEAR_DECLINING,
    REGIME_SIZE_HIGH_VOL,
    REGIME_SIZE_LOW_VOL_BULL,
)

logger = logging.getLogger(__name__)


def regime_adjustment(
    market: Optional[MarketContext],
    components: Mapping[str, float],
    bounds: Tuple[float, float] = REGIME_BOUNDS,
) -> float:
    """
    Additive regime term, clamped to ``bounds`` (default [-20, 20]).

    Args:
        market: Market context, or None for a fully neutral regime (0)
        components: Component scores; priceAction and relativeStrength are read

    Returns:
        Adjustment in points of final score
    """
    if market is None:
        return 0.0

    adjustment = 0.0

    # Hand-built contexts may carry a missing or textual VIX reading
    vix = _as_float(market.vix_level)
    if vix is None:
        logger.debug(f"Unusable VIX level {market.vix_level!r}, assuming {DEFAULT_VIX}")
        vix = DEFAULT_VIX

    # Volatility
    if market.volatility == "HIGH" and vix > 30:
        adjustment -= 10
    elif market.volatility == "LOW" and vix < 15:
        adjustment += 5

    # Trend; the stronger term applies when the stock itself lines up with it
    price_action = components.get("priceAction", 50.0)
    relative_strength = components.get("relativeStrength", 50.0)
    if market.trend == "BULLISH":
        adjustment += 10 if (price_action > 60 and relative_strength > 60) else 5
    elif market.trend == "BEARISH":
        adjustment -= 10 if (price_action < 40 and relative_strength < 40) else 5

    # Breadth
    if market.breadth == "ADVANCING":
        adjustment += 3
    elif market.breadth == "DECLINING":
        adjustment -= 3

    low, high = bounds
    return float(np.clip(adjustment, low, high))


def assess_market_regime(
    spy_change: Optional[float] = None,
    vix: Optional[float] = None,
    advance_decline: Optional[float] = None,
) -> RegimeAssessment:
    """
    Label the market from SPY's daily change, VIX and the advance/decline ratio.

    Missing readings count as flat SPY, VIX 20 and an even A/D ratio of 1.
    """
    spy = spy_change or 0.0
    vix_value = vix or DEFAULT_VIX
    ad = advance_decline or 1.0

    if spy > 0.5:
        trend = "BULLISH"
    elif spy < -0.5:
        trend = "BEARISH"
    else:
        trend = "NEUTRAL"

    if vix_value > 25:
        volatility = "HIGH"
    elif vix_value < 15:
        volatility = "LOW"
    else:
        volatility = "NORMAL"

    if ad > 1.5:
        breadth = "ADVANCING"
    elif ad < 0.67:
        breadth = "DECLINING"
    else:
        breadth = "MIXED"

    return RegimeAssessment(trend=trend, volatility=volatility, breadth=breadth)


def build_market_context(
    spy_change: Optional[float] = None,
    vix: Optional[float] = None,
    advance_decline: Optional[float] = None,
    sector_performance: Optional[Mapping[str, Mapping[str, float]]] = None,
) -> MarketContext:
    """Assemble a MarketContext from raw readings using assess_market_regime labels."""
    regime = assess_market_regime(spy_change, vix, advance_decline)
    return MarketContext(
        spy_change=spy_change or 0.0,
        volatility=regime.volatility,
        trend=regime.trend,
        breadth=regime.breadth,
        vix_level=vix or DEFAULT_VIX,
        sector_performance=dict(sector_performance or {}),
    )


def regime_position_multiplier(regime: Optional[Union[RegimeAssessment, MarketContext]]) -> float:
    """
    Scale factor for position sizes under a regime.

    Accepts a RegimeAssessment or a MarketContext (both carry the three labels);
    None counts as normal conditions.
    """
    if regime is None:
        return 1.0
    if regime.volatility == "HIGH":
        return REGIME_SIZE_HIGH_VOL
    if regime.trend == "BEARISH" and regime.breadth == "DECLINING":
        return REGIME_SIZE_BEAR_DECLINING
    if regime.volatility == "LOW" and regime.trend == "BULLISH":
        return REGIME_SIZE_LOW_VOL_BULL
    return 1.0


def regime_recommendation(regime: RegimeAssessment) -> str:
    """Position-sizing guidance for a regime."""
    if regime.volatility == "HIGH":
        return "Reduce position sizes by 50% due to high volatility"
    if regime.trend == "BEARISH" and regime.breadth == "DECLINING":
        return "Favor short positions and reduce long exposure"
    if regime.volatility == "LOW" and regime.trend == "BULLISH":
        return "Increase position sizes in favorable low-vol bull market"
    if regime.trend == "NEUTRAL" and regime.volatility == "NORMAL":
        return "Use standard position sizing and balanced approach"
    return "Monitor market conditions closely for regime changes"


def regime_summary(regime: RegimeAssessment, as_of: Optional[datetime] = None) -> Dict[str, object]:
    """Regime labels, position multiplier, recommendation and timestamp for the dashboard header."""
    now = as_of or datetime.now(timezone.utc)
    summary = {
        "regime": regime.to_dict(),
        "positionAdjustment": regime_position_multiplier(regime),
        "recommendation": regime_recommendation(regime),
        "timestamp": now.isoformat(),
    }
    logger.info(
        f"Market regime: {regime.trend}/{regime.volatility}/{regime.breadth} "
        f"(size x{summary['positionAdjustment']:.2f}) - {summary['recommendation']}"
    )
    return summary
