"""
Risk management for trade setups - position sizing and risk grading.

Sizing:
    kelly    = half-Kelly from the confidence win rate and |NISS|, bounded to 0.5-5%
    capped   = min(kelly, 2.5% for STRONG actions else 1.5%)
    position = max(0.5%, capped * regime multiplier)

Risk grade (additive points, >=6 HIGH, >=3 MEDIUM, else LOW):
    confidence LOW/ERROR +3, MEDIUM +1; |NISS| < 60 +2;
    HIGH volatility +2; BEARISH trend +1; R/R < 2 +3, R/R < 2.5 +1
"""
from __future__ import annotations

from typing import Optional, Union

import numpy as np

from niss.logging_config import get_logger
from niss.market_regime import regime_position_multiplier
from niss.models import MarketContext, NISSResult, RegimeAssessment, RiskAssessment, TradeSetup
from niss.scoring_config import (
    CONFIDENCE_ERROR,
    CONFIDENCE_LOW,
    CONFIDENCE_MEDIUM,
    DEFAULT_ACCOUNT_SIZE,
    KELLY_AVG_LOSS,
    KELLY_DEFAULT_WIN_RATE,
    KELLY_FRACTION,
    KELLY_MAX_WIN,
    KELLY_WIN_PER_POINT,
    KELLY_WIN_RATES,
    POSITION_BOUNDS,
    POSITION_CAPS,
    RISK_LEVEL_HIGH,
    RISK_LEVEL_MEDIUM,
)

logger = get_logger("risk")

Regime = Optional[Union[MarketContext, RegimeAssessment]]


def kelly_position_pct(confidence: str, niss_score: float) -> float:
    """
    Half-Kelly position size in % of account.

    Win probability comes from the confidence label (0.5 when unknown), the
    average win grows with |NISS| up to 12%, the average loss is fixed at 3.5%.
    """
    low, high = POSITION_BOUNDS
    win_rate = KELLY_WIN_RATES.get(confidence, KELLY_DEFAULT_WIN_RATE)
    avg_win = min(abs(niss_score or 0.0) * KELLY_WIN_PER_POINT, KELLY_MAX_WIN)
    if avg_win <= 0:
        return low

    odds = avg_win / KELLY_AVG_LOSS
    kelly = (win_rate * odds - (1 - win_rate)) / odds
    return float(np.clip(kelly * KELLY_FRACTION * 100, low, high))


def max_dollar_risk(position_pct: float, setup: TradeSetup, account_size: float = DEFAULT_ACCOUNT_SIZE) -> float:
    """Dollars lost if the stop is hit; 0 for setups without a stop."""
    if setup.stop_loss is None or not setup.entry_price:
        return 0.0
    stop_fraction = abs(setup.entry_price - setup.stop_loss) / setup.entry_price
    return round(account_size * position_pct / 100 * stop_fraction, 2)


def assess_risk_level(result: NISSResult, setup: TradeSetup, regime: Regime = None) -> str:
    points = 0

    if result.confidence in (CONFIDENCE_LOW, CONFIDENCE_ERROR):
        points += 3
    elif result.confidence == CONFIDENCE_MEDIUM:
        points += 1

    if abs(result.score) < 60:
        points += 2

    if regime is not None:
        if regime.volatility == "HIGH":
            points += 2
        if regime.trend == "BEARISH":
            points += 1

    if setup.risk_reward < 2:
        points += 3
    elif setup.risk_reward < 2.5:
        points += 1

    if points >= RISK_LEVEL_HIGH:
        return "HIGH"
    if points >= RISK_LEVEL_MEDIUM:
        return "MEDIUM"
    return "LOW"


def assess_trade_risk(
    result: NISSResult,
    setup: TradeSetup,
    regime: Regime = None,
    account_size: float = DEFAULT_ACCOUNT_SIZE,
) -> RiskAssessment:
    """
    Size a position for ``setup`` and grade its risk.

    Args:
        result: NISS result the setup was generated from
        setup: Output of generate_trade_setup
        regime: MarketContext or RegimeAssessment; None means normal conditions
        account_size: Account value used for the dollar risk

    Returns:
        RiskAssessment with sizes in % of account
    """
    kelly = kelly_position_pct(result.confidence, result.score)
    cap = POSITION_CAPS["STRONG"] if "STRONG" in setup.action else POSITION_CAPS["DEFAULT"]
    multiplier = regime_position_multiplier(regime)
    position = max(POSITION_BOUNDS[0], min(kelly, cap) * multiplier)
    position = round(position, 2)

    risk_level = assess_risk_level(result, setup, regime)
    logger.debug(
        f"{result.symbol or '<unknown>'} {setup.action}: kelly {kelly:.2f}% x {multiplier:.2f} "
        f"-> {position:.2f}% ({risk_level} risk)"
    )

    return RiskAssessment(
        position_pct=position,
        kelly_pct=round(kelly, 2),
        regime_multiplier=multiplier,
        max_dollar_risk=max_dollar_risk(position, setup, account_size),
        risk_level=risk_level,
        reasoning=f"Kelly: {kelly:.1f}% x Regime: {multiplier:.2f}",
    )
