"""Centralized scoring configuration for the NISS engine.

All weights, thresholds, and scoring constants live here so that
the engine, the trade setup generator and the screener share a single
source of truth. Tables are read-only; inject overrides through
``niss.config.EngineConfig`` instead of mutating them.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Mapping, Tuple

ENGINE_VERSION = "3.0.0"

NEUTRAL_SCORE = 50.0

# Component weights (must sum to 1.0)
COMPONENT_WEIGHTS: Mapping[str, float] = MappingProxyType({
    "priceAction": 0.20,
    "newsImpact": 0.25,
    "technicalMomentum": 0.20,
    "optionsFlow": 0.15,
    "relativeStrength": 0.10,
    "volumeAnalysis": 0.10,
})

COMPONENT_NAMES: Tuple[str, ...] = tuple(COMPONENT_WEIGHTS)

# Final score and regime bounds
SCORE_BOUNDS: Tuple[float, float] = (-100.0, 100.0)
REGIME_BOUNDS: Tuple[float, float] = (-20.0, 20.0)
COMPONENT_BOUNDS: Tuple[float, float] = (0.0, 100.0)

# Source credibility multipliers, matched case-insensitively as substrings
# in table order (first hit wins).
SOURCE_CREDIBILITY: Mapping[str, float] = MappingProxyType({
    "Reuters": 1.2,
    "Bloomberg": 1.2,
    "Wall Street Journal": 1.15,
    "Financial Times": 1.15,
    "WSJ": 1.15,
    "CNBC": 1.0,
    "MarketWatch": 1.0,
    "Yahoo Finance": 0.85,
    "Seeking Alpha": 0.8,
    "Motley Fool": 0.75,
})
DEFAULT_CREDIBILITY = 0.7

# Headline relevance
RELEVANCE_BASE = 40.0
RELEVANCE_SYMBOL_BONUS = 30.0
HIGH_IMPACT_KEYWORDS: Tuple[str, ...] = (
    "earnings", "revenue", "profit", "loss", "merger", "acquisition",
    "fda", "approval", "recall", "lawsuit", "bankruptcy", "dividend",
)
HIGH_IMPACT_BONUS = 12.0
MEDIUM_IMPACT_KEYWORDS: Tuple[str, ...] = (
    "upgrade", "downgrade", "target", "partnership", "deal", "ceo",
    "guidance", "forecast", "outlook", "expansion", "growth",
)
MEDIUM_IMPACT_BONUS = 7.0
SENTIMENT_SCALE = 25.0

# (max_age_hours, weight); first band whose bound exceeds the age applies
TIME_DECAY_BANDS: Tuple[Tuple[float, float], ...] = (
    (1.0, 1.0),
    (6.0, 0.9),
    (24.0, 0.7),
    (72.0, 0.5),
)
STALE_DECAY = 0.3
UNKNOWN_AGE_DECAY = 0.5

# Technical indicator defaults when the payload is silent
TECHNICAL_DEFAULTS: Dict[str, float] = {
    "rsi": 50.0,
    "macd": 0.0,
    "macd_signal": 0.0,
    "adx": 25.0,
}

LARGE_CAP_THRESHOLD = 50_000_000_000  # $50B

# Trade setup tiers: stop multiplier, target multipliers, probabilities, R/R
TRADE_SETUP_RULES: Mapping[str, Mapping] = MappingProxyType({
    "STRONG BUY": {"stop": 0.95, "targets": (1.04, 1.08, 1.12), "probs": (0.8, 0.6, 0.4), "rr": 2.4},
    "BUY": {"stop": 0.96, "targets": (1.03, 1.06, 1.09), "probs": (0.7, 0.5, 0.3), "rr": 2.25},
    "STRONG SELL": {"stop": 1.05, "targets": (0.96, 0.92, 0.88), "probs": (0.8, 0.6, 0.4), "rr": 2.4},
    "SELL": {"stop": 1.04, "targets": (0.97, 0.94, 0.91), "probs": (0.7, 0.5, 0.3), "rr": 2.25},
})

# Confidence labels
CONFIDENCE_HIGH = "HIGH"
CONFIDENCE_MEDIUM = "MEDIUM"
CONFIDENCE_LOW = "LOW"
CONFIDENCE_ERROR = "ERROR"

STRONG_UPPER = 70.0
STRONG_LOWER = 30.0
BULLISH_LEVEL = 60.0
BEARISH_LEVEL = 40.0
REGIME_DOWNGRADE_LEVEL = 15.0

# Market readings assumed when missing
DEFAULT_VIX = 20.0

# Position sizing: half-Kelly from historical win rates per confidence label,
# expected win scaled by |NISS| and a fixed average loss. Sizes in % of account.
KELLY_WIN_RATES: Mapping[str, float] = MappingProxyType({
    CONFIDENCE_HIGH: 0.65,
    CONFIDENCE_MEDIUM: 0.55,
    CONFIDENCE_LOW: 0.45,
})
KELLY_DEFAULT_WIN_RATE = 0.5
KELLY_WIN_PER_POINT = 0.08 / 100  # avg win per NISS point
KELLY_MAX_WIN = 0.12
KELLY_AVG_LOSS = 0.035
KELLY_FRACTION = 0.5
POSITION_BOUNDS: Tuple[float, float] = (0.5, 5.0)
POSITION_CAPS: Mapping[str, float] = MappingProxyType({"STRONG": 2.5, "DEFAULT": 1.5})
DEFAULT_ACCOUNT_SIZE = 100_000.0

# Regime position multipliers
REGIME_SIZE_HIGH_VOL = 0.5
REGIME_SIZE_BEAR_DECLINING = 0.6
REGIME_SIZE_LOW_VOL_BULL = 1.2

# Risk level cutoffs on the additive risk score
RISK_LEVEL_HIGH = 6
RISK_LEVEL_MEDIUM = 3
