"""
NISS - News Impact Score engine.

This module gathers the public scoring API:
- Scoring engine (six weighted components + market regime)
- Trade setup generation, position sizing and outcome grading
- Signal classification and batch screening
"""

# ============================================================================
# SCORING ENGINE
# ============================================================================
from niss.scoring_engine import (
    NISSEngine,
    component_breakdown,
    get_engine,
    score,
)
from niss.config import EngineConfig, get_config
from niss.confidence import classify_confidence

# ============================================================================
# SUPPORT UTILITIES
# ============================================================================
from niss.news import (
    headline_relevance,
    news_time_decay,
    source_credibility,
    time_decay,
)
from niss.market_regime import (
    assess_market_regime,
    build_market_context,
    regime_adjustment,
    regime_position_multiplier,
    regime_summary,
)

# ============================================================================
# TRADE SETUP, RISK, SIGNALS & SCREENING
# ============================================================================
from niss.trade_setup import evaluate_trade_outcome, generate_trade_setup
from niss.risk import assess_trade_risk, kelly_position_pct
from niss.signals import determine_signal
from niss.screener import score_universe, summarize_screen

# ============================================================================
# RECORDS & ERRORS
# ============================================================================
from niss.models import (
    BollingerBands,
    MarketContext,
    NewsItem,
    NISSResult,
    OptionsMetrics,
    RegimeAssessment,
    RiskAssessment,
    Signal,
    StockSnapshot,
    TechnicalIndicators,
    TradeOutcome,
    TradeSetup,
    TradeTarget,
)
from niss.exceptions import ComponentError, ConfigurationError, NISSError, ValidationError

__version__ = "3.0.0"

__all__ = [
    # Engine
    "NISSEngine",
    "EngineConfig",
    "get_engine",
    "get_config",
    "score",
    "component_breakdown",
    "classify_confidence",

    # Support utilities
    "time_decay",
    "news_time_decay",
    "source_credibility",
    "headline_relevance",
    "regime_adjustment",
    "assess_market_regime",
    "build_market_context",
    "regime_summary",
    "regime_position_multiplier",

    # Setup, signals, screening
    "generate_trade_setup",
    "evaluate_trade_outcome",
    "assess_trade_risk",
    "kelly_position_pct",
    "determine_signal",
    "score_universe",
    "summarize_screen",

    # Records
    "StockSnapshot",
    "NewsItem",
    "TechnicalIndicators",
    "BollingerBands",
    "OptionsMetrics",
    "MarketContext",
    "NISSResult",
    "TradeSetup",
    "TradeTarget",
    "TradeOutcome",
    "Signal",
    "RegimeAssessment",
    "RiskAssessment",

    # Errors
    "NISSError",
    "ValidationError",
    "ComponentError",
    "ConfigurationError",
]
