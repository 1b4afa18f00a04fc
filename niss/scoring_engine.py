"""
NISS Scoring Engine - single entry point for News Impact Scores.

Usage:
    from niss.scoring_engine import NISSEngine, score

    engine = NISSEngine()
    result = engine.score(stock, news, technicals, options, market)

    if result.is_error:
        # insufficient data, skip or flag this symbol
        ...
    print(f"{result.symbol}: {result.score:+.1f} ({result.confidence})")

    # Or use the module-level convenience function
    result = score({"symbol": "AAPL", "price": 190.0, "changePercent": 1.2})

Scoring Formula:
    score = clamp(sum(component_i * weight_i) + regime_adjustment, -100, 100)

    priceAction 20%, newsImpact 25%, technicalMomentum 20%,
    optionsFlow 15%, relativeStrength 10%, volumeAnalysis 10%

The engine holds only read-only configuration, so one instance can serve
any number of threads.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Mapping, Optional, Union
import logging
import time

import numpy as np

from niss.components import (
    news_impact_score,
    options_flow_score,
    price_action_score,
    relative_strength_score,
    technical_momentum_score,
    volume_analysis_score,
)
from niss.confidence import classify_confidence
from niss.config import EngineConfig, get_config
from niss.exceptions import ValidationError
from niss.market_regime import regime_adjustment
from niss.models import (
    MarketContext,
    NewsItem,
    NISSResult,
    OptionsMetrics,
    StockSnapshot,
    TechnicalIndicators,
)
from niss.scoring_config import CONFIDENCE_ERROR

logger = logging.getLogger(__name__)

StockInput = Union[StockSnapshot, Mapping[str, Any], None]


class NISSEngine:
    """
    Six-component NISS calculator.

    Configuration (weights, credibility table, bounds) is injected once and
    never mutated; pass a custom EngineConfig to experiment with weights.

    Example:
        engine = NISSEngine(EngineConfig(component_weights={...}))
        result = engine.score(StockSnapshot(symbol="NVDA", price=120.0))
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    @property
    def version(self) -> str:
        return self.config.version

    def score(
        self,
        stock: StockInput,
        news: Optional[Iterable[Union[NewsItem, Mapping[str, Any]]]] = None,
        technicals: Optional[Union[TechnicalIndicators, Mapping[str, Any]]] = None,
        options: Optional[Union[OptionsMetrics, Mapping[str, Any]]] = None,
        market: Optional[Union[MarketContext, Mapping[str, Any]]] = None,
        as_of: Optional[datetime] = None,
    ) -> NISSResult:
        """
        Compute the NISS for one symbol.

        Args:
            stock: Snapshot (or gateway dict) with at least a symbol
            news: News items for the symbol, newest first or in any order
            technicals: RSI/MACD/ADX/Bollinger inputs
            options: Options-flow metrics
            market: Market regime context
            as_of: Reference time for news decay (default: now, UTC)

        Returns:
            NISSResult; never raises for bad input. A rejected snapshot comes
            back with score 0, confidence "ERROR" and metadata["error"].
        """
        start = time.perf_counter()
        now = as_of or datetime.now(timezone.utc)

        try:
            snapshot = self.validate(stock)
        except ValidationError as e:
            symbol = getattr(stock, "symbol", None)
            if symbol is None and isinstance(stock, Mapping):
                symbol = stock.get("symbol")
            logger.warning(f"NISS calculation rejected for {symbol or '<unknown>'}: {e}")
            return self._error_result(symbol, e, now, start)

        technicals = self._coerce(technicals, TechnicalIndicators)
        options = self._coerce(options, OptionsMetrics)
        market = self._coerce(market, MarketContext)

        components = {
            "priceAction": price_action_score(snapshot),
            "newsImpact": news_impact_score(
                news,
                snapshot.symbol,
                as_of=now,
                credibility_table=self.config.source_credibility,
                default_credibility=self.config.default_credibility,
            ),
            "technicalMomentum": technical_momentum_score(snapshot, technicals),
            "optionsFlow": options_flow_score(options),
            "relativeStrength": relative_strength_score(snapshot, market),
            "volumeAnalysis": volume_analysis_score(snapshot),
        }

        weights = self.config.component_weights
        weighted = sum(components[name] * weights[name] for name in components)

        regime = regime_adjustment(market, components, self.config.regime_bounds)

        low, high = self.config.score_bounds
        final_score = float(np.clip(weighted + regime, low, high))

        confidence = classify_confidence(components, regime)

        elapsed_ms = (time.perf_counter() - start) * 1000.0
        logger.debug(
            f"NISS {snapshot.symbol}: {final_score:.2f} ({confidence}), regime {regime:+.1f}"
        )

        return NISSResult(
            score=round(final_score, 2),
            components=components,
            confidence=confidence,
            regime_adjustment=regime,
            metadata={
                "version": self.version,
                "processingTimeMs": round(elapsed_ms, 2),
                "timestampIso": now.isoformat(),
                "symbol": snapshot.symbol,
                "componentWeights": dict(weights),
            },
        )

    def validate(self, stock: StockInput) -> StockSnapshot:
        """
        Normalize and check the stock snapshot.

        Raises:
            ValidationError: no snapshot, no symbol, or impossible price/volume
        """
        if stock is None:
            raise ValidationError("stock", "no stock snapshot supplied")
        if isinstance(stock, Mapping):
            stock = StockSnapshot.from_dict(stock)
        if not isinstance(stock, StockSnapshot):
            raise ValidationError("stock", f"unsupported snapshot type {type(stock).__name__}")

        if not isinstance(stock.symbol, str) or not stock.symbol.strip():
            raise ValidationError("symbol", "missing or empty symbol", stock.symbol)
        try:
            if stock.price is not None and stock.price <= 0:
                raise ValidationError("price", "price must be positive", stock.price)
            for name in ("volume", "avg_volume"):
                value = getattr(stock, name)
                if value is not None and value < 0:
                    raise ValidationError(name, f"{name} must not be negative", value)
        except TypeError as e:
            raise ValidationError("stock", f"malformed snapshot: {e}")

        return stock

    @staticmethod
    def _coerce(value, record_type):
        """Accept either the record or its gateway dict; empty or malformed payloads count as absent."""
        if value is None or isinstance(value, record_type):
            return value
        if isinstance(value, Mapping):
            if not value:
                return None
            try:
                return record_type.from_dict(value)
            except (TypeError, ValueError) as e:
                logger.debug(f"Malformed {record_type.__name__} payload ignored: {e}")
                return None
        logger.debug(f"Ignoring {record_type.__name__} payload of type {type(value).__name__}")
        return None

    def _error_result(
        self, symbol: Optional[str], error: Exception, now: datetime, start: float
    ) -> NISSResult:
        return NISSResult(
            score=0.0,
            components={},
            confidence=CONFIDENCE_ERROR,
            regime_adjustment=0.0,
            metadata={
                "version": self.version,
                "processingTimeMs": round((time.perf_counter() - start) * 1000.0, 2),
                "timestampIso": now.isoformat(),
                "symbol": symbol,
                "error": str(error),
            },
        )


# Module-level default engine, built lazily from the global config
_default_engine: Optional[NISSEngine] = None


def get_engine() -> NISSEngine:
    """Get the shared default engine."""
    global _default_engine
    if _default_engine is None:
        _default_engine = NISSEngine(get_config())
    return _default_engine


def score(
    stock: StockInput,
    news: Optional[Iterable[Union[NewsItem, Mapping[str, Any]]]] = None,
    technicals: Optional[Union[TechnicalIndicators, Mapping[str, Any]]] = None,
    options: Optional[Union[OptionsMetrics, Mapping[str, Any]]] = None,
    market: Optional[Union[MarketContext, Mapping[str, Any]]] = None,
    as_of: Optional[datetime] = None,
) -> NISSResult:
    """Score one symbol with the default engine. See NISSEngine.score."""
    return get_engine().score(stock, news, technicals, options, market, as_of=as_of)


def component_breakdown(result: NISSResult) -> Dict[str, Dict[str, float]]:
    """Per-component value, weight and weighted contribution of a result."""
    weights = result.metadata.get("componentWeights", {})
    return {
        name: {
            "value": value,
            "weight": weights.get(name, 0.0),
            "contribution": value * weights.get(name, 0.0),
        }
        for name, value in result.components.items()
    }
