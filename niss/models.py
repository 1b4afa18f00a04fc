"""
Data models for the NISS engine.

Input records are frozen so the engine can never mutate caller data.
``from_dict`` accepts the gateway's camelCase keys as well as snake_case;
``to_dict`` on output records produces the camelCase contract consumed by the UI.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Tuple, Union
import math


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present, non-None value among ``keys``."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return default


def _as_float(value: Any) -> Optional[float]:
    """Coerce to a finite float, None when missing or non-numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


@dataclass(frozen=True)
class StockSnapshot:
    """Current trading state of one symbol."""
    symbol: str
    price: Optional[float] = None
    change_percent: float = 0.0
    volume: Optional[float] = None
    avg_volume: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    open: Optional[float] = None
    previous_close: Optional[float] = None
    sma20: Optional[float] = None
    sma50: Optional[float] = None
    sma200: Optional[float] = None
    high_52_week: Optional[float] = None
    low_52_week: Optional[float] = None
    sector: Optional[str] = None
    market_cap: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StockSnapshot":
        symbol = _pick(data, "symbol", "ticker", default="")
        return cls(
            symbol=symbol if isinstance(symbol, str) else "",
            price=_as_float(_pick(data, "price", "currentPrice")),
            change_percent=_as_float(_pick(data, "changePercent", "change_percent")) or 0.0,
            volume=_as_float(data.get("volume")),
            avg_volume=_as_float(_pick(data, "avgVolume", "avg_volume", "averageVolume")),
            high=_as_float(data.get("high")),
            low=_as_float(data.get("low")),
            open=_as_float(data.get("open")),
            previous_close=_as_float(_pick(data, "previousClose", "previous_close")),
            sma20=_as_float(data.get("sma20")),
            sma50=_as_float(data.get("sma50")),
            sma200=_as_float(data.get("sma200")),
            high_52_week=_as_float(_pick(data, "high52Week", "high_52_week")),
            low_52_week=_as_float(_pick(data, "low52Week", "low_52_week")),
            sector=_pick(data, "sector"),
            market_cap=_as_float(_pick(data, "marketCap", "market_cap")),
        )


@dataclass(frozen=True)
class NewsItem:
    """One news article relevant to a symbol."""
    headline: str = ""
    source: Optional[str] = None
    sentiment: float = 0.0  # -1 .. 1
    # Seconds since the Unix epoch, a datetime, or an ISO-8601 string
    datetime: Optional[Union[float, int, str, datetime]] = None
    summary: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NewsItem":
        sentiment = _as_float(data.get("sentiment")) or 0.0
        return cls(
            headline=_pick(data, "headline", "title", default="") or "",
            source=_pick(data, "source"),
            sentiment=max(-1.0, min(1.0, sentiment)),
            datetime=_pick(data, "datetime", "publishedAt", "published_at"),
            summary=data.get("summary"),
        )


@dataclass(frozen=True)
class BollingerBands:
    upper: Optional[float] = None
    lower: Optional[float] = None


@dataclass(frozen=True)
class TechnicalIndicators:
    """Optional technical-analysis inputs; missing fields are neutral."""
    rsi: Optional[float] = None
    macd: Optional[float] = None
    macd_signal: Optional[float] = None
    adx: Optional[float] = None
    bollinger: Optional[BollingerBands] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TechnicalIndicators":
        bands = data.get("bollinger")
        bollinger = None
        if isinstance(bands, Mapping):
            bollinger = BollingerBands(
                upper=_as_float(bands.get("upper")),
                lower=_as_float(bands.get("lower")),
            )
        return cls(
            rsi=_as_float(data.get("rsi")),
            macd=_as_float(data.get("macd")),
            macd_signal=_as_float(_pick(data, "macdSignal", "macd_signal")),
            adx=_as_float(data.get("adx")),
            bollinger=bollinger,
        )


@dataclass(frozen=True)
class OptionsMetrics:
    """Options-flow snapshot for one symbol."""
    put_call_ratio: Optional[float] = None
    call_volume: float = 0.0
    put_volume: float = 0.0
    call_oi: float = 0.0
    put_oi: float = 0.0
    unusual_activity: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OptionsMetrics":
        return cls(
            put_call_ratio=_as_float(_pick(data, "putCallRatio", "put_call_ratio")),
            call_volume=_as_float(_pick(data, "callVolume", "call_volume")) or 0.0,
            put_volume=_as_float(_pick(data, "putVolume", "put_volume")) or 0.0,
            call_oi=_as_float(_pick(data, "callOI", "call_oi")) or 0.0,
            put_oi=_as_float(_pick(data, "putOI", "put_oi")) or 0.0,
            unusual_activity=bool(_pick(data, "unusualActivity", "unusual_activity", default=False)),
        )


@dataclass(frozen=True)
class MarketContext:
    """Broad market regime snapshot."""
    spy_change: float = 0.0
    volatility: str = "NORMAL"  # LOW / NORMAL / HIGH
    trend: str = "NEUTRAL"  # BULLISH / NEUTRAL / BEARISH
    breadth: str = "MIXED"  # ADVANCING / MIXED / DECLINING
    vix_level: float = 20.0
    # sector -> {"changePercent": x}
    sector_performance: Mapping[str, Any] = field(default_factory=dict)

    def sector_change(self, sector: Optional[str]) -> float:
        """Sector change percent, 0 when the sector is unknown."""
        if not sector:
            return 0.0
        entry = self.sector_performance.get(sector)
        if isinstance(entry, Mapping):
            entry = _pick(entry, "changePercent", "change_percent")
        return _as_float(entry) or 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MarketContext":
        vix = _as_float(_pick(data, "vixLevel", "vix_level", "vix"))
        return cls(
            spy_change=_as_float(_pick(data, "spyChange", "spy_change")) or 0.0,
            volatility=str(_pick(data, "volatility", default="NORMAL")).upper(),
            trend=str(_pick(data, "trend", "marketTrend", default="NEUTRAL")).upper(),
            breadth=str(_pick(data, "breadth", default="MIXED")).upper(),
            vix_level=20.0 if vix is None else vix,
            sector_performance=dict(_pick(data, "sectorPerformance", "sector_performance", default={})),
        )


@dataclass(frozen=True)
class NISSResult:
    """
    Output of a scoring call.

    Attributes:
        score: Composite score in [-100, 100]
        components: The six named sub-scores, each in [0, 100]
        confidence: LOW / MEDIUM / HIGH, or ERROR when the input was rejected
        regime_adjustment: Market regime term in [-20, 20]
        metadata: version, processingTimeMs, timestampIso, symbol, componentWeights (and error)
    """
    score: float
    components: Dict[str, float]
    confidence: str
    regime_adjustment: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return self.confidence == "ERROR"

    @property
    def symbol(self) -> Optional[str]:
        return self.metadata.get("symbol")

    @property
    def error(self) -> Optional[str]:
        return self.metadata.get("error")

    def to_dict(self) -> dict:
        """Convert to the camelCase dict consumed by the dashboard."""
        return {
            "score": self.score,
            "components": dict(self.components),
            "confidence": self.confidence,
            "regimeAdjustment": self.regime_adjustment,
            "metadata": dict(self.metadata),
        }

    def __repr__(self) -> str:
        return (
            f"NISSResult(symbol={self.symbol!r}, score={self.score:.2f}, "
            f"confidence={self.confidence}, regime={self.regime_adjustment:+.1f})"
        )


@dataclass(frozen=True)
class TradeTarget:
    level: int
    price: float
    probability: float

    def to_dict(self) -> dict:
        return {"level": self.level, "price": self.price, "probability": self.probability}


@dataclass(frozen=True)
class TradeSetup:
    """Actionable levels derived from a NISSResult and a current price."""
    action: str
    entry_price: float
    stop_loss: Optional[float]
    targets: Tuple[TradeTarget, ...]
    risk_reward: float
    confidence: str
    reasoning: str

    @property
    def is_long(self) -> bool:
        return bool(self.targets) and self.targets[0].price > self.entry_price

    def to_dict(self) -> dict:
        return {
            "action": self.action,
            "entryPrice": self.entry_price,
            "stopLoss": self.stop_loss,
            "targets": [t.to_dict() for t in self.targets],
            "riskReward": self.risk_reward,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
        }


@dataclass(frozen=True)
class Signal:
    """Coarse signal from a raw score and an observed price change."""
    signal: str
    confidence: str

    def to_dict(self) -> dict:
        return {"signal": self.signal, "confidence": self.confidence}


@dataclass(frozen=True)
class RegimeAssessment:
    """Market regime labels derived from raw index readings."""
    trend: str = "NEUTRAL"
    volatility: str = "NORMAL"
    breadth: str = "MIXED"

    def to_dict(self) -> dict:
        return {"trend": self.trend, "volatility": self.volatility, "breadth": self.breadth}


@dataclass(frozen=True)
class TradeOutcome:
    """How a generated setup played out once the trade was closed."""
    success: bool
    reason: str
    actual_return: float = 0.0
    target_reached: int = 0
    target_accuracy: float = 0.0

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "reason": self.reason,
            "actual_return": self.actual_return,
            "target_reached": self.target_reached,
            "target_accuracy": self.target_accuracy,
        }


@dataclass(frozen=True)
class RiskAssessment:
    """
    Position sizing and risk grade for one trade setup.

    Attributes:
        position_pct: Suggested position, % of account
        kelly_pct: Half-Kelly size before caps and regime scaling, % of account
        regime_multiplier: Regime scale factor applied to the capped size
        max_dollar_risk: Loss at the stop for ``position_pct`` of the account
        risk_level: LOW / MEDIUM / HIGH
        reasoning: Short sizing explanation
    """
    position_pct: float
    kelly_pct: float
    regime_multiplier: float
    max_dollar_risk: float
    risk_level: str
    reasoning: str

    def to_dict(self) -> dict:
        return {
            "positionSize": {
                "percentage": self.position_pct,
                "reasoning": self.reasoning,
                "maxDollarRisk": self.max_dollar_risk,
            },
            "kellyPercent": self.kelly_pct,
            "regimeMultiplier": self.regime_multiplier,
            "riskLevel": self.risk_level,
        }
