import sys, os
from datetime import datetime, timezone

import pytest

# Ensure project root is on path for module imports
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from niss.models import (
    MarketContext,
    NewsItem,
    OptionsMetrics,
    StockSnapshot,
    TechnicalIndicators,
)

AS_OF = datetime(2026, 1, 15, 16, 0, tzinfo=timezone.utc)


@pytest.fixture
def as_of():
    return AS_OF


@pytest.fixture
def bullish_stock():
    # priceAction 97, volumeAnalysis 100
    return StockSnapshot(
        symbol="NVDA",
        price=110.0,
        change_percent=4.0,
        volume=5_500_000,
        avg_volume=1_000_000,
        sma20=100.0,
        sma50=95.0,
        sma200=90.0,
        high_52_week=112.0,
        low_52_week=60.0,
        sector="Technology",
        market_cap=2_000_000_000_000,
    )


@pytest.fixture
def bullish_news():
    # relevance 94 + sentiment 22.5 -> clamped to 100
    return [
        NewsItem(
            headline="NVDA earnings beat, revenue surges",
            source="Reuters",
            sentiment=0.9,
            datetime=AS_OF.timestamp() - 1800,
        )
    ]


@pytest.fixture
def bullish_technicals():
    # technicalMomentum 92.5
    return TechnicalIndicators(rsi=60, macd=2.0, macd_signal=1.0, adx=30)


@pytest.fixture
def bullish_options():
    # optionsFlow 87.5
    return OptionsMetrics(put_call_ratio=0.5, call_volume=5000, put_volume=1000)


@pytest.fixture
def bull_market():
    # relativeStrength for bullish_stock: 90; regime +10
    return MarketContext(
        spy_change=0.5,
        volatility="NORMAL",
        trend="BULLISH",
        breadth="MIXED",
        vix_level=18.0,
        sector_performance={"Technology": {"changePercent": 1.0}},
    )


@pytest.fixture
def bearish_stock():
    return StockSnapshot(
        symbol="XYZ",
        price=20.0,
        change_percent=-6.0,
        volume=4_000_000,
        avg_volume=1_000_000,
        sma20=24.0,
        sma50=26.0,
        sma200=30.0,
        high_52_week=50.0,
        low_52_week=19.5,
        sector="Retail",
    )
