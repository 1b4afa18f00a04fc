"""
NISS Batch Screener - score a universe file and rank it.

Usage:
    python batch_screen.py --input data/universe.json --market data/market.json --output ranked.csv
    python batch_screen.py --input data/universe.json --top 10 --as-of 2026-01-15T15:30:00Z

Input is a JSON list of records:
    [{"stock": {"symbol": "AAPL", "price": 190.1, "changePercent": 1.4, ...},
      "news": [{"headline": "...", "source": "Reuters", "sentiment": 0.6, "datetime": 1768490000}],
      "technicals": {"rsi": 58, "macd": 1.2, "macdSignal": 0.9, "adx": 27},
      "options": {"putCallRatio": 0.6, "callVolume": 42000, "putVolume": 11000}}]

The market file holds one MarketContext dict, or raw readings
{"spyChange": 0.8, "vix": 14.2, "advanceDecline": 1.7} which are turned into
regime labels.
"""
from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional

import pandas as pd
from dotenv import load_dotenv

load_dotenv()

from niss.config import get_config
from niss.logging_config import get_logger, setup_logging
from niss.market_regime import build_market_context, regime_summary
from niss.models import MarketContext, RegimeAssessment
from niss.scoring_engine import NISSEngine
from niss.screener import score_universe, summarize_screen

logger = get_logger("batch_screen")

DISPLAY_COLUMNS = [
    "Symbol", "Price", "Change_Pct", "NISS", "Confidence", "Action", "Signal",
    "Entry", "Stop", "Target_1", "Position_Pct", "Risk_Level",
]


def load_records(path: Path) -> List[Any]:
    """Load the universe JSON (a list of records)."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict) and "records" in data:
        data = data["records"]
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON list of records")
    return data


def load_market(path: Optional[Path]) -> Optional[MarketContext]:
    """Load a market context, deriving regime labels from raw readings if needed."""
    if path is None:
        return None
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object with market readings")
    if "trend" in data or "volatility" in data or "breadth" in data:
        return MarketContext.from_dict(data)
    return build_market_context(
        spy_change=data.get("spyChange"),
        vix=data.get("vix", data.get("vixLevel")),
        advance_decline=data.get("advanceDecline"),
        sector_performance=data.get("sectorPerformance"),
    )


def parse_as_of(value: Optional[str]) -> datetime:
    if not value:
        return datetime.now(timezone.utc)
    ts = pd.Timestamp(value)
    ts = ts.tz_localize("UTC") if ts.tzinfo is None else ts.tz_convert("UTC")
    return ts.to_pydatetime()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Score and rank a universe with the NISS engine")
    parser.add_argument("--input", required=True, type=Path, help="JSON list of stock records")
    parser.add_argument("--market", type=Path, default=None, help="JSON market context or raw readings")
    parser.add_argument("--output", type=Path, default=None, help="Write the ranked table as CSV")
    parser.add_argument("--top", type=int, default=20, help="Rows to print when no --output is given")
    parser.add_argument("--as-of", default=None, help="Reference time for news decay (ISO-8601)")
    parser.add_argument("--workers", type=int, default=1, help="Thread pool size")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ... (default: NISS_LOG_LEVEL or INFO)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        records = load_records(args.input)
        market = load_market(args.market)
        as_of = parse_as_of(args.as_of)
    except (OSError, ValueError, TypeError) as e:
        logger.error(f"Failed to load inputs: {e}")
        return 2

    if market is not None:
        regime_summary(
            RegimeAssessment(trend=market.trend, volatility=market.volatility, breadth=market.breadth),
            as_of=as_of,
        )

    engine = NISSEngine(get_config())
    logger.info(f"Scoring {len(records)} records with NISS v{engine.version}...")
    df = score_universe(records, market=market, engine=engine, as_of=as_of, max_workers=args.workers)

    summary = summarize_screen(df)
    logger.info(
        f"Done: {summary['total']} scored, {summary['errors']} errors, "
        f"mean NISS {summary['mean_niss']:.2f}, actions {summary['actions']}"
    )

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(args.output, index=False)
        logger.info(f"Saved ranked table to {args.output}")
    else:
        with pd.option_context("display.width", 200, "display.max_columns", None):
            print(df[DISPLAY_COLUMNS].head(args.top).to_string(index=False))

    return 0


if __name__ == "__main__":
    sys.exit(main())
