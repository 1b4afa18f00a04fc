"""
Batch screening: score a universe of symbols into a ranked DataFrame.

Each record is a mapping with a ``stock`` snapshot and optional ``news``,
``technicals`` and ``options``; one market context is shared by all rows.
A bad record becomes an ERROR row instead of aborting the run.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
import logging

import numpy as np
import pandas as pd

from niss.models import MarketContext, NISSResult, StockSnapshot
from niss.risk import assess_trade_risk
from niss.scoring_config import COMPONENT_NAMES
from niss.scoring_engine import NISSEngine, get_engine
from niss.signals import determine_signal
from niss.trade_setup import generate_trade_setup

logger = logging.getLogger(__name__)

SCREEN_COLUMNS: List[str] = [
    "Symbol", "Price", "Change_Pct", "NISS", "Confidence", "Action",
    "Signal", "Signal_Confidence", "Entry", "Stop",
    "Target_1", "Target_2", "Target_3", "Risk_Reward", "Position_Pct", "Risk_Level", "Regime_Adj",
    *COMPONENT_NAMES,
    "Reasoning", "Error",
]


def _screen_row(
    engine: NISSEngine,
    record: Mapping[str, Any],
    market: Optional[MarketContext],
    as_of: datetime,
) -> Dict[str, Any]:
    """Score one record and flatten result, setup, risk and signal into a row."""
    stock = record.get("stock") if isinstance(record, Mapping) else None
    if isinstance(stock, Mapping):
        stock = StockSnapshot.from_dict(stock)
    result: NISSResult = engine.score(
        stock,
        news=record.get("news") if isinstance(record, Mapping) else None,
        technicals=record.get("technicals") if isinstance(record, Mapping) else None,
        options=record.get("options") if isinstance(record, Mapping) else None,
        market=market,
        as_of=as_of,
    )

    price = getattr(stock, "price", None)
    change = getattr(stock, "change_percent", None) or 0.0

    row: Dict[str, Any] = {col: np.nan for col in SCREEN_COLUMNS}
    row.update({
        "Symbol": result.symbol,
        "Price": price,
        "Change_Pct": change,
        "NISS": result.score,
        "Confidence": result.confidence,
        "Regime_Adj": result.regime_adjustment,
        "Error": result.error,
    })

    if result.is_error:
        row.update({
            "Action": "HOLD",
            "Signal": "HOLD",
            "Signal_Confidence": "LOW",
            "Risk_Level": "HIGH",
            "Reasoning": "",
        })
        return row

    setup = generate_trade_setup(price, result)
    signal = determine_signal(result.score, change)
    risk = assess_trade_risk(result, setup, market)
    row.update({
        "Action": setup.action,
        "Signal": signal.signal,
        "Signal_Confidence": signal.confidence,
        "Entry": setup.entry_price,
        "Stop": setup.stop_loss,
        "Risk_Reward": setup.risk_reward,
        "Position_Pct": risk.position_pct,
        "Risk_Level": risk.risk_level,
        "Reasoning": setup.reasoning,
        **result.components,
    })
    for target in setup.targets:
        row[f"Target_{target.level}"] = target.price
    return row


def score_universe(
    records: Iterable[Mapping[str, Any]],
    market: Optional[Union[MarketContext, Mapping[str, Any]]] = None,
    engine: Optional[NISSEngine] = None,
    as_of: Optional[datetime] = None,
    max_workers: int = 1,
) -> pd.DataFrame:
    """
    Score every record and rank the universe.

    Args:
        records: Iterable of {"stock": ..., "news": [...], "technicals": {...}, "options": {...}}
        market: Shared market context
        engine: Engine to use (default: the shared default engine)
        as_of: Reference time for news decay, identical for every row
        max_workers: >1 scores rows on a thread pool

    Returns:
        DataFrame with SCREEN_COLUMNS, valid rows ranked by |NISS| descending
        (ties by Symbol), ERROR rows last.
    """
    engine = engine or get_engine()
    now = as_of or datetime.now(timezone.utc)
    records = list(records)
    market = NISSEngine._coerce(market, MarketContext)

    if not records:
        return pd.DataFrame(columns=SCREEN_COLUMNS)

    if max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            rows = list(pool.map(lambda r: _screen_row(engine, r, market, now), records))
    else:
        rows = [_screen_row(engine, r, market, now) for r in records]

    df = pd.DataFrame(rows, columns=SCREEN_COLUMNS)
    df["_is_error"] = df["Confidence"].eq("ERROR")
    df["_abs_niss"] = df["NISS"].abs()
    df = (
        df.sort_values(["_is_error", "_abs_niss", "Symbol"], ascending=[True, False, True], kind="mergesort")
        .drop(columns=["_is_error", "_abs_niss"])
        .reset_index(drop=True)
    )

    n_err = int((df["Confidence"] == "ERROR").sum())
    logger.info(f"Screened {len(df)} symbols ({n_err} rejected)")
    return df


def summarize_screen(df: pd.DataFrame) -> Dict[str, Any]:
    """Counts per action and confidence plus the mean NISS of valid rows."""
    valid = df[df["Confidence"] != "ERROR"]
    return {
        "total": int(len(df)),
        "errors": int(len(df) - len(valid)),
        "actions": {k: int(v) for k, v in valid["Action"].value_counts().items()},
        "confidence": {k: int(v) for k, v in valid["Confidence"].value_counts().items()},
        "mean_niss": float(valid["NISS"].mean()) if len(valid) else 0.0,
    }
