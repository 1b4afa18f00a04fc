"""
Trade setup generation from a NISS result.

Action thresholds (score, confidence):
- STRONG BUY:  score > 75 and HIGH      stop -5%, targets +4/+8/+12%, R/R 2.4
- BUY:         score > 60 and not LOW   stop -4%, targets +3/+6/+9%,  R/R 2.25
- STRONG SELL: score < -75 and HIGH     stop +5%, targets -4/-8/-12%, R/R 2.4
- SELL:        score < -60 and not LOW  stop +4%, targets -3/-6/-9%,  R/R 2.25
- HOLD otherwise: no stop, no targets, R/R 1
"""
from __future__ import annotations

from typing import List, Optional

import numpy as np

from niss.models import NISSResult, TradeOutcome, TradeSetup, TradeTarget
from niss.scoring_config import (
    CONFIDENCE_HIGH,
    CONFIDENCE_ERROR,
    CONFIDENCE_LOW,
    STRONG_LOWER,
    STRONG_UPPER,
    TRADE_SETUP_RULES,
)


def select_action(score: float, confidence: str) -> str:
    """Map a NISS score and confidence label to a trade action."""
    if score > 75 and confidence == CONFIDENCE_HIGH:
        return "STRONG BUY"
    if score > 60 and confidence not in (CONFIDENCE_LOW, CONFIDENCE_ERROR):
        return "BUY"
    if score < -75 and confidence == CONFIDENCE_HIGH:
        return "STRONG SELL"
    if score < -60 and confidence not in (CONFIDENCE_LOW, CONFIDENCE_ERROR):
        return "SELL"
    return "HOLD"


def generate_reasoning(result: NISSResult, action: str) -> str:
    """
    Human-readable justification listing strong (>70) and weak (<30) components.

    Example:
        "BUY signal based on: Strong newsImpact, Weak optionsFlow (NISS: 64.2)"
    """
    notes: List[str] = []
    for name, value in result.components.items():
        if value > STRONG_UPPER:
            notes.append(f"Strong {name}")
        elif value < STRONG_LOWER:
            notes.append(f"Weak {name}")

    component_list = ", ".join(notes) if notes else "Mixed signals"
    return f"{action} signal based on: {component_list} (NISS: {result.score:.1f})"


def generate_trade_setup(current_price: float, result: NISSResult) -> TradeSetup:
    """
    Derive entry, stop, targets and risk/reward from a NISS result.

    Args:
        current_price: Latest trade price, used as the entry
        result: Output of NISSEngine.score

    Returns:
        TradeSetup with prices rounded to cents. Error results and unusable
        prices always produce HOLD.
    """
    price_ok = current_price is not None and np.isfinite(current_price) and current_price > 0
    action = select_action(result.score, result.confidence) if price_ok else "HOLD"
    entry = round(float(current_price), 2) if price_ok else 0.0

    rules = TRADE_SETUP_RULES.get(action)
    if rules is None:
        return TradeSetup(
            action="HOLD",
            entry_price=entry,
            stop_loss=None,
            targets=(),
            risk_reward=1.0,
            confidence=result.confidence,
            reasoning=generate_reasoning(result, "HOLD"),
        )

    targets = tuple(
        TradeTarget(level=i, price=round(current_price * mult, 2), probability=prob)
        for i, (mult, prob) in enumerate(zip(rules["targets"], rules["probs"]), start=1)
    )

    return TradeSetup(
        action=action,
        entry_price=entry,
        stop_loss=round(current_price * rules["stop"], 2),
        targets=targets,
        risk_reward=rules["rr"],
        confidence=result.confidence,
        reasoning=generate_reasoning(result, action),
    )


def evaluate_trade_outcome(
    setup: TradeSetup,
    exit_price: float,
    exit_reason: Optional[str] = None,
) -> TradeOutcome:
    """
    Grade a closed trade against the setup that produced it.

    Args:
        setup: The generated TradeSetup
        exit_price: Price the position was closed at
        exit_reason: "STOP_LOSS" when the stop was hit, anything else otherwise

    Returns:
        TradeOutcome. actual_return is a fraction (0.05 == 5%); for shorts it is
        reported as the positive gain. target_accuracy is 33.33 per target level reached.
    """
    entry = setup.entry_price
    if not setup.targets:
        return TradeOutcome(success=False, reason="No actionable setup")
    if not entry or exit_price is None or not np.isfinite(exit_price) or exit_price <= 0:
        return TradeOutcome(success=False, reason="Insufficient data")

    actual_return = (exit_price - entry) / entry
    is_long = setup.is_long

    if exit_reason == "STOP_LOSS":
        return TradeOutcome(success=False, reason="Stopped out", actual_return=actual_return)

    if is_long:
        reached = [t.level for t in setup.targets if exit_price >= t.price]
    else:
        reached = [t.level for t in setup.targets if exit_price <= t.price]
    target_reached = max(reached) if reached else 0
    accuracy = target_reached * 33.33

    if is_long and actual_return > 0:
        return TradeOutcome(
            success=True,
            reason=f"Target {target_reached or 'partial'} hit",
            actual_return=actual_return,
            target_reached=target_reached,
            target_accuracy=accuracy,
        )
    if not is_long and actual_return < 0:
        return TradeOutcome(
            success=True,
            reason=f"Target {target_reached or 'partial'} hit",
            actual_return=abs(actual_return),
            target_reached=target_reached,
            target_accuracy=accuracy,
        )

    return TradeOutcome(
        success=False,
        reason="Trade moved against position",
        actual_return=actual_return,
    )
