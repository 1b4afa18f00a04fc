"""Tests for trade setup generation and outcome grading."""
import pytest

from niss.models import NISSResult
from niss.trade_setup import evaluate_trade_outcome, generate_reasoning, generate_trade_setup, select_action

NEUTRAL = {
    "priceAction": 50.0,
    "newsImpact": 50.0,
    "technicalMomentum": 50.0,
    "optionsFlow": 50.0,
    "relativeStrength": 50.0,
    "volumeAnalysis": 50.0,
}


def make_result(score, confidence, **overrides):
    components = dict(NEUTRAL)
    components.update(overrides)
    return NISSResult(score=score, components=components, confidence=confidence,
                      metadata={"symbol": "TEST"})


def prices(setup):
    return [t.price for t in setup.targets]


# ── action selection ────────────────────────────────────────────────


class TestSelectAction:
    @pytest.mark.parametrize(
        "score, confidence, expected",
        [
            (80, "HIGH", "STRONG BUY"),
            (80, "MEDIUM", "BUY"),
            (80, "LOW", "HOLD"),
            (61, "MEDIUM", "BUY"),
            (60, "HIGH", "HOLD"),
            (-80, "HIGH", "STRONG SELL"),
            (-80, "MEDIUM", "SELL"),
            (-61, "HIGH", "SELL"),
            (-60, "HIGH", "HOLD"),
            (0, "HIGH", "HOLD"),
            (0, "ERROR", "HOLD"),
        ],
    )
    def test_thresholds(self, score, confidence, expected):
        assert select_action(score, confidence) == expected


# ── setup generation ────────────────────────────────────────────────


class TestGenerateTradeSetup:
    def test_strong_buy(self):
        setup = generate_trade_setup(100.0, make_result(80, "HIGH"))
        assert setup.action == "STRONG BUY"
        assert setup.entry_price == 100.0
        assert setup.stop_loss == pytest.approx(95.0)
        assert prices(setup) == pytest.approx([104.0, 108.0, 112.0])
        assert [t.probability for t in setup.targets] == [0.8, 0.6, 0.4]
        assert [t.level for t in setup.targets] == [1, 2, 3]
        assert setup.risk_reward == 2.4
        assert setup.confidence == "HIGH"
        assert setup.is_long

    def test_buy_with_reasoning(self):
        result = make_result(64.2, "MEDIUM", newsImpact=85.0, optionsFlow=20.0)
        setup = generate_trade_setup(100.0, result)
        assert setup.action == "BUY"
        assert setup.stop_loss == pytest.approx(96.0)
        assert prices(setup) == pytest.approx([103.0, 106.0, 109.0])
        assert [t.probability for t in setup.targets] == [0.7, 0.5, 0.3]
        assert setup.risk_reward == 2.25
        assert setup.reasoning == "BUY signal based on: Strong newsImpact, Weak optionsFlow (NISS: 64.2)"

    def test_strong_sell(self):
        setup = generate_trade_setup(50.0, make_result(-80, "HIGH"))
        assert setup.action == "STRONG SELL"
        assert setup.stop_loss == pytest.approx(52.5)
        assert prices(setup) == pytest.approx([48.0, 46.0, 44.0])
        assert not setup.is_long

    def test_sell(self):
        setup = generate_trade_setup(200.0, make_result(-65, "MEDIUM"))
        assert setup.action == "SELL"
        assert setup.stop_loss == pytest.approx(208.0)
        assert prices(setup) == pytest.approx([194.0, 188.0, 182.0])
        assert setup.risk_reward == 2.25

    def test_low_confidence_holds(self):
        setup = generate_trade_setup(100.0, make_result(80, "LOW"))
        assert setup.action == "HOLD"
        assert setup.stop_loss is None
        assert setup.targets == ()
        assert setup.risk_reward == 1.0
        assert setup.entry_price == 100.0
        assert setup.reasoning == "HOLD signal based on: Mixed signals (NISS: 80.0)"

    def test_error_result_holds(self):
        error = NISSResult(score=0.0, components={}, confidence="ERROR", metadata={"error": "bad"})
        setup = generate_trade_setup(100.0, error)
        assert setup.action == "HOLD"
        assert setup.targets == ()
        assert setup.confidence == "ERROR"

    @pytest.mark.parametrize("price", [0, -10, None, float("nan")])
    def test_unusable_price_holds(self, price):
        setup = generate_trade_setup(price, make_result(90, "HIGH"))
        assert setup.action == "HOLD"
        assert setup.entry_price == 0.0
        assert setup.stop_loss is None

    def test_prices_rounded_to_cents(self):
        setup = generate_trade_setup(33.333, make_result(80, "HIGH"))
        assert setup.entry_price == 33.33
        assert setup.stop_loss == round(33.333 * 0.95, 2)
        for target in setup.targets:
            assert target.price == round(target.price, 2)

    def test_to_dict(self):
        payload = generate_trade_setup(100.0, make_result(80, "HIGH")).to_dict()
        assert payload["action"] == "STRONG BUY"
        assert payload["entryPrice"] == 100.0
        assert payload["stopLoss"] == pytest.approx(95.0)
        assert payload["riskReward"] == 2.4
        assert payload["targets"][0] == {"level": 1, "price": pytest.approx(104.0), "probability": 0.8}


def test_reasoning_lists_extremes_only():
    result = make_result(10.0, "LOW", priceAction=71.0, volumeAnalysis=29.0, newsImpact=70.0)
    assert generate_reasoning(result, "HOLD") == (
        "HOLD signal based on: Strong priceAction, Weak volumeAnalysis (NISS: 10.0)"
    )


# ── outcome grading ─────────────────────────────────────────────────


class TestEvaluateTradeOutcome:
    @pytest.fixture
    def long_setup(self):
        # entry 100, stop 96, targets 103 / 106 / 109
        return generate_trade_setup(100.0, make_result(65, "MEDIUM"))

    @pytest.fixture
    def short_setup(self):
        # entry 50, stop 52.5, targets 48 / 46 / 44
        return generate_trade_setup(50.0, make_result(-80, "HIGH"))

    def test_second_target_hit(self, long_setup):
        outcome = evaluate_trade_outcome(long_setup, 107.0)
        assert outcome.success
        assert outcome.reason == "Target 2 hit"
        assert outcome.target_reached == 2
        assert outcome.target_accuracy == pytest.approx(66.66)
        assert outcome.actual_return == pytest.approx(0.07)

    def test_partial_gain(self, long_setup):
        outcome = evaluate_trade_outcome(long_setup, 101.0)
        assert outcome.success
        assert outcome.reason == "Target partial hit"
        assert outcome.target_reached == 0
        assert outcome.target_accuracy == 0

    def test_stopped_out(self, long_setup):
        outcome = evaluate_trade_outcome(long_setup, 96.0, "STOP_LOSS")
        assert not outcome.success
        assert outcome.reason == "Stopped out"
        assert outcome.actual_return == pytest.approx(-0.04)

    def test_moved_against(self, long_setup):
        outcome = evaluate_trade_outcome(long_setup, 98.0, "TIME_EXIT")
        assert not outcome.success
        assert outcome.reason == "Trade moved against position"
        assert outcome.actual_return == pytest.approx(-0.02)

    def test_short_gain_reported_positive(self, short_setup):
        outcome = evaluate_trade_outcome(short_setup, 45.0)
        assert outcome.success
        assert outcome.reason == "Target 2 hit"
        assert outcome.actual_return == pytest.approx(0.1)

    def test_short_moved_against(self, short_setup):
        outcome = evaluate_trade_outcome(short_setup, 51.0)
        assert not outcome.success
        assert outcome.actual_return == pytest.approx(0.02)

    def test_hold_setup(self):
        hold = generate_trade_setup(100.0, make_result(0, "LOW"))
        outcome = evaluate_trade_outcome(hold, 110.0)
        assert not outcome.success
        assert outcome.reason == "No actionable setup"

    def test_missing_exit_price(self, long_setup):
        outcome = evaluate_trade_outcome(long_setup, None)
        assert outcome.reason == "Insufficient data"

    def test_to_dict_keys(self, long_setup):
        payload = evaluate_trade_outcome(long_setup, 110.0).to_dict()
        assert payload["target_reached"] == 3
        assert payload["target_accuracy"] == pytest.approx(99.99)
