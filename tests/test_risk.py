"""Unit tests for niss/risk.py: half-Kelly sizing, dollar risk and risk grading."""
import pytest

from niss.models import MarketContext, NISSResult, RegimeAssessment
from niss.risk import assess_risk_level, assess_trade_risk, kelly_position_pct, max_dollar_risk
from niss.trade_setup import generate_trade_setup


def make_result(score, confidence):
    return NISSResult(score=score, components={}, confidence=confidence, metadata={"symbol": "TEST"})


def setup_for(score, confidence, price=100.0):
    result = make_result(score, confidence)
    return result, generate_trade_setup(price, result)


# ── kelly_position_pct ──────────────────────────────────────────────


class TestKellyPosition:
    def test_strong_edge_hits_ceiling(self):
        assert kelly_position_pct("HIGH", 80) == 5.0

    def test_negative_edge_hits_floor(self):
        assert kelly_position_pct("LOW", 10) == 0.5

    def test_interior_value(self):
        # odds 0.048 / 0.035; (0.45 - 0.55 / odds) * 50
        assert kelly_position_pct("LOW", 60) == pytest.approx(2.447917, abs=1e-6)

    def test_unknown_confidence_uses_even_odds(self):
        # odds 0.04 / 0.035; (0.5 - 0.5 / odds) * 50
        assert kelly_position_pct("ERROR", 50) == pytest.approx(3.125)

    def test_sign_of_score_ignored(self):
        assert kelly_position_pct("LOW", -60) == kelly_position_pct("LOW", 60)

    @pytest.mark.parametrize("score", [0, None])
    def test_no_edge(self, score):
        assert kelly_position_pct("HIGH", score) == 0.5

    def test_monotonic_in_score(self):
        sizes = [kelly_position_pct("MEDIUM", s) for s in range(0, 101, 5)]
        assert sizes == sorted(sizes)


# ── max_dollar_risk ─────────────────────────────────────────────────


class TestMaxDollarRisk:
    def test_stop_distance(self):
        _, setup = setup_for(80, "HIGH")
        # 2.5% of $100k, 5% stop
        assert max_dollar_risk(2.5, setup) == pytest.approx(125.0)

    def test_custom_account(self):
        _, setup = setup_for(80, "HIGH")
        assert max_dollar_risk(2.5, setup, account_size=50_000) == pytest.approx(62.5)

    def test_no_stop(self):
        _, setup = setup_for(0, "LOW")
        assert max_dollar_risk(1.0, setup) == 0.0


# ── assess_risk_level ───────────────────────────────────────────────


class TestRiskLevel:
    def test_clean_strong_setup_is_low(self):
        result, setup = setup_for(80, "HIGH")
        assert assess_risk_level(result, setup) == "LOW"

    def test_volatility_raises_grade(self):
        result, setup = setup_for(64.2, "MEDIUM")
        assert assess_risk_level(result, setup) == "LOW"
        assert assess_risk_level(result, setup, RegimeAssessment("NEUTRAL", "HIGH", "MIXED")) == "MEDIUM"

    def test_weak_hold_is_high(self):
        result, setup = setup_for(10, "LOW")
        assert assess_risk_level(result, setup, RegimeAssessment("BEARISH", "NORMAL", "DECLINING")) == "HIGH"

    def test_error_result_is_high(self):
        error = NISSResult(score=0.0, components={}, confidence="ERROR")
        assert assess_risk_level(error, generate_trade_setup(100.0, error)) == "HIGH"


# ── assess_trade_risk ───────────────────────────────────────────────


class TestAssessTradeRisk:
    def test_strong_buy_normal_market(self):
        result, setup = setup_for(80, "HIGH")
        risk = assess_trade_risk(result, setup)
        assert risk.kelly_pct == 5.0
        assert risk.regime_multiplier == 1.0
        assert risk.position_pct == 2.5
        assert risk.max_dollar_risk == pytest.approx(125.0)
        assert risk.risk_level == "LOW"
        assert risk.reasoning == "Kelly: 5.0% x Regime: 1.00"

    def test_low_vol_bull_scales_up(self):
        result, setup = setup_for(80, "HIGH")
        market = MarketContext(volatility="LOW", vix_level=12, trend="BULLISH")
        risk = assess_trade_risk(result, setup, market)
        assert risk.regime_multiplier == 1.2
        assert risk.position_pct == pytest.approx(3.0)
        assert risk.max_dollar_risk == pytest.approx(150.0)

    def test_buy_capped_and_halved_in_high_vol(self):
        result, setup = setup_for(64.2, "MEDIUM")
        risk = assess_trade_risk(result, setup, RegimeAssessment("NEUTRAL", "HIGH", "MIXED"))
        assert risk.position_pct == pytest.approx(0.75)
        assert risk.max_dollar_risk == pytest.approx(30.0)
        assert risk.risk_level == "MEDIUM"

    def test_floor_after_regime_scaling(self):
        result, setup = setup_for(10, "LOW")
        risk = assess_trade_risk(result, setup, RegimeAssessment("BEARISH", "NORMAL", "DECLINING"))
        assert risk.regime_multiplier == 0.6
        assert risk.position_pct == 0.5
        assert risk.max_dollar_risk == 0.0
        assert risk.risk_level == "HIGH"

    def test_to_dict(self):
        result, setup = setup_for(80, "HIGH")
        payload = assess_trade_risk(result, setup).to_dict()
        assert payload["positionSize"]["percentage"] == 2.5
        assert payload["positionSize"]["maxDollarRisk"] == pytest.approx(125.0)
        assert payload["riskLevel"] == "LOW"
        assert payload["regimeMultiplier"] == 1.0
