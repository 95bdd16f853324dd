"""
Unit tests for rule-sheet compliance grading.
"""

import pytest

from tradesetup.signal_generation.components import ComplianceValidator
from tradesetup.signal_generation.core import (
    Breadth,
    MarketRegime,
    Signal,
    SignalAction,
    Trend,
    Urgency,
    Volatility,
)
from tradesetup.signal_generation.snapshot import StockSnapshot

BEARISH = MarketRegime(Trend.BEARISH, Volatility.NORMAL, Breadth.DECLINING)


def signal_for(action: SignalAction) -> Signal:
    if action == SignalAction.HOLD:
        return Signal.hold()
    return Signal(action, 1 if action.is_strong else 2, "test", 1.0, Urgency.MONITOR)


class TestComplianceValidator:
    """Test the five rule-sheet checks."""

    def test_fully_compliant_buy(self, compliance_validator):
        snapshot = StockSnapshot(symbol="AAPL", niss_score=80, confidence="HIGH", relative_volume=2.5)

        score = compliance_validator.validate(snapshot, signal_for(SignalAction.STRONG_BUY), MarketRegime())

        assert score.overall_score == 5
        assert score.grade == "A"
        assert score.is_compliant

    def test_fully_compliant_sell_in_bearish_market(self, compliance_validator):
        snapshot = StockSnapshot(symbol="TSLA", niss_score=-80, confidence="HIGH", relative_volume=3.0)

        score = compliance_validator.validate(snapshot, signal_for(SignalAction.STRONG_SELL), BEARISH)

        assert score.niss_threshold
        assert score.market_regime
        assert score.grade == "A"

    def test_buy_in_bearish_market_fails_regime_check(self, compliance_validator):
        snapshot = StockSnapshot(symbol="AAPL", niss_score=80, confidence="HIGH", relative_volume=2.5)

        score = compliance_validator.validate(snapshot, signal_for(SignalAction.BUY), BEARISH)

        assert not score.market_regime
        assert score.overall_score == 4
        assert score.grade == "B"
        assert score.is_compliant

    def test_hold_never_passes_score_check(self, compliance_validator):
        snapshot = StockSnapshot(symbol="MSFT", niss_score=10, confidence="MEDIUM", relative_volume=1.0)

        score = compliance_validator.validate(snapshot, Signal.hold(), MarketRegime())

        assert not score.niss_threshold
        assert score.confidence_level
        assert not score.volume_confirmation
        assert score.market_regime
        assert score.risk_reward
        assert score.overall_score == 3
        assert score.grade == "C"
        assert not score.is_compliant

    @pytest.mark.unit
    @pytest.mark.parametrize("action,niss_score,expected", [
        (SignalAction.BUY, 60, True),
        (SignalAction.BUY, 59.9, False),
        (SignalAction.BUY, -80, False),
        (SignalAction.SELL, -60, True),
        (SignalAction.SELL, 80, False),
        (SignalAction.HOLD, 90, False),
    ])
    def test_score_check_is_direction_aware(self, compliance_validator, action, niss_score, expected):
        snapshot = StockSnapshot(symbol="AAPL", niss_score=niss_score, confidence="HIGH")

        score = compliance_validator.validate(snapshot, signal_for(action), MarketRegime())

        assert score.niss_threshold is expected

    def test_low_confidence_and_thin_volume(self, compliance_validator):
        snapshot = StockSnapshot(symbol="AAPL", niss_score=70, confidence="LOW", relative_volume=1.5)

        score = compliance_validator.validate(snapshot, signal_for(SignalAction.BUY), MarketRegime())

        assert not score.confidence_level
        # Volume must strictly exceed the threshold
        assert not score.volume_confirmation

    def test_unknown_confidence_passes(self, compliance_validator):
        snapshot = StockSnapshot(symbol="AAPL")

        score = compliance_validator.validate(snapshot, Signal.hold(), MarketRegime())

        assert score.confidence_level

    def test_configured_thresholds(self):
        validator = ComplianceValidator({
            "score_threshold": 50.0,
            "compliant_score": 5,
            "grade_thresholds": {"A": 5, "B": 3, "C": 2},
        })
        snapshot = StockSnapshot(symbol="AAPL", niss_score=55, confidence="MEDIUM", relative_volume=1.0)

        score = validator.validate(snapshot, signal_for(SignalAction.BUY), MarketRegime())

        assert score.niss_threshold
        assert score.overall_score == 4
        assert score.grade == "B"
        assert not score.is_compliant
