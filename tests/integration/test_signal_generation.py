"""
Integration tests for the complete trade setup pipeline.

Runs snapshots end to end through TradeSignalGenerator and checks the
documented scenarios plus the properties every result must satisfy.
"""

import copy
import itertools
import json
from datetime import datetime, timedelta, timezone

import pytest

from tradesetup.signal_generation import evaluate, evaluate_all
from tradesetup.signal_generation.core import SignalAction, TradeSetup
from tradesetup.signal_generation.signal_generator import TradeSignalGenerator
from tradesetup.utils.clock import Clock, FixedClock

VALID_ACTIONS = {"STRONG BUY", "BUY", "HOLD", "STRONG SELL", "SELL"}


class BrokenClock(Clock):
    def now(self):
        raise RuntimeError("clock unavailable")


def _property_payloads():
    """A grid of snapshots covering every rule branch and regime."""
    payloads = []
    grid = itertools.product(
        [-90, -65, -10, 0, 10, 65, 90],
        ["HIGH", "MEDIUM", "LOW", None],
        [0.5, 1.8, 3.0],
        [None, {"spyChange": 0.8, "vix": 12, "advanceDecline": 2.0},
         {"spyChange": -0.9, "vix": 30, "advanceDecline": 0.5}],
        [0.0, 42.5],
    )
    for index, (niss, confidence, volume, market, price) in enumerate(grid):
        direction = 1 if niss >= 0 else -1
        payloads.append({
            "symbol": f"SYM{index}",
            "currentPrice": price,
            "nissScore": niss,
            "confidence": confidence,
            "priceData": {"change": direction * 1.0},
            "volumeData": {"relativeVolume": volume},
            "technicalData": {"momentum": direction * 0.5, "atr": 1.1 if index % 2 else None},
            "marketData": market,
        })
    return payloads


PROPERTY_PAYLOADS = _property_payloads()


@pytest.mark.integration
class TestScenarios:
    """The documented reference scenarios."""

    def test_scenario_a_strong_buy(self, generator):
        result = generator.evaluate({
            "symbol": "A",
            "nissScore": 80,
            "confidence": "HIGH",
            "priceData": {"change": 1.2},
            "volumeData": {"relativeVolume": 2.5},
            "technicalData": {"priceAboveSMA20": True},
            "marketData": {"spyChange": 0.6, "vix": 14},
        })

        assert result.action == SignalAction.STRONG_BUY
        assert result.signal.priority == 1

    def test_scenario_b_hold(self, generator):
        result = generator.evaluate({
            "symbol": "B",
            "nissScore": 10,
            "confidence": "MEDIUM",
            "volumeData": {"relativeVolume": 1.0},
        })

        assert result.action == SignalAction.HOLD
        assert result.to_dict()["setup"] == {"action": "HOLD", "message": "No clear setup available"}

    def test_scenario_c_strong_sell(self, generator):
        result = generator.evaluate({
            "symbol": "C",
            "nissScore": -80,
            "confidence": "HIGH",
            "priceData": {"change": -1.0},
            "volumeData": {"relativeVolume": 3},
            "technicalData": {"priceBelowSMA20": True},
            "marketData": {"spyChange": -0.8},
        })

        assert result.action == SignalAction.STRONG_SELL

    def test_scenario_a_without_symbol(self, generator):
        data = generator.evaluate({
            "nissScore": 80,
            "confidence": "HIGH",
            "priceData": {"change": 1.2},
            "volumeData": {"relativeVolume": 2.5},
            "technicalData": {"priceAboveSMA20": True},
            "marketData": {"spyChange": 0.6, "vix": 14},
        }).to_dict()

        assert data["symbol"] == "UNKNOWN"
        assert data["action"] == "STRONG BUY"
        assert data["priority"] == 1
        assert "error" not in data

    def test_scenario_c_without_symbol(self, generator):
        data = generator.evaluate({
            "nissScore": -80,
            "confidence": "HIGH",
            "priceData": {"change": -1.0},
            "volumeData": {"relativeVolume": 3},
            "technicalData": {"priceBelowSMA20": True},
            "marketData": {"spyChange": -0.8},
        }).to_dict()

        assert data["symbol"] == "UNKNOWN"
        assert data["action"] == "STRONG SELL"
        assert "error" not in data

    def test_scenario_d_invalid_price(self, generator, strong_buy_payload):
        strong_buy_payload["currentPrice"] = 0

        data = generator.evaluate(strong_buy_payload).to_dict()

        assert data["action"] == "STRONG BUY"
        assert data["setup"] == {"action": "HOLD", "message": "Invalid price data"}


@pytest.mark.integration
class TestEndToEnd:
    """Full result records."""

    def test_strong_buy_result(self, generator, strong_buy_payload):
        data = generator.evaluate(strong_buy_payload).to_dict()

        assert data["symbol"] == "AAPL"
        assert data["action"] == "STRONG BUY"
        assert data["urgency"] == "IMMEDIATE"
        assert data["maxPositionSize"] == 2.5
        assert data["timestamp"] == "2024-01-02T15:00:00+00:00"
        assert data["setup"]["entry"]["price"] == 100.0
        assert data["setup"]["stopLoss"]["percentage"] == -3.75
        assert data["setup"]["riskReward"] == "1:3.5"
        assert data["setup"]["timeframe"] == "1-3 days"
        assert data["setup"]["marketTiming"]["window"] == "US Open Momentum"
        assert data["riskManagement"]["positionSize"]["percentage"] == 3.0
        assert data["riskManagement"]["riskLevel"] == "LOW"
        assert data["riskManagement"]["stopLossLevel"] == "NORMAL"
        assert data["compliance"]["grade"] == "A"
        assert data["compliance"]["isCompliant"] is True
        assert data["marketRegime"] == {"trend": "BULLISH", "volatility": "LOW", "breadth": "MIXED"}
        assert "error" not in data

    def test_strong_sell_result(self, generator, strong_sell_payload):
        data = generator.evaluate(strong_sell_payload).to_dict()

        assert data["setup"]["stopLoss"]["price"] == pytest.approx(51.875)
        assert data["setup"]["targets"][2]["price"] == pytest.approx(40.625)
        assert data["riskManagement"]["positionSize"]["percentage"] == 2.5
        assert data["compliance"]["marketRegime"] is True

    def test_catalyst_decay_uses_clock(self, config, strong_buy_payload):
        clock = FixedClock(datetime(2024, 1, 4, 15, 0, tzinfo=timezone.utc))
        strong_buy_payload["latestNews"] = {"category": "earnings", "timestamp": "2024-01-02T09:00:00Z"}

        data = TradeSignalGenerator(config, clock=clock).evaluate(strong_buy_payload).to_dict()

        assert data["setup"]["timeframe"] == "1-2 days"
        assert data["riskManagement"]["timeDecay"]["level"] == "HIGH"

    def test_result_is_json_serializable(self, generator, sample_payloads):
        for result in generator.evaluate_all(sample_payloads):
            json.dumps(result.to_dict())

    def test_module_level_helpers(self, fixed_clock, strong_buy_payload, hold_payload):
        single = evaluate(strong_buy_payload, clock=fixed_clock)
        batch = evaluate_all([strong_buy_payload, hold_payload], clock=fixed_clock)

        assert single.to_dict() == batch[0].to_dict()
        assert batch[1].action == SignalAction.HOLD

    def test_negative_levels_fall_back_to_price_based_setup(self, generator, buy_payload):
        baseline = copy.deepcopy(buy_payload)
        del baseline["technicalData"]["atr"]
        buy_payload["technicalData"].update({"atr": -4, "support": -1})

        setup = generator.evaluate(buy_payload).trade_setup

        assert setup.action == SignalAction.BUY
        assert setup.stop_loss.price < setup.entry.price == 200.0
        assert setup.to_dict() == generator.evaluate(baseline).trade_setup.to_dict()


@pytest.mark.integration
class TestFallback:
    """Evaluation never raises."""

    @pytest.mark.parametrize("payload", [
        ["AAPL"],
        None,
        "AAPL",
    ])
    def test_unreadable_snapshot_degrades_to_hold(self, generator, payload):
        result = generator.evaluate(payload)
        data = result.to_dict()

        assert data["action"] == "HOLD"
        assert data["priority"] == 3
        assert data["urgency"] == "WAIT"
        assert data["error"].startswith("Unable to generate signal: ")
        assert data["reasoning"].startswith("Error generating signal: ")
        assert data["setup"] is None
        assert data["riskManagement"] is None
        assert data["compliance"] is None
        assert data["timestamp"] == "2024-01-02T15:00:00+00:00"

    @pytest.mark.parametrize("payload", [{"nissScore": 80}, {"symbol": ""}, {"symbol": 42}])
    def test_missing_symbol_still_classifies(self, generator, payload):
        data = generator.evaluate(payload).to_dict()

        assert data["symbol"] == "UNKNOWN"
        assert "error" not in data
        assert data["compliance"] is not None

    def test_failing_clock_degrades_to_hold(self, config, strong_buy_payload):
        generator = TradeSignalGenerator(config, clock=BrokenClock())
        before = datetime.now(timezone.utc)

        result = generator.evaluate(strong_buy_payload)

        assert result.symbol == "AAPL"
        assert result.action == SignalAction.HOLD
        assert result.error == "Unable to generate signal: clock unavailable"
        assert result.timestamp.tzinfo is not None
        assert before <= result.timestamp <= datetime.now(timezone.utc)

    def test_failing_clock_in_batch(self, config, sample_payloads):
        results = TradeSignalGenerator(config, clock=BrokenClock()).evaluate_all(sample_payloads, max_workers=2)

        assert [r.symbol for r in results] == ["AAPL", "NVDA", "MSFT", "INTC", "TSLA"]
        assert all(r.error is not None for r in results)

    def test_symbol_kept_when_available(self, config, fixed_clock, strong_buy_payload):
        # A negative cap is rejected by Signal, so classification fails mid-pipeline
        generator = TradeSignalGenerator(config, clock=fixed_clock)
        generator.signal_classifier.max_position_sizes = {"STRONG BUY": -1.0}

        result = generator.evaluate(strong_buy_payload)

        assert result.symbol == "AAPL"
        assert result.error is not None
        assert result.action == SignalAction.HOLD


@pytest.mark.integration
class TestDeterminism:
    def test_same_input_same_output(self, generator, sample_payloads):
        first = [result.to_dict() for result in generator.evaluate_all(sample_payloads)]
        second = [result.to_dict() for result in generator.evaluate_all(copy.deepcopy(sample_payloads))]

        assert first == second

    def test_threaded_batch_matches_sequential(self, generator):
        sequential = generator.evaluate_all(PROPERTY_PAYLOADS, max_workers=0)
        threaded = generator.evaluate_all(PROPERTY_PAYLOADS, max_workers=4)

        assert [r.to_dict() for r in threaded] == [r.to_dict() for r in sequential]
        assert [r.symbol for r in threaded] == [p["symbol"] for p in PROPERTY_PAYLOADS]

    @pytest.mark.parametrize("workers", [-1, -8])
    def test_negative_workers_evaluate_inline(self, generator, sample_payloads, workers):
        results = generator.evaluate_all(sample_payloads, max_workers=workers)

        assert [r.symbol for r in results] == ["AAPL", "NVDA", "MSFT", "INTC", "TSLA"]
        assert all(r.error is None for r in results)

    def test_negative_configured_workers_evaluate_inline(self, config, fixed_clock, sample_payloads):
        generator = TradeSignalGenerator({**config, "batch_workers": -1}, clock=fixed_clock)

        assert len(generator.evaluate_all(sample_payloads)) == 5

    def test_empty_batch(self, generator):
        assert generator.evaluate_all([]) == []

    def test_timestamp_follows_clock(self, config, strong_buy_payload):
        instant = datetime(2024, 1, 2, 15, 0, tzinfo=timezone.utc) + timedelta(minutes=5)
        generator = TradeSignalGenerator(config, clock=FixedClock(instant))

        assert generator.evaluate(strong_buy_payload).timestamp == instant


@pytest.mark.integration
@pytest.mark.parametrize("payload", PROPERTY_PAYLOADS, ids=lambda p: p["symbol"])
class TestResultProperties:
    """Properties every result satisfies."""

    def test_action_is_valid(self, generator, payload):
        assert generator.evaluate(payload).action.value in VALID_ACTIONS

    def test_hold_or_invalid_price_has_no_ladder(self, generator, payload):
        result = generator.evaluate(payload)

        if result.action == SignalAction.HOLD or payload["currentPrice"] <= 0:
            assert not isinstance(result.setup, TradeSetup)
            assert result.setup.to_dict()["action"] == "HOLD"

    def test_targets_ordered_in_trade_direction(self, generator, payload):
        setup = generator.evaluate(payload).trade_setup
        if setup is None:
            return

        prices = [target.price for target in setup.targets]
        entry = setup.entry.price
        assert setup.risk_reward_ratio >= 0
        if setup.action.is_bullish:
            assert setup.stop_loss.price < entry < prices[0]
            assert prices == sorted(prices)
        else:
            assert setup.stop_loss.price > entry > prices[0]
            assert prices == sorted(prices, reverse=True)

    def test_position_size_bounds(self, generator, payload):
        risk = generator.evaluate(payload).risk_management

        assert 0.5 <= risk.position_size.percentage <= 6.0

    def test_grade_matches_score(self, generator, payload):
        compliance = generator.evaluate(payload).compliance
        score = compliance.overall_score

        expected = "A" if score >= 5 else "B" if score >= 4 else "C" if score >= 3 else "D"
        assert compliance.grade == expected
        assert compliance.is_compliant == (score >= 4)
        assert compliance.risk_reward is True
