"""
Signal Classifier component for the trade setup engine.

Evaluates an ordered rule chain over the snapshot and market regime. The
first matching rule wins; the order (STRONG BUY, BUY, STRONG SELL, SELL) is
the tie-break.
"""

from typing import Dict

from ..core import Confidence, MarketRegime, Signal, SignalAction, Trend, Urgency, Volatility
from ..snapshot import StockSnapshot


class SignalClassifier:
    """
    Picks exactly one signal category for a snapshot.

    Absent numeric fields arrive as 0 and absent SMA flags arrive as None, so
    only an explicit ``False`` SMA flag blocks a strong signal.
    """

    def __init__(self, config: Dict):
        """
        Initialize the signal classifier.

        Args:
            config: Configuration dictionary with classification thresholds
        """
        self.config = config

        self.strong_score_threshold = config.get("strong_score_threshold", 75.0)
        self.score_threshold = config.get("score_threshold", 60.0)
        self.strong_volume_threshold = config.get("strong_volume_threshold", 2.0)
        self.volume_threshold = config.get("volume_threshold", 1.5)
        self.max_position_sizes = config.get("max_position_sizes", {
            SignalAction.STRONG_BUY.value: 2.5,
            SignalAction.BUY.value: 1.5,
            SignalAction.STRONG_SELL.value: 2.0,
            SignalAction.SELL.value: 1.0,
            SignalAction.HOLD.value: 0.0,
        })

    def classify(self, snapshot: StockSnapshot, regime: MarketRegime) -> Signal:
        """
        Classify a snapshot into a trade signal.

        Args:
            snapshot: Normalized instrument snapshot
            regime: Current market regime

        Returns:
            Signal: The single matching signal (HOLD when no rule matches)
        """
        if self._is_strong_buy(snapshot, regime):
            return self._build(
                SignalAction.STRONG_BUY, 1, Urgency.IMMEDIATE,
                "High NISS + High confidence + Volume surge + Favorable regime",
            )

        if self._is_buy(snapshot, regime):
            return self._build(
                SignalAction.BUY, 2, Urgency.MONITOR,
                "Good NISS + Decent confidence + Volume confirmation",
            )

        if self._is_strong_sell(snapshot, regime):
            return self._build(
                SignalAction.STRONG_SELL, 1, Urgency.IMMEDIATE,
                "Low NISS + High confidence + Volume + Bearish regime",
            )

        if self._is_sell(snapshot, regime):
            return self._build(
                SignalAction.SELL, 2, Urgency.MONITOR,
                "Negative NISS + Confirmation + Volume",
            )

        return Signal.hold()

    def _build(self, action: SignalAction, priority: int, urgency: Urgency, reasoning: str) -> Signal:
        return Signal(
            action=action,
            priority=priority,
            reasoning=reasoning,
            max_position_size=float(self.max_position_sizes.get(action.value, 0.0)),
            urgency=urgency,
        )

    def _is_strong_buy(self, snapshot: StockSnapshot, regime: MarketRegime) -> bool:
        return (
            snapshot.niss_score > self.strong_score_threshold
            and snapshot.confidence == Confidence.HIGH
            and snapshot.relative_volume > self.strong_volume_threshold
            and snapshot.price_change > 0
            and snapshot.technical.price_above_sma20 is not False
            and regime.trend != Trend.BEARISH
            and regime.volatility != Volatility.HIGH
        )

    def _is_buy(self, snapshot: StockSnapshot, regime: MarketRegime) -> bool:
        return (
            snapshot.niss_score >= self.score_threshold
            and snapshot.confidence != Confidence.LOW
            and snapshot.relative_volume > self.volume_threshold
            and snapshot.technical.momentum > 0
            and regime.trend != Trend.BEARISH
        )

    def _is_strong_sell(self, snapshot: StockSnapshot, regime: MarketRegime) -> bool:
        return (
            snapshot.niss_score < -self.strong_score_threshold
            and snapshot.confidence == Confidence.HIGH
            and snapshot.relative_volume > self.strong_volume_threshold
            and snapshot.price_change < 0
            and snapshot.technical.price_below_sma20 is not False
            and regime.trend != Trend.BULLISH
        )

    def _is_sell(self, snapshot: StockSnapshot, regime: MarketRegime) -> bool:
        return (
            snapshot.niss_score <= -self.score_threshold
            and snapshot.confidence != Confidence.LOW
            and snapshot.relative_volume > self.volume_threshold
            and snapshot.technical.momentum < 0
            and regime.trend != Trend.BULLISH
        )
