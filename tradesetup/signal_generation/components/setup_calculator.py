"""
Setup Calculator component for the trade setup engine.

Derives the entry price, an ATR-scaled stop-loss and a three-tier
risk-multiple target ladder for a directional signal, plus the expected
holding timeframe and a market-timing classification.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..core import (
    EntryPoint,
    MarketTiming,
    NoTradeSetup,
    ProfitTarget,
    Setup,
    Signal,
    SignalAction,
    StopLoss,
    TimingStatus,
    TradeSetup,
)
from ..snapshot import StockSnapshot
from ...utils.logging import get_logger

logger = get_logger(__name__)

NO_SETUP_MESSAGE = "No clear setup available"
INVALID_PRICE_MESSAGE = "Invalid price data"


class SetupCalculator:
    """
    Builds the entry/stop/target ladder for a signal.

    HOLD signals and non-positive prices produce a ``NoTradeSetup``. The
    caller supplies "now" so timing classification stays deterministic.
    """

    def __init__(self, config: Dict):
        """
        Initialize the setup calculator.

        Args:
            config: Configuration dictionary with setup parameters
        """
        self.config = config

        self.default_atr_fraction = config.get("default_atr_fraction", 0.025)
        self.support_entry_buffer = config.get("support_entry_buffer", 1.01)
        self.resistance_entry_buffer = config.get("resistance_entry_buffer", 0.99)

        self.stop_multipliers = config.get("stop_multipliers", {"HIGH": 1.5, "MEDIUM": 2.0, "LOW": 2.5})
        self.default_stop_multiplier = config.get("default_stop_multiplier", 2.0)

        self.target_multipliers = config.get("target_multipliers", {
            "HIGH": [2.0, 3.5, 5.0],
            "MEDIUM": [2.5, 4.0, 6.0],
            "LOW": [3.0, 5.0, 7.0],
        })
        self.default_target_multipliers = config.get("default_target_multipliers", [2.5, 4.0, 6.0])
        self.target_probabilities = config.get("target_probabilities", [70.0, 50.0, 30.0])
        self.exit_strategies = config.get("exit_strategies", ["Exit 33%", "Exit 33%", "Trail stop"])

        self.news_timeframes = config.get("news_timeframes", {
            "earnings": "1-2 days",
            "fda": "1-3 days",
            "merger": "1-5 days",
            "analyst": "1-2 days",
            "partnership": "1 day",
            "clinical": "2-5 days",
            "executive": "2-7 days",
        })
        self.high_confidence_timeframe = config.get("high_confidence_timeframe", "1-3 days")
        self.default_timeframe = config.get("default_timeframe", "3-7 days")

        self.trading_windows = config.get("trading_windows", [
            {"start": 14.75, "end": 15.5, "label": "US Open Momentum", "quality": "EXCELLENT"},
            {"start": 15.5, "end": 17.0, "label": "Post-Open Stability", "quality": "GOOD"},
            {"start": 19.0, "end": 20.0, "label": "Late Day Positioning", "quality": "GOOD"},
        ])
        self.avoid_windows = config.get("avoid_windows", [
            {"start": 14.5, "end": 14.75, "label": "US Open First 15min", "quality": "AVOID"},
            {"start": 20.75, "end": 21.0, "label": "US Close Last 15min", "quality": "AVOID"},
        ])

    def calculate(self, snapshot: StockSnapshot, signal: Signal, now: datetime) -> Setup:
        """
        Calculate the complete trade setup.

        Args:
            snapshot: Normalized instrument snapshot
            signal: Classified signal
            now: Evaluation instant, used for market timing

        Returns:
            Setup: A TradeSetup, or a NoTradeSetup for HOLD / invalid prices
        """
        if signal.action == SignalAction.HOLD:
            return NoTradeSetup(message=NO_SETUP_MESSAGE)

        if snapshot.current_price <= 0:
            return NoTradeSetup(message=INVALID_PRICE_MESSAGE)

        atr = snapshot.technical.atr or snapshot.current_price * self.default_atr_fraction
        is_bullish = signal.action.is_bullish
        confidence = snapshot.confidence_key

        entry = self.calculate_entry(snapshot, is_bullish)
        stop_loss = self.calculate_stop_loss(entry, atr, confidence, is_bullish)
        targets = self.calculate_targets(entry, stop_loss, confidence, is_bullish)

        # Risk:reward is measured against the second target
        risk_per_share = abs(entry - stop_loss.price)
        if risk_per_share > 0 and len(targets) > 1:
            risk_reward_ratio = abs(targets[1].price - entry) / risk_per_share
        else:
            risk_reward_ratio = 0.0

        return TradeSetup(
            action=signal.action,
            entry=EntryPoint(price=entry),
            stop_loss=stop_loss,
            targets=targets,
            risk_reward_ratio=risk_reward_ratio,
            timeframe=self.get_timeframe(snapshot),
            market_timing=self.get_market_timing(now),
        )

    def calculate_entry(self, snapshot: StockSnapshot, is_bullish: bool) -> float:
        """Entry at the current price, pulled toward a known support/resistance level."""
        price = snapshot.current_price
        support = snapshot.technical.support
        resistance = snapshot.technical.resistance

        if is_bullish and support:
            return min(price, support * self.support_entry_buffer)
        if not is_bullish and resistance:
            return max(price, resistance * self.resistance_entry_buffer)
        return price

    def calculate_stop_loss(
        self, entry: float, atr: float, confidence: Optional[str], is_bullish: bool
    ) -> StopLoss:
        """Stop placed a confidence-scaled ATR multiple away from entry."""
        multiplier = self.stop_multipliers.get(confidence, self.default_stop_multiplier)
        offset = atr * multiplier
        stop_price = entry - offset if is_bullish else entry + offset
        stop_percentage = (stop_price / entry - 1) * 100

        return StopLoss(
            price=stop_price,
            percentage=round(stop_percentage, 2),
            atr_multiple=multiplier,
            reasoning=f"{multiplier}x ATR for {confidence or 'UNKNOWN'} confidence",
        )

    def calculate_targets(
        self, entry: float, stop_loss: StopLoss, confidence: Optional[str], is_bullish: bool
    ) -> List[ProfitTarget]:
        """
        Build the three-tier target ladder.

        Each target sits a risk multiple away from entry in the trade
        direction. A zero-risk stop yields a single target at entry.
        """
        risk_per_share = abs(entry - stop_loss.price)

        if risk_per_share <= 0:
            logger.debug("Zero risk per share, returning degenerate target", entry=entry)
            return [ProfitTarget(level=1, price=entry, percentage=0.0, probability=0.0)]

        multipliers = self.target_multipliers.get(confidence, self.default_target_multipliers)

        targets = []
        for index, multiplier in enumerate(multipliers):
            offset = risk_per_share * multiplier
            target_price = entry + offset if is_bullish else entry - offset
            targets.append(ProfitTarget(
                level=index + 1,
                price=target_price,
                percentage=(target_price / entry - 1) * 100,
                probability=self.target_probabilities[index],
                multiplier=multiplier,
                exit_strategy=self.exit_strategies[index],
            ))
        return targets

    def get_timeframe(self, snapshot: StockSnapshot) -> str:
        """Expected holding period from the catalyst category, else from confidence."""
        news = snapshot.latest_news
        if news is not None and news.category_key in self.news_timeframes:
            return self.news_timeframes[news.category_key]
        if snapshot.confidence_key == "HIGH":
            return self.high_confidence_timeframe
        return self.default_timeframe

    def get_market_timing(self, now: datetime) -> MarketTiming:
        """
        Classify the UTC time of day against the trading and avoid windows.

        Optimal windows are checked first; bounds are inclusive.
        """
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        utc_now = now.astimezone(timezone.utc)
        current_time = utc_now.hour + utc_now.minute / 60

        for window in self.trading_windows:
            if window["start"] <= current_time <= window["end"]:
                return MarketTiming(
                    status=TimingStatus.OPTIMAL,
                    window=window["label"],
                    quality=window["quality"],
                    recommendation="Execute immediately",
                )

        for window in self.avoid_windows:
            if window["start"] <= current_time <= window["end"]:
                return MarketTiming(
                    status=TimingStatus.AVOID,
                    window=window["label"],
                    quality=window["quality"],
                    recommendation="Wait for better timing",
                )

        return MarketTiming(
            status=TimingStatus.ACCEPTABLE,
            window="Outside peak hours",
            quality="FAIR",
            recommendation="Proceed with caution",
        )
