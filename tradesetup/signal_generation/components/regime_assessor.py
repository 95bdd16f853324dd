"""
Regime Assessor component for the trade setup engine.

Classifies index-level market data into a three-axis regime descriptor
(trend, volatility, breadth) that gates signals and scales position size.
"""

from typing import Dict, Optional

from ..core import Breadth, MarketRegime, Trend, Volatility
from ..snapshot import MarketData


class RegimeAssessor:
    """
    Derives a MarketRegime from SPY change, VIX and the advance/decline ratio.

    Missing market data yields the neutral regime (NEUTRAL, NORMAL, MIXED).
    """

    def __init__(self, config: Dict):
        """
        Initialize the regime assessor.

        Args:
            config: Configuration dictionary with regime thresholds
        """
        self.config = config

        self.bullish_spy_change = config.get("bullish_spy_change", 0.5)
        self.bearish_spy_change = config.get("bearish_spy_change", -0.5)
        self.high_vix = config.get("high_vix", 25.0)
        self.low_vix = config.get("low_vix", 15.0)
        self.advancing_ratio = config.get("advancing_ratio", 1.5)
        self.declining_ratio = config.get("declining_ratio", 0.67)

    def assess(self, market_data: Optional[MarketData]) -> MarketRegime:
        """
        Assess the current market regime.

        Args:
            market_data: Index-level market data, or None when unavailable

        Returns:
            MarketRegime: Detected regime
        """
        if market_data is None:
            return MarketRegime()

        return MarketRegime(
            trend=self._classify_trend(market_data.spy_change),
            volatility=self._classify_volatility(market_data.vix),
            breadth=self._classify_breadth(market_data.advance_decline),
        )

    def _classify_trend(self, spy_change: float) -> Trend:
        if spy_change > self.bullish_spy_change:
            return Trend.BULLISH
        if spy_change < self.bearish_spy_change:
            return Trend.BEARISH
        return Trend.NEUTRAL

    def _classify_volatility(self, vix: float) -> Volatility:
        if vix > self.high_vix:
            return Volatility.HIGH
        if vix < self.low_vix:
            return Volatility.LOW
        return Volatility.NORMAL

    def _classify_breadth(self, advance_decline: float) -> Breadth:
        if advance_decline > self.advancing_ratio:
            return Breadth.ADVANCING
        if advance_decline < self.declining_ratio:
            return Breadth.DECLINING
        return Breadth.MIXED

    @staticmethod
    def recommendation(regime: MarketRegime) -> str:
        """Plain-language sizing guidance for a regime."""
        if regime.volatility == Volatility.HIGH:
            return "Reduce position sizes by 50% due to high volatility"
        if regime.trend == Trend.BEARISH and regime.breadth == Breadth.DECLINING:
            return "Favor short positions and reduce long exposure"
        if regime.volatility == Volatility.LOW and regime.trend == Trend.BULLISH:
            return "Increase position sizes in favorable low-vol bull market"
        if regime.trend == Trend.NEUTRAL and regime.volatility == Volatility.NORMAL:
            return "Use standard position sizing and balanced approach"
        return "Monitor market conditions closely for regime changes"
