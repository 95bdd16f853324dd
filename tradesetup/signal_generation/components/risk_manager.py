"""
Risk Manager component for the trade setup engine.

Sizes the position with a half-Kelly estimate scaled by the market regime,
scores the overall risk of the setup, classifies stop tightness and
estimates how quickly the underlying catalyst is going stale.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..core import (
    Breadth,
    Confidence,
    DollarRisk,
    MarketRegime,
    PortfolioCorrelation,
    PositionSize,
    RiskAssessment,
    RiskLevel,
    Setup,
    Signal,
    StopLossLevel,
    TimeDecay,
    TradeSetup,
    Trend,
    Volatility,
)
from ..snapshot import LatestNews, StockSnapshot
from ...utils.logging import get_logger

logger = get_logger(__name__)


def parse_news_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a catalyst timestamp into an aware UTC datetime.

    Accepts datetimes, ISO-8601 strings (a trailing ``Z`` is allowed) and
    epoch milliseconds. Returns None when the value cannot be read.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, bool):
        return None
    elif isinstance(value, (int, float)):
        try:
            parsed = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class RiskManager:
    """
    Produces the risk-management record for a signal and its setup.

    All inputs are explicit; "now" is passed in for catalyst aging.
    """

    def __init__(self, config: Dict):
        """
        Initialize the risk manager.

        Args:
            config: Configuration dictionary with sizing and risk parameters
        """
        self.config = config

        # Kelly inputs
        self.win_probabilities = config.get("win_probabilities", {"HIGH": 0.65, "MEDIUM": 0.55, "LOW": 0.45})
        self.default_win_probability = config.get("default_win_probability", 0.5)
        self.win_scale = config.get("win_scale", 0.08)
        self.max_avg_win = config.get("max_avg_win", 0.12)
        self.avg_loss = config.get("avg_loss", 0.035)
        self.kelly_fraction = config.get("kelly_fraction", 0.5)
        self.min_position_pct = config.get("min_position_pct", 0.5)
        self.max_kelly_pct = config.get("max_kelly_pct", 5.0)
        self.strong_size_cap = config.get("strong_size_cap", 2.5)
        self.size_cap = config.get("size_cap", 1.5)

        # Regime multipliers
        self.high_volatility_multiplier = config.get("high_volatility_multiplier", 0.5)
        self.bearish_declining_multiplier = config.get("bearish_declining_multiplier", 0.6)
        self.low_volatility_bullish_multiplier = config.get("low_volatility_bullish_multiplier", 1.2)

        self.account_size = config.get("account_size", 100000.0)

        # Risk-level scoring
        self.risk_weights = config.get("risk_weights", {
            "LOW_CONFIDENCE": 3,
            "MEDIUM_CONFIDENCE": 1,
            "WEAK_SCORE": 2,
            "HIGH_VOLATILITY": 2,
            "BEARISH_TREND": 1,
            "POOR_RISK_REWARD": 3,
            "FAIR_RISK_REWARD": 1,
        })
        self.weak_score_threshold = config.get("weak_score_threshold", 60.0)
        self.poor_risk_reward = config.get("poor_risk_reward", 2.0)
        self.fair_risk_reward = config.get("fair_risk_reward", 2.5)
        self.high_risk_score = config.get("high_risk_score", 6)
        self.medium_risk_score = config.get("medium_risk_score", 3)

        self.tight_stop_pct = config.get("tight_stop_pct", 2.0)
        self.normal_stop_pct = config.get("normal_stop_pct", 4.0)

        self.high_decay_categories = config.get("high_decay_categories", ["earnings", "fda"])
        self.high_decay_hours = config.get("high_decay_hours", 24.0)
        self.medium_decay_categories = config.get("medium_decay_categories", ["analyst", "partnership"])
        self.medium_decay_hours = config.get("medium_decay_hours", 48.0)

    def assess(
        self,
        snapshot: StockSnapshot,
        signal: Signal,
        setup: Setup,
        regime: MarketRegime,
        now: datetime,
    ) -> RiskAssessment:
        """
        Build the risk assessment for a signal.

        Args:
            snapshot: Normalized instrument snapshot
            signal: Classified signal
            setup: Setup produced for the signal (may be a NoTradeSetup)
            regime: Current market regime
            now: Evaluation instant, used to age the catalyst

        Returns:
            RiskAssessment: Sizing, risk level, stop level and catalyst decay
        """
        kelly = self.calculate_kelly_position(snapshot)
        regime_multiplier = self.regime_multiplier(regime)

        cap = self.strong_size_cap if signal.action.is_strong else self.size_cap
        size = max(self.min_position_pct, min(kelly, cap) * regime_multiplier)
        size = round(size, 1)

        stop_percent = self._stop_percent(setup)

        return RiskAssessment(
            position_size=PositionSize(
                percentage=size,
                max_dollar_risk=self.calculate_max_dollar_risk(size, stop_percent),
                reasoning=f"Kelly: {kelly:.1f}% × Regime: {regime_multiplier:.2f}",
            ),
            risk_level=self.assess_risk_level(snapshot, setup, regime),
            stop_loss_level=self.stop_loss_level(stop_percent),
            portfolio_correlation=PortfolioCorrelation(),
            time_decay=self.time_decay(snapshot.latest_news, now),
        )

    def calculate_kelly_position(self, snapshot: StockSnapshot) -> float:
        """
        Half-Kelly position size in percent, clamped to [min, max].

        Kelly fraction f = (b*p - q) / b with b = avg_win / avg_loss.
        """
        win_probability = self.win_probabilities.get(snapshot.confidence_key, self.default_win_probability)
        avg_win = min(abs(snapshot.niss_score) / 100 * self.win_scale, self.max_avg_win)

        if self.avg_loss == 0:
            logger.debug("Average loss is zero, using unit Kelly", symbol=snapshot.symbol)
            return 1.0

        odds = avg_win / self.avg_loss
        if odds <= 0:
            # No expected edge; the clamp floor applies
            return self.min_position_pct

        kelly_percent = (win_probability * odds - (1 - win_probability)) / odds
        return max(self.min_position_pct, min(kelly_percent * self.kelly_fraction * 100, self.max_kelly_pct))

    def regime_multiplier(self, regime: MarketRegime) -> float:
        """Scale factor applied to position size for the current regime."""
        if regime.volatility == Volatility.HIGH:
            return self.high_volatility_multiplier
        if regime.trend == Trend.BEARISH and regime.breadth == Breadth.DECLINING:
            return self.bearish_declining_multiplier
        if regime.volatility == Volatility.LOW and regime.trend == Trend.BULLISH:
            return self.low_volatility_bullish_multiplier
        return 1.0

    def calculate_max_dollar_risk(self, size_percent: float, stop_percent: float) -> DollarRisk:
        position_value = self.account_size * (size_percent / 100)
        return DollarRisk.from_amount(position_value * (abs(stop_percent) / 100))

    def assess_risk_level(self, snapshot: StockSnapshot, setup: Setup, regime: MarketRegime) -> RiskLevel:
        """Additive penalty score mapped onto LOW / MEDIUM / HIGH."""
        weights = self.risk_weights
        score = 0

        if snapshot.confidence == Confidence.LOW:
            score += weights.get("LOW_CONFIDENCE", 3)
        elif snapshot.confidence == Confidence.MEDIUM:
            score += weights.get("MEDIUM_CONFIDENCE", 1)

        if abs(snapshot.niss_score) < self.weak_score_threshold:
            score += weights.get("WEAK_SCORE", 2)

        if regime.volatility == Volatility.HIGH:
            score += weights.get("HIGH_VOLATILITY", 2)
        if regime.trend == Trend.BEARISH:
            score += weights.get("BEARISH_TREND", 1)

        # Compare against the ratio as displayed ("1:X" with one decimal)
        ratio = round(setup.risk_reward_ratio, 1) if isinstance(setup, TradeSetup) else 0.0
        if ratio < self.poor_risk_reward:
            score += weights.get("POOR_RISK_REWARD", 3)
        elif ratio < self.fair_risk_reward:
            score += weights.get("FAIR_RISK_REWARD", 1)

        if score >= self.high_risk_score:
            return RiskLevel.HIGH
        if score >= self.medium_risk_score:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    def stop_loss_level(self, stop_percent: float) -> StopLossLevel:
        distance = abs(stop_percent)
        if distance < self.tight_stop_pct:
            return StopLossLevel.TIGHT
        if distance < self.normal_stop_pct:
            return StopLossLevel.NORMAL
        return StopLossLevel.WIDE

    def time_decay(self, news: Optional[LatestNews], now: datetime) -> TimeDecay:
        """Classify how stale the catalyst has become."""
        if news is None:
            return TimeDecay(level=RiskLevel.LOW, reasoning="No time-sensitive catalysts")

        published_at = parse_news_timestamp(news.timestamp)
        if published_at is None:
            return TimeDecay(level=RiskLevel.LOW, reasoning="Unable to assess time decay")

        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        age_hours = (now - published_at).total_seconds() / 3600
        category = news.category_key

        if category in self.high_decay_categories and age_hours > self.high_decay_hours:
            return TimeDecay(level=RiskLevel.HIGH, reasoning="Time-sensitive catalyst aging")
        if category in self.medium_decay_categories and age_hours > self.medium_decay_hours:
            return TimeDecay(level=RiskLevel.MEDIUM, reasoning="Moderate catalyst decay")
        return TimeDecay(level=RiskLevel.LOW, reasoning="Catalyst still fresh")

    @staticmethod
    def _stop_percent(setup: Setup) -> float:
        return setup.stop_loss.percentage if isinstance(setup, TradeSetup) else 0.0
