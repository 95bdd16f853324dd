"""
Compliance Validator component for the trade setup engine.

Scores a signal against the five fixed rule-sheet checks and assigns a
letter grade.
"""

from typing import Dict

from ..core import ComplianceScore, Confidence, MarketRegime, Signal, Trend
from ..snapshot import StockSnapshot


class ComplianceValidator:
    """
    Evaluates the rule-sheet checks for a classified signal.

    The risk:reward check is a placeholder that always passes until a real
    portfolio-level rule is defined.
    """

    def __init__(self, config: Dict):
        """
        Initialize the compliance validator.

        Args:
            config: Configuration dictionary with compliance thresholds
        """
        self.config = config

        self.score_threshold = config.get("score_threshold", 60.0)
        self.volume_threshold = config.get("volume_threshold", 1.5)
        self.compliant_score = config.get("compliant_score", 4)
        self.grade_thresholds = config.get("grade_thresholds", {"A": 5, "B": 4, "C": 3})

    def validate(self, snapshot: StockSnapshot, signal: Signal, regime: MarketRegime) -> ComplianceScore:
        """
        Validate a signal against the rule sheet.

        Args:
            snapshot: Normalized instrument snapshot
            signal: Classified signal
            regime: Current market regime

        Returns:
            ComplianceScore: The five checks with derived score and grade
        """
        return ComplianceScore(
            niss_threshold=self._check_niss_threshold(snapshot, signal),
            confidence_level=snapshot.confidence != Confidence.LOW,
            volume_confirmation=snapshot.relative_volume > self.volume_threshold,
            market_regime=regime.trend != Trend.BEARISH or signal.action.is_bearish,
            risk_reward=True,
            compliant_score=self.compliant_score,
            grade_thresholds=dict(self.grade_thresholds),
        )

    def _check_niss_threshold(self, snapshot: StockSnapshot, signal: Signal) -> bool:
        """Score magnitude must clear the threshold on the side the action trades."""
        if signal.action.is_bullish:
            return snapshot.niss_score >= self.score_threshold
        if signal.action.is_bearish:
            return snapshot.niss_score <= -self.score_threshold
        return False
