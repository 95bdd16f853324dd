"""
Core data structures for the trade setup engine.

This module defines the enums and result records passed between the pipeline
stages. Every record is rebuilt for each evaluation and carries a
``to_dict()`` that produces the JSON wire shape consumed by callers.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class SignalAction(Enum):
    """Enumeration for trade actions."""
    STRONG_BUY = "STRONG BUY"
    BUY = "BUY"
    HOLD = "HOLD"
    STRONG_SELL = "STRONG SELL"
    SELL = "SELL"

    @property
    def is_bullish(self) -> bool:
        return "BUY" in self.value

    @property
    def is_bearish(self) -> bool:
        return "SELL" in self.value

    @property
    def is_strong(self) -> bool:
        return "STRONG" in self.value


class Confidence(Enum):
    """Qualitative reliability tier attached to the upstream score."""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @classmethod
    def parse(cls, value: Any) -> Optional["Confidence"]:
        """Parse a tier, returning None for absent or unrecognized values."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                return None
        return None


class Trend(Enum):
    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    NEUTRAL = "NEUTRAL"


class Volatility(Enum):
    HIGH = "HIGH"
    NORMAL = "NORMAL"
    LOW = "LOW"


class Breadth(Enum):
    ADVANCING = "ADVANCING"
    DECLINING = "DECLINING"
    MIXED = "MIXED"


class Urgency(Enum):
    IMMEDIATE = "IMMEDIATE"
    MONITOR = "MONITOR"
    WAIT = "WAIT"


class RiskLevel(Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class StopLossLevel(Enum):
    TIGHT = "TIGHT"
    NORMAL = "NORMAL"
    WIDE = "WIDE"


class TimingStatus(Enum):
    OPTIMAL = "OPTIMAL"
    AVOID = "AVOID"
    ACCEPTABLE = "ACCEPTABLE"


@dataclass(frozen=True)
class MarketRegime:
    """Three-axis classification of aggregate market conditions."""
    trend: Trend = Trend.NEUTRAL
    volatility: Volatility = Volatility.NORMAL
    breadth: Breadth = Breadth.MIXED

    def to_dict(self) -> Dict[str, str]:
        return {
            "trend": self.trend.value,
            "volatility": self.volatility.value,
            "breadth": self.breadth.value,
        }


@dataclass(frozen=True)
class Signal:
    """
    A classified trade signal.

    Attributes:
        action: Trade action
        priority: 1 for strong signals, 2 for moderate, 3 for HOLD
        reasoning: Human-readable explanation of the matched rule
        max_position_size: Position cap in percent of capital
        urgency: How quickly the signal should be acted on
    """
    action: SignalAction
    priority: int
    reasoning: str
    max_position_size: float
    urgency: Urgency

    def __post_init__(self):
        if self.priority not in (1, 2, 3):
            raise ValueError("Priority must be 1, 2 or 3")
        if self.max_position_size < 0:
            raise ValueError("Max position size must be non-negative")

    @classmethod
    def hold(cls, reasoning: str = "No clear setup or conflicting signals") -> "Signal":
        return cls(
            action=SignalAction.HOLD,
            priority=3,
            reasoning=reasoning,
            max_position_size=0.0,
            urgency=Urgency.WAIT,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action.value,
            "priority": self.priority,
            "reasoning": self.reasoning,
            "maxPositionSize": self.max_position_size,
            "urgency": self.urgency.value,
        }


@dataclass(frozen=True)
class EntryPoint:
    price: float
    reasoning: str = "Technical level + Current price"

    def to_dict(self) -> Dict[str, Any]:
        return {"price": self.price, "reasoning": self.reasoning}


@dataclass(frozen=True)
class StopLoss:
    """Stop-loss level; percentage is signed relative to entry."""
    price: float
    percentage: float
    atr_multiple: float
    reasoning: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "price": self.price,
            "percentage": self.percentage,
            "atrMultiple": self.atr_multiple,
            "reasoning": self.reasoning,
        }


@dataclass(frozen=True)
class ProfitTarget:
    level: int
    price: float
    percentage: float
    probability: float
    multiplier: float = 0.0
    exit_strategy: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "price": self.price,
            "percentage": self.percentage,
            "probability": self.probability,
            "multiplier": self.multiplier,
            "exitStrategy": self.exit_strategy,
        }


@dataclass(frozen=True)
class MarketTiming:
    status: TimingStatus
    window: str
    quality: str
    recommendation: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "status": self.status.value,
            "window": self.window,
            "quality": self.quality,
            "recommendation": self.recommendation,
        }


@dataclass(frozen=True)
class TradeSetup:
    """
    A fully quantified entry/stop/target ladder for a directional signal.

    ``risk_reward_ratio`` is measured against the second target and is 0 when
    the stop sits on the entry.
    """
    action: SignalAction
    entry: EntryPoint
    stop_loss: StopLoss
    targets: List[ProfitTarget]
    risk_reward_ratio: float
    timeframe: str
    market_timing: MarketTiming

    @property
    def risk_reward(self) -> str:
        if self.risk_reward_ratio <= 0:
            return "1:0"
        return f"1:{self.risk_reward_ratio:.1f}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action.value,
            "entry": self.entry.to_dict(),
            "stopLoss": self.stop_loss.to_dict(),
            "targets": [target.to_dict() for target in self.targets],
            "riskReward": self.risk_reward,
            "timeframe": self.timeframe,
            "marketTiming": self.market_timing.to_dict(),
        }


@dataclass(frozen=True)
class NoTradeSetup:
    """Placeholder setup returned when no trade should be placed."""
    message: str
    action: SignalAction = SignalAction.HOLD

    def to_dict(self) -> Dict[str, str]:
        return {"action": self.action.value, "message": self.message}


Setup = Union[TradeSetup, NoTradeSetup]


@dataclass(frozen=True)
class DollarRisk:
    amount: float
    formatted: str

    @classmethod
    def from_amount(cls, amount: float) -> "DollarRisk":
        return cls(amount=amount, formatted=f"${amount:,.0f}")

    def to_dict(self) -> Dict[str, Any]:
        return {"amount": self.amount, "formatted": self.formatted}


@dataclass(frozen=True)
class PositionSize:
    percentage: float
    max_dollar_risk: DollarRisk
    reasoning: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "percentage": self.percentage,
            "reasoning": self.reasoning,
            "maxDollarRisk": self.max_dollar_risk.to_dict(),
        }


@dataclass(frozen=True)
class PortfolioCorrelation:
    sector_exposure: str = "LOW"
    correlation_risk: str = "ACCEPTABLE"
    recommendation: str = "Position size acceptable for portfolio diversification"

    def to_dict(self) -> Dict[str, str]:
        return {
            "sectorExposure": self.sector_exposure,
            "correlationRisk": self.correlation_risk,
            "recommendation": self.recommendation,
        }


@dataclass(frozen=True)
class TimeDecay:
    level: RiskLevel
    reasoning: str

    def to_dict(self) -> Dict[str, str]:
        return {"level": self.level.value, "reasoning": self.reasoning}


@dataclass(frozen=True)
class RiskAssessment:
    position_size: PositionSize
    risk_level: RiskLevel
    stop_loss_level: StopLossLevel
    portfolio_correlation: PortfolioCorrelation
    time_decay: TimeDecay

    def to_dict(self) -> Dict[str, Any]:
        return {
            "positionSize": self.position_size.to_dict(),
            "riskLevel": self.risk_level.value,
            "stopLossLevel": self.stop_loss_level.value,
            "portfolioCorrelation": self.portfolio_correlation.to_dict(),
            "timeDecay": self.time_decay.to_dict(),
        }


@dataclass(frozen=True)
class ComplianceScore:
    """
    Result of the five rule-sheet checks.

    Attributes:
        overall_score: Number of passing checks (0-5)
        grade: A (5), B (4), C (3), D otherwise; thresholds are inclusive
    """
    niss_threshold: bool
    confidence_level: bool
    volume_confirmation: bool
    market_regime: bool
    risk_reward: bool
    compliant_score: int = 4
    grade_thresholds: Dict[str, int] = field(
        default_factory=lambda: {"A": 5, "B": 4, "C": 3}, compare=False
    )

    @property
    def checks(self) -> Dict[str, bool]:
        return {
            "nissThreshold": self.niss_threshold,
            "confidenceLevel": self.confidence_level,
            "volumeConfirmation": self.volume_confirmation,
            "marketRegime": self.market_regime,
            "riskReward": self.risk_reward,
        }

    @property
    def overall_score(self) -> int:
        return sum(1 for passed in self.checks.values() if passed)

    @property
    def is_compliant(self) -> bool:
        return self.overall_score >= self.compliant_score

    @property
    def grade(self) -> str:
        score = self.overall_score
        for grade in ("A", "B", "C"):
            if score >= self.grade_thresholds.get(grade, 0):
                return grade
        return "D"

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = dict(self.checks)
        result.update({
            "overallScore": self.overall_score,
            "isCompliant": self.is_compliant,
            "grade": self.grade,
        })
        return result


@dataclass(frozen=True)
class TradeSignalResult:
    """
    Combined output of one pipeline evaluation.

    A result with ``error`` set is the conservative HOLD fallback: it carries
    no setup, risk management or compliance records.
    """
    symbol: str
    signal: Signal
    timestamp: datetime
    setup: Optional[Setup] = None
    risk_management: Optional[RiskAssessment] = None
    compliance: Optional[ComplianceScore] = None
    regime: Optional[MarketRegime] = None
    error: Optional[str] = None

    @property
    def action(self) -> SignalAction:
        return self.signal.action

    @property
    def trade_setup(self) -> Optional[TradeSetup]:
        """The setup when it is a full trade ladder, else None."""
        return self.setup if isinstance(self.setup, TradeSetup) else None

    def to_dict(self) -> Dict[str, Any]:
        result = {"symbol": self.symbol}
        result.update(self.signal.to_dict())
        result.update({
            "timestamp": self.timestamp.isoformat(),
            "setup": self.setup.to_dict() if self.setup is not None else None,
            "riskManagement": self.risk_management.to_dict() if self.risk_management else None,
            "compliance": self.compliance.to_dict() if self.compliance else None,
            "marketRegime": self.regime.to_dict() if self.regime else None,
        })
        if self.error is not None:
            result["error"] = self.error
        return result
