"""
Trade Signal Generation.

Rule-based pipeline that turns one normalized instrument snapshot into a
trade recommendation. It includes market regime assessment, signal
classification, entry/stop/target derivation, Kelly-based position sizing
and rule-sheet compliance grading.

The pipeline is:
- Total: any failure degrades to a conservative HOLD result
- Deterministic: fixed inputs and a fixed clock give identical output
- Stateless: snapshots can be evaluated in parallel
"""

from .core import (
    ComplianceScore,
    Confidence,
    MarketRegime,
    NoTradeSetup,
    RiskAssessment,
    Signal,
    SignalAction,
    TradeSetup,
    TradeSignalResult,
)
from .snapshot import SnapshotError, StockSnapshot
from .signal_generator import TradeSignalGenerator, evaluate, evaluate_all

from .components import (
    RegimeAssessor,
    SignalClassifier,
    SetupCalculator,
    RiskManager,
    ComplianceValidator,
)

__all__ = [
    # Core records
    "ComplianceScore",
    "Confidence",
    "MarketRegime",
    "NoTradeSetup",
    "RiskAssessment",
    "Signal",
    "SignalAction",
    "TradeSetup",
    "TradeSignalResult",
    # Input
    "SnapshotError",
    "StockSnapshot",
    # Orchestration
    "TradeSignalGenerator",
    "evaluate",
    "evaluate_all",
    # Component classes
    "RegimeAssessor",
    "SignalClassifier",
    "SetupCalculator",
    "RiskManager",
    "ComplianceValidator",
]
