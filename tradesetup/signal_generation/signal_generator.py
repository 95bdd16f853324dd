"""
Main Trade Signal Generator for the trade setup engine.

This class sequences all components into a single total evaluation:
snapshot -> regime -> signal -> setup -> risk / compliance -> result.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .core import MarketRegime, Signal, TradeSignalResult
from .components import (
    ComplianceValidator,
    RegimeAssessor,
    RiskManager,
    SetupCalculator,
    SignalClassifier,
)
from .snapshot import UNKNOWN_SYMBOL, StockSnapshot
from ..config.settings import trade_setup_config
from ..utils.clock import Clock, SystemClock
from ..utils.logging import get_logger

logger = get_logger(__name__)

SnapshotInput = Union[StockSnapshot, Mapping[str, Any]]


class TradeSignalGenerator:
    """
    Orchestrates the pipeline stages for one or many snapshots.

    The generator holds only configuration and a clock; evaluations share no
    mutable state, so ``evaluate_all`` may fan out across threads.
    """

    def __init__(self, config: Optional[Dict] = None, clock: Optional[Clock] = None):
        """
        Initialize the trade signal generator.

        Args:
            config: Configuration dictionary with one section per component
            clock: Source of "now"; defaults to the system clock
        """
        self.config = config or {}
        self.clock = clock or SystemClock()

        self.regime_assessor = RegimeAssessor(self.config.get("regime", {}))
        self.signal_classifier = SignalClassifier(self.config.get("signal", {}))
        self.setup_calculator = SetupCalculator(self.config.get("setup", {}))
        self.risk_manager = RiskManager(self.config.get("risk", {}))
        self.compliance_validator = ComplianceValidator(self.config.get("compliance", {}))

        self.batch_workers = self.config.get("batch_workers", 0)

    def evaluate(self, snapshot: SnapshotInput) -> TradeSignalResult:
        """
        Evaluate a single snapshot.

        Never raises: any failure is logged and converted into a HOLD result
        carrying the error message.

        Args:
            snapshot: A StockSnapshot or a raw camelCase mapping

        Returns:
            TradeSignalResult: Combined signal, setup, risk and compliance
        """
        now = None

        try:
            now = self.clock.now()

            if not isinstance(snapshot, StockSnapshot):
                snapshot = StockSnapshot.from_dict(snapshot)

            # 1. Assess market regime
            regime = self.regime_assessor.assess(snapshot.market)

            # 2. Classify signal
            signal = self.signal_classifier.classify(snapshot, regime)

            # 3. Derive entry / stop / targets
            setup = self.setup_calculator.calculate(snapshot, signal, now)

            # 4. Size and score risk
            risk_management = self.risk_manager.assess(snapshot, signal, setup, regime, now)

            # 5. Grade compliance
            compliance = self.compliance_validator.validate(snapshot, signal, regime)

        except Exception as e:
            symbol = self._symbol_of(snapshot)
            logger.exception("Signal evaluation failed", symbol=symbol, error=str(e))
            return TradeSignalResult(
                symbol=symbol,
                signal=Signal.hold(reasoning=f"Error generating signal: {e}"),
                timestamp=now if now is not None else datetime.now(timezone.utc),
                error=f"Unable to generate signal: {e}",
            )

        logger.debug(
            "Signal evaluated",
            symbol=snapshot.symbol,
            action=signal.action.value,
            grade=compliance.grade,
        )

        return TradeSignalResult(
            symbol=snapshot.symbol,
            signal=signal,
            timestamp=now,
            setup=setup,
            risk_management=risk_management,
            compliance=compliance,
            regime=regime,
        )

    def evaluate_all(
        self, snapshots: Iterable[SnapshotInput], max_workers: Optional[int] = None
    ) -> List[TradeSignalResult]:
        """
        Evaluate many snapshots, preserving input order.

        Args:
            snapshots: Snapshots or raw mappings
            max_workers: Thread count; zero or negative, or None with no
                configured workers, evaluates inline

        Returns:
            List[TradeSignalResult]: One result per input, in input order
        """
        snapshots = list(snapshots)
        workers = self.batch_workers if max_workers is None else max_workers

        if workers is None or workers <= 0 or len(snapshots) < 2:
            return [self.evaluate(snapshot) for snapshot in snapshots]

        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(self.evaluate, snapshots))

    def assess_regime(self, snapshot: SnapshotInput) -> MarketRegime:
        """Regime for a snapshot's market data (neutral when unreadable)."""
        try:
            if not isinstance(snapshot, StockSnapshot):
                snapshot = StockSnapshot.from_dict(snapshot)
        except ValueError:
            return MarketRegime()
        return self.regime_assessor.assess(snapshot.market)

    @staticmethod
    def _symbol_of(snapshot: Any) -> str:
        if isinstance(snapshot, StockSnapshot):
            return snapshot.symbol
        if isinstance(snapshot, Mapping):
            symbol = snapshot.get("symbol")
            if isinstance(symbol, str) and symbol.strip():
                return symbol.strip()
        return UNKNOWN_SYMBOL


_default_generator: Optional[TradeSignalGenerator] = None


def get_default_generator() -> TradeSignalGenerator:
    """Generator built from the global configuration, created on first use."""
    global _default_generator
    if _default_generator is None:
        _default_generator = TradeSignalGenerator(trade_setup_config.to_dict())
    return _default_generator


def evaluate(snapshot: SnapshotInput, clock: Optional[Clock] = None) -> TradeSignalResult:
    """Evaluate one snapshot with the default configuration."""
    generator = get_default_generator()
    if clock is not None:
        generator = TradeSignalGenerator(generator.config, clock=clock)
    return generator.evaluate(snapshot)


def evaluate_all(
    snapshots: Iterable[SnapshotInput], clock: Optional[Clock] = None, max_workers: Optional[int] = None
) -> List[TradeSignalResult]:
    """Evaluate many snapshots with the default configuration, preserving order."""
    generator = get_default_generator()
    if clock is not None:
        generator = TradeSignalGenerator(generator.config, clock=clock)
    return generator.evaluate_all(snapshots, max_workers=max_workers)
