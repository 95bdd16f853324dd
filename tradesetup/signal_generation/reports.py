"""
Derived views over evaluation results.

These helpers reshape a ``TradeSignalResult`` for dashboards, screeners and
export. They only read the result records and never raise on a fallback
(error) result.
"""
from typing import Any, Dict, Iterable, List, Optional

from .core import SignalAction, TimingStatus, TradeSignalResult
from .signal_generator import SnapshotInput, TradeSignalGenerator
from .snapshot import MarketData, StockSnapshot


def signal_summary(snapshot: StockSnapshot, result: TradeSignalResult) -> Dict[str, Any]:
    """Compact signal card for display."""
    setup = result.trade_setup
    return {
        "action": result.action.value,
        "priority": result.signal.priority,
        "confidence": snapshot.confidence_key,
        "riskReward": setup.risk_reward if setup else "N/A",
        "urgency": result.signal.urgency.value,
        "compliance": result.compliance.grade if result.compliance else "D",
    }


def quick_setup(result: TradeSignalResult) -> Dict[str, Any]:
    """Entry, stop and first target at a glance."""
    setup = result.trade_setup
    if result.action == SignalAction.HOLD or setup is None:
        return {"action": SignalAction.HOLD.value, "message": "No clear setup"}

    position_size = result.risk_management.position_size.percentage if result.risk_management else 1.0
    return {
        "action": result.action.value,
        "entry": setup.entry.price,
        "stop": setup.stop_loss.price,
        "target1": setup.targets[0].price if setup.targets else 0.0,
        "riskReward": setup.risk_reward,
        "positionSize": position_size,
    }


def is_optimal_timing(result: TradeSignalResult) -> bool:
    setup = result.trade_setup
    return setup is not None and setup.market_timing.status == TimingStatus.OPTIMAL


def risk_summary(result: TradeSignalResult) -> Dict[str, Any]:
    """Risk view for a portfolio manager."""
    risk = result.risk_management
    if risk is None:
        return {
            "overallRisk": "HIGH",
            "timeDecay": "MEDIUM",
            "portfolioImpact": "MEDIUM",
            "maxLoss": "$0",
            "compliance": False,
        }
    return {
        "overallRisk": risk.risk_level.value,
        "timeDecay": risk.time_decay.level.value,
        "portfolioImpact": risk.portfolio_correlation.sector_exposure,
        "maxLoss": risk.position_size.max_dollar_risk.formatted,
        "compliance": bool(result.compliance and result.compliance.is_compliant),
    }


def export_record(snapshot: StockSnapshot, result: TradeSignalResult) -> Dict[str, Any]:
    """Flat record for logging and CSV export."""
    setup = result.trade_setup
    targets = setup.targets if setup else []

    def target_price(index: int) -> Optional[float]:
        return targets[index].price if len(targets) > index else None

    record = {
        "symbol": snapshot.symbol,
        "timestamp": result.timestamp.isoformat(),
        "signal": result.action.value,
        "nissScore": snapshot.niss_score,
        "confidence": snapshot.confidence_key,
        "entry": setup.entry.price if setup else None,
        "stopLoss": setup.stop_loss.price if setup else None,
        "target1": target_price(0),
        "target2": target_price(1),
        "target3": target_price(2),
        "riskReward": setup.risk_reward if setup else None,
        "positionSize": result.risk_management.position_size.percentage if result.risk_management else None,
        "compliance": result.compliance.grade if result.compliance else None,
        "reasoning": result.signal.reasoning,
    }
    if result.error:
        record["error"] = result.error
    return record


def criteria_check(result: TradeSignalResult) -> Dict[str, Any]:
    """Whether the signal meets the rule sheet, with the details."""
    compliance = result.compliance
    meets = bool(compliance and compliance.is_compliant)
    if compliance is None:
        recommendation = "Unable to validate criteria due to data issues"
    elif meets:
        recommendation = "Stock meets rule-sheet criteria"
    else:
        recommendation = "Stock does not meet minimum criteria for institutional trading"

    return {
        "meets": meets,
        "grade": compliance.grade if compliance else "D",
        "score": compliance.overall_score if compliance else 0,
        "details": compliance.to_dict() if compliance else {},
        "recommendation": recommendation,
    }


def regime_summary(generator: TradeSignalGenerator, market_data: Optional[MarketData]) -> Dict[str, Any]:
    """Regime, sizing multiplier and guidance for a market dashboard."""
    regime = generator.regime_assessor.assess(market_data)
    return {
        "regime": regime.to_dict(),
        "positionAdjustment": generator.risk_manager.regime_multiplier(regime),
        "recommendation": generator.regime_assessor.recommendation(regime),
        "timestamp": generator.clock.now().isoformat(),
    }


def screen(generator: TradeSignalGenerator, snapshots: Iterable[SnapshotInput]) -> List[Dict[str, Any]]:
    """
    Batch screening view: one evaluation per snapshot, order preserved.

    Raw mappings that cannot be read as snapshots still produce an entry,
    carrying the fallback HOLD result.
    """
    results = generator.evaluate_all(snapshots)

    screened = []
    for result in results:
        screened.append({
            "symbol": result.symbol,
            "enhancedSignal": result.to_dict(),
            "quickSetup": quick_setup(result),
            "riskAssessment": risk_summary(result),
        })
    return screened
