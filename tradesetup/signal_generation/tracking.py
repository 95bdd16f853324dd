"""
Performance tracking records.

Produces the data shapes a later backtest needs: what the pipeline predicted
for a snapshot and, once a trade is closed, how the outcome compares with the
predicted ladder. Nothing here persists or replays history.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .core import ProfitTarget, TradeSetup, TradeSignalResult
from .snapshot import StockSnapshot

STOP_LOSS_EXIT = "STOP_LOSS"


@dataclass(frozen=True)
class TradeOutcome:
    """
    Realized result of a trade.

    Attributes:
        exit_price: Price the position was closed at
        exit_reason: Why it was closed, e.g. "STOP_LOSS" or "TARGET"
        hold_time: Holding period in hours
    """
    exit_price: float
    exit_reason: Optional[str] = None
    hold_time: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exitPrice": self.exit_price,
            "exitReason": self.exit_reason,
            "holdTime": self.hold_time,
        }


def tracking_record(
    snapshot: StockSnapshot, result: TradeSignalResult, outcome: Optional[TradeOutcome] = None
) -> Dict[str, Any]:
    """Prediction record for a snapshot, with outcome scoring when supplied."""
    setup = result.trade_setup
    record = {
        "symbol": snapshot.symbol,
        "timestamp": result.timestamp.isoformat(),
        "signal": result.action.value,
        "confidence": snapshot.confidence_key,
        "nissScore": snapshot.niss_score,
        "predictedSetup": {
            "entry": setup.entry.price if setup else None,
            "stopLoss": setup.stop_loss.price if setup else None,
            "targets": [target.to_dict() for target in setup.targets] if setup else None,
            "riskReward": setup.risk_reward if setup else None,
        },
        "marketRegime": result.regime.to_dict() if result.regime else None,
        "compliance": result.compliance.to_dict() if result.compliance else None,
    }

    if outcome is not None:
        actual = outcome.to_dict()
        actual["success"] = evaluate_trade_success(setup, outcome)
        actual["performance"] = performance_metrics(setup, outcome)
        record["actualOutcome"] = actual

    return record


def evaluate_trade_success(setup: Optional[TradeSetup], outcome: TradeOutcome) -> Dict[str, Any]:
    """Classify a closed trade against the predicted ladder."""
    if setup is None or not setup.entry.price or not outcome.exit_price:
        return {"success": False, "reason": "Insufficient data"}

    entry = setup.entry.price
    targets = setup.targets
    is_long = bool(targets) and targets[0].price > entry
    actual_return = (outcome.exit_price - entry) / entry

    if outcome.exit_reason == STOP_LOSS_EXIT:
        return {"success": False, "reason": "Stopped out", "actualReturn": actual_return}

    if is_long and actual_return > 0:
        reached = _highest_target_reached(targets, outcome.exit_price, is_long)
        return {
            "success": True,
            "reason": f"Target {reached or 'partial'} hit",
            "actualReturn": actual_return,
            "targetReached": reached,
        }

    if not is_long and actual_return < 0:
        reached = _highest_target_reached(targets, outcome.exit_price, is_long)
        return {
            "success": True,
            "reason": f"Target {reached or 'partial'} hit",
            "actualReturn": abs(actual_return),
            "targetReached": reached,
        }

    return {"success": False, "reason": "Trade moved against position", "actualReturn": actual_return}


def performance_metrics(setup: Optional[TradeSetup], outcome: TradeOutcome) -> Dict[str, Any]:
    """Realized versus predicted risk:reward for a closed trade."""
    if setup is None or not setup.entry.price or not outcome.exit_price:
        return {}

    entry = setup.entry.price
    actual_return = (outcome.exit_price - entry) / entry
    predicted_risk = abs((setup.stop_loss.price - entry) / entry)
    actual_risk = min(abs(actual_return), predicted_risk)
    actual_reward = abs(actual_return)
    actual_risk_reward = actual_reward / actual_risk if actual_risk > 0 else 0.0
    predicted_risk_reward = round(setup.risk_reward_ratio, 1)

    return {
        "actualReturn": actual_return * 100,
        "predictedRiskReward": predicted_risk_reward,
        "actualRiskReward": actual_risk_reward,
        "holdTimeHours": outcome.hold_time or 0.0,
        "efficiency": actual_risk_reward / max(0.1, predicted_risk_reward),
        "targetAccuracy": target_accuracy(setup.targets, outcome.exit_price, entry),
    }


def target_accuracy(targets: List[ProfitTarget], exit_price: float, entry: float) -> float:
    """Share of the ladder reached, one third per target."""
    if not targets or not exit_price or not entry:
        return 0.0
    is_long = targets[0].price > entry
    reached = _highest_target_reached(targets, exit_price, is_long)
    return reached * 33.33


def _highest_target_reached(targets: List[ProfitTarget], exit_price: float, is_long: bool) -> int:
    reached = 0
    for target in targets:
        hit = exit_price >= target.price if is_long else exit_price <= target.price
        if hit:
            reached = target.level
    return reached
