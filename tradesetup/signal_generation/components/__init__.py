"""
Components for the trade setup engine.

Each component is a stateless stage of the evaluation pipeline:
regime -> signal -> setup -> risk / compliance.
"""

from .regime_assessor import RegimeAssessor
from .signal_classifier import SignalClassifier
from .setup_calculator import SetupCalculator
from .risk_manager import RiskManager
from .compliance_validator import ComplianceValidator

__all__ = [
    "RegimeAssessor",
    "SignalClassifier",
    "SetupCalculator",
    "RiskManager",
    "ComplianceValidator",
]
