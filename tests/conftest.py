"""
Pytest configuration and shared fixtures for the trade setup engine test suite.

This module provides common fixtures and configuration for all test categories,
ensuring consistent snapshot payloads and a pinned clock across the suite.
"""

import copy
import logging
from datetime import datetime, timezone
from typing import Any, Dict

import pytest

from tradesetup.config.settings import trade_setup_config
from tradesetup.signal_generation.components import (
    ComplianceValidator,
    RegimeAssessor,
    RiskManager,
    SetupCalculator,
    SignalClassifier,
)
from tradesetup.signal_generation.signal_generator import TradeSignalGenerator
from tradesetup.utils.clock import FixedClock


# ==============================
# Pytest Configuration
# ==============================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests for individual components"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests for component interactions"
    )


# ==============================
# Clock Fixtures
# ==============================

# 15:00 UTC falls inside the "US Open Momentum" window
OPTIMAL_INSTANT = datetime(2024, 1, 2, 15, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock():
    """Clock pinned to an optimal trading window."""
    return FixedClock(OPTIMAL_INSTANT)


@pytest.fixture
def now():
    return OPTIMAL_INSTANT


# ==============================
# Logging Fixtures
# ==============================

@pytest.fixture
def restore_logging():
    """Put the root logger back after a test reconfigures it."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield root_logger
    for handler in root_logger.handlers:
        if handler not in handlers:
            handler.close()
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


# ==============================
# Configuration Fixtures
# ==============================

@pytest.fixture
def config() -> Dict[str, Any]:
    """Default pipeline configuration as a plain dictionary."""
    return trade_setup_config.to_dict()


@pytest.fixture
def generator(config, fixed_clock):
    """Trade signal generator on the default configuration and a fixed clock."""
    return TradeSignalGenerator(config, clock=fixed_clock)


@pytest.fixture
def regime_assessor(config):
    return RegimeAssessor(config["regime"])


@pytest.fixture
def signal_classifier(config):
    return SignalClassifier(config["signal"])


@pytest.fixture
def setup_calculator(config):
    return SetupCalculator(config["setup"])


@pytest.fixture
def risk_manager(config):
    return RiskManager(config["risk"])


@pytest.fixture
def compliance_validator(config):
    return ComplianceValidator(config["compliance"])


# ==============================
# Snapshot Payload Fixtures
# ==============================

STRONG_BUY_PAYLOAD = {
    "symbol": "AAPL",
    "currentPrice": 100.0,
    "nissScore": 80,
    "confidence": "HIGH",
    "priceData": {"change": 1.2},
    "volumeData": {"relativeVolume": 2.5},
    "technicalData": {"priceAboveSMA20": True},
    "marketData": {"spyChange": 0.6, "vix": 14},
}

STRONG_SELL_PAYLOAD = {
    "symbol": "TSLA",
    "currentPrice": 50.0,
    "nissScore": -80,
    "confidence": "HIGH",
    "priceData": {"change": -1.0},
    "volumeData": {"relativeVolume": 3},
    "technicalData": {"priceBelowSMA20": True},
    "marketData": {"spyChange": -0.8},
}

HOLD_PAYLOAD = {
    "symbol": "MSFT",
    "currentPrice": 300.0,
    "nissScore": 10,
    "confidence": "MEDIUM",
    "volumeData": {"relativeVolume": 1.0},
}

BUY_PAYLOAD = {
    "symbol": "NVDA",
    "currentPrice": 200.0,
    "nissScore": 65,
    "confidence": "MEDIUM",
    "priceData": {"change": 0.5},
    "volumeData": {"relativeVolume": 1.8},
    "technicalData": {"momentum": 1.0, "atr": 4.0},
}

SELL_PAYLOAD = {
    "symbol": "INTC",
    "currentPrice": 40.0,
    "nissScore": -65,
    "confidence": "MEDIUM",
    "priceData": {"change": -0.5},
    "volumeData": {"relativeVolume": 1.8},
    "technicalData": {"momentum": -1.0},
}


@pytest.fixture
def strong_buy_payload():
    """Scenario A with a valid price: strong bullish catalyst in a low-vol bull market."""
    return copy.deepcopy(STRONG_BUY_PAYLOAD)


@pytest.fixture
def strong_sell_payload():
    """Scenario C with a valid price: strong bearish catalyst in a falling market."""
    return copy.deepcopy(STRONG_SELL_PAYLOAD)


@pytest.fixture
def hold_payload():
    return copy.deepcopy(HOLD_PAYLOAD)


@pytest.fixture
def buy_payload():
    return copy.deepcopy(BUY_PAYLOAD)


@pytest.fixture
def sell_payload():
    return copy.deepcopy(SELL_PAYLOAD)


@pytest.fixture
def sample_payloads():
    """One payload per signal category."""
    return [
        copy.deepcopy(payload)
        for payload in (STRONG_BUY_PAYLOAD, BUY_PAYLOAD, HOLD_PAYLOAD, SELL_PAYLOAD, STRONG_SELL_PAYLOAD)
    ]
