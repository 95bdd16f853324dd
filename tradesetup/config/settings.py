"""
Centralized configuration for the trade setup engine.

Configuration follows a 2-tier layout:

Tier 1: Code Defaults (this module)
- Every threshold, ladder and table used by the pipeline
- Version controlled, visible in PRs

Tier 2: Environment Variables (.env)
- Can override any Tier 1 setting for local experiments
- e.g. TRADESETUP_RISK_ACCOUNT_SIZE=250000

Each component receives the plain ``dict`` produced by ``to_dict()`` for its
section and falls back to the same defaults for any missing key, so the
components can be built from ``{}`` in tests.
"""
from typing import Any, Dict, List

from pydantic_settings import BaseSettings, SettingsConfigDict


class RegimeConfig(BaseSettings):
    """Configuration for market regime assessment."""
    model_config = SettingsConfigDict(env_prefix='TRADESETUP_REGIME_')

    bullish_spy_change: float = 0.5
    bearish_spy_change: float = -0.5
    high_vix: float = 25.0
    low_vix: float = 15.0
    advancing_ratio: float = 1.5
    declining_ratio: float = 0.67


class SignalConfig(BaseSettings):
    """Configuration for signal classification."""
    model_config = SettingsConfigDict(env_prefix='TRADESETUP_SIGNAL_')

    strong_score_threshold: float = 75.0
    score_threshold: float = 60.0
    strong_volume_threshold: float = 2.0
    volume_threshold: float = 1.5

    # Position size caps (percent of capital) per action
    max_position_sizes: Dict[str, float] = {
        "STRONG BUY": 2.5,
        "BUY": 1.5,
        "STRONG SELL": 2.0,
        "SELL": 1.0,
        "HOLD": 0.0,
    }


class SetupConfig(BaseSettings):
    """Configuration for entry, stop and target derivation."""
    model_config = SettingsConfigDict(env_prefix='TRADESETUP_SETUP_')

    default_atr_fraction: float = 0.025
    support_entry_buffer: float = 1.01
    resistance_entry_buffer: float = 0.99

    stop_multipliers: Dict[str, float] = {
        "HIGH": 1.5,
        "MEDIUM": 2.0,
        "LOW": 2.5,
    }
    default_stop_multiplier: float = 2.0

    # Risk multiples for the three profit targets
    target_multipliers: Dict[str, List[float]] = {
        "HIGH": [2.0, 3.5, 5.0],
        "MEDIUM": [2.5, 4.0, 6.0],
        "LOW": [3.0, 5.0, 7.0],
    }
    default_target_multipliers: List[float] = [2.5, 4.0, 6.0]
    target_probabilities: List[float] = [70.0, 50.0, 30.0]
    exit_strategies: List[str] = ["Exit 33%", "Exit 33%", "Trail stop"]

    news_timeframes: Dict[str, str] = {
        "earnings": "1-2 days",
        "fda": "1-3 days",
        "merger": "1-5 days",
        "analyst": "1-2 days",
        "partnership": "1 day",
        "clinical": "2-5 days",
        "executive": "2-7 days",
    }
    high_confidence_timeframe: str = "1-3 days"
    default_timeframe: str = "3-7 days"

    # UTC hour-of-day windows, bounds inclusive
    trading_windows: List[Dict[str, Any]] = [
        {"start": 14.75, "end": 15.5, "label": "US Open Momentum", "quality": "EXCELLENT"},
        {"start": 15.5, "end": 17.0, "label": "Post-Open Stability", "quality": "GOOD"},
        {"start": 19.0, "end": 20.0, "label": "Late Day Positioning", "quality": "GOOD"},
    ]
    avoid_windows: List[Dict[str, Any]] = [
        {"start": 14.5, "end": 14.75, "label": "US Open First 15min", "quality": "AVOID"},
        {"start": 20.75, "end": 21.0, "label": "US Close Last 15min", "quality": "AVOID"},
    ]


class RiskConfig(BaseSettings):
    """Configuration for position sizing and risk classification."""
    model_config = SettingsConfigDict(env_prefix='TRADESETUP_RISK_')

    # Kelly inputs
    win_probabilities: Dict[str, float] = {
        "HIGH": 0.65,
        "MEDIUM": 0.55,
        "LOW": 0.45,
    }
    default_win_probability: float = 0.5
    win_scale: float = 0.08
    max_avg_win: float = 0.12
    avg_loss: float = 0.035
    kelly_fraction: float = 0.5
    min_position_pct: float = 0.5
    max_kelly_pct: float = 5.0
    strong_size_cap: float = 2.5
    size_cap: float = 1.5

    # Regime multipliers
    high_volatility_multiplier: float = 0.5
    bearish_declining_multiplier: float = 0.6
    low_volatility_bullish_multiplier: float = 1.2

    account_size: float = 100000.0

    # Additive risk-level penalties
    risk_weights: Dict[str, float] = {
        "LOW_CONFIDENCE": 3,
        "MEDIUM_CONFIDENCE": 1,
        "WEAK_SCORE": 2,
        "HIGH_VOLATILITY": 2,
        "BEARISH_TREND": 1,
        "POOR_RISK_REWARD": 3,
        "FAIR_RISK_REWARD": 1,
    }
    weak_score_threshold: float = 60.0
    poor_risk_reward: float = 2.0
    fair_risk_reward: float = 2.5
    high_risk_score: float = 6
    medium_risk_score: float = 3

    # Stop distance bands (percent)
    tight_stop_pct: float = 2.0
    normal_stop_pct: float = 4.0

    # Catalyst aging (hours)
    high_decay_categories: List[str] = ["earnings", "fda"]
    high_decay_hours: float = 24.0
    medium_decay_categories: List[str] = ["analyst", "partnership"]
    medium_decay_hours: float = 48.0


class ComplianceConfig(BaseSettings):
    """Configuration for rule-sheet compliance grading."""
    model_config = SettingsConfigDict(env_prefix='TRADESETUP_COMPLIANCE_')

    score_threshold: float = 60.0
    volume_threshold: float = 1.5
    compliant_score: int = 4
    grade_thresholds: Dict[str, int] = {
        "A": 5,
        "B": 4,
        "C": 3,
    }


class TradeSetupConfig(BaseSettings):
    """Main configuration for the trade setup engine."""
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    regime: RegimeConfig = RegimeConfig()
    signal: SignalConfig = SignalConfig()
    setup: SetupConfig = SetupConfig()
    risk: RiskConfig = RiskConfig()
    compliance: ComplianceConfig = ComplianceConfig()

    # Worker threads for batch evaluation (0 = evaluate inline)
    batch_workers: int = 0
    # Used by the CLI when --verbose is not given
    log_level: str = "WARNING"

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "regime": self.regime.model_dump(),
            "signal": self.signal.model_dump(),
            "setup": self.setup.model_dump(),
            "risk": self.risk.model_dump(),
            "compliance": self.compliance.model_dump(),
            "batch_workers": self.batch_workers,
            "log_level": self.log_level,
        }


# Global configuration instance
trade_setup_config = TradeSetupConfig()
